"""Exam authoring client for the school CBT service."""

__version__ = "0.1.0"
