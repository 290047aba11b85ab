"""Client for the school CBT service."""

from .auth import AuthContext
from .client import CBTClient
from .errors import (
    AuthenticationError,
    NetworkError,
    RequestSetupError,
    ServerError,
    SubmissionError,
    ValidationError,
)

__all__ = [
    "AuthContext",
    "CBTClient",
    "SubmissionError",
    "ValidationError",
    "NetworkError",
    "ServerError",
    "RequestSetupError",
    "AuthenticationError",
]
