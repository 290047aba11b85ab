"""Main entry point for the cbt-author CLI."""

from cbt_author.cli.app import app


def main():
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    main()
