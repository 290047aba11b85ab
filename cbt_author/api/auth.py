"""Bearer token handling."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from cbt_author.api.errors import AuthenticationError
from cbt_author.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    """The token attached to every outbound call.

    Passed explicitly to the client so tests can supply their own token
    instead of reading one from disk.
    """

    token: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthContext":
        """Use the configured token, falling back to the persisted token file."""
        if settings.auth_token:
            return cls(token=settings.auth_token.strip())
        return cls.from_file(settings.token_file)

    @classmethod
    def from_file(cls, path: Path) -> "AuthContext":
        path = Path(path).expanduser()
        if not path.exists():
            logger.debug("No token file at %s", path)
            return cls()
        token = path.read_text(encoding="utf-8").strip()
        return cls(token=token or None)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def headers(self) -> dict[str, str]:
        """
        Authorization header for an authenticated call.

        Raises:
            AuthenticationError: If no token is available
        """
        if not self.token:
            raise AuthenticationError("Authentication token not found")
        return {"Authorization": f"Bearer {self.token}"}

    def redacted(self) -> str:
        """Token prefix safe to put in logs."""
        if not self.token:
            return "<none>"
        return f"{self.token[:8]}..."

    def save(self, path: Path) -> Path:
        """Persist the token, readable only by the current user."""
        if not self.token:
            raise AuthenticationError("Nothing to save: no token")
        path = Path(path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.token, encoding="utf-8")
        os.chmod(path, 0o600)
        logger.info("Saved token to %s", path)
        return path

    @staticmethod
    def clear(path: Path) -> bool:
        """Remove a persisted token. Returns False when there was none."""
        path = Path(path).expanduser()
        if not path.exists():
            return False
        path.unlink()
        logger.info("Removed token file %s", path)
        return True
