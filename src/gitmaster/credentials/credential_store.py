"""
On-disk storage for the GitHub access token.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..error_handling import PersistenceError
from ..models import RemoteCredential

logger = logging.getLogger(__name__)


class CredentialStore:
    """
    Persists a single access token as a small JSON record.

    The record lives at a fixed path, relative to the working directory
    unless an absolute path is configured. Its absence is the normal state
    on first run.
    """

    def __init__(self, path: Union[str, Path] = "github_config.json"):
        """
        Initialize credential store.

        Args:
            path: Location of the JSON record
        """
        self.path = Path(path)

    def load(self) -> Optional[RemoteCredential]:
        """
        Load the stored credential.

        Returns:
            The stored credential, or None if the record is absent, unreadable,
            unparsable or holds no token
        """
        if not self.path.exists():
            logger.debug(f"No credential record at {self.path}")
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable credential record {self.path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed credential record {self.path}")
            return None

        # older records used a capitalised key
        token = data.get("token") or data.get("Token")
        if not isinstance(token, str) or not token.strip():
            logger.info(f"Credential record {self.path} holds no token")
            return None

        logger.info("GitHub token loaded from credential record")
        return RemoteCredential(token=token.strip())

    def save(self, credential: RemoteCredential) -> None:
        """
        Replace the stored credential.

        The record is written to a temporary file in the same directory and
        then moved over the target, so a crash never leaves a partial record.

        Args:
            credential: Credential to persist

        Raises:
            PersistenceError: If the record cannot be written
        """
        directory = self.path.parent
        payload = json.dumps({"token": credential.token}, indent=2)
        temp_name = None

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(directory)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_name, self.path)
        except OSError as e:
            if temp_name and os.path.exists(temp_name):
                try:
                    os.unlink(temp_name)
                except OSError:
                    logger.debug(f"Could not remove temporary file {temp_name}")
            raise PersistenceError(
                f"Failed to save GitHub token to {self.path}: {e}",
                path=str(self.path),
                cause=e
            )

        logger.info(f"GitHub token saved to {self.path}")

    def clear(self) -> None:
        """
        Remove the stored credential. A missing record is not an error.

        Raises:
            PersistenceError: If the record exists but cannot be removed
        """
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise PersistenceError(
                f"Failed to delete credential record {self.path}: {e}",
                path=str(self.path),
                cause=e
            )

        logger.info(f"Credential record {self.path} deleted")
