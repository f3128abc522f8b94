"""
Process-wide holder for the session credential.
"""

import threading
from typing import Optional

from ..models import RemoteCredential


class CredentialCell:
    """
    Single-owner container for the credential used during a session.

    Reads and writes are serialized by a lock so a reader always observes
    either the previous or the new credential.
    """

    def __init__(self, credential: Optional[RemoteCredential] = None):
        self._lock = threading.RLock()
        self._credential = credential

    def get(self) -> Optional[RemoteCredential]:
        with self._lock:
            return self._credential

    def set(self, credential: RemoteCredential) -> None:
        with self._lock:
            self._credential = credential

    def clear(self) -> Optional[RemoteCredential]:
        """Drop the credential and return the one that was held."""
        with self._lock:
            previous, self._credential = self._credential, None
            return previous

    def clear_if(self, credential: RemoteCredential) -> bool:
        """
        Drop the held credential only if it is ``credential``.

        Used after an authentication failure so that a token set concurrently
        by another action is not discarded.
        """
        with self._lock:
            if self._credential == credential:
                self._credential = None
                return True
            return False

    @property
    def is_set(self) -> bool:
        return self.get() is not None
