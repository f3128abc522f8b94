"""
Credential persistence and session state.
"""

from .credential_store import CredentialStore
from .credential_cell import CredentialCell

__all__ = [
    "CredentialStore",
    "CredentialCell"
]
