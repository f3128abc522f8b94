"""
Data models for GitMaster.
"""

from .action_result import ActionResult
from .repository import RepositoryRef
from .directory_entry import DirectoryEntry, EntryKind
from .credential import RemoteCredential, AccountIdentity, mask_token

__all__ = [
    "ActionResult",
    "RepositoryRef",
    "DirectoryEntry",
    "EntryKind",
    "RemoteCredential",
    "AccountIdentity",
    "mask_token"
]
