"""
Directory entry model for repository browsing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any


class EntryKind(Enum):
    """Kind of an entry inside a repository directory."""
    FILE = "file"
    DIRECTORY = "directory"

    @classmethod
    def from_content_type(cls, content_type: str) -> 'EntryKind':
        """
        Map a GitHub contents API ``type`` to an entry kind.

        Only ``dir`` is browsable; files, symlinks and submodules are
        treated as files.
        """
        if content_type == "dir":
            return cls.DIRECTORY
        return cls.FILE


@dataclass(frozen=True)
class DirectoryEntry:
    """
    A single item returned when listing a repository path.

    Directory entries never carry content. File entries carry content only
    when it was fetched explicitly.
    """

    path: str
    kind: EntryKind
    content: Optional[str] = None

    def __post_init__(self):
        if self.kind is EntryKind.DIRECTORY and self.content is not None:
            raise ValueError(f"Directory entry {self.path!r} cannot carry content")

    @property
    def name(self) -> str:
        """Last component of the entry path."""
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def display_name(self) -> str:
        """Render the entry the way listings show it, with a ``[DIR]`` marker."""
        return f"[DIR] {self.path}" if self.is_directory else self.path

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "kind": self.kind.value, "content": self.content}
