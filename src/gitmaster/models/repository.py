"""
Repository reference model for GitHub repositories.
"""

from dataclasses import dataclass
from typing import Dict, Any

from ..error_handling import ValidationError


@dataclass(frozen=True)
class RepositoryRef:
    """
    Identifies a GitHub repository by owner and name.

    Instances are normally built with :meth:`parse` from the ``owner/name``
    form GitHub reports as a repository's full name.
    """

    owner: str
    name: str

    def __post_init__(self):
        if not self.owner or not self.name:
            raise ValidationError(
                f"Repository owner and name must both be non-empty: {self.owner!r}/{self.name!r}",
                invalid_fields=["repo"]
            )

    @classmethod
    def parse(cls, identifier: str) -> 'RepositoryRef':
        """
        Parse an ``owner/name`` identifier.

        Args:
            identifier: Repository identifier such as ``octocat/hello-world``

        Returns:
            RepositoryRef instance

        Raises:
            ValidationError: If the identifier has no ``/``, an empty owner,
                an empty name, or more than one ``/``
        """
        text = (identifier or "").strip()
        owner, sep, name = text.partition("/")
        owner = owner.strip()
        name = name.strip()

        if not sep or not owner or not name or "/" in name:
            raise ValidationError(
                f"Invalid repository identifier: {identifier!r} (expected owner/name)",
                invalid_fields=["repo"]
            )

        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        """Get the full repository name (owner/name)."""
        return f"{self.owner}/{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {"owner": self.owner, "name": self.name, "full_name": self.full_name}

    def __str__(self) -> str:
        return self.full_name
