"""
Credential and identity models for the GitHub connection.
"""

from dataclasses import dataclass, field


MASK = "********"


def mask_token(token: str) -> str:
    """Mask a token for display, keeping only its first and last four characters."""
    if not token:
        return "(not set)"
    return token[:4] + MASK + token[-4:] if len(token) > 8 else MASK


@dataclass(frozen=True)
class RemoteCredential:
    """An access token for the remote service."""

    token: str = field(repr=False)

    def __post_init__(self):
        if not self.token or not self.token.strip():
            raise ValueError("Credential token must be non-empty")

    @property
    def masked(self) -> str:
        return mask_token(self.token)

    def __repr__(self) -> str:
        return f"RemoteCredential(token={self.masked!r})"


@dataclass(frozen=True)
class AccountIdentity:
    """The account a credential authenticates as."""

    login: str
