"""
Result model returned for every dispatched action.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple

from ..error_handling import ErrorKind, GitMasterError


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of a single action, consumed by the presentation layer.

    When ``succeeded`` is false either ``output`` is non-empty or
    ``error_message`` is set. ``exit_code`` is only set for process
    invocations. ``items`` carries structured results such as repository
    references or directory entries.
    """

    succeeded: bool
    output: str = ""
    error_message: Optional[str] = None
    exit_code: Optional[int] = None
    error_kind: Optional[ErrorKind] = None
    warning: Optional[str] = None
    action: Optional[str] = None
    items: Tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.succeeded and not self.output and not self.error_message:
            raise ValueError("A failed result needs output or an error message")

    @classmethod
    def success(cls, output: str = "", **kwargs) -> 'ActionResult':
        return cls(succeeded=True, output=output, **kwargs)

    @classmethod
    def failure(cls, error_message: str, error_kind: ErrorKind, **kwargs) -> 'ActionResult':
        return cls(succeeded=False, error_message=error_message, error_kind=error_kind, **kwargs)

    @classmethod
    def from_error(cls, error: GitMasterError, action: Optional[str] = None) -> 'ActionResult':
        """Convert a GitMaster exception into a failed result."""
        return cls(
            succeeded=False,
            error_message=error.message,
            error_kind=error.kind,
            exit_code=getattr(error, "exit_code", None),
            action=action
        )

    def with_action(self, action: str) -> 'ActionResult':
        """Return a copy labelled with the action that produced it."""
        return ActionResult(
            succeeded=self.succeeded,
            output=self.output,
            error_message=self.error_message,
            exit_code=self.exit_code,
            error_kind=self.error_kind,
            warning=self.warning,
            action=action,
            items=self.items
        )

    def render(self) -> str:
        """Combined text shown to the user: output followed by any error text."""
        text = self.output or ""
        if self.error_message:
            text = f"{text}\nError: {self.error_message}" if text else f"Error: {self.error_message}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "succeeded": self.succeeded,
            "output": self.output,
            "error_message": self.error_message,
            "exit_code": self.exit_code,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "warning": self.warning,
            "items": [item.to_dict() if hasattr(item, "to_dict") else item for item in self.items]
        }
