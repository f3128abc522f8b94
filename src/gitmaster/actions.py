"""
Catalogue of the actions the dispatcher understands.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Dict, List

GIT = "git"
GITHUB = "github"


@dataclass(frozen=True)
class ParameterSpec:
    """A text input an action asks the user for."""
    name: str
    prompt: str
    required: bool = True
    default: Optional[str] = None
    secret: bool = False


@dataclass(frozen=True)
class ActionSpec:
    """
    Describes one user-selectable action.

    Git actions run ``git`` with ``git_args`` followed by the user's input.
    ``split_input`` makes the input contribute several arguments (e.g. a
    list of paths) instead of one. ``uses_default_branch`` lets an empty
    branch fall back to the configured default branch.
    """
    name: str
    description: str
    category: str
    parameters: Tuple[ParameterSpec, ...] = field(default_factory=tuple)
    git_args: Tuple[str, ...] = field(default_factory=tuple)
    split_input: bool = False
    uses_default_branch: bool = False

    @property
    def is_git(self) -> bool:
        return self.category == GIT


def _git(name, description, args, parameter=None, split_input=False, uses_default_branch=False):
    parameters = (parameter,) if parameter else ()
    return ActionSpec(
        name=name,
        description=description,
        category=GIT,
        parameters=parameters,
        git_args=tuple(args),
        split_input=split_input,
        uses_default_branch=uses_default_branch
    )


REPO_PARAMETER = ParameterSpec("repo", "Repository (owner/name):")

GIT_ACTIONS: Tuple[ActionSpec, ...] = (
    _git("add", "Stage files", ["add"],
         ParameterSpec("paths", "Enter files to add (e.g., . for all):"), split_input=True),
    _git("branch", "List branches", ["branch"]),
    _git("checkout", "Switch branch", ["checkout"], ParameterSpec("branch", "Enter branch name:")),
    _git("clean", "Remove untracked files and directories", ["clean", "-fd"]),
    _git("clone", "Clone a repository", ["clone"], ParameterSpec("url", "Enter repository URL:")),
    _git("commit", "Commit staged changes", ["commit", "-m"],
         ParameterSpec("message", "Enter commit message:")),
    _git("commit-amend", "Amend the last commit", ["commit", "--amend", "--no-edit"]),
    _git("config", "Read or write git configuration", ["config"],
         ParameterSpec("args", "Enter config command (e.g., user.name 'Your Name'):"), split_input=True),
    _git("fetch", "Fetch from remotes", ["fetch"]),
    _git("init", "Create an empty repository", ["init"]),
    _git("log", "Show commit history", ["log", "--oneline"]),
    _git("merge", "Merge a branch", ["merge"], ParameterSpec("branch", "Enter branch to merge:")),
    _git("pull", "Pull from origin", ["pull", "origin"],
         ParameterSpec("branch", "Enter branch name:", required=False), uses_default_branch=True),
    _git("push", "Push to origin", ["push", "origin"],
         ParameterSpec("branch", "Enter branch name:", required=False), uses_default_branch=True),
    _git("rebase", "Rebase onto a branch or commit", ["rebase"],
         ParameterSpec("target", "Enter branch or commit:")),
    _git("reflog", "Show the reference log", ["reflog"]),
    _git("remote", "List remotes", ["remote", "-v"]),
    _git("reset", "Reset HEAD", ["reset"],
         ParameterSpec("args", "Enter reset mode (e.g., --soft, --hard) or commit:", required=False),
         split_input=True),
    _git("revert", "Revert a commit", ["revert", "--no-edit"],
         ParameterSpec("commit", "Enter commit to revert:")),
    _git("status", "Show working tree status", ["status"]),
)

GITHUB_ACTIONS: Tuple[ActionSpec, ...] = (
    ActionSpec(
        "connect", "Connect to GitHub with a personal access token", GITHUB,
        parameters=(ParameterSpec("token", "GitHub Personal Access Token:", secret=True),)
    ),
    ActionSpec("reset-token", "Forget the stored GitHub token", GITHUB),
    ActionSpec("list-repos", "List repositories", GITHUB),
    ActionSpec(
        "browse", "View repository contents", GITHUB,
        parameters=(REPO_PARAMETER, ParameterSpec("path", "Path (empty for root):", required=False, default="")),
    ),
    ActionSpec(
        "view-file", "Show a file from a repository", GITHUB,
        parameters=(REPO_PARAMETER, ParameterSpec("path", "File path:")),
    ),
    ActionSpec(
        "add-file", "Add a local file to a repository", GITHUB,
        parameters=(
            REPO_PARAMETER,
            ParameterSpec("local_path", "Local file path:"),
            ParameterSpec("repo_path", "Repository path (e.g., src/example.py):"),
            ParameterSpec("branch", "Branch:", default="main"),
            ParameterSpec("message", "Commit message:", default="Add new file from local"),
        ),
    ),
    ActionSpec(
        "delete-repo", "Delete a repository", GITHUB,
        parameters=(
            REPO_PARAMETER,
            ParameterSpec("confirm", "Type the repository's full name (owner/name) to confirm deletion:"),
        ),
    ),
)

ACTIONS: Dict[str, ActionSpec] = {spec.name: spec for spec in GIT_ACTIONS + GITHUB_ACTIONS}


def get_action(name: str) -> Optional[ActionSpec]:
    return ACTIONS.get((name or "").strip().lower())


def list_actions(category: Optional[str] = None) -> List[ActionSpec]:
    """Actions in menu order, optionally limited to one category."""
    return [spec for spec in ACTIONS.values() if category is None or spec.category == category]
