"""
Short explanations of common git terms shown from the help menu.
"""

from typing import Dict, Optional

GLOSSARY: Dict[str, str] = {
    "Branch": "A branch is a parallel version of a repository, allowing multiple lines of development.",
    "Centralized Workflow": "A workflow where a single repository serves as the central hub for all changes.",
    "Feature Branch Workflow": (
        "Developers create feature branches for new features, merging them into main when complete."
    ),
    "Forking": "Forking creates a personal copy of a repository to work on independently.",
    "Gitflow Workflow": "A branching model with main, develop, feature, release, and hotfix branches.",
    "HEAD": "HEAD is a pointer to the current branch or commit you are working on.",
    "Hook": "Scripts that run automatically on certain Git events, like pre-commit or post-merge.",
    "Main": "The default branch in a Git repository, often called 'main' or 'master'.",
    "Pull Request": "A request to merge changes from one branch to another, often reviewed by collaborators.",
    "Repository": "A storage location for a project's files and version history.",
    "Tag": "A reference to a specific commit, often used to mark release points.",
    "Version Control": "A system to manage changes to code or documents over time.",
    "Working Tree": (
        "The current state of files in your working directory, including tracked and untracked files."
    ),
}


def lookup(term: str) -> Optional[str]:
    """Find a definition, ignoring case and surrounding whitespace."""
    wanted = (term or "").strip().lower()
    for name, definition in GLOSSARY.items():
        if name.lower() == wanted:
            return definition
    return None
