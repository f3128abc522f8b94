"""
GitHub API access.
"""

from .github_gateway import GitHubGateway

__all__ = [
    "GitHubGateway"
]
