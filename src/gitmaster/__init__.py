"""
GitMaster

A terminal front-end for running common git commands and browsing or
modifying the repositories of a connected GitHub account.
"""

__version__ = "0.1.0"
__author__ = "GitMaster Team"
__description__ = "Terminal front-end for git commands and GitHub repository management"
