"""
External process execution.
"""

import os

# a missing git binary is reported per command, not at import time
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from .process_runner import ProcessRunner, split_arguments  # noqa: E402

__all__ = [
    "ProcessRunner",
    "split_arguments"
]
