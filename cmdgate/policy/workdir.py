"""Working-directory checks against the project root."""

from __future__ import annotations

import re

from cmdgate.core.types import Accepted, Rejected, RejectionCode, ValidationResult

OUTSIDE_ROOT_REASON = "working directory must be within project root"
TRAVERSAL_REASON = "path traversal not allowed in working directory"

_SEPARATORS = re.compile(r"[/\\]")


def is_within_root(path: str, project_root: str) -> bool:
    """Prefix check that respects path boundaries (``/app2`` is not in ``/app``)."""
    root = project_root.rstrip("/\\")
    if not root:
        # Filesystem root contains every absolute path.
        return path.startswith(("/", "\\"))
    return path == root or path.startswith((root + "/", root + "\\"))


def has_traversal(path: str) -> bool:
    return ".." in _SEPARATORS.split(path)


def validate_working_directory(path: str | None, project_root: str) -> ValidationResult:
    """Accept an empty path (use the default) or one below ``project_root``."""
    if not path:
        return Accepted()

    if not is_within_root(path, project_root):
        return Rejected(RejectionCode.INVALID_WORKING_DIRECTORY, OUTSIDE_ROOT_REASON)

    if has_traversal(path):
        return Rejected(RejectionCode.INVALID_WORKING_DIRECTORY, TRAVERSAL_REASON)

    return Accepted()
