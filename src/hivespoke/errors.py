"""
Error types shared across hive-spoke.

Validation layers collect problems into structured results; these exceptions
are reserved for preconditions and for callers that treat a bad document as
a single failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from hivespoke.schemas.validation import Violation


class HiveError(Exception):
    """Base error with a stable machine-readable code."""

    def __init__(self, message: str, code: str = "HIVE_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code


class PreconditionError(HiveError):
    """A top-level input (projects dir, trust anchor, git repo) is unusable."""

    def __init__(self, message: str):
        super().__init__(message, code="PRECONDITION")


class DocumentMissingError(HiveError):
    """A declaration file does not exist."""

    def __init__(self, path: str):
        super().__init__(f"File not found: {path}", code="DOCUMENT_MISSING")
        self.path = path


class DocumentUnparseableError(HiveError):
    """A declaration could not be decoded or failed schema validation."""

    def __init__(
        self,
        message: str,
        violations: Optional[List["Violation"]] = None,
    ):
        super().__init__(message, code="DOCUMENT_UNPARSEABLE")
        self.violations = list(violations or [])
