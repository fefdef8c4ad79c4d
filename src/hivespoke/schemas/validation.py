"""
Schema validation for declaration documents.

Validation never stops at the first problem: every field is checked and every
violation is reported with its dotted path, so one ``validate`` run shows the
complete compliance picture.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from hivespoke.errors import DocumentUnparseableError
from hivespoke.schemas.manifest import Manifest
from hivespoke.schemas.operator import Operator
from hivespoke.schemas.status import SpokeStatus

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

ROOT_PATH = "(root)"


@dataclass(frozen=True)
class Violation:
    """One field-level schema failure."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"

    def to_dict(self) -> dict:
        return {"path": self.path, "message": self.message}


@dataclass(frozen=True)
class SchemaResult(Generic[T]):
    """Either a fully validated document or a non-empty list of violations."""

    document: Optional[T] = None
    violations: Tuple[Violation, ...] = ()

    @property
    def ok(self) -> bool:
        return self.document is not None


def _violation_from_error(error: dict) -> Violation:
    path = ".".join(str(part) for part in error["loc"]) or ROOT_PATH
    if error["type"] == "value_error":
        message = str(error["ctx"]["error"])
    elif error["type"] == "missing":
        message = "Required"
    else:
        message = error["msg"]
    return Violation(path=path, message=message)


def validate_document(model: Type[T], raw: Any) -> SchemaResult[T]:
    """Validate decoded YAML against ``model`` without raising."""
    try:
        return SchemaResult(document=model.model_validate(raw))
    except ValidationError as exc:
        violations = tuple(
            _violation_from_error(e) for e in exc.errors(include_url=False)
        )
        logger.debug(f"{model.__name__}: {len(violations)} violation(s)")
        return SchemaResult(violations=violations)


def parse_document(model: Type[T], raw: Any) -> T:
    """Validate ``raw`` and return the document, raising on any violation."""
    result = validate_document(model, raw)
    if not result.ok:
        detail = "; ".join(str(v) for v in result.violations)
        raise DocumentUnparseableError(
            f"{model.__name__} is invalid: {detail}", result.violations
        )
    return result.document


def validate_manifest(raw: Any) -> SchemaResult[Manifest]:
    return validate_document(Manifest, raw)


def validate_status(raw: Any) -> SchemaResult[SpokeStatus]:
    return validate_document(SpokeStatus, raw)


def validate_operator(raw: Any) -> SchemaResult[Operator]:
    return validate_document(Operator, raw)
