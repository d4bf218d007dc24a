"""
Schema validation for normalized documents.

``validate_document`` never raises on bad input.  It returns a
``ValidationResult`` holding either the typed document or a list of
field-path addressed errors that can be flattened into a short summary for
the producer's retry prompt.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .models import SCHEMAS, DocumentKind

logger = logging.getLogger(__name__)

PathPart = Union[str, int]


@dataclass(frozen=True)
class ValidationError:
    """One schema violation, addressed by its path inside the document."""
    path: Tuple[PathPart, ...]
    message: str
    type: str = "value_error"

    @property
    def dotted_path(self) -> str:
        if not self.path:
            return "$"
        return ".".join(str(p) for p in self.path)

    def __str__(self) -> str:
        return f"{self.dotted_path}: {self.message}"


@dataclass
class ValidationResult:
    """Outcome of validating one candidate against one variant's schema."""
    kind: DocumentKind
    value: Optional[BaseModel] = None
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors

    def flatten(self) -> str:
        return flatten_errors(self.errors)


def flatten_errors(errors: List[ValidationError]) -> str:
    """Render errors as one ``path: message`` line each."""
    return "\n".join(str(e) for e in errors)


def _convert(exc: PydanticValidationError) -> List[ValidationError]:
    converted = []
    for err in exc.errors(include_url=False):
        converted.append(
            ValidationError(
                path=tuple(err.get("loc", ())),
                message=err.get("msg", "invalid value"),
                type=err.get("type", "value_error"),
            )
        )
    return converted


def validate_document(kind: DocumentKind, value: Any) -> ValidationResult:
    """Validate ``value`` against the schema for ``kind``.

    Args:
        kind: Document variant the producer was asked for
        value: Normalized candidate; ``None`` stands for unparseable output

    Returns:
        ValidationResult with either ``value`` or ``errors`` populated
    """
    kind = DocumentKind(kind)
    if value is None:
        return ValidationResult(
            kind=kind,
            errors=[ValidationError(path=(), message="response was not valid JSON", type="json_invalid")],
        )

    schema = SCHEMAS[kind]
    try:
        model = schema.model_validate(value)
    except PydanticValidationError as exc:
        errors = _convert(exc)
        logger.debug("%s document failed validation with %d error(s)", kind.value, len(errors))
        return ValidationResult(kind=kind, errors=errors)
    except RecursionError:
        return ValidationResult(
            kind=kind,
            errors=[ValidationError(path=(), message="document is nested too deeply", type="recursion_loop")],
        )
    return ValidationResult(kind=kind, value=model)
