# File: modelforge/validators.py
"""
ModelForge - Model Validators
==============================
Pure-function validation pipeline that gates code generation.

Pydantic enforces the structural schema of each ``Model``; this module
turns those failures into located findings and adds the cross-entity
rules pydantic cannot express: naming conventions, unique model and field
names, relationship endpoint resolution and cycle detection.

Every rule runs to completion.  Findings are aggregated into a
``ValidationResult``; nothing here raises on bad input.  Errors block
generation; warnings and circular references never do.

Usage:
    from modelforge.validators import validate_models
    result = validate_models(models)
    if not result.is_valid:
        return result.to_dict()
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from modelforge.models import FieldDefinition, FieldType, Model
from modelforge.utils import is_camel_case, is_pascal_case

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelforge.validators")

# ---------------------------------------------------------------------------
# Finding codes
# ---------------------------------------------------------------------------

SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
RELATIONSHIP_SCHEMA_ERROR = "RELATIONSHIP_SCHEMA_ERROR"
FIELD_SCHEMA_ERROR = "FIELD_SCHEMA_ERROR"
NAMING_CONVENTION_WARNING = "NAMING_CONVENTION_WARNING"
FIELD_NAMING_CONVENTION_WARNING = "FIELD_NAMING_CONVENTION_WARNING"
DUPLICATE_FIELD_NAME = "DUPLICATE_FIELD_NAME"
DUPLICATE_MODEL_NAME = "DUPLICATE_MODEL_NAME"
NO_FIELDS_WARNING = "NO_FIELDS_WARNING"
NO_PRIMARY_KEY_WARNING = "NO_PRIMARY_KEY_WARNING"
TARGET_MODEL_NOT_FOUND = "TARGET_MODEL_NOT_FOUND"
SOURCE_FIELD_NOT_FOUND = "SOURCE_FIELD_NOT_FOUND"
TARGET_FIELD_NOT_FOUND = "TARGET_FIELD_NOT_FOUND"
MISSING_EMAIL_VALIDATION = "MISSING_EMAIL_VALIDATION"
MISSING_STRING_VALIDATION = "MISSING_STRING_VALIDATION"

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """One finding, located by a JSON-path-like ``field`` string."""

    __slots__ = ("level", "code", "message", "field")

    def __init__(self, level: str, code: str, message: str, field: str = "") -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.field: str = field

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def prefixed(self, prefix: str) -> "ValidationIssue":
        if not prefix:
            return self
        field: str = f"{prefix}.{self.field}" if self.field else prefix
        return ValidationIssue(self.level, self.code, self.message, field)

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code} at {self.field or '<root>'}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """
    Accumulates ``ValidationIssue`` instances plus circular-reference paths.

    Truthy when valid, so ``if not validate_models(models): ...`` reads as
    "stop on errors".
    """

    __slots__ = ("_items", "circular_references")

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []
        self.circular_references: List[str] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(self, code: str, message: str, field: str = "") -> None:
        self._items.append(ValidationIssue("error", code, message, field))

    def add_warning(self, code: str, message: str, field: str = "") -> None:
        self._items.append(ValidationIssue("warning", code, message, field))

    def merge(self, other: "ValidationResult", prefix: str = "") -> None:
        """Append *other*'s findings, locating them under *prefix*."""
        self._items.extend(item.prefixed(prefix) for item in other._items)
        for cycle in other.circular_references:
            if cycle not in self.circular_references:
                self.circular_references.append(cycle)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self._items if i.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self._items if i.is_warning]

    @property
    def has_errors(self) -> bool:
        return any(i.is_error for i in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self._items if i.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self._items if i.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def codes(self) -> List[str]:
        return [i.code for i in self._items]

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self.circular_references)} circular reference(s)."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
            "circularReferences": list(self.circular_references),
        }

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            marker: str = "ERROR  " if item.is_error else "WARNING"
            lines.append(f"  {marker} [{item.code}] {item.field or '<root>'}: {item.message}")
        for cycle in self.circular_references:
            lines.append(f"  CYCLE   {cycle}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)


# ---------------------------------------------------------------------------
# Tolerant accessors
# ---------------------------------------------------------------------------
# Validation must still report naming and reference findings for input
# that failed the schema, so rules read raw mappings as well as models.


def _get(obj: Any, name: str, alias: Optional[str] = None, default: Any = None) -> Any:
    if isinstance(obj, BaseModel):
        return getattr(obj, name, default)
    if isinstance(obj, Mapping):
        if name in obj:
            return obj[name]
        if alias is not None and alias in obj:
            return obj[alias]
    return default


def _list(obj: Any, name: str) -> List[Any]:
    value = _get(obj, name)
    return list(value) if isinstance(value, (list, tuple)) else []


def _field_names(model: Any) -> List[Any]:
    return [_get(f, "name") for f in _list(model, "fields")]


def _format_loc(loc: Tuple[Any, ...]) -> str:
    """``('fields', 0, 'type')`` -> ``'fields[0].type'``."""
    out: str = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out


def _schema_findings(
    result: ValidationResult,
    exc: PydanticValidationError,
    default_code: str,
) -> None:
    for err in exc.errors():
        loc: Tuple[Any, ...] = tuple(err.get("loc", ()))
        code: str = (
            RELATIONSHIP_SCHEMA_ERROR
            if loc and loc[0] == "relationships"
            else default_code
        )
        result.add_error(code, str(err.get("msg", "Invalid value")), _format_loc(loc))


# ---------------------------------------------------------------------------
# Individual validators
# ---------------------------------------------------------------------------


def validate_model(model: Any) -> ValidationResult:
    """
    Validate one model in isolation.

    Findings are located relative to the model (``fields[1].name``).
    """
    result = ValidationResult()

    if not isinstance(model, Model):
        try:
            Model.model_validate(model)
        except PydanticValidationError as exc:
            _schema_findings(result, exc, SCHEMA_VALIDATION_ERROR)

    name = _get(model, "name")
    if isinstance(name, str) and not is_pascal_case(name):
        result.add_warning(
            NAMING_CONVENTION_WARNING,
            "Model name should start with uppercase letter and use PascalCase",
            "name",
        )

    fields: List[Any] = _list(model, "fields")
    seen: Set[str] = set()
    for index, field in enumerate(fields):
        field_name = _get(field, "name")
        if not isinstance(field_name, str):
            continue
        if field_name in seen:
            result.add_error(
                DUPLICATE_FIELD_NAME,
                f"Duplicate field name: {field_name}",
                f"fields[{index}].name",
            )
        seen.add(field_name)
        if not is_camel_case(field_name):
            result.add_warning(
                FIELD_NAMING_CONVENTION_WARNING,
                "Field name should start with lowercase letter and use camelCase",
                f"fields[{index}].name",
            )

    if not fields:
        result.add_warning(
            NO_FIELDS_WARNING, "Model must have at least one field", "fields"
        )

    has_primary_key: bool = any(
        _get(f, "name") == "id"
        and _get(f, "type") == FieldType.UUID.value
        and bool(_get(f, "unique"))
        for f in fields
    )
    if not has_primary_key:
        result.add_warning(
            NO_PRIMARY_KEY_WARNING,
            "Model should have an id field of type uuid that is unique",
            "fields",
        )

    return result


def validate_field(field: Any) -> ValidationResult:
    """Validate one field in isolation (used by editors while typing)."""
    result = ValidationResult()
    if not isinstance(field, FieldDefinition):
        try:
            FieldDefinition.model_validate(field)
        except PydanticValidationError as exc:
            _schema_findings(result, exc, FIELD_SCHEMA_ERROR)

    field_type = _get(field, "type")
    has_rules: bool = bool(_list(field, "validation"))
    if field_type == FieldType.EMAIL.value and not has_rules:
        result.add_warning(
            MISSING_EMAIL_VALIDATION,
            "Email fields should have email validation rules",
            "validation",
        )
    if field_type == FieldType.STRING.value and not has_rules:
        result.add_warning(
            MISSING_STRING_VALIDATION,
            "String fields should have length validation rules",
            "validation",
        )
    return result


def validate_model_names(models: Sequence[Any]) -> ValidationResult:
    """Model names must be unique, compared case-insensitively."""
    result = ValidationResult()
    seen: Set[str] = set()
    for index, model in enumerate(models):
        name = _get(model, "name")
        if not isinstance(name, str):
            continue
        key: str = name.lower()
        if key in seen:
            result.add_error(
                DUPLICATE_MODEL_NAME,
                f"Duplicate model name: {name}",
                f"models[{index}].name",
            )
        seen.add(key)
    return result


def validate_relationships(models: Sequence[Any]) -> ValidationResult:
    """
    Resolve every relationship endpoint.

    A missing target model is reported once per relationship and its field
    checks are skipped; the relationship takes no part in cycle detection.
    """
    result = ValidationResult()
    by_name: Dict[str, Any] = {}
    for model in models:
        name = _get(model, "name")
        if isinstance(name, str):
            by_name.setdefault(name, model)

    for m_index, model in enumerate(models):
        model_name = _get(model, "name")
        own_fields: List[Any] = _field_names(model)
        for r_index, rel in enumerate(_list(model, "relationships")):
            where: str = f"models[{m_index}].relationships[{r_index}]"
            target_name = _get(rel, "target_model", "targetModel")
            target = by_name.get(target_name) if isinstance(target_name, str) else None
            if target is None:
                result.add_error(
                    TARGET_MODEL_NOT_FOUND,
                    f"Target model '{target_name}' does not exist",
                    f"{where}.targetModel",
                )
                continue
            source_field = _get(rel, "source_field", "sourceField")
            if source_field not in own_fields:
                result.add_error(
                    SOURCE_FIELD_NOT_FOUND,
                    f"Source field '{source_field}' does not exist in model '{model_name}'",
                    f"{where}.sourceField",
                )
            target_field = _get(rel, "target_field", "targetField")
            if target_field not in _field_names(target):
                result.add_error(
                    TARGET_FIELD_NOT_FOUND,
                    f"Target field '{target_field}' does not exist in model '{target_name}'",
                    f"{where}.targetField",
                )
    return result


def detect_circular_references(models: Sequence[Any]) -> List[str]:
    """
    Enumerate every elementary cycle of the model -> target-model graph.

    Each cycle is reported once, as ``"A -> B -> A"``, starting from its
    member that comes first in input order.  A self-relationship yields
    ``"A -> A"``.  Edges to unknown models are ignored.

    Search from start node ``s`` only walks nodes that come after ``s``,
    so cycles that share a prefix are all found and none is found twice.
    """
    order: List[str] = []
    for model in models:
        name = _get(model, "name")
        if isinstance(name, str) and name not in order:
            order.append(name)
    position: Dict[str, int] = {name: i for i, name in enumerate(order)}

    adjacency: Dict[str, List[str]] = {name: [] for name in order}
    seen_models: Set[str] = set()
    for model in models:
        name = _get(model, "name")
        if not isinstance(name, str) or name in seen_models:
            continue
        seen_models.add(name)
        for rel in _list(model, "relationships"):
            target = _get(rel, "target_model", "targetModel")
            if target in position and target not in adjacency[name]:
                adjacency[name].append(target)

    cycles: List[str] = []
    for start in order:
        floor: int = position[start]
        path: List[str] = [start]
        on_path: Set[str] = {start}

        def walk(node: str) -> None:
            for nxt in adjacency[node]:
                if nxt == start:
                    cycles.append(" -> ".join(path + [start]))
                elif nxt not in on_path and position[nxt] > floor:
                    path.append(nxt)
                    on_path.add(nxt)
                    walk(nxt)
                    on_path.discard(nxt)
                    path.pop()

        walk(start)

    if cycles:
        logger.info("Detected %d circular reference(s).", len(cycles))
    return cycles


# ---------------------------------------------------------------------------
# Master validation entry point
# ---------------------------------------------------------------------------


def validate_models(models: Sequence[Any]) -> ValidationResult:
    """
    Run every rule over a model set and aggregate the findings.

    Accepts ``Model`` instances or editor JSON mappings.  Per-model findings
    are located as ``models[i].<field>``.  ``is_valid`` reflects errors
    only; cycles are returned in ``circular_references``.
    """
    result = ValidationResult()

    for index, model in enumerate(models):
        result.merge(validate_model(model), prefix=f"models[{index}]")

    cross_model: List[Callable[[Sequence[Any]], ValidationResult]] = [
        validate_model_names,
        validate_relationships,
    ]
    for fn in cross_model:
        logger.debug("Running validator: %s", fn.__name__)
        result.merge(fn(models))

    result.circular_references.extend(detect_circular_references(models))

    logger.info(result.summary())
    return result


__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "validate_model",
    "validate_field",
    "validate_model_names",
    "validate_relationships",
    "detect_circular_references",
    "validate_models",
]

logger.debug("modelforge.validators loaded: %d public symbols.", len(__all__))
