"""
tests/test_validators.py
Comprehensive unit tests for modelforge.validators module.

Tests cover:
- Per-model checks (naming, duplicate fields, empty models, primary key)
- Per-field advisory warnings
- Case-insensitive duplicate model names
- Relationship endpoint resolution
- Circular reference enumeration (self, 2-, 3- and 4-hop cycles)
- Full validation pipeline (validate_models) and result rendering
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Sequence

import pytest

from modelforge.models import Model
from modelforge.validators import (
    DUPLICATE_FIELD_NAME,
    DUPLICATE_MODEL_NAME,
    FIELD_NAMING_CONVENTION_WARNING,
    MISSING_EMAIL_VALIDATION,
    MISSING_STRING_VALIDATION,
    NAMING_CONVENTION_WARNING,
    NO_FIELDS_WARNING,
    NO_PRIMARY_KEY_WARNING,
    SCHEMA_VALIDATION_ERROR,
    SOURCE_FIELD_NOT_FOUND,
    TARGET_FIELD_NOT_FOUND,
    TARGET_MODEL_NOT_FOUND,
    ValidationResult,
    detect_circular_references,
    validate_field,
    validate_model,
    validate_model_names,
    validate_models,
    validate_relationships,
)


# ===========================================================================
# Helper to build linked models
# ===========================================================================


def _linked(name: str, targets: Sequence[str] = ()) -> Dict[str, Any]:
    """A minimal valid model with one relationship per target (id -> id)."""
    return {
        "name": name,
        "fields": [{"name": "id", "type": "uuid", "required": True, "unique": True}],
        "relationships": [
            {
                "type": "oneToMany",
                "sourceModel": name,
                "targetModel": target,
                "sourceField": "id",
                "targetField": "id",
            }
            for target in targets
        ],
    }


# ===========================================================================
# validate_model
# ===========================================================================


class TestValidateModel:
    """Tests for single-model validation."""

    def test_reference_models_are_clean(self, blog_models: List[Dict[str, Any]]) -> None:
        for raw in blog_models:
            result = validate_model(raw)
            assert result.is_valid, f"Unexpected errors: {result.errors}"
            assert NO_PRIMARY_KEY_WARNING not in result.codes()

    def test_accepts_model_instances(self, user_model_dict: Dict[str, Any]) -> None:
        result = validate_model(Model.model_validate(user_model_dict))
        assert result.is_valid

    def test_lowercase_model_name_warns(self, user_model_dict: Dict[str, Any]) -> None:
        user_model_dict["name"] = "user"
        result = validate_model(user_model_dict)
        assert result.is_valid, "Naming findings are warnings only."
        assert NAMING_CONVENTION_WARNING in result.codes()

    def test_snake_case_field_warns(self, user_model_dict: Dict[str, Any]) -> None:
        user_model_dict["fields"].append({"name": "first_name", "type": "string"})
        result = validate_model(user_model_dict)
        warning = next(w for w in result.warnings if w.code == FIELD_NAMING_CONVENTION_WARNING)
        assert warning.field == "fields[3].name"

    def test_duplicate_field_name_is_error(self, user_model_dict: Dict[str, Any]) -> None:
        user_model_dict["fields"].append({"name": "email", "type": "string"})
        result = validate_model(user_model_dict)
        assert not result.is_valid
        dup = [e for e in result.errors if e.code == DUPLICATE_FIELD_NAME]
        assert len(dup) == 1
        assert dup[0].field == "fields[3].name"
        assert "email" in dup[0].message

    def test_no_fields_warns_twice(self) -> None:
        result = validate_model({"name": "Empty", "fields": []})
        assert result.is_valid
        assert NO_FIELDS_WARNING in result.codes()
        assert NO_PRIMARY_KEY_WARNING in result.codes()

    @pytest.mark.parametrize(
        "id_field",
        [
            {"name": "id", "type": "integer", "unique": True},
            {"name": "id", "type": "uuid", "unique": False},
            {"name": "key", "type": "uuid", "unique": True},
        ],
    )
    def test_primary_key_warning(self, id_field: Dict[str, Any]) -> None:
        result = validate_model({"name": "Thing", "fields": [id_field]})
        assert NO_PRIMARY_KEY_WARNING in result.codes()

    def test_schema_error_reported(self) -> None:
        result = validate_model({"name": "Bad", "fields": [{"name": "x", "type": "blob"}]})
        assert not result.is_valid
        assert SCHEMA_VALIDATION_ERROR in result.codes()
        assert any(e.field.startswith("fields[0]") for e in result.errors)

    def test_schema_error_still_reports_naming(self) -> None:
        result = validate_model({"name": "bad", "fields": [{"name": "x", "type": "blob"}]})
        assert NAMING_CONVENTION_WARNING in result.codes()


# ===========================================================================
# validate_field
# ===========================================================================


class TestValidateField:

    def test_email_without_rules_warns(self) -> None:
        result = validate_field({"name": "email", "type": "email"})
        assert result.codes() == [MISSING_EMAIL_VALIDATION]

    def test_string_without_rules_warns(self) -> None:
        result = validate_field({"name": "title", "type": "string"})
        assert result.codes() == [MISSING_STRING_VALIDATION]

    def test_string_with_rules_is_quiet(self) -> None:
        result = validate_field(
            {"name": "title", "type": "string", "validation": [{"type": "maxLength", "value": 5}]}
        )
        assert len(result) == 0

    def test_text_field_is_quiet(self) -> None:
        assert len(validate_field({"name": "body", "type": "text"})) == 0

    def test_empty_name_is_error(self) -> None:
        result = validate_field({"name": "", "type": "text"})
        assert not result.is_valid


# ===========================================================================
# Cross-model rules
# ===========================================================================


class TestModelNames:

    def test_case_insensitive_duplicates(self) -> None:
        result = validate_model_names([{"name": "User"}, {"name": "Post"}, {"name": "user"}])
        assert result.codes() == [DUPLICATE_MODEL_NAME]
        assert result.errors[0].field == "models[2].name"

    def test_unique_names_pass(self, blog_models: List[Dict[str, Any]]) -> None:
        assert validate_model_names(blog_models).is_valid


class TestRelationships:

    def test_reference_relationships_resolve(self, blog_models: List[Dict[str, Any]]) -> None:
        assert validate_relationships(blog_models).is_valid

    def test_missing_target_model(self, blog_models: List[Dict[str, Any]]) -> None:
        blog_models[0]["relationships"][0]["targetModel"] = "Comment"
        result = validate_relationships(blog_models)
        assert result.codes() == [TARGET_MODEL_NOT_FOUND], (
            "Field checks must be skipped when the target model is missing."
        )
        assert result.errors[0].field == "models[0].relationships[0].targetModel"

    def test_missing_source_field(self, blog_models: List[Dict[str, Any]]) -> None:
        blog_models[0]["relationships"][0]["sourceField"] = "uuid"
        result = validate_relationships(blog_models)
        assert result.codes() == [SOURCE_FIELD_NOT_FOUND]
        assert result.errors[0].field == "models[0].relationships[0].sourceField"

    def test_missing_target_field(self, blog_models: List[Dict[str, Any]]) -> None:
        blog_models[0]["relationships"][0]["targetField"] = "writerId"
        result = validate_relationships(blog_models)
        assert result.codes() == [TARGET_FIELD_NOT_FOUND]
        assert "Post" in result.errors[0].message


# ===========================================================================
# Circular references
# ===========================================================================


class TestCircularReferences:

    def test_acyclic_graph(self, blog_models: List[Dict[str, Any]]) -> None:
        assert detect_circular_references(blog_models) == []

    def test_self_reference(self) -> None:
        assert detect_circular_references([_linked("Node", ["Node"])]) == ["Node -> Node"]

    def test_two_hop_cycle(self) -> None:
        models = [_linked("A", ["B"]), _linked("B", ["A"])]
        assert detect_circular_references(models) == ["A -> B -> A"]

    def test_three_hop_cycle(self) -> None:
        models = [_linked("A", ["B"]), _linked("B", ["C"]), _linked("C", ["A"])]
        assert detect_circular_references(models) == ["A -> B -> C -> A"]

    def test_four_hop_cycle(self) -> None:
        models = [
            _linked("A", ["B"]),
            _linked("B", ["C"]),
            _linked("C", ["D"]),
            _linked("D", ["A"]),
        ]
        assert detect_circular_references(models) == ["A -> B -> C -> D -> A"]

    def test_cycle_starts_at_first_input_model(self) -> None:
        models = [_linked("C", ["A"]), _linked("A", ["B"]), _linked("B", ["C"])]
        assert detect_circular_references(models) == ["C -> A -> B -> C"]

    def test_cycles_sharing_a_prefix_are_all_reported(self) -> None:
        models = [_linked("A", ["B"]), _linked("B", ["A", "C"]), _linked("C", ["A"])]
        cycles = detect_circular_references(models)
        assert sorted(cycles) == ["A -> B -> A", "A -> B -> C -> A"]

    def test_each_cycle_reported_once(self) -> None:
        models = [_linked("A", ["B", "B"]), _linked("B", ["A"])]
        assert detect_circular_references(models) == ["A -> B -> A"]

    @pytest.mark.parametrize("size", [1, 2, 3, 4, 5, 6])
    @pytest.mark.parametrize("rotation", [0, 1, 2])
    def test_ring_reported_once_from_first_model(self, size: int, rotation: int) -> None:
        names = [f"M{i}" for i in range(size)]
        ring = [_linked(name, [names[(i + 1) % size]]) for i, name in enumerate(names)]
        shift = rotation % size
        models = ring[shift:] + ring[:shift]
        expected = " -> ".join(names[(shift + k) % size] for k in range(size + 1))
        assert detect_circular_references(models) == [expected]

    def test_missing_target_is_not_a_cycle(self) -> None:
        models = [_linked("A", ["Ghost"]), _linked("B", ["A"])]
        assert detect_circular_references(models) == []


# ===========================================================================
# validate_models
# ===========================================================================


class TestValidateModels:

    def test_reference_input_is_valid(self, blog_models: List[Dict[str, Any]]) -> None:
        result = validate_models(blog_models)
        assert result.is_valid, f"Unexpected errors: {result.errors}"
        assert bool(result) is True
        assert result.circular_references == []

    def test_per_model_findings_are_prefixed(self, blog_models: List[Dict[str, Any]]) -> None:
        blog_models[1]["fields"].append({"name": "title", "type": "string"})
        result = validate_models(blog_models)
        dup = [e for e in result.errors if e.code == DUPLICATE_FIELD_NAME]
        assert dup and dup[0].field == "models[1].fields[5].name"

    def test_cycles_do_not_block(self) -> None:
        result = validate_models([_linked("A", ["B"]), _linked("B", ["A"])])
        assert result.is_valid
        assert result.circular_references == ["A -> B -> A"]

    def test_empty_model_list(self) -> None:
        result = validate_models([])
        assert result.is_valid
        assert len(result) == 0

    def test_to_dict_shape(self, blog_models: List[Dict[str, Any]]) -> None:
        bad = copy.deepcopy(blog_models)
        bad.append(copy.deepcopy(bad[0]))
        data = validate_models(bad).to_dict()
        assert data["isValid"] is False
        assert set(data) == {"isValid", "errors", "warnings", "circularReferences"}
        assert {"field", "message", "code"} == set(data["errors"][0])

    def test_format_report(self) -> None:
        result = validate_models([_linked("a", ["a"])])
        report = result.format_report()
        assert report.startswith(result.summary())
        assert NAMING_CONVENTION_WARNING in report
        assert "CYCLE   a -> a" in report


class TestValidationResult:

    def test_merge_with_prefix(self) -> None:
        inner = ValidationResult()
        inner.add_error("X", "bad", "name")
        inner.add_warning("Y", "meh")
        outer = ValidationResult()
        outer.merge(inner, prefix="models[3]")
        assert [i.field for i in outer.errors + outer.warnings] == ["models[3].name", "models[3]"]
        assert outer.error_count == 1
        assert outer.warning_count == 1

    def test_falsy_when_errors(self) -> None:
        result = ValidationResult()
        result.add_error("X", "bad")
        assert not result
