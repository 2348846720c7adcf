"""
tests/test_models.py
Unit tests for modelforge.models and modelforge.utils.

Tests cover:
- Model / field parsing from camelCase editor JSON
- Derived model properties (table name, route name, data fields)
- Option sets and coerce_options (unsupported values, alias handling)
- GeneratedFile computed fields and immutability
- Endpoint identity derivation
- ProjectPackage duplicate-path rejection
- Naming and text helpers
"""

from __future__ import annotations

from typing import Any, Dict

import pytest
from pydantic import ValidationError as PydanticValidationError

from modelforge.models import (
    ArtifactKind,
    Endpoint,
    ExportOptions,
    GeneratedFile,
    GenerationOptions,
    Model,
    ProjectMetadata,
    ProjectPackage,
    UnsupportedOptionError,
    coerce_options,
    default_roles,
    endpoint_id,
    parse_models,
)
from modelforge.utils import (
    count_lines,
    default_table_name,
    is_camel_case,
    is_pascal_case,
    sha256_hex,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
)


# ===========================================================================
# Model parsing
# ===========================================================================


class TestModelParsing:
    """Editor JSON is accepted with camelCase keys and enum values kept as strings."""

    def test_parse_user_model(self, user_model_dict: Dict[str, Any]) -> None:
        model = Model.model_validate(user_model_dict)
        assert model.name == "User"
        assert [f.name for f in model.fields] == ["id", "name", "email"]
        assert model.fields[2].type == "email", "Enum values must be stored as plain strings."

    def test_alias_and_field_name_both_accepted(self) -> None:
        by_alias = Model.model_validate(
            {"name": "Tag", "metadata": {"tableName": "labels", "softDelete": True}}
        )
        by_name = Model.model_validate(
            {"name": "Tag", "metadata": {"table_name": "labels", "soft_delete": True}}
        )
        assert by_alias.metadata == by_name.metadata

    def test_relationship_aliases(self, blog_models) -> None:
        user = Model.model_validate(blog_models[0])
        rel = user.relationships[0]
        assert rel.source_model == "User"
        assert rel.target_model == "Post"
        assert rel.target_field == "authorId"
        assert rel.cascade_delete is True

    def test_unknown_field_type_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Model.model_validate({"name": "X", "fields": [{"name": "a", "type": "blob"}]})

    def test_models_are_frozen(self, user_model_dict: Dict[str, Any]) -> None:
        model = Model.model_validate(user_model_dict)
        with pytest.raises(PydanticValidationError):
            model.name = "Account"  # type: ignore[misc]

    def test_parse_models_passes_instances_through(self, user_model_dict: Dict[str, Any]) -> None:
        existing = Model.model_validate(user_model_dict)
        parsed = parse_models([existing, {"name": "Note"}])
        assert parsed[0] is existing
        assert parsed[1].name == "Note"

    def test_rule_lookup(self, blog_models) -> None:
        user = Model.model_validate(blog_models[0])
        name_field = user.get_field("name")
        assert name_field is not None
        rule = name_field.rule("maxLength")
        assert rule is not None and rule.value == 100
        assert name_field.rule("pattern") is None


class TestModelProperties:

    def test_default_table_name(self, user_model_dict: Dict[str, Any]) -> None:
        assert Model.model_validate(user_model_dict).table_name == "users"

    def test_table_name_override(self) -> None:
        model = Model.model_validate({"name": "Person", "metadata": {"tableName": "people"}})
        assert model.table_name == "people"

    def test_route_name_is_lowercased(self) -> None:
        assert Model.model_validate({"name": "BlogPost"}).route_name == "blogpost"

    def test_data_fields_exclude_id(self, user_model_dict: Dict[str, Any]) -> None:
        model = Model.model_validate(user_model_dict)
        assert [f.name for f in model.data_fields] == ["name", "email"]

    def test_metadata_defaults(self) -> None:
        meta = Model.model_validate({"name": "Note"}).metadata
        assert meta.timestamps is True
        assert meta.soft_delete is False
        assert meta.requires_auth is True
        assert meta.allowed_roles == []


# ===========================================================================
# Options
# ===========================================================================


class TestGenerationOptions:

    def test_defaults(self) -> None:
        opts = GenerationOptions()
        assert opts.framework == "express"
        assert opts.database == "postgresql"
        assert opts.authentication == "jwt"
        assert opts.language == "typescript"
        assert opts.include_tests is True
        assert opts.include_documentation is True

    def test_derived_flags(self) -> None:
        opts = GenerationOptions(database="mongodb", authentication="none")
        assert opts.is_relational is False
        assert opts.auth_enabled is False
        assert opts.token_auth is False

    def test_unknown_key_forbidden(self) -> None:
        with pytest.raises(PydanticValidationError):
            GenerationOptions.model_validate({"orm": "prisma"})

    def test_coerce_from_camel_case_mapping(self) -> None:
        opts = coerce_options(GenerationOptions, {"includeTests": False, "database": "mysql"})
        assert opts.include_tests is False
        assert opts.database == "mysql"

    def test_coerce_none_gives_defaults(self) -> None:
        assert coerce_options(ExportOptions, None) == ExportOptions()

    def test_coerce_existing_instance(self) -> None:
        opts = ExportOptions(format="tar")
        assert coerce_options(ExportOptions, opts) is opts

    @pytest.mark.parametrize(
        "key,value",
        [
            ("framework", "django"),
            ("database", "sqlite"),
            ("authentication", "basic"),
            ("language", "python"),
        ],
    )
    def test_unsupported_generation_option(self, key: str, value: str) -> None:
        with pytest.raises(UnsupportedOptionError) as exc_info:
            coerce_options(GenerationOptions, {key: value})
        assert exc_info.value.option == key
        assert exc_info.value.value == value
        assert key in str(exc_info.value)

    def test_unsupported_export_format(self) -> None:
        with pytest.raises(UnsupportedOptionError) as exc_info:
            coerce_options(ExportOptions, {"format": "rar"})
        assert exc_info.value.allowed == ["zip", "tar"]

    def test_unsupported_option_is_value_error(self) -> None:
        assert issubclass(UnsupportedOptionError, ValueError)

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(TypeError):
            coerce_options(GenerationOptions, ["postgresql"])


# ===========================================================================
# Generation output
# ===========================================================================


class TestGeneratedFile:

    def test_type_alias_and_computed_fields(self) -> None:
        f = GeneratedFile.model_validate(
            {"path": "src/app.ts", "content": "a\nb\n", "type": "source", "language": "typescript"}
        )
        assert f.kind == ArtifactKind.SOURCE.value
        assert f.line_count == 2
        assert f.checksum == sha256_hex("a\nb\n")

    def test_dump_by_alias(self) -> None:
        f = GeneratedFile(path="README.md", content="# x\n", kind="documentation")
        dumped = f.model_dump(by_alias=True)
        assert dumped["type"] == "documentation"
        assert dumped["lineCount"] == 1

    def test_with_content_returns_copy(self) -> None:
        original = GeneratedFile(path="a.json", content="{}", kind="config", language="json")
        updated = original.with_content('{\n  "a": 1\n}\n')
        assert original.content == "{}"
        assert updated.path == original.path
        assert updated.language == "json"
        assert updated.checksum != original.checksum


class TestEndpoint:

    def test_id_derived_from_method_and_path(self) -> None:
        ep = Endpoint(
            path="/user", method="POST", model_name="User", operation="create"
        )
        assert ep.id == endpoint_id("POST", "/user")
        assert ep.route_key == "POST /user"

    def test_same_route_same_id(self) -> None:
        a = Endpoint(path="/post/:id", method="GET", model_name="Post", operation="read")
        b = Endpoint(path="/post/:id", method="GET", model_name="Post", operation="read")
        assert a.id == b.id

    def test_explicit_id_kept(self) -> None:
        ep = Endpoint(id="fixed", path="/x", method="GET", model_name="X", operation="list")
        assert ep.id == "fixed"


class TestProjectPackage:

    @staticmethod
    def _metadata() -> ProjectMetadata:
        return ProjectMetadata(
            name="demo",
            framework="express",
            database="postgresql",
            authentication="jwt",
            language="typescript",
            template="basic",
        )

    def test_duplicate_paths_rejected(self) -> None:
        files = [
            GeneratedFile(path="src/app.ts", content="", kind="source"),
            GeneratedFile(path="src/app.ts", content="x", kind="source"),
        ]
        with pytest.raises(PydanticValidationError, match="Duplicate file path"):
            ProjectPackage(id="1", name="demo", files=files, metadata=self._metadata())

    def test_file_paths(self) -> None:
        files = [GeneratedFile(path=p, content="", kind="config") for p in ("a", "b")]
        pkg = ProjectPackage(id="1", name="demo", files=files, metadata=self._metadata())
        assert pkg.file_paths == ["a", "b"]

    def test_metadata_dev_dependencies_alias(self) -> None:
        dumped = self._metadata().model_dump(by_alias=True)
        assert "devDependencies" in dumped


def test_default_roles() -> None:
    roles = {r.name: r.permissions for r in default_roles()}
    assert roles["admin"] == ["create", "read", "update", "delete"]
    assert roles["user"] == ["read"]


# ===========================================================================
# Utilities
# ===========================================================================


class TestNamingHelpers:

    @pytest.mark.parametrize(
        "name,expected",
        [("createdAt", "created_at"), ("HTTPStatus", "http_status"), ("email", "email"), ("authorId", "author_id")],
    )
    def test_to_snake_case(self, name: str, expected: str) -> None:
        assert to_snake_case(name) == expected

    def test_other_cases(self) -> None:
        assert to_pascal_case("blog_post") == "BlogPost"
        assert to_camel_case("BlogPost") == "blogPost"
        assert to_kebab_case("BlogPost") == "blog-post"

    def test_case_predicates(self) -> None:
        assert is_pascal_case("BlogPost")
        assert not is_pascal_case("blogPost")
        assert is_camel_case("firstName")
        assert not is_camel_case("first_name!")

    def test_default_table_name(self) -> None:
        assert default_table_name("Category") == "categorys"

    def test_count_lines(self) -> None:
        assert count_lines("") == 0
        assert count_lines("one") == 1
        assert count_lines("one\ntwo\n") == 2
