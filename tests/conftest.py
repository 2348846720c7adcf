"""
tests/conftest.py
Shared fixtures for the modelforge test suite.

All fixtures are session-scoped or function-scoped as appropriate.
No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict, List

import pytest
import yaml

from modelforge.generator import CodeGenerationService
from modelforge.models import GeneratedProject


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
MODELS_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "models_example.yaml"


# ---------------------------------------------------------------------------
# Raw input fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_input_dict() -> Dict[str, Any]:
    """Load the reference models_example.yaml once per session and return as dict."""
    assert MODELS_EXAMPLE_PATH.exists(), (
        f"Reference input not found at {MODELS_EXAMPLE_PATH}. "
        "Make sure models_example.yaml is in the project root."
    )
    with open(MODELS_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def input_dict(raw_input_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_input_dict)


@pytest.fixture()
def blog_models(input_dict: Dict[str, Any]) -> List[Dict[str, Any]]:
    """The User/Post model list of the reference input."""
    return input_dict["models"]


@pytest.fixture()
def input_yaml_path(input_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the input dict to a temporary YAML file and return its path."""
    path = tmp_path / "models.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(input_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


# ---------------------------------------------------------------------------
# Single-model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def user_model_dict() -> Dict[str, Any]:
    """A lone User model with a uuid key, a required name and a unique email."""
    return {
        "name": "User",
        "fields": [
            {"name": "id", "type": "uuid", "required": True, "unique": True},
            {"name": "name", "type": "string", "required": True},
            {"name": "email", "type": "email", "required": True, "unique": True},
        ],
        "relationships": [],
        "metadata": {"timestamps": True, "softDelete": False},
    }


@pytest.fixture()
def product_model_dict() -> Dict[str, Any]:
    """A Product model with numeric, boolean and json fields and no relationships."""
    return {
        "name": "Product",
        "fields": [
            {"name": "id", "type": "uuid", "required": True, "unique": True},
            {
                "name": "title",
                "type": "string",
                "required": True,
                "validation": [{"type": "maxLength", "value": 120}],
            },
            {"name": "price", "type": "decimal", "required": True},
            {"name": "inStock", "type": "boolean", "defaultValue": True},
            {"name": "attributes", "type": "json"},
        ],
        "metadata": {"softDelete": True, "allowedRoles": ["admin"]},
    }


# ---------------------------------------------------------------------------
# Generated project fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def generation_service() -> CodeGenerationService:
    return CodeGenerationService()


@pytest.fixture()
def blog_project(
    generation_service: CodeGenerationService,
    blog_models: List[Dict[str, Any]],
) -> GeneratedProject:
    """The reference input generated with default options and a fixed name."""
    return generation_service.generate_project(
        blog_models, {"database": "postgresql", "authentication": "jwt"}, project_name="blog-api"
    )
