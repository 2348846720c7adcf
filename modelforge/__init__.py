# File: modelforge/__init__.py
"""
ModelForge - Backend Project Generator
=======================================

Compiles a data-model description (models, fields, relationships and
generation preferences) into a complete Express + TypeScript backend:
record interfaces, SQL schemas, repositories, services, controllers,
routes, validation chains, an authentication module and tests, packaged
with tiered deployment files into a zip or tar.gz archive.

Architecture overview::

    ┌──────────────┐     ┌─────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ ProjectPipeline │────▶│ ArtifactRenderer │
    │   (cli.py)   │     │ (generator.py)  │     │  (artifacts.py)  │
    └──────────────┘     └────────┬────────┘     └────────┬─────────┘
                                  │                       ▼
                                  │              ┌──────────────────┐
                                  │              │  TemplateEngine  │
                                  │              │  (templates.py)  │
                                  │              └──────────────────┘
                 ┌────────────┬───┴────────┬────────────┐
                 ▼            ▼            ▼            ▼
          ┌──────────┐ ┌───────────┐ ┌───────────┐ ┌──────────┐
          │validators│ │ formatter │ │ exporters │ │  models  │
          │  (.py)   │ │  (.py)    │ │  (.py)    │ │  (.py)   │
          └──────────┘ └───────────┘ └───────────┘ └──────────┘

Usage::

    # As a library
    from modelforge import ProjectPipeline
    report = ProjectPipeline().run(models, {"database": "mysql"}, {"format": "tar"})

    # From the command line
    python -m modelforge models.yaml -o ./dist --template advanced -v

Public API:
    - ProjectPipeline        - validate, generate, format, package, archive
    - CodeGenerationService  - models + options into a GeneratedProject
    - ProjectExportService   - packages and archives
    - TemplateEngine         - named template registry and renderer
    - CodeFormatter          - per-language formatting and smoke checks
    - validate_models        - aggregated model validation
"""

from __future__ import annotations

__version__: str = "1.0.0"
__author__: str = "ModelForge Team"
__license__: str = "MIT"

from modelforge.models import (
    ArtifactKind,
    AuthConfig,
    AuthStrategy,
    CrudOperation,
    Database,
    Endpoint,
    ExportFormat,
    ExportOptions,
    FieldDefinition,
    FieldType,
    Framework,
    GeneratedFile,
    GeneratedProject,
    GenerationOptions,
    HttpMethod,
    Language,
    Model,
    ModelMetadata,
    ProjectMetadata,
    ProjectPackage,
    Relationship,
    RelationshipType,
    Role,
    TemplateTier,
    UnsupportedOptionError,
    ValidationRule,
    parse_models,
)
from modelforge.validators import ValidationResult, validate_field, validate_models
from modelforge.templates import TemplateEngine, TemplateNotFoundError, TemplateSyntaxError
from modelforge.formatter import CodeFormatter, CodeValidationResult, FormatOptions
from modelforge.exporters import (
    ArchiveError,
    ProjectExportService,
    archive_filename,
    archive_media_type,
    get_export_info,
)
from modelforge.generator import (
    CodeGenerationService,
    GenerationError,
    ModelValidationFailed,
    PipelineReport,
    ProjectPipeline,
)
from modelforge.utils import Timer, to_camel_case, to_pascal_case, to_snake_case

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Orchestration
    "ProjectPipeline",
    "PipelineReport",
    "CodeGenerationService",
    "ModelValidationFailed",
    "GenerationError",
    # Models
    "ArtifactKind",
    "AuthConfig",
    "AuthStrategy",
    "CrudOperation",
    "Database",
    "Endpoint",
    "ExportFormat",
    "ExportOptions",
    "FieldDefinition",
    "FieldType",
    "Framework",
    "GeneratedFile",
    "GeneratedProject",
    "GenerationOptions",
    "HttpMethod",
    "Language",
    "Model",
    "ModelMetadata",
    "ProjectMetadata",
    "ProjectPackage",
    "Relationship",
    "RelationshipType",
    "Role",
    "TemplateTier",
    "UnsupportedOptionError",
    "ValidationRule",
    "parse_models",
    # Validation
    "ValidationResult",
    "validate_field",
    "validate_models",
    # Templates
    "TemplateEngine",
    "TemplateNotFoundError",
    "TemplateSyntaxError",
    # Formatting
    "CodeFormatter",
    "CodeValidationResult",
    "FormatOptions",
    # Export
    "ArchiveError",
    "ProjectExportService",
    "archive_filename",
    "archive_media_type",
    "get_export_info",
    # Utilities
    "Timer",
    "to_snake_case",
    "to_pascal_case",
    "to_camel_case",
]
