# File: modelforge/generator.py
"""
ModelForge - Code Generation Service and Pipeline
==================================================

Connects every phase together:

    Models + Options → Validation → Generation → Formatting → Packaging → Archive

``CodeGenerationService`` turns an already-validated model list into a
``GeneratedProject``; it never re-validates.  ``ProjectPipeline`` is the
end-to-end driver used by the CLI: it runs the validator as a gate, then
generation, formatting, packaging and archiving, timing every step into a
``PipelineReport``.

File order inside a project is fixed (scaffold, then each model in input
order, then auth, shared middleware and the application entry) so two
runs over the same input produce the same file list and contents.
"""

from __future__ import annotations

import json
import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

import yaml

from modelforge.artifacts import ArtifactRenderer
from modelforge.exporters import ProjectExportService, archive_filename
from modelforge.formatter import CodeFormatter, FormatOptions
from modelforge.models import (
    ArtifactKind,
    AuthConfig,
    CrudOperation,
    Endpoint,
    ExportOptions,
    GeneratedFile,
    GeneratedProject,
    GenerationOptions,
    HttpMethod,
    Model,
    ProjectPackage,
    Role,
    UnsupportedOptionError,
    coerce_options,
    default_roles,
    parse_models,
)
from modelforge.templates import TemplateEngine
from modelforge.utils import Timer, count_lines
from modelforge.validators import ValidationResult, validate_models

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelforge.generator")


class ModelValidationFailed(ValueError):
    """The validator rejected the model set; generation did not start."""

    def __init__(self, result: ValidationResult) -> None:
        self.result: ValidationResult = result
        super().__init__(f"Model validation failed: {result.summary()}")


class GenerationError(ValueError):
    """Two artifacts of one project resolved to the same output path."""

    def __init__(self, paths: Sequence[str]) -> None:
        self.paths: List[str] = list(paths)
        super().__init__(
            "Generated files collide at: "
            + ", ".join(self.paths)
            + "; rename the model(s) that clash with the auth module"
        )


def duplicate_paths(files: Sequence[GeneratedFile]) -> List[str]:
    """Paths emitted more than once, in first-seen order."""
    seen: Dict[str, int] = {}
    for f in files:
        seen[f.path] = seen.get(f.path, 0) + 1
    return [path for path, count in seen.items() if count > 1]


def _file(
    path: str, content: str, kind: ArtifactKind, language: Optional[str]
) -> GeneratedFile:
    return GeneratedFile(path=path, content=content, kind=kind, language=language)


# A domain model named "User" owns the User paths and the users table; the
# credential store of the auth module then moves to AuthUser / auth_users.
_AUTH_USER_PATHS: Dict[str, str] = {
    "src/models/User.ts": "src/models/AuthUser.ts",
    "src/repositories/UserRepository.ts": "src/repositories/AuthUserRepository.ts",
    "src/schemas/user.sql": "src/schemas/auth_user.sql",
}

_AUTH_USER_RENAMES: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?<=[\s{<(:,|])User(?=[\s,;|>)}])"), "AuthUser"),
    (re.compile(r"\bUserRepository\b"), "AuthUserRepository"),
    (re.compile(r"'\.\./models/User'"), "'../models/AuthUser'"),
    (re.compile(r"(?<![A-Za-z])users(?![A-Za-z])"), "auth_users"),
)


def relocate_auth_user(file: GeneratedFile) -> GeneratedFile:
    """Rename the auth credential entity inside one auth-module artifact."""
    content: str = file.content
    for pattern, replacement in _AUTH_USER_RENAMES:
        content = pattern.sub(replacement, content)
    return file.model_copy(
        update={"path": _AUTH_USER_PATHS.get(file.path, file.path), "content": content}
    )


def openapi_scaffold(title: str) -> Dict[str, Any]:
    """Minimal API-description document attached to every project."""
    return {
        "openapi": "3.0.0",
        "info": {"title": title, "version": "1.0.0"},
        "servers": [],
        "paths": {},
        "components": {"schemas": {}, "securitySchemes": {}},
    }


# ---------------------------------------------------------------------------
# CodeGenerationService
# ---------------------------------------------------------------------------


class CodeGenerationService:
    """
    Emits every artifact of a backend project for a validated model list.

    Usage::

        service = CodeGenerationService()
        project = service.generate_project(models, GenerationOptions())
        project.file_paths

    The service holds only its template engine; one instance may serve
    any number of runs.
    """

    def __init__(self, engine: Optional[TemplateEngine] = None) -> None:
        self.engine: TemplateEngine = engine or TemplateEngine()
        logger.debug(
            "CodeGenerationService initialised with %d templates.", len(self.engine)
        )

    # -----------------------------------------------------------------
    # Public: whole project
    # -----------------------------------------------------------------

    def generate_project(
        self,
        models: Sequence[Any],
        options: Any = None,
        *,
        project_name: Optional[str] = None,
    ) -> GeneratedProject:
        """
        Build a ``GeneratedProject`` from *models* and *options*.

        Args:
            models: ``Model`` instances or their JSON mappings.
            options: ``GenerationOptions`` or a mapping; ``None`` uses defaults.
            project_name: Fixed project name; defaults to a
                timestamp-qualified ``generated-api-<epoch ms>``.

        Raises:
            UnsupportedOptionError: An option value is outside its
                supported set.  Raised before any artifact is built.
            GenerationError: A model artifact and an auth-module artifact
                share a path (e.g. a model named ``Auth`` or ``AuthUser``
                with authentication enabled).
        """
        opts: GenerationOptions = coerce_options(GenerationOptions, options)
        parsed: List[Model] = parse_models(models)
        run_id: str = str(uuid.uuid4())
        name: str = project_name or f"generated-api-{int(time.time() * 1000)}"
        renderer: ArtifactRenderer = ArtifactRenderer(opts, self.engine)

        files: List[GeneratedFile] = self.generate_scaffold(
            parsed, opts, renderer, package_name=project_name or "generated-api"
        )
        endpoints: List[Endpoint] = []
        for model in parsed:
            files.extend(self.generate_model_files(model, parsed, opts, renderer))
            endpoints.extend(self.generate_crud_endpoints(model, opts))

        auth: AuthConfig = self.build_auth_config(parsed, endpoints, opts)
        if opts.auth_enabled:
            auth_files: List[GeneratedFile] = self.generate_authentication(auth, opts, renderer)
            if any(m.route_name == "user" for m in parsed):
                logger.info("Model 'User' present; auth credential store renamed to AuthUser.")
                auth_files = [relocate_auth_user(f) for f in auth_files]
            files.extend(auth_files)
            endpoints.extend(self.generate_auth_endpoints())

        files.extend(self.generate_middleware(opts, renderer))
        files.append(
            _file("src/app.ts", renderer.render_app(parsed), ArtifactKind.SOURCE, "typescript")
        )

        collisions: List[str] = duplicate_paths(files)
        if collisions:
            logger.error("Project %s has colliding artifact paths: %s", name, collisions)
            raise GenerationError(collisions)

        project: GeneratedProject = GeneratedProject(
            id=run_id,
            name=name,
            models=parsed,
            endpoints=endpoints,
            auth=auth,
            files=files,
            openapi=openapi_scaffold(name),
            options=opts,
        )
        logger.info(
            "Generated project %s: %d models, %d endpoints, %d files.",
            name,
            len(parsed),
            len(endpoints),
            len(files),
        )
        return project

    # -----------------------------------------------------------------
    # Scaffold
    # -----------------------------------------------------------------

    def generate_scaffold(
        self,
        models: Sequence[Model],
        options: GenerationOptions,
        renderer: ArtifactRenderer,
        *,
        package_name: str = "generated-api",
    ) -> List[GeneratedFile]:
        # Sources are always .ts; tsconfig.json is emitted for both languages.
        files: List[GeneratedFile] = [
            _file("package.json", renderer.render_package_json(package_name), ArtifactKind.CONFIG, "json"),
            _file("tsconfig.json", renderer.render_tsconfig(), ArtifactKind.CONFIG, "json"),
            _file(".env.example", renderer.render_env_example(), ArtifactKind.CONFIG, "dotenv"),
            _file("README.md", renderer.render_readme(models), ArtifactKind.DOCUMENTATION, "markdown"),
        ]
        return files

    # -----------------------------------------------------------------
    # Per model
    # -----------------------------------------------------------------

    def generate_model_files(
        self,
        model: Model,
        models: Sequence[Model],
        options: GenerationOptions,
        renderer: ArtifactRenderer,
    ) -> List[GeneratedFile]:
        """Interface, schema, handler, service, repository, routes, validation and test."""
        name: str = model.name
        lower: str = model.route_name
        files: List[GeneratedFile] = [
            _file(f"src/models/{name}.ts", renderer.render_model_interface(model), ArtifactKind.SOURCE, "typescript"),
        ]
        if options.is_relational:
            files.append(
                _file(f"src/schemas/{lower}.sql", renderer.render_schema(model, models), ArtifactKind.SOURCE, "sql")
            )
        files.extend([
            _file(f"src/controllers/{name}Controller.ts", renderer.render_controller(model), ArtifactKind.SOURCE, "typescript"),
            _file(f"src/services/{name}Service.ts", renderer.render_service(model), ArtifactKind.SOURCE, "typescript"),
            _file(f"src/repositories/{name}Repository.ts", renderer.render_repository(model), ArtifactKind.SOURCE, "typescript"),
            _file(f"src/routes/{lower}.ts", renderer.render_routes(model), ArtifactKind.SOURCE, "typescript"),
            _file(f"src/validation/{name}Validation.ts", renderer.render_validation(model), ArtifactKind.SOURCE, "typescript"),
        ])
        if options.include_tests:
            files.append(
                _file(
                    f"src/tests/{name}Controller.test.ts",
                    renderer.render_controller_test(model),
                    ArtifactKind.TEST,
                    "typescript",
                )
            )
        logger.debug("Model %s: %d files.", name, len(files))
        return files

    def generate_crud_endpoints(
        self, model: Model, options: GenerationOptions
    ) -> List[Endpoint]:
        """The five CRUD endpoint descriptors of *model*, in route order."""
        base: str = f"/{model.route_name}"
        guarded: bool = options.auth_enabled and model.metadata.requires_auth
        writers: List[str] = list(model.metadata.allowed_roles) if guarded else []

        def endpoint(
            method: HttpMethod,
            path: str,
            operation: CrudOperation,
            description: str,
            authenticated: bool = False,
            roles: Optional[List[str]] = None,
        ) -> Endpoint:
            return Endpoint(
                path=path,
                method=method,
                model_name=model.name,
                operation=operation,
                authenticated=authenticated,
                roles=roles or [],
                description=description,
            )

        return [
            endpoint(HttpMethod.POST, base, CrudOperation.CREATE, f"Create a new {model.name}", guarded, writers),
            endpoint(HttpMethod.GET, base, CrudOperation.LIST, f"List {model.name} records"),
            endpoint(HttpMethod.GET, f"{base}/:id", CrudOperation.READ, f"Get a {model.name} by ID"),
            endpoint(HttpMethod.PUT, f"{base}/:id", CrudOperation.UPDATE, f"Update a {model.name}", guarded, writers),
            endpoint(
                HttpMethod.DELETE,
                f"{base}/:id",
                CrudOperation.DELETE,
                f"Delete a {model.name}",
                guarded,
                ["admin"] if guarded else [],
            ),
        ]

    # -----------------------------------------------------------------
    # Authentication
    # -----------------------------------------------------------------

    def build_auth_config(
        self,
        models: Sequence[Model],
        endpoints: Sequence[Endpoint],
        options: GenerationOptions,
    ) -> AuthConfig:
        """Default roles plus any extra role a model names, and the protected routes."""
        roles: List[Role] = default_roles()
        known = {r.name for r in roles}
        for model in models:
            for role in model.metadata.allowed_roles:
                if role not in known:
                    roles.append(Role(name=role, permissions=["read"]))
                    known.add(role)
        protected: List[str] = [e.route_key for e in endpoints if e.authenticated]
        return AuthConfig(type=options.authentication, roles=roles, protected_routes=protected)

    def generate_auth_endpoints(self) -> List[Endpoint]:
        return [
            Endpoint(
                path="/auth/login",
                method=HttpMethod.POST,
                model_name="User",
                operation=CrudOperation.READ,
                description="Authenticate a user",
            ),
            Endpoint(
                path="/auth/register",
                method=HttpMethod.POST,
                model_name="User",
                operation=CrudOperation.CREATE,
                description="Register a new user",
            ),
        ]

    def generate_authentication(
        self,
        auth: AuthConfig,
        options: GenerationOptions,
        renderer: ArtifactRenderer,
    ) -> List[GeneratedFile]:
        ts: str = "typescript"
        files: List[GeneratedFile] = [
            _file("src/models/User.ts", renderer.render_user_model(auth), ArtifactKind.SOURCE, ts),
            _file("src/services/AuthService.ts", renderer.render_auth_service(auth), ArtifactKind.SOURCE, ts),
            _file("src/controllers/AuthController.ts", renderer.render_auth_controller(auth), ArtifactKind.SOURCE, ts),
            _file("src/middleware/auth.ts", renderer.render_auth_middleware(auth), ArtifactKind.SOURCE, ts),
            _file("src/middleware/authorize.ts", renderer.render_authorization_middleware(auth), ArtifactKind.SOURCE, ts),
            _file("src/routes/auth.ts", renderer.render_auth_routes(), ArtifactKind.SOURCE, ts),
            _file("src/repositories/UserRepository.ts", renderer.render_user_repository(), ArtifactKind.SOURCE, ts),
            _file("src/validation/AuthValidation.ts", renderer.render_auth_validation(auth), ArtifactKind.SOURCE, ts),
        ]
        if options.is_relational:
            files.append(
                _file("src/schemas/user.sql", renderer.render_user_schema(auth), ArtifactKind.SOURCE, "sql")
            )
        logger.debug("Authentication (%s): %d files.", auth.type, len(files))
        return files

    # -----------------------------------------------------------------
    # Shared middleware
    # -----------------------------------------------------------------

    def generate_middleware(
        self, options: GenerationOptions, renderer: ArtifactRenderer
    ) -> List[GeneratedFile]:
        """Database connection plus the CORS, logging and validation middleware."""
        ts: str = "typescript"
        return [
            _file("src/database/connection.ts", renderer.render_connection(), ArtifactKind.SOURCE, ts),
            _file("src/middleware/cors.ts", renderer.render_cors_middleware(), ArtifactKind.SOURCE, ts),
            _file("src/middleware/logging.ts", renderer.render_logging_middleware(), ArtifactKind.SOURCE, ts),
            _file("src/middleware/validation.ts", renderer.render_validation_middleware(), ArtifactKind.SOURCE, ts),
        ]


# ---------------------------------------------------------------------------
# Input loading
# ---------------------------------------------------------------------------


class PipelineInput(NamedTuple):
    """Decoded input document: raw models plus parsed option sets."""

    models: List[Any]
    options: GenerationOptions
    export_options: ExportOptions
    project_name: Optional[str]


def _load_json_file(path: Path) -> Any:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def _load_yaml_file(path: Path) -> Any:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc


def load_input_file(path: Path) -> Dict[str, Any]:
    """
    Load a model document (JSON or YAML).

    Dispatches on the file extension; unknown extensions try JSON, then
    YAML.  A top-level list is wrapped as ``{"models": [...]}``.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed or has the wrong shape.
    """
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Input path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data: Any = _load_yaml_file(path)
    elif suffix == ".json":
        data = _load_json_file(path)
    else:
        logger.info("Unknown extension '%s'; trying JSON then YAML.", suffix)
        try:
            data = _load_json_file(path)
        except ValueError:
            data = _load_yaml_file(path)

    if isinstance(data, list):
        data = {"models": data}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a mapping or a list of models at top level, got {type(data).__name__}."
        )
    return data


def _merge_overrides(
    options_cls: type, base: Any, overrides: Optional[Dict[str, Any]]
) -> Dict[str, Any]:
    """Apply *overrides* on top of *base*, replacing either spelling of a key."""
    if not isinstance(base, dict):
        raise ValueError(f"{options_cls.__name__} section must be a mapping.")
    merged: Dict[str, Any] = dict(base)
    for key, value in (overrides or {}).items():
        for name, info in options_cls.model_fields.items():
            if key in (name, info.alias):
                merged.pop(name, None)
                if info.alias:
                    merged.pop(info.alias, None)
                break
        merged[key] = value
    return merged


def parse_raw_input(
    raw: Dict[str, Any],
    *,
    option_overrides: Optional[Dict[str, Any]] = None,
    export_overrides: Optional[Dict[str, Any]] = None,
) -> PipelineInput:
    """
    Split a decoded input document into models and option sets.

    Recognised keys: ``models``; ``options`` / ``generationOptions``;
    ``export`` / ``exportOptions``; ``projectName`` / ``project_name``.
    Models stay raw so the validator can report on malformed entries.

    Raises:
        ValueError: ``models`` is missing or not a list.
        UnsupportedOptionError: An option value is outside its set.
    """
    models: Any = raw.get("models")
    if not isinstance(models, list):
        raise ValueError("Input must contain a 'models' list.")

    option_data: Dict[str, Any] = _merge_overrides(
        GenerationOptions,
        raw.get("options") or raw.get("generationOptions") or {},
        option_overrides,
    )
    export_data: Dict[str, Any] = _merge_overrides(
        ExportOptions,
        raw.get("export") or raw.get("exportOptions") or {},
        export_overrides,
    )

    options: GenerationOptions = coerce_options(GenerationOptions, option_data)
    export_options: ExportOptions = coerce_options(ExportOptions, export_data)
    name: Optional[str] = raw.get("projectName") or raw.get("project_name")
    logger.info(
        "Parsed input: %d models, options %r, export %s/%s.",
        len(models),
        options,
        export_options.format,
        export_options.template,
    )
    return PipelineInput(models, options, export_options, name)


# ---------------------------------------------------------------------------
# Pipeline report
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class PipelineStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(slots=True)
class PipelineReport:
    """Result of ``ProjectPipeline.run``: artefacts plus per-step metrics."""

    success: bool = False
    project_name: str = ""
    total_models: int = 0
    total_endpoints: int = 0
    total_files: int = 0
    total_lines: int = 0
    total_elapsed_seconds: float = 0.0
    archive_name: str = ""
    archive_size: int = 0

    step_metrics: List[PipelineStepMetric] = field(default_factory=list)
    validation: Optional[ValidationResult] = None
    project: Optional[GeneratedProject] = None
    package: Optional[ProjectPackage] = None
    archive: bytes = b""

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        lines.append(f"{'='*60}")
        lines.append("  ModelForge - Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Project:          {self.project_name}")
        lines.append(f"  Models:           {self.total_models}")
        lines.append(f"  Endpoints:        {self.total_endpoints}")
        lines.append(f"  Files packaged:   {self.total_files}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Archive:          {self.archive_name} ({self.archive_size:,} bytes)")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'-'*60}")
        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "+" if step.success else "x"
                lines.append(
                    f"    {icon} {step.step_name:<20s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )
        if self.validation is not None and len(self.validation):
            lines.append(f"{'-'*60}")
            lines.append(self.validation.format_report())
        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# ProjectPipeline
# ---------------------------------------------------------------------------


class ProjectPipeline:
    """
    Validate → generate → format → package → archive.

    Usage::

        pipeline = ProjectPipeline()
        report = pipeline.run(models, GenerationOptions(), ExportOptions())
        Path(report.archive_name).write_bytes(report.archive)

    Raises ``ModelValidationFailed`` when the validator reports errors and
    ``UnsupportedOptionError`` for out-of-set option values.  Warnings and
    circular references are logged and carried on the report.
    """

    def __init__(
        self,
        *,
        engine: Optional[TemplateEngine] = None,
        format_output: bool = True,
        format_options: Optional[FormatOptions] = None,
    ) -> None:
        self._generator: CodeGenerationService = CodeGenerationService(engine)
        self._formatter: CodeFormatter = CodeFormatter(format_options)
        self._exporter: ProjectExportService = ProjectExportService()
        self._format_output: bool = format_output
        logger.debug("ProjectPipeline initialised: format_output=%s.", format_output)

    def validate(self, models: Sequence[Any]) -> ValidationResult:
        result: ValidationResult = validate_models(models)
        for issue in result.warnings:
            logger.warning("  %s", issue)
        for cycle in result.circular_references:
            logger.warning("  Circular reference: %s", cycle)
        if result.has_errors:
            for issue in result.errors:
                logger.error("  %s", issue)
        logger.info("Validation: %s", result.summary())
        return result

    def run(
        self,
        models: Sequence[Any],
        options: Any = None,
        export_options: Any = None,
        *,
        project_name: Optional[str] = None,
    ) -> PipelineReport:
        report: PipelineReport = PipelineReport()
        pipeline_start: float = time.perf_counter()

        opts: GenerationOptions = coerce_options(GenerationOptions, options)
        export_opts: ExportOptions = coerce_options(ExportOptions, export_options)

        with Timer("validation") as t:
            result: ValidationResult = self.validate(models)
        report.validation = result
        report.step_metrics.append(PipelineStepMetric(
            step_name="Validate Models",
            success=result.is_valid,
            elapsed_seconds=t.elapsed,
            detail=result.summary(),
        ))
        if not result.is_valid:
            raise ModelValidationFailed(result)

        with Timer("generation") as t:
            project: GeneratedProject = self._generator.generate_project(
                models, opts, project_name=project_name
            )
        report.project = project
        report.project_name = project.name
        report.total_models = len(project.models)
        report.total_endpoints = len(project.endpoints)
        report.step_metrics.append(PipelineStepMetric(
            step_name="Generate Code",
            elapsed_seconds=t.elapsed,
            detail=f"{len(project.files)} files",
        ))

        if self._format_output:
            with Timer("formatting") as t:
                project = project.model_copy(
                    update={"files": self._formatter.format_files(project.files)}
                )
            report.project = project
            report.step_metrics.append(PipelineStepMetric(
                step_name="Format Files",
                elapsed_seconds=t.elapsed,
                detail=f"{len(project.files)} files",
            ))

        with Timer("packaging") as t:
            package: ProjectPackage = self._exporter.create_project_package(project, export_opts)
        report.package = package
        report.total_files = len(package.files)
        report.total_lines = sum(count_lines(f.content) for f in package.files)
        report.step_metrics.append(PipelineStepMetric(
            step_name="Package Project",
            elapsed_seconds=t.elapsed,
            detail=f"{len(package.files)} files, tier {export_opts.template}",
        ))

        with Timer("archiving") as t:
            archive: bytes = self._exporter.create_archive(package, export_opts.format)
        report.archive = archive
        report.archive_name = archive_filename(package.name, export_opts.format)
        report.archive_size = len(archive)
        report.step_metrics.append(PipelineStepMetric(
            step_name="Create Archive",
            elapsed_seconds=t.elapsed,
            detail=f"{report.archive_name}",
        ))

        report.success = True
        report.total_elapsed_seconds = time.perf_counter() - pipeline_start
        logger.info(
            "Pipeline complete: %s, %d files, %d bytes in %.3fs.",
            report.archive_name,
            report.total_files,
            report.archive_size,
            report.total_elapsed_seconds,
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CodeGenerationService",
    "UnsupportedOptionError",
    "ModelValidationFailed",
    "GenerationError",
    "duplicate_paths",
    "ProjectPipeline",
    "PipelineReport",
    "PipelineStepMetric",
    "PipelineInput",
    "openapi_scaffold",
    "relocate_auth_user",
    "load_input_file",
    "parse_raw_input",
]

logger.debug("modelforge.generator loaded: %d public symbols.", len(__all__))
