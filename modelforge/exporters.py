# File: modelforge/exporters.py
"""
ModelForge - Project Export Service
====================================
Turns a ``GeneratedProject`` into a downloadable ``ProjectPackage`` and
serialises that package as a zip or gzip-compressed tar archive.

Packaging steps:

1. Drop test / documentation artifacts the export options exclude.
2. Append the template tier's auxiliary files (basic → advanced →
   enterprise, each a superset of the previous tier).
3. Derive ``project.json`` metadata from ``package.json`` and the options.
4. Render ``SETUP.md`` with database- and auth-specific instructions.

Every archive carries ``project.json`` and ``SETUP.md`` at its root in
addition to the package files, each at its declared relative path.
"""

from __future__ import annotations

import io
import json
import logging
import tarfile
import uuid
import zipfile
from typing import Any, Dict, List, Optional, Tuple

import yaml

from modelforge.mappings import DATABASE_LABELS, DATABASE_SERVICES, DATABASE_URLS, TOKEN_SECRETS
from modelforge.models import (
    ArtifactKind,
    AuthStrategy,
    Database,
    ExportFormat,
    ExportOptions,
    GeneratedFile,
    GeneratedProject,
    Model,
    ProjectMetadata,
    ProjectPackage,
    TemplateTier,
    UnsupportedOptionError,
    coerce_options,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelforge.exporters")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

METADATA_FILENAME: str = "project.json"
SETUP_FILENAME: str = "SETUP.md"

AUTH_SCHEMA_PATHS: Tuple[str, ...] = ("src/schemas/user.sql", "src/schemas/auth_user.sql")

ARCHIVE_EXTENSIONS: Dict[str, str] = {
    ExportFormat.ZIP.value: ".zip",
    ExportFormat.TAR.value: ".tar.gz",
}

ARCHIVE_MEDIA_TYPES: Dict[str, str] = {
    ExportFormat.ZIP.value: "application/zip",
    ExportFormat.TAR.value: "application/gzip",
}

TIER_FEATURES: Dict[str, Tuple[str, ...]] = {
    TemplateTier.BASIC.value: ("Docker support",),
    TemplateTier.ADVANCED.value: ("Docker support", "CI pipeline", "Linting and formatting"),
    TemplateTier.ENTERPRISE.value: (
        "Docker support",
        "CI pipeline",
        "Linting and formatting",
        "Kubernetes deployment",
        "Helm chart",
        "Prometheus monitoring",
    ),
}

_GITIGNORE: str = """\
# Dependencies
node_modules/
npm-debug.log*
yarn-debug.log*
yarn-error.log*

# Coverage
coverage/
*.lcov
.nyc_output

# Environment variables
.env
.env.local
.env.*.local

# Build outputs
dist/
build/

# IDE files
.vscode/
.idea/
*.swp

# OS files
.DS_Store
Thumbs.db

# Logs
logs
*.log
"""

_DOCKERFILE: str = """\
FROM node:18-alpine

WORKDIR /app

COPY package*.json ./
RUN npm ci

COPY . .
RUN npm run build --if-present

EXPOSE 3000

CMD ["npm", "start"]
"""

_ESLINTRC: str = """\
module.exports = {
  env: {
    node: true,
    es2021: true,
  },
  extends: ['eslint:recommended', 'plugin:@typescript-eslint/recommended'],
  parser: '@typescript-eslint/parser',
  parserOptions: {
    ecmaVersion: 12,
    sourceType: 'module',
  },
  plugins: ['@typescript-eslint'],
  rules: {
    indent: ['error', 2],
    'linebreak-style': ['error', 'unix'],
    quotes: ['error', 'single'],
    semi: ['error', 'always'],
  },
};
"""


class ArchiveError(RuntimeError):
    """Writing an archive stream failed."""


def _dump_yaml(data: Any) -> str:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def _config(path: str, content: str, language: Optional[str] = None) -> GeneratedFile:
    return GeneratedFile(path=path, content=content, kind=ArtifactKind.CONFIG, language=language)


def _count(n: int, noun: str) -> str:
    return f"{n} {noun}" if n == 1 else f"{n} {noun}s"


def _model_summary(model: Model, auth_enabled: bool) -> str:
    """One SETUP.md line per model: route, field and relationship counts."""
    segment: str = model.route_name
    line: str = (
        f"- `{model.name}` (`/{segment}`): {_count(len(model.fields), 'field')}, "
        f"{_count(len(model.relationships), 'relationship')}; "
        f"CRUD at `/{segment}` and `/{segment}/:id`"
    )
    if auth_enabled and model.metadata.requires_auth:
        line += "; writes require sign-in"
    return line


# ---------------------------------------------------------------------------
# ProjectExportService
# ---------------------------------------------------------------------------


class ProjectExportService:
    """
    Builds packages and archives.  Stateless; one instance can serve any
    number of concurrent exports.

    Usage::

        exporter = ProjectExportService()
        package = exporter.create_project_package(project, {"template": "advanced"})
        data = exporter.create_archive(package, "tar")
    """

    # -----------------------------------------------------------------
    # Packaging
    # -----------------------------------------------------------------

    def create_project_package(
        self,
        project: GeneratedProject,
        export_options: Any = None,
    ) -> ProjectPackage:
        options: ExportOptions = coerce_options(ExportOptions, export_options)

        files: List[GeneratedFile] = list(project.files)
        if not options.include_tests:
            files = [f for f in files if f.kind != ArtifactKind.TEST.value]
        if not options.include_documentation:
            files = [f for f in files if f.kind != ArtifactKind.DOCUMENTATION.value]
        dropped: int = len(project.files) - len(files)

        tier_files: List[GeneratedFile] = self.generate_template_files(project, options.template)
        files.extend(tier_files)

        package = ProjectPackage(
            id=str(uuid.uuid4()),
            name=project.name,
            files=files,
            metadata=self.generate_metadata(project, options),
            setup_instructions=self.generate_setup_instructions(project, options),
        )
        logger.info(
            "Packaged '%s': %d files (%d filtered out, %d %s tier files).",
            package.name,
            len(package.files),
            dropped,
            len(tier_files),
            options.template,
        )
        return package

    def generate_metadata(
        self, project: GeneratedProject, options: ExportOptions
    ) -> ProjectMetadata:
        """Echo the options and lift dependency maps out of ``package.json``."""
        gen = project.options
        dependencies: Dict[str, str] = {}
        dev_dependencies: Dict[str, str] = {}
        scripts: Dict[str, str] = {}

        manifest: Optional[GeneratedFile] = project.get_file("package.json")
        if manifest is None:
            logger.warning("No package.json in project '%s'; metadata maps left empty.", project.name)
        else:
            try:
                parsed: Dict[str, Any] = json.loads(manifest.content)
                dependencies = dict(parsed.get("dependencies") or {})
                dev_dependencies = dict(parsed.get("devDependencies") or {})
                scripts = dict(parsed.get("scripts") or {})
            except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as exc:
                logger.warning("Failed to parse package.json for metadata: %s", exc)
                dependencies, dev_dependencies, scripts = {}, {}, {}

        features: List[str] = [
            f"{gen.framework} framework",
            f"{gen.database} database",
            f"{gen.authentication} authentication",
            "RESTful API endpoints",
            "Input validation",
            "Error handling",
        ]
        if gen.include_tests and options.include_tests:
            features.append("Test suite")
        if gen.include_documentation and options.include_documentation:
            features.append("OpenAPI documentation")
        if project.models:
            features.append(f"{len(project.models)} data models")
        if project.endpoints:
            features.append(f"{len(project.endpoints)} API endpoints")
        features.extend(TIER_FEATURES[options.template])

        return ProjectMetadata(
            name=project.name,
            description=(
                f"Generated API project with {len(project.models)} models "
                f"and {len(project.endpoints)} endpoints"
            ),
            framework=gen.framework,
            database=gen.database,
            authentication=gen.authentication,
            language=gen.language,
            template=options.template,
            features=features,
            dependencies=dependencies,
            dev_dependencies=dev_dependencies,
            scripts=scripts,
        )

    def generate_setup_instructions(
        self, project: GeneratedProject, options: ExportOptions
    ) -> str:
        """
        SETUP.md text: prerequisites, environment, schema and start steps.

        The environment section lists the variables of whichever auth
        strategy is active, not only the token secrets: ``JWT_*`` for
        ``jwt``, ``SESSION_SECRET`` for ``session``, and ``SESSION_SECRET``
        plus the ``OAUTH_*`` provider settings for ``oauth``.  Each model
        gets one summary line under "Available Endpoints".
        """
        gen = project.options
        db: str = gen.database
        label: str = DATABASE_LABELS[db]
        out: List[str] = [
            f"# {project.name} - Setup Instructions",
            "",
            "This is an automatically generated API project. Follow these steps to get it running.",
            "",
            "## Prerequisites",
            "",
            "- Node.js (version 16 or higher)",
            "- npm or yarn package manager",
            f"- {label} database server",
            "",
            "## Installation Steps",
            "",
            "### 1. Install Dependencies",
            "",
            "```bash",
            "npm install",
            "```",
            "",
            "### 2. Environment Configuration",
            "",
            "Copy the example environment file and configure your settings:",
            "",
            "```bash",
            "cp .env.example .env",
            "```",
            "",
            "- **PORT**: Server port (default: 3000)",
            "- **NODE_ENV**: Environment (development/production)",
            f"- **DATABASE_URL**: {label} connection string",
            f"  - Format: `{DATABASE_URLS[db]}`",
        ]
        if gen.authentication == AuthStrategy.JWT.value:
            out.extend([
                "- **JWT_SECRET**: Secret key for JWT tokens (use a strong, random string)",
                "- **JWT_REFRESH_SECRET**: Secret key for refresh tokens",
                "- **JWT_EXPIRES_IN**: Token expiration time (default: 15m)",
            ])
        elif gen.authentication == AuthStrategy.SESSION.value:
            out.append("- **SESSION_SECRET**: Secret used to sign session cookies")
        elif gen.authentication == AuthStrategy.OAUTH.value:
            out.extend([
                "- **SESSION_SECRET**: Secret used to sign the login session cookie",
                "- **OAUTH_CLIENT_ID** / **OAUTH_CLIENT_SECRET**: OAuth client credentials",
                "- **OAUTH_AUTHORIZATION_URL** / **OAUTH_TOKEN_URL**: Provider endpoints",
                "- **OAUTH_CALLBACK_URL**: Redirect target registered with the provider",
            ])

        out.extend(["", "### 3. Database Setup", ""])
        # Credential tables first so model tables may reference them.
        schema_files: List[str] = sorted(
            (f.path for f in project.files if f.path.startswith("src/schemas/")),
            key=lambda path: path not in AUTH_SCHEMA_PATHS,
        )
        if db == Database.POSTGRESQL.value:
            out.extend([
                "Create a PostgreSQL database and run the schema files:",
                "",
                "```bash",
                "createdb your_database_name",
            ])
            out.extend(f"psql -d your_database_name -f {path}" for path in schema_files)
            out.append("```")
        elif db == Database.MYSQL.value:
            out.extend([
                "Create a MySQL database and run the schema files:",
                "",
                "```bash",
                'mysql -u root -p -e "CREATE DATABASE your_database_name;"',
            ])
            out.extend(f"mysql -u root -p your_database_name < {path}" for path in schema_files)
            out.append("```")
        else:
            out.append("MongoDB creates collections on first write; no schema step is required.")

        out.extend([
            "",
            "### 4. Start the Application",
            "",
            "```bash",
            "npm run dev",
            "```",
            "",
            "For production:",
            "",
            "```bash",
            "npm run build",
            "npm start",
            "```",
            "",
            "## Available Endpoints",
            "",
            "The API is served at `http://localhost:3000` with a health check at `GET /health`.",
        ])
        if gen.auth_enabled:
            out.extend([
                "",
                "### Authentication",
                "",
                "- `POST /auth/register` - User registration",
                "- `POST /auth/login` - User login",
            ])
        if project.models:
            out.extend(["", "### Models", ""])
            out.extend(_model_summary(model, gen.auth_enabled) for model in project.models)
        if gen.include_tests and options.include_tests:
            out.extend(["", "## Running Tests", "", "```bash", "npm test", "```"])

        out.extend([
            "",
            "## Project Structure",
            "",
            "- `src/app.ts` - Application entry point",
            "- `src/controllers/` - Request handlers",
            "- `src/services/` - Business logic",
            "- `src/repositories/` - Data access layer",
            "- `src/models/` - Data models and interfaces",
            "- `src/routes/` - Route definitions",
            "- `src/middleware/` - Custom middleware",
            "- `src/validation/` - Input validation rules",
            "- `src/database/` - Database connection",
        ])
        if gen.include_tests and options.include_tests:
            out.append("- `src/tests/` - Test files")
        return "\n".join(out) + "\n"

    # -----------------------------------------------------------------
    # Tier files
    # -----------------------------------------------------------------

    def generate_template_files(
        self, project: GeneratedProject, template: str
    ) -> List[GeneratedFile]:
        files: List[GeneratedFile] = self._basic_files(project)
        if template in (TemplateTier.ADVANCED.value, TemplateTier.ENTERPRISE.value):
            files.extend(self._advanced_files())
        if template == TemplateTier.ENTERPRISE.value:
            files.extend(self._enterprise_files(project))
        for f in files:
            logger.debug("Tier file %s (%s).", f.path, template)
        return files

    def _basic_files(self, project: GeneratedProject) -> List[GeneratedFile]:
        return [
            _config(".gitignore", _GITIGNORE),
            _config("Dockerfile", _DOCKERFILE, "dockerfile"),
            _config("docker-compose.yml", self.generate_docker_compose(project), "yaml"),
        ]

    @staticmethod
    def generate_docker_compose(project: GeneratedProject) -> str:
        gen = project.options
        service = DATABASE_SERVICES[gen.database]
        environment: List[str] = ["NODE_ENV=development", "DATABASE_URL=${DATABASE_URL}"]
        if gen.token_auth:
            environment.extend(f"{name}=${{{name}}}" for name in TOKEN_SECRETS)
        elif gen.session_auth:
            environment.append("SESSION_SECRET=${SESSION_SECRET}")
        compose: Dict[str, Any] = {
            "version": "3.8",
            "services": {
                "app": {
                    "build": ".",
                    "ports": ["3000:3000"],
                    "environment": environment,
                    "depends_on": ["db"],
                    "volumes": [".:/app", "/app/node_modules"],
                },
                "db": {
                    "image": service.image,
                    "environment": list(service.environment),
                    "ports": [f"{service.port}:{service.port}"],
                    "volumes": [f"{service.volume}:{service.data_dir}"],
                },
            },
            "volumes": {service.volume: None},
        }
        return _dump_yaml(compose)

    @staticmethod
    def _advanced_files() -> List[GeneratedFile]:
        workflow: Dict[str, Any] = {
            "name": "CI",
            "on": {
                "push": {"branches": ["main", "develop"]},
                "pull_request": {"branches": ["main"]},
            },
            "jobs": {
                "test": {
                    "runs-on": "ubuntu-latest",
                    "strategy": {"matrix": {"node-version": ["16.x", "18.x", "20.x"]}},
                    "steps": [
                        {"uses": "actions/checkout@v3"},
                        {
                            "name": "Use Node.js ${{ matrix.node-version }}",
                            "uses": "actions/setup-node@v3",
                            "with": {"node-version": "${{ matrix.node-version }}", "cache": "npm"},
                        },
                        {"run": "npm ci"},
                        {"run": "npm run build --if-present"},
                        {"run": "npm test"},
                    ],
                }
            },
        }
        prettier: Dict[str, Any] = {
            "semi": True,
            "trailingComma": "es5",
            "singleQuote": True,
            "printWidth": 80,
            "tabWidth": 2,
        }
        return [
            _config(".github/workflows/ci.yml", _dump_yaml(workflow), "yaml"),
            _config(".eslintrc.js", _ESLINTRC, "javascript"),
            _config(".prettierrc", json.dumps(prettier, indent=2) + "\n", "json"),
        ]

    @staticmethod
    def _enterprise_files(project: GeneratedProject) -> List[GeneratedFile]:
        name: str = project.name
        secrets: str = f"{name}-secrets"
        env: List[Dict[str, Any]] = [
            {"name": "NODE_ENV", "value": "production"},
            {
                "name": "DATABASE_URL",
                "valueFrom": {"secretKeyRef": {"name": secrets, "key": "database-url"}},
            },
        ]
        if project.options.token_auth:
            env.append({
                "name": "JWT_SECRET",
                "valueFrom": {"secretKeyRef": {"name": secrets, "key": "jwt-secret"}},
            })
        deployment: Dict[str, Any] = {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": {"name": name, "labels": {"app": name}},
            "spec": {
                "replicas": 3,
                "selector": {"matchLabels": {"app": name}},
                "template": {
                    "metadata": {"labels": {"app": name}},
                    "spec": {
                        "containers": [{
                            "name": name,
                            "image": f"{name}:latest",
                            "ports": [{"containerPort": 3000}],
                            "env": env,
                        }]
                    },
                },
            },
        }
        service: Dict[str, Any] = {
            "apiVersion": "v1",
            "kind": "Service",
            "metadata": {"name": f"{name}-service"},
            "spec": {
                "selector": {"app": name},
                "ports": [{"protocol": "TCP", "port": 80, "targetPort": 3000}],
                "type": "LoadBalancer",
            },
        }
        chart: Dict[str, Any] = {
            "apiVersion": "v2",
            "name": name,
            "description": f"A Helm chart for {name}",
            "type": "application",
            "version": "0.1.0",
            "appVersion": "1.0.0",
        }
        prometheus: Dict[str, Any] = {
            "global": {"scrape_interval": "15s"},
            "scrape_configs": [{
                "job_name": name,
                "static_configs": [{"targets": ["localhost:3000"]}],
                "metrics_path": "/metrics",
            }],
        }
        return [
            _config(
                "k8s/deployment.yml",
                yaml.safe_dump_all([deployment, service], sort_keys=False),
                "yaml",
            ),
            _config("helm/Chart.yaml", _dump_yaml(chart), "yaml"),
            _config("monitoring/prometheus.yml", _dump_yaml(prometheus), "yaml"),
        ]

    # -----------------------------------------------------------------
    # Archives
    # -----------------------------------------------------------------

    @staticmethod
    def _entries(package: ProjectPackage) -> List[Tuple[str, bytes]]:
        metadata: str = json.dumps(
            package.metadata.model_dump(mode="json", by_alias=True), indent=2
        )
        entries: List[Tuple[str, bytes]] = [
            (METADATA_FILENAME, (metadata + "\n").encode("utf-8")),
            (SETUP_FILENAME, package.setup_instructions.encode("utf-8")),
        ]
        entries.extend((f.path, f.content.encode("utf-8")) for f in package.files)
        return entries

    def create_zip_archive(self, package: ProjectPackage) -> bytes:
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
                for path, data in self._entries(package):
                    zf.writestr(path, data)
        except (OSError, zipfile.BadZipFile, ValueError) as exc:
            raise ArchiveError(f"Failed to build zip archive for '{package.name}': {exc}") from exc
        result: bytes = buffer.getvalue()
        logger.info("Zip archive for '%s': %d bytes.", package.name, len(result))
        return result

    def create_tar_archive(self, package: ProjectPackage) -> bytes:
        buffer = io.BytesIO()
        mtime: float = package.created_at.timestamp()
        try:
            with tarfile.open(fileobj=buffer, mode="w:gz", compresslevel=9) as tf:
                for path, data in self._entries(package):
                    info = tarfile.TarInfo(name=path)
                    info.size = len(data)
                    info.mtime = int(mtime)
                    info.mode = 0o644
                    tf.addfile(info, io.BytesIO(data))
        except (OSError, tarfile.TarError, ValueError) as exc:
            raise ArchiveError(f"Failed to build tar archive for '{package.name}': {exc}") from exc
        result: bytes = buffer.getvalue()
        logger.info("Tar archive for '%s': %d bytes.", package.name, len(result))
        return result

    def create_archive(self, package: ProjectPackage, format: str = ExportFormat.ZIP.value) -> bytes:
        fmt: str = format.value if isinstance(format, ExportFormat) else str(format)
        if fmt == ExportFormat.ZIP.value:
            return self.create_zip_archive(package)
        if fmt == ExportFormat.TAR.value:
            return self.create_tar_archive(package)
        raise UnsupportedOptionError("format", format, [f.value for f in ExportFormat])


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def archive_filename(name: str, format: str = ExportFormat.ZIP.value) -> str:
    """``<name>.zip`` or ``<name>.tar.gz``."""
    fmt: str = format.value if isinstance(format, ExportFormat) else str(format)
    if fmt not in ARCHIVE_EXTENSIONS:
        raise UnsupportedOptionError("format", format, list(ARCHIVE_EXTENSIONS))
    return f"{name}{ARCHIVE_EXTENSIONS[fmt]}"


def archive_media_type(format: str = ExportFormat.ZIP.value) -> str:
    fmt: str = format.value if isinstance(format, ExportFormat) else str(format)
    if fmt not in ARCHIVE_MEDIA_TYPES:
        raise UnsupportedOptionError("format", format, list(ARCHIVE_MEDIA_TYPES))
    return ARCHIVE_MEDIA_TYPES[fmt]


def get_export_info() -> Dict[str, Any]:
    """Static description of supported formats, tiers and default options."""
    return {
        "formats": [f.value for f in ExportFormat],
        "templates": [t.value for t in TemplateTier],
        "defaultOptions": ExportOptions().model_dump(mode="json", by_alias=True),
        "mediaTypes": dict(ARCHIVE_MEDIA_TYPES),
        "extensions": dict(ARCHIVE_EXTENSIONS),
        "tierFeatures": {tier: list(features) for tier, features in TIER_FEATURES.items()},
    }


__all__: List[str] = [
    "ArchiveError",
    "ProjectExportService",
    "archive_filename",
    "archive_media_type",
    "get_export_info",
    "METADATA_FILENAME",
    "SETUP_FILENAME",
]

logger.debug("modelforge.exporters loaded: %d public symbols.", len(__all__))
