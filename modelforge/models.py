# File: modelforge/models.py
"""
ModelForge - Core Data Models
==============================
Pydantic V2 models for the intermediate representation (IR) of a modeled
data domain and for every object the pipeline produces from it:

    Model / FieldDefinition / Relationship   (input IR)
    GenerationOptions / ExportOptions        (per-run configuration)
    GeneratedFile / Endpoint / AuthConfig    (generation output)
    GeneratedProject / ProjectPackage        (aggregates)

Python attributes are snake_case.  Each model also reads and writes the
camelCase JSON keys used by the visual editor (``targetModel``,
``includeTests``...), so a JSON document produced by the editor validates
as-is and ``model_dump(by_alias=True)`` reproduces it.

All IR and output entities are frozen: once built they are never mutated,
which lets one instance be shared by every generation step.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from modelforge.utils import count_lines, default_table_name, sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelforge.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class FieldType(str, Enum):
    """Declared type of a model field."""

    STRING = "string"
    TEXT = "text"
    NUMBER = "number"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    EMAIL = "email"
    URL = "url"
    UUID = "uuid"
    JSON = "json"


class ValidationRuleType(str, Enum):
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    CUSTOM = "custom"


class RelationshipType(str, Enum):
    """Relationship cardinalities."""

    ONE_TO_ONE = "oneToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_MANY = "manyToMany"


class Framework(str, Enum):
    EXPRESS = "express"
    FASTIFY = "fastify"
    KOA = "koa"


class Database(str, Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"


class AuthStrategy(str, Enum):
    """Authentication strategy of the generated service; ``none`` disables auth."""

    NONE = "none"
    JWT = "jwt"
    OAUTH = "oauth"
    SESSION = "session"


class Language(str, Enum):
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"


class ArtifactKind(str, Enum):
    """Kind of a generated file; drives export filtering."""

    SOURCE = "source"
    CONFIG = "config"
    DOCUMENTATION = "documentation"
    TEST = "test"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class CrudOperation(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"


class ExportFormat(str, Enum):
    ZIP = "zip"
    TAR = "tar"


class TemplateTier(str, Enum):
    """Bundle of auxiliary deployment files added at export time."""

    BASIC = "basic"
    ADVANCED = "advanced"
    ENTERPRISE = "enterprise"


RELATIONAL_DATABASES = frozenset({Database.POSTGRESQL.value, Database.MYSQL.value})

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG = ConfigDict(
    strict=False,
    populate_by_name=True,
    use_enum_values=True,
    frozen=True,
    extra="ignore",
    protected_namespaces=(),
)

_OPTIONS_CONFIG = ConfigDict(
    strict=False,
    populate_by_name=True,
    use_enum_values=True,
    frozen=True,
    extra="forbid",
    protected_namespaces=(),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# IR: fields, relationships, models
# ---------------------------------------------------------------------------


class ValidationRule(BaseModel):
    """One declared validation constraint on a field (``maxLength: 50``...)."""

    model_config = _FROZEN_CONFIG

    type: ValidationRuleType = Field(..., description="Rule kind.")
    value: Union[int, float, str] = Field(..., description="Rule operand.")
    message: Optional[str] = Field(default=None, description="Custom error message.")

    def __repr__(self) -> str:
        return f"<ValidationRule {self.type}={self.value!r}>"


class FieldDefinition(BaseModel):
    """A single field (column / property) of a model."""

    model_config = _FROZEN_CONFIG

    id: Optional[str] = Field(default=None, description="Editor-assigned identifier.")
    name: str = Field(..., min_length=1, max_length=100, description="Field name.")
    type: FieldType = Field(..., description="Declared field type.")
    required: bool = Field(default=False, description="NOT NULL / mandatory input.")
    unique: bool = Field(default=False, description="Unique constraint.")
    default_value: Any = Field(
        default=None, alias="defaultValue", description="Optional default."
    )
    validation: List[ValidationRule] = Field(
        default_factory=list, description="Ordered validation rules."
    )
    description: Optional[str] = Field(default=None, description="Free-text doc.")

    def rule(self, rule_type: Union[ValidationRuleType, str]) -> Optional[ValidationRule]:
        """First rule of the given type, or None."""
        wanted: str = rule_type.value if isinstance(rule_type, Enum) else rule_type
        for rule in self.validation:
            if rule.type == wanted:
                return rule
        return None

    def __repr__(self) -> str:
        flags: str = "".join(
            [" required" if self.required else "", " unique" if self.unique else ""]
        )
        return f"<FieldDefinition {self.name}: {self.type}{flags}>"


class Relationship(BaseModel):
    """A directed relationship originating from the owning model."""

    model_config = _FROZEN_CONFIG

    id: Optional[str] = Field(default=None, description="Editor-assigned identifier.")
    type: RelationshipType = Field(..., description="Cardinality.")
    source_model: str = Field(..., alias="sourceModel", description="Owning model.")
    target_model: str = Field(..., alias="targetModel", description="Referenced model.")
    source_field: str = Field(..., alias="sourceField", description="Field on source.")
    target_field: str = Field(..., alias="targetField", description="Field on target.")
    cascade_delete: bool = Field(
        default=False, alias="cascadeDelete", description="ON DELETE CASCADE."
    )

    def __repr__(self) -> str:
        return (
            f"<Relationship {self.source_model}.{self.source_field} "
            f"-{self.type}-> {self.target_model}.{self.target_field}>"
        )


class ModelMetadata(BaseModel):
    """Per-model generation switches."""

    model_config = _FROZEN_CONFIG

    table_name: Optional[str] = Field(
        default=None, alias="tableName", description="Table/collection override."
    )
    timestamps: bool = Field(default=True, description="Emit created/updated columns.")
    soft_delete: bool = Field(
        default=False, alias="softDelete", description="Emit a deleted_at column."
    )
    description: Optional[str] = Field(default=None, description="Model doc.")
    requires_auth: bool = Field(
        default=True, alias="requiresAuth", description="Protect mutating routes."
    )
    allowed_roles: List[str] = Field(
        default_factory=list, alias="allowedRoles", description="Roles allowed."
    )


class Model(BaseModel):
    """
    One entity of the modeled domain.

    ``fields`` keeps the editor's order; every emitted artifact walks it in
    that order so interfaces, SQL and tests line up field by field.
    """

    model_config = _FROZEN_CONFIG

    id: Optional[str] = Field(default=None, description="Editor-assigned identifier.")
    name: str = Field(..., min_length=1, max_length=100, description="Model name.")
    fields: List[FieldDefinition] = Field(
        default_factory=list, description="Ordered fields."
    )
    relationships: List[Relationship] = Field(
        default_factory=list, description="Relationships originating here."
    )
    metadata: ModelMetadata = Field(
        default_factory=ModelMetadata, description="Generation switches."
    )
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @property
    def table_name(self) -> str:
        return self.metadata.table_name or default_table_name(self.name)

    @property
    def route_name(self) -> str:
        """URL segment and file stem: ``"BlogPost"`` -> ``"blogpost"``."""
        return self.name.lower()

    @property
    def data_fields(self) -> List[FieldDefinition]:
        """Fields other than the identifier, which every layer emits itself."""
        return [f for f in self.fields if f.name != "id"]

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def __repr__(self) -> str:
        return (
            f"<Model {self.name} fields={len(self.fields)} "
            f"relationships={len(self.relationships)}>"
        )


# ---------------------------------------------------------------------------
# Per-run configuration
# ---------------------------------------------------------------------------


class GenerationOptions(BaseModel):
    """Target stack of the generated project.  Immutable per run."""

    model_config = _OPTIONS_CONFIG

    framework: Framework = Field(default=Framework.EXPRESS)
    database: Database = Field(default=Database.POSTGRESQL)
    authentication: AuthStrategy = Field(default=AuthStrategy.JWT)
    language: Language = Field(default=Language.TYPESCRIPT)
    include_tests: bool = Field(default=True, alias="includeTests")
    include_documentation: bool = Field(default=True, alias="includeDocumentation")

    @property
    def is_relational(self) -> bool:
        return self.database in RELATIONAL_DATABASES

    @property
    def auth_enabled(self) -> bool:
        return self.authentication != AuthStrategy.NONE.value

    @property
    def token_auth(self) -> bool:
        return self.authentication == AuthStrategy.JWT.value

    @property
    def session_auth(self) -> bool:
        """Session and OAuth logins both keep the signed-in user in express-session."""
        return self.authentication in (AuthStrategy.SESSION.value, AuthStrategy.OAUTH.value)

    @property
    def is_typescript(self) -> bool:
        return self.language == Language.TYPESCRIPT.value

    def __repr__(self) -> str:
        return (
            f"<GenerationOptions {self.framework}/{self.database}/"
            f"{self.authentication}/{self.language}>"
        )


class ExportOptions(BaseModel):
    """Archive format, export-time filters and template tier."""

    model_config = _OPTIONS_CONFIG

    format: ExportFormat = Field(default=ExportFormat.ZIP)
    include_tests: bool = Field(default=True, alias="includeTests")
    include_documentation: bool = Field(default=True, alias="includeDocumentation")
    template: TemplateTier = Field(default=TemplateTier.BASIC)


class UnsupportedOptionError(ValueError):
    """An option names a value outside its supported set."""

    def __init__(self, option: str, value: Any, allowed: Iterable[str]) -> None:
        self.option: str = option
        self.value: Any = value
        self.allowed: List[str] = list(allowed)
        super().__init__(
            f"Unsupported {option} {value!r}; expected one of: {', '.join(self.allowed)}"
        )


_ENUM_OPTIONS: Dict[type, Dict[str, type]] = {
    GenerationOptions: {
        "framework": Framework,
        "database": Database,
        "authentication": AuthStrategy,
        "language": Language,
    },
    ExportOptions: {"format": ExportFormat, "template": TemplateTier},
}

_OptionsT = TypeVar("_OptionsT", GenerationOptions, ExportOptions)


def coerce_options(options_cls: Type[_OptionsT], raw: Any) -> _OptionsT:
    """
    Build *options_cls* from a mapping (or re-check an existing instance).

    Enum-valued options are checked first so an unknown framework, database,
    strategy, language, format or tier surfaces as ``UnsupportedOptionError``
    naming the option instead of a generic schema error.
    """
    if raw is None:
        return options_cls()
    if isinstance(raw, options_cls):
        data: Dict[str, Any] = raw.model_dump()
    elif isinstance(raw, Mapping):
        data = dict(raw)
    else:
        raise TypeError(
            f"{options_cls.__name__} expects a mapping, got {type(raw).__name__}."
        )
    for key, enum_cls in _ENUM_OPTIONS[options_cls].items():
        if key not in data:
            continue
        value: Any = data[key]
        if isinstance(value, Enum):
            value = value.value
        allowed: List[str] = [member.value for member in enum_cls]  # type: ignore[attr-defined]
        if value not in allowed:
            raise UnsupportedOptionError(key, value, allowed)
    if isinstance(raw, options_cls):
        return raw
    return options_cls.model_validate(data)


# ---------------------------------------------------------------------------
# Generation output
# ---------------------------------------------------------------------------


class GeneratedFile(BaseModel):
    """A single artifact produced by the generator."""

    model_config = _FROZEN_CONFIG

    path: str = Field(..., min_length=1, description="Relative file path.")
    content: str = Field(..., description="Full file content.")
    kind: ArtifactKind = Field(..., alias="type", description="Artifact kind.")
    language: Optional[str] = Field(default=None, description="Content-language tag.")

    @computed_field(alias="lineCount")  # type: ignore[misc]
    @property
    def line_count(self) -> int:
        return count_lines(self.content)

    @computed_field  # type: ignore[misc]
    @property
    def checksum(self) -> str:
        return sha256_hex(self.content)

    def with_content(self, content: str) -> "GeneratedFile":
        return self.model_copy(update={"content": content})

    def __repr__(self) -> str:
        return f"<GeneratedFile {self.path} ({self.kind}, {self.line_count} lines)>"


def endpoint_id(method: str, path: str) -> str:
    """Deterministic endpoint identity derived from ``"METHOD path"``."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{method} {path}"))


class Endpoint(BaseModel):
    """Descriptor of one HTTP operation of the generated service."""

    model_config = _FROZEN_CONFIG

    id: str = Field(..., description="Stable identifier.")
    path: str = Field(..., description="Route path.")
    method: HttpMethod = Field(..., description="HTTP verb.")
    model_name: str = Field(..., alias="modelName", description="Owning model.")
    operation: CrudOperation = Field(..., description="CRUD operation.")
    authenticated: bool = Field(default=False, description="Requires a valid login.")
    roles: List[str] = Field(default_factory=list, description="Roles required.")
    description: str = Field(default="", description="Human-readable summary.")

    @model_validator(mode="before")
    @classmethod
    def _derive_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id"):
            method = data.get("method")
            if isinstance(method, Enum):
                method = method.value
            data = {**data, "id": endpoint_id(str(method), str(data.get("path", "")))}
        return data

    @property
    def route_key(self) -> str:
        return f"{self.method} {self.path}"

    def __repr__(self) -> str:
        lock: str = " [auth]" if self.authenticated else ""
        return f"<Endpoint {self.route_key}{lock}>"


class Role(BaseModel):
    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1)
    permissions: List[str] = Field(default_factory=list)


def default_roles() -> List[Role]:
    return [
        Role(name="admin", permissions=["create", "read", "update", "delete"]),
        Role(name="user", permissions=["read"]),
    ]


class AuthConfig(BaseModel):
    """Resolved authentication settings of a generated project."""

    model_config = _FROZEN_CONFIG

    type: AuthStrategy = Field(default=AuthStrategy.JWT)
    roles: List[Role] = Field(default_factory=default_roles)
    protected_routes: List[str] = Field(default_factory=list, alias="protectedRoutes")


class GeneratedProject(BaseModel):
    """Everything one ``generate_project`` call produced."""

    model_config = _FROZEN_CONFIG

    id: str = Field(..., description="Run identity.")
    name: str = Field(..., min_length=1, description="Derived project name.")
    models: List[Model] = Field(default_factory=list)
    endpoints: List[Endpoint] = Field(default_factory=list)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    files: List[GeneratedFile] = Field(default_factory=list)
    openapi: Dict[str, Any] = Field(default_factory=dict, alias="openAPISpec")
    options: GenerationOptions = Field(default_factory=GenerationOptions)
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    @property
    def file_paths(self) -> List[str]:
        return [f.path for f in self.files]

    def get_file(self, path: str) -> Optional[GeneratedFile]:
        for f in self.files:
            if f.path == path:
                return f
        return None

    def endpoints_for(self, model_name: str) -> List[Endpoint]:
        return [e for e in self.endpoints if e.model_name == model_name]

    def __repr__(self) -> str:
        return (
            f"<GeneratedProject {self.name} models={len(self.models)} "
            f"endpoints={len(self.endpoints)} files={len(self.files)}>"
        )


# ---------------------------------------------------------------------------
# Packaging output
# ---------------------------------------------------------------------------


class ProjectMetadata(BaseModel):
    """Contents of ``project.json`` inside an exported archive."""

    model_config = _FROZEN_CONFIG

    name: str
    version: str = "1.0.0"
    description: str = ""
    framework: str
    database: str
    authentication: str
    language: str
    template: str
    features: List[str] = Field(default_factory=list)
    dependencies: Dict[str, str] = Field(default_factory=dict)
    dev_dependencies: Dict[str, str] = Field(
        default_factory=dict, alias="devDependencies"
    )
    scripts: Dict[str, str] = Field(default_factory=dict)


class ProjectPackage(BaseModel):
    """Filtered and augmented artifact set, ready for archiving."""

    model_config = _FROZEN_CONFIG

    id: str
    name: str = Field(..., min_length=1)
    files: List[GeneratedFile] = Field(default_factory=list)
    metadata: ProjectMetadata
    setup_instructions: str = Field(default="", alias="setupInstructions")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")

    @field_validator("files")
    @classmethod
    def _unique_paths(cls, v: List[GeneratedFile]) -> List[GeneratedFile]:
        seen: set = set()
        for f in v:
            if f.path in seen:
                raise ValueError(f"Duplicate file path in package: {f.path}")
            seen.add(f.path)
        return v

    @property
    def file_paths(self) -> List[str]:
        return [f.path for f in self.files]

    def __repr__(self) -> str:
        return f"<ProjectPackage {self.name} files={len(self.files)}>"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_models(raw: Iterable[Any]) -> List[Model]:
    """
    Build ``Model`` instances from editor JSON (mappings) or pass existing
    instances through.  Raises ``pydantic.ValidationError`` on malformed
    input; callers that need aggregated findings use the validator instead.
    """
    return [m if isinstance(m, Model) else Model.model_validate(m) for m in raw]


__all__: List[str] = [
    "FieldType",
    "ValidationRuleType",
    "RelationshipType",
    "Framework",
    "Database",
    "AuthStrategy",
    "Language",
    "ArtifactKind",
    "HttpMethod",
    "CrudOperation",
    "ExportFormat",
    "TemplateTier",
    "RELATIONAL_DATABASES",
    "ValidationRule",
    "FieldDefinition",
    "Relationship",
    "ModelMetadata",
    "Model",
    "GenerationOptions",
    "ExportOptions",
    "UnsupportedOptionError",
    "coerce_options",
    "GeneratedFile",
    "endpoint_id",
    "Endpoint",
    "Role",
    "default_roles",
    "AuthConfig",
    "GeneratedProject",
    "ProjectMetadata",
    "ProjectPackage",
    "parse_models",
]

logger.debug("modelforge.models loaded: %d public symbols.", len(__all__))
