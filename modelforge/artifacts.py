# File: modelforge/artifacts.py
"""
ModelForge - Artifact Renderer
===============================
Turns one validated model (or the option set) into the text of one
generated file.  The record interface, controller and relational schema
come from the template engine; everything else is assembled line by line.

Every per-field decision is a lookup in ``modelforge.mappings`` so the
interface, schema, repository column map, validation chain and test data
of a model always describe the same fields in the same order.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from modelforge.mappings import (
    AUTH_ENVIRONMENT,
    DATABASE_LABELS,
    DATABASE_URLS,
    column_type,
    resolve_dependencies,
    resolve_scripts,
    sample_value,
    typescript_type,
    validation_chain,
)
from modelforge.models import (
    AuthConfig,
    AuthStrategy,
    Database,
    FieldDefinition,
    FieldType,
    GenerationOptions,
    Model,
)
from modelforge.templates import TemplateEngine
from modelforge.utils import capitalize_first, to_camel_case, to_snake_case

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelforge.artifacts")

_UNIQUE_PREFIXABLE = (FieldType.STRING.value, FieldType.TEXT.value, FieldType.EMAIL.value)


def _sql_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (dict, list)):
        value = json.dumps(value)
    return "'" + str(value).replace("'", "''") + "'"


def _ts_string(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


class ArtifactRenderer:
    """
    Renders the content of every generated artifact for one option set.

    Stateless apart from the options and the template engine it was built
    with; one renderer may serve every model of a run.
    """

    def __init__(
        self,
        options: GenerationOptions,
        engine: Optional[TemplateEngine] = None,
    ) -> None:
        self.options: GenerationOptions = options
        self.engine: TemplateEngine = engine or TemplateEngine()
        self._db: str = options.database
        self._auth: bool = options.auth_enabled
        logger.debug("ArtifactRenderer initialised: %r", options)

    # ======================================================================
    # Scaffold
    # ======================================================================

    def render_package_json(self, package_name: str = "generated-api") -> str:
        dependencies, dev_dependencies = resolve_dependencies(self.options)
        manifest: Dict[str, Any] = {
            "name": package_name,
            "version": "1.0.0",
            "description": "Generated API project",
            "main": "dist/app.js",
            "scripts": resolve_scripts(self.options),
            "dependencies": dependencies,
            "devDependencies": dev_dependencies,
        }
        if self.options.include_tests:
            jest: Dict[str, Any] = {"testEnvironment": "node", "preset": "ts-jest"}
            if not self.options.is_typescript:
                jest["transform"] = {"^.+\\.ts$": ["ts-jest", {"diagnostics": False}]}
            manifest["jest"] = jest
        return json.dumps(manifest, indent=2) + "\n"

    def render_tsconfig(self) -> str:
        """
        Compiler settings for ``src/`` into ``dist/``.

        The ``javascript`` language keeps the same entry points but turns
        off strict checking and declaration output, and admits ``.js``
        sources next to the generated ``.ts`` ones.
        """
        strict: bool = self.options.is_typescript
        compiler: Dict[str, Any] = {
            "target": "ES2020",
            "module": "commonjs",
            "lib": ["ES2020"],
            "outDir": "./dist",
            "rootDir": "./src",
            "strict": strict,
            "esModuleInterop": True,
            "skipLibCheck": True,
            "forceConsistentCasingInFileNames": True,
            "resolveJsonModule": True,
        }
        if strict:
            compiler.update({"declaration": True, "declarationMap": True})
        else:
            compiler["allowJs"] = True
        compiler["sourceMap"] = True
        config: Dict[str, Any] = {
            "compilerOptions": compiler,
            "include": ["src/**/*"],
            "exclude": ["node_modules", "dist", "src/**/*.test.ts"],
        }
        return json.dumps(config, indent=2) + "\n"

    def render_env_example(self) -> str:
        lines: List[str] = [
            "# Server Configuration",
            "PORT=3000",
            "NODE_ENV=development",
            "",
            "# Database Configuration",
            f"DATABASE_URL={DATABASE_URLS[self._db]}",
        ]
        auth_vars = AUTH_ENVIRONMENT.get(self.options.authentication, ())
        if auth_vars:
            lines.append("")
            lines.append("# Authentication Configuration")
            lines.extend(f"{key}={value}" for key, value in auth_vars)
        return "\n".join(lines) + "\n"

    def render_readme(self, models: Sequence[Model]) -> str:
        opts = self.options
        lines: List[str] = [
            "# Generated API Project",
            "",
            f"This is an automatically generated API project using {opts.framework} "
            f"with {DATABASE_LABELS[self._db]} database.",
            "",
            "## Features",
            "",
            "- RESTful API endpoints",
            f"- {opts.database} database integration",
            f"- {opts.authentication} authentication",
            "- Input validation",
            "- Error handling",
            f"- {'Comprehensive test suite' if opts.include_tests else 'Basic structure'}",
            f"- {'OpenAPI documentation' if opts.include_documentation else 'Basic documentation'}",
            "",
            "## Getting Started",
            "",
            "1. Install dependencies:",
            "   ```bash",
            "   npm install",
            "   ```",
            "",
            "2. Set up environment variables:",
            "   ```bash",
            "   cp .env.example .env",
            "   ```",
            "",
            "3. Start the development server:",
            "   ```bash",
            "   npm run dev",
            "   ```",
            "",
            "## API Endpoints",
            "",
        ]
        if not models:
            lines.append("No models defined yet. Only `GET /health` is available.")
        for model in models:
            segment = model.route_name
            lines.append(f"### {model.name}")
            lines.append("")
            lines.append(f"- `POST /{segment}` create")
            lines.append(f"- `GET /{segment}` list (paginated)")
            lines.append(f"- `GET /{segment}/:id` read")
            lines.append(f"- `PUT /{segment}/:id` update")
            lines.append(f"- `DELETE /{segment}/:id` delete")
            lines.append("")
        lines.extend([
            "## Project Structure",
            "",
            "- `src/app.ts` - Main application entry point",
            "- `src/controllers/` - Request handlers",
            "- `src/services/` - Business logic",
            "- `src/repositories/` - Data access layer",
            "- `src/models/` - Data models",
            "- `src/routes/` - Route definitions",
            "- `src/middleware/` - Custom middleware",
            "- `src/validation/` - Input validation schemas",
        ])
        if opts.is_relational:
            lines.append("- `src/schemas/` - SQL schema files")
        if opts.include_tests:
            lines.append("- `src/tests/` - Test files")
        lines.extend(["", "## License", "", "MIT"])
        return "\n".join(lines) + "\n"

    # ======================================================================
    # Per-model artifacts
    # ======================================================================

    def render_model_interface(self, model: Model) -> str:
        """Full record, create input and update input interfaces."""
        context: Dict[str, Any] = {
            "modelName": model.name,
            "fields": [
                {
                    "name": f.name,
                    "tsType": typescript_type(f.type),
                    "optionalMark": "" if f.required else "?",
                }
                for f in model.data_fields
            ],
            "timestamps": model.metadata.timestamps,
            "softDelete": model.metadata.soft_delete,
        }
        return self.engine.render("model-interface", context)

    def _column_definitions(self, model: Model) -> List[str]:
        mysql: bool = self._db == Database.MYSQL.value
        columns: List[str] = [
            "id CHAR(36) NOT NULL PRIMARY KEY DEFAULT (UUID())"
            if mysql
            else "id UUID PRIMARY KEY DEFAULT gen_random_uuid()"
        ]
        for f in model.data_fields:
            parts: List[str] = [to_snake_case(f.name), column_type(f.type, self._db)]
            if f.required:
                parts.append("NOT NULL")
            if f.unique:
                parts.append("UNIQUE")
            if f.default_value is not None:
                parts.append(f"DEFAULT {_sql_literal(f.default_value)}")
            columns.append(" ".join(parts))
        stamp: str = "DATETIME" if mysql else "TIMESTAMP WITH TIME ZONE"
        now: str = "CURRENT_TIMESTAMP" if mysql else "NOW()"
        if model.metadata.timestamps:
            columns.append(f"created_at {stamp} NOT NULL DEFAULT {now}")
            columns.append(f"updated_at {stamp} NOT NULL DEFAULT {now}")
        if model.metadata.soft_delete:
            columns.append(f"deleted_at {stamp}")
        return columns

    def render_schema(self, model: Model, models: Sequence[Model] = ()) -> str:
        """
        ``CREATE TABLE`` plus indexes and the updated-at trigger.

        Relationships become an index on the referencing column and a
        descriptive comment; foreign-key constraints are left to the
        operator because schema files may be applied in any order.
        """
        table: str = model.table_name
        definitions: List[str] = self._column_definitions(model)
        columns = [
            {"definition": d, "separator": "," if i < len(definitions) - 1 else ""}
            for i, d in enumerate(definitions)
        ]
        tables: Dict[str, str] = {m.name: m.table_name for m in models}
        indexes: List[Dict[str, str]] = []
        relationships: List[Dict[str, str]] = []
        for rel in model.relationships:
            source_column: str = to_snake_case(rel.source_field)
            relationships.append({
                "kind": rel.type,
                "sourceColumn": source_column,
                "targetTable": tables.get(rel.target_model, rel.target_model.lower() + "s"),
                "targetColumn": to_snake_case(rel.target_field),
                "cascade": " (ON DELETE CASCADE)" if rel.cascade_delete else "",
            })
            if source_column != "id" and not any(ix["column"] == source_column for ix in indexes):
                indexes.append({"indexName": f"idx_{table}_{source_column}", "column": source_column})
        context: Dict[str, Any] = {
            "tableName": table,
            "columns": columns,
            "indexes": indexes,
            "relationships": relationships,
            "timestamps": model.metadata.timestamps,
        }
        name: str = "mysql-schema" if self._db == Database.MYSQL.value else "postgresql-schema"
        return self.engine.render(name, context)

    def render_controller(self, model: Model) -> str:
        context = {"modelName": model.name, "serviceVar": f"{to_camel_case(model.name)}Service"}
        return self.engine.render("express-controller", context)

    def render_service(self, model: Model) -> str:
        name: str = model.name
        repo: str = f"{to_camel_case(name)}Repository"
        lines: List[str] = [
            f"import {{ {name}Repository }} from '../repositories/{name}Repository';",
            f"import {{ {name}, Create{name}Request, Update{name}Request }} from '../models/{name}';",
            "",
            f"export class {name}Service {{",
            f"  private {repo}: {name}Repository;",
            "",
            "  constructor() {",
            f"    this.{repo} = new {name}Repository();",
            "  }",
            "",
            f"  async create(data: Create{name}Request): Promise<{name}> {{",
            f"    return this.{repo}.create(data);",
            "  }",
            "",
            f"  async getById(id: string): Promise<{name} | null> {{",
            f"    return this.{repo}.findById(id);",
            "  }",
            "",
            f"  async getAll(page = 1, limit = 10): Promise<{{ items: {name}[]; total: number }}> {{",
            "    const offset = (page - 1) * limit;",
            "    const [items, total] = await Promise.all([",
            f"      this.{repo}.findMany(limit, offset),",
            f"      this.{repo}.count(),",
            "    ]);",
            "    return { items, total };",
            "  }",
            "",
            f"  async update(id: string, data: Update{name}Request): Promise<{name} | null> {{",
            f"    const existing = await this.{repo}.findById(id);",
            "    if (!existing) {",
            "      return null;",
            "    }",
            f"    return this.{repo}.update(id, data);",
            "  }",
            "",
            "  async delete(id: string): Promise<boolean> {",
            f"    const existing = await this.{repo}.findById(id);",
            "    if (!existing) {",
            "      return false;",
            "    }",
            f"    await this.{repo}.delete(id);",
            "    return true;",
            "  }",
            "}",
        ]
        return "\n".join(lines) + "\n"

    # -- Repositories --------------------------------------------------------

    def render_repository(self, model: Model) -> str:
        if self._db == Database.MONGODB.value:
            return self._render_document_repository(model)
        return self._render_relational_repository(model)

    def _render_relational_repository(self, model: Model) -> str:
        name: str = model.name
        mysql: bool = self._db == Database.MYSQL.value
        meta = model.metadata
        now: str = "CURRENT_TIMESTAMP" if mysql else "NOW()"
        live: str = " AND deleted_at IS NULL" if meta.soft_delete else ""
        live_where: str = " WHERE deleted_at IS NULL" if meta.soft_delete else ""
        order_column: str = "created_at" if meta.timestamps else "id"

        def ph(n: str) -> str:
            return "?" if mysql else f"${n}"

        lines: List[str] = []
        if mysql:
            lines.append("import { randomUUID } from 'crypto';")
        lines.append("import { query } from '../database/connection';")
        lines.append(
            f"import {{ {name}, Create{name}Request, Update{name}Request }} from '../models/{name}';"
        )
        lines.append("")
        lines.append("const COLUMNS: Record<string, string> = {")
        for f in model.data_fields:
            lines.append(f"  {f.name}: '{to_snake_case(f.name)}',")
        lines.append("};")
        lines.append("")
        lines.append("const toEntries = (data: object): Array<[string, unknown]> => {")
        lines.append("  return Object.entries(data).filter(([key]) => key in COLUMNS);")
        lines.append("};")
        lines.append("")
        lines.append(f"export class {name}Repository {{")
        lines.append(f"  private tableName = '{model.table_name}';")
        lines.append("")

        # create
        lines.append(f"  async create(data: Create{name}Request): Promise<{name}> {{")
        lines.append("    const entries = toEntries(data);")
        if mysql:
            lines.append("    const id = randomUUID();")
            lines.append("    const columns = ['id', ...entries.map(([key]) => COLUMNS[key])].join(', ');")
            lines.append("    const placeholders = ['?', ...entries.map(() => '?')].join(', ');")
            lines.append("    await query(")
            lines.append("      `INSERT INTO ${this.tableName} (${columns}) VALUES (${placeholders})`,")
            lines.append("      [id, ...entries.map(([, value]) => value)]")
            lines.append("    );")
            lines.append(f"    return (await this.findById(id)) as {name};")
        else:
            lines.append("    const columns = entries.map(([key]) => COLUMNS[key]).join(', ');")
            lines.append("    const placeholders = entries.map((_, index) => `$${index + 1}`).join(', ');")
            lines.append("    const result = await query(")
            lines.append("      `INSERT INTO ${this.tableName} (${columns}) VALUES (${placeholders}) RETURNING *`,")
            lines.append("      entries.map(([, value]) => value)")
            lines.append("    );")
            lines.append("    return this.mapRowToModel(result.rows[0]);")
        lines.append("  }")
        lines.append("")

        # findById
        lines.append(f"  async findById(id: string): Promise<{name} | null> {{")
        lines.append("    const result = await query(")
        lines.append(f"      `SELECT * FROM ${{this.tableName}} WHERE id = {ph('1')}{live}`,")
        lines.append("      [id]")
        lines.append("    );")
        lines.append("    return result.rows.length > 0 ? this.mapRowToModel(result.rows[0]) : null;")
        lines.append("  }")
        lines.append("")

        # findMany
        lines.append(f"  async findMany(limit: number, offset: number): Promise<{name}[]> {{")
        lines.append("    const result = await query(")
        lines.append(
            f"      `SELECT * FROM ${{this.tableName}}{live_where} ORDER BY {order_column} DESC "
            f"LIMIT {ph('1')} OFFSET {ph('2')}`,"
        )
        lines.append("      [limit, offset]")
        lines.append("    );")
        lines.append("    return result.rows.map((row: any) => this.mapRowToModel(row));")
        lines.append("  }")
        lines.append("")

        # count
        lines.append("  async count(): Promise<number> {")
        lines.append(
            f"    const result = await query(`SELECT COUNT(*) AS count FROM ${{this.tableName}}{live_where}`);"
        )
        lines.append("    return Number(result.rows[0].count);")
        lines.append("  }")
        lines.append("")

        # update
        touch: str = f", updated_at = {now}" if meta.timestamps else ""
        lines.append(f"  async update(id: string, data: Update{name}Request): Promise<{name} | null> {{")
        lines.append("    const entries = toEntries(data);")
        lines.append("    if (entries.length === 0) {")
        lines.append("      return this.findById(id);")
        lines.append("    }")
        if mysql:
            lines.append("    const setClause = entries.map(([key]) => `${COLUMNS[key]} = ?`).join(', ');")
            lines.append("    await query(")
            lines.append(f"      `UPDATE ${{this.tableName}} SET ${{setClause}}{touch} WHERE id = ?`,")
            lines.append("      [...entries.map(([, value]) => value), id]")
            lines.append("    );")
            lines.append("    return this.findById(id);")
        else:
            lines.append(
                "    const setClause = entries.map(([key], index) => `${COLUMNS[key]} = $${index + 2}`).join(', ');"
            )
            lines.append("    const result = await query(")
            lines.append(
                f"      `UPDATE ${{this.tableName}} SET ${{setClause}}{touch} WHERE id = $1 RETURNING *`,"
            )
            lines.append("      [id, ...entries.map(([, value]) => value)]")
            lines.append("    );")
            lines.append("    return result.rows.length > 0 ? this.mapRowToModel(result.rows[0]) : null;")
        lines.append("  }")
        lines.append("")

        # delete
        lines.append("  async delete(id: string): Promise<void> {")
        if meta.soft_delete:
            lines.append(
                f"    await query(`UPDATE ${{this.tableName}} SET deleted_at = {now} WHERE id = {ph('1')}`, [id]);"
            )
        else:
            lines.append(f"    await query(`DELETE FROM ${{this.tableName}} WHERE id = {ph('1')}`, [id]);")
        lines.append("  }")
        lines.append("")

        # row mapping
        lines.append(f"  private mapRowToModel(row: any): {name} {{")
        lines.append("    return {")
        lines.append("      id: row.id,")
        for f in model.data_fields:
            lines.append(f"      {f.name}: row.{to_snake_case(f.name)},")
        if meta.timestamps:
            lines.append("      createdAt: row.created_at,")
            lines.append("      updatedAt: row.updated_at,")
        if meta.soft_delete:
            lines.append("      deletedAt: row.deleted_at,")
        lines.append("    };")
        lines.append("  }")
        lines.append("}")
        return "\n".join(lines) + "\n"

    def _render_document_repository(self, model: Model) -> str:
        name: str = model.name
        meta = model.metadata
        live: str = ", deletedAt: null" if meta.soft_delete else ""
        live_filter: str = "{ deletedAt: null }" if meta.soft_delete else "{}"
        order_field: str = "createdAt" if meta.timestamps else "_id"
        lines: List[str] = [
            "import { randomUUID } from 'crypto';",
            "import { getDb } from '../database/connection';",
            f"import {{ {name}, Create{name}Request, Update{name}Request }} from '../models/{name}';",
            "",
            f"export class {name}Repository {{",
            f"  private collectionName = '{model.table_name}';",
            "",
            "  private collection() {",
            "    return getDb().collection<any>(this.collectionName);",
            "  }",
            "",
            f"  async create(data: Create{name}Request): Promise<{name}> {{",
        ]
        if meta.timestamps:
            lines.append("    const now = new Date();")
            lines.append(
                "    const document = { _id: randomUUID(), ...data, createdAt: now, updatedAt: now"
                + (", deletedAt: null" if meta.soft_delete else "")
                + " };"
            )
        else:
            lines.append(
                "    const document = { _id: randomUUID(), ...data"
                + (", deletedAt: null" if meta.soft_delete else "")
                + " };"
            )
        lines.extend([
            "    await this.collection().insertOne(document);",
            "    return this.mapDocument(document);",
            "  }",
            "",
            f"  async findById(id: string): Promise<{name} | null> {{",
            f"    const document = await this.collection().findOne({{ _id: id{live} }});",
            "    return document ? this.mapDocument(document) : null;",
            "  }",
            "",
            f"  async findMany(limit: number, offset: number): Promise<{name}[]> {{",
            "    const documents = await this.collection()",
            f"      .find({live_filter})",
            f"      .sort({{ {order_field}: -1 }})",
            "      .skip(offset)",
            "      .limit(limit)",
            "      .toArray();",
            "    return documents.map((document) => this.mapDocument(document));",
            "  }",
            "",
            "  async count(): Promise<number> {",
            f"    return this.collection().countDocuments({live_filter});",
            "  }",
            "",
            f"  async update(id: string, data: Update{name}Request): Promise<{name} | null> {{",
        ])
        update_doc: str = "{ ...data, updatedAt: new Date() }" if meta.timestamps else "{ ...data }"
        lines.extend([
            "    const document = await this.collection().findOneAndUpdate(",
            f"      {{ _id: id{live} }},",
            f"      {{ $set: {update_doc} }},",
            "      { returnDocument: 'after' }",
            "    );",
            "    return document ? this.mapDocument(document) : null;",
            "  }",
            "",
            "  async delete(id: string): Promise<void> {",
        ])
        if meta.soft_delete:
            lines.append("    await this.collection().updateOne({ _id: id }, { $set: { deletedAt: new Date() } });")
        else:
            lines.append("    await this.collection().deleteOne({ _id: id });")
        lines.extend([
            "  }",
            "",
            f"  private mapDocument(document: any): {name} {{",
            "    return {",
            "      id: document._id,",
        ])
        for f in model.data_fields:
            lines.append(f"      {f.name}: document.{f.name},")
        if meta.timestamps:
            lines.append("      createdAt: document.createdAt,")
            lines.append("      updatedAt: document.updatedAt,")
        if meta.soft_delete:
            lines.append("      deletedAt: document.deletedAt,")
        lines.extend(["    };", "  }", "}"])
        return "\n".join(lines) + "\n"

    # -- Routing and validation ---------------------------------------------

    def _guard(self, model: Model, roles: Sequence[str]) -> str:
        """Middleware prefix for a protected route, empty when unprotected."""
        if not (self._auth and model.metadata.requires_auth):
            return ""
        if roles:
            quoted: str = ", ".join(f"'{r}'" for r in roles)
            return f"authenticateToken, authorize({quoted}), "
        return "authenticateToken, "

    def render_routes(self, model: Model) -> str:
        name: str = model.name
        controller: str = f"{to_camel_case(name)}Controller"
        write_guard: str = self._guard(model, model.metadata.allowed_roles)
        delete_guard: str = self._guard(model, ["admin"])
        lines: List[str] = [
            "import { Router } from 'express';",
            f"import {{ {name}Controller }} from '../controllers/{name}Controller';",
            f"import {{ validate{name} }} from '../validation/{name}Validation';",
        ]
        if write_guard or delete_guard:
            lines.append("import { authenticateToken } from '../middleware/auth';")
        if "authorize(" in write_guard + delete_guard:
            lines.append("import { authorize } from '../middleware/authorize';")
        lines.extend([
            "",
            "const router = Router();",
            f"const {controller} = new {name}Controller();",
            "",
            f"router.post('/', {write_guard}validate{name}.create, {controller}.create);",
            f"router.get('/', {controller}.getAll);",
            f"router.get('/:id', {controller}.getById);",
            f"router.put('/:id', {write_guard}validate{name}.update, {controller}.update);",
            f"router.delete('/:id', {delete_guard}{controller}.delete);",
            "",
            "export default router;",
        ])
        return "\n".join(lines) + "\n"

    def render_validation(self, model: Model) -> str:
        name: str = model.name
        lines: List[str] = [
            "import { body } from 'express-validator';",
            "import { handleValidationErrors } from '../middleware/validation';",
            "",
            f"export const validate{name} = {{",
            "  create: [",
        ]
        lines.extend(f"    {validation_chain(f)}," for f in model.data_fields)
        lines.extend(["    handleValidationErrors,", "  ],", "  update: ["])
        lines.extend(f"    {validation_chain(f, for_update=True)}," for f in model.data_fields)
        lines.extend(["    handleValidationErrors,", "  ],", "};"])
        return "\n".join(lines) + "\n"

    # -- Tests ----------------------------------------------------------------

    @staticmethod
    def _test_value(field: FieldDefinition) -> str:
        value = sample_value(field.type)
        if field.unique and field.type in _UNIQUE_PREFIXABLE:
            return f"unique({json.dumps(value)})"
        if field.unique and field.type == FieldType.URL.value:
            return f"{json.dumps(value)} + '/' + (++sequence)"
        return json.dumps(value)

    def _suite_roles(self, model: Model) -> Tuple[str, str]:
        """Roles the suite signs in as: ``(writer, deleter)``."""
        allowed: List[str] = list(model.metadata.allowed_roles)
        return (allowed[0] if allowed else "user"), "admin"

    def _sign_in_lines(self, writer_role: str, deleter_role: str) -> List[str]:
        """Register and log in one account per guarded role before the suite runs."""
        credentials: List[str] = [
            "    const credentials = {",
            "      email: unique(`${role}@example.com`),",
            "      password: 'Str0ng!Passw0rd',",
            "      name: 'Test User',",
            "      role,",
            "    };",
        ]
        if self.options.token_auth:
            lines: List[str] = [
                "  const signIn = async (role: string): Promise<Record<string, string>> => {",
                *credentials,
                "    await request(app).post('/auth/register').send(credentials).expect(201);",
                "    const login = await request(app)",
                "      .post('/auth/login')",
                "      .send({ email: credentials.email, password: credentials.password })",
                "      .expect(200);",
                "    return { Authorization: `Bearer ${login.body.data.token}` };",
                "  };",
                "  let writerHeaders: Record<string, string> = {};",
                "  let adminHeaders: Record<string, string> = {};",
                "",
                "  beforeAll(async () => {",
                f"    writerHeaders = await signIn('{writer_role}');",
            ]
            if deleter_role == writer_role:
                lines.append("    adminHeaders = writerHeaders;")
            else:
                lines.append(f"    adminHeaders = await signIn('{deleter_role}');")
            lines.extend(["  });", ""])
            return lines
        # Session-backed strategies keep the login cookie on a persistent agent.
        lines = [
            "  const signIn = async (agent: ReturnType<typeof request.agent>, role: string): Promise<void> => {",
            *credentials,
            "    await agent.post('/auth/register').send(credentials).expect(201);",
            "    await agent",
            "      .post('/auth/login')",
            "      .send({ email: credentials.email, password: credentials.password })",
            "      .expect(200);",
            "  };",
            "  const writer = request.agent(app);",
        ]
        if deleter_role != writer_role:
            lines.append("  const admin = request.agent(app);")
        lines.extend([
            "",
            "  beforeAll(async () => {",
            f"    await signIn(writer, '{writer_role}');",
        ])
        if deleter_role != writer_role:
            lines.append(f"    await signIn(admin, '{deleter_role}');")
        lines.extend(["  });", ""])
        return lines

    def _client(self, guarded: bool, *, as_admin: bool = False, shared: bool = False) -> Tuple[str, List[str]]:
        """Request origin and extra chain lines for one call of the suite."""
        if not guarded:
            return "request(app)", []
        if self.options.token_auth:
            return "request(app)", [f"        .set({'adminHeaders' if as_admin else 'writerHeaders'})"]
        return ("admin" if as_admin and not shared else "writer"), []

    def render_controller_test(self, model: Model) -> str:
        """
        supertest suite covering create, list, read, update and delete,
        with one literal sample value per declared field.

        When the model's mutating routes are guarded the suite signs in
        before running: a writer holding the first allowed role (``user``
        when any authenticated role may write) and an ``admin`` for
        deletes.  Bearer headers carry the token for ``jwt``; ``session``
        and ``oauth`` reuse the cookie of a persistent ``request.agent``.
        """
        name: str = model.name
        segment: str = model.route_name
        fields: List[FieldDefinition] = model.data_fields
        guarded: bool = self._auth and model.metadata.requires_auth
        writer_role, deleter_role = self._suite_roles(model)
        write_origin, write_set = self._client(guarded)
        delete_origin, delete_set = self._client(
            guarded, as_admin=True, shared=deleter_role == writer_role
        )
        lines: List[str] = [
            "import request from 'supertest';",
            "import app from '../app';",
            "",
            f"describe('{name}Controller', () => {{",
            "  let sequence = 0;",
            "  const unique = (value: string): string => `${Date.now()}${++sequence}-${value}`;",
            "  const buildTestData = (): Record<string, unknown> => ({",
        ]
        lines.extend(f"    {f.name}: {self._test_value(f)}," for f in fields)
        lines.extend(["  });", ""])
        if guarded:
            lines.extend(self._sign_in_lines(writer_role, deleter_role))
        lines.extend([
            f"  const create{name} = () => {{",
            f"    return {write_origin}",
            f"      .post('/{segment}')",
            *(s[2:] for s in write_set),
            "      .send(buildTestData());",
            "  };",
            "",
            f"  describe('POST /{segment}', () => {{",
            f"    it('should create a new {name}', async () => {{",
            "      const testData = buildTestData();",
            f"      const response = await {write_origin}",
            f"        .post('/{segment}')",
            *write_set,
            "        .send(testData)",
            "        .expect(201);",
            "",
            "      expect(response.body.success).toBe(true);",
            "      expect(response.body.data).toHaveProperty('id');",
        ])
        lines.extend(
            f"      expect(response.body.data.{f.name}).toEqual(testData.{f.name});" for f in fields
        )
        lines.append("    });")
        if any(f.required for f in fields):
            lines.extend([
                "",
                "    it('should return 400 for invalid data', async () => {",
                f"      const response = await {write_origin}",
                f"        .post('/{segment}')",
                *write_set,
                "        .send({})",
                "        .expect(400);",
                "",
                "      expect(response.body.success).toBe(false);",
                "      expect(response.body.message).toBe('Validation failed');",
                "    });",
            ])
        if guarded:
            lines.extend([
                "",
                "    it('should reject an anonymous caller', async () => {",
                f"      await request(app).post('/{segment}').send(buildTestData()).expect(401);",
                "    });",
            ])
        lines.extend([
            "  });",
            "",
            f"  describe('GET /{segment}', () => {{",
            f"    it('should return a page of {name} records', async () => {{",
            f"      const response = await request(app).get('/{segment}').expect(200);",
            "",
            "      expect(response.body.success).toBe(true);",
            "      expect(Array.isArray(response.body.data)).toBe(true);",
            "      expect(response.body).toHaveProperty('pagination');",
            "    });",
            "  });",
            "",
            f"  describe('GET /{segment}/:id', () => {{",
            f"    it('should return a {name} by ID', async () => {{",
            f"      const created = await create{name}();",
            "      const id = created.body.data.id;",
            "",
            f"      const response = await request(app).get(`/{segment}/${{id}}`).expect(200);",
            "",
            "      expect(response.body.success).toBe(true);",
            "      expect(response.body.data.id).toBe(id);",
            "    });",
            "",
            f"    it('should return 404 for non-existent {name}', async () => {{",
            "      const response = await request(app)",
            f"        .get('/{segment}/00000000-0000-0000-0000-000000000000')",
            "        .expect(404);",
            "",
            "      expect(response.body.success).toBe(false);",
            f"      expect(response.body.message).toBe('{name} not found');",
            "    });",
            "  });",
            "",
            f"  describe('PUT /{segment}/:id', () => {{",
            f"    it('should update an existing {name}', async () => {{",
            f"      const created = await create{name}();",
            "      const id = created.body.data.id;",
            "      const changes = buildTestData();",
            "",
            f"      const response = await {write_origin}",
            f"        .put(`/{segment}/${{id}}`)",
            *write_set,
            "        .send(changes)",
            "        .expect(200);",
            "",
            "      expect(response.body.success).toBe(true);",
            "      expect(response.body.data.id).toBe(id);",
            "    });",
            "  });",
            "",
            f"  describe('DELETE /{segment}/:id', () => {{",
            f"    it('should delete an existing {name}', async () => {{",
            f"      const created = await create{name}();",
            "      const id = created.body.data.id;",
            "",
            f"      await {delete_origin}",
            f"        .delete(`/{segment}/${{id}}`)",
            *delete_set,
            "        .expect(204);",
            "",
            f"      await request(app).get(`/{segment}/${{id}}`).expect(404);",
            "    });",
            "  });",
            "});",
        ])
        return "\n".join(lines) + "\n"

    # ======================================================================
    # Shared artifacts
    # ======================================================================

    def render_connection(self) -> str:
        if self._db == Database.POSTGRESQL.value:
            return (
                "import { Pool } from 'pg';\n"
                "\n"
                "const pool = new Pool({\n"
                "  connectionString: process.env.DATABASE_URL,\n"
                "  ssl: process.env.NODE_ENV === 'production' ? { rejectUnauthorized: false } : false,\n"
                "});\n"
                "\n"
                "export default pool;\n"
                "\n"
                "export const query = (text: string, params?: unknown[]) => pool.query(text, params);\n"
            )
        if self._db == Database.MYSQL.value:
            return (
                "import mysql from 'mysql2/promise';\n"
                "\n"
                "const pool = mysql.createPool(process.env.DATABASE_URL as string);\n"
                "\n"
                "export default pool;\n"
                "\n"
                "export const query = async (text: string, params: unknown[] = []) => {\n"
                "  const [rows] = await pool.query(text, params);\n"
                "  return { rows: rows as any[] };\n"
                "};\n"
            )
        return (
            "import { MongoClient, Db } from 'mongodb';\n"
            "\n"
            "const client = new MongoClient(process.env.DATABASE_URL as string);\n"
            "let database: Db | null = null;\n"
            "\n"
            "export const connect = async (): Promise<Db> => {\n"
            "  if (!database) {\n"
            "    await client.connect();\n"
            "    database = client.db();\n"
            "  }\n"
            "  return database;\n"
            "};\n"
            "\n"
            "export const getDb = (): Db => {\n"
            "  if (!database) {\n"
            "    throw new Error('Database not connected; call connect() first');\n"
            "  }\n"
            "  return database;\n"
            "};\n"
            "\n"
            "export default client;\n"
        )

    def render_cors_middleware(self) -> str:
        return (
            "import { Request, Response, NextFunction } from 'express';\n"
            "\n"
            "export const corsMiddleware = (req: Request, res: Response, next: NextFunction): void => {\n"
            "  res.header('Access-Control-Allow-Origin', process.env.CORS_ORIGIN || '*');\n"
            "  res.header('Access-Control-Allow-Methods', 'GET, POST, PUT, DELETE, OPTIONS');\n"
            "  res.header('Access-Control-Allow-Headers', 'Origin, X-Requested-With, Content-Type, Accept, Authorization');\n"
            "\n"
            "  if (req.method === 'OPTIONS') {\n"
            "    res.sendStatus(200);\n"
            "    return;\n"
            "  }\n"
            "  next();\n"
            "};\n"
        )

    def render_logging_middleware(self) -> str:
        return (
            "import { Request, Response, NextFunction } from 'express';\n"
            "\n"
            "export const loggingMiddleware = (req: Request, res: Response, next: NextFunction): void => {\n"
            "  const start = Date.now();\n"
            "\n"
            "  res.on('finish', () => {\n"
            "    const entry = {\n"
            "      method: req.method,\n"
            "      url: req.originalUrl,\n"
            "      status: res.statusCode,\n"
            "      duration: `${Date.now() - start}ms`,\n"
            "      timestamp: new Date().toISOString(),\n"
            "      userAgent: req.get('User-Agent'),\n"
            "      ip: req.ip,\n"
            "    };\n"
            "    console.log(JSON.stringify(entry));\n"
            "  });\n"
            "\n"
            "  next();\n"
            "};\n"
        )

    def render_validation_middleware(self) -> str:
        """Validation-error normalisation plus the terminal error handler."""
        return (
            "import { Request, Response, NextFunction } from 'express';\n"
            "import { validationResult } from 'express-validator';\n"
            "\n"
            "export const handleValidationErrors = (req: Request, res: Response, next: NextFunction): void => {\n"
            "  const errors = validationResult(req);\n"
            "  if (!errors.isEmpty()) {\n"
            "    res.status(400).json({\n"
            "      success: false,\n"
            "      message: 'Validation failed',\n"
            "      errors: errors.array().map((error: any) => ({\n"
            "        field: error.type === 'field' ? error.path : 'unknown',\n"
            "        message: error.msg,\n"
            "        value: error.type === 'field' ? error.value : undefined,\n"
            "      })),\n"
            "    });\n"
            "    return;\n"
            "  }\n"
            "  next();\n"
            "};\n"
            "\n"
            "export const errorHandler = (error: Error, req: Request, res: Response, next: NextFunction): void => {\n"
            "  console.error('Error:', error);\n"
            "  const production = process.env.NODE_ENV === 'production';\n"
            "  res.status(500).json({\n"
            "    success: false,\n"
            "    message: production ? 'Internal server error' : error.message,\n"
            "    ...(production ? {} : { stack: error.stack }),\n"
            "  });\n"
            "};\n"
        )

    def render_app(self, models: Sequence[Model]) -> str:
        """Application entry: middleware, health check, auth and model routes."""
        strategy: str = self.options.authentication
        lines: List[str] = [
            "import 'dotenv/config';",
            "import express from 'express';",
        ]
        if self.options.session_auth:
            lines.append("import session from 'express-session';")
        if strategy == AuthStrategy.OAUTH.value:
            lines.append("import passport from 'passport';")
        if self._db == Database.MONGODB.value:
            lines.append("import { connect } from './database/connection';")
        lines.extend([
            "import { corsMiddleware } from './middleware/cors';",
            "import { loggingMiddleware } from './middleware/logging';",
            "import { errorHandler } from './middleware/validation';",
        ])
        if self._auth:
            lines.append("import authRoutes from './routes/auth';")
        for model in models:
            lines.append(f"import {model.route_name}Routes from './routes/{model.route_name}';")
        lines.extend([
            "",
            "const app = express();",
            "const PORT = process.env.PORT || 3000;",
            "",
            "app.use(corsMiddleware);",
            "app.use(express.json());",
            "app.use(express.urlencoded({ extended: true }));",
            "app.use(loggingMiddleware);",
        ])
        if self.options.session_auth:
            lines.append(
                "app.use(session({ secret: process.env.SESSION_SECRET as string, resave: false, saveUninitialized: false }));"
            )
        if strategy == AuthStrategy.OAUTH.value:
            lines.append("app.use(passport.initialize());")
        lines.extend([
            "",
            "app.get('/health', (req, res) => {",
            "  res.json({ status: 'OK', timestamp: new Date().toISOString() });",
            "});",
            "",
        ])
        if self._auth:
            lines.append("app.use('/auth', authRoutes);")
        for model in models:
            lines.append(f"app.use('/{model.route_name}', {model.route_name}Routes);")
        lines.extend([
            "",
            "app.use((req, res) => {",
            "  res.status(404).json({ success: false, message: 'Route not found' });",
            "});",
            "",
            "app.use(errorHandler);",
            "",
            "if (process.env.NODE_ENV !== 'test') {",
        ])
        if self._db == Database.MONGODB.value:
            lines.extend([
                "  connect().then(() => {",
                "    app.listen(PORT, () => {",
                "      console.log(`Server running on port ${PORT}`);",
                "    });",
                "  });",
            ])
        else:
            lines.extend([
                "  app.listen(PORT, () => {",
                "    console.log(`Server running on port ${PORT}`);",
                "  });",
            ])
        lines.extend(["}", "", "export default app;"])
        return "\n".join(lines) + "\n"

    # ======================================================================
    # Authentication artifacts
    # ======================================================================

    def render_user_model(self, auth: AuthConfig) -> str:
        union: str = " | ".join(f"'{r.name}'" for r in auth.roles) or "string"
        return self.engine.render(
            "user-model", {"roleUnion": union, "tokenAuth": self.options.token_auth}
        )

    def render_auth_service(self, auth: AuthConfig) -> str:
        default_role: str = auth.roles[-1].name if auth.roles else "user"
        return self.engine.render(
            "auth-service",
            {"tokenAuth": self.options.token_auth, "defaultRole": default_role},
        )

    def render_auth_controller(self, auth: AuthConfig) -> str:
        session: bool = self.options.session_auth
        lines: List[str] = [
            "import { Request, Response, NextFunction } from 'express';",
            "import { AuthService } from '../services/AuthService';",
            "import { CreateUserRequest, LoginRequest } from '../models/User';",
            "",
            "export class AuthController {",
            "  private authService: AuthService;",
            "",
            "  constructor() {",
            "    this.authService = new AuthService();",
            "  }",
            "",
            "  register = async (req: Request, res: Response, next: NextFunction): Promise<void> => {",
            "    try {",
            "      const userData: CreateUserRequest = req.body;",
            "      const result = await this.authService.register(userData);",
            "      res.status(201).json({ success: true, message: 'User registered successfully', data: result });",
            "    } catch (error) {",
            "      next(error);",
            "    }",
            "  };",
            "",
            "  login = async (req: Request, res: Response, next: NextFunction): Promise<void> => {",
            "    try {",
            "      const credentials: LoginRequest = req.body;",
            "      const result = await this.authService.login(credentials);",
        ]
        if session:
            lines.append(
                "      (req as any).session.user = { userId: result.user.id, email: result.user.email, role: result.user.role };"
            )
        lines.extend([
            "      res.json({ success: true, message: 'Login successful', data: result });",
            "    } catch (error) {",
            "      res.status(401).json({ success: false, message: (error as Error).message });",
            "    }",
            "  };",
            "}",
        ])
        return "\n".join(lines) + "\n"

    def render_auth_middleware(self, auth: AuthConfig) -> str:
        if auth.type == AuthStrategy.JWT.value:
            return self.engine.render("jwt-auth-middleware", {})
        if auth.type == AuthStrategy.SESSION.value:
            lookup = "(req as any).session?.user"
            missing = "Login required"
        else:
            lookup = "(req as any).isAuthenticated?.() ? (req as any).user : (req as any).session?.user"
            missing = "OAuth login required"
        return (
            "import { Request, Response, NextFunction } from 'express';\n"
            "\n"
            "export interface AuthenticatedRequest extends Request {\n"
            "  user: {\n"
            "    userId: string;\n"
            "    email: string;\n"
            "    role: string;\n"
            "  };\n"
            "}\n"
            "\n"
            "export const authenticateToken = (req: Request, res: Response, next: NextFunction): void => {\n"
            f"  const user = {lookup};\n"
            "  if (!user) {\n"
            f"    res.status(401).json({{ success: false, message: '{missing}' }});\n"
            "    return;\n"
            "  }\n"
            "  (req as AuthenticatedRequest).user = user;\n"
            "  next();\n"
            "};\n"
        )

    def render_authorization_middleware(self, auth: AuthConfig) -> str:
        roles_json: str = json.dumps(
            [{"name": r.name, "permissions": list(r.permissions)} for r in auth.roles]
        )
        context = {
            "roles": [{"name": r.name, "capitalizedName": capitalize_first(r.name)} for r in auth.roles],
            "rolesJson": roles_json,
        }
        return self.engine.render("authorization-middleware", context)

    def render_auth_routes(self) -> str:
        return (
            "import { Router } from 'express';\n"
            "import { AuthController } from '../controllers/AuthController';\n"
            "import { validateRegister, validateLogin } from '../validation/AuthValidation';\n"
            "\n"
            "const router = Router();\n"
            "const authController = new AuthController();\n"
            "\n"
            "router.post('/register', validateRegister, authController.register);\n"
            "router.post('/login', validateLogin, authController.login);\n"
            "\n"
            "export default router;\n"
        )

    def render_auth_validation(self, auth: AuthConfig) -> str:
        roles: str = ", ".join(f"'{r.name}'" for r in auth.roles)
        lines: List[str] = [
            "import { body } from 'express-validator';",
            "import { handleValidationErrors } from '../middleware/validation';",
            "",
            "export const validateRegister = [",
            "  body('email').isEmail().normalizeEmail().withMessage('Please provide a valid email address'),",
            "  body('password')",
            "    .isLength({ min: 8 })",
            "    .withMessage('Password must be at least 8 characters long')",
            "    .matches(/^(?=.*[a-z])(?=.*[A-Z])(?=.*\\d)(?=.*[@$!%*?&])/)",
            "    .withMessage('Password must contain an uppercase letter, a lowercase letter, a number and a special character'),",
            "  body('name').trim().isLength({ min: 2, max: 50 }).withMessage('Name must be between 2 and 50 characters'),",
            f"  body('role').optional().isIn([{roles}]).withMessage('Role must be one of: {roles.replace(chr(39), '')}'),",
            "  handleValidationErrors,",
            "];",
            "",
            "export const validateLogin = [",
            "  body('email').isEmail().normalizeEmail().withMessage('Please provide a valid email address'),",
            "  body('password').notEmpty().withMessage('Password is required'),",
            "  handleValidationErrors,",
            "];",
        ]
        return "\n".join(lines) + "\n"

    def render_user_repository(self) -> str:
        if self._db == Database.MONGODB.value:
            return (
                "import { randomUUID } from 'crypto';\n"
                "import { getDb } from '../database/connection';\n"
                "import { User, CreateUserRequest } from '../models/User';\n"
                "\n"
                "type NewUser = CreateUserRequest & { isActive: boolean; emailVerified: boolean };\n"
                "\n"
                "export class UserRepository {\n"
                "  private collection() {\n"
                "    return getDb().collection<any>('users');\n"
                "  }\n"
                "\n"
                "  async create(userData: NewUser): Promise<User> {\n"
                "    const now = new Date();\n"
                "    const document = { _id: randomUUID(), ...userData, createdAt: now, updatedAt: now };\n"
                "    await this.collection().insertOne(document);\n"
                "    return this.mapDocument(document);\n"
                "  }\n"
                "\n"
                "  async findByEmail(email: string): Promise<User | null> {\n"
                "    const document = await this.collection().findOne({ email });\n"
                "    return document ? this.mapDocument(document) : null;\n"
                "  }\n"
                "\n"
                "  async updateLastLogin(id: string): Promise<void> {\n"
                "    const now = new Date();\n"
                "    await this.collection().updateOne({ _id: id }, { $set: { lastLoginAt: now, updatedAt: now } });\n"
                "  }\n"
                "\n"
                "  private mapDocument(document: any): User {\n"
                "    return {\n"
                "      id: document._id,\n"
                "      email: document.email,\n"
                "      password: document.password,\n"
                "      name: document.name,\n"
                "      role: document.role,\n"
                "      isActive: document.isActive,\n"
                "      emailVerified: document.emailVerified,\n"
                "      lastLoginAt: document.lastLoginAt,\n"
                "      createdAt: document.createdAt,\n"
                "      updatedAt: document.updatedAt,\n"
                "    };\n"
                "  }\n"
                "}\n"
            )
        mysql: bool = self._db == Database.MYSQL.value
        now: str = "CURRENT_TIMESTAMP" if mysql else "NOW()"
        p1: str = "?" if mysql else "$1"
        lines: List[str] = []
        if mysql:
            lines.append("import { randomUUID } from 'crypto';")
        lines.extend([
            "import { query } from '../database/connection';",
            "import { User, CreateUserRequest } from '../models/User';",
            "",
            "type NewUser = CreateUserRequest & { isActive: boolean; emailVerified: boolean };",
            "",
            "export class UserRepository {",
            "  private tableName = 'users';",
            "",
            "  async create(userData: NewUser): Promise<User> {",
        ])
        if mysql:
            lines.extend([
                "    const id = randomUUID();",
                "    await query(",
                "      `INSERT INTO ${this.tableName} (id, email, password, name, role, is_active, email_verified) VALUES (?, ?, ?, ?, ?, ?, ?)`,",
                "      [id, userData.email, userData.password, userData.name, userData.role, userData.isActive, userData.emailVerified]",
                "    );",
                "    const result = await query(`SELECT * FROM ${this.tableName} WHERE id = ?`, [id]);",
            ])
        else:
            lines.extend([
                "    const result = await query(",
                "      `INSERT INTO ${this.tableName} (email, password, name, role, is_active, email_verified) VALUES ($1, $2, $3, $4, $5, $6) RETURNING *`,",
                "      [userData.email, userData.password, userData.name, userData.role, userData.isActive, userData.emailVerified]",
                "    );",
            ])
        lines.extend([
            "    return this.mapRowToUser(result.rows[0]);",
            "  }",
            "",
            "  async findByEmail(email: string): Promise<User | null> {",
            f"    const result = await query(`SELECT * FROM ${{this.tableName}} WHERE email = {p1}`, [email]);",
            "    return result.rows.length > 0 ? this.mapRowToUser(result.rows[0]) : null;",
            "  }",
            "",
            "  async updateLastLogin(id: string): Promise<void> {",
            "    await query(",
            f"      `UPDATE ${{this.tableName}} SET last_login_at = {now}, updated_at = {now} WHERE id = {p1}`,",
            "      [id]",
            "    );",
            "  }",
            "",
            "  private mapRowToUser(row: any): User {",
            "    return {",
            "      id: row.id,",
            "      email: row.email,",
            "      password: row.password,",
            "      name: row.name,",
            "      role: row.role,",
            "      isActive: Boolean(row.is_active),",
            "      emailVerified: Boolean(row.email_verified),",
            "      lastLoginAt: row.last_login_at,",
            "      createdAt: row.created_at,",
            "      updatedAt: row.updated_at,",
            "    };",
            "  }",
            "}",
        ])
        return "\n".join(lines) + "\n"

    def render_user_schema(self, auth: AuthConfig) -> str:
        mysql: bool = self._db == Database.MYSQL.value
        role_names: List[str] = [r.name for r in auth.roles]
        default_role: str = role_names[-1] if role_names else "user"
        admin_role: str = "admin" if "admin" in role_names else default_role
        check: str = ""
        if role_names:
            check = " CHECK (role IN (" + ", ".join(f"'{r}'" for r in role_names) + "))"
        stamp: str = "DATETIME" if mysql else "TIMESTAMP WITH TIME ZONE"
        now: str = "CURRENT_TIMESTAMP" if mysql else "NOW()"
        lines: List[str] = [
            "CREATE TABLE users (",
            "  id CHAR(36) NOT NULL PRIMARY KEY DEFAULT (UUID()),"
            if mysql
            else "  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),",
            "  email VARCHAR(255) NOT NULL UNIQUE,",
            "  password VARCHAR(255) NOT NULL,",
            "  name VARCHAR(100) NOT NULL,",
            f"  role VARCHAR(50) NOT NULL DEFAULT '{default_role}'{check},",
            "  is_active BOOLEAN NOT NULL DEFAULT TRUE,",
            "  email_verified BOOLEAN NOT NULL DEFAULT FALSE,",
            f"  last_login_at {stamp},",
            f"  created_at {stamp} NOT NULL DEFAULT {now},",
            f"  updated_at {stamp} NOT NULL DEFAULT {now}",
            ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;" if mysql else ");",
            "",
            "CREATE INDEX idx_users_role ON users(role);",
            "CREATE INDEX idx_users_active ON users(is_active);",
            "",
            "-- Keep updated_at current on every update",
        ]
        if mysql:
            lines.extend([
                "CREATE TRIGGER update_users_updated_at",
                "  BEFORE UPDATE ON users",
                "  FOR EACH ROW",
                "  SET NEW.updated_at = CURRENT_TIMESTAMP;",
            ])
        else:
            lines.extend([
                "CREATE OR REPLACE FUNCTION update_updated_at_column()",
                "RETURNS TRIGGER AS $$",
                "BEGIN",
                "  NEW.updated_at = NOW();",
                "  RETURN NEW;",
                "END;",
                "$$ LANGUAGE plpgsql;",
                "",
                "CREATE TRIGGER update_users_updated_at",
                "  BEFORE UPDATE ON users",
                "  FOR EACH ROW",
                "  EXECUTE FUNCTION update_updated_at_column();",
            ])
        lines.extend([
            "",
            "-- Default administrator (password: Admin123!)",
            "INSERT INTO users (email, password, name, role, is_active, email_verified)",
            "VALUES (",
            "  'admin@example.com',",
            "  '$2a$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/LewdBPj6hsxq/3/Hm',",
            "  'System Administrator',",
            f"  '{admin_role}',",
            "  TRUE,",
            "  TRUE",
            ");",
        ])
        return "\n".join(lines) + "\n"


__all__: List[str] = ["ArtifactRenderer"]

logger.debug("modelforge.artifacts loaded: %d public symbols.", len(__all__))
