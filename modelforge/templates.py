# File: modelforge/templates.py
"""
ModelForge - Template Engine
=============================
A small logic-light templating language used for the primary per-model
artifacts (record interface, controller, relational schema) and the
shared auth sources.

Syntax::

    {{name}}                      simple interpolation
    {{a.b.c}}                     property path
    {{#if flag}} ... {{/if}}      kept iff ``flag`` resolves truthy
    {{#each items}} ... {{/each}} rendered once per element

Templates are parsed once, at registration, into a tuple of nodes; a
render walks that tree against a context.  Two behaviours are deliberate
and relied on by callers rendering partial contexts:

* an unresolved name or path (missing, or ``None``) renders as the
  original tag text, unchanged;
* ``#each`` over a missing or non-list value renders nothing.

Inside ``#each`` the context is the outer context overlaid by the
element's own properties plus ``this`` (the element itself); conditionals
nested in the block see that per-element context.  Whitespace around
tags is preserved exactly as authored.

The registry is the engine's only state.  Register templates at startup;
concurrent registration while rendering is not supported.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelforge.templates")

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TemplateNotFoundError(LookupError):
    """Raised by ``render`` for a template name that was never registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Template '{name}' not found")
        self.name: str = name


class TemplateSyntaxError(ValueError):
    """Unbalanced or mismatched block tags."""


# ---------------------------------------------------------------------------
# AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TextNode:
    text: str


@dataclass(frozen=True, slots=True)
class VariableNode:
    name: str
    raw: str


@dataclass(frozen=True, slots=True)
class PathNode:
    parts: Tuple[str, ...]
    raw: str


@dataclass(frozen=True, slots=True)
class IfNode:
    flag: Tuple[str, ...]
    body: Tuple["Node", ...]


@dataclass(frozen=True, slots=True)
class EachNode:
    source: Tuple[str, ...]
    body: Tuple["Node", ...]


Node = Union[TextNode, VariableNode, PathNode, IfNode, EachNode]

_TAG_RE: re.Pattern[str] = re.compile(
    r"\{\{\s*(?:"
    r"#(?P<open>if|each)\s+(?P<arg>[A-Za-z_$][\w$]*(?:\.[\w$]+)*)"
    r"|/(?P<close>if|each)"
    r"|(?P<ref>[A-Za-z_$][\w$]*(?:\.[\w$]+)*)"
    r")\s*\}\}"
)


def parse_template(text: str) -> Tuple[Node, ...]:
    """
    Parse template text into nodes.

    ``{{...}}`` sequences that are not valid tags (``{{ a b }}``) stay
    literal text.  Raises ``TemplateSyntaxError`` on unbalanced blocks.
    """
    root: List[Node] = []
    # (kind, argument, children) for every open block
    stack: List[Tuple[str, Tuple[str, ...], List[Node]]] = []
    current: List[Node] = root
    pos: int = 0

    for match in _TAG_RE.finditer(text):
        if match.start() > pos:
            current.append(TextNode(text[pos:match.start()]))
        pos = match.end()
        raw: str = match.group(0)

        if match.group("open"):
            children: List[Node] = []
            stack.append((match.group("open"), tuple(match.group("arg").split(".")), children))
            current = children
        elif match.group("close"):
            kind: str = match.group("close")
            if not stack:
                raise TemplateSyntaxError(f"Unexpected {raw} at offset {match.start()}")
            open_kind, arg, body = stack.pop()
            if open_kind != kind:
                raise TemplateSyntaxError(
                    f"{raw} at offset {match.start()} closes an open #{open_kind} block"
                )
            current = stack[-1][2] if stack else root
            node: Node = IfNode(arg, tuple(body)) if kind == "if" else EachNode(arg, tuple(body))
            current.append(node)
        else:
            ref: str = match.group("ref")
            if "." in ref:
                current.append(PathNode(tuple(ref.split(".")), raw))
            else:
                current.append(VariableNode(ref, raw))

    if stack:
        raise TemplateSyntaxError(f"Unclosed #{stack[-1][0]} block")
    if pos < len(text):
        current.append(TextNode(text[pos:]))
    return tuple(root)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

_MISSING = object()


def _lookup(container: Any, key: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(key, _MISSING)
    if isinstance(container, BaseModel):
        return getattr(container, key, _MISSING)
    if isinstance(container, (list, tuple)) and key.isdigit():
        index: int = int(key)
        return container[index] if index < len(container) else _MISSING
    return _MISSING


def _resolve(context: Mapping[str, Any], parts: Sequence[str]) -> Any:
    value: Any = context
    for part in parts:
        value = _lookup(value, part)
        if value is _MISSING or value is None:
            return _MISSING
    return value


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, BaseModel):
        return value.model_dump_json(by_alias=True)
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value)
    return str(value)


def _element_scope(outer: Mapping[str, Any], item: Any) -> Dict[str, Any]:
    scope: Dict[str, Any] = dict(outer)
    if isinstance(item, Mapping):
        scope.update(item)
    elif isinstance(item, BaseModel):
        scope.update({name: getattr(item, name) for name in type(item).model_fields})
    scope["this"] = item
    return scope


def render_nodes(nodes: Sequence[Node], context: Mapping[str, Any]) -> str:
    out: List[str] = []
    for node in nodes:
        if isinstance(node, TextNode):
            out.append(node.text)
        elif isinstance(node, VariableNode):
            value = _resolve(context, (node.name,))
            out.append(node.raw if value is _MISSING else _to_text(value))
        elif isinstance(node, PathNode):
            value = _resolve(context, node.parts)
            out.append(node.raw if value is _MISSING else _to_text(value))
        elif isinstance(node, IfNode):
            flag = _resolve(context, node.flag)
            if flag is not _MISSING and flag:
                out.append(render_nodes(node.body, context))
        else:
            items = _resolve(context, node.source)
            if isinstance(items, (list, tuple)):
                for item in items:
                    out.append(render_nodes(node.body, _element_scope(context, item)))
    return "".join(out)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class TemplateEngine:
    """
    Named-template registry and renderer.

    Built-in templates are registered on construction unless
    ``include_builtins=False``; ``add_template`` registers or overwrites.
    """

    def __init__(
        self,
        templates: Optional[Mapping[str, str]] = None,
        *,
        include_builtins: bool = True,
    ) -> None:
        self._templates: Dict[str, Tuple[str, Tuple[Node, ...]]] = {}
        if include_builtins:
            for name, text in BUILTIN_TEMPLATES.items():
                self.add_template(name, text)
        for name, text in (templates or {}).items():
            self.add_template(name, text)
        logger.debug("TemplateEngine initialised with %d template(s).", len(self._templates))

    def add_template(self, name: str, text: str) -> None:
        nodes = parse_template(text)
        if name in self._templates:
            logger.debug("Overwriting template '%s'.", name)
        self._templates[name] = (text, nodes)

    def has_template(self, name: str) -> bool:
        return name in self._templates

    def template_names(self) -> List[str]:
        return sorted(self._templates)

    def get_source(self, name: str) -> str:
        if name not in self._templates:
            raise TemplateNotFoundError(name)
        return self._templates[name][0]

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        if name not in self._templates:
            raise TemplateNotFoundError(name)
        return render_nodes(self._templates[name][1], context)

    def render_string(self, text: str, context: Mapping[str, Any]) -> str:
        """Render an unregistered template text."""
        return render_nodes(parse_template(text), context)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __repr__(self) -> str:
        return f"<TemplateEngine {len(self._templates)} templates>"


# ---------------------------------------------------------------------------
# Built-in template library
# ---------------------------------------------------------------------------
# Literal text must never contain a double opening brace: every "{{"
# starts a tag.

MODEL_INTERFACE_TEMPLATE: str = """\
export interface {{modelName}} {
  id: string;
{{#each fields}}  {{name}}{{optionalMark}}: {{tsType}};
{{/each}}{{#if timestamps}}  createdAt: Date;
  updatedAt: Date;
{{/if}}{{#if softDelete}}  deletedAt?: Date | null;
{{/if}}}

export interface Create{{modelName}}Request {
{{#each fields}}  {{name}}{{optionalMark}}: {{tsType}};
{{/each}}}

export interface Update{{modelName}}Request {
{{#each fields}}  {{name}}?: {{tsType}};
{{/each}}}
"""

EXPRESS_CONTROLLER_TEMPLATE: str = """\
import { Request, Response, NextFunction } from 'express';
import { {{modelName}}Service } from '../services/{{modelName}}Service';
import { Create{{modelName}}Request, Update{{modelName}}Request } from '../models/{{modelName}}';

export class {{modelName}}Controller {
  private {{serviceVar}}: {{modelName}}Service;

  constructor() {
    this.{{serviceVar}} = new {{modelName}}Service();
  }

  create = async (req: Request, res: Response, next: NextFunction): Promise<void> => {
    try {
      const data: Create{{modelName}}Request = req.body;
      const result = await this.{{serviceVar}}.create(data);
      res.status(201).json({ success: true, data: result });
    } catch (error) {
      next(error);
    }
  };

  getById = async (req: Request, res: Response, next: NextFunction): Promise<void> => {
    try {
      const result = await this.{{serviceVar}}.getById(req.params.id);
      if (!result) {
        res.status(404).json({ success: false, message: '{{modelName}} not found' });
        return;
      }
      res.json({ success: true, data: result });
    } catch (error) {
      next(error);
    }
  };

  getAll = async (req: Request, res: Response, next: NextFunction): Promise<void> => {
    try {
      const page = Math.max(Number(req.query.page) || 1, 1);
      const limit = Math.min(Math.max(Number(req.query.limit) || 10, 1), 100);
      const result = await this.{{serviceVar}}.getAll(page, limit);
      res.json({
        success: true,
        data: result.items,
        pagination: {
          page,
          limit,
          total: result.total,
          pages: Math.ceil(result.total / limit),
        },
      });
    } catch (error) {
      next(error);
    }
  };

  update = async (req: Request, res: Response, next: NextFunction): Promise<void> => {
    try {
      const data: Update{{modelName}}Request = req.body;
      const result = await this.{{serviceVar}}.update(req.params.id, data);
      if (!result) {
        res.status(404).json({ success: false, message: '{{modelName}} not found' });
        return;
      }
      res.json({ success: true, data: result });
    } catch (error) {
      next(error);
    }
  };

  delete = async (req: Request, res: Response, next: NextFunction): Promise<void> => {
    try {
      const deleted = await this.{{serviceVar}}.delete(req.params.id);
      if (!deleted) {
        res.status(404).json({ success: false, message: '{{modelName}} not found' });
        return;
      }
      res.status(204).send();
    } catch (error) {
      next(error);
    }
  };
}
"""

POSTGRESQL_SCHEMA_TEMPLATE: str = """\
CREATE TABLE {{tableName}} (
{{#each columns}}  {{definition}}{{separator}}
{{/each}});
{{#each indexes}}
CREATE INDEX {{indexName}} ON {{tableName}}({{column}});
{{/each}}{{#each relationships}}
-- {{kind}}: {{tableName}}.{{sourceColumn}} -> {{targetTable}}.{{targetColumn}}{{cascade}}
{{/each}}{{#if timestamps}}
-- Keep updated_at current on every update
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
  NEW.updated_at = NOW();
  RETURN NEW;
END;
$$ LANGUAGE plpgsql;

CREATE TRIGGER update_{{tableName}}_updated_at
  BEFORE UPDATE ON {{tableName}}
  FOR EACH ROW
  EXECUTE FUNCTION update_updated_at_column();
{{/if}}"""

MYSQL_SCHEMA_TEMPLATE: str = """\
CREATE TABLE {{tableName}} (
{{#each columns}}  {{definition}}{{separator}}
{{/each}}) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
{{#each indexes}}
CREATE INDEX {{indexName}} ON {{tableName}}({{column}});
{{/each}}{{#each relationships}}
-- {{kind}}: {{tableName}}.{{sourceColumn}} -> {{targetTable}}.{{targetColumn}}{{cascade}}
{{/each}}{{#if timestamps}}
-- Keep updated_at current on every update
CREATE TRIGGER update_{{tableName}}_updated_at
  BEFORE UPDATE ON {{tableName}}
  FOR EACH ROW
  SET NEW.updated_at = CURRENT_TIMESTAMP;
{{/if}}"""

JWT_AUTH_MIDDLEWARE_TEMPLATE: str = """\
import { Request, Response, NextFunction } from 'express';
import jwt from 'jsonwebtoken';

export interface AuthenticatedRequest extends Request {
  user: {
    userId: string;
    email: string;
    role: string;
  };
}

export const authenticateToken = (req: Request, res: Response, next: NextFunction): void => {
  const authHeader = req.headers['authorization'];
  const token = authHeader && authHeader.split(' ')[1];

  if (!token) {
    res.status(401).json({ success: false, message: 'Access token required' });
    return;
  }

  try {
    const decoded = jwt.verify(token, process.env.JWT_SECRET as string) as AuthenticatedRequest['user'];
    (req as AuthenticatedRequest).user = decoded;
    next();
  } catch (error) {
    res.status(403).json({ success: false, message: 'Invalid or expired token' });
  }
};
"""

AUTHORIZATION_MIDDLEWARE_TEMPLATE: str = """\
import { Request, Response, NextFunction } from 'express';
import { AuthenticatedRequest } from './auth';

const ROLES: Array<{ name: string; permissions: string[] }> = {{rolesJson}};

export const authorize = (...roles: string[]) => {
  return (req: Request, res: Response, next: NextFunction): void => {
    const user = (req as AuthenticatedRequest).user;
    if (!user) {
      res.status(401).json({ success: false, message: 'Authentication required' });
      return;
    }
    if (roles.length > 0 && !roles.includes(user.role)) {
      res.status(403).json({ success: false, message: 'Insufficient permissions' });
      return;
    }
    next();
  };
};
{{#each roles}}
export const require{{capitalizedName}} = authorize('{{name}}');
{{/each}}
export const hasPermission = (...permissions: string[]) => {
  return (req: Request, res: Response, next: NextFunction): void => {
    const user = (req as AuthenticatedRequest).user;
    if (!user) {
      res.status(401).json({ success: false, message: 'Authentication required' });
      return;
    }
    const role = ROLES.find((candidate) => candidate.name === user.role);
    if (!role || !permissions.some((permission) => role.permissions.includes(permission))) {
      res.status(403).json({ success: false, message: 'Insufficient permissions' });
      return;
    }
    next();
  };
};
"""

USER_MODEL_TEMPLATE: str = """\
export type UserRole = {{roleUnion}};

export interface User {
  id: string;
  email: string;
  password: string;
  name: string;
  role: UserRole;
  isActive: boolean;
  emailVerified: boolean;
  lastLoginAt?: Date;
  createdAt: Date;
  updatedAt: Date;
}

export interface CreateUserRequest {
  email: string;
  password: string;
  name: string;
  role?: UserRole;
}

export interface LoginRequest {
  email: string;
  password: string;
}

export interface AuthResult {
{{#if tokenAuth}}  token: string;
  refreshToken: string;
{{/if}}  user: {
    id: string;
    email: string;
    name: string;
    role: UserRole;
  };
}
"""

AUTH_SERVICE_TEMPLATE: str = """\
{{#if tokenAuth}}import jwt from 'jsonwebtoken';
{{/if}}import bcrypt from 'bcryptjs';
import { UserRepository } from '../repositories/UserRepository';
import { User, CreateUserRequest, LoginRequest, AuthResult } from '../models/User';

export class AuthService {
  private userRepository: UserRepository;

  constructor() {
    this.userRepository = new UserRepository();
  }

  async register(userData: CreateUserRequest): Promise<AuthResult> {
    const existingUser = await this.userRepository.findByEmail(userData.email);
    if (existingUser) {
      throw new Error('User already exists with this email');
    }

    const hashedPassword = await bcrypt.hash(userData.password, 12);
    const user = await this.userRepository.create({
      ...userData,
      password: hashedPassword,
      role: userData.role || '{{defaultRole}}',
      isActive: true,
      emailVerified: false,
    });
    return this.buildResult(user);
  }

  async login(credentials: LoginRequest): Promise<AuthResult> {
    const user = await this.userRepository.findByEmail(credentials.email);
    if (!user || !user.isActive) {
      throw new Error('Invalid credentials');
    }

    const isPasswordValid = await bcrypt.compare(credentials.password, user.password);
    if (!isPasswordValid) {
      throw new Error('Invalid credentials');
    }

    await this.userRepository.updateLastLogin(user.id);
    return this.buildResult(user);
  }

  private buildResult(user: User): AuthResult {
    return {
{{#if tokenAuth}}      token: this.generateAccessToken(user),
      refreshToken: this.generateRefreshToken(user),
{{/if}}      user: { id: user.id, email: user.email, name: user.name, role: user.role },
    };
  }
{{#if tokenAuth}}
  private generateAccessToken(user: User): string {
    return jwt.sign(
      { userId: user.id, email: user.email, role: user.role },
      process.env.JWT_SECRET as string,
      { expiresIn: process.env.JWT_EXPIRES_IN || '15m' }
    );
  }

  private generateRefreshToken(user: User): string {
    return jwt.sign(
      { userId: user.id },
      process.env.JWT_REFRESH_SECRET as string,
      { expiresIn: '7d' }
    );
  }
{{/if}}}
"""

BUILTIN_TEMPLATES: Dict[str, str] = {
    "model-interface": MODEL_INTERFACE_TEMPLATE,
    "express-controller": EXPRESS_CONTROLLER_TEMPLATE,
    "postgresql-schema": POSTGRESQL_SCHEMA_TEMPLATE,
    "mysql-schema": MYSQL_SCHEMA_TEMPLATE,
    "jwt-auth-middleware": JWT_AUTH_MIDDLEWARE_TEMPLATE,
    "authorization-middleware": AUTHORIZATION_MIDDLEWARE_TEMPLATE,
    "user-model": USER_MODEL_TEMPLATE,
    "auth-service": AUTH_SERVICE_TEMPLATE,
}


__all__: List[str] = [
    "TemplateNotFoundError",
    "TemplateSyntaxError",
    "TextNode",
    "VariableNode",
    "PathNode",
    "IfNode",
    "EachNode",
    "parse_template",
    "render_nodes",
    "TemplateEngine",
    "BUILTIN_TEMPLATES",
]

logger.debug("modelforge.templates loaded: %d public symbols.", len(__all__))
