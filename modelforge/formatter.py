# File: modelforge/formatter.py
"""
ModelForge - Code Formatter
============================
Best-effort normalisation and shallow structural checks for generated
files, dispatched on the file's content-language tag:

    typescript / javascript   re-indent by bracket nesting, then apply the
                              semicolon, quote and trailing-comma options
    json                      strict parse and pretty re-print
    sql                       keyword casing and clause indentation
    markdown                  heading spacing and blank-line collapsing

Unknown tags pass through untouched.  Formatting never raises: if a
language pass fails the original content is returned and a warning is
logged.  Validation is a smoke test for gross corruption, not a parser.

The TS/JS pass works on a *masked* copy of the source in which the inside
of every string, template literal and comment is blanked out, so
brackets and quotes in literals never count as code.
"""

from __future__ import annotations

import json
import logging
import re
from functools import partial
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

from modelforge.models import GeneratedFile

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelforge.formatter")


class FormatOptions(BaseModel):
    """Formatting switches; camelCase keys are accepted as aliases."""

    model_config = ConfigDict(
        populate_by_name=True, frozen=True, extra="forbid", protected_namespaces=()
    )

    indent_size: int = Field(default=2, ge=1, le=8, alias="indentSize")
    use_tabs: bool = Field(default=False, alias="useTabs")
    semicolons: bool = Field(default=True)
    single_quotes: bool = Field(default=True, alias="singleQuotes")
    trailing_commas: bool = Field(default=True, alias="trailingCommas")

    @property
    def indent_unit(self) -> str:
        return "\t" if self.use_tabs else " " * self.indent_size


class CodeValidationResult:
    """Outcome of ``CodeFormatter.validate_code``."""

    __slots__ = ("errors",)

    def __init__(self, errors: Optional[List[str]] = None) -> None:
        self.errors: List[str] = list(errors or [])

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors)}

    def __bool__(self) -> bool:
        return self.is_valid

    def __repr__(self) -> str:
        return f"<CodeValidationResult valid={self.is_valid} errors={len(self.errors)}>"


_CODE_LANGUAGES = frozenset({"typescript", "javascript"})

# ---------------------------------------------------------------------------
# Shared text helpers
# ---------------------------------------------------------------------------

_BLANK_RUN_RE: re.Pattern[str] = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")


def _finish(lines: Sequence[str]) -> str:
    """Strip trailing whitespace, collapse blank runs, exactly one final newline."""
    text: str = "\n".join(line.rstrip() for line in lines)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return text.strip("\n") + "\n"


# ---------------------------------------------------------------------------
# TS / JS masking
# ---------------------------------------------------------------------------

_OPENERS: Dict[str, str] = {"{": "}", "[": "]", "(": ")"}
_CLOSERS: Dict[str, str] = {v: k for k, v in _OPENERS.items()}


def _mask_code(content: str) -> Tuple[str, Set[int]]:
    """
    Return *content* with string, template and comment bodies replaced
    character-for-character (``x`` for literal text, spaces for comments),
    plus the indexes of lines that begin inside a template literal.
    """
    out: List[str] = []
    continued: Set[int] = set()
    state: Optional[str] = None
    line_no: int = 0
    i: int = 0
    n: int = len(content)
    while i < n:
        ch: str = content[i]
        if ch == "\n":
            line_no += 1
            if state == "`":
                continued.add(line_no)
            elif state in ("'", '"', "//"):
                state = None
            out.append("\n")
            i += 1
            continue
        if state is None:
            if ch in "'\"`":
                state = ch
                out.append(ch)
            elif content.startswith("//", i):
                state = "//"
                out.append("  ")
                i += 2
                continue
            elif content.startswith("/*", i):
                state = "/*"
                out.append("  ")
                i += 2
                continue
            else:
                out.append(ch)
        elif state == "//":
            out.append(" ")
        elif state == "/*":
            if content.startswith("*/", i):
                state = None
                out.append("  ")
                i += 2
                continue
            out.append(" ")
        else:
            if ch == "\\" and i + 1 < n and content[i + 1] != "\n":
                out.append("xx")
                i += 2
                continue
            if ch == state:
                state = None
                out.append(ch)
            else:
                out.append("x")
        i += 1
    return "".join(out), continued


def _literal_brace(masked_line: str, index: int) -> bool:
    """Whether the ``{`` at *index* opens an object literal rather than a block."""
    before: str = masked_line[:index].rstrip()
    if not before:
        return False
    if before.endswith("=>"):
        return False
    if before[-1] in "=(,:[?&|":
        return True
    return re.search(r"\b(?:return|default)$", before) is not None


class _Line:
    """One source line with its masked twin and bracket bookkeeping."""

    __slots__ = ("text", "mask", "keep", "top", "closes")

    def __init__(self, text: str, mask: str, keep: bool) -> None:
        self.text: str = text
        self.mask: str = mask
        self.keep: bool = keep
        # Innermost open bracket after this line: (char, is_literal) or None.
        self.top: Optional[Tuple[str, bool]] = None
        # Brackets closed by the leading closers of this line.
        self.closes: List[str] = []


# ---------------------------------------------------------------------------
# CodeFormatter
# ---------------------------------------------------------------------------


class CodeFormatter:
    """
    Formats and smoke-checks ``GeneratedFile`` objects.

    Usage::

        formatter = CodeFormatter()
        pretty = formatter.format_files(project.files)
        formatter.validate_code(pretty[0]).is_valid
    """

    def __init__(self, options: Optional[FormatOptions] = None) -> None:
        self.options: FormatOptions = options or FormatOptions()
        logger.debug("CodeFormatter initialised: %r", self.options)

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def format_file(
        self, file: GeneratedFile, options: Optional[FormatOptions] = None
    ) -> GeneratedFile:
        """Return a copy of *file* with formatted content; *file* is untouched."""
        content: str = self.format_content(file.content, file.language, options)
        if content == file.content:
            return file
        return file.with_content(content)

    def format_files(
        self,
        files: Sequence[GeneratedFile],
        options: Optional[FormatOptions] = None,
    ) -> List[GeneratedFile]:
        formatted: List[GeneratedFile] = [self.format_file(f, options) for f in files]
        changed: int = sum(1 for a, b in zip(files, formatted) if a is not b)
        logger.info("Formatted %d files (%d changed).", len(formatted), changed)
        return formatted

    def format_content(
        self,
        content: str,
        language: Optional[str],
        options: Optional[FormatOptions] = None,
    ) -> str:
        opts: FormatOptions = options or self.options
        handlers = {
            "typescript": partial(self._format_code, opts=opts),
            "javascript": partial(self._format_code, opts=opts),
            "json": partial(self._format_json, opts=opts),
            "sql": self._format_sql,
            "markdown": self._format_markdown,
        }
        handler = handlers.get(language or "")
        if handler is None:
            return content
        normalised: str = content.replace("\r\n", "\n")
        try:
            return handler(normalised)
        except Exception as exc:  # formatting is best-effort
            logger.warning("Formatter fallback for %s content: %s", language, exc)
            return content

    def validate_code(self, file: GeneratedFile) -> CodeValidationResult:
        """Shallow structural check of *file* according to its language tag."""
        if file.language in _CODE_LANGUAGES:
            return self._validate_code(file.content)
        if file.language == "json":
            return self._validate_json(file.content)
        if file.language == "sql":
            return self._validate_sql(file.content)
        return CodeValidationResult()

    # -----------------------------------------------------------------
    # TypeScript / JavaScript
    # -----------------------------------------------------------------

    def _format_code(self, content: str, opts: FormatOptions) -> str:
        masked, continued = _mask_code(content)
        raw_lines: List[str] = content.split("\n")
        mask_lines: List[str] = masked.split("\n")
        lines: List[_Line] = self._reindent(raw_lines, mask_lines, continued, opts.indent_unit)

        if opts.semicolons:
            self._add_semicolons(lines)
        else:
            self._remove_semicolons(lines)
        self._convert_quotes(lines, "'" if opts.single_quotes else '"')
        if opts.trailing_commas:
            self._add_trailing_commas(lines)
        else:
            self._remove_trailing_commas(lines)
        return _finish([line.text for line in lines])

    @staticmethod
    def _reindent(
        raw_lines: Sequence[str],
        mask_lines: Sequence[str],
        continued: Set[int],
        unit: str,
    ) -> List[_Line]:
        # Stack entries: [char, is_literal, carries_indent]
        stack: List[List[Any]] = []
        result: List[_Line] = []
        for index, (raw, mask) in enumerate(zip(raw_lines, mask_lines)):
            if index in continued:
                line = _Line(raw, mask, keep=True)
                for ch in mask:
                    if ch in _OPENERS:
                        stack.append([ch, ch == "[", False])
                    elif ch in _CLOSERS and stack:
                        stack.pop()
                line.top = (stack[-1][0], stack[-1][1]) if stack else None
                result.append(line)
                continue
            lead: int = len(raw) - len(raw.lstrip())
            text: str = raw[lead:].rstrip()
            code: str = mask[lead:lead + len(text)]
            if not text:
                result.append(_Line("", "", keep=False))
                continue

            line = _Line(text, code, keep=False)
            pos: int = 0
            while pos < len(code) and code[pos] in _CLOSERS:
                if stack:
                    line.closes.append(stack.pop()[0])
                pos += 1
            level: int = sum(1 for entry in stack if entry[2])
            if code.startswith(".") or (code.startswith("*") and not code.startswith("*/")):
                prefix: str = unit * level + (unit if code.startswith(".") else " ")
            else:
                prefix = unit * level

            opened_here: List[List[Any]] = []
            for offset in range(pos, len(code)):
                ch: str = code[offset]
                if ch in _OPENERS:
                    literal: bool = ch == "[" or (ch == "{" and _literal_brace(code, offset))
                    entry: List[Any] = [ch, literal, False]
                    stack.append(entry)
                    opened_here.append(entry)
                elif ch in _CLOSERS and stack:
                    closed = stack.pop()
                    if opened_here and opened_here[-1] is closed:
                        opened_here.pop()
            if opened_here:
                opened_here[-1][2] = True

            line.text = prefix + text
            line.mask = prefix + code
            line.top = (stack[-1][0], stack[-1][1]) if stack else None
            result.append(line)
        return result

    @staticmethod
    def _next_code(lines: Sequence[_Line], index: int) -> Optional[_Line]:
        for line in lines[index + 1:]:
            if line.mask.strip():
                return line
        return None

    _STATEMENT_RE: re.Pattern[str] = re.compile(
        r"^(?:const|let|var|return|throw|break|continue|export|import)\b"
    )
    _CONTINUATION_PREFIXES: Tuple[str, ...] = (".", "?", ":", "+", "-", "*", "/", "&&", "||", "=")

    def _add_semicolons(self, lines: List[_Line]) -> None:
        for index, line in enumerate(lines):
            if line.keep:
                continue
            code: str = line.mask.strip()
            if not code or not self._STATEMENT_RE.match(code):
                continue
            if not re.search(r"[\w'\"`)\]]$", code):
                continue
            if sum(code.count(c) for c in _OPENERS) != sum(code.count(c) for c in _CLOSERS):
                continue
            # Line ends inside a template literal.
            if index + 1 < len(lines) and lines[index + 1].keep:
                continue
            following = self._next_code(lines, index)
            if following is not None and following.mask.strip().startswith(self._CONTINUATION_PREFIXES):
                continue
            line.text += ";"
            line.mask += ";"

    @staticmethod
    def _remove_semicolons(lines: List[_Line]) -> None:
        for line in lines:
            if line.keep or not line.mask.rstrip().endswith(";"):
                continue
            cut: int = len(line.mask.rstrip()) - 1
            line.text = line.text[:cut] + line.text[cut + 1:]
            line.mask = line.mask[:cut] + line.mask[cut + 1:]

    @staticmethod
    def _convert_quotes(lines: List[_Line], target: str) -> None:
        source: str = '"' if target == "'" else "'"
        for line in lines:
            if line.keep:
                continue
            chars: List[str] = list(line.text)
            mask: str = line.mask
            pos: int = 0
            while pos < len(mask):
                ch: str = mask[pos]
                if ch not in "'\"`":
                    pos += 1
                    continue
                end: int = mask.find(ch, pos + 1)
                if end == -1:
                    break
                body: str = line.text[pos + 1:end]
                if ch == source and target not in body and "\\" not in body:
                    chars[pos] = target
                    chars[end] = target
                pos = end + 1
            line.text = "".join(chars)
            line.mask = "".join(
                target if (m == source and t == target) else m
                for m, t in zip(line.mask, line.text)
            )

    def _add_trailing_commas(self, lines: List[_Line]) -> None:
        for index, line in enumerate(lines):
            if line.keep or line.top is None or not line.top[1]:
                continue
            code: str = line.mask.rstrip()
            if not re.search(r"[\w'\"`)\]}]$", code):
                continue
            following = self._next_code(lines, index)
            if following is None or not following.closes:
                continue
            if following.closes[0] != line.top[0]:
                continue
            line.text = line.text.rstrip() + ","
            line.mask = code + ","

    def _remove_trailing_commas(self, lines: List[_Line]) -> None:
        for index, line in enumerate(lines):
            if line.keep or not line.mask.rstrip().endswith(","):
                continue
            following = self._next_code(lines, index)
            if following is None or not following.closes:
                continue
            cut: int = len(line.mask.rstrip()) - 1
            line.text = line.text[:cut] + line.text[cut + 1:]
            line.mask = line.mask[:cut] + line.mask[cut + 1:]

    @staticmethod
    def _validate_code(content: str) -> CodeValidationResult:
        masked, _ = _mask_code(content)
        errors: List[str] = []
        for opener, label in (("{", "braces"), ("(", "parentheses"), ("[", "brackets")):
            if masked.count(opener) != masked.count(_OPENERS[opener]):
                errors.append(f"Mismatched {label}")
        return CodeValidationResult(errors)

    # -----------------------------------------------------------------
    # JSON
    # -----------------------------------------------------------------

    @staticmethod
    def _format_json(content: str, opts: FormatOptions) -> str:
        try:
            parsed: Any = json.loads(content)
        except json.JSONDecodeError:
            logger.warning("JSON content did not parse; left unchanged.")
            return content
        return json.dumps(parsed, indent=opts.indent_unit, ensure_ascii=False) + "\n"

    @staticmethod
    def _validate_json(content: str) -> CodeValidationResult:
        try:
            json.loads(content)
        except json.JSONDecodeError as exc:
            return CodeValidationResult([str(exc)])
        return CodeValidationResult()

    # -----------------------------------------------------------------
    # SQL
    # -----------------------------------------------------------------

    _SQL_KEYWORDS: Tuple[str, ...] = (
        "CREATE", "TABLE", "INSERT", "INTO", "SELECT", "FROM", "WHERE", "AND",
        "OR", "ORDER", "BY", "GROUP", "HAVING", "LIMIT", "OFFSET", "VALUES",
        "UPDATE", "DELETE", "SET", "NOT", "NULL", "UNIQUE", "PRIMARY", "KEY",
        "DEFAULT", "REFERENCES", "INDEX", "ON", "TRIGGER", "BEFORE", "AFTER",
        "FOR", "EACH", "ROW", "EXECUTE", "FUNCTION", "RETURNS", "BEGIN", "END",
        "RETURN", "REPLACE", "CHECK", "IN", "AS", "LANGUAGE", "CASCADE",
    )
    _SQL_KEYWORD_RE: re.Pattern[str] = re.compile(
        r"\b(" + "|".join(_SQL_KEYWORDS) + r")\b", re.IGNORECASE
    )
    _SQL_STARTERS_RE: re.Pattern[str] = re.compile(
        r"^(CREATE|INSERT|SELECT|UPDATE|DELETE|DROP|ALTER|GRANT|REVOKE|RETURNS|VALUES|WITH)\b",
        re.IGNORECASE,
    )
    _SQL_STATEMENT_RE: re.Pattern[str] = re.compile(
        r"^(CREATE|INSERT|SELECT|UPDATE|DELETE|DROP|ALTER|GRANT|REVOKE)\b"
    )

    @classmethod
    def _upper_keywords(cls, line: str) -> str:
        """Uppercase keywords outside quotes and trailing ``--`` comments."""
        parts: List[str] = re.split(r"('(?:[^']|'')*')", line)
        for i in range(0, len(parts), 2):
            chunk: str = parts[i]
            comment_at: int = chunk.find("--")
            code: str = chunk if comment_at == -1 else chunk[:comment_at]
            parts[i] = cls._SQL_KEYWORD_RE.sub(lambda m: m.group(1).upper(), code) + chunk[len(code):]
            if comment_at != -1:
                break
        return "".join(parts)

    @staticmethod
    def _paren_delta(line: str) -> int:
        code: str = re.sub(r"'(?:[^']|'')*'", "''", line.split("--", 1)[0])
        return code.count("(") - code.count(")")

    def _format_sql(self, content: str) -> str:
        unit: str = "  "
        out: List[str] = []
        depth: int = 0
        in_body: bool = False
        statement_open: bool = False
        for raw in content.split("\n"):
            text: str = raw.strip()
            if not text:
                out.append("")
                continue
            if text.startswith("--"):
                out.append(unit * depth + text)
                continue
            text = self._upper_keywords(text)
            upper: str = text.upper()
            if in_body:
                if text.startswith("$$"):
                    indent = 0
                elif upper.startswith(("BEGIN", "END", "DECLARE")):
                    indent = 0
                else:
                    indent = 1
            elif text.startswith(")"):
                indent = max(depth - 1, 0)
            elif depth > 0:
                indent = depth
            elif self._SQL_STARTERS_RE.match(text):
                indent = 0
            elif statement_open:
                indent = 1
            else:
                indent = 0
            out.append(unit * indent + text)

            if text.count("$$") % 2 == 1:
                in_body = not in_body
            if not in_body:
                depth = max(depth + self._paren_delta(text), 0)
                statement_open = not text.rstrip().endswith(";")
        return _finish(out)

    @classmethod
    def _sql_statements(cls, content: str) -> List[str]:
        """Split on ``;`` outside quotes, comments and ``$$`` bodies."""
        statements: List[str] = []
        current: List[str] = []
        i: int = 0
        n: int = len(content)
        in_quote: bool = False
        in_body: bool = False
        while i < n:
            ch: str = content[i]
            if not in_quote and not in_body and content.startswith("--", i):
                end: int = content.find("\n", i)
                i = n if end == -1 else end
                continue
            if not in_quote and content.startswith("$$", i):
                in_body = not in_body
                current.append("$$")
                i += 2
                continue
            if ch == "'" and not in_body:
                in_quote = not in_quote
            if ch == ";" and not in_quote and not in_body:
                statements.append("".join(current).strip())
                current = []
            else:
                current.append(ch)
            i += 1
        tail: str = "".join(current).strip()
        if tail:
            statements.append(tail)
        return [s for s in statements if s]

    def _validate_sql(self, content: str) -> CodeValidationResult:
        errors: List[str] = []
        for statement in self._sql_statements(content):
            if not self._SQL_STATEMENT_RE.match(statement.upper()):
                errors.append(f"Invalid SQL statement: {statement[:50]}...")
        return CodeValidationResult(errors)

    # -----------------------------------------------------------------
    # Markdown
    # -----------------------------------------------------------------

    _HEADING_RE: re.Pattern[str] = re.compile(r"^(#{1,6})[ \t]*(\S.*)$")

    def _format_markdown(self, content: str) -> str:
        out: List[str] = []
        in_fence: bool = False
        for line in content.split("\n"):
            if line.lstrip().startswith("```"):
                in_fence = not in_fence
                out.append(line)
                continue
            if not in_fence:
                line = self._HEADING_RE.sub(r"\1 \2", line)
            out.append(line)
        return _finish(out)


__all__: List[str] = [
    "FormatOptions",
    "CodeFormatter",
    "CodeValidationResult",
]

logger.debug("modelforge.formatter loaded: %d public symbols.", len(__all__))
