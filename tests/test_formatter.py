"""
tests/test_formatter.py
Unit tests for modelforge.formatter module.

Tests cover:
- FormatOptions defaults and aliases
- TypeScript re-indentation, semicolons, quotes and trailing commas
- Template literals kept verbatim
- JSON re-serialisation and fallback on parse errors
- SQL keyword casing and indentation
- Markdown heading spacing and blank-line collapsing
- Structural validation (braces, JSON, SQL statements)
- Formatting of a whole generated project
"""

from __future__ import annotations

import json
from typing import Optional

import pytest
from pydantic import ValidationError as PydanticValidationError

from modelforge.formatter import CodeFormatter, CodeValidationResult, FormatOptions
from modelforge.models import GeneratedFile, GeneratedProject


@pytest.fixture()
def formatter() -> CodeFormatter:
    return CodeFormatter()


def _file(content: str, language: Optional[str], path: str = "src/x.ts") -> GeneratedFile:
    return GeneratedFile(path=path, content=content, kind="source", language=language)


# ===========================================================================
# Options
# ===========================================================================


class TestFormatOptions:

    def test_defaults(self) -> None:
        opts = FormatOptions()
        assert opts.indent_unit == "  "
        assert opts.semicolons and opts.single_quotes and opts.trailing_commas

    def test_aliases(self) -> None:
        opts = FormatOptions.model_validate({"indentSize": 4, "singleQuotes": False})
        assert opts.indent_unit == "    "
        assert opts.single_quotes is False

    def test_tabs(self) -> None:
        assert FormatOptions(use_tabs=True).indent_unit == "\t"

    @pytest.mark.parametrize("size", [0, 9])
    def test_indent_bounds(self, size: int) -> None:
        with pytest.raises(PydanticValidationError):
            FormatOptions(indent_size=size)

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            FormatOptions.model_validate({"printWidth": 80})


# ===========================================================================
# TypeScript / JavaScript
# ===========================================================================


class TestTypeScript:

    def test_reindent_block(self, formatter: CodeFormatter) -> None:
        source = 'function greet(name: string) {\nreturn "hi " + name\n}'
        out = formatter.format_content(source, "typescript")
        assert out == "function greet(name: string) {\n  return 'hi ' + name;\n}\n"

    def test_nested_blocks(self, formatter: CodeFormatter) -> None:
        source = "if (a) {\nif (b) {\nrun();\n}\n}\n"
        out = formatter.format_content(source, "typescript")
        assert out == "if (a) {\n  if (b) {\n    run();\n  }\n}\n"

    def test_object_literal_trailing_comma(self, formatter: CodeFormatter) -> None:
        source = "const config = {\na: 1,\nb: 2\n}\n"
        out = formatter.format_content(source, "typescript")
        assert out == "const config = {\n  a: 1,\n  b: 2,\n}\n"

    def test_trailing_commas_removed(self) -> None:
        formatter = CodeFormatter(FormatOptions(trailing_commas=False))
        out = formatter.format_content("const list = [\n1,\n2,\n];\n", "typescript")
        assert out == "const list = [\n  1,\n  2\n];\n"

    def test_no_trailing_comma_in_call_arguments(self, formatter: CodeFormatter) -> None:
        source = "query(\n'SELECT 1',\n[id]\n);\n"
        out = formatter.format_content(source, "typescript")
        assert "  [id]\n" in out

    def test_method_chain_continuation(self, formatter: CodeFormatter) -> None:
        source = "const r = request(app)\n.post('/x')\n.send(data);\n"
        out = formatter.format_content(source, "typescript")
        assert out == "const r = request(app)\n  .post('/x')\n  .send(data);\n"

    def test_semicolons_removed(self) -> None:
        formatter = CodeFormatter(FormatOptions(semicolons=False))
        assert formatter.format_content("const x = 1;\n", "javascript") == "const x = 1\n"

    def test_double_quotes(self) -> None:
        formatter = CodeFormatter(FormatOptions(single_quotes=False))
        out = formatter.format_content("import x from 'y';\n", "typescript")
        assert out == 'import x from "y";\n'

    def test_quote_with_embedded_target_kept(self, formatter: CodeFormatter) -> None:
        source = 'const msg = "it\'s here";\n'
        assert formatter.format_content(source, "typescript") == source

    def test_tabs(self) -> None:
        formatter = CodeFormatter(FormatOptions(use_tabs=True))
        out = formatter.format_content("if (a) {\nrun();\n}\n", "typescript")
        assert out == "if (a) {\n\trun();\n}\n"

    def test_template_literal_verbatim(self, formatter: CodeFormatter) -> None:
        source = "const sql = `\n    SELECT *\n  FROM t\n`;\n"
        out = formatter.format_content(source, "typescript")
        assert out == source

    def test_braces_in_strings_do_not_indent(self, formatter: CodeFormatter) -> None:
        out = formatter.format_content("const open = '{';\nconst x = 1;\n", "typescript")
        assert out == "const open = '{';\nconst x = 1;\n"

    def test_blank_runs_collapsed(self, formatter: CodeFormatter) -> None:
        out = formatter.format_content("const a = 1;\n\n\n\nconst b = 2;   \n\n", "typescript")
        assert out == "const a = 1;\n\nconst b = 2;\n"


# ===========================================================================
# JSON / SQL / Markdown
# ===========================================================================


class TestJson:

    def test_reformatted(self, formatter: CodeFormatter) -> None:
        out = formatter.format_content('{"name":"test","n":[1,2]}', "json")
        assert '  "name": "test"' in out
        assert json.loads(out) == {"name": "test", "n": [1, 2]}
        assert out.endswith("}\n")

    def test_indent_size(self) -> None:
        out = CodeFormatter(FormatOptions(indent_size=4)).format_content('{"a":1}', "json")
        assert out == '{\n    "a": 1\n}\n'

    def test_invalid_json_unchanged(self, formatter: CodeFormatter) -> None:
        assert formatter.format_content("{broken", "json") == "{broken"

    def test_non_ascii_kept(self, formatter: CodeFormatter) -> None:
        assert "café" in formatter.format_content('{"name":"café"}', "json")


class TestSql:

    def test_keywords_and_indent(self, formatter: CodeFormatter) -> None:
        source = "create table users (\nid uuid primary key,\nemail varchar(255) not null\n);"
        out = formatter.format_content(source, "sql")
        assert out == (
            "CREATE TABLE users (\n"
            "  id uuid PRIMARY KEY,\n"
            "  email varchar(255) NOT NULL\n"
            ");\n"
        )

    def test_quoted_text_untouched(self, formatter: CodeFormatter) -> None:
        out = formatter.format_content("insert into t values ('select me');", "sql")
        assert out == "INSERT INTO t VALUES ('select me');\n"

    def test_comments_untouched(self, formatter: CodeFormatter) -> None:
        out = formatter.format_content("-- create the table\nselect 1;", "sql")
        assert out == "-- create the table\nSELECT 1;\n"

    def test_function_body(self, formatter: CodeFormatter) -> None:
        source = (
            "create or replace function touch()\n"
            "returns trigger as $$\n"
            "begin\n"
            "new.updated_at = now();\n"
            "return new;\n"
            "end;\n"
            "$$ language plpgsql;"
        )
        out = formatter.format_content(source, "sql")
        assert out.splitlines() == [
            "CREATE OR REPLACE FUNCTION touch()",
            "RETURNS TRIGGER AS $$",
            "BEGIN",
            "  new.updated_at = now();",
            "  RETURN new;",
            "END;",
            "$$ LANGUAGE plpgsql;",
        ]


class TestMarkdown:

    def test_heading_spacing(self, formatter: CodeFormatter) -> None:
        out = formatter.format_content("#Title\n\n\n\n##  Sub\ntext", "markdown")
        assert out == "# Title\n\n## Sub\ntext\n"
        assert "\n\n\n" not in out

    def test_fenced_code_untouched(self, formatter: CodeFormatter) -> None:
        source = "```bash\n#comment\n```\n"
        assert formatter.format_content(source, "markdown") == source


class TestOtherLanguages:

    @pytest.mark.parametrize("language", ["dockerfile", "yaml", "dotenv", None])
    def test_unchanged(self, formatter: CodeFormatter, language: Optional[str]) -> None:
        source = "KEY=value  \n\n\n"
        assert formatter.format_content(source, language) == source


# ===========================================================================
# format_file / format_files
# ===========================================================================


class TestFormatFile:

    def test_unchanged_file_returned_as_is(self, formatter: CodeFormatter) -> None:
        f = _file("const x = 1;\n", "typescript")
        assert formatter.format_file(f) is f

    def test_changed_file_is_copy(self, formatter: CodeFormatter) -> None:
        f = _file('{"a":1}', "json", path="package.json")
        formatted = formatter.format_file(f)
        assert formatted is not f
        assert f.content == '{"a":1}'
        assert formatted.path == "package.json"
        assert formatted.checksum != f.checksum

    def test_per_call_options(self, formatter: CodeFormatter) -> None:
        f = _file("const x = 1;\n", "typescript")
        formatted = formatter.format_file(f, FormatOptions(semicolons=False))
        assert formatted.content == "const x = 1\n"

    def test_generated_project(self, formatter: CodeFormatter, blog_project: GeneratedProject) -> None:
        formatted = formatter.format_files(blog_project.files)
        assert [f.path for f in formatted] == blog_project.file_paths
        for f in formatted:
            if f.language == "typescript":
                result = formatter.validate_code(f)
                assert result.is_valid, f"{f.path}: {result.errors}"
            if f.language == "json":
                json.loads(f.content)
        suite = next(f for f in formatted if f.path == "src/tests/UserController.test.ts")
        assert "    name: 'test string'," in suite.content


# ===========================================================================
# validate_code
# ===========================================================================


class TestValidateCode:

    def test_balanced(self, formatter: CodeFormatter) -> None:
        result = formatter.validate_code(_file("const a = { b: [1, (2)] };\n", "typescript"))
        assert result.is_valid
        assert result.to_dict() == {"isValid": True, "errors": []}

    def test_mismatched(self, formatter: CodeFormatter) -> None:
        result = formatter.validate_code(_file("function f() {\n  g((1);\n", "javascript"))
        assert result.errors == ["Mismatched braces", "Mismatched parentheses"]
        assert not result

    def test_brackets_in_strings_ignored(self, formatter: CodeFormatter) -> None:
        result = formatter.validate_code(_file("const s = '[{(';\n// ]\n", "typescript"))
        assert result.is_valid

    def test_json(self, formatter: CodeFormatter) -> None:
        assert formatter.validate_code(_file("{}", "json", "a.json")).is_valid
        bad = formatter.validate_code(_file("{,}", "json", "a.json"))
        assert len(bad.errors) == 1

    def test_sql(self, formatter: CodeFormatter) -> None:
        good = "CREATE TABLE a (id INT);\n-- note; with semicolon\nINSERT INTO a VALUES (1);\n"
        assert formatter.validate_code(_file(good, "sql", "a.sql")).is_valid
        bad = formatter.validate_code(_file("CREATE TABLE a (id INT);\nfoo bar;", "sql", "a.sql"))
        assert bad.errors == ["Invalid SQL statement: foo bar..."]

    def test_sql_function_body_not_split(self, formatter: CodeFormatter, blog_project: GeneratedProject) -> None:
        schema = blog_project.get_file("src/schemas/post.sql")
        assert schema is not None
        assert formatter.validate_code(schema).is_valid

    def test_other_languages_always_valid(self, formatter: CodeFormatter) -> None:
        assert formatter.validate_code(_file("{{{", "markdown", "README.md")).is_valid

    def test_result_repr(self) -> None:
        assert "valid=False" in repr(CodeValidationResult(["x"]))
