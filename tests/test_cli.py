"""
tests/test_cli.py
Tests for the modelforge command-line interface.

Tests cover:
- Exit codes for success, validation, generation and input errors
- Validate-only mode
- Archive output, dry runs and option overrides
"""

from __future__ import annotations

import logging
import pathlib
import tarfile
import zipfile
from typing import Any, Dict, Iterator, List

import pytest
import yaml

from modelforge.cli import (
    EXIT_GENERATION_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    cli_main,
)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    logging.disable(logging.NOTSET)
    logging.getLogger("modelforge").propagate = True


def _run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        cli_main(argv)
    return exc_info.value.code


@pytest.fixture()
def broken_input_path(tmp_path: pathlib.Path, input_dict: Dict[str, Any]) -> pathlib.Path:
    input_dict["models"][0]["relationships"][0]["targetModel"] = "Comment"
    path = tmp_path / "broken.yaml"
    path.write_text(yaml.safe_dump(input_dict, sort_keys=False), encoding="utf-8")
    return path


# ===========================================================================
# Arguments
# ===========================================================================


class TestArguments:

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["--version"]) == EXIT_SUCCESS
        assert "ModelForge v" in capsys.readouterr().out

    def test_unknown_argument(self) -> None:
        assert _run(["models.yaml", "--bogus"]) == EXIT_INPUT_ERROR

    def test_invalid_choice(self, input_yaml_path: pathlib.Path) -> None:
        assert _run([str(input_yaml_path), "--database", "oracle"]) == EXIT_INPUT_ERROR

    def test_missing_input(self, tmp_path: pathlib.Path) -> None:
        assert _run([str(tmp_path / "absent.yaml"), "-q"]) == EXIT_INPUT_ERROR

    def test_directory_input(self, tmp_path: pathlib.Path) -> None:
        assert _run([str(tmp_path), "-q"]) == EXIT_INPUT_ERROR


# ===========================================================================
# Validate-only
# ===========================================================================


class TestValidateOnly:

    def test_valid_input(self, input_yaml_path: pathlib.Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run([str(input_yaml_path), "--validate-only", "-q"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Model Validation Report" in out
        assert "Valid:    Yes" in out

    def test_invalid_input(self, broken_input_path: pathlib.Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run([str(broken_input_path), "--validate-only", "-q"]) == EXIT_VALIDATION_ERROR
        assert "TARGET_MODEL_NOT_FOUND" in capsys.readouterr().out

    def test_writes_nothing(self, input_yaml_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        out_dir = tmp_path / "dist"
        _run([str(input_yaml_path), "--validate-only", "-q", "-o", str(out_dir)])
        assert not out_dir.exists()


# ===========================================================================
# Generation
# ===========================================================================


class TestGeneration:

    def test_zip_written(self, input_yaml_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        out_dir = tmp_path / "dist"
        assert _run([str(input_yaml_path), "-q", "-o", str(out_dir)]) == EXIT_SUCCESS
        archive = out_dir / "blog-api.zip"
        assert archive.is_file()
        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
        assert names[:2] == ["project.json", "SETUP.md"]
        assert "src/app.ts" in names

    def test_summary_printed(
        self, input_yaml_path: pathlib.Path, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _run([str(input_yaml_path), "-q", "-o", str(tmp_path)])
        out = capsys.readouterr().out
        assert "Status:           SUCCESS" in out
        assert "blog-api.zip" in out

    def test_dry_run(self, input_yaml_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        out_dir = tmp_path / "dist"
        assert _run([str(input_yaml_path), "-q", "--dry-run", "-o", str(out_dir)]) == EXIT_SUCCESS
        assert not (out_dir / "blog-api.zip").exists()

    def test_tar_enterprise(self, input_yaml_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        argv = [str(input_yaml_path), "-q", "-o", str(tmp_path), "--format", "tar", "--template", "enterprise"]
        assert _run(argv) == EXIT_SUCCESS
        with tarfile.open(tmp_path / "blog-api.tar.gz", mode="r:gz") as tf:
            names = tf.getnames()
        assert "helm/Chart.yaml" in names

    def test_overrides(self, input_yaml_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        argv = [
            str(input_yaml_path), "-q", "-o", str(tmp_path),
            "--project-name", "shop", "--database", "mongodb", "--no-tests", "--no-format",
        ]
        assert _run(argv) == EXIT_SUCCESS
        with zipfile.ZipFile(tmp_path / "shop.zip") as zf:
            names = zf.namelist()
        assert not any(n.endswith(".sql") for n in names)
        assert not any(n.startswith("src/tests/") for n in names)

    def test_validation_failure(self, broken_input_path: pathlib.Path, tmp_path: pathlib.Path) -> None:
        assert _run([str(broken_input_path), "-q", "-o", str(tmp_path)]) == EXIT_VALIDATION_ERROR
        assert list(tmp_path.glob("*.zip")) == []

    def test_input_without_models(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("projectName: nothing\n", encoding="utf-8")
        assert _run([str(path), "-q", "-o", str(tmp_path)]) == EXIT_INPUT_ERROR

    def test_colliding_model_name(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "auth.yaml"
        model = {"name": "Auth", "fields": [{"name": "id", "type": "uuid", "required": True, "unique": True}]}
        path.write_text(yaml.safe_dump({"models": [model]}, sort_keys=False), encoding="utf-8")
        assert _run([str(path), "-q", "-o", str(tmp_path)]) == EXIT_GENERATION_ERROR
        assert list(tmp_path.glob("*.zip")) == []
