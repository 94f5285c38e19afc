"""Pytest configuration and shared fixtures."""

import io
import os
from collections.abc import Generator
from pathlib import Path

import pytest
from rich.console import Console

# Set test environment
os.environ.setdefault("KINDLE_LOG_LEVEL", "DEBUG")
os.environ.setdefault("KINDLE_SCAN_WORKERS", "4")


@pytest.fixture(autouse=True)
def mock_settings() -> Generator:
    """Clear cached settings around every test."""
    from kindle.core.config import clear_settings_cache

    # Clear any cached settings
    clear_settings_cache()

    yield

    # Clear again after test
    clear_settings_cache()


@pytest.fixture
def igniter(tmp_path: Path):
    """Provide an empty session rooted in a temporary project."""
    from kindle.igniter.models import Igniter

    return Igniter(root=tmp_path, task_registry={})


@pytest.fixture
def output() -> io.StringIO:
    """Buffer receiving progress lines."""
    return io.StringIO()


@pytest.fixture
def out(output: io.StringIO) -> Console:
    """Console writing progress lines into ``output``."""
    return Console(file=output, width=200, color_system=None)


@pytest.fixture
def no_compile():
    """Compile step that always succeeds."""
    return lambda: None


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Small project with a package, nested classes and an ignored venv."""
    (tmp_path / "app").mkdir()
    (tmp_path / "app" / "__init__.py").write_text("class App:\n    pass\n")
    (tmp_path / "app" / "extensions.py").write_text(
        "from kindle_ext import Extension\n"
        "\n"
        "\n"
        "class Audit(Extension):\n"
        "    class Options:\n"
        "        verbose = True\n"
        "\n"
        "\n"
        "class Helper:\n"
        "    pass\n"
        "\n"
        "\n"
        "def factory():\n"
        "    class Local(Extension):\n"
        "        pass\n"
        "    return Local\n"
    )
    (tmp_path / ".venv").mkdir()
    (tmp_path / ".venv" / "vendored.py").write_text("class Vendored:\n    pass\n")
    (tmp_path / "README.md").write_text("# sample\n")
    return tmp_path
