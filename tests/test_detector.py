"""Tests for framework detection against project checkouts."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# Ensure the repository's src/ directory is importable without installation.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from reviewr_templates.core.catalog import TemplateCatalog  # noqa: E402
from reviewr_templates.core.paths import get_bundled_catalog_dir  # noqa: E402
from reviewr_templates.processors.detector import (  # noqa: E402
    FrameworkDetector,
    normalize_package_name,
    parse_requirement_name,
)


def _touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def bundled_skills():
    return TemplateCatalog([get_bundled_catalog_dir()]).list(kind="skills")


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Django", "django"),
        ("python_dateutil", "python-dateutil"),
        ("zope.interface", "zope-interface"),
        ("@Angular/Core", "@angular/core"),
    ],
)
def test_normalize_package_name(name, expected):
    assert normalize_package_name(name) == expected


@pytest.mark.parametrize(
    "line,expected",
    [
        ("fastapi>=0.110", "fastapi"),
        ("uvicorn[standard]==0.29.0  # server", "uvicorn"),
        ("  # just a comment", None),
        ("-r base.txt", None),
        ("", None),
    ],
)
def test_parse_requirement_name(line, expected):
    assert parse_requirement_name(line) == expected


def test_collect_dependencies_reads_all_manifests(tmp_path):
    _touch(tmp_path / "package.json", json.dumps({
        "dependencies": {"react": "^18.2.0"},
        "devDependencies": {"@angular/core": "^17.0.0"},
        "peerDependencies": {"react-dom": "^18.2.0"},
    }))
    _touch(tmp_path / "requirements.txt", "Django==5.0\n# comment\n-r dev.txt\n")
    _touch(tmp_path / "requirements-dev.txt", "pytest\n")
    _touch(tmp_path / "pyproject.toml", (
        "[project]\n"
        "dependencies = [\"fastapi>=0.110\"]\n"
        "[project.optional-dependencies]\n"
        "server = [\"uvicorn[standard]\"]\n"
        "[tool.poetry.dependencies]\n"
        "python = \"^3.11\"\n"
        "Starlette = \"*\"\n"
    ))
    _touch(tmp_path / "Pipfile", "[packages]\nflask = \"*\"\n[dev-packages]\nblack = \"*\"\n")

    deps = FrameworkDetector().collect_dependencies(tmp_path)

    assert deps == {
        "react", "@angular/core", "react-dom", "django", "pytest",
        "fastapi", "uvicorn", "starlette", "flask", "black",
    }


def test_broken_manifests_are_ignored(tmp_path):
    _touch(tmp_path / "package.json", "{oops")
    _touch(tmp_path / "pyproject.toml", "[project\n")
    assert FrameworkDetector().collect_dependencies(tmp_path) == set()


@pytest.mark.parametrize(
    "filename,content",
    [
        ("package.json", b"[1]"),
        ("package.json", b"\"react\""),
        ("package.json", b"{\"dependencies\": {\"caf\xe9\": \"1\"}}"),
        ("requirements.txt", b"caf\xe9==1.0\n"),
        ("pyproject.toml", b"project = \"flask\"\n"),
        ("Pipfile", b"packages = [\"flask\"]\n"),
    ],
)
def test_unusable_manifests_do_not_break_detection(tmp_path, bundled_skills, filename, content):
    (tmp_path / filename).write_bytes(content)

    assert FrameworkDetector().collect_dependencies(tmp_path) == set()
    assert FrameworkDetector().detect(tmp_path, bundled_skills) == []


def test_collect_files_honours_depth_and_ignores(tmp_path):
    _touch(tmp_path / "manage.py")
    _touch(tmp_path / "app" / "views.py")
    _touch(tmp_path / "a" / "b" / "c" / "deep.py")
    _touch(tmp_path / "node_modules" / "react" / "index.js")

    files = FrameworkDetector(max_depth=3).collect_files(tmp_path)

    assert "manage.py" in files
    assert "app/views.py" in files
    assert "a/b/c/deep.py" not in files
    assert not any(f.startswith("node_modules/") for f in files)


def test_detect_django_project(tmp_path, bundled_skills):
    _touch(tmp_path / "manage.py")
    _touch(tmp_path / "shop" / "settings.py")
    _touch(tmp_path / "orders" / "migrations" / "0001_initial.py")
    _touch(tmp_path / "requirements.txt", "Django>=5.0\ndjangorestframework\n")

    matches = FrameworkDetector().detect(tmp_path, bundled_skills)

    assert [m.record.name for m in matches] == ["django"]
    top = matches[0]
    assert top.matched_files == ["manage.py", "**/settings.py", "**/migrations/*.py"]
    assert top.matched_dependencies == ["django", "djangorestframework"]
    assert top.score == 5


def test_detect_orders_by_score(tmp_path, bundled_skills):
    _touch(tmp_path / "web" / "src" / "App.tsx")
    _touch(tmp_path / "web" / "package.json")
    _touch(tmp_path / "package.json", json.dumps({"dependencies": {"react": "18", "react-dom": "18"}}))
    _touch(tmp_path / "requirements.txt", "fastapi\n")

    matches = FrameworkDetector().detect(tmp_path, bundled_skills)

    assert [m.record.name for m in matches] == ["react", "fastapi"]
    assert matches[0].score == 3


def test_min_score_filters_weak_matches(tmp_path, bundled_skills):
    _touch(tmp_path / "requirements.txt", "fastapi\n")

    assert FrameworkDetector().detect(tmp_path, bundled_skills, min_score=2) == []


def test_basename_patterns_match_nested_files(tmp_path, bundled_skills):
    _touch(tmp_path / "apps" / "portal" / "angular.json", "{}")

    matches = FrameworkDetector().detect(tmp_path, bundled_skills)

    assert [(m.record.name, m.matched_files) for m in matches] == [("angular", ["angular.json"])]


def test_detect_requires_existing_directory(tmp_path, bundled_skills):
    with pytest.raises(FileNotFoundError):
        FrameworkDetector().detect(tmp_path / "missing", bundled_skills)
