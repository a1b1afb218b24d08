"""Shared fixtures: an isolated data directory and small on-disk catalogs."""

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

from reviewr_templates.core.models import DOCUMENT_FILES  # noqa: E402


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Point the runtime data directory at a temp folder for every test."""
    path = tmp_path / "data"
    monkeypatch.setenv("REVIEWR_TEMPLATES_DATA_DIR", str(path))
    return path


def write_template(root: Path, kind: str, name: str, document: str | None = None, /, **meta) -> Path:
    """Create ``<root>/<kind>/<name>`` with a meta.json and primary document.

    Keyword arguments override the default metadata, including ``name`` (so a
    meta name can differ from the directory). A ``None`` value drops the field.
    Pass the document text positionally.
    """
    template_dir = root / kind / name
    template_dir.mkdir(parents=True, exist_ok=True)
    data = {
        "name": name,
        "displayName": name.replace("-", " ").title(),
        "version": "1.0.0",
        "description": f"{name} review guidelines",
        "category": "testing",
    }
    if kind == "skills":
        data.update({"language": "python", "framework": name})
    if kind == "hooks":
        data["event"] = "pre-review"
    data.update(meta)
    data = {k: v for k, v in data.items() if v is not None}
    (template_dir / "meta.json").write_text(json.dumps(data, indent=2), encoding="utf-8")

    if document is None:
        document = f"# {data.get('displayName', name)}\n\n## Checks\n\n- [ ] Something about {name}\n"
    (template_dir / DOCUMENT_FILES[kind]).write_text(document, encoding="utf-8")
    return template_dir


@pytest.fixture
def template_writer():
    return write_template


@pytest.fixture
def catalog_root(tmp_path):
    """A small catalog: two skills, a hook, an agent and a preset tying them together."""
    root = tmp_path / "catalog"
    write_template(
        root, "skills", "flask",
        tags=["python", "web"],
        framework="flask",
        detectionPatterns={"files": ["app.py"], "dependencies": ["flask"]},
    )
    write_template(
        root, "skills", "vue",
        language="javascript",
        framework="vue",
        tags=["javascript", "frontend"],
        detectionPatterns={"files": ["**/*.vue"], "dependencies": ["vue"]},
    )
    write_template(root, "hooks", "format-check", event="pre-commit")
    write_template(root, "agents", "style-reviewer")
    write_template(
        root, "presets", "flask-vue",
        includes={"skills": ["flask", "vue"], "hooks": ["format-check"], "agents": ["style-reviewer"]},
    )
    return root


@pytest.fixture
def make_config(tmp_path):
    """Factory writing a config.yaml that reads only the given catalog roots."""

    def _make(*roots: Path, include_bundled: bool = False, extra: str = "") -> Path:
        config_path = tmp_path / "config" / "config.yaml"
        config_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [
            "catalog:",
            f"  include_bundled: {'true' if include_bundled else 'false'}",
            "  paths:",
        ]
        lines.extend(f"    - \"{root.as_posix()}\"" for root in roots)
        if not roots:
            lines[-1] = "  paths: []"
        lines.extend([
            "install:",
            "  target_dir: \".reviewr\"",
            "  overwrite: false",
            "validation:",
            "  required_fields:",
            "    skills: [\"language\", \"framework\"]",
            "  strict: false",
            "detection:",
            "  max_depth: 4",
            "  min_score: 1",
            "remotes: {}",
        ])
        text = "\n".join(lines) + "\n" + extra
        config_path.write_text(text, encoding="utf-8")
        return config_path

    return _make
