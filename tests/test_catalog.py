"""Tests for template discovery, lookup and filtering."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the repository's src/ directory is importable without installation.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from reviewr_templates.core.catalog import TemplateCatalog, load_meta_file  # noqa: E402
from reviewr_templates.core.exceptions import MetadataError, TemplateNotFoundError  # noqa: E402
from reviewr_templates.core.models import TemplateMeta, normalize_kind  # noqa: E402


def test_discover_returns_records_in_kind_order(catalog_root):
    catalog = TemplateCatalog([catalog_root])

    records = catalog.discover()

    assert [r.key for r in records] == [
        "skills/flask",
        "skills/vue",
        "hooks/format-check",
        "agents/style-reviewer",
        "presets/flask-vue",
    ]
    assert catalog.issues == []
    assert len(catalog) == 5


def test_later_root_overrides_earlier(tmp_path, catalog_root, template_writer):
    override = tmp_path / "override"
    template_writer(override, "skills", "flask", version="2.0.0", framework="flask")

    catalog = TemplateCatalog([catalog_root, override])

    record = catalog.get("skills", "flask")
    assert record.meta.version == "2.0.0"
    assert record.path == override / "skills" / "flask"
    assert len(catalog.list(kind="skills")) == 2


def test_load_problems_are_collected_not_raised(catalog_root):
    (catalog_root / "skills" / "no-meta").mkdir()
    broken = catalog_root / "agents" / "broken"
    broken.mkdir()
    (broken / "meta.json").write_text("{not json", encoding="utf-8")
    (catalog_root / "skills" / "_drafts").mkdir()

    catalog = TemplateCatalog([catalog_root])
    records = catalog.discover()

    assert {r.key for r in records} == {
        "skills/flask", "skills/vue", "hooks/format-check", "agents/style-reviewer", "presets/flask-vue",
    }
    codes = sorted(issue.code for issue in catalog.issues)
    assert codes == ["meta.invalid_json", "meta.missing"]


def test_undecodable_meta_is_collected(catalog_root):
    latin1 = catalog_root / "agents" / "latin1"
    latin1.mkdir()
    (latin1 / "meta.json").write_bytes(b'{"name": "caf\xe9"}')

    catalog = TemplateCatalog([catalog_root])
    records = catalog.discover()

    assert len(records) == 5
    assert [issue.code for issue in catalog.issues] == ["meta.invalid_json"]
    assert "UTF-8" in catalog.issues[0].message


def test_missing_root_is_skipped(tmp_path, catalog_root):
    catalog = TemplateCatalog([tmp_path / "nowhere", catalog_root])
    assert len(catalog.discover()) == 5


def test_get_raises_for_unknown_template(catalog_root):
    catalog = TemplateCatalog([catalog_root])
    with pytest.raises(TemplateNotFoundError) as excinfo:
        catalog.get("skill", "rails")
    assert excinfo.value.kind == "skills"
    assert isinstance(excinfo.value, LookupError)


def test_list_filters_by_tag_and_framework(catalog_root):
    catalog = TemplateCatalog([catalog_root])

    assert [r.name for r in catalog.list(tag="FRONTEND")] == ["vue"]
    assert [r.name for r in catalog.list(framework="Flask")] == ["flask"]
    assert [r.name for r in catalog.list(kind="hook")] == ["format-check"]


def test_find_searches_all_kinds(catalog_root, template_writer):
    template_writer(catalog_root, "agents", "flask")
    catalog = TemplateCatalog([catalog_root])

    assert [r.key for r in catalog.find("flask")] == ["skills/flask", "agents/flask"]


def test_expand_preset_resolves_members(catalog_root):
    catalog = TemplateCatalog([catalog_root])

    members = catalog.expand_preset("flask-vue")

    assert [r.key for r in members] == [
        "skills/flask", "skills/vue", "hooks/format-check", "agents/style-reviewer",
    ]


def test_expand_preset_fails_on_dangling_reference(catalog_root, template_writer):
    template_writer(catalog_root, "presets", "broken", includes={"skills": ["missing"]})
    catalog = TemplateCatalog([catalog_root])

    with pytest.raises(TemplateNotFoundError):
        catalog.expand_preset("broken")


def test_load_meta_file_rejects_non_objects(tmp_path):
    path = tmp_path / "meta.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(MetadataError):
        load_meta_file(path)


def test_meta_round_trip_keeps_unknown_keys():
    raw = {
        "name": "flask",
        "displayName": "Flask",
        "version": "1.0.0",
        "description": "d",
        "category": "backend",
        "detectionPatterns": {"files": ["app.py"]},
        "homepage": "https://example.org",
    }
    meta = TemplateMeta.from_dict(raw)

    assert meta.detection_patterns.files == ["app.py"]
    assert meta.extra == {"homepage": "https://example.org"}
    out = meta.to_dict()
    assert out["homepage"] == "https://example.org"
    assert out["detectionPatterns"] == {"files": ["app.py"], "dependencies": []}


@pytest.mark.parametrize("value,expected", [("skill", "skills"), ("Hooks", "hooks"), ("preset", "presets")])
def test_normalize_kind(value, expected):
    assert normalize_kind(value) == expected


def test_normalize_kind_rejects_unknown():
    with pytest.raises(ValueError):
        normalize_kind("widgets")
