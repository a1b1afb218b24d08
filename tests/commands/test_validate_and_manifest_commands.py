import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from reviewr_templates.commands import manifest as manifest_cmd  # noqa: E402
from reviewr_templates.commands import validate as validate_cmd  # noqa: E402
from reviewr_templates.core.manifest import MANIFEST_FILE  # noqa: E402
from reviewr_templates.core.paths import get_bundled_catalog_dir  # noqa: E402


def test_validate_passes_without_manifest_by_default(make_config, catalog_root):
    passed, issues = validate_cmd.run(str(make_config(catalog_root)))
    assert passed is True
    assert issues == []


def test_validate_can_require_manifest(make_config, catalog_root):
    passed, issues = validate_cmd.run(str(make_config(catalog_root)), require_manifest=True)
    assert passed is False
    assert [(i.severity, i.code) for i in issues] == [("error", "manifest.missing")]


def test_validate_strict_fails_on_warnings(make_config, catalog_root, template_writer):
    template_writer(catalog_root, "hooks", "quiet", event=None)
    config_path = str(make_config(catalog_root))

    passed, issues = validate_cmd.run(config_path)
    assert passed is True
    assert [i.code for i in issues] == ["hook.event_missing"]

    passed, _ = validate_cmd.run(config_path, strict=True)
    assert passed is False


def test_validate_reports_stale_manifest(make_config, catalog_root):
    config_path = str(make_config(catalog_root))
    manifest_cmd.build(config_path)
    (catalog_root / "agents" / "style-reviewer" / "agent.md").write_text("# Changed\n", encoding="utf-8")

    passed, issues = validate_cmd.run(config_path)

    assert passed is False
    assert [i.message for i in issues] == ["changed: agents/style-reviewer"]


def test_validate_rejects_invalid_config(make_config):
    with pytest.raises(ValueError):
        validate_cmd.run(str(make_config()))


def test_manifest_build_defaults_to_first_local_root(make_config, catalog_root):
    config_path = str(make_config(catalog_root, include_bundled=True))

    path = manifest_cmd.build(config_path)

    assert path == catalog_root / MANIFEST_FILE
    assert manifest_cmd.check(config_path) == []


def test_manifest_check_on_bundled_catalog(make_config, tmp_path):
    config_path = str(make_config(tmp_path / "not-there", include_bundled=True))
    assert manifest_cmd.check(config_path) == []
    assert manifest_cmd._resolve_root(config_path, None) == get_bundled_catalog_dir()


def test_manifest_explicit_root_must_exist(make_config, catalog_root, tmp_path):
    with pytest.raises(FileNotFoundError):
        manifest_cmd.build(str(make_config(catalog_root)), str(tmp_path / "nope"))
