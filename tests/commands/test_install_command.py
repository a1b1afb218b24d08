import json
import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from reviewr_templates.commands import install as install_cmd  # noqa: E402
from reviewr_templates.core.exceptions import TemplateNotFoundError  # noqa: E402


@pytest.fixture
def project(tmp_path):
    path = tmp_path / "project"
    path.mkdir()
    return path


def test_install_names_and_presets(make_config, catalog_root, project):
    results = install_cmd.run(str(make_config(catalog_root)), ["style-reviewer", "flask-vue"], str(project))

    keys = [f"{r.kind}/{r.name}" for r in results]
    assert keys[0] == "agents/style-reviewer"
    assert keys[1:] == [
        "presets/flask-vue", "skills/flask", "skills/vue", "hooks/format-check", "agents/style-reviewer",
    ]
    assert (project / ".reviewr" / "presets" / "flask-vue" / "preset.md").is_file()


def test_typo_installs_nothing(make_config, catalog_root, project):
    with pytest.raises(TemplateNotFoundError):
        install_cmd.run(str(make_config(catalog_root)), ["flask", "djnago"], str(project))
    assert not (project / ".reviewr").exists()


def test_broken_preset_installs_nothing(make_config, catalog_root, project, template_writer):
    template_writer(catalog_root, "presets", "broken", includes={"skills": ["rails"]})

    with pytest.raises(TemplateNotFoundError):
        install_cmd.run(str(make_config(catalog_root)), ["flask", "broken"], str(project))
    assert not (project / ".reviewr").exists()


def test_ambiguous_name_needs_kind(make_config, catalog_root, project, template_writer):
    template_writer(catalog_root, "agents", "flask")
    config_path = str(make_config(catalog_root))

    with pytest.raises(ValueError):
        install_cmd.run(config_path, ["flask"], str(project))

    results = install_cmd.run(config_path, ["flask"], str(project), kind="agent")
    assert [(r.kind, r.name) for r in results] == [("agents", "flask")]


def test_overwrite_defaults_to_config(make_config, catalog_root, project):
    config_path = make_config(catalog_root)
    install_cmd.run(str(config_path), ["vue"], str(project))
    doc = project / ".reviewr" / "skills" / "vue" / "skill.md"
    doc.write_text("# mine\n", encoding="utf-8")

    kept = install_cmd.run(str(config_path), ["vue"], str(project))
    assert kept[0].skipped

    config_path.write_text(
        config_path.read_text(encoding="utf-8").replace("overwrite: false", "overwrite: true"),
        encoding="utf-8",
    )
    replaced = install_cmd.run(str(config_path), ["vue"], str(project))
    assert replaced[0].skipped == []
    assert doc.read_text(encoding="utf-8") != "# mine\n"


def test_install_preset_by_name(make_config, catalog_root, project):
    results = install_cmd.install_preset(str(make_config(catalog_root)), "flask-vue", str(project))

    assert len(results) == 5
    assert (project / ".reviewr" / "agents" / "style-reviewer" / "agent.md").is_file()

    with pytest.raises(TemplateNotFoundError):
        install_cmd.install_preset(str(make_config(catalog_root)), "flask", str(project))


def test_install_detected_skills(make_config, catalog_root, project):
    (project / "app.py").write_text("from flask import Flask\n", encoding="utf-8")
    (project / "requirements.txt").write_text("Flask>=3\n", encoding="utf-8")

    results = install_cmd.install_detected(str(make_config(catalog_root)), str(project))

    assert [(r.kind, r.name) for r in results] == [("skills", "flask")]


def test_install_detected_with_no_match(make_config, catalog_root, project):
    assert install_cmd.install_detected(str(make_config(catalog_root)), str(project)) == []


def test_uninstall_and_installed(make_config, catalog_root, project, tmp_path, template_writer):
    config_path = str(make_config(catalog_root))
    install_cmd.run(config_path, ["flask", "style-reviewer"], str(project))

    assert install_cmd.uninstall(config_path, "style-reviewer", str(project)) is True
    assert install_cmd.uninstall(config_path, "style-reviewer", str(project)) is False

    template_writer(catalog_root, "skills", "flask", version="1.5.0")
    entries = install_cmd.installed(config_path, str(project))
    assert [(e["kind"], e["name"], e["version"], e["available"]) for e in entries] == [
        ("skills", "flask", "1.0.0", "1.5.0"),
    ]
    lock = json.loads((project / ".reviewr" / "installed.json").read_text(encoding="utf-8"))
    assert [e["name"] for e in lock["templates"]] == ["flask"]
