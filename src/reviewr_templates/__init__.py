"""Code-review templates for Reviewr, plus tools to validate, index and install them."""

from __future__ import annotations

__version__ = "0.3.0"

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .commands import checklist as checklist_cmd
from .commands import detect as detect_cmd
from .commands import install as install_cmd
from .commands import list_templates as list_cmd
from .commands import manifest as manifest_cmd
from .commands import sync as sync_cmd
from .commands import validate as validate_cmd
from .core.catalog import TemplateCatalog
from .core.config import ConfigManager, DEFAULT_CONFIG_PATH
from .core.models import DetectionMatch, InstallResult, TemplateRecord, ValidationIssue

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = str(DEFAULT_CONFIG_PATH)

__all__ = [
    '__version__',
    'TemplateCatalog',
    'list_templates',
    'validate',
    'build_manifest',
    'detect',
    'install',
    'checklist',
    'sync',
    'status',
]


def list_templates(
    kind: Optional[str] = None,
    *,
    tag: Optional[str] = None,
    framework: Optional[str] = None,
    config_path: Optional[str] = None,
) -> List[TemplateRecord]:
    """Return the templates of every configured catalog root, optionally filtered."""
    return list_cmd.run(config_path or _DEFAULT_CONFIG, kind=kind, tag=tag, framework=framework)


def validate(*, strict: Optional[bool] = None, config_path: Optional[str] = None) -> List[ValidationIssue]:
    """Validate the catalog and raise ValueError when it does not pass.

    Returns:
        The (non-failing) issues, e.g. warnings in non-strict mode
    """
    passed, issues = validate_cmd.run(config_path or _DEFAULT_CONFIG, strict=strict)
    if not passed:
        details = "; ".join(str(i) for i in issues[:5])
        raise ValueError(f"Catalog validation failed: {details}")
    return issues


def build_manifest(root: Optional[str] = None, config_path: Optional[str] = None) -> Path:
    """Write manifest.json for *root* (defaults to the first local catalog root)."""
    return manifest_cmd.build(config_path or _DEFAULT_CONFIG, root)


def detect(project_dir: str, *, kind: Optional[str] = None, config_path: Optional[str] = None) -> List[DetectionMatch]:
    """Return the templates whose detection patterns match *project_dir*."""
    return detect_cmd.run(config_path or _DEFAULT_CONFIG, project_dir, kind=kind)


def install(
    names: List[str],
    project_dir: str,
    *,
    kind: Optional[str] = None,
    overwrite: Optional[bool] = None,
    config_path: Optional[str] = None,
) -> List[InstallResult]:
    """Install templates (presets are expanded) into *project_dir*."""
    return install_cmd.run(config_path or _DEFAULT_CONFIG, list(names), project_dir, kind=kind, overwrite=overwrite)


def checklist(
    skills: Optional[List[str]] = None,
    *,
    project_dir: Optional[str] = None,
    output: Optional[str] = None,
    title: str = "Code Review Checklist",
    config_path: Optional[str] = None,
) -> Path:
    """Render a combined review checklist for the given or detected skills."""
    return checklist_cmd.run(config_path or _DEFAULT_CONFIG, skills, project_dir, output, title)


def sync(
    remote: str = "default",
    *,
    url: Optional[str] = None,
    dest: Optional[str] = None,
    config_path: Optional[str] = None,
) -> List[str]:
    """Download a remote catalog; returns the relative paths written."""
    return sync_cmd.run(config_path or _DEFAULT_CONFIG, remote=remote, url=url, dest=dest)


def status(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Return configuration and catalog status for programmatic use."""
    cfg_path = config_path or _DEFAULT_CONFIG
    info: Dict[str, Any] = {'config_path': cfg_path}
    if not os.path.exists(cfg_path):
        info.update({'valid': False, 'error': f'Config file not found: {cfg_path}'})
        return info
    try:
        cm = ConfigManager(cfg_path)
        valid = cm.validate_config()
        roots = cm.get_catalog_dirs()
        catalog = TemplateCatalog(roots)
        records = catalog.discover() if valid else []
        counts: Dict[str, int] = {}
        for record in records:
            counts[record.kind] = counts.get(record.kind, 0) + 1
        info.update({
            'valid': bool(valid),
            'catalog_roots': [str(r) for r in roots],
            'template_counts': counts,
            'load_issues': len(catalog.issues),
        })
        return info
    except Exception as e:
        info.update({'valid': False, 'error': str(e)})
        return info
