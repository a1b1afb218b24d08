"""
Install command implementation.
Copies templates (or a whole preset) from the catalog into a project.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..core.command_context import CommandContext
from ..core.models import InstallResult
from ..processors.installer import TemplateInstaller
from .detect import build_detector
from .show import resolve_record

logger = logging.getLogger(__name__)


def _installer(ctx: CommandContext, overwrite: Optional[bool] = None) -> TemplateInstaller:
    if overwrite is None:
        overwrite = ctx.config_manager.get_overwrite_default()
    return TemplateInstaller(
        ctx.catalog,
        target_dir=ctx.get_default('install', 'target_dir', ".reviewr"),
        overwrite=overwrite,
    )


def run(
    config_path: Optional[str],
    names: List[str],
    project_dir: str,
    kind: Optional[str] = None,
    overwrite: Optional[bool] = None,
) -> List[InstallResult]:
    """Install the named templates into *project_dir*.

    Presets are expanded: the preset and every template it includes are
    installed together.

    Args:
        config_path: Path to the main configuration file
        names: Template names to install
        project_dir: Target project directory
        kind: Kind of every name (needed only when a name exists under several kinds)
        overwrite: Replace files that already exist (defaults to install.overwrite)
    """
    logger.info("Starting install command for %s", ", ".join(names))
    ctx = CommandContext(config_path)
    installer = _installer(ctx, overwrite)

    # Resolve everything, preset members included, before copying so a typo installs nothing
    records = [resolve_record(ctx, name, kind) for name in names]
    for record in records:
        if record.kind == "presets":
            ctx.catalog.expand_preset(record.name)

    results: List[InstallResult] = []
    for record in records:
        if record.kind == "presets":
            results.extend(installer.install_preset(record.name, Path(project_dir)))
        else:
            results.append(installer.install(record.kind, record.name, Path(project_dir)))
    return results


def install_preset(
    config_path: Optional[str],
    name: str,
    project_dir: str,
    overwrite: Optional[bool] = None,
) -> List[InstallResult]:
    """Install the preset *name* together with every template it includes."""
    ctx = CommandContext(config_path)
    return _installer(ctx, overwrite).install_preset(name, Path(project_dir))


def install_detected(
    config_path: Optional[str],
    project_dir: str,
    overwrite: Optional[bool] = None,
) -> List[InstallResult]:
    """Detect the project's frameworks and install the matching skills."""
    ctx = CommandContext(config_path)
    detector = build_detector(ctx)
    matches = detector.detect(
        Path(project_dir),
        ctx.catalog.list(kind="skills"),
        min_score=ctx.get_default('detection', 'min_score', 1),
    )
    if not matches:
        logger.warning("No skills matched %s", project_dir)
        return []

    installer = _installer(ctx, overwrite)
    return [installer.install("skills", m.record.name, Path(project_dir)) for m in matches]


def uninstall(config_path: Optional[str], name: str, project_dir: str, kind: Optional[str] = None) -> bool:
    """Remove an installed template from *project_dir*."""
    ctx = CommandContext(config_path)
    installer = _installer(ctx)
    if kind is None:
        installed = [e for e in installer.installed(Path(project_dir)) if e["name"] == name]
        if not installed:
            logger.info("'%s' is not installed in %s", name, project_dir)
            return False
        if len(installed) > 1:
            kinds = ", ".join(e["kind"] for e in installed)
            raise ValueError(f"'{name}' is installed as several kinds ({kinds}); pass --kind")
        kind = installed[0]["kind"]
    return installer.uninstall(kind, name, Path(project_dir))


def installed(config_path: Optional[str], project_dir: str) -> List[Dict[str, str]]:
    """List installed templates, marking those with a newer catalog version."""
    ctx = CommandContext(config_path)
    installer = _installer(ctx)
    entries = installer.installed(Path(project_dir))
    newer = {(e["kind"], e["name"]): e["available"] for e in installer.outdated(Path(project_dir))}
    for entry in entries:
        entry["available"] = newer.get((entry["kind"], entry["name"]), "")
    return entries
