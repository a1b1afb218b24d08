"""
Installs catalog templates into a project.

Templates are copied to ``<project>/<target_dir>/<kind>/<name>``, where Reviewr
picks them up. An ``installed.json`` lock file next to the kind directories
records what was installed and at which version.
"""

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from ..core.catalog import TemplateCatalog, load_meta_file
from ..core.exceptions import MetadataError, TemplateNotFoundError
from ..core.models import KINDS, META_FILE, InstallResult, normalize_kind

logger = logging.getLogger(__name__)

LOCK_FILE = "installed.json"


def _copy_tree(src: Path, dest: Path, overwrite: bool, copied: List[str], skipped: List[str], base: Path) -> None:
    """Copy files from *src* to *dest*, keeping existing files unless *overwrite*."""
    for item in sorted(src.iterdir()):
        if item.name == "__pycache__" or item.suffix == ".pyc":
            continue
        target = dest / item.name
        rel = target.relative_to(base).as_posix()
        if item.is_dir():
            target.mkdir(parents=True, exist_ok=True)
            _copy_tree(item, target, overwrite, copied, skipped, base)
        elif target.exists() and not overwrite:
            skipped.append(rel)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(item, target)
            copied.append(rel)


class TemplateInstaller:
    """Copies templates from a catalog into a project's template directory."""

    def __init__(self, catalog: TemplateCatalog, target_dir: str = ".reviewr", overwrite: bool = False):
        self.catalog = catalog
        self.target_dir = target_dir
        self.overwrite = overwrite

    def _install_root(self, project_dir: Path) -> Path:
        return Path(project_dir) / self.target_dir

    def install(self, kind: str, name: str, project_dir: Path) -> InstallResult:
        """Install one template; raises TemplateNotFoundError if it is not in the catalog."""
        record = self.catalog.get(kind, name)
        project_dir = Path(project_dir)
        if not project_dir.is_dir():
            raise FileNotFoundError(f"Project directory not found: {project_dir}")

        root = self._install_root(project_dir)
        destination = root / record.kind / record.name
        destination.mkdir(parents=True, exist_ok=True)

        result = InstallResult(
            kind=record.kind,
            name=record.name,
            version=record.meta.version,
            destination=destination,
        )
        _copy_tree(record.path, destination, self.overwrite, result.copied, result.skipped, root)

        if result.skipped:
            logger.warning(
                "Kept %d existing file(s) for %s; use overwrite to replace them",
                len(result.skipped), record.key,
            )
        logger.info("Installed %s %s into %s", record.key, record.meta.version or "(unversioned)", destination)

        self._update_lock(project_dir, [result])
        return result

    def install_preset(self, name: str, project_dir: Path) -> List[InstallResult]:
        """Install a preset and every template it includes.

        The preset is resolved completely before anything is copied, so a
        dangling reference leaves the project untouched.
        """
        members = self.catalog.expand_preset(name)
        results = [self.install("presets", name, project_dir)]
        for record in members:
            results.append(self.install(record.kind, record.name, project_dir))
        logger.info("Installed preset '%s' with %d templates", name, len(members))
        return results

    def uninstall(self, kind: str, name: str, project_dir: Path) -> bool:
        """Remove an installed template; returns False when it was not installed.

        Raises:
            ValueError: If *name* is not a plain template directory name
        """
        kind = normalize_kind(kind)
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise ValueError(f"Invalid template name: {name!r}")
        root = self._install_root(project_dir)
        destination = root / kind / name
        kind_dir = (root / kind).resolve()
        if destination.resolve().parent != kind_dir:
            raise ValueError(f"Refusing to remove {destination}: outside {kind_dir}")
        if not destination.is_dir():
            logger.info("%s/%s is not installed in %s", kind, name, project_dir)
            return False
        shutil.rmtree(destination)

        lock = self.read_lock(project_dir)
        lock["templates"] = [
            entry for entry in lock.get("templates", [])
            if not (entry.get("kind") == kind and entry.get("name") == name)
        ]
        self._write_lock(root, lock)
        logger.info("Removed %s/%s from %s", kind, name, project_dir)
        return True

    def installed(self, project_dir: Path) -> List[Dict[str, str]]:
        """List installed templates by reading their meta.json files."""
        root = self._install_root(project_dir)
        entries = []
        for kind in KINDS:
            kind_dir = root / kind
            if not kind_dir.is_dir():
                continue
            for template_dir in sorted(p for p in kind_dir.iterdir() if p.is_dir()):
                try:
                    meta = load_meta_file(template_dir / META_FILE)
                except MetadataError as exc:
                    logger.warning("Installed template has unreadable metadata: %s", exc)
                    meta = {}
                entries.append({
                    "kind": kind,
                    "name": template_dir.name,
                    "version": str(meta.get("version") or ""),
                    "path": str(template_dir),
                })
        return entries

    def outdated(self, project_dir: Path) -> List[Dict[str, str]]:
        """Installed templates whose catalog version differs from the installed one."""
        stale = []
        for entry in self.installed(project_dir):
            try:
                record = self.catalog.get(entry["kind"], entry["name"])
            except TemplateNotFoundError:
                continue
            if record.meta.version and record.meta.version != entry["version"]:
                stale.append({**entry, "available": record.meta.version})
        return stale

    def read_lock(self, project_dir: Path) -> Dict:
        path = self._install_root(project_dir) / LOCK_FILE
        if not path.exists():
            return {"templates": []}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring corrupt %s: %s", path, exc)
            return {"templates": []}
        return data if isinstance(data, dict) else {"templates": []}

    def _update_lock(self, project_dir: Path, results: List[InstallResult]) -> None:
        lock = self.read_lock(project_dir)
        by_key = {(e.get("kind"), e.get("name")): e for e in lock.get("templates", [])}
        stamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
        for result in results:
            by_key[(result.kind, result.name)] = {
                "kind": result.kind,
                "name": result.name,
                "version": result.version,
                "installedAt": stamp,
            }
        lock["templates"] = sorted(by_key.values(), key=lambda e: (str(e.get("kind")), str(e.get("name"))))
        self._write_lock(self._install_root(project_dir), lock)

    @staticmethod
    def _write_lock(root: Path, lock: Dict) -> None:
        root.mkdir(parents=True, exist_ok=True)
        (root / LOCK_FILE).write_text(json.dumps(lock, indent=2, sort_keys=True) + "\n", encoding="utf-8")


__all__ = ["TemplateInstaller", "LOCK_FILE"]
