"""
Manifest command implementation.
Builds or checks the manifest.json index of a catalog root.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..core.config import ConfigManager
from ..core.manifest import MANIFEST_FILE, build_manifest, check_manifest, write_manifest
from ..core.models import ValidationIssue
from ..core.paths import get_bundled_catalog_dir

logger = logging.getLogger(__name__)


def _resolve_root(config_path: Optional[str], root: Optional[str]) -> Path:
    """Pick the catalog root to index.

    An explicit *root* wins; otherwise the first existing ``catalog.paths``
    entry is used, and the bundled catalog when there is none.
    """
    if root:
        path = Path(root).expanduser().resolve()
    else:
        bundled = get_bundled_catalog_dir()
        local = [
            p for p in ConfigManager(config_path).get_catalog_dirs()
            if p != bundled and p.is_dir()
        ]
        path = local[0] if local else bundled
    if not path.is_dir():
        raise FileNotFoundError(f"Catalog root not found: {path}")
    return path


def build(config_path: Optional[str], root: Optional[str] = None) -> Path:
    """Write ``<root>/manifest.json`` and return its path."""
    catalog_root = _resolve_root(config_path, root)
    manifest = build_manifest(catalog_root)
    target = catalog_root / MANIFEST_FILE
    write_manifest(target, manifest)
    total = sum(len(entries) for entries in manifest["templates"].values())
    logger.info("Wrote %s indexing %d templates", target, total)
    return target


def check(config_path: Optional[str], root: Optional[str] = None) -> List[ValidationIssue]:
    """Return the problems with ``<root>/manifest.json``; an empty list means it is current."""
    catalog_root = _resolve_root(config_path, root)
    issues = check_manifest(catalog_root)
    for issue in issues:
        logger.warning("%s", issue)
    return issues
