"""
manifest.json: the top-level index of a catalog root.

The manifest lists every template by kind with its version and a sha256 for
each file, so consumers (and ``reviewr-templates sync``) can fetch and verify
a catalog without walking directories.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Dict, List

from .catalog import TemplateCatalog
from .exceptions import ManifestError
from .models import KINDS, ValidationIssue

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.json"
MANIFEST_KIND = "reviewr_template_manifest"
SCHEMA_VERSION = 1

_EXCLUDED_NAMES = {".DS_Store", "__pycache__"}


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as fp:
        for chunk in iter(lambda: fp.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def _template_files(root: Path, template_dir: Path) -> List[Dict]:
    files = []
    for f in sorted(template_dir.rglob("*"), key=lambda p: p.as_posix()):
        if not f.is_file():
            continue
        if any(part in _EXCLUDED_NAMES for part in f.parts) or f.suffix == ".pyc":
            continue
        files.append({
            "path": f.relative_to(root).as_posix(),
            "sha256": sha256_file(f),
            "size": f.stat().st_size,
        })
    return files


def build_manifest(root: Path) -> Dict:
    """Build the manifest for a single catalog root."""
    root = Path(root)
    catalog = TemplateCatalog([root])
    templates: Dict[str, List[Dict]] = {kind: [] for kind in KINDS}

    for record in catalog.discover():
        templates[record.kind].append({
            "name": record.name,
            "displayName": record.meta.display_name,
            "version": record.meta.version,
            "description": record.meta.description,
            "path": record.path.relative_to(root).as_posix(),
            "files": _template_files(root, record.path),
        })

    for issue in catalog.issues:
        logger.warning("Not indexed: %s", issue)

    return {
        "kind": MANIFEST_KIND,
        "schemaVersion": SCHEMA_VERSION,
        "templates": templates,
    }


def write_manifest(path: Path, manifest: Dict) -> None:
    Path(path).write_text(json.dumps(manifest, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def load_manifest(path: Path) -> Dict:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise
    except (OSError, json.JSONDecodeError) as exc:
        raise ManifestError(f"Cannot read manifest {path}: {exc}") from exc
    if not isinstance(data, dict) or data.get("kind") != MANIFEST_KIND:
        raise ManifestError(f"{path} is not a template manifest")
    return data


def _normalize(manifest: Dict) -> Dict[str, Dict]:
    """Flatten a manifest to {"<kind>/<name>": {version, files}} for comparison."""
    out: Dict[str, Dict] = {}
    templates = manifest.get("templates") or {}
    for kind in KINDS:
        for entry in templates.get(kind) or []:
            if not isinstance(entry, dict) or not entry.get("name"):
                continue
            files = {
                f["path"]: f.get("sha256")
                for f in entry.get("files") or []
                if isinstance(f, dict) and f.get("path")
            }
            out[f"{kind}/{entry['name']}"] = {"version": entry.get("version"), "files": files}
    return out


def manifests_equal(a: Dict, b: Dict) -> bool:
    """Compare two manifests by kind, template versions and file checksums."""
    if a.get("kind") != b.get("kind"):
        return False
    return _normalize(a) == _normalize(b)


def diff_manifests(expected: Dict, actual: Dict) -> List[str]:
    """Describe the template-level differences between two manifests."""
    want = _normalize(expected)
    have = _normalize(actual)
    changes = []
    for key in sorted(set(want) - set(have)):
        changes.append(f"missing from manifest: {key}")
    for key in sorted(set(have) - set(want)):
        changes.append(f"no longer in catalog: {key}")
    for key in sorted(set(want) & set(have)):
        if want[key] != have[key]:
            changes.append(f"changed: {key}")
    return changes


def check_manifest(root: Path) -> List[ValidationIssue]:
    """Check that ``<root>/manifest.json`` exists and matches the directory contents."""
    root = Path(root)
    path = root / MANIFEST_FILE
    if not path.exists():
        return [ValidationIssue(
            severity="warning",
            code="manifest.missing",
            message=f"No {MANIFEST_FILE} in catalog root; run 'reviewr-templates manifest build'",
            path=str(path),
        )]
    try:
        current = load_manifest(path)
    except ManifestError as exc:
        return [ValidationIssue(severity="error", code="manifest.invalid", message=str(exc), path=str(path))]

    expected = build_manifest(root)
    if manifests_equal(expected, current):
        return []
    return [
        ValidationIssue(severity="error", code="manifest.stale", message=change, path=str(path))
        for change in diff_manifests(expected, current)
    ]


__all__ = [
    "MANIFEST_FILE",
    "MANIFEST_KIND",
    "SCHEMA_VERSION",
    "sha256_file",
    "build_manifest",
    "write_manifest",
    "load_manifest",
    "manifests_equal",
    "diff_manifests",
    "check_manifest",
]
