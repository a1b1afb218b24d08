"""
Template discovery by directory convention.

A catalog root looks like::

    <root>/skills/<name>/{meta.json,skill.md}
    <root>/hooks/<name>/{meta.json,hook.md}
    <root>/agents/<name>/{meta.json,agent.md}
    <root>/presets/<name>/{meta.json,preset.md}

Several roots can be stacked; a template in a later root replaces the one with
the same kind and name from an earlier root.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import MetadataError, TemplateNotFoundError
from .models import KINDS, META_FILE, TemplateMeta, TemplateRecord, ValidationIssue, normalize_kind

logger = logging.getLogger(__name__)


def load_meta_file(path: Path) -> Dict:
    """Read a meta.json file and return its top-level object."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise MetadataError(f"{path} is not valid JSON: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise MetadataError(f"{path} is not UTF-8 encoded: {exc}") from exc
    except OSError as exc:
        raise MetadataError(f"Cannot read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise MetadataError(f"{path} must contain a JSON object, got {type(data).__name__}")
    return data


class TemplateCatalog:
    """Discovers and indexes templates from one or more catalog roots."""

    def __init__(self, roots: Iterable[Path]):
        self.roots = [Path(r) for r in roots]
        self.issues: List[ValidationIssue] = []
        self._records: Optional[Dict[Tuple[str, str], TemplateRecord]] = None

    def discover(self) -> List[TemplateRecord]:
        """Scan every root and return the effective templates.

        Never raises for a single bad template; load problems are appended to
        ``self.issues`` and the template is skipped.
        """
        records: Dict[Tuple[str, str], TemplateRecord] = {}
        self.issues = []

        for root in self.roots:
            if not root.is_dir():
                logger.warning("Catalog root not found, skipping: %s", root)
                continue
            for kind in KINDS:
                kind_dir = root / kind
                if not kind_dir.is_dir():
                    continue
                for template_dir in sorted(kind_dir.iterdir()):
                    if not template_dir.is_dir() or template_dir.name.startswith(('.', '_')):
                        continue
                    record = self._load_record(kind, template_dir)
                    if record is None:
                        continue
                    key = (kind, record.name)
                    if key in records:
                        logger.debug("%s/%s from %s overrides %s", kind, record.name, root, records[key].path)
                    records[key] = record

        self._records = records
        logger.info("Discovered %d templates across %d catalog roots", len(records), len(self.roots))
        return self._sorted(records.values())

    def _load_record(self, kind: str, template_dir: Path) -> Optional[TemplateRecord]:
        meta_path = template_dir / META_FILE
        if not meta_path.exists():
            self.issues.append(ValidationIssue(
                severity="error",
                code="meta.missing",
                message=f"{kind}/{template_dir.name} has no {META_FILE}",
                path=str(template_dir),
            ))
            return None
        try:
            raw = load_meta_file(meta_path)
        except MetadataError as exc:
            self.issues.append(ValidationIssue(
                severity="error",
                code="meta.invalid_json",
                message=str(exc),
                path=str(meta_path),
            ))
            return None

        meta = TemplateMeta.from_dict(raw, fallback_name=template_dir.name)
        # The directory name is the template's identity; a diverging meta name
        # is reported by the validator.
        return TemplateRecord(kind=kind, name=template_dir.name, path=template_dir, meta=meta, raw_meta=raw)

    @staticmethod
    def _sorted(records: Iterable[TemplateRecord]) -> List[TemplateRecord]:
        return sorted(records, key=lambda r: (KINDS.index(r.kind), r.name))

    def _index(self) -> Dict[Tuple[str, str], TemplateRecord]:
        if self._records is None:
            self.discover()
        return self._records

    def get(self, kind: str, name: str) -> TemplateRecord:
        """Return one template, raising TemplateNotFoundError when absent."""
        kind = normalize_kind(kind)
        try:
            return self._index()[(kind, name)]
        except KeyError:
            raise TemplateNotFoundError(kind, name) from None

    def find(self, name: str) -> List[TemplateRecord]:
        """Return every template called *name*, across all kinds."""
        return [r for r in self._sorted(self._index().values()) if r.name == name]

    def list(
        self,
        kind: Optional[str] = None,
        tag: Optional[str] = None,
        framework: Optional[str] = None,
    ) -> List[TemplateRecord]:
        """List templates, optionally filtered by kind, tag and framework (case-insensitive)."""
        wanted_kind = normalize_kind(kind) if kind else None
        results = []
        for record in self._sorted(self._index().values()):
            if wanted_kind and record.kind != wanted_kind:
                continue
            if tag and tag.lower() not in {t.lower() for t in record.meta.tags}:
                continue
            if framework and (record.meta.framework or "").lower() != framework.lower():
                continue
            results.append(record)
        return results

    def expand_preset(self, name: str) -> List[TemplateRecord]:
        """Return the templates a preset includes, in kind order.

        Raises:
            TemplateNotFoundError: If the preset or any included template is missing
        """
        preset = self.get("presets", name)
        included: List[TemplateRecord] = []
        for kind in KINDS:
            if kind == "presets":
                continue
            for member in preset.meta.includes.get(kind, []):
                included.append(self.get(kind, member))
        return included

    def __len__(self) -> int:
        return len(self._index())

    def __iter__(self):
        return iter(self._sorted(self._index().values()))


__all__ = ["TemplateCatalog", "load_meta_file"]
