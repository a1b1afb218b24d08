"""
Content validation for catalog templates.

These are documentation-linting checks: they look at the files a template
author writes (meta.json and the Markdown document) and report problems as
ValidationIssue records instead of raising.
"""

import logging
import re
from typing import Callable, Dict, List, Optional

from ..core.catalog import TemplateCatalog
from ..core.config import BASE_REQUIRED_FIELDS
from ..core.models import HOOK_EVENTS, KINDS, TemplateRecord, ValidationIssue

logger = logging.getLogger(__name__)

VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?$")
NAME_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")


class TemplateValidator:
    """Runs the content checks against individual templates or a whole catalog."""

    def __init__(self, required_fields: Optional[Callable[[str], List[str]]] = None):
        """
        Args:
            required_fields: Callable mapping a kind to its required meta.json
                fields. Defaults to the base set for every kind.
        """
        self._required_fields = required_fields or (lambda kind: list(BASE_REQUIRED_FIELDS))

    def validate_record(self, record: TemplateRecord) -> List[ValidationIssue]:
        """Check a single template's metadata and document."""
        issues: List[ValidationIssue] = []
        raw = record.raw_meta
        meta_path = str(record.path / "meta.json")

        def add(severity: str, code: str, message: str, path: str = meta_path) -> None:
            issues.append(ValidationIssue(severity=severity, code=code, message=f"{record.key}: {message}", path=path))

        for field_name in self._required_fields(record.kind):
            value = raw.get(field_name)
            if value is None:
                add("error", "meta.missing_field", f"missing required field '{field_name}'")
            elif not isinstance(value, str) or not value.strip():
                add("error", "meta.empty_field", f"field '{field_name}' must be a non-empty string")

        meta_name = raw.get("name")
        if isinstance(meta_name, str) and meta_name and meta_name != record.name:
            add("error", "meta.name_mismatch", f"name '{meta_name}' does not match directory '{record.name}'")
        if not NAME_RE.match(record.name):
            add("warning", "meta.name_format", "directory name should be lowercase letters, digits and dashes")

        version = raw.get("version")
        if isinstance(version, str) and version and not VERSION_RE.match(version):
            add("error", "meta.version_format", f"version '{version}' is not MAJOR.MINOR.PATCH")

        tags = raw.get("tags")
        if tags is not None and (not isinstance(tags, list) or not all(isinstance(t, str) for t in tags)):
            add("error", "meta.tags_type", "tags must be a list of strings")

        self._check_detection_patterns(record, add)

        if record.kind == "hooks":
            event = raw.get("event")
            if event is None:
                add("warning", "hook.event_missing", "hook does not declare an event")
            elif event not in HOOK_EVENTS:
                add("error", "hook.event_unknown", f"event '{event}' is not one of {', '.join(HOOK_EVENTS)}")

        if record.kind == "presets":
            includes = raw.get("includes")
            if not isinstance(includes, dict) or not any(includes.values()):
                add("error", "preset.includes_missing", "preset must include at least one template")
            else:
                for kind, names in includes.items():
                    if kind not in KINDS or kind == "presets":
                        add("error", "preset.includes_kind", f"cannot include templates of kind '{kind}'")
                    elif not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                        add("error", "preset.includes_type", f"includes.{kind} must be a list of names")

        document = record.document
        if not document.exists():
            add("error", "document.missing", f"missing {document.name}", path=str(document))
        else:
            try:
                text = document.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                add("error", "document.encoding", f"cannot read {document.name}: {exc}", path=str(document))
                return issues
            if not text.strip():
                add("error", "document.empty", f"{document.name} is empty", path=str(document))
            elif record.kind == "skills" and not text.lstrip().startswith("# "):
                add("warning", "document.heading", f"{document.name} should start with a level-1 heading",
                    path=str(document))

        return issues

    @staticmethod
    def _check_detection_patterns(record: TemplateRecord, add) -> None:
        patterns = record.raw_meta.get("detectionPatterns")
        if patterns is None:
            return
        if not isinstance(patterns, dict):
            add("error", "meta.detection_type", "detectionPatterns must be an object")
            return
        for key in ("files", "dependencies"):
            values = patterns.get(key)
            if values is None:
                continue
            if not isinstance(values, list) or not all(isinstance(v, str) and v for v in values):
                add("error", "meta.detection_type", f"detectionPatterns.{key} must be a list of strings")
        unknown = sorted(set(patterns) - {"files", "dependencies"})
        if unknown:
            add("warning", "meta.detection_keys", f"unknown detectionPatterns keys: {', '.join(unknown)}")

    def _check_preset_references(self, catalog: TemplateCatalog, record: TemplateRecord) -> List[ValidationIssue]:
        issues = []
        for kind, names in record.meta.includes.items():
            available = {r.name for r in catalog.list(kind=kind)}
            for name in names:
                if name not in available:
                    issues.append(ValidationIssue(
                        severity="error",
                        code="preset.dangling_reference",
                        message=f"{record.key}: includes unknown {kind} template '{name}'",
                        path=str(record.path / "meta.json"),
                    ))
        return issues

    def validate_catalog(self, catalog: TemplateCatalog) -> List[ValidationIssue]:
        """Validate every template in *catalog*, including load problems."""
        records = catalog.discover()
        issues: List[ValidationIssue] = list(catalog.issues)

        for record in records:
            issues.extend(self.validate_record(record))
            if record.kind == "presets":
                issues.extend(self._check_preset_references(catalog, record))

        errors = sum(1 for i in issues if i.is_error)
        logger.info(
            "Validated %d templates: %d errors, %d warnings",
            len(records), errors, len(issues) - errors,
        )
        return issues


def summarize(issues: List[ValidationIssue]) -> Dict[str, int]:
    """Count issues by severity."""
    counts = {"error": 0, "warning": 0}
    for issue in issues:
        counts[issue.severity] = counts.get(issue.severity, 0) + 1
    return counts


__all__ = ["TemplateValidator", "summarize", "VERSION_RE"]
