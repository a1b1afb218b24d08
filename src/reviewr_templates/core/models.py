"""
Data models for review templates.

A template is a directory under one of the catalog kinds (skills, hooks,
agents, presets) holding a ``meta.json`` record and a primary Markdown
document. Metadata is descriptive: unknown keys are kept in ``extra`` and
written back unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

KINDS = ("skills", "hooks", "agents", "presets")

DOCUMENT_FILES = {
    "skills": "skill.md",
    "hooks": "hook.md",
    "agents": "agent.md",
    "presets": "preset.md",
}

META_FILE = "meta.json"

HOOK_EVENTS = ("pre-review", "post-review", "pre-commit", "on-finding")

_KNOWN_META_KEYS = (
    "name",
    "displayName",
    "version",
    "description",
    "category",
    "language",
    "framework",
    "frameworkVersion",
    "tags",
    "author",
    "license",
    "detectionPatterns",
    "event",
    "includes",
)


def normalize_kind(kind: str) -> str:
    """Accept singular or plural kind names ("skill" or "skills")."""
    value = (kind or "").strip().lower()
    if value in KINDS:
        return value
    if f"{value}s" in KINDS:
        return f"{value}s"
    raise ValueError(f"Unknown template kind '{kind}' (expected one of: {', '.join(KINDS)})")


def _parse_includes(includes: Any) -> Dict[str, List[str]]:
    """Normalize a preset's ``includes`` mapping, dropping unknown kinds."""
    if not isinstance(includes, dict):
        return {}
    parsed: Dict[str, List[str]] = {}
    for kind, names in includes.items():
        if not isinstance(names, list):
            continue
        try:
            parsed[normalize_kind(kind)] = [str(n) for n in names]
        except ValueError:
            continue
    return parsed


@dataclass
class DetectionPatterns:
    """Glob patterns and package names that indicate a framework is in use."""
    files: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DetectionPatterns":
        data = data or {}
        files = data.get("files") or []
        dependencies = data.get("dependencies") or []
        return cls(
            files=[str(p) for p in files] if isinstance(files, list) else [],
            dependencies=[str(d) for d in dependencies] if isinstance(dependencies, list) else [],
        )

    def to_dict(self) -> Dict[str, List[str]]:
        return {"files": list(self.files), "dependencies": list(self.dependencies)}

    def is_empty(self) -> bool:
        return not self.files and not self.dependencies


@dataclass
class TemplateMeta:
    """Contents of a template's meta.json."""
    name: str
    display_name: str = ""
    version: str = ""
    description: str = ""
    category: str = ""
    language: Optional[str] = None
    framework: Optional[str] = None
    framework_version: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    author: Optional[str] = None
    license: Optional[str] = None
    detection_patterns: DetectionPatterns = field(default_factory=DetectionPatterns)
    event: Optional[str] = None
    includes: Dict[str, List[str]] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fallback_name: str = "") -> "TemplateMeta":
        """Build a record from parsed JSON, tolerating missing or odd-typed fields.

        Type problems are reported by the validator, which inspects the raw
        dictionary; this constructor only coerces what it can.
        """
        tags = data.get("tags") or []
        includes = data.get("includes") or {}
        return cls(
            name=str(data.get("name") or fallback_name),
            display_name=str(data.get("displayName") or ""),
            version=str(data.get("version") or ""),
            description=str(data.get("description") or ""),
            category=str(data.get("category") or ""),
            language=data.get("language"),
            framework=data.get("framework"),
            framework_version=data.get("frameworkVersion"),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            author=data.get("author"),
            license=data.get("license"),
            detection_patterns=DetectionPatterns.from_dict(
                data.get("detectionPatterns") if isinstance(data.get("detectionPatterns"), dict) else None
            ),
            event=data.get("event"),
            includes=_parse_includes(includes),
            extra={k: v for k, v in data.items() if k not in _KNOWN_META_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the camelCase meta.json layout."""
        out: Dict[str, Any] = {
            "name": self.name,
            "displayName": self.display_name,
            "version": self.version,
            "description": self.description,
            "category": self.category,
        }
        optional = {
            "language": self.language,
            "framework": self.framework,
            "frameworkVersion": self.framework_version,
            "author": self.author,
            "license": self.license,
            "event": self.event,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        if self.tags:
            out["tags"] = list(self.tags)
        if not self.detection_patterns.is_empty():
            out["detectionPatterns"] = self.detection_patterns.to_dict()
        if self.includes:
            out["includes"] = {k: list(v) for k, v in self.includes.items()}
        out.update(self.extra)
        return out


@dataclass
class TemplateRecord:
    """A discovered template directory."""
    kind: str
    name: str
    path: Path
    meta: TemplateMeta
    raw_meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.kind}/{self.name}"

    @property
    def document(self) -> Path:
        return self.path / DOCUMENT_FILES[self.kind]

    def read_document(self) -> str:
        return self.document.read_text(encoding="utf-8")


@dataclass
class ValidationIssue:
    """A single content-validation finding."""
    severity: str
    code: str
    message: str
    path: str = ""

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def __str__(self) -> str:
        location = f" ({self.path})" if self.path else ""
        return f"[{self.severity}] {self.code}: {self.message}{location}"


@dataclass
class DetectionMatch:
    """A template whose detection patterns matched a project."""
    record: TemplateRecord
    matched_files: List[str] = field(default_factory=list)
    matched_dependencies: List[str] = field(default_factory=list)

    @property
    def score(self) -> int:
        return len(self.matched_files) + len(self.matched_dependencies)


@dataclass
class InstallResult:
    """Outcome of installing a single template into a project."""
    kind: str
    name: str
    version: str
    destination: Path
    copied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


__all__ = [
    "KINDS",
    "DOCUMENT_FILES",
    "META_FILE",
    "HOOK_EVENTS",
    "normalize_kind",
    "DetectionPatterns",
    "TemplateMeta",
    "TemplateRecord",
    "ValidationIssue",
    "DetectionMatch",
    "InstallResult",
]
