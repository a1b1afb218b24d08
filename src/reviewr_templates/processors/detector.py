"""
Framework detection for a project checkout.

Each template may declare ``detectionPatterns``: file globs and package names.
The detector walks the project once, reads the dependency manifests it knows
about, and reports which templates apply.
"""

import fnmatch
import json
import logging
import os
import re
import tomllib
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

from ..core.models import DetectionMatch, TemplateRecord

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_DIRS = ("node_modules", ".git", ".venv", "venv", "dist", "build", "__pycache__")

_REQUIREMENT_NAME_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")
_PACKAGE_JSON_SECTIONS = ("dependencies", "devDependencies", "peerDependencies")


def normalize_package_name(name: str) -> str:
    """Lower-case a package name and fold Python-style separators to '-'.

    npm scopes such as ``@angular/core`` are kept intact.
    """
    name = name.strip().lower()
    if name.startswith("@"):
        return name
    return re.sub(r"[-_.]+", "-", name)


def parse_requirement_name(line: str) -> Optional[str]:
    """Return the distribution name from a requirements.txt line, or None."""
    line = line.split("#", 1)[0].strip()
    if not line or line.startswith("-"):
        return None
    match = _REQUIREMENT_NAME_RE.match(line)
    return match.group(1) if match else None


class FrameworkDetector:
    """Matches templates' detection patterns against a project directory."""

    def __init__(self, max_depth: int = 4, ignore_dirs: Optional[Sequence[str]] = None):
        self.max_depth = max_depth
        self.ignore_dirs = set(ignore_dirs if ignore_dirs is not None else DEFAULT_IGNORE_DIRS)

    def collect_files(self, project_dir: Path) -> List[str]:
        """Return project files as POSIX paths relative to *project_dir*."""
        project_dir = Path(project_dir)
        files = []
        for current, dirnames, filenames in os.walk(project_dir):
            rel_dir = Path(current).relative_to(project_dir)
            depth = len(rel_dir.parts)
            # Prune in place so os.walk does not descend
            dirnames[:] = sorted(
                d for d in dirnames
                if d not in self.ignore_dirs and depth + 1 < self.max_depth
            )
            for filename in sorted(filenames):
                files.append((rel_dir / filename).as_posix())
        return files

    def collect_dependencies(self, project_dir: Path) -> Set[str]:
        """Read dependency names from the manifests found at the project root."""
        project_dir = Path(project_dir)
        deps: Set[str] = set()

        package_json = project_dir / "package.json"
        if package_json.is_file():
            deps.update(self._from_package_json(package_json))

        for requirements in sorted(project_dir.glob("requirements*.txt")):
            deps.update(self._from_requirements(requirements))

        pyproject = project_dir / "pyproject.toml"
        if pyproject.is_file():
            deps.update(self._from_pyproject(pyproject))

        pipfile = project_dir / "Pipfile"
        if pipfile.is_file():
            deps.update(self._from_pipfile(pipfile))

        return {normalize_package_name(d) for d in deps}

    @staticmethod
    def _from_package_json(path: Path) -> Iterable[str]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return []
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: top level is not an object", path)
            return []
        names = []
        for section in _PACKAGE_JSON_SECTIONS:
            block = data.get(section) or {}
            if isinstance(block, dict):
                names.extend(block.keys())
        return names

    @staticmethod
    def _from_requirements(path: Path) -> Iterable[str]:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return []
        names = []
        for line in text.splitlines():
            name = parse_requirement_name(line)
            if name:
                names.append(name)
        return names

    @staticmethod
    def _from_pyproject(path: Path) -> Iterable[str]:
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return []

        names = []
        project = data.get("project")
        if not isinstance(project, dict):
            project = {}
        for requirement in project.get("dependencies") or []:
            name = parse_requirement_name(str(requirement))
            if name:
                names.append(name)
        optional = project.get("optional-dependencies")
        for group in (optional.values() if isinstance(optional, dict) else []):
            for requirement in group if isinstance(group, list) else []:
                name = parse_requirement_name(str(requirement))
                if name:
                    names.append(name)

        tool = data.get("tool")
        poetry = tool.get("poetry") if isinstance(tool, dict) else None
        for key in ("dependencies", "dev-dependencies"):
            block = poetry.get(key) if isinstance(poetry, dict) else None
            if isinstance(block, dict):
                names.extend(n for n in block if n.lower() != "python")
        return names

    @staticmethod
    def _from_pipfile(path: Path) -> Iterable[str]:
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return []
        names = []
        for section in ("packages", "dev-packages"):
            block = data.get(section)
            if isinstance(block, dict):
                names.extend(block.keys())
        return names

    @staticmethod
    def _match_globs(patterns: Sequence[str], files: Sequence[str]) -> List[str]:
        """Return the patterns that match at least one file.

        A pattern without a slash also matches by basename, so ``angular.json``
        finds ``apps/web/angular.json``.
        """
        matched = []
        for pattern in patterns:
            for rel in files:
                if fnmatch.fnmatch(rel, pattern) or ("/" not in pattern and fnmatch.fnmatch(rel.rsplit("/", 1)[-1], pattern)):
                    matched.append(pattern)
                    break
        return matched

    def detect(
        self,
        project_dir: Path,
        records: Iterable[TemplateRecord],
        min_score: int = 1,
    ) -> List[DetectionMatch]:
        """Return templates whose detection patterns match, best first."""
        project_dir = Path(project_dir)
        if not project_dir.is_dir():
            raise FileNotFoundError(f"Project directory not found: {project_dir}")

        files = self.collect_files(project_dir)
        deps = self.collect_dependencies(project_dir)
        logger.debug("Scanned %d files and %d dependencies in %s", len(files), len(deps), project_dir)

        matches = []
        for record in records:
            patterns = record.meta.detection_patterns
            if patterns.is_empty():
                continue
            match = DetectionMatch(
                record=record,
                matched_files=self._match_globs(patterns.files, files),
                matched_dependencies=[
                    d for d in patterns.dependencies if normalize_package_name(d) in deps
                ],
            )
            if match.score >= min_score:
                matches.append(match)

        matches.sort(key=lambda m: (-m.score, m.record.kind, m.record.name))
        logger.info("Detected %d matching templates in %s", len(matches), project_dir)
        return matches


__all__ = ["FrameworkDetector", "normalize_package_name", "parse_requirement_name", "DEFAULT_IGNORE_DIRS"]
