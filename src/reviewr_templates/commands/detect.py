"""Detect command implementation: which templates apply to a project."""

import logging
from pathlib import Path
from typing import List, Optional

from ..core.command_context import CommandContext
from ..core.models import DetectionMatch
from ..processors.detector import DEFAULT_IGNORE_DIRS, FrameworkDetector

logger = logging.getLogger(__name__)


def build_detector(ctx: CommandContext) -> FrameworkDetector:
    return FrameworkDetector(
        max_depth=ctx.get_default('detection', 'max_depth', 4),
        ignore_dirs=ctx.get_default('detection', 'ignore_dirs', list(DEFAULT_IGNORE_DIRS)),
    )


def run(
    config_path: Optional[str],
    project_dir: str,
    kind: Optional[str] = None,
    min_score: Optional[int] = None,
) -> List[DetectionMatch]:
    """Scan *project_dir* and return matching templates, best first.

    Args:
        config_path: Path to the main configuration file
        project_dir: Project checkout to scan
        kind: Restrict to one template kind (e.g. skills)
        min_score: Minimum number of matched patterns (defaults to detection.min_score)
    """
    ctx = CommandContext(config_path)
    detector = build_detector(ctx)
    if min_score is None:
        min_score = ctx.get_default('detection', 'min_score', 1)
    records = ctx.catalog.list(kind=kind)
    matches = detector.detect(Path(project_dir), records, min_score=min_score)
    for match in matches:
        logger.debug(
            "%s score=%d files=%s deps=%s",
            match.record.key, match.score, match.matched_files, match.matched_dependencies,
        )
    return matches
