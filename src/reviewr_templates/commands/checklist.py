"""
Checklist command implementation.
Renders selected (or detected) skills into one Markdown review checklist.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..core.command_context import CommandContext
from ..core.paths import resolve_data_file
from ..processors.checklist import ChecklistRenderer
from .detect import build_detector

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "review_checklist.md"


def run(
    config_path: Optional[str],
    skills: Optional[List[str]] = None,
    project_dir: Optional[str] = None,
    output: Optional[str] = None,
    title: str = "Code Review Checklist",
) -> Path:
    """Write a checklist for *skills*, or for the skills detected in *project_dir*.

    Relative output paths resolve under the project directory when one is
    given, otherwise under the runtime data directory.

    Returns:
        Path of the written checklist
    """
    if not skills and not project_dir:
        raise ValueError("Provide skill names or a project directory to detect them from")

    ctx = CommandContext(config_path)

    if skills:
        records = [ctx.catalog.get("skills", name) for name in skills]
    else:
        matches = build_detector(ctx).detect(
            Path(project_dir),
            ctx.catalog.list(kind="skills"),
            min_score=ctx.get_default('detection', 'min_score', 1),
        )
        records = [m.record for m in matches]
        if not records:
            raise ValueError(f"No skills matched {project_dir}")
        logger.info("Detected skills: %s", ", ".join(r.name for r in records))

    target_name = output or DEFAULT_OUTPUT
    candidate = Path(target_name).expanduser()
    if candidate.is_absolute():
        target = candidate
    elif project_dir:
        target = Path(project_dir) / candidate
    else:
        target = resolve_data_file(target_name, ensure_parent=True)

    renderer = ChecklistRenderer(ctx.get_default('checklist', 'template', "checklist_template.md"))
    return renderer.write(records, target, title=title)
