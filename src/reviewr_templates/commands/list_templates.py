"""
List command implementation.
Discovers templates in every configured catalog root and filters them.
"""

import logging
from typing import List, Optional

from ..core.command_context import CommandContext
from ..core.models import TemplateRecord

logger = logging.getLogger(__name__)


def run(
    config_path: Optional[str],
    kind: Optional[str] = None,
    tag: Optional[str] = None,
    framework: Optional[str] = None,
) -> List[TemplateRecord]:
    """Return the effective templates, optionally filtered.

    Args:
        config_path: Path to the main configuration file
        kind: Restrict to one kind (skills, hooks, agents, presets)
        tag: Restrict to templates carrying this tag
        framework: Restrict to templates for this framework
    """
    ctx = CommandContext(config_path)
    records = ctx.catalog.list(kind=kind, tag=tag, framework=framework)
    for issue in ctx.catalog.issues:
        logger.warning("%s", issue)
    logger.debug("Listing %d templates", len(records))
    return records


def format_table(records: List[TemplateRecord]) -> List[str]:
    """Render records as aligned text rows for terminal output."""
    if not records:
        return []
    rows = [(r.kind, r.name, r.meta.version or "-", r.meta.display_name or r.meta.description) for r in records]
    widths = [max(len(row[i]) for row in rows) for i in range(3)]
    return [
        f"{kind:<{widths[0]}}  {name:<{widths[1]}}  {version:<{widths[2]}}  {title}".rstrip()
        for kind, name, version, title in rows
    ]
