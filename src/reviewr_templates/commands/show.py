"""Show command implementation: metadata and document of a single template."""

import json
import logging
from typing import Optional

from ..core.command_context import CommandContext
from ..core.models import TemplateRecord

logger = logging.getLogger(__name__)


def resolve_record(ctx: CommandContext, name: str, kind: Optional[str] = None) -> TemplateRecord:
    """Find a template by name, using *kind* to disambiguate.

    Raises:
        TemplateNotFoundError: If no template matches
        ValueError: If the name exists under several kinds and no kind was given
    """
    if kind:
        return ctx.catalog.get(kind, name)
    candidates = ctx.catalog.find(name)
    if not candidates:
        # Let the catalog raise its own not-found error for a consistent message
        return ctx.catalog.get("skills", name)
    if len(candidates) > 1:
        kinds = ", ".join(r.kind for r in candidates)
        raise ValueError(f"'{name}' exists as several kinds ({kinds}); pass --kind")
    return candidates[0]


def run(config_path: Optional[str], name: str, kind: Optional[str] = None, meta_only: bool = False) -> str:
    """Return a printable view of a template: its meta.json and, unless *meta_only*, its document."""
    ctx = CommandContext(config_path)
    record = resolve_record(ctx, name, kind)
    logger.debug("Showing %s from %s", record.key, record.path)

    parts = [json.dumps(record.meta.to_dict(), indent=2, ensure_ascii=False)]
    if not meta_only:
        if record.document.exists():
            parts.append(record.read_document().rstrip())
        else:
            logger.warning("%s has no %s", record.key, record.document.name)
    return "\n\n".join(parts) + "\n"
