"""
Validate command implementation.
Runs the content checks over every configured catalog root and, where a root
carries a manifest.json, checks that the manifest is current.
"""

import logging
from typing import List, Optional, Tuple

from ..core.command_context import CommandContext
from ..core.manifest import MANIFEST_FILE, check_manifest
from ..core.models import ValidationIssue
from ..processors.validator import TemplateValidator, summarize

logger = logging.getLogger(__name__)


def run(
    config_path: Optional[str],
    strict: Optional[bool] = None,
    require_manifest: bool = False,
) -> Tuple[bool, List[ValidationIssue]]:
    """Validate the effective catalog.

    Args:
        config_path: Path to the main configuration file
        strict: Treat warnings as failures (defaults to ``validation.strict``)
        require_manifest: Report a missing manifest.json as an error

    Returns:
        (passed, issues)
    """
    logger.info("Starting validate command")
    ctx = CommandContext(config_path)
    if strict is None:
        strict = ctx.config_manager.is_strict()

    validator = TemplateValidator(ctx.config_manager.get_required_fields)
    issues = validator.validate_catalog(ctx.catalog)

    for root in ctx.catalog.roots:
        if not root.is_dir():
            continue
        for issue in check_manifest(root):
            if issue.code == "manifest.missing" and not require_manifest:
                logger.debug("No %s in %s", MANIFEST_FILE, root)
                continue
            if issue.code == "manifest.missing":
                issue.severity = "error"
            issues.append(issue)

    counts = summarize(issues)
    passed = counts["error"] == 0 and (not strict or counts["warning"] == 0)
    logger.info("Validation %s: %d errors, %d warnings", "passed" if passed else "failed",
                counts["error"], counts["warning"])
    return passed, issues
