"""
Combined review checklist generation.

Concatenates the guideline documents of several skills into one Markdown file
that can be handed to a reviewer (human or assistant) in a single piece.
"""

import datetime
import logging
import re
import shutil
from pathlib import Path
from string import Template
from typing import Dict, List, Optional

from ..core.models import TemplateRecord
from ..core.paths import get_system_path, resolve_data_path

CUSTOM_TEMPLATE_MARKER = "reviewr-templates:custom-template"

_BASIC_TEMPLATE = """# $title

_Generated $generated from $count skill(s)._

$toc

$sections
"""

logger = logging.getLogger(__name__)


def slugify(text: str) -> str:
    """GitHub-style heading anchor."""
    slug = re.sub(r"[^\w\s-]", "", text.strip().lower())
    return re.sub(r"\s+", "-", slug)


def unique_slug(text: str, seen: Dict[str, int]) -> str:
    """Slug for *text*, suffixed -1, -2 ... when an earlier heading took it."""
    base = slugify(text)
    count = seen.get(base, 0)
    seen[base] = count + 1
    return base if count == 0 else f"{base}-{count}"


def demote_headings(markdown: str, levels: int = 1) -> str:
    """Push every ATX heading down by *levels*, leaving fenced code untouched."""
    out = []
    in_fence = False
    for line in markdown.splitlines():
        if line.lstrip().startswith("```"):
            in_fence = not in_fence
        elif not in_fence and re.match(r"^#{1,6}\s", line):
            hashes = len(line) - len(line.lstrip("#"))
            line = "#" * min(6, hashes + levels) + line[hashes:]
        out.append(line)
    return "\n".join(out)


class ChecklistRenderer:
    """Renders skills into one Markdown checklist using a string.Template file."""

    def __init__(self, template_path: str = "checklist_template.md"):
        self.template_path = self._resolve_template(template_path)

    def render(self, records: List[TemplateRecord], title: str = "Code Review Checklist") -> str:
        skills = [r for r in records if r.kind == "skills"]
        if not skills:
            raise ValueError("No skills selected for the checklist")

        toc_lines = []
        sections = []
        anchors: Dict[str, int] = {}
        unique_slug(title, anchors)
        for record in skills:
            heading = record.meta.display_name or record.name
            version = f" (v{record.meta.version})" if record.meta.version else ""
            toc_lines.append(f"- [{heading}](#{unique_slug(heading, anchors)})")

            body = record.read_document().strip()
            # The skill's own title is replaced by the section heading
            body_lines = body.splitlines()
            if body_lines and body_lines[0].startswith("# "):
                body = "\n".join(body_lines[1:]).strip()
            sections.append(f"## {heading}\n\n<!-- {record.key}{version} -->\n\n{demote_headings(body)}\n")

        template = Template(Path(self.template_path).read_text(encoding="utf-8"))
        rendered = template.safe_substitute(
            title=title,
            generated=str(datetime.date.today()),
            count=str(len(skills)),
            toc="\n".join(toc_lines),
            sections="\n".join(sections).rstrip() + "\n",
        )
        # The marker is for the runtime template copy only
        rendered = "\n".join(line for line in rendered.splitlines() if CUSTOM_TEMPLATE_MARKER not in line)
        return rendered.rstrip() + "\n"

    def write(self, records: List[TemplateRecord], output_path: Path, title: str = "Code Review Checklist") -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(records, title=title), encoding="utf-8")
        skill_count = sum(1 for r in records if r.kind == "skills")
        logger.info("Wrote checklist for %d skill(s) to %s", skill_count, output_path)
        return output_path

    def _ensure_template_available(self, template_path: Path) -> Path:
        """
        Ensure a template is present in the runtime data directory.

        The runtime copy is refreshed from the bundled template unless it
        carries the custom-template marker, which keeps user edits in place.
        """
        if template_path.is_absolute():
            if template_path.exists():
                return template_path
            return self._ensure_template_available(Path(template_path.name))

        data_template = resolve_data_path('templates', *template_path.parts)
        system_template = get_system_path('templates', *template_path.parts)

        if system_template.exists():
            data_template.parent.mkdir(parents=True, exist_ok=True)

            if data_template.exists():
                try:
                    if CUSTOM_TEMPLATE_MARKER in data_template.read_text(encoding='utf-8'):
                        logger.debug("Skipping template refresh for %s (custom marker present)", data_template)
                        return data_template
                except (OSError, UnicodeDecodeError):
                    pass

            needs_copy = True
            if data_template.exists():
                try:
                    needs_copy = data_template.read_bytes() != system_template.read_bytes()
                except OSError:
                    needs_copy = True

            if needs_copy:
                shutil.copyfile(system_template, data_template)
                logger.info("Refreshed checklist template %s from system copy", data_template.name)

            return data_template

        if not data_template.exists():
            data_template.parent.mkdir(parents=True, exist_ok=True)
            data_template.write_text(_BASIC_TEMPLATE, encoding="utf-8")
            logger.info("Created basic checklist template at %s", data_template)
        return data_template

    def _resolve_template(self, template_path: Optional[str]) -> str:
        return str(self._ensure_template_available(Path(template_path or "checklist_template.md")))


__all__ = ["ChecklistRenderer", "slugify", "unique_slug", "demote_headings", "CUSTOM_TEMPLATE_MARKER"]
