"""Command-line entry point for reviewr-templates."""

from __future__ import annotations

import logging
import sys

import click

from . import __version__
from .commands import checklist as checklist_cmd
from .commands import detect as detect_cmd
from .commands import install as install_cmd
from .commands import list_templates as list_cmd
from .commands import manifest as manifest_cmd
from .commands import show as show_cmd
from .commands import sync as sync_cmd
from .commands import validate as validate_cmd
from .core.catalog import TemplateCatalog
from .core.config import ConfigManager, DEFAULT_CONFIG_PATH
from .core.models import KINDS

# Setup logging early so submodules inherit sane defaults
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

_KIND_CHOICE = click.Choice(list(KINDS) + [k.rstrip("s") for k in KINDS])


@click.group()
@click.option(
    "--config",
    default=str(DEFAULT_CONFIG_PATH),
    show_default=True,
    help="Path to config file (defaults to data_dir/config/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(__version__, prog_name="reviewr-templates")
@click.pass_context
def cli(ctx: click.Context, config: str, verbose: bool) -> None:
    """Reviewr templates - code-review skills, hooks, agents and presets."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command("list")
@click.option("--kind", type=_KIND_CHOICE, help="Only list one template kind")
@click.option("--tag", help="Only list templates with this tag")
@click.option("--framework", help="Only list templates for this framework")
@click.pass_context
def list_templates(ctx: click.Context, kind: str | None, tag: str | None, framework: str | None) -> None:
    """List templates from every configured catalog root."""
    try:
        records = list_cmd.run(ctx.obj["config_path"], kind=kind, tag=tag, framework=framework)
        if not records:
            click.echo("No templates found")
            return
        for row in list_cmd.format_table(records):
            click.echo(row)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ List command failed: {exc}", err=True)
        sys.exit(1)


@cli.command("show")
@click.argument("name")
@click.option("--kind", type=_KIND_CHOICE, help="Template kind, when the name is ambiguous")
@click.option("--meta-only", is_flag=True, help="Print meta.json only, not the document")
@click.pass_context
def show(ctx: click.Context, name: str, kind: str | None, meta_only: bool) -> None:
    """Print a template's metadata and guideline document."""
    try:
        click.echo(show_cmd.run(ctx.obj["config_path"], name, kind=kind, meta_only=meta_only), nl=False)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Show command failed: {exc}", err=True)
        sys.exit(1)


@cli.command("validate")
@click.option("--strict/--no-strict", default=None, help="Treat warnings as failures (default: config)")
@click.option("--require-manifest", is_flag=True, help="Fail when a catalog root has no manifest.json")
@click.pass_context
def validate(ctx: click.Context, strict: bool | None, require_manifest: bool) -> None:
    """Check every template's meta.json and document, and each manifest.json."""
    try:
        passed, issues = validate_cmd.run(ctx.obj["config_path"], strict=strict, require_manifest=require_manifest)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Validate command failed: {exc}", err=True)
        sys.exit(1)

    for issue in issues:
        click.echo(str(issue), err=issue.is_error)
    if passed:
        click.echo("✅ Catalog is valid")
    else:
        click.echo("❌ Catalog validation failed", err=True)
        sys.exit(1)


@cli.group("manifest")
def manifest() -> None:
    """Build or check a catalog's manifest.json."""


@manifest.command("build")
@click.option("--root", help="Catalog root (default: first catalog.paths entry, else the bundled catalog)")
@click.pass_context
def manifest_build(ctx: click.Context, root: str | None) -> None:
    """Regenerate manifest.json from the catalog directories."""
    try:
        path = manifest_cmd.build(ctx.obj["config_path"], root)
        click.echo(f"✅ Wrote {path}")
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Manifest build failed: {exc}", err=True)
        sys.exit(1)


@manifest.command("check")
@click.option("--root", help="Catalog root (default: first catalog.paths entry, else the bundled catalog)")
@click.pass_context
def manifest_check(ctx: click.Context, root: str | None) -> None:
    """Fail when manifest.json is missing or out of date."""
    try:
        issues = manifest_cmd.check(ctx.obj["config_path"], root)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Manifest check failed: {exc}", err=True)
        sys.exit(1)
    if issues:
        for issue in issues:
            click.echo(str(issue), err=True)
        sys.exit(1)
    click.echo("✅ manifest.json is up to date")


@cli.command("detect")
@click.argument("project_dir", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--kind", type=_KIND_CHOICE, help="Only consider one template kind")
@click.option("--min-score", type=int, help="Minimum matched patterns (default: config)")
@click.pass_context
def detect(ctx: click.Context, project_dir: str, kind: str | None, min_score: int | None) -> None:
    """Show which templates apply to PROJECT_DIR."""
    try:
        matches = detect_cmd.run(ctx.obj["config_path"], project_dir, kind=kind, min_score=min_score)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Detect command failed: {exc}", err=True)
        sys.exit(1)
    if not matches:
        click.echo("No matching templates")
        return
    for match in matches:
        evidence = ", ".join(match.matched_files + match.matched_dependencies)
        click.echo(f"{match.record.key}  score={match.score}  ({evidence})")


@cli.command("install")
@click.argument("names", nargs=-1)
@click.option("--project", "project_dir", default=".", type=click.Path(exists=True, file_okay=False),
              show_default=True, help="Project directory to install into")
@click.option("--kind", type=_KIND_CHOICE, help="Template kind, when a name is ambiguous")
@click.option("--detect", "use_detection", is_flag=True, help="Install the skills detected in the project")
@click.option("--force", "overwrite", is_flag=True, help="Overwrite existing files (default: config)")
@click.pass_context
def install(
    ctx: click.Context,
    names: tuple[str, ...],
    project_dir: str,
    kind: str | None,
    use_detection: bool,
    overwrite: bool,
) -> None:
    """Install templates (or presets) into a project."""
    if not names and not use_detection:
        click.echo("Error: give template names or --detect", err=True)
        sys.exit(1)
    try:
        results = []
        if names:
            results.extend(install_cmd.run(ctx.obj["config_path"], list(names), project_dir, kind=kind,
                                           overwrite=overwrite or None))
        if use_detection:
            results.extend(install_cmd.install_detected(ctx.obj["config_path"], project_dir, overwrite=overwrite or None))
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Install failed: {exc}", err=True)
        sys.exit(1)

    if not results:
        click.echo("Nothing installed")
        return
    for result in results:
        note = f" ({len(result.skipped)} existing file(s) kept)" if result.skipped else ""
        click.echo(f"✅ {result.kind}/{result.name} {result.version} -> {result.destination}{note}")


@cli.command("uninstall")
@click.argument("name")
@click.option("--project", "project_dir", default=".", type=click.Path(exists=True, file_okay=False),
              show_default=True, help="Project directory")
@click.option("--kind", type=_KIND_CHOICE, help="Template kind, when the name is ambiguous")
@click.pass_context
def uninstall(ctx: click.Context, name: str, project_dir: str, kind: str | None) -> None:
    """Remove an installed template from a project."""
    try:
        removed = install_cmd.uninstall(ctx.obj["config_path"], name, project_dir, kind=kind)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Uninstall failed: {exc}", err=True)
        sys.exit(1)
    if removed:
        click.echo(f"✅ Removed '{name}'")
    else:
        click.echo(f"'{name}' is not installed")


@cli.command("installed")
@click.option("--project", "project_dir", default=".", type=click.Path(exists=True, file_okay=False),
              show_default=True, help="Project directory")
@click.pass_context
def installed(ctx: click.Context, project_dir: str) -> None:
    """List templates installed in a project."""
    try:
        entries = install_cmd.installed(ctx.obj["config_path"], project_dir)
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Installed command failed: {exc}", err=True)
        sys.exit(1)
    if not entries:
        click.echo("No templates installed")
        return
    for entry in entries:
        update = f"  (catalog has {entry['available']})" if entry["available"] else ""
        click.echo(f"{entry['kind']}/{entry['name']}  {entry['version'] or '-'}{update}")


@cli.command("checklist")
@click.argument("skills", nargs=-1)
@click.option("--project", "project_dir", type=click.Path(exists=True, file_okay=False),
              help="Detect skills from this project (and write the checklist there)")
@click.option("--output", "-o", help="Output file (default: review_checklist.md)")
@click.option("--title", default="Code Review Checklist", show_default=True, help="Document title")
@click.pass_context
def checklist(ctx: click.Context, skills: tuple[str, ...], project_dir: str | None, output: str | None,
              title: str) -> None:
    """Combine skills into one Markdown review checklist."""
    try:
        path = checklist_cmd.run(ctx.obj["config_path"], list(skills) or None, project_dir, output, title)
        click.echo(f"✅ Checklist written to {path}")
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Checklist command failed: {exc}", err=True)
        sys.exit(1)


@cli.command("sync")
@click.option("--remote", default="default", show_default=True, help="Remote name from the config")
@click.option("--url", help="Base URL of a remote catalog (overrides --remote)")
@click.option("--dest", help="Destination catalog root (default: data_dir/catalogs/<remote>)")
@click.option("--kind", "kinds", type=_KIND_CHOICE, multiple=True, help="Only sync these kinds")
@click.pass_context
def sync(ctx: click.Context, remote: str, url: str | None, dest: str | None, kinds: tuple[str, ...]) -> None:
    """Download a remote catalog and verify it against its manifest."""
    try:
        written = sync_cmd.run(ctx.obj["config_path"], remote=remote, url=url, dest=dest, kinds=list(kinds) or None)
        click.echo(f"✅ Synced {len(written)} files")
    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Sync failed: {exc}", err=True)
        sys.exit(1)


@cli.command("status")
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show configuration and catalog status."""
    try:
        config_manager = ConfigManager(ctx.obj["config_path"])
        click.echo(f"📄 Config file: {config_manager.config_path}")

        if config_manager.validate_config():
            click.echo("✅ Configuration is valid")
        else:
            click.echo("❌ Configuration validation failed")
            return

        roots = config_manager.get_catalog_dirs()
        click.echo("📚 Catalog roots:")
        for root in roots:
            marker = "" if root.is_dir() else "  (missing)"
            click.echo(f"   {root}{marker}")

        catalog = TemplateCatalog(roots)
        records = catalog.discover()
        for kind in KINDS:
            count = sum(1 for r in records if r.kind == kind)
            click.echo(f"   {kind}: {count}")
        if catalog.issues:
            click.echo(f"⚠️  {len(catalog.issues)} template(s) could not be loaded; run 'validate'")

    except Exception as exc:  # pragma: no cover - click echoes the message
        click.echo(f"❌ Error checking status: {exc}", err=True)


if __name__ == "__main__":  # pragma: no cover - script entry
    cli()
