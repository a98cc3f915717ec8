"""Command line interface for foliogen."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any, NoReturn

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from foliogen.config import (
    ConfigError,
    ConfigManager,
    FoliogenConfig,
    STAMP_PREFIX,
    flatten_for_env,
    resolve_with_precedence,
)
from foliogen.dates import DATE_PATTERNS, OverrideResolver, detect_date, parse_month_year
from foliogen.manifest import (
    FeaturedError,
    ManifestError,
    ManifestWriter,
    WriteResult,
    aggregate,
    load_portfolio_manifests,
    select_featured,
    validate_tree,
)
from foliogen.notify import WebhookNotifier
from foliogen.scanning import PORTFOLIO_TYPES, CollectionScanner, ScanError, get_shape

console = Console()
err_console = Console(stderr=True)

SUCCESS = "✅"
WARNING = "⚠️ "
ERROR = "❌"

FEATURED_MANIFEST_NAME = "featured-manifest.json"


def _configure_logging(config: FoliogenConfig, verbose: bool) -> None:
    """Route library logging through rich on stderr.

    Args:
        config: Loaded configuration providing the default level.
        verbose: Force DEBUG output.
    """
    level = logging.DEBUG if verbose else logging.getLevelName(config.logging.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> NoReturn:
    """Emit a standardized error and terminate the command.

    Raises:
        SystemExit: When emitting JSON output.
        click.ClickException: For human-readable output.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)
    raise click.ClickException(f"{ERROR} {message}") from original


def _emit(message: Any, *, mode: str, quiet: bool) -> None:
    """Print ``message`` unless quiet mode hides it (errors are always shown)."""
    if quiet and mode != "error":
        return
    if mode in {"warning", "error"}:
        err_console.print(message)
    else:
        console.print(message)


def _load_config(json_output: bool) -> FoliogenConfig:
    try:
        manager = ConfigManager()
        manager.ensure_exists()
        return manager.load()
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)


def _resolve_quiet(ctx: click.Context, quiet: bool, json_output: bool, config: FoliogenConfig) -> bool:
    explicit = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    quiet_enabled = quiet if explicit else config.cli.quiet_default
    if json_output:
        if explicit and quiet:
            raise click.ClickException("--json cannot be combined with --quiet.")
        return True
    return quiet_enabled


def _write_message(result: WriteResult, label: str) -> str:
    if result.dry_run:
        state = "would change" if result.changed else "unchanged"
        return f"[cyan]Dry run: {label} {state} ({result.path}).[/cyan]"
    if result.written:
        return f"[green]{SUCCESS} Wrote {label} to {result.path}.[/green]"
    return f"[yellow]{label} unchanged, skipping ({result.path}).[/yellow]"


def _notify(config: FoliogenConfig, target: str, result: WriteResult) -> bool | None:
    """Fire the webhook once the write decision is final.

    Returns:
        bool | None: Notification outcome, or None when no notification was due.
    """
    if result.dry_run:
        return None
    if not (result.written or config.webhook.always):
        return None
    notifier = WebhookNotifier(config.webhook)
    if not notifier.enabled:
        return None
    return notifier.notify(target, {"path": str(result.path), "written": result.written})


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """
    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


def _without_stamp(lines: list[str]) -> list[str]:
    return [line for line in lines if not line.startswith(STAMP_PREFIX)]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="foliogen")
def cli() -> None:
    """Generate portfolio manifests from a tree of photographs."""


@cli.command()
@click.argument("portfolio_type", type=click.Choice(PORTFOLIO_TYPES, case_sensitive=False))
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=str),
    help="Portfolio directory to scan (defaults to <portfolios_root>/<Type>).",
)
@click.option("--force", is_flag=True, help="Rewrite the manifest even when unchanged.")
@click.option("--dry-run", "--dry", "dry_run", is_flag=True, help="Scan and report without writing.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--version", "manifest_version", type=str, help="Version string stamped into the manifest.")
@click.option("--per-folder", is_flag=True, help="Also write legacy per-folder manifest.json files.")
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON summary.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def generate(
    ctx: click.Context,
    portfolio_type: str,
    root: str | None,
    force: bool,
    dry_run: bool,
    verbose: bool,
    manifest_version: str | None,
    per_folder: bool,
    json_output: bool,
    quiet: bool,
) -> None:
    """Scan a PORTFOLIO_TYPE folder and write its aggregate manifest.

    Args:
        ctx: Click context used for parameter source inspection.
        portfolio_type: One of concert, events, journalism, nature or portrait.
        root: Explicit portfolio directory.
        force: Bypass the unchanged-content check.
        dry_run: Skip all writes and notifications.
        verbose: Enable debug logging.
        manifest_version: Version override.
        per_folder: Write legacy per-folder manifests as well.
        json_output: Emit a JSON summary instead of human output.
        quiet: Suppress non-error output.

    Raises:
        click.ClickException: If the root is missing or the manifest cannot be written.
    """
    config = _load_config(json_output)
    _configure_logging(config, verbose)
    quiet_enabled = _resolve_quiet(ctx, quiet, json_output, config)

    portfolio_type = portfolio_type.lower()
    shape = get_shape(portfolio_type)
    portfolios_base = Path(config.paths.portfolios_root).expanduser()
    root_path = Path(root).expanduser() if root else portfolios_base / shape.directory

    scanner = CollectionScanner(
        shape,
        OverrideResolver(Path(config.paths.overrides_file).expanduser()),
        portfolios_base=portfolios_base,
        sample_size=config.dates.sample_images,
        use_exif=config.dates.use_exif,
    )
    try:
        scan = scanner.scan(root_path)
    except ScanError as exc:
        _handle_cli_error(str(exc), code="missing_root", json_output=json_output, original=exc)

    version = manifest_version or config.manifest.version_for(portfolio_type)
    manifest = aggregate(portfolio_type, scan.collections, version=version)
    writer = ManifestWriter()
    try:
        result = writer.write_if_changed(
            root_path / shape.manifest_name, manifest, force=force, dry_run=dry_run
        )
        folder_results: list[WriteResult] = []
        if per_folder or config.manifest.write_per_folder:
            folder_results = writer.write_folder_manifests(
                portfolio_type, scan.collections, version=version, force=force, dry_run=dry_run
            )
    except ManifestError as exc:
        _handle_cli_error(str(exc), code="write_failed", json_output=json_output, original=exc)

    for warning in scan.warnings:
        _emit(f"[yellow]{WARNING} {warning}[/yellow]", mode="warning", quiet=quiet_enabled)

    notified = _notify(config, portfolio_type, result)
    if notified is False:
        _emit(
            f"[yellow]{WARNING} Webhook notification for {portfolio_type} failed.[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
        )

    if json_output:
        payload: dict[str, Any] = {
            "type": portfolio_type,
            "root": str(root_path),
            "output": str(result.path),
            "version": version,
            "written": result.written,
            "changed": result.changed,
            "dryRun": result.dry_run,
            "collections": len(scan.collections),
            "totalImages": sum(collection.total_images for collection in scan.collections),
            "folderManifestsWritten": sum(1 for item in folder_results if item.written),
            "warnings": scan.warnings,
            "skipped": scan.skipped,
            "notified": notified,
        }
        if dry_run:
            payload["manifest"] = manifest.to_json_dict()
        console.print_json(data=payload)
        return

    if verbose or dry_run:
        table = Table(title=f"{shape.directory} collections")
        table.add_column("Name")
        table.add_column("Folder")
        table.add_column("Date")
        table.add_column("Source")
        table.add_column("Images", justify="right")
        for entry in manifest.entries():
            table.add_row(
                entry.name,
                entry.folder_path,
                entry.date.iso if entry.date else "",
                entry.date_source or "",
                str(entry.total_images),
            )
        _emit(table, mode="detail", quiet=quiet_enabled)

    _emit(_write_message(result, shape.manifest_name), mode="summary", quiet=quiet_enabled)
    _emit(
        f"[green]{len(scan.collections)} collections, "
        f"{sum(collection.total_images for collection in scan.collections)} images.[/green]",
        mode="summary",
        quiet=quiet_enabled,
    )


@cli.command()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=str),
    help="Portfolios directory holding the per-type manifests.",
)
@click.option("--limit", type=click.IntRange(min=1), help="Items taken from each portfolio.")
@click.option("--total", type=click.IntRange(min=1), help="Maximum number of featured items.")
@click.option("--force", is_flag=True, help="Rewrite the manifest even when unchanged.")
@click.option("--dry-run", "--dry", "dry_run", is_flag=True, help="Select and report without writing.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--version", "manifest_version", type=str, help="Version string stamped into the manifest.")
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON summary.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def featured(
    ctx: click.Context,
    root: str | None,
    limit: int | None,
    total: int | None,
    force: bool,
    dry_run: bool,
    verbose: bool,
    manifest_version: str | None,
    json_output: bool,
    quiet: bool,
) -> None:
    """Build the featured manifest from the existing per-type manifests."""
    config = _load_config(json_output)
    _configure_logging(config, verbose)
    quiet_enabled = _resolve_quiet(ctx, quiet, json_output, config)

    base = Path(root or config.paths.portfolios_root).expanduser()
    if not base.is_dir():
        _handle_cli_error(f"Portfolios root not found: {base}", code="missing_root", json_output=json_output)

    items_per_category = limit or config.featured.items_per_category
    total_limit = total or config.featured.total_limit
    try:
        manifests = load_portfolio_manifests(base, config.featured.sources)
        manifest = select_featured(
            manifests,
            items_per_category,
            total_limit,
            version=manifest_version or config.featured.version,
        )
        result = ManifestWriter().write_if_changed(
            base / FEATURED_MANIFEST_NAME, manifest, force=force, dry_run=dry_run
        )
    except FeaturedError as exc:
        _handle_cli_error(str(exc), code="no_featured_items", json_output=json_output, original=exc)
    except ManifestError as exc:
        _handle_cli_error(str(exc), code="manifest_error", json_output=json_output, original=exc)

    notified = _notify(config, "featured", result)

    if json_output:
        payload: dict[str, Any] = {
            "output": str(result.path),
            "written": result.written,
            "changed": result.changed,
            "dryRun": result.dry_run,
            "sources": manifest.sources,
            "totalItems": manifest.total_items,
            "totalImages": manifest.total_images,
            "dateRange": manifest.date_range.to_json_dict(),
            "notified": notified,
        }
        if dry_run:
            payload["manifest"] = manifest.to_json_dict()
        console.print_json(data=payload)
        return

    if verbose or dry_run:
        table = Table(title="Featured items")
        table.add_column("Type")
        table.add_column("Name")
        table.add_column("Date")
        table.add_column("Images", justify="right")
        for item in manifest.items:
            table.add_row(item.type, item.name, item.date.iso, str(item.total_images))
        _emit(table, mode="detail", quiet=quiet_enabled)

    _emit(_write_message(result, FEATURED_MANIFEST_NAME), mode="summary", quiet=quiet_enabled)
    _emit(
        f"[green]{manifest.total_items} featured items with {manifest.total_images} images "
        f"({manifest.date_range.oldest} to {manifest.date_range.newest}).[/green]",
        mode="summary",
        quiet=quiet_enabled,
    )


@cli.command()
@click.argument("texts", nargs=-1, required=True)
@click.option("--json", "json_output", is_flag=True, help="Emit results as JSON.")
def detect(texts: tuple[str, ...], json_output: bool) -> None:
    """Show the date inferred from each filename or folder name in TEXTS."""
    results = []
    for text in texts:
        info = detect_date(text) or parse_month_year(text)
        results.append((text, info))

    if json_output:
        console.print_json(
            data=[
                {"text": text, "date": info.to_json_dict() if info else None}
                for text, info in results
            ]
        )
        return

    table = Table(title=f"Date detection ({len(DATE_PATTERNS)} patterns)")
    table.add_column("Text")
    table.add_column("Date")
    table.add_column("Pattern")
    table.add_column("Confidence")
    for text, info in results:
        if info is None:
            table.add_row(text, "[yellow]no date[/yellow]", "", "")
        else:
            table.add_row(text, info.iso, info.source, info.confidence)
    console.print(table)


@cli.command()
@click.argument("root", required=False, type=click.Path(file_okay=False, path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit the report as JSON.")
def validate(root: str | None, json_output: bool) -> None:
    """Check manifest files under ROOT (defaults to the portfolios root)."""
    if root is None:
        config = _load_config(json_output)
        root = config.paths.portfolios_root
    base = Path(root).expanduser()
    if not base.is_dir():
        _handle_cli_error(f"Manifests folder not found: {base}", code="missing_root", json_output=json_output)

    report = validate_tree(base)
    if json_output:
        console.print_json(
            data={
                "root": str(base),
                "checked": len(report.checked),
                "issues": [{"path": str(issue.path), "message": issue.message} for issue in report.issues],
            }
        )
    else:
        for issue in report.issues:
            err_console.print(f"[red]{ERROR} {issue}[/red]")
        status = SUCCESS if report.ok else ERROR
        console.print(
            f"{status} Checked {len(report.checked)} manifest files. Errors: {len(report.issues)}"
        )
    if not report.ok:
        raise SystemExit(1)


@cli.group()
def config() -> None:
    """Manage foliogen configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.option("--env", "as_env", is_flag=True, help="Show settings as FOLIOGEN__ variables.")
def config_view(no_env: bool, as_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_env:
        for key, value in flatten_for_env(loaded).items():
            console.print(f"{key}={value}", markup=False, highlight=False)
        return

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'featured.total_limit'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=FoliogenConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    if _without_stamp(before) == _without_stamp(after):
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=FoliogenConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
