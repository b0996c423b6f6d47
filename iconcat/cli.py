"""iconcat CLI — the CI entry points for the icon catalogs."""

import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from iconcat import __version__
from iconcat.config import CatalogSpec, find_spec, load_catalog_specs, parse_target_size
from iconcat.errors import CatalogLoadError, CatalogStructureError, ConfigError

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def _fail(message: str) -> None:
    err_console.print(f"[red]x[/] {escape(message)}")


def _load_specs(ctx: click.Context) -> list[CatalogSpec]:
    try:
        return load_catalog_specs(ctx.obj["root"], ctx.obj["config"])
    except ConfigError as e:
        _fail(str(e))
        sys.exit(1)


def _print_list(title: str, items: list) -> None:
    if not items:
        return
    err_console.print(f"[red]x[/] {escape(title)}")
    for item in items:
        err_console.print(f"   - {escape(str(item))}")


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--root",
    default=".",
    envvar="ICONCAT_ROOT",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Repository root holding the catalog data",
)
@click.option("--config", default=None, type=click.Path(dir_okay=False), help="Catalog config file")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def main(ctx: click.Context, root: str, config: str | None, verbose: bool):
    """iconcat — validate and normalize the STIR/BEIR icon catalogs.

    Every command runs once and exits 0 on success, 1 on failure.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )
    ctx.ensure_object(dict)
    ctx.obj["root"] = root
    ctx.obj["config"] = config


# ── Schema validation ────────────────────────────────────────────────


def _print_validation(result) -> None:
    name = escape(result.catalog_name)
    if result.load_error:
        _fail(result.load_error)

    for entry in result.entries:
        err_console.print(
            f"[red]x[/] Issues with {name} icon #{entry.index} ({escape(entry.label)}):"
        )
        for issue in entry.issues:
            err_console.print(f"   - {escape(issue)}")

    _print_list(f"Duplicate IDs found in {result.catalog_name} database:", result.duplicate_ids)

    if result.passed:
        console.print(f"[green]v[/] {escape(result.summary())}")
    else:
        _fail(result.summary())


@main.command(name="validate-json")
@click.pass_context
def validate_json(ctx: click.Context):
    """Validate every catalog database against the entry schema."""
    from iconcat.validator import validate_catalogs

    specs = _load_specs(ctx)
    all_passed = True

    try:
        for result in validate_catalogs(specs):
            _print_validation(result)
            all_passed = all_passed and result.passed
    except CatalogStructureError as e:
        _fail(str(e))
        sys.exit(1)

    if not all_passed:
        _fail("Database validation failed")
        sys.exit(1)
    console.print("[green]v[/] All database validations passed")


# ── Existence / format check ─────────────────────────────────────────


@main.command(name="check-icons")
@click.pass_context
def check_icons_cmd(ctx: click.Context):
    """Check that every referenced icon exists and is a PNG.

    Dimensions are checked as well when ImageMagick's ``identify`` is on PATH.
    """
    from iconcat.checker import check_icons
    from iconcat.geometry import GeometryProbe

    specs = _load_specs(ctx)
    probe = GeometryProbe.detect()

    console.print("Validating icon files...")
    try:
        report = check_icons(specs, probe)
    except CatalogStructureError as e:
        _fail(str(e))
        sys.exit(1)

    for error in report.setup_errors:
        _fail(error)
    _print_list("Missing icon files:", report.missing)
    _print_list("Icon format errors:", report.format_errors)
    for warning in report.warnings:
        err_console.print(f"[yellow]![/] Warning: {escape(warning)}")

    if not report.passed:
        _fail(f"Icon validation failed with {report.error_count} errors")
        sys.exit(1)
    console.print("[green]v[/] All icon validations passed")


# ── Normalize ────────────────────────────────────────────────────────


@main.command()
@click.option("--size", "size", default=None, help="Target size in px (32-256, default 128)")
@click.pass_context
def normalize(ctx: click.Context, size: str | None):
    """Make every referenced icon square and resize out-of-range icons in place."""
    from iconcat.normalizer import normalize_catalogs

    specs = _load_specs(ctx)
    target_size = parse_target_size(size)

    try:
        report = normalize_catalogs(specs, target_size)
    except CatalogStructureError as e:
        _fail(str(e))
        sys.exit(1)

    for error in report.setup_errors:
        _fail(error)
    _print_list("Missing icon files:", report.missing)
    _print_list("Icon errors:", report.errors)

    console.print("\n[bold]=== Results ===[/]")
    console.print(f"  Already valid icons: {report.already_valid}")
    console.print(f"  Resized icons: {report.resized}")
    console.print(f"  Failed/missing icons: {report.error_count}")

    if not report.passed:
        _fail("Icon validation and resizing failed")
        sys.exit(1)

    if report.error_count == len(report.missing):
        console.print("\n[green]v[/] All available icons have been validated and resized successfully")
        if report.missing:
            console.print(f"   Note: {len(report.missing)} icons were missing and need to be added")
    elif report.resized:
        console.print("\n[green]v[/] Successfully resized some icons")
    else:
        console.print("\n[green]v[/] All icons are already valid, no changes needed")


# ── Browse ───────────────────────────────────────────────────────────


@main.command(name="list")
@click.argument("catalog_name")
@click.option("--search", "-s", default="", help="Substring of name or description")
@click.option("--category", "-c", default="", help="Exact category")
@click.option("--support", "supports", multiple=True, help="Capability key, e.g. linux or firefox")
@click.pass_context
def list_icons(ctx: click.Context, catalog_name: str, search: str, category: str, supports: tuple):
    """List the icons of a catalog, filtered like the catalog web page."""
    from iconcat.catalog import CatalogQuery, categories, load_catalog, search_catalog

    specs = _load_specs(ctx)
    try:
        spec = find_spec(specs, catalog_name)
        catalog = load_catalog(spec)
    except (ConfigError, CatalogLoadError, CatalogStructureError) as e:
        _fail(str(e))
        sys.exit(1)

    unknown = [s for s in supports if s not in spec.capability_keys]
    if unknown:
        _fail(f"Unknown {spec.capability_field}: {', '.join(unknown)}")
        sys.exit(1)

    entries = search_catalog(
        catalog, CatalogQuery(text=search, category=category, supports=list(supports))
    )
    if not entries:
        console.print("[yellow]No icons match the current filters.[/]")
        return

    table = Table(title=f"{escape(spec.name)} ({len(entries)} icons)")
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    for key in spec.capability_keys:
        table.add_column(key.capitalize(), justify="center")
    table.add_column("Description")

    for entry in entries:
        caps = entry.get(spec.capability_field)
        caps = caps if isinstance(caps, dict) else {}
        table.add_row(
            escape(str(entry.get("name", ""))),
            escape(str(entry.get("category", ""))),
            *["[green]Y[/]" if caps.get(k) is True else "[dim]-[/]" for k in spec.capability_keys],
            escape(str(entry.get("description") or "")[:60]),
        )

    console.print(table)
    console.print(f"[dim]Categories: {escape(', '.join(categories(catalog)))}[/]")


# ── Schema ───────────────────────────────────────────────────────────


@main.command(name="schema")
@click.argument("catalog_name")
@click.pass_context
def dump_schema(ctx: click.Context, catalog_name: str):
    """Print the JSON Schema of a catalog database."""
    from iconcat.schema import get_schema

    specs = _load_specs(ctx)
    try:
        spec = find_spec(specs, catalog_name)
    except ConfigError as e:
        _fail(str(e))
        sys.exit(1)

    click.echo(json.dumps(get_schema(spec), indent=2))


if __name__ == "__main__":
    main()
