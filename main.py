"""STAR Admin: main CLI.

Usage:
  python main.py config show                     Show configuration
  python main.py config set-url URL              Change the API base URL
  python main.py config theme [light|dark|toggle]
  python main.py config edit                     Edit configuration interactively
  python main.py <entity> list [--search T] [--category ID]
  python main.py <entity> add [--field value ...]
  python main.py <entity> edit ID [--field value ...]
  python main.py <entity> delete ID [--yes]
  python main.py autoimport --school S_ID --program DEPT [--select ROW] [--pdf P] [--xlsx P]
  python main.py browse                          Full-screen browser

Entities: schools, programs, courses, csula-courses
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

console = Console()


# ─── Context helpers ──────────────────────────────────────────────────────────

def _manager(ctx: click.Context):
    from config.manager import ConfigManager
    return ConfigManager(ctx.obj.get("config_path"))


def _load_config_or_abort(ctx: click.Context):
    """Load the configuration or abort with an error message."""
    mgr = _manager(ctx)
    try:
        return mgr, mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _api(ctx: click.Context):
    from client.api import StarApi
    _, config = _load_config_or_abort(ctx)
    return StarApi(config, session=ctx.obj.get("session"))


def _header_style(ctx: click.Context) -> str:
    _, config = _load_config_or_abort(ctx)
    return "bold cyan" if config.theme.value == "dark" else "bold blue"


def _fail(message: str, title: str = "Error") -> None:
    console.print(Panel(f"[red]{message}[/red]", title=title, border_style="red"))
    sys.exit(1)


def _print_table(title: str, headers: list[str], rows: list[list[str]], style: str) -> None:
    table = Table(title=title, box=box.ROUNDED, header_style=style, show_lines=True)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*row)
    console.print(table)


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Show or change the configuration."""


@cmd_config.command("show")
@click.pass_context
def config_show(ctx):
    """Show the current configuration."""
    mgr, config = _load_config_or_abort(ctx)
    source = mgr.path if mgr.path.exists() else "defaults"
    console.print(Panel(
        f"[bold]API:[/bold] {config.api_base_url}\n"
        f"[bold]Timeout:[/bold] {config.request_timeout:g}s\n"
        f"[bold]Theme:[/bold] {config.theme.value}",
        title=f"Configuration ({source})",
        border_style="cyan",
    ))


@cmd_config.command("set-url")
@click.argument("url")
@click.pass_context
def config_set_url(ctx, url: str):
    """Store a new API base URL."""
    from pydantic import ValidationError

    mgr = _manager(ctx)
    current = mgr.load_stored()
    try:
        config = current.model_validate({**current.model_dump(), "api_base_url": url})
    except ValidationError as e:
        _fail(e.errors()[0]["msg"])
    mgr.save(config)


@cmd_config.command("theme")
@click.argument("choice", required=False,
                type=click.Choice(["light", "dark", "toggle"]))
@click.pass_context
def config_theme(ctx, choice: Optional[str]):
    """Show, set or toggle the colour theme."""
    from config.schema import Theme

    mgr = _manager(ctx)
    if choice is None:
        _, config = _load_config_or_abort(ctx)
    elif choice == "toggle":
        config = mgr.toggle_theme()
    else:
        config = mgr.set_theme(Theme(choice))
    console.print(f"Theme: [bold]{config.theme.value}[/bold]")


@cmd_config.command("edit")
@click.pass_context
def config_edit(ctx):
    """Edit the configuration interactively."""
    mgr = _manager(ctx)
    mgr.edit_interactive(mgr.load_stored())


# ─── ENTITIES ─────────────────────────────────────────────────────────────────

def _option_name(field_name: str) -> str:
    return "--" + field_name.replace("_", "-")


def _field_options(schema):
    """Decorator adding one string option per form field."""
    def decorate(f):
        for spec in reversed(schema.fields):
            help_text = spec.label + (f" ({spec.hint})" if spec.hint else "")
            f = click.option(_option_name(spec.name), spec.name,
                             default=None, help=help_text)(f)
        return f
    return decorate


def _prompt_field(form, spec) -> None:
    """Ask for one missing field on the terminal."""
    from controllers import ViewState
    from controllers.fields import FieldKind

    if spec.kind in (FieldKind.CHOICE, FieldKind.MULTI_CHOICE):
        options = form.choices(spec.name)
        if form.state == ViewState.ERROR_DIALOG:
            _fail(form.error)
        for oid, label in options:
            console.print(f"  [bold]{oid}[/bold]  {label}")
        if spec.kind == FieldKind.CHOICE and options:
            value = Prompt.ask(spec.label, choices=[oid for oid, _ in options],
                               show_choices=False)
        else:
            value = Prompt.ask(f"{spec.label} (comma-separated)", default="")
    elif spec.kind == FieldKind.FLAG:
        value = Prompt.ask(spec.label, choices=["yes", "no", ""], default="")
    else:
        hint = f" [dim]{spec.hint}[/dim]" if spec.hint else ""
        value = Prompt.ask(f"{spec.label}{hint}", default="")
    form.set(spec.name, value)


def _submit_or_fail(form) -> None:
    if form.submit():
        console.print(Panel(f"[green]{form.success}[/green]", border_style="green"))
        return
    _fail(form.error)


def _entity_group(schema) -> click.Group:
    """Build list/add/edit/delete commands for one entity schema."""

    @click.group(schema.key, help=f"Manage {schema.plural_entity} ({schema.title}).")
    def group():
        pass

    @group.command("list")
    @click.option("--search", "-s", default="", help="Case-insensitive text filter.")
    @click.option("--category", "-c", default=None,
                  help=f"Exact filter id ({schema.category_label or 'none'}).")
    @click.pass_context
    def list_cmd(ctx, search: str, category: Optional[str]):
        from controllers import list_controller
        from export.tui_renderer import record_headers, record_rows

        ctrl = list_controller(schema, _api(ctx))
        if not ctrl.load():
            _fail(ctrl.error)
        rows = ctrl.apply_filter(search, category)
        _print_table(
            f"{schema.title} list ({len(rows)}/{len(ctrl.items)})",
            record_headers(schema), record_rows(schema, rows), _header_style(ctx),
        )

    @group.command("add")
    @_field_options(schema)
    @click.option("--no-prompt", is_flag=True, default=False,
                  help="Do not ask for missing fields.")
    @click.pass_context
    def add_cmd(ctx, no_prompt: bool, **values):
        from controllers import form_controller

        form = form_controller(schema, _api(ctx))
        for spec in schema.fields:
            value = values.get(spec.name)
            if value is not None:
                form.set(spec.name, value)
            elif not no_prompt:
                _prompt_field(form, spec)
        _submit_or_fail(form)

    @group.command("edit")
    @click.argument("record_id")
    @_field_options(schema)
    @click.pass_context
    def edit_cmd(ctx, record_id: str, **values):
        from controllers import form_controller

        form = form_controller(schema, _api(ctx), record_id=record_id)
        if not form.load():
            _fail(f"{form.error}\nReturning to {form.redirect}.")
        for name, value in values.items():
            if value is not None:
                form.set(name, value)
        _submit_or_fail(form)

    @group.command("delete")
    @click.argument("record_id")
    @click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation.")
    @click.pass_context
    def delete_cmd(ctx, record_id: str, yes: bool):
        from controllers import list_controller

        ctrl = list_controller(schema, _api(ctx))
        if not ctrl.load():
            _fail(ctrl.error)
        if ctrl.find(record_id) is None:
            _fail(f"{schema.entity.capitalize()} not found.")
        ctrl.request_delete(record_id)
        if not yes and not click.confirm(
            f"Are you sure you want to delete this {schema.entity}?", default=False
        ):
            ctrl.cancel_delete()
            console.print("[yellow]Cancelled.[/yellow]")
            return
        if not ctrl.confirm_delete():
            _fail(ctrl.dialog_message)
        console.print(f"[green]✓[/green] {schema.title} {record_id} deleted.")

    return group


# ─── AUTOIMPORT ───────────────────────────────────────────────────────────────

@click.command("autoimport")
@click.option("--school", "school_id", required=True, help="Transfer school id (s_id).")
@click.option("--program", "department", required=True, help="Program department, e.g. EE.")
@click.option("--select", "selected", multiple=True,
              help="Row id to highlight in the export (repeatable).")
@click.option("--pdf", "pdf_path", type=click.Path(path_type=Path), default=None,
              help="Write the mapping as PDF.")
@click.option("--xlsx", "xlsx_path", type=click.Path(path_type=Path), default=None,
              help="Write the mapping as Excel workbook.")
@click.pass_context
def cmd_autoimport(ctx, school_id, department, selected, pdf_path, xlsx_path):
    """Show the course mapping of a school and program."""
    from export.mapping import MappingView
    from export.tui_renderer import mapping_rows, mapping_table_headers

    view = MappingView(_api(ctx), school_id, department)
    if not view.load():
        _fail(view.error)
    for row_id in selected:
        try:
            view.toggle_select(row_id)
        except KeyError:
            _fail(f"Unknown row: {row_id}")

    _print_table(view.department_name, mapping_table_headers(view),
                 mapping_rows(view), _header_style(ctx))

    if pdf_path is not None:
        from export.pdf_export import PdfExporter
        PdfExporter(view).export(pdf_path)
        console.print(f"[green]✓[/green] PDF: {pdf_path}")
    if xlsx_path is not None:
        from export.excel_export import ExcelExporter
        ExcelExporter(view).export(xlsx_path)
        console.print(f"[green]✓[/green] Excel: {xlsx_path}")


# ─── BROWSE ───────────────────────────────────────────────────────────────────

@click.command("browse")
@click.pass_context
def cmd_browse(ctx):
    """Open the full-screen browser."""
    from export.tui_browser import StarBrowserApp
    StarBrowserApp(_api(ctx), _manager(ctx)).run()


# ─── MAIN CLI ─────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging.")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Config file (default: config/star_config.yaml).")
@click.pass_context
def cli(ctx, verbose: bool, config_path: Optional[Path]):
    """STAR Admin: course transfer catalog administration."""
    ctx.ensure_object(dict)
    ctx.obj.setdefault("config_path", config_path)
    _setup_logging(verbose)


def _setup_logging(verbose: bool) -> None:
    root = logging.getLogger()
    if verbose:
        from rich.logging import RichHandler
        if not any(isinstance(h, RichHandler) for h in root.handlers):
            root.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
        root.setLevel(logging.DEBUG)
    elif not root.handlers:
        root.addHandler(logging.NullHandler())


def main():
    """Entry point. Writes a default config on the first bare start."""
    from config.manager import ConfigManager
    from config.defaults import default_app_config

    mgr = ConfigManager()
    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Welcome to STAR Admin![/bold]\n\n"
            "No configuration found; writing the defaults.\n"
            "Change the API with [bold]python main.py config set-url URL[/bold].",
            border_style="cyan",
        ))
        mgr.save(default_app_config())

    cli()


# Register commands
from controllers.schemas import ALL_SCHEMAS  # noqa: E402

cli.add_command(cmd_config)
for _schema in ALL_SCHEMAS.values():
    cli.add_command(_entity_group(_schema))
cli.add_command(cmd_autoimport)
cli.add_command(cmd_browse)


if __name__ == "__main__":
    main()
