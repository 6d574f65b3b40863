"""
Command line interface for text-grab.
Copy matching file contents to the clipboard and manage the project config.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
import pyperclip
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..application.copy_files_content import (
    CopyFilesContentUseCase,
    NoInputError,
    WorkspaceError,
)
from ..infrastructure.config_loader import (
    ConfigurationError,
    JsonConfigLoader,
    initialize_project_config,
    project_config_path,
    set_project_template,
)
from ..infrastructure.templates import NO_TEMPLATE, TEMPLATES, template_names


# Global console for rich output
console = Console()
err_console = Console(stderr=True)

root_option = click.option(
    '--root', '-r',
    type=click.Path(path_type=Path),
    default=Path('.'),
    show_default=True,
    help='Project root folder',
)
template_option = click.option(
    '--template', '-t',
    type=click.Choice([*template_names(), NO_TEMPLATE]),
    help='Template name (prompted for when omitted)',
)


def _setup_logging(verbose: bool) -> None:
    """Send text_grab log records, warnings included, to stderr."""
    logger = logging.getLogger('text_grab')
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not logger.handlers:
        handler = RichHandler(console=err_console, show_time=False, show_path=False)
        handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(handler)


def _prompt_for_input(message: str, placeholder: str) -> Optional[str]:
    """Ask the user for a value; an empty answer means none."""
    return click.prompt(
        f"{message} [{placeholder}]",
        default='',
        show_default=False,
        prompt_suffix=': ',
    )


def _choose_template(template: Optional[str]) -> str:
    if template:
        return template
    return click.prompt(
        'Choose a template',
        type=click.Choice([*template_names(), NO_TEMPLATE]),
        default=NO_TEMPLATE,
    )


@click.group(invoke_without_command=True)
@click.option('--global-config',
              type=click.Path(path_type=Path),
              envvar='TEXT_GRAB_GLOBAL_CONFIG',
              help='Path to the global config file (default: ~/.text-grab.config.json)')
@click.option('--verbose', '-v', is_flag=True,
              help='Enable verbose output')
@click.pass_context
def cli(ctx, global_config: Optional[Path], verbose: bool):
    """
    text-grab - copy project file contents for pasting into a chat prompt.

    Files are selected by filename patterns, search folders and exclude
    rules taken from text-grab.config.json, the global config and templates.
    """
    ctx.ensure_object(dict)

    ctx.obj['global_config'] = global_config
    ctx.obj['verbose'] = verbose
    _setup_logging(verbose)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command('copy')
@root_option
@click.option('--output', '-o',
              type=click.Path(path_type=Path),
              help='Write the result to a file instead of the clipboard')
@click.option('--stdout', 'to_stdout', is_flag=True,
              help='Print the result instead of copying it')
@click.pass_context
def copy_files_content(ctx, root: Path, output: Optional[Path], to_stdout: bool):
    """Copy the contents of all matching files to the clipboard."""
    verbose = ctx.obj.get('verbose', False)
    use_case = CopyFilesContentUseCase(JsonConfigLoader(ctx.obj.get('global_config')))

    try:
        result = use_case.execute(root, prompt=_prompt_for_input)
    except (WorkspaceError, NoInputError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    if result.is_empty:
        console.print("[yellow]No matching file content found.[/yellow]")
        return

    try:
        if to_stdout:
            click.echo(result.content, nl=False)
            return
        if output:
            output.write_text(result.content, encoding='utf-8')
            console.print(f"[green]✓[/green] File contents written to {escape(str(output))}")
        else:
            pyperclip.copy(result.content)
            console.print("[green]✓[/green] File contents copied to clipboard!")
    except (OSError, pyperclip.PyperclipException) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    if verbose:
        console.print(result.get_summary())


@cli.command('init')
@root_option
@template_option
def init_config(root: Path, template: Optional[str]):
    """Create text-grab.config.json in the project root."""
    if not root.is_dir():
        err_console.print(f"[red]Error:[/red] Project folder not found: {escape(str(root))}")
        sys.exit(1)

    template = _choose_template(template)
    try:
        path = initialize_project_config(root, template)
    except ConfigurationError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    console.print(f"[green]✓[/green] Created {escape(str(path))} (template: {template})")


@cli.command('set-template')
@root_option
@template_option
def set_template(root: Path, template: Optional[str]):
    """Switch the template used by the project config."""
    if not project_config_path(root).exists():
        err_console.print(
            "[red]Error:[/red] No text-grab.config.json found. Run 'text-grab init' first."
        )
        sys.exit(1)

    template = _choose_template(template)
    try:
        set_project_template(root, template)
    except ConfigurationError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    console.print(f"[green]✓[/green] Template set to '{template}'")


@cli.command('templates')
def list_templates():
    """List the built-in templates."""
    table = Table(title="Built-in Templates", show_header=True, header_style="bold magenta")

    table.add_column("Template", style="cyan", no_wrap=True)
    table.add_column("Extensions", style="green")
    table.add_column("Exclude", style="yellow")

    for name, template in TEMPLATES.items():
        table.add_row(name, ", ".join(template.extensions), ", ".join(template.exclude))

    console.print(table)


@cli.command('show-config')
@root_option
@click.pass_context
def show_config(ctx, root: Path):
    """Show the effective configuration after merging every layer."""
    loaded = JsonConfigLoader(ctx.obj.get('global_config')).load(root)

    click.echo(json.dumps(loaded.config.to_file_dict(), indent=2))


# Entry point for the CLI
def main():
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == '__main__':
    main()
