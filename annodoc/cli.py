#!/usr/bin/env python3
"""
Command-line interface for annodoc.
"""

import sys

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .collector import collect_strings
from .config import Config
from .exceptions import AnnodocError
from .file_io import read_lines
from .generator import DocGenerator
from .parser import lines_to_blocks
from .utils import logger

console = Console()


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True, dir_okay=False), help='Config file path')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Quiet output')
@click.pass_context
def cli(ctx, config, verbose, quiet):
    """annodoc - generate help files from annotation comments"""
    ctx.ensure_object(dict)
    try:
        ctx.obj['config'] = Config(config)
    except AnnodocError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        sys.exit(1)

    if verbose:
        logger.setLevel('DEBUG')
    elif quiet:
        logger.setLevel('ERROR')


@cli.command()
@click.argument('inputs', nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Help file path')
@click.pass_context
def generate(ctx, inputs, output):
    """Generate help file from INPUTS.

    Without arguments the project script is tried first, then source
    files are discovered in the current directory.
    """
    generator = DocGenerator(config=ctx.obj['config'])

    try:
        doc = generator.generate(list(inputs) or None, output)
    except AnnodocError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        sys.exit(1)

    if doc is None:
        console.print("[yellow]⚠[/yellow] Project script did not generate any help file.")
        return

    n_lines = len(collect_strings(doc))
    console.print(
        f"[green]✓[/green] Generated {doc.info['output']} "
        f"from {len(doc.info['input'])} files ({n_lines} lines)"
    )


@cli.command()
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def blocks(ctx, source):
    """Show how SOURCE is split into blocks and sections."""
    config = ctx.obj['config'].config

    try:
        lines = read_lines(source)
    except AnnodocError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        sys.exit(1)

    block_arr = lines_to_blocks(lines, config.annotation_pattern, config.default_section_id)

    table = Table(title=f"{source}: {len(block_arr)} blocks")
    table.add_column("Block", justify="right")
    table.add_column("Lines")
    table.add_column("Section")
    table.add_column("First line")

    for i, block in enumerate(block_arr, start=1):
        for section in block.children:
            first_line = section[0] if len(section) > 0 else ""
            table.add_row(
                str(i),
                f"{section.info.get('line_begin')}-{section.info.get('line_end')}",
                escape(section.info.get('id') or ''),
                escape(first_line),
            )
        table.add_row(
            str(i),
            f"{block.info['line_begin']}-{block.info['line_end']}",
            "[dim]afterlines[/dim]",
            f"[dim]{len(block.info['afterlines'])} lines[/dim]",
        )

    console.print(table)


@cli.command('config')
@click.pass_context
def show_config(ctx):
    """Show effective configuration."""
    data = ctx.obj['config'].to_plain_dict()
    click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
