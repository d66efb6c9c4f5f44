"""
Command-line interface for scaneo.

Reads Go files, extracts struct declarations and writes the generated scan
functions.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import ConfigError, ScaneoConfig, load_config, save_config, split_names
from .generator import ScanGenerator
from .logging_config import get_logger, setup_logging
from .naming import package_name_from_dir
from .parser import ParseError, extract_files
from .templates import TemplateError
from .utils import filenames

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Status output goes to stderr so generated code can be piped from stdout.
console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="scaneo",
        description="Generate Go database/sql scan functions from struct declarations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  scaneo models.go
  scaneo -o scans.go -p models -w User,Post ./models
  scaneo -u -t scans_test -o fixtures_test.go models.go
  scaneo --list-templates
        """.strip(),
    )

    parser.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="Go files or directories to scan (default: current directory)",
    )

    gen_group = parser.add_argument_group("generation")
    gen_group.add_argument(
        "--output", "-o", metavar="FILE", help="Output file (default: scans.go)"
    )
    gen_group.add_argument(
        "--package",
        "-p",
        dest="package_name",
        metavar="NAME",
        help="Package name of the generated file (default: current directory name)",
    )
    gen_group.add_argument(
        "--unexport",
        "-u",
        action="store_true",
        default=None,
        help="Generate unexported scan functions (scanX instead of ScanX)",
    )
    gen_group.add_argument(
        "--whitelist",
        "-w",
        metavar="NAMES",
        help="Comma separated struct names to generate for (default: all)",
    )
    gen_group.add_argument(
        "--template",
        "-t",
        metavar="NAME",
        help="Template to render (default: scans)",
    )
    gen_group.add_argument(
        "--template-dir", metavar="DIR", help="Directory with custom templates"
    )
    gen_group.add_argument(
        "--no-validate",
        action="store_true",
        help="Don't re-parse the generated code before writing it",
    )
    gen_group.add_argument(
        "--stdout", action="store_true", help="Write generated code to stdout"
    )

    cfg_group = parser.add_argument_group("configuration")
    cfg_group.add_argument("--config", metavar="FILE", help="JSON configuration file")
    cfg_group.add_argument(
        "--write-config",
        metavar="FILE",
        help="Write the effective configuration as JSON and exit",
    )

    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-templates",
        action="store_true",
        help="List available templates and exit",
    )
    info_group.add_argument(
        "--verbose", "-v", action="store_true", help="Debug logging and run summary"
    )
    info_group.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    return parser


def _build_config(args: argparse.Namespace) -> ScaneoConfig:
    """Build configuration from CLI arguments."""
    overrides: Dict[str, Any] = {
        "output_file": args.output,
        "package_name": args.package_name,
        "unexport": args.unexport,
        "template": args.template,
        "template_dir": args.template_dir,
    }
    if args.whitelist is not None:
        overrides["whitelist"] = split_names(args.whitelist)
    if args.no_validate:
        overrides["validate_output"] = False

    try:
        return load_config(custom_config=overrides, config_file=args.config)
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}") from e


def _list_templates(generator: ScanGenerator) -> int:
    """List registered templates."""
    engine = generator.template_engine

    table = Table(title="📋 Templates", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Name", style="bold green", no_wrap=True)
    table.add_column("Resolves to", style="cyan")

    for name in engine.logical_names():
        table.add_row(name, engine.resolve_name(name))

    console.print(table)
    console.print(
        Panel(
            f"[bold]Directory:[/bold] {engine.template_dir}\n"
            "[bold]Usage:[/bold] scaneo [cyan]-t NAME[/cyan] [dim]files...[/dim]",
            title="💡 Templates",
            border_style="blue",
        )
    )
    return 0


def _write_output(code: str, output_file: str) -> Path:
    """Write generated code, removing the file again if the write fails."""
    output_path = Path(output_file)
    try:
        output_path.write_text(code, encoding="utf-8")
    except OSError as e:
        if output_path.exists():
            output_path.unlink()
        raise CLIError(f"Failed to write to {output_path}: {e}") from e
    return output_path


def _show_summary(files: List[Path], tokens: list, config: ScaneoConfig):
    table = Table(
        title="📊 Generation Summary",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Property", style="bold")
    table.add_column("Value", style="green")

    table.add_row("Files", str(len(files)))
    table.add_row("Structs", ", ".join(t.name for t in tokens) or "-")
    table.add_row("Fields", str(sum(len(t.fields) for t in tokens)))
    table.add_row("Template", config.template)
    table.add_row("Unexport", str(config.unexport))

    console.print(table)


def run(args: argparse.Namespace) -> int:
    """Execute one scaneo run for parsed arguments."""
    config = _build_config(args)
    generator = ScanGenerator(config)

    if args.list_templates:
        return _list_templates(generator)

    if args.write_config:
        save_config(config, args.write_config)
        console.print(f"[green]✓[/green] Configuration written to [cyan]{args.write_config}[/cyan]")
        return 0

    package_name = config.package_name or package_name_from_dir(Path.cwd().name)
    files = filenames(args.paths)
    if not files:
        raise CLIError("No Go files found")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        parse_task = progress.add_task("[cyan]Parsing Go files...", total=None)
        tokens = extract_files(files, config.whitelist)
        progress.remove_task(parse_task)

        gen_task = progress.add_task(
            f"[green]Rendering {config.template}...", total=None
        )
        code = generator.render(package_name, config.unexport, tokens)
        progress.remove_task(gen_task)

    if not tokens:
        logger.warning("No structs found; output has no scan functions")

    if args.stdout:
        sys.stdout.write(code)
    else:
        output_path = _write_output(code, config.output_file)
        console.print(
            f"[green]✓[/green] {len(tokens)} struct(s) written to [cyan]{output_path}[/cyan]"
        )

    if args.verbose:
        _show_summary(files, tokens, config)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, console)

    try:
        return run(args)
    except ParseError as e:
        console.print(f"[red]✗ Parse error:[/red] {escape(str(e))}")
    except TemplateError as e:
        console.print(f"[red]✗ Template error:[/red] {escape(str(e))}")
    except (CLIError, ConfigError) as e:
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
    except OSError as e:
        console.print(f"[red]✗ I/O error:[/red] {escape(str(e))}")
    return 1
