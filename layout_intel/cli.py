"""
Layout Intelligence - Command Line Interface

Runs the analysis operations over JSON files written by an extraction
script (document facts and layout metric snapshots).

Commands:
    analyze   Document state, spatial summary and issues
    check     Mandatory pre-operation state check
    classify  Document type label
    ready     Readiness verdict for an operation
    compare   Score a layout snapshot against a reference
    metrics   Summarise a layout snapshot

Exit codes: 0 on success, 1 when a check fails (blocked operation,
mismatched layout, unreadable input).
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .comparison.engine import CheckType
from .config import load_config
from .document.classifier import ClassifierInput
from .errors import LayoutIntelError
from .extraction.source import CURRENT_PAGE, JsonFileSource
from .intelligence import DocumentIntelligence
from .review.report import (
    format_comparison,
    format_document_state,
    format_layout_metrics,
    format_readiness,
)


class InterceptHandler(logging.Handler):
    """Route standard library log records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None):
    """Configure loguru logging."""
    # Remove default handler
    logger.remove()

    log_level = "DEBUG" if verbose else "WARNING"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=log_level,
        colorize=True
    )

    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="10 MB"
        )

    # Library modules log through the standard library
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.DEBUG, force=True)


def _fail(console: Console, message: str) -> None:
    console.print(f"[bold red]Error: {escape(message)}[/]")
    raise SystemExit(1)


def _build(ctx: click.Context, facts_path: Optional[Path] = None,
           metrics_path: Optional[Path] = None) -> DocumentIntelligence:
    source = JsonFileSource(facts_path, metrics_path)
    return DocumentIntelligence(source, config=ctx.obj['config'])


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group()
@click.option(
    '--config', '-c',
    'config_path',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='YAML configuration file'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable verbose logging'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Write logs to file'
)
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], verbose: bool, log_file: Optional[Path]):
    """
    Layout Intelligence - reason about page layouts extracted from a
    document.

    Examples:

        # Inspect document health
        layout-intel analyze facts.json

        # Can text be added right now?
        layout-intel ready add_text facts.json

        # Compare the current page with a reference layout
        layout-intel compare reference.json current.json --check frames --check margins
    """
    setup_logging(verbose=verbose, log_file=log_file)

    console = Console()
    try:
        config = load_config(config_path)
    except LayoutIntelError as e:
        _fail(console, str(e))

    ctx.obj = {'console': console, 'config': config, 'verbose': verbose}


@main.command()
@click.argument('facts_path', type=click.Path(exists=True, path_type=Path))
@click.option('--json', 'as_json', is_flag=True, help='Print the full state as JSON')
@click.pass_context
def analyze(ctx: click.Context, facts_path: Path, as_json: bool):
    """Analyse document state and list issues."""
    console: Console = ctx.obj['console']
    intel = _build(ctx, facts_path=facts_path)

    try:
        state = intel.analyze_document_state()
    except LayoutIntelError as e:
        _fail(console, str(e))

    if as_json:
        _echo_json(state.to_dict())
        return

    console.print(format_document_state(state), markup=False, highlight=False)

    if state.spatial_analysis.frame_distribution:
        table = Table(title="Frame Distribution")
        table.add_column("Page", justify="right")
        table.add_column("Frames", justify="right")
        table.add_column("Characters", justify="right")
        table.add_column("Overflow", style="bold")
        for dist in state.spatial_analysis.frame_distribution:
            table.add_row(
                str(dist.page_number),
                str(dist.frame_count),
                str(dist.text_density),
                "[red]yes" if dist.has_overflow else "[green]no",
            )
        console.print()
        console.print(table)


@main.command()
@click.argument('facts_path', type=click.Path(exists=True, path_type=Path))
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
@click.pass_context
def check(ctx: click.Context, facts_path: Path, as_json: bool):
    """Run the mandatory state check; exit 1 when work should not proceed."""
    console: Console = ctx.obj['console']
    intel = _build(ctx, facts_path=facts_path)

    try:
        result = intel.perform_mandatory_state_check()
    except LayoutIntelError as e:
        _fail(console, str(e))

    if as_json:
        _echo_json(result.to_dict())
    else:
        status = "[green]✓ Can proceed" if result.can_proceed else "[red]✗ Blocked"
        console.print(status)
        for issue in result.critical_issues:
            console.print(f"  {issue}", markup=False, highlight=False)
        console.print(f"Next: {result.next_recommended_action}", markup=False, highlight=False)

    if not result.can_proceed:
        raise SystemExit(1)


@main.command()
@click.argument('facts_path', type=click.Path(exists=True, path_type=Path))
@click.pass_context
def classify(ctx: click.Context, facts_path: Path):
    """Print the document type."""
    console: Console = ctx.obj['console']
    intel = _build(ctx, facts_path=facts_path)

    try:
        state = intel.analyze_document_state()
    except LayoutIntelError as e:
        _fail(console, str(e))

    click.echo(intel.classify_document_type(ClassifierInput.from_state(state)).value)


@main.command()
@click.argument('operation')
@click.argument('facts_path', type=click.Path(exists=True, path_type=Path))
@click.option('--json', 'as_json', is_flag=True, help='Print the verdict as JSON')
@click.pass_context
def ready(ctx: click.Context, operation: str, facts_path: Path, as_json: bool):
    """Check whether OPERATION can run; exit 1 when blocked."""
    console: Console = ctx.obj['console']
    intel = _build(ctx, facts_path=facts_path)

    try:
        state = intel.analyze_document_state()
    except LayoutIntelError as e:
        _fail(console, str(e))

    result = intel.validate_operation_readiness(operation, state)
    if as_json:
        _echo_json(result.to_dict())
    else:
        console.print(format_readiness(result), markup=False, highlight=False)

    if not result.ready:
        raise SystemExit(1)


@main.command()
@click.argument('reference_path', type=click.Path(exists=True, path_type=Path))
@click.argument('current_path', type=click.Path(exists=True, path_type=Path))
@click.option('--tolerance', '-t', type=float, default=None,
              help='Allowed deviation fraction (default from config, 0.05)')
@click.option('--check', 'checks', multiple=True,
              type=click.Choice([c.value for c in CheckType], case_sensitive=False),
              help='Category to compare; repeat for several')
@click.option('--page', type=int, default=CURRENT_PAGE, help='Page to compare (-1 = current)')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
@click.pass_context
def compare(ctx: click.Context, reference_path: Path, current_path: Path,
            tolerance: Optional[float], checks: Tuple[str, ...], page: int, as_json: bool):
    """Compare CURRENT against REFERENCE; exit 1 on mismatch."""
    console: Console = ctx.obj['console']
    intel = _build(ctx, metrics_path=current_path)

    try:
        with open(reference_path, 'r', encoding='utf-8') as f:
            reference = json.load(f)
        result = intel.compare_to_reference(
            reference,
            tolerance=tolerance,
            check_types=checks or None,
            page_selector=page,
        )
    except (OSError, json.JSONDecodeError, ValueError, LayoutIntelError) as e:
        _fail(console, str(e))

    if as_json:
        _echo_json(result.to_dict())
    else:
        color = "green" if result.match else "red"
        console.print(f"[bold {color}]{'PASS' if result.match else 'FAIL'}[/] (score {result.score})")
        console.print(format_comparison(result), markup=False, highlight=False)

    if not result.match:
        raise SystemExit(1)


@main.command()
@click.argument('metrics_path', type=click.Path(exists=True, path_type=Path))
@click.option('--page', type=int, default=CURRENT_PAGE, help='Page to show (-1 = current)')
@click.option('--json', 'as_json', is_flag=True, help='Print the snapshot as JSON')
@click.pass_context
def metrics(ctx: click.Context, metrics_path: Path, page: int, as_json: bool):
    """Summarise a layout metrics snapshot."""
    console: Console = ctx.obj['console']
    intel = _build(ctx, metrics_path=metrics_path)

    try:
        snapshot = intel.extract_layout_metrics(page)
    except LayoutIntelError as e:
        _fail(console, str(e))

    if as_json:
        _echo_json(snapshot.to_dict())
    else:
        console.print(format_layout_metrics(snapshot, page), markup=False, highlight=False)


if __name__ == "__main__":
    main()
