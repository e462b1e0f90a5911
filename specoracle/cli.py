#!/usr/bin/env python3
"""
spec-oracle CLI Tool

Classifies a single call of a Python callable against the specifications
written on its declaration and the declarations it overrides.

Usage:
    spec-oracle --help
    spec-oracle classify --spec stack_push.yaml --target mylib.stack:Stack.push --args '[[], 3]'
    spec-oracle table --spec base.yaml --spec override.yaml --args '[5]'
"""

import click
import importlib
import json
import sys
import traceback
from typing import Any, Callable, Dict, List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.table import Table

from .classifier import CallClassifier, bind_arguments
from .oracle.outcome import BehaviorType
from .specification.operation_conditions import OperationConditions
from .utils.config import Config, load_config
from .utils.logging import setup_logger


console = Console()

EXIT_CODES = {
    BehaviorType.EXPECTED: 0,
    BehaviorType.ERROR: 1,
    BehaviorType.INVALID: 4,
}

BEHAVIOR_COLORS = {
    BehaviorType.EXPECTED: "green",
    BehaviorType.ERROR: "red",
    BehaviorType.INVALID: "yellow",
}


def print_error(message: str):
    """Print error message."""
    console.print(f"[red]ERROR:[/red] {message}")


def resolve_target(target: str) -> Callable[..., Any]:
    """Resolve ``module:attr.path`` to a callable."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not attr_path:
        raise click.BadParameter(f"Expected module:callable, got {target}", param_hint="--target")

    obj = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        obj = getattr(obj, attr)
    if not callable(obj):
        raise click.BadParameter(f"{target} is not callable", param_hint="--target")
    return obj


def parse_arguments(args_json: str, kwargs_json: Optional[str]) -> Tuple[List[Any], Dict[str, Any]]:
    """Parse positional and keyword arguments from JSON."""
    args = json.loads(args_json)
    if not isinstance(args, list):
        raise click.BadParameter("must be a JSON array", param_hint="--args")
    kwargs = json.loads(kwargs_json) if kwargs_json else {}
    if not isinstance(kwargs, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--kwargs")
    return args, kwargs


def parse_bindings(bindings_json: Optional[str], args: List[Any], kwargs: Dict[str, Any],
                   func: Optional[Callable[..., Any]] = None) -> Dict[str, Any]:
    """Pre-state bindings: explicit JSON object, else derived from the arguments."""
    if bindings_json:
        bindings = json.loads(bindings_json)
        if not isinstance(bindings, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--bindings")
        return bindings
    if func is not None:
        return bind_arguments(func, args, kwargs)
    bindings = {f"arg{i}": value for i, value in enumerate(args)}
    bindings.update(kwargs)
    return bindings


# ============================================================================
# Main CLI Group
# ============================================================================
@click.group()
@click.version_option(version="0.1.0", prog_name="spec-oracle")
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), default=None,
              help='Path to YAML configuration file')
@click.pass_context
def cli(ctx, verbose: bool, config_path: Optional[str]):
    """
    spec-oracle: Specification-based test oracle for generated calls

    \b
    Quick Start:
      spec-oracle classify --spec f.yaml --target pkg.mod:f --args '[1]'
      spec-oracle table --spec f.yaml --args '[1]'
    """
    config = load_config(config_path) if config_path else Config()
    if verbose:
        config.log_level = "DEBUG"
    setup_logger(level=config.log_level, log_file=config.log_file)

    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['config'] = config


# ============================================================================
# Classify Command
# ============================================================================
@cli.command()
@click.option('--spec', '-s', 'spec_paths', type=click.Path(exists=True), multiple=True,
              help='Specification file (JSON or YAML); repeat for overridden declarations')
@click.option('--target', '-t', required=True, help='Callable under test, as module:callable')
@click.option('--args', '-a', 'args_json', default='[]', help='Positional arguments as a JSON array')
@click.option('--kwargs', '-k', 'kwargs_json', default=None, help='Keyword arguments as a JSON object')
@click.option('--bindings', '-b', 'bindings_json', default=None,
              help='Pre-state bindings as a JSON object (default: bound from the signature)')
@click.option('--json-output', is_flag=True, help='Print the report as JSON')
@click.pass_context
def classify(ctx, spec_paths: Tuple[str, ...], target: str, args_json: str,
             kwargs_json: Optional[str], bindings_json: Optional[str], json_output: bool):
    """
    Execute one call and classify its outcome.

    \b
    Exit status: 0 expected, 1 error, 3 setup failure, 4 invalid
    (2 is left to click for usage errors).
    """
    verbose = ctx.obj['verbose']
    config: Config = ctx.obj['config']

    try:
        func = resolve_target(target)
        args, kwargs = parse_arguments(args_json, kwargs_json)
        bindings = parse_bindings(bindings_json, args, kwargs, func)

        conditions = OperationConditions.from_files(list(spec_paths), config.evaluator())
        classifier = CallClassifier(conditions, config)
        report = classifier.classify(func, args, kwargs, bindings=bindings)
    except click.BadParameter:
        raise
    except Exception as e:
        print_error(f"Classification failed: {e}")
        if verbose:
            traceback.print_exc()
        sys.exit(3)

    if json_output:
        click.echo(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        behavior = report.classification.behavior
        color = BEHAVIOR_COLORS[behavior]
        panel_content = (
            f"[bold]Operation:[/bold] {escape(report.operation)}\n"
            f"[bold]Verdict:[/bold] [{color}]{behavior.value}[/{color}]\n"
            f"[bold]Reason:[/bold] {escape(report.classification.reason)}\n"
            f"[bold]Checker:[/bold] {report.classification.checker}\n"
            f"[bold]Outcome:[/bold] {escape(str(report.outcome)) if report.outcome else 'not executed'}"
        )
        console.print(Panel(panel_content, title="Classification"))

    sys.exit(EXIT_CODES[report.classification.behavior])


# ============================================================================
# Table Command
# ============================================================================
@cli.command()
@click.option('--spec', '-s', 'spec_paths', type=click.Path(exists=True), multiple=True,
              help='Specification file (JSON or YAML); repeat for overridden declarations')
@click.option('--target', '-t', default=None, help='Callable whose signature names the arguments')
@click.option('--args', '-a', 'args_json', default='[]', help='Positional arguments as a JSON array')
@click.option('--kwargs', '-k', 'kwargs_json', default=None, help='Keyword arguments as a JSON object')
@click.option('--bindings', '-b', 'bindings_json', default=None, help='Pre-state bindings as a JSON object')
@click.pass_context
def table(ctx, spec_paths: Tuple[str, ...], target: Optional[str], args_json: str,
          kwargs_json: Optional[str], bindings_json: Optional[str]):
    """
    Show the expected outcome table for a pre-state without executing anything.
    """
    verbose = ctx.obj['verbose']
    config: Config = ctx.obj['config']

    try:
        func = resolve_target(target) if target else None
        args, kwargs = parse_arguments(args_json, kwargs_json)
        bindings = parse_bindings(bindings_json, args, kwargs, func)

        conditions = OperationConditions.from_files(list(spec_paths), config.evaluator())
        outcome_table = conditions.check_prestate(bindings)
        invalid = outcome_table.is_invalid_prestate()
        summary = outcome_table.to_dict()
    except click.BadParameter:
        raise
    except Exception as e:
        print_error(f"Table construction failed: {e}")
        if verbose:
            traceback.print_exc()
        sys.exit(3)

    rich_table = Table(title="Expected Outcome Table")
    rich_table.add_column("Property", style="cyan")
    rich_table.add_column("Value")
    rich_table.add_row("Specifications", str(len(conditions)))
    rich_table.add_row("Empty", str(summary["is_empty"]))
    rich_table.add_row("Precondition satisfied", str(summary["has_satisfied_precondition"]))
    rich_table.add_row("Postconditions", "\n".join(summary["postconditions"]) or "-")
    rich_table.add_row(
        "Sanctioned exceptions",
        "\n".join(", ".join(s) for s in summary["exception_sets"]) or "-",
    )
    rich_table.add_row("Invalid pre-state", "[yellow]yes[/yellow]" if invalid else "no")
    console.print(rich_table)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
