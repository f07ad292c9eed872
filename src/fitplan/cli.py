"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from fitplan.config import Settings, default_config_path, get_settings
from fitplan.profiles.models import InvalidProfileError

app = typer.Typer(
    help="Metabolic targets and safety checks for fitness goals",
    no_args_is_help=True,
)
console = Console()

config_app = typer.Typer(help="Show or create the settings file")
app.add_typer(config_app, name="config")


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


def resolve_settings(config_path: Optional[Path], command: str, json_output: bool) -> Settings:
    """Load settings from --config, or the default file when not given."""
    if config_path is not None and not config_path.exists():
        fail(command, f"Config file not found: {config_path}", json_output)
    try:
        if config_path is None:
            return get_settings()
        return Settings.load(config_path)
    except ValueError as e:
        fail(command, f"Invalid config: {e}", json_output)


def fail(command: str, message: str, json_output: bool, suggestions=None) -> None:
    """Report an input error and exit with status 1."""
    from fitplan.agent.response import error_response

    if json_output:
        output_json(error_response(command, message, suggestions).to_dict())
    else:
        console.print(f"[red]{message}[/red]")
        for suggestion in suggestions or []:
            console.print(f"  [dim]{suggestion}[/dim]")
    raise typer.Exit(1)


def read_profile(profile_file: Path, command: str, json_output: bool):
    from fitplan.profiles.loader import load_profile

    if not profile_file.exists():
        fail(command, f"Profile file not found: {profile_file}", json_output)
    try:
        return load_profile(profile_file)
    except InvalidProfileError as e:
        fail(
            command,
            f"Invalid profile: {e}",
            json_output,
            ["Check field names and values against the example profile"],
        )


# ============================================================================
# Main Commands
# ============================================================================


@app.command()
def evaluate(
    profile_file: Path = typer.Argument(..., help="Path to a YAML or JSON profile"),
    json_output: bool = typer.Option(
        False, "--json", help="Output as JSON with agent-friendly envelope"
    ),
    markdown: bool = typer.Option(False, "--markdown", help="Output as Markdown"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Settings file (default ~/.fitplan/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Evaluate a profile: targets, safety verdict and alternatives.

    A blocked plan is reported, not treated as a failure (exit code 0).
    """
    from fitplan.agent.response import evaluation_response
    from fitplan.engine import evaluate as run_evaluation
    from fitplan.export.formatters import MarkdownFormatter, TableFormatter

    configure_logging(verbose)
    settings = resolve_settings(config_path, "evaluate", json_output)
    profile = read_profile(profile_file, "evaluate", json_output)

    result = run_evaluation(profile, settings)

    output_format = settings.defaults.output_format
    if json_output:
        output_format = "json"
    elif markdown:
        output_format = "markdown"

    if output_format == "json":
        output_json(evaluation_response("evaluate", result, profile_file.stem).to_dict())
    elif output_format == "markdown":
        print(MarkdownFormatter().format(result, profile_file.stem))
    else:
        TableFormatter(console).format(result, profile_file.stem)


@app.command()
def metrics(
    profile_file: Path = typer.Argument(..., help="Path to a YAML or JSON profile"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show calculated body metrics without validating the goal."""
    from fitplan.agent.response import create_response
    from fitplan.export.formatters import TableFormatter, metrics_to_dict
    from fitplan.profiles.body_calc import compute_raw_metrics

    profile = read_profile(profile_file, "metrics", json_output)
    raw = compute_raw_metrics(profile)

    if json_output:
        output_json(
            create_response(
                "metrics",
                data=metrics_to_dict(raw),
                human_summary=f"BMR {raw.bmr:.0f} kcal, base TDEE {raw.base_tdee:.0f} kcal",
            ).to_dict()
        )
        return

    TableFormatter(console).format_metrics(raw)


@app.command()
def rules(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List every rule code and whether it blocks."""
    from fitplan.agent.response import create_response
    from fitplan.validation.models import RuleCode, Severity

    if json_output:
        output_json(
            create_response(
                "rules",
                data={"rules": [{"code": c.value, "severity": c.severity.value} for c in RuleCode]},
                human_summary=f"{len(RuleCode)} rule codes",
            ).to_dict()
        )
        return

    table = Table(title="Validation Rules")
    table.add_column("Code", style="cyan")
    table.add_column("Severity")
    for code in RuleCode:
        color = "red" if code.severity == Severity.ERROR else "yellow"
        table.add_row(code.value, f"[{color}]{code.severity.value}[/{color}]")
    console.print(table)


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Settings file (default ~/.fitplan/config.yaml)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Print the effective settings."""
    import yaml

    from fitplan.agent.response import create_response

    settings = resolve_settings(config_path, "config show", json_output)

    if json_output:
        output_json(create_response("config show", data=settings.to_dict()).to_dict())
        return

    console.print(yaml.dump(settings.to_dict(), default_flow_style=False, sort_keys=False))


@config_app.command("init")
def config_init(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Where to write (default ~/.fitplan/config.yaml)"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """Write a settings file with default values."""
    path = config_path or default_config_path()
    if path.exists() and not force:
        console.print(f"[yellow]Config already exists: {path}[/yellow]")
        console.print("Use [cyan]--force[/cyan] to overwrite.")
        raise typer.Exit(1)

    Settings().save(path)
    console.print(f"[green]Wrote default settings to {path}[/green]")


if __name__ == "__main__":
    app()
