"""Main CLI application."""

from pathlib import Path
from typing import Optional
import json
import logging
import sys

import structlog
import typer
from rich.console import Console
from rich.table import Table

from .. import app_api
from ..config.model import MealEvent
from ..contracts.errors import GMPError

app = typer.Typer(
    name="gmp",
    help="Glucose Metabolism Platform - compartmental postprandial glucose simulator",
    no_args_is_help=True
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


@app.command()
def run(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    meal: Optional[str] = typer.Option(
        None, "--meal", help="Catalog meal ingested at t=0 (replaces configured meals)"
    ),
    carbs: Optional[float] = typer.Option(
        None, "--carbs", help="Carbohydrate grams ingested at t=0 (replaces configured meals)"
    ),
    duration: Optional[float] = typer.Option(
        None, "--duration", help="Simulated minutes"
    ),
    dt: Optional[float] = typer.Option(
        None, "--dt", help="Euler step size in minutes"
    ),
    overrides: Optional[str] = typer.Option(
        None, "--set", help="Parameter overrides as JSON string"
    ),
    run_id: Optional[str] = typer.Option(
        None, "--run-id", help="Custom run identifier"
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output directory for the time series CSV"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Validate configuration without running"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging"
    ),
):
    """Run a meal scenario from the fasting baseline."""

    _configure_logging(verbose)

    try:
        if config:
            cfg = app_api.load_config_from_file(config)
            console.print(f"✓ Loaded configuration from {config}")
        else:
            cfg = app_api.get_default_config()
            console.print("✓ Using default configuration")

        run_updates = {}
        if duration is not None:
            run_updates["duration_min"] = duration
        if dt is not None:
            run_updates["dt_min"] = dt
        if run_updates:
            cfg.run = cfg.run.model_validate({**cfg.run.model_dump(), **run_updates})
            console.print(f"✓ Run overrides: {run_updates}")

        if meal is not None or carbs is not None:
            inline = {"carbs": carbs} if carbs is not None else {}
            cfg.meals = [MealEvent(ref=meal, overrides=inline, time_min=0.0)]
            console.print(f"✓ Meal override: {meal or 'inline'} {inline or ''}")

        param_overrides = None
        if overrides:
            try:
                param_overrides = json.loads(overrides)
            except json.JSONDecodeError as e:
                console.print(f"❌ Invalid JSON in --set: {e}", style="red")
                raise typer.Exit(1)
            console.print(f"✓ Parameter overrides: {param_overrides}")

        app_api.validate_configuration(cfg)
        console.print("✓ Configuration validated")

        if dry_run:
            _, meals = app_api.resolve_scenario(cfg, param_overrides)
            console.print(f"✓ Resolved parameters and {len(meals)} meal(s)")
            console.print("✓ Dry run completed successfully", style="green")
            return

        with console.status("Running simulation..."):
            result = app_api.run_single_simulation(
                cfg,
                parameter_overrides=param_overrides,
                run_id=run_id,
                artifact_directory=output_dir,
            )

        console.print(f"✅ Simulation completed: {result.run_id}", style="green")
        console.print(f"Runtime: {result.runtime_seconds:.2f}s")

        metrics = app_api.calculate_summary_metrics(result)
        if metrics:
            table = Table(title="Summary Metrics")
            table.add_column("Metric")
            table.add_column("Value")

            for metric, value in metrics.items():
                table.add_row(metric, f"{value:.4g}")

            console.print(table)

        if result.mass_balance is not None:
            status = "balanced" if result.mass_balance.is_balanced else "NOT balanced"
            console.print(
                f"Mass balance: {status} "
                f"(floor correction {result.mass_balance.total_floor_correction:.3g} mmol)"
            )

        if "time_series_path" in result.metadata:
            console.print(f"✓ Time series saved to {result.metadata['time_series_path']}")

    except typer.Exit:
        raise
    except GMPError as e:
        console.print(f"❌ {e.message}", style="red")
        if e.details:
            console.print(f"Details: {e.details}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"❌ Unexpected error: {e}", style="red")
        raise typer.Exit(1)


@app.command()
def validate(
    config: Path = typer.Argument(..., help="Configuration file to validate")
):
    """Validate a configuration file."""

    try:
        app_api.load_config_from_file(config)
        console.print(f"✅ Configuration {config} is valid", style="green")

    except GMPError as e:
        console.print(f"❌ {e.message}", style="red")
        raise typer.Exit(1)


@app.command("list-catalog")
def list_catalog(
    category: str = typer.Argument(..., help="Catalog category (parameters, meals)")
):
    """List available catalog entries."""

    try:
        entries = app_api.list_catalog_entries(category)

        table = Table(title=f"Catalog: {category.upper()}")
        table.add_column("Name")
        table.add_column("Description")

        for entry in entries:
            data = app_api.get_catalog_entry(category, entry)
            table.add_row(entry, data.get("description") or "")

        console.print(table)

    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1)


@app.command("show-parameters")
def show_parameters(
    name: str = typer.Argument("reference_90kg", help="Parameter set name")
):
    """Show the values of a catalog parameter set."""

    try:
        values = app_api.get_catalog_entry("parameters", name)
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1)

    table = Table(title=f"Parameters: {name}")
    table.add_column("Parameter")
    table.add_column("Value")
    for key, value in values.items():
        table.add_row(key, f"{value:g}")

    console.print(table)


@app.command()
def info():
    """Display package information and diagnostics."""

    from .. import __version__

    console.print(f"GMP Package v{__version__}")
    console.print()

    for category in ["parameters", "meals"]:
        entries = app_api.list_catalog_entries(category)
        console.print(f"Catalog {category}: {len(entries)} entries")


if __name__ == "__main__":
    app()
