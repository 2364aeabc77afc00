"""Command-line interface for regionmetrics."""

import json
import logging
import sys
from pathlib import Path

import click
import yaml

from regionmetrics import __version__
from regionmetrics.orchestration import ExperimentOrchestrator
from regionmetrics.utils.config_validator import (
    DEFAULT_METRICS_CONFIG,
    DEFAULT_WORKLOAD_CONFIG,
    validate_and_fix_config,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@click.group()
@click.version_option(version=__version__, prog_name="regionmetrics")
def cli():
    """regionmetrics: periodic metrics aggregation for a storage node."""
    pass


@cli.command()
@click.argument("config_file", type=click.Path(exists=True))
@click.option(
    "--format", "-f", type=click.Choice(["yaml", "json"]), default="yaml",
    help="Configuration file format"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    help="Logging level"
)
def run(config_file: str, format: str, log_level: str):
    """Run a simulated region server and aggregate its metrics."""
    logging.getLogger().setLevel(getattr(logging, log_level))

    click.echo(f"Loading configuration from {config_file}...")

    try:
        if format == "yaml":
            orchestrator = ExperimentOrchestrator.from_yaml_file(config_file)
        else:
            orchestrator = ExperimentOrchestrator.from_json_file(config_file)

        click.echo("Starting experiment...")
        summary = orchestrator.run()

        click.echo("\nExperiment completed!")
        click.echo(f"Ticks pushed: {summary['ticks']}")
        click.echo(f"Requests: {summary['workload']['requests']}")
        click.echo(f"Flushes: {summary['workload']['flushes']}, compactions: {summary['workload']['compactions']}")
        click.echo(orchestrator.metrics.report())

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--output", "-o", default="example_config.yaml",
    help="Output file path"
)
@click.option(
    "--format", "-f", type=click.Choice(["yaml", "json"]), default="yaml",
    help="Configuration file format"
)
def generate_config(output: str, format: str):
    """Generate an example configuration file."""
    example_config = {
        "simulation": {
            "max_simulation_time": 120,
            "random_seed": 42,
            "realtime": False,
        },
        "metrics": {
            **DEFAULT_METRICS_CONFIG,
            "extended_period_s": 60,
            "output_summary_json_path": "experiments/results/summary.json",
            "output_records_csv_path": "experiments/results/records.csv",
        },
        "workload": {
            **DEFAULT_WORKLOAD_CONFIG,
            "total_duration": 100,
            "write_probability": 0.6,
            "group_sync_probability": 0.1,
            "atomic_increment_probability": 0.05,
            "regions": 8,
            "stores_per_region": 2,
            "files_per_compaction": 3,
        },
    }

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        if format == "yaml":
            yaml.dump(example_config, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(example_config, f, indent=2)

    click.echo(f"Generated example configuration at {output_path}")


@cli.command()
@click.argument("config_file", type=click.Path(exists=True))
def validate(config_file: str):
    """Validate a configuration file without running the experiment."""
    click.echo(f"Validating configuration: {config_file}")

    try:
        is_valid, errors, _ = validate_and_fix_config(config_file)

        if is_valid:
            click.echo(click.style("✓ Configuration is valid", fg="green"))
        else:
            click.echo(click.style(f"✗ Configuration has {len(errors)} errors:", fg="red"))
            for i, error in enumerate(errors[:20], 1):
                click.echo(f"  {i}. {error}")
            if len(errors) > 20:
                click.echo(f"  ... and {len(errors) - 20} more errors")

        sys.exit(0 if is_valid else 1)

    except Exception as e:
        click.echo(click.style(f"Error validating configuration: {e}", fg="red"))
        sys.exit(1)


if __name__ == "__main__":
    cli()
