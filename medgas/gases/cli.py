"""Medical gas CLI sub-commands."""

from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml

app = typer.Typer(no_args_is_help=True)


def _fail(message: str):
    typer.echo(f"ERROR: {message}")
    raise typer.Exit(1)


def _output_format(fmt: Optional[str]):
    from medgas.core.config import get_config_value
    from medgas.core.output import OutputFormat

    value = fmt or get_config_value("output", "format", default="human")
    try:
        return OutputFormat(str(value).lower())
    except ValueError:
        _fail(f"Unknown output format: {value}. Available: human, json, markdown")


def _load_catalog(catalog: Optional[str], config: Optional[str]):
    from medgas.gases.registry import default_catalog, load_catalog, load_configuration

    rooms = load_catalog(Path(catalog)) if catalog else default_catalog()
    if config:
        rooms = load_configuration(Path(config)).apply(rooms)
    return rooms


def _load_selection(path: str) -> Dict[str, Any]:
    from medgas.core.config import load_yaml_file

    data = load_yaml_file(Path(path)) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Selection file {path} must contain a mapping of rooms")
    return data.get("selection", data)


@app.command()
def rooms(
    gas: Optional[str] = typer.Option(None, "--gas", "-g", help="Only rooms where this gas is applicable"),
    catalog: Optional[str] = typer.Option(None, "--catalog", help="Room catalog file (YAML/JSON)"),
    config: Optional[str] = typer.Option(None, "--config", help="Settings overrides file (YAML/JSON)"),
):
    """List room types and the gases applicable in each."""
    from medgas.gases.base import GAS_TYPES

    try:
        room_catalog = _load_catalog(catalog, config)
        keys = set(room_catalog.linked_rooms(gas)) if gas else None
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(str(e))

    for room in room_catalog:
        if keys is not None and room.key not in keys:
            continue
        gases = ", ".join(GAS_TYPES[g].short_name for g in room.requirements)
        flag = " *" if room.critical_reserve else ""
        typer.echo(f"  {room.key:<22} {room.name:<40} {gases}{flag}")

    typer.echo("\n  * oxygen covered by the critical-room reserve")


@app.command()
def calc(
    selection: str = typer.Option(..., "--selection", "-s", help="Selection file: room -> {gas: points}"),
    catalog: Optional[str] = typer.Option(None, "--catalog", help="Room catalog file (YAML/JSON)"),
    config: Optional[str] = typer.Option(None, "--config", help="Settings overrides file (YAML/JSON)"),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: human | json | markdown"),
    export: Optional[str] = typer.Option(None, "--export", help="Also write the results to this file (.csv or .xlsx)"),
):
    """Size sources and pipes for every gas from a room/point selection."""
    from medgas.gases.constants import load_constants
    from medgas.gases.engine import compute
    from medgas.gases import export as exporter, output

    out_format = _output_format(fmt)
    try:
        result = compute(
            _load_catalog(catalog, config),
            _load_selection(selection),
            load_constants(),
        )
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(str(e))

    typer.echo(output.format_facility_report(result, out_format))

    if export:
        path = exporter.write_rows(exporter.to_rows(result), Path(export))
        if out_format != "json":
            typer.echo(f"\nExported to {path}")


@app.command()
def pipe(
    flow: float = typer.Option(..., "--flow", help="Design flow (l/min)"),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: human | json | markdown"),
):
    """Select a standard pipe for a flow."""
    from medgas.core.output import format_result
    from medgas.gases.constants import load_constants
    from medgas.gases.engine import run_pipe

    out_format = _output_format(fmt)
    try:
        result = run_pipe({"flow_lpm": flow, "constants": load_constants()})
    except ValueError as e:
        _fail(str(e))

    typer.echo(format_result(result, out_format, title="Pipe Selection"))


@app.command()
def manual(
    gas: str = typer.Option(..., "--gas", "-g", help="Gas key: oxygen, n2o, co2, air5, air8, agss, vacuum"),
    value: float = typer.Option(..., "--value", help="System total"),
    unit: str = typer.Option("per_minute", "--unit", help="per_minute (l/min) or per_day (l/day)"),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: human | json | markdown"),
):
    """Size sources and pipe from a manually entered system total."""
    from medgas.gases.constants import load_constants
    from medgas.gases.engine import compute_manual
    from medgas.gases import output

    out_format = _output_format(fmt)
    try:
        result = compute_manual({gas: value}, {gas: unit}, load_constants())
    except ValueError as e:
        _fail(str(e))

    typer.echo(output.format_facility_report(result, out_format, title="MANUAL SIZING"))


@app.command()
def validate(
    selection: str = typer.Option(..., "--selection", "-s", help="Selection file: room -> {gas: points}"),
    catalog: Optional[str] = typer.Option(None, "--catalog", help="Room catalog file (YAML/JSON)"),
    config: Optional[str] = typer.Option(None, "--config", help="Settings overrides file (YAML/JSON)"),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: human | json | markdown"),
):
    """Check a selection for AGSS/N2O/air combinations and missing parameters."""
    from medgas.gases.engine import compute
    from medgas.gases import output

    out_format = _output_format(fmt)
    try:
        result = compute(_load_catalog(catalog, config), _load_selection(selection))
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(str(e))

    typer.echo(output.format_validation_report(result.validation + result.data_quality, out_format))
