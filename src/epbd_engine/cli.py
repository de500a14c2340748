"""Command-line interface for the EPBD engine."""

from pathlib import Path
from typing import Optional

import typer

from epbd_engine import __version__

app = typer.Typer(
    help="EPBD weighting factors and energy components preparation (CTE DB-HE)",
    no_args_is_help=True,
)


def _rennren(value: Optional[str], name: str):
    from epbd_engine.core.rennren import RenNren

    if value is None:
        return None
    try:
        return RenNren.from_str(value)
    except ValueError:
        typer.secho(f"✗ Invalid value for --{name}: expected 'ren, nren'", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def version():
    """Show EPBD engine version."""
    typer.echo(f"EPBD Engine v{__version__}")


@app.command()
def wfactors(
    location: str,
    cogen: Optional[str] = typer.Option(None, help="Cogeneration to grid factors 'ren, nren'"),
    cogennepb: Optional[str] = typer.Option(None, help="Cogeneration to NEPB factors 'ren, nren'"),
    red1: Optional[str] = typer.Option(None, help="District network 1 factors 'ren, nren'"),
    red2: Optional[str] = typer.Option(None, help="District network 2 factors 'ren, nren'"),
    keep_nepb: bool = typer.Option(False, help="Keep factors for export to NEPB uses"),
    nearby: bool = typer.Option(False, help="Convert to the nearby perimeter"),
):
    """Print the completed weighting factors for a location.

    Args:
        location: PENINSULA, BALEARES, CANARIAS or CEUTAMELILLA
    """
    from epbd_engine.core.validate import ValidationError
    from epbd_engine.io.formats import factors_to_string
    from epbd_engine.wfactors.complete import new_wfactors
    from epbd_engine.wfactors.nearby import wfactors_to_nearby

    try:
        result = new_wfactors(
            location.upper(),
            cogen=_rennren(cogen, "cogen"),
            cogennepb=_rennren(cogennepb, "cogennepb"),
            red1=_rennren(red1, "red1"),
            red2=_rennren(red2, "red2"),
            strip_nepb=not keep_nepb,
        )
        if nearby:
            result = wfactors_to_nearby(result)
    except (ValueError, ValidationError) as e:
        typer.secho(f"✗ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    typer.echo(factors_to_string(result), nl=False)


@app.command()
def complete(
    factors_path: str,
    keep_nepb: bool = typer.Option(False, help="Keep factors for export to NEPB uses"),
    nearby: bool = typer.Option(False, help="Convert to the nearby perimeter"),
    strict: bool = typer.Option(False, help="Fail on duplicated factor keys"),
    summary: bool = typer.Option(False, help="Print the completed factors as a table"),
):
    """Complete a weighting factor file and print the result.

    Args:
        factors_path: Path to weighting factor file
    """
    from epbd_engine.core.validate import ValidationError, validate_unique_keys
    from epbd_engine.io.formats import factors_to_frame, factors_to_string, read_factors
    from epbd_engine.wfactors.complete import complete_wfactors
    from epbd_engine.wfactors.nearby import wfactors_to_nearby

    try:
        raw = read_factors(Path(factors_path).read_text(encoding="utf-8"))
        validate_unique_keys(raw, strict=strict)
        result = complete_wfactors(raw, strip_nepb=not keep_nepb)
        if nearby:
            result = wfactors_to_nearby(result)
    except (OSError, ValueError, ValidationError) as e:
        typer.secho(f"✗ Weighting factor completion failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if summary:
        typer.echo(factors_to_frame(result).drop(columns="comment").to_string(index=False))
    else:
        typer.echo(factors_to_string(result), nl=False)


@app.command()
def components(
    components_path: str,
    service: Optional[str] = typer.Option(None, help="Select components of a service (e.g. ACS)"),
    summary: bool = typer.Option(False, help="Print totals per carrier and service"),
):
    """Balance (and optionally partition by service) a component file.

    Args:
        components_path: Path to energy components file
    """
    from epbd_engine.components.balance import parse_components
    from epbd_engine.components.service import components_by_service
    from epbd_engine.core.constants import Service
    from epbd_engine.core.validate import ValidationError
    from epbd_engine.io.formats import components_summary, components_to_string

    try:
        result = parse_components(Path(components_path).read_text(encoding="utf-8"))
        if service is not None:
            result = components_by_service(result, Service(service.upper()))
    except (OSError, ValueError, ValidationError) as e:
        typer.secho(f"✗ Component processing failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    if summary:
        typer.echo(components_summary(result).to_string(index=False))
    else:
        typer.echo(components_to_string(result), nl=False)


@app.command()
def validate(bundle_path: str):
    """Validate a run bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from epbd_engine.io.bundle import validate_bundle

    try:
        validate_bundle(bundle_path)
        typer.secho(f"✓ Bundle at {bundle_path} is valid", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"✗ Bundle validation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def prepare(bundle_path: str):
    """Prepare balance inputs for a bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from epbd_engine.runners.prepare import run_prepare

    try:
        run_prepare(bundle_path)
        typer.secho("\n✓ Preparation completed successfully", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"\n✗ Preparation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
