"""
Command-line interface for meshkernel.

Provides commands to inspect, validate, repair, triangulate and combine mesh
files. Files are read and written through trimesh.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from meshkernel import __version__
from meshkernel.core.config import ConfigManager, KernelConfig
from meshkernel.core.geometry import GeometryLoader
from meshkernel.core.logging import configure_logging
from meshkernel.csg.engine import OPERATIONS, boolean_operation
from meshkernel.geometry.analysis import analyze_mesh
from meshkernel.geometry.triangulation import triangulate_mesh
from meshkernel.validation.repair import repair
from meshkernel.validation.validator import validate

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config-dir",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Configuration directory (kernel.yaml, profiles/)",
)
@click.option("--profile", default=None, help="Configuration profile to apply")
@click.option("--log-level", default="WARNING", help="Log level")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
@click.pass_context
def main(
    ctx: click.Context,
    config_dir: Optional[Path],
    profile: Optional[str],
    log_level: str,
    json_logs: bool,
) -> None:
    """meshkernel - polygon mesh editing kernel."""
    configure_logging(level=log_level, json_output=json_logs)
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir
    ctx.obj["profile"] = profile


def _kernel_config(ctx: click.Context) -> KernelConfig:
    config_dir = ctx.obj.get("config_dir")
    if config_dir is None:
        if ctx.obj.get("profile"):
            raise click.UsageError("--profile requires --config-dir")
        return KernelConfig()
    return ConfigManager(config_dir).get_config(ctx.obj.get("profile"))


def _format(value: object) -> str:
    if isinstance(value, float):
        return f"{value:.6g}"
    if isinstance(value, list):
        return "[" + ", ".join(_format(v) for v in value) + "]"
    if value is None:
        return "-"
    return str(value)


# =============================================================================
# Inspection Commands
# =============================================================================


@main.command("info")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def info(path: Path) -> None:
    """Show mesh statistics."""
    try:
        mesh = GeometryLoader.load(path)
        report = analyze_mesh(mesh)

        table = Table(title=f"Mesh: {mesh.name}")
        table.add_column("Property", style="cyan")
        table.add_column("Value")
        for key, value in report.items():
            table.add_row(key, _format(value))
        console.print(table)

    except Exception as e:
        console.print(f"[red]✗[/red] Failed to analyze mesh: {e}")
        raise SystemExit(1)


@main.command("validate")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("--repair", "do_repair", is_flag=True, help="Repair before validating")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the repaired mesh here",
)
@click.pass_context
def validate_command(ctx: click.Context, path: Path, do_repair: bool, output: Optional[Path]) -> None:
    """Validate a mesh, optionally repairing it first."""
    try:
        config = _kernel_config(ctx)
        mesh = GeometryLoader.load(path)

        if do_repair:
            repair_report = repair(mesh, config.repair)
            table = Table(title="Repair")
            table.add_column("Action", style="cyan")
            table.add_column("Count")
            for key, value in repair_report.to_dict().items():
                table.add_row(key, str(value))
            console.print(table)
            if output is not None:
                GeometryLoader.save(mesh, output)
                console.print(f"[green]✓[/green] Wrote repaired mesh to {output}")

        report = validate(mesh, config.validation)
        for message in report.errors:
            console.print(f"[red]error[/red] {message}")
        for message in report.warnings:
            console.print(f"[yellow]warning[/yellow] {message}")

    except Exception as e:
        console.print(f"[red]✗[/red] Failed to validate mesh: {e}")
        raise SystemExit(1)

    if not report.is_valid:
        console.print(f"[red]✗[/red] {path.name}: {len(report.errors)} errors")
        raise SystemExit(1)
    console.print(
        f"[green]✓[/green] {path.name} is valid ({len(report.warnings)} warnings)"
    )


# =============================================================================
# Editing Commands
# =============================================================================


@main.command("triangulate")
@click.argument("source", type=click.Path(exists=True, path_type=Path))
@click.argument("target", type=click.Path(path_type=Path))
def triangulate_command(source: Path, target: Path) -> None:
    """Triangulate every face and write the result."""
    try:
        mesh = GeometryLoader.load(source)
        result = triangulate_mesh(mesh)
        GeometryLoader.save(result, target)
        console.print(
            f"[green]✓[/green] Wrote {len(result.faces)} triangles to {target}"
        )
    except Exception as e:
        console.print(f"[red]✗[/red] Failed to triangulate mesh: {e}")
        raise SystemExit(1)


@main.command("boolean")
@click.argument("mesh_a", type=click.Path(exists=True, path_type=Path))
@click.argument("mesh_b", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--op",
    "operation",
    type=click.Choice(OPERATIONS),
    default="union",
    help="Boolean operation",
)
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True, help="Output file")
@click.option("--tolerance", type=float, default=None, help="Weld tolerance")
@click.pass_context
def boolean_command(
    ctx: click.Context,
    mesh_a: Path,
    mesh_b: Path,
    operation: str,
    output: Path,
    tolerance: Optional[float],
) -> None:
    """Combine two meshes with a boolean operation."""
    try:
        options = _kernel_config(ctx).csg
        if tolerance is not None:
            options = options.model_copy(update={"tolerance": tolerance})
        a = GeometryLoader.load(mesh_a)
        b = GeometryLoader.load(mesh_b)
        result = boolean_operation(a, b, operation, options)
    except Exception as e:
        console.print(f"[red]✗[/red] Boolean {operation} failed: {e}")
        raise SystemExit(1)

    if not result.success or result.mesh is None:
        console.print(f"[red]✗[/red] Boolean {operation} failed: {result.error}")
        raise SystemExit(1)

    try:
        GeometryLoader.save(result.mesh, output)
    except Exception as e:
        console.print(f"[red]✗[/red] Failed to save result: {e}")
        raise SystemExit(1)
    console.print(
        f"[green]✓[/green] {operation}: {len(result.mesh.faces)} faces written to {output}"
    )


# =============================================================================
# Configuration Commands
# =============================================================================


@main.command("profiles")
@click.pass_context
def profiles(ctx: click.Context) -> None:
    """List configuration profiles."""
    config_dir = ctx.obj.get("config_dir")
    if config_dir is None:
        console.print("[yellow]No configuration directory given.[/yellow]")
        return
    try:
        names = ConfigManager(config_dir).list_profiles()
    except Exception as e:
        console.print(f"[red]✗[/red] Failed to list profiles: {e}")
        raise SystemExit(1)

    if not names:
        console.print("[yellow]No profiles found.[/yellow]")
        return
    table = Table(title="Profiles")
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row(name)
    console.print(table)


if __name__ == "__main__":
    main()
