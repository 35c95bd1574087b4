"""CableOps CLI.

Command-line interface for querying a workspace snapshot.
Uses Click for command parsing and Rich for output formatting.
"""

import random
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cableops.config import CableOpsSettings, get_settings, load_capability_table
from cableops.engine import (
    TopologyView,
    classify_active_flows,
    next_dhcp_ip_for,
    reachable_from,
    shortest_path,
    simulate_ping,
    validate_port_ip,
)
from cableops.engine.insights import describe_segments, subnet_map
from cableops.errors import CableOpsError, DeviceNotFoundError, InterfaceNotFoundError
from cableops.logging_config import configure_logging
from cableops.model.loader import SnapshotLoader
from cableops.model.topology import Topology

# Load .env file if present
load_dotenv()

console = Console()

snapshot_option = click.option(
    "--snapshot",
    "-s",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Snapshot file (defaults to CABLEOPS_SNAPSHOT_FILE)",
)


def _settings() -> CableOpsSettings:
    ctx = click.get_current_context()
    return ctx.find_root().obj or get_settings()


def _load_view(snapshot: Path | None) -> TopologyView:
    settings = _settings()
    topology = SnapshotLoader().load(snapshot or settings.snapshot_file)
    return TopologyView(topology, load_capability_table(settings))


def _resolve_device(topology: Topology, ref: str) -> str:
    """Accept a device id or a unique device name."""
    if ref in topology.devices:
        return ref
    matches = [d.id for d in topology.devices.values() if d.name == ref]
    if len(matches) == 1:
        return matches[0]
    raise DeviceNotFoundError(ref)


def _fail(e: CableOpsError) -> None:
    console.print(f"[bold red]Error:[/bold red] {e.message}")
    if e.details:
        console.print(f"[dim]Details: {e.details}[/dim]")
    raise SystemExit(1)


@click.group()
@click.version_option(package_name="cableops")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override CABLEOPS_LOG_LEVEL",
)
@click.pass_context
def main(ctx: click.Context, log_level: str | None) -> None:
    """CableOps topology engine.

    Ask questions about a modeled network: broadcast domains, gateway
    subnets, DHCP leases, reachability and simulated pings.
    """
    settings = CableOpsSettings(log_level=log_level) if log_level else get_settings()
    configure_logging(settings.log_level, settings.log_dir)
    ctx.obj = settings


@main.command("info")
def info() -> None:
    """Show engine information."""
    from cableops import __version__

    console.print(
        Panel(
            f"[bold]CableOps[/bold] v{__version__}\n\n"
            "OSI-aware topology semantics: segments, gateways, DHCP,\n"
            "reachability, active flows and simulated pings.",
            title="About",
            border_style="blue",
        )
    )


@main.command("load-snapshot")
@click.argument("snapshot_file", type=click.Path(exists=True, path_type=Path))
def load_snapshot(snapshot_file: Path) -> None:
    """Load and validate a snapshot file.

    SNAPSHOT_FILE: Path to the snapshot YAML or JSON file
    """
    try:
        view = _load_view(snapshot_file)
        topology = view.topology

        device_table = Table(title="Devices", show_header=True, header_style="bold green")
        device_table.add_column("Id")
        device_table.add_column("Name")
        device_table.add_column("Type")
        device_table.add_column("Layer")
        device_table.add_column("Ports", justify="right")

        for device in topology.devices.values():
            caps = view.capabilities(device.id)
            device_table.add_row(
                device.id,
                device.name or "-",
                device.device_type,
                str(caps.layer),
                str(device.port_count),
            )

        console.print(device_table)
        console.print()

        conn_table = Table(title="Connections", show_header=True, header_style="bold yellow")
        conn_table.add_column("Id")
        conn_table.add_column("A")
        conn_table.add_column("B")
        conn_table.add_column("Type")

        for conn in topology.connections:
            conn_table.add_row(
                conn.id,
                f"{topology.device_name(conn.device_a_id)} P{conn.port_a}",
                f"{topology.device_name(conn.device_b_id)} P{conn.port_b}",
                conn.connection_type.value,
            )

        console.print(conn_table)
        console.print()

        console.print(
            Panel(
                f"[bold green]{topology.device_count} devices, "
                f"{len(topology.interfaces)} interfaces, "
                f"{topology.connection_count} connections[/bold green]",
                title="Snapshot Loaded",
                border_style="green",
            )
        )

    except CableOpsError as e:
        _fail(e)


@main.command("segments")
@snapshot_option
@click.option("--all", "show_all", is_flag=True, help="Include single-port segments")
def segments(snapshot: Path | None, show_all: bool) -> None:
    """List broadcast domains and their viability."""
    try:
        view = _load_view(snapshot)
        table = Table(title="Segments", show_header=True, header_style="bold cyan")
        table.add_column("#", justify="right")
        table.add_column("Devices")
        table.add_column("Ports", justify="right")
        table.add_column("Gateway")
        table.add_column("Status")

        for summary in describe_segments(view, include_isolated=show_all):
            status = "[green]viable[/green]" if summary.viable else f"[red]{summary.issue}[/red]"
            table.add_row(
                str(summary.index),
                ", ".join(summary.device_names),
                str(summary.port_count),
                summary.gateway,
                status,
            )
        console.print(table)

        subnets = subnet_map(view)
        if subnets:
            subnet_table = Table(title="Subnets", show_header=True, header_style="bold magenta")
            subnet_table.add_column("Subnet")
            subnet_table.add_column("Gateway")
            subnet_table.add_column("Members", justify="right")
            for key, entry in subnets.items():
                subnet_table.add_row(key, entry.gateway_ip or "-", str(len(entry.members)))
            console.print(subnet_table)

    except CableOpsError as e:
        _fail(e)


@main.command("validate-ip")
@click.argument("device")
@click.argument("port", type=int)
@click.argument("ip_address")
@snapshot_option
def validate_ip(device: str, port: int, ip_address: str, snapshot: Path | None) -> None:
    """Check a proposed interface address against its segment gateway.

    Advisory only: exits 0 even when the address does not fit.
    """
    try:
        view = _load_view(snapshot)
        device_id = _resolve_device(view.topology, device)
        result = validate_port_ip(view, ip_address, device_id, port)

        if result.valid and result.gateway_subnet:
            console.print(f"[bold green]Valid[/bold green] - in subnet {result.gateway_subnet}")
        elif result.valid:
            console.print("[bold green]Valid[/bold green] - no gateway to validate against")
        else:
            console.print(f"[bold yellow]Invalid[/bold yellow] - {result.message}")

    except CableOpsError as e:
        _fail(e)


@main.command("next-dhcp")
@click.argument("device")
@click.argument("port", type=int)
@snapshot_option
def next_dhcp(device: str, port: int, snapshot: Path | None) -> None:
    """Show the next address a DHCP interface would lease."""
    try:
        view = _load_view(snapshot)
        device_id = _resolve_device(view.topology, device)
        if view.topology.get_interface(device_id, port) is None:
            raise InterfaceNotFoundError(device_id, port)
        ip = next_dhcp_ip_for(view, device_id, port)
        if ip:
            console.print(f"Next lease: [bold cyan]{ip}[/bold cyan]")
        else:
            console.print("[yellow]No address available[/yellow] (DHCP off, bad range or pool exhausted)")

    except CableOpsError as e:
        _fail(e)


@main.command("reach")
@click.argument("device")
@snapshot_option
def reach(device: str, snapshot: Path | None) -> None:
    """List devices reachable from a device."""
    try:
        view = _load_view(snapshot)
        device_id = _resolve_device(view.topology, device)
        reachable = reachable_from(view, device_id)

        table = Table(
            title=f"Reachable from {view.topology.device_name(device_id)}",
            show_header=True,
            header_style="bold green",
        )
        table.add_column("Id")
        table.add_column("Name")
        for dev_id in sorted(reachable):
            table.add_row(dev_id, view.topology.device_name(dev_id))
        console.print(table)

    except CableOpsError as e:
        _fail(e)


@main.command("path")
@click.argument("source")
@click.argument("destination")
@snapshot_option
def path(source: str, destination: str, snapshot: Path | None) -> None:
    """Show a shortest path between two devices."""
    try:
        view = _load_view(snapshot)
        src = _resolve_device(view.topology, source)
        dst = _resolve_device(view.topology, destination)
        result = shortest_path(view, src, dst)
        if result is None:
            console.print(f"[bold red]No path[/bold red] from {source} to {destination}")
            raise SystemExit(1)
        console.print(" → ".join(view.topology.device_name(d) for d in result))

    except CableOpsError as e:
        _fail(e)


@main.command("flows")
@snapshot_option
def flows(snapshot: Path | None) -> None:
    """Show which connections carry live traffic."""
    try:
        view = _load_view(snapshot)
        report = classify_active_flows(view)
        topology = view.topology

        table = Table(title="Connections", show_header=True, header_style="bold cyan")
        table.add_column("Id")
        table.add_column("Link")
        table.add_column("State")
        for conn in topology.connections:
            if report.is_active(conn.id):
                state = "[green]active[/green]"
            elif conn.id in report.issues:
                state = f"[red]{report.issues[conn.id].value}[/red]"
            else:
                state = "[dim]idle[/dim]"
            table.add_row(
                conn.id,
                f"{topology.device_name(conn.device_a_id)} P{conn.port_a} ↔ "
                f"{topology.device_name(conn.device_b_id)} P{conn.port_b}",
                state,
            )
        console.print(table)
        if report.used_fallback:
            console.print("[dim]Fewer than two traffic endpoints; showing IP-to-IP links[/dim]")

    except CableOpsError as e:
        _fail(e)


@main.command("ping")
@click.argument("src_device")
@click.argument("src_port", type=int)
@click.argument("dst_device")
@click.argument("dst_port", type=int)
@snapshot_option
@click.option("--seed", type=int, default=None, help="Seed for latency (overrides settings)")
def ping(
    src_device: str,
    src_port: int,
    dst_device: str,
    dst_port: int,
    snapshot: Path | None,
    seed: int | None,
) -> None:
    """Simulate a ping between two interfaces."""
    try:
        view = _load_view(snapshot)
        src = _resolve_device(view.topology, src_device)
        dst = _resolve_device(view.topology, dst_device)
        if seed is None:
            seed = _settings().ping_seed
        result = simulate_ping(view, (src, src_port), (dst, dst_port), rng=random.Random(seed))

        if result.hops:
            table = Table(title="Trace", show_header=True, header_style="bold cyan")
            table.add_column("#", justify="right")
            table.add_column("Device")
            table.add_column("Port", justify="right")
            table.add_column("IP")
            table.add_column("ms", justify="right")
            for i, hop in enumerate(result.hops):
                table.add_row(
                    str(i),
                    hop.device_name,
                    str(hop.port_number),
                    hop.ip_address or "-",
                    str(hop.latency_ms),
                )
            console.print(table)

        style = "green" if result.success else "red"
        console.print(
            Panel(
                f"[bold {style}]{result.message}[/bold {style}]"
                + (f"\nRound trip: {result.round_trip_ms}ms" if result.success else ""),
                title="Ping",
                border_style=style,
            )
        )
        if not result.success:
            raise SystemExit(1)

    except CableOpsError as e:
        _fail(e)


if __name__ == "__main__":
    main()
