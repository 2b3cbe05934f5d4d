"""
CLI commands for the Docker Service Manager.

This module provides the command-line interface for starting, stopping and
pulling catalog services, inspecting the runtime and host, and running
maintenance.
"""

import time
from typing import Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt, Confirm
from rich.table import Table

from docker_svcman.core import system
from docker_svcman.core.controller import ServiceController
from docker_svcman.core.errors import ServiceManagerError
from docker_svcman.core.scheduler import MaintenanceScheduler
from docker_svcman.core.settings import Settings, build_controller, configure_logging
from docker_svcman.models.outcome import ServiceOutcome
from docker_svcman.utils.docker_utils import image_reference, parse_json_lines
from docker_svcman.utils.formatting import (
    format_bytes, format_interval, format_time, usage_color
)


# Initialize Typer app with command groups
app = typer.Typer(help="Docker Service Manager", add_completion=True)
system_app = typer.Typer(help="System resources and maintenance commands")
app.add_typer(system_app, name="system")

# Initialize Rich console
console = Console()

# Set up by the app callback
_state: Dict[str, object] = {"settings": None, "controller": None}


def fail(message: str, code: int = 1):
    """Print an error and leave with a non-zero exit code."""
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(code=code)


def get_controller() -> ServiceController:
    controller = _state.get("controller")
    if controller is None:
        try:
            controller = build_controller(_state.get("settings") or Settings.from_env())
        except ServiceManagerError as e:
            fail(str(e), code=2)
        _state["controller"] = controller
    return controller


@app.callback()
def main(
    runtime: Optional[str] = typer.Option(None, "--runtime", help="Container runtime executable (default: docker)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds to wait for each runtime command (0 = no limit)"),
    catalog: Optional[str] = typer.Option(None, "--catalog", "-c", help="YAML file with service definitions"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Manage containerized services through the container runtime CLI."""
    try:
        settings = Settings.from_env()
    except ServiceManagerError as e:
        fail(str(e), code=2)

    if runtime:
        settings.runtime = runtime
    if timeout is not None:
        if timeout < 0:
            fail("--timeout must not be negative", code=2)
        settings.timeout = timeout
    if catalog:
        settings.catalog_path = catalog
    if debug:
        settings.log_level = "DEBUG"

    configure_logging(settings.log_level)
    _state["settings"] = settings
    _state["controller"] = None


def print_outcome(outcome: ServiceOutcome, success_message: str, failure_message: str):
    """Report an outcome the way every menu and command does."""
    if outcome.success:
        console.print(f"[bold green]✓[/] {success_message}")
        if outcome.stdout.strip():
            console.print(outcome.stdout.rstrip(), markup=False, highlight=False)
        return

    console.print(f"[bold red]✗[/] {failure_message}")
    if outcome.is_fault:
        console.print(outcome.error or "", style="red", markup=False, highlight=False)
    else:
        console.print(f"[dim]Exit code: {outcome.exit_code}[/dim]")
    for step in outcome.steps:
        if step.stderr.strip():
            console.print(step.stderr.rstrip(), style="red", markup=False, highlight=False)
    if not outcome.steps and outcome.stderr.strip():
        console.print(outcome.stderr.rstrip(), style="red", markup=False, highlight=False)


def display_service_table(services):
    """Display the service catalog."""
    table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
    table.add_column("No.", justify="right")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Image")
    table.add_column("LLM", justify="center")
    table.add_column("Description")

    for i, service in enumerate(services, start=1):
        table.add_row(
            str(i),
            service.id,
            service.name,
            service.image,
            "✓" if service.is_llm else "",
            service.description
        )

    console.print("\n[bold cyan]Available Services[/bold cyan]")
    console.print(table)


def display_container_table(outcome: ServiceOutcome, title: str):
    """Render ``ps`` JSON-lines output as a table."""
    if not outcome.success:
        print_outcome(outcome, "", "Failed to list containers")
        return

    containers = parse_json_lines(outcome.stdout)
    if not containers:
        console.print("[yellow]No containers found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
    table.add_column("ID")
    table.add_column("Name", style="cyan")
    table.add_column("Image")
    table.add_column("Status")
    table.add_column("Ports")

    for container in containers:
        status = container.get('Status', '')
        status_style = "green" if status.startswith("Up") else "yellow"
        table.add_row(
            container.get('ID', '')[:12],
            container.get('Names', ''),
            container.get('Image', ''),
            f"[{status_style}]{status}[/{status_style}]",
            container.get('Ports', '')
        )

    console.print(f"\n[bold cyan]{title}[/bold cyan]")
    console.print(table)


def display_image_table(outcome: ServiceOutcome):
    """Render ``images`` JSON-lines output as a table."""
    if not outcome.success:
        print_outcome(outcome, "", "Failed to list images")
        return

    images = parse_json_lines(outcome.stdout)
    if not images:
        console.print("[yellow]No images found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
    table.add_column("Image", style="cyan")
    table.add_column("ID")
    table.add_column("Size", justify="right")

    for image in images:
        table.add_row(image_reference(image), image.get('ID', '')[:19], image.get('Size', ''))

    console.print("\n[bold cyan]Available Images[/bold cyan]")
    console.print(table)


def display_system_resources(resources: Dict):
    """Display host CPU, memory, swap and disk usage."""
    cpu = resources['cpu']
    memory = resources['memory']
    swap = resources['swap']
    disk = resources['disk']

    table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
    table.add_column("Resource")
    table.add_column("Used", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Usage", justify="right")

    def pct(value):
        color = usage_color(value)
        return f"[{color}]{value:.1f}%[/{color}]"

    table.add_row("CPU", f"{cpu['count']} cores", "", pct(cpu['percent']))
    table.add_row("Memory", format_bytes(memory['used']), format_bytes(memory['total']), pct(memory['percent']))
    table.add_row("Swap", format_bytes(swap['used']), format_bytes(swap['total']), pct(swap['percent']))
    table.add_row(f"Disk ({disk['path']})", format_bytes(disk['used']), format_bytes(disk['total']), pct(disk['percent']))

    console.print("\n[bold cyan]System Resources[/bold cyan]")
    console.print(table)


def display_container_stats(outcome: ServiceOutcome):
    """Render ``stats`` JSON-lines output as a table."""
    if not outcome.success:
        print_outcome(outcome, "", "Failed to read container resource usage")
        return

    stats = parse_json_lines(outcome.stdout)
    if not stats:
        console.print("[yellow]No running containers[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
    table.add_column("Name", style="cyan")
    table.add_column("CPU %", justify="right")
    table.add_column("Memory")
    table.add_column("Net I/O")
    table.add_column("Block I/O")

    for row in stats:
        table.add_row(
            row.get('Name', ''),
            row.get('CPUPerc', ''),
            row.get('MemUsage', ''),
            row.get('NetIO', ''),
            row.get('BlockIO', '')
        )

    console.print("\n[bold cyan]Container Resource Usage[/bold cyan]")
    console.print(table)


def report_cleanup(outcomes: List[ServiceOutcome]):
    for target, outcome in zip(system.PRUNE_ORDER, outcomes):
        print_outcome(
            outcome,
            f"Removed unused {target.value}s",
            f"Failed to prune {target.value}s"
        )


def select_service(controller: ServiceController) -> Optional[str]:
    """Prompt for a catalog service by number or id."""
    services = controller.list_catalog()
    display_service_table(services)

    choice = Prompt.ask(f"Enter the service number (1-{len(services)}) or ID")
    if choice.isdigit():
        index = int(choice) - 1
        if 0 <= index < len(services):
            return services[index].id
        console.print("[bold red]Invalid selection[/bold red]")
        return None
    return choice.strip() or None


@app.command("services")
def services_list():
    """List the services in the catalog."""
    display_service_table(get_controller().list_catalog())


@app.command()
def start(service_id: str = typer.Argument(None, help="ID of the catalog service to start")):
    """Start a catalog service."""
    controller = get_controller()
    if not service_id:
        service_id = select_service(controller)
        if not service_id:
            raise typer.Exit(code=1)

    try:
        service = controller.catalog.lookup(service_id)
        console.print(f"Starting service: [cyan]{service.name}[/cyan] ({service.id})")
        outcome = controller.start(service_id)
    except ServiceManagerError as e:
        fail(str(e))

    print_outcome(outcome, f"Service {service_id} started successfully", f"Failed to start service {service_id}")
    if not outcome.success:
        raise typer.Exit(code=1)


@app.command()
def stop(
    service_id: str = typer.Argument(None, help="Service or container name to stop"),
    keep: bool = typer.Option(False, "--keep", "-k", help="Stop the container without removing it"),
):
    """Stop a service and remove its container."""
    controller = get_controller()
    if not service_id:
        display_container_table(system.list_containers(controller), "Running Containers")
        service_id = Prompt.ask("Enter the service ID to stop")

    try:
        console.print(f"Stopping service: [cyan]{service_id}[/cyan]")
        outcome = controller.stop(service_id, remove=not keep)
    except ServiceManagerError as e:
        fail(str(e))

    print_outcome(outcome, f"Service {service_id} stopped successfully", f"Failed to stop service {service_id}")
    if not outcome.success:
        raise typer.Exit(code=1)


@app.command()
def pull(image: str = typer.Argument(None, help="Image to pull, e.g. nginx:latest")):
    """Pull an image."""
    controller = get_controller()
    if image is None:
        image = Prompt.ask("Enter the image to pull (e.g., nginx:latest)")

    try:
        with console.status(f"Pulling image {image.strip()}..."):
            outcome = controller.pull_image(image)
    except ServiceManagerError as e:
        fail(str(e))

    print_outcome(outcome, f"Image {image.strip()} pulled successfully", f"Failed to pull image {image.strip()}")
    if not outcome.success:
        raise typer.Exit(code=1)


@app.command()
def status(service_id: str = typer.Argument(..., help="Service or container name")):
    """Show the live state of a service container."""
    try:
        outcome = get_controller().status(service_id)
    except ServiceManagerError as e:
        fail(str(e))

    if outcome.success:
        state = outcome.stdout.strip() or "unknown"
        color = "green" if state == "running" else "yellow"
        console.print(f"{service_id}: [{color}]{state}[/{color}]")
    elif outcome.is_fault:
        print_outcome(outcome, "", f"Could not query {service_id}")
        raise typer.Exit(code=1)
    else:
        console.print(f"{service_id}: [dim]not created[/dim]")


@app.command()
def ps(all: bool = typer.Option(False, "--all", "-a", help="Show all containers including stopped ones")):
    """List containers."""
    outcome = system.list_containers(get_controller(), all_containers=all)
    display_container_table(outcome, "All Containers" if all else "Running Containers")


@app.command()
def images():
    """List local images."""
    display_image_table(system.list_images(get_controller()))


@system_app.command("info")
def system_info():
    """Show host resources and container resource usage."""
    display_system_resources(system.get_system_resources())
    display_container_stats(system.container_stats(get_controller()))


@system_app.command("cleanup")
def system_cleanup(yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation")):
    """Remove stopped containers and unused images, volumes and networks."""
    if not yes and not Confirm.ask("Remove all stopped containers and unused images, volumes and networks?"):
        raise typer.Exit()

    console.print("\n[bold cyan]Cleaning up container runtime[/bold cyan]")
    outcomes = system.cleanup(get_controller())
    report_cleanup(outcomes)
    if not all(o.success for o in outcomes):
        raise typer.Exit(code=1)


@system_app.command("clear-cache")
def system_clear_cache():
    """Drop the operating system page cache (Linux, requires root)."""
    if not system.is_root():
        console.print("[yellow]Note: this requires root permissions.[/yellow]")

    outcome = system.clear_system_cache(get_controller())
    print_outcome(outcome, "System cache cleared", "Failed to clear system cache")
    if not outcome.success:
        raise typer.Exit(code=1)


@system_app.command("schedule")
def system_schedule(
    interval: float = typer.Option(None, "--interval", "-i", help="Seconds between cleanups"),
    once: bool = typer.Option(False, "--once", help="Run a single cleanup and exit"),
):
    """Run cleanup periodically until interrupted."""
    controller = get_controller()
    settings = _state.get("settings") or Settings.from_env()
    interval = interval or settings.maintenance_interval

    try:
        scheduler = MaintenanceScheduler(controller, interval=interval)
    except ValueError as e:
        fail(str(e), code=2)

    if once:
        report_cleanup(scheduler.run_once())
        return

    console.print(Panel(
        f"Running cleanup every [bold]{format_interval(interval)}[/bold]. Press Ctrl+C to stop.",
        title="Scheduled Maintenance",
        border_style="cyan"
    ))
    scheduler.start()
    try:
        last_seen = None
        while scheduler.running:
            time.sleep(1)
            if scheduler.last_run != last_seen:
                last_seen = scheduler.last_run
                console.print(f"\n[bold]Run at {format_time(last_seen)}[/bold]")
                report_cleanup(scheduler.last_outcomes)
                console.print(f"[dim]Next run at {format_time(scheduler.next_run)}[/dim]")
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping scheduler[/yellow]")
    finally:
        scheduler.stop()


@app.command()
def api(
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    port: int = typer.Option(5000, "--port", help="Port to bind to"),
):
    """Start the HTTP API server."""
    from docker_svcman.api.server import start_api_server

    console.print(f"[bold green]Starting API server on {host}:{port}...[/bold green]")
    start_api_server(host=host, port=port, settings=_state.get("settings"))


@app.command()
def version():
    """Show version information."""
    from importlib.metadata import PackageNotFoundError, version as package_version

    try:
        console.print(f"[bold cyan]Docker Service Manager[/bold cyan] v{package_version('docker-svcman')}")
    except PackageNotFoundError:
        console.print("[bold cyan]Docker Service Manager[/bold cyan] (version unknown)")


@app.command()
def interactive():
    """Start the interactive menu."""
    from docker_svcman.cli.interactive import interactive_mode

    controller = get_controller()
    settings = _state.get("settings") or Settings.from_env()
    interactive_mode(controller, maintenance_interval=settings.maintenance_interval)


if __name__ == "__main__":
    app()
