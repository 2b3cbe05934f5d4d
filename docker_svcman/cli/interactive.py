"""
Interactive CLI for the Docker Service Manager.

This module provides the menu-driven console for managing catalog services,
inspecting the runtime and host, and running maintenance.
"""

from typing import Optional

import questionary
from questionary import Style
from rich import box
from rich.table import Table

from docker_svcman.cli.commands import (
    console, print_outcome, display_service_table, display_container_table,
    display_image_table, display_system_resources, display_container_stats,
    report_cleanup
)
from docker_svcman.core import system
from docker_svcman.core.controller import ServiceController
from docker_svcman.core.errors import ServiceManagerError
from docker_svcman.core.scheduler import MaintenanceScheduler
from docker_svcman.utils.formatting import format_interval, format_time

# Custom styles
custom_style = Style([
    ('qmark', 'fg:cyan bold'),
    ('question', 'bold'),
    ('answer', 'fg:green bold'),
    ('pointer', 'fg:cyan bold'),
    ('highlighted', 'fg:cyan bold'),
    ('selected', 'fg:green bold'),
    ('separator', 'fg:cyan'),
    ('instruction', 'fg:gray'),
    ('text', ''),
    ('disabled', 'fg:gray italic'),
])

# Theme configuration
THEME = {
    "app_title": "Docker Service Manager",
    "title_color": "cyan bold",
    "border_style": "cyan",
    "success_color": "green bold",
    "error_color": "red bold",
}

MAIN_MENU = [
    "List running containers",
    "List all containers",
    "List available images",
    "Start a service",
    "Stop a service",
    "Pull an image",
    "Check system resources",
    "System maintenance",
    "Exit",
]

MAINTENANCE_MENU = [
    "Clean up container runtime",
    "Clear system cache",
    "Schedule regular maintenance",
    "Back to main menu",
]


def display_header(subtitle: str = None):
    """Display the application header."""
    console.print(f"[{THEME['title_color']}]{THEME['app_title']}[/{THEME['title_color']}]", justify="center")
    console.print("=" * console.width, style=THEME["border_style"])
    if subtitle:
        console.print(f"[bold]{subtitle}[/bold]", justify="center")


def pause():
    console.print("\nPress Enter to continue...", style="dim")
    input()


def select_service(controller: ServiceController) -> Optional[str]:
    """Select a catalog service."""
    services = controller.list_catalog()
    display_service_table(services)

    choices = [
        questionary.Choice(f"{s.name} ({s.id})", value=s.id)
        for s in services
    ]
    choices.append(questionary.Choice("Cancel", value=None))

    return questionary.select(
        "Select a service to start:",
        choices=choices,
        style=custom_style
    ).ask()


def start_service(controller: ServiceController):
    """Start a service chosen from the catalog."""
    service_id = select_service(controller)
    if not service_id:
        return

    service = controller.catalog.lookup(service_id)
    console.print(f"Starting service: [cyan]{service.name}[/cyan] ({service.id})")
    with console.status("Starting..."):
        outcome = controller.start(service_id)
    print_outcome(outcome, "Service started successfully", "Failed to start service")


def stop_service(controller: ServiceController):
    """Stop a service by container name."""
    display_container_table(system.list_containers(controller), "Running Containers")

    service_id = questionary.text(
        "Enter the service ID to stop:",
        validate=lambda text: len(text.strip()) > 0,
        style=custom_style
    ).ask()

    if service_id is None:
        return

    remove = questionary.confirm(
        "Remove the container after stopping it?",
        default=True,
        style=custom_style
    ).ask()

    if remove is None:
        return

    console.print(f"Stopping service: [cyan]{service_id.strip()}[/cyan]")
    with console.status("Stopping..."):
        outcome = controller.stop(service_id, remove=remove)
    print_outcome(outcome, "Service stopped successfully", "Failed to stop service")


def pull_image(controller: ServiceController):
    """Pull an image by reference."""
    image = questionary.text(
        "Enter the image to pull (e.g., nginx:latest):",
        validate=lambda text: len(text.strip()) > 0 or "Image reference cannot be empty",
        style=custom_style
    ).ask()

    if image is None:
        return

    console.print(f"Pulling image: [cyan]{image.strip()}[/cyan]")
    with console.status("Pulling..."):
        outcome = controller.pull_image(image)
    print_outcome(outcome, "Image pulled successfully", "Failed to pull image")


def check_system_resources(controller: ServiceController):
    """Display the system information summary."""
    console.print("\n[bold cyan]System Information Summary[/bold cyan]")
    display_system_resources(system.get_system_resources())
    display_container_stats(system.container_stats(controller))


def cleanup_runtime(controller: ServiceController):
    confirm = questionary.confirm(
        "Remove stopped containers and unused images, volumes and networks?",
        default=False,
        style=custom_style
    ).ask()

    if not confirm:
        return

    console.print("\n[bold cyan]Cleaning Up Container Runtime[/bold cyan]")
    report_cleanup(system.cleanup(controller))
    console.print("Cleanup complete.")


def clear_cache(controller: ServiceController):
    console.print("\n[bold cyan]Clearing System Cache[/bold cyan]")
    if not system.is_root():
        console.print("[yellow]Note: this requires root permissions.[/yellow]")
    outcome = system.clear_system_cache(controller)
    print_outcome(outcome, "System cache cleared", "Failed to clear system cache")


def schedule_maintenance(scheduler: MaintenanceScheduler):
    """Start or stop the background maintenance scheduler."""
    if scheduler.running:
        table = Table(box=box.ROUNDED, show_header=False)
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        table.add_row("Interval", format_interval(scheduler.interval))
        table.add_row("Last run", format_time(scheduler.last_run))
        table.add_row("Next run", format_time(scheduler.next_run))
        console.print(table)

        if questionary.confirm("Stop scheduled maintenance?", default=False, style=custom_style).ask():
            scheduler.stop()
            console.print(f"[{THEME['success_color']}]Scheduled maintenance stopped[/{THEME['success_color']}]")
        return

    hours = questionary.text(
        "Run cleanup every how many hours?",
        default=str(int(scheduler.interval // 3600) or 24),
        validate=lambda text: text.replace('.', '', 1).isdigit() and float(text) > 0,
        style=custom_style
    ).ask()

    if hours is None:
        return

    scheduler.interval = float(hours) * 3600
    scheduler.start()
    console.print(
        f"[{THEME['success_color']}]Cleanup scheduled every {format_interval(scheduler.interval)} "
        f"while this session is open[/{THEME['success_color']}]"
    )
    console.print("[dim]For unattended maintenance, run 'docker-svcman system schedule' from cron or a service unit.[/dim]")


def maintenance_submenu(controller: ServiceController, scheduler: MaintenanceScheduler):
    """System maintenance submenu."""
    while True:
        display_header("System Maintenance")

        choice = questionary.select(
            "Select an option:",
            choices=MAINTENANCE_MENU,
            style=custom_style
        ).ask()

        if choice == "Clean up container runtime":
            cleanup_runtime(controller)
        elif choice == "Clear system cache":
            clear_cache(controller)
        elif choice == "Schedule regular maintenance":
            schedule_maintenance(scheduler)
        elif choice == "Back to main menu" or choice is None:
            return

        pause()


def handle_choice(choice: str, controller: ServiceController):
    """Dispatch one main menu choice."""
    if choice == "List running containers":
        display_container_table(system.list_containers(controller), "Running Containers")
    elif choice == "List all containers":
        display_container_table(system.list_containers(controller, all_containers=True), "All Containers")
    elif choice == "List available images":
        display_image_table(system.list_images(controller))
    elif choice == "Start a service":
        start_service(controller)
    elif choice == "Stop a service":
        stop_service(controller)
    elif choice == "Pull an image":
        pull_image(controller)
    elif choice == "Check system resources":
        check_system_resources(controller)


def interactive_mode(controller: ServiceController, maintenance_interval: float = 86400.0):
    """Run the interactive menu until the user exits."""
    scheduler = MaintenanceScheduler(controller, interval=maintenance_interval)

    try:
        while True:
            display_header("Main Menu")

            choice = questionary.select(
                "Select an option:",
                choices=MAIN_MENU,
                style=custom_style
            ).ask()

            if choice == "Exit" or choice is None:
                break

            if choice == "System maintenance":
                maintenance_submenu(controller, scheduler)
                continue

            try:
                handle_choice(choice, controller)
            except ServiceManagerError as e:
                console.print(f"[{THEME['error_color']}]Error:[/{THEME['error_color']}] {str(e)}")

            pause()

    except KeyboardInterrupt:
        console.print("\n[bold]Exiting...[/bold]")
    finally:
        scheduler.stop()

    console.print(f"[{THEME['success_color']}]Goodbye![/{THEME['success_color']}]")
