"""Main CLI for docktidy."""

import dataclasses
from importlib.metadata import PackageNotFoundError, version as package_version

import typer
from InquirerPy import inquirer
from InquirerPy.base.control import Choice
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm

from docktidy import text as txt
from docktidy.classifier import ClassificationResult, classify_resources
from docktidy.config import (
    DEFAULT_CONFIG,
    build_policy,
    build_prune_options,
    load_config,
    parse_types,
    save_config,
)
from docktidy.coordinator import PruneCoordinator
from docktidy.errors import DocktidyError
from docktidy.history import MemoryHistoryStore, record_observations
from docktidy.logging_setup import setup_logging
from docktidy.models import PruneOptions, ResourceType, RiskLevel, format_size
from docktidy.status import StatusLevel, docker_status_and_usage
from docktidy.utils.daemon import DockerService
from docktidy.utils.display import (
    display_candidates,
    display_disk_usage,
    display_exclusions,
    display_prune_result,
)

app = typer.Typer(
    name="docktidy",
    help="Inspect Docker disk usage and safely prune unused resources",
    add_completion=False,
)
console = Console()
text = txt.default()

MB = 1024 * 1024

STATUS_STYLES = {
    StatusLevel.HEALTHY: "green",
    StatusLevel.DEGRADED: "red",
    StatusLevel.UNKNOWN: "dim",
}


def make_service(config: dict) -> DockerService:
    return DockerService(timeout=int(config.get("timeout_seconds") or DEFAULT_CONFIG["timeout_seconds"]))


def run_setup_wizard(config: dict) -> None:
    """Prompt for defaults and save them."""
    console.print(Panel.fit(
        "[bold cyan]Configuration Wizard[/]\n\n"
        "Set your default preferences",
        border_style="cyan",
    ))

    console.print("\n[bold cyan]Default Age Filter[/]")
    older_than_days = int(inquirer.number(
        message="Only prune resources unused for at least (days):",
        default=int(config.get("older_than_days") or 0),
        min_allowed=0,
    ).execute())

    console.print("\n[bold cyan]Minimum Size[/]")
    min_size_mb = int(inquirer.number(
        message="Ignore resources smaller than (MB):",
        default=int(config.get("min_size_bytes") or 0) // MB,
        min_allowed=0,
    ).execute())

    console.print("\n[bold cyan]Pinned Labels[/]")
    labels_input = inquirer.text(
        message="Labels that protect a resource (comma-separated, key or key=value):",
        default=", ".join(config.get("exclude_labels") or []),
    ).execute()

    console.print("\n[bold cyan]Resource Types[/]")
    current_types = config.get("include_types") or []
    include_types = inquirer.checkbox(
        message="Types to consider (none selected = all):",
        choices=[t.value for t in ResourceType],
        default=[t.value for t in ResourceType if t.value in current_types],
    ).execute()

    new_config = dict(config)
    new_config.update({
        "older_than_days": older_than_days,
        "min_size_bytes": min_size_mb * MB,
        "exclude_labels": [label.strip() for label in labels_input.split(",") if label.strip()],
        "include_types": include_types,
    })
    save_config(new_config)
    console.print("\n[green]Configuration saved successfully![/]")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    setup: bool = typer.Option(
        False,
        "--setup",
        help="Run configuration wizard to set defaults",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
    log_file: str | None = typer.Option(
        None,
        "--log-file",
        help="Append debug logs to this file",
    ),
) -> None:
    """Show Docker daemon status and disk usage.

    Examples:

        docktidy                          # Status and disk usage dashboard

        docktidy candidates               # What could be pruned, with risk levels

        docktidy prune --older-than 30    # Dry run over resources unused for 30 days

        docktidy prune --execute          # Actually remove after selection
    """
    setup_logging(verbose, log_file)

    # If a subcommand is invoked, don't run main
    if ctx.invoked_subcommand is not None:
        return

    config = load_config()

    if setup:
        run_setup_wizard(config)
        raise typer.Exit(0)

    status, usage = docker_status_and_usage(lambda: make_service(config), text)
    style = STATUS_STYLES[status.level]
    console.print(
        Panel.fit(
            f"[bold cyan]{text.get(txt.KEY_APP_TAGLINE)}[/]\n\n"
            f"{text.get(txt.KEY_WELCOME_MESSAGE)}\n\n"
            f"[{style}]{escape(status.message)}[/]",
            border_style="cyan",
        )
    )
    display_disk_usage(console, usage, text)


def _options(
    config: dict,
    older_than: int | None,
    min_size_mb: int | None,
    types: list[str] | None,
    exclude_labels: list[str] | None,
    force: bool,
) -> PruneOptions:
    try:
        include_types = parse_types(types) if types else None
    except ValueError:
        valid = ", ".join(t.value for t in ResourceType)
        raise typer.BadParameter(f"type must be one of: {valid}", param_hint="--type")

    labels = None
    if exclude_labels:
        labels = frozenset(config.get("exclude_labels") or []) | frozenset(exclude_labels)

    return build_prune_options(
        config,
        force=force,
        older_than_days=older_than,
        min_size_bytes=min_size_mb * MB if min_size_mb is not None else None,
        include_types=include_types,
        exclude_labels=labels,
    )


def _classify(
    config: dict,
    options: PruneOptions,
    service: DockerService,
    store: MemoryHistoryStore,
) -> ClassificationResult:
    try:
        with console.status("[bold green]Inspecting Docker resources..."):
            resources = service.list_resources(options.include_types)
    except DocktidyError as e:
        console.print(f"[red]{text.get(txt.KEY_DOCKER_STATUS_DEGRADED)} ({escape(str(e))})[/]")
        raise typer.Exit(1)

    # Only affects risk when the store outlives this run; a fresh store yields no SAFE candidates.
    record_observations(store, resources)
    return classify_resources(resources, options, store=store, policy=build_policy(config))


@app.command()
def candidates(
    older_than: int | None = typer.Option(
        None,
        "--older-than",
        "-o",
        help="Only resources unused for at least X days",
    ),
    min_size: int | None = typer.Option(
        None,
        "--min-size",
        "-m",
        help="Ignore resources smaller than X MB",
    ),
    types: list[str] | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Resource types to consider (can specify multiple)",
    ),
    exclude_labels: list[str] | None = typer.Option(
        None,
        "--exclude-label",
        "-l",
        help="Never touch resources carrying this label (key or key=value)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Ignore the age filter (pins and in-use resources are still protected)",
    ),
) -> None:
    """List resources that could be pruned, with risk levels."""
    config = load_config()
    options = _options(config, older_than, min_size, types, exclude_labels, force)
    result = _classify(config, options, make_service(config), MemoryHistoryStore())

    console.print(f"\nInspected {result.total_resources} resources")
    display_candidates(console, result.candidates, text)
    display_exclusions(console, result.exclusions, text)


@app.command()
def prune(
    older_than: int | None = typer.Option(
        None,
        "--older-than",
        "-o",
        help="Only resources unused for at least X days",
    ),
    min_size: int | None = typer.Option(
        None,
        "--min-size",
        "-m",
        help="Ignore resources smaller than X MB",
    ),
    types: list[str] | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Resource types to consider (can specify multiple)",
    ),
    exclude_labels: list[str] | None = typer.Option(
        None,
        "--exclude-label",
        "-l",
        help="Never touch resources carrying this label (key or key=value)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Ignore the age filter (pins and in-use resources are still protected)",
    ),
    select_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Select every candidate instead of prompting",
    ),
    execute: bool = typer.Option(
        False,
        "--execute",
        "-e",
        help="Actually remove selected resources (default: dry run)",
    ),
) -> None:
    """Select and remove unused resources.

    By default runs in dry-run mode. Use --execute to actually remove.

    Examples:

        docktidy prune                          # Dry run with config defaults

        docktidy prune --type image --type container

        docktidy prune --exclude-label keep     # Protect anything labelled "keep"

        docktidy prune --execute                # Remove after selection
    """
    config = load_config()
    options = _options(config, older_than, min_size, types, exclude_labels, force)
    options = dataclasses.replace(options, dry_run=not execute)

    mode_text = "[red]EXECUTE MODE[/]" if execute else "[yellow]DRY RUN[/]"
    console.print(
        Panel.fit(
            f"[bold cyan]docktidy prune[/]\n\n"
            f"Mode: {mode_text}\n"
            f"Unused for: >= {options.older_than_days} days"
            + (" [red](forced)[/]" if options.force else ""),
            border_style="cyan",
        )
    )

    service = make_service(config)
    store = MemoryHistoryStore()
    result = _classify(config, options, service, store)

    if not result.candidates:
        console.print(f"\n[green]{text.get(txt.KEY_CANDIDATES_EMPTY)}[/]")
        raise typer.Exit(0)

    display_candidates(console, result.candidates, text)

    if select_all:
        selected = list(result.candidates)
    else:
        choices = [
            Choice(
                value=idx,
                name=f"[{c.risk_level.value}] {c.type.value} {c.resource.name or c.resource.short_id}"
                f" - {c.resource.size_human}",
                enabled=c.risk_level is RiskLevel.SAFE,
            )
            for idx, c in enumerate(result.candidates)
        ]
        console.print("\n")
        picked = inquirer.checkbox(
            message="Select resources to remove (space to toggle, enter to confirm):",
            choices=choices,
            instruction="(Use arrow keys to navigate, space to select, enter to confirm)",
        ).execute()
        selected = [result.candidates[idx] for idx in picked]

    if not selected:
        console.print("\n[yellow]Nothing selected. Exiting.[/]")
        raise typer.Exit(0)

    total_to_reclaim = sum(c.size for c in selected)
    console.print(f"\n[bold]Total to reclaim:[/] {format_size(total_to_reclaim)}")

    high_risk = [c for c in selected if c.risk_level is RiskLevel.HIGH]
    if execute:
        if high_risk:
            console.print(f"\n[bold red]{len(high_risk)} selected resources are HIGH risk.[/]")
        if not Confirm.ask(f"\n[bold red]{text.get(txt.KEY_PRUNE_CONFIRM)}[/]"):
            console.print(f"[yellow]{text.get(txt.KEY_PRUNE_CANCELLED)}[/]")
            raise typer.Exit(0)

    coordinator = PruneCoordinator(service, store)
    with console.status("[bold]Cleaning up..."):
        prune_result = coordinator.execute(selected, options)

    display_prune_result(console, prune_result)
    if not execute:
        console.print(f"\n[yellow]{text.get(txt.KEY_PRUNE_DRY_RUN)}[/]")
    if prune_result.errors:
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Print version information."""
    try:
        current = package_version("docktidy")
    except PackageNotFoundError:
        current = "dev"
    console.print(f"docktidy {current}")


if __name__ == "__main__":
    app()
