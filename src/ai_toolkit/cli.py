"""CLI commands using Typer."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from ai_toolkit.context import AppContext
    from ai_toolkit.types import Resource

import typer
from rich.console import Console

from ai_toolkit import __version__
from ai_toolkit.agents import ConfigError
from ai_toolkit.batch import BatchAction
from ai_toolkit.context import create_context
from ai_toolkit.gitops import GitOpsError
from ai_toolkit.install import InvalidRequestError
from ai_toolkit.source import SourceError, parse_source
from ai_toolkit.tui import TUI
from ai_toolkit.types import DuplicateAction, InstallRequest, ResourceType, Scope

app = typer.Typer(
    name="ai-toolkit",
    help="Universal resource installer for AI coding agents",
    no_args_is_help=True,
)

console = Console()
tui = TUI(console)

DEFAULT_AGENTS = "claude-code"


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"ai-toolkit v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Universal resource installer for AI coding agents."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )


def _load_context(interactive: bool, propagate_siblings: bool = False) -> AppContext:
    """Create the application context, exiting on configuration errors."""
    try:
        return create_context(
            interactive=interactive,
            propagate_siblings_on_duplicate=propagate_siblings,
        )
    except ConfigError as e:
        tui.show_error(str(e))
        raise typer.Exit(1) from e


# ============================================================================
# Install Command
# ============================================================================


def _parse_agents(ctx: AppContext, agents_arg: str | None) -> list[str]:
    """Parse and validate a comma-separated agent list.

    Raises:
        typer.Exit: If an agent is unknown.
    """
    agents = [a.strip() for a in (agents_arg or DEFAULT_AGENTS).split(",") if a.strip()]
    known = ctx.resolver.get_agents()
    unknown = [a for a in agents if a not in known]
    if unknown or not agents:
        ctx.tui.show_error(
            f"Unknown agent(s): {', '.join(unknown) or '(none given)'}. "
            f"Supported: {', '.join(known)}"
        )
        raise typer.Exit(1)
    return agents


def _stdin_is_tty() -> bool:
    return sys.stdin.isatty()


def _default_duplicate_action(yes: bool, interactive: bool) -> DuplicateAction:
    """Pick the duplicate action when --on-duplicate is not given."""
    if yes:
        return DuplicateAction.OVERWRITE
    if interactive:
        return DuplicateAction.COMPARE
    return DuplicateAction.SKIP


def _load_resources(
    ctx: AppContext, source: str, resource_type: ResourceType, names: list[str] | None
) -> list[Resource]:
    """Resolve the source and load the requested resources.

    Raises:
        typer.Exit: If the source cannot be read or a name is not found.
    """
    try:
        parsed = parse_source(source)
        if parsed.is_remote_repo:
            ctx.tui.show_info(f"Fetching {parsed.url}")
        resources = ctx.loader.load(parsed, resource_type)
    except (SourceError, GitOpsError) as e:
        ctx.tui.show_error(str(e))
        raise typer.Exit(1) from e

    if not names:
        return resources

    selected = [r for r in resources if r.name in names]
    missing = sorted(set(names) - {r.name for r in selected})
    if missing:
        ctx.tui.show_error(f"Resource(s) not found in {source}: {', '.join(missing)}")
        raise typer.Exit(1)
    return selected


@app.command()
def install(
    source: Annotated[str, typer.Argument(help="Local path, owner/repo, git URL or file URL")],
    resource_type: Annotated[
        ResourceType, typer.Option("--type", "-t", help="Resource type to install")
    ] = ResourceType.SKILLS,
    agents: Annotated[
        str | None, typer.Option("--agents", "-a", help="Target agents (comma-separated)")
    ] = None,
    scope: Annotated[Scope, typer.Option("--scope", "-s", help="Install scope")] = Scope.PROJECT,
    on_duplicate: Annotated[
        DuplicateAction | None,
        typer.Option("--on-duplicate", "-d", help="How to handle existing files"),
    ] = None,
    batch: Annotated[
        BatchAction | None,
        typer.Option("--batch", "-b", help="Duplicate handling applied to every resource"),
    ] = None,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Overwrite without asking")
    ] = False,
    names: Annotated[
        list[str] | None, typer.Option("--name", "-n", help="Only install these resources")
    ] = None,
    propagate_siblings: Annotated[
        bool,
        typer.Option(
            "--propagate-siblings",
            help="Also write sibling files when resolving duplicates",
        ),
    ] = False,
    _context=None,
) -> None:
    """Install skills, rules, agents or commands from a source."""
    interactive = _stdin_is_tty() and not yes
    ctx = _context or _load_context(interactive, propagate_siblings)

    resources = _load_resources(ctx, source, resource_type, names)
    if not resources:
        ctx.tui.show_warning(f"No {resource_type.value} found in {source}")
        return

    agent_keys = _parse_agents(ctx, agents)
    action = on_duplicate or _default_duplicate_action(yes, interactive)
    requests = [
        InstallRequest(resource=resource, agent=agent, scope=scope, on_duplicate=action)
        for agent in agent_keys
        for resource in resources
    ]

    if batch is None and interactive and on_duplicate is None and len(requests) > 1:
        batch = ctx.tui.prompt_batch_action(len(requests))
    if batch is not None:
        requests = ctx.batch.apply_batch_action(requests, batch)

    try:
        results = ctx.installer.install(requests)
    except InvalidRequestError as e:
        ctx.tui.show_error(str(e))
        raise typer.Exit(1) from e

    summary = ctx.batch.format_summary(ctx.batch.summarize_results(results))
    ctx.tui.show_results(results, summary)

    if ctx.batch.has_failures(results):
        raise typer.Exit(1)


# ============================================================================
# Agent Commands
# ============================================================================


@app.command("agents")
def list_agents(
    _context=None,
) -> None:
    """List supported agents and their install paths."""
    ctx = _context or _load_context(interactive=False)
    ctx.tui.show_agents(ctx.resolver)


if __name__ == "__main__":
    app()
