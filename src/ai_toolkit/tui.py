"""Rich console components for installation output and prompts."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from ai_toolkit.batch import BatchAction
from ai_toolkit.diff import format_diff, generate_diff
from ai_toolkit.types import DuplicateAction, InstallAction, InstallResult

if TYPE_CHECKING:
    from ai_toolkit.agents import PathResolver

# Icon and style per result action
ACTION_STYLES: dict[InstallAction, tuple[str, str]] = {
    InstallAction.CREATED: ("✓", "green"),
    InstallAction.SKIPPED: ("-", "dim"),
    InstallAction.OVERWRITTEN: ("~", "yellow"),
    InstallAction.RENAMED: (">", "cyan"),
    InstallAction.BACKED_UP: ("^", "magenta"),
    InstallAction.FAILED: ("✗", "red"),
}

COMPARE_CHOICES = {
    "s": DuplicateAction.SKIP,
    "o": DuplicateAction.OVERWRITE,
    "b": DuplicateAction.BACKUP,
}

BATCH_CHOICES = {
    "a": BatchAction.ASK_EACH,
    "s": BatchAction.SKIP_ALL,
    "o": BatchAction.OVERWRITE_ALL,
    "b": BatchAction.BACKUP_ALL,
}


class TUI:
    """Text User Interface for ai-toolkit.

    Satisfies the DuplicatePrompt protocol structurally.
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize TUI.

        Args:
            console: Console to print to. A new one is created if omitted.
        """
        self.console = console or Console()

    def show_error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def show_warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def show_info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {escape(message)}")

    def show_agents(self, resolver: PathResolver) -> None:
        """Display the agent table.

        Args:
            resolver: Path resolver holding the agent registry.
        """
        table = Table(title="Agents")
        table.add_column("Key", style="cyan")
        table.add_column("Name")
        table.add_column("Types")
        table.add_column("Project paths")
        table.add_column("Global paths")

        for key in resolver.get_agents():
            config = resolver.get_agent_config(key)
            types = config.supported_types
            project = [config.paths.project.for_type(t) for t in types]
            global_ = [config.paths.global_.for_type(t) for t in types]
            table.add_row(
                key,
                config.name,
                ", ".join(t.value for t in types),
                "\n".join(p for p in project if p),
                "\n".join(p for p in global_ if p),
            )

        self.console.print(table)

    def show_results(self, results: list[InstallResult], summary: str) -> None:
        """Display per-resource results and the summary line.

        Args:
            results: Install results in request order.
            summary: Formatted summary, e.g. "2 created, 1 skipped".
        """
        if not results:
            self.console.print("[yellow]No resources to install[/yellow]")
            return

        table = Table(title="Installation Results")
        table.add_column("", width=1)
        table.add_column("Resource", style="cyan")
        table.add_column("Agent")
        table.add_column("Action")
        table.add_column("Path")

        for result in results:
            icon, style = ACTION_STYLES[result.action]
            detail = escape(result.path)
            if result.backup_path:
                detail = f"{detail}\n[dim](backup: {escape(result.backup_path)})[/dim]"
            if result.error:
                detail = f"[red]{escape(result.error)}[/red]"
            table.add_row(
                f"[{style}]{icon}[/{style}]",
                escape(result.resource_name),
                result.agent,
                f"[{style}]{result.action.value}[/{style}]",
                detail,
            )

        self.console.print(table)
        self.console.print(f"\n[bold]{summary}[/bold] (total: {len(results)})")

    def prompt_compare_choice(
        self,
        resource_name: str,
        target_path: Path,
        existing_content: str,
        new_content: str,
    ) -> DuplicateAction:
        """Show a diff of a duplicate and ask how to resolve it.

        Args:
            resource_name: Resource name for display.
            target_path: Path of the existing file.
            existing_content: Installed content.
            new_content: Incoming content.

        Returns:
            SKIP, OVERWRITE or BACKUP.
        """
        location = escape(str(target_path))
        self.console.print(f"\nComparing [bold]{escape(resource_name)}[/bold] ({location}):")
        diff_text = generate_diff(existing_content, new_content, resource_name)
        self.console.print(format_diff(diff_text))
        choice = Prompt.ask(
            "s = skip (keep existing), o = overwrite (use new version), "
            "b = backup and overwrite",
            choices=list(COMPARE_CHOICES),
            default="s",
            console=self.console,
        )
        return COMPARE_CHOICES[choice]

    def prompt_batch_action(self, count: int) -> BatchAction:
        """Ask how duplicates among several resources should be handled.

        Args:
            count: Number of resources about to be installed.

        Returns:
            Chosen batch action.
        """
        choice = Prompt.ask(
            f"Installing {count} resources. For existing files: a = ask each, "
            "s = skip all, o = overwrite all, b = backup all",
            choices=list(BATCH_CHOICES),
            default="a",
            console=self.console,
        )
        return BATCH_CHOICES[choice]
