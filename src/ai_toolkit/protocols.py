"""Protocol definitions for core abstractions.

This module defines abstract interfaces (Protocols) for the collaborators
of the install engine. Designing to interfaces enables:
- Loose coupling between components
- Easy substitution of test doubles
- Clear contracts for implementations

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from ai_toolkit.types import (
    DuplicateAction,
    InstallRequest,
    InstallResult,
    ResourceType,
    Scope,
)


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for filesystem operations.

    Abstracts filesystem access to enable testing without real I/O.
    """

    def read_text(self, path: Path) -> str:
        """Read text content from a file.

        Args:
            path: Path to the file.

        Returns:
            File content as string.

        Raises:
            FileNotFoundError: If file does not exist.
        """
        ...

    def exists(self, path: Path) -> bool:
        """Check if a path exists.

        Args:
            path: Path to check.

        Returns:
            True if path exists, False otherwise.
        """
        ...

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a file byte-for-byte.

        Args:
            src: Existing file.
            dst: Destination file.
        """
        ...

    def atomic_write(self, path: Path, content: str) -> None:
        """Write a file via temp file and rename.

        Args:
            path: Destination file.
            content: Text to write.
        """
        ...


@runtime_checkable
class AgentPathResolver(Protocol):
    """Protocol for agent install path lookup."""

    def resolve_agent_path(
        self, agent: str, resource_type: ResourceType, scope: Scope
    ) -> Path | None:
        """Get the base directory for a resource type of an agent.

        Args:
            agent: Agent key (e.g. "claude-code").
            resource_type: Resource type.
            scope: Installation scope.

        Returns:
            Base directory, or None if the agent does not support the type.

        Raises:
            ValueError: If the agent is unknown.
        """
        ...

    def get_agent_name(self, agent: str) -> str:
        """Get the display name for an agent."""
        ...


@runtime_checkable
class DuplicatePrompt(Protocol):
    """Protocol for the interactive side of the compare strategy."""

    def prompt_compare_choice(
        self,
        resource_name: str,
        target_path: Path,
        existing_content: str,
        new_content: str,
    ) -> DuplicateAction:
        """Show a diff and ask how to resolve the duplicate.

        Returns:
            One of SKIP, OVERWRITE or BACKUP.
        """
        ...


@runtime_checkable
class ResourceInstaller(Protocol):
    """Protocol for the install engine."""

    def install(self, requests: list[InstallRequest]) -> list[InstallResult]:
        """Install resources, one result per request in request order."""
        ...
