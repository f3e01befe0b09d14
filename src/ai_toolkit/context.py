"""Application context for dependency injection.

This module separates object creation from object use, enabling testability
and reducing coupling in CLI commands. The install engine is constructed
here and handed to commands explicitly; no module holds a shared instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ai_toolkit.batch import BatchHandler
from ai_toolkit.protocols import ResourceInstaller

if TYPE_CHECKING:
    from ai_toolkit.agents import PathResolver
    from ai_toolkit.discovery import ResourceLoader
    from ai_toolkit.tui import TUI


@dataclass
class AppContext:
    """Container for application dependencies.

    Provides a single injection point for all services used by CLI commands.
    """

    resolver: PathResolver
    loader: ResourceLoader
    installer: ResourceInstaller
    tui: TUI
    batch: BatchHandler = field(default_factory=BatchHandler)


def create_context(
    config_dir: Path | None = None,
    cache_dir: Path | None = None,
    project_root: Path | None = None,
    interactive: bool = True,
    propagate_siblings_on_duplicate: bool = False,
) -> AppContext:
    """Factory for application dependencies.

    Creates all services with proper wiring. Use this in production code.
    For tests, construct AppContext directly with test doubles.

    Args:
        config_dir: Override configuration directory (for testing).
        cache_dir: Override git cache directory (for testing).
        project_root: Base directory for project-scope installs.
        interactive: Wire the console prompt into the compare strategy.
        propagate_siblings_on_duplicate: Write sibling files on every
            duplicate resolution, not only on creation.

    Returns:
        Configured AppContext with all dependencies.

    Raises:
        ConfigError: If the agent configuration file is invalid.
    """
    from ai_toolkit.agents import PathResolver
    from ai_toolkit.discovery import ResourceLoader
    from ai_toolkit.gitops import GitOps
    from ai_toolkit.install import InstallManager
    from ai_toolkit.tui import TUI

    resolver = PathResolver.create(config_dir)
    gitops = GitOps.create(cache_dir) if cache_dir else GitOps.create_default()
    tui = TUI()
    installer = InstallManager.create(
        path_resolver=resolver,
        prompt=tui if interactive else None,
        project_root=project_root,
        propagate_siblings_on_duplicate=propagate_siblings_on_duplicate,
    )

    return AppContext(
        resolver=resolver,
        loader=ResourceLoader(gitops),
        installer=installer,
        tui=tui,
        batch=BatchHandler(),
    )
