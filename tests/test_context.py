"""Tests for context module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ai_toolkit.agents import ConfigError
from ai_toolkit.batch import BatchHandler
from ai_toolkit.context import AppContext, create_context
from ai_toolkit.filesystem import RealFileSystem
from ai_toolkit.tui import TUI


class TestAppContext:
    """Tests for AppContext dataclass."""

    def test_create_with_all_dependencies(self) -> None:
        """Test creating context with all dependencies."""
        resolver = MagicMock()
        loader = MagicMock()
        installer = MagicMock()
        tui = MagicMock()
        ctx = AppContext(resolver=resolver, loader=loader, installer=installer, tui=tui)

        assert ctx.resolver is resolver
        assert ctx.loader is loader
        assert ctx.installer is installer
        assert ctx.tui is tui

    def test_defaults(self) -> None:
        """Test context creates a default batch handler."""
        ctx = AppContext(
            resolver=MagicMock(), loader=MagicMock(), installer=MagicMock(), tui=MagicMock()
        )

        assert isinstance(ctx.batch, BatchHandler)


class TestCreateContext:
    """Tests for create_context factory function."""

    def test_wires_dependencies(self, temp_config_dir: Path, tmp_path: Path) -> None:
        """The installer shares the context resolver and one real filesystem."""
        ctx = create_context(config_dir=temp_config_dir, cache_dir=tmp_path / "cache")

        assert ctx.installer.path_resolver is ctx.resolver
        assert isinstance(ctx.installer.fs, RealFileSystem)
        assert ctx.installer.duplicates.fs is ctx.installer.fs
        assert ctx.loader.gitops.cache_dir == tmp_path / "cache"
        assert isinstance(ctx.tui, TUI)

    def test_interactive_wires_prompt(self, temp_config_dir: Path) -> None:
        """The compare strategy asks through the TUI only when interactive."""
        interactive = create_context(config_dir=temp_config_dir)
        batch_mode = create_context(config_dir=temp_config_dir, interactive=False)

        assert interactive.installer.duplicates.prompt is interactive.tui
        assert batch_mode.installer.duplicates.prompt is None

    def test_engine_options(self, temp_config_dir: Path, tmp_path: Path) -> None:
        ctx = create_context(
            config_dir=temp_config_dir,
            project_root=tmp_path,
            propagate_siblings_on_duplicate=True,
        )

        assert ctx.installer.project_root == tmp_path
        assert ctx.installer.propagate_siblings_on_duplicate is True

    def test_invalid_config_raises(self, temp_config_dir: Path) -> None:
        (temp_config_dir / "agents.json").write_text("[")

        with pytest.raises(ConfigError):
            create_context(config_dir=temp_config_dir)
