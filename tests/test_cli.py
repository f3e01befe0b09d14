"""Tests for CLI commands using context injection.

Commands accept a _context parameter for dependency injection, enabling unit
tests without mocking module-level imports.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from ai_toolkit import __version__, cli
from ai_toolkit.batch import BatchAction
from ai_toolkit.context import AppContext
from ai_toolkit.install import InvalidRequestError
from ai_toolkit.source import SourceError
from ai_toolkit.types import (
    DuplicateAction,
    InstallAction,
    InstallResult,
    ResourceType,
    Scope,
)

runner = CliRunner()


def _created(name: str, agent: str = "claude-code") -> InstallResult:
    return InstallResult(
        resource_name=name,
        agent=agent,
        success=True,
        action=InstallAction.CREATED,
        path=f".claude/skills/{name}/SKILL.md",
    )


def _failed(name: str) -> InstallResult:
    return InstallResult(
        resource_name=name,
        agent="cursor",
        success=False,
        action=InstallAction.FAILED,
        path="",
        error="Cursor does not support agents",
    )


@pytest.fixture
def mock_context(make_resource) -> AppContext:
    """Create an AppContext with mocked collaborators and a real batch handler."""
    resolver = MagicMock()
    resolver.get_agents.return_value = ["claude-code", "cursor"]
    loader = MagicMock()
    loader.load.return_value = [make_resource(name="commit")]
    installer = MagicMock()
    installer.install.side_effect = lambda requests: [
        _created(r.resource.name, r.agent) for r in requests
    ]
    return AppContext(resolver=resolver, loader=loader, installer=installer, tui=MagicMock())


def _install(ctx: AppContext, **kwargs) -> None:
    options = {
        "source": "./skills",
        "resource_type": ResourceType.SKILLS,
        "agents": None,
        "scope": Scope.PROJECT,
        "on_duplicate": None,
        "batch": None,
        "yes": False,
        "names": None,
        "propagate_siblings": False,
    }
    options.update(kwargs)
    cli.install(**options, _context=ctx)


def _requests(ctx: AppContext) -> list:
    return ctx.installer.install.call_args.args[0]


@pytest.fixture
def non_interactive():
    with patch("ai_toolkit.cli._stdin_is_tty", return_value=False):
        yield


@pytest.fixture
def interactive():
    with patch("ai_toolkit.cli._stdin_is_tty", return_value=True):
        yield


@pytest.mark.usefixtures("non_interactive")
class TestInstallCommand:
    """Tests for the install command."""

    def test_default_agent_and_action(self, mock_context: AppContext) -> None:
        """Without options, installs for claude-code and skips duplicates."""
        # Act
        _install(mock_context)

        # Assert
        requests = _requests(mock_context)
        assert [(r.agent, r.on_duplicate) for r in requests] == [
            ("claude-code", DuplicateAction.SKIP)
        ]
        mock_context.tui.show_results.assert_called_once()
        assert mock_context.tui.show_results.call_args.args[1] == "1 created"

    def test_requests_per_agent_and_resource(
        self, mock_context: AppContext, make_resource
    ) -> None:
        """One request is built for every agent and resource pair."""
        # Arrange
        mock_context.loader.load.return_value = [
            make_resource(name="a"),
            make_resource(name="b"),
        ]

        # Act
        _install(
            mock_context,
            agents="claude-code, cursor",
            scope=Scope.GLOBAL,
            on_duplicate=DuplicateAction.RENAME,
        )

        # Assert
        requests = _requests(mock_context)
        assert [(r.agent, r.resource.name) for r in requests] == [
            ("claude-code", "a"),
            ("claude-code", "b"),
            ("cursor", "a"),
            ("cursor", "b"),
        ]
        assert {r.scope for r in requests} == {Scope.GLOBAL}
        assert {r.on_duplicate for r in requests} == {DuplicateAction.RENAME}

    def test_yes_overwrites(self, mock_context: AppContext) -> None:
        _install(mock_context, yes=True)

        assert _requests(mock_context)[0].on_duplicate is DuplicateAction.OVERWRITE

    def test_batch_option_applies_to_all(self, mock_context: AppContext) -> None:
        """--batch overrides the per-request action."""
        _install(mock_context, on_duplicate=DuplicateAction.RENAME, batch=BatchAction.BACKUP_ALL)

        assert _requests(mock_context)[0].on_duplicate is DuplicateAction.BACKUP

    def test_name_filter(self, mock_context: AppContext, make_resource) -> None:
        mock_context.loader.load.return_value = [
            make_resource(name="a"),
            make_resource(name="b"),
        ]

        _install(mock_context, names=["b"])

        assert [r.resource.name for r in _requests(mock_context)] == ["b"]

    def test_missing_name_exits(self, mock_context: AppContext) -> None:
        with pytest.raises(typer.Exit) as exc_info:
            _install(mock_context, names=["missing"])

        assert exc_info.value.exit_code == 1
        mock_context.installer.install.assert_not_called()

    def test_unknown_agent_exits(self, mock_context: AppContext) -> None:
        """Unknown agents are rejected before anything is installed."""
        with pytest.raises(typer.Exit) as exc_info:
            _install(mock_context, agents="claude-code,nope")

        assert exc_info.value.exit_code == 1
        assert "nope" in mock_context.tui.show_error.call_args.args[0]
        mock_context.installer.install.assert_not_called()

    def test_source_error_exits(self, mock_context: AppContext) -> None:
        mock_context.loader.load.side_effect = SourceError("Path does not exist: ./skills")

        with pytest.raises(typer.Exit) as exc_info:
            _install(mock_context)

        assert exc_info.value.exit_code == 1
        mock_context.tui.show_error.assert_called_once_with("Path does not exist: ./skills")

    def test_remote_source_announced(self, mock_context: AppContext) -> None:
        """Remote repositories are announced before cloning."""
        _install(mock_context, source="https://github.com/acme/skills")

        mock_context.tui.show_info.assert_called_once_with(
            "Fetching https://github.com/acme/skills"
        )
        parsed = mock_context.loader.load.call_args.args[0]
        assert parsed.cache_name == "acme__skills"

    def test_no_resources_warns(self, mock_context: AppContext) -> None:
        mock_context.loader.load.return_value = []

        _install(mock_context, resource_type=ResourceType.RULES)

        mock_context.tui.show_warning.assert_called_once_with("No rules found in ./skills")
        mock_context.installer.install.assert_not_called()

    def test_failures_exit_nonzero(self, mock_context: AppContext) -> None:
        """A failed result is shown and the command exits with status 1."""
        mock_context.installer.install.side_effect = None
        mock_context.installer.install.return_value = [_created("commit"), _failed("review")]

        with pytest.raises(typer.Exit) as exc_info:
            _install(mock_context)

        assert exc_info.value.exit_code == 1
        assert mock_context.tui.show_results.call_args.args[1] == "1 created, 1 failed"

    def test_invalid_request_exits(self, mock_context: AppContext) -> None:
        mock_context.installer.install.side_effect = InvalidRequestError("bad name")

        with pytest.raises(typer.Exit):
            _install(mock_context)

        mock_context.tui.show_error.assert_called_once_with("bad name")
        mock_context.tui.show_results.assert_not_called()

    def test_no_batch_prompt(self, mock_context: AppContext) -> None:
        """Non-interactive runs never prompt."""
        _install(mock_context, agents="claude-code,cursor")

        mock_context.tui.prompt_batch_action.assert_not_called()


@pytest.mark.usefixtures("interactive")
class TestInteractiveInstall:
    """Tests for install defaults when stdin is a terminal."""

    def test_defaults_to_compare(self, mock_context: AppContext) -> None:
        _install(mock_context)

        assert _requests(mock_context)[0].on_duplicate is DuplicateAction.COMPARE
        mock_context.tui.prompt_batch_action.assert_not_called()

    def test_asks_batch_action_for_several(self, mock_context: AppContext) -> None:
        """Several requests without --on-duplicate ask for a batch action."""
        mock_context.tui.prompt_batch_action.return_value = BatchAction.SKIP_ALL

        _install(mock_context, agents="claude-code,cursor")

        mock_context.tui.prompt_batch_action.assert_called_once_with(2)
        assert {r.on_duplicate for r in _requests(mock_context)} == {DuplicateAction.SKIP}

    def test_explicit_action_skips_batch_prompt(self, mock_context: AppContext) -> None:
        _install(mock_context, agents="claude-code,cursor", on_duplicate=DuplicateAction.BACKUP)

        mock_context.tui.prompt_batch_action.assert_not_called()


class TestAgentsCommand:
    """Tests for the agents command."""

    def test_list_agents(self, mock_context: AppContext) -> None:
        cli.list_agents(_context=mock_context)

        mock_context.tui.show_agents.assert_called_once_with(mock_context.resolver)


class TestCliRunner:
    """Tests running the Typer app end to end."""

    def test_version(self) -> None:
        result = runner.invoke(cli.app, ["--version"])

        assert result.exit_code == 0
        assert f"ai-toolkit v{__version__}" in result.output

    def test_install_local_skills(
        self, project_dir: Path, sample_skill_content: str, tmp_path: Path
    ) -> None:
        """Installing twice creates the skill then skips the identical copy."""
        source = tmp_path / "source" / "github"
        source.mkdir(parents=True)
        (source / "SKILL.md").write_text(sample_skill_content)
        (source / "notes.md").write_text("notes")
        args = ["install", str(tmp_path / "source"), "--on-duplicate", "skip"]

        first = runner.invoke(cli.app, args)
        second = runner.invoke(cli.app, args)

        assert first.exit_code == 0, first.output
        assert second.exit_code == 0, second.output
        installed = project_dir / ".claude" / "skills" / "github"
        assert (installed / "SKILL.md").read_text() == sample_skill_content
        assert (installed / "notes.md").read_text() == "notes"
        assert "1 skipped" in second.output
