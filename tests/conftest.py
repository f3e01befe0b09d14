"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ai_toolkit.agents import PathResolver
from ai_toolkit.install import InstallManager
from ai_toolkit.types import (
    DuplicateAction,
    InstallRequest,
    Resource,
    ResourceType,
    Scope,
    SiblingFile,
)


@pytest.fixture
def temp_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Override home directory for testing."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    return home


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory for project-scope installs."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """Create a temporary configuration directory."""
    config_dir = tmp_path / ".ai-toolkit"
    config_dir.mkdir(parents=True)
    return config_dir


# ============================================================================
# Engine Fixtures
# ============================================================================


@pytest.fixture
def resolver() -> PathResolver:
    """Path resolver with the bundled agent table."""
    return PathResolver.create_default()


@pytest.fixture
def mock_prompt() -> MagicMock:
    """Interactive compare prompt returning skip by default."""
    prompt = MagicMock()
    prompt.prompt_compare_choice.return_value = DuplicateAction.SKIP
    return prompt


@pytest.fixture
def manager(resolver: PathResolver, mock_prompt: MagicMock) -> InstallManager:
    """Install manager using the real filesystem relative to cwd."""
    return InstallManager.create(path_resolver=resolver, prompt=mock_prompt)


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock FileSystem for testing.

    The mock tracks all filesystem operations without touching real files.
    """
    fs = MagicMock()
    fs.exists.return_value = False
    fs.read_text.return_value = ""
    return fs


# ============================================================================
# Sample Content Fixtures
# ============================================================================


@pytest.fixture
def sample_skill_content() -> str:
    """Sample skill SKILL.md content."""
    return """---
name: github
description: GitHub operations skill
---

# GitHub Skill

Provides GitHub operations like creating PRs, issues, and comments.

## Commands

- `/pr-create`: Create a pull request
- `/issue-create`: Create an issue
"""


@pytest.fixture
def make_resource():
    """Factory for Resource objects."""

    def _make(
        name: str = "commit",
        content: str = "---\nname: commit\n---\nBody",
        resource_type: ResourceType = ResourceType.SKILLS,
        siblings: dict[str, str] | None = None,
    ) -> Resource:
        return Resource(
            name=name,
            type=resource_type,
            content=content,
            sibling_files=tuple(
                SiblingFile(relative_path=path, content=text)
                for path, text in (siblings or {}).items()
            ),
        )

    return _make


@pytest.fixture
def make_request(make_resource):
    """Factory for InstallRequest objects."""

    def _make(
        on_duplicate: DuplicateAction = DuplicateAction.SKIP,
        agent: str = "claude-code",
        scope: Scope = Scope.PROJECT,
        resource: Resource | None = None,
        **resource_kwargs,
    ) -> InstallRequest:
        return InstallRequest(
            resource=resource or make_resource(**resource_kwargs),
            agent=agent,
            scope=scope,
            on_duplicate=on_duplicate,
        )

    return _make
