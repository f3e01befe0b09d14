"""Agent registry and install path resolution."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ai_toolkit.types import ResourceType, Scope

logger = logging.getLogger(__name__)

# Default configuration location
CONFIG_DIR = Path.home() / ".ai-toolkit"
AGENTS_FILE_NAME = "agents.json"


class ConfigError(Exception):
    """Error loading user configuration."""

    pass


class AgentPaths(BaseModel):
    """Install directories for one scope. None means unsupported."""

    skills: str | None = None
    rules: str | None = None
    agents: str | None = None
    commands: str | None = None

    def for_type(self, resource_type: ResourceType) -> str | None:
        """Get the path template for a resource type."""
        return getattr(self, resource_type.value)


class ScopePaths(BaseModel):
    """Project and global directories of an agent."""

    model_config = ConfigDict(populate_by_name=True)

    project: AgentPaths
    global_: AgentPaths = Field(alias="global")


class AgentConfig(BaseModel):
    """Configuration for one AI coding agent."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    supported_types: list[ResourceType] = Field(alias="supportedTypes")
    paths: ScopePaths


class AgentRegistry(BaseModel):
    """Mapping of agent keys to their configuration."""

    agents: dict[str, AgentConfig] = Field(default_factory=dict)

    @classmethod
    def from_file(cls, path: Path) -> AgentRegistry:
        """Load an agent registry from a JSON file.

        The file holds an object keyed by agent key, in the same shape as
        the bundled table.

        Args:
            path: Path to agents.json.

        Returns:
            Parsed AgentRegistry.

        Raises:
            ConfigError: If the file is not valid JSON or fails validation.
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return cls.model_validate({"agents": data})
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid agent configuration in {path}: {e}") from e

    def merged_with(self, other: AgentRegistry) -> AgentRegistry:
        """Return a registry where entries of ``other`` replace or extend ours."""
        return AgentRegistry(agents={**self.agents, **other.agents})


def _paths(
    skills: str, rules: str, agents: str | None = None, commands: str | None = None
) -> AgentPaths:
    return AgentPaths(skills=skills, rules=rules, agents=agents, commands=commands)


DEFAULT_AGENTS = AgentRegistry(
    agents={
        "claude-code": AgentConfig(
            name="Claude Code",
            supported_types=[
                ResourceType.SKILLS,
                ResourceType.RULES,
                ResourceType.AGENTS,
                ResourceType.COMMANDS,
            ],
            paths=ScopePaths(
                project=_paths(
                    ".claude/skills/", ".claude/rules/", ".claude/agents/", ".claude/commands/"
                ),
                global_=_paths(
                    "~/.claude/skills/",
                    "~/.claude/rules/",
                    "~/.claude/agents/",
                    "~/.claude/commands/",
                ),
            ),
        ),
        "cursor": AgentConfig(
            name="Cursor",
            supported_types=[ResourceType.SKILLS, ResourceType.RULES],
            paths=ScopePaths(
                project=_paths(".cursor/skills/", ".cursor/rules/"),
                global_=_paths("~/.cursor/skills/", "~/.cursor/rules/"),
            ),
        ),
        "github-copilot": AgentConfig(
            name="GitHub Copilot",
            supported_types=[ResourceType.SKILLS, ResourceType.RULES],
            paths=ScopePaths(
                project=_paths(".github/skills/", ".github/instructions/"),
                global_=_paths("~/.copilot/skills/", "~/.copilot/instructions/"),
            ),
        ),
        "antigravity": AgentConfig(
            name="Antigravity",
            supported_types=[ResourceType.SKILLS, ResourceType.RULES],
            paths=ScopePaths(
                project=_paths(".agent/skills/", ".agent/rules/"),
                global_=_paths(
                    "~/.gemini/antigravity/skills/", "~/.gemini/antigravity/rules/"
                ),
            ),
        ),
    }
)


class PathResolver:
    """Resolves per-agent install directories and supported types.

    Satisfies the AgentPathResolver protocol structurally.
    """

    def __init__(self, registry: AgentRegistry) -> None:
        """Initialize the resolver.

        Args:
            registry: Agent table to resolve against.

        Note:
            Prefer using factory methods `create()` or `create_default()` for construction.
        """
        self.registry = registry

    @classmethod
    def create(cls, config_dir: Path | None = None) -> PathResolver:
        """Create a resolver from the bundled table plus optional user overrides.

        Args:
            config_dir: Directory holding agents.json. Defaults to ~/.ai-toolkit.

        Returns:
            Configured PathResolver.

        Raises:
            ConfigError: If agents.json exists but is invalid.
        """
        agents_file = (config_dir or CONFIG_DIR) / AGENTS_FILE_NAME
        registry = DEFAULT_AGENTS
        if agents_file.exists():
            logger.debug("Loading agent overrides from %s", agents_file)
            registry = registry.merged_with(AgentRegistry.from_file(agents_file))
        return cls(registry)

    @classmethod
    def create_default(cls) -> PathResolver:
        """Create a resolver with only the bundled agent table."""
        return cls(DEFAULT_AGENTS)

    def get_agents(self) -> list[str]:
        """Get all agent keys."""
        return list(self.registry.agents)

    def get_agent_config(self, agent: str) -> AgentConfig:
        """Get the configuration of an agent.

        Raises:
            ValueError: If the agent is unknown.
        """
        try:
            return self.registry.agents[agent]
        except KeyError:
            raise ValueError(
                f"Unknown agent: {agent}. Supported: {self.get_agents()}"
            ) from None

    def get_agent_name(self, agent: str) -> str:
        """Get the display name of an agent."""
        return self.get_agent_config(agent).name

    def get_supported_types(self, agent: str) -> list[ResourceType]:
        """Get the resource types an agent supports; empty for unknown agents."""
        config = self.registry.agents.get(agent)
        return list(config.supported_types) if config else []

    def is_type_supported(self, agent: str, resource_type: ResourceType) -> bool:
        """Check whether an agent supports a resource type."""
        return resource_type in self.get_supported_types(agent)

    def resolve_agent_path(
        self, agent: str, resource_type: ResourceType, scope: Scope
    ) -> Path | None:
        """Get the base install directory for a resource type.

        Args:
            agent: Agent key.
            resource_type: Resource type.
            scope: Installation scope.

        Returns:
            Directory path (tilde expanded), or None when unsupported.

        Raises:
            ValueError: If the agent is unknown.
        """
        config = self.get_agent_config(agent)
        if resource_type not in config.supported_types:
            return None
        paths = config.paths.project if scope is Scope.PROJECT else config.paths.global_
        template = paths.for_type(resource_type)
        if template is None:
            return None
        return _expand_tilde(template)


def _expand_tilde(template: str) -> Path:
    if template.startswith("~/"):
        return Path.home() / template[2:]
    return Path(template)
