"""Shared data types for the resource installer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

__all__ = [
    "DuplicateAction",
    "InstallAction",
    "InstallRequest",
    "InstallResult",
    "Resource",
    "ResourceMetadata",
    "ResourceType",
    "Scope",
    "SiblingFile",
]


class ResourceType(str, Enum):
    """Kind of resource; selects the target subdirectory and primary filename."""

    SKILLS = "skills"
    RULES = "rules"
    AGENTS = "agents"
    COMMANDS = "commands"


class Scope(str, Enum):
    """Installation locality."""

    PROJECT = "project"
    GLOBAL = "global"


class DuplicateAction(str, Enum):
    """How to resolve an existing file at the target path."""

    SKIP = "skip"
    OVERWRITE = "overwrite"
    RENAME = "rename"
    BACKUP = "backup"
    COMPARE = "compare"
    FAIL = "fail"


class InstallAction(str, Enum):
    """Outcome recorded for one install request."""

    CREATED = "created"
    SKIPPED = "skipped"
    OVERWRITTEN = "overwritten"
    RENAMED = "renamed"
    BACKED_UP = "backed-up"
    FAILED = "failed"


@dataclass(frozen=True)
class SiblingFile:
    """Auxiliary file installed next to the primary resource file.

    Attributes:
        relative_path: Path relative to the resource's install directory.
        content: File content.
    """

    relative_path: str
    content: str


@dataclass(frozen=True)
class ResourceMetadata:
    """Optional descriptive metadata taken from frontmatter."""

    author: str | None = None
    version: str | None = None
    license: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class Resource:
    """A named content unit to be installed.

    Attributes:
        name: Directory name used at install time.
        type: Resource type.
        description: Short human description.
        content: Primary file text (frontmatter included, opaque here).
        metadata: Optional author/version/license/category.
        source_path: Original location, informational only.
        sibling_files: Files installed alongside the primary file.
    """

    name: str
    type: ResourceType
    content: str
    description: str = ""
    metadata: ResourceMetadata = field(default_factory=ResourceMetadata)
    source_path: str = ""
    sibling_files: tuple[SiblingFile, ...] = ()


@dataclass(frozen=True)
class InstallRequest:
    """One unit of work for the install engine."""

    resource: Resource
    agent: str
    scope: Scope
    on_duplicate: DuplicateAction


@dataclass
class InstallResult:
    """Result of a single install request.

    Attributes:
        resource_name: Name of the resource.
        agent: Target agent key.
        success: True unless action is FAILED.
        action: What happened at the target.
        path: Final file location ("" when the target could not be resolved).
        backup_path: Where the previous content went (BACKED_UP only).
        renamed_to: New location (RENAMED only, equals path).
        error: Error message (failures only).
    """

    resource_name: str
    agent: str
    success: bool
    action: InstallAction
    path: str
    backup_path: str | None = None
    renamed_to: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.resource_name:
            raise ValueError("resource_name cannot be empty")
        if self.success == (self.action is InstallAction.FAILED):
            raise ValueError("success must be False exactly when action is 'failed'")
        if self.success and self.error is not None:
            raise ValueError("success=True but error is set")
        if not self.success and self.error is None:
            raise ValueError("success=False requires error message")
        if (self.backup_path is not None) != (self.action is InstallAction.BACKED_UP):
            raise ValueError("backup_path is set only for 'backed-up' results")
        if (self.renamed_to is not None) != (self.action is InstallAction.RENAMED):
            raise ValueError("renamed_to is set only for 'renamed' results")
        if self.renamed_to is not None and self.renamed_to != self.path:
            raise ValueError("renamed_to must equal path")
