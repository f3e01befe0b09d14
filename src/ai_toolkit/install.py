"""Installation of resources into agent directories."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from ai_toolkit.duplicates import DuplicateHandler, DuplicateInfo
from ai_toolkit.filesystem import RealFileSystem
from ai_toolkit.hashing import is_same_content
from ai_toolkit.protocols import AgentPathResolver, DuplicatePrompt, FileSystem
from ai_toolkit.types import (
    DuplicateAction,
    InstallAction,
    InstallRequest,
    InstallResult,
    Resource,
    ResourceType,
    Scope,
)

logger = logging.getLogger(__name__)

# Primary filename per resource type
RESOURCE_FILENAMES: dict[ResourceType, str] = {
    ResourceType.SKILLS: "SKILL.md",
    ResourceType.RULES: "RULES.md",
    ResourceType.COMMANDS: "COMMANDS.md",
    ResourceType.AGENTS: "AGENT.md",
}


class InvalidRequestError(ValueError):
    """An install request violates the caller contract."""

    pass


class UnsupportedResourceError(Exception):
    """The agent has no install location for the resource type."""

    pass


def get_resource_filename(resource_type: ResourceType) -> str:
    """Get the primary filename for a resource type."""
    return RESOURCE_FILENAMES[resource_type]


def validate_request(request: InstallRequest) -> None:
    """Check an install request before any work is done.

    Args:
        request: Request to check.

    Raises:
        InvalidRequestError: If the request is malformed.
    """
    if not isinstance(request, InstallRequest):
        raise InvalidRequestError(f"Expected InstallRequest, got {type(request).__name__}")
    if not isinstance(request.on_duplicate, DuplicateAction):
        raise InvalidRequestError(f"Unknown duplicate action: {request.on_duplicate!r}")
    if not isinstance(request.scope, Scope):
        raise InvalidRequestError(f"Unknown scope: {request.scope!r}")

    resource = request.resource
    if not isinstance(resource, Resource):
        raise InvalidRequestError(f"Expected Resource, got {type(resource).__name__}")
    if not isinstance(resource.type, ResourceType):
        raise InvalidRequestError(f"Unknown resource type: {resource.type!r}")
    name = resource.name
    if not name or name in (".", "..") or any(c in name for c in ("/", "\\", "\0")):
        raise InvalidRequestError(f"Resource name is not filesystem-safe: {name!r}")

    primary = get_resource_filename(resource.type)
    sibling_paths: set[PurePosixPath] = set()
    for sibling in resource.sibling_files:
        rel = PurePosixPath(sibling.relative_path.replace("\\", "/"))
        if not rel.parts or rel.is_absolute() or ".." in rel.parts:
            raise InvalidRequestError(
                f"Sibling file path escapes resource directory: {sibling.relative_path!r}"
            )
        if rel.parts[0] == primary:
            raise InvalidRequestError(
                f"Sibling file of {name!r} collides with primary file {primary}"
            )
        if rel in sibling_paths:
            raise InvalidRequestError(f"Duplicate sibling file path: {sibling.relative_path!r}")
        sibling_paths.add(rel)

    # A sibling cannot also be the directory of another sibling
    for rel in sorted(sibling_paths):
        for parent in rel.parents:
            if parent in sibling_paths:
                raise InvalidRequestError(
                    f"Sibling file {str(parent)!r} is also a directory of {str(rel)!r}"
                )


class InstallManager:
    """Installs resources with duplicate detection and resolution.

    Requests are processed one at a time, in order. Each request yields
    exactly one InstallResult; a failing request never stops the batch.

    Follows Separate Use from Creation: constructor requires all dependencies.
    Use factory method `create()` for production instantiation with defaults.
    """

    def __init__(
        self,
        path_resolver: AgentPathResolver,
        filesystem: FileSystem,
        duplicate_handler: DuplicateHandler,
        project_root: Path | None = None,
        propagate_siblings_on_duplicate: bool = False,
    ) -> None:
        """Initialize install manager with required dependencies.

        Args:
            path_resolver: Agent install path lookup.
            filesystem: Filesystem abstraction.
            duplicate_handler: Strategy implementations for collisions.
            project_root: Base for project-scope paths. Defaults to the
                current working directory (paths are reported relative).
            propagate_siblings_on_duplicate: Also write sibling files when a
                duplicate is overwritten, renamed or backed up.

        Note:
            Use factory method `create()` for production code.
        """
        self.path_resolver = path_resolver
        self.fs = filesystem
        self.duplicates = duplicate_handler
        self.project_root = project_root
        self.propagate_siblings_on_duplicate = propagate_siblings_on_duplicate

    @classmethod
    def create(
        cls,
        path_resolver: AgentPathResolver,
        prompt: DuplicatePrompt | None = None,
        filesystem: FileSystem | None = None,
        project_root: Path | None = None,
        propagate_siblings_on_duplicate: bool = False,
    ) -> InstallManager:
        """Factory method for production instantiation.

        Args:
            path_resolver: Agent install path lookup.
            prompt: Optional interactive collaborator for the compare strategy.
            filesystem: Optional filesystem abstraction (created if not provided).
            project_root: Optional base for project-scope paths.
            propagate_siblings_on_duplicate: See __init__.

        Returns:
            Configured InstallManager instance.
        """
        fs = filesystem or RealFileSystem()
        return cls(
            path_resolver=path_resolver,
            filesystem=fs,
            duplicate_handler=DuplicateHandler(fs, prompt),
            project_root=project_root,
            propagate_siblings_on_duplicate=propagate_siblings_on_duplicate,
        )

    def install(self, requests: list[InstallRequest]) -> list[InstallResult]:
        """Install resources.

        Args:
            requests: Install requests, processed in order.

        Returns:
            One InstallResult per request, in request order.

        Raises:
            InvalidRequestError: If any request is malformed. Raised before
                any request is processed.
        """
        for request in requests:
            validate_request(request)

        results: list[InstallResult] = []
        for request in requests:
            results.append(self._install_isolated(request))
        return results

    def resolve_target_path(self, resource: Resource, agent: str, scope: Scope) -> Path:
        """Resolve where the primary file of a resource is installed.

        Args:
            resource: Resource to install.
            agent: Target agent key.
            scope: Installation scope.

        Returns:
            ``<agent dir>/<resource name>/<primary filename>``.

        Raises:
            UnsupportedResourceError: If the agent does not support the type.
            ValueError: If the agent is unknown.
        """
        base_path = self.path_resolver.resolve_agent_path(agent, resource.type, scope)
        if base_path is None:
            agent_name = self.path_resolver.get_agent_name(agent)
            raise UnsupportedResourceError(
                f"{agent_name} does not support {resource.type.value}"
            )
        if self.project_root is not None and not base_path.is_absolute():
            base_path = self.project_root / base_path
        return base_path / resource.name / get_resource_filename(resource.type)

    def _install_isolated(self, request: InstallRequest) -> InstallResult:
        """Run one request, turning any exception into a failed result."""
        resource = request.resource
        target_path: Path | None = None
        try:
            target_path = self.resolve_target_path(resource, request.agent, request.scope)
            result = self._install_one(request, target_path)
        except AssertionError:
            raise
        except Exception as e:
            logger.exception("Installation failed for %s on %s", resource.name, request.agent)
            return InstallResult(
                resource_name=resource.name,
                agent=request.agent,
                success=False,
                action=InstallAction.FAILED,
                path=str(target_path) if target_path is not None else "",
                error=str(e) or type(e).__name__,
            )

        logger.debug("%s %s -> %s", result.action.value, resource.name, result.path)
        return result

    def _install_one(self, request: InstallRequest, target_path: Path) -> InstallResult:
        """Install a single resource to an already resolved target."""
        resource = request.resource
        duplicate = self.check_duplicate(target_path, resource.content)

        if duplicate is None:
            # Primary file last: its presence marks the resource as installed
            self._write_siblings(resource, target_path.parent)
            self.fs.atomic_write(target_path, resource.content)
            return self._result(request, InstallAction.CREATED, target_path)

        # Identical content is never rewritten, whatever the requested action
        if duplicate.is_same_content:
            return self._result(request, InstallAction.SKIPPED, target_path)

        action = request.on_duplicate
        if action is DuplicateAction.COMPARE:
            action = self.duplicates.compare(resource.name, duplicate)
        return self._apply(request, action, duplicate)

    def check_duplicate(self, path: Path, new_content: str) -> DuplicateInfo | None:
        """Read the existing file at the target, if any.

        Args:
            path: Target path.
            new_content: Content about to be installed.

        Returns:
            DuplicateInfo when a file exists, None otherwise.
        """
        if not self.fs.exists(path):
            return None
        existing_content = self.fs.read_text(path)
        return DuplicateInfo(
            path=path,
            existing_content=existing_content,
            new_content=new_content,
            is_same_content=is_same_content(existing_content, new_content),
        )

    def _apply(
        self,
        request: InstallRequest,
        action: DuplicateAction,
        duplicate: DuplicateInfo,
    ) -> InstallResult:
        """Apply a terminal duplicate action and build its result."""
        resource = request.resource
        target_path = duplicate.path

        if action is DuplicateAction.SKIP:
            self.duplicates.skip()
            return self._result(request, InstallAction.SKIPPED, target_path)

        if action is DuplicateAction.OVERWRITE:
            self._propagate_siblings(resource, target_path.parent)
            self.duplicates.overwrite(target_path, resource.content)
            return self._result(request, InstallAction.OVERWRITTEN, target_path)

        if action is DuplicateAction.RENAME:
            new_path = self.duplicates.rename(target_path, resource.content)
            self._propagate_siblings(resource, new_path.parent)
            return self._result(
                request, InstallAction.RENAMED, new_path, renamed_to=str(new_path)
            )

        if action is DuplicateAction.BACKUP:
            self._propagate_siblings(resource, target_path.parent)
            backup_path = self.duplicates.backup(target_path, resource.content)
            return self._result(
                request, InstallAction.BACKED_UP, target_path, backup_path=str(backup_path)
            )

        if action is DuplicateAction.FAIL:
            self.duplicates.fail(target_path)

        raise AssertionError(f"Unhandled duplicate action: {action!r}")

    def _propagate_siblings(self, resource: Resource, directory: Path) -> None:
        if self.propagate_siblings_on_duplicate:
            self._write_siblings(resource, directory)

    def _write_siblings(self, resource: Resource, directory: Path) -> None:
        """Write a resource's sibling files under its install directory."""
        for sibling in resource.sibling_files:
            self.fs.atomic_write(directory / sibling.relative_path, sibling.content)

    def _result(
        self,
        request: InstallRequest,
        action: InstallAction,
        path: Path,
        backup_path: str | None = None,
        renamed_to: str | None = None,
    ) -> InstallResult:
        return InstallResult(
            resource_name=request.resource.name,
            agent=request.agent,
            success=True,
            action=action,
            path=str(path),
            backup_path=backup_path,
            renamed_to=renamed_to,
        )
