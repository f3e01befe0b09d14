"""Discovery of resources in local directories and remote sources."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import yaml

from ai_toolkit.install import RESOURCE_FILENAMES
from ai_toolkit.source import ParsedSource, SourceError
from ai_toolkit.types import Resource, ResourceMetadata, ResourceType, SiblingFile

if TYPE_CHECKING:
    from ai_toolkit.gitops import GitOps

logger = logging.getLogger(__name__)

# Maps primary filenames back to their resource type
FILENAME_TYPES = {
    filename: resource_type for resource_type, filename in RESOURCE_FILENAMES.items()
}


@dataclass(frozen=True)
class SourceFile:
    """A primary resource file found in a source, with its siblings."""

    path: Path
    content: str
    sibling_files: tuple[SiblingFile, ...] = ()


class LocalResolver:
    """Finds resource files under a local path."""

    MAX_DEPTH = 5
    # Directories to skip during scanning, in addition to hidden entries
    SKIP_DIRS = {"node_modules", "__pycache__"}

    def resolve(self, source: Path, resource_type: ResourceType) -> list[SourceFile]:
        """Find all resources of a type under a file or directory.

        Args:
            source: File or directory (relative paths resolve against cwd).
            resource_type: Resource type to look for.

        Returns:
            Source files in a stable (sorted) order.

        Raises:
            SourceError: If the path does not exist.
        """
        path = source.expanduser()
        if not path.is_absolute():
            path = Path.cwd() / path
        if not path.exists():
            raise SourceError(f"Path does not exist: {path}")

        filename = RESOURCE_FILENAMES[resource_type]
        if path.is_file():
            if path.name != filename:
                return []
            return [self._load(path)]
        return self._scan(path, filename, depth=0)

    def _scan(self, directory: Path, filename: str, depth: int) -> list[SourceFile]:
        if depth >= self.MAX_DEPTH:
            logger.warning("Max depth reached at: %s", directory)
            return []

        files: list[SourceFile] = []
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            logger.warning("Failed to scan %s: %s", directory, e)
            return files

        primary = directory / filename
        if primary.is_file():
            files.append(self._load(primary))

        for entry in entries:
            if entry.name.startswith(".") or entry.name in self.SKIP_DIRS:
                continue
            if entry.is_dir():
                files.extend(self._scan(entry, filename, depth + 1))
        return files

    def _load(self, primary: Path) -> SourceFile:
        return SourceFile(
            path=primary,
            content=primary.read_text(encoding="utf-8"),
            sibling_files=self.collect_siblings(primary.parent, primary.name),
        )

    def collect_siblings(self, directory: Path, primary_name: str) -> tuple[SiblingFile, ...]:
        """Collect every non-hidden file under a resource directory.

        The primary file itself is excluded. Nested resources (subdirectories
        holding their own primary file) are installed separately and skipped.
        Files that are not valid UTF-8 text are skipped with a warning.

        Args:
            directory: Resource directory.
            primary_name: Primary filename for the resource type.

        Returns:
            Sibling files with paths relative to ``directory`` (POSIX style).
        """
        siblings: list[SiblingFile] = []

        def collect(current: Path) -> None:
            for entry in sorted(current.iterdir()):
                if entry.name.startswith("."):
                    continue
                if entry.is_dir():
                    if (entry / primary_name).is_file():
                        continue
                    collect(entry)
                    continue
                relative = entry.relative_to(directory).as_posix()
                if relative == primary_name:
                    continue
                try:
                    content = entry.read_text(encoding="utf-8")
                except UnicodeDecodeError:
                    logger.warning("Skipping non-text sibling file: %s", entry)
                    continue
                siblings.append(SiblingFile(relative_path=relative, content=content))

        collect(directory)
        return tuple(siblings)


class ResourceParser:
    """Turns source files into resources using their YAML frontmatter."""

    TYPE_DIRS = {resource_type.value for resource_type in ResourceType}

    def parse_resource(self, file: SourceFile, resource_type: ResourceType) -> Resource:
        """Parse one source file.

        Args:
            file: Primary file with siblings.
            resource_type: Requested type, used when the filename is not a
                known primary filename.

        Returns:
            Resource built from frontmatter and path.
        """
        frontmatter = parse_frontmatter(file.content)
        detected = FILENAME_TYPES.get(file.path.name, resource_type)

        return Resource(
            name=str(frontmatter.get("name") or self.extract_name_from_path(file.path)),
            type=detected,
            description=str(frontmatter.get("description") or ""),
            content=file.content,
            metadata=ResourceMetadata(
                author=_optional_str(frontmatter.get("author")),
                version=_optional_str(frontmatter.get("version")),
                license=_optional_str(frontmatter.get("license")),
                category=_optional_str(frontmatter.get("category")),
            ),
            source_path=str(file.path),
            sibling_files=file.sibling_files,
        )

    def parse_resources(
        self, files: list[SourceFile], resource_type: ResourceType
    ) -> list[Resource]:
        return [self.parse_resource(file, resource_type) for file in files]

    def extract_name_from_path(self, path: Path) -> str:
        """Derive a resource name from its location.

        ``skills/commit/SKILL.md`` gives ``commit``. Type directories such as
        ``skills`` are skipped; the filename stem is the last resort.
        """
        parents = [part for part in path.parent.parts if part not in ("/", "")]
        if parents:
            if parents[-1] not in self.TYPE_DIRS:
                return parents[-1]
            if len(parents) > 1:
                return parents[-2]
        return path.stem.lower()


def parse_frontmatter(content: str) -> dict:
    """Parse YAML frontmatter from content.

    Args:
        content: File content with frontmatter.

    Returns:
        Parsed frontmatter dict, empty if none found or invalid.
    """
    if not content.startswith("---"):
        return {}

    try:
        end_idx = content.index("\n---", 3)
        data = yaml.safe_load(content[3:end_idx])
    except ValueError:
        return {}
    except yaml.YAMLError as e:
        logger.warning("Failed to parse YAML frontmatter: %s", e)
        return {}
    return data if isinstance(data, dict) else {}


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


class ResourceLoader:
    """Loads resources from any parsed source.

    Remote repositories are cloned through GitOps and then scanned like a
    local directory; direct URLs yield a single resource without siblings.
    """

    def __init__(
        self,
        gitops: GitOps,
        resolver: LocalResolver | None = None,
        parser: ResourceParser | None = None,
    ) -> None:
        self.gitops = gitops
        self.resolver = resolver or LocalResolver()
        self.parser = parser or ResourceParser()

    def load(self, source: ParsedSource, resource_type: ResourceType) -> list[Resource]:
        """Load all resources of a type from a source.

        Args:
            source: Parsed source.
            resource_type: Resource type to look for.

        Returns:
            Parsed resources.

        Raises:
            SourceError: If the source cannot be read.
            GitOpsError: If cloning or downloading fails.
        """
        if source.kind == "local" and source.path is not None:
            files = self.resolver.resolve(source.path, resource_type)
        elif source.kind == "direct-url" and source.url:
            content = self.gitops.download_text(source.url)
            url_path = Path(PurePosixPath(urlparse(source.url).path))
            files = [SourceFile(path=url_path, content=content)]
        elif source.is_remote_repo and source.url:
            repo_path = self.gitops.clone_or_fetch(source.url, source.cache_name, source.ref)
            root = repo_path / source.subpath if source.subpath else repo_path
            files = self.resolver.resolve(root, resource_type)
        else:
            raise SourceError(f"Unsupported source: {source.raw}")

        logger.debug("Found %d %s in %s", len(files), resource_type.value, source.raw)
        return self.parser.parse_resources(files, resource_type)
