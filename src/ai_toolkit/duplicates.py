"""Duplicate resolution strategies for resource installation.

Each strategy runs only when the target file already exists with
different content; identical content is skipped by the install engine
before any strategy is consulted.

- skip: keep the existing file
- overwrite: replace the existing file
- rename: write to the next free sibling directory (my-skill-2, my-skill-3, ...)
- backup: copy the existing file to .backup / .backup.N, then replace it
- compare: show a diff and let the user pick skip, overwrite or backup
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ai_toolkit.protocols import DuplicatePrompt, FileSystem
from ai_toolkit.types import DuplicateAction

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"

# Actions the compare strategy may resolve to
COMPARE_CHOICES = (DuplicateAction.SKIP, DuplicateAction.OVERWRITE, DuplicateAction.BACKUP)


class DuplicateExistsError(Exception):
    """Raised by the fail strategy when the target already exists."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"File already exists: {path}")
        self.path = path


@dataclass(frozen=True)
class DuplicateInfo:
    """Snapshot of a collision, computed once per request."""

    path: Path
    existing_content: str
    new_content: str
    is_same_content: bool


class DuplicateHandler:
    """Applies duplicate resolution strategies to the filesystem."""

    def __init__(self, filesystem: FileSystem, prompt: DuplicatePrompt | None = None) -> None:
        """Initialize the handler.

        Args:
            filesystem: Filesystem abstraction used for every read and write.
            prompt: Interactive collaborator for the compare strategy. When
                absent, compare resolves to skip.
        """
        self.fs = filesystem
        self.prompt = prompt

    def skip(self) -> None:
        """Keep the existing file."""
        return None

    def overwrite(self, target_path: Path, content: str) -> None:
        """Replace the existing file with new content."""
        self.fs.atomic_write(target_path, content)

    def fail(self, target_path: Path) -> None:
        """Refuse to touch the existing file.

        Raises:
            DuplicateExistsError: Always.
        """
        raise DuplicateExistsError(target_path)

    def next_rename_dir(self, target_path: Path) -> Path:
        """Find the first free ``<resource-dir>-N`` directory, N starting at 2.

        Args:
            target_path: Existing primary file, e.g. ``skills/my-skill/SKILL.md``.

        Returns:
            Directory that does not exist yet, e.g. ``skills/my-skill-2``.
        """
        resource_dir = target_path.parent
        counter = 2
        while True:
            candidate = resource_dir.parent / f"{resource_dir.name}-{counter}"
            if not self.fs.exists(candidate):
                return candidate
            counter += 1

    def rename(self, target_path: Path, content: str) -> Path:
        """Write new content under the next free numbered directory.

        The original file is left untouched.

        Args:
            target_path: Existing primary file.
            content: New content.

        Returns:
            Path of the newly written file.
        """
        new_path = self.next_rename_dir(target_path) / target_path.name
        self.fs.atomic_write(new_path, content)
        logger.debug("Renamed install of %s to %s", target_path, new_path)
        return new_path

    def next_backup_path(self, target_path: Path) -> Path:
        """Find the first free backup name: ``.backup``, then ``.backup.1``, ``.backup.2``...

        Args:
            target_path: File to back up.

        Returns:
            Backup path that does not exist yet.
        """
        base = target_path.with_name(f"{target_path.name}{BACKUP_SUFFIX}")
        if not self.fs.exists(base):
            return base
        counter = 1
        while True:
            candidate = base.with_name(f"{base.name}.{counter}")
            if not self.fs.exists(candidate):
                return candidate
            counter += 1

    def backup(self, target_path: Path, content: str) -> Path:
        """Copy the existing file to a backup, then replace it.

        Args:
            target_path: Existing file.
            content: New content.

        Returns:
            Path of the backup holding the previous bytes.
        """
        backup_path = self.next_backup_path(target_path)
        self.fs.copy_file(target_path, backup_path)
        self.fs.atomic_write(target_path, content)
        logger.debug("Backed up %s to %s", target_path, backup_path)
        return backup_path

    def compare(self, resource_name: str, duplicate: DuplicateInfo) -> DuplicateAction:
        """Show the differences and ask which terminal action to take.

        Args:
            resource_name: Name of the resource, for display.
            duplicate: Collision being resolved.

        Returns:
            SKIP, OVERWRITE or BACKUP.

        Raises:
            ValueError: If the prompt answers with any other action.
        """
        if self.prompt is None:
            logger.warning(
                "No interactive prompt available to compare %s; keeping existing file",
                duplicate.path,
            )
            return DuplicateAction.SKIP

        choice = self.prompt.prompt_compare_choice(
            resource_name,
            duplicate.path,
            duplicate.existing_content,
            duplicate.new_content,
        )
        if choice not in COMPARE_CHOICES:
            raise ValueError(f"Compare must resolve to skip, overwrite or backup, got: {choice}")
        return choice
