"""Git and HTTP operations for remote sources."""

from __future__ import annotations

import logging
import shutil
import ssl
import urllib.error
import urllib.request
from pathlib import Path

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError

from ai_toolkit.agents import CONFIG_DIR

logger = logging.getLogger(__name__)

# Default branches to try when cloning
DEFAULT_BRANCHES = ["main", "master"]

# Default cache location for cloned repos
CACHE_DIR = CONFIG_DIR / "cache"

DOWNLOAD_TIMEOUT = 30


class GitOpsError(Exception):
    """Error during git or download operations."""

    pass


class GitOps:
    """Manages clones of remote source repositories."""

    def __init__(self, cache_dir: Path | None = None) -> None:
        """Initialize git operations manager.

        Args:
            cache_dir: Directory for cloned repos. Defaults to ~/.ai-toolkit/cache.

        Note:
            Prefer using factory methods `create()` or `create_default()` for construction.
        """
        self.cache_dir = cache_dir or CACHE_DIR

    @classmethod
    def create(cls, cache_dir: Path) -> GitOps:
        """Create a git operations manager with a custom cache directory."""
        return cls(cache_dir=cache_dir)

    @classmethod
    def create_default(cls) -> GitOps:
        """Create a git operations manager using ~/.ai-toolkit/cache."""
        return cls()

    def get_repo_path(self, name: str) -> Path:
        """Get the local path for a cached repository."""
        return self.cache_dir / name

    def clone_or_fetch(self, url: str, name: str, ref: str | None = None) -> Path:
        """Clone a repository or fetch updates if already cloned.

        Args:
            url: Git repository URL.
            name: Name for the local clone.
            ref: Branch/tag to checkout. Tries main, then master, when None.

        Returns:
            Path to the local clone.

        Raises:
            GitOpsError: If clone or fetch fails.
        """
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        repo_path = self.get_repo_path(name)

        try:
            if repo_path.exists():
                return self._fetch_and_checkout(repo_path, ref)
            return self._clone(url, repo_path, ref)
        except (GitCommandError, InvalidGitRepositoryError) as e:
            raise GitOpsError(f"Git operation failed: {e}") from e

    def _clone(self, url: str, path: Path, ref: str | None) -> Path:
        """Clone a repository, falling back from main to master."""
        branches_to_try = [ref] if ref else DEFAULT_BRANCHES
        last_error: GitCommandError | None = None

        for branch in branches_to_try:
            try:
                Repo.clone_from(url, path, branch=branch, depth=1)
                logger.debug("Cloned %s with branch '%s'", url, branch)
                return path
            except GitCommandError as e:
                last_error = e
                logger.debug("Clone failed with branch '%s': %s", branch, e)
                if path.exists():
                    shutil.rmtree(path)

        if last_error:
            raise last_error
        raise GitCommandError("clone", "No valid branch found")

    def _fetch_and_checkout(self, path: Path, ref: str | None) -> Path:
        """Fetch updates and move the clone to the latest commit of ref.

        A clone left on a detached HEAD (after a tag checkout) has no current
        branch to follow, so main then master are tried when ref is None.
        """
        repo = Repo(path)
        if ref:
            branches_to_try = [ref]
        elif repo.head.is_detached:
            branches_to_try = DEFAULT_BRANCHES
        else:
            branches_to_try = [repo.active_branch.name]
        last_error: GitCommandError | None = None

        for branch in branches_to_try:
            try:
                repo.remotes.origin.fetch(branch, depth=1)
                repo.git.checkout("-B", branch, "FETCH_HEAD")
                logger.debug("Fetched %s at branch '%s'", path, branch)
                return path
            except GitCommandError as e:
                last_error = e
                logger.debug("Fetch failed with branch '%s': %s", branch, e)

        if last_error:
            raise last_error
        raise GitCommandError("fetch", "No valid branch found")

    def download_text(self, url: str) -> str:
        """Download a single text file.

        Args:
            url: HTTP(S) URL.

        Returns:
            Decoded UTF-8 content.

        Raises:
            GitOpsError: If the download fails.
        """
        request = urllib.request.Request(url, headers={"User-Agent": "ai-toolkit"})
        try:
            with urllib.request.urlopen(
                request, timeout=DOWNLOAD_TIMEOUT, context=ssl.create_default_context()
            ) as response:
                return response.read().decode("utf-8")
        except (urllib.error.URLError, UnicodeDecodeError) as e:
            raise GitOpsError(f"Download failed for {url}: {e}") from e
