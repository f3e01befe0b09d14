"""Classification of source strings given on the command line."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

GITHUB_URL_PATTERN = re.compile(
    r"^https?://(?:www\.)?github\.com/([^/]+)/([^/]+?)(?:\.git)?"
    r"(?:/(?:tree|blob)/([^/]+)(?:/(.+?))?)?/?$"
)
GITLAB_URL_PATTERN = re.compile(
    r"^https?://(?:www\.)?gitlab\.com/([^/]+)/([^/]+?)(?:\.git)?"
    r"(?:/-/(?:tree|blob)/([^/]+)(?:/(.+?))?)?/?$"
)
SSH_URL_PATTERN = re.compile(r"^git@([^:]+):([^/]+)/([^/]+?)(?:\.git)?$")
GIT_PROTOCOL_PATTERN = re.compile(r"^git://([^/]+)/([^/]+)/([^/]+?)(?:\.git)?$")
SHORTHAND_PATTERN = re.compile(r"^([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)$")

# Direct URLs are recognized by their primary filename
DIRECT_RESOURCE_SUFFIXES = ("/skill.md", "/rules.md", "/commands.md", "/agent.md")

LOCAL_PREFIXES = ("./", "../", "/", "~", ".\\", "..\\")


class SourceError(Exception):
    """Invalid or unreachable source."""

    pass


@dataclass(frozen=True)
class ParsedSource:
    """A source string resolved to its kind and location.

    Attributes:
        kind: One of local, github, gitlab, git, direct-url.
        raw: Original input.
        url: Normalized remote URL (remote kinds only).
        owner: Repository owner, when known.
        repo: Repository name, when known.
        ref: Branch/tag/commit, when given.
        subpath: Path inside the repository, when given.
        path: Filesystem path (local kind only).
    """

    kind: str
    raw: str
    url: str | None = None
    owner: str | None = None
    repo: str | None = None
    ref: str | None = None
    subpath: str | None = None
    path: Path | None = None

    @property
    def is_remote_repo(self) -> bool:
        return self.kind in ("github", "gitlab", "git")

    @property
    def cache_name(self) -> str:
        """Directory name for the local clone of a remote repository."""
        if self.owner and self.repo:
            return f"{self.owner}__{self.repo}"
        name = re.sub(r"[^a-zA-Z0-9_.-]+", "_", self.url or self.raw).strip("_")
        return name or "source"


def is_direct_resource_url(text: str) -> bool:
    """Check whether a URL points straight at a primary resource file."""
    if not text.startswith(("http://", "https://")):
        return False
    return text.lower().endswith(DIRECT_RESOURCE_SUFFIXES)


def _host_kind(host: str) -> str:
    if host == "github.com":
        return "github"
    if host == "gitlab.com":
        return "gitlab"
    return "git"


def parse_source(text: str) -> ParsedSource:
    """Parse a source string.

    Supported formats:
    - Local path: ./skills, /abs/path, ~/skills, or any existing path
    - GitHub URL: https://github.com/owner/repo[/tree/<ref>/<subpath>]
    - GitLab URL: https://gitlab.com/owner/repo[/-/tree/<ref>/<subpath>]
    - Git URL: git@host:owner/repo.git, git://host/owner/repo.git
    - GitHub shorthand: owner/repo
    - Direct URL: https://example.com/path/SKILL.md

    Args:
        text: Source string.

    Returns:
        ParsedSource describing it.

    Raises:
        SourceError: If the format is not recognized.
    """
    trimmed = text.strip()
    if not trimmed:
        raise SourceError("Source cannot be empty")

    if trimmed.startswith(LOCAL_PREFIXES) or Path(trimmed).exists():
        return ParsedSource(kind="local", raw=text, path=Path(trimmed).expanduser())

    for kind, pattern, base in (
        ("github", GITHUB_URL_PATTERN, "https://github.com"),
        ("gitlab", GITLAB_URL_PATTERN, "https://gitlab.com"),
    ):
        match = pattern.match(trimmed)
        if match:
            owner, repo, ref, subpath = match.groups()
            return ParsedSource(
                kind=kind,
                raw=text,
                url=f"{base}/{owner}/{repo}",
                owner=owner,
                repo=repo,
                ref=ref,
                subpath=subpath,
            )

    match = SSH_URL_PATTERN.match(trimmed) or GIT_PROTOCOL_PATTERN.match(trimmed)
    if match:
        host, owner, repo = match.groups()
        kind = _host_kind(host)
        # Unknown hosts keep the URL as given so the clone uses the same transport
        url = f"https://{host}/{owner}/{repo}" if kind != "git" else trimmed
        return ParsedSource(kind=kind, raw=text, url=url, owner=owner, repo=repo)

    match = SHORTHAND_PATTERN.match(trimmed)
    if match:
        owner, repo = match.groups()
        return ParsedSource(
            kind="github",
            raw=text,
            url=f"https://github.com/{owner}/{repo}",
            owner=owner,
            repo=repo,
        )

    if is_direct_resource_url(trimmed):
        return ParsedSource(kind="direct-url", raw=text, url=trimmed)

    if trimmed.startswith(("http://", "https://")):
        return ParsedSource(kind="git", raw=text, url=trimmed)

    raise SourceError(
        f"Invalid source format: {text}. Use a local path, "
        "a GitHub URL (https://github.com/owner/repo) or owner/repo."
    )
