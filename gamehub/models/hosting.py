"""Hosting context derived from the hub page URL."""

from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

GITHUB_PAGES_SUFFIX = ".github.io"
GITHUB_HOSTS = {"github.com", "www.github.com"}
RAW_CONTENT_HOST = "raw.githubusercontent.com"


@dataclass(frozen=True)
class HostingContext:
    """Where the hub is served from and, when inferable, which repository backs it."""
    base_url: str
    asset_dir: str = "assets"
    owner: str | None = None
    repo: str | None = None
    branch: str = "main"
    repo_subdir: str = ""  # Folder of the hub page inside the repository

    @property
    def asset_root_url(self) -> str:
        return f"{self.base_url}{self.asset_dir}/"

    @property
    def has_repository(self) -> bool:
        return bool(self.owner and self.repo)

    @property
    def repository_asset_path(self) -> str:
        """Asset folder path as it appears in the repository tree."""
        return f"{self.repo_subdir}/{self.asset_dir}" if self.repo_subdir else self.asset_dir

    @classmethod
    def from_url(cls, page_url: str, asset_dir: str = "assets", branch: str = "main") -> "HostingContext":
        """Derive a hosting context from the public URL of the hub page.

        GitHub Pages URLs (``owner.github.io/repo/``), repository URLs
        (``github.com/owner/repo``) and raw content URLs yield an
        owner/repository pair. Any other host produces a context without
        repository identity, so only listing and probing can find games.

        Raises:
            ValueError: If the URL is not an absolute http(s) URL
        """
        parts = urlsplit(page_url.strip())
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"Hub URL must be an absolute http(s) URL: {page_url!r}")

        path = parts.path or "/"
        if not path.endswith("/"):
            head, last = path.rsplit("/", 1)
            # A last segment with a dot is the page itself (index.html)
            path = head + "/" if "." in last else path + "/"

        host = (parts.hostname or "").lower()
        segments = [s for s in path.split("/") if s]
        asset_dir = asset_dir.strip("/") or "assets"
        base_url = urlunsplit((parts.scheme, parts.netloc, path, "", ""))

        if host.endswith(GITHUB_PAGES_SUFFIX) and host != GITHUB_PAGES_SUFFIX.lstrip("."):
            owner = host[: -len(GITHUB_PAGES_SUFFIX)]
            if segments:
                repo, subdir = segments[0], "/".join(segments[1:])
            else:
                repo, subdir = host, ""
            return cls(base_url, asset_dir, owner, repo, branch, subdir)

        if host in GITHUB_HOSTS and len(segments) >= 2:
            owner, repo = segments[0], segments[1]
            # Repository pages are not servable; play from the Pages site instead
            pages_path = "/" if repo.lower() == f"{owner.lower()}{GITHUB_PAGES_SUFFIX}" else f"/{repo}/"
            pages_url = f"https://{owner.lower()}{GITHUB_PAGES_SUFFIX}{pages_path}"
            return cls(pages_url, asset_dir, owner, repo, branch, "")

        if host == RAW_CONTENT_HOST and len(segments) >= 3:
            owner, repo, raw_branch = segments[0], segments[1], segments[2]
            return cls(base_url, asset_dir, owner, repo, raw_branch, "/".join(segments[3:]))

        return cls(base_url=base_url, asset_dir=asset_dir, branch=branch)
