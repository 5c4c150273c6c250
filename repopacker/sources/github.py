"""
GitHub repository source.

Reads a repository through the GitHub REST API (tree listing) and
raw.githubusercontent.com (file bodies) without cloning:

- Supports https://github.com/<owner>/<repo>[/tree/<branch>[/<subpath>]]
- Resolves the default branch when none is given
- Fetches file bodies in fixed-size batches
- Memoizes requests by URL for the lifetime of the source
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlparse

import requests

from ..packer.matcher import PathMatcher
from ..packer.patterns import PatternSet
from ..packer.types import FileEntry
from ..utils.error_handling import (
    InvalidSourceReference,
    PackRepoError,
    RemoteResourceNotFound,
    TransientFetchFailure,
)
from .base import EntrySource, guess_media_kind


logger = logging.getLogger(__name__)

API_ROOT = "https://api.github.com"
RAW_ROOT = "https://raw.githubusercontent.com"
GITHUB_HOSTS = ("github.com", "www.github.com")
DEFAULT_BRANCH = "main"
DEFAULT_BATCH_SIZE = 5


@dataclass(frozen=True)
class GitHubReference:
    """Parsed GitHub repository reference."""
    owner: str
    repo: str
    branch: Optional[str] = None
    subpath: str = ""

    @classmethod
    def parse(cls, url: str) -> "GitHubReference":
        """
        Parse a GitHub repository URL.

        Raises:
            InvalidSourceReference: If the URL does not name a repository
        """
        text = url.strip()
        if "://" not in text:
            text = f"https://{text}"
        parsed = urlparse(text)

        if parsed.netloc.lower() not in GITHUB_HOSTS:
            raise InvalidSourceReference(f"Invalid GitHub URL: {url}")

        parts = [part for part in parsed.path.split("/") if part]
        if len(parts) < 2:
            raise InvalidSourceReference(f"Invalid GitHub URL: {url}")

        owner, repo = parts[0], parts[1]
        if repo.endswith(".git"):
            repo = repo[:-4]

        branch = None
        subpath = ""
        if len(parts) > 3 and parts[2] == "tree":
            branch = parts[3]
            subpath = "/".join(parts[4:])

        return cls(owner=owner, repo=repo, branch=branch, subpath=subpath)

    @staticmethod
    def is_github_url(url: str) -> bool:
        try:
            GitHubReference.parse(url)
        except InvalidSourceReference:
            return False
        return True

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


class CachedFetcher:
    """
    HTTP GET with per-URL memoization.

    Concurrent callers asking for the same URL share one request; failures
    are cached as well, so a broken URL is not retried within a run.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        token: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers: Dict[str, str] = {"Accept": "application/vnd.github+json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self._cache: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def get_json(self, url: str, force_refresh: bool = False) -> Any:
        return self._fetch(url, "json", force_refresh)

    def get_text(self, url: str, force_refresh: bool = False) -> str:
        return self._fetch(url, "text", force_refresh)

    @property
    def cached_urls(self) -> List[str]:
        with self._lock:
            return list(self._cache)

    def _fetch(self, url: str, kind: str, force_refresh: bool) -> Any:
        with self._lock:
            future = None if force_refresh else self._cache.get(url)
            is_owner = future is None
            if is_owner:
                future = Future()
                self._cache[url] = future

        if is_owner:
            try:
                future.set_result(self._request(url, kind))
            except Exception as e:
                # Waiters block on the future, so it must settle on any failure
                future.set_exception(e)

        return future.result()

    def _request(self, url: str, kind: str) -> Any:
        logger.debug(f"GET {url}")
        response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        response.raise_for_status()
        if kind == "json":
            return response.json()
        return response.content.decode("utf-8", errors="replace")


class GitHubSource(EntrySource):
    """Lists and reads a GitHub repository over HTTP."""

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        super().__init__()
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.reference = GitHubReference.parse(url)
        self.batch_size = batch_size
        self.fetcher = CachedFetcher(session=session, token=token, timeout=timeout)
        self._branch: Optional[str] = self.reference.branch
        self._tree: Optional[List[Dict[str, Any]]] = None

    @property
    def description(self) -> str:
        return f"github:{self.reference.slug}@{self.branch}"

    @property
    def branch(self) -> str:
        if self._branch is None:
            self._branch = self._resolve_default_branch()
        return self._branch

    def list_paths(self, rules: Optional[PatternSet] = None) -> List[str]:
        subpath = self.reference.subpath
        paths = [
            node["path"] for node in self._tree_nodes()
            if node.get("type") == "blob"
            and (not subpath or node["path"].startswith(f"{subpath}/"))
        ]
        logger.debug(f"{self.reference.slug}: {len(paths)} blobs listed")
        return paths

    def read_text(self, path: str) -> str:
        try:
            return self.fetcher.get_text(self._raw_url(path))
        except requests.RequestException as e:
            raise TransientFetchFailure(path, str(e)) from e

    def read_ignore_file(self, name: str) -> Optional[str]:
        if not any(node.get("path") == name for node in self._tree_nodes()):
            return None
        try:
            return self.read_text(name)
        except TransientFetchFailure as e:
            logger.warning(f"Could not fetch {name}: {e.reason}")
            return None

    def collect(self, paths, rules: Optional[PatternSet] = None) -> List[FileEntry]:
        """Fetch bodies ``batch_size`` at a time, waiting for each batch."""
        matcher = PathMatcher(rules) if rules is not None else None
        paths = list(paths)
        entries: Dict[str, FileEntry] = {}
        candidates: List[str] = []

        for path in paths:
            if matcher is not None and matcher.is_ignored(path):
                entries[path] = FileEntry(path=path, content=None, media_kind=guess_media_kind(path))
            else:
                candidates.append(path)

        with ThreadPoolExecutor(max_workers=self.batch_size) as executor:
            for start in range(0, len(candidates), self.batch_size):
                batch = candidates[start:start + self.batch_size]
                for entry in executor.map(self._load_entry, batch):
                    entries[entry.path] = entry

        return [entries[path] for path in paths]

    def _resolve_default_branch(self) -> str:
        url = f"{API_ROOT}/repos/{self.reference.owner}/{self.reference.repo}"
        try:
            data = self.fetcher.get_json(url)
        except requests.RequestException as e:
            logger.warning(f"Failed to fetch repository info, assuming {DEFAULT_BRANCH}: {e}")
            return DEFAULT_BRANCH
        return data.get("default_branch") or DEFAULT_BRANCH

    def _tree_nodes(self) -> List[Dict[str, Any]]:
        if self._tree is not None:
            return self._tree

        url = (
            f"{API_ROOT}/repos/{self.reference.owner}/{self.reference.repo}"
            f"/git/trees/{quote(self.branch, safe='')}?recursive=1"
        )
        try:
            data = self.fetcher.get_json(url)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 404:
                raise RemoteResourceNotFound(
                    f"Repository not found or empty: {self.reference.slug}@{self.branch}"
                ) from e
            raise PackRepoError(f"Failed to list {self.reference.slug}: {e}") from e
        except requests.RequestException as e:
            raise PackRepoError(f"Failed to list {self.reference.slug}: {e}") from e

        if not isinstance(data, dict) or data.get("message") == "Not Found" or not data.get("tree"):
            raise RemoteResourceNotFound(
                f"Repository not found or empty: {self.reference.slug}@{self.branch}"
            )
        if data.get("truncated"):
            logger.warning(f"Tree listing for {self.reference.slug} was truncated by GitHub")

        self._tree = data["tree"]
        return self._tree

    def _raw_url(self, path: str) -> str:
        return (
            f"{RAW_ROOT}/{self.reference.owner}/{self.reference.repo}/"
            f"{quote(self.branch)}/{quote(path)}"
        )
