"""
Tests for local directory and GitHub entry sources.
"""

import shutil
import tempfile
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import requests

from repopacker.library import RepositoryPacker
from repopacker.packer.patterns import PatternSet
from repopacker.packer.packfmt import parse_document
from repopacker.packer.types import PackOptions
from repopacker.sources.base import guess_media_kind
from repopacker.sources.github import CachedFetcher, GitHubReference, GitHubSource
from repopacker.sources.local import LocalDirectorySource
from repopacker.utils.error_handling import (
    InvalidSourceReference,
    PackRepoError,
    RemoteResourceNotFound,
)


API = "https://api.github.com/repos/octo/demo"
RAW = "https://raw.githubusercontent.com/octo/demo"


def make_response(json_data=None, content=b"", status=200):
    response = Mock()
    response.status_code = status
    response.json.return_value = json_data
    response.content = content
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status} Error", response=response
        )
    return response


def make_session(routes):
    """Session whose get() serves responses from ``routes`` keyed by URL."""
    session = Mock()

    def get(url, **kwargs):
        if url not in routes:
            raise requests.ConnectionError(f"no route for {url}")
        return routes[url]

    session.get.side_effect = get
    return session


def urls_requested(session):
    return [call.args[0] for call in session.get.call_args_list]


DEMO_TREE = {
    "tree": [
        {"path": ".gitignore", "type": "blob"},
        {"path": "README.md", "type": "blob"},
        {"path": "debug.log", "type": "blob"},
        {"path": "logo.png", "type": "blob"},
        {"path": "src", "type": "tree"},
        {"path": "src/app.py", "type": "blob"},
        {"path": "srcgen/out.py", "type": "blob"},
    ]
}


def demo_routes(branch="dev"):
    return {
        API: make_response({"default_branch": branch}),
        f"{API}/git/trees/{branch}?recursive=1": make_response(DEMO_TREE),
        f"{RAW}/{branch}/.gitignore": make_response(content=b"*.log\n"),
        f"{RAW}/{branch}/README.md": make_response(content=b"# Demo\n"),
        f"{RAW}/{branch}/debug.log": make_response(content=b"trace"),
        f"{RAW}/{branch}/src/app.py": make_response(content=b"print('app')\n"),
        f"{RAW}/{branch}/srcgen/out.py": make_response(content=b"generated = True\n"),
    }


class TestLocalDirectorySource:
    """Test reading a repository from disk."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        (self.temp_dir / "src").mkdir()
        (self.temp_dir / "node_modules" / "pkg").mkdir(parents=True)
        (self.temp_dir / "README.md").write_text("# Project\n", encoding="utf-8")
        (self.temp_dir / "src" / "app.py").write_text("print('app')\n", encoding="utf-8")
        (self.temp_dir / "node_modules" / "pkg" / "index.js").write_text("x", encoding="utf-8")
        (self.temp_dir / ".gitignore").write_text("*.log\n", encoding="utf-8")
        (self.temp_dir / "debug.log").write_text("trace", encoding="utf-8")
        (self.temp_dir / "bad.bin").write_bytes(b"\xff\xfe\x00\x01")

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_list_paths_sorted_posix(self):
        source = LocalDirectorySource(self.temp_dir)
        assert source.list_paths() == [
            ".gitignore",
            "README.md",
            "bad.bin",
            "debug.log",
            "node_modules/pkg/index.js",
            "src/app.py",
        ]

    def test_prune_ignored_directories(self):
        source = LocalDirectorySource(self.temp_dir, prune_ignored_dirs=True)
        paths = source.list_paths(PatternSet.from_patterns(["node_modules"]))
        assert "node_modules/pkg/index.js" not in paths
        assert "src/app.py" in paths

    def test_no_pruning_with_negations(self):
        source = LocalDirectorySource(self.temp_dir, prune_ignored_dirs=True)
        rules = PatternSet.from_patterns(["node_modules", "!node_modules/pkg/index.js"])
        assert "node_modules/pkg/index.js" in source.list_paths(rules)

    def test_extension_rule_on_directory_does_not_prune(self):
        (self.temp_dir / "pkg.egg-info").mkdir()
        (self.temp_dir / "pkg.egg-info" / "PKG-INFO").write_text("Name: pkg\n", encoding="utf-8")
        (self.temp_dir / ".gitignore").write_text("*.egg-info/\n", encoding="utf-8")

        plain = RepositoryPacker().pack_directory(self.temp_dir)
        pruned = RepositoryPacker().pack_directory(self.temp_dir, prune_ignored_dirs=True)

        assert "pkg.egg-info/PKG-INFO" in plain.files
        assert pruned.files == plain.files

        source = LocalDirectorySource(self.temp_dir, prune_ignored_dirs=True)
        assert "pkg.egg-info/PKG-INFO" in source.list_paths(PatternSet.from_patterns(["*.egg-info/"]))

    def test_pruning_keeps_same_files(self):
        plain = RepositoryPacker().pack_directory(self.temp_dir)
        pruned = RepositoryPacker().pack_directory(self.temp_dir, prune_ignored_dirs=True)
        assert pruned.files == plain.files

    def test_read_text_preserves_line_endings(self):
        (self.temp_dir / "crlf.txt").write_bytes(b"a\r\nb")
        source = LocalDirectorySource(self.temp_dir)
        assert source.read_text("crlf.txt") == "a\r\nb"

    def test_read_ignore_file(self):
        source = LocalDirectorySource(self.temp_dir)
        assert source.read_ignore_file(".gitignore") == "*.log\n"
        assert source.read_ignore_file(".repomixignore") is None

    def test_collect_isolates_unreadable_files(self):
        source = LocalDirectorySource(self.temp_dir)
        rules = PatternSet.from_patterns(["*.log"])
        entries = {entry.path: entry for entry in source.collect(source.list_paths(), rules)}

        assert entries["bad.bin"].content is None
        assert entries["debug.log"].content is None
        assert entries["README.md"].content == "# Project\n"
        assert entries["bad.bin"].media_kind == "application/octet-stream"
        # Only the undecodable file counts as an error; ignored files are never read
        assert source.error_handler.total_errors == 1
        assert source.error_handler.get_error_summary()["error_counts"] == {"UnreadableEntry": 1}

    def test_missing_root(self):
        with pytest.raises(PackRepoError):
            LocalDirectorySource(self.temp_dir / "nope")

    def test_pack_directory(self):
        result = RepositoryPacker().pack_directory(self.temp_dir)

        assert result.files == [".gitignore", "README.md", "src/app.py"]
        assert result.stats.ignored_count == 3
        records = dict(parse_document(result.document))
        assert records["src/app.py"] == "print('app')\n"

    def test_pack_directory_pruned_skips_counting(self):
        result = RepositoryPacker().pack_directory(self.temp_dir, prune_ignored_dirs=True)
        assert result.stats.ignored_count == 2


class TestGitHubReference:
    """Test GitHub URL parsing."""

    def test_plain_repository(self):
        ref = GitHubReference.parse("https://github.com/octo/demo")
        assert (ref.owner, ref.repo, ref.branch, ref.subpath) == ("octo", "demo", None, "")
        assert ref.slug == "octo/demo"

    def test_git_suffix_and_trailing_slash(self):
        ref = GitHubReference.parse("https://github.com/octo/demo.git/")
        assert ref.repo == "demo"

    def test_branch_and_subpath(self):
        ref = GitHubReference.parse("https://github.com/octo/demo/tree/dev/src/lib")
        assert ref.branch == "dev"
        assert ref.subpath == "src/lib"

    def test_without_scheme(self):
        assert GitHubReference.parse("github.com/octo/demo").repo == "demo"

    @pytest.mark.parametrize("url", [
        "https://gitlab.com/octo/demo",
        "https://github.com/octo",
        "not a url",
        "",
    ])
    def test_invalid(self, url):
        with pytest.raises(InvalidSourceReference):
            GitHubReference.parse(url)
        assert not GitHubReference.is_github_url(url)

    def test_source_rejects_invalid_url(self):
        with pytest.raises(InvalidSourceReference):
            GitHubSource("https://example.com/octo/demo", session=Mock())


class TestCachedFetcher:
    """Test per-URL memoization."""

    def test_completed_requests_are_cached(self):
        session = make_session({"https://x/a": make_response(content=b"A")})
        fetcher = CachedFetcher(session=session)

        assert fetcher.get_text("https://x/a") == "A"
        assert fetcher.get_text("https://x/a") == "A"
        assert session.get.call_count == 1
        assert fetcher.cached_urls == ["https://x/a"]

    def test_force_refresh(self):
        session = make_session({"https://x/a": make_response(content=b"A")})
        fetcher = CachedFetcher(session=session)
        fetcher.get_text("https://x/a")
        fetcher.get_text("https://x/a", force_refresh=True)
        assert session.get.call_count == 2

    def test_in_flight_requests_are_shared(self):
        calls = []
        lock = threading.Lock()

        def slow_get(url, **kwargs):
            with lock:
                calls.append(url)
            time.sleep(0.05)
            return make_response(content=b"shared")

        session = Mock()
        session.get.side_effect = slow_get
        fetcher = CachedFetcher(session=session)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: fetcher.get_text("https://x/shared"), range(8)))

        assert results == ["shared"] * 8
        assert calls == ["https://x/shared"]

    def test_failures_are_cached(self):
        session = make_session({"https://x/err": make_response(status=500)})
        fetcher = CachedFetcher(session=session)

        for _ in range(2):
            with pytest.raises(requests.HTTPError):
                fetcher.get_text("https://x/err")
        assert session.get.call_count == 1

    def test_unexpected_error_does_not_block_later_callers(self):
        session = Mock()
        session.get.side_effect = RuntimeError("adapter exploded")
        fetcher = CachedFetcher(session=session)

        with pytest.raises(RuntimeError):
            fetcher.get_text("https://x/boom")

        outcome = []

        def second_call():
            try:
                fetcher.get_text("https://x/boom")
            except RuntimeError as e:
                outcome.append(e)

        waiter = threading.Thread(target=second_call, daemon=True)
        waiter.start()
        waiter.join(timeout=2)

        assert not waiter.is_alive()
        assert len(outcome) == 1
        assert session.get.call_count == 1

    def test_token_header(self):
        session = make_session({"https://x/a": make_response(json_data={})})
        CachedFetcher(session=session, token="secret").get_json("https://x/a")
        headers = session.get.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret"

    def test_invalid_utf8_replaced(self):
        session = make_session({"https://x/a": make_response(content=b"ok\xff")})
        assert CachedFetcher(session=session).get_text("https://x/a") == "ok\ufffd"


class TestGitHubSource:
    """Test listing and reading a GitHub repository over mocked HTTP."""

    def test_resolves_default_branch(self):
        session = make_session(demo_routes("dev"))
        source = GitHubSource("https://github.com/octo/demo", session=session)

        assert source.branch == "dev"
        assert source.description == "github:octo/demo@dev"

    def test_default_branch_falls_back_to_main(self):
        routes = demo_routes("main")
        del routes[API]
        source = GitHubSource("https://github.com/octo/demo", session=make_session(routes))

        assert source.branch == "main"
        assert "README.md" in source.list_paths()

    def test_list_paths_blobs_only(self):
        source = GitHubSource("https://github.com/octo/demo", session=make_session(demo_routes()))
        paths = source.list_paths()
        assert "src" not in paths
        assert paths == [".gitignore", "README.md", "debug.log", "logo.png", "src/app.py", "srcgen/out.py"]

    def test_subpath_restricts_listing(self):
        session = make_session(demo_routes("dev"))
        source = GitHubSource("https://github.com/octo/demo/tree/dev/src", session=session)

        assert source.list_paths() == ["src/app.py"]
        assert API not in urls_requested(session)

    def test_missing_repository(self):
        routes = {
            API: make_response({"default_branch": "main"}),
            f"{API}/git/trees/main?recursive=1": make_response({"message": "Not Found"}, status=404),
        }
        source = GitHubSource("https://github.com/octo/demo", session=make_session(routes))
        with pytest.raises(RemoteResourceNotFound):
            source.list_paths()

    def test_empty_tree_is_not_found(self):
        routes = {
            API: make_response({"default_branch": "main"}),
            f"{API}/git/trees/main?recursive=1": make_response({"tree": []}),
        }
        source = GitHubSource("https://github.com/octo/demo", session=make_session(routes))
        with pytest.raises(RemoteResourceNotFound):
            source.list_paths()

    def test_listing_server_error(self):
        routes = {
            API: make_response({"default_branch": "main"}),
            f"{API}/git/trees/main?recursive=1": make_response(status=502),
        }
        source = GitHubSource("https://github.com/octo/demo", session=make_session(routes))
        with pytest.raises(PackRepoError):
            source.list_paths()

    def test_read_ignore_file(self):
        session = make_session(demo_routes())
        source = GitHubSource("https://github.com/octo/demo", session=session)

        assert source.read_ignore_file(".gitignore") == "*.log\n"
        assert source.read_ignore_file(".repomixignore") is None
        assert not any(url.endswith(".repomixignore") for url in urls_requested(session))

    def test_transient_failure_isolated(self):
        routes = demo_routes()
        routes[f"{RAW}/dev/src/app.py"] = make_response(status=500)
        source = GitHubSource("https://github.com/octo/demo", session=make_session(routes))

        entries = source.collect(["README.md", "src/app.py"])

        assert [entry.path for entry in entries] == ["README.md", "src/app.py"]
        assert entries[0].content == "# Demo\n"
        assert entries[1].content is None
        assert source.error_handler.get_error_summary()["error_counts"] == {"TransientFetchFailure": 1}

    def test_collect_fetches_in_batches(self):
        source = GitHubSource(
            "https://github.com/octo/demo", batch_size=2, session=make_session(demo_routes())
        )
        paths = ["README.md", "debug.log", "src/app.py", "srcgen/out.py", ".gitignore"]

        with patch("repopacker.sources.github.ThreadPoolExecutor") as executor_cls:
            executor = executor_cls.return_value.__enter__.return_value
            executor.map.side_effect = lambda fn, batch: [fn(path) for path in batch]
            entries = source.collect(paths)

        executor_cls.assert_called_once_with(max_workers=2)
        batches = [list(call.args[1]) for call in executor.map.call_args_list]
        assert batches == [["README.md", "debug.log"], ["src/app.py", "srcgen/out.py"], [".gitignore"]]
        assert [entry.path for entry in entries] == paths

    def test_collect_skips_ignored_paths(self):
        session = make_session(demo_routes())
        source = GitHubSource("https://github.com/octo/demo", session=session)

        entries = source.collect(["README.md", "debug.log"], PatternSet.from_patterns(["*.log"]))

        assert entries[1].content is None
        assert f"{RAW}/dev/debug.log" not in urls_requested(session)

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            GitHubSource("https://github.com/octo/demo", batch_size=0, session=Mock())

    def test_pack_source(self):
        session = make_session(demo_routes())
        source = GitHubSource("https://github.com/octo/demo", session=session)

        result = RepositoryPacker().pack_source(source, PackOptions())

        assert result.files == [".gitignore", "README.md", "src/app.py", "srcgen/out.py"]
        # debug.log via .gitignore, logo.png via default patterns
        assert result.stats.ignored_count == 2
        assert f"{RAW}/dev/logo.png" not in urls_requested(session)
        assert urls_requested(session).count(f"{RAW}/dev/.gitignore") == 1


class TestGuessMediaKind:
    """Test media kind detection used for binary filtering."""

    def test_typescript_is_text(self):
        assert guess_media_kind("src/app.ts") == "text/x-typescript"
        assert guess_media_kind("ui/View.TSX") == "text/x-typescript"

    def test_media_types(self):
        assert guess_media_kind("assets/logo.png") == "image/png"
        assert guess_media_kind("Makefile") is None
