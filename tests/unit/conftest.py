"""
Pytest configuration for unit tests.

Provides a throwaway upstream git repository and a clean environment.
"""
import os
import shutil
import subprocess
from pathlib import Path

import pytest

from ocap_pull.config import PullConfig
from ocap_pull.target_config import PullTarget


GIT_ENV = {
    "GIT_AUTHOR_NAME": "Test Author",
    "GIT_AUTHOR_EMAIL": "author@example.com",
    "GIT_COMMITTER_NAME": "Test Author",
    "GIT_COMMITTER_EMAIL": "author@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def git(repo: Path, *args: str) -> str:
    """Run git in repo with a deterministic identity and return stdout."""
    result = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
        env=dict(os.environ, **GIT_ENV),
    )
    return result.stdout.strip()


def commit_files(repo: Path, files: dict, message: str) -> str:
    """Write files, commit them, and return the new commit SHA."""
    for rel, content in files.items():
        path = repo / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop environment variables that change pull behavior."""
    for name in (
        "KEEP_TEMP", "RELEASE_VERSION", "GITHUB_TOKEN",
        "OCAP_PULL_HTTP_TIMEOUT", "OCAP_PULL_GIT_TIMEOUT",
        "OCAP_PULL_LOG_LEVEL", "OCAP_PULL_TARGET_CONFIG", "NO_COLOR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def upstream(tmp_path):
    """
    Upstream repository with this history:

    main:    c1 (tag v1.0.0) -> c2 (tag v2.0.0) -> c3
    develop: branches from c2 -> d1

    Returns a dict of commit SHAs plus the repo path and file:// URL.
    """
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    repo = tmp_path / "upstream"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")

    c1 = commit_files(repo, {
        "projects/ocap/README.md": "ocap v1\n",
        "projects/ocap/src/ocap/__init__.py": "VERSION = '1.0.0'\n",
        "scripts/release/bump.py": "print('v1')\n",
        "projects/other/keep.txt": "not pulled\n",
    }, "Release 1.0.0")
    git(repo, "tag", "v1.0.0")

    c2 = commit_files(repo, {
        "projects/ocap/src/ocap/__init__.py": "VERSION = '2.0.0'\n",
        "scripts/release/bump.py": "print('v2')\n",
    }, "Release 2.0.0")
    git(repo, "tag", "v2.0.0")

    git(repo, "checkout", "-q", "-b", "develop")
    d1 = commit_files(repo, {
        "projects/ocap/src/ocap/__init__.py": "VERSION = 'dev'\n",
        "projects/ocap/src/ocap/feature.py": "FEATURE = True\n",
    }, "Add develop feature")

    git(repo, "checkout", "-q", "main")
    c3 = commit_files(repo, {
        "projects/ocap/src/ocap/__init__.py": "VERSION = '2.1.0.dev0'\n",
    }, "Start 2.1 cycle")

    return {
        "path": repo,
        "url": repo.as_uri(),
        "c1": c1,
        "c2": c2,
        "c3": c3,
        "d1": d1,
    }


@pytest.fixture
def work_tree(tmp_path):
    """Caller's working tree with stale copies of the target directories."""
    tree = tmp_path / "work"
    (tree / "projects" / "ocap").mkdir(parents=True)
    (tree / "projects" / "ocap" / "stale.txt").write_text("stale\n")
    (tree / "scripts" / "release").mkdir(parents=True)
    (tree / "scripts" / "release" / "old.sh").write_text("echo old\n")
    (tree / "projects" / "local").mkdir(parents=True)
    (tree / "projects" / "local" / "mine.txt").write_text("untouched\n")
    return tree


@pytest.fixture
def target(upstream):
    """PullTarget pointing at the local upstream."""
    return PullTarget(repo_url=upstream["url"], releases_api_url="https://api.invalid/releases/latest")


@pytest.fixture
def config():
    """PullConfig built from an empty environment."""
    return PullConfig(env={})
