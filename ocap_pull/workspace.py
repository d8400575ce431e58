"""
Temporary clone workspace for ocap-pull.

Clones the upstream repository into a uniquely named directory, checks out
the requested reference, and removes the directory again on every exit path.
"""
import logging
import os
import shutil
import subprocess
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ocap_pull.console import Console
from ocap_pull.selection import PullMode, PullRequest


logger = logging.getLogger(__name__)


class WorkspaceError(Exception):
    """Raised when clone or checkout operations fail."""
    pass


def workspace_name(now: Optional[datetime] = None, pid: Optional[int] = None) -> str:
    """Unique workspace directory name qualified by timestamp and process id."""
    now = now or datetime.now()
    pid = os.getpid() if pid is None else pid
    return f"temp_owa_clone_{now.strftime('%Y%m%d_%H%M%S')}_{pid}"


class Workspace:
    """
    Manages one temporary clone of the upstream repository.

    Use as a context manager: cleanup runs when the block exits, whether it
    completed, raised, or was interrupted.
    """

    def __init__(self, base_dir: Path, repo_url: str, default_branch: str = "main",
                 keep: bool = False, git_timeout: Optional[float] = None,
                 name: Optional[str] = None):
        """
        Initialize workspace.

        Args:
            base_dir: Directory the workspace is created in
            repo_url: Upstream repository URL
            default_branch: Branch a plain clone lands on
            keep: If True, cleanup leaves the directory in place
            git_timeout: Timeout in seconds for each git command (None = no limit)
            name: Directory name override (default: workspace_name())
        """
        self.base_dir = base_dir
        self.repo_url = repo_url
        self.default_branch = default_branch
        self.keep = keep
        self.git_timeout = git_timeout
        self.path = base_dir / (name or workspace_name())

    def __enter__(self) -> 'Workspace':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
        return False

    def _git(self, args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
        cmd = ['git'] + args
        logger.debug(f"$ {' '.join(cmd)}")
        env = dict(os.environ, GIT_TERMINAL_PROMPT='0')
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd or self.path,
                capture_output=True,
                text=True,
                timeout=self.git_timeout,
                env=env,
            )
        except FileNotFoundError:
            raise WorkspaceError("git command not found. Please ensure Git is installed and in your PATH.")
        except subprocess.TimeoutExpired:
            raise WorkspaceError(f"git {args[0]} timed out after {self.git_timeout}s")

        if result.returncode != 0:
            logger.debug(f"git {args[0]} failed ({result.returncode}): {result.stderr.strip()}")
        return result

    def _clone(self, shallow: bool = False, branch: Optional[str] = None):
        args = ['clone']
        if shallow:
            args.extend(['--depth', '1'])
        if branch:
            args.extend(['--branch', branch])
        args.extend([self.repo_url, str(self.path)])

        result = self._git(args, cwd=self.base_dir)
        if result.returncode != 0:
            if branch:
                raise WorkspaceError(
                    f"Failed to clone repository from branch '{branch}'! "
                    f"Make sure the branch exists in the repository.\n{result.stderr.strip()}"
                )
            raise WorkspaceError(f"Failed to clone repository!\n{result.stderr.strip()}")

    def _checkout(self, ref: str) -> subprocess.CompletedProcess:
        return self._git(['checkout', '--quiet', ref, '--'])

    def acquire(self, request: PullRequest):
        """
        Clone the upstream repository and check out the requested reference.

        Commit and release modes need full history; branch mode clones a
        single commit.

        Args:
            request: Resolved pull request (release modes must carry a tag)

        Raises:
            WorkspaceError: If clone or checkout fails
        """
        if self.path.exists():
            Console.info("Removing existing temporary directory...")
            _relax_permissions(self.path)
            shutil.rmtree(self.path)

        Console.info(f"Cloning repository from {self.repo_url}...")

        if request.mode == PullMode.COMMIT:
            Console.info("Cloning full repository to access specific commit...")
            self._clone()

            if request.branch and request.branch != self.default_branch:
                Console.info(f"Switching to branch '{request.branch}'...")
                result = self._checkout(request.branch)
                if result.returncode != 0:
                    raise WorkspaceError(
                        f"Failed to checkout branch '{request.branch}'!\n{result.stderr.strip()}"
                    )

            Console.info(f"Checking out commit {request.commit_hash}...")
            result = self._checkout(request.commit_hash)
            if result.returncode != 0:
                raise WorkspaceError(
                    f"Failed to checkout commit '{request.commit_hash}'! "
                    f"Make sure the commit hash exists in the specified branch.\n{result.stderr.strip()}"
                )

        elif request.is_release:
            if not request.release_tag:
                raise WorkspaceError("No release tag to check out")

            Console.info("Cloning full repository to access release tag...")
            self._clone()

            Console.info(f"Checking out release tag {request.release_tag}...")
            result = self._checkout(f"tags/{request.release_tag}")
            if result.returncode != 0:
                available = ", ".join(self.list_tags(limit=10)) or "none"
                raise WorkspaceError(
                    f"Failed to checkout release tag '{request.release_tag}'! "
                    f"Make sure the release tag exists in the repository. "
                    f"Available tags: {available}"
                )

        else:
            if request.branch == self.default_branch:
                self._clone(shallow=True)
            else:
                self._clone(shallow=True, branch=request.branch)

    def _read(self, args: List[str]) -> str:
        result = self._git(args)
        if result.returncode != 0:
            raise WorkspaceError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
        return result.stdout.strip()

    def head_commit(self) -> str:
        """Full SHA of HEAD."""
        return self._read(['rev-parse', 'HEAD'])

    def current_branch(self) -> str:
        """Current branch name, or "detached" when HEAD is not on a branch."""
        result = self._git(['branch', '--show-current'])
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()

        result = self._git(['symbolic-ref', '--short', 'HEAD'])
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()

        return "detached"

    def commit_date(self) -> str:
        return self._read(['log', '-1', '--format=%ci', 'HEAD'])

    def commit_message(self) -> str:
        return self._read(['log', '-1', '--format=%s', 'HEAD'])

    def exact_tag(self) -> Optional[str]:
        """Tag pointing exactly at HEAD, if any."""
        result = self._git(['describe', '--exact-match', '--tags', 'HEAD'])
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def list_tags(self, limit: Optional[int] = None) -> List[str]:
        result = self._git(['tag', '--list'])
        if result.returncode != 0:
            return []
        tags = [t.strip() for t in result.stdout.splitlines() if t.strip()]
        return tags[:limit] if limit is not None else tags

    def cleanup(self):
        """
        Remove the workspace directory.

        Git writes some objects read-only, so permissions are relaxed before
        deletion. Failures are reported as warnings with a manual hint.
        """
        if not self.path.exists():
            return

        if self.keep:
            Console.info(f"Keeping temporary directory for debugging: {self.path}")
            return

        Console.info("Cleaning up temporary directory...")

        if (self.path / '.git').exists():
            _relax_permissions(self.path)

        try:
            shutil.rmtree(self.path)
        except OSError as e:
            logger.debug(f"rmtree {self.path} failed: {e}")
            Console.warning(f"Could not fully clean up temporary directory '{self.path}'.")
            Console.info(f"You can manually remove it with: rm -rf '{self.path}' or sudo rm -rf '{self.path}'")


def _chmod(path: str, mode: int):
    try:
        os.chmod(path, mode)
    except OSError as e:
        logger.debug(f"chmod {path} failed: {e}")


def _relax_permissions(root: Path):
    _chmod(str(root), 0o755)
    for dirpath, dirnames, filenames in os.walk(root):
        # chmod before os.walk descends so unreadable directories can be listed
        for dirname in dirnames:
            _chmod(os.path.join(dirpath, dirname), 0o755)
        for filename in filenames:
            file_path = os.path.join(dirpath, filename)
            if not os.path.islink(file_path):
                _chmod(file_path, 0o644)
