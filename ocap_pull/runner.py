"""
ocap-pull runner.

Drives one invocation through its states:

    resolve-mode -> validate -> acquire-workspace -> verify-targets-exist
    -> materialize -> record-provenance -> cleanup -> exit

The first failure aborts the run; the workspace is cleaned up regardless.
"""
import logging
import signal
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from ocap_pull.config import PullConfig
from ocap_pull.console import Console
from ocap_pull.materialize import MissingTargetError, materialize
from ocap_pull.provenance import ProvenanceRecord, collect
from ocap_pull.releases import LatestReleaseLookup, ReleaseLookupError
from ocap_pull.selection import InputError, PullMode, PullRequest, resolve_request
from ocap_pull.target_config import PullTarget
from ocap_pull.workspace import Workspace, WorkspaceError


logger = logging.getLogger(__name__)


class Interrupted(Exception):
    """Raised from a signal handler to unwind through workspace cleanup."""

    def __init__(self, signum: int):
        super().__init__(f"Terminated by signal {signum}")
        self.signum = signum


def _raise_interrupted(signum, frame):
    raise Interrupted(signum)


@contextmanager
def _termination_signals_raise():
    """Turn SIGTERM/SIGHUP into Interrupted for the duration of the block."""
    previous = {}
    for name in ('SIGTERM', 'SIGHUP'):
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        try:
            previous[signum] = signal.signal(signum, _raise_interrupted)
        except ValueError:
            # Not on the main thread; rely on normal unwinding
            logger.debug(f"Cannot install {name} handler outside the main thread")
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


class PullRunner:
    """Pulls the target directories from upstream into a working tree."""

    def __init__(self, work_tree: Path, target: Optional[PullTarget] = None,
                 config: Optional[PullConfig] = None,
                 release_lookup: Optional[LatestReleaseLookup] = None):
        self.work_tree = work_tree
        self.target = target or PullTarget()
        self.config = config or PullConfig()
        self.release_lookup = release_lookup or LatestReleaseLookup(
            self.target.releases_api_url,
            timeout=self.config.http_timeout,
            token=self.config.github_token,
        )

    def resolve(self, version_or_branch: Optional[str], commit_hash: Optional[str]) -> PullRequest:
        """
        Resolve arguments into a request, looking up the latest release if needed.

        A failed release lookup falls back to the default branch tip.

        Raises:
            InputError: If arguments are malformed
        """
        if not (version_or_branch or "").strip() and self.config.release_version:
            Console.info(f"Using release version from environment variable: {self.config.release_version}")

        request = resolve_request(
            version_or_branch,
            commit_hash,
            release_version=self.config.release_version,
            default_branch=self.target.default_branch,
        )

        if request.mode == PullMode.COMMIT:
            Console.info("Pull mode: specific commit")
        elif request.mode == PullMode.RELEASE:
            Console.info(f"Pull mode: specific release version ({request.release_tag})")
        elif request.mode == PullMode.BRANCH:
            Console.info(f"Pull mode: branch ({request.branch})")
        else:
            Console.info("Fetching latest release information from GitHub API...")
            try:
                tag = self.release_lookup.fetch_latest_tag()
            except ReleaseLookupError as e:
                logger.debug(str(e))
                Console.error("Failed to fetch latest release information from GitHub API")
                Console.error("Please check your internet connection or specify a version/branch manually")
                Console.warning(f"Falling back to {self.target.default_branch} branch")
                return request.fall_back_to_branch(self.target.default_branch)
            Console.success(f"Latest release found: {tag}")
            request = request.with_release_tag(tag)

        return request

    def pull(self, request: PullRequest) -> ProvenanceRecord:
        """
        Acquire a workspace for request and materialize it into the work tree.

        Returns:
            The provenance record that was written

        Raises:
            WorkspaceError: If clone or checkout fails
            MissingTargetError: If a target directory is absent upstream
        """
        Console.info("Starting pull process...")
        Console.info(f"Target: {request.describe(self.target.default_branch)}")

        workspace = Workspace(
            self.work_tree,
            self.target.repo_url,
            default_branch=self.target.default_branch,
            keep=self.config.keep_temp,
            git_timeout=self.config.git_timeout,
        )

        with workspace:
            workspace.acquire(request)
            materialize(workspace.path, self.work_tree, self.target.target_dirs)

            version_file = self.work_tree / self.target.version_file
            Console.info(f"Creating version info file: {self.target.version_file}")
            record = collect(workspace, request, self.target)
            record.write(version_file)

        return record

    def run(self, version_or_branch: Optional[str] = None, commit_hash: Optional[str] = None) -> int:
        """
        Execute one pull.

        Returns:
            Exit code (0 = success, 1 = failure)
        """
        try:
            with _termination_signals_raise():
                request = self.resolve(version_or_branch, commit_hash)
                record = self.pull(request)
        except (InputError, WorkspaceError, MissingTargetError) as e:
            for line in str(e).splitlines():
                Console.error(line)
            return 1
        except OSError as e:
            Console.error(f"File operation failed: {e}")
            return 1
        except (KeyboardInterrupt, Interrupted):
            Console.error("Pull interrupted")
            return 1

        self._print_summary(request, record)
        return 0

    def _print_summary(self, request: PullRequest, record: ProvenanceRecord):
        repo = self.target.repo_url

        Console.success("Successfully pulled required directories from repository")
        Console.info(f"Version info saved to: {self.target.version_file}")
        Console.info("Summary of changes:")

        if request.mode == PullMode.LATEST_RELEASE:
            Console.line(f"- Pulled directories from {repo} (latest release {record.release_tag}):")
        elif request.mode == PullMode.RELEASE:
            Console.line(f"- Pulled directories from {repo} (release {record.release_tag}):")
        elif request.mode == PullMode.COMMIT:
            Console.line(f"- Pulled directories from {repo} ({request.describe(self.target.default_branch)}):")
        else:
            Console.line(f"- Pulled latest directories from {repo} (branch '{request.branch}'):")

        for target_dir in record.directories:
            Console.line(f"  - {target_dir}")
        Console.line(f"- Version information saved to {self.target.version_file}")
        Console.line()

        Console.info(f"Actual commit pulled: {record.commit_hash}")
        Console.info(f"Actual branch: {record.branch}")
        if record.release_tag:
            Console.info(f"Release tag: {record.release_tag}")
        Console.info(f"Commit date: {record.commit_date}")
        Console.info(f"Pull mode: {record.pull_mode.value}")

        Console.success("Pull process completed!")
