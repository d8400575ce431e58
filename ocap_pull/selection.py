"""
Pull mode resolution.

Turns the positional arguments and the RELEASE_VERSION fallback into a
validated PullRequest. Pure functions only: nothing here touches the network
or git.
"""
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


VERSION_TAG_PATTERN = re.compile(r'^v?[0-9]+(\.[0-9]+)*(-.*)?$')
COMMIT_HASH_PATTERN = re.compile(r'^[a-fA-F0-9]{6,40}$')


class InputError(Exception):
    """Raised when arguments are malformed."""
    pass


class PullMode(str, Enum):
    """How the upstream reference is selected."""
    COMMIT = "commit"
    LATEST_RELEASE = "latest_release"
    RELEASE = "release"
    BRANCH = "branch"


def is_version_tag(value: str) -> bool:
    """
    Check whether a string looks like a release tag.

    Examples:
        >>> is_version_tag('v1.2.3')
        True
        >>> is_version_tag('2.0.0-rc1')
        True
        >>> is_version_tag('develop')
        False
    """
    return bool(VERSION_TAG_PATTERN.match(value))


def is_commit_hash(value: str) -> bool:
    """Check whether a string is 6-40 hexadecimal characters."""
    return bool(COMMIT_HASH_PATTERN.match(value))


@dataclass(frozen=True)
class PullRequest:
    """A resolved pull selection."""
    mode: PullMode
    branch: Optional[str] = None
    release_tag: Optional[str] = None
    commit_hash: Optional[str] = None

    @property
    def is_release(self) -> bool:
        return self.mode in (PullMode.RELEASE, PullMode.LATEST_RELEASE)

    def with_release_tag(self, tag: str) -> 'PullRequest':
        """Return a copy carrying the tag found by the release lookup."""
        return replace(self, release_tag=tag)

    def fall_back_to_branch(self, branch: str) -> 'PullRequest':
        """Return a branch-mode request used when the release lookup fails."""
        return PullRequest(mode=PullMode.BRANCH, branch=branch)

    def describe(self, default_branch: str) -> str:
        """Human-readable description of the target reference."""
        if self.mode == PullMode.COMMIT:
            if self.branch and self.branch != default_branch:
                return f"commit {self.commit_hash} from branch '{self.branch}'"
            return f"commit {self.commit_hash}"
        if self.mode == PullMode.LATEST_RELEASE:
            return f"latest release ({self.release_tag})"
        if self.mode == PullMode.RELEASE:
            return f"release version {self.release_tag}"
        return f"latest from branch '{self.branch}'"


def resolve_request(
    version_or_branch: Optional[str],
    commit_hash: Optional[str],
    release_version: Optional[str] = None,
    default_branch: str = "main",
) -> PullRequest:
    """
    Resolve arguments into a validated PullRequest.

    Resolution order: commit hash, latest release, release tag, branch.

    Args:
        version_or_branch: First positional argument (may be empty)
        commit_hash: Second positional argument (may be empty)
        release_version: RELEASE_VERSION fallback for an empty first argument
        default_branch: Branch used when a commit is requested without one

    Returns:
        PullRequest (release_tag is unset for LATEST_RELEASE until looked up)

    Raises:
        InputError: If the commit hash or release tag is malformed
    """
    version_or_branch = (version_or_branch or "").strip()
    commit_hash = (commit_hash or "").strip()

    if not version_or_branch and release_version:
        version_or_branch = release_version.strip()

    if commit_hash:
        if not is_commit_hash(commit_hash):
            raise InputError(
                f"Invalid commit hash format: {commit_hash} "
                "(commit hash should be 6-40 hexadecimal characters)"
            )
        return PullRequest(
            mode=PullMode.COMMIT,
            branch=version_or_branch or default_branch,
            commit_hash=commit_hash,
        )

    if not version_or_branch:
        return PullRequest(mode=PullMode.LATEST_RELEASE)

    if is_version_tag(version_or_branch):
        return PullRequest(mode=PullMode.RELEASE, release_tag=version_or_branch)

    return PullRequest(mode=PullMode.BRANCH, branch=version_or_branch)
