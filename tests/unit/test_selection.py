"""
Unit tests for pull mode resolution.
"""
import pytest

from ocap_pull.selection import (
    InputError,
    PullMode,
    PullRequest,
    is_commit_hash,
    is_version_tag,
    resolve_request,
)


class TestVersionTagPattern:
    """Test version-tag recognition."""

    @pytest.mark.parametrize("value", ["v1.2.3", "1.2.3", "v2", "10.0", "v1.2.3-rc1", "2.0.0-beta.1"])
    def test_tag_shaped(self, value):
        assert is_version_tag(value)

    @pytest.mark.parametrize("value", ["main", "develop", "release/1.2", "v", "v1.", "vv1.2", "feature-1.2"])
    def test_not_tag_shaped(self, value):
        assert not is_version_tag(value)


class TestCommitHashPattern:
    """Test commit hash validation."""

    def test_accepts_short_and_full_hashes(self):
        assert is_commit_hash("abc123")
        assert is_commit_hash("ABCDEF0123")
        assert is_commit_hash("a" * 40)

    def test_rejects_malformed(self):
        assert not is_commit_hash("abc12")
        assert not is_commit_hash("a" * 41)
        assert not is_commit_hash("not-a-hash")
        assert not is_commit_hash("xyz1234")


class TestResolveRequest:
    """Test argument resolution order."""

    def test_no_arguments_selects_latest_release(self):
        request = resolve_request("", "")

        assert request.mode == PullMode.LATEST_RELEASE
        assert request.release_tag is None

    def test_tag_selects_release(self):
        request = resolve_request("v1.2.3", None)

        assert request == PullRequest(mode=PullMode.RELEASE, release_tag="v1.2.3")

    def test_other_name_selects_branch(self):
        request = resolve_request("develop", None)

        assert request == PullRequest(mode=PullMode.BRANCH, branch="develop")

    def test_commit_hash_selects_commit_mode_on_default_branch(self):
        request = resolve_request("", "abc1234567")

        assert request.mode == PullMode.COMMIT
        assert request.branch == "main"
        assert request.commit_hash == "abc1234567"

    def test_commit_hash_uses_first_argument_as_branch(self):
        request = resolve_request("develop", "abc1234567")

        assert request.mode == PullMode.COMMIT
        assert request.branch == "develop"

    def test_commit_hash_wins_over_tag_shaped_first_argument(self):
        request = resolve_request("v1.2.3", "abc1234567")

        assert request.mode == PullMode.COMMIT
        assert request.branch == "v1.2.3"

    def test_invalid_commit_hash_raises(self):
        with pytest.raises(InputError, match="Invalid commit hash format: not-a-hash"):
            resolve_request("main", "not-a-hash")

    def test_release_version_env_used_when_first_argument_empty(self):
        request = resolve_request("", None, release_version="v3.0.0")

        assert request.mode == PullMode.RELEASE
        assert request.release_tag == "v3.0.0"

    def test_release_version_env_can_name_a_branch(self):
        request = resolve_request(None, None, release_version="develop")

        assert request == PullRequest(mode=PullMode.BRANCH, branch="develop")

    def test_explicit_argument_beats_release_version_env(self):
        request = resolve_request("feature-x", None, release_version="v3.0.0")

        assert request == PullRequest(mode=PullMode.BRANCH, branch="feature-x")

    def test_custom_default_branch(self):
        request = resolve_request("", "abcdef", default_branch="trunk")

        assert request.branch == "trunk"


class TestPullRequest:
    """Test request helpers."""

    def test_fall_back_to_branch(self):
        request = PullRequest(mode=PullMode.LATEST_RELEASE).fall_back_to_branch("main")

        assert request == PullRequest(mode=PullMode.BRANCH, branch="main")
        assert not request.is_release

    def test_with_release_tag(self):
        request = PullRequest(mode=PullMode.LATEST_RELEASE).with_release_tag("v2.0.0")

        assert request.release_tag == "v2.0.0"
        assert request.is_release

    def test_describe(self):
        assert PullRequest(PullMode.COMMIT, branch="main", commit_hash="abc123").describe("main") == "commit abc123"
        assert (
            PullRequest(PullMode.COMMIT, branch="develop", commit_hash="abc123").describe("main")
            == "commit abc123 from branch 'develop'"
        )
        assert PullRequest(PullMode.RELEASE, release_tag="v1.0.0").describe("main") == "release version v1.0.0"
        assert PullRequest(PullMode.LATEST_RELEASE, release_tag="v2.0.0").describe("main") == "latest release (v2.0.0)"
        assert PullRequest(PullMode.BRANCH, branch="develop").describe("main") == "latest from branch 'develop'"
