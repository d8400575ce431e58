"""
Provenance record for a pull.

Records exactly which upstream reference was materialized and how to pull it
again. Written as key=value lines with comment headers.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ocap_pull.selection import PullMode, PullRequest
from ocap_pull.target_config import PullTarget
from ocap_pull.workspace import Workspace


COMMAND_NAME = "ocap-pull"


@dataclass
class ProvenanceRecord:
    """What was pulled, from where, and how to reproduce it."""
    repo_url: str
    commit_hash: str
    branch: str
    commit_date: str
    commit_message: str
    pull_mode: PullMode
    directories: List[str]
    reproduce_branch: str
    release_tag: Optional[str] = None
    generated_at: datetime = field(default_factory=lambda: datetime.now().astimezone())

    def reproduce_commands(self) -> List[str]:
        """Command lines that pull this exact content again."""
        commands = []
        if self.release_tag and self.pull_mode in (PullMode.RELEASE, PullMode.LATEST_RELEASE):
            commands.append(f"{COMMAND_NAME} {self.release_tag}")
        commands.append(f"{COMMAND_NAME} {self.reproduce_branch} {self.commit_hash}")
        return commands

    def render(self) -> str:
        """Render the record as the provenance file text."""
        utc = self.generated_at.astimezone(timezone.utc)
        lines = [
            "# Pulled Version Information",
            f"# Generated on: {self.generated_at.strftime('%a %b %d %H:%M:%S %Z %Y')}",
            f"# Repository: {self.repo_url}",
            f"# Pull timestamp: {utc.strftime('%Y-%m-%dT%H:%M:%SZ')}",
            "",
            f"COMMIT_HASH={self.commit_hash}",
            f"BRANCH={self.branch}",
            f"COMMIT_DATE={self.commit_date}",
            f"COMMIT_MESSAGE={self.commit_message}",
        ]
        if self.release_tag:
            lines.append(f"RELEASE_TAG={self.release_tag}")
        lines.append(f"PULL_MODE={self.pull_mode.value}")

        lines.append("")
        lines.append("# Directories pulled:")
        lines.extend(f"# - {d}" for d in self.directories)

        lines.append("")
        lines.append("# To reproduce this exact pull:")
        lines.append("\n# or\n".join(f"# {cmd}" for cmd in self.reproduce_commands()))

        return "\n".join(lines) + "\n"

    def write(self, path: Path):
        """Overwrite path with the rendered record."""
        path.write_text(self.render(), encoding='utf-8')


def collect(workspace: Workspace, request: PullRequest, target: PullTarget) -> ProvenanceRecord:
    """
    Read the provenance of the workspace's checked-out commit.

    For release modes the tag is re-verified against HEAD, falling back to
    the requested tag when no tag points exactly at HEAD.

    Args:
        workspace: Acquired workspace
        request: The request the workspace was acquired for
        target: Upstream target description

    Returns:
        ProvenanceRecord
    """
    branch = workspace.current_branch()

    release_tag = None
    if request.is_release:
        release_tag = workspace.exact_tag() or request.release_tag

    if branch != "detached":
        reproduce_branch = branch
    else:
        reproduce_branch = request.branch or target.default_branch

    return ProvenanceRecord(
        repo_url=target.repo_url,
        commit_hash=workspace.head_commit(),
        branch=branch,
        commit_date=workspace.commit_date(),
        commit_message=workspace.commit_message(),
        pull_mode=request.mode,
        directories=list(target.target_dirs),
        reproduce_branch=reproduce_branch,
        release_tag=release_tag,
    )
