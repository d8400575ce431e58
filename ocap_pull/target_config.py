"""
Target configuration for ocap-pull.

Describes which upstream repository to pull from and which directories to
materialize. Defaults cover the open-world-agents upstream; a YAML file can
override any field.
"""
import yaml
from pathlib import Path, PurePosixPath
from typing import List
from dataclasses import dataclass, field


DEFAULT_REPO_URL = "https://github.com/open-world-agents/open-world-agents"
DEFAULT_RELEASES_API_URL = "https://api.github.com/repos/open-world-agents/open-world-agents/releases/latest"
DEFAULT_BRANCH = "main"
DEFAULT_TARGET_DIRS = ["projects/ocap", "scripts/release"]
DEFAULT_VERSION_FILE = "pulled_version_info.txt"


class TargetConfigError(Exception):
    """Raised when a target config file is invalid."""
    pass


@dataclass
class PullTarget:
    """Represents the upstream repository and the directories pulled from it."""
    repo_url: str = DEFAULT_REPO_URL
    default_branch: str = DEFAULT_BRANCH
    releases_api_url: str = DEFAULT_RELEASES_API_URL
    target_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_TARGET_DIRS))
    version_file: str = DEFAULT_VERSION_FILE

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> 'PullTarget':
        """
        Load target configuration from YAML file.

        Every field is optional; missing fields keep their defaults.

        Args:
            yaml_path: Path to target YAML config file

        Returns:
            PullTarget instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            TargetConfigError: If the file has unknown keys or invalid values
        """
        if not yaml_path.exists():
            raise FileNotFoundError(f"Target config not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise TargetConfigError(f"Invalid YAML in {yaml_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TargetConfigError(f"Target config must be a mapping: {yaml_path}")

        known_fields = {'repo_url', 'default_branch', 'releases_api_url', 'target_dirs', 'version_file'}
        unknown = sorted(set(data) - known_fields)
        if unknown:
            raise TargetConfigError(f"Unknown fields in {yaml_path}: {', '.join(unknown)}")

        for key in ('repo_url', 'default_branch', 'releases_api_url', 'version_file'):
            if key in data and (not isinstance(data[key], str) or not data[key].strip()):
                raise TargetConfigError(f"Field '{key}' must be a non-empty string in {yaml_path}")

        target = cls(**{k: v for k, v in data.items() if k != 'target_dirs'})
        if 'target_dirs' in data:
            target.target_dirs = _validate_target_dirs(data['target_dirs'], yaml_path)

        return target


def _validate_target_dirs(value, yaml_path: Path) -> List[str]:
    if not isinstance(value, list) or not value:
        raise TargetConfigError(f"Field 'target_dirs' must be a non-empty list in {yaml_path}")

    dirs = []
    for entry in value:
        if not isinstance(entry, str) or not entry.strip():
            raise TargetConfigError(f"Invalid target dir {entry!r} in {yaml_path}")
        rel = PurePosixPath(entry.strip().rstrip('/'))
        if rel.is_absolute() or '..' in rel.parts:
            raise TargetConfigError(f"Target dir must be relative without '..': {entry}")
        dirs.append(str(rel))
    return dirs
