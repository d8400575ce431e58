"""
Copy target directories from a workspace into the caller's working tree.
"""
import shutil
from pathlib import Path
from typing import List, Sequence

from ocap_pull.console import Console


class MissingTargetError(Exception):
    """Raised when an expected directory is absent from the workspace."""
    pass


def verify_targets(workspace_root: Path, target_dirs: Sequence[str]):
    """
    Check that every target directory exists in the workspace.

    Raises:
        MissingTargetError: On the first absent directory
    """
    for target_dir in target_dirs:
        if not (workspace_root / target_dir).is_dir():
            raise MissingTargetError(f"Directory '{target_dir}' not found in the cloned repository!")


def materialize(workspace_root: Path, work_tree: Path, target_dirs: Sequence[str]) -> List[Path]:
    """
    Replace target directories in the working tree with the workspace copies.

    Args:
        workspace_root: Root of the cloned repository
        work_tree: Caller's working tree
        target_dirs: Relative directory paths to copy

    Returns:
        Destination paths, in target_dirs order
    """
    verify_targets(workspace_root, target_dirs)

    copied = []
    for target_dir in target_dirs:
        dst = work_tree / target_dir
        if dst.is_symlink() or dst.is_file():
            Console.warning(f"Removing existing '{target_dir}'")
            dst.unlink()
        elif dst.exists():
            Console.warning(f"Removing existing '{target_dir}'")
            shutil.rmtree(dst)

        Console.info(f"Copying {target_dir} directory...")
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(workspace_root / target_dir, dst, symlinks=True)
        copied.append(dst)

    return copied
