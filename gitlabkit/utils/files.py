"""File operations utilities for gitlabkit."""

import logging
import os
import subprocess
from typing import Dict, List, Optional, Tuple

from .errors import OwnershipError, create_error_suggestions

logger = logging.getLogger(__name__)


class FileManager:
    """Manages file operations for gitlabkit."""

    def __init__(self, verbose: bool = False):
        """Initialize file manager."""
        self.verbose = verbose

    def create_directory_structure(self, base_path: str, structure: Dict[str, any]) -> List[str]:
        """
        Create directory structure from specification.

        Args:
            base_path: Base directory path
            structure: Nested mapping; dicts and None are directories

        Returns:
            List[str]: List of created paths
        """
        created_paths = []

        def create_recursive(current_path: str, spec: Dict[str, any]):
            for name, content in spec.items():
                full_path = os.path.join(current_path, name)

                if isinstance(content, dict):
                    os.makedirs(full_path, exist_ok=True)
                    created_paths.append(full_path)
                    create_recursive(full_path, content)
                else:
                    os.makedirs(full_path, exist_ok=True)
                    created_paths.append(full_path)

        os.makedirs(base_path, exist_ok=True)
        create_recursive(base_path, structure)

        logger.debug("Created %d paths under %s", len(created_paths), base_path)

        return created_paths

    def write_file(self, file_path: str, content: str, mode: Optional[int] = None) -> str:
        """
        Write a text file, creating parent directories as needed.

        Args:
            file_path: Destination path
            content: File contents
            mode: Optional permission mode applied after writing

        Returns:
            str: Path to written file
        """
        parent = os.path.dirname(file_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            f.write(content)

        if mode is not None:
            self.set_file_permissions(file_path, mode)

        if self.verbose:
            print(f"Wrote {file_path}")

        return file_path

    def set_file_permissions(self, file_path: str, mode: int) -> None:
        """
        Set file permissions.

        Args:
            file_path: Path to file
            mode: Permission mode (e.g., 0o600)
        """
        os.chmod(file_path, mode)

        logger.debug("Set permissions %s for %s", oct(mode), file_path)

    def set_ownership(self, path: str, owner: str) -> None:
        """
        Recursively hand a directory tree to ``uid:gid``.

        Root uses os.chown directly; anyone else goes through sudo.

        Args:
            path: Root of the tree
            owner: Owner in ``uid:gid`` form
        """
        uid, gid = parse_owner(owner)

        if os.geteuid() == 0:
            try:
                os.chown(path, uid, gid)
                for root, dirs, files in os.walk(path):
                    for name in dirs + files:
                        os.lchown(os.path.join(root, name), uid, gid)
            except OSError as e:
                raise OwnershipError(
                    f"Failed to change ownership of {path} to {owner}",
                    details=str(e),
                    suggestions=create_error_suggestions("ownership_failed", path=path),
                )
        else:
            cmd = ["sudo", "chown", "-R", f"{uid}:{gid}", path]
            logger.info("Running: %s", " ".join(cmd))
            try:
                result = subprocess.run(cmd, capture_output=True, text=True)
            except FileNotFoundError:
                raise OwnershipError(
                    "sudo is not available to change ownership",
                    suggestions=create_error_suggestions("ownership_failed", path=path),
                )

            if result.returncode != 0:
                raise OwnershipError(
                    f"Failed to change ownership of {path} to {owner}",
                    details=result.stderr.strip() or None,
                    suggestions=create_error_suggestions("ownership_failed", path=path),
                )

        if self.verbose:
            print(f"Changed ownership of {path} to {owner}")


def parse_owner(owner: str) -> Tuple[int, int]:
    """
    Parse a ``uid:gid`` string.

    Args:
        owner: Owner specification, e.g. ``1000:1000``

    Returns:
        Tuple[int, int]: uid and gid
    """
    uid, sep, gid = str(owner).partition(":")
    if not sep or not uid.isdigit() or not gid.isdigit():
        raise ValueError(f"Owner must look like 'uid:gid', got {owner!r}")
    return int(uid), int(gid)
