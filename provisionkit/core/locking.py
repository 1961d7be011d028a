"""
Cross-process locking for provisioning runs.

Two provisioning runs on the same machine would interleave package-manager
and toolchain-manager calls, so the orchestrator holds a file lock for the
whole provisioning phase.

Usage:
    from provisionkit.core.locking import LockManager

    with LockManager().provision_lock(timeout=600):
        ...
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from .exceptions import ProvisionLockTimeout

logger = logging.getLogger(__name__)


def get_state_dir() -> Path:
    """Per-user directory for ProvisionKit lock files."""
    return Path.home() / ".provisionkit"


class LockManager:
    """
    Manages file locks for ProvisionKit.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Optional[Path] = None):
        """
        Initialize lock manager.

        Args:
            lock_dir: Directory for lock files (default: ~/.provisionkit/lock)
        """
        if lock_dir is None:
            lock_dir = get_state_dir() / "lock"

        self.lock_dir = Path(lock_dir)
        self.lock_dir.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def provision_lock(self, timeout: float = 600):
        """
        Hold the machine-wide provisioning lock.

        Args:
            timeout: Maximum wait time in seconds

        Raises:
            ProvisionLockTimeout: If lock can't be acquired within timeout
        """
        lock_path = self.lock_dir / "provision.lock"
        lock = FileLock(str(lock_path), timeout=timeout)

        try:
            lock.acquire()
        except Timeout as e:
            message = (
                f"Could not acquire provisioning lock after {timeout}s. "
                "Another ProvisionKit process may be running."
            )
            logger.error(message)
            raise ProvisionLockTimeout(message) from e

        logger.debug(f"Acquired provisioning lock: {lock_path}")
        try:
            yield
        finally:
            lock.release()
            logger.debug(f"Released provisioning lock: {lock_path}")
