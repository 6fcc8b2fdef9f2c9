"""Deletes old run output directories beyond a keep-count."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

BATCH_PREFIX = "batch_"
DEFAULT_KEEP = 5


class RetentionSweeper:
    """Keeps the ``keep`` newest ``batch_*`` directories under a root.

    Directory names embed a sortable timestamp, so name order is age order.
    """

    def __init__(self, prefix: str = BATCH_PREFIX) -> None:
        self._prefix = prefix

    def sweep(self, root_dir: str | Path, keep: int = DEFAULT_KEEP) -> list[Path]:
        """Delete all but the newest ``keep`` batch directories.

        A directory that cannot be deleted is logged and skipped. Returns
        the directories that were removed.
        """
        root = Path(root_dir)
        if not root.is_dir():
            logger.debug("Retention root %s does not exist, nothing to sweep", root)
            return []

        batches = sorted(
            (p for p in root.iterdir() if p.is_dir() and p.name.startswith(self._prefix)),
            key=lambda p: p.name,
            reverse=True,
        )
        removed: list[Path] = []
        for old in batches[max(keep, 0):]:
            try:
                self._remove_tree(old)
            except OSError as exc:
                logger.warning("Failed to delete old batch directory %s: %s", old, exc)
                continue
            removed.append(old)
            logger.info("Deleted old batch directory: %s", old)
        return removed

    @staticmethod
    def _remove_tree(directory: Path) -> None:
        for current, dirs, files in os.walk(directory, topdown=False):
            for name in files:
                os.unlink(os.path.join(current, name))
            for name in dirs:
                child = os.path.join(current, name)
                if os.path.islink(child):
                    os.unlink(child)
                else:
                    os.rmdir(child)
        os.rmdir(directory)
