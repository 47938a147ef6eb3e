"""
Scoped ownership of the temporary numeric buffers used by a clustering call.

The engine registers its long-lived arrays (embedding matrix, seeds, labels,
centroids) with a :class:`NumericWorkspace`. Leaving the ``with`` block drops
the workspace's references to them, whether the call returned normally or
raised. An array is freed only once no other name still refers to it; the
short-lived distance and probability arrays inside seeding and refinement are
not registered and go away when those functions return.
"""

import logging
from typing import Dict, Iterator

import numpy as np

logger = logging.getLogger(__name__)


class NumericWorkspace:
    """Context manager holding named numpy buffers for one clustering call."""

    def __init__(self, name: str = "clustering"):
        self.name = name
        self._buffers: Dict[str, np.ndarray] = {}
        self._released = False

    def hold(self, key: str, array: np.ndarray) -> np.ndarray:
        """Register `array` under `key` and return it."""
        if self._released:
            raise RuntimeError(f"Workspace '{self.name}' has already been released")
        self._buffers[key] = array
        return array

    def __getitem__(self, key: str) -> np.ndarray:
        return self._buffers[key]

    def __contains__(self, key: str) -> bool:
        return key in self._buffers

    def __iter__(self) -> Iterator[str]:
        return iter(self._buffers)

    def __len__(self) -> int:
        return len(self._buffers)

    @property
    def nbytes(self) -> int:
        return sum(buf.nbytes for buf in self._buffers.values())

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        logger.debug(
            "Releasing workspace '%s' (%d buffers, %d bytes)",
            self.name,
            len(self._buffers),
            self.nbytes,
        )
        self._buffers.clear()
        self._released = True

    def __enter__(self) -> "NumericWorkspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
