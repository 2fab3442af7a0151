"""Partitioning of insert operations across workers."""

from __future__ import annotations

from dataclasses import dataclass

from docbench._internal.errors import ConfigError


@dataclass(frozen=True)
class WorkAssignment:
    """A contiguous block of 1-based operation indices owned by one worker.

    Attributes:
        worker_id: Index of the worker this block belongs to.
        first_index: First operation index (inclusive).
        count: Number of operations in the block; may be zero.
    """

    worker_id: int
    first_index: int
    count: int

    @property
    def indices(self) -> range:
        """Operation indices in execution order."""
        return range(self.first_index, self.first_index + self.count)

    def __len__(self) -> int:
        return self.count


def partition_operations(total: int, num_workers: int) -> list[WorkAssignment]:
    """Split operations ``1..total`` into ``num_workers`` contiguous blocks.

    Each worker gets ``total // num_workers`` operations; the first
    ``total % num_workers`` workers get one extra. Workers beyond ``total``
    receive empty blocks. Blocks never overlap and together cover every
    index exactly once.

    Args:
        total: Total number of operations (>= 0).
        num_workers: Number of workers (>= 1).

    Returns:
        One WorkAssignment per worker, ordered by worker_id.

    Raises:
        ConfigError: If ``total`` is negative or ``num_workers`` is below 1.
    """
    if num_workers < 1:
        msg = f"num_workers must be >= 1, got: {num_workers}"
        raise ConfigError(msg)
    if total < 0:
        msg = f"total must be >= 0, got: {total}"
        raise ConfigError(msg)

    base, remainder = divmod(total, num_workers)
    assignments: list[WorkAssignment] = []
    next_index = 1
    for worker_id in range(num_workers):
        count = base + (1 if worker_id < remainder else 0)
        assignments.append(WorkAssignment(worker_id, next_index, count))
        next_index += count
    return assignments
