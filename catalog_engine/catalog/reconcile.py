"""Set reconciliation between persisted rows and a desired state.

Used by product updates to turn a full-replace payload into the minimal
set of inserts, updates and deletes per owned collection.
"""

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

X = TypeVar("X")
D = TypeVar("D")


@dataclass
class Reconciliation(Generic[X, D]):
    """Changes that bring a persisted collection to a desired state.

    Attributes:
        to_insert: Desired items with no persisted counterpart.
        to_update: Pairs of (persisted row, desired item) sharing a key.
        to_delete: Persisted rows absent from the desired state.
    """

    to_insert: list[D] = field(default_factory=list)
    to_update: list[tuple[X, D]] = field(default_factory=list)
    to_delete: list[X] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.to_insert or self.to_update or self.to_delete)


def reconcile(
    existing: Iterable[X],
    desired: Iterable[D],
    existing_key: Callable[[X], Hashable | None],
    desired_key: Callable[[D], Hashable | None],
) -> Reconciliation[X, D]:
    """Diff persisted rows against desired items by natural key.

    Each desired item is paired with at most one persisted row of the
    same key, in order. A key of None never matches, so such items are
    always inserted and such rows always deleted. Persisted rows left
    unpaired are deleted.

    Args:
        existing: Persisted rows.
        desired: Desired items.
        existing_key: Natural key of a persisted row.
        desired_key: Natural key of a desired item.

    Returns:
        Reconciliation with inserts, updates and deletes.

    Example:
        >>> result = reconcile(["a", "b"], ["b", "c"], str, str)
        >>> result.to_insert, result.to_update, result.to_delete
        (['c'], [('b', 'b')], ['a'])
    """
    pool: dict[Hashable, list[X]] = {}
    unkeyed: list[X] = []
    for row in existing:
        key = existing_key(row)
        if key is None:
            unkeyed.append(row)
        else:
            pool.setdefault(key, []).append(row)

    result: Reconciliation[X, D] = Reconciliation()
    for item in desired:
        key = desired_key(item)
        candidates = pool.get(key) if key is not None else None
        if candidates:
            result.to_update.append((candidates.pop(0), item))
        else:
            result.to_insert.append(item)

    result.to_delete.extend(unkeyed)
    for rows in pool.values():
        result.to_delete.extend(rows)
    return result
