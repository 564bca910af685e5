# backend/services/reconciler.py
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Tuple


@dataclass(frozen=True)
class TagDiff:
    """Association changes needed to bring a product's tags to a desired set.

    ``to_add`` holds tag ids that need a new row, ``to_remove`` holds the ids
    of existing association rows that have to go.
    """
    to_add: FrozenSet[int] = frozenset()
    to_remove: FrozenSet[int] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def reconcile_tags(current: Iterable[Tuple[int, int]], desired: Iterable[int]) -> TagDiff:
    """Compare current ``(row_id, tag_id)`` pairs with the desired tag ids.

    Deleting the rows in ``to_remove`` and inserting one row per id in
    ``to_add`` leaves exactly the distinct desired tag ids. Tag ids are
    assumed unique across ``current``. Duplicates in ``desired`` collapse.
    """
    current = list(current)
    wanted = frozenset(desired)
    present = frozenset(tag_id for _, tag_id in current)

    return TagDiff(
        to_add=wanted - present,
        to_remove=frozenset(row_id for row_id, tag_id in current if tag_id not in wanted),
    )
