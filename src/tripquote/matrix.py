"""
Row and add-on matrices.

A matrix is an ordered collection of rows with stable, unique ids. Every
row carries all three options, so options can never be reordered
independently. Operations return a new matrix and leave the original alone.
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import settings
from .exceptions import MatrixError
from .models import (
    OPTION_COUNT, AddOnCategory, AddOnRow, BlockConfig, Row,
    RowCategory, RowOption,
)

logger = logging.getLogger(__name__)

# Add-on rows that vendor pricing may fill, per category
ADD_ON_SLOTS_PER_CATEGORY = 2

LineItemUpdate = Tuple[str, Tuple[RowOption, RowOption, RowOption]]


class _Matrix:
    _kind = "row"

    def __init__(self, rows: Iterable = ()):
        self._rows = tuple(rows)
        self._index: Dict[int, int] = {}
        for position, row in enumerate(self._rows):
            if row.id in self._index:
                raise MatrixError(f"Duplicate {self._kind} id {row.id}")
            self._index[row.id] = position

    def __iter__(self) -> Iterator:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, position: int):
        return self._rows[position]

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._rows == other._rows

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._rows)!r})"

    @property
    def ids(self) -> List[int]:
        return [row.id for row in self._rows]

    def get(self, row_id: int):
        position = self._index.get(row_id)
        if position is None:
            return None
        return self._rows[position]

    def next_id(self) -> int:
        return max(self._index, default=-1) + 1

    def replace(self, row):
        """Swap in ``row`` at the position of the row with the same id."""
        position = self._index.get(row.id)
        if position is None:
            raise MatrixError(f"Unknown {self._kind} id {row.id}")
        rows = list(self._rows)
        rows[position] = row
        return type(self)(rows)


class RowMatrix(_Matrix):
    """Ordered cost line items."""

    def append(self, label: str, options: Sequence[RowOption] = (),
               category: Optional[RowCategory] = None) -> "RowMatrix":
        row = Row(id=self.next_id(), label=label, options=tuple(options), category=category)
        return RowMatrix(self._rows + (row,))

    def add_child_rows(self) -> "RowMatrix":
        """Append empty "Child With Bed" and "Child No Bed" rows."""
        return (self
                .append("Child With Bed", category=RowCategory.CHILD_WITH_BED)
                .append("Child No Bed", category=RowCategory.CHILD_NO_BED))

    def merge_line_items(self, items: Sequence[LineItemUpdate]) -> "RowMatrix":
        """
        Lay incoming line items over the matrix by position.

        Existing rows keep their id and position; extra items are appended
        with fresh ids; rows beyond the incoming items are reset to empty
        placeholders rather than removed.
        """
        rows: List[Row] = []
        next_id = self.next_id()

        for position, (label, options) in enumerate(items):
            if position < len(self._rows):
                # Explicit tags described the old label; re-derive from the new one
                rows.append(replace(self._rows[position], label=label,
                                    options=tuple(options), category=None))
            else:
                rows.append(Row(id=next_id, label=label, options=tuple(options)))
                next_id += 1

        for position in range(len(items), len(self._rows)):
            rows.append(Row(id=self._rows[position].id, label=f"Item {position + 1}"))

        appended = max(0, len(items) - len(self._rows))
        reset = max(0, len(self._rows) - len(items))
        logger.debug(f"Merged {len(items)} line items: {appended} appended, {reset} reset")
        return RowMatrix(rows)


class AddOnMatrix(_Matrix):
    """Ordered flight / visa add-ons."""
    _kind = "add-on"

    def slots(self, category: AddOnCategory) -> List[int]:
        """Positions that vendor pricing may fill for ``category``."""
        positions = [i for i, row in enumerate(self._rows) if row.category == category]
        return positions[:ADD_ON_SLOTS_PER_CATEGORY]

    def cleared(self) -> "AddOnMatrix":
        """Zero every quantity and net rate; per-unit markups are kept."""
        return AddOnMatrix(
            replace(row, options=tuple(
                replace(option, quantity=Decimal(0), net_rate=Decimal(0))
                for option in row.options
            ))
            for row in self._rows
        )

    def merge_add_ons(self, add_ons: Sequence[Tuple[AddOnCategory, Decimal]],
                      quantity: Decimal) -> "AddOnMatrix":
        """
        Fill the category slots in arrival order with ``quantity`` units at
        the given net rate, identically in all three options. Items beyond
        the available slots are dropped.
        """
        rows = list(self.cleared())
        free = {category: self.slots(category) for category in AddOnCategory}

        for category, net_rate in add_ons:
            if not free[category]:
                logger.warning(f"No free {category.value} add-on slot; dropping item at {net_rate}")
                continue
            position = free[category].pop(0)
            row = rows[position]
            rows[position] = replace(row, options=tuple(
                replace(option, quantity=quantity, net_rate=net_rate)
                for option in row.options
            ))

        return AddOnMatrix(rows)


def default_configs() -> Tuple[BlockConfig, BlockConfig, BlockConfig]:
    return tuple(
        BlockConfig(
            passenger_count=settings.default_passenger_count,
            markup_pct=settings.default_markup_pct,
            gst_pct=settings.default_gst_pct,
            tcs_pct=settings.default_tcs_pct,
        )
        for _ in range(OPTION_COUNT)
    )


def default_add_on_matrix() -> AddOnMatrix:
    """Two flight rows followed by two visa rows, all empty."""
    categories = [AddOnCategory.FLIGHT] * ADD_ON_SLOTS_PER_CATEGORY \
        + [AddOnCategory.VISA] * ADD_ON_SLOTS_PER_CATEGORY
    return AddOnMatrix(AddOnRow(id=i, category=category) for i, category in enumerate(categories))
