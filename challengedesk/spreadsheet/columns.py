"""Tolerant header matching for user-supplied trade workbooks."""

from dataclasses import dataclass
from typing import Any, Sequence


def _normalise(header: Any) -> str:
    return str(header if header is not None else "").strip().lower()


def _find(headers: list[str], predicate) -> int | None:
    for index, h in enumerate(headers):
        if predicate(h):
            return index
    return None


def is_trade_number_header(header: str) -> bool:
    h = _normalise(header)
    return h == "trade #" or ("trade" in h and ("#" in h or "num" in h or "count" in h))


@dataclass(frozen=True)
class ColumnMap:
    """
    Column positions located by case-insensitive substring match.

    ``None`` means the column is absent. ``Trade #`` headers are excluded
    from the date and lot matches.
    """
    raw_headers: tuple[str, ...]
    trade_number: int | None
    date: int | None
    entry: int | None
    lot_size: int | None
    session: int | None
    outcome: int | None
    notes: int | None
    risk: int | None
    reward: int | None
    result: int | None
    equity: int | None

    @classmethod
    def from_headers(cls, headers: Sequence[Any]) -> "ColumnMap":
        h = [_normalise(x) for x in headers]
        return cls(
            raw_headers=tuple(str(x) if x is not None else "" for x in headers),
            trade_number=_find(h, is_trade_number_header),
            date=_find(h, lambda s: "date" in s and "trade" not in s),
            entry=_find(h, lambda s: "entry" in s),
            lot_size=_find(h, lambda s: ("lot" in s or "size" in s) and "trade" not in s),
            session=_find(h, lambda s: "session" in s),
            outcome=_find(h, lambda s: "outcome" in s),
            notes=_find(h, lambda s: "note" in s),
            risk=_find(h, lambda s: "risk" in s),
            reward=_find(h, lambda s: "reward" in s),
            result=_find(h, lambda s: "result" in s),
            equity=_find(h, lambda s: "equity" in s),
        )

    @property
    def has_required(self) -> bool:
        return self.date is not None and self.entry is not None

    def missing_required_message(self) -> str:
        return (
            "Excel file must contain 'Date' and 'Entry' columns. Please check the file format.\n\n"
            "Found columns: " + ", ".join(self.raw_headers)
        )


def cell(row: Sequence[Any], index: int | None) -> Any:
    """Value at *index*, or ``None`` when the column is absent or the row is short."""
    if index is None or index >= len(row):
        return None
    return row[index]


def cell_text(row: Sequence[Any], index: int | None) -> str:
    value = cell(row, index)
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
