"""In-memory list snapshots and the aggregates derived from them.

A screen fetches a whole collection, keeps it as a ``ListSnapshot`` and does
all filtering, sorting and totals on that copy. Nothing here touches the
database, so everything works on plain dicts as well as model instances.
"""
from datetime import date
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple


def _value(row: Any, field: str) -> Any:
    if isinstance(row, dict):
        return row.get(field)
    return getattr(row, field, None)


def _number(value: Any) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def fee_balance(fee_amount: Optional[float], fee_paid: Optional[float]) -> Tuple[float, int]:
    """Return ``(pending_amount, paid_percentage)`` for a student.

    Missing amounts count as 0. The pending amount goes negative for an
    overpaid student. The percentage is rounded to a whole number and is 0
    when no fee is set.
    """
    amount = _number(fee_amount)
    paid = _number(fee_paid)
    pending = amount - paid
    percentage = int(round(paid / amount * 100)) if amount > 0 else 0
    return pending, percentage


class ListSnapshot:
    """The latest full result of a list call, plus client-side filtering."""

    def __init__(self, rows: Optional[Iterable[Any]] = None, search_fields: Sequence[str] = ()):
        self.search_fields = tuple(search_fields)
        self.rows: List[Any] = list(rows or [])

    def replace(self, rows: Iterable[Any]) -> 'ListSnapshot':
        # A refetch always replaces the whole snapshot, never merges
        self.rows = list(rows)
        return self

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)

    def matches(self, row: Any, term: str) -> bool:
        needle = term.lower()
        for field in self.search_fields:
            value = _value(row, field)
            if value is not None and needle in str(value).lower():
                return True
        return False

    def filter(self, term: Optional[str]) -> List[Any]:
        term = (term or '').strip()
        if not term:
            return list(self.rows)
        return [row for row in self.rows if self.matches(row, term)]

    def sorted_by(self, key: Callable[[Any], Any], descending: bool = False) -> List[Any]:
        return sorted(self.rows, key=key, reverse=descending)

    def top(self, n: int, key: Callable[[Any], Any], descending: bool = True) -> List[Any]:
        return self.sorted_by(key, descending)[:n]


def pending_payments(students: Iterable[Any], limit: int = 10) -> List[dict]:
    """Active students who still owe money, largest balance first."""
    pending = []
    for student in students:
        if (_value(student, 'status') or '') != 'active':
            continue
        amount = _number(_value(student, 'fee_amount'))
        paid = _number(_value(student, 'fee_paid'))
        if amount <= paid:
            continue
        pending.append({
            'id': _value(student, 'id'),
            'student_code': _value(student, 'student_code') or _value(student, 'id'),
            'student_name': _value(student, 'name'),
            'fee_amount': amount,
            'fee_paid': paid,
            'pending_amount': amount - paid,
        })
    pending.sort(key=lambda item: item['pending_amount'], reverse=True)
    return pending[:limit]


def payment_summary(payments: Iterable[Any], today: Optional[date] = None) -> dict:
    today = today or date.today()
    payments = list(payments)
    total = sum(_number(_value(p, 'amount_paid')) for p in payments)
    this_month = sum(
        _number(_value(p, 'amount_paid')) for p in payments
        if _value(p, 'month') == today.month and _value(p, 'year') == today.year
    )
    return {
        'total_collected': round(total, 2),
        'this_month': round(this_month, 2),
        'total_payments': len(payments),
    }


def distinct_batches(students: Iterable[Any]) -> List[str]:
    """Unique non-empty batch labels, in first-seen order."""
    seen = []
    for student in students:
        batch = _value(student, 'batch')
        if batch and batch not in seen:
            seen.append(batch)
    return seen
