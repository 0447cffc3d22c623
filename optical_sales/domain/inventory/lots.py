# optical_sales/domain/inventory/lots.py
"""FIFO deduction planning over purchase lots.

Planning is pure: it reads ``lot.rows`` / ``lot.stock_in_at`` and returns
the replacement row lists for the lots it touched, without mutating
anything. The inventory service applies and persists a plan.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, List

from .degree_keys import row_degree_key
from .stock_index import row_quantity


@dataclass
class LotChange:
    lot: Any
    rows: List[dict]


@dataclass
class DeductionPlan:
    degree: str
    requested: int
    remaining: int
    changes: List[LotChange] = field(default_factory=list)

    @property
    def deducted(self) -> int:
        return self.requested - self.remaining


def _sort_key(ts: datetime) -> datetime:
    # sqlite hands back naive datetimes, freshly set ones are aware
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def fifo_order(lots: Iterable[Any]) -> List[Any]:
    """Received lots, oldest stock-in first."""
    received = [lot for lot in lots if lot.stock_in_at is not None]
    return sorted(received, key=lambda lot: _sort_key(lot.stock_in_at))


def plan_deduction(lots: Iterable[Any], degree: str, qty: int) -> DeductionPlan:
    """Consume ``qty`` units of ``degree`` from the oldest lots first.

    Matching rows shrink by what they give up; a row brought to zero is
    dropped. Non-matching rows are copied untouched. Lots whose rows did not
    change are left out of the plan. ``remaining > 0`` means the lots could
    not cover the request.
    """
    plan = DeductionPlan(degree=degree, requested=qty, remaining=qty)
    for lot in fifo_order(lots):
        if plan.remaining <= 0:
            break
        old_rows = list(lot.rows or [])
        new_rows: List[dict] = []
        for row in old_rows:
            if plan.remaining <= 0 or row_degree_key(row.get("degree")) != degree:
                new_rows.append(dict(row))
                continue
            have = row_quantity(row)
            take = min(plan.remaining, have)
            plan.remaining -= take
            if have - take > 0:
                new_rows.append({**row, "quantity": have - take})

        changed = len(new_rows) != len(old_rows) or any(
            row_quantity(new) != row_quantity(old) for new, old in zip(new_rows, old_rows)
        )
        if changed:
            plan.changes.append(LotChange(lot=lot, rows=new_rows))
    return plan
