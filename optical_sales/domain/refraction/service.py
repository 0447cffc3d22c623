# optical_sales/domain/refraction/service.py
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from optical_sales.core.errors import BusinessError
from optical_sales.db.models.refraction_records import RefractionRecord
from optical_sales.db.repositories.refraction_records import list_refraction_records
from optical_sales.db.repositories.sales_orders import list_sales_orders
from .codec import empty_row, is_refraction_text, normalize_row, parse_spec_text
from .schemas import ImportableRefraction, RefractionRecordCreate, RefractionRow

log = logging.getLogger(__name__)


def _complete_pair(rows: List[RefractionRow]) -> List[RefractionRow]:
    """Exactly one right and one left row, right first; missing eyes are empty."""
    by_eye = {}
    for row in rows:
        if row.eye in by_eye:
            raise BusinessError(f"Duplicate {row.eye} eye row", eye=row.eye)
        by_eye[row.eye] = row
    return [by_eye.get("right") or empty_row("right"), by_eye.get("left") or empty_row("left")]


async def create_refraction_record(
    db: AsyncSession,
    data: RefractionRecordCreate,
) -> RefractionRecord:
    if not data.customer_id.strip():
        raise BusinessError("customer_id is required")
    rows = [normalize_row(r) for r in _complete_pair(data.rows)]

    record = RefractionRecord(
        customer_id=data.customer_id,
        rows=[r.model_dump() for r in rows],
        pd_right=data.pd_right,
        pd_left=data.pd_left,
        pd_both=data.pd_both,
    )
    db.add(record)
    await db.commit()
    await db.refresh(record)
    log.info("refraction record %s created for customer %s", record.id, record.customer_id)
    return record


async def list_importable_refractions(
    db: AsyncSession,
    customer_id: str,
) -> List[ImportableRefraction]:
    """Candidates for "import refraction": past order specs first, then records.

    From each of the customer's sales orders (newest first) the first line
    whose spec is refraction text is offered. Orders whose spec no longer
    parses are skipped.
    """
    out: List[ImportableRefraction] = []

    for order in await list_sales_orders(db, customer_id=customer_id):
        spec = next(
            (it.get("spec_display") for it in order.items or [] if is_refraction_text(it.get("spec_display"))),
            None,
        )
        rows = parse_spec_text(spec) if spec else None
        if not rows:
            continue
        out.append(
            ImportableRefraction(
                source="order",
                rows=rows,
                created_at=order.created_at,
                order_id=order.id,
                order_no=order.order_no,
                spec_display=spec,
            )
        )

    for record in await list_refraction_records(db, customer_id):
        out.append(
            ImportableRefraction(
                source="record",
                rows=[RefractionRow.model_validate(r) for r in record.rows],
                created_at=record.created_at,
                record_id=record.id,
                pd_right=record.pd_right,
                pd_left=record.pd_left,
                pd_both=record.pd_both,
            )
        )
    return out
