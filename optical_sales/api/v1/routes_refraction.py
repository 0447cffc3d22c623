# optical_sales/api/v1/routes_refraction.py
from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from optical_sales.db.base import get_db
from optical_sales.db.repositories.refraction_records import list_refraction_records
from optical_sales.domain.refraction.codec import eye_spec, format_for_spec, parse_spec_text
from optical_sales.domain.refraction.external import subjective_to_refraction
from optical_sales.domain.refraction.schemas import (
    ExternalRefractionOut,
    ExternalSubjective,
    FormatOut,
    FormatRequest,
    ImportableRefraction,
    ParseOut,
    ParseRequest,
    RefractionRecordCreate,
    RefractionRecordOut,
)
from optical_sales.domain.refraction.service import create_refraction_record, list_importable_refractions


router = APIRouter(prefix="/api/v1", tags=["refraction"])


@router.post("/refraction-records", response_model=RefractionRecordOut)
async def create_refraction_record_endpoint(
    payload: RefractionRecordCreate,
    db: AsyncSession = Depends(get_db),
):
    return await create_refraction_record(db, payload)

@router.get("/customers/{customer_id}/refraction-records", response_model=List[RefractionRecordOut])
async def list_refraction_records_endpoint(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await list_refraction_records(db, customer_id)

@router.get("/customers/{customer_id}/importable-refractions", response_model=List[ImportableRefraction])
async def importable_refractions_endpoint(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await list_importable_refractions(db, customer_id)

@router.post("/refraction/format", response_model=FormatOut)
async def format_endpoint(payload: FormatRequest):
    return FormatOut(
        spec_display=format_for_spec(payload.rows),
        right=eye_spec(payload.rows, "right"),
        left=eye_spec(payload.rows, "left"),
    )

@router.post("/refraction/parse", response_model=ParseOut)
async def parse_endpoint(payload: ParseRequest):
    # a miss is a normal answer, never an error
    rows = parse_spec_text(payload.text)
    return ParseOut(is_refraction=rows is not None, rows=rows)

@router.post("/refraction/external/convert", response_model=ExternalRefractionOut)
async def external_convert_endpoint(payload: ExternalSubjective):
    rows, pd_both = subjective_to_refraction(payload)
    return ExternalRefractionOut(rows=rows, pd_both=pd_both)
