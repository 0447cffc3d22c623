# optical_sales/domain/refraction/schemas.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from uuid import UUID
from typing import List, Literal, Optional

Eye = Literal["right", "left"]


class RefractionRow(BaseModel):
    """One eye of a prescription.

    Every value is text so that the user's precision and sign survive
    storage. ``cylinder`` and ``add_power`` are unsigned magnitudes; the
    clinical sign (minus / plus) is applied only when rendering.
    """

    eye: Eye
    sphere: str = ""
    cylinder: str = ""
    axis: str = ""
    corrected_va: str = ""
    add_power: str = ""
    prism_horiz: Literal["BI", "BD", ""] = ""
    prism_horiz_delta: str = ""
    prism_vert: Literal["BU", "BD", ""] = ""
    prism_vert_delta: str = ""


class RefractionRecordCreate(BaseModel):
    customer_id: str
    rows: List[RefractionRow]
    pd_right: Optional[str] = None
    pd_left: Optional[str] = None
    pd_both: Optional[str] = None


class RefractionRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_id: str
    rows: List[RefractionRow]
    pd_right: Optional[str]
    pd_left: Optional[str]
    pd_both: Optional[str]
    created_at: datetime


class ImportableRefraction(BaseModel):
    """A past refraction the sales form can import.

    ``source`` is ``"record"`` for a stored refraction record and ``"order"``
    for a refraction-format spec found on one of the customer's sales orders.
    """

    source: Literal["record", "order"]
    rows: List[RefractionRow]
    created_at: datetime
    record_id: Optional[UUID] = None
    order_id: Optional[UUID] = None
    order_no: Optional[str] = None
    spec_display: Optional[str] = None
    pd_right: Optional[str] = None
    pd_left: Optional[str] = None
    pd_both: Optional[str] = None


class FormatRequest(BaseModel):
    rows: List[RefractionRow]


class FormatOut(BaseModel):
    spec_display: str
    right: str
    left: str


class ParseRequest(BaseModel):
    text: str


class ParseOut(BaseModel):
    is_refraction: bool
    rows: Optional[List[RefractionRow]] = None


class ExternalSubjective(BaseModel):
    """Subjective refraction of one exam, as the patient registry sends it."""

    right_spherical: Optional[str] = None
    right_cylindrical: Optional[str] = None
    right_axis: Optional[int] = None
    left_spherical: Optional[str] = None
    left_cylindrical: Optional[str] = None
    left_axis: Optional[int] = None
    right_old_vision: Optional[str] = None
    right_old_vision_sign: Optional[str] = None
    right_old_vision_level: Optional[int] = None
    left_old_vision: Optional[str] = None
    left_old_vision_sign: Optional[str] = None
    left_old_vision_level: Optional[int] = None
    both_pupil_distance: Optional[str] = None
    right_near_add_power: Optional[str] = None
    left_near_add_power: Optional[str] = None


class ExternalRefractionOut(BaseModel):
    rows: List[RefractionRow]
    pd_both: str
