# optical_sales/domain/refraction/external.py
"""Map a patient-registry subjective refraction into our rows.

The registry sends separate numeric fields per eye. Sphere, cylinder and near
add power arrive as signed decimal strings, axis as an integer, and visual
acuity as a value plus an optional superscript qualifier (sign + level). It
has no prism data.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Tuple

from .codec import commit_sphere, to_two_decimals
from .schemas import ExternalSubjective, RefractionRow

NO_VALUE = "—"


def format_vision(value: Optional[str]) -> str:
    """Visual acuity display: one decimal unless the hundredths digit is set.

    ``"1.20"`` -> ``"1.2"``, ``"0.05"`` -> ``"0.05"``, blank -> ``"—"``.
    """
    v = (value or "").strip()
    if not v:
        return NO_VALUE
    try:
        n = Decimal(v)
    except InvalidOperation:
        return v
    if not n.is_finite():
        return v
    hundredths = int((n * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    places = Decimal("0.1") if hundredths % 10 == 0 else Decimal("0.01")
    return str(n.quantize(places, rounding=ROUND_HALF_UP))


def vision_to_corrected_va(
    vision: Optional[str],
    sign: Optional[str],
    level: Optional[int],
) -> str:
    """``{vision}{sign}{level}``, e.g. ``1.2+1``; "" when there is no vision."""
    if not (vision or "").strip():
        return ""
    formatted = format_vision(vision)
    if formatted == NO_VALUE:
        return ""
    return formatted + (sign or "").strip() + ("" if level is None else str(level))


def _eye_row(eye, sphere, cylinder, axis, vision, vision_sign, vision_level, add_power) -> RefractionRow:
    return RefractionRow(
        eye=eye,
        sphere=commit_sphere(sphere or ""),
        cylinder=to_two_decimals(cylinder, strip_sign=True),
        axis="" if axis is None else str(axis),
        corrected_va=vision_to_corrected_va(vision, vision_sign, vision_level),
        add_power=to_two_decimals(add_power, strip_sign=True),
    )


def subjective_to_refraction(
    subjective: Optional[ExternalSubjective],
) -> Tuple[List[RefractionRow], str]:
    """Returns ``([right, left], binocular pupillary distance)``."""
    s = subjective or ExternalSubjective()
    right = _eye_row(
        "right",
        s.right_spherical,
        s.right_cylindrical,
        s.right_axis,
        s.right_old_vision,
        s.right_old_vision_sign,
        s.right_old_vision_level,
        s.right_near_add_power,
    )
    left = _eye_row(
        "left",
        s.left_spherical,
        s.left_cylindrical,
        s.left_axis,
        s.left_old_vision,
        s.left_old_vision_sign,
        s.left_old_vision_level,
        s.left_near_add_power,
    )
    return [right, left], (s.both_pupil_distance or "").strip()
