# optical_sales/domain/refraction/codec.py
"""Clinical one-line notation for refraction rows.

One eye renders as up to four ``" | "``-separated parts, each omitted when
its data is missing::

    -1.00/-0.50×10° | ADD：+2.00 | BI 1.5△ | BU 0.5△

Both eyes render as ``右：{right} ；左：{left}``. That string is what a lens
sale line stores as its spec, and what the history import later parses back.

Parsing is a series of independent pattern extractions. A fragment that
does not match leaves its field empty and never raises. The only yes/no
decision is :func:`is_refraction_text`, which needs both eye labels.
"""
import math
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional

from .schemas import Eye, RefractionRow

EYE_LABELS = {"right": "右", "left": "左"}
PART_SEPARATOR = " | "
EYE_SEPARATOR = " ；"

CYLINDER_MIN = 0.0
CYLINDER_MAX = 6.0
ADD_POWER_MIN = 0.5
ADD_POWER_MAX = 4.0
REFRACTION_STEP = 0.25

_NUMBER = r"\d+(?:\.\d+)?"

_RIGHT_LABEL_RE = re.compile(r"右眼?：")
_LEFT_LABEL_RE = re.compile(r"左眼?：")
_BINOCULAR_RE = re.compile(
    rf"右眼?[：:]\s*(.+?)\s*[；;]\s*左眼?[：:]\s*(.+)", re.S
)

_LEADING_NUMBER_RE = re.compile(rf"^([+-]?{_NUMBER})")
_CYLINDER_RE = re.compile(rf"/([+-]?{_NUMBER})")
_AXIS_RE = re.compile(r"×(\d+)°?")
_ADD_RE = re.compile(rf"ADD[：:]\s*([+-]?{_NUMBER})", re.I)
_PRISM_RE = re.compile(rf"(BI|BU|BD)\s+({_NUMBER})\s*△?")
_VA_RE = re.compile(rf"^({_NUMBER})\s*([+-]\d*)?$")


def empty_row(eye: Eye) -> RefractionRow:
    return RefractionRow(eye=eye)


# ---------------------------------------------------------------------------
# Render
# ---------------------------------------------------------------------------

def format_row(row: RefractionRow) -> str:
    parts: List[str] = []

    sphere = row.sphere.strip()
    cylinder = row.cylinder.strip()
    axis = row.axis.strip()
    if sphere or cylinder or axis:
        cyl_part = ""
        if cylinder:
            cyl_part = "/" + (cylinder if cylinder.startswith("-") else f"-{cylinder}")
        axis_part = f"×{axis}°" if axis else ""
        parts.append(f"{sphere}{cyl_part}{axis_part}")

    add_power = row.add_power.strip()
    if add_power:
        parts.append("ADD：" + (add_power if add_power.startswith("+") else f"+{add_power}"))

    for base, delta in (
        (row.prism_horiz, row.prism_horiz_delta),
        (row.prism_vert, row.prism_vert_delta),
    ):
        base, delta = base.strip(), delta.strip()
        if base and delta:
            parts.append(f"{base} {delta}△")

    return PART_SEPARATOR.join(parts)


def _ordered(rows: Iterable[RefractionRow]) -> List[RefractionRow]:
    return sorted(rows, key=lambda r: 0 if r.eye == "right" else 1)


def format_for_spec(rows: Iterable[RefractionRow]) -> str:
    """Binocular spec text: ``右：… ；左：…``; eyes without data are dropped."""
    parts = []
    for row in _ordered(rows):
        text = format_row(row)
        if text:
            parts.append(f"{EYE_LABELS[row.eye]}：{text}")
    return EYE_SEPARATOR.join(parts)


def eye_spec(rows: Iterable[RefractionRow], eye: Eye) -> str:
    """Single-eye labelled spec (``右：…``), or "" when that eye is empty."""
    for row in rows:
        if row.eye == eye:
            text = format_row(row)
            return f"{EYE_LABELS[eye]}：{text}" if text else ""
    return ""


def has_refraction_data(rows: Iterable[RefractionRow]) -> bool:
    return any(format_row(row) for row in rows)


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------

def is_refraction_text(text: Optional[str]) -> bool:
    t = (text or "").strip()
    if not t:
        return False
    return bool(_RIGHT_LABEL_RE.search(t) and _LEFT_LABEL_RE.search(t))


def parse_eye_text(eye: Eye, text: Optional[str]) -> RefractionRow:
    """Parse one eye's notation back into a row.

    A leading number, signed or not, is the sphere. A corrected visual acuity
    is only taken from a standalone ``" | "`` segment when neither sphere nor
    cylinder was found. ``BD`` alone cannot say which direction it was
    rendered from: a row whose only prism is a vertical ``BD`` parses back
    into the horizontal slot and does not round-trip.
    """
    part = (text or "").strip()
    row = empty_row(eye)
    if not part:
        return row

    m = _LEADING_NUMBER_RE.match(part)
    if m:
        row.sphere = m.group(1)

    m = _CYLINDER_RE.search(part)
    if m:
        row.cylinder = m.group(1).lstrip("+-")

    m = _AXIS_RE.search(part)
    if m:
        row.axis = m.group(1)

    m = _ADD_RE.search(part)
    if m:
        row.add_power = m.group(1)[1:] if m.group(1).startswith("+") else m.group(1)

    # BD is valid for both directions: the first free slot wins, horizontal
    # first, matching the render order.
    for segment in part.split("|"):
        m = _PRISM_RE.search(segment)
        if not m:
            continue
        base, delta = m.group(1), m.group(2)
        if base == "BI" or (base == "BD" and not row.prism_horiz):
            if not row.prism_horiz:
                row.prism_horiz, row.prism_horiz_delta = base, delta
        elif not row.prism_vert:
            row.prism_vert, row.prism_vert_delta = base, delta

    if not row.sphere and not row.cylinder:
        for segment in part.split("|"):
            m = _VA_RE.match(segment.strip())
            if m:
                row.corrected_va = m.group(1) + (m.group(2) or "")
                break

    return row


def parse_spec_text(text: Optional[str]) -> Optional[List[RefractionRow]]:
    """``右：… ；左：…`` -> ``[right, left]``; None when not refraction text."""
    s = (text or "").strip()
    if not is_refraction_text(s):
        return None
    m = _BINOCULAR_RE.search(s)
    if not m:
        return None
    return [
        parse_eye_text("right", m.group(1).strip()),
        parse_eye_text("left", m.group(2).strip()),
    ]


# ---------------------------------------------------------------------------
# Commit (blur) normalization
# ---------------------------------------------------------------------------

def _to_decimal(text: str) -> Optional[Decimal]:
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def to_two_decimals(value, strip_sign: bool = False) -> str:
    """``"2.2"`` -> ``"2.20"``, ``"2.256"`` -> ``"2.26"``.

    Unparseable text is returned trimmed (and unsigned when ``strip_sign``).
    """
    if value is None:
        return ""
    t = str(value).strip()
    if strip_sign:
        t = re.sub(r"^[+-]", "", t).strip()
    if not t:
        return ""
    d = _to_decimal(t)
    if d is None:
        return t
    return str(d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def clamp_and_snap(value: float, lo: float, hi: float, step: float) -> str:
    """Clamp into [lo, hi], round to the nearest ``step``, two decimals."""
    clamped = max(lo, min(hi, value))
    snapped = math.floor(clamped / step + 0.5) * step
    return f"{snapped:.2f}"


def _commit_magnitude(text: str, lo: float, hi: float) -> str:
    t = re.sub(r"^[+-]", "", (text or "").strip())
    if not t:
        return ""
    d = _to_decimal(t)
    if d is None:
        return t
    return clamp_and_snap(float(d), lo, hi, REFRACTION_STEP)


def commit_cylinder(text: str) -> str:
    return _commit_magnitude(text, CYLINDER_MIN, CYLINDER_MAX)


def commit_add_power(text: str) -> str:
    return _commit_magnitude(text, ADD_POWER_MIN, ADD_POWER_MAX)


def commit_sphere(text: str) -> str:
    """Two decimals, keeping whatever sign the user typed."""
    t = (text or "").strip()
    if not t:
        return ""
    sign = t[0] if t[0] in "+-" else ""
    return sign + to_two_decimals(t[len(sign):])


def normalize_row(row: RefractionRow) -> RefractionRow:
    return row.model_copy(
        update={
            "sphere": commit_sphere(row.sphere),
            "cylinder": commit_cylinder(row.cylinder),
            "axis": row.axis.strip(),
            "corrected_va": row.corrected_va.strip(),
            "add_power": commit_add_power(row.add_power),
            "prism_horiz_delta": row.prism_horiz_delta.strip(),
            "prism_vert_delta": row.prism_vert_delta.strip(),
        }
    )
