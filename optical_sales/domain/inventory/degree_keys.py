# optical_sales/domain/inventory/degree_keys.py
"""Canonical stock keys ("degree keys") and the stock matcher.

A degree key identifies one stocked variant of a product. Each product kind
has its own key:

* lens  - the power part of the line's spec, without eye label or ADD;
* frame - the model/colour code typed on the line;
* other - always ``"—"``, since these products have no variants.

Purchase lots record a zero cylinder as ``+0.00``, while clinical entry often
writes ``-0.00`` or leaves the cylinder out. A lens key therefore tries the
ordered fallbacks of :func:`candidate_keys` before it counts as out of stock.
"""
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Tuple

from optical_sales.core.config import settings

NO_VARIANT = "—"
OTHER_KEY = NO_VARIANT


class ProductKind(str, Enum):
    LENS = "lens"
    FRAME = "frame"
    OTHER = "other"


def classify_category(
    name: Optional[str],
    lens_names: Optional[Iterable[str]] = None,
    frame_names: Optional[Iterable[str]] = None,
) -> ProductKind:
    n = (name or "").strip()
    lens = settings.LENS_CATEGORY_NAMES if lens_names is None else lens_names
    frame = settings.FRAME_CATEGORY_NAMES if frame_names is None else frame_names
    if n in lens:
        return ProductKind.LENS
    if n in frame:
        return ProductKind.FRAME
    return ProductKind.OTHER


_EYE_LABEL_RE = re.compile(r"^[左右]眼?[：:]\s*(.+)$", re.S)
_ADD_SUFFIX_RE = re.compile(r"\s*\|\s*ADD[：:].*$", re.I)
_ADD_TOKEN_RE = re.compile(r"\s*ADD[：:]\s*[+-]?\d+(?:\.\d+)?", re.I)
_CUSTOM_LENS_RE = re.compile(r"ADD[：:]|棱镜|△", re.I)
_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?\d+(?:\.\d+)?)")

ZERO_CYL_MINUS = "/-0.00"
ZERO_CYL_PLUS = "/+0.00"


def is_custom_lens_spec(spec: Optional[str]) -> bool:
    """Lens specs with add power or prism are always made to order."""
    s = (spec or "").strip()
    return bool(s) and bool(_CUSTOM_LENS_RE.search(s))


def lens_degree_key(spec: Optional[str]) -> Optional[str]:
    s = (spec or "").strip()
    if not s:
        return None
    m = _EYE_LABEL_RE.match(s)
    degree = m.group(1).strip() if m else s
    # stock is not partitioned by add power
    degree = _ADD_SUFFIX_RE.sub("", degree)
    degree = _ADD_TOKEN_RE.sub("", degree).strip()
    return degree or None


def frame_degree_key(spec: Optional[str]) -> str:
    return (spec or "").strip() or NO_VARIANT


def row_degree_key(degree: Optional[str]) -> str:
    """Key of a purchase lot row; blank rows count as "no variant"."""
    return (degree or "").strip() or NO_VARIANT


def _signed_sphere(text: str) -> Optional[str]:
    m = _LEADING_NUMBER_RE.match(text)
    if not m:
        return None
    try:
        value = Decimal(m.group(1)).quantize(Decimal("0.01"))
    except InvalidOperation:
        return None
    return f"+{abs(value)}" if value >= 0 else str(value)


def candidate_keys(key: str) -> List[str]:
    """Stock keys equivalent to ``key``, most specific first.

    1. the key itself;
    2. the key without its ``×axis°`` clause (stock ignores axis);
    3. a zero cylinder with the other sign (``/-0.00`` <-> ``/+0.00``);
    4. for a bare sphere, ``{sphere}/-0.00`` then ``{sphere}/+0.00``.
    """
    out = [key]
    before_axis = key.split("×")[0].strip()
    out.append(before_axis)
    if "/" in before_axis:
        if before_axis.endswith(ZERO_CYL_MINUS):
            out.append(before_axis[: -len(ZERO_CYL_MINUS)] + ZERO_CYL_PLUS)
        elif before_axis.endswith(ZERO_CYL_PLUS):
            out.append(before_axis[: -len(ZERO_CYL_PLUS)] + ZERO_CYL_MINUS)
    else:
        sphere = _signed_sphere(before_axis)
        if sphere is not None:
            out.append(sphere + ZERO_CYL_MINUS)
            out.append(sphere + ZERO_CYL_PLUS)

    seen = set()
    return [k for k in out if k and not (k in seen or seen.add(k))]


def match_stock(by_degree: Optional[Mapping[str, int]], key: Optional[str]) -> Optional[Tuple[str, int]]:
    """First candidate key with a positive quantity, as ``(key, quantity)``."""
    if not key or not by_degree:
        return None
    for candidate in candidate_keys(key):
        qty = by_degree.get(candidate) or 0
        if qty > 0:
            return candidate, qty
    return None


def resolve_stock(
    by_degree: Optional[Mapping[str, int]],
    kind: ProductKind,
    spec: Optional[str],
) -> Tuple[Optional[str], int]:
    """Degree key to deduct and its available quantity for one sale line.

    Returns ``(None, 0)`` when a lens spec has no matching stock at all.
    """
    by_degree = by_degree or {}
    if kind is ProductKind.LENS:
        hit = match_stock(by_degree, lens_degree_key(spec))
        return hit if hit else (None, 0)
    if kind is ProductKind.FRAME:
        key = frame_degree_key(spec)
        return key, by_degree.get(key, 0)
    return OTHER_KEY, by_degree.get(OTHER_KEY, 0)
