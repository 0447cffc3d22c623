import pytest

from optical_sales.domain.inventory.degree_keys import (
    NO_VARIANT,
    ProductKind,
    candidate_keys,
    classify_category,
    is_custom_lens_spec,
    lens_degree_key,
    match_stock,
    resolve_stock,
)


def test_classify_category():
    assert classify_category("镜片") is ProductKind.LENS
    assert classify_category(" 镜架 ") is ProductKind.FRAME
    assert classify_category("护理液") is ProductKind.OTHER
    assert classify_category(None) is ProductKind.OTHER
    assert classify_category("Lenses", lens_names=["Lenses"], frame_names=[]) is ProductKind.LENS


@pytest.mark.parametrize(
    "spec",
    ["右：-1.00 | ADD：+2.00", "左：-1.00 | BI 1.5△", "右：+1.00 | add:1.50", "右：-1.00 | 棱镜"],
)
def test_add_or_prism_is_custom(spec):
    assert is_custom_lens_spec(spec)


@pytest.mark.parametrize("spec", ["右：-1.00/-0.50×90°", "", None, "—"])
def test_plain_power_is_not_custom(spec):
    assert not is_custom_lens_spec(spec)


def test_lens_degree_key_strips_eye_label_and_add():
    assert lens_degree_key("右：-1.00/-0.50×10° | ADD：+2.00") == "-1.00/-0.50×10°"
    assert lens_degree_key("左眼：-3.25") == "-3.25"
    assert lens_degree_key("-3.25") == "-3.25"
    assert lens_degree_key("  ") is None


def test_candidate_keys_zero_cylinder_both_signs():
    assert candidate_keys("-2.00/-0.00") == ["-2.00/-0.00", "-2.00/+0.00"]
    assert candidate_keys("-2.00/+0.00") == ["-2.00/+0.00", "-2.00/-0.00"]


def test_candidate_keys_pure_sphere():
    assert candidate_keys("-2.00") == ["-2.00", "-2.00/-0.00", "-2.00/+0.00"]
    assert candidate_keys("2") == ["2", "+2.00/-0.00", "+2.00/+0.00"]


def test_candidate_keys_ignore_axis():
    assert candidate_keys("-1.00/-0.50×10°") == ["-1.00/-0.50×10°", "-1.00/-0.50"]


def test_match_stock_is_symmetric_for_zero_cylinder():
    assert match_stock({"-2.00/+0.00": 3}, "-2.00/-0.00") == ("-2.00/+0.00", 3)
    assert match_stock({"-2.00/-0.00": 3}, "-2.00/+0.00") == ("-2.00/-0.00", 3)


def test_match_stock_pure_sphere_and_axis():
    assert match_stock({"-2.00/+0.00": 4}, "-2.00") == ("-2.00/+0.00", 4)
    assert match_stock({"-1.00/-0.50": 2}, "-1.00/-0.50×10°") == ("-1.00/-0.50", 2)


def test_match_stock_skips_empty_candidates():
    assert match_stock({"-2.00": 0, "-2.00/+0.00": 1}, "-2.00") == ("-2.00/+0.00", 1)
    assert match_stock({"-2.00": 0}, "-2.00") is None
    assert match_stock({}, "-2.00") is None
    assert match_stock({"-2.00": 1}, None) is None


def test_resolve_stock_per_kind():
    assert resolve_stock({"-2.00/+0.00": 2}, ProductKind.LENS, "右：-2.00") == ("-2.00/+0.00", 2)
    assert resolve_stock({"-2.00/+0.00": 2}, ProductKind.LENS, "右：-4.00") == (None, 0)
    assert resolve_stock({"TX-1": 1}, ProductKind.FRAME, " TX-1 ") == ("TX-1", 1)
    assert resolve_stock({"TX-1": 2}, ProductKind.FRAME, "") == (NO_VARIANT, 0)
    assert resolve_stock({NO_VARIANT: 5}, ProductKind.OTHER, "whatever") == (NO_VARIANT, 5)
    assert resolve_stock(None, ProductKind.OTHER, "") == (NO_VARIANT, 0)


@pytest.mark.parametrize("stocked, requested", [("-1.00/+0.00", "-1.00/-0.00"), ("-1.00/-0.00", "-1.00/+0.00")])
def test_zero_cylinder_symmetry(stocked, requested):
    assert match_stock({stocked: 3}, requested) == (stocked, 3)
