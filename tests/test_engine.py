from __future__ import annotations

import pytest

from scent_layering.matching import engine
from scent_layering.matching.engine import (
    calculate_accord_blend,
    calculate_layer_balance,
    overlap_curve,
    score,
)


@pytest.fixture
def bergamot_vanilla(make_record):
    return make_record("a", top=("bergamot",), base=("vanilla",))


@pytest.fixture
def bergamot_sandalwood(make_record):
    return make_record("b", top=("bergamot",), base=("sandalwood",))


def test_bergamot_pair_breakdown(bergamot_vanilla, bergamot_sandalwood):
    analysis = score(bergamot_vanilla, bergamot_sandalwood)

    # one shared note out of three unique notes
    assert analysis.breakdown.note_overlap == 89
    # citrus/citrus 85, citrus/woody 70, oriental/citrus 60, oriental/woody 95
    assert analysis.breakdown.family_harmony == 78
    # combined pyramid is 2/0/2
    assert analysis.breakdown.layer_balance == 11
    assert analysis.breakdown.accord_blend == 70
    assert analysis.score == 65
    assert analysis.shared_notes == ["bergamot"]
    assert analysis.complementary_notes == ["sandalwood"]
    assert analysis.potential_clashes == []


def test_score_is_symmetric(bergamot_vanilla, bergamot_sandalwood):
    forward = score(bergamot_vanilla, bergamot_sandalwood)
    backward = score(bergamot_sandalwood, bergamot_vanilla)
    assert forward.score == backward.score
    assert forward.breakdown == backward.breakdown


def test_empty_records_score_neutral(make_record):
    analysis = score(make_record("a"), make_record("b"))
    assert analysis.breakdown.note_overlap == 50
    assert analysis.breakdown.family_harmony == 50
    assert analysis.breakdown.layer_balance == 50
    assert analysis.breakdown.accord_blend == 70
    assert analysis.score == 55
    assert analysis.shared_notes == []
    assert analysis.complementary_notes == []
    assert analysis.potential_clashes == []


def test_self_score_penalises_full_overlap(bergamot_vanilla):
    analysis = score(bergamot_vanilla, bergamot_vanilla)
    assert analysis.breakdown.note_overlap == 50
    assert analysis.shared_notes == ["bergamot", "vanilla"]


def test_shared_notes_ignore_case_and_whitespace(make_record):
    first = make_record("a", top=("Bergamot ",))
    second = make_record("b", top=("bergamot",))
    assert score(first, second).shared_notes == ["bergamot"]


def test_unclassified_notes_fall_back_to_neutral_harmony(make_record):
    first = make_record("a", top=("unobtainium",))
    second = make_record("b", top=("bergamot",))
    assert score(first, second).breakdown.family_harmony == 50


@pytest.mark.parametrize(
    ("ratio", "expected"),
    [
        (0.0, 0.0),
        (0.05, 25.0),
        (0.1, 50.0),
        (0.25, 75.005),
        (0.4, 100.0),
        (1.0, 50.02),
    ],
)
def test_overlap_curve(ratio, expected):
    assert overlap_curve(ratio) == pytest.approx(expected, abs=0.01)


def test_overlap_curve_stays_in_range():
    for step in range(101):
        assert 0 <= overlap_curve(step / 100) <= 100


def test_ideal_pyramid_scores_full_balance(make_record):
    first = make_record("a", top=("a1", "a2"), middle=("a3", "a4"), base=("a5",))
    second = make_record("b", top=("b1",), middle=("b2", "b3"), base=("b4", "b5"))
    assert calculate_layer_balance(first, second) == pytest.approx(100.0)


def test_accord_blend_uses_dominant_accords(make_record):
    first = make_record("a", accords=("citrus", "amber", "rose", "leather"))
    second = make_record("b", accords=("vanilla",))
    # citrus/oriental 60, oriental/oriental 85, floral/oriental 85; "leather" is past the top three
    assert calculate_accord_blend(first, second) == pytest.approx((60 + 85 + 85) / 3)


def test_accord_blend_neutral_without_accords(make_record):
    assert calculate_accord_blend(make_record("a", accords=("citrus",)), make_record("b")) == 70


def test_potential_clashes_are_capped(make_record):
    first = make_record("a", top=("bergamot", "lemon"))
    second = make_record("b", base=("civet", "castoreum"))
    clashes = score(first, second).potential_clashes
    assert clashes == ["bergamot + civet", "bergamot + castoreum", "lemon + civet"]
    assert len(clashes) == engine.MAX_CLASHES


def test_complementary_notes_are_capped(make_record):
    first = make_record("a", top=("bergamot",))
    second = make_record(
        "b",
        top=("mint", "eucalyptus", "cucumber"),
        middle=("marine", "aquatic"),
        base=("ozonic",),
    )
    complementary = score(first, second).complementary_notes
    assert complementary == ["mint", "eucalyptus", "cucumber", "marine", "aquatic"]
    assert len(complementary) == engine.MAX_COMPLEMENTARY


def test_complementary_notes_skip_shared_and_duplicates(make_record):
    first = make_record("a", top=("bergamot",))
    second = make_record("b", top=("bergamot", "mint"), base=("Mint",))
    assert score(first, second).complementary_notes == ["mint"]


def test_final_score_within_bounds(make_record):
    first = make_record("a", top=("bergamot", "lemon", "lime"), base=("civet",))
    second = make_record("b", top=("castoreum",), middle=("oakmoss",), accords=("leather",))
    analysis = score(first, second)
    assert 0 <= analysis.score <= 100
    for value in (
        analysis.breakdown.note_overlap,
        analysis.breakdown.family_harmony,
        analysis.breakdown.layer_balance,
        analysis.breakdown.accord_blend,
    ):
        assert 0 <= value <= 100
