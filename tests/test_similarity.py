import pytest

from src.delivery.services.similarity import edit_distance, similarity


def test_edit_distance_classic_example():
    assert edit_distance("kitten", "sitting") == 3


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("", "", 0),
        ("", "abc", 3),
        ("abc", "", 3),
        ("flaw", "lawn", 2),
        ("same", "same", 0),
    ],
)
def test_edit_distance_edge_cases(a, b, expected):
    assert edit_distance(a, b) == expected


def test_similarity_is_case_and_whitespace_insensitive():
    assert similarity("  Mumbai ", "mumbai") == 1.0


def test_similarity_both_empty_is_zero():
    assert similarity("", "") == 0.0
    assert similarity(None, None) == 0.0


def test_similarity_one_side_empty_is_zero():
    assert similarity("pune", "") == 0.0


def test_similarity_uses_longest_string():
    # 3 edits over 4 characters
    assert similarity("abcd", "axyz") == pytest.approx(0.25)
    assert similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)
