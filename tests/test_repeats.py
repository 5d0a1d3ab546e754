"""Tests for repeat and homopolymer context."""

import pytest

from sacount.core.repeats import (
    HomopolymerRun,
    context_bounds,
    find_repeat,
    get_repeat_period,
    get_repeat_unit,
    repeat_length,
    repeat_window_length,
)
from sacount.models.core import Allele, AlleleType


def test_homopolymer_longest_run():
    hrun = HomopolymerRun.find("AAAAATGGGG")
    assert hrun == HomopolymerRun(length=5, base="A", pos=0)


def test_homopolymer_run_in_middle():
    hrun = HomopolymerRun.find("ACGTTTTTGCA")
    assert (hrun.length, hrun.base, hrun.pos) == (5, "T", 3)


def test_homopolymer_first_run_wins_ties():
    assert HomopolymerRun.find("CCCAGGG") == HomopolymerRun(3, "C", 0)


def test_homopolymer_ignores_n():
    assert HomopolymerRun.find("N") is None
    assert HomopolymerRun.find("NNNNNAC") == HomopolymerRun(1, "A", 5)


@pytest.mark.parametrize(
    "bases,unit",
    [("A", "A"), ("AAAA", "A"), ("ATAT", "AT"), ("ATG", "ATG"), ("ATGATG", "ATG"), ("", "")],
)
def test_repeat_unit(bases, unit):
    assert get_repeat_unit(bases) == unit


def test_repeat_period():
    assert get_repeat_period("C", "CCCCCTG") == 5
    assert get_repeat_period("AT", "ATATATG") == 3
    assert get_repeat_period("AT", "GATAT") == 0
    assert get_repeat_period("", "AAAA") == 0


def test_find_repeat_deletion_uses_deleted_bases():
    period, unit = find_repeat(Allele.deletion(2), "ATATATGC", "A")
    assert (period, unit) == (3, "AT")


def test_find_repeat_insertion_uses_alt_without_anchor():
    period, unit = find_repeat(Allele.insertion(2), "CCCCCTG", "ACC")
    assert (period, unit) == (5, "C")


def test_find_repeat_snp_is_empty():
    assert find_repeat(Allele.from_base("T"), "CCCCCTG", "T") == (0, "")


def test_repeat_length():
    assert repeat_length(5, "C", AlleleType.DELETION) == 4
    assert repeat_length(3, "AT", AlleleType.DELETION) == 4
    assert repeat_length(0, "AT", AlleleType.DELETION) == 0
    assert repeat_length(5, "C", AlleleType.INSERTION) == 5
    assert repeat_length(5, "C", AlleleType.BASE) == 0
    assert repeat_length(5, "C", AlleleType.MNP) == 0


def test_repeat_window_length_bounded_by_chromosome_end():
    assert repeat_window_length(Allele.insertion(2), 50, 1000) == 200
    assert repeat_window_length(Allele.insertion(2), 50, 197) == 145
    assert repeat_window_length(Allele.deletion(1), 999, 1000) == 0


def test_context_bounds():
    assert context_bounds(50, 197) == (41, 20)
    assert context_bounds(10, 197) is None
    assert context_bounds(187, 197) is None
    assert context_bounds(186, 197) == (177, 20)
