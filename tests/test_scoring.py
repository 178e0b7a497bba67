"""Score primitives"""
import pytest

from scoring import (
    lengths_comparable,
    partial_match_score,
    similarity,
    word_match_info,
    word_order_score,
    words_related,
)


def test_similarity():
    assert similarity('bulgogi', 'bulgogi') == 1.0
    assert similarity('', '') == 1.0
    assert similarity('abc', '') == 0.0
    assert similarity('kitten', 'sitting') == pytest.approx(1 - 3 / 7)


def test_lengths_comparable():
    assert lengths_comparable('apple', 'apples')
    assert not lengths_comparable('ab', 'abcdefgh')


def test_words_related():
    assert words_related('apple', 'sweetapple')
    assert words_related('bulgogi', 'bulgeum')
    assert not words_related('apple', 'pear')


def test_partial_match_score_inclusion():
    assert partial_match_score('apple', 'sweetapple') == pytest.approx(0.5)
    assert partial_match_score('sweet apple', 'sweetapple') == pytest.approx(1.0)


def test_partial_match_score_word_overlap():
    # one of two words matches fully: 0.5 * 0.6 + 1.0 * 0.4
    assert partial_match_score('spicy bulgogi', 'spicy snack') == pytest.approx(0.7)


def test_partial_match_score_empty():
    assert partial_match_score('', 'apple') == 0.0
    assert partial_match_score('apple', '') == 0.0


def test_partial_match_score_uses_translation():
    to_roman = {'사과': 'apple', 'sweetapple': 'sweetapple'}.get
    assert partial_match_score('사과', 'sweetapple', to_roman) == pytest.approx(0.45)


def test_word_order_score():
    assert word_order_score(['apple', 'sweet'], ['sweet', 'apple']) == pytest.approx(0.75)
    assert word_order_score(['apple'], ['sweet', 'apple']) is None
    assert word_order_score(['spicy', 'bulgogi'], ['spicy', 'snack']) is None


def test_word_match_info_full_ordered_match():
    info = word_match_info(['sweet', 'apple'], ['sweet', 'apple'])
    assert info.included_words == 2
    assert info.all_words_matched
    assert info.word_order_match
    assert info.inclusion_score == pytest.approx(1.0)


def test_word_match_info_partial():
    info = word_match_info(['spicy', 'bulgogi'], ['spicy', 'snack'], ['bulgogi'])
    assert info.included_words == 1
    assert info.word_match_ratio == pytest.approx(0.5)
    assert not info.all_words_matched
    assert not info.word_order_match


def test_word_match_info_core_noun_bonus():
    plain = word_match_info(['apple'], ['apples'])
    core = word_match_info(['apple'], ['apples'], ['apple'])
    assert core.total_match_score > plain.total_match_score


def test_word_match_info_empty():
    info = word_match_info([], ['apple'])
    assert info.included_words == 0
    assert info.inclusion_score == 0.0
