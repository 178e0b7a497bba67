"""normalize() / tokenize() / split_into_words()"""
import pytest

from text_normalizer import (
    common_prefix_length,
    contains_hangul,
    normalize,
    split_camel_case,
    split_into_words,
    strip_particle,
    tokenize,
)


@pytest.mark.parametrize("text, expected", [
    ("shineMuscat", "shinemuscat"),
    ("고당도 사과!", "고당도사과"),
    ("  Almond_Breeze  ", "almond_breeze"),
    ("", ""),
])
def test_normalize(text, expected):
    assert normalize(text) == expected


def test_normalize_keeps_single_spaces_when_asked():
    assert normalize("고당도   사과", remove_spaces=False) == "고당도 사과"
    # punctuation between words must not leave a double space behind
    assert normalize("a ! b", remove_spaces=False) == "a b"


@pytest.mark.parametrize("text", ["shineMuscat.png", "매콤한  불고기!!", "HTMLParser v2", "a ! b"])
def test_normalize_is_idempotent(text):
    for remove_spaces in (True, False):
        once = normalize(text, remove_spaces)
        assert normalize(once, remove_spaces) == once


def test_normalize_non_string():
    assert normalize(None) == ""


def test_split_camel_case():
    assert split_camel_case("almondBreeze") == "almond Breeze"
    assert split_camel_case("HTMLParser") == "HTML Parser"


def test_strip_particle_never_empties_word():
    assert strip_particle("사과를") == "사과"
    assert strip_particle("는") == "는"


def test_tokenize_drops_particles():
    assert tokenize("사과를 먹다") == ["사과", "먹다"]


def test_tokenize_keeps_known_words_whole():
    assert tokenize("고당도 사과", {"고당도", "사과"}) == ["고당도", "사과"]
    # an unknown word still loses its trailing particle (도)
    assert tokenize("고당도 사과", {"사과"}) == ["고당", "사과"]
    # without the dictionary the trailing 과 looks like a particle
    assert tokenize("사과") == ["사"]


def test_split_into_words():
    assert split_into_words("chuncheonDakgalbi") == ["chuncheon", "dakgalbi"]
    assert split_into_words("almond_breeze-bar") == ["almond", "breeze", "bar"]
    assert split_into_words("") == []


def test_helpers():
    assert contains_hangul("abc사과")
    assert not contains_hangul("apple")
    assert common_prefix_length("bulgogi", "bulgeum") == 4
    assert common_prefix_length("", "abc") == 0
