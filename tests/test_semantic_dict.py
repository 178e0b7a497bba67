"""SemanticDictionary lookups, to_roman() and generate_variants()"""
import copy

import pytest

from semantic_dict import (
    MAX_VARIANTS,
    BASE_SEMANTIC_DICT,
    SemanticCandidate,
    SemanticDictionary,
    default_dictionary,
    fallback_roman,
    to_korean,
)


def test_candidates_sorted_and_deduplicated():
    d = SemanticDictionary({'x': [('A', 0.5), ('a', 0.9), ('b', 0.9), ('c', 1.0)]})
    assert d.candidates('x') == [
        SemanticCandidate('c', 1.0),
        SemanticCandidate('a', 0.9),
        SemanticCandidate('b', 0.9),
    ]
    assert d.translate('x') == 'c'


def test_seed_table_invariants(dictionary):
    assert len(dictionary) == len(BASE_SEMANTIC_DICT)
    for key in BASE_SEMANTIC_DICT:
        candidates = dictionary.candidates(key)
        confidences = [c.confidence for c in candidates]
        assert confidences == sorted(confidences, reverse=True)
        englishes = [c.english for c in candidates]
        assert len(englishes) == len(set(englishes))


def test_empty_entries_dropped():
    d = SemanticDictionary({'': [('x', 1.0)], 'y': [('', 1.0)], 'z': [('zed', 1.0)]})
    assert len(d) == 1
    assert 'z' in d and 'y' not in d
    assert d.translate('missing') is None
    assert d.candidates('missing') == []


def test_extended_returns_new_dictionary():
    base = SemanticDictionary({'사과': [('apple', 1.0)]})
    bigger = base.extended({'두부': [('tofu', 1.0)], '사과': [('apples', 1.0), ('apple', 0.5)]})
    assert '두부' not in base
    assert bigger.translate('두부') == 'tofu'
    # equal confidences keep the existing candidate first
    assert [c.english for c in bigger.candidates('사과')] == ['apple', 'apples']
    assert '두부' in bigger.known_words()


def test_default_dictionary_is_shared():
    assert default_dictionary() is default_dictionary()


@pytest.mark.parametrize("text, expected", [
    ('샤인머스캣', 'shinemuscat'),
    ('고당도 사과', 'highsugarapple'),
    ('매콤한 불고기', 'spicybulgogi'),
    ('shineMuscat', 'shinemuscat'),
    ('', ''),
])
def test_to_roman(dictionary, text, expected):
    assert dictionary.to_roman(text) == expected


def test_to_roman_spaced(dictionary):
    assert dictionary.to_roman('고당도 사과', spaced=True) == 'high sugar apple'
    assert dictionary.to_roman('매콤한 불고기', spaced=True) == 'spicy bulgogi'


def test_to_roman_is_stable(dictionary):
    first = dictionary.to_roman('완전히 새로운 상품명')
    assert first
    assert dictionary.to_roman('완전히 새로운 상품명') == first


def test_rendering_leaves_dictionary_state_unchanged():
    d = SemanticDictionary()
    before = {key: copy.copy(value) for key, value in vars(d).items()}
    size = len(d)
    for i in range(200):
        d.to_roman(f'상품{i} 사과')
        d.to_roman(f'상품{i} 사과', spaced=True)
        d.generate_variants(f'상품{i} 불고기')
    assert vars(d) == before
    assert len(d) == size


def test_fallback_roman():
    assert fallback_roman('명품한우') == 'luxurykoreanbeef'
    assert fallback_roman('명품 한우 세트') == 'luxurykoreanbeefset'


def test_to_korean():
    assert to_korean('chocoPie') == '초코파이'
    assert to_korean('Cookie') == '과자'
    assert to_korean('chocolate') == '초콜릿'


def test_generate_variants_base_first(dictionary):
    variants = dictionary.generate_variants('고당도 사과')
    assert variants[0] == 'highsugarapple'
    assert 'sweetapple' in variants
    assert 'sweet apple' in variants


def test_generate_variants_per_token(dictionary):
    variants = dictionary.generate_variants('매콤한 불고기')
    assert variants[0] == 'spicybulgogi'
    assert 'spicy bulgogi' in variants


def test_generate_variants_bounded_and_deterministic(dictionary):
    text = '사과 배 딸기 포도 복숭아 감귤 한우'
    variants = dictionary.generate_variants(text)
    assert 0 < len(variants) <= MAX_VARIANTS
    assert len(variants) == len(set(variants))
    assert dictionary.generate_variants(text) == variants


def test_generate_variants_empty(dictionary):
    assert dictionary.generate_variants('') == []
    assert dictionary.generate_variants('!!!') == []
    assert dictionary.generate_variants(None) == []
