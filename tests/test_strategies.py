"""Per-asset strategies (exact / partial / similarity)"""
import pytest

from asset_cache import AssetFile
from morphology import analyze
from strategies import (
    AssetForms,
    MatchMethod,
    QueryForms,
    _shares_words,
    match_asset,
    try_exact,
    try_partial,
    try_similarity,
)
from text_normalizer import normalize


def query_for(name, dictionary):
    morphology = analyze(normalize(name, remove_spaces=False), dictionary.known_words())
    return QueryForms.build(name, dictionary, morphology)


def asset_for(filename, dictionary):
    return AssetForms.build(AssetFile.from_filename(filename), dictionary)


def test_query_forms(dictionary):
    query = query_for('매콤한 불고기', dictionary)
    assert query.normalized == '매콤한불고기'
    assert query.roman == 'spicybulgogi'
    assert query.words == ('spicy', 'bulgogi')
    assert 'bulgogi' in query.core_nouns
    assert len(query.noun_words) == 1
    assert len(query.modifier_words) == 1


def test_asset_forms(dictionary):
    asset = asset_for('shineMuscat.png', dictionary)
    assert asset.normalized == 'shinemuscat'
    assert asset.roman == 'shinemuscat'
    assert asset.words == ('shine', 'muscat')


def test_exact_normalized(dictionary):
    candidate = try_exact(query_for('불고기', dictionary), asset_for('불고기.png', dictionary))
    assert candidate.method == MatchMethod.EXACT
    assert candidate.score == 1.0


def test_exact_romanized(dictionary):
    candidate = try_exact(query_for('샤인머스캣', dictionary), asset_for('shineMuscat.png', dictionary))
    assert candidate.method == MatchMethod.EXACT
    assert candidate.score == pytest.approx(0.95)
    assert candidate.asset_path == '/productsPage/shineMuscat.png'


def test_exact_reverse_translation(dictionary):
    candidate = try_exact(query_for('초코파이', dictionary), asset_for('chocoPie.png', dictionary))
    assert candidate is not None
    assert candidate.method == MatchMethod.EXACT


def test_exact_miss(dictionary):
    assert try_exact(query_for('고당도 사과', dictionary), asset_for('sweetApple.jpg', dictionary)) is None


def test_variant_match_is_partial(dictionary):
    candidate = match_asset(query_for('고당도 사과', dictionary), asset_for('sweetApple.jpg', dictionary),
                            dictionary)
    assert candidate.method == MatchMethod.PARTIAL
    assert candidate.score == pytest.approx(0.75)


def test_inclusion_match(dictionary):
    candidate = try_partial(query_for('매콤한 불고기', dictionary), asset_for('bulgogi.png', dictionary),
                            dictionary)
    assert candidate.method == MatchMethod.PARTIAL
    assert candidate.score == pytest.approx(7 / 12 * 0.9)


def test_modifier_only_match_is_suppressed(dictionary):
    query = query_for('매콤한 불고기', dictionary)
    noun_match = match_asset(query, asset_for('bulgogi.png', dictionary), dictionary)
    modifier_match = match_asset(query, asset_for('spicySnack.png', dictionary), dictionary)
    assert modifier_match is not None
    assert modifier_match.score < 0.1
    assert noun_match.score > modifier_match.score


def test_similarity_length_guard(dictionary):
    query = query_for('완전히 새로운 상품명', dictionary)
    assert try_similarity(query, asset_for('sweetApple.jpg', dictionary)) is None


def test_similarity_match(dictionary):
    candidate = try_similarity(query_for('bulgogi', dictionary), asset_for('bulgogy.png', dictionary))
    assert candidate.method == MatchMethod.SIMILARITY
    assert candidate.score == pytest.approx(6 / 7 * 0.8)


def test_empty_asset_name_never_matches(dictionary):
    asset = asset_for('!!.png', dictionary)
    assert match_asset(query_for('불고기', dictionary), asset, dictionary) is None


def test_no_match(dictionary):
    query = query_for('완전히 새로운 상품명', dictionary)
    for filename in ('shineMuscat.png', 'sweetApple.jpg', 'bulgogi.png'):
        assert match_asset(query, asset_for(filename, dictionary), dictionary) is None


SWEEP_NAMES = ['샤인머스캣', '고당도 사과', '매콤한 불고기', '초코파이', '불고기', 'pie',
               'bulgogi', '명품 한우 세트', '완전히 새로운 상품명', '사과']
SWEEP_ASSETS = ['shineMuscat.png', 'sweetApple.jpg', 'bulgogi.png', 'bulgogy.png', 'spicySnack.png',
                'chocoPie.png', 'pie.png', 'apple.png', 'LuxuryKoreanBeefSet.png', '불고기.png']


@pytest.mark.parametrize("name", SWEEP_NAMES)
def test_scores_respect_method_bands(dictionary, name):
    query = query_for(name, dictionary)
    for filename in SWEEP_ASSETS:
        candidate = match_asset(query, asset_for(filename, dictionary), dictionary)
        if candidate is None:
            continue
        assert 0.0 < candidate.score <= 1.0
        if candidate.method == MatchMethod.EXACT:
            assert candidate.score >= 0.85, (name, filename, candidate)
        elif candidate.method == MatchMethod.PARTIAL:
            assert candidate.score <= 0.98, (name, filename, candidate)
        else:
            assert candidate.score <= 0.8, (name, filename, candidate)


def test_shared_words_needs_words_on_both_sides():
    assert not _shares_words((), ('apple',))
    assert not _shares_words(('apple',), ())
    assert not _shares_words((), ())


def test_shared_words_needs_half_of_query_words():
    assert _shares_words(('sweet', 'apple'), ('apple', 'box'))
    assert not _shares_words(('sweet', 'apple', 'juice'), ('apple', 'box'))
    # short words never count
    assert not _shares_words(('ab',), ('ab',))
