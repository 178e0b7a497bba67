"""Rule-based morphology, compound splitting and pluggable analyzers"""
import random
from collections import namedtuple

import pytest

from morphology import (
    KiwiAnalyzer,
    MorphologyAnalyzer,
    MorphologyResult,
    NullAnalyzer,
    Token,
    TokenKind,
    analyze,
    analyze_with_fallback,
    extract_adjective,
    extract_prefix,
    kiwi_tag_kind,
    process_word,
    split_compound,
)

Morph = namedtuple('Morph', 'form tag')


def kinds(result):
    return [(t.text, t.kind) for t in result.tokens]


def test_extract_adjective():
    assert extract_adjective('매콤한') == ('매콤', True)
    assert extract_adjective('육즙가득') == ('육즙가득', False)
    # never strips the whole word
    assert extract_adjective('한') == ('한', False)


def test_extract_prefix():
    assert extract_prefix('고당도') == ('고', '당도')
    assert extract_prefix('불고기') == (None, '불고기')
    assert extract_prefix('고') == (None, '고')


def test_split_compound_longest_match():
    known = {'샤인', '머스캣', '머스'}
    assert split_compound('샤인머스캣', known) == ['샤인', '머스캣']


def test_split_compound_keeps_unknown_word():
    assert split_compound('완전히', {'사과'}) == ['완전히']
    assert split_compound('완전히', set()) == ['완전히']
    assert split_compound('', {'사과'}) == []


def test_split_compound_splits_unmatched_stretches():
    known = {'불고기', '소'}
    assert split_compound('소불고기', known) == ['소', '불고기']
    assert split_compound('맛있는불고기', {'불고기'}) == ['맛있는', '불고기']


@pytest.mark.parametrize("word, known", [
    ('a' * 40, {'a', 'aa', 'aaa'}),
    ('ab' * 20, {'ab', 'ba', 'b'}),
    ('xyzxyzxyz', {'yz', 'zx', 'xyzx'}),
    ('가나다라마바사', {'나다', '다라', '라마바', '가'}),
])
def test_split_compound_terminates_and_rejoins(word, known):
    parts = split_compound(word, known)
    assert ''.join(parts) == word
    assert all(parts)


def _overlapping_dictionary(rng, word):
    """Prefixes, repeated runs and random overlapping substrings of ``word``."""
    known = {word[:n] for n in range(1, 9)}
    known.update(word[i:i + 2] * 3 for i in range(0, len(word) - 1, 7))
    for _ in range(30):
        start = rng.randrange(len(word))
        known.add(word[start:start + rng.randint(1, 12)])
    return known


@pytest.mark.parametrize("seed", range(20))
def test_split_compound_random_long_words(seed):
    rng = random.Random(seed)
    word = ''.join(rng.choice('ab가나') for _ in range(64))
    dictionaries = [
        _overlapping_dictionary(rng, word),
        _overlapping_dictionary(rng, word) | {word[1:], word[:-1]},
        # contains the word itself, so nothing is split
        {word, word[:32], word[32:]},
    ]
    for known in dictionaries:
        parts = split_compound(word, known)
        assert ''.join(parts) == word
        assert all(parts)
        assert analyze(word, known).tokens
    assert split_compound(word, dictionaries[2]) == [word]


def test_split_compound_depth_limit():
    assert split_compound('소불고기', {'소', '불고기'}, max_depth=0) == ['소불고기']


def test_process_word_prefix(known_words):
    tokens = process_word('고당도', known_words)
    assert [(t.text, t.kind) for t in tokens] == [('고', TokenKind.PREFIX), ('당도', TokenKind.NOUN)]


def test_process_word_known_word_not_prefix_split(known_words):
    tokens = process_word('고구마', known_words)
    assert [(t.text, t.kind) for t in tokens] == [('고구마', TokenKind.NOUN)]


def test_analyze_adjective_and_noun(known_words):
    result = analyze('매콤한 불고기', known_words)
    assert kinds(result) == [('매콤', TokenKind.ADJECTIVE), ('불고기', TokenKind.NOUN)]
    assert result.core_words == ('매콤', '불고기')
    assert result.has_noun


def test_analyze_space_separated_prefix(known_words):
    result = analyze('전통 약과', known_words)
    assert kinds(result) == [('전통', TokenKind.PREFIX), ('약과', TokenKind.NOUN)]
    assert result.core_words == ('약과',)


def test_analyze_empty():
    assert analyze('').tokens == ()
    assert analyze(None).core_words == ()


def test_analyze_without_dictionary():
    result = analyze('새로운 상품')
    assert result.has_noun
    assert all(t.kind in (TokenKind.NOUN, TokenKind.ADJECTIVE, TokenKind.PREFIX) for t in result.tokens)


@pytest.mark.parametrize("tag, kind", [
    ('NNG', TokenKind.NOUN),
    ('NNP', TokenKind.NOUN),
    ('SL', TokenKind.NOUN),
    ('VA', TokenKind.ADJECTIVE),
    ('VV', TokenKind.ADJECTIVE),
    ('MM', TokenKind.PREFIX),
    ('XPN', TokenKind.PREFIX),
    ('XSA', TokenKind.SUFFIX),
    ('JKS', None),
    ('ETM', None),
    ('SF', None),
    ('MAG', TokenKind.NOUN),
])
def test_kiwi_tag_kind(tag, kind):
    assert kiwi_tag_kind(tag) == kind


class FakeKiwi:
    def __init__(self, morphemes=None, error=None):
        self.morphemes = morphemes or []
        self.error = error

    def tokenize(self, text):
        if self.error:
            raise self.error
        return self.morphemes


def test_kiwi_analyzer_maps_morphemes():
    kiwi = FakeKiwi([Morph('매콤하', 'VA'), Morph('ㄴ', 'ETM'), Morph('불고기', 'NNG')])
    result = KiwiAnalyzer(kiwi=kiwi).analyze('매콤한 불고기')
    assert kinds(result) == [('매콤하', TokenKind.ADJECTIVE), ('불고기', TokenKind.NOUN)]
    assert all(t.confidence == 0.9 for t in result.tokens)


def test_kiwi_analyzer_failure_returns_none():
    analyzer = KiwiAnalyzer(kiwi=FakeKiwi(error=RuntimeError('model error')))
    assert analyzer.analyze('불고기') is None


def test_kiwi_analyzer_nothing_useful():
    analyzer = KiwiAnalyzer(kiwi=FakeKiwi([Morph('을', 'JKO')]))
    assert analyzer.analyze('을') is None
    assert analyzer.analyze('   ') is None


def test_null_analyzer():
    assert NullAnalyzer().analyze('불고기') is None
    with pytest.raises(NotImplementedError):
        MorphologyAnalyzer().analyze('불고기')


class StubAnalyzer(MorphologyAnalyzer):
    name = 'stub'

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def analyze(self, text):
        self.calls += 1
        if self.error:
            raise self.error
        return self.result


def test_analyze_with_fallback_keeps_rule_based_nouns(known_words):
    stub = StubAnalyzer(MorphologyResult.from_tokens([Token('x', TokenKind.NOUN, 0.9)]))
    result = analyze_with_fallback('매콤한 불고기', known_words, stub)
    assert result.core_words == ('매콤', '불고기')
    assert stub.calls == 0


def test_analyze_with_fallback_uses_analyzer_without_nouns(known_words):
    external = MorphologyResult.from_tokens([Token('매콤', TokenKind.ADJECTIVE, 0.9),
                                             Token('맛', TokenKind.NOUN, 0.9)])
    result = analyze_with_fallback('매콤한', known_words, StubAnalyzer(external))
    assert result is external


def test_analyze_with_fallback_survives_analyzer_error(known_words):
    result = analyze_with_fallback('매콤한', known_words, StubAnalyzer(error=ValueError('boom')))
    assert kinds(result) == [('매콤', TokenKind.ADJECTIVE)]
