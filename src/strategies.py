"""
Per-asset matching strategies: exact, partial, similarity.

Every query is turned into a QueryForms (normalized / romanized renderings,
variants, core-noun and modifier words) and every asset into an AssetForms.
match_asset() then tries, in order:

    Exact       normalized or romanized equality                 0.85 - 1.0
    Partial     inclusion, variants, word order, blended score   adjusted
    Similarity  guarded Levenshtein ratio                        sim * 0.8

and returns the first strategy that produces a candidate for that asset.

Core nouns vs. modifiers:
    "매콤한 불고기" (spicy bulgogi) vs "spicySnack.png" shares the modifier
    "spicy" but not the noun "bulgogi". The partial score adjustment cuts such
    candidates by 95% so a noun match ("bulgogi.png") always ranks higher.
"""

import enum
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from asset_cache import AssetFile
from morphology import MorphologyResult, Token, TokenKind
from scoring import (
    contains_either,
    length_ratio,
    lengths_comparable,
    partial_match_score,
    similarity,
    word_match_info,
    word_order_score,
    words_related,
    WordMatchInfo,
)
from semantic_dict import SemanticDictionary
from text_normalizer import normalize, split_into_words


class MatchMethod(str, enum.Enum):
    EXACT = 'exact'
    PARTIAL = 'partial'
    SIMILARITY = 'similarity'


@dataclass(frozen=True)
class MatchCandidate:
    asset_path: str
    score: float
    method: MatchMethod
    basename: str = ''


# Exact scores
SCORE_EXACT_NORMALIZED = 1.0
SCORE_EXACT_ROMAN = 0.95
SCORE_EXACT_REVERSE = 0.9
SCORE_EXACT_CROSS = 0.85

# Partial
MIN_INCLUSION_LENGTH = 5
INCLUSION_CAP = 0.8
INCLUSION_WEIGHT = 0.9
VARIANT_CAP = 0.75
VARIANT_WEIGHT = 0.85
BLENDED_MIN = 0.2
# reclassifying a partial result as exact requires clearing the exact floor
EXACT_RECLASSIFY_MIN = 0.9

# Similarity
SIMILARITY_MIN = 0.6
SIMILARITY_WEIGHT = 0.8

MIN_WORD_LENGTH = 3


def _words_of(texts) -> FrozenSet[str]:
    words = set()
    for text in texts:
        words.update(w for w in split_into_words(text) if len(w) >= MIN_WORD_LENGTH)
    return frozenset(words)


def _token_words(token: Token, dictionary: SemanticDictionary) -> FrozenSet[str]:
    """Every Latin word one token may appear as in a filename."""
    single = MorphologyResult.from_tokens([token])
    renderings = [dictionary.to_roman(token.text, spaced=True)]
    renderings.extend(dictionary.generate_variants(token.text, single))
    return _words_of(renderings)


@dataclass(frozen=True)
class QueryForms:
    name: str
    normalized: str
    normalized_spaced: str
    roman: str
    roman_spaced: str
    words: Tuple[str, ...]
    variants: Tuple[str, ...]
    morphology: MorphologyResult
    core_nouns: FrozenSet[str] = frozenset()
    noun_words: Tuple[FrozenSet[str], ...] = ()
    modifier_words: Tuple[FrozenSet[str], ...] = ()

    @classmethod
    def build(cls, name: str, dictionary: SemanticDictionary,
              morphology: MorphologyResult) -> 'QueryForms':
        roman_spaced = dictionary.to_roman(name, morphology, spaced=True)
        nouns = morphology.of_kind(TokenKind.NOUN)
        modifiers = morphology.of_kind(TokenKind.ADJECTIVE, TokenKind.PREFIX)

        core = set()
        for token in nouns:
            rendered = dictionary.to_roman(token.text, spaced=True)
            core.add(rendered.replace(' ', ''))
            core.update(split_into_words(rendered))

        return cls(
            name=name,
            normalized=normalize(name),
            normalized_spaced=normalize(name, remove_spaces=False),
            roman=roman_spaced.replace(' ', ''),
            roman_spaced=roman_spaced,
            words=tuple(split_into_words(roman_spaced)),
            variants=tuple(dictionary.generate_variants(name, morphology)),
            morphology=morphology,
            core_nouns=frozenset(w for w in core if w),
            noun_words=tuple(_token_words(t, dictionary) for t in nouns),
            modifier_words=tuple(_token_words(t, dictionary) for t in modifiers),
        )


@dataclass(frozen=True)
class AssetForms:
    asset: AssetFile
    normalized: str
    normalized_spaced: str
    roman: str
    roman_spaced: str
    words: Tuple[str, ...]
    korean: str

    @classmethod
    def build(cls, asset: AssetFile, dictionary: SemanticDictionary) -> 'AssetForms':
        roman_spaced = dictionary.to_roman(asset.basename, spaced=True)
        return cls(
            asset=asset,
            normalized=normalize(asset.basename),
            normalized_spaced=normalize(asset.basename, remove_spaces=False),
            roman=roman_spaced.replace(' ', ''),
            roman_spaced=roman_spaced,
            words=tuple(split_into_words(roman_spaced)),
            korean=dictionary.to_korean(asset.basename),
        )


def _candidate(asset: AssetForms, score: float, method: MatchMethod) -> MatchCandidate:
    return MatchCandidate(asset.asset.public_path, score, method, asset.asset.basename)


# ---------------------------------------------------------------------------
# Exact
# ---------------------------------------------------------------------------

def try_exact(query: QueryForms, asset: AssetForms) -> Optional[MatchCandidate]:
    if asset.normalized == query.normalized:
        return _candidate(asset, SCORE_EXACT_NORMALIZED, MatchMethod.EXACT)
    if query.roman and query.roman != query.normalized and asset.roman == query.roman:
        return _candidate(asset, SCORE_EXACT_ROMAN, MatchMethod.EXACT)
    if asset.korean != asset.normalized and asset.korean == query.normalized:
        return _candidate(asset, SCORE_EXACT_REVERSE, MatchMethod.EXACT)
    if asset.normalized == query.roman or asset.roman == query.normalized:
        return _candidate(asset, SCORE_EXACT_CROSS, MatchMethod.EXACT)
    return None


# ---------------------------------------------------------------------------
# Partial
# ---------------------------------------------------------------------------

def _inclusion_ratio(needle: str, haystack: str) -> Optional[float]:
    """Length ratio when one contains the other and the shorter has 5+ chars."""
    if not needle or not haystack:
        return None
    if min(len(needle), len(haystack)) < MIN_INCLUSION_LENGTH:
        return None
    if contains_either(needle, haystack):
        return length_ratio(needle, haystack)
    return None


def inclusion_score(query: QueryForms, asset: AssetForms) -> Optional[float]:
    ratio = _inclusion_ratio(query.roman, asset.roman)
    if ratio is None:
        return None
    return min(INCLUSION_CAP, ratio * INCLUSION_WEIGHT)


def variant_score(query: QueryForms, asset: AssetForms) -> Optional[float]:
    """Best inclusion score over the concatenated variants."""
    best = None
    for variant in query.variants:
        if variant == query.roman or ' ' in variant:
            continue
        ratio = _inclusion_ratio(variant, asset.roman)
        if ratio is None:
            continue
        score = min(VARIANT_CAP, ratio * VARIANT_WEIGHT)
        if best is None or score > best:
            best = score
    return best


def _any_word_matches(words: FrozenSet[str], asset_words: Tuple[str, ...]) -> bool:
    for word in words:
        for asset_word in asset_words:
            if len(asset_word) >= MIN_WORD_LENGTH and contains_either(word, asset_word):
                return True
    return False


def count_matched(token_words: Tuple[FrozenSet[str], ...], asset_words: Tuple[str, ...]) -> int:
    """How many tokens have at least one rendering word inside some asset word (or vice versa)."""
    return sum(1 for words in token_words if _any_word_matches(words, asset_words))


def adjust_score(base: float, query: QueryForms, asset: AssetForms,
                 info: WordMatchInfo) -> Tuple[float, MatchMethod]:
    """
    Re-weight a blended partial score by what actually matched.

        * 0.85                                   always
        core nouns present, none matched         * 0.05 if a modifier matched, else * 0.15
        core nouns matched (all / half / some)   +0.2 (<=0.98) / +0.15 (<=0.95) / +0.1 (<=0.9)
        no nouns, modifier matched               * 0.3
        second words differ / equal              * 0.6 / +0.1 (<=0.95)
        ordered full word coverage               +0.2 (<=0.98), exact if >= 0.9
        full word coverage                       +0.15 (<=0.95)
        80% word coverage                        +0.1 (<=0.9)
    """
    score = base * 0.85
    noun_total = len(query.noun_words)
    nouns_matched = count_matched(query.noun_words, asset.words)
    modifier_matched = count_matched(query.modifier_words, asset.words) > 0

    if noun_total and not nouns_matched:
        score *= 0.05 if modifier_matched else 0.15
    elif nouns_matched:
        ratio = nouns_matched / noun_total
        if ratio >= 1.0:
            score = min(0.98, score + 0.2)
        elif ratio >= 0.5:
            score = min(0.95, score + 0.15)
        else:
            score = min(0.9, score + 0.1)
    elif modifier_matched:
        score *= 0.3

    if len(query.words) >= 2 and len(asset.words) >= 2:
        q_second, a_second = query.words[1], asset.words[1]
        if q_second == a_second:
            score = min(0.95, score + 0.1)
        elif not contains_either(q_second, a_second):
            score *= 0.6

    method = MatchMethod.PARTIAL
    if info.word_order_match and info.all_words_matched:
        score = min(0.98, score + 0.2)
        if score >= EXACT_RECLASSIFY_MIN:
            method = MatchMethod.EXACT
    elif info.all_words_matched:
        score = min(0.95, score + 0.15)
    elif info.word_match_ratio >= 0.8:
        score = min(0.9, score + 0.1)
    return score, method


def try_partial(query: QueryForms, asset: AssetForms,
                dictionary: SemanticDictionary) -> Optional[MatchCandidate]:
    score = inclusion_score(query, asset)
    if score is not None:
        return _candidate(asset, score, MatchMethod.PARTIAL)

    score = variant_score(query, asset)
    if score is not None:
        return _candidate(asset, score, MatchMethod.PARTIAL)

    score = word_order_score(query.words, asset.words)
    if score is not None:
        return _candidate(asset, score, MatchMethod.PARTIAL)

    to_roman = dictionary.to_roman
    info = word_match_info(query.words, asset.words, query.core_nouns)
    blended = max(
        partial_match_score(query.normalized_spaced, asset.normalized_spaced, to_roman),
        partial_match_score(query.roman_spaced, asset.roman_spaced, to_roman),
        partial_match_score(query.normalized, asset.normalized, to_roman),
        partial_match_score(query.roman, asset.roman, to_roman),
        info.inclusion_score * 0.9,
    )
    if blended <= BLENDED_MIN:
        return None
    score, method = adjust_score(blended, query, asset, info)
    return _candidate(asset, score, method)


# ---------------------------------------------------------------------------
# Similarity
# ---------------------------------------------------------------------------

def _shares_words(query_words: Tuple[str, ...], asset_words: Tuple[str, ...]) -> bool:
    """
    At least half of the query words (rounded up) relate to some asset word.

    With no words on either side there is no related pair, so the
    Levenshtein pass is not allowed to run.
    """
    if not query_words or not asset_words:
        return False
    common = 0
    for q_word in query_words:
        if len(q_word) < MIN_WORD_LENGTH:
            continue
        for a_word in asset_words:
            if len(a_word) < MIN_WORD_LENGTH or not lengths_comparable(q_word, a_word):
                continue
            if words_related(q_word, a_word):
                common += 1
                break
    needed = (len(query_words) + 1) // 2
    return common >= needed


def try_similarity(query: QueryForms, asset: AssetForms) -> Optional[MatchCandidate]:
    query_len = max(len(query.roman), len(query.normalized))
    asset_len = max(len(asset.roman), len(asset.normalized))
    if abs(query_len - asset_len) > max(query_len, asset_len) * 0.5:
        return None
    if not _shares_words(query.words, asset.words):
        return None

    best = max(
        similarity(query.normalized, asset.normalized),
        similarity(query.roman, asset.roman),
        similarity(query.normalized, asset.roman),
        similarity(query.roman, asset.normalized),
    )
    if best > SIMILARITY_MIN:
        return _candidate(asset, best * SIMILARITY_WEIGHT, MatchMethod.SIMILARITY)
    return None


def match_asset(query: QueryForms, asset: AssetForms,
                dictionary: SemanticDictionary) -> Optional[MatchCandidate]:
    """First strategy that produces a candidate for this asset, if any."""
    if not asset.normalized:
        return None
    return (try_exact(query, asset)
            or try_partial(query, asset, dictionary)
            or try_similarity(query, asset))
