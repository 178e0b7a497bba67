"""
Score primitives shared by the matching strategies.

All scores are floats in 0.0-1.0. String distance goes through rapidfuzz's
Levenshtein implementation; everything else is prefix / substring heuristics
over words produced by split_into_words().
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from rapidfuzz.distance import Levenshtein

from text_normalizer import common_prefix_length, normalize, split_into_words
from romanization import romanize_improved

# Minimum shared leading characters for two words to count as related
MIN_COMMON_PREFIX = 3


def similarity(a: str, b: str) -> float:
    """
    1 - levenshtein(a, b) / max(len(a), len(b)); two empty strings are identical.

    Examples:
        similarity('bulgogi', 'bulgogi') -> 1.0
        similarity('kitten', 'sitting')  -> 0.571...
    """
    if not a and not b:
        return 1.0
    return Levenshtein.normalized_similarity(a, b)


def length_ratio(a: str, b: str) -> float:
    longer = max(len(a), len(b))
    return min(len(a), len(b)) / longer if longer else 0.0


def contains_either(a: str, b: str) -> bool:
    return a in b or b in a


def lengths_comparable(a: str, b: str, tolerance: float = 0.5) -> bool:
    """False when the lengths differ by more than ``tolerance`` of the longer one."""
    return abs(len(a) - len(b)) <= max(len(a), len(b)) * tolerance


def words_related(a: str, b: str) -> bool:
    """Substring relation or a common prefix of at least MIN_COMMON_PREFIX characters."""
    return contains_either(a, b) or common_prefix_length(a, b) >= MIN_COMMON_PREFIX


# ---------------------------------------------------------------------------
# Partial match score
# ---------------------------------------------------------------------------

def _best_inclusion(word: str, image_words: Sequence[str]) -> float:
    best = 0.0
    for img_word in image_words:
        if contains_either(word, img_word):
            best = max(best, length_ratio(word, img_word))
    return best


def partial_match_score(product: str, image: str,
                        to_roman: Optional[Callable[[str], str]] = None) -> float:
    """
    Blend of inclusion and word-level overlap between two names.

    Tried in order, first hit returns:
        1. one string contains the other                -> length ratio
        2. the same with spaces removed                 -> length ratio
        3. the same after to_roman() on both sides      -> length ratio * 0.9
    Otherwise each product word (2+ chars) looks for an image word that
    contains it or is contained by it, directly (1.0), after to_roman (0.9)
    or after romanization (0.8), and the result is
        matched_ratio * 0.6 + average_word_score * 0.4
    """
    if not product or not image:
        return 0.0

    if contains_either(product, image):
        return length_ratio(product, image)

    product_compact = product.replace(' ', '')
    image_compact = image.replace(' ', '')
    if product_compact and image_compact and contains_either(product_compact, image_compact):
        return length_ratio(product_compact, image_compact)

    if to_roman is not None:
        product_roman = to_roman(product)
        image_roman = to_roman(image)
        if product_roman and image_roman and contains_either(product_roman, image_roman):
            return length_ratio(product_roman, image_roman) * 0.9

    product_words = [normalize(w) for w in split_into_words(product) if len(w) >= 2]
    image_words = [normalize(w) for w in split_into_words(image) if len(w) >= 2]
    product_words = [w for w in product_words if w]
    image_words = [w for w in image_words if w]
    if not product_words or not image_words:
        return 0.0

    match_count = 0
    total = 0.0
    for word in product_words:
        best = _best_inclusion(word, image_words)
        if best == 0.0 and to_roman is not None:
            translated = to_roman(word)
            if translated and translated != word:
                best = _best_inclusion(translated, image_words) * 0.9
        if best == 0.0:
            romanized = romanize_improved(word)
            if romanized and romanized != word:
                best = _best_inclusion(romanized, image_words) * 0.8
        if best > 0.0:
            match_count += 1
            total += best

    match_ratio = match_count / len(product_words)
    avg = total / match_count if match_count else 0.0
    return match_ratio * 0.6 + avg * 0.4


# ---------------------------------------------------------------------------
# Word-order-insensitive match
# ---------------------------------------------------------------------------

def word_order_score(product_words: Sequence[str], image_words: Sequence[str]) -> Optional[float]:
    """
    Match words regardless of position.

    Each product word (3+ chars) takes its best partner among comparable
    image words: length ratio on inclusion, otherwise
    ratio * 0.8 + prefix_ratio * 0.2 when they share a 3+ char prefix.
    Partners scoring above 0.6 count. Returns combined * 0.75 where
        combined = matched / max(len) * 0.6 + average * 0.4
    provided combined >= 0.5 and every product word was matched, else None.
    """
    if len(product_words) <= 1 or len(image_words) <= 1:
        return None

    matched = 0
    total = 0.0
    for p_word in product_words:
        if len(p_word) < 3:
            continue
        best = 0.0
        for i_word in image_words:
            if len(i_word) < 3 or not lengths_comparable(p_word, i_word):
                continue
            prefix = common_prefix_length(p_word, i_word)
            inclusion = contains_either(p_word, i_word)
            if not inclusion and prefix < MIN_COMMON_PREFIX:
                continue
            ratio = length_ratio(p_word, i_word)
            if inclusion:
                score = ratio
            else:
                score = ratio * 0.8 + (prefix / max(len(p_word), len(i_word))) * 0.2
            best = max(best, score)
        if best > 0.6:
            matched += 1
            total += best

    if matched == 0:
        return None
    combined = (matched / max(len(product_words), len(image_words))) * 0.6 + (total / matched) * 0.4
    if combined >= 0.5 and matched == len(product_words):
        return combined * 0.75
    return None


# ---------------------------------------------------------------------------
# Word match info
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WordMatchInfo:
    included_words: int = 0
    total_match_score: float = 0.0
    word_match_ratio: float = 0.0
    all_words_matched: bool = False
    word_order_match: bool = False
    ordered_matches: int = 0

    @property
    def inclusion_score(self) -> float:
        """matched_ratio * 0.6 + average * 0.4, 0.0 when nothing matched."""
        if self.included_words == 0:
            return 0.0
        return self.word_match_ratio * 0.6 + (self.total_match_score / self.included_words) * 0.4


def _pair_score(p_word: str, i_word: str, is_core: bool) -> float:
    if not lengths_comparable(p_word, i_word) or min(len(p_word), len(i_word)) < 3:
        return 0.0
    # a shared prefix alone is not enough here, one word must contain the other
    if not contains_either(p_word, i_word):
        return 0.0
    prefix = common_prefix_length(p_word, i_word)
    base = length_ratio(p_word, i_word)
    common_ratio = prefix / max(len(p_word), len(i_word)) if prefix > 0 else base
    score = base * 0.7 + common_ratio * 0.3
    if is_core:
        score = min(1.0, score * 1.2)
    return score


def word_match_info(product_words: Sequence[str], image_words: Sequence[str],
                    core_nouns: Optional[Iterable[str]] = None) -> WordMatchInfo:
    """
    Per-word coverage of the product by the image name.

    Core nouns match with a lower threshold (0.4 instead of 0.5), get a 1.2x
    weight and add 0.1 to the total. A matched word is "ordered" when it pairs
    with the image word at the same index, is the first product word, or
    lands after the partner of an earlier product word.
    """
    if not product_words or not image_words:
        return WordMatchInfo()

    core = {n.lower() for n in core_nouns} if core_nouns else set()
    included = 0
    total = 0.0
    ordered = 0

    for i, p_word in enumerate(product_words):
        if len(p_word) < 2:
            continue
        is_core = p_word.lower() in core
        best, best_index = 0.0, -1
        for j, i_word in enumerate(image_words):
            score = _pair_score(p_word, i_word, is_core)
            if score > best:
                best, best_index = score, j

        threshold = 0.4 if is_core else 0.5
        if best <= threshold:
            continue
        included += 1
        total += best + (0.1 if is_core else 0.0)

        if best_index == i or i == 0:
            ordered += 1
        else:
            prev_index = -1
            for prev_word in product_words[:i]:
                for m, img_word in enumerate(image_words):
                    if contains_either(prev_word, img_word):
                        prev_index = m
                        break
            if 0 <= prev_index < best_index:
                ordered += 1

    n = len(product_words)
    ratio = included / n if included else 0.0
    all_matched = included == n
    order_ratio = ordered / included if included else 0.0
    return WordMatchInfo(
        included_words=included,
        total_match_score=total,
        word_match_ratio=ratio,
        all_words_matched=all_matched,
        word_order_match=order_ratio >= 0.8 and all_matched,
        ordered_matches=ordered,
    )
