"""
String normalization and tokenization for product names and image filenames.

Product names arrive in Korean ("고당도 사과"), image files are named in Korean,
English or camelCase-joined English ("sweetApple.jpg"). Every comparison in the
matcher goes through the helpers below so both sides share one canonical form:

    - camelCase boundaries become spaces ("almondBreeze" -> "almond breeze")
    - lowercase, punctuation stripped (Hangul, letters, digits, "_" survive)
    - whitespace collapsed, optionally removed entirely
"""

import re
from functools import lru_cache
from typing import Iterable, List, Optional

# Trailing grammatical particles (topic/subject/object/possessive/locative ...)
PARTICLES = (
    '은', '는', '이', '가', '을', '를', '의', '에', '에서', '로', '으로',
    '와', '과', '도', '만', '부터', '까지', '처럼', '같이', '보다',
)

_CAMEL_LOWER_UPPER = re.compile(r'([a-z])([A-Z])')
_CAMEL_UPPER_RUN = re.compile(r'([A-Z])([A-Z][a-z])')
_NON_WORD = re.compile(r'[^\w\s가-힣]')
_WHITESPACE = re.compile(r'\s+')
_WORD_SEPARATORS = re.compile(r'[\s_\-]+')


def split_camel_case(text: str) -> str:
    """
    Insert spaces at camelCase boundaries.

    Examples:
        'almondBreeze' -> 'almond Breeze'
        'HTMLParser'   -> 'HTML Parser'
    """
    if not isinstance(text, str):
        return ''
    s = _CAMEL_LOWER_UPPER.sub(r'\1 \2', text)
    return _CAMEL_UPPER_RUN.sub(r'\1 \2', s)


@lru_cache(maxsize=20000)
def normalize(text: str, remove_spaces: bool = True) -> str:
    """
    Normalize a product name or filename for comparison.

    Steps:
        1. Split camelCase boundaries
        2. Lowercase, trim
        3. Strip everything except word characters, whitespace and Hangul
        4. Collapse whitespace (after stripping, so "a ! b" -> "a b")
        5. Optionally remove all spaces

    normalize(normalize(x)) == normalize(x) for every input.

    Examples:
        'shineMuscat'      -> 'shinemuscat'
        '고당도 사과!'       -> '고당도사과'
        ('고당도 사과', False) -> '고당도 사과'
    """
    if not isinstance(text, str):
        return ''
    s = split_camel_case(text).lower().strip()
    s = _NON_WORD.sub('', s)
    s = _WHITESPACE.sub(' ', s).strip()
    if remove_spaces:
        s = _WHITESPACE.sub('', s)
    return s


def strip_particle(word: str) -> str:
    """Remove one trailing particle, never the whole word."""
    for particle in PARTICLES:
        if word.endswith(particle) and len(word) > len(particle):
            return word[:-len(particle)]
    return word


def tokenize(text: str, known_words: Optional[Iterable[str]] = None) -> List[str]:
    """
    Split a Korean phrase into words and drop trailing particles.

    A word found in ``known_words`` is kept whole: 사과 (apple) ends in the
    particle 과 but is a noun in its own right.

    Examples:
        '사과를 먹다'                     -> ['사과', '먹다']
        '고당도 사과', {'고당도', '사과'} -> ['고당도', '사과']
        '고당도 사과', {'사과'}           -> ['고당', '사과']
    """
    if not isinstance(text, str):
        return []
    known = known_words if known_words is not None else ()
    words = []
    for word in text.strip().split():
        if word in known:
            words.append(word)
            continue
        cleaned = strip_particle(word)
        if cleaned:
            words.append(cleaned)
    return words


def split_into_words(text: str) -> List[str]:
    """
    Split a (romanized) string into lowercase words.

    camelCase, whitespace, underscores and hyphens all count as separators.

    Examples:
        'chuncheonDakgalbi' -> ['chuncheon', 'dakgalbi']
        'almond_breeze-bar' -> ['almond', 'breeze', 'bar']
    """
    if not text or not isinstance(text, str):
        return []
    return [w for w in _WORD_SEPARATORS.split(split_camel_case(text).lower()) if w]


def contains_hangul(text: str) -> bool:
    return any('가' <= ch <= '힣' for ch in text)


def common_prefix_length(a: str, b: str) -> int:
    """Length of the shared leading run of two strings."""
    n = 0
    for x, y in zip(a, b):
        if x != y:
            break
        n += 1
    return n
