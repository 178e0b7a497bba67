"""
Rule-based morphological analysis of Korean product names.

A product name like "매콤한 불고기" or "고당도사과" is decomposed into tokens
tagged as noun / adjective / prefix so the matcher can tell the thing being
sold (core noun: 불고기) from decoration (modifier: 매콤).

Per word, in order:
    1. Adjective suffix  - "매콤한" -> ADJECTIVE "매콤"
    2. Fixed prefix      - "고당도" -> PREFIX "고" + NOUN "당도"
    3. Compound split    - "샤인머스캣" -> NOUN "샤인" + NOUN "머스캣"
       (against the semantic dictionary's known words, longest match first)

Special case: when the first of several space-separated words *is* a prefix
term ("전통 약과"), it becomes a PREFIX token and the next word is split on
its own.

An external analyzer (e.g. Kiwi) can be plugged in through the
MorphologyAnalyzer protocol; the default NullAnalyzer never answers.
"""

import enum
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List, Optional, Tuple

from text_normalizer import tokenize

logger = logging.getLogger(__name__)


class TokenKind(str, enum.Enum):
    NOUN = 'noun'
    ADJECTIVE = 'adjective'
    PREFIX = 'prefix'
    SUFFIX = 'suffix'
    UNKNOWN = 'unknown'


@dataclass(frozen=True)
class Token:
    text: str
    kind: TokenKind
    confidence: float


@dataclass(frozen=True)
class MorphologyResult:
    """Tokens in input order plus the NOUN/ADJECTIVE texts among them."""
    tokens: Tuple[Token, ...] = ()
    core_words: Tuple[str, ...] = ()

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token]) -> 'MorphologyResult':
        tokens = tuple(tokens)
        core = tuple(t.text for t in tokens if t.kind in (TokenKind.NOUN, TokenKind.ADJECTIVE))
        return cls(tokens=tokens, core_words=core)

    def of_kind(self, *kinds: TokenKind) -> List[Token]:
        return [t for t in self.tokens if t.kind in kinds]

    @property
    def has_noun(self) -> bool:
        return any(t.kind == TokenKind.NOUN for t in self.tokens)


EMPTY_MORPHOLOGY = MorphologyResult()

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ADJECTIVE_SUFFIXES = ('한', '된', '인', '할', '하는', '가득한', '많은', '적은')
_SUFFIXES_LONGEST_FIRST = sorted(ADJECTIVE_SUFFIXES, key=len, reverse=True)

# (compiled pattern, prefix, english meaning)
PREFIXES: List[Tuple[re.Pattern, str, str]] = [
    (re.compile(r'^고(.+)'), '고', 'high'),
    (re.compile(r'^신선(.+)'), '신선', 'fresh'),
    (re.compile(r'^프리미엄(.+)'), '프리미엄', 'premium'),
    (re.compile(r'^명품(.+)'), '명품', 'luxury'),
    (re.compile(r'^유기농(.+)'), '유기농', 'organic'),
    (re.compile(r'^무항생제(.+)'), '무항생제', 'antibioticfree'),
    (re.compile(r'^냉동(.+)'), '냉동', 'frozen'),
    (re.compile(r'^특별(.+)'), '특별', 'special'),
    (re.compile(r'^전통(.+)'), '전통', 'traditional'),
    (re.compile(r'^간편(.+)'), '간편', 'easy'),
]
PREFIX_TERMS = frozenset(p[1] for p in PREFIXES)

MAX_SPLIT_DEPTH = 10

CONFIDENCE_PREFIX = 0.9
CONFIDENCE_SPLIT = 0.8
CONFIDENCE_UNSPLIT = 0.7
CONFIDENCE_LIBRARY = 0.9


def extract_adjective(word: str) -> Tuple[str, bool]:
    """
    Strip the longest adjectival suffix.

    Examples:
        '매콤한'   -> ('매콤', True)
        '육즙가득' -> ('육즙가득', False)
    """
    for suffix in _SUFFIXES_LONGEST_FIRST:
        if word.endswith(suffix) and len(word) > len(suffix):
            return word[:-len(suffix)], True
    return word, False


def extract_prefix(word: str) -> Tuple[Optional[str], str]:
    """
    Split a fixed prefix off a word.

    Examples:
        '고당도'   -> ('고', '당도')
        '불고기'   -> (None, '불고기')
    """
    for pattern, prefix, _meaning in PREFIXES:
        m = pattern.match(word)
        if m and m.group(1):
            return prefix, m.group(1)
    return None, word


# ---------------------------------------------------------------------------
# Compound splitting
# ---------------------------------------------------------------------------

def _find_longest(word: str, start: int, known: AbstractSet[str], max_len: int) -> Tuple[int, int]:
    """Earliest position of the longest known word in word[start:]; (-1, 0) if none."""
    best_pos, best_len = -1, 0
    n = len(word)
    for pos in range(start, n):
        for length in range(min(max_len, n - pos), best_len, -1):
            if word[pos:pos + length] in known:
                best_pos, best_len = pos, length
                break
    return best_pos, best_len


def _segment(word: str, known: AbstractSet[str], max_len: int) -> Optional[List[Tuple[str, bool]]]:
    """
    One level of greedy segmentation.

    Returns (piece, needs_split) pairs covering ``word`` in order, or None when
    no known word occurs at all. Unmatched stretches of two or more characters
    are flagged for a further split.
    """
    pieces: List[Tuple[str, bool]] = []
    start = 0
    n = len(word)
    while start < n:
        pos, length = _find_longest(word, start, known, max_len)
        if length == 0:
            if not pieces:
                return None
            rest = word[start:]
            pieces.append((rest, len(rest) >= 2))
            break
        if pos > start:
            left = word[start:pos]
            pieces.append((left, len(left) >= 2))
        pieces.append((word[pos:pos + length], False))
        start = pos + length
    return pieces


def split_compound(word: str, known_words: AbstractSet[str], max_depth: int = MAX_SPLIT_DEPTH) -> List[str]:
    """
    Split a compound word into dictionary words, longest match first.

    Unmatched stretches to the left and right of a match are split
    independently. Work is driven by an explicit stack; every task carries its
    depth and the substrings already attempted on its path, so a task is
    resolved as-is once it reaches ``max_depth`` or revisits a substring.
    The pieces always re-join to ``word``.

    Examples (with a food dictionary):
        '샤인머스캣' -> ['샤인', '머스캣']   (when 샤인머스캣 itself is unknown)
        '소불고기'   -> ['소', '불고기']
        '완전히'     -> ['완전히']
    """
    if not isinstance(word, str):
        return []
    word = word.strip()
    if not word:
        return []
    if not known_words:
        return [word]
    max_len = max((len(w) for w in known_words if w), default=0)
    if max_len == 0:
        return [word]

    result: List[str] = []
    # (text, depth, visited) tasks; None depth marks a finished piece
    stack: List[Tuple[str, Optional[int], frozenset]] = [(word, 0, frozenset())]
    while stack:
        text, depth, visited = stack.pop()
        if depth is None:
            result.append(text)
            continue
        if depth >= max_depth or text in visited or len(text) <= 1 or text in known_words:
            result.append(text)
            continue
        pieces = _segment(text, known_words, max_len)
        if pieces is None:
            result.append(text)
            continue
        child_visited = visited | {text}
        for piece, needs_split in reversed(pieces):
            stack.append((piece, depth + 1 if needs_split else None, child_visited))

    if ''.join(result) != word:
        return [word]
    return result


# ---------------------------------------------------------------------------
# Word / phrase analysis
# ---------------------------------------------------------------------------

def _nouns(parts: Iterable[str], confidence: float) -> List[Token]:
    return [Token(p, TokenKind.NOUN, confidence) for p in parts if p]


def _keeps_whole(word: str, rest: str, known_words: Optional[AbstractSet[str]]) -> bool:
    # 고구마 is a noun, not 고 + 구마; 고당도 still splits because 당도 is known
    return bool(known_words) and word in known_words and rest not in known_words


def process_word(word: str, known_words: Optional[AbstractSet[str]] = None) -> List[Token]:
    """Turn one word into tokens: adjective, prefix + nouns, or split nouns."""
    base, is_adjective = extract_adjective(word)
    if is_adjective and _keeps_whole(word, base, known_words):
        base, is_adjective = word, False
    prefix, rest = extract_prefix(base)
    if prefix and _keeps_whole(base, rest, known_words):
        prefix, rest = None, base

    if prefix:
        tokens = [Token(prefix, TokenKind.PREFIX, CONFIDENCE_PREFIX)]
        if known_words:
            tokens.extend(_nouns(split_compound(rest, known_words), CONFIDENCE_SPLIT))
        else:
            tokens.extend(_nouns([rest], CONFIDENCE_SPLIT))
        return tokens

    if is_adjective:
        return [Token(base, TokenKind.ADJECTIVE, CONFIDENCE_SPLIT)]

    if known_words:
        parts = split_compound(base, known_words)
        if len(parts) > 1:
            return _nouns(parts, CONFIDENCE_SPLIT)
    return _nouns([base], CONFIDENCE_UNSPLIT)


def process_prefix_pair(word: str, next_word: str,
                        known_words: Optional[AbstractSet[str]] = None) -> Optional[List[Token]]:
    """
    Handle a space-separated leading prefix ("전통 약과").

    Returns None when ``word`` is not a prefix term.
    """
    if word not in PREFIX_TERMS or not next_word:
        return None
    tokens = [Token(word, TokenKind.PREFIX, CONFIDENCE_PREFIX)]
    base, _ = extract_adjective(next_word)
    parts = split_compound(base, known_words) if known_words else [base]
    tokens.extend(_nouns(parts, CONFIDENCE_SPLIT))
    return tokens


def analyze(text: str, known_words: Optional[AbstractSet[str]] = None) -> MorphologyResult:
    """
    Rule-based morphological analysis.

    Examples:
        analyze('매콤한 불고기', known)
            -> tokens [ADJECTIVE 매콤, NOUN 불고기], core_words ('매콤', '불고기')
        analyze('전통 약과', known)
            -> tokens [PREFIX 전통, NOUN 약과], core_words ('약과',)
    """
    if not isinstance(text, str) or not text:
        return EMPTY_MORPHOLOGY

    words = tokenize(text, known_words)
    tokens: List[Token] = []
    i = 0
    if len(words) > 1:
        pair = process_prefix_pair(words[0], words[1], known_words)
        if pair is not None:
            tokens.extend(pair)
            i = 2
    for word in words[i:]:
        tokens.extend(process_word(word, known_words))
    return MorphologyResult.from_tokens(tokens)


# ---------------------------------------------------------------------------
# Pluggable external analyzers
# ---------------------------------------------------------------------------

class MorphologyAnalyzer:
    """
    Interface for an external analyzer used by the secondary matching stage.

    ``analyze`` returns None when the analyzer is unavailable or has nothing
    to say; raising is treated the same way by callers.
    """

    name = 'analyzer'

    def analyze(self, text: str) -> Optional[MorphologyResult]:
        raise NotImplementedError


class NullAnalyzer(MorphologyAnalyzer):
    name = 'none'

    def analyze(self, text: str) -> Optional[MorphologyResult]:
        return None


# Kiwi POS tag prefix -> token kind; None drops the morpheme
_KIWI_TAG_KINDS: List[Tuple[str, Optional[TokenKind]]] = [
    ('VV', TokenKind.ADJECTIVE),
    ('VA', TokenKind.ADJECTIVE),
    ('NN', TokenKind.NOUN),
    ('SL', TokenKind.NOUN),     # Latin-script word
    ('MM', TokenKind.PREFIX),
    ('XPN', TokenKind.PREFIX),
    ('XS', TokenKind.SUFFIX),
    ('J', None),                # particles
    ('E', None),                # endings
    ('S', None),                # punctuation / symbols
]


def kiwi_tag_kind(tag: str) -> Optional[TokenKind]:
    """
    Map a Kiwi part-of-speech tag onto a token kind.

    Examples:
        'NNG' -> NOUN, 'VA' -> ADJECTIVE, 'JKS' -> None, 'MAG' -> NOUN
    """
    for prefix, kind in _KIWI_TAG_KINDS:
        if tag.startswith(prefix):
            return kind
    return TokenKind.NOUN


@dataclass
class KiwiAnalyzer(MorphologyAnalyzer):
    """
    Morphological analysis through kiwipiepy.

    The Kiwi model is built on first use. Pass ``kiwi`` to supply a ready
    instance (anything with a ``tokenize(text)`` method yielding tokens with
    ``form`` and ``tag``).
    """
    kiwi: object = None
    name: str = 'kiwi'
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _failed: bool = field(default=False, repr=False)

    def _instance(self):
        if self.kiwi is not None or self._failed:
            return self.kiwi
        with self._lock:
            if self.kiwi is None and not self._failed:
                try:
                    from kiwipiepy import Kiwi
                    self.kiwi = Kiwi()
                except Exception as e:
                    self._failed = True
                    logger.debug("Kiwi unavailable: %s", e)
        return self.kiwi

    def analyze(self, text: str) -> Optional[MorphologyResult]:
        if not isinstance(text, str) or not text.strip():
            return None
        kiwi = self._instance()
        if kiwi is None:
            return None
        try:
            morphemes = kiwi.tokenize(text)
        except Exception as e:
            logger.debug("Kiwi analysis failed for %r: %s", text, e)
            return None

        tokens = []
        for m in morphemes:
            form = getattr(m, 'form', None)
            tag = getattr(m, 'tag', None)
            if not form or not isinstance(form, str) or not isinstance(tag, str):
                continue
            kind = kiwi_tag_kind(tag)
            if kind is None:
                continue
            tokens.append(Token(form, kind, CONFIDENCE_LIBRARY))
        if not tokens:
            return None
        return MorphologyResult.from_tokens(tokens)


def analyze_with_fallback(text: str, known_words: Optional[AbstractSet[str]] = None,
                          analyzer: Optional[MorphologyAnalyzer] = None) -> MorphologyResult:
    """
    Rule-based analysis, deferring to ``analyzer`` when it finds no noun.

    The external result is only taken when it has core words and a noun;
    otherwise the rule-based result is returned as the best available answer.
    """
    primary = analyze(text, known_words)
    if primary.core_words and primary.has_noun:
        return primary
    if analyzer is None:
        return primary
    try:
        secondary = analyzer.analyze(text)
    except Exception as e:
        logger.debug("Analyzer %s failed for %r: %s", analyzer.name, text, e)
        return primary
    if secondary is not None and secondary.core_words and secondary.has_noun:
        logger.debug("Morphology fallback to %s for %r", analyzer.name, text)
        return secondary
    return primary
