"""
Hangul -> Latin transliteration.

Two entry points:

    romanize(text)
        Pure phonetic conversion. Each syllable in U+AC00..U+D7A3 is split into
        initial / medial / final jamo by offset arithmetic and each jamo is
        mapped through a lookup table. A final consonant followed by the same
        initial (ㄱ ㄷ ㅂ ㅅ ㅈ) collapses into a doubled digraph
        ("kk", "tt", "pp", "ss", "jj"): 학교 -> "hakkyo".

    romanize_improved(text)
        Practical conversion used for filename matching. Tries, in order:
            1. loanword patterns ("파스타" -> "pasta"), highest priority first
            2. fixed proper nouns / food terms ("춘천" -> "chuncheon")
            3. romanize()
            4. the lowercased input
        Never raises.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

HANGUL_START = 0xAC00
HANGUL_END = 0xD7A3

INITIALS = 'ㄱㄲㄴㄷㄸㄹㅁㅂㅃㅅㅆㅇㅈㅉㅊㅋㅌㅍㅎ'
MEDIALS = 'ㅏㅐㅑㅒㅓㅔㅕㅖㅗㅘㅙㅚㅛㅜㅝㅞㅟㅠㅡㅢㅣ'
# Index 0 = no final consonant
FINALS = ('', 'ㄱ', 'ㄲ', 'ㄳ', 'ㄴ', 'ㄵ', 'ㄶ', 'ㄷ', 'ㄹ', 'ㄺ', 'ㄻ', 'ㄼ', 'ㄽ', 'ㄾ',
          'ㄿ', 'ㅀ', 'ㅁ', 'ㅂ', 'ㅄ', 'ㅅ', 'ㅆ', 'ㅇ', 'ㅈ', 'ㅊ', 'ㅋ', 'ㅌ', 'ㅍ', 'ㅎ')

INITIAL_TO_ROMAN: Dict[str, str] = {
    'ㄱ': 'g', 'ㄲ': 'kk', 'ㄴ': 'n', 'ㄷ': 'd', 'ㄸ': 'tt',
    'ㄹ': 'r', 'ㅁ': 'm', 'ㅂ': 'b', 'ㅃ': 'pp', 'ㅅ': 's',
    'ㅆ': 'ss', 'ㅇ': '', 'ㅈ': 'j', 'ㅉ': 'jj', 'ㅊ': 'ch',
    'ㅋ': 'k', 'ㅌ': 't', 'ㅍ': 'p', 'ㅎ': 'h',
}

MEDIAL_TO_ROMAN: Dict[str, str] = {
    'ㅏ': 'a', 'ㅐ': 'ae', 'ㅑ': 'ya', 'ㅒ': 'yae', 'ㅓ': 'eo',
    'ㅔ': 'e', 'ㅕ': 'yeo', 'ㅖ': 'ye', 'ㅗ': 'o', 'ㅘ': 'wa',
    'ㅙ': 'wae', 'ㅚ': 'oe', 'ㅛ': 'yo', 'ㅜ': 'u', 'ㅝ': 'wo',
    'ㅞ': 'we', 'ㅟ': 'wi', 'ㅠ': 'yu', 'ㅡ': 'eu', 'ㅢ': 'ui',
    'ㅣ': 'i',
}

FINAL_TO_ROMAN: Dict[str, str] = {
    'ㄱ': 'k', 'ㄲ': 'k', 'ㄳ': 'k', 'ㄴ': 'n', 'ㄵ': 'n',
    'ㄶ': 'n', 'ㄷ': 't', 'ㄹ': 'l', 'ㄺ': 'k', 'ㄻ': 'm',
    'ㄼ': 'l', 'ㄽ': 'l', 'ㄾ': 'l', 'ㄿ': 'p', 'ㅀ': 'l',
    'ㅁ': 'm', 'ㅂ': 'p', 'ㅄ': 'p', 'ㅅ': 't', 'ㅆ': 't',
    'ㅇ': 'ng', 'ㅈ': 't', 'ㅊ': 't', 'ㅋ': 'k', 'ㅌ': 't',
    'ㅍ': 'p', 'ㅎ': 't',
}

# Same final + initial -> doubled digraph
DOUBLED_CONSONANTS: Dict[str, str] = {
    'ㄱ': 'kk', 'ㄷ': 'tt', 'ㅂ': 'pp', 'ㅅ': 'ss', 'ㅈ': 'jj',
}


def decompose(char: str) -> Optional[Tuple[str, str, str]]:
    """
    Split one Hangul syllable into (initial, medial, final) jamo.

    Returns None for anything outside the syllable block. ``final`` is ''
    when the syllable is open.

    Examples:
        '닭' -> ('ㄷ', 'ㅏ', 'ㄺ')
        '사' -> ('ㅅ', 'ㅏ', '')
    """
    if not char:
        return None
    code = ord(char[0])
    if code < HANGUL_START or code > HANGUL_END:
        return None
    base = code - HANGUL_START
    return INITIALS[base // 588], MEDIALS[(base % 588) // 28], FINALS[base % 28]


def romanize(text: str) -> str:
    """
    Phonetic Hangul -> Latin conversion.

    Non-Hangul characters pass through lowercased; whitespace is dropped.

    Examples:
        '불고기' -> 'bulgogi'
        '학교'   -> 'hakkyo'  (ㄱ final + ㄱ initial -> 'kk')
        '김치 2' -> 'gimchi2'
    """
    if not isinstance(text, str):
        return ''
    text = text.strip()
    parts: List[str] = []
    prev_final = ''

    for char in text:
        jamo = decompose(char)
        if jamo is None:
            if not char.isspace():
                parts.append(char.lower())
            prev_final = ''
            continue

        initial, medial, final = jamo
        initial_roman = INITIAL_TO_ROMAN[initial]
        if prev_final and prev_final == initial and initial in DOUBLED_CONSONANTS:
            # The previous final merges into this initial
            parts[-1] = parts[-1][:-len(FINAL_TO_ROMAN[prev_final])]
            initial_roman = DOUBLED_CONSONANTS[initial]

        syllable = initial_roman + MEDIAL_TO_ROMAN[medial]
        if final:
            syllable += FINAL_TO_ROMAN[final]
        parts.append(syllable)
        prev_final = final

    return ''.join(parts).lower()


# ---------------------------------------------------------------------------
# Loanwords and fixed terms
# ---------------------------------------------------------------------------

# (pattern, replacement, priority) - higher priority is tried first
LOANWORD_PATTERNS: List[Tuple[re.Pattern, str, int]] = [
    # Italian food
    (re.compile(r'^바질$'), 'basil', 10),
    (re.compile(r'^페스토$'), 'pesto', 10),
    (re.compile(r'^파스타$'), 'pasta', 10),
    (re.compile(r'^라자냐$'), 'lasagna', 10),
    (re.compile(r'^리조또$'), 'risotto', 10),
    (re.compile(r'^파르메산$'), 'parmesan', 10),
    (re.compile(r'^모짜렐라$'), 'mozzarella', 10),
    (re.compile(r'^치아바타$'), 'ciabatta', 10),
    (re.compile(r'^브루스케타$'), 'bruschetta', 10),
    (re.compile(r'^카프레제$'), 'caprese', 10),
    # Fruit
    (re.compile(r'^머스크멜론$'), 'muskmelon', 11),
    (re.compile(r'^머스크$'), 'musk', 10),
    (re.compile(r'^멜론$'), 'melon', 10),
    # Common loanword stems, matched unanchored at the start
    (re.compile(r'^크로와상'), 'croissant', 5),
    (re.compile(r'^아몬드'), 'almond', 5),
    (re.compile(r'^블루베리'), 'blueberry', 5),
]
_SORTED_LOANWORDS = sorted(LOANWORD_PATTERNS, key=lambda p: -p[2])

PROPER_NOUNS: Dict[str, str] = {
    # Regions
    '춘천': 'chuncheon',
    '안동': 'andong',
    '제주': 'jeju',
    '강릉': 'gangneung',
    '태백': 'taebaek',
    '영광': 'yeonggwang',
    '상주': 'sangju',
    '완도': 'wando',
    # Korean dishes
    '닭': 'dak',
    '갈비': 'galbi',
    '불고기': 'bulgogi',
    '김치': 'kimchi',
    '전복': 'abalone',
    '굴비': 'gulbi',
    '인절미': 'injeolmi',
    '약과': 'yaggwa',
    '된장': 'doenjang',
    '찌개': 'jjigae',
    '떡볶이': 'tteokbokki',
    '비빔밥': 'bibimbap',
}

_LOANWORD_STRIP = re.compile(r'[^\w가-힣]')


def convert_loanword(text: str) -> Optional[str]:
    """
    Map a known loanword to its English spelling.

    A pattern that matches only part of the input is accepted when the matched
    span covers at least 80% of it.
    """
    if not isinstance(text, str):
        return None
    normalized = _LOANWORD_STRIP.sub('', text.strip())
    if not normalized:
        return None
    for pattern, replacement, _priority in _SORTED_LOANWORDS:
        m = pattern.search(normalized)
        if m and (m.end() - m.start()) >= len(normalized) * 0.8:
            return replacement
    return None


def romanize_improved(text: str) -> str:
    """
    Loanword table -> proper nouns -> phonetic romanization -> lowercase input.

    Examples:
        '파스타'  -> 'pasta'
        '춘천'    -> 'chuncheon'
        '새로운'  -> 'saeroun'
        'Pie'     -> 'pie'
    """
    if not isinstance(text, str):
        return ''
    normalized = text.strip()
    if not normalized:
        return ''
    try:
        loanword = convert_loanword(normalized)
        if loanword:
            return loanword
        if normalized in PROPER_NOUNS:
            return PROPER_NOUNS[normalized]
        result = romanize(normalized)
        if result:
            return result
        return normalized.lower()
    except Exception:
        logger.warning("romanize_improved failed for %r", text, exc_info=True)
        return normalized.lower()
