"""
Bilingual semantic dictionary: Korean food / product terms -> ranked English candidates.

Image files are mostly named in English ("sweetApple.jpg"), product names are
Korean ("고당도 사과"). Phonetic romanization alone cannot bridge the two
("sagwa" != "apple"), so every known term carries a list of English renderings
with a confidence score.

Invariants:
    - candidates per key are sorted by confidence, highest first
    - no duplicate english value per key (the highest confidence is kept)
    - a SemanticDictionary is never mutated; extended() returns a new one

This module also owns the two conversions built on top of the dictionary:
    to_roman()           one canonical Latin rendering of a phrase
    generate_variants()  a small bounded set of alternate renderings
"""

import itertools
import logging
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from morphology import MorphologyResult, TokenKind, analyze, split_compound
from romanization import romanize_improved
from text_normalizer import contains_hangul, normalize

logger = logging.getLogger(__name__)

# Cartesian product of per-token candidates is cut after this many combinations
MAX_COMBINATIONS = 7
# Hard bound on generate_variants() output
MAX_VARIANTS = 24
# Whole-text / per-token candidates considered
TOP_CANDIDATES = 3

_SPACES = re.compile(r'\s+')


@dataclass(frozen=True)
class SemanticCandidate:
    english: str
    confidence: float


# ---------------------------------------------------------------------------
# Seed table
# ---------------------------------------------------------------------------

BASE_SEMANTIC_DICT: Dict[str, List[Tuple[str, float]]] = {
    # Fruit
    '사과': [('apple', 1.0), ('apples', 0.95), ('fresh apple', 0.85), ('korean apple', 0.8)],
    '고당도사과': [('high sugar apple', 1.0), ('sweet apple', 0.95), ('highsugarapple', 0.9)],
    '꿀사과': [('honey apple', 1.0), ('sweethoneyapple', 0.95), ('sweet apple', 0.9)],
    '배': [('pear', 1.0), ('pears', 0.95)],
    '딸기': [('strawberry', 1.0), ('strawberries', 0.95), ('fresh strawberry', 0.85)],
    '설향딸기': [('seolhyang strawberry', 1.0), ('seolhyangstrawberry', 0.95), ('korean strawberry', 0.9)],
    '포도': [('grape', 1.0), ('grapes', 0.95)],
    '샤인머스캣': [('shine muscat', 1.0), ('shinemuscat', 0.95), ('green grape', 0.8)],
    '샤인': [('shine', 1.0)],
    '머스캣': [('muscat', 1.0)],
    '복숭아': [('peach', 1.0), ('peaches', 0.95)],
    '참외': [('melon', 1.0), ('oriental melon', 0.8)],
    '멜론': [('melon', 1.0), ('melons', 0.95)],
    '머스크': [('musk', 1.0)],
    '머스크멜론': [('muskmelon', 1.0), ('musk melon', 0.95), ('sweet melon', 0.85)],
    '수박': [('watermelon', 1.0)],
    '블루베리': [('blueberry', 1.0), ('blueberries', 0.95)],
    '체리': [('cherry', 1.0)],
    '감귤': [('tangerine', 1.0), ('mandarin', 0.95), ('citrus', 0.85)],
    '귤': [('tangerine', 1.0), ('mandarin', 0.95), ('citrus', 0.85)],
    '제주감귤': [('jeju tangerine', 1.0), ('jejutangerine', 0.95), ('jeju mandarin', 0.95),
                ('korean tangerine', 0.9)],
    '바나나': [('banana', 1.0), ('bananas', 0.95)],
    '파인애플': [('pineapple', 1.0), ('pineapples', 0.95)],
    '망고': [('mango', 1.0), ('mangoes', 0.95)],
    '아보카도': [('avocado', 1.0), ('avocados', 0.95)],
    '감': [('persimmon', 1.0), ('persimmons', 0.9)],
    '단감': [('sweet persimmon', 1.0), ('sweetpersimmon', 0.9), ('persimmon', 0.8)],
    '단': [('sweet', 1.0)],
    '대추': [('jujube', 1.0), ('date', 0.9)],
    '토마토': [('tomato', 1.0), ('tomatoes', 0.95)],
    '방울': [('cherry', 1.0), ('drop', 0.8)],
    '방울토마토': [('cherry tomato', 1.0), ('cherrytomato', 0.95), ('cherry tomatoes', 0.95)],
    '대추방울토마토': [('cherry tomato', 1.0), ('cherrytomato', 0.95), ('cherry tomatoes', 0.95)],

    # Honey / sweetness
    '꿀': [('honey', 1.0), ('raw honey', 0.9), ('natural honey', 0.85)],
    '벌꿀': [('honey', 1.0), ('bee honey', 0.9)],
    '당도': [('sugar content', 1.0), ('sweetness', 0.95)],
    '고당도': [('high sugar', 1.0), ('high sweetness', 0.95), ('highsugar', 0.9)],
    '보장': [('guaranteed', 1.0), ('guarantee', 0.9)],
    '당도보장': [('guaranteed sugar content', 1.0), ('guaranteedsugarcontent', 0.95),
                ('sugar content guaranteed', 0.9)],
    '당': [('sugar', 0.9)],

    # Prefix-like modifiers
    '고': [('high', 1.0)],
    '신선': [('fresh', 1.0)],
    '프리미엄': [('premium', 1.0)],
    '명품': [('luxury', 1.0), ('premium', 0.9)],
    '유기농': [('organic', 1.0), ('bio', 0.85)],
    '무농약': [('pesticide free', 1.0), ('pesticide-free', 0.95), ('pesticidefree', 0.9)],
    '무항생제': [('antibioticfree', 1.0), ('antibiotic free', 0.9)],
    '냉동': [('frozen', 1.0)],
    '냉장': [('chilled', 1.0), ('refrigerated', 0.9)],
    '특별': [('special', 1.0)],
    '전통': [('traditional', 1.0), ('traditional', 0.95)],
    '간편': [('easy', 1.0), ('convenient', 0.95), ('simple', 0.9)],
    '특란': [('special egg', 1.0), ('specialegg', 0.95), ('special eggs', 0.95), ('special', 0.85)],
    '신선특란': [('fresh special egg', 1.0), ('freshspecialegg', 0.95), ('fresh special', 0.9)],
    '산지직송': [('direct from farm', 1.0), ('directfromfarm', 0.95), ('farm direct', 0.95)],
    '국내산': [('korean origin', 1.0), ('koreanorigin', 0.95), ('made in korea', 0.95)],
    '수입산': [('imported', 1.0)],

    # Packaging / use
    '대용량': [('bulk size', 1.0), ('bulksize', 0.95), ('large pack', 0.9)],
    '소포장': [('small pack', 1.0), ('smallpack', 0.95)],
    '가정용': [('home use', 1.0), ('homeuse', 0.95)],
    '업소용': [('food service', 1.0), ('foodservice', 0.95), ('restaurant use', 0.95)],
    '세트': [('set', 1.0), ('bundle', 0.9), ('package', 0.85)],
    '선물세트': [('gift set', 1.0), ('giftset', 0.95), ('gift package', 0.95)],
    '명절선물': [('holiday gift', 1.0), ('holidaygift', 0.95), ('korean holiday gift', 0.95)],
    '공동구매': [('group buying', 1.0), ('groupbuying', 0.95), ('bulk purchase', 0.95),
                ('bulkpurchase', 0.9)],

    # Meal types
    '간편식': [('ready meal', 1.0), ('readymeal', 0.95), ('convenience food', 0.95)],
    '즉석식품': [('instant food', 1.0), ('instantfood', 0.95)],
    '밀프렙': [('meal prep', 1.0), ('mealprep', 0.95)],
    '밀키트': [('meal kit', 1.0), ('mealkit', 0.95)],
    '즉석밥': [('instant rice', 1.0), ('instantrice', 0.95), ('ready rice', 0.95)],
    '도시락': [('lunch box', 1.0), ('lunchbox', 0.95), ('meal box', 0.9)],

    # Health
    '다이어트': [('diet', 1.0), ('low calorie', 0.9)],
    '저칼로리': [('low calorie', 1.0), ('lowcalorie', 0.95)],
    '고단백': [('high protein', 1.0), ('highprotein', 0.95)],
    '저당': [('low sugar', 1.0), ('lowsugar', 0.95)],
    '무가당': [('no sugar added', 1.0), ('nosugaradded', 0.95), ('sugar free', 0.9)],

    # Juice / drinks
    '착즙': [('squeezed', 1.0)],
    '오렌지': [('orange', 1.0), ('oranges', 0.9)],
    '주스': [('juice', 1.0)],
    '착즙오렌지주스': [('squeezed orange juice', 1.0), ('squeezedorangejuice', 0.9)],
    '커피': [('coffee', 1.0)],
    '원두': [('coffee bean', 1.0), ('coffeebean', 0.95), ('coffee beans', 0.95)],
    '콜드브루': [('cold brew', 1.0), ('coldbrew', 0.95)],
    '차': [('tea', 1.0)],
    '녹차': [('green tea', 1.0), ('greentea', 0.95)],
    '홍차': [('black tea', 1.0), ('blacktea', 0.95)],
    '우유': [('milk', 1.0)],
    '저지방우유': [('low fat milk', 1.0), ('lowfatmilk', 0.95)],
    '무지방우유': [('skim milk', 1.0), ('skimmilk', 0.95)],
    '요거트': [('yogurt', 1.0), ('yoghurt', 0.95)],
    '그릭요거트': [('greek yogurt', 1.0), ('greekyogurt', 0.95)],

    # Bakery / snacks
    '피자': [('pizza', 1.0)],
    '냉동피자': [('frozen pizza', 1.0), ('frozenpizza', 0.9)],
    '크로와상': [('croissant', 1.0)],
    '생지': [('dough', 1.0)],
    '크로와상생지': [('croissant dough', 1.0), ('croissantdough', 0.9)],
    '양파': [('onion', 1.0), ('onions', 0.9)],
    '링': [('ring', 1.0), ('rings', 0.9)],
    '양파링': [('onion ring', 1.0), ('onionring', 0.9), ('onion rings', 0.9)],
    '초코': [('choco', 1.0)],
    '초콜릿': [('chocolate', 1.0)],
    '칩': [('chip', 1.0), ('chips', 0.9)],
    '초코칩': [('chocolate chip', 1.0), ('chocolatechip', 0.9), ('chocochip', 0.8)],
    '파이': [('pie', 1.0)],
    '과자': [('snack', 1.0), ('cookie', 0.9), ('snacks', 0.9)],
    '쿠키': [('cookie', 1.0), ('cookies', 0.9)],
    '새우깡': [('shrimp crackers', 1.0), ('shrimpcrackers', 0.9)],
    '깡': [('crackers', 1.0), ('cracker', 0.9)],
    '버터': [('butter', 1.0)],
    '카라멜': [('caramel', 1.0)],
    '팝콘': [('popcorn', 1.0)],
    '감자': [('potato', 1.0), ('potatoes', 0.9)],
    '감자칩': [('potato chips', 1.0), ('potatochips', 0.9), ('potato chip', 0.9)],
    '빵': [('bread', 1.0)],
    '식빵': [('bread', 1.0), ('white bread', 0.9)],
    '통밀': [('whole wheat', 1.0), ('wholewheat', 0.9), ('whole grain', 0.8)],
    '통': [('whole', 1.0)],
    '밀': [('wheat', 1.0)],
    '밀가루': [('flour', 1.0), ('wheat flour', 0.9)],
    '통밀빵': [('whole wheat bread', 1.0), ('wholewheatbread', 0.9)],
    '아이스크림': [('ice cream', 1.0), ('icecream', 0.95)],
    '바닐라아이스크림': [('vanilla ice cream', 1.0), ('vanillaicecream', 0.95)],

    # Meat
    '닭': [('chicken', 1.0), ('poultry', 0.85), ('dak', 0.8)],
    '닭고기': [('chicken meat', 1.0), ('chicken', 0.95)],
    '소': [('beef', 1.0), ('so', 0.7)],
    '소고기': [('beef', 1.0)],
    '한우': [('korean beef', 1.0), ('koreanbeef', 0.9), ('hanwoo', 0.8), ('beef', 0.7)],
    '명품한우세트': [('luxury korean beef set', 1.0), ('luxurykoreanbeefset', 0.9)],
    '불고기': [('bulgogi', 1.0), ('bulgogi', 0.9)],
    '소불고기': [('beef bulgogi', 1.0), ('beefbulgogi', 0.9), ('stir fried beef', 0.8),
              ('stirfriedbeef', 0.8)],
    '갈비': [('galbi', 1.0), ('ribs', 0.8)],
    '닭갈비': [('dakgalbi', 1.0), ('chicken galbi', 0.9)],
    '돼지': [('pork', 1.0)],
    '돼지고기': [('pork', 1.0)],
    '돈까스': [('pork cutlet', 1.0), ('porkcutlet', 0.9), ('cutlet', 0.8), ('tonkatsu', 0.7)],
    '까스': [('cutlet', 1.0)],
    '등심': [('sirloin', 1.0), ('loin steak', 0.9), ('brisket', 0.8)],
    '차돌': [('chadol', 1.0), ('brisket', 0.9)],
    '차돌박이': [('chadolbagi', 1.0), ('chadol bagi', 0.95), ('brisket', 0.9)],
    '만두': [('dumpling', 1.0), ('dumplings', 0.9), ('mandu', 0.8)],
    '냉동만두': [('frozen dumpling', 1.0), ('frozendumpling', 0.95)],

    # Seafood
    '새우': [('shrimp', 1.0), ('prawn', 0.9)],
    '연어': [('salmon', 1.0)],
    '참치': [('tuna', 1.0)],
    '고등어': [('mackerel', 1.0)],
    '갈치': [('hairtail fish', 1.0), ('hairtailfish', 0.95), ('beltfish', 0.9)],
    '오징어': [('squid', 1.0)],
    '문어': [('octopus', 1.0)],
    '조개': [('clam', 1.0), ('shellfish', 0.9)],
    '전복': [('abalone', 1.0)],
    '굴비': [('gulbi', 1.0)],
    '김': [('seaweed', 1.0)],
    '조미김': [('seasoned seaweed', 1.0), ('seasonedseaweed', 0.95), ('roasted seaweed', 0.95)],
    '감바스': [('gambas', 1.0)],
    '알': [('al', 1.0)],
    '아히요': [('ajillo', 1.0)],
    '감바스알아히요': [('gambas al ajillo', 1.0), ('gambasalajillo', 0.9)],

    # Stews / dishes
    '찌개': [('jjigae', 1.0), ('stew', 0.9), ('soup', 0.8)],
    '부대': [('budae', 1.0), ('army', 0.8)],
    '부대찌개': [('budae jjigae', 1.0), ('budaejjigae', 0.95), ('army stew', 0.9)],
    '부대찌개밀키트': [('budae jjigae meal kit', 1.0), ('budaejjigaemealkit', 0.95),
                  ('army stew meal kit', 0.9)],
    '차돌박이된장찌개': [('chadolbagi doenjang jjigae', 1.0), ('chadolbagidoenjangjjigae', 0.95),
                   ('brisket doenjang stew', 0.9)],
    '김치': [('kimchi', 1.0)],
    '볶음': [('stir fried', 1.0), ('stirfried', 0.9), ('fried', 0.8)],
    '볶은': [('stir fried', 1.0), ('stirfried', 0.9)],
    '볶음밥': [('fried rice', 1.0), ('friedrice', 0.95), ('stir fried rice', 0.9),
            ('stirfriedrice', 0.9)],
    '간편볶음밥': [('easy fried rice', 1.0), ('easyfriedrice', 0.95), ('convenient fried rice', 0.9)],
    '인절미': [('injeolmi', 1.0)],
    '약과': [('yaggwa', 1.0)],
    '컵라면': [('cup noodles', 1.0), ('cupnoodles', 0.95), ('instant cup ramen', 0.95)],
    '봉지라면': [('instant ramen', 1.0), ('instantramen', 0.95)],

    # Taste / texture modifiers
    '매콤한': [('spicy', 1.0)],
    '매콤': [('spicy', 1.0)],
    '바삭한': [('crispy', 1.0)],
    '바삭': [('crispy', 1.0)],
    '육즙': [('juicy', 1.0)],
    '가득': [('full', 1.0), ('packed', 0.8)],
    '육즙가득': [('juicy', 1.0), ('juicy full', 0.9)],

    # Regions
    '춘천': [('chuncheon', 1.0)],
    '안동': [('andong', 1.0)],
    '제주': [('jeju', 1.0)],
    '강릉': [('gangneung', 1.0)],
    '태백': [('taebaek', 1.0)],
    '영광': [('yeonggwang', 1.0)],
    '상주': [('sangju', 1.0)],
    '완도': [('wando', 1.0)],

    # Vegetables
    '오이': [('cucumber', 1.0), ('cucumbers', 0.95)],
    '애호박': [('zucchini', 1.0), ('korean zucchini', 0.9)],
    '양배추': [('cabbage', 1.0)],
    '상추': [('lettuce', 1.0)],
    '깻잎': [('perilla leaf', 1.0), ('perillaleaf', 0.95), ('sesame leaf', 0.9)],
    '시금치': [('spinach', 1.0)],
    '브로콜리': [('broccoli', 1.0)],
    '파프리카': [('paprika', 1.0), ('bell pepper', 0.95)],
    '청경채': [('bok choy', 1.0), ('bokchoy', 0.95), ('pak choi', 0.95)],
    '고구마': [('sweet potato', 1.0), ('sweetpotato', 0.95)],
    '스틱': [('stick', 1.0), ('sticks', 0.95)],
    '고구마스틱': [('sweet potato stick', 1.0), ('sweetpotatostick', 0.95), ('sweet potato sticks', 0.95)],
    '밤고구마': [('chestnut sweet potato', 1.0), ('chestnutsweetpotato', 0.95), ('sweet potato', 0.85)],
    '호박고구마': [('pumpkin sweet potato', 1.0), ('pumpkinsweetpotato', 0.95), ('sweet potato', 0.85)],
    '마늘': [('garlic', 1.0)],
    '양념마늘': [('seasoned garlic', 1.0), ('seasonedgarlic', 0.95), ('marinated garlic', 0.9)],
    '다진마늘': [('minced garlic', 1.0), ('mincedgarlic', 0.95), ('chopped garlic', 0.9)],
    '대파': [('green onion', 1.0), ('scallion', 0.95)],
    '쪽파': [('chive', 1.0), ('small green onion', 0.9)],
    '버섯': [('mushroom', 1.0), ('mushrooms', 0.95)],
    '표고버섯': [('shiitake mushroom', 1.0), ('shiitakemushroom', 0.95), ('shiitake', 0.95)],
    '새송이버섯': [('king oyster mushroom', 1.0), ('kingoystermushroom', 0.95), ('oyster mushroom', 0.9)],

    # Grains
    '쌀': [('rice', 1.0)],
    '백미': [('white rice', 1.0), ('whiterice', 0.95)],
    '현미': [('brown rice', 1.0), ('brownrice', 0.95)],
    '잡곡': [('mixed grains', 1.0), ('mixedgrains', 0.95), ('multigrain', 0.9)],
    '찹쌀': [('glutinous rice', 1.0), ('glutinousrice', 0.95), ('sticky rice', 0.9)],

    # Eggs
    '계란': [('egg', 1.0), ('eggs', 0.95)],
    '유정란': [('fertile egg', 1.0), ('fertileegg', 0.95), ('free range egg', 0.9)],
    '무항생제계란': [('antibiotic free egg', 1.0), ('antibioticfreeegg', 0.95)],

    # Pantry
    '아몬드': [('almond', 1.0)],
    '브리즈': [('breeze', 1.0)],
    '올리브': [('olive', 1.0)],
    '올리브유': [('olive oil', 1.0), ('oliveoil', 0.9)],
    '참기름': [('sesame oil', 1.0), ('sesameoil', 0.95)],
    '들기름': [('perilla oil', 1.0), ('perillaoil', 0.95)],
    '간장': [('soy sauce', 1.0), ('soysauce', 0.95)],
    '고추장': [('gochujang', 1.0), ('korean chili paste', 0.9)],
    '히말라야': [('himalayan', 1.0), ('himalaya', 0.9)],
    '핑크': [('pink', 1.0)],
    '솔트': [('salt', 1.0)],
    '소금': [('salt', 1.0)],
    '히말라야핑크솔트': [('himalayan pink salt', 1.0), ('himalayanpinksalt', 0.9)],
    '치즈': [('cheese', 1.0)],
    '볼': [('ball', 1.0), ('balls', 0.95)],
    '치즈볼': [('cheese ball', 1.0), ('cheeseball', 0.95), ('cheese balls', 0.95)],
    '모짜렐라치즈': [('mozzarella cheese', 1.0), ('mozzarellacheese', 0.95), ('mozzarella', 0.9)],
}

# Last-resort substring substitution when no token produced a rendering
FALLBACK_ROMAN: Dict[str, str] = {
    '샤인': 'shine',
    '머스캣': 'muscat',
    '머스캐트': 'muscat',
    '초코': 'choco',
    '초콜릿': 'chocolate',
    '파이': 'pie',
    '과자': 'cookie',
    '인절미': 'injeolmi',
    '고소한': 'crispy',
    '과일': 'fruit',
    '채소': 'vegetable',
    '식자재': 'ingredient',
    '크로와상': 'croissant',
    '생지': 'dough',
    '양파': 'onion',
    '링': 'ring',
    '명품': 'luxury',
    '한우': 'koreanbeef',
    '세트': 'set',
    '히말라야': 'himalayan',
    '핑크': 'pink',
    '솔트': 'salt',
    '소금': 'salt',
    '머스크': 'musk',
    '멜론': 'melon',
}
_FALLBACK_KEYS = sorted(FALLBACK_ROMAN, key=len, reverse=True)

# Latin filename words -> Korean, for matching English filenames against Korean names
ROMAN_TO_KOREAN: Dict[str, str] = {
    'chocolate': '초콜릿',
    'choco': '초코',
    'cookie': '과자',
    'pie': '파이',
}


def fallback_roman(text: str) -> str:
    """Substitute known Korean fragments in-place, longest first."""
    result = normalize(text, remove_spaces=True)
    for korean in _FALLBACK_KEYS:
        if korean in result:
            result = result.replace(korean, FALLBACK_ROMAN[korean])
    return result


def to_korean(text: str) -> str:
    """
    Reverse-substitute a handful of Latin words with their Korean spelling.

    Examples:
        'chocoPie'  -> '초코파이'
        'Cookie'    -> '과자'
    """
    result = normalize(text, remove_spaces=True)
    # 'chocolate' has to go before its prefix 'choco'
    for roman, korean in ROMAN_TO_KOREAN.items():
        result = result.replace(roman, korean)
    return result


def _compact(text: str) -> str:
    return _SPACES.sub('', text)


CandidateLike = Union[SemanticCandidate, Tuple[str, float]]


def _build_candidates(items: Iterable[CandidateLike]) -> Tuple[SemanticCandidate, ...]:
    best: Dict[str, float] = {}
    for item in items:
        if isinstance(item, SemanticCandidate):
            english, confidence = item.english, item.confidence
        else:
            english, confidence = item
        english = english.strip().lower() if isinstance(english, str) else ''
        if not english:
            continue
        confidence = float(confidence)
        if english not in best or confidence > best[english]:
            best[english] = confidence
    # stable sort keeps seed order among equal confidences
    ordered = sorted(best.items(), key=lambda kv: -kv[1])
    return tuple(SemanticCandidate(e, c) for e, c in ordered)


class SemanticDictionary:
    """
    Immutable Korean -> English candidate lookup.

    Usage:
        d = SemanticDictionary()                  # seeded with BASE_SEMANTIC_DICT
        d.translate('사과')                        # 'apple'
        d.to_roman('고당도 사과')                  # 'highsugarapple'
        d2 = d.extended({'두부': [('tofu', 1.0)]})
    """

    def __init__(self, entries: Optional[Mapping[str, Iterable[CandidateLike]]] = None):
        source = BASE_SEMANTIC_DICT if entries is None else entries
        table: Dict[str, Tuple[SemanticCandidate, ...]] = {}
        for key, items in source.items():
            if not isinstance(key, str) or not key.strip():
                continue
            candidates = _build_candidates(items)
            if candidates:
                table[key.strip()] = candidates
        self._entries = table
        self._known: FrozenSet[str] = frozenset(table)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, word) -> bool:
        return word in self._entries

    def candidates(self, word: str) -> List[SemanticCandidate]:
        return list(self._entries.get(word, ()))

    def translate(self, word: str) -> Optional[str]:
        entry = self._entries.get(word)
        return entry[0].english if entry else None

    def known_words(self) -> FrozenSet[str]:
        return self._known

    def extended(self, entries: Mapping[str, Iterable[CandidateLike]]) -> 'SemanticDictionary':
        """Return a new dictionary with ``entries`` merged into this one."""
        merged: Dict[str, List[CandidateLike]] = {k: list(v) for k, v in self._entries.items()}
        for key, items in entries.items():
            merged.setdefault(key, []).extend(items)
        return SemanticDictionary(merged)

    # ------------------------------------------------------------------
    # Roman rendering
    # ------------------------------------------------------------------

    def _word_to_roman(self, word: str) -> str:
        """One word -> space-separated English/romanized rendering."""
        if not contains_hangul(word):
            return word.lower()
        english = self.translate(word)
        if english:
            return english
        parts = split_compound(word, self._known)
        if len(parts) > 1:
            rendered = [self.translate(p) or romanize_improved(p) for p in parts]
            return ' '.join(r for r in rendered if r)
        return romanize_improved(word)

    def to_roman(self, text: str, morphology: Optional[MorphologyResult] = None,
                 spaced: bool = False) -> str:
        """
        Canonical Latin rendering of a product name or filename.

        Order of preference:
            1. the whole text is a dictionary key (with or without spaces)
            2. per token: dictionary, compound split + dictionary, romanization
            3. FALLBACK_ROMAN substitution if nothing was produced

        Latin words pass through. With ``spaced`` the rendered words are kept
        apart ("high sugar apple"), otherwise concatenated ("highsugarapple").

        Examples:
            '샤인머스캣'    -> 'shinemuscat'
            '매콤한 불고기' -> 'spicybulgogi'
            'shineMuscat'   -> 'shinemuscat'
        """
        if not isinstance(text, str):
            return ''
        spaced_text = normalize(text, remove_spaces=False)
        compact_text = _compact(spaced_text)
        if not compact_text:
            return ''

        rendered = None
        for key in (spaced_text, compact_text):
            english = self.translate(key)
            if english:
                rendered = english
                break

        if rendered is None:
            morph = morphology if morphology is not None else analyze(spaced_text, self._known)
            parts = []
            for token in morph.tokens:
                if token.kind in (TokenKind.PREFIX, TokenKind.NOUN, TokenKind.ADJECTIVE):
                    part = self._word_to_roman(token.text)
                    if part:
                        parts.append(part)
            rendered = ' '.join(parts)

        rendered = _SPACES.sub(' ', rendered).strip()
        if not rendered:
            rendered = fallback_roman(compact_text)
        return rendered if spaced else _compact(rendered)

    def to_korean(self, text: str) -> str:
        return to_korean(text)

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    def _token_options(self, word: str) -> List[str]:
        """Top candidates for one token, multi-word ones also split into words."""
        candidates = self._entries.get(word, ())[:TOP_CANDIDATES]
        if candidates:
            options: List[str] = []
            for c in candidates:
                words = c.english.split()
                if len(words) > 1:
                    options.append(''.join(words))
                    options.extend(words)
                else:
                    options.append(c.english)
            return list(dict.fromkeys(options))
        if not contains_hangul(word):
            return [word.lower()]
        substituted = fallback_roman(word)
        if substituted and not contains_hangul(substituted):
            return [substituted]
        romanized = romanize_improved(word)
        return [romanized] if romanized else []

    def generate_variants(self, text: str, morphology: Optional[MorphologyResult] = None) -> List[str]:
        """
        Alternate Latin renderings of ``text``, base form first.

        Sources, in order:
            - to_roman() of the text
            - top candidates of the whole text (spaced and space-stripped keys),
              each both concatenated and spaced
            - Cartesian product of per-token options, first MAX_COMBINATIONS
              combinations, each concatenated and space-joined

        Deterministic, de-duplicated and never longer than MAX_VARIANTS.
        """
        if not isinstance(text, str):
            return []
        spaced_text = normalize(text, remove_spaces=False)
        compact_text = _compact(spaced_text)
        if not compact_text:
            return []

        morph = morphology if morphology is not None else analyze(spaced_text, self._known)
        variants: List[str] = []
        seen = set()

        def add(value: str) -> None:
            value = _SPACES.sub(' ', value).strip()
            if value and value not in seen:
                seen.add(value)
                variants.append(value)

        add(self.to_roman(text, morph))

        for key in dict.fromkeys((spaced_text, compact_text)):
            for c in self._entries.get(key, ())[:TOP_CANDIDATES]:
                add(_compact(c.english))
                add(c.english)

        options = [self._token_options(t.text) for t in morph.tokens
                   if t.kind in (TokenKind.PREFIX, TokenKind.NOUN, TokenKind.ADJECTIVE)]
        options = [o for o in options if o]
        if options:
            for combo in itertools.islice(itertools.product(*options), MAX_COMBINATIONS):
                add(''.join(combo))
                if len(combo) > 1:
                    add(' '.join(combo))

        return variants[:MAX_VARIANTS]


_default_dictionary: Optional[SemanticDictionary] = None


def default_dictionary() -> SemanticDictionary:
    """Process-wide dictionary seeded with BASE_SEMANTIC_DICT."""
    global _default_dictionary
    if _default_dictionary is None:
        _default_dictionary = SemanticDictionary()
    return _default_dictionary
