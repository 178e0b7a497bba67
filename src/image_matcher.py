"""
Product name -> product image matching.

Matching Approach:
    - Every asset filename is normalized and romanized once per matcher
    - The product name is analyzed (morphology), romanized and expanded into
      a handful of Latin variants
    - Each asset is scored by the first strategy that fires
      (exact -> partial -> similarity, see strategies.py)
    - Candidates are ranked; the top one must clear its method's floor

Floors:
    - EXACT      >= 0.9
    - PARTIAL    >= 0.7
    - SIMILARITY >= 0.6

Pipeline (first accepted stage wins):
    pinned       fixed name -> file table, used only if the file exists
    primary      rule-based morphology
    secondary    external analyzer morphology (skipped when it has nothing)
    best_effort  best candidate of primary/secondary if its score >= 0.2
Otherwise the product has no image; that is a normal outcome, not an error.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

import config
from asset_cache import AssetDirectory, AssetFile, build_assets
from morphology import (
    MorphologyAnalyzer,
    MorphologyResult,
    KiwiAnalyzer,
    NullAnalyzer,
    analyze,
)
from semantic_dict import SemanticDictionary, default_dictionary
from strategies import AssetForms, MatchCandidate, MatchMethod, QueryForms, match_asset
from text_normalizer import normalize

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
EXACT_FLOOR = 0.9
PARTIAL_FLOOR = 0.7
SIMILARITY_FLOOR = 0.6
BEST_EFFORT_FLOOR = 0.2

METHOD_FLOORS: Dict[MatchMethod, float] = {
    MatchMethod.EXACT: EXACT_FLOOR,
    MatchMethod.PARTIAL: PARTIAL_FLOOR,
    MatchMethod.SIMILARITY: SIMILARITY_FLOOR,
}
METHOD_PRIORITY: Dict[MatchMethod, int] = {
    MatchMethod.EXACT: 0,
    MatchMethod.PARTIAL: 1,
    MatchMethod.SIMILARITY: 2,
}

# Scores closer than this are ordered by method, then by basename length
TIE_WINDOW = 0.05
# Basenames must differ by more than this many characters to break a tie
BASENAME_TIE_MIN_DIFF = 3

STAGE_PINNED = 'pinned'
STAGE_PRIMARY = 'primary'
STAGE_SECONDARY = 'secondary'
STAGE_BEST_EFFORT = 'best_effort'
STAGE_NONE = 'none'

MATCH_STATUS_MATCHED = "MATCHED"          # accepted by a floor (or pinned)
MATCH_STATUS_BEST_EFFORT = "BEST_EFFORT"  # closest image, below the floors
MATCH_STATUS_NO_MATCH = "NO_MATCH"        # no image

# Known product names whose images use names the heuristics cannot reach
PINNED_MAPPINGS: Dict[str, str] = {
    '전통 약과': 'prefixnoun',
    '전통약과': 'prefixnoun',
    '밀폐유나베': 'milleFeuilleNabe',
    '밀푀유나베': 'milleFeuilleNabe',
    '밀푀유 나베': 'milleFeuilleNabe',
    '당도보장 배 사과': 'highSugarHoneyApplesHighSugarHoneyApples',
    '당도보장배사과': 'highSugarHoneyApplesHighSugarHoneyApples',
    '당도보장 배': 'highSugarHoneyPear',
    '당도보장배': 'highSugarHoneyPear',
    '명품 한우 세트': 'luxuryKoreanbeefset',
    '명품한우세트': 'luxuryKoreanbeefset',
    '명품 한우': 'luxuryKoreanbeefset',
    '명품한우': 'luxuryKoreanbeefset',
}


@dataclass(frozen=True)
class MatchOutcome:
    """Result of one pipeline run; ``asset_path`` is None when nothing was accepted."""
    name: str
    asset_path: Optional[str]
    candidate: Optional[MatchCandidate]
    stage: str

    @property
    def matched(self) -> bool:
        return self.asset_path is not None


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

def _compare(a: MatchCandidate, b: MatchCandidate) -> int:
    if abs(a.score - b.score) < TIE_WINDOW:
        diff = METHOD_PRIORITY[a.method] - METHOD_PRIORITY[b.method]
        if diff:
            return diff
        len_a, len_b = len(a.basename), len(b.basename)
        if abs(len_a - len_b) > BASENAME_TIE_MIN_DIFF:
            return len_b - len_a
    if a.score > b.score:
        return -1
    if a.score < b.score:
        return 1
    return 0


def rank_candidates(candidates: Iterable[MatchCandidate]) -> List[MatchCandidate]:
    """
    Order candidates best first.

    Score descending; within TIE_WINDOW the stronger method wins
    (exact > partial > similarity), then the noticeably longer basename.
    sorted() is stable, so input order (sorted assets) settles the rest.
    """
    return sorted(candidates, key=cmp_to_key(_compare))


def passes_floor(candidate: Optional[MatchCandidate]) -> bool:
    if candidate is None:
        return False
    return candidate.score >= METHOD_FLOORS[candidate.method]


# ---------------------------------------------------------------------------
# Matcher
# ---------------------------------------------------------------------------

AssetSource = Union[AssetDirectory, Iterable[AssetFile], Iterable[str]]


class ImageMatcher:
    """
    Matches product names against one set of image assets.

    Args:
        assets: an AssetDirectory (listed lazily), AssetFile objects, or bare
            filenames such as ['shineMuscat.png', '불고기.png']
        dictionary: SemanticDictionary, defaults to the seeded dictionary
        analyzer: MorphologyAnalyzer for the secondary stage, defaults to NullAnalyzer
        pinned: name -> basename table, defaults to PINNED_MAPPINGS

    Usage:
        matcher = ImageMatcher(AssetDirectory('./public/productsPage'))
        matcher.match('샤인머스캣')          # '/productsPage/shineMuscat.png'
        matcher.match_detailed('매콤한 불고기').stage
    """

    def __init__(
        self,
        assets: AssetSource,
        dictionary: Optional[SemanticDictionary] = None,
        analyzer: Optional[MorphologyAnalyzer] = None,
        pinned: Optional[Dict[str, str]] = None,
    ):
        if isinstance(assets, AssetDirectory):
            self._directory: Optional[AssetDirectory] = assets
            self._static_assets: List[AssetFile] = []
        else:
            self._directory = None
            items = list(assets or [])
            files = [a for a in items if isinstance(a, AssetFile)]
            names = [a for a in items if isinstance(a, str)]
            self._static_assets = sorted(files + build_assets(names), key=lambda a: a.filename)
        self.dictionary = dictionary if dictionary is not None else default_dictionary()
        self.analyzer = analyzer if analyzer is not None else NullAnalyzer()
        self.pinned = dict(PINNED_MAPPINGS if pinned is None else pinned)
        # AssetFile -> AssetForms; entries are deterministic so racing writers agree
        self._forms: Dict[AssetFile, AssetForms] = {}

    def assets(self) -> List[AssetFile]:
        if self._directory is not None:
            return self._directory.list_assets()
        return list(self._static_assets)

    def _asset_forms(self, asset: AssetFile) -> AssetForms:
        forms = self._forms.get(asset)
        if forms is None:
            forms = AssetForms.build(asset, self.dictionary)
            self._forms[asset] = forms
        return forms

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def query_forms(self, name: str, morphology: Optional[MorphologyResult] = None) -> QueryForms:
        if morphology is None:
            morphology = analyze(normalize(name, remove_spaces=False), self.dictionary.known_words())
        return QueryForms.build(name, self.dictionary, morphology)

    def candidates(self, query: QueryForms, assets: Sequence[AssetFile]) -> List[MatchCandidate]:
        """Ranked candidates of ``query`` over ``assets``."""
        found = []
        for asset in assets:
            candidate = match_asset(query, self._asset_forms(asset), self.dictionary)
            if candidate is not None:
                found.append(candidate)
        return rank_candidates(found)

    def _pinned(self, name: str, assets: Sequence[AssetFile]) -> Optional[MatchCandidate]:
        target = self.pinned.get(name.strip())
        if not target:
            return None
        target = target.lower()
        for asset in assets:
            if asset.basename.lower() == target:
                return MatchCandidate(asset.public_path, 1.0, MatchMethod.EXACT, asset.basename)
        return None

    def secondary_morphology(self, name: str) -> Optional[MorphologyResult]:
        """Analyzer reading of ``name``, or None when it has no core words or fails."""
        try:
            result = self.analyzer.analyze(name)
        except Exception as e:
            logger.debug("Analyzer %s failed for %r: %s", self.analyzer.name, name, e)
            return None
        if result is None or not result.core_words:
            return None
        return result

    def match_detailed(self, name: str) -> MatchOutcome:
        """Run the full pipeline for one product name."""
        if not isinstance(name, str) or not normalize(name):
            return MatchOutcome(str(name) if name is not None else '', None, None, STAGE_NONE)

        assets = self.assets()
        if not assets:
            return MatchOutcome(name, None, None, STAGE_NONE)

        pinned = self._pinned(name, assets)
        if pinned is not None:
            logger.debug("[pinned] %r -> %s", name, pinned.asset_path)
            return MatchOutcome(name, pinned.asset_path, pinned, STAGE_PINNED)

        primary_query = self.query_forms(name)
        primary = self.candidates(primary_query, assets)
        best_primary = primary[0] if primary else None
        if passes_floor(best_primary):
            self._log_accept(name, best_primary, STAGE_PRIMARY, primary_query)
            return MatchOutcome(name, best_primary.asset_path, best_primary, STAGE_PRIMARY)

        best_secondary = None
        morphology = self.secondary_morphology(name)
        if morphology is not None:
            secondary_query = self.query_forms(name, morphology)
            secondary = self.candidates(secondary_query, assets)
            best_secondary = secondary[0] if secondary else None
            if passes_floor(best_secondary):
                self._log_accept(name, best_secondary, STAGE_SECONDARY, secondary_query)
                return MatchOutcome(name, best_secondary.asset_path, best_secondary, STAGE_SECONDARY)

        best = None
        for candidate in (best_primary, best_secondary):
            if candidate is not None and (best is None or candidate.score > best.score):
                best = candidate
        if best is not None and best.score >= BEST_EFFORT_FLOOR:
            self._log_accept(name, best, STAGE_BEST_EFFORT, primary_query)
            return MatchOutcome(name, best.asset_path, best, STAGE_BEST_EFFORT)

        logger.debug("No match for %r (roman=%r, variants=%s)",
                     name, primary_query.roman, list(primary_query.variants))
        return MatchOutcome(name, None, None, STAGE_NONE)

    def _log_accept(self, name: str, candidate: MatchCandidate, stage: str, query: QueryForms) -> None:
        logger.debug("[%s] %r -> %s (score: %.2f, method: %s, roman: %r, variants: %s)",
                     stage, name, candidate.asset_path, candidate.score,
                     candidate.method.value, query.roman, list(query.variants))

    def match(self, name: str) -> Optional[str]:
        return self.match_detailed(name).asset_path

    def match_many(
        self,
        names: Iterable[str],
        max_workers: int = 1,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> Dict[str, Optional[str]]:
        """
        Match many names; never raises for a single bad item.

        Returns name -> asset path (or None) in input order. A failure on one
        item is logged and that item maps to None.
        """
        items = list(names or [])
        total = len(items)

        def _one(name) -> Optional[str]:
            try:
                return self.match(name)
            except Exception as e:
                logger.warning("Failed to match image for %r: %s", name, e)
                return None

        if max_workers and max_workers > 1 and total > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                matched = list(executor.map(_one, items))
            if progress_callback:
                progress_callback(total, total)
        else:
            matched = []
            for i, name in enumerate(items, 1):
                matched.append(_one(name))
                if progress_callback:
                    progress_callback(i, total)

        results: Dict[str, Optional[str]] = {}
        for name, path in zip(items, matched):
            results[name if isinstance(name, str) else str(name)] = path
        return results


# ---------------------------------------------------------------------------
# DataFrame batch + metrics
# ---------------------------------------------------------------------------

def _status_for(outcome: MatchOutcome) -> str:
    if not outcome.matched:
        return MATCH_STATUS_NO_MATCH
    if outcome.stage == STAGE_BEST_EFFORT:
        return MATCH_STATUS_BEST_EFFORT
    return MATCH_STATUS_MATCHED


def run_matching(
    df_input: pd.DataFrame,
    name_col: str,
    matcher: ImageMatcher,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> pd.DataFrame:
    """
    Match every product name in ``df_input[name_col]``.

    Returns:
        Copy of df_input with added columns:
            matched_image, match_score, match_method, match_stage, match_status
    """
    df = df_input.copy()
    total = len(df)

    # Excel headers often carry stray whitespace
    df.columns = [str(c).strip() for c in df.columns]
    name_col = name_col.strip() if name_col else name_col

    results = []
    for _, row in df.iterrows():
        raw = row.get(name_col, '')
        name = '' if pd.isna(raw) else str(raw).strip()
        try:
            outcome = matcher.match_detailed(name)
        except Exception as e:
            logger.warning("Failed to match row %r: %s", name, e)
            outcome = MatchOutcome(name, None, None, STAGE_NONE)

        candidate = outcome.candidate
        results.append({
            'matched_image': outcome.asset_path or '',
            'match_score': round(candidate.score, 4) if candidate else 0.0,
            'match_method': candidate.method.value if candidate else '',
            'match_stage': outcome.stage,
            'match_status': _status_for(outcome),
        })

        if progress_callback and (len(results) % 50 == 0 or len(results) == total):
            progress_callback(len(results), total)

    results_df = pd.DataFrame(results, columns=[
        'matched_image', 'match_score', 'match_method', 'match_stage', 'match_status'])
    for col in results_df.columns:
        df[col] = results_df[col].values
    return df


def compute_coverage_metrics(df_results: pd.DataFrame) -> Dict[str, object]:
    """
    Summary numbers for a run_matching() result.

    Returns a dict with:
        total_rows
        matched_count / matched_rate: accepted by a floor or pinned
        best_effort_count / best_effort_rate: closest image below the floors
        no_match_count / no_match_rate
        avg_match_score: average score of MATCHED rows
        method_breakdown: method -> count (matched rows only)
        stage_breakdown: stage -> count
    """
    total = len(df_results)
    if total == 0:
        return {'total_rows': 0, 'matched_count': 0, 'matched_rate': 0.0,
                'best_effort_count': 0, 'best_effort_rate': 0.0,
                'no_match_count': 0, 'no_match_rate': 0.0,
                'avg_match_score': 0.0, 'method_breakdown': {}, 'stage_breakdown': {}}

    status = df_results['match_status']
    matched = df_results[status == MATCH_STATUS_MATCHED]
    best_effort = df_results[status == MATCH_STATUS_BEST_EFFORT]
    no_match = df_results[status == MATCH_STATUS_NO_MATCH]

    with_method = df_results[df_results['match_method'] != '']
    method_breakdown = with_method['match_method'].value_counts().to_dict()
    stage_breakdown = df_results['match_stage'].value_counts().to_dict()

    avg_score = round(float(matched['match_score'].mean()), 4) if len(matched) > 0 else 0.0

    return {
        'total_rows': total,
        'matched_count': len(matched),
        'matched_rate': round(len(matched) / total * 100, 1),
        'best_effort_count': len(best_effort),
        'best_effort_rate': round(len(best_effort) / total * 100, 1),
        'no_match_count': len(no_match),
        'no_match_rate': round(len(no_match) / total * 100, 1),
        'avg_match_score': avg_score,
        'method_breakdown': method_breakdown,
        'stage_breakdown': stage_breakdown,
    }


def _query_report(matcher: ImageMatcher, query: QueryForms, assets: Sequence[AssetFile],
                  top_n: int) -> dict:
    ranked = matcher.candidates(query, assets)
    morphology = query.morphology
    return {
        'tokens': [{'text': t.text, 'kind': t.kind.value, 'confidence': t.confidence}
                   for t in morphology.tokens],
        'core_words': list(morphology.core_words),
        'roman': query.roman,
        'roman_spaced': query.roman_spaced,
        'variants': list(query.variants),
        'top_candidates': [
            {'asset_path': c.asset_path, 'score': round(c.score, 4), 'method': c.method.value,
             'passes_floor': passes_floor(c)}
            for c in ranked[:top_n]
        ],
    }


def diagnose_match(matcher: ImageMatcher, name: str, top_n: int = 5) -> dict:
    """
    Everything the single-name tester shows: analysis, renderings, top candidates.

    The top-level fields describe the primary (rule-based) pass, the one the
    pipeline ranks first. ``secondary`` holds the same report for the analyzer
    pass, or None when the analyzer has nothing to offer. Used by the UI.
    """
    if not isinstance(name, str) or not normalize(name):
        return {'query': name, 'error': 'Empty query after normalization',
                'top_candidates': [], 'secondary': None}

    assets = matcher.assets()
    primary = matcher.query_forms(name)
    report = {'query': name, 'normalized': primary.normalized}
    report.update(_query_report(matcher, primary, assets, top_n))

    secondary = None
    morphology = matcher.secondary_morphology(name)
    if morphology is not None:
        secondary = _query_report(matcher, matcher.query_forms(name, morphology), assets, top_n)
        secondary['analyzer'] = matcher.analyzer.name
    report['secondary'] = secondary

    outcome = matcher.match_detailed(name)
    report['best_match'] = outcome.asset_path
    report['stage'] = outcome.stage
    return report


# ---------------------------------------------------------------------------
# Process-wide convenience API
# ---------------------------------------------------------------------------

_default_matcher: Optional[ImageMatcher] = None


def default_matcher() -> ImageMatcher:
    """Matcher over config.PRODUCT_IMAGE_DIR, built on first use."""
    global _default_matcher
    if _default_matcher is None:
        directory = AssetDirectory(config.PRODUCT_IMAGE_DIR, config.PRODUCT_IMAGE_PUBLIC_PREFIX)
        analyzer = KiwiAnalyzer() if config.USE_KIWI else NullAnalyzer()
        _default_matcher = ImageMatcher(directory, analyzer=analyzer)
    return _default_matcher


def match_product_image(name: str) -> Optional[str]:
    return default_matcher().match(name)


def match_product_images(names: Iterable[str], max_workers: int = 1) -> Dict[str, Optional[str]]:
    return default_matcher().match_many(names, max_workers=max_workers)
