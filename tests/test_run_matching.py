"""DataFrame batch matching, coverage metrics, diagnostics and config"""
import logging

import numpy as np
import pandas as pd
import pytest

import config
from image_matcher import (
    MATCH_STATUS_BEST_EFFORT,
    MATCH_STATUS_MATCHED,
    MATCH_STATUS_NO_MATCH,
    ImageMatcher,
    compute_coverage_metrics,
    diagnose_match,
    run_matching,
)
from morphology import MorphologyAnalyzer, MorphologyResult, Token, TokenKind

ASSETS = ['shineMuscat.png', 'sweetApple.jpg', 'bulgogi.png', 'spicySnack.png']


@pytest.fixture
def matcher():
    return ImageMatcher(ASSETS)


@pytest.fixture
def df_products():
    return pd.DataFrame({
        ' 상품명 ': ['샤인머스캣', '매콤한 불고기', '완전히 새로운 상품명', np.nan],
        'price': [10000, 12000, 3000, 0],
    })


def test_run_matching_adds_columns(matcher, df_products):
    df = run_matching(df_products, '상품명', matcher)

    assert list(df.columns) == ['상품명', 'price', 'matched_image', 'match_score',
                                'match_method', 'match_stage', 'match_status']
    assert list(df['match_status']) == [MATCH_STATUS_MATCHED, MATCH_STATUS_BEST_EFFORT,
                                        MATCH_STATUS_NO_MATCH, MATCH_STATUS_NO_MATCH]
    assert df['matched_image'][0] == '/productsPage/shineMuscat.png'
    assert df['matched_image'][1] == '/productsPage/bulgogi.png'
    assert df['matched_image'][2] == ''
    assert list(df['match_method']) == ['exact', 'partial', '', '']
    assert list(df['match_stage']) == ['primary', 'best_effort', 'none', 'none']
    assert df['match_score'][3] == 0.0


def test_run_matching_does_not_modify_input(matcher, df_products):
    run_matching(df_products, '상품명', matcher)
    assert list(df_products.columns) == [' 상품명 ', 'price']


def test_run_matching_progress(matcher, df_products):
    calls = []
    run_matching(df_products, '상품명', matcher, progress_callback=lambda i, n: calls.append((i, n)))
    assert calls == [(4, 4)]


def test_run_matching_survives_row_errors(df_products):
    class BrokenMatcher(ImageMatcher):
        def match_detailed(self, name):
            raise RuntimeError('broken')

    df = run_matching(df_products, '상품명', BrokenMatcher(ASSETS))
    assert set(df['match_status']) == {MATCH_STATUS_NO_MATCH}


def test_coverage_metrics(matcher, df_products):
    metrics = compute_coverage_metrics(run_matching(df_products, '상품명', matcher))
    assert metrics['total_rows'] == 4
    assert metrics['matched_count'] == 1
    assert metrics['matched_rate'] == 25.0
    assert metrics['best_effort_count'] == 1
    assert metrics['no_match_count'] == 2
    assert metrics['no_match_rate'] == 50.0
    assert metrics['avg_match_score'] == pytest.approx(0.95)
    assert metrics['method_breakdown'] == {'exact': 1, 'partial': 1}
    assert metrics['stage_breakdown'] == {'none': 2, 'primary': 1, 'best_effort': 1}


def test_coverage_metrics_empty():
    df = pd.DataFrame(columns=['match_status', 'match_method', 'match_stage', 'match_score'])
    metrics = compute_coverage_metrics(df)
    assert metrics['total_rows'] == 0
    assert metrics['matched_rate'] == 0.0
    assert metrics['method_breakdown'] == {}


def test_diagnose_match(matcher):
    result = diagnose_match(matcher, '매콤한 불고기')
    assert result['roman'] == 'spicybulgogi'
    assert result['core_words'] == ['매콤', '불고기']
    assert [t['kind'] for t in result['tokens']] == ['adjective', 'noun']
    assert result['variants'][0] == 'spicybulgogi'
    assert result['top_candidates'][0]['asset_path'] == '/productsPage/bulgogi.png'
    assert result['top_candidates'][0]['passes_floor'] is False
    assert result['best_match'] == '/productsPage/bulgogi.png'
    assert result['stage'] == 'best_effort'
    assert result['secondary'] is None


def test_diagnose_match_empty(matcher):
    result = diagnose_match(matcher, '   ')
    assert result['error']
    assert result['top_candidates'] == []


class FixedAnalyzer(MorphologyAnalyzer):
    name = 'fixed'

    def __init__(self, result):
        self.result = result

    def analyze(self, text):
        return self.result


def test_diagnose_match_reports_stages_separately():
    morphology = MorphologyResult.from_tokens([Token('사과', TokenKind.NOUN, 0.9)])
    matcher = ImageMatcher(['apple.png'], analyzer=FixedAnalyzer(morphology), pinned={})
    result = diagnose_match(matcher, '수수께끼')

    # top-level fields are the rule-based pass, which finds nothing
    assert '사과' not in [t['text'] for t in result['tokens']]
    assert result['roman'] != 'apple'
    assert result['top_candidates'] == []

    secondary = result['secondary']
    assert secondary['analyzer'] == 'fixed'
    assert [t['text'] for t in secondary['tokens']] == ['사과']
    assert secondary['roman'] == 'apple'
    assert secondary['top_candidates'][0]['asset_path'] == '/productsPage/apple.png'
    assert secondary['top_candidates'][0]['passes_floor'] is True
    assert result['best_match'] == '/productsPage/apple.png'
    assert result['stage'] == 'secondary'


@pytest.fixture
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield root
    root.setLevel(level)


def test_configure_logging(restore_root_level):
    config.configure_logging('debug')
    assert restore_root_level.level == logging.DEBUG
    config.configure_logging('not-a-level')
    assert restore_root_level.level == logging.WARNING
