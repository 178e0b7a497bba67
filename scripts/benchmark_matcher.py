"""
Micro-benchmark for image_matcher.py performance analysis.

Tests:
1. normalize() / romanize_improved() hot paths
2. SemanticDictionary.generate_variants() on compound names
3. run_matching() end-to-end on a synthetic 1k input sheet over 500 images

Usage:
    python scripts/benchmark_matcher.py
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
import time
import pandas as pd
import numpy as np
from image_matcher import ImageMatcher, run_matching, compute_coverage_metrics
from romanization import romanize_improved
from semantic_dict import default_dictionary
from text_normalizer import normalize

MODIFIERS = ['', '매콤한 ', '달콤한 ', '고당도 ', '프리미엄 ', '국내산 ', '유기농 ']
NOUNS = ['사과', '배', '불고기', '샤인머스캣', '고구마', '딸기', '한우', '감귤', '쿠키', '초콜릿']
UNITS = ['', ' 1kg', ' 2kg', ' 500g', ' 세트']
IMAGE_WORDS = ['apple', 'pear', 'bulgogi', 'shineMuscat', 'sweetPotato', 'strawberry',
               'koreanBeef', 'tangerine', 'cookie', 'chocolate', 'spicy', 'sweet', 'premium', 'organic']


def generate_synthetic_images(n_files: int = 500) -> list:
    """Camel-case image filenames built from dictionary words."""
    rng = np.random.default_rng(42)
    names = set()
    while len(names) < n_files:
        words = rng.choice(IMAGE_WORDS, size=rng.integers(1, 4), replace=False)
        name = words[0] + ''.join(w[0].upper() + w[1:] for w in words[1:])
        filename = f"{name}.png"
        names.add(f"{name}{len(names)}.png" if filename in names else filename)
    return sorted(names)


def generate_synthetic_input(n_rows: int = 1000) -> pd.DataFrame:
    """Generate synthetic product list for matching."""
    rng = np.random.default_rng(7)
    data = []
    for _ in range(n_rows):
        name = f"{rng.choice(MODIFIERS)}{rng.choice(NOUNS)}{rng.choice(UNITS)}"
        data.append({'상품명': name})
    return pd.DataFrame(data)


def benchmark_function(func, *args, **kwargs):
    """Benchmark a function and return (result, elapsed_ms)."""
    start = time.perf_counter()
    result = func(*args, **kwargs)
    end = time.perf_counter()
    elapsed_ms = (end - start) * 1000
    return result, elapsed_ms


def benchmark_hot_path(func, label: str, inputs, n_iterations: int):
    print("\n" + "="*70)
    print(f"BENCHMARK: {label}")
    print("="*70)

    for text in inputs:
        start = time.perf_counter()
        for _ in range(n_iterations):
            _ = func(text)
        elapsed_ms = (time.perf_counter() - start) * 1000
        per_call_us = elapsed_ms * 1000 / n_iterations

        print(f"\nInput: {text}")
        print(f"  Total: {elapsed_ms:.2f}ms ({n_iterations} calls)")
        print(f"  Per call: {per_call_us:.2f}μs")


def benchmark_run_matching():
    """Benchmark run_matching() end-to-end on 1k input."""
    print("\n" + "="*70)
    print("BENCHMARK: run_matching() - 1k Input Sheet, 500 Images")
    print("="*70)

    images = generate_synthetic_images(500)
    matcher, build_time = benchmark_function(ImageMatcher, images)
    print(f"\n  Matcher build: {build_time:.2f}ms ({len(images)} images)")

    df_input = generate_synthetic_input(1000)

    df_result, cold_time = benchmark_function(run_matching, df_input, '상품명', matcher)
    print(f"  Cold run: {cold_time:.2f}ms ({cold_time / len(df_input):.2f}ms/item)")

    df_result, warm_time = benchmark_function(run_matching, df_input, '상품명', matcher)
    print(f"  Warm run: {warm_time:.2f}ms ({warm_time / len(df_input):.2f}ms/item)")
    print(f"  Throughput: {len(df_input) / (warm_time / 1000):.0f} items/sec")

    metrics = compute_coverage_metrics(df_result)
    print(f"\nMatch Results:")
    print(f"  MATCHED: {metrics['matched_count']} ({metrics['matched_rate']:.1f}%)")
    print(f"  BEST_EFFORT: {metrics['best_effort_count']} ({metrics['best_effort_rate']:.1f}%)")
    print(f"  NO_MATCH: {metrics['no_match_count']} ({metrics['no_match_rate']:.1f}%)")
    for method, count in metrics['method_breakdown'].items():
        print(f"  method={method}: {count}")


def main():
    """Run all benchmarks."""
    print("="*70)
    print("IMAGE_MATCHER.PY PERFORMANCE BENCHMARK")
    print("="*70)

    samples = ['고당도 사과 2kg', '매콤한 불고기', '샤인머스캣', '완전히 새로운 상품명']
    dictionary = default_dictionary()

    # normalize() is lru-cached, so repeated calls measure the cache hit
    benchmark_hot_path(normalize, "normalize() - cached", samples, 10000)
    benchmark_hot_path(romanize_improved, "romanize_improved()", samples, 2000)
    benchmark_hot_path(dictionary.generate_variants, "generate_variants()", samples, 500)
    benchmark_run_matching()

    print("\n" + "="*70)
    print("BENCHMARK COMPLETE")
    print("="*70)


if __name__ == '__main__':
    main()
