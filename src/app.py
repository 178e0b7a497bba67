"""
Product Image Matcher - Streamlit UI

Maps Korean product names to the product image files served by the web app.
Upload an Excel/CSV product list, pick the name column, and download the
list with the matched image path for every row.

Run with:
    streamlit run src/app.py
"""

import io
import os

import pandas as pd
import streamlit as st

import config
from asset_cache import AssetDirectory
from image_matcher import (
    BEST_EFFORT_FLOOR,
    EXACT_FLOOR,
    PARTIAL_FLOOR,
    SIMILARITY_FLOOR,
    MATCH_STATUS_BEST_EFFORT,
    MATCH_STATUS_MATCHED,
    MATCH_STATUS_NO_MATCH,
    ImageMatcher,
    compute_coverage_metrics,
    diagnose_match,
    run_matching,
)
from morphology import KiwiAnalyzer, NullAnalyzer

config.configure_logging()

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Product Image Matcher",
    page_icon="🖼️",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.title("🖼️ Product Image Matcher")
st.markdown("**Korean product names → product image files (romanization + semantic dictionary + fuzzy scoring)**")

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.header("⚙️ Settings")

image_dir = st.sidebar.text_input("Image directory", value=config.PRODUCT_IMAGE_DIR)
public_prefix = st.sidebar.text_input("Public URL prefix", value=config.PRODUCT_IMAGE_PUBLIC_PREFIX)
use_kiwi = st.sidebar.checkbox(
    "Use Kiwi morphological analyzer",
    value=config.USE_KIWI,
    help="Second pass with kiwipiepy when the rule-based pass finds nothing (pip install kiwipiepy)",
)

st.sidebar.divider()
st.sidebar.markdown("**Acceptance floors:**")
st.sidebar.markdown(f"🟢 **EXACT ≥ {EXACT_FLOOR:.0%}**")
st.sidebar.markdown(f"🟡 **PARTIAL ≥ {PARTIAL_FLOOR:.0%}**")
st.sidebar.markdown(f"🔵 **SIMILARITY ≥ {SIMILARITY_FLOOR:.0%}**")
st.sidebar.markdown(f"⚪ **Best effort ≥ {BEST_EFFORT_FLOOR:.0%}** (closest image, flagged for review)")


@st.cache_resource(show_spinner="Loading image directory...")
def get_matcher(path: str, prefix: str, kiwi: bool) -> ImageMatcher:
    analyzer = KiwiAnalyzer() if kiwi else NullAnalyzer()
    return ImageMatcher(AssetDirectory(path, prefix), analyzer=analyzer)


matcher = get_matcher(image_dir, public_prefix, use_kiwi)
assets = matcher.assets()

if st.sidebar.button("🔄 Reload image directory"):
    st.cache_resource.clear()
    st.rerun()

if not os.path.isdir(image_dir):
    st.warning(f"Image directory not found: `{image_dir}`")
elif not assets:
    st.warning(f"No image files in `{image_dir}`")

tab1, tab2, tab3 = st.tabs(["🔗 Batch Mapping", "🧪 Single Name Tester", "📁 Image Assets"])

# =========================================================================
# TAB 1: BATCH MAPPING
# =========================================================================
with tab1:
    st.header("Batch Mapping")

    upload = st.file_uploader(
        "📁 Upload Product List (.xlsx or .csv)",
        type=["xlsx", "csv"],
        key="product_upload",
        help="Any sheet with a column of product names",
    )

    if upload is not None:
        try:
            if upload.name.lower().endswith('.csv'):
                df_input = pd.read_csv(upload)
            else:
                df_input = pd.read_excel(upload, engine='openpyxl')
        except Exception as e:
            st.error(f"Failed to parse: {e}")
            st.stop()

        if df_input.empty:
            st.warning("The uploaded file has no rows.")
            st.stop()

        columns = [str(c).strip() for c in df_input.columns]
        default_idx = 0
        for i, col in enumerate(columns):
            if any(key in col.lower() for key in ('name', '상품', '제품', '품명')):
                default_idx = i
                break
        name_col = st.selectbox("Product name column", columns, index=default_idx)

        with st.expander("Preview Raw Data"):
            st.dataframe(df_input.head(10), use_container_width=True, hide_index=True)

        st.divider()
        if st.button("🚀 Run Image Matching", type="primary", use_container_width=True):
            progress = st.progress(0, text="Starting...")

            def progress_cb(current, total):
                progress.progress(current / total, text=f"Matching... {current:,}/{total:,}")

            df_result = run_matching(df_input, name_col, matcher, progress_callback=progress_cb)
            progress.progress(1.0, text="✅ Complete!")

            metrics = compute_coverage_metrics(df_result)
            ca, cb, cc, cd = st.columns(4)
            ca.metric("🟢 Matched", metrics['matched_count'], f"{metrics['matched_rate']:.1f}%")
            cb.metric("⚪ Best Effort", metrics['best_effort_count'], f"{metrics['best_effort_rate']:.1f}%")
            cc.metric("🔴 No Match", metrics['no_match_count'], f"{metrics['no_match_rate']:.1f}%")
            cd.metric("Avg Score (matched)", f"{metrics['avg_match_score']:.2f}")

            if metrics['method_breakdown']:
                st.markdown("**By method:** " + ", ".join(
                    f"`{method}` {count}" for method, count in metrics['method_breakdown'].items()))

            def color_status(val):
                if val == MATCH_STATUS_MATCHED:
                    return 'background-color: #d4edda; color: #155724'
                elif val == MATCH_STATUS_BEST_EFFORT:
                    return 'background-color: #fff3cd; color: #856404'
                elif val == MATCH_STATUS_NO_MATCH:
                    return 'background-color: #f8d7da; color: #721c24'
                return ''

            st.subheader("📋 Results")
            st.dataframe(
                df_result.style.map(color_status, subset=['match_status']),
                use_container_width=True,
                hide_index=True,
            )

            n_unmatched = int((df_result['match_status'] == MATCH_STATUS_NO_MATCH).sum())
            if n_unmatched:
                with st.expander(f"View {n_unmatched} Unmatched Items"):
                    st.dataframe(
                        df_result[df_result['match_status'] == MATCH_STATUS_NO_MATCH][[name_col]],
                        use_container_width=True,
                        hide_index=True,
                    )

            output = io.BytesIO()
            with pd.ExcelWriter(output, engine='openpyxl') as writer:
                df_result.to_excel(writer, sheet_name='Matched', index=False)
                summary = pd.DataFrame([
                    {'Metric': key, 'Value': value}
                    for key, value in metrics.items()
                    if not isinstance(value, dict)
                ])
                summary.to_excel(writer, sheet_name='Summary', index=False)
            output.seek(0)

            st.divider()
            st.download_button(
                label="📥 Download Matched Excel File",
                data=output,
                file_name="product_image_mapping.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                type="primary",
                use_container_width=True,
            )

# =========================================================================
# TAB 2: SINGLE NAME TESTER
# =========================================================================
with tab2:
    st.header("Single Name Tester")
    st.markdown("See how one product name is analyzed, romanized and scored.")

    query = st.text_input("Product name", placeholder="예: 매콤한 불고기")
    if query:
        result = diagnose_match(matcher, query)
        if result.get('error'):
            st.warning(result['error'])
        else:
            if result['best_match']:
                st.success(f"**{result['best_match']}** (stage: `{result['stage']}`)")
            else:
                st.error("No image matched")

            col_left, col_right = st.columns(2)
            with col_left:
                st.markdown(f"**Normalized:** `{result['normalized']}`")
                st.markdown(f"**Romanized:** `{result['roman_spaced']}`")
                st.markdown("**Morphemes:**")
                st.dataframe(pd.DataFrame(result['tokens']), use_container_width=True, hide_index=True)
            with col_right:
                st.markdown("**Variants:**")
                st.code("\n".join(result['variants']) or "(none)")

            st.markdown("**Top candidates (primary, rule-based):**")
            if result['top_candidates']:
                st.dataframe(pd.DataFrame(result['top_candidates']), use_container_width=True, hide_index=True)
            else:
                st.info("No candidate scored above zero.")

            secondary = result.get('secondary')
            if secondary:
                with st.expander(f"Secondary pass (analyzer: {secondary['analyzer']})",
                                 expanded=result['stage'] == 'secondary'):
                    st.markdown(f"**Romanized:** `{secondary['roman_spaced']}`")
                    st.dataframe(pd.DataFrame(secondary['tokens']), use_container_width=True, hide_index=True)
                    if secondary['top_candidates']:
                        st.dataframe(pd.DataFrame(secondary['top_candidates']),
                                     use_container_width=True, hide_index=True)
                    else:
                        st.info("No candidate scored above zero.")

# =========================================================================
# TAB 3: IMAGE ASSETS
# =========================================================================
with tab3:
    st.header("Image Assets")
    st.metric("Image files", len(assets))
    if assets:
        st.dataframe(
            pd.DataFrame([{'filename': a.filename, 'public_path': a.public_path} for a in assets]),
            use_container_width=True,
            hide_index=True,
            height=500,
        )
