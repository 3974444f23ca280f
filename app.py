"""
Streamlit entry point — Price List Catalog UI.

Wires together the ingestion, catalog, and pricing modules:
  1. Sidebar settings (exchange rate, rounding, tiers, client adjustment,
     currency override, view preset)
  2. Import panels (spreadsheet / CSV, photo, web page, manual product)
  3. Import summary, possible duplicates, and web sources
  4. Priced catalog table with search
  5. Product editor and delete
  6. History (save, restore, delete) and clear view
  7. Downloads (chat text, plain text, Excel)

Contains NO business logic — only calls processing modules and displays results.
"""

import logging
import tempfile
from datetime import date
from pathlib import Path

import streamlit as st

from config.pricing_defaults import (
    CURRENCY_OVERRIDES,
    CUSTOM_TIER,
    ROUNDING_LABELS,
    ROUNDING_RULES,
    VISIBILITY_PRESETS,
)
from processing.catalog import (
    add_manual_product,
    clear_catalog,
    delete_product,
    update_product,
)
from processing.history import (
    clear_saved_lists,
    delete_saved_list,
    restore_saved_list,
    save_list,
)
from processing.ingestion import (
    IngestionResult,
    apply_import,
    import_image,
    import_tabular_file,
    import_url,
)
from processing.llm_extractor import ClaudeExtractor
from processing.models import Visibility
from processing.pricing_engine import priced_view_to_dataframe, project_catalog
from utils.exporter import build_price_list_text, export_price_list_excel
from utils.storage import DEFAULT_DATA_DIR, CatalogStore

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Page configuration
# ═══════════════════════════════════════════════════════════════════════════

st.set_page_config(
    page_title="Price List Catalog",
    page_icon="🏷️",
    layout="wide",
    initial_sidebar_state="expanded",
)


# ═══════════════════════════════════════════════════════════════════════════
# Secrets, storage, and session state
# ═══════════════════════════════════════════════════════════════════════════

# API key from Streamlit secrets (not from a UI input field)
api_key = st.secrets.get("ANTHROPIC_API_KEY", None)
if api_key == "your-key-here":
    api_key = None

extractor = ClaudeExtractor(api_key) if api_key else None
store = CatalogStore(Path(st.secrets.get("DATA_DIR", str(DEFAULT_DATA_DIR))))


def _init_session_state() -> None:
    """Ensure all required session state keys exist, loading persisted data once."""
    if "catalog" not in st.session_state:
        st.session_state["catalog"] = store.load_catalog()
    if "saved_lists" not in st.session_state:
        st.session_state["saved_lists"] = store.load_saved_lists()
    if "pricing_config" not in st.session_state:
        st.session_state["pricing_config"] = store.load_settings()

    defaults: dict = {
        "import_summary": None,
        "grounding_sources": [],
        "import_error": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def _set_catalog(catalog: list) -> None:
    st.session_state["catalog"] = catalog
    store.save_catalog(catalog)


def _set_saved_lists(saved_lists: list) -> None:
    st.session_state["saved_lists"] = saved_lists
    store.save_saved_lists(saved_lists)


def _run_import(run) -> None:
    """
    Run one import and merge it if it succeeded.

    Runs synchronously inside one script run, so only one import is ever in
    flight.  Clicking "Clear view" starts a new run, which stops this one
    before its result is merged.
    """
    st.session_state["grounding_sources"] = []
    st.session_state["import_error"] = None

    with st.spinner("Analyzing source..."):
        result: IngestionResult = run()

    if not result.success:
        st.session_state["import_error"] = result.message
        st.session_state["import_summary"] = None
        st.session_state["grounding_sources"] = result.sources
        return

    upsert = apply_import(st.session_state["catalog"], result)
    _set_catalog(upsert.catalog)
    st.session_state["import_summary"] = upsert.summary
    st.session_state["grounding_sources"] = result.sources


_init_session_state()
config = st.session_state["pricing_config"]


# ═══════════════════════════════════════════════════════════════════════════
# Sidebar — Settings
# ═══════════════════════════════════════════════════════════════════════════

st.sidebar.title("⚙️ Pricing")

config.exchange_rate = st.sidebar.number_input(
    "Exchange rate",
    min_value=0.0001,
    value=float(config.exchange_rate),
    step=0.1,
    format="%.4f",
    help="Multiplies the list price to get your local cost.",
)

config.rounding_rule = st.sidebar.selectbox(
    "Rounding",
    options=ROUNDING_RULES,
    index=ROUNDING_RULES.index(config.rounding_rule),
    format_func=lambda rule: ROUNDING_LABELS[rule],
)

tier_names = list(config.tiers)
config.active_tier = st.sidebar.radio(
    "Seller markup tier",
    options=tier_names,
    index=tier_names.index(config.active_tier),
    format_func=lambda tier: f"{tier}: +{config.tiers[tier]:g}%",
    horizontal=True,
)

config.tiers[CUSTOM_TIER] = st.sidebar.number_input(
    "Custom tier markup (%)",
    value=float(config.tiers.get(CUSTOM_TIER, 0.0)),
    step=1.0,
)

config.client_adjustment = st.sidebar.number_input(
    "Client adjustment (%)",
    value=float(config.client_adjustment),
    step=1.0,
    help="Extra markup on top of the seller price for the suggested client price.",
)

config.global_currency = st.sidebar.selectbox(
    "Currency",
    options=CURRENCY_OVERRIDES,
    index=(
        CURRENCY_OVERRIDES.index(config.global_currency)
        if config.global_currency in CURRENCY_OVERRIDES
        else 0
    ),
    help="'auto' shows each product's own currency.",
)

preset_names = list(VISIBILITY_PRESETS)
current_visibility = vars(config.visibility)
preset_name = st.sidebar.radio(
    "View",
    options=preset_names,
    index=next(
        (i for i, name in enumerate(preset_names)
         if VISIBILITY_PRESETS[name] == current_visibility),
        0,
    ),
    horizontal=True,
)
config.visibility = Visibility(**VISIBILITY_PRESETS[preset_name])

store.save_settings(config)

st.sidebar.divider()
if not api_key:
    st.sidebar.info(
        "No API key configured. Spreadsheet and CSV imports still work; "
        "photo and web imports are disabled. "
        "Set ANTHROPIC_API_KEY in .streamlit/secrets.toml to enable them."
    )


# ═══════════════════════════════════════════════════════════════════════════
# Section 1: Import
# ═══════════════════════════════════════════════════════════════════════════

st.title("🏷️ Price List Catalog")
st.caption(
    "Import supplier price lists, keep one merged catalog, and price it "
    "with your markup tiers."
)

st.header("📥 Import")

file_col, image_col, url_col = st.columns(3)

with file_col:
    table_file = st.file_uploader(
        "Spreadsheet or CSV",
        type=["xlsx", "xlsm", "csv", "tsv", "txt"],
        key="table_upload",
    )
    if table_file is not None and st.button("Import file", use_container_width=True):
        with tempfile.TemporaryDirectory() as temp_dir:
            file_path = Path(temp_dir) / table_file.name
            file_path.write_bytes(table_file.getvalue())
            _run_import(lambda: import_tabular_file(file_path, extractor))

with image_col:
    image_file = st.file_uploader(
        "Photo of a price sheet",
        type=["png", "jpg", "jpeg", "webp", "gif"],
        key="image_upload",
        disabled=extractor is None,
    )
    if image_file is not None and extractor is not None:
        if st.button("Import photo", use_container_width=True):
            _run_import(
                lambda: import_image(image_file.getvalue(), image_file.type, extractor)
            )

with url_col:
    url_input = st.text_input(
        "Web page URL",
        placeholder="https://...",
        disabled=extractor is None,
    )
    if url_input and extractor is not None:
        if st.button("Import from web", use_container_width=True):
            _run_import(lambda: import_url(url_input, extractor))

if st.button("➕ Add product manually"):
    _set_catalog(add_manual_product(st.session_state["catalog"]))
    st.rerun()


# ═══════════════════════════════════════════════════════════════════════════
# Section 2: Import outcome
# ═══════════════════════════════════════════════════════════════════════════

if st.session_state["import_error"]:
    st.error(st.session_state["import_error"])

summary = st.session_state["import_summary"]
if summary is not None:
    st.success(
        f"Import complete: {summary.added} new products, {summary.updated} updated."
    )
    if summary.possible_duplicates:
        with st.expander(f"⚠️ {len(summary.possible_duplicates)} possible duplicates"):
            for duplicate in summary.possible_duplicates:
                st.markdown(
                    f"- **{duplicate.new_name}** looks like **{duplicate.existing_name}** "
                    f"(similarity {duplicate.score})"
                )

if st.session_state["grounding_sources"]:
    with st.expander("🌐 Sources"):
        for source in st.session_state["grounding_sources"]:
            st.markdown(f"- [{source.title}]({source.uri})")


# ═══════════════════════════════════════════════════════════════════════════
# Section 3: Priced catalog
# ═══════════════════════════════════════════════════════════════════════════

catalog = st.session_state["catalog"]

st.divider()
st.header("📊 Catalog")

if not catalog:
    st.info("The catalog is empty. Import a price list or add a product to start.")
else:
    search_term = st.text_input("Search by name or brand", key="search_term")
    priced = project_catalog(catalog, config, search_term)

    metric_cols = st.columns(3)
    metric_cols[0].metric("Products", len(catalog))
    metric_cols[1].metric("Shown", len(priced))
    metric_cols[2].metric("Active markup", f"+{config.active_markup:g}%")

    st.dataframe(
        priced_view_to_dataframe(priced, config.visibility).drop(columns=["Id"]),
        use_container_width=True,
        hide_index=True,
    )

    # ── Product editor ────────────────────────────────────────────
    with st.expander("✏️ Edit or delete a product"):
        products_by_id = {product.id: product for product in catalog}
        selected_id = st.selectbox(
            "Product",
            options=list(products_by_id),
            format_func=lambda product_id: products_by_id[product_id].name,
        )
        selected = products_by_id[selected_id]

        with st.form(key=f"edit_{selected_id}"):
            new_name = st.text_input("Name", value=selected.name)
            new_brand = st.text_input("Brand", value=selected.brand)
            new_price = st.number_input(
                "List price", min_value=0.0, value=float(selected.original_price)
            )
            new_currency = st.text_input("Currency", value=selected.currency)
            if st.form_submit_button("Save changes"):
                try:
                    _set_catalog(update_product(
                        catalog,
                        selected_id,
                        name=new_name,
                        brand=new_brand,
                        original_price=new_price,
                        currency=new_currency,
                    ))
                    st.rerun()
                except ValueError as exc:
                    st.error(str(exc))

        if st.button("🗑️ Delete product", key=f"delete_{selected_id}"):
            _set_catalog(delete_product(catalog, selected_id))
            st.rerun()

    # ── Downloads ─────────────────────────────────────────────────
    st.subheader("📤 Share")
    share_cols = st.columns(3)

    chat_text = build_price_list_text(priced, config.visibility, for_chat=True)
    share_cols[0].text_area("Chat message", value=chat_text, height=200)

    share_cols[1].download_button(
        "Download .txt",
        data=build_price_list_text(priced, config.visibility, for_chat=False),
        file_name=f"price_list_{date.today():%Y-%m-%d}.txt",
        mime="text/plain",
        use_container_width=True,
    )

    with tempfile.TemporaryDirectory() as temp_dir:
        excel_path = export_price_list_excel(
            priced, config.visibility, Path(temp_dir) / "price_list.xlsx"
        )
        share_cols[2].download_button(
            "Download Excel",
            data=excel_path.read_bytes(),
            file_name=f"price_list_{date.today():%Y-%m-%d}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            use_container_width=True,
        )

    # ── Save / clear ──────────────────────────────────────────────
    st.subheader("💾 History")
    save_cols = st.columns([3, 1, 1])
    list_name = save_cols[0].text_input(
        "List name", placeholder="Leave blank for a dated name"
    )
    if save_cols[1].button("Save to history", use_container_width=True):
        _, saved_lists = save_list(st.session_state["saved_lists"], catalog, list_name)
        _set_saved_lists(saved_lists)
        st.success("List saved to history.")

    if save_cols[2].button("Clear view", type="secondary", use_container_width=True):
        st.session_state["import_summary"] = None
        st.session_state["import_error"] = None
        st.session_state["grounding_sources"] = []
        _set_catalog(clear_catalog())
        st.rerun()


# ═══════════════════════════════════════════════════════════════════════════
# Section 4: Saved lists
# ═══════════════════════════════════════════════════════════════════════════

saved_lists = st.session_state["saved_lists"]
if saved_lists:
    st.divider()
    st.header("🗂️ Saved lists")

    for saved in saved_lists:
        row_cols = st.columns([3, 2, 1, 1])
        row_cols[0].markdown(f"**{saved.name}**")
        row_cols[1].caption(f"{saved.date[:16].replace('T', ' ')} — {len(saved.items)} products")
        if row_cols[2].button("Restore", key=f"restore_{saved.id}"):
            _set_catalog(restore_saved_list(saved))
            st.session_state["import_summary"] = None
            st.rerun()
        if row_cols[3].button("Delete", key=f"delete_list_{saved.id}"):
            _set_saved_lists(delete_saved_list(saved_lists, saved.id))
            st.rerun()

    if st.button("Delete all saved lists"):
        _set_saved_lists(clear_saved_lists())
        st.rerun()
