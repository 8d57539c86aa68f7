"""Demo host page for the FinAssist shared runtime.

Run it with ``python run_finassist.py``; every browser tab opened on the
server is a separate page sharing the same store.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pandas as pd
import streamlit as st

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from finassist.config import (  # noqa: E402
    CONTACTS_KEY,
    EXPENSES_KEY,
    FONT_SIZES,
    INCOMES_KEY,
    SETTINGS_KEY,
    configure_logging,
)
from finassist.storage import read_collection  # noqa: E402
from finassist.streamlit_host import get_page_runtime, render_theme, run_export  # noqa: E402

COLLECTIONS = {
    "Contacts": CONTACTS_KEY,
    "Incomes": INCOMES_KEY,
    "Expenses": EXPENSES_KEY,
}


def _write_preferences(runtime, prefs) -> None:
    # Stand-in for the settings page, which owns this key.
    runtime.store.set_item(SETTINGS_KEY, json.dumps(prefs), origin=runtime.context_id)
    runtime.apply_preferences()


def _render_settings(runtime) -> None:
    st.sidebar.subheader("⚙️ Display")
    prefs = runtime.get_preferences()
    sizes = list(FONT_SIZES)
    theme = st.sidebar.radio("Theme", ["light", "dark"], index=1 if prefs["theme"] == "dark" else 0)
    size = st.sidebar.selectbox(
        "Font size", sizes,
        index=sizes.index(prefs["fontSize"]) if prefs["fontSize"] in sizes else 1,
    )
    family = st.sidebar.text_input("Font family", value=prefs.get("fontFamily") or "Inter")
    updated = {**prefs, "theme": theme, "fontSize": size, "fontFamily": family}
    if updated != prefs:
        _write_preferences(runtime, updated)


def _render_profile(runtime) -> None:
    st.subheader("👤 Profile")
    profile = runtime.get_profile()
    if not isinstance(profile, dict):
        profile = {}
    with st.form("profile_form"):
        first = st.text_input("First name", value=profile.get("firstName", ""))
        last = st.text_input("Last name", value=profile.get("lastName", ""))
        email = st.text_input("Email", value=profile.get("email", ""))
        if st.form_submit_button("💾 Save profile"):
            runtime.save_profile({**profile, "firstName": first, "lastName": last, "email": email})
            st.success("Profile saved")


def _render_exports(runtime) -> None:
    st.subheader("📤 Export")
    label = st.selectbox("Collection", list(COLLECTIONS))
    key = COLLECTIONS[label]
    records = read_collection(runtime.store, key)
    if records:
        st.dataframe(pd.DataFrame.from_records(records), use_container_width=True)
    col1, col2 = st.columns(2)
    with col1:
        if st.button("📄 Export PDF"):
            run_export(runtime.export_list_as_pdf(key, f"{label.lower()}.pdf"))
    with col2:
        if st.button("🧾 Export CSV"):
            header = list(records[0].keys()) if records else []
            runtime.download_array_as_csv(records, f"{label.lower()}.csv", header)

    names = runtime.refresh_names_datalist()
    if names:
        st.caption("Known names: " + ", ".join(names))


def main() -> None:
    configure_logging()
    st.set_page_config(page_title="FinAssist", page_icon="💰", layout="wide")
    runtime = get_page_runtime()
    _render_settings(runtime)
    render_theme(runtime.document)
    st.title("💰 FinAssist")
    _render_profile(runtime)
    _render_exports(runtime)


if __name__ == "__main__":
    main()
