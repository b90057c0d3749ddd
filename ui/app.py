import streamlit as st
import sys
import asyncio
import os
from datetime import datetime
from pathlib import Path
import pandas as pd

# Add parent directory to path to import from jsonforge package
sys.path.insert(0, str(Path(__file__).parent.parent))

from jsonforge.ai import AIServiceError, fix_invalid_json, generate_type_interfaces
from jsonforge.config import configure_logging, RECURSIVE_ENABLED, RECURSIVE_MAX_DEPTH
from jsonforge.history import HistoryStore
from jsonforge.models import ResolveConfig, MIN_RESOLVE_DEPTH, MAX_RESOLVE_DEPTH
from jsonforge.parser import check_nesting, format_json, minify_json, parse_json
from jsonforge.resolver import resolve_top_level
from jsonforge.search import find_matches

configure_logging()

DEFAULT_JSON = """{
  "project": "JSON Forge",
  "config_string": "{\\"debug\\": true, \\"levels\\": [1, 2, 3]}",
  "nested_payload": "{\\"user\\": {\\"id\\": 123, \\"meta\\": \\"{\\\\\\"theme\\\\\\": \\\\\\"dark\\\\\\"}\\"}}",
  "active": true
}"""

st.set_page_config(page_title="JSON Forge", layout="wide")
st.title("🧰 JSON Forge — JSON Inspector")

history = HistoryStore()

# Initialize session state
if "editor" not in st.session_state:
    st.session_state.editor = DEFAULT_JSON
if "generated_types" not in st.session_state:
    st.session_state.generated_types = None


def _set_editor(text: str):
    st.session_state.editor = text


# Text produced after the editor widget exists is applied on the next run
if "pending_editor" in st.session_state:
    _set_editor(st.session_state.pop("pending_editor"))


# ---- Sidebar: Recursive Parsing + AI Configuration ----
st.sidebar.title("⚙️ Configuration")
st.sidebar.markdown("### Recursive Parsing")
recursive_enabled = st.sidebar.toggle(
    "Decode embedded JSON strings",
    value=RECURSIVE_ENABLED,
    help="String fields holding JSON documents are expanded into the tree"
)
max_depth = st.sidebar.slider(
    "Max decode depth",
    min_value=MIN_RESOLVE_DEPTH,
    max_value=MAX_RESOLVE_DEPTH,
    value=max(MIN_RESOLVE_DEPTH, min(MAX_RESOLVE_DEPTH, RECURSIVE_MAX_DEPTH)),
    disabled=not recursive_enabled,
)
recursive_config = ResolveConfig(enabled=recursive_enabled, max_depth=max_depth)

st.sidebar.markdown("### API Keys")
st.sidebar.info("💡 Leave empty to use keys from .env file")
google_key = st.sidebar.text_input("🔑 Google API Key", type="password")
openai_key = st.sidebar.text_input("🔑 OpenAI API Key", type="password")
if google_key:
    os.environ["GOOGLE_API_KEY"] = google_key
if openai_key:
    os.environ["OPENAI_API_KEY"] = openai_key

# ---- Sidebar: History ----
st.sidebar.markdown("---")
st.sidebar.markdown("### 🕘 History")
items = history.load()
if items:
    history_df = pd.DataFrame({
        "Saved": [datetime.fromtimestamp(item.timestamp / 1000).strftime("%Y-%m-%d %H:%M") for item in items],
        "Preview": [item.content[:40].replace("\n", " ") for item in items],
    })
    st.sidebar.dataframe(history_df, use_container_width=True, hide_index=True)
    labels = {item.id: f"{row.Saved} · {row.Preview}" for item, row in zip(items, history_df.itertuples())}
    selected_id = st.sidebar.selectbox("Entry", list(labels), format_func=labels.get)
    col_restore, col_delete, col_clear = st.sidebar.columns(3)
    if col_restore.button("Restore"):
        item = history.get(selected_id)
        if item is None:
            st.sidebar.warning("Entry no longer exists")
        else:
            _set_editor(item.content)
            st.rerun()
    if col_delete.button("Delete"):
        history.delete(selected_id)
        st.rerun()
    if col_clear.button("Clear all"):
        history.clear()
        st.rerun()
else:
    st.sidebar.caption("No saved documents yet")

# ---- Editor ----
editor_col, view_col = st.columns(2)

with editor_col:
    st.markdown("### ✏️ Editor")
    uploaded = st.file_uploader("📄 Upload JSON", type=["json", "txt"])
    if uploaded is not None and st.session_state.get("last_upload") != uploaded.file_id:
        st.session_state.last_upload = uploaded.file_id
        _set_editor(uploaded.read().decode("utf-8", errors="replace"))

    st.text_area("JSON input", key="editor", height=480, label_visibility="collapsed")
    outcome = parse_json(st.session_state.editor)
    serializable = outcome.valid and not outcome.empty
    if serializable:
        try:
            check_nesting(outcome.data)
        except ValueError:
            serializable = False

    b1, b2, b3, b4 = st.columns(4)
    b1.button("Format", disabled=not serializable,
              on_click=lambda: _set_editor(format_json(outcome.data)))
    b2.button("Minify", disabled=not serializable,
              on_click=lambda: _set_editor(minify_json(outcome.data)))
    b3.button("Clear", on_click=lambda: _set_editor(""))
    if b4.button("💾 Save"):
        if history.add(st.session_state.editor):
            st.rerun()
        else:
            st.info("Nothing saved: document is invalid, too short or already in history")

    if not st.session_state.editor.strip():
        st.caption("No content")
    elif outcome.valid:
        st.success("✅ Valid JSON")
    else:
        st.error(f"⚠️ Invalid Syntax: {outcome.error}")
        if st.button("🪄 Fix with AI"):
            with st.spinner("Repairing JSON..."):
                try:
                    fixed = asyncio.run(fix_invalid_json(st.session_state.editor))
                except AIServiceError as e:
                    st.error(f"🚨 AI Repair failed: {e}")
                else:
                    st.session_state.pending_editor = fixed
                    st.rerun()

# ---- Viewer ----
with view_col:
    st.markdown("### 🌳 Viewer")
    if not outcome.valid or outcome.empty:
        st.caption("Nothing to display")
    else:
        display_data = resolve_top_level(outcome.data, recursive_config)
        try:
            display_text = format_json(display_data)
        except ValueError as e:
            st.error(f"⚠️ Cannot display: {e}")
            st.stop()

        query = st.text_input("🔍 Search keys and values")
        if query:
            matches = find_matches(display_data, query)
            total = sum(match.occurrences for match in matches)
            st.caption(f"{total} match(es)")
            if matches:
                st.dataframe(
                    pd.DataFrame([match.model_dump() for match in matches]),
                    use_container_width=True,
                    hide_index=True,
                )

        tree_tab, code_tab, types_tab = st.tabs(["Tree", "Code", "Types"])
        with tree_tab:
            st.json(display_data, expanded=2)
        with code_tab:
            st.code(display_text, language="json")
        with types_tab:
            if st.button("🧬 Generate TypeScript types"):
                with st.spinner("Generating types..."):
                    try:
                        st.session_state.generated_types = asyncio.run(
                            generate_type_interfaces(minify_json(display_data))
                        )
                    except AIServiceError as e:
                        st.error(f"🚨 Type generation failed: {e}")
            if st.session_state.generated_types:
                st.code(st.session_state.generated_types, language="typescript")
