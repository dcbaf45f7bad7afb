"""Streamlit UI for the vein treatment preview.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import os
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st  # noqa: E402

from ui.helpers import (  # noqa: E402
    PROMPT_LABELS,
    analyze_image,
    compose_comparison,
    decode_data_url,
    edit_image,
    get_settings,
    list_documents,
    update_prompts,
    upload_documents,
)

# Configuration
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")

# Page config
st.set_page_config(
    page_title="Vein Treatment Preview",
    page_icon="🩺",
    layout="wide",
)

# Initialize session state
for key, default in (
    ("edited_image", None),
    ("assessment", None),
    ("error", None),
    ("settings_error", None),
    ("notice", None),
):
    if key not in st.session_state:
        st.session_state[key] = default

# Title
st.title("🩺 Vein Treatment Preview")
st.markdown("*Simulated before/after of conservative treatment. Educational only, not a diagnosis.*")
st.divider()


def load_settings() -> dict:
    try:
        return get_settings(BACKEND_URL)
    except Exception as e:
        st.session_state.error = f"Could not load settings: {e}"
        return {"prompts": {}, "documents": []}


settings = load_settings()
prompts = settings.get("prompts", {})

tab_preview, tab_settings = st.tabs(["📷 Preview", "⚙️ Prompts & documents"])

# =============================================================================
# PREVIEW TAB - UPLOAD, EDIT, ANALYZE, COMPARE
# =============================================================================
with tab_preview:
    col_left, col_right = st.columns([1, 2])

    with col_left:
        st.subheader("Photo")
        photo = st.file_uploader("Upload a photo (PNG or JPG)", type=["png", "jpg", "jpeg"])

        slot = st.radio(
            "Treatment stage",
            options=list(PROMPT_LABELS),
            format_func=lambda s: PROMPT_LABELS[s],
            horizontal=True,
        )
        prompt = st.text_area("Edit prompt", value=prompts.get(slot, ""), height=120)

        col_edit, col_analyze = st.columns(2)
        run_edit = col_edit.button("✨ Generate preview", type="primary", use_container_width=True)
        run_analyze = col_analyze.button("🔍 Analyze", use_container_width=True)

        if (run_edit or run_analyze) and photo is None:
            st.session_state.error = "Upload a photo first."
        elif run_edit:
            if not prompt.strip():
                st.session_state.error = "The prompt must not be empty."
            else:
                with st.spinner("Generating preview..."):
                    try:
                        st.session_state.edited_image = edit_image(
                            BACKEND_URL, photo.name, photo.getvalue(), photo.type, prompt
                        )
                        st.session_state.error = None
                    except Exception as e:
                        st.session_state.edited_image = None
                        st.session_state.error = str(e)
        elif run_analyze:
            with st.spinner("Analyzing photo..."):
                try:
                    st.session_state.assessment = analyze_image(
                        BACKEND_URL, photo.name, photo.getvalue(), photo.type
                    )
                    st.session_state.error = None
                except Exception as e:
                    st.session_state.assessment = None
                    st.session_state.error = str(e)

        if st.session_state.error:
            st.error(f"❌ {st.session_state.error}")

    with col_right:
        st.subheader("Before / after")

        if photo is not None and st.session_state.edited_image:
            split = st.slider("Drag to compare (left = before, right = after)", 0, 100, 50)
            try:
                after = decode_data_url(st.session_state.edited_image)
                st.image(compose_comparison(photo.getvalue(), after, split), use_container_width=True)
            except ValueError as e:
                st.error(f"❌ Could not display the edited image: {e}")
        elif photo is not None:
            st.image(photo.getvalue(), caption="Original", use_container_width=True)
        else:
            st.info("👈 Upload a photo and hit **Generate preview** to see the comparison here.")

        if st.session_state.assessment:
            st.markdown("### Assessment")
            st.markdown(st.session_state.assessment)

# =============================================================================
# SETTINGS TAB - PROMPT TEMPLATES + REFERENCE DOCUMENTS
# =============================================================================
with tab_settings:
    if st.session_state.settings_error:
        st.error(f"❌ {st.session_state.settings_error}")

    col_prompts, col_docs = st.columns(2)

    with col_prompts:
        st.subheader("Prompt templates")
        with st.form("prompts_form"):
            edited_prompts = {
                key: st.text_area(label, value=prompts.get(key, ""), height=100)
                for key, label in PROMPT_LABELS.items()
            }
            if st.form_submit_button("💾 Save prompts", type="primary"):
                try:
                    update_prompts(BACKEND_URL, edited_prompts)
                    st.session_state.notice = "Prompts saved."
                    st.session_state.settings_error = None
                except Exception as e:
                    st.session_state.settings_error = f"Could not save prompts: {e}"
                st.rerun()

        if st.session_state.notice:
            st.success(f"✅ {st.session_state.notice}")
            st.session_state.notice = None

    with col_docs:
        st.subheader("Reference documents")
        uploads = st.file_uploader(
            "Add TXT or PDF documents used as analysis context",
            type=["txt", "pdf"],
            accept_multiple_files=True,
        )
        if st.button("📄 Upload documents", disabled=not uploads):
            try:
                created = upload_documents(
                    BACKEND_URL,
                    [(f.name, f.getvalue(), f.type or "application/octet-stream") for f in uploads],
                )
                st.session_state.notice = f"Uploaded {len(created)} document(s)."
                st.session_state.settings_error = None
            except Exception as e:
                st.session_state.settings_error = f"Could not upload documents: {e}"
            st.rerun()

        try:
            documents = list_documents(BACKEND_URL)
        except Exception as e:
            documents = []
            st.caption(f"_Could not list documents: {e}_")

        if documents:
            for doc in documents:
                size_kb = doc.get("size", 0) / 1024
                st.markdown(f"- **{doc.get('name', 'document')}** ({doc.get('mime', '?')}, {size_kb:.1f} KB)")
                st.caption(f"  uploaded {doc.get('uploadedAt', '')}")
        else:
            st.caption("_No documents uploaded yet_")
