import base64
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import streamlit as st
from dotenv import load_dotenv

load_dotenv()

st.set_page_config(page_title="Med List Parser Demo", layout="wide")

# ---------------------------
# Config
# ---------------------------
DEFAULT_API_BASE = "http://127.0.0.1:3000"
API_BASE = st.sidebar.text_input("API Base URL", value=DEFAULT_API_BASE)
TIMEOUT_S = st.sidebar.number_input("Request timeout (s)", min_value=10, max_value=600, value=180)

COLUMNS = ["medication_name", "frequency", "instructions", "is_prn", "indication"]

# ---------------------------
# Helpers (API)
# ---------------------------
def _raise_for_error(r: requests.Response) -> None:
    if r.status_code < 400:
        return
    try:
        body = r.json()
    except ValueError:
        raise RuntimeError(f"{r.status_code} {r.text}")
    msg = body.get("error", r.text)
    if body.get("details"):
        msg = f"{msg}: {body['details']}"
    raise RuntimeError(f"{r.status_code} {msg}")

def api_parse_upload(name: str, data: bytes, content_type: Optional[str]) -> Dict[str, Any]:
    url = f"{API_BASE}/api/parse"
    files = {"image": (name, data, content_type or "image/png")}
    r = requests.post(url, files=files, timeout=TIMEOUT_S)
    _raise_for_error(r)
    return r.json()

def api_parse_image_data(image_data: str) -> Dict[str, Any]:
    url = f"{API_BASE}/api/parse"
    r = requests.post(url, json={"imageData": image_data}, timeout=TIMEOUT_S)
    _raise_for_error(r)
    return r.json()

def meds_frame(result: Dict[str, Any]) -> pd.DataFrame:
    meds: List[Dict[str, Any]] = result.get("medications") or []
    return pd.DataFrame(meds, columns=COLUMNS)

# ---------------------------
# Session state
# ---------------------------
if "last_result" not in st.session_state:
    st.session_state.last_result = None
if "last_error" not in st.session_state:
    st.session_state.last_error = None

# ---------------------------
# UI
# ---------------------------
st.title("💊 Med List Parser")
st.caption("Upload or paste a photo/screenshot of a medication list. Not medical advice; always confirm with a pharmacist.")

col_left, col_right = st.columns([1, 1.4])

with col_left:
    st.subheader("1) Image")

    tab_upload, tab_paste = st.tabs(["Upload", "Paste data URL / base64"])

    with tab_upload:
        uploaded = st.file_uploader("Medication list image", type=["png", "jpg", "jpeg", "webp", "gif"])
        if uploaded is not None:
            st.image(uploaded, use_container_width=True)
            if st.button("🚀 Parse upload (/api/parse)"):
                with st.spinner("Reading medications..."):
                    try:
                        st.session_state.last_result = api_parse_upload(
                            uploaded.name, uploaded.getvalue(), uploaded.type
                        )
                        st.session_state.last_error = None
                    except Exception as e:
                        st.session_state.last_result = None
                        st.session_state.last_error = str(e)

    with tab_paste:
        pasted = st.text_area("data:image/...;base64,... or bare base64", height=150)
        if pasted.strip():
            try:
                raw = pasted.split(",", 1)[1] if pasted.startswith("data:") else pasted
                st.image(base64.b64decode("".join(raw.split())), use_container_width=True)
            except Exception:
                st.caption("Preview unavailable; the server will validate the data.")
        if st.button("🚀 Parse pasted image (/api/parse)"):
            with st.spinner("Reading medications..."):
                try:
                    st.session_state.last_result = api_parse_image_data(pasted)
                    st.session_state.last_error = None
                except Exception as e:
                    st.session_state.last_result = None
                    st.session_state.last_error = str(e)

    if st.button("🧹 Reset"):
        st.session_state.last_result = None
        st.session_state.last_error = None
        st.rerun()

with col_right:
    st.subheader("2) Medications")

    if st.session_state.last_error:
        st.error(st.session_state.last_error)

    result = st.session_state.last_result
    if result is None:
        st.caption("No result yet.")
    else:
        df = meds_frame(result)
        st.success(f"Found {len(df)} medication(s).")
        st.dataframe(df, use_container_width=True, hide_index=True)

        prn = df[df["is_prn"] == True]  # noqa: E712
        if not prn.empty:
            st.write("**As needed (PRN):** " + ", ".join(prn["medication_name"]))

        st.download_button(
            "⬇️ Download CSV",
            df.to_csv(index=False).encode("utf-8"),
            file_name="medications.csv",
            mime="text/csv",
        )
        with st.expander("Raw JSON"):
            st.json(result)
