# app.py — Business Health Scan (1 question per screen)
# - Sidebar collapsed
# - 13 questions (Section A–E) → recommendation screen (no scores shown)
# - Progress autosaved per visitor (?scan=<token> resume link), restored on start
# - "Update Answers" keeps answers, "Reset" clears everything
# - CTA URLs / storage path: st.secrets → env → defaults (utils/config.py)

import os, sys

import streamlit as st

# ─────────────────────────────────────────────────────────────
# Project path
# ─────────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.abspath(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# ─────────────────────────────────────────────────────────────
# Internal modules
# ─────────────────────────────────────────────────────────────
from utils.registry import load_survey, question_options, section_title
from utils.state import (
    AnswerStore, StepValidationError,
    progress_percent, next_button_label, back_visible,
)
from utils.storage import JsonFileSlot, TOKEN_PARAM, is_valid_token, new_token, user_key
from utils.config import get_cta_urls, get_storage_path, get_storage_key
from utils.export import build_answers_frame, answers_csv_bytes

from scoring.health_scan import compute_result

SURVEY_KEY = "health_scan"

st.set_page_config(
    page_title="Business Health Scan",
    layout="centered",
    initial_sidebar_state="collapsed"
)


def resume_token():
    """URL 의 ?scan= 토큰. 없거나 형식이 틀리면 새로 발급해 URL 에 기록."""
    token = st.query_params.get(TOKEN_PARAM)
    if not is_valid_token(token):
        token = new_token()
        st.query_params[TOKEN_PARAM] = token
    return token


def init_state():
    if "store" in st.session_state:
        return
    survey = load_survey(SURVEY_KEY)
    token = resume_token()
    store = AnswerStore(
        question_options(survey),
        persist=JsonFileSlot(get_storage_path(), user_key(get_storage_key(), token)),
    )
    store.load()
    st.session_state.survey = survey
    st.session_state.store = store
    st.session_state.token = token
    st.session_state.error = ""
    # reset 시 라디오 위젯 상태를 버리기 위한 세대 번호
    st.session_state.gen = 0

init_state()

survey = st.session_state.survey
store = st.session_state.store
items = survey["items"]

# ─────────────────────────────────────────────────────────────
# Callbacks (버튼/라디오 → store)
# ─────────────────────────────────────────────────────────────
def _on_pick(qid, widget_key):
    sel = st.session_state.get(widget_key)
    if sel is not None:
        store.set(qid, sel)
        st.session_state.error = ""

def _go_next():
    try:
        store.advance()
        st.session_state.error = ""
    except StepValidationError as e:
        st.session_state.error = str(e)

def _go_back():
    st.session_state.error = ""
    store.back()

def _reset():
    store.reset()
    st.session_state.error = ""
    st.session_state.gen += 1

# ─────────────────────────────────────────────────────────────
# Header / progress
# ─────────────────────────────────────────────────────────────
pct = progress_percent(store.step)
st.progress(pct / 100, text=f"{pct}% complete")

# ─────────────────────────────────────────────────────────────
# Recommendation screen
# ─────────────────────────────────────────────────────────────
if store.on_result:
    # 매 렌더마다 현재 응답으로 새로 계산 (캐시 없음)
    result = compute_result(store.snapshot_for_scoring(), get_cta_urls())

    st.caption("Recommendation")
    st.title("Your next best step")
    st.write("Based on stability signals across finance, sales, operations, and founder dependency.")

    with st.container(border=True):
        st.subheader("What we recommend")
        st.write(result.message)
        st.link_button(result.cta_text, result.cta_url, type="primary")
        st.caption("No scores shown. Just one clear next step.")

    with st.expander("Your answers", expanded=False):
        df = build_answers_frame(survey, store.answers)
        st.table(df)
        st.download_button("📥 Download answers (CSV)", data=answers_csv_bytes(df),
                           file_name="health_scan_answers.csv", mime="text/csv")

# ─────────────────────────────────────────────────────────────
# Question screens (step 0..12)
# ─────────────────────────────────────────────────────────────
else:
    it = items[store.step]
    qid = it["id"]
    st.caption(section_title(survey, it))
    st.subheader(it["text"])
    if it.get("subtitle"):
        st.write(it["subtitle"])

    options = it["options"]
    current = store.get(qid)
    widget_key = f"radio_{qid}_{st.session_state.gen}"
    st.radio(
        "Choose one",
        options,
        index=options.index(current) if current in options else None,
        key=widget_key,
        on_change=_on_pick,
        args=(qid, widget_key),
        label_visibility="collapsed",
    )

if st.session_state.error:
    st.error(st.session_state.error)

c1, c2, c3 = st.columns([1, 2, 1])
if back_visible(store.step):
    c1.button("Back", key="back", on_click=_go_back)
c2.button(next_button_label(store.step), key="next", type="primary", on_click=_go_next)
c3.button("Reset", key="reset", on_click=_reset)

st.caption("Your progress is saved automatically. Keep this page's link to resume later.")
