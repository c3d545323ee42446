from __future__ import annotations

import streamlit as st

from mea_dashboard.application.api import submit_assessment
from mea_dashboard.application.repository import AssessmentRepository
from mea_dashboard.domain.reference import ReferenceCatalog
from mea_dashboard.infrastructure.exceptions import PersistenceError, ValidationError
from mea_dashboard.infrastructure.logging import get_logger
from mea_dashboard.ui.components import error_banner
from mea_dashboard.ui.state_keys import (
    ASSESSMENT_NAME,
    NAV_TARGET,
    SELECTED_ASSESSMENT_ID,
    SUBMIT_ERROR,
    SUBMITTING,
    answer_key,
)

logger = get_logger(__name__)

SAVE_FAILED_MESSAGE = "Failed to save the assessment. Please try again."


def collect_answers(catalog: ReferenceCatalog) -> dict[str, int]:
    """Answered questions only; unanswered selectboxes hold None."""
    answers: dict[str, int] = {}
    for q in catalog.questions:
        value = st.session_state.get(answer_key(q.id))
        if value is not None:
            answers[q.id] = int(value)
    return answers


def _start_submit() -> None:
    st.session_state[SUBMITTING] = True
    st.session_state[SUBMIT_ERROR] = None


def _process_submission(repository: AssessmentRepository, catalog: ReferenceCatalog) -> None:
    name = st.session_state.get(ASSESSMENT_NAME, "")
    answers = collect_answers(catalog)
    try:
        with st.spinner("Calculating and saving results…"):
            new_id = submit_assessment(repository, name, answers, catalog)
    except ValidationError as e:
        st.session_state[SUBMIT_ERROR] = e.user_message
    except PersistenceError:
        # answers stay in session state so the user can retry
        st.session_state[SUBMIT_ERROR] = SAVE_FAILED_MESSAGE
    else:
        st.session_state[SELECTED_ASSESSMENT_ID] = new_id
        st.session_state[NAV_TARGET] = "reports"
    finally:
        st.session_state[SUBMITTING] = False
    st.rerun()


def build_questionnaire(repository: AssessmentRepository, catalog: ReferenceCatalog) -> None:
    st.header("Maturity level assessment (MEA)")
    st.write(
        "Rate every statement below from 0 (Incomplete) to 5 (Optimizing) to assess the "
        "maturity of the IT processes against the COBIT 5 MEA domains."
    )

    submitting = bool(st.session_state.get(SUBMITTING, False))
    level_options = [lv.level for lv in catalog.levels]
    level_labels = {lv.level: f"Level {lv.level}: {lv.title}" for lv in catalog.levels}

    with st.container(border=True):
        st.subheader("Assessment information")
        st.text_input(
            "Client / project name",
            key=ASSESSMENT_NAME,
            placeholder="e.g. ACME Corp - Q4 2025",
            disabled=submitting,
        )

    for domain in catalog.domains:
        with st.container(border=True):
            st.subheader(f"{domain.id}: {domain.name}")
            for q in catalog.questions_for(domain.id):
                st.selectbox(
                    f"**{q.id}:** {q.text}",
                    options=level_options,
                    index=None,
                    format_func=level_labels.get,
                    placeholder="Choose a maturity level…",
                    key=answer_key(q.id),
                    disabled=submitting,
                )
                st.markdown(
                    f'<p class="question-citation">{q.citation}</p>', unsafe_allow_html=True
                )

    answered = len(collect_answers(catalog))
    st.progress(answered / max(len(catalog.questions), 1), text=f"{answered} of {len(catalog.questions)} answered")

    error_banner(st.session_state.get(SUBMIT_ERROR))

    st.button(
        "Finish & calculate results",
        type="primary",
        use_container_width=True,
        disabled=submitting,
        on_click=_start_submit,
    )

    if submitting:
        _process_submission(repository, catalog)
