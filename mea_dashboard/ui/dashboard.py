from __future__ import annotations

import streamlit as st

from mea_dashboard.application.live import LiveAssessmentList
from mea_dashboard.domain.reference import ReferenceCatalog
from mea_dashboard.ui.components import domain_card, error_banner, scorecard
from mea_dashboard.ui.state_keys import NAV_TARGET, SELECTED_ASSESSMENT_ID
from mea_dashboard.utils.radar import gradient_color


def _go_to(page: str, assessment_id: str | None = None) -> None:
    st.session_state[NAV_TARGET] = page
    if assessment_id is not None:
        st.session_state[SELECTED_ASSESSMENT_ID] = assessment_id


def build_dashboard(live: LiveAssessmentList, catalog: ReferenceCatalog) -> None:
    st.header("Consultant dashboard")
    error_banner(live.error.user_message if live.error else None)

    left, right = st.columns([1, 2], gap="large")

    with left:
        st.subheader("Start a new assessment")
        st.caption(
            "Evaluate the maturity of your client's IT processes against the COBIT 5 MEA domains."
        )
        st.button(
            "Start assessment",
            type="primary",
            use_container_width=True,
            on_click=_go_to,
            args=("questionnaire",),
        )

    with right:
        st.subheader("Latest assessment")
        latest = live.latest
        if latest is None:
            st.info("No assessments have been carried out yet.")
        else:
            level = catalog.level_for_score(latest.overall_score)
            scorecard(
                f"{latest.overall_score:.1f} / 5.0",
                f"{latest.name} · {latest.created_at:%Y-%m-%d %H:%M} UTC · "
                f"Level {level.level}: {level.title}",
                bg_hex=gradient_color(latest.overall_score),
            )
            st.caption(f"{len(live.items)} assessment(s) on record")
            st.button(
                "View detailed report",
                use_container_width=True,
                on_click=_go_to,
                args=("reports", latest.id),
            )

    st.divider()
    cols = st.columns(len(catalog.domains) or 1)
    for col, domain in zip(cols, catalog.domains):
        with col:
            domain_card(domain)
