from __future__ import annotations

import streamlit as st

from mea_dashboard.application.api import load_report
from mea_dashboard.application.live import LiveAssessmentList
from mea_dashboard.application.repository import AssessmentRepository
from mea_dashboard.domain.reports import Report
from mea_dashboard.infrastructure.exceptions import PersistenceError
from mea_dashboard.ui.components import error_banner
from mea_dashboard.ui.state_keys import SELECTED_ASSESSMENT_ID
from mea_dashboard.utils.radar import make_domain_radar


def _report_detail(report: Report) -> None:
    with st.container(border=True):
        st.subheader(report.name)
        st.caption(f"Report created: {report.created_at:%Y-%m-%d %H:%M} UTC")
        st.metric("Total maturity level", report.overall_display)
        st.markdown(
            f'<p class="maturity-title">{report.maturity_display}</p>', unsafe_allow_html=True
        )
        st.write(report.maturity.description)

    with st.container(border=True):
        st.subheader("Score per domain")
        st.plotly_chart(make_domain_radar(report.chart_series), use_container_width=True)

    with st.container(border=True):
        st.subheader("Automatic recommendations")
        st.caption("Improvement recommendations based on each domain's maturity score.")
        st.markdown("\n".join(f"- {item.display}" for item in report.recommendations))


def build_reports(live: LiveAssessmentList, repository: AssessmentRepository) -> None:
    st.header("Assessment reports")
    error_banner(live.error.user_message if live.error else None)

    items = live.items
    if not items:
        st.info("No assessment data yet. Please carry out an assessment first.")
        return

    ids = [a.id for a in items]
    by_id = {a.id: a for a in items}
    selected = st.session_state.get(SELECTED_ASSESSMENT_ID)
    if selected not in by_id:
        selected = ids[0]

    left, right = st.columns([1, 2], gap="large")
    with left:
        st.subheader("Assessment history")
        selected = st.radio(
            "Assessments",
            ids,
            index=ids.index(selected),
            format_func=lambda i: (
                f"{by_id[i].name} · {by_id[i].created_at:%Y-%m-%d %H:%M} · "
                f"total {by_id[i].overall_score:.1f}"
            ),
            label_visibility="collapsed",
        )
        st.session_state[SELECTED_ASSESSMENT_ID] = selected

    with right:
        try:
            report = load_report(repository, selected)
        except PersistenceError as e:
            st.error(e.user_message)
            return
        if report is None:
            st.info("Select an assessment from the list to see its details.")
            return
        _report_detail(report)
