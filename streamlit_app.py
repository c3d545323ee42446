from __future__ import annotations

import streamlit as st
from sqlalchemy.orm import Session, sessionmaker

from mea_dashboard.application.live import ChangeFeed, LiveAssessmentList
from mea_dashboard.application.repository import AssessmentRepository
from mea_dashboard.domain.reference import get_catalog
from mea_dashboard.infrastructure.config import get_settings
from mea_dashboard.infrastructure.db import make_engine_and_session
from mea_dashboard.infrastructure.exceptions import (
    AuthenticationError,
    ConfigurationError,
    PersistenceError,
    create_user_friendly_error_message,
)
from mea_dashboard.infrastructure.identity import Identity, IdentityProvider
from mea_dashboard.infrastructure.logging import get_logger

# UI modules
from mea_dashboard.ui import styles
from mea_dashboard.ui.dashboard import build_dashboard
from mea_dashboard.ui.info import build_info
from mea_dashboard.ui.questionnaire import build_questionnaire
from mea_dashboard.ui.reports import build_reports
from mea_dashboard.ui.state_keys import IDENTITY, LIVE_ASSESSMENTS, NAV_TARGET, PAGE

logger = get_logger(__name__)

PAGES: dict[str, str] = {
    "dashboard": "Dashboard",
    "questionnaire": "Assessment",
    "reports": "Reports",
    "info": "COBIT 5 info",
}


@st.cache_resource(show_spinner=False)
def get_runtime() -> tuple[sessionmaker[Session], ChangeFeed]:
    """Session factory and change feed shared by every browser session."""
    _, SessionLocal = make_engine_and_session(get_settings().database)
    return SessionLocal, ChangeFeed()


def current_identity() -> Identity:
    identity = st.session_state.get(IDENTITY)
    if identity is None:
        identity = IdentityProvider(get_settings().identity).sign_in()
        st.session_state[IDENTITY] = identity
    return identity


def live_assessments(repository: AssessmentRepository) -> LiveAssessmentList:
    """
    The session's live list. It is released when the session state is
    dropped, or replaced when the signed-in user changes.
    """
    live = st.session_state.get(LIVE_ASSESSMENTS)
    if live is not None and live.owner_id != repository.owner_id:
        live.close()
    if live is None or live.closed:
        live = LiveAssessmentList(repository)
        st.session_state[LIVE_ASSESSMENTS] = live
    return live


def build_sidebar(identity: Identity) -> str:
    # navigation requested by buttons on the previous run
    target = st.session_state.pop(NAV_TARGET, None)
    if target in PAGES:
        st.session_state[PAGE] = target

    st.sidebar.title("MEA Assessment")
    page = st.sidebar.radio(
        "Navigate",
        list(PAGES),
        format_func=PAGES.get,
        key=PAGE,
    )
    kind = "anonymous" if identity.is_anonymous else "token"
    st.sidebar.caption(f"Signed in ({kind}): `{identity.user_id[:12]}…`")
    return page


def main() -> None:
    settings = get_settings()
    st.set_page_config(**settings.streamlit.get_streamlit_config())
    styles.inject()

    try:
        identity = current_identity()
        SessionLocal, feed = get_runtime()
    except (AuthenticationError, ConfigurationError, PersistenceError) as e:
        logger.error(f"Application startup failed: {e}")
        st.error(create_user_friendly_error_message(e))
        return

    catalog = get_catalog()
    repository = AssessmentRepository(SessionLocal, identity, catalog=catalog, feed=feed)
    live = live_assessments(repository)

    page = build_sidebar(identity)
    st.title(settings.app.title)

    if page == "questionnaire":
        build_questionnaire(repository, catalog)
    elif page == "reports":
        build_reports(live, repository)
    elif page == "info":
        build_info(catalog)
    else:
        build_dashboard(live, catalog)


if __name__ == "__main__":
    main()
