"""Keys used in ``st.session_state``."""

PAGE = "page"
NAV_TARGET = "nav_target"
IDENTITY = "identity"
LIVE_ASSESSMENTS = "live_assessments"
SELECTED_ASSESSMENT_ID = "selected_assessment_id"

ASSESSMENT_NAME = "assessment_name"
ANSWER_PREFIX = "answer_"
SUBMITTING = "submitting"
SUBMIT_ERROR = "submit_error"


def answer_key(question_id: str) -> str:
    return f"{ANSWER_PREFIX}{question_id}"
