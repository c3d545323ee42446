from __future__ import annotations

import streamlit as st

from mea_dashboard.domain.reference import ReferenceCatalog
from mea_dashboard.ui.components import info_item

COBIT_PRINCIPLES: tuple[tuple[str, str], ...] = (
    (
        "1. Meeting Stakeholder Needs",
        "Create stakeholder value by balancing benefits realisation, risk optimisation "
        "and resource use.",
    ),
    (
        "2. Covering the Enterprise End-to-End",
        "Integrate IT governance into enterprise governance as a whole.",
    ),
    (
        "3. Applying a Single Integrated Framework",
        "Act as one integrated framework that aligns with other standards and frameworks.",
    ),
    (
        "4. Enabling a Holistic Approach",
        "Use a set of interacting enablers to support governance and management of IT.",
    ),
    (
        "5. Separating Governance from Management",
        "Distinguish clearly between governance (EDM) and management (PBRM) activities.",
    ),
)

COBIT_ENABLERS: tuple[str, ...] = (
    "Principles, Policies and Frameworks",
    "Processes",
    "Organisational Structures",
    "Culture, Ethics and Behaviour",
    "Information",
    "Services, Infrastructure and Applications",
    "People, Skills and Competencies",
)


def build_info(catalog: ReferenceCatalog) -> None:
    st.header("Knowledge base: COBIT 5")

    principles, enablers, mea, levels = st.tabs(
        ["5 COBIT 5 principles", "7 COBIT 5 enablers", "Focus: MEA domain", "Maturity levels"]
    )
    with principles:
        for title, body in COBIT_PRINCIPLES:
            info_item(title, body)
    with enablers:
        st.caption("Factors that influence the success of IT governance and management.")
        st.markdown("\n".join(f"- {e}" for e in COBIT_ENABLERS))
    with mea:
        st.caption(
            "The MEA domain monitors every process to ensure performance and conformance "
            "with objectives."
        )
        for domain in catalog.domains:
            info_item(f"{domain.id}: {domain.name}", domain.focus)
    with levels:
        for lv in catalog.levels:
            info_item(f"Level {lv.level}: {lv.title}", lv.description)
