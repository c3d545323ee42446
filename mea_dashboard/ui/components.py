from __future__ import annotations

import html

import streamlit as st

from mea_dashboard.domain.reference import Domain
from mea_dashboard.utils.radar import hex_to_rgb  # reuse for luminance calc


def _luminance(hex_color: str) -> float:
    r, g, b = hex_to_rgb(hex_color)

    def srgb(u):
        x = u / 255.0
        return x / 12.92 if x <= 0.03928 else ((x + 0.055) / 1.055) ** 2.4

    R, G, B = srgb(r), srgb(g), srgb(b)
    return 0.2126 * R + 0.7152 * G + 0.0722 * B


def _auto_fg_for(bg_hex: str) -> str:
    return "#111111" if _luminance(bg_hex) > 0.5 else "#FFFFFF"


def scorecard(value_str: str, subtitle: str, *, bg_hex: str | None = None) -> None:
    style = ""
    if bg_hex:
        fg = _auto_fg_for(bg_hex)
        style = f' style="background:{bg_hex};color:{fg}"'
    st.markdown(
        f"""
        <div class="score-card"{style}>
            <div class="score-val">{html.escape(value_str)}</div>
            <div class="score-sub">{html.escape(subtitle)}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def domain_card(domain: Domain) -> None:
    st.markdown(
        f"""
        <div class="domain-card">
            <h4>{html.escape(domain.id)}: {html.escape(domain.name)}</h4>
            <p>{html.escape(domain.focus)}</p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def info_item(title: str, body: str) -> None:
    st.markdown(
        f'<div class="info-item"><h4>{html.escape(title)}</h4><p>{html.escape(body)}</p></div>',
        unsafe_allow_html=True,
    )


def error_banner(message: str | None) -> None:
    if message:
        st.error(message)
