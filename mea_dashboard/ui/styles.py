import streamlit as st

# Consolidated CSS with theme tokens + dark-mode fix for scorecards
BASE_CSS = """
<style>
:root{
  --space-2:.5rem; --space-3:.75rem; --space-4:1rem;
  --radius:12px; --brand:#1d4ed8; --muted:#64748b; --border:#e5e7eb;

  --card-bg:#ffffff; --card-fg:#111827; --card-sub:#6b7280; --card-border:#e5e7eb;
}

@media (prefers-color-scheme: dark){
  :root{
    --card-bg:#111827; --card-fg:#f3f4f6; --card-sub:#cbd5e1; --card-border:#374151;
  }
}

div.block-container { padding-top: 1rem; }

/* Scorecards (theme aware) */
.score-card{
  background: var(--card-bg);
  border: 1px solid var(--card-border);
  border-radius: 14px;
  padding: 14px 16px;
  box-shadow: 0 1px 3px rgba(0,0,0,0.04);
  color: var(--card-fg);
}
.score-val{ font-size: 2.2rem; font-weight: 700; color: var(--card-fg) !important; }
.score-sub{ color: var(--card-sub) !important; font-size: 0.85rem; }

/* Domain cards on the dashboard */
.domain-card{ border:1px solid var(--border); border-radius:var(--radius); padding:var(--space-4); }
.domain-card h4{ margin:0 0 .25rem 0; }
.domain-card p{ color:var(--muted); font-size:.9rem; margin:0; }

/* Knowledge base entries */
.info-item{ border-left:4px solid var(--brand); padding-left:var(--space-4); margin-bottom:var(--space-3); }
.info-item h4{ margin:0 0 .25rem 0; }

.maturity-title{ font-size:1.4rem; font-weight:600; color:var(--brand); }
.question-citation{ color:var(--muted); font-size:.8rem; margin:-.25rem 0 .5rem 0; }
button:focus, select:focus, textarea:focus { outline:3px solid rgba(29,78,216,.35); outline-offset:2px; }
</style>
"""


def inject() -> None:
    st.markdown(BASE_CSS, unsafe_allow_html=True)
