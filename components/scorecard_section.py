from typing import Optional

import pandas as pd
import plotly.express as px
import streamlit as st

from schemas import ScorecardResponse

SCORE_COLUMNS = ["Baseline", "Mit Interviews", "Final"]


def _dash(v) -> str:
    return "–" if v is None else str(v)


def scorecard_frame(scorecard: ScorecardResponse) -> pd.DataFrame:
    """One row per question with the three 1-5 scores (NaN where the model gave none)."""
    rows = [
        {
            "Code": q.question_code,
            "Frage": q.question,
            "Baseline": q.baseline_score_1_5,
            "Mit Interviews": q.interview_adjusted_score_1_5,
            "Final": q.final_score_1_5,
        }
        for q in scorecard.per_question
    ]
    df = pd.DataFrame(rows, columns=["Code", "Frage"] + SCORE_COLUMNS)
    df[SCORE_COLUMNS] = df[SCORE_COLUMNS].apply(pd.to_numeric, errors="coerce")
    return df


def render_scorecard_section(scorecard: Optional[ScorecardResponse]) -> None:
    if scorecard is None:
        return

    summary = scorecard.sheet_summary
    with st.container(border=True):
        st.subheader(f"Gesamtübersicht ({scorecard.theme or 'ohne Thema'})")
        m1, m2, m3 = st.columns(3)
        m1.metric("Baseline Ø", _dash(summary.baseline_avg_score_1_5))
        m2.metric("Interview-Adjusted Ø", _dash(summary.interview_adjusted_avg_score_1_5))
        m3.metric("Finales Level", _dash(summary.final_level_1_5))

    df = scorecard_frame(scorecard)
    if not df.empty:
        long_df = df.melt(id_vars=["Code"], value_vars=SCORE_COLUMNS, var_name="Score", value_name="Wert")
        fig = px.bar(
            long_df.dropna(subset=["Wert"]),
            x="Code",
            y="Wert",
            color="Score",
            barmode="group",
            range_y=[0, 5],
            height=320,
        )
        fig.update_layout(margin=dict(l=0, r=0, t=30, b=0), yaxis_title="Score (1–5)", xaxis_title="")
        st.plotly_chart(fig, use_container_width=True)

    with st.container(border=True):
        st.markdown("#### Leitfragen")
        for q in scorecard.per_question:
            with st.expander(f"{q.question_code} · {q.question} — Final: {_dash(q.final_score_1_5)}"):
                c1, c2, c3 = st.columns(3)
                c1.caption(f"Baseline: {_dash(q.baseline_score_1_5)}")
                c2.caption(f"Mit Interviews: {_dash(q.interview_adjusted_score_1_5)}")
                c3.caption(f"Final: **{_dash(q.final_score_1_5)}**")
                st.write(q.reasoning)
                if q.recommended_brief_updates:
                    st.markdown("**Empfohlene Ergänzungen am Steckbrief**")
                    st.markdown("\n".join(f"- {r}" for r in q.recommended_brief_updates))
                if q.evidence_from_interviews:
                    st.markdown("**Belege aus Interviews**")
                    st.markdown("\n".join(f"- {r}" for r in q.evidence_from_interviews))

    with st.container(border=True):
        st.markdown("#### Wichtigste Lücken")
        if summary.main_gaps:
            st.markdown("\n".join(f"- {g}" for g in summary.main_gaps))
        else:
            st.caption("Keine Lücken gemeldet.")
        if summary.priority_updates:
            st.markdown("#### Priorisierte Updates")
            st.markdown("\n".join(f"- {u}" for u in summary.priority_updates))
