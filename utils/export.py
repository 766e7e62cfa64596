# utils/export.py — 응답표 / CSV (점수 컬럼 없음)
from __future__ import annotations
from io import StringIO
from typing import Any, Dict, Mapping

import pandas as pd

from utils.registry import section_title


def build_answers_frame(survey: Dict[str, Any], answers: Mapping[str, str]) -> pd.DataFrame:
    rows = []
    for i, it in enumerate(survey.get("items", []), start=1):
        rows.append({
            "no": i,
            "section": section_title(survey, it),
            "question": it.get("text", ""),
            "answer": answers.get(it["id"], ""),
        })
    return pd.DataFrame(rows, columns=["no", "section", "question", "answer"])


def answers_csv_bytes(df: pd.DataFrame) -> bytes:
    buf = StringIO()
    df.to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8-sig")
