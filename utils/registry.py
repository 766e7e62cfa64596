# ┏━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┓
# ┃ utils/registry.py — 설문 로드 (surveys/{key}.json)                      ┃
# ┗━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┛
from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, List, Optional
import json
import logging

logger = logging.getLogger(__name__)

SURVEYS_DIR = Path(__file__).resolve().parents[1] / "surveys"


def _load_json(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_survey(key: str, surveys_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    key에 해당하는 설문 원문 로드 (surveys/{key}.json).
    파일이 없으면 FileNotFoundError, 파싱 실패는 로그 후 그대로 전파.
    """
    d = Path(surveys_dir) if surveys_dir else SURVEYS_DIR
    p = d / f"{key}.json"
    if not p.exists():
        raise FileNotFoundError(f"No survey file for key={key} ({p})")
    try:
        doc = _load_json(p) or {}
    except Exception:
        logger.exception("failed to load survey %s", p.name)
        raise
    doc["items"] = normalize_items(doc.get("items", []))
    return doc


def normalize_items(items: List[Any]) -> List[Dict[str, Any]]:
    """items에 id/section/text/options가 없으면 보정."""
    out = []
    for idx, it in enumerate(items, start=1):
        if not isinstance(it, dict):
            it = {"text": str(it)}
        out.append({
            "id": it.get("id", f"q{idx}"),
            "section": it.get("section", ""),
            "text": it.get("text", ""),
            "subtitle": it.get("subtitle", ""),
            "options": list(it.get("options", [])),
            **{k: v for k, v in it.items() if k not in ("id", "section", "text", "subtitle", "options")}
        })
    return out


def question_options(survey: Dict[str, Any]) -> Dict[str, List[str]]:
    """문항 id → 허용 라벨 목록 (설문 순서 유지)."""
    return {it["id"]: list(it["options"]) for it in survey.get("items", [])}


def section_title(survey: Dict[str, Any], item: Dict[str, Any]) -> str:
    return survey.get("sections", {}).get(item.get("section", ""), "")
