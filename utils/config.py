# utils/config.py — 설정 (우선순위: st.secrets → 환경변수 → 기본값)
# secrets.toml 예:
#   [cta_urls]
#   solutions = "https://..."
#   finance_clarity = "https://..."
#   [storage]
#   path = "data/local_storage.json"
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import os

import streamlit as st

from scoring.health_scan import DEFAULT_CTA_URLS, SOLUTIONS, FINANCE, READINESS, SESSION
from utils.storage import STORAGE_KEY

ROOT = Path(__file__).resolve().parents[1]
DEFAULT_STORAGE_PATH = ROOT / "data" / "local_storage.json"

CTA_ENV = {
    SOLUTIONS: "HEALTHSCAN_CTA_SOLUTIONS",
    FINANCE:   "HEALTHSCAN_CTA_FINANCE",
    READINESS: "HEALTHSCAN_CTA_READINESS",
    SESSION:   "HEALTHSCAN_CTA_SESSION",
}


def _secret_section(name: str) -> Dict[str, Any]:
    # secrets.toml 이 없으면 st.secrets 접근 자체가 예외
    try:
        if name in st.secrets:
            sec = st.secrets[name]
            return dict(sec) if hasattr(sec, "keys") else {}
    except Exception:
        pass
    return {}


def get_cta_urls() -> Dict[str, str]:
    secrets = _secret_section("cta_urls")
    urls = {}
    for dest, default in DEFAULT_CTA_URLS.items():
        urls[dest] = secrets.get(dest) or os.getenv(CTA_ENV[dest], "") or default
    return urls


def get_storage_path() -> Path:
    secrets = _secret_section("storage")
    p: Optional[str] = secrets.get("path") or os.getenv("HEALTHSCAN_STORAGE_PATH")
    return Path(p) if p else DEFAULT_STORAGE_PATH


def get_storage_key() -> str:
    secrets = _secret_section("storage")
    return secrets.get("key") or os.getenv("HEALTHSCAN_STORAGE_KEY") or STORAGE_KEY
