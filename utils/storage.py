# utils/storage.py — 진행 상태 저장 슬롯 (localStorage 대용)
# - 인터페이스: save(record) / load() -> record | None / remove()
# - MemorySlot: 프로세스 내 dict (테스트/세션용)
# - JsonFileSlot: JSON 파일 하나에 {storage_key: "직렬화된 레코드"} 형태로 보관
# - 사용자별 키: "<storage_key>:<resume token>" (토큰은 ?scan= 쿼리 파라미터)
# - 저장 실패는 경고만 남김 (best-effort)
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging
import re
import threading
import uuid

logger = logging.getLogger(__name__)

STORAGE_KEY = "boltzmenn_health_scan_v1"
TOKEN_PARAM = "scan"

_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{8,64}$")

# 세션(스레드)들이 같은 파일을 공유하므로 파일 단위 read-modify-write 를 직렬화
_FILE_LOCKS: Dict[Path, threading.Lock] = {}
_FILE_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _FILE_LOCKS_GUARD:
        if key not in _FILE_LOCKS:
            _FILE_LOCKS[key] = threading.Lock()
        return _FILE_LOCKS[key]


def new_token() -> str:
    return uuid.uuid4().hex


def is_valid_token(token: Any) -> bool:
    return isinstance(token, str) and bool(_TOKEN_RE.match(token))


def user_key(base_key: str, token: str) -> str:
    if not is_valid_token(token):
        raise ValueError(f"invalid resume token: {token!r}")
    return f"{base_key}:{token}"


class MemorySlot:
    def __init__(self, key: str = STORAGE_KEY, backing: Optional[Dict[str, str]] = None):
        self.key = key
        self.backing = backing if backing is not None else {}

    def save(self, record: Dict[str, Any]) -> None:
        self.backing[self.key] = json.dumps(record, ensure_ascii=False)

    def load(self) -> Optional[Any]:
        raw = self.backing.get(self.key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning("ignoring corrupt record under %s: %s", self.key, e)
            return None

    def remove(self) -> None:
        self.backing.pop(self.key, None)


class JsonFileSlot:
    """
    파일 하나를 여러 키가 공유하는 key-value 저장소로 사용.
    읽기 실패(파일 없음/손상)는 '저장된 값 없음', 쓰기 실패는 경고 후 무시.
    """

    def __init__(self, path: Path, key: str = STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("storage file %s unreadable: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("storage file %s is not a key-value map", self.path)
            return {}
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    def save(self, record: Dict[str, Any]) -> None:
        with _lock_for(self.path):
            try:
                data = self._read_all()
                data[self.key] = json.dumps(record, ensure_ascii=False)
                self._write_all(data)
            except OSError as e:
                logger.warning("could not save %s to %s: %s", self.key, self.path, e)

    def load(self) -> Optional[Any]:
        with _lock_for(self.path):
            raw = self._read_all().get(self.key)
        if not raw or not isinstance(raw, str):
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning("ignoring corrupt record under %s: %s", self.key, e)
            return None

    def remove(self) -> None:
        with _lock_for(self.path):
            try:
                data = self._read_all()
                if self.key in data:
                    del data[self.key]
                    self._write_all(data)
            except OSError as e:
                logger.warning("could not remove %s from %s: %s", self.key, self.path, e)
