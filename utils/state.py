# utils/state.py — 응답 저장소 + 위저드 내비게이션
# step 0..12 = 문항, 13 = 추천 화면 (총 14 화면)
from __future__ import annotations
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Protocol
import logging

logger = logging.getLogger(__name__)

RESULT_STEP = 13
TOTAL_SCREENS = RESULT_STEP + 1
REQUIRED_MESSAGE = "Please answer the question to continue."


class InvalidAnswerError(ValueError):
    pass


class StepValidationError(ValueError):
    pass


class PersistSlot(Protocol):
    def save(self, record: Dict[str, Any]) -> None: ...
    def load(self) -> Optional[Any]: ...
    def remove(self) -> None: ...


def progress_percent(step: int) -> int:
    return round((step + 1) / TOTAL_SCREENS * 100)


def next_button_label(step: int) -> str:
    if step == RESULT_STEP - 1:
        return "See Recommendation"
    if step == RESULT_STEP:
        return "Update Answers"
    return "Continue"


def back_visible(step: int) -> bool:
    return step != 0


class AnswerStore:
    """
    문항 id → 라벨. 모든 키는 항상 존재하고 "" 는 미응답.
    options: 문항 id → 허용 라벨 (설문 순서 = 화면 순서)
    """

    def __init__(self, options: Mapping[str, List[str]], persist: Optional[PersistSlot] = None):
        self.options = {k: list(v) for k, v in options.items()}
        self.order = list(self.options.keys())
        self.persist = persist
        self.step = 0
        self.answers: Dict[str, str] = {k: "" for k in self.order}

    # ── answers ──────────────────────────────────────────────
    def get(self, key: str) -> str:
        if key not in self.answers:
            raise InvalidAnswerError(f"unknown question id: {key}")
        return self.answers[key]

    def is_allowed(self, key: str, label: Any) -> bool:
        if key not in self.options or not isinstance(label, str):
            return False
        return label == "" or label in self.options[key]

    def set(self, key: str, label: str) -> None:
        if key not in self.options:
            raise InvalidAnswerError(f"unknown question id: {key}")
        if not self.is_allowed(key, label):
            raise InvalidAnswerError(f"{label!r} is not an option for {key}")
        self.answers[key] = label
        self.save()

    def snapshot_for_scoring(self) -> Mapping[str, str]:
        return MappingProxyType(dict(self.answers))

    def current_key(self) -> Optional[str]:
        if 0 <= self.step < len(self.order):
            return self.order[self.step]
        return None

    # ── navigation ───────────────────────────────────────────
    @property
    def on_result(self) -> bool:
        return self.step == RESULT_STEP

    def validate_step(self) -> None:
        key = self.current_key()
        if key is not None and not self.answers[key]:
            raise StepValidationError(REQUIRED_MESSAGE)

    def advance(self) -> None:
        if self.on_result:
            self.restart()
            return
        self.validate_step()
        if self.step < RESULT_STEP:
            self.step += 1
            self.save()

    def back(self) -> None:
        if self.step > 0:
            self.step -= 1
            self.save()

    def restart(self) -> None:
        """추천 화면 → 첫 문항. 응답은 유지."""
        self.step = 0
        self.save()

    def reset(self) -> None:
        """응답 전체 삭제 + 저장 기록 삭제."""
        if self.persist is not None:
            self.persist.remove()
        self.step = 0
        self.answers = {k: "" for k in self.order}
        self.save()

    # ── persistence ──────────────────────────────────────────
    def to_record(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "answers": dict(self.answers),
            "savedAt": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }

    def save(self) -> None:
        if self.persist is not None:
            self.persist.save(self.to_record())

    def load(self) -> bool:
        """
        저장된 기록을 필드별로 병합 (best-effort).
        - answers: dict 일 때만, 알려진 id + 허용 라벨만
        - step: int(bool 제외) 이고 0..13 일 때만
        하나라도 반영되면 True.
        """
        if self.persist is None:
            return False
        parsed = self.persist.load()
        if not isinstance(parsed, dict):
            if parsed is not None:
                logger.warning("stored record is not an object; ignored")
            return False

        applied = False
        saved_answers = parsed.get("answers")
        if isinstance(saved_answers, dict):
            for k, v in saved_answers.items():
                if self.is_allowed(k, v):
                    self.answers[k] = v
                    applied = True
                else:
                    logger.debug("dropping stored answer %r=%r", k, v)

        saved_step = parsed.get("step")
        if isinstance(saved_step, int) and not isinstance(saved_step, bool) and 0 <= saved_step <= RESULT_STEP:
            self.step = saved_step
            applied = True
        elif saved_step is not None:
            logger.debug("dropping stored step %r", saved_step)
        return applied
