import json
import threading

import pytest

from utils.registry import load_survey, question_options
from utils.state import AnswerStore
from utils.storage import JsonFileSlot, MemorySlot, STORAGE_KEY, is_valid_token, new_token, user_key


def test_memory_slot_roundtrip():
    slot = MemorySlot()
    assert slot.load() is None
    slot.save({"step": 2})
    assert slot.load() == {"step": 2}
    slot.remove()
    assert slot.load() is None


def test_json_file_slot_missing_file(tmp_path):
    assert JsonFileSlot(tmp_path / "none.json").load() is None


def test_json_file_slot_save_creates_dirs(tmp_path):
    p = tmp_path / "data" / "local_storage.json"
    slot = JsonFileSlot(p)
    slot.save({"step": 3, "answers": {"q1": "1–3 years"}})
    on_disk = json.loads(p.read_text(encoding="utf-8"))
    assert isinstance(on_disk[STORAGE_KEY], str)
    assert slot.load()["answers"]["q1"] == "1–3 years"


def test_json_file_slot_keeps_other_keys(tmp_path):
    p = tmp_path / "ls.json"
    JsonFileSlot(p, key="other").save({"x": 1})
    slot = JsonFileSlot(p)
    slot.save({"step": 0})
    slot.remove()
    assert slot.load() is None
    assert JsonFileSlot(p, key="other").load() == {"x": 1}


def test_json_file_slot_corrupt_file(tmp_path):
    p = tmp_path / "ls.json"
    p.write_text("{{{", encoding="utf-8")
    slot = JsonFileSlot(p)
    assert slot.load() is None
    # 손상된 파일은 다음 저장에서 덮어씀
    slot.save({"step": 1})
    assert slot.load() == {"step": 1}


def test_json_file_slot_corrupt_record(tmp_path):
    p = tmp_path / "ls.json"
    p.write_text(json.dumps({STORAGE_KEY: "not json"}), encoding="utf-8")
    assert JsonFileSlot(p).load() is None


def test_json_file_slot_non_map_file(tmp_path):
    p = tmp_path / "ls.json"
    p.write_text("[1, 2]", encoding="utf-8")
    assert JsonFileSlot(p).load() is None


def test_remove_on_missing_file_is_noop(tmp_path):
    p = tmp_path / "ls.json"
    JsonFileSlot(p).remove()
    assert not p.exists()


def _unwritable_path(tmp_path):
    # 부모 경로가 파일이라 mkdir/open 모두 실패
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    return blocker / "ls.json"


def test_json_file_slot_write_failure_is_logged_not_raised(tmp_path, caplog):
    slot = JsonFileSlot(_unwritable_path(tmp_path))
    slot.save({"step": 1})
    slot.remove()
    assert slot.load() is None
    assert "could not save" in caplog.text


def test_store_keeps_working_when_storage_unwritable(tmp_path):
    options = question_options(load_survey("health_scan"))
    store = AnswerStore(options, persist=JsonFileSlot(_unwritable_path(tmp_path)))
    store.set("q1", "5+ years")
    store.advance()
    assert store.step == 1
    store.back()
    store.reset()
    assert store.step == 0
    assert store.get("q1") == ""


def test_tokens():
    token = new_token()
    assert is_valid_token(token)
    assert new_token() != token
    for bad in (None, "", "short", "has space in it", "../../etc/passwd", 123):
        assert not is_valid_token(bad)
    with pytest.raises(ValueError):
        user_key(STORAGE_KEY, "../x")


def test_user_keys_do_not_share_records(tmp_path):
    p = tmp_path / "ls.json"
    a = JsonFileSlot(p, user_key(STORAGE_KEY, "visitor_aaaa"))
    b = JsonFileSlot(p, user_key(STORAGE_KEY, "visitor_bbbb"))
    a.save({"step": 4})
    assert b.load() is None
    b.save({"step": 2})
    b.remove()
    assert a.load() == {"step": 4}


def test_concurrent_saves_keep_every_key(tmp_path):
    p = tmp_path / "ls.json"
    slots = [JsonFileSlot(p, user_key(STORAGE_KEY, f"visitor_{i:04d}")) for i in range(20)]

    def work(slot):
        for step in range(10):
            slot.save({"step": step})

    threads = [threading.Thread(target=work, args=(s,)) for s in slots]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert all(s.load() == {"step": 9} for s in slots)
