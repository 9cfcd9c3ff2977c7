import logging

from gardensim.logbook import FILE_HEADER, GardenLogger


def test_log_line_format_and_tail():
    log = GardenLogger(tail_limit=3)
    line = log.log("RAIN", "Auto rainfall: 9 units")
    assert line.endswith("[RAIN] Auto rainfall: 9 units")
    for i in range(5):
        log.log("TICK", str(i))
    tail = log.recent_entries()
    assert len(tail) == 3
    assert tail[-1].endswith("[TICK] 4")


def test_listeners():
    log = GardenLogger()
    seen = []
    log.add_listener(seen.append)
    log.log("A", "one")
    log.remove_listener(seen.append)
    log.log("A", "two")
    assert len(seen) == 1 and seen[0].endswith("one")


def test_file_output_and_preload(tmp_path):
    path = tmp_path / "logs" / "log.txt"
    log = GardenLogger(path)
    log.log("INIT", "hello")
    log.close()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == FILE_HEADER
    assert lines[1].endswith("[INIT] hello")

    again = GardenLogger(path)
    assert again.recent_entries()[-1].endswith("[INIT] hello")
    again.close()


def test_instances_share_one_logger_but_keep_their_own_files(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="gardensim.eventlog")
    first = GardenLogger(tmp_path / "first.txt")
    second = GardenLogger(tmp_path / "second.txt")
    first.log("A", "to first")
    second.log("B", "to second")
    first.close()
    second.close()

    assert "to second" not in (tmp_path / "first.txt").read_text(encoding="utf-8")
    assert "to first" not in (tmp_path / "second.txt").read_text(encoding="utf-8")
    assert {r.name for r in caplog.records} == {"gardensim.eventlog"}
    messages = [r.getMessage() for r in caplog.records]
    assert messages[0].endswith("[A] to first")
    assert messages[1].endswith("[B] to second")
