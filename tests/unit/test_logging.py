import json
import logging

from menu_api.core.logging import JsonFormatter, request_id_ctx


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("menu_api.test", logging.INFO, __file__, 1, "item_added", None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_json_line_carries_request_id_and_extras():
    token = request_id_ctx.set("req-1")
    try:
        line = JsonFormatter().format(_record(item_id=7, unrelated="x"))
    finally:
        request_id_ctx.reset(token)

    log = json.loads(line)
    assert log["message"] == "item_added"
    assert log["level"] == "INFO"
    assert log["request_id"] == "req-1"
    assert log["item_id"] == 7
    assert "unrelated" not in log


def test_no_request_id_outside_a_request():
    log = json.loads(JsonFormatter().format(_record()))
    assert "request_id" not in log
