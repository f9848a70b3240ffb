import json
import logging

from log_config import JsonFormatter, setup_logging


def test_json_formatter_includes_payload():
    rec = logging.LogRecord("dispatcher", logging.WARNING, __file__, 1, "provider %s failed", ("openai",), None)
    rec.payload = {"provider": "openai", "status": 429}
    out = json.loads(JsonFormatter().format(rec))
    assert out["msg"] == "provider openai failed"
    assert out["level"] == "WARNING"
    assert out["payload"] == {"provider": "openai", "status": 429}


def test_httpx_request_logs_stay_quiet():
    setup_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.WARNING
    setup_logging("INFO")
