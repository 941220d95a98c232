import json
import logging

from app.core.logging import QUIET_LOGGERS, build_formatter, setup_logging


def test_records_render_as_json_with_structured_extra():
    record = logging.LogRecord("app.services.alerts", logging.INFO, __file__, 1, "Alert feed computed", None, None)
    record.role = "manager"
    record.count = 3

    payload = json.loads(build_formatter().format(record))

    assert payload["message"] == "Alert feed computed"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "app.services.alerts"
    assert payload["service"] == "ops-console-backend"
    assert payload["role"] == "manager"
    assert payload["count"] == 3
    assert "timestamp" in payload


def test_setup_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("debug")
        setup_logging("debug")

        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert all(logging.getLogger(name).level == logging.WARNING for name in QUIET_LOGGERS)
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
