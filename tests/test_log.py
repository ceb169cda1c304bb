import json
import logging

import pytest
import structlog

from bazaar.log import add_context, clear_context, configure_logging


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    clear_context()
    structlog.reset_defaults()


def test_json_lines(capsys, restore_logging):
    configure_logging("info", json=True)
    add_context(request_id="req-1")

    structlog.get_logger("bazaar.test").info("order created", order_id="ord_1")

    line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert line["event"] == "order created"
    assert line["order_id"] == "ord_1"
    assert line["request_id"] == "req-1"
    assert line["level"] == "info"
    assert line["logger"] == "bazaar.test"


def test_level_filters(capsys, restore_logging):
    configure_logging("WARNING", json=True)
    structlog.get_logger("bazaar.test").info("quiet")
    assert capsys.readouterr().out == ""
