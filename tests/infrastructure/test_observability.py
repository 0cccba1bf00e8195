"""Structured Logging — tests for the JSON formatter and idempotent setup."""

import json
import logging

from finnza.infrastructure.observability import JSONFormatter, setup_logging


def test_json_formatter_includes_billing_extras():
    record = logging.LogRecord(
        "finnza.test", logging.INFO, __file__, 1, "charge updated", None, None,
    )
    record.payment_id = "pay_1"
    record.contract_id = 9
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "charge updated"
    assert payload["payment_id"] == "pay_1"
    assert payload["contract_id"] == 9
    assert "subscription_id" not in payload


def test_setup_logging_is_idempotent():
    setup_logging("DEBUG", "text")
    setup_logging("INFO", "json")
    named = [h for h in logging.root.handlers if h.get_name() == "finnza-root"]
    assert len(named) == 1
    assert logging.root.level == logging.INFO
