"""Unit tests for the JSON log formatter and adapter."""

import io
import json
import logging

from rownd_cli.utils import logging_config
from rownd_cli.utils.logger import configure, get_logger


def _records(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_adapter_turns_keywords_into_fields():
    stream = io.StringIO()
    configure(level=logging.INFO, stream=stream)
    log = get_logger("rownd_cli.test", component="deploy")

    log.info("Deployed", event="rownd.deploy.done", app_id="app-1")

    (payload,) = _records(stream)
    assert payload["message"] == "Deployed"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "rownd_cli.test"
    assert payload["event"] == "rownd.deploy.done"
    assert payload["app_id"] == "app-1"
    assert payload["component"] == "deploy"


def test_default_level_hides_debug():
    stream = io.StringIO()
    configure(stream=stream)
    get_logger("rownd_cli.quiet").debug("noise", event="x")
    assert stream.getvalue() == ""


def test_bound_context_applies_only_inside_block():
    stream = io.StringIO()
    configure(level=logging.INFO, stream=stream)
    log = get_logger("rownd_cli.scoped")

    with logging_config.logging_context(command="app", skipped=None):
        log.info("inside")
    log.info("outside")

    inside, outside = _records(stream)
    assert inside["command"] == "app"
    assert "skipped" not in inside
    assert "command" not in outside


def test_exception_details_are_serialised():
    stream = io.StringIO()
    configure(level=logging.INFO, stream=stream)
    log = get_logger("rownd_cli.err")

    try:
        raise ValueError("boom")
    except ValueError:
        log.warning("failed", exc_info=True, attempt=2)

    (payload,) = _records(stream)
    assert payload["attempt"] == 2
    assert payload["error"]["type"] == "ValueError"
    assert payload["error"]["message"] == "boom"
    assert "Traceback" in payload["error"]["stack"]


def test_unserialisable_values_fall_back_to_repr():
    stream = io.StringIO()
    configure(level=logging.INFO, stream=stream)
    get_logger("rownd_cli.repr").info("odd", value=object())
    assert _records(stream)[0]["value"].startswith("<object object")


def test_fields_named_like_record_attributes_are_namespaced():
    stream = io.StringIO()
    configure(level=logging.INFO, stream=stream)

    get_logger("rownd_cli.clash", module="static").info(
        "clash", name="Renamed", filename="logo.png", created=True
    )

    (payload,) = _records(stream)
    assert payload["logger"] == "rownd_cli.clash"
    assert payload["field_name"] == "Renamed"
    assert payload["field_filename"] == "logo.png"
    assert payload["field_created"] is True
    assert payload["field_module"] == "static"
