import json
import logging

import pytest

from compliance_monitor.cli.run import build_parser
from compliance_monitor.services.logging import JsonFormatter, setup_logging


def test_json_formatter_emits_one_object_per_record():
    record = logging.LogRecord(
        name="compliance_monitor.test", level=logging.WARNING, pathname=__file__,
        lineno=1, msg="Source %s failed", args=("newsapi",), exc_info=None,
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["message"] == "Source newsapi failed"
    assert payload["logger"] == "compliance_monitor.test"


def test_setup_logging_installs_handler_once():
    setup_logging("DEBUG")
    setup_logging("INFO")

    root = logging.getLogger()
    names = [h.get_name() for h in root.handlers]
    assert names.count("compliance-monitor-json") == 1
    assert root.level == logging.INFO


@pytest.mark.parametrize("argv,command", [
    ([], None),
    (["run"], "run"),
    (["serve"], "serve"),
    (["alerts"], "alerts"),
])
def test_parser_commands(argv, command):
    args = build_parser().parse_args(argv)
    assert args.command == command


def test_forward_command_takes_ids():
    args = build_parser().parse_args(["--config", "c.yml", "forward", "CA-1-aaa", "CA-2-bbb"])

    assert args.config == "c.yml"
    assert args.alert_ids == ["CA-1-aaa", "CA-2-bbb"]


def test_serve_takes_no_reloader_flag():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["serve", "--debug"])
