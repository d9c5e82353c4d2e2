"""Tests for structured logging setup."""

import json

from schemacanvas.core.config import Settings
from schemacanvas.core.logging import configure_logging, get_logger


def test_json_logs_go_to_stderr(capsys):
    """Test production logging renders JSON on stderr."""
    configure_logging(Settings(_env_file=None, environment="production", log_level="INFO"))

    get_logger("schemacanvas.test").info("Collection added", collection_name="User")

    captured = capsys.readouterr()
    assert captured.out == ""
    entry = json.loads(captured.err.strip().splitlines()[-1])
    assert entry["message"] == "Collection added"
    assert entry["collection_name"] == "User"
    assert entry["level"] == "info"


def test_level_filtering(capsys):
    """Test messages below the configured level are dropped."""
    configure_logging(Settings(_env_file=None, environment="testing", log_level="ERROR"))

    get_logger().warning("Field rejected")

    assert capsys.readouterr().err == ""
