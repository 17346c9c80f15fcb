"""Tests for the audit trail and log formatting."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from quorumdao.core.config import Settings
from quorumdao.errors import QuorumNotMet
from quorumdao.logger import AuditLogger, StructuredFormatter, configure_logging

if TYPE_CHECKING:
    from _pytest.logging import LogCaptureFixture

DIGEST = bytes(range(32))
TARGET = "0x" + "ab" * 20


def test_audit_file_records_events(tmp_path: Path) -> None:
    path = tmp_path / "audit.log"
    audit = AuditLogger("FriendsDAO", log_file=str(path))

    audit.intent_executed(DIGEST, 0, TARGET, ["0x" + "01" * 20], 60)
    audit.intent_rejected(1, TARGET, QuorumNotMet(40, 100, 51))

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "=== FriendsDAO Audit Log ==="
    assert lines[1].startswith("Started at: ")
    assert "INTENT_EXECUTED nonce=0" in lines[4]
    assert "INTENT_REJECTED nonce=1" in lines[5]
    assert "QuorumNotMet" in lines[5]


def test_unwritable_audit_file_disables_file_output(tmp_path: Path) -> None:
    audit = AuditLogger("FriendsDAO", log_file=str(tmp_path / "missing" / "audit.log"))
    assert audit.log_file is None
    audit.batch_executed(DIGEST, TARGET, 2)


def test_audit_events_carry_structured_fields(caplog: "LogCaptureFixture") -> None:
    caplog.set_level(logging.INFO, logger="quorumdao")
    AuditLogger("FriendsDAO").batch_executed(DIGEST, TARGET, 3)

    (record,) = [r for r in caplog.records if r.name == "quorumdao.audit.FriendsDAO"]
    assert record.levelno == logging.INFO
    assert record.extra_fields == {
        "event_type": "BATCH_EXECUTED",
        "organization": "FriendsDAO",
        "digest": "0x" + DIGEST.hex(),
        "relayer": TARGET,
        "calls": 3,
    }


def test_structured_formatter_merges_extra_fields() -> None:
    record = logging.LogRecord("quorumdao.audit.X", logging.WARNING, "", 0, "BATCH_REJECTED: nope", (), None)
    record.extra_fields = {"event_type": "BATCH_REJECTED", "digest": DIGEST}

    data = json.loads(StructuredFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["logger"] == "quorumdao.audit.X"
    assert data["message"] == "BATCH_REJECTED: nope"
    assert data["event_type"] == "BATCH_REJECTED"
    assert isinstance(data["digest"], str)


def test_configure_logging_installs_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "quorumdao.log"
    config = Settings(
        _env_file=None,
        log_level="debug",
        log_format="json",
        log_file_enabled=True,
        log_file_path=str(log_file),
    )
    logger = configure_logging(config)
    try:
        assert logger.name == "quorumdao"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert all(isinstance(h.formatter, StructuredFormatter) for h in logger.handlers)

        logging.getLogger("quorumdao.test").debug("hello")
        for handler in logger.handlers:
            handler.flush()
        assert json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])["message"] == "hello"

        # Reconfiguring replaces the previous handlers.
        configure_logging(Settings(_env_file=None))
        assert len(logger.handlers) == 1
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)
