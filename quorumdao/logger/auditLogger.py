"""Per-organization audit trail of authorization and execution outcomes."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional, Sequence

from quorumdao.types import IntentStatus


class AuditLogger:
    """Records every accepted and rejected action of one organization.

    Events go to the ``quorumdao.audit.<name>`` logger with structured fields
    and, when ``log_file`` is given, are also appended to that file.
    """

    def __init__(self, org_name: str, log_file: Optional[str] = None) -> None:
        """Initialize the audit logger.

        Args:
            org_name: Name of the organization.
            log_file: Optional path of a plain-text audit file.
        """
        self.org_name = org_name
        self.log_file = log_file
        self._logger = logging.getLogger(f"quorumdao.audit.{org_name}")

        if self.log_file:
            try:
                with open(self.log_file, "w", encoding="utf-8") as f:
                    f.write(f"=== {self.org_name} Audit Log ===\n")
                    f.write(f"Started at: {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
                    f.write("=" * 50 + "\n\n")
            except OSError as e:
                self._logger.warning("Could not create audit file %s: %s", self.log_file, e)
                self.log_file = None

    def _log(self, level: int, event_type: str, message: str, **fields: Any) -> None:
        if self._logger.isEnabledFor(level):
            record = self._logger.makeRecord(
                self._logger.name, level, "", 0, f"{event_type}: {message}", (), None
            )
            record.extra_fields = {"event_type": event_type, "organization": self.org_name, **fields}
            self._logger.handle(record)

        if self.log_file:
            timestamp = time.strftime("%H:%M:%S")
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(f"[{timestamp}] {event_type} {message}\n")

    def intent_executed(self, digest: bytes, nonce: int, target: str, signers: Sequence[str], weight: int) -> None:
        """Log a successfully executed single intent."""
        self._log(
            logging.INFO,
            "INTENT_EXECUTED",
            f"nonce={nonce} target={target} signers={len(signers)} weight={weight}",
            digest="0x" + digest.hex(),
            nonce=nonce,
            target=target,
            signers=list(signers),
            weight=weight,
            status=IntentStatus.EXECUTED.value,
        )

    def intent_rejected(self, nonce: int, target: str, reason: Exception) -> None:
        """Log a rejected intent with the typed reason."""
        self._log(
            logging.WARNING,
            "INTENT_REJECTED",
            f"nonce={nonce} target={target} reason={type(reason).__name__}: {reason}",
            nonce=nonce,
            target=target,
            reason=type(reason).__name__,
            detail=str(reason),
            status=IntentStatus.REJECTED.value,
        )

    def batch_executed(self, digest: bytes, relayer: str, calls: int) -> None:
        """Log a consumed commitment."""
        self._log(
            logging.INFO,
            "BATCH_EXECUTED",
            f"0x{digest.hex()} relayer={relayer} calls={calls}",
            digest="0x" + digest.hex(),
            relayer=relayer,
            calls=calls,
        )

    def batch_rejected(self, digest: Optional[bytes], relayer: str, reason: Exception) -> None:
        """Log a failed batch execution attempt.

        ``digest`` is ``None`` when the caller was rejected before the batch
        was hashed.
        """
        digest_hex = "0x" + digest.hex() if digest is not None else None
        self._log(
            logging.WARNING,
            "BATCH_REJECTED",
            f"{digest_hex} relayer={relayer} reason={type(reason).__name__}: {reason}",
            digest=digest_hex,
            relayer=relayer,
            reason=type(reason).__name__,
            detail=str(reason),
        )
