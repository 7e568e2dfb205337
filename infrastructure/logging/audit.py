import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

AUDIT_LOGGER_NAME = "greenhouse_log.audit"


class WindowsSafeRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that closes the stream before rotating.

    A locked file on Windows skips the rotation instead of failing the write.
    """

    def doRollover(self):
        if self.stream:
            self.stream.close()
            self.stream = None
        try:
            super().doRollover()
        except PermissionError:
            pass
        finally:
            if not self.stream:
                self.stream = self._open()


class AuditLogger:
    """Append-only JSON-lines trail of entry mutations."""

    def __init__(
        self,
        log_path: str,
        level: str = "INFO",
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 30,
    ) -> None:
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger(AUDIT_LOGGER_NAME)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.propagate = False

        if not any(isinstance(handler, RotatingFileHandler) for handler in self.logger.handlers):
            handler_cls = WindowsSafeRotatingFileHandler if sys.platform == "win32" else RotatingFileHandler
            handler = handler_cls(
                filename=str(self.log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
                delay=True,
            )
            handler.setFormatter(
                logging.Formatter(fmt="%(asctime)sZ | %(levelname)s | %(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
            )
            self.logger.addHandler(handler)

    def log_event(self, actor: str, action: str, resource: str, outcome: str, **metadata: Any) -> None:
        payload: Dict[str, Any] = {
            "actor": actor,
            "action": action,
            "resource": resource,
            "outcome": outcome,
        }
        if metadata:
            payload["meta"] = metadata

        self.logger.info(json.dumps(payload, ensure_ascii=False, default=str))

    def log_entry_change(self, action: str, entry_id: str, outcome: str = "success", **metadata: Any) -> None:
        """Record a save or delete against one log entry."""
        self.log_event("operator", action, f"entry:{entry_id}", outcome, **metadata)

    def close(self) -> None:
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
