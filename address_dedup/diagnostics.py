# address_dedup/diagnostics.py
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from .logger import get_logger


class DiagnosticSink(ABC):
    @abstractmethod
    def record(self, event: str, **fields: Any) -> None:
        ...


class LoggingSink(DiagnosticSink):
    """Writes each record as one INFO line."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("address_dedup.diagnostics")

    def record(self, event: str, **fields: Any) -> None:
        if event == "duplicate_skipped":
            self.logger.info(
                "Prevented duplicate item addition: product_id=%s sku=%s qty=%s reason=%s",
                fields.get("product_id"),
                fields.get("sku"),
                fields.get("qty"),
                fields.get("reason"),
            )
            return
        self.logger.info("%s %s", event, fields)


class MemorySink(DiagnosticSink):
    def __init__(self):
        self.records: List[Tuple[str, Dict[str, Any]]] = []

    def record(self, event: str, **fields: Any) -> None:
        self.records.append((event, fields))
