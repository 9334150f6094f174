"""Per-session usage log for LLM calls.

Each generator call (successful or not) becomes one ``AuditRecord``; the
Streamlit sidebar shows ``AuditLogger.summary()`` so users can see how
many requests and tokens a session has spent.
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .base import LLMResponse

logger = logging.getLogger(__name__)


@dataclass
class AuditRecord:
    operation: str
    provider: str = ""
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    error: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AuditLogger:
    """Collects one record per generator call.

    ``persist_fn`` receives every record as it is logged; failures in it
    are logged and never reach the caller.
    """

    def __init__(self, persist_fn: Optional[Callable[[AuditRecord], None]] = None):
        self._records: List[AuditRecord] = []
        self._persist_fn = persist_fn

    def log(
        self,
        response: Optional[LLMResponse],
        *,
        operation: str,
        provider: str = "",
        error: Optional[str] = None,
    ) -> AuditRecord:
        """Record a call.  ``response`` is None when the provider raised."""
        record = AuditRecord(operation=operation, provider=provider, error=error)
        if response is not None:
            record.provider = response.provider or provider
            record.model = response.model
            record.input_tokens = response.input_tokens
            record.output_tokens = response.output_tokens
            record.latency_ms = response.latency_ms
        self._records.append(record)

        if self._persist_fn is not None:
            try:
                self._persist_fn(record)
            except Exception as e:
                logger.error("Usage record for %s not persisted: %s", operation, e)

        logger.info(
            "%s via %s/%s: %d in, %d out, %dms%s",
            record.operation,
            record.provider or "?",
            record.model or "?",
            record.input_tokens,
            record.output_tokens,
            record.latency_ms,
            f" (failed: {record.error})" if record.failed else "",
        )
        return record

    def summary(self) -> Dict[str, Any]:
        """Totals for the session, plus per-operation call and token counts."""
        by_operation: Dict[str, Dict[str, int]] = defaultdict(
            lambda: {"calls": 0, "input_tokens": 0, "output_tokens": 0}
        )
        for r in self._records:
            bucket = by_operation[r.operation]
            bucket["calls"] += 1
            bucket["input_tokens"] += r.input_tokens
            bucket["output_tokens"] += r.output_tokens

        return {
            "total_calls": len(self._records),
            "errors": sum(1 for r in self._records if r.failed),
            "total_input_tokens": sum(r.input_tokens for r in self._records),
            "total_output_tokens": sum(r.output_tokens for r in self._records),
            "total_latency_ms": sum(r.latency_ms for r in self._records),
            "by_operation": dict(by_operation),
        }

    def clear(self) -> None:
        self._records.clear()

    @property
    def records(self) -> List[AuditRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
