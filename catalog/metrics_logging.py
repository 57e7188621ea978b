from __future__ import annotations

import logging
from collections.abc import Mapping

from .metrics import Metrics

logger = logging.getLogger("catalog.metrics")


class LoggingMetrics(Metrics):
    def increment(
        self, name: str, tags: Mapping[str, str] | None = None, value: int = 1
    ) -> None:  # pragma: no cover - trivial
        ordered = dict(sorted((tags or {}).items()))
        logger.info("metric name=%s value=%d tags=%s", name, value, ordered)
