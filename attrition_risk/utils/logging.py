"""
Structured Logging Module.

Logging for bundle loading and prediction monitoring. Key/value context
passed to a log call travels on the record as ``extra_fields`` and is
rendered by the formatter, either as ``key=value`` pairs or as JSON.

The logger also keeps running prediction counters and a bounded window
of recent operation timings, so a long-lived session does not grow
without limit.
"""

import json
import logging
import sys
import time
from collections import Counter, deque
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Most recent timings kept per operation
TIMING_WINDOW = 1000


class RiskLogger:
    """
    Structured logger for the attrition risk predictor.

    Provides:
    - JSON formatted logs for production
    - Human-readable format for development
    - Prediction counters and recent timings
    """

    def __init__(
        self,
        name: str = "attrition_risk",
        level: str = "INFO",
        format: str = "text",
        log_file: Optional[str] = None,
        timing_window: int = TIMING_WINDOW,
    ):
        """
        Initialize the logger.

        Args:
            name: Logger name.
            level: Logging level (DEBUG, INFO, WARNING, ERROR).
            format: Output format ('json' or 'text').
            log_file: Path to log file (optional).
            timing_window: Number of recent timings kept per operation.
        """
        self.name = name
        self.level = level
        self.format = format
        self.log_file = log_file
        self.timing_window = timing_window

        self._logger = self._setup_logger()
        self._timings: dict[str, deque] = {}
        self._start_times: dict[str, float] = {}
        self._counts: Counter = Counter()

    def _setup_logger(self) -> logging.Logger:
        logger = logging.getLogger(self.name)
        logger.setLevel(getattr(logging, self.level.upper()))
        logger.propagate = False

        # A logger name is shared process-wide; release whatever a previous
        # RiskLogger attached before installing ours
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        formatter = JsonFormatter() if self.format == "json" else TextFormatter()

        # stderr keeps CLI results on stdout parseable
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if self.log_file:
            Path(self.log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        return logger

    def close(self) -> None:
        """Detach and close this logger's handlers."""
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, fields: dict) -> None:
        self._logger.log(level, message, extra={"extra_fields": fields})

    @contextmanager
    def timer(self, operation: str, log_result: bool = True):
        """
        Time a block and keep the duration in the operation's window.

        Args:
            operation: Name the timing is recorded under.
            log_result: Emit a debug line with the duration.
        """
        self._start_times[operation] = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - self._start_times.pop(operation)
            window = self._timings.get(operation)
            if window is None:
                window = self._timings[operation] = deque(maxlen=self.timing_window)
            window.append(duration)
            if log_result:
                self.debug(f"{operation} completed", duration_ms=round(duration * 1000, 3))

    def log_bundle_loaded(
        self,
        num_features: int,
        num_categorical: int,
        num_numeric: int,
        threshold: float,
    ) -> None:
        """Log a successfully validated bundle."""
        self.info(
            "Bundle loaded",
            features=num_features,
            categorical=num_categorical,
            numeric=num_numeric,
            threshold=threshold,
        )

    def log_prediction_result(
        self,
        probability: float,
        score: float,
        decision: str,
        skipped: int = 0,
    ) -> None:
        """Log a single prediction and update the counters."""
        self._counts["predictions"] += 1
        self._counts[decision] += 1
        self._counts["skipped_lookups"] += skipped

        self.info(
            "Prediction completed",
            probability=round(probability, 4),
            score=round(score, 4),
            decision=decision,
            skipped_lookups=skipped,
        )

    def get_metrics_summary(self) -> dict:
        """
        Prediction counters and statistics over the recent timings.

        Returns:
            ``{"counts": {...}, "timings": {operation: {count, mean, min, max, last}}}``
            with durations in seconds.
        """
        timings = {}
        for operation, window in self._timings.items():
            if window:
                timings[operation] = {
                    "count": len(window),
                    "mean": sum(window) / len(window),
                    "min": min(window),
                    "max": max(window),
                    "last": window[-1],
                }
        return {"counts": dict(self._counts), "timings": timings}


class TextFormatter(logging.Formatter):
    """Human-readable formatter with ``| key=value`` context."""

    def __init__(self):
        super().__init__("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, "extra_fields", None)
        if fields:
            line += " | " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        log_entry.update(getattr(record, "extra_fields", None) or {})

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def get_logger(
    name: str = "attrition_risk",
    level: str = "INFO",
    format: str = "text",
    log_file: Optional[str] = None
) -> RiskLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name.
        level: Logging level.
        format: Output format ('json' or 'text').
        log_file: Path to log file.

    Returns:
        Configured RiskLogger instance.
    """
    return RiskLogger(name=name, level=level, format=format, log_file=log_file)
