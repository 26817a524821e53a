"""
Structured logging and step timing for fix-passes.

Provides a JSON formatter for machine-readable logs (``--log-format json``)
and a timer that records how long each step of a fix-pass takes.
"""

import json
import logging
import time
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict


# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord(
    "", logging.INFO, "", 0, "", None, None
))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Formats each record as one JSON object per line."""

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        if self.include_extra:
            for key, value in record.__dict__.items():
                if key not in _RECORD_ATTRIBUTES:
                    log_data[key] = value

        return json.dumps(log_data, default=str)


class StepTimer:
    """Times named fix-pass steps, logs their outcome and keeps running totals."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._totals: Dict[str, Dict[str, float]] = {}

    def _record(self, step: str, duration: float) -> None:
        totals = self._totals.setdefault(step, {'count': 0, 'total': 0.0, 'max': 0.0})
        totals['count'] += 1
        totals['total'] += duration
        totals['max'] = max(totals['max'], duration)

    @contextmanager
    def time_step(self, step: str, **context):
        """Log start, completion or failure of ``step`` with its duration."""
        start_time = time.perf_counter()
        self.logger.debug(
            f"Starting step: {step}",
            extra={'step': step, 'phase': 'start', **context}
        )

        try:
            yield
        except Exception as e:
            duration = time.perf_counter() - start_time
            self.logger.debug(
                f"Failed step: {step} after {duration:.3f}s",
                extra={
                    'step': step,
                    'phase': 'error',
                    'duration_seconds': duration,
                    'error': str(e),
                    **context
                }
            )
            raise

        duration = time.perf_counter() - start_time
        self._record(step, duration)
        self.logger.debug(
            f"Completed step: {step} in {duration:.3f}s",
            extra={
                'step': step,
                'phase': 'complete',
                'duration_seconds': duration,
                **context
            }
        )

    def summary(self) -> Dict[str, Dict[str, float]]:
        """Count, total, mean and max duration of each completed step."""
        return {
            step: {
                'count': totals['count'],
                'total': totals['total'],
                'mean': totals['total'] / totals['count'],
                'max': totals['max'],
            }
            for step, totals in self._totals.items()
        }
