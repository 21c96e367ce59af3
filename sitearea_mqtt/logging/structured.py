"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

Wraps Python's logging module and emits one JSON object per record.

Example:
    >>> logger = StructuredLogger(component="annotation_service")
    >>> logger.info(
    ...     event=LogEvent.ANNOTATION_PUBLISHED,
    ...     message="Published annotation snapshot",
    ...     metadata={'point_count': 4, 'square_meters': 1520.3}
    ... )

Output:
    {
        "timestamp": "2026-10-19T15:30:45.123456+00:00",
        "level": "INFO",
        "component": "annotation_service",
        "event": "annotation.published",
        "message": "Published annotation snapshot",
        "metadata": {"point_count": 4, "square_meters": 1520.3}
    }
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent


class StructuredLogger:
    """
    JSON structured logger.

    Attributes:
        component: Component name (e.g., "subscriber", "annotation_service")
        logger: Underlying Python logger instance

    Thread Safety:
        Thread-safe via Python's logging module.
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            component: Component identifier
            level: Logging level (default: INFO)
            logger_name: Custom logger name (default: sitearea_mqtt.<component>)
            context: Fields added to every entry (e.g. session_id)
        """
        self.component = component
        self.context = dict(context or {})
        self.logger_name = logger_name or f"sitearea_mqtt.{component}"
        self.logger = logging.getLogger(self.logger_name)
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def _log(
        self,
        level: str,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[Exception] = None
    ) -> None:
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': level,
            'component': self.component,
            **self.context,
            'event': event.value,
            'message': message,
        }

        if metadata:
            log_entry['metadata'] = metadata

        if exc_info:
            log_entry['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info)
            }

        log_level = getattr(logging, level)
        self.logger.log(
            log_level,
            json.dumps(log_entry, default=str),
            exc_info=exc_info if level == 'ERROR' else None
        )

    def debug(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        self._log('DEBUG', event, message, metadata)

    def info(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log INFO level message.

        Example:
            >>> logger.info(
            ...     event=LogEvent.DRAW_EVENT_RECEIVED,
            ...     message="Received draw event",
            ...     metadata={'event_type': 'created'}
            ... )
        """
        self._log('INFO', event, message, metadata)

    def warning(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        self._log('WARNING', event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[Exception] = None
    ) -> None:
        """
        Log ERROR level message.

        Example:
            >>> try:
            ...     DrawEventMessage.from_dict(data)
            ... except ValueError as e:
            ...     logger.error(
            ...         event=LogEvent.SCHEMA_VALIDATION_ERROR,
            ...         message="Invalid draw event",
            ...         exc_info=e
            ...     )
        """
        self._log('ERROR', event, message, metadata, exc_info)

class JSONFormatter(logging.Formatter):
    """
    Pass-through formatter: StructuredLogger already emits JSON.
    """

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


def create_logger(
    component: str,
    level: int = logging.INFO,
    **context: Any
) -> StructuredLogger:
    """
    Factory function to create configured StructuredLogger.

    Example:
        >>> logger = create_logger("subscriber", session_id="site_01")
    """
    return StructuredLogger(component=component, level=level, context=context)
