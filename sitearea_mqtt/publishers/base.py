"""
Base MQTT Publisher
==================

Bounded Context: MQTT Infrastructure

Design:
- One paho client per publisher, one topic per publisher
- Connection state tracked with threading.Event (set in on_connect)
- Retained state messages: the last retained payload is replayed after a
  reconnect, so a broker restart does not leave renderers without state

Architecture:
    BasePublisher (abstract)
        ↓
    AnnotationPublisher (concrete, retained snapshots)
"""

import json
import threading
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import paho.mqtt.client as mqtt

from ..logging import StructuredLogger, LogEvent


class BasePublisher(ABC):
    """
    Abstract base class for MQTT publishers.

    Subclasses implement format_message(); publish() takes the formatted
    dict and handles JSON encoding, QoS and retention.

    Thread Safety:
        publish() may be called from any thread; paho's network loop runs
        in its own thread (loop_start).
    """

    def __init__(
        self,
        broker_host: str,
        broker_port: int,
        topic: str,
        client_id: str,
        logger: StructuredLogger,
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 1
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.topic = topic
        self.client_id = client_id
        self.logger = logger
        self.qos = qos

        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        if username and password:
            self.client.username_pw_set(username, password)

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        self._connected = threading.Event()
        self._stats_lock = threading.Lock()
        self._published = 0
        self._failed = 0
        self._last_retained: Optional[str] = None

    @property
    def broker(self) -> str:
        return f"{self.broker_host}:{self.broker_port}"

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code != 0:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message=f"Failed to connect to broker (rc={reason_code})",
                metadata={'broker': self.broker}
            )
            return

        self._connected.set()
        self.logger.info(
            event=LogEvent.MQTT_CONNECTED,
            message="Publisher connected",
            metadata={'broker': self.broker, 'client_id': self.client_id, 'topic': self.topic}
        )

        with self._stats_lock:
            replay = self._last_retained
        if replay is not None:
            client.publish(self.topic, replay, qos=self.qos, retain=True)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        self._connected.clear()
        self.logger.warning(
            event=LogEvent.MQTT_DISCONNECTED,
            message="Publisher disconnected",
            metadata={'broker': self.broker, 'reason_code': str(reason_code)}
        )

    def connect(self, timeout: float = 10.0) -> bool:
        """
        Connect and start the network loop.

        Returns:
            True once on_connect has fired, False on error or timeout
        """
        try:
            self.client.connect(self.broker_host, self.broker_port)
            self.client.loop_start()
        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Failed to connect to broker",
                exc_info=e,
                metadata={'broker': self.broker}
            )
            return False

        if not self._connected.wait(timeout=timeout):
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Connection timeout",
                metadata={'broker': self.broker, 'timeout': timeout}
            )
            return False
        return True

    def disconnect(self) -> None:
        try:
            self.client.loop_stop()
            self.client.disconnect()
        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Error during disconnect",
                exc_info=e
            )
            return

        self.logger.info(
            event=LogEvent.MQTT_DISCONNECTED,
            message="Publisher stopped",
            metadata=self.get_stats()
        )

    def is_connected(self) -> bool:
        return self._connected.is_set()

    @abstractmethod
    def format_message(self, *args, **kwargs) -> Dict[str, Any]:
        """Return a dict ready for JSON serialization."""
        raise NotImplementedError("Subclasses must implement format_message()")

    def publish(self, message_data: Dict[str, Any], retain: bool = False) -> bool:
        """
        Publish a formatted message.

        A retained payload is remembered even when the broker is
        unreachable and sent on the next successful connect.

        Returns:
            True if handed to the broker, False otherwise
        """
        try:
            payload = json.dumps(message_data)
        except (TypeError, ValueError) as e:
            self.logger.error(
                event=LogEvent.SERIALIZATION_ERROR,
                message="Message is not JSON serializable",
                exc_info=e,
                metadata={'topic': self.topic}
            )
            return False

        if retain:
            with self._stats_lock:
                self._last_retained = payload

        if not self._connected.is_set():
            self._count(ok=False)
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message="Cannot publish: not connected to broker",
                metadata={'topic': self.topic, 'retained_for_replay': retain}
            )
            return False

        try:
            result = self.client.publish(
                topic=self.topic,
                payload=payload,
                qos=self.qos,
                retain=retain
            )
        except Exception as e:
            self._count(ok=False)
            self.logger.error(
                event=LogEvent.MQTT_PUBLISH_ERROR,
                message="Error publishing message",
                exc_info=e,
                metadata={'topic': self.topic}
            )
            return False

        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            self._count(ok=False)
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message=f"Publish failed (rc={result.rc})",
                metadata={'topic': self.topic}
            )
            return False

        self._count(ok=True)
        self.logger.debug(
            event=LogEvent.MQTT_PUBLISH_SUCCESS,
            message="Published message",
            metadata={'topic': self.topic, 'qos': self.qos, 'retain': retain}
        )
        return True

    def _count(self, ok: bool) -> None:
        with self._stats_lock:
            if ok:
                self._published += 1
            else:
                self._failed += 1

    def get_stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            return {
                'published': self._published,
                'failed': self._failed,
                'has_retained_state': self._last_retained is not None,
                'connected': self._connected.is_set(),
                'topic': self.topic,
                'broker': self.broker
            }
