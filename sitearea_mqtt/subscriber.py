"""
MQTT Subscriber
==============

Bounded Context: Message Consumption

Receives drawing-layer events and capture records, deserializes them and
hands typed messages to user callbacks.

Message Flow:
    1. Subscriber receives JSON from MQTT
    2. Deserializes to typed schemas (DrawEventMessage, CaptureMessage)
    3. Invokes user callback with typed message
    4. Continues listening (non-blocking)

Example:
    >>> subscriber = MessageSubscriber(
    ...     broker_host="localhost",
    ...     draw_topic="sitearea/data/draw/site_01",
    ...     capture_topic="sitearea/data/captures/site_01",
    ...     on_draw_event=service.handle_draw_message,
    ...     on_capture=service.handle_capture_message,
    ...     logger=logger
    ... )
    >>> subscriber.connect()
"""

import json
import threading
from typing import Optional, Callable
import paho.mqtt.client as mqtt

from .schemas import CaptureMessage, DrawEventMessage
from .logging import StructuredLogger, LogEvent


class MessageSubscriber:
    """
    MQTT subscriber for draw events and capture records.

    Attributes:
        broker_host: MQTT broker hostname
        broker_port: MQTT broker port
        draw_topic: Topic for drawing-layer events
        capture_topic: Topic for capture records
        client_id: MQTT client identifier
        logger: Structured logger instance

    Thread Safety:
        Callbacks run in the MQTT network thread. The consumer is
        responsible for serializing its own state changes.
    """

    def __init__(
        self,
        broker_host: str,
        draw_topic: str,
        capture_topic: str,
        on_draw_event: Callable[[DrawEventMessage], None],
        on_capture: Callable[[CaptureMessage], None],
        logger: StructuredLogger,
        broker_port: int = 1883,
        client_id: str = "sitearea_subscriber",
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 1
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.draw_topic = draw_topic
        self.capture_topic = capture_topic
        self.client_id = client_id
        self.logger = logger
        self.qos = qos

        # User callbacks
        self.on_draw_event = on_draw_event
        self.on_capture = on_capture

        # MQTT client setup
        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        if username and password:
            self.client.username_pw_set(username, password)

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message

        # State
        self._connected = threading.Event()
        self._running = False
        self._stats_lock = threading.Lock()
        self._message_count = {'draw_events': 0, 'captures': 0}

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        """Subscribes to both topics once connected."""
        if reason_code == 0:
            self._connected.set()

            client.subscribe(self.draw_topic, qos=self.qos)
            client.subscribe(self.capture_topic, qos=self.qos)

            self.logger.info(
                event=LogEvent.MQTT_CONNECTED,
                message="Connected to MQTT broker and subscribed to topics",
                metadata={
                    'broker': f"{self.broker_host}:{self.broker_port}",
                    'draw_topic': self.draw_topic,
                    'capture_topic': self.capture_topic
                }
            )
        else:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message=f"Failed to connect to broker (rc={reason_code})",
                metadata={'broker': f"{self.broker_host}:{self.broker_port}"}
            )

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        self._connected.clear()
        self.logger.warning(
            event=LogEvent.MQTT_DISCONNECTED,
            message="Disconnected from MQTT broker",
            metadata={
                'broker': f"{self.broker_host}:{self.broker_port}",
                'reason_code': str(reason_code)
            }
        )

    def _on_message(self, client, userdata, msg: mqtt.MQTTMessage) -> None:
        """Decode JSON and route by topic."""
        try:
            payload = msg.payload.decode('utf-8')
            data = json.loads(payload)

            if msg.topic == self.draw_topic:
                self._handle_draw_message(data)
            elif msg.topic == self.capture_topic:
                self._handle_capture_message(data)
            else:
                self.logger.warning(
                    event=LogEvent.DESERIALIZATION_ERROR,
                    message=f"Received message from unknown topic: {msg.topic}"
                )

        except json.JSONDecodeError as e:
            self.logger.error(
                event=LogEvent.DESERIALIZATION_ERROR,
                message="Failed to decode JSON message",
                exc_info=e,
                metadata={'topic': msg.topic}
            )
        except Exception as e:
            self.logger.error(
                event=LogEvent.DESERIALIZATION_ERROR,
                message="Error processing message",
                exc_info=e,
                metadata={'topic': msg.topic}
            )

    def _handle_draw_message(self, data: dict) -> None:
        try:
            draw_msg = DrawEventMessage.from_dict(data)
        except ValueError as e:
            self.logger.error(
                event=LogEvent.SCHEMA_VALIDATION_ERROR,
                message="Draw event message failed schema validation",
                exc_info=e,
                metadata={'data': data}
            )
            return

        with self._stats_lock:
            self._message_count['draw_events'] += 1

        self.logger.info(
            event=LogEvent.DRAW_EVENT_RECEIVED,
            message="Received draw event message",
            metadata={
                'event_type': draw_msg.event.event_type.value,
                'shape_count': draw_msg.shape_count
            }
        )

        self.on_draw_event(draw_msg)

    def _handle_capture_message(self, data: dict) -> None:
        try:
            capture_msg = CaptureMessage.from_dict(data)
        except ValueError as e:
            self.logger.error(
                event=LogEvent.SCHEMA_VALIDATION_ERROR,
                message="Capture message failed schema validation",
                exc_info=e,
                metadata={'data': data}
            )
            return

        with self._stats_lock:
            self._message_count['captures'] += 1

        self.logger.info(
            event=LogEvent.CAPTURE_RECEIVED,
            message="Received capture message",
            metadata={
                'direction': capture_msg.direction,
                'has_location': capture_msg.has_location
            }
        )

        self.on_capture(capture_msg)

    def connect(self, timeout: float = 10.0) -> bool:
        """
        Connect to MQTT broker.

        Starts the network loop so the CONNACK can be processed.

        Returns:
            True if connected successfully, False otherwise
        """
        try:
            self.client.connect(self.broker_host, self.broker_port)
            self.client.loop_start()
            self._running = True

            if self._connected.wait(timeout=timeout):
                return True
            else:
                self.logger.error(
                    event=LogEvent.MQTT_CONNECTION_ERROR,
                    message="Connection timeout",
                    metadata={'timeout': timeout}
                )
                return False

        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Failed to connect to broker",
                exc_info=e,
                metadata={'broker': f"{self.broker_host}:{self.broker_port}"}
            )
            return False

    def stop(self) -> None:
        """Stop the network loop and disconnect."""
        self._running = False
        self.client.loop_stop()
        self.client.disconnect()

        self.logger.info(
            event=LogEvent.MQTT_DISCONNECTED,
            message="Subscriber stopped",
            metadata=self.get_stats()
        )

    def is_connected(self) -> bool:
        return self._connected.is_set()

    def is_running(self) -> bool:
        return self._running

    def get_stats(self) -> dict:
        with self._stats_lock:
            return {
                'draw_events_received': self._message_count['draw_events'],
                'captures_received': self._message_count['captures'],
                'connected': self._connected.is_set(),
                'running': self._running,
                'draw_topic': self.draw_topic,
                'capture_topic': self.capture_topic,
                'broker': f"{self.broker_host}:{self.broker_port}"
            }
