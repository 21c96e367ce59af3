"""
MQTT client wrapper for sending commands and data to the AnnotationService.

Handles MQTT connection, publishing, and disconnection.
"""

import json
import paho.mqtt.client as mqtt
from typing import Dict, Any, Optional


class MQTTCommandClient:
    """
    One-shot MQTT client: connect, publish one message, disconnect.

    Control commands go out with QoS 1; draw events and capture records
    use the same path on their data topics.
    """

    def __init__(
        self,
        broker: str = "localhost",
        port: int = 1883,
        username: Optional[str] = None,
        password: Optional[str] = None
    ):
        self.broker = broker
        self.port = port
        self.username = username
        self.password = password

        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)

        if username and password:
            self.client.username_pw_set(username, password)

    def send(
        self,
        topic: str,
        message: Dict[str, Any],
        qos: int = 1
    ) -> None:
        """
        Publish a JSON message to an MQTT topic.

        Args:
            topic: MQTT topic (e.g., "sitearea/control/site_01/commands")
            message: Message dictionary (will be JSON serialized)
            qos: Quality of Service (default: 1)

        Raises:
            ConnectionError: If unable to connect to MQTT broker
            ValueError: If message serialization fails
        """
        try:
            payload = json.dumps(message)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid message data: {e}")

        try:
            self.client.connect(self.broker, self.port, keepalive=60)
        except ConnectionRefusedError:
            raise ConnectionError(
                f"Unable to connect to MQTT broker at {self.broker}:{self.port}. "
                "Is mosquitto running?"
            )

        try:
            self.client.loop_start()
            result = self.client.publish(topic, payload, qos=qos)
            result.wait_for_publish(timeout=5.0)
        except Exception as e:
            raise RuntimeError(f"Failed to publish message: {e}")
        finally:
            self.client.loop_stop()
            self.client.disconnect()

    def send_command(self, topic: str, command: Dict[str, Any], qos: int = 1) -> None:
        self.send(topic, command, qos=qos)
        print(f"✅ Command sent: {command.get('command', 'unknown')}")
