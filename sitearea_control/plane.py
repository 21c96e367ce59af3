"""
MQTTControlPlane - Command reception for the annotation service

Bounded Context: MQTT connection management + command reception

QoS Policy:
  - Commands: QoS 1 (at-least-once delivery)
  - Status: QoS 1 + retained (last reply persisted)

Replies:
  Every command gets one status message. A "request_id" sent with the
  command is echoed back so a caller can match the reply.

Threading:
  - paho-mqtt runs its own network thread (loop_start/loop_stop)
  - Command handlers run in that thread
"""

import json
import logging
from datetime import datetime, timezone
from threading import Event
from typing import Any, Dict, Optional

import paho.mqtt.client as mqtt

from .registry import CommandRegistry, CommandNotAvailableError

logger = logging.getLogger(__name__)


class MQTTControlPlane:
    """
    Receives {"command": "<name>", ...} payloads and replies on the status topic.

    Example:
        control_plane = MQTTControlPlane(
            broker_host="localhost",
            broker_port=1883,
            command_topic="sitearea/control/site_01/commands",
            status_topic="sitearea/control/site_01/status",
            client_id="annotation_site_01"
        )
        control_plane.command_registry.register('status', service.status, "...")
        control_plane.connect(timeout=5.0)
    """

    def __init__(
        self,
        broker_host: str,
        broker_port: int,
        command_topic: str,
        status_topic: str,
        client_id: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.command_topic = command_topic
        self.status_topic = status_topic
        self.client_id = client_id

        self.client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=client_id,
            protocol=mqtt.MQTTv311,
        )
        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message
        self.client.on_disconnect = self._on_disconnect

        if username and password:
            self.client.username_pw_set(username, password)

        self._connected = Event()
        self._running = False

        self.command_registry = CommandRegistry()

    def connect(self, timeout: float = 5.0) -> bool:
        """Returns True once subscribed to the command topic."""
        logger.info(f"🔌 Connecting control plane to {self.broker_host}:{self.broker_port}")
        try:
            self.client.connect(self.broker_host, self.broker_port, keepalive=60)
            self.client.loop_start()
        except Exception as e:
            logger.error(f"❌ Error connecting to MQTT: {e}")
            return False

        self._running = True
        if not self._connected.wait(timeout=timeout):
            logger.error(f"❌ Control plane connection timeout after {timeout}s")
            return False

        logger.info("✅ MQTT Control Plane connected")
        return True

    def disconnect(self) -> None:
        """Safe to call multiple times."""
        if not self._running:
            return

        self.publish_status("disconnected")
        self.client.loop_stop()
        self.client.disconnect()
        self._running = False
        self._connected.clear()
        logger.info("✅ MQTT Control Plane disconnected")

    def publish_status(self, status: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Publish to the status topic (QoS 1, retained)."""
        message: Dict[str, Any] = {
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "client_id": self.client_id,
        }
        if details:
            message["details"] = details

        try:
            self.client.publish(
                self.status_topic,
                json.dumps(message, default=str),
                qos=1,
                retain=True,
            )
        except Exception as e:
            logger.error(f"❌ Error publishing status: {e}")
            return
        logger.debug(f"📤 Status published: {status}")

    # ===== MQTT Callbacks (run in MQTT thread) =====

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code != 0:
            logger.error(f"❌ Control plane connection refused (rc={reason_code})")
            self._connected.clear()
            return

        client.subscribe(self.command_topic, qos=1)
        logger.info(f"📥 Listening for commands on {self.command_topic}")

        self.publish_status("connected", {"commands": self.command_registry.get_help()})
        self._connected.set()

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self._connected.clear()
        if reason_code != 0:
            logger.warning(f"⚠️ Control plane lost broker connection (rc={reason_code})")

    def _on_message(self, client, userdata, msg):
        try:
            command_data = json.loads(msg.payload.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"❌ Undecodable command payload {msg.payload!r}: {e}")
            return

        if not isinstance(command_data, dict):
            logger.error(f"❌ Command payload must be a JSON object, got {command_data!r}")
            return

        try:
            self.handle_command(command_data)
        except Exception as e:
            logger.error(f"❌ Error processing command: {e}", exc_info=True)

    def handle_command(self, command_data: Dict[str, Any]) -> None:
        """
        Execute a decoded command and publish exactly one reply.

        Unknown commands and bad arguments produce an "error" reply; they
        never propagate to the MQTT thread.
        """
        command = str(command_data.get('command', '')).lower()
        reply: Dict[str, Any] = {"command": command}
        if "request_id" in command_data:
            reply["request_id"] = command_data["request_id"]

        if not command:
            logger.warning("⚠️ Command payload without 'command' field")
            self.publish_status("error", {**reply, "error": "missing command"})
            return

        logger.info(f"🎯 Executing command: {command}")

        try:
            result = self.command_registry.execute(command, command_data)
        except CommandNotAvailableError as e:
            logger.warning(f"⚠️ {e}")
            self.publish_status("error", {**reply, "error": str(e)})
            return
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"⚠️ Invalid arguments for '{command}': {e}")
            self.publish_status("error", {**reply, "error": str(e)})
            return

        self.publish_status("ok", {**reply, "result": result})
