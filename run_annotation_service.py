#!/usr/bin/env python3
"""
Annotation Service - Entry Point
================================

This script starts the SiteArea AnnotationService, which:
- Receives drawing-layer events and capture records over MQTT
- Keeps the session's points, ring and area
- Publishes a retained annotation snapshot after every change
- Responds to control commands via MQTT control plane

Usage:
    python run_annotation_service.py --config config/annotation_service.yaml

Architecture:
    - AnnotationService: Main orchestrator (sitearea_service)
    - MQTTControlPlane: Command handler (sitearea_control)
    - MessageSubscriber: Draw events + captures (sitearea_mqtt)
    - AnnotationPublisher: Publishes annotation snapshots (sitearea_mqtt)

Signals:
    - SIGTERM: Graceful shutdown
    - SIGINT (Ctrl+C): Graceful shutdown

Logs:
    - Console: INFO level
    - File: logs/annotation_service.log (INFO level)
"""

import argparse
import signal
import sys
import logging
from pathlib import Path
from typing import Optional

from sitearea_service import AnnotationService, ServiceConfig
from sitearea_control import MQTTControlPlane
from sitearea_mqtt import AnnotationPublisher, MessageSubscriber, create_logger


# ─────────────────────────────────────────────────────────────────────────────
# Logging Setup
# ─────────────────────────────────────────────────────────────────────────────

def setup_logging(log_file: Optional[Path] = None) -> logging.Logger:
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            *(
                [logging.FileHandler(log_file)]
                if log_file
                else []
            )
        ]
    )

    return logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Main Service
# ─────────────────────────────────────────────────────────────────────────────

class AnnotationApp:
    """
    Main application wrapper for AnnotationService.

    Handles:
    - Configuration loading
    - Component initialization (control plane, publisher, subscriber)
    - Signal handling (SIGTERM, SIGINT)
    - Graceful shutdown
    """

    def __init__(self, config_path: Path, log_file: Optional[Path] = None):
        self.config_path = config_path
        self.log_file = log_file
        self.logger = setup_logging(log_file)

        # Components (initialized in setup())
        self.config: Optional[ServiceConfig] = None
        self.control_plane: Optional[MQTTControlPlane] = None
        self.publisher: Optional[AnnotationPublisher] = None
        self.subscriber: Optional[MessageSubscriber] = None
        self.service: Optional[AnnotationService] = None

        self._shutdown_requested = False

    def setup(self):
        """
        Setup all components.

        Steps:
        1. Load configuration from YAML
        2. Create structured logger for MQTT messaging
        3. Create control plane
        4. Create annotation publisher and subscriber
        5. Create AnnotationService and register commands
        """
        self.logger.info("=" * 80)
        self.logger.info("🚀 SiteArea Annotation Service - Starting")
        self.logger.info("=" * 80)

        # 1. Load configuration
        self.logger.info(f"📄 Loading configuration: {self.config_path}")
        self.config = ServiceConfig.from_yaml(self.config_path)
        self.logger.info(f"✅ Configuration loaded (session_id={self.config.session_id})")

        mqtt_config = self.config.mqtt_config
        topics = self.config.topics
        session_id = self.config.session_id

        # 2. Structured logger for messaging
        mqtt_logger = create_logger("annotation_mqtt", session_id=session_id)

        # 3. Control plane
        self.logger.info("🔌 Creating MQTT control plane")
        self.control_plane = MQTTControlPlane(
            broker_host=mqtt_config.broker,
            broker_port=mqtt_config.port,
            command_topic=topics["command"],
            status_topic=topics["status"],
            client_id=f"annotation_{session_id}",
            username=mqtt_config.username,
            password=mqtt_config.password,
        )

        # 4. Publisher + subscriber
        self.logger.info("📤 Creating MQTT publisher and subscriber")
        self.publisher = AnnotationPublisher(
            broker_host=mqtt_config.broker,
            broker_port=mqtt_config.port,
            topic=topics["annotation"],
            logger=mqtt_logger,
            client_id=f"publisher_annotation_{session_id}",
            username=mqtt_config.username,
            password=mqtt_config.password,
            qos=mqtt_config.qos,
        )

        # 5. Service (subscriber callbacks need it first)
        self.logger.info("🏗️  Creating annotation service")
        self.service = AnnotationService(
            config=self.config,
            control_plane=self.control_plane,
            publisher=self.publisher,
        )

        self.subscriber = MessageSubscriber(
            broker_host=mqtt_config.broker,
            broker_port=mqtt_config.port,
            draw_topic=topics["draw"],
            capture_topic=topics["capture"],
            on_draw_event=self.service.handle_draw_message,
            on_capture=self.service.handle_capture_message,
            logger=mqtt_logger,
            client_id=f"subscriber_{session_id}",
            username=mqtt_config.username,
            password=mqtt_config.password,
            qos=mqtt_config.qos,
        )
        self.service.subscriber = self.subscriber

        self.logger.info(f"  - Draw topic: {topics['draw']}")
        self.logger.info(f"  - Capture topic: {topics['capture']}")
        self.logger.info(f"  - Annotation topic: {topics['annotation']}")

        self.service.setup()
        self.logger.info("✅ Service created")
        self.logger.info("=" * 80)

    def run(self):
        """Blocks until shutdown is requested (via signal or exception)."""
        if not self.service:
            raise RuntimeError("Service not initialized. Call setup() first.")

        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        try:
            self.service.start()

            self.logger.info("✅ Service started successfully")
            self.logger.info("Press Ctrl+C to stop")
            self.logger.info("=" * 80)

            self.service.wait()

        except KeyboardInterrupt:
            self.logger.info("\n⚠️  KeyboardInterrupt received")
            self.shutdown()

        except Exception as e:
            self.logger.error(f"❌ Service error: {e}", exc_info=True)
            self.shutdown()
            sys.exit(1)

    def shutdown(self):
        if self._shutdown_requested:
            self.logger.warning("⚠️  Shutdown already in progress")
            return

        self._shutdown_requested = True

        self.logger.info("=" * 80)
        self.logger.info("🛑 Shutting down annotation service")
        self.logger.info("=" * 80)

        if self.service and self.service.is_running:
            try:
                self.service.stop()
                self.logger.info("✅ Service stopped")
            except Exception as e:
                self.logger.error(f"❌ Error stopping service: {e}")

        # Disconnect is a no-op when the service already did it
        if self.control_plane:
            try:
                self.control_plane.disconnect()
            except Exception as e:
                self.logger.error(f"❌ Error disconnecting control plane: {e}")

        self.logger.info("✅ Shutdown complete")

    def _signal_handler(self, signum, frame):
        signal_name = signal.Signals(signum).name
        self.logger.info(f"\n⚠️  Received signal {signal_name} ({signum})")
        self.shutdown()
        sys.exit(0)


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

def parse_args():
    parser = argparse.ArgumentParser(
        description="SiteArea Annotation Service - points, ring and area over MQTT",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start with default config
  python run_annotation_service.py --config config/annotation_service.yaml

  # Start without file logging (console only)
  python run_annotation_service.py --config config/annotation_service.yaml --no-log-file
        """
    )

    parser.add_argument(
        '--config',
        type=Path,
        required=True,
        help='Path to service configuration YAML file'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        default=Path('logs/annotation_service.log'),
        help='Path to log file (default: logs/annotation_service.log)'
    )

    parser.add_argument(
        '--no-log-file',
        action='store_true',
        help='Disable file logging (console only)'
    )

    return parser.parse_args()


def main():
    args = parse_args()

    log_file = None if args.no_log_file else args.log_file

    if not args.config.exists():
        print(f"❌ Error: Configuration file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    app = AnnotationApp(
        config_path=args.config,
        log_file=log_file
    )

    try:
        app.setup()
        app.run()
    except Exception as e:
        print(f"❌ Fatal error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
