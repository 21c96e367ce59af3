"""
SiteArea CLI - Main entry point.

Provides command-line interface for driving the AnnotationService over MQTT:
control commands, plus draw events and capture records for manual testing
without a map or camera.
"""

import argparse
import yaml
import sys
from pathlib import Path
from typing import Dict, Any, List, Optional

from sitearea_mqtt.schemas import (
    SCHEMA_VERSION,
    Timestamp,
    CaptureMessage,
    DrawEventMessage,
)
from sitearea_service.config import MQTTConfig

from .mqtt_client import MQTTCommandClient


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    """
    Load YAML payload file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If YAML is invalid
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}")

    if not isinstance(config, dict):
        raise ValueError(f"Expected a mapping in {config_path}")
    return config


def build_command(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate a parsed control subcommand into a command payload."""
    if args.command == 'select':
        return {'command': 'select', 'lat': args.lat, 'lon': args.lon}
    return {'command': args.command.replace('-', '_')}


def build_draw_message(data: Dict[str, Any]) -> DrawEventMessage:
    """
    Build a DrawEventMessage from a YAML payload.

    Example YAML:
        event_type: created
        shapes:
          - kind: marker
            coordinates: [[10.0, 10.0]]
            handle: "m1"

    Raises:
        ValueError: If the payload fails schema validation
    """
    payload = {
        'schema_version': SCHEMA_VERSION,
        'timestamp': Timestamp.now().to_dict(),
        **data,
    }
    return DrawEventMessage.from_dict(payload)


def build_capture_message(
    direction: str,
    lat: Optional[float],
    lon: Optional[float],
) -> CaptureMessage:
    return CaptureMessage.create(direction, lat, lon)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SiteArea CLI - Send MQTT commands to the AnnotationService",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Focus a point (same point twice recenters)
  sitearea-cli select 48.8584 2.2945

  # Make the ring follow the points again
  sitearea-cli rebind-ring

  # Simple commands (no arguments)
  sitearea-cli status
  sitearea-cli reset

  # Replay a drawing-layer event from YAML
  sitearea-cli draw config/events/create_marker.yaml

  # Record a capture (omit --lat/--lon for a failed geolocation)
  sitearea-cli capture north --lat 48.8590 --lon 2.2945
"""
    )

    # Global arguments
    parser.add_argument(
        "--session-id",
        default="site_01",
        help="Target session ID (default: site_01)"
    )
    parser.add_argument(
        "--broker",
        default="localhost",
        help="MQTT broker host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=1883,
        help="MQTT broker port (default: 1883)"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    select = subparsers.add_parser('select', help='Focus a point by coordinate')
    select.add_argument('lat', type=float, help='Latitude')
    select.add_argument('lon', type=float, help='Longitude')

    subparsers.add_parser('rebind-ring', help='Rebuild the ring from the points')
    subparsers.add_parser('status', help='Query session status')
    subparsers.add_parser('reset', help='Drop all points and the ring')

    draw = subparsers.add_parser('draw', help='Publish a draw event from YAML')
    draw.add_argument('config', help='Path to draw event YAML')

    capture = subparsers.add_parser('capture', help='Publish a capture record')
    capture.add_argument('direction', help='Compass direction (e.g. north, south-west)')
    capture.add_argument('--lat', type=float, default=None, help='Latitude')
    capture.add_argument('--lon', type=float, default=None, help='Longitude')

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    topics = MQTTConfig(broker=args.broker, port=args.port).topics_for(args.session_id)
    client = MQTTCommandClient(broker=args.broker, port=args.port)

    try:
        if args.command == 'draw':
            message = build_draw_message(load_yaml_config(args.config))
            client.send(topics['draw'], message.to_dict())
            print(f"✅ Draw event sent: {message.event.event_type.value} ({message.shape_count} shapes)")

        elif args.command == 'capture':
            message = build_capture_message(args.direction, args.lat, args.lon)
            client.send(topics['capture'], message.to_dict())
            print(f"✅ Capture sent: {message.direction}")

        else:
            client.send_command(topics['command'], build_command(args))

    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
