"""
SiteArea CLI - Command-line interface for AnnotationService control.

This package provides a CLI for sending MQTT commands, draw events and
capture records to the AnnotationService without manually writing JSON.

Usage:
    sitearea-cli select 48.8584 2.2945
    sitearea-cli rebind-ring
    sitearea-cli status
    sitearea-cli draw config/events/create_marker.yaml
    sitearea-cli capture north --lat 48.8590 --lon 2.2945
"""

__version__ = "1.0.0"
