"""
Annotation Publisher
====================

Bounded Context: Renderer State Production

Publishes the points / ring / area snapshot after every handled event.
Messages are retained so a renderer that connects late still gets the
current state.

Message Flow:
    AnnotationSyncController → AnnotationMessage → AnnotationPublisher → MQTT Broker
"""

from typing import Dict, Any, Optional
from .base import BasePublisher
from ..schemas import AnnotationMessage
from ..logging import StructuredLogger, LogEvent


class AnnotationPublisher(BasePublisher):
    """
    Publisher for annotation snapshots.

    Example:
        >>> publisher = AnnotationPublisher(
        ...     broker_host="localhost",
        ...     topic="sitearea/data/annotation/site_01",
        ...     logger=logger
        ... )
        >>> publisher.connect()
        >>> publisher.publish_annotation(AnnotationMessage.from_snapshot("site_01", snapshot))
    """

    def __init__(
        self,
        broker_host: str,
        topic: str,
        logger: StructuredLogger,
        broker_port: int = 1883,
        client_id: str = "sitearea_annotation_publisher",
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 1
    ):
        super().__init__(
            broker_host=broker_host,
            broker_port=broker_port,
            topic=topic,
            client_id=client_id,
            logger=logger,
            username=username,
            password=password,
            qos=qos
        )

    def format_message(self, annotation_msg: AnnotationMessage) -> Dict[str, Any]:
        """
        Raises:
            ValueError: If annotation_msg cannot be serialized
        """
        try:
            formatted = annotation_msg.to_dict()

            self.logger.debug(
                event=LogEvent.ANNOTATION_SERIALIZED,
                message="Serialized annotation message",
                metadata={
                    'session_id': annotation_msg.session_id,
                    'point_count': annotation_msg.point_count,
                }
            )

            return formatted

        except Exception as e:
            self.logger.error(
                event=LogEvent.SERIALIZATION_ERROR,
                message="Failed to serialize annotation message",
                exc_info=e,
                metadata={'session_id': getattr(annotation_msg, 'session_id', None)}
            )
            raise ValueError(f"Failed to format annotation message: {e}")

    def publish_annotation(self, annotation_msg: AnnotationMessage) -> bool:
        """
        Returns:
            True if published successfully, False otherwise
        """
        try:
            message_data = self.format_message(annotation_msg)
            success = self.publish(message_data, retain=True)

            if success:
                self.logger.info(
                    event=LogEvent.ANNOTATION_PUBLISHED,
                    message=f"Published annotation with {annotation_msg.point_count} points",
                    metadata={
                        'session_id': annotation_msg.session_id,
                        'mode': annotation_msg.mode.value,
                        'square_meters': round(annotation_msg.area.square_meters, 2),
                        'square_feet': round(annotation_msg.area.square_feet, 2),
                    }
                )

            return success

        except ValueError:
            return False
