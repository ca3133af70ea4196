"""
    Detection types and the perception contract used by IsInFront
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import py_trees


# Detector streams that can be activated upstream
PEOPLE_STREAM = 'perception_system/perception_people_detection'
OBJECT_STREAM = 'perception_system/perception_object_detection'

DETECTION_STREAMS = {
    'person': PEOPLE_STREAM,
    'object': OBJECT_STREAM,
}


@dataclass(frozen=True)
class DetectionRecord:
    """
        One perceived entity.

        x, y, z: centre in the robot frame (x forward, y left)
    """
    x: float
    y: float
    z: float = 0.0
    confidence: float = 1.0
    label: str = ''
    frame_id: Optional[str] = None

    def to_dict(self):
        return {
            'x': self.x, 'y': self.y, 'z': self.z,
            'confidence': self.confidence,
            'label': self.label,
            'frame_id': self.frame_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            x=float(data['x']),
            y=float(data['y']),
            z=float(data.get('z', 0.0)),
            confidence=float(data.get('confidence', 1.0)),
            label=data.get('label', data.get('class', '')),
            frame_id=data.get('frame_id'),
        )


@dataclass(frozen=True)
class DetectionTemplate:
    """Query for the perception collaborator, an empty label matches any class"""
    label: str = ''

    def matches(self, detection):
        return not self.label or detection.label == self.label


def select_detection_stream(what, logger=None):
    """
        Map the `what` port to the detector stream to activate.

        Unknown values fall back to the object stream (logged as an error).
    """
    stream = DETECTION_STREAMS.get(what)
    if stream is None:
        logger = logger or py_trees.logging.Logger("Detection")
        logger.error(f"Unknown what: {what}. Activating generic")
        stream = OBJECT_STREAM
    return stream


class Perception(ABC):
    """Perception collaborator (detection listener)"""

    @abstractmethod
    def activate(self, stream):
        """Ask upstream to run the given detector stream"""
        pass

    @abstractmethod
    def query(self, template, confidence_threshold):
        """
            Returns:
                list of DetectionRecord matching template, best match first
        """
        pass

    @abstractmethod
    def publish_reference(self, detection, label):
        """Publish the detection as a reference frame called label"""
        pass
