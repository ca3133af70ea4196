"""
    Bearing Gate - is the best detection in front of the robot?

    bearing = atan2(y, x) of the detection centre in the robot frame, in degrees.
        |bearing| <= 5  -> ALIGNED  ( 0), pass
        bearing  >  5   -> LEFT     (+1), fail
        bearing  < -5   -> RIGHT    (-1), fail
        no detection    -> RIGHT    (-1), fail  (turn right by default)
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

import py_trees

from .detection import DetectionRecord


BEARING_TOLERANCE_DEG = 5.0


class Direction(IntEnum):
    ALIGNED = 0
    LEFT = 1
    RIGHT = -1


@dataclass(frozen=True)
class DirectionalVerdict:
    direction: Direction
    passed: bool
    bearing: Optional[float] = None
    detection: Optional[DetectionRecord] = None

    @property
    def code(self):
        """Integer written to the `direction` port"""
        return int(self.direction)


def bearing_deg(detection):
    return math.degrees(math.atan2(detection.y, detection.x))


def classify_bearing(bearing):
    """Direction for a bearing in degrees, the cone edge counts as aligned"""
    if abs(bearing) > BEARING_TOLERANCE_DEG:
        return Direction.LEFT if bearing > 0 else Direction.RIGHT
    return Direction.ALIGNED


def evaluate(detections):
    """
        Decide the steering direction from a ranked detection list.

        Args:
            detections: DetectionRecord list, best match first. Already
                filtered by the perception query, only the head is used.

        Returns:
            DirectionalVerdict
    """
    if not detections:
        return DirectionalVerdict(direction=Direction.RIGHT, passed=False)

    detection = detections[0]
    bearing = bearing_deg(detection)
    direction = classify_bearing(bearing)
    return DirectionalVerdict(
        direction=direction,
        passed=direction == Direction.ALIGNED,
        bearing=bearing,
        detection=detection,
    )


class BearingGate:
    """
        evaluate() on top of a perception collaborator.
        When aligned, the entity is published as a reference frame.
    """

    def __init__(self, perception, logger=None):
        self.perception = perception
        self.logger = logger or py_trees.logging.Logger("BearingGate")

    def check(self, template, confidence_threshold, entity):
        detections = self.perception.query(template, confidence_threshold)
        verdict = evaluate(detections)

        if verdict.detection is None:
            self.logger.error("No detections found")
        elif verdict.passed:
            self.perception.publish_reference(verdict.detection, entity)
        else:
            self.logger.debug(f"Detection at {verdict.bearing:.1f} deg, not in front")
        return verdict
