"""
    Simulated collaborators for running the decision nodes without ROS2

    Used by the command line demo (main.py) and by the tests:
    - StaticFrameLookup: fixed map -> frame transforms
    - SimulatedTruncationService: becomes ready after N checks
    - SimulatedNavigator: goals take N polls and end with scripted outcomes
    - SimulatedPerception: entities in the map frame seen from a 2D robot pose
"""

import math

import numpy as np
import py_trees

from plan.exceptions import TransformError
from plan.goal_resolver import FrameLookup, WORLD_FRAME
from plan.truncation import TruncationService
from sense.detection import DetectionRecord, Perception

from .navigator import NavigationOutcome, Navigator


class StaticFrameLookup(FrameLookup):

    def __init__(self, frames=None, world_frame=WORLD_FRAME):
        self.frames = dict(frames or {})
        self.world_frame = world_frame

    def set_frame(self, name, transform):
        self.frames[name] = transform

    def lookup(self, source_frame, target_frame):
        if source_frame != self.world_frame or target_frame not in self.frames:
            raise TransformError(f'"{target_frame}" passed to lookupTransform does not exist')
        return self.frames[target_frame]


class SimulatedTruncationService(TruncationService):

    def __init__(self, ready_after=0):
        self.ready_after = ready_after
        self.checks = 0

    def wait_ready(self, timeout):
        self.checks += 1
        return self.checks > self.ready_after


class SimulatedNavigator(Navigator):
    """
        Every goal runs for `polls_per_goal` polls, then ends with the next
        scripted outcome (SUCCEEDED once the script is exhausted).
    """

    def __init__(self, outcomes=None, polls_per_goal=3, logger=None):
        self.outcomes = list(outcomes or [])
        self.polls_per_goal = polls_per_goal
        self.logger = logger or py_trees.logging.Logger("SimulatedNavigator")
        self.history = []
        self.cancels = 0
        self.current = None
        self._remaining = 0
        self._cancelled = False

    @property
    def sent(self):
        return [goal for kind, goal in self.history if kind == "send"]

    @property
    def updates(self):
        return [goal for kind, goal in self.history if kind == "update"]

    def _start(self, goal):
        self.current = goal
        self._remaining = self.polls_per_goal
        self._cancelled = False

    def send(self, goal):
        self.history.append(("send", goal))
        self.logger.info(f"Sending goal x: {goal.pose.x:.2f}, y: {goal.pose.y:.2f}")
        self._start(goal)

    def update_goal(self, goal):
        self.history.append(("update", goal))
        self.logger.info(f"Goal updated x: {goal.pose.x:.2f}, y: {goal.pose.y:.2f}")
        self._start(goal)

    def cancel(self):
        self.cancels += 1
        self._cancelled = True

    def poll(self):
        if self.current is None:
            return None
        if self._cancelled:
            self.current = None
            return NavigationOutcome.CANCELLED
        if self._remaining > 0:
            self._remaining -= 1
            return None
        self.current = None
        return self.outcomes.pop(0) if self.outcomes else NavigationOutcome.SUCCEEDED


class SimulatedPerception(Perception):
    """
        Entities live in the map frame, detections are reported in the
        robot frame (x forward, y left) sorted by confidence.

        entities: {label: (x, y, confidence)}
        robot: (x, y, theta)
    """

    def __init__(self, entities=None, robot=(0.0, 0.0, 0.0)):
        self.entities = dict(entities or {})
        self.robot = robot
        self.active_streams = []
        self.published = {}

    def activate(self, stream):
        if stream not in self.active_streams:
            self.active_streams.append(stream)

    def rotate(self, angle):
        x, y, theta = self.robot
        self.robot = (x, y, math.atan2(math.sin(theta + angle), math.cos(theta + angle)))

    def _to_robot_frame(self, point):
        x, y, theta = self.robot
        rotation = np.array([
            [math.cos(theta), math.sin(theta)],
            [-math.sin(theta), math.cos(theta)],
        ])
        return rotation @ (np.asarray(point, dtype=float) - np.array([x, y]))

    def query(self, template, confidence_threshold):
        detections = []
        for label, (ex, ey, confidence) in self.entities.items():
            if confidence < confidence_threshold or (template.label and template.label != label):
                continue
            rx, ry = self._to_robot_frame((ex, ey))
            detections.append(DetectionRecord(
                x=float(rx), y=float(ry), confidence=confidence, label=label, frame_id='base_link'))
        return sorted(detections, key=lambda d: d.confidence, reverse=True)

    def publish_reference(self, detection, label):
        self.published[label] = detection
