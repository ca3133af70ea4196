"""
    Goal Resolver - builds the outgoing navigation goal

    A goal comes from one of two places:
    - a named TF frame (looked up from the world frame, coordinates ignored)
    - raw x/y coordinates (identity orientation)

    When the context asks for a truncated navigation, the truncated behaviour
    tree generated for its distance tolerance is attached to the goal.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import py_trees

from .exceptions import GoalNotReady, TransformError
from .truncation import TruncationPolicy


WORLD_FRAME = 'map'


@dataclass(frozen=True)
class Pose:
    """Position + orientation quaternion (identity by default)"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    qx: float = 0.0
    qy: float = 0.0
    qz: float = 0.0
    qw: float = 1.0

    @property
    def orientation(self):
        return (self.qx, self.qy, self.qz, self.qw)


@dataclass(frozen=True)
class Transform:
    """Translation + rotation of target_frame expressed in source_frame"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    qx: float = 0.0
    qy: float = 0.0
    qz: float = 0.0
    qw: float = 1.0


@dataclass
class GoalContext:
    """
        Per-tick goal configuration (the NavigateTo input ports).

        tf_frame: frame to go to, empty string means "use x/y"
        will_finish: stop after the first terminal outcome
        is_truncated: stop distance_tolerance metres before the goal
    """
    tf_frame: str = ''
    x: float = 0.0
    y: float = 0.0
    will_finish: bool = True
    is_truncated: bool = False
    distance_tolerance: float = 0.0


@dataclass(frozen=True)
class GoalSpec:
    """Resolved goal handed to the navigator"""
    pose: Pose
    frame_id: str = WORLD_FRAME
    truncation: Optional[TruncationPolicy] = None

    @property
    def behavior_tree(self):
        """Path of the navigation behaviour tree to run, '' for the default one"""
        return self.truncation.path if self.truncation else ''


class FrameLookup(ABC):
    """Frame lookup collaborator (tf buffer or equivalent)"""

    @abstractmethod
    def lookup(self, source_frame, target_frame):
        """
            Returns:
                Transform of target_frame in source_frame

            Raises:
                TransformError: the transform is not available (yet)
        """
        pass


class GoalResolver:
    """
        Turns a GoalContext into a GoalSpec.

        Stateless: the same context with the same lookup answer always gives
        an equal GoalSpec, truncation policy path included.
    """

    def __init__(self, frame_lookup, policy_template, world_frame=WORLD_FRAME, logger=None):
        self.frame_lookup = frame_lookup
        self.policy_template = policy_template
        self.world_frame = world_frame
        self.logger = logger or py_trees.logging.Logger("GoalResolver")

    def resolve(self, context):
        """
            Build the goal for this tick.

            Args:
                context: GoalContext read from the ports

            Returns:
                GoalSpec

            Raises:
                GoalNotReady: tf_frame is set but cannot be looked up right now
        """
        if context.tf_frame:
            pose = self._pose_from_frame(context.tf_frame)
        else:
            pose = Pose(x=float(context.x), y=float(context.y))
            self.logger.info(f"Setting goal to x: {pose.x:.2f}, y: {pose.y:.2f}")

        truncation = None
        if context.is_truncated:
            truncation = self.policy_template.instantiate(context.distance_tolerance)

        goal = GoalSpec(pose=pose, frame_id=self.world_frame, truncation=truncation)
        self.logger.info(
            f"Goal: x: {pose.x:.2f}, y: {pose.y:.2f}, qx: {pose.qx:.2f}, qy: {pose.qy:.2f}, "
            f"qz: {pose.qz:.2f}, qw: {pose.qw:.2f}. Frame: {goal.frame_id}"
        )
        return goal

    def _pose_from_frame(self, tf_frame):
        self.logger.info(f"Transforming {self.world_frame} to {tf_frame}")
        try:
            transform = self.frame_lookup.lookup(self.world_frame, tf_frame)
        except TransformError as e:
            self.logger.warning(f"Could not transform {self.world_frame} to {tf_frame}: {e}")
            raise GoalNotReady(f"no transform from {self.world_frame} to {tf_frame}") from e

        return Pose(
            x=transform.x,
            y=transform.y,
            z=transform.z,
            qx=transform.qx,
            qy=transform.qy,
            qz=transform.qz,
            qw=transform.qw,
        )
