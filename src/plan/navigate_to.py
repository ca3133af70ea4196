"""
    NavigateTo - behaviour tree action that drives the robot to a goal

    Input ports (blackboard keys, read every tick):
        tf_frame            frame to go to ('' -> use x/y)
        x, y                goal coordinates in the map frame
        will_finish         finish after the first terminal outcome
        is_truncated        stop distance_tolerance metres before the goal
        distance_tolerance

    Returns RUNNING while navigating (or while the goal cannot be resolved
    yet), then the verdict of GoalLifecycle.
"""

import py_trees
from py_trees.common import Status

from .goal_lifecycle import GoalLifecycle
from .goal_resolver import GoalContext, GoalResolver
from .truncation import TruncationPolicyGate


# Port name -> default when the key is not on the blackboard
PORTS = {
    'tf_frame': '',
    'x': 0.0,
    'y': 0.0,
    'will_finish': True,
    'is_truncated': False,
    'distance_tolerance': 0.0,
}


class NavigateTo(py_trees.behaviour.Behaviour):

    def __init__(self, lifecycle, name="NavigateTo", namespace=None):
        super().__init__(name=name)
        self.lifecycle = lifecycle
        self.bb = self.attach_blackboard_client(name=self.name, namespace=namespace)
        for key in PORTS:
            self.bb.register_key(key, access=py_trees.common.Access.READ)

    @classmethod
    def from_collaborators(cls, name, collaborators, namespace=None,
                           ready_timeout=TruncationPolicyGate.DEFAULT_TIMEOUT):
        """Wire resolver, gate and lifecycle from the injected collaborators"""
        resolver = GoalResolver(
            collaborators.frame_lookup,
            collaborators.policy_template,
            logger=py_trees.logging.Logger(f"{name}.resolver"),
        )
        gate = TruncationPolicyGate(
            collaborators.truncation_service,
            logger=py_trees.logging.Logger(f"{name}.gate"),
        )
        lifecycle = GoalLifecycle(
            resolver, gate, collaborators.navigator,
            ready_timeout=ready_timeout,
            logger=py_trees.logging.Logger(f"{name}.lifecycle"),
        )
        return cls(lifecycle, name=name, namespace=namespace)

    def read_context(self):
        """Snapshot of the input ports"""
        values = {}
        for key, default in PORTS.items():
            try:
                value = self.bb.get(key)
            except KeyError:
                value = default
            values[key] = default if value is None else value

        return GoalContext(
            tf_frame=str(values['tf_frame']),
            x=float(values['x']),
            y=float(values['y']),
            will_finish=bool(values['will_finish']),
            is_truncated=bool(values['is_truncated']),
            distance_tolerance=float(values['distance_tolerance']),
        )

    def initialise(self):
        self.lifecycle.reset()

    def update(self):
        self.logger.debug("NavigateTo ticked")
        status = self.lifecycle.tick(self.read_context())
        self.feedback_message = f"{self.lifecycle.state.value}"
        if self.lifecycle.last_outcome is not None:
            self.feedback_message += f" (last outcome: {self.lifecycle.last_outcome.value})"
        return status

    def terminate(self, new_status):
        if new_status == Status.INVALID:
            self.lifecycle.halt()
