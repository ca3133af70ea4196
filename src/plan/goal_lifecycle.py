"""
    Goal Lifecycle - dispatch / finish / continue state machine for NavigateTo

        IDLE --resolve + ready--> DISPATCHING --outcome--> SUCCEEDED | ABORTED | CANCELLED
                                                               |
                        will_finish: DONE (verdict)  <---------+
                        otherwise:   re-resolve, DISPATCHING (RUNNING)

    Every terminal outcome goes through the same continuation rule, only the
    final verdict differs (see FINISH_VERDICTS).
"""

from enum import Enum

import py_trees
from py_trees.common import Status

from act.navigator import NavigationOutcome

from .exceptions import GoalNotReady
from .truncation import Readiness, TruncationPolicyGate


class LifecycleState(Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"
    CANCELLED = "cancelled"
    DONE = "done"


OUTCOME_STATES = {
    NavigationOutcome.SUCCEEDED: LifecycleState.SUCCEEDED,
    NavigationOutcome.ABORTED: LifecycleState.ABORTED,
    NavigationOutcome.CANCELLED: LifecycleState.CANCELLED,
}

# Verdict when the node was told to finish. A cancel is a clean stop.
FINISH_VERDICTS = {
    NavigationOutcome.SUCCEEDED: Status.SUCCESS,
    NavigationOutcome.ABORTED: Status.FAILURE,
    NavigationOutcome.CANCELLED: Status.SUCCESS,
}


class GoalLifecycle:
    """
        Owns one outstanding goal at a time.

        Args:
            resolver: GoalResolver
            gate: TruncationPolicyGate checked before every dispatch
            navigator: act.navigator.Navigator
            ready_timeout: bounded wait for the gate (seconds)
    """

    def __init__(self, resolver, gate, navigator, ready_timeout=TruncationPolicyGate.DEFAULT_TIMEOUT,
                 logger=None):
        self.resolver = resolver
        self.gate = gate
        self.navigator = navigator
        self.ready_timeout = ready_timeout
        self.logger = logger or py_trees.logging.Logger("GoalLifecycle")
        self.reset()

    def reset(self):
        """Fresh activation"""
        self.state = LifecycleState.IDLE
        self.goal = None
        self.goal_updated = False
        self.will_finish = True
        self.last_outcome = None
        self.result = None

    @property
    def outstanding(self):
        return self.state == LifecycleState.DISPATCHING

    def tick(self, context):
        """
            Advance the lifecycle once.

            Args:
                context: GoalContext read this tick

            Returns:
                Status.RUNNING until DONE, then the final verdict
        """
        if self.state == LifecycleState.DONE:
            return self.result

        if self.state == LifecycleState.IDLE:
            if self._dispatch(context):
                self.navigator.send(self.goal)
                self.state = LifecycleState.DISPATCHING
            return Status.RUNNING

        outcome = self.navigator.poll()
        if outcome is None:
            return Status.RUNNING

        self.last_outcome = outcome
        self.state = OUTCOME_STATES[outcome]
        self.logger.info(f"Navigation {outcome.value}")
        return self._continue_or_finish(outcome, context)

    def halt(self):
        """Tree preempted the node: drop the outstanding goal"""
        if self.outstanding:
            self.logger.info("Halted, cancelling outstanding goal")
            self.navigator.cancel()
        self.state = LifecycleState.IDLE

    def _continue_or_finish(self, outcome, context):
        if self.will_finish:
            self.state = LifecycleState.DONE
            self.result = FINISH_VERDICTS[outcome]
            return self.result

        # Keep navigating: the outcome is a cue to pick the next goal
        if self._dispatch(context):
            self.goal_updated = True
            self.navigator.update_goal(self.goal)
            self.state = LifecycleState.DISPATCHING
        else:
            self.state = LifecycleState.IDLE
        return Status.RUNNING

    def _dispatch(self, context):
        """Resolve + readiness check. False leaves the previous goal untouched."""
        try:
            goal = self.resolver.resolve(context)
        except GoalNotReady as e:
            self.logger.debug(f"Goal not ready: {e}")
            return False

        if self.gate.check_ready(self.ready_timeout) != Readiness.READY:
            return False

        self.goal = goal
        self.will_finish = bool(context.will_finish)
        return True
