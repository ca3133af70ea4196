"""
Plan module - navigation decision node for the behaviour tree.
"""

# Public API
from .goal_resolver import GoalContext, GoalResolver, GoalSpec, Pose, Transform
from .goal_lifecycle import GoalLifecycle, LifecycleState
from .navigate_to import NavigateTo

__all__ = [
    "GoalContext",
    "GoalResolver",
    "GoalSpec",
    "Pose",
    "Transform",
    "GoalLifecycle",
    "LifecycleState",
    "NavigateTo",
]
