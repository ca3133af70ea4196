"""
    Exceptions raised by the decision nodes.

    Only GoalNotReady and TransformError travel through a tick, and both are
    turned into RUNNING by the goal lifecycle. UnknownNodeType is raised while
    a tree is being built and is meant to stop the process.
"""


class DecisionNodeError(Exception):
    """Base class for decision node errors"""
    pass


class TransformError(DecisionNodeError):
    """The frame lookup could not provide the requested transform"""
    pass


class GoalNotReady(DecisionNodeError):
    """No goal could be resolved this tick, try again on the next one"""
    pass


class UnknownNodeType(DecisionNodeError):
    """Requested node type is not in the node table"""
    pass
