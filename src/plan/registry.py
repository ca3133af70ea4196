"""
    Node table - the decision node types this package provides

    Node types are looked up in a static table and built from injected
    collaborators, nothing is discovered at runtime.
"""

from dataclasses import dataclass, field

import py_trees
from py_trees.common import Status
from py_trees.composites import Selector, Sequence

from sense.is_in_front import IsInFront

from .exceptions import UnknownNodeType
from .navigate_to import NavigateTo
from .truncation import TruncatedPolicyTemplate


@dataclass
class Collaborators:
    """Capabilities injected into every node"""
    frame_lookup: object
    truncation_service: object
    navigator: object
    perception: object
    policy_template: TruncatedPolicyTemplate = field(default_factory=TruncatedPolicyTemplate)


NODE_TYPES = {
    'NavigateTo': NavigateTo,
    'IsInFront': IsInFront,
}


def create_node(type_name, name, collaborators, **params):
    """
        Build one decision node.

        Args:
            type_name: key of NODE_TYPES
            name: behaviour name in the tree
            collaborators: Collaborators
            params: node specific configuration (namespace, confidence, ...)
    """
    try:
        node_type = NODE_TYPES[type_name]
    except KeyError:
        raise UnknownNodeType(f"Unknown node type: {type_name}") from None
    return node_type.from_collaborators(name, collaborators, **params)


class TurnTowardsEntity(py_trees.behaviour.Behaviour):
    """
        Turns the robot the way IsInFront asked (via plan_action).
        Always RUNNING: IsInFront decides when to stop.
    """

    ACTIONS = {1: 'TURN_LEFT', -1: 'TURN_RIGHT'}

    def __init__(self, name="TurnTowardsEntity"):
        super().__init__(name=name)
        self.bb = self.attach_blackboard_client(name=self.name)
        self.bb.register_key("direction", access=py_trees.common.Access.READ)
        self.bb.register_key("plan_action", access=py_trees.common.Access.WRITE)

    def update(self):
        action = self.ACTIONS.get(self.bb.get("direction"), 'STOP')
        self.bb.set("plan_action", action)
        self.feedback_message = action
        return Status.RUNNING


def build_tree(collaborators, target="target", confidence=0.5, what="object", entity_to_identify="entity"):
    """
        Go to the goal on the blackboard, then turn until the entity is in front.

        Root (Sequence, memory)
        ├── NavigateTo
        └── AlignWithEntity (Selector)
            ├── IsInFront
            └── TurnTowardsEntity
    """
    navigate = create_node('NavigateTo', 'NavigateTo', collaborators)
    is_in_front = create_node(
        'IsInFront', 'IsInFront', collaborators,
        target=target, confidence=confidence, what=what, entity_to_identify=entity_to_identify,
    )

    align = Selector("AlignWithEntity", memory=False, children=[is_in_front, TurnTowardsEntity()])
    return Sequence("ApproachEntity", memory=True, children=[navigate, align])
