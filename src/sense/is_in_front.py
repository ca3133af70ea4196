"""
    IsInFront - behaviour tree condition: is the target entity straight ahead?

    Config (construction time):
        target              blackboard key holding the DetectionTemplate
        confidence          minimum detection confidence
        what                'person' | 'object', detector stream to activate
        entity_to_identify  frame name published when the entity is in front

    Output port:
        direction           0 aligned, +1 turn left, -1 turn right
"""

import py_trees
from py_trees.common import Status

from .bearing_gate import BearingGate
from .detection import DetectionTemplate, select_detection_stream


class IsInFront(py_trees.behaviour.Behaviour):

    def __init__(self, perception, name="IsInFront", target="target", confidence=0.5,
                 what="object", entity_to_identify="", namespace=None):
        super().__init__(name=name)
        self.perception = perception
        self.gate = BearingGate(perception, logger=self.logger)
        self.target = target
        self.confidence = confidence
        self.what = what
        self.entity = entity_to_identify

        self.bb = self.attach_blackboard_client(name=self.name, namespace=namespace)
        self.bb.register_key(self.target, access=py_trees.common.Access.READ)
        self.bb.register_key("direction", access=py_trees.common.Access.WRITE)

    @classmethod
    def from_collaborators(cls, name, collaborators, **params):
        return cls(collaborators.perception, name=name, **params)

    def setup(self, **kwargs):
        self.stream = select_detection_stream(self.what, logger=self.logger)
        self.perception.activate(self.stream)

    def read_template(self):
        try:
            template = self.bb.get(self.target)
        except KeyError:
            return DetectionTemplate()
        if isinstance(template, str):
            return DetectionTemplate(label=template)
        return template or DetectionTemplate()

    def update(self):
        self.logger.debug("IsInFront ticked")
        verdict = self.gate.check(self.read_template(), self.confidence, self.entity)
        self.bb.set("direction", verdict.code)

        if verdict.passed:
            self.feedback_message = f"{self.entity or 'target'} in front"
            return Status.SUCCESS
        if verdict.detection is None:
            self.feedback_message = "No detections, turning right"
        else:
            self.feedback_message = f"Bearing {verdict.bearing:.1f} deg ({verdict.direction.name})"
        return Status.FAILURE
