"""
    Sense module - detections and the IsInFront bearing condition
"""

from .bearing_gate import BearingGate, Direction, DirectionalVerdict, evaluate
from .detection import DetectionRecord, DetectionTemplate, Perception
from .is_in_front import IsInFront

__all__ = [
    'BearingGate', 'Direction', 'DirectionalVerdict', 'evaluate',
    'DetectionRecord', 'DetectionTemplate', 'Perception',
    'IsInFront',
]
