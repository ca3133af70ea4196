"""
    Navigator - action client contract used by NavigateTo

    Outcomes are not pushed through callbacks: the lifecycle polls the
    navigator once per tick and gets either None (goal still running) or the
    tagged terminal outcome of the outstanding goal.
"""

from abc import ABC, abstractmethod
from enum import Enum


class NavigationOutcome(Enum):
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


class Navigator(ABC):
    """Action client collaborator (Nav2 NavigateToPose or a simulation)"""

    @abstractmethod
    def send(self, goal):
        """Dispatch a new goal, nothing may be outstanding"""
        pass

    @abstractmethod
    def update_goal(self, goal):
        """Replace the current goal without a cancel/resend cycle"""
        pass

    @abstractmethod
    def cancel(self):
        """Cancel the outstanding goal, its outcome is reported as CANCELLED"""
        pass

    @abstractmethod
    def poll(self):
        """
            Returns:
                NavigationOutcome of the outstanding goal, or None while it runs
        """
        pass
