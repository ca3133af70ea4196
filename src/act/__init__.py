"""
    Act module - navigation action client contract and simulated collaborators
"""

from .navigator import NavigationOutcome, Navigator

__all__ = ['NavigationOutcome', 'Navigator']
