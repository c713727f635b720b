"""
TrailGate - Progression and monetized gating for creator trails.

Learners unlock steps by watching videos or by paying to skip ahead;
completing a trail leads to an optional tip for the creator.
"""

__version__ = "0.1.0"
