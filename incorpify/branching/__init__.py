"""
Branching logic for the incorporation chat.

This module provides:
- Flow selection at the company_status / incorporation_country branch points
- "Question N of M" progress across the branch
"""

from .flow_selector import FlowType, FlowOutcome, OutcomeKind, select_flow, is_branch_question
from .progress import Progress, NO_PROGRESS, calculate_progress

__all__ = [
    "FlowType",
    "FlowOutcome",
    "OutcomeKind",
    "select_flow",
    "is_branch_question",
    "Progress",
    "NO_PROGRESS",
    "calculate_progress",
]
