"""
Incorpify incorporation chat.

Branching questionnaire engine behind the incorporation chat, plus the
lead hand-off and the web/terminal front ends that drive it.
"""

__version__ = "0.1.0"
