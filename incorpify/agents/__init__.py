"""
Agent modules for the incorporation chat.
"""

from .incorporation_chat_agent import IncorporationChatAgent, ChatPhase, SessionState

__all__ = ["IncorporationChatAgent", "ChatPhase", "SessionState"]
