"""
Runtime configuration for the incorporation chat.

Values come from the environment, optionally seeded from a .env file in the
working directory (existing environment variables win).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

LEAD_SINK_CHOICES = ("memory", "webhook", "supabase")


@dataclass
class ChatConfig:
    """Configuration for the chat front ends and the lead sink."""
    # Which lead sink receives finished sessions
    lead_sink: str = "memory"

    # Webhook sink
    webhook_url: Optional[str] = None
    webhook_timeout: float = 10.0

    # Supabase sink
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    leads_table: str = "leads"

    # Cosmetic pause between an answer and the next question (presentation only)
    answer_delay_ms: int = 800

    log_level: str = "INFO"

    def __post_init__(self):
        self.lead_sink = (self.lead_sink or "memory").strip().lower()
        if self.lead_sink not in LEAD_SINK_CHOICES:
            raise ValueError(
                f"Unsupported lead sink '{self.lead_sink}'. "
                f"Choose one of: {', '.join(LEAD_SINK_CHOICES)}"
            )
        if self.answer_delay_ms < 0:
            raise ValueError("answer_delay_ms must be >= 0")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'")


def load_config(env_file: Optional[str] = None) -> ChatConfig:
    """Build a ChatConfig from .env and the process environment."""
    load_dotenv(env_file, override=False)

    return ChatConfig(
        lead_sink=os.getenv("INCORPIFY_LEAD_SINK", "memory"),
        webhook_url=os.getenv("INCORPIFY_WEBHOOK_URL") or None,
        webhook_timeout=_float_env("INCORPIFY_WEBHOOK_TIMEOUT", 10.0),
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_key=os.getenv("SUPABASE_KEY") or None,
        leads_table=os.getenv("INCORPIFY_LEADS_TABLE", "leads"),
        answer_delay_ms=_int_env("INCORPIFY_ANSWER_DELAY_MS", 800),
        log_level=os.getenv("INCORPIFY_LOG_LEVEL", "INFO"),
    )
