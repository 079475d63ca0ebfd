"""
Lead hand-off for finished chat sessions.
"""

from .sink import (
    ContactDetails,
    LeadRecord,
    LeadStatus,
    LeadSink,
    SinkStatus,
    InMemoryLeadSink,
    WebhookLeadSink,
    SupabaseLeadSink,
    create_lead_sink,
)

__all__ = [
    "ContactDetails",
    "LeadRecord",
    "LeadStatus",
    "LeadSink",
    "SinkStatus",
    "InMemoryLeadSink",
    "WebhookLeadSink",
    "SupabaseLeadSink",
    "create_lead_sink",
]
