"""
Lead sinks - where finished chat sessions go.

A lead is the contact details captured after the questionnaire plus the
answer record, copied verbatim. Sinks:
- InMemoryLeadSink: keeps leads in a list (development, tests)
- WebhookLeadSink: POSTs the lead as JSON to an HTTP endpoint
- SupabaseLeadSink: inserts into the Supabase "leads" table

The chat has already completed when a lead is handed over; a sink failure
is reported to the caller and never rolls the session back.
"""

import logging
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import requests
from supabase import Client, create_client

from ..exceptions import InvalidContactError, LeadSinkError

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
_PHONE_RE = re.compile(r"^\+?[0-9\s\-()]{8,}$")

# Postgres "insufficient_privilege", returned when row-level security blocks the insert
_RLS_DENIED_CODE = "42501"


class LeadStatus(str, Enum):
    """Pipeline status of a lead."""
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"
    LOST = "lost"


class SinkStatus(str, Enum):
    """Status of a lead sink."""
    AVAILABLE = "available"
    ERROR = "error"
    NOT_CONFIGURED = "not_configured"


@dataclass
class ContactDetails:
    """Contact details captured after the questionnaire."""
    name: str
    email: str
    phone: str

    def errors(self) -> Dict[str, str]:
        """Field -> message for every invalid field."""
        errors = {}
        if not (self.name or "").strip():
            errors["name"] = "Name is required"

        email = (self.email or "").strip()
        if not email:
            errors["email"] = "Email is required"
        elif not _EMAIL_RE.search(email):
            errors["email"] = "Please enter a valid email address"

        phone = (self.phone or "").strip()
        if not phone:
            errors["phone"] = "Phone number is required"
        elif not _PHONE_RE.match(phone):
            errors["phone"] = "Please enter a valid phone number"
        return errors

    def validate(self):
        errors = self.errors()
        if errors:
            raise InvalidContactError(errors)


@dataclass
class LeadRecord:
    """A lead ready to be persisted."""
    contact: ContactDetails
    answers: Dict[str, Any] = field(default_factory=dict)
    status: LeadStatus = LeadStatus.NEW

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.contact.name.strip(),
            "email": self.contact.email.strip(),
            "phone": self.contact.phone.strip(),
            "answers": {
                k: list(v) if isinstance(v, (list, tuple)) else v
                for k, v in self.answers.items()
            },
            "status": self.status.value,
        }


class LeadSink(ABC):
    """
    Abstract base class for lead sinks.

    save_lead() returns the stored row as a dict, or raises LeadSinkError.
    """

    name = "base"

    def __init__(self):
        self._status = SinkStatus.NOT_CONFIGURED

    @property
    def status(self) -> SinkStatus:
        return self._status

    def is_available(self) -> bool:
        return self._status == SinkStatus.AVAILABLE

    @abstractmethod
    def save_lead(self, record: LeadRecord) -> Dict[str, Any]:
        """Persist a lead."""
        pass


class InMemoryLeadSink(LeadSink):
    """Keeps leads in memory."""

    name = "memory"

    def __init__(self):
        super().__init__()
        self.leads: List[Dict[str, Any]] = []
        self._status = SinkStatus.AVAILABLE

    def save_lead(self, record: LeadRecord) -> Dict[str, Any]:
        row = record.to_dict()
        row["id"] = str(uuid.uuid4())
        row["created_at"] = datetime.now(timezone.utc).isoformat()
        self.leads.append(row)
        logger.info("Stored lead %s in memory (%d total)", row["id"], len(self.leads))
        return dict(row)


class WebhookLeadSink(LeadSink):
    """POSTs leads as JSON to a webhook."""

    name = "webhook"

    def __init__(self, url: Optional[str], timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        super().__init__()
        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()
        if url:
            self._status = SinkStatus.AVAILABLE

    def save_lead(self, record: LeadRecord) -> Dict[str, Any]:
        if not self.url:
            raise LeadSinkError("Webhook lead sink has no URL configured")

        payload = record.to_dict()
        try:
            response = self._session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            self._status = SinkStatus.ERROR
            logger.error("Lead webhook request failed: %s", e)
            raise LeadSinkError(f"Lead webhook request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            self._status = SinkStatus.ERROR
            logger.error("Lead webhook returned HTTP %s: %s", response.status_code, response.text[:200])
            raise LeadSinkError(f"Lead webhook returned HTTP {response.status_code}")

        self._status = SinkStatus.AVAILABLE
        logger.info("Lead for %s posted to webhook", payload["email"])
        try:
            body = response.json()
        except ValueError:
            body = None
        return body if isinstance(body, dict) else payload


class SupabaseLeadSink(LeadSink):
    """Inserts leads into a Supabase table."""

    name = "supabase"

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None,
                 table: str = "leads", client: Optional[Client] = None):
        super().__init__()
        self.url = url
        self.key = key
        self.table = table
        self._client = client
        if client is not None or (url and key):
            self._status = SinkStatus.AVAILABLE

    @property
    def client(self) -> Client:
        if self._client is None:
            if not self.url or not self.key:
                raise LeadSinkError("SUPABASE_URL and SUPABASE_KEY must be set for the Supabase lead sink")
            self._client = create_client(self.url, self.key)
        return self._client

    def save_lead(self, record: LeadRecord) -> Dict[str, Any]:
        payload = record.to_dict()
        try:
            result = self.client.table(self.table).insert([payload]).execute()
        except LeadSinkError:
            raise
        except Exception as e:
            self._status = SinkStatus.ERROR
            if getattr(e, "code", None) == _RLS_DENIED_CODE:
                logger.error("Supabase refused lead insert (row-level security): %s", e)
                raise LeadSinkError(
                    "Authorization error - check row-level security policies on the leads table"
                ) from e
            logger.error("Error creating lead in Supabase: %s", e)
            raise LeadSinkError(f"Could not store lead: {e}") from e

        rows = getattr(result, "data", None) or []
        if not rows:
            self._status = SinkStatus.ERROR
            raise LeadSinkError("Supabase returned no row for the inserted lead")

        self._status = SinkStatus.AVAILABLE
        logger.info("Lead %s stored in Supabase table '%s'", rows[0].get("id", "?"), self.table)
        return rows[0]


def create_lead_sink(config) -> LeadSink:
    """Create the lead sink selected by a ChatConfig."""
    if config.lead_sink == "webhook":
        return WebhookLeadSink(config.webhook_url, timeout=config.webhook_timeout)
    if config.lead_sink == "supabase":
        return SupabaseLeadSink(
            url=config.supabase_url,
            key=config.supabase_key,
            table=config.leads_table,
        )
    return InMemoryLeadSink()
