"""
Tests for contact validation, lead records and lead sinks.

Uses mocks for HTTP and Supabase; no network needed.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

sys.path.insert(0, str(Path(__file__).parent.parent))

from incorpify.config import ChatConfig
from incorpify.exceptions import InvalidContactError, LeadSinkError
from incorpify.leads.sink import (
    ContactDetails,
    InMemoryLeadSink,
    LeadRecord,
    LeadStatus,
    SinkStatus,
    SupabaseLeadSink,
    WebhookLeadSink,
    create_lead_sink,
)


def _record():
    return LeadRecord(
        contact=ContactDetails(name=" Omar Saleh ", email="omar@example.com", phone="+971 4 555 0101"),
        answers={"company_status": "new", "additional_services": ["all"]},
    )


class TestContactDetails:

    def test_valid(self):
        contact = ContactDetails(name="Omar", email="omar@example.com", phone="(04) 555-0101")
        assert contact.errors() == {}
        contact.validate()

    def test_required_fields(self):
        errors = ContactDetails(name=" ", email="", phone="").errors()
        assert errors == {
            "name": "Name is required",
            "email": "Email is required",
            "phone": "Phone number is required",
        }

    @pytest.mark.parametrize("email", ["omar", "omar@example", "@example"])
    def test_invalid_email(self, email):
        errors = ContactDetails(name="Omar", email=email, phone="+971501234567").errors()
        assert errors == {"email": "Please enter a valid email address"}

    @pytest.mark.parametrize("phone", ["1234567", "+971-50-ABC-4567", "phone"])
    def test_invalid_phone(self, phone):
        errors = ContactDetails(name="Omar", email="omar@example.com", phone=phone).errors()
        assert errors == {"phone": "Please enter a valid phone number"}

    def test_validate_raises(self):
        with pytest.raises(InvalidContactError) as exc:
            ContactDetails(name="", email="omar@example.com", phone="+971501234567").validate()
        assert exc.value.errors == {"name": "Name is required"}


class TestLeadRecord:

    def test_to_dict(self):
        data = _record().to_dict()
        assert data == {
            "name": "Omar Saleh",
            "email": "omar@example.com",
            "phone": "+971 4 555 0101",
            "answers": {"company_status": "new", "additional_services": ["all"]},
            "status": "new",
        }

    def test_status_override(self):
        record = _record()
        record.status = LeadStatus.QUALIFIED
        assert record.to_dict()["status"] == "qualified"


class TestInMemorySink:

    def test_save(self):
        sink = InMemoryLeadSink()
        row = sink.save_lead(_record())
        assert row["id"]
        assert row["created_at"]
        assert sink.leads[0]["email"] == "omar@example.com"
        assert sink.is_available()


class TestWebhookSink:

    def test_posts_json(self):
        session = MagicMock()
        session.post.return_value = MagicMock(status_code=201, json=lambda: {"id": "lead-1"})
        sink = WebhookLeadSink("https://hooks.example.com/leads", timeout=5, session=session)

        result = sink.save_lead(_record())

        assert result == {"id": "lead-1"}
        args, kwargs = session.post.call_args
        assert args[0] == "https://hooks.example.com/leads"
        assert kwargs["json"]["answers"]["additional_services"] == ["all"]
        assert kwargs["timeout"] == 5

    def test_non_json_response_returns_payload(self):
        response = MagicMock(status_code=204)
        response.json.side_effect = ValueError("no body")
        session = MagicMock()
        session.post.return_value = response
        sink = WebhookLeadSink("https://hooks.example.com/leads", session=session)

        assert sink.save_lead(_record())["email"] == "omar@example.com"

    def test_http_error(self):
        session = MagicMock()
        session.post.return_value = MagicMock(status_code=500, text="boom")
        sink = WebhookLeadSink("https://hooks.example.com/leads", session=session)

        with pytest.raises(LeadSinkError, match="500"):
            sink.save_lead(_record())
        assert sink.status == SinkStatus.ERROR

    def test_redirect_status_is_a_failure(self):
        session = MagicMock()
        session.post.return_value = MagicMock(status_code=302, text="moved")
        sink = WebhookLeadSink("https://hooks.example.com/leads", session=session)

        with pytest.raises(LeadSinkError, match="302"):
            sink.save_lead(_record())

    def test_network_error(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("unreachable")
        sink = WebhookLeadSink("https://hooks.example.com/leads", session=session)

        with pytest.raises(LeadSinkError, match="unreachable"):
            sink.save_lead(_record())

    def test_missing_url(self):
        sink = WebhookLeadSink(None, session=MagicMock())
        assert sink.status == SinkStatus.NOT_CONFIGURED
        with pytest.raises(LeadSinkError):
            sink.save_lead(_record())


class _RLSError(Exception):
    code = "42501"


class TestSupabaseSink:

    def _client(self, data=None, error=None):
        client = MagicMock()
        execute = client.table.return_value.insert.return_value.execute
        if error is not None:
            execute.side_effect = error
        else:
            execute.return_value = MagicMock(data=data)
        return client

    def test_insert(self):
        client = self._client(data=[{"id": "abc", "email": "omar@example.com"}])
        sink = SupabaseLeadSink(client=client, table="leads")

        row = sink.save_lead(_record())

        assert row["id"] == "abc"
        client.table.assert_called_once_with("leads")
        inserted = client.table.return_value.insert.call_args[0][0]
        assert inserted[0]["status"] == "new"
        assert inserted[0]["answers"]["company_status"] == "new"

    def test_rls_denied(self):
        sink = SupabaseLeadSink(client=self._client(error=_RLSError("permission denied")))
        with pytest.raises(LeadSinkError, match="Authorization"):
            sink.save_lead(_record())
        assert sink.status == SinkStatus.ERROR

    def test_other_error(self):
        sink = SupabaseLeadSink(client=self._client(error=RuntimeError("timeout")))
        with pytest.raises(LeadSinkError, match="timeout"):
            sink.save_lead(_record())

    def test_empty_result(self):
        sink = SupabaseLeadSink(client=self._client(data=[]))
        with pytest.raises(LeadSinkError):
            sink.save_lead(_record())

    def test_missing_credentials(self):
        sink = SupabaseLeadSink()
        assert sink.status == SinkStatus.NOT_CONFIGURED
        with pytest.raises(LeadSinkError, match="SUPABASE_URL"):
            sink.save_lead(_record())

    def test_client_created_lazily(self):
        with patch("incorpify.leads.sink.create_client") as create:
            create.return_value = self._client(data=[{"id": "1"}])
            sink = SupabaseLeadSink(url="https://x.supabase.co", key="secret")
            create.assert_not_called()
            sink.save_lead(_record())
            create.assert_called_once_with("https://x.supabase.co", "secret")


class TestCreateLeadSink:

    def test_memory_default(self):
        assert isinstance(create_lead_sink(ChatConfig()), InMemoryLeadSink)

    def test_webhook(self):
        sink = create_lead_sink(ChatConfig(lead_sink="webhook", webhook_url="https://h.example.com"))
        assert isinstance(sink, WebhookLeadSink)
        assert sink.url == "https://h.example.com"

    def test_supabase(self):
        sink = create_lead_sink(ChatConfig(lead_sink="supabase", supabase_url="u", supabase_key="k",
                                           leads_table="incorp_leads"))
        assert isinstance(sink, SupabaseLeadSink)
        assert sink.table == "incorp_leads"
