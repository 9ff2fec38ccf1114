"""Shared fixtures: a roster, request contexts and an in-memory booking provider."""

import json
import re
from typing import Any, Dict, List, Optional

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from cal_assistant.booking.client import BookingProviderClient
from cal_assistant.booking.email_client import SendGridEmailClient
from cal_assistant.config.config_schema import AppConfig, EmailConfig, LLMConfig, OllamaConfig
from cal_assistant.context.models import ProviderCredentials, RequestContext
from cal_assistant.identity import UserRecord, extract_references
from cal_assistant.llm.base import BaseLLM, LLMResponse

API_KEY = "cal_live_0123456789abcdef"

BOOKING_PATH = re.compile(r"/bookings/(?P<id>[^/]+)(?P<cancel>/cancel)?$")


class FakeProvider:
    """Booking provider and SendGrid endpoint backed by dictionaries."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.busy: List[Dict[str, str]] = []
        self.date_ranges: List[Dict[str, str]] = []
        self.bookings: Dict[str, Dict[str, Any]] = {}
        self.sent_emails: List[Dict[str, Any]] = []
        self.create_status = 200
        self.email_status = 202
        self.next_id = 100

    @property
    def provider_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == "api.cal.com"]

    def add_booking(self, booking_id: str, start: str, end: str, name: str = "Bob", email: str = "bob@example.com", title: str = "Sync"):
        self.bookings[booking_id] = {
            "id": booking_id,
            "title": title,
            "startTime": start,
            "endTime": end,
            "attendees": [{"name": name, "email": email}],
            "status": "ACCEPTED",
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host == "api.sendgrid.com":
            self.sent_emails.append(json.loads(request.content))
            return httpx.Response(self.email_status, text="")

        path = request.url.path
        if path.endswith("/availability"):
            return httpx.Response(
                200,
                json={"busy": self.busy, "dateRanges": self.date_ranges, "timeZone": "America/New_York"},
            )

        if path.endswith("/bookings"):
            if request.method == "GET":
                return httpx.Response(200, json={"bookings": list(self.bookings.values())})
            if self.create_status != 200:
                return httpx.Response(self.create_status, json={"message": "slot taken"})
            body = json.loads(request.content)
            booking_id = str(self.next_id)
            self.next_id += 1
            self.bookings[booking_id] = {
                "id": int(booking_id),
                "title": body.get("title", "Meeting"),
                "startTime": body["start"],
                "endTime": body["end"],
                "attendees": [body["responses"]],
                "status": "ACCEPTED",
            }
            return httpx.Response(200, json=self.bookings[booking_id])

        match = BOOKING_PATH.search(path)
        if match:
            booking_id = match.group("id")
            booking = self.bookings.get(booking_id)
            if match.group("cancel"):
                if booking is None:
                    return httpx.Response(404, json={"message": "not found"})
                del self.bookings[booking_id]
                return httpx.Response(200, json={"message": "Booking successfully cancelled."})
            if booking is None:
                return httpx.Response(404, json={"message": "not found"})
            if request.method == "PATCH":
                body = json.loads(request.content)
                booking.update({k: body[k] for k in ("startTime", "endTime") if k in body})
                if "responses" in body:
                    booking["attendees"] = [{**booking["attendees"][0], **body["responses"]}]
            return httpx.Response(200, json={"booking": booking})

        return httpx.Response(404, json={"message": f"unknown path {path}"})


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def transport(provider):
    return httpx.MockTransport(provider.handler)


@pytest.fixture
def booking_client(transport):
    return BookingProviderClient(api_key=API_KEY, user_id=1, transport=transport)


@pytest.fixture
def email_client(transport):
    return SendGridEmailClient(api_key="SG.test", sender_email="assistant@cal.ai", transport=transport)


@pytest.fixture
def alice():
    return UserRecord(id=1, username="alice", email="alice@example.com", timeZone="America/New_York", name="Alice")


@pytest.fixture
def onboarding():
    return UserRecord(id=2, username="onboarding", email="onboarding@gmail.com", timeZone="America/New_York", name="Onboarding")


@pytest.fixture
def bob():
    return UserRecord(id=3, username="bob", email="bob@example.com", timeZone="Europe/Berlin", name="Bob")


@pytest.fixture
def users(onboarding, bob):
    return [onboarding, bob]


@pytest.fixture
def make_context(alice, users):
    """Context for a message sent by Alice."""

    def _make(message: str = "", references: Optional[list] = None) -> RequestContext:
        if references is None:
            references = extract_references(message, [alice, *users], alice.email)
        return RequestContext(
            caller=alice,
            credentials=ProviderCredentials(api_key=API_KEY, user_id=1),
            references=references,
            users=users,
            sender_email=alice.email,
        )

    return _make


@pytest.fixture
def app_config():
    return AppConfig(
        llm=LLMConfig(provider="ollama", ollama=OllamaConfig()),
        email=EmailConfig(api_key="SG.test"),
    )


@pytest.fixture
def mock_llm():
    llm = MagicMock(spec=BaseLLM)
    llm.generate = AsyncMock(return_value=LLMResponse(text="Hello!"))
    llm.get_model_name = MagicMock(return_value="test-model")
    return llm
