"""
Unit Tests for External API Clients

Tests the USDA search client over a mock transport and Twilio error
mapping with a stubbed REST client.
"""

import asyncio
from types import SimpleNamespace

import httpx
import pytest
from twilio.base.exceptions import TwilioRestException

from healthtracker.infrastructure.nutrition import UsdaApiError, UsdaClient
from healthtracker.infrastructure.sms import SmsDeliveryError, TwilioSmsGateway


class TestUsdaClient:

    def test_passes_search_parameters(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"totalHits": 0, "foods": []})

        client = UsdaClient(api_key="key-123", page_size=5, transport=httpx.MockTransport(handler))

        data = asyncio.run(client.search_foods("greek yogurt"))

        params = seen[0].url.params
        assert data == {"totalHits": 0, "foods": []}
        assert params["api_key"] == "key-123"
        assert params["query"] == "greek yogurt"
        assert params["pageSize"] == "5"

    @pytest.mark.parametrize("response", [
        httpx.Response(403, json={"error": "API_KEY_INVALID"}),
        httpx.Response(200, text="<html>not json</html>"),
    ])
    def test_failures_wrapped(self, response):
        client = UsdaClient(api_key="key", transport=httpx.MockTransport(lambda request: response))

        with pytest.raises(UsdaApiError, match="Failed to fetch data from USDA API"):
            asyncio.run(client.search_foods("oats"))


class _Messages:
    def __init__(self, error=None) -> None:
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(sid="SM42", status="queued", to=kwargs["to"], from_=kwargs["from_"])


class TestTwilioGateway:

    def test_send(self):
        messages = _Messages()
        gateway = TwilioSmsGateway(from_number="+15550000000", client=SimpleNamespace(messages=messages))

        receipt = asyncio.run(gateway.send("+15551234567", "Hydrate!"))

        assert receipt.sid == "SM42"
        assert receipt.from_number == "+15550000000"
        assert messages.calls == [{"body": "Hydrate!", "from_": "+15550000000", "to": "+15551234567"}]

    def test_rest_error_keeps_code(self):
        error = TwilioRestException(400, "/Messages", msg="Invalid 'To' Phone Number", code=21211)
        gateway = TwilioSmsGateway(from_number="+15550000000", client=SimpleNamespace(messages=_Messages(error)))

        with pytest.raises(SmsDeliveryError) as exc_info:
            asyncio.run(gateway.send("12", "hi"))

        assert exc_info.value.code == 21211
        assert exc_info.value.status == 400

    def test_unconfigured(self):
        gateway = TwilioSmsGateway()
        gateway._account_sid = ""

        with pytest.raises(SmsDeliveryError, match="not configured"):
            asyncio.run(gateway.send("+15551234567", "hi"))
