"""Tests for the fake payment intent service."""

import asyncio

import pytest
from conftest import RecordingPaymentIntentService

from errors import PaymentError
from payments import FakePaymentIntentService


class TestFakePaymentIntentService:
    def test_create_intent(self):
        intent = asyncio.run(FakePaymentIntentService().create_intent(515, "usd"))

        assert intent.amount == 515
        assert intent.currency == "usd"
        assert intent.id.startswith("pi_fake_")
        assert intent.client_secret.startswith(f"{intent.id}_secret_")

    def test_intents_are_distinct(self):
        service = FakePaymentIntentService()

        first = asyncio.run(service.create_intent(100, "usd"))
        second = asyncio.run(service.create_intent(100, "usd"))

        assert first.id != second.id
        assert first.client_secret != second.client_secret

    def test_keeps_no_state_between_calls(self):
        service = FakePaymentIntentService()

        for _ in range(50):
            intent = asyncio.run(service.create_intent(100, "usd"))
            asyncio.run(service.cancel_intent(intent.id))

        assert vars(service) == {}

    def test_each_request_gets_its_own_service(self):
        from main import get_payments

        first, second = get_payments(), get_payments()

        assert isinstance(first, FakePaymentIntentService)
        assert first is not second


class TestRecordingPaymentIntentService:
    def test_records_calls(self):
        service = RecordingPaymentIntentService()

        intent = asyncio.run(service.create_intent(515, "usd"))
        asyncio.run(service.cancel_intent(intent.id))

        assert service.calls == [
            {"method": "create_intent", "amount": 515, "currency": "usd"},
            {"method": "cancel_intent", "intent_id": intent.id},
        ]
        assert service.cancelled == [intent.id]

    def test_configured_failure(self):
        service = RecordingPaymentIntentService()
        service.configure(should_succeed=False, failure_reason="Declined")

        with pytest.raises(PaymentError, match="Declined") as exc:
            asyncio.run(service.create_intent(100, "usd"))

        assert exc.value.status_code == 502
