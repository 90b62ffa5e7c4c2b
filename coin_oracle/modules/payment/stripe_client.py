"""Stripe Checkout sessions and webhook verification on top of the Stripe SDK."""

from __future__ import annotations

import asyncio

import stripe

from coin_oracle.infra.config import settings

WEBHOOK_TOLERANCE_SECONDS = 300
PRODUCT_NAME = "Coin Flip Oracle - Premium Access"


class WebhookSignatureError(ValueError):
    """The Stripe-Signature header is missing, malformed, stale or wrong."""


class StripeClient:
    """Checkout calls scoped to one secret key.

    The SDK is synchronous, so calls run in a worker thread.
    """

    def __init__(self, secret_key: str) -> None:
        self.secret_key = secret_key

    async def create_checkout_session(
        self,
        amount: float,
        currency: str,
        client_reference_id: str | None,
        success_url: str,
        cancel_url: str,
    ) -> stripe.checkout.Session:
        """Create a one-off card payment session. ``amount`` is in major units."""
        params: dict = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [{
                "quantity": 1,
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": PRODUCT_NAME},
                    "unit_amount": round(amount * 100),
                },
            }],
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if client_reference_id:
            params["client_reference_id"] = client_reference_id
        return await asyncio.to_thread(
            stripe.checkout.Session.create, api_key=self.secret_key, **params
        )

    async def retrieve_checkout_session(self, session_id: str) -> stripe.checkout.Session:
        return await asyncio.to_thread(
            stripe.checkout.Session.retrieve, session_id, api_key=self.secret_key
        )


def construct_event(
    payload: bytes,
    sig_header: str | None,
    secret: str,
    tolerance: int = WEBHOOK_TOLERANCE_SECONDS,
) -> stripe.Event:
    """Verify a webhook delivery and return the decoded event."""
    if not sig_header:
        raise WebhookSignatureError("Missing Stripe-Signature header")
    try:
        return stripe.Webhook.construct_event(payload, sig_header, secret, tolerance=tolerance)
    except stripe.SignatureVerificationError as exc:
        raise WebhookSignatureError(str(exc)) from exc
    except ValueError as exc:
        raise WebhookSignatureError("Payload is not valid JSON") from exc


def get_stripe_client() -> StripeClient:
    return StripeClient(settings.stripe_secret_key)
