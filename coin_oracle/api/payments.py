"""Payments API: Stripe Checkout, payment confirmation and webhook."""

from __future__ import annotations

import logging
from typing import Annotated

import stripe
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from coin_oracle.infra.auth import get_optional_user
from coin_oracle.infra.config import settings
from coin_oracle.models.flip import CamelModel, User
from coin_oracle.modules.payment.stripe_client import (
    StripeClient,
    WebhookSignatureError,
    construct_event,
    get_stripe_client,
)
from coin_oracle.storage.base import Storage
from coin_oracle.storage.manager import get_storage

logger = logging.getLogger("coin-oracle.payments")

router = APIRouter(prefix="/api", tags=["payments"])

StorageDep = Annotated[Storage, Depends(get_storage)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def require_stripe() -> StripeClient:
    if not settings.stripe_secret_key:
        raise HTTPException(status_code=503, detail="Payments are not configured")
    return get_stripe_client()


def resolve_payer(user: User | None, user_id: str | None) -> str:
    """Authenticated users pay as themselves; anonymous clients name their own id."""
    if user is not None:
        return str(user.id)
    return user_id or "default"


# --- Request schemas ---


class CheckoutRequest(CamelModel):
    amount: float | None = None
    currency: str | None = None
    success_url: str | None = None
    cancel_url: str | None = None
    user_id: str | None = None


class PaymentSuccessRequest(CamelModel):
    session_id: str | None = None
    user_id: str | None = None


# --- Endpoints ---


@router.post("/create-checkout-session")
async def create_checkout_session(
    body: CheckoutRequest,
    request: Request,
    user: OptionalUserDep,
    stripe_client: Annotated[StripeClient, Depends(require_stripe)],
) -> dict:
    origin = request.headers.get("origin") or settings.default_origin
    base_url = origin if origin.startswith("http") else f"https://{origin}"
    payer_id = resolve_payer(user, body.user_id)

    try:
        session = await stripe_client.create_checkout_session(
            amount=body.amount if body.amount is not None else settings.flip_price,
            currency=body.currency or settings.flip_currency,
            client_reference_id=payer_id,
            success_url=body.success_url
            or f"{base_url}/?session_id={{CHECKOUT_SESSION_ID}}&payment=success",
            cancel_url=body.cancel_url or f"{base_url}/?payment=cancelled",
        )
    except stripe.StripeError:
        logger.exception("Stripe checkout session creation failed")
        raise HTTPException(status_code=502, detail="Failed to create checkout session")
    return {"sessionId": session["id"]}


@router.get("/check-payment")
async def check_payment(
    response: Response,
    storage: StorageDep,
    user: OptionalUserDep,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> dict:
    payer_id = resolve_payer(user, user_id)
    try:
        has_paid = await storage.get_payment_status(payer_id)
    except Exception:
        logger.exception("Failed to check payment status")
        raise HTTPException(status_code=500, detail="Failed to check payment status")
    response.headers["Cache-Control"] = "private, no-cache"
    return {"hasPaid": has_paid}


@router.post("/payment-success")
async def payment_success(
    body: PaymentSuccessRequest,
    storage: StorageDep,
    user: OptionalUserDep,
    stripe_client: Annotated[StripeClient, Depends(require_stripe)],
) -> dict:
    """Confirm a completed checkout and mark the payer as paid."""
    if not body.session_id or (user is None and not body.user_id):
        raise HTTPException(status_code=400, detail="Session ID and User ID required")
    payer_id = resolve_payer(user, body.user_id)

    try:
        session = await stripe_client.retrieve_checkout_session(body.session_id)
    except stripe.StripeError:
        logger.exception("Stripe session lookup failed for %s", body.session_id)
        raise HTTPException(status_code=502, detail="Failed to verify payment")

    if session.get("payment_status") != "paid" or session.get("client_reference_id") != payer_id:
        raise HTTPException(status_code=400, detail="Payment verification failed")

    await storage.set_payment_status(payer_id, True)
    logger.info("Payment confirmed for user %s", payer_id)
    return {"success": True, "message": "Payment status updated"}


@router.post("/stripe-webhook")
async def stripe_webhook(request: Request, storage: StorageDep) -> dict:
    if not settings.stripe_webhook_secret:
        raise HTTPException(status_code=503, detail="Payments are not configured")
    payload = await request.body()
    try:
        event = construct_event(
            payload,
            request.headers.get("stripe-signature"),
            settings.stripe_webhook_secret,
        )
    except WebhookSignatureError as exc:
        logger.warning("Rejected Stripe webhook: %s", exc)
        raise HTTPException(status_code=400, detail="Webhook error")

    if event.get("type") == "checkout.session.completed":
        session = event.get("data", {}).get("object", {})
        payer_id = session.get("client_reference_id") or "default"
        await storage.set_payment_status(payer_id, True)
        logger.info("Webhook marked user %s as paid", payer_id)
    return {"received": True}
