"""
Router payments : PaymentIntent Stripe + registre des paiements.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request

from config import settings
from core.dependencies import get_current_user, require_admin
from core.exceptions import internal_exception
from core.limiter import limiter
from models.payment import Payment, PaymentCreate, PaymentIntentRequest, PaymentIntentResponse
from services import payment_service
from services.parcel_service import record_payment

router = APIRouter()


@router.post("/create-payment-intent", response_model=PaymentIntentResponse, summary="Créer un PaymentIntent")
@limiter.limit(settings.PAYMENT_INTENT_RATE_LIMIT)
async def create_payment_intent(
    request: Request,
    body: PaymentIntentRequest,
    _user: dict = Depends(get_current_user),
):
    result = await payment_service.create_payment_intent(body.amountInCents)
    if not result.get("success"):
        raise internal_exception("Payment gateway error")
    return {"clientSecret": result["client_secret"]}


@router.post("/payments", summary="Enregistrer un paiement")
async def create_payment(
    body: PaymentCreate,
    _user: dict = Depends(get_current_user),
):
    return await record_payment(
        body.parcelId, body.email, body.amount, body.paymentMethod, body.transactionId,
    )


@router.get("/payments", response_model=list[Payment], summary="Tous les paiements (admin)")
async def list_payments(_admin=Depends(require_admin)):
    return await payment_service.list_payments()


@router.get("/payments/user", response_model=list[Payment], summary="Historique de paiement d'un utilisateur")
async def list_user_payments(
    email: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
):
    return await payment_service.list_payments(email or current_user["email"])
