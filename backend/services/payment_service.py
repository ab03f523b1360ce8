"""
Service paiement : création de PaymentIntent Stripe et lecture du registre.
Docs : https://docs.stripe.com/api/payment_intents/create
"""
import logging
import uuid
from typing import Optional

import httpx

from config import settings
from database import db

logger = logging.getLogger(__name__)


def _headers() -> dict:
    return {"Authorization": f"Bearer {settings.STRIPE_SECRET_KEY}"}


async def create_payment_intent(amount_in_cents: int, currency: Optional[str] = None) -> dict:
    """
    Crée un PaymentIntent carte et retourne son client_secret pour le front.
    Sans clé configurée, le paiement est simulé.
    """
    currency = currency or settings.PAYMENT_CURRENCY

    if not settings.STRIPE_SECRET_KEY:
        logger.warning("Stripe non configuré, paiement simulé")
        intent_id = f"pi_sim_{uuid.uuid4().hex[:16]}"
        return {
            "success": True,
            "client_secret": f"{intent_id}_secret_{uuid.uuid4().hex[:16]}",
            "simulated": True,
        }

    # Stripe attend du form-urlencoded, pas du JSON
    payload = {
        "amount": amount_in_cents,
        "currency": currency,
        "payment_method_types[]": "card",
    }

    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            resp = await client.post(
                f"{settings.STRIPE_API_URL}/payment_intents",
                data=payload,
                headers=_headers(),
            )
            data = resp.json()
            if resp.status_code == 200 and data.get("client_secret"):
                return {"success": True, "client_secret": data["client_secret"]}
            error = (data.get("error") or {}).get("message")
            logger.error(f"Stripe erreur ({resp.status_code}) : {error}")
            return {"success": False, "error": error}
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Erreur réseau Stripe : {e}")
        return {"success": False, "error": str(e)}


async def list_payments(email: Optional[str] = None) -> list:
    """Historique des paiements, le plus récent d'abord."""
    query = {"email": email.lower()} if email else {}
    cursor = db.payments.find(query, {"_id": 0}).sort("paid_at", -1)
    return await cursor.to_list(length=None)
