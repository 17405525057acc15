"""
PayMongo webhook endpoint.

Endpoints:
    POST /api/webhook — PayMongo event callback

Responses:
    200 {"received": true}  — event handled (including ignored/no-op events)
    400 {"error": "..."}    — bad signature, missing secret, malformed payload, handler failure
    401 {"error": "..."}    — no Basic credentials
    405                     — any method other than POST

A non-2xx answer makes PayMongo redeliver the event later.
"""
import logging

from fastapi import APIRouter, Depends, Request

from config import settings
from deps import get_order_store, get_paymongo_client
from domain.constants import SIGNATURE_HEADER
from domain.errors import DomainError, WebhookError, WebhookProcessingError
from domain.responses import WebhookAck, WebhookErrorResponse
from middleware.auth import require_webhook_basic_auth
from services import signature_service, webhook_service
from services.order_store import OrderStore
from services.paymongo_client import PayMongoClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["webhook"])


@router.post(
    "/webhook",
    response_model=WebhookAck,
    responses={
        400: {"model": WebhookErrorResponse},
        401: {"model": WebhookErrorResponse},
    },
)
async def paymongo_webhook(
    request: Request,
    _auth: None = Depends(require_webhook_basic_auth),
    store: OrderStore = Depends(get_order_store),
    provider: PayMongoClient = Depends(get_paymongo_client),
):
    """
    Verify and apply a PayMongo event.

    The body is read raw: the signature covers the exact bytes sent.
    """
    body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    event = signature_service.construct_event(body, signature, settings.paymongo_webhook_secret)
    logger.info(f"Webhook event received: {event.type}")

    try:
        await webhook_service.dispatch_event(event, store, provider)
    except WebhookError:
        raise
    except DomainError as e:
        raise WebhookProcessingError(e.message) from e
    except Exception as e:
        # Never return raw exception details to the provider
        logger.error(f"Webhook handler failed for {event.type}: {e}", exc_info=True)
        raise WebhookProcessingError() from e

    return WebhookAck()
