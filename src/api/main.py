"""
Alert Bridge - Webhook API Server

FastAPI application receiving Red Canary and Sentinel webhooks and
forwarding them to TheHive as normalized alerts.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException
from pydantic import ValidationError

from src.agents import redcanary, routing, sentinel
from src.config import get_settings
from src.models.agent_io import AlertOutput, RedCanaryInput, SentinelInput, WebhookInput
from src.models.alert import AlertSource

# Configure logging
logging.basicConfig(level=get_settings().log_level.upper())
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Alert Bridge API",
    description="Normalizes security webhooks into TheHive alerts",
    version="1.0.0"
)


# ============================================================================
# Helper Functions
# ============================================================================

def _created_response(output: AlertOutput) -> Dict[str, Any]:
    return {
        "source": output.alert.source,
        "source_ref": output.alert.source_ref,
        "observables": len(output.alert.observables),
        "result": output.result,
    }


def _rejected(source: str, error: ValueError) -> HTTPException:
    """Payload presence-check failure → 422. Handlers re-raise ValidationError first."""
    logger.warning(f"Rejected {source} webhook: {error}")
    return HTTPException(status_code=422, detail=str(error))


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check."""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "Alert Bridge API",
        "thehive_configured": bool(settings.thehive_url and settings.thehive_api_key),
    }


@app.post("/api/v1/webhooks/redcanary")
async def redcanary_webhook(payload: Dict[str, Any] = Body(...)):
    """Create a TheHive alert from a Red Canary detection."""
    try:
        output = await redcanary.run(RedCanaryInput(raw_payload=payload))
    except ValidationError:
        raise
    except ValueError as e:
        raise _rejected("Red Canary", e)
    return _created_response(output)


@app.post("/api/v1/webhooks/sentinel")
async def sentinel_webhook(payload: Dict[str, Any] = Body(...)):
    """Create a TheHive alert from a Sentinel incident."""
    try:
        output = await sentinel.run(SentinelInput(raw_payload=payload))
    except ValidationError:
        raise
    except ValueError as e:
        raise _rejected("Sentinel", e)
    return _created_response(output)


@app.post("/api/v1/webhooks")
async def generic_webhook(
    payload: Dict[str, Any] = Body(...),
    source: Optional[AlertSource] = None,
):
    """Create a TheHive alert.

    The source comes from the ?source= query parameter when given,
    otherwise it is detected from the payload shape.
    """
    try:
        output = await routing.run(WebhookInput(raw_payload=payload, source_hint=source))
    except ValidationError:
        raise
    except ValueError as e:
        raise _rejected("generic", e)
    return _created_response(output)


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
