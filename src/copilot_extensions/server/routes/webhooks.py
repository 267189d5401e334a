"""GitHub App webhook endpoint.

POST /events – log the delivery and acknowledge it.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post("/events")
async def events(request: Request):
    body = await request.body()
    logger.info(
        "Received webhook event",
        extra={
            "event": request.headers.get("X-GitHub-Event", ""),
            "delivery": request.headers.get("X-GitHub-Delivery", ""),
            "body": body.decode("utf-8", errors="replace"),
        },
    )
    return PlainTextResponse("OK")
