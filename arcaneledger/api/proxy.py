"""
Pass-through proxies.

Forward browser requests to upstream APIs that do not send CORS headers.
No logic beyond URL rewriting and response headers.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from arcaneledger.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["proxy"])


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Per-request upstream client."""
    async with httpx.AsyncClient(
        timeout=settings.http_timeout, headers={"Accept": "application/json"}
    ) as client:
        yield client


HttpClient = Annotated[httpx.AsyncClient, Depends(get_http_client)]


@router.get("/spellbook")
async def spellbook(request: Request, client: HttpClient) -> Response:
    """
    Forward a combo database query.

    The query string is passed through unchanged; upstream status and body
    are relayed as they are.
    """
    query = request.url.query
    url = settings.spellbook_url + (f"?{query}" if query else "")
    try:
        upstream = await client.get(url)
    except httpx.HTTPError as e:
        logger.warning("Spellbook proxy request failed: %s", e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(e)}
        )

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type="application/json",
        headers={"Access-Control-Allow-Origin": "*"},
    )


@router.get("/ck-pricelist")
async def cardkingdom_pricelist(client: HttpClient) -> Response:
    """
    Relay the Card Kingdom price list.

    A non-success upstream status is returned with an error body; a success
    is cached at the edge for an hour.
    """
    try:
        upstream = await client.get(settings.cardkingdom_pricelist_url)
    except httpx.HTTPError as e:
        logger.warning("Price list proxy request failed: %s", e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(e)}
        )

    if not upstream.is_success:
        return JSONResponse(
            status_code=upstream.status_code,
            content={"error": f"Card Kingdom API returned {upstream.status_code}"},
        )

    return Response(
        content=upstream.content,
        status_code=status.HTTP_200_OK,
        media_type="application/json",
        headers={
            "Access-Control-Allow-Origin": "*",
            "Cache-Control": "s-maxage=3600, stale-while-revalidate",
        },
    )
