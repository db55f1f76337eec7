"""API routes implementation."""

from fastapi import APIRouter, Request, HTTPException, Depends, status
from fastapi.responses import JSONResponse
from datetime import datetime, timezone

from .schemas import (
    ShortenRequest,
    ShortenResponse,
    URLInfoResponse,
    HealthResponse,
    ErrorResponse,
    StatisticsResponse,
)
from shortener.errors import ValidationError, NotFound, StoreError, GenerationError
from ..context import AppContext, get_context
from ..web.routes import public_host

router = APIRouter()


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URL",
    description="Shorten a URL. Shortening the same URL again returns the same code.",
)
async def shorten_url(
    request: Request,
    body: ShortenRequest,
    context: AppContext = Depends(get_context),
):
    """Create a shortened URL."""
    try:
        short_code = await context.service.create_short_code(body.url)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except (StoreError, GenerationError):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    short_url = context.service.short_url_for(short_code, public_host(request, context))

    return ShortenResponse(
        short_code=short_code,
        short_url=short_url,
        original_url=body.url,
    )


@router.get(
    "/urls/{short_code}",
    response_model=URLInfoResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Get URL information",
)
async def get_url_info(short_code: str, context: AppContext = Depends(get_context)):
    """Get information about a shortened URL."""
    try:
        mapping = await context.service.get_url_info(short_code)
    except NotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{short_code}' not found",
        )
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    return URLInfoResponse(**mapping.to_dict())


@router.get(
    "/stats",
    response_model=StatisticsResponse,
    summary="Get statistics",
)
async def get_statistics(context: AppContext = Depends(get_context)):
    """Get service statistics."""
    try:
        stats = await context.service.get_statistics()
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    return StatisticsResponse(**stats)


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Service unhealthy"}},
    summary="Health check",
)
async def health_check(context: AppContext = Depends(get_context)):
    """Health check endpoint for load balancers and monitoring."""
    health = await context.service.health_check()

    response = HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )

    if not health["overall"]:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(mode="json"),
        )
    return response
