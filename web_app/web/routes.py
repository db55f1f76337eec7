"""Web interface routes implementation."""

from fastapi import APIRouter, Request, Form, Depends, status
from fastapi.responses import HTMLResponse, RedirectResponse, PlainTextResponse

from shortener.errors import ValidationError, NotFound, StoreError, GenerationError
from shortener.common.headers import resolve_public_host
from shortener.common.validators import is_valid_url
from shortener.common.url_builder import build_home_redirect
from ..context import AppContext, get_context

router = APIRouter()

NOT_FOUND_MESSAGE = "Short URL not found"


def public_host(request: Request, context: AppContext) -> str:
    """Host set by ForwardedHeadersMiddleware, resolved here when the middleware is absent."""
    host = getattr(request.state, "public_host", None)
    if host:
        return host
    return resolve_public_host(dict(request.headers), context.config.public_host)


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def homepage(
    request: Request,
    short: str = "",
    error: str = "",
    context: AppContext = Depends(get_context),
):
    """Serve the landing page, showing a freshly created short URL or an error."""
    # short ends up in an href; anything but an http(s) URL is dropped
    if short and not is_valid_url(short)[0]:
        context.logger.warning(f"Ignoring invalid short URL parameter: {short!r}")
        short = ""

    return context.templates.TemplateResponse(
        request,
        "index.html",
        {"short_url": short, "error": error},
    )


@router.post("/app/shorten", include_in_schema=False)
async def shorten_url_web(
    request: Request,
    url: str = Form(""),
    context: AppContext = Depends(get_context),
):
    """Handle form submission, then send the browser back to the landing page."""
    try:
        short_url = await context.service.shorten(url, public_host(request, context))
    except ValidationError:
        return PlainTextResponse("Invalid URL", status_code=status.HTTP_400_BAD_REQUEST)
    except GenerationError:
        return PlainTextResponse(
            "Error generating temporary code",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    except StoreError:
        return PlainTextResponse("Database error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return RedirectResponse(
        url=build_home_redirect(short_url=short_url),
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(short_code: str, context: AppContext = Depends(get_context)):
    """Redirect to the original URL."""
    try:
        original_url = await context.service.resolve(short_code)
    except NotFound:
        return RedirectResponse(
            url=build_home_redirect(error=NOT_FOUND_MESSAGE),
            status_code=status.HTTP_303_SEE_OTHER,
        )
    except StoreError:
        return PlainTextResponse("Database error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return RedirectResponse(url=original_url, status_code=status.HTTP_301_MOVED_PERMANENTLY)
