"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Rate limiting
- Translating service exceptions to HTTP responses
- Delegating to service layer

Routes:
- POST   /api/bind        create or update a binding
- GET    /api/url/{id}    inspect a binding (does not count an access)
- DELETE /api/url/{id}    delete a binding
- POST   /api/import      bulk import from a CSV request body
- GET    /api/stats       lifecycle event statistics
- GET    /{id}            redirect
"""

from fastapi import APIRouter, Request, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink.api.schemas import (
    BindRequest,
    BindResponse,
    BindingInfoResponse,
    ImportResponse,
)
from shortlink.core.exceptions import (
    DatabaseError,
    DuplicateIDError,
    InvalidIdentifierError,
    InvalidPolicyError,
    InvalidURLError,
    LifecycleError,
    NotFoundError,
)
from shortlink.core.policy import BindingPolicy
from shortlink.core.rate_limit import limiter, RATE_LIMITS
from shortlink.core.setting import settings
from shortlink.core.sink_manager import get_event_sink
from shortlink.db.repository import SQLBindingStore
from shortlink.db.session import get_session
from shortlink.services.binding_service import BindingService
from shortlink.services.import_service import ImportService
from shortlink.services.redirect_service import RedirectService


router = APIRouter()


def get_policy() -> BindingPolicy:
    """Global binding policy from settings."""
    return BindingPolicy.from_settings(settings)


def get_binding_service(
    session: AsyncSession = Depends(get_session),
    policy: BindingPolicy = Depends(get_policy)
) -> BindingService:
    return BindingService(SQLBindingStore(session), policy, events=get_event_sink())


def get_redirect_service(
    session: AsyncSession = Depends(get_session),
    policy: BindingPolicy = Depends(get_policy)
) -> RedirectService:
    return RedirectService(SQLBindingStore(session), policy, events=get_event_sink())


def not_found(identifier: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"ID '{identifier}' not found"
    )


@router.post(
    "/api/bind",
    response_model=BindResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Bind a URL to an id",
    description="Binds a target URL to a custom or generated id, with optional expiration and usage limits"
)
@limiter.limit(RATE_LIMITS["bind"])
async def bind_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: BindRequest,
    binding_service: BindingService = Depends(get_binding_service)
) -> BindResponse:
    """
    Create a binding, or update it if the custom id already exists.

    Returns:
        BindResponse with the id and the complete short URL
    """
    try:
        identifier = await binding_service.bind(body)
    except (InvalidURLError, InvalidIdentifierError, InvalidPolicyError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except DuplicateIDError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except DatabaseError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return BindResponse(
        id=identifier,
        short_url=f"{settings.BASE_URL}/{identifier}"
    )


@router.get(
    "/api/url/{identifier}",
    response_model=BindingInfoResponse,
    summary="Inspect a binding",
    description="Returns the stored binding without counting an access"
)
@limiter.limit(RATE_LIMITS["admin"])
async def get_binding(
    identifier: str,
    request: Request,
    binding_service: BindingService = Depends(get_binding_service)
) -> BindingInfoResponse:
    try:
        binding = await binding_service.peek(identifier)
    except NotFoundError:
        raise not_found(identifier)
    return BindingInfoResponse.model_validate(binding, from_attributes=True)


@router.delete(
    "/api/url/{identifier}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a binding"
)
@limiter.limit(RATE_LIMITS["admin"])
async def delete_binding(
    identifier: str,
    request: Request,
    binding_service: BindingService = Depends(get_binding_service)
) -> Response:
    try:
        await binding_service.unbind(identifier)
    except NotFoundError:
        raise not_found(identifier)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/api/import",
    response_model=ImportResponse,
    summary="Bulk import bindings",
    description="Imports bindings from a CSV request body: url,id,ttl,max_requests,expire_on,expired_url,exhausted_url"
)
@limiter.limit(RATE_LIMITS["import"])
async def import_bindings(
    request: Request,
    binding_service: BindingService = Depends(get_binding_service)
):
    """
    Import bindings from CSV.

    Rows are committed one by one; the import stops at the first bad row.

    Returns:
        ImportResponse with the imported row count (HTTP 400 with the count
        and the error if the import stopped early)
    """
    raw = await request.body()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="CSV body must be UTF-8 encoded"
        )

    result = await ImportService(binding_service).import_csv(text)
    response = ImportResponse(
        rows=result.rows,
        detail=None if result.ok else str(result.error)
    )
    if not result.ok:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=response.model_dump()
        )
    return response


@router.get(
    "/api/stats",
    summary="Lifecycle event statistics"
)
@limiter.limit(RATE_LIMITS["admin"])
async def get_stats(request: Request) -> dict:
    sink = get_event_sink()
    if sink is None:
        return {"is_running": False}
    return sink.get_stats()


@router.get(
    "/{identifier}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to target URL",
    description="Redirects to the bound URL, or to the fallback URL of an expired or exhausted binding"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def redirect_to_url(
    identifier: str,
    request: Request,
    redirect_service: RedirectService = Depends(get_redirect_service)
) -> RedirectResponse:
    """
    Redirect to the target URL for a given id.

    Raises:
        HTTPException 404: If the id is not found
        HTTPException 410: If the binding expired or is exhausted and there
            is no fallback URL
        HTTPException 429: If rate limit exceeded
    """
    try:
        target_url = await redirect_service.resolve_redirect(identifier)
    except NotFoundError:
        raise not_found(identifier)
    except LifecycleError as e:
        if not e.redirect_url:
            raise HTTPException(
                status_code=status.HTTP_410_GONE,
                detail=str(e)
            )
        target_url = e.redirect_url

    return RedirectResponse(
        url=target_url,
        status_code=status.HTTP_302_FOUND
    )
