from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from ..domain.errors import DispatchNotFound, DispatchServerError
from ..domain.routes import SUPPORTED_METHODS
from ..service.dispatcher import Dispatcher
from .models import ErrorResponse, HealthResponse, RoutesResponse

ADMIN_PREFIX = "/_mock"

admin_router = APIRouter(prefix=ADMIN_PREFIX, tags=["admin"])
router = APIRouter()


@admin_router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health(request: Request) -> HealthResponse:
    return HealthResponse(ok=True, version=request.app.state.live.version)


@admin_router.get(
    "/routes",
    response_model=RoutesResponse,
    summary="Inspect the route table currently being served",
)
async def list_routes(request: Request) -> RoutesResponse:
    version, table = request.app.state.live.snapshot()
    return RoutesResponse.from_table(version, table)


@router.api_route(
    "/{full_path:path}",
    methods=list(SUPPORTED_METHODS),
    include_in_schema=False,
    responses={500: {"model": ErrorResponse}},
)
async def dispatch(request: Request) -> Response:
    """Serve the declared response file for this method and path."""
    dispatcher: Dispatcher = request.app.state.dispatcher
    try:
        result = await dispatcher.handle(request.method, request.url.path)
    except DispatchNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    except DispatchServerError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=str(e)).model_dump(),
        )
    return Response(content=result.body, media_type=result.media_type)
