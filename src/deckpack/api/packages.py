"""Package export/import endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from ..models import ErrorResponse, InvalidPackageError, WorkingDocument
from ..services import PackageService
from ..storage import AssetStore
from .dependencies import get_asset_store

router = APIRouter(prefix="/packages", tags=["packages"])


@router.post(
    "/export",
    responses={
        200: {"content": {"application/zip": {}}, "description": ".lume archive"},
    },
)
async def export_package(
    document: WorkingDocument,
    include_assets: bool = True,
    store: AssetStore = Depends(get_asset_store),
) -> Response:
    """Export a working document as a .lume archive."""
    result = await PackageService(store).export_document(document, include_assets=include_assets)

    return Response(
        content=result.archive,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{result.document.meta.id}.lume"',
            "X-Asset-Count": str(len(result.document.assets)),
            "X-Conversion-Warnings": str(len(result.warnings)),
        },
    )


@router.post(
    "/import",
    responses={400: {"model": ErrorResponse}},
)
async def import_package(
    request: Request,
    store: AssetStore = Depends(get_asset_store),
) -> JSONResponse:
    """Import a .lume archive (raw request body) and return the working document."""
    data = await request.body()
    try:
        result = await PackageService(store).import_package(data)
    except InvalidPackageError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_package", "message": e.message},
        ) from e

    return JSONResponse(content=result.document.to_json_dict())
