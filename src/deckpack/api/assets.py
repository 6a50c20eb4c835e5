"""Asset API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from ..models import AssetInfo, ErrorResponse
from ..storage import AssetStore
from ..utils.hash import is_valid_hash
from .dependencies import get_asset_store

router = APIRouter(tags=["assets"])


def _normalize_hash(sha256: str) -> str:
    normalized = sha256.lower()
    if not is_valid_hash(normalized):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_asset_hash", "message": "Invalid asset hash format"},
        )
    return normalized


@router.get(
    "/assets/{sha256}",
    responses={
        200: {"content": {"application/octet-stream": {}}, "description": "Asset bytes"},
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def get_asset(sha256: str, store: AssetStore = Depends(get_asset_store)) -> Response:
    """Get asset bytes by content hash."""
    sha256 = _normalize_hash(sha256)

    info = await store.info(sha256)
    if not info:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "asset_not_found", "message": "Asset not found"},
        )

    data = await store.get(sha256)
    if data is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "asset_not_found", "message": "Asset data not found"},
        )

    return Response(
        content=data,
        media_type=info.mime_type,
        headers={
            # Content never changes for a given hash.
            "Cache-Control": "public, max-age=31536000, immutable",
            "ETag": f'"{sha256}"',
        },
    )


@router.get(
    "/assets/{sha256}/info",
    response_model=AssetInfo,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_asset_info(sha256: str, store: AssetStore = Depends(get_asset_store)) -> AssetInfo:
    """Get asset metadata by content hash."""
    sha256 = _normalize_hash(sha256)

    info = await store.info(sha256)
    if not info:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "asset_not_found", "message": "Asset not found"},
        )
    return info
