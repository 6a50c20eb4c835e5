from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes."""
    ASSET_DECODE_ERROR = "ASSET_DECODE_ERROR"
    UNSUPPORTED_ASSET_FORMAT = "UNSUPPORTED_ASSET_FORMAT"
    INVALID_PACKAGE = "INVALID_PACKAGE"
    INVALID_ASSET_HASH = "INVALID_ASSET_HASH"
    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    STORE_ERROR = "STORE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Error response."""
    success: bool = False
    error_code: ErrorCode
    error_message: str
    details: dict | None = None


class DeckPackError(Exception):
    """Base exception."""
    def __init__(self, code: ErrorCode, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.code,
            error_message=self.message,
            details=self.details
        )


def _preview(value: str, limit: int = 50) -> str:
    return value if len(value) <= limit else f"{value[:limit]}..."


class AssetDecodeError(DeckPackError):
    def __init__(self, value: str, reason: str):
        super().__init__(
            ErrorCode.ASSET_DECODE_ERROR,
            f"Failed to decode embedded asset: {reason}",
            {"value_preview": _preview(value)}
        )


class UnsupportedAssetFormatError(DeckPackError):
    def __init__(self, value: str, reason: str | None = None):
        super().__init__(
            ErrorCode.UNSUPPORTED_ASSET_FORMAT,
            reason or f"Unsupported asset format: {_preview(value)}",
            {"value_preview": _preview(value)}
        )


class InvalidPackageError(DeckPackError):
    def __init__(self, reason: str, missing: list[str] | None = None):
        super().__init__(
            ErrorCode.INVALID_PACKAGE,
            f"Invalid .lume archive: {reason}",
            {"missing": missing} if missing else None
        )


class InvalidAssetHashError(DeckPackError):
    def __init__(self, value: str):
        super().__init__(
            ErrorCode.INVALID_ASSET_HASH,
            f"Invalid asset hash format: {_preview(value, 80)}",
            {"hash": value}
        )


class AssetStoreError(DeckPackError):
    def __init__(self, operation: str, error: str):
        super().__init__(
            ErrorCode.STORE_ERROR,
            f"Asset store {operation} failed: {error}",
            {"operation": operation}
        )
