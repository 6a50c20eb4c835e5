"""Service layer."""

from .converter import (
    ConversionWarning,
    collect_asset_references,
    iter_asset_slots,
    to_portable,
    to_working,
)
from .package_codec import PackageCodec, PackageContents
from .package_service import ExportResult, ImportResult, PackageService
from .sniffer import ValueKind, classify

__all__ = [
    "ConversionWarning",
    "collect_asset_references",
    "iter_asset_slots",
    "to_portable",
    "to_working",
    "PackageCodec",
    "PackageContents",
    "ExportResult",
    "ImportResult",
    "PackageService",
    "ValueKind",
    "classify",
]
