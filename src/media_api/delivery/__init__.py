"""Delivery module for secure static media access."""

from media_api.delivery.detector import SIGNATURES, Signature, find_signature, scan
from media_api.delivery.dotfiles import check_dotfile, is_hidden_segment
from media_api.delivery.errors import (
    AssetNotFoundError,
    DeliveryError,
    DotfileAccessDeniedError,
    InvalidPathError,
    RangeNotSatisfiableError,
)
from media_api.delivery.normalizer import RequestPath, decode_once, expand_forms
from media_api.delivery.pipeline import AssetPipeline, Delivery, DeliveryStage, FileChunks
from media_api.delivery.policy import (
    Disposition,
    classify,
    extension_of,
    media_type,
    security_headers,
)
from media_api.delivery.sandbox import StaticRoot, resolve_within
from media_api.delivery.schemas import ErrorDetail, ErrorResponse
from media_api.delivery.validators import (
    ByteRange,
    entity_tag,
    http_date,
    is_not_modified,
    parse_range,
    range_applies,
)

__all__ = [
    "SIGNATURES",
    "AssetNotFoundError",
    "AssetPipeline",
    "ByteRange",
    "Delivery",
    "DeliveryError",
    "DeliveryStage",
    "Disposition",
    "DotfileAccessDeniedError",
    "ErrorDetail",
    "ErrorResponse",
    "FileChunks",
    "InvalidPathError",
    "RangeNotSatisfiableError",
    "RequestPath",
    "Signature",
    "StaticRoot",
    "check_dotfile",
    "classify",
    "decode_once",
    "entity_tag",
    "expand_forms",
    "extension_of",
    "find_signature",
    "http_date",
    "is_hidden_segment",
    "is_not_modified",
    "media_type",
    "parse_range",
    "range_applies",
    "resolve_within",
    "scan",
    "security_headers",
]
