"""Cobalt API package: the async client and its typed request/response models.

RULES:
- All HTTP calls go through CobaltClient (no direct httpx usage elsewhere)
- Response variants are plain dataclasses; dispatch on type or ``status``
"""

from cobalt_client.api.client import (
    CobaltAPIError,
    CobaltClient,
    CobaltError,
    CobaltHTTPError,
    CobaltRequestError,
)
from cobalt_client.api.models import (
    AudioObject,
    CobaltInfo,
    CobaltRequest,
    CobaltResponse,
    ErrorContext,
    ErrorObject,
    ErrorResponse,
    GitInfo,
    InstanceInfo,
    LocalProcessingResponse,
    OutputMetadata,
    OutputObject,
    PickerObject,
    PickerResponse,
    ProcessResult,
    TunnelRedirectResponse,
    parse_response,
    response_filename,
    to_wire,
)

__all__ = [
    "AudioObject",
    "CobaltAPIError",
    "CobaltClient",
    "CobaltError",
    "CobaltHTTPError",
    "CobaltInfo",
    "CobaltRequest",
    "CobaltRequestError",
    "CobaltResponse",
    "ErrorContext",
    "ErrorObject",
    "ErrorResponse",
    "GitInfo",
    "InstanceInfo",
    "LocalProcessingResponse",
    "OutputMetadata",
    "OutputObject",
    "PickerObject",
    "PickerResponse",
    "ProcessResult",
    "TunnelRedirectResponse",
    "parse_response",
    "response_filename",
    "to_wire",
]
