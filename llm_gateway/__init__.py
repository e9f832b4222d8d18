from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    GatewayPayloadTooLargeError,
    GatewayResponseError,
    GatewayUnavailableError,
    HttpClient,
    HttpResponse,
    LlmGatewayError,
    generate,
    inline_part,
    strip_code_fences,
    text_part,
)

__all__ = [
    "GatewayPayloadTooLargeError",
    "GatewayResponseError",
    "GatewayUnavailableError",
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "generate",
    "inline_part",
    "strip_code_fences",
    "text_part",
]
