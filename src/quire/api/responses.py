"""Envelope to HTTP response mapping."""

from fastapi import status
from fastapi.responses import JSONResponse

from quire.domain import Envelope

# Domain error codes that are also HTTP statuses; anything else is a 500.
_PASSTHROUGH_CODES = frozenset({400, 404, 500})


def http_status_for(envelope: Envelope, success_status: int = status.HTTP_200_OK) -> int:
    if envelope.success:
        return success_status
    if envelope.error_code in _PASSTHROUGH_CODES:
        return envelope.error_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def envelope_response(
    envelope: Envelope, success_status: int = status.HTTP_200_OK
) -> JSONResponse:
    return JSONResponse(
        status_code=http_status_for(envelope, success_status),
        content=envelope.to_dict(),
    )


def error_response(code: int, message: str, status_code: int | None = None) -> JSONResponse:
    envelope = Envelope.fail(code, message)
    return JSONResponse(
        status_code=status_code or http_status_for(envelope),
        content=envelope.to_dict(),
    )
