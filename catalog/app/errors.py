"""
Error kinds, the Failure value returned by core operations, and the single
responder that turns a failure into the JSON error body.
"""

import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TypeVar, Union

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "InvalidArgument"
    NOT_FOUND = "NotFound"
    ROUTE_NOT_FOUND = "RouteNotFound"
    INTERNAL = "Internal"


_STATUS = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ROUTE_NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    cause: Optional[BaseException] = None
    status: Optional[int] = None

    @property
    def status_code(self) -> int:
        if self.status is not None:
            return self.status
        return _STATUS.get(self.kind, 500)


# Either the value or a tagged failure.
Result = Union[T, Failure]


def is_failure(result: object) -> bool:
    return isinstance(result, Failure)


def error_response(request: Request, failure: Failure, include_stack: bool = False) -> JSONResponse:
    status_code = failure.status_code
    body = {"error": True, "message": failure.message or "Internal server error"}
    if include_stack and failure.cause is not None:
        cause = failure.cause
        body["stack"] = "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "[%s] %s %s -> %d: %s",
        failure.kind.value,
        request.method,
        request.url.path,
        status_code,
        failure.message,
        exc_info=failure.cause if status_code >= 500 and failure.cause is not None else None,
    )
    return JSONResponse(status_code=status_code, content=body)
