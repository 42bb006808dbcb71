from __future__ import annotations
"""Error taxonomy shared by the service and the API client.

Each error carries the HTTP status the service answers with and a stable
``code`` so the client can map an error envelope back to the same class.
"""
from typing import Any, Dict, Optional


class WorkshopError(Exception):
    status_code = 500
    code = 'WorkshopError'
    title = 'Internal Server Error'

    def __init__(self, detail: str = '', *, status_code: Optional[int] = None):
        super().__init__(detail or self.title)
        self.detail = detail or self.title
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> Dict[str, Any]:
        return {
            'error': {
                'status': self.status_code,
                'title': self.title,
                'detail': self.detail,
                'code': self.code,
            }
        }


class NetworkError(WorkshopError):
    """No response reached the client (connection refused, timeout...)."""
    status_code = 0
    code = 'NetworkError'
    title = 'Network Error'


class Unauthorized(WorkshopError):
    status_code = 401
    code = 'Unauthorized'
    title = 'Unauthorized'


class Forbidden(WorkshopError):
    status_code = 403
    code = 'Forbidden'
    title = 'Forbidden'


class NotFound(WorkshopError):
    status_code = 404
    code = 'NotFound'
    title = 'Not Found'


class ValidationError(WorkshopError):
    status_code = 400
    code = 'ValidationError'
    title = 'Bad Request'


class InvalidTransition(WorkshopError):
    status_code = 409
    code = 'InvalidTransition'
    title = 'Invalid Transition'


class ReturnIncomplete(WorkshopError):
    """Admin return confirmed half-way: approve went through, complete did not.

    The record is left in the ``approved`` return state; only ``complete``
    needs to be retried.
    """
    code = 'ReturnIncomplete'
    title = 'Return Incomplete'

    def __init__(self, reception_id: Any, cause: WorkshopError):
        super().__init__(
            f'Return of reception {reception_id} approved but not completed: {cause.detail}',
            status_code=cause.status_code,
        )
        self.reception_id = reception_id
        self.return_status = 'approved'
        self.cause = cause


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (NetworkError, Unauthorized, Forbidden, NotFound, ValidationError, InvalidTransition)
}

ERRORS_BY_STATUS = {
    400: ValidationError,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    409: InvalidTransition,
}


def error_for_status(status: int, detail: str = '', code: Optional[str] = None) -> WorkshopError:
    """Rebuild a typed error from an HTTP error response."""
    cls = ERRORS_BY_CODE.get(code or '') or ERRORS_BY_STATUS.get(status)
    if cls is None:
        return WorkshopError(detail, status_code=status)
    return cls(detail)


__all__ = [
    'WorkshopError', 'NetworkError', 'Unauthorized', 'Forbidden', 'NotFound', 'ValidationError',
    'InvalidTransition', 'ReturnIncomplete', 'error_for_status',
]
