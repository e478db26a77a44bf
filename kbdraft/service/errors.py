class ServiceError(Exception):
    """Base exception for knowledge-service (scoring / scanning) errors."""


class AuthError(ServiceError):
    """401/403: missing or rejected service token."""


class NotFound(ServiceError):
    """404: endpoint not available on this service."""


class RateLimited(ServiceError):
    """429 rate limit exceeded. Server may send Retry-After header."""


class ServerError(ServiceError):
    """5xx server-side error."""


class ValidationError(ServiceError):
    """Other 4xx: the service rejected the article payload."""


def raise_for_status(status_code: int, message: str = "", payload: dict | None = None):
    detail = message or ""
    if payload:
        err_kind = payload.get("kind") or ""
        err_message = payload.get("message") or ""
        if err_kind or err_message:
            detail = f"{detail} {err_kind}: {err_message}".strip()

    if status_code in (401, 403):
        raise AuthError(detail)
    if status_code == 404:
        raise NotFound(detail)
    if status_code == 429:
        raise RateLimited(detail)
    if 500 <= status_code < 600:
        raise ServerError(detail)
    if 400 <= status_code < 500:
        raise ValidationError(detail)
