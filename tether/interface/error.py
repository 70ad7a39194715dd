"""Interface layer errors and their HTTP mapping."""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from tether.domain.error import RepositoryUnavailableError
from tether.domain.value import LinkErrorKind, LinkFailure

STATUS_BY_KIND: dict[LinkErrorKind, int] = {
    LinkErrorKind.INVALID_ASSERTION: status.HTTP_400_BAD_REQUEST,
    LinkErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LinkErrorKind.EXPIRED: status.HTTP_410_GONE,
    LinkErrorKind.ALREADY_CONSUMED: status.HTTP_409_CONFLICT,
    LinkErrorKind.ACCOUNT_ALREADY_LINKED: status.HTTP_409_CONFLICT,
    LinkErrorKind.VERIFICATION_FAILED: status.HTTP_401_UNAUTHORIZED,
    LinkErrorKind.REPOSITORY_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    LinkErrorKind.UNLINK_NOT_ALLOWED: status.HTTP_409_CONFLICT,
}


class InterfaceError(Exception):
    """Base interface error."""

    pass


class LinkFailureError(InterfaceError):
    """Carries a LinkFailure out of a route to the exception handler."""

    def __init__(self, failure: LinkFailure):
        self.failure = failure
        super().__init__(failure.message)


def failure_response(failure: LinkFailure) -> JSONResponse:
    """Render a failure as ``{"error": <kind>, "detail": <user message>}``."""
    return JSONResponse(
        status_code=STATUS_BY_KIND[failure.kind],
        content={"error": failure.kind.value, "detail": failure.user_message},
    )


async def link_failure_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, LinkFailureError):
        raise exc
    return failure_response(exc.failure)


async def repository_unavailable_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    return failure_response(
        LinkFailure(kind=LinkErrorKind.REPOSITORY_UNAVAILABLE, message=str(exc))
    )


EXCEPTION_HANDLERS = {
    LinkFailureError: link_failure_handler,
    RepositoryUnavailableError: repository_unavailable_handler,
}
