"""Translate use case failures into HTTP errors."""

from fastapi import HTTPException, status


def http_error_from(exc: Exception) -> HTTPException:
    """Map a use case exception onto the matching :class:`HTTPException`.

    ``LookupError`` means the target does not exist, ``PermissionError`` that
    the caller may not touch it and ``ValueError`` that the input was rejected.
    """

    if isinstance(exc, LookupError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PermissionError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))


__all__ = ["http_error_from"]
