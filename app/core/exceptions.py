from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Missing or malformed client input."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Product not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UpstreamFailure(HTTPException):
    """A persistence or image intake collaborator failed.

    The underlying error is logged by the raiser; callers only see the
    generic detail.
    """

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def missing_fields_error(fields) -> ValidationError:
    return ValidationError(f"Missing required fields: {', '.join(fields)}")
