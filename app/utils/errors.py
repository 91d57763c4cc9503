from fastapi import HTTPException, status


class PurchaseAPIError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str = None, headers: dict = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(PurchaseAPIError):
    status_code = 422
    default_detail = "Validation failed"


class UnauthorizedError(PurchaseAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"

    def __init__(self, detail: str = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(PurchaseAPIError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFoundError(PurchaseAPIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictError(PurchaseAPIError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class BadRequestError(PurchaseAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"


class InternalError(PurchaseAPIError):
    pass
