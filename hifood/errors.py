from fastapi import status


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "internal error"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "not logged in"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "forbidden"


class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "missing or invalid fields"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} with id {resource_id} not found")


class DuplicateEmail(AppError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, email: str):
        super().__init__(f"user with email {email} already exists")


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "invalid credentials"


class InvalidTransition(AppError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, new: str):
        super().__init__(f"invalid status transition from {current} to {new}")


class InvalidProviderToken(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "invalid provider token"


class ProviderUnavailable(AppError):
    detail = "identity provider error"
