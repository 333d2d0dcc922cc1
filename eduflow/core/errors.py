# eduflow/core/errors.py
"""
Error taxonomy for the API.

Every handler-level failure is raised as one of these and rendered by the
exception handlers in ``eduflow.main`` as ``{"message": ...}`` with the
class's status code. Messages are safe to show to clients.
"""
from fastapi import status


class EduFlowError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(EduFlowError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class InvalidCredentials(EduFlowError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid login or password."


class MissingToken(EduFlowError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Missing access token."


class InvalidOrExpiredToken(EduFlowError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token."


class InvalidSession(EduFlowError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid session."


class AccountLocked(EduFlowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Account is locked. Please contact your administrator."


class Forbidden(EduFlowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden."


class NotFound(EduFlowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class DuplicateAccount(EduFlowError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Username or email already exists."


class InternalError(EduFlowError):
    pass
