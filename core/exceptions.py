# FILE: medvanta/backend/core/exceptions.py

"""
CUSTOM EXCEPTIONS

Application-specific exceptions with proper error handling.
"""

from rest_framework.exceptions import APIException
from rest_framework import status


class BusinessLogicException(APIException):
    """Base exception for business logic errors"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "A business rule was violated."
    default_code = "business_error"


class ValidationFailedException(BusinessLogicException):
    """Input rejected by a service"""
    default_detail = "The submitted data is invalid."
    default_code = "validation_failed"


class NotFoundException(BusinessLogicException):
    """Referenced record does not exist"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "The requested record was not found."
    default_code = "not_found"


class PermissionDeniedException(BusinessLogicException):
    """Caller may not act on the record"""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have access to this record."
    default_code = "permission_denied"


class ScheduleException(BusinessLogicException):
    """Workout schedule structure errors"""
    default_detail = "The workout schedule is invalid."
    default_code = "schedule_error"


class AssignmentException(BusinessLogicException):
    """Program assignment errors"""
    default_detail = "The program assignment could not be processed."
    default_code = "assignment_error"


class AssignmentConflictException(AssignmentException):
    """User already follows an active program"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The user already has an active program."
    default_code = "assignment_conflict"


class ImportException(BusinessLogicException):
    """Member import file errors"""
    default_detail = "The import file could not be read."
    default_code = "import_error"


class TeamAssignmentException(BusinessLogicException):
    """Team membership errors"""
    default_detail = "The member could not be moved to this team."
    default_code = "team_assignment_error"


class MessagingException(BusinessLogicException):
    """Chat and message errors"""
    default_detail = "The message could not be sent."
    default_code = "messaging_error"


# Exception handler for DRF
def custom_exception_handler(exc, context):
    """
    Custom exception handler for consistent error responses.
    """
    from rest_framework.views import exception_handler

    response = exception_handler(exc, context)

    if response is not None:
        if not isinstance(response.data, dict):
            response.data = {"detail": response.data}

        # Add error code to response
        response.data["error_code"] = getattr(exc, "default_code", "error")

        # Ensure consistent structure
        if "detail" in response.data:
            response.data["message"] = response.data.pop("detail")

        response.data["success"] = False

    return response
