class SubtaskerError(Exception):
    """Base error; rendered by the app as ``{"error": message}``."""

    status_code = 500
    default_message = "Server error"
    # Drop the client's session cookie when this error is raised
    clears_session = False

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message}


class ValidationError(SubtaskerError):
    status_code = 400
    default_message = "Invalid request"


class NotAuthenticated(SubtaskerError):
    status_code = 401
    default_message = "Not authenticated"


class InvalidSession(NotAuthenticated):
    default_message = "Invalid session token"
    clears_session = True


class UserNotFound(NotAuthenticated):
    default_message = "User not found"
    clears_session = True


class NotFound(SubtaskerError):
    status_code = 404
    default_message = "Not found"


class StorageError(SubtaskerError):
    status_code = 500
    default_message = "Storage failure"
