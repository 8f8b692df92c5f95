"""Custom exceptions for the bizhub application."""

class BizHubError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class ValidationError(BizHubError):
    """Raised when a required field is missing or a value is rejected."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class NotFoundError(BizHubError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class UnauthorizedError(BizHubError):
    """Raised when a user is not signed in or lacks permission for an action."""
    def __init__(self, message="Unauthorized access", status_code=401):
        super().__init__(message, status_code)

class OnboardingRequiredError(BizHubError):
    """Raised when a signed-in user has not created a business profile yet."""
    def __init__(self, message="Complete onboarding to create your business profile first"):
        super().__init__(message, 409, {'redirect': '/onboarding'})

class StorageError(BizHubError):
    """Raised when the object storage collaborator fails (upload, listing, signing)."""
    def __init__(self, message="File storage is currently unavailable. Please try again."):
        super().__init__(message, 503)
