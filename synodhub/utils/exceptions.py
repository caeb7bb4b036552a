"""Custom exceptions for the SynodHub data-access layer"""

from typing import Optional


class SynodHubError(Exception):
    """Base exception for SynodHub"""
    pass


class DuplicateEmail(SynodHubError):
    """Email is already registered (case-insensitive)"""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email already exists: {email}")


class InvalidCredentials(SynodHubError):
    """Unknown email or wrong password"""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class AccountPending(SynodHubError):
    """Account exists but is still waiting for approval"""

    def __init__(self, message: str = "Account pending approval"):
        super().__init__(message)


class AccountRejected(SynodHubError):
    """Account was rejected by an administrator"""

    def __init__(self, message: str = "Account rejected"):
        super().__init__(message)


class RemoteUnavailable(SynodHubError):
    """Remote service failed: network error, timeout, non-2xx or malformed body"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedImport(SynodHubError):
    """Import payload is not an export document. Nothing was written."""
    pass


class UserNotFound(SynodHubError):
    """No user with the given id"""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User with ID '{user_id}' not found")


class InvalidTransition(SynodHubError):
    """Lifecycle event not allowed from the user's current status"""

    def __init__(self, user_id: str, status: Optional[str], event: str):
        self.user_id = user_id
        self.status = status
        self.event = event
        super().__init__(f"Cannot {event} user '{user_id}' with status '{status}'")


class PermissionDenied(SynodHubError):
    """Acting user lacks the role required for the operation"""
    pass


class UnsupportedOperation(SynodHubError):
    """Backend has no endpoint for the requested operation"""

    def __init__(self, operation: str, entity: str):
        self.operation = operation
        self.entity = entity
        super().__init__(f"Remote service has no {operation} for {entity}")


class StorageError(SynodHubError):
    """Local store could not persist a collection"""
    pass


class ConfigError(SynodHubError):
    """Configuration error"""
    pass
