# tenant_portability/services/exceptions.py

class ServiceException(Exception):
    """Base exception for all service layer errors."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class NotFoundError(ServiceException):
    """Raised when a requested tenant or snapshot does not exist."""
    pass

class DataAccessError(ServiceException):
    """Raised when the relational store is unreachable or a read query fails."""
    pass

class InvalidEnvelopeError(ServiceException):
    """Raised when an import payload is structurally unusable (not an object, no version)."""
    pass

class StorageError(ServiceException):
    """Raised when object storage cannot be reached for a put or list."""
    pass
