"""
Exception hierarchy shared by the storage, auth and product services.
"""


class ProductAppError(Exception):
    """Base class for application errors"""


class StorageError(ProductAppError):
    """Raised when the underlying storage backend fails"""


class StorageNotInitializedError(StorageError):
    """Raised when the record store is used before initialize()"""

    def __init__(self, message: str = "Database not initialized"):
        super().__init__(message)


class NotFoundError(ProductAppError):
    """Raised when a record does not exist or is not owned by the caller"""


class NotAuthenticatedError(ProductAppError):
    """Raised when an operation requires a signed-in user"""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class AuthenticationError(ProductAppError):
    """Raised by credential operations that do not return a Result"""
