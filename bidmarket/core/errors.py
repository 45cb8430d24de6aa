class MarketplaceError(Exception):
    """Base error carrying the message and HTTP status sent to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    status_code = 400


class NotFound(MarketplaceError):
    status_code = 404


class OutOfStock(MarketplaceError):
    status_code = 400

    def __init__(self, message: str = "Collection is out of stock"):
        super().__init__(message)


class StorageError(MarketplaceError):
    status_code = 500
