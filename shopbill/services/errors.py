class ServiceError(Exception):
    """Business failure raised by a service; ``status_code`` is the HTTP hint."""
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    status_code = 400


class InsufficientStock(ServiceError):
    status_code = 400

    def __init__(self, product_name: str, available: int):
        super().__init__(f"Insufficient stock for {product_name}. Available: {available}")
        self.product_name = product_name
        self.available = available


class ProductNotFound(ServiceError):
    # a bad product id inside a request body is a client error, not a missing resource
    status_code = 400

    def __init__(self, product_id: int):
        super().__init__(f"Product id {product_id} not found")
        self.product_id = product_id


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    status_code = 409


class TransactionFailure(ServiceError):
    status_code = 500
