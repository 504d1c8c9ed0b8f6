class ServiceError(Exception):
    status = 400

    def __init__(self, code="SERVICE_ERROR", message="Service error", details=None, status=None):
        self.code = code
        self.message = message
        self.details = details or {}
        if status is not None:
            self.status = status
        super().__init__(message)


class ValidationError(ServiceError):
    status = 422

    def __init__(self, message="Invalid input", details=None, code="VALIDATION_ERROR"):
        super().__init__(code, message, details)


class NotFoundError(ServiceError):
    status = 404

    def __init__(self, message="Resource not found", details=None):
        super().__init__("NOT_FOUND", message, details)


class ForbiddenError(ServiceError):
    status = 403

    def __init__(self, message="You are not allowed to do this", details=None):
        super().__init__("FORBIDDEN", message, details)


class AccountSuspended(ServiceError):
    status = 403

    def __init__(self, message="This account has been suspended"):
        super().__init__("ACCOUNT_SUSPENDED", message)


class ConflictError(ServiceError):
    status = 409

    def __init__(self, message="Resource already exists", details=None, code="CONFLICT"):
        super().__init__(code, message, details)


class InvalidTransition(ServiceError):
    status = 409

    def __init__(self, current, requested, message=None):
        self.current = current
        self.requested = requested
        super().__init__(
            "INVALID_TRANSITION",
            message or f"Cannot move order from {current} to {requested}",
            {"current_status": current, "requested_status": requested},
        )


class ProductsUnavailable(ServiceError):
    status = 409

    def __init__(self, products):
        self.products = products
        names = ", ".join(p["title"] for p in products)
        super().__init__(
            "PRODUCTS_UNAVAILABLE",
            f"Some items are no longer available: {names}",
            {"products": products},
        )


class ChatClosed(ServiceError):
    status = 409

    def __init__(self, message="Chat is closed for cancelled orders"):
        super().__init__("CHAT_CLOSED", message)


class InventoryError(ServiceError):
    status = 500

    def __init__(self, message="Orders were placed but the items could not be reserved", details=None):
        super().__init__("INVENTORY_ERROR", message, details)
