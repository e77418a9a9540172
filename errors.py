"""
Error taxonomy shared by the service modules.

Services raise these; the handlers registered in main translate them into
``{"error": message}`` responses with the matching status code.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 400


class MissingField(ValidationError):
    pass


class EmptyMessage(ValidationError):
    def __init__(self, message: str = "Message is required"):
        super().__init__(message)


class InvalidQuantity(ValidationError):
    def __init__(self, message: str = "Quantity must be at least 1"):
        super().__init__(message)


class InvalidCoupon(ValidationError):
    def __init__(self, message: str = "Invalid coupon code"):
        super().__init__(message)


class EmptyCart(ValidationError):
    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class OutOfStock(ValidationError):
    pass


class AuthError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class InvalidTransition(ConflictError):
    pass


class InternalError(AppError):
    status_code = 500
