"""Error taxonomy shared by services and the HTTP layer."""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 400


class Unauthorized(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class Conflict(AppError):
    status_code = 409


class InternalError(AppError):
    status_code = 500


class InvalidOtp(ValidationError):
    def __init__(self, message: str = "Invalid OTP"):
        super().__init__(message)


class OtpExpired(ValidationError):
    def __init__(self, message: str = "OTP has expired"):
        super().__init__(message)


class MailDeliveryError(InternalError):
    def __init__(self, message: str = "Failed to send verification email"):
        super().__init__(message)
