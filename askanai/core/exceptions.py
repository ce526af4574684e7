class ApiError(Exception):
    """Error that is rendered to the client as ``{"error": code}``."""

    def __init__(self, code: str, status_code: int = 400):
        self.code = code
        self.status_code = status_code
        super().__init__(self.code)


class InvalidInputError(ApiError):
    def __init__(self, code: str):
        super().__init__(code, status_code=400)


class UnauthorizedError(ApiError):
    def __init__(self):
        super().__init__("UNAUTHORIZED", status_code=401)


class ForbiddenError(ApiError):
    def __init__(self, code: str = "FORBIDDEN"):
        super().__init__(code, status_code=403)


class NotFoundError(ApiError):
    def __init__(self):
        super().__init__("NOT_FOUND", status_code=404)


class ConflictError(ApiError):
    def __init__(self, code: str):
        super().__init__(code, status_code=409)


class RateLimitExceededError(ApiError):
    def __init__(self, window: str):
        self.window = window
        super().__init__(f"RATE_LIMIT_{window}", status_code=429)


class ConfigurationError(ApiError):
    def __init__(self, setting: str):
        self.setting = setting
        super().__init__("INTERNAL_ERROR", status_code=500)

    def __str__(self):
        return f"Missing required setting: {self.setting}"
