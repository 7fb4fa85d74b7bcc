"""HTTP-facing errors raised by routers and dependencies."""


class RouteError(Exception):
    """An error with the status code and message to send to the client."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
