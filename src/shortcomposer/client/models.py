"""Models and errors for the composition service client."""

from typing import Optional


class ApiError(Exception):
    """Custom exception for API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[dict] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class InvalidRequestError(ApiError):
    """Exception raised when the service rejects the uploaded inputs."""

    pass


class RenderFailedError(ApiError):
    """Exception raised when the service could not render the output."""

    pass
