"""Client module for a deployed composition service."""

from .api import ShortsClient
from .models import ApiError, InvalidRequestError, RenderFailedError

__all__ = [
    "ShortsClient",
    "ApiError",
    "InvalidRequestError",
    "RenderFailedError",
]
