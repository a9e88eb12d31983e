#services/exceptions.py
from enum import Enum
from typing import Optional


class RannerError(Exception):
    """Base error; carries the HTTP status the API layer renders."""
    status = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        if message is not None:
            self.message = message
        if status is not None:
            self.status = status
        super().__init__(self.message)


class BadRequestError(RannerError):
    status = 400
    message = "Bad request"


class UnauthorizedError(RannerError):
    status = 401
    message = "Unauthorized"


class ForbiddenError(RannerError):
    status = 403
    message = "Forbidden"


class NotFoundError(RannerError):
    status = 404
    message = "Not found"


class NoOffersFoundError(NotFoundError):
    message = "No flight offers found"


class ProviderStage(str, Enum):
    SEARCH = "search"
    PRICE = "price"
    SEATMAP = "seatmap"
    PREDICTION = "prediction"
    UPSELL = "upsell"
    ORDER = "order"
    AVAILABILITY = "availability"
    DESTINATIONS = "destinations"
    DATES = "dates"
    LOCATIONS = "locations"
    REFERENCE = "reference"
    STATUS = "status"


class ProviderError(RannerError):
    """A provider call failed; `stage` names the workflow step that failed."""

    def __init__(
        self,
        stage: ProviderStage,
        message: str = "Flight provider request failed",
        status: int = 500,
        timed_out: bool = False,
    ):
        self.stage = ProviderStage(stage)
        self.timed_out = timed_out
        super().__init__(message, status)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(stage={self.stage.value!r}, "
            f"status={self.status}, timed_out={self.timed_out}, message={self.message!r})"
        )


class ProviderTimeoutError(ProviderError):

    def __init__(self, stage: ProviderStage, message: str = "The request to the flight provider timed out."):
        super().__init__(stage, message, status=504, timed_out=True)
