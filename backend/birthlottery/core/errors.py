"""
Error taxonomy for the birth lottery pipeline.

Everything the fetch → merge → distribute → draw chain raises derives from
BirthLotteryError, so the API layer can turn any of them into the
``{"success": false, "error": ...}`` failure shape with one handler.
"""
from typing import Optional


class BirthLotteryError(Exception):
    """Base class for all pipeline errors."""

    status_code = 500


class UpstreamFetchError(BirthLotteryError):
    """Network failure or non-200 reply from the indicator source."""

    status_code = 502

    def __init__(self, message: str, url: Optional[str] = None, http_status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.http_status = http_status


class MalformedResponseError(BirthLotteryError):
    """Upstream body is not the ``[metadata, records]`` envelope."""

    status_code = 502


class EmptyDistributionError(BirthLotteryError):
    """No eligible country carries any weight."""

    status_code = 503


class UnknownCountryError(BirthLotteryError):
    """A lookup referenced a code that is not in the merged set."""

    status_code = 404

    def __init__(self, code: str):
        super().__init__(f"Country {code} not found")
        self.code = code
