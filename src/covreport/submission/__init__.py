"""Payload submission to the Coveralls API."""

from covreport.submission.client import CoverallsClient, CoverallsResponse

__all__ = ["CoverallsClient", "CoverallsResponse"]
