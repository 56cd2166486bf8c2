"""
Pydantic models for WHOIS responses and lookup results.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class WhoisResponse(BaseModel):
    """Raw text returned by one WHOIS server for one query.

    ``reachable`` separates a server that could not be contacted from one
    that answered with an empty record. Callers only ever see ``text``.
    """

    model_config = ConfigDict(frozen=True)

    server: str
    text: str = ""
    reachable: bool = True
    error: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.text == ""

    @classmethod
    def unreachable(cls, server: str, error: str) -> "WhoisResponse":
        return cls(server=server, text="", reachable=False, error=error)


class LookupResult(BaseModel):
    """Final outcome of one lookup: the query, the server answering it, the text."""

    model_config = ConfigDict(frozen=True)

    query: str
    server: str
    result: str

    # Diagnostics, not part of the serialised contract
    primary_server: str | None = Field(default=None, exclude=True)
    referral: str | None = Field(default=None, exclude=True)
    upstream_reachable: bool = Field(default=True, exclude=True)


class ErrorPayload(BaseModel):
    """Failure body returned to programmatic callers."""

    error: Literal["invalid_query", "rate_limited"]
    message: str


class BulkLookupItem(BaseModel):
    """One entry of a bulk lookup stream."""

    target: str
    status: Literal["success", "error"]
    data: LookupResult | None = None
    error: str | None = None
