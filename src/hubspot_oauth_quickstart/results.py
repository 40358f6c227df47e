# src/hubspot_oauth_quickstart/results.py

import typing
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = typing.TypeVar("T")


class ProviderError(BaseModel):
    """
    Error body returned by HubSpot, e.g.
    {"status": "error", "message": "...", "correlationId": "...", "category": "..."}.
    OAuth-style bodies ({"error": ..., "error_description": ...}) are folded into message.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status: str = "error"
    message: str = ""
    correlation_id: typing.Optional[str] = Field(default=None, alias="correlationId")
    category: typing.Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def fill_message(cls, data: typing.Any) -> typing.Any:
        if isinstance(data, dict) and not data.get("message"):
            data = dict(data)
            data["message"] = data.get("error_description") or data.get("error") or "Unknown error"
        return data


@dataclass(frozen=True)
class Ok(typing.Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: ProviderError

    @property
    def message(self) -> str:
        return self.error.message


Result = typing.Union[Ok[T], Err]
