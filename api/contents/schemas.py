"""
Content API schemas (request models).

Fields are snake_case in Python and camelCase on the wire; dumping with
`by_alias=True` yields the record shape the content model expects.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True, mode="python")


class Signatory(_CamelModel):
    username: str = Field(..., min_length=1, max_length=100)


class ContentCreate(_CamelModel):
    title: str = Field(..., min_length=1, max_length=300)
    summary: str | None = None
    description: str | None = None
    link: str | None = Field(default=None, max_length=500)
    status: str | None = Field(default=None, max_length=50)
    owner: str | None = Field(default=None, max_length=100)
    contract_type: str | None = Field(default=None, max_length=50)
    contract_details: dict[str, Any] | list[Any] | str | None = None
    contract_signed: list[Signatory] | None = None
    date_created: date | None = None
    date_standby: date | None = None
    date_published: date | None = None


class ContentUpdate(_CamelModel):
    # Every field optional: only the ones sent are overwritten.
    title: str | None = Field(default=None, min_length=1, max_length=300)
    summary: str | None = None
    description: str | None = None
    link: str | None = Field(default=None, max_length=500)
    status: str | None = Field(default=None, max_length=50)
    contract_type: str | None = Field(default=None, max_length=50)
    contract_details: dict[str, Any] | list[Any] | str | None = None
    date_standby: date | None = None
    date_published: date | None = None
