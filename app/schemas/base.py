"""
Shared request-schema plumbing.

Request bodies arrive with camelCase keys (firstNiche, jobType, ...). The
services work on camelCase dicts, so schemas are dumped by alias and only the
keys the client actually sent survive (partial updates rely on this).
"""

from typing import Any, Dict, Mapping, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


Payload = Union[CamelModel, Mapping[str, Any]]


def as_payload(data: Payload) -> Dict[str, Any]:
    """Normalize a schema instance or a plain mapping to a camelCase dict."""
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, exclude_unset=True)
    return dict(data or {})
