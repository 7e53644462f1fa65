"""Base Pydantic models for idpbridge.

Every idpbridge model inherits from :class:`BridgeBaseModel` so validation and
immutability behave the same way across the library:

- extra="forbid": unknown fields are rejected
- frozen=True: instances are immutable

Provider response models that parse third-party payloads override the config
with ``extra="ignore"``; session models, which are updated during the login
flow, opt out of ``frozen``.

Example:
    >>> from idpbridge.models import BridgeBaseModel
    >>>
    >>> class Endpoint(BridgeBaseModel):
    ...     url: str
    >>>
    >>> Endpoint(url="https://example.com").model_dump()
    {'url': 'https://example.com'}
"""

from pydantic import BaseModel, ConfigDict


class BridgeBaseModel(BaseModel):
    """Base model for all idpbridge Pydantic models."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class ResponseModel(BridgeBaseModel):
    """Base for models parsed from third-party payloads; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)
