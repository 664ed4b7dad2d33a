"""Site content models: pure Pydantic v2 data types.

A SiteContent document is opaque apart from its ``blocks``; each Block
carries the four fields the persistence layer reads (id, title, type,
order).  Every other field, on the document or on a block, is kept
verbatim so that a load/save round trip never drops editor data.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field

CUSTOM_BLOCK_TYPE = "custom"


class Block(BaseModel):
    """A named sub-unit of the site with an order rank and a type tag."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str | None = ""
    type: str = ""
    order: int | float = 0


class SiteContent(BaseModel):
    """The full structured site-content document."""

    model_config = ConfigDict(extra="allow")

    blocks: list[Block] = Field(default_factory=list)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")

    def to_json(self, *, indent: int | None = None) -> str:
        """Canonical JSON text: stable key order, unicode kept as-is."""
        return json.dumps(
            self.to_dict(),
            ensure_ascii=False,
            sort_keys=True,
            indent=indent,
        )


class SaveEvent(BaseModel):
    """Payload of the "content saved" notification.

    ``saved_to_local`` is only set when the remote write failed and the
    document went to the local cache instead.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    saved_to_local: bool | None = Field(default=None, alias="savedToLocal")
    error: str | None = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class DataSourcesStatus(BaseModel):
    """Independent reachability probes for both stores."""

    database: bool = False
    local_storage: bool = False
    has_local_data: bool = False
    has_database_data: bool = False
