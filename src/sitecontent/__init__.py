"""Site content persistence: a remote Supabase row mirrored to a local cache."""

from sitecontent.cache import STORAGE_KEY, LocalCache
from sitecontent.config import SiteContentConfig, load_config
from sitecontent.errors import ContentFormatError, RemoteStoreError, SiteContentError
from sitecontent.events import CONTENT_SAVED, SaveNotifier
from sitecontent.models import Block, DataSourcesStatus, SaveEvent, SiteContent
from sitecontent.ordering import normalize_block_order
from sitecontent.store import ContentPersistence, parse_content

__version__ = "0.1.0"

__all__ = [
    "CONTENT_SAVED",
    "STORAGE_KEY",
    "Block",
    "ContentFormatError",
    "ContentPersistence",
    "DataSourcesStatus",
    "LocalCache",
    "RemoteStoreError",
    "SaveEvent",
    "SaveNotifier",
    "SiteContent",
    "SiteContentConfig",
    "SiteContentError",
    "load_config",
    "normalize_block_order",
    "parse_content",
]
