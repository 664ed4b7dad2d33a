"""Site content persistence: remote store with a local cache mirror.

ContentPersistence is the one entry point callers use.  Loads try the
remote store, then the local cache, then the built-in default; saves go
to the remote store and always land in the local cache so edits are
never lost.  Debounced saves share a single pending slot: scheduling a
new one cancels whatever was waiting.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from sitecontent.cache import STORAGE_KEY, LocalCache
from sitecontent.config import SiteContentConfig
from sitecontent.defaults import default_content
from sitecontent.errors import ContentFormatError
from sitecontent.events import SaveNotifier
from sitecontent.fallback import first_available
from sitecontent.models import DataSourcesStatus, SaveEvent, SiteContent
from sitecontent.ordering import normalize_block_order

logger = logging.getLogger(__name__)

SAVE_DELAY_SECONDS = 1.0


class RemoteStore(Protocol):
    """What the facade needs from a remote store client."""

    def read_document(self) -> SiteContent | None: ...

    def write_document(self, content: SiteContent) -> bool: ...


@dataclass
class _PendingSave:
    content: SiteContent
    timer: threading.Timer | None = None


def parse_content(text: str) -> SiteContent:
    """Parse serialized JSON text into a SiteContent document.

    Raises:
        ContentFormatError: If the text is not valid JSON or not a
            document.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise ContentFormatError("Invalid JSON format") from exc
    try:
        return SiteContent.model_validate(data)
    except ValidationError as exc:
        raise ContentFormatError(f"Not a site content document: {exc.error_count()} error(s)") from exc


class ContentPersistence:
    """Load/save facade over a remote store and a local cache."""

    def __init__(
        self,
        remote: RemoteStore,
        cache: LocalCache,
        *,
        notifier: SaveNotifier | None = None,
        cache_key: str = STORAGE_KEY,
        save_delay: float = SAVE_DELAY_SECONDS,
        default_factory: Callable[[], SiteContent] = default_content,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self.remote = remote
        self.cache = cache
        self.notifier = notifier or SaveNotifier()
        self.cache_key = cache_key
        self.save_delay = save_delay
        self._default_factory = default_factory
        self._timer_factory = timer_factory
        self._pending: _PendingSave | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls, config: SiteContentConfig, notifier: SaveNotifier | None = None
    ) -> ContentPersistence:
        """Build a facade wired to Supabase and the configured cache directory."""
        from sitecontent.integrations.supabase import SupabaseContentClient

        return cls(
            SupabaseContentClient(config.remote),
            LocalCache(config.cache.directory),
            notifier=notifier,
            cache_key=config.cache.key,
            save_delay=config.save.delay_seconds,
        )

    def __enter__(self) -> ContentPersistence:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Local cache helpers ──────────────────────────────────────

    def _write_cache(self, content: SiteContent) -> None:
        self.cache.set_item(self.cache_key, content.to_json())

    def _default(self) -> SiteContent:
        return normalize_block_order(self._default_factory())

    def _load_remote(self) -> SiteContent | None:
        content = self.remote.read_document()
        if content is None:
            return None
        fixed = normalize_block_order(content)
        try:
            self._write_cache(fixed)
        except OSError:
            logger.warning("Could not refresh local cache after database load", exc_info=True)
        return fixed

    def _load_cache(self) -> SiteContent | None:
        try:
            raw = self.cache.get_item(self.cache_key)
            if raw is None:
                return None
            content = parse_content(raw)
        except (ContentFormatError, UnicodeDecodeError):
            logger.error("Corrupt local cache entry %r, removing it", self.cache_key, exc_info=True)
            self.cache.remove_item(self.cache_key)
            return None
        return normalize_block_order(content)

    # ── Save ─────────────────────────────────────────────────────

    def save(self, content: SiteContent, immediate: bool = False) -> None:
        """Persist *content* now, or after the debounce delay.

        Every attempt ends in exactly one SaveEvent; scheduling a
        debounced save emits nothing until it fires.
        """
        if immediate:
            # A newer document supersedes whatever is still waiting.
            if self.cancel_pending():
                logger.debug("Immediate save replaced a pending debounced save")
            self._run_save(content)
        else:
            self._schedule(content)

    def _run_save(self, content: SiteContent) -> None:
        try:
            self._save_now(content)
        except Exception as exc:
            logger.error("Unexpected error while saving content", exc_info=True)
            self._save_last_resort(content, exc)

    def _save_now(self, content: SiteContent) -> None:
        saved = self.remote.write_document(content)
        self._write_cache(content)
        if saved:
            logger.info("Content saved to database and local cache")
            self.notifier.emit(SaveEvent(success=True))
        else:
            logger.warning("Database save failed, content kept in local cache only")
            self.notifier.emit(SaveEvent(success=False, saved_to_local=True))

    def _save_last_resort(self, content: SiteContent, exc: Exception) -> None:
        try:
            self._write_cache(content)
        except Exception as local_exc:
            logger.critical("Could not save content even to local cache", exc_info=True)
            self.notifier.emit(SaveEvent(success=False, error=str(local_exc)))
            return
        logger.warning("Content saved to local cache after save error")
        self.notifier.emit(SaveEvent(success=False, saved_to_local=True, error=str(exc)))

    def _schedule(self, content: SiteContent) -> None:
        slot = _PendingSave(content)
        timer = self._timer_factory(self.save_delay, self._fire, args=(slot,))
        timer.daemon = True
        slot.timer = timer
        with self._lock:
            previous, self._pending = self._pending, slot
            if previous is not None and previous.timer is not None:
                previous.timer.cancel()
            timer.start()
        logger.debug("Save scheduled in %.3fs", self.save_delay)

    def _fire(self, slot: _PendingSave) -> None:
        with self._lock:
            if self._pending is not slot:
                return
            self._pending = None
        logger.debug("Debounced save firing")
        self._run_save(slot.content)

    def _take_pending(self) -> _PendingSave | None:
        with self._lock:
            slot, self._pending = self._pending, None
        if slot is not None and slot.timer is not None:
            slot.timer.cancel()
        return slot

    @property
    def has_pending_save(self) -> bool:
        with self._lock:
            return self._pending is not None

    def flush(self) -> bool:
        """Run a pending debounced save now. Returns whether one ran."""
        slot = self._take_pending()
        if slot is None:
            return False
        self._run_save(slot.content)
        return True

    def cancel_pending(self) -> bool:
        """Drop a pending debounced save. Returns whether one was dropped."""
        return self._take_pending() is not None

    def close(self) -> None:
        self.flush()

    # ── Load ─────────────────────────────────────────────────────

    def load(self) -> SiteContent:
        """Load from the database, else the local cache, else the default.

        A database document refreshes the local cache.  The default is
        never written anywhere.
        """
        found = first_available(
            [
                ("database", self._load_remote),
                ("local cache", self._load_cache),
            ]
        )
        if found is None:
            logger.info("No content in database or local cache, using default")
            return self._default()
        source, content = found
        logger.info("Content loaded from %s", source)
        return content

    def load_sync(self) -> SiteContent:
        """Load from the local cache only, else the default."""
        try:
            raw = self.cache.get_item(self.cache_key)
            if raw is not None:
                return normalize_block_order(parse_content(raw))
        except (OSError, ContentFormatError, UnicodeDecodeError):
            logger.error("Could not read local cache", exc_info=True)
        return self._default()

    def reset(self) -> SiteContent:
        """Clear the local cache and return the default. The database is untouched."""
        try:
            self.cache.remove_item(self.cache_key)
        except OSError:
            logger.error("Could not clear local cache", exc_info=True)
        else:
            logger.info("Local cache cleared")
        return self._default()

    # ── Import / export ──────────────────────────────────────────

    def export_content(self) -> str:
        """Serialize the locally cached content as indented, key-sorted JSON."""
        return self.load_sync().to_json(indent=2)

    def import_content(self, text: str) -> SiteContent:
        """Parse exported JSON text. Nothing is normalized or persisted.

        Raises:
            ContentFormatError: If *text* is not a valid document.
        """
        try:
            return parse_content(text)
        except ContentFormatError:
            logger.error("Error importing content", exc_info=True)
            raise

    # ── Database sync ────────────────────────────────────────────

    def force_sync_with_database(self) -> bool:
        """Push the locally cached content to the database."""
        try:
            local = self.load_sync()
            success = self.remote.write_document(local)
            if success:
                self._write_cache(local)
                logger.info("Forced sync with database succeeded")
                self.notifier.emit(SaveEvent(success=True))
            else:
                logger.warning("Forced sync with database failed")
                self.notifier.emit(SaveEvent(success=False))
            return success
        except Exception:
            logger.error("Error in forced sync", exc_info=True)
            return False

    def load_from_database_and_overwrite(self) -> SiteContent:
        """Replace the local cache with the database copy, if there is one."""
        try:
            content = self.remote.read_document()
            if content is None:
                logger.info("No content in database, keeping local cache")
                return self.load_sync()
            fixed = normalize_block_order(content)
            self._write_cache(fixed)
            logger.info("Local cache overwritten from database")
            return fixed
        except Exception:
            logger.error("Error loading from database", exc_info=True)
            return self.load_sync()

    def check_database_connection(self) -> bool:
        """True if a database read completes, whether or not it finds data."""
        try:
            self.remote.read_document()
        except Exception:
            logger.warning("Database unavailable", exc_info=True)
            return False
        return True

    def get_data_sources_status(self) -> DataSourcesStatus:
        """Probe the database and the local cache independently."""
        status = DataSourcesStatus()

        try:
            content = self.remote.read_document()
            status.database = True
            status.has_database_data = content is not None
        except Exception:
            logger.warning("Database probe failed", exc_info=True)

        try:
            self.cache.check_available()
            status.local_storage = True
            status.has_local_data = self.cache.has_item(self.cache_key)
        except Exception:
            logger.warning("Local cache probe failed", exc_info=True)

        return status
