"""
Time-bounded cache of profiled glyphs.

Entries are keyed by (character, variant, style) and expire after a fixed
time to live. Concurrent loads of the same key share one in-flight task, so
a glyph is never profiled twice at the same time. The cache is meant to be
used from a single event loop and does no locking.
"""

# Standard Library
import asyncio
import dataclasses
import logging
import time
import typing

# local repo modules
import graffiti_compositor as gfc
import graffiti_compositor.config
import graffiti_compositor.glyph


Glyph = gfc.glyph.Glyph
CACHE_TTL_SECONDS = gfc.config.CACHE_TTL_SECONDS

GlyphLoader = typing.Callable[[], typing.Awaitable[Glyph]]

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class CacheKey:
	character: str
	variant: str
	style: str


@dataclasses.dataclass
class CacheEntry:
	key: CacheKey
	glyph: Glyph
	timestamp: float


@dataclasses.dataclass
class CacheStats:
	hits: int = 0
	misses: int = 0
	evictions: int = 0


class GlyphCache:
	"""
	Glyph cache with a time to live and request coalescing.
	"""

	def __init__(
		self,
		ttl_seconds: float = CACHE_TTL_SECONDS,
		clock: typing.Callable[[], float] = time.monotonic,
	) -> None:
		"""
		Args:
			ttl_seconds: Age after which an entry is stale.
			clock: Monotonic time source in seconds.
		"""
		self.ttl_seconds = ttl_seconds
		self._clock = clock
		self._entries: dict[CacheKey, CacheEntry] = {}
		self._in_flight: dict[CacheKey, asyncio.Task] = {}
		self.stats = CacheStats()

	def __len__(self) -> int:
		return len(self._entries)

	def get(self, key: CacheKey) -> Glyph | None:
		"""
		Return a fresh cached glyph, evicting it when expired.

		Args:
			key: Cache key.

		Returns:
			Cached Glyph or None on a miss.
		"""
		entry = self._entries.get(key)
		if entry is None:
			self.stats.misses += 1
			return None
		if self._clock() - entry.timestamp > self.ttl_seconds:
			del self._entries[key]
			self.stats.evictions += 1
			self.stats.misses += 1
			logger.debug("Cache entry expired for %s", key)
			return None
		self.stats.hits += 1
		return entry.glyph

	def put(self, key: CacheKey, glyph: Glyph) -> None:
		self._entries[key] = CacheEntry(key=key, glyph=glyph, timestamp=self._clock())

	def clear(self, style: str | None = None) -> int:
		"""
		Remove entries for one style, or every entry.

		Args:
			style: Style to clear, or None for a global reset.

		Returns:
			Number of removed entries.
		"""
		if style is None:
			removed = len(self._entries)
			self._entries.clear()
			return removed
		stale = [key for key in self._entries if key.style == style]
		for key in stale:
			del self._entries[key]
		logger.debug("Cleared %d cache entries for style %s", len(stale), style)
		return len(stale)

	def _is_fresh(self, key: CacheKey) -> bool:
		entry = self._entries.get(key)
		return entry is not None and self._clock() - entry.timestamp <= self.ttl_seconds

	def is_in_flight(self, key: CacheKey) -> bool:
		return key in self._in_flight

	def _start_load(self, key: CacheKey, loader: GlyphLoader) -> asyncio.Task:
		async def run() -> Glyph:
			glyph = await loader()
			self.put(key, glyph)
			return glyph

		task = asyncio.ensure_future(run())
		self._in_flight[key] = task

		def forget(done: asyncio.Task) -> None:
			if self._in_flight.get(key) is done:
				del self._in_flight[key]

		task.add_done_callback(forget)
		return task

	async def fetch(self, key: CacheKey, loader: GlyphLoader) -> Glyph:
		"""
		Return a cached glyph or load it, sharing in-flight loads.

		Args:
			key: Cache key.
			loader: Coroutine factory producing the glyph on a miss.

		Returns:
			Glyph.
		"""
		glyph = self.get(key)
		if glyph is not None:
			return glyph
		task = self._in_flight.get(key)
		if task is None:
			task = self._start_load(key, loader)
		else:
			logger.debug("Joining in-flight load for %s", key)
		return await asyncio.shield(task)

	def preload(self, key: CacheKey, loader: GlyphLoader) -> asyncio.Task | None:
		"""
		Load a glyph in the background without blocking the caller.

		Failures are logged and dropped.

		Args:
			key: Cache key.
			loader: Coroutine factory producing the glyph.

		Returns:
			The background task, or None when the key is cached or loading.
		"""
		if key in self._in_flight or self._is_fresh(key):
			return None
		task = self._start_load(key, loader)

		def report(done: asyncio.Task) -> None:
			if done.cancelled():
				return
			error = done.exception()
			if error is not None:
				logger.debug("Preload failed for %s: %s", key, error)

		task.add_done_callback(report)
		return task
