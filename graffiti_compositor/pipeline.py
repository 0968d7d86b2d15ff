"""
Compositing pipeline: text -> assets -> profiled glyphs -> overlaps -> layout.

Glyphs are resolved in small batches with a short yield between batches so
a long string never holds the event loop. Every compose call takes a new
generation number; a call that finishes after a newer one started drops
its result, so late results from interrupted typing never overwrite a
newer composition.
"""

# Standard Library
import asyncio
import logging

# local repo modules
import graffiti_compositor as gfc
import graffiti_compositor.assets
import graffiti_compositor.cache
import graffiti_compositor.config
import graffiti_compositor.errors
import graffiti_compositor.glyph
import graffiti_compositor.history
import graffiti_compositor.layout
import graffiti_compositor.options
import graffiti_compositor.overlap
import graffiti_compositor.overlap_table
import graffiti_compositor.raster
import graffiti_compositor.svg_markup


AssetLibrary = gfc.assets.AssetLibrary
AssetResolver = gfc.assets.AssetResolver
GlyphAsset = gfc.assets.GlyphAsset
CacheKey = gfc.cache.CacheKey
GlyphCache = gfc.cache.GlyphCache
CompositorConfig = gfc.config.CompositorConfig
AssetMissing = gfc.errors.AssetMissing
ParseFailure = gfc.errors.ParseFailure
Glyph = gfc.glyph.Glyph
HistoryEntry = gfc.history.HistoryEntry
HistoryManager = gfc.history.HistoryManager
Composition = gfc.layout.Composition
CustomizationOptions = gfc.options.CustomizationOptions
OverlapRuleSet = gfc.overlap.OverlapRuleSet
OverlapTable = gfc.overlap_table.OverlapTable

COMMON_LETTERS = gfc.config.COMMON_LETTERS
FOLLOWING_LETTERS = gfc.config.FOLLOWING_LETTERS
DEFAULT_FOLLOWING_LETTERS = gfc.config.DEFAULT_FOLLOWING_LETTERS

logger = logging.getLogger(__name__)


#============================================
def normalize_text(text: str) -> str:
	"""
	Normalize input text for compositing.

	Args:
		text: Raw input text.

	Returns:
		Trimmed text with lower-case letters and plain spaces.
	"""
	characters = []
	for character in text.strip():
		if character.isspace():
			characters.append(" ")
			continue
		characters.append(gfc.glyph.normalize_character(character))
	return "".join(characters)


class GlyphCompositor:
	"""
	Compose text into positioned glyphs for one session.

	Calls are expected to come from a single event loop; overlapping
	compose calls are allowed and resolved by generation number.
	"""

	def __init__(
		self,
		library: AssetLibrary,
		config: CompositorConfig | None = None,
		cache: GlyphCache | None = None,
		table: OverlapTable | None = None,
		rule_set: OverlapRuleSet | None = None,
		history: HistoryManager | None = None,
	) -> None:
		if config is None:
			config = gfc.config.build_default_config()
		if cache is None:
			cache = GlyphCache(ttl_seconds=config.cache_ttl_seconds)
		if rule_set is None:
			rule_set = gfc.overlap.build_default_rule_set()
		if history is None:
			history = HistoryManager()
		self.library = library
		self.config = config
		self.cache = cache
		self.table = table if table is not None else OverlapTable()
		self.rule_set = rule_set
		self.history = history
		self.asset_resolver = AssetResolver(library)
		self.options = CustomizationOptions()
		self.latest: Composition | None = None
		self.displayed_text = ""
		self._generation = 0
		self._placeholders: dict[str, Glyph] = {}

	@property
	def style(self) -> str:
		return self.config.style

	@property
	def generation(self) -> int:
		return self._generation

	def set_style(self, style: str) -> None:
		"""
		Switch the active style, dropping cached glyphs of the old one.

		Args:
			style: New style identifier.
		"""
		if style == self.config.style:
			return
		self.cache.clear(self.config.style)
		self.config.style = style

	def build_overlap_resolver(self) -> gfc.overlap.OverlapResolver:
		return gfc.overlap.build_overlap_resolver(
			self.config.style,
			self.table,
			self.rule_set,
			self.config.use_pixel_collision,
		)

	def _loader(self, asset: GlyphAsset, resolution: int):
		async def load() -> Glyph:
			markup = await asyncio.to_thread(asset.load_markup)
			return await gfc.raster.profile_markup_async(
				markup,
				asset.character,
				asset.variant,
				resolution,
			)

		return load

	async def placeholder_glyph(self, character: str) -> Glyph:
		"""
		Return the placeholder glyph drawn for a failed character.

		Args:
			character: Character being replaced.

		Returns:
			Profiled placeholder Glyph.
		"""
		glyph = self._placeholders.get(character)
		if glyph is None:
			markup = gfc.svg_markup.build_placeholder_markup(character)
			glyph = await gfc.raster.profile_markup_async(
				markup,
				character,
				resolution=self.config.resolution,
			)
			glyph.is_placeholder = True
			self._placeholders[character] = glyph
		return glyph

	async def resolve_glyph(
		self,
		character: str,
		index: int,
		length: int,
		use_alternate: bool = False,
	) -> Glyph:
		"""
		Resolve and profile one character, degrading to a placeholder.

		Args:
			character: Normalized character.
			index: Position in the text.
			length: Text length.
			use_alternate: Request the alternate variant.

		Returns:
			Glyph for the character.
		"""
		if character == " ":
			return gfc.glyph.create_space_glyph()
		try:
			asset = self.asset_resolver.resolve(
				character,
				self.config.style,
				is_first=index == 0,
				is_last=index == length - 1,
				use_alternate=use_alternate,
			)
			key = CacheKey(asset.character, asset.variant, asset.style)
			return await self.cache.fetch(key, self._loader(asset, self.config.resolution))
		except (AssetMissing, ParseFailure) as error:
			logger.warning("Using placeholder for %r: %s", character, error)
			return await self.placeholder_glyph(character)

	async def resolve_glyphs(
		self,
		text: str,
		generation: int,
		alternates: set[int] | None = None,
	) -> list[Glyph] | None:
		"""
		Resolve every character of the text in batches.

		Args:
			text: Normalized text.
			generation: Generation of the calling compose.
			alternates: Indices that request the alternate variant.

		Returns:
			Glyphs in text order, or None if a newer compose started.
		"""
		alternates = alternates or set()
		batch_size = max(1, self.config.batch_size)
		glyphs: list[Glyph] = []
		for start in range(0, len(text), batch_size):
			batch = text[start:start + batch_size]
			results = await asyncio.gather(
				*(
					self.resolve_glyph(character, start + offset, len(text), start + offset in alternates)
					for offset, character in enumerate(batch)
				)
			)
			glyphs.extend(results)
			if generation != self._generation:
				return None
			if start + batch_size < len(text):
				await asyncio.sleep(self.config.batch_yield_seconds)
		return glyphs

	async def compose(
		self,
		text: str,
		options: CustomizationOptions | None = None,
		preset_id: str | None = None,
		alternates: set[int] | None = None,
	) -> Composition | None:
		"""
		Compose text into a Composition.

		Args:
			text: Input text.
			options: Options to record with the result.
			preset_id: Preset the options came from.
			alternates: Indices that request the alternate variant.

		Returns:
			The Composition, or None when a newer compose superseded it.

		Raises:
			ValueError: If the text is blank.
		"""
		normalized = normalize_text(text)
		if not normalized:
			raise ValueError("Text must contain at least one visible character")
		self._generation += 1
		generation = self._generation
		style = self.config.style
		glyphs = await self.resolve_glyphs(normalized, generation, alternates)
		if glyphs is None or generation != self._generation:
			logger.debug("Dropping superseded composition for %r", text)
			return None
		overlaps = self.build_overlap_resolver().resolve_sequence(glyphs)
		composition = gfc.layout.compose_layout(glyphs, overlaps, text=normalized, style=style)
		self.latest = composition
		if options is not None:
			self.options = options
		if self.history.is_replay_pending or text != self.displayed_text:
			self.history.append(
				HistoryEntry(text=text, options=self.options.to_dict(), preset_id=preset_id)
			)
		self.displayed_text = text
		if self.config.preload_enabled:
			self.preload_following(normalized)
		return composition

	async def compose_snapshot(self, entry: HistoryEntry) -> Composition | None:
		"""
		Compose a snapshot restored from history.

		Args:
			entry: History entry to render.

		Returns:
			The Composition, or None when superseded.
		"""
		options = CustomizationOptions(**entry.options)
		return await self.compose(entry.text, options=options, preset_id=entry.preset_id)

	async def undo(self) -> Composition | None:
		entry = self.history.undo()
		if entry is None:
			return None
		return await self.compose_snapshot(entry)

	async def redo(self) -> Composition | None:
		entry = self.history.redo()
		if entry is None:
			return None
		return await self.compose_snapshot(entry)

	def update_options(
		self,
		updates: dict,
		preset_id: str | None = None,
		record: bool = True,
	) -> CustomizationOptions:
		"""
		Apply option updates, recording a history entry unless told not to.

		Args:
			updates: Field name to new value.
			preset_id: Preset the updates came from.
			record: False for transient changes such as slider drags.

		Returns:
			The merged options.
		"""
		self.options = gfc.options.merge_options(self.options, updates)
		if record:
			self.history.append(
				HistoryEntry(
					text=self.displayed_text,
					options=self.options.to_dict(),
					preset_id=preset_id,
				)
			)
		return self.options

	def apply_preset(self, preset_id: str) -> CustomizationOptions:
		preset = gfc.options.get_preset(preset_id)
		return self.update_options(preset.to_dict(), preset_id=preset_id.upper())

	def preload_characters(self, characters: str) -> list[asyncio.Task]:
		"""
		Start background profiling for characters at the preload resolution.

		Args:
			characters: Characters to preload.

		Returns:
			Tasks that were started.
		"""
		tasks = []
		for character in characters:
			if character == " " or not self.library.has_character(self.config.style, character):
				continue
			asset = self.asset_resolver.resolve(character, self.config.style)
			key = CacheKey(asset.character, asset.variant, asset.style)
			task = self.cache.preload(key, self._loader(asset, self.config.preload_resolution))
			if task is not None:
				tasks.append(task)
		return tasks

	def preload_following(self, text: str) -> list[asyncio.Task]:
		"""
		Preload characters likely to be typed after the text.
		"""
		if not text:
			return []
		following = FOLLOWING_LETTERS.get(text[-1], DEFAULT_FOLLOWING_LETTERS)
		return self.preload_characters(following)

	def preload_common_letters(self) -> list[asyncio.Task]:
		return self.preload_characters(COMMON_LETTERS)

