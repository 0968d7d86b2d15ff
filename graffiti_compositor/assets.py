"""
Glyph asset registry and variant resolution.
"""

# Standard Library
import dataclasses
import logging
import pathlib
import re

# local repo modules
import graffiti_compositor as gfc
import graffiti_compositor.config
import graffiti_compositor.errors
import graffiti_compositor.glyph


AssetMissing = gfc.errors.AssetMissing
normalize_character = gfc.glyph.normalize_character

STANDARD = gfc.glyph.STANDARD
ALTERNATE = gfc.glyph.ALTERNATE
FIRST = gfc.glyph.FIRST
LAST = gfc.glyph.LAST
FALLBACK_ORDER = (STANDARD, ALTERNATE, FIRST, LAST)

POSITIONAL_VARIANT_STYLES = gfc.config.POSITIONAL_VARIANT_STYLES

# a1.svg, a2.svg, a1-first.svg, a1-last.svg, 0n1.svg
ASSET_FILENAME_RE = re.compile(
	r"^(?P<char>[a-z0-9])(?P<digit>n)?(?P<number>[12])(?:-(?P<position>first|last))?\.svg$"
)

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class GlyphAsset:
	character: str
	variant: str
	style: str
	markup: str | None = None
	path: pathlib.Path | None = None

	def load_markup(self) -> str:
		"""
		Return the asset markup, reading it from disk when needed.

		Returns:
			SVG text.

		Raises:
			AssetMissing: If the referenced file cannot be read.
		"""
		if self.markup is not None:
			return self.markup
		if self.path is None:
			raise AssetMissing(self.character, self.style)
		try:
			return self.path.read_text(encoding="utf-8")
		except OSError as error:
			logger.warning("Unable to read %s: %s", self.path, error)
			raise AssetMissing(self.character, self.style) from error


#============================================
def parse_asset_filename(name: str) -> tuple[str, str] | None:
	"""
	Parse an asset file name into (character, variant).

	Args:
		name: File name such as "a1-first.svg".

	Returns:
		Tuple of (character, variant) or None if the name is not an asset.
	"""
	match = ASSET_FILENAME_RE.match(name.lower())
	if match is None:
		return None
	character = match.group("char")
	if match.group("digit") and not character.isdigit():
		return None
	position = match.group("position")
	if match.group("number") == "2":
		if position:
			return None
		return (character, ALTERNATE)
	if position == "first":
		return (character, FIRST)
	if position == "last":
		return (character, LAST)
	return (character, STANDARD)


class AssetLibrary:
	"""
	Style -> variant -> character registry of glyph assets.
	"""

	def __init__(self) -> None:
		self._assets: dict[str, dict[str, dict[str, GlyphAsset]]] = {}

	def register(
		self,
		style: str,
		character: str,
		variant: str = STANDARD,
		markup: str | None = None,
		path: pathlib.Path | None = None,
	) -> GlyphAsset:
		"""
		Register inline markup or a file reference for a glyph variant.

		Args:
			style: Style identifier.
			character: Character drawn by the asset.
			variant: Variant name.
			markup: Inline SVG text.
			path: Path to an SVG file.

		Returns:
			The registered GlyphAsset.
		"""
		if variant not in gfc.glyph.VARIANTS:
			raise ValueError(f"Unknown glyph variant: {variant!r}")
		if (markup is None) == (path is None):
			raise ValueError("Exactly one of markup or path is required")
		key = normalize_character(character)
		asset = GlyphAsset(character=key, variant=variant, style=style, markup=markup, path=path)
		self._assets.setdefault(style, {}).setdefault(variant, {})[key] = asset
		return asset

	def lookup(self, style: str, variant: str, character: str) -> GlyphAsset | None:
		return self._assets.get(style, {}).get(variant, {}).get(normalize_character(character))

	def variants(self, style: str, character: str) -> list[str]:
		key = normalize_character(character)
		by_variant = self._assets.get(style, {})
		return [variant for variant in FALLBACK_ORDER if key in by_variant.get(variant, {})]

	def has_character(self, style: str, character: str) -> bool:
		return bool(self.variants(style, character))

	def characters(self, style: str) -> list[str]:
		found: set[str] = set()
		for by_character in self._assets.get(style, {}).values():
			found.update(by_character)
		return sorted(found)

	def styles(self) -> list[str]:
		return sorted(self._assets)

	def add_directory(self, directory: pathlib.Path, style: str) -> int:
		"""
		Register every recognised SVG file in a directory.

		Args:
			directory: Directory holding asset files.
			style: Style the files belong to.

		Returns:
			Number of registered assets.
		"""
		count = 0
		for path in sorted(pathlib.Path(directory).glob("*.svg")):
			parsed = parse_asset_filename(path.name)
			if parsed is None:
				logger.debug("Skipping unrecognised asset file %s", path)
				continue
			character, variant = parsed
			self.register(style, character, variant, path=path)
			count += 1
		return count

	@classmethod
	def from_directory(cls, root: pathlib.Path, default_style: str = gfc.config.DEFAULT_STYLE) -> "AssetLibrary":
		"""
		Build a library from an asset directory.

		SVG files directly under root belong to default_style; every
		subdirectory is loaded as a style named after the directory.

		Args:
			root: Asset root directory.
			default_style: Style used for top-level files.

		Returns:
			AssetLibrary.
		"""
		library = cls()
		root = pathlib.Path(root).expanduser()
		library.add_directory(root, default_style)
		for child in sorted(root.iterdir()):
			if child.is_dir():
				library.add_directory(child, child.name)
		return library


class AssetResolver:
	"""
	Pick the concrete asset for a character in its positional context.
	"""

	def __init__(self, library: AssetLibrary, positional_styles: set[str] | None = None) -> None:
		self.library = library
		if positional_styles is None:
			positional_styles = POSITIONAL_VARIANT_STYLES
		self.positional_styles = set(positional_styles)

	def resolve(
		self,
		character: str,
		style: str,
		is_first: bool = False,
		is_last: bool = False,
		use_alternate: bool = False,
	) -> GlyphAsset:
		"""
		Resolve the asset used for a character.

		Positional variants win when the style supports them, then a
		requested alternate, then the standard variant. A missing preferred
		variant falls back silently.

		Args:
			character: Character to draw.
			style: Style identifier.
			is_first: Character starts the text.
			is_last: Character ends the text.
			use_alternate: Alternate variant requested.

		Returns:
			GlyphAsset.

		Raises:
			AssetMissing: If no variant exists for the character.
		"""
		key = normalize_character(character)
		candidates = []
		if style in self.positional_styles:
			if is_first:
				candidates.append(FIRST)
			if is_last:
				candidates.append(LAST)
		if use_alternate:
			candidates.append(ALTERNATE)
		candidates.extend(FALLBACK_ORDER)
		for variant in candidates:
			asset = self.library.lookup(style, variant, key)
			if asset is not None:
				return asset
		raise AssetMissing(key, style)
