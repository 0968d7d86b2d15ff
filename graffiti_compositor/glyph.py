"""
Glyph data model shared by the profiler, cache, overlap and layout modules.
"""

# Standard Library
import dataclasses

# local repo modules
import graffiti_compositor as gfc
import graffiti_compositor.config
import graffiti_compositor.svg_markup


CANONICAL_SIZE = gfc.config.CANONICAL_SIZE
SPACE_WIDTH = gfc.config.SPACE_WIDTH

STANDARD = "standard"
ALTERNATE = "alternate"
FIRST = "first"
LAST = "last"
VARIANTS = (STANDARD, ALTERNATE, FIRST, LAST)


@dataclasses.dataclass(frozen=True)
class Bounds:
	left: float
	right: float
	top: float
	bottom: float

	def __post_init__(self) -> None:
		if self.left > self.right or self.top > self.bottom:
			raise ValueError(f"Inverted bounds: {self}")

	@property
	def width(self) -> float:
		return self.right - self.left

	@property
	def height(self) -> float:
		return self.bottom - self.top


@dataclasses.dataclass(frozen=True)
class ColumnRange:
	top: float
	bottom: float
	density: float


@dataclasses.dataclass(eq=False)
class Glyph:
	character: str
	variant: str
	markup: str
	width: float
	height: float
	bounds: Bounds
	raster: list[list[bool]]
	columns: list[ColumnRange]
	scale: float = 1.0
	resolution: int = CANONICAL_SIZE
	is_space: bool = False
	is_placeholder: bool = False

	def __post_init__(self) -> None:
		if self.variant not in VARIANTS:
			raise ValueError(f"Unknown glyph variant: {self.variant!r}")
		if self.scale <= 0:
			raise ValueError(f"Glyph scale must be positive, got {self.scale}")

	@property
	def ink_width(self) -> float:
		"""
		Width of the inked region used for advancing the layout.
		"""
		return self.bounds.right - self.bounds.left


#============================================
def normalize_character(character: str) -> str:
	"""
	Case-normalize a character for asset and overlap lookups.

	Args:
		character: Single character.

	Returns:
		Lower-case letter, or the character unchanged when not alphabetic.
	"""
	if character.isalpha():
		return character.lower()
	return character


#============================================
def empty_columns(size: int = CANONICAL_SIZE) -> list[ColumnRange]:
	"""
	Build the column profile of a canvas with no content.

	Args:
		size: Number of columns.

	Returns:
		Full-height, zero-density records.
	"""
	return [ColumnRange(top=0, bottom=size - 1, density=0.0) for _ in range(size)]


#============================================
def create_space_glyph() -> Glyph:
	"""
	Build the degenerate glyph used for a space.

	Returns:
		Glyph with a fixed width and an empty raster.
	"""
	return Glyph(
		character=" ",
		variant=STANDARD,
		markup=gfc.svg_markup.build_blank_markup(),
		width=SPACE_WIDTH,
		height=CANONICAL_SIZE,
		bounds=Bounds(left=0, right=SPACE_WIDTH, top=0, bottom=CANONICAL_SIZE),
		raster=[[False] * CANONICAL_SIZE for _ in range(CANONICAL_SIZE)],
		columns=empty_columns(),
		is_space=True,
	)
