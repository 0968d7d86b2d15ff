"""
Raster profiling of glyph markup.

Glyph markup is rendered onto a square alpha raster at a working
resolution. The profile keeps the inked bounding box and, per column, the
vertical extent and density of inked cells. Bounds and column profiles are
reported in the canonical 200 unit glyph space regardless of the working
resolution so that profiles taken for preloading (at a reduced resolution)
can be mixed with full resolution profiles.
"""

# Standard Library
import asyncio
import logging
import math

# PIP3 modules
import fitz
import PIL.Image

# local repo modules
import graffiti_compositor as gfc
import graffiti_compositor.config
import graffiti_compositor.errors
import graffiti_compositor.glyph
import graffiti_compositor.svg_markup


Bounds = gfc.glyph.Bounds
ColumnRange = gfc.glyph.ColumnRange
Glyph = gfc.glyph.Glyph
ParseFailure = gfc.errors.ParseFailure

CANONICAL_SIZE = gfc.config.CANONICAL_SIZE
DEFAULT_RESOLUTION = gfc.config.DEFAULT_RESOLUTION
ALPHA_THRESHOLD = gfc.config.ALPHA_THRESHOLD

logger = logging.getLogger(__name__)


#============================================
def rasterize_markup(markup: str, character: str, resolution: int) -> PIL.Image.Image:
	"""
	Render SVG markup onto a square RGBA image.

	The document is stretched to fill the square regardless of its
	aspect ratio.

	Args:
		markup: Prepared SVG text.
		character: Character being rendered, for error reporting.
		resolution: Side length of the output image in pixels.

	Returns:
		RGBA image of size (resolution, resolution).

	Raises:
		ParseFailure: If the document cannot be opened or rendered.
	"""
	try:
		document = fitz.open(stream=markup.encode("utf-8"), filetype="svg")
	except (RuntimeError, ValueError) as error:
		raise ParseFailure(character, f"unable to open svg: {error}") from error
	try:
		page = document[0]
		rect = page.rect
		if rect.width <= 0 or rect.height <= 0:
			raise ParseFailure(character, "svg has an empty canvas")
		matrix = fitz.Matrix(resolution / rect.width, resolution / rect.height)
		pixmap = page.get_pixmap(matrix=matrix, alpha=True)
	except (RuntimeError, ValueError, IndexError) as error:
		raise ParseFailure(character, f"unable to render svg: {error}") from error
	finally:
		document.close()
	image = PIL.Image.frombytes("RGBA", [pixmap.width, pixmap.height], pixmap.samples)
	if image.size != (resolution, resolution):
		image = image.resize((resolution, resolution))
	return image


#============================================
def scan_alpha(
	alpha: bytes,
	resolution: int,
	stride: int,
) -> tuple[list[list[bool]], tuple[int, int, int, int] | None]:
	"""
	Threshold an alpha channel into a boolean grid.

	Args:
		alpha: Row-major alpha bytes of a square image.
		resolution: Side length of the image.
		stride: Sampling step in both axes.

	Returns:
		Tuple of (grid, bounds) where bounds is (left, right, top, bottom)
		of the sampled "on" cells, or None when nothing is inked.
	"""
	grid = [[False] * resolution for _ in range(resolution)]
	left = resolution
	right = -1
	top = resolution
	bottom = -1
	for y in range(0, resolution, stride):
		row_offset = y * resolution
		row = grid[y]
		for x in range(0, resolution, stride):
			if alpha[row_offset + x] <= ALPHA_THRESHOLD:
				continue
			row[x] = True
			left = min(left, x)
			right = max(right, x)
			top = min(top, y)
			bottom = max(bottom, y)
	if left > right or top > bottom:
		return (grid, None)
	return (grid, (left, right, top, bottom))


#============================================
def build_column_profile(
	grid: list[list[bool]],
	resolution: int,
	stride: int,
) -> list[ColumnRange]:
	"""
	Compute the vertical extent and density of every column.

	Sampled columns fill the skipped columns after them. Columns without
	content get a full-height, zero-density record.

	Args:
		grid: Boolean raster grid.
		resolution: Side length of the grid.
		stride: Sampling step used when scanning.

	Returns:
		One ColumnRange per column at the working resolution.
	"""
	empty = ColumnRange(top=0, bottom=resolution - 1, density=0.0)
	columns = [empty] * resolution
	for x in range(0, resolution, stride):
		range_top = -1
		range_bottom = -1
		count = 0
		for y in range(0, resolution, stride):
			if grid[y][x]:
				if range_top == -1:
					range_top = y
				range_bottom = y
				count += 1
		if range_top == -1:
			record = empty
		else:
			density = count / (range_bottom - range_top + 1)
			record = ColumnRange(top=range_top, bottom=range_bottom, density=density)
		for dx in range(stride):
			if x + dx < resolution:
				columns[x + dx] = record
	return columns


#============================================
def scale_bounds(bounds: tuple[int, int, int, int], resolution: int) -> Bounds:
	"""
	Rescale working-resolution bounds into canonical glyph units.

	Args:
		bounds: (left, right, top, bottom) at the working resolution.
		resolution: Working resolution.

	Returns:
		Bounds in canonical units.
	"""
	factor = CANONICAL_SIZE / resolution
	left, right, top, bottom = bounds
	return Bounds(
		left=math.floor(left * factor),
		right=math.ceil(right * factor),
		top=math.floor(top * factor),
		bottom=math.ceil(bottom * factor),
	)


#============================================
def resample_columns(columns: list[ColumnRange], resolution: int) -> list[ColumnRange]:
	"""
	Map a working-resolution column profile onto canonical columns.

	Args:
		columns: Column profile at the working resolution.
		resolution: Working resolution.

	Returns:
		Column profile with CANONICAL_SIZE entries.
	"""
	if resolution == CANONICAL_SIZE:
		return list(columns)
	factor = CANONICAL_SIZE / resolution
	empty = ColumnRange(top=0, bottom=CANONICAL_SIZE - 1, density=0.0)
	resampled = []
	for column in range(CANONICAL_SIZE):
		source = columns[min(resolution - 1, int(column / factor))]
		if source.density == 0.0:
			resampled.append(empty)
			continue
		resampled.append(
			ColumnRange(
				top=math.floor(source.top * factor),
				bottom=math.ceil(source.bottom * factor),
				density=source.density,
			)
		)
	return resampled


#============================================
def profile_markup(
	markup: str,
	character: str,
	variant: str = gfc.glyph.STANDARD,
	resolution: int = DEFAULT_RESOLUTION,
	stride: int | None = None,
) -> Glyph:
	"""
	Profile glyph markup into a Glyph.

	Args:
		markup: SVG text.
		character: Character the markup draws.
		variant: Glyph variant name.
		resolution: Working raster resolution.
		stride: Sampling stride, or None for the resolution default.

	Returns:
		Profiled Glyph in canonical units.

	Raises:
		ParseFailure: If the markup is malformed or unrasterizable.
	"""
	if resolution <= 0:
		raise ValueError(f"Resolution must be positive, got {resolution}")
	if stride is None:
		stride = gfc.config.sampling_stride(resolution)
	prepared = gfc.svg_markup.prepare_markup(markup, character)
	image = rasterize_markup(prepared, character, resolution)
	alpha = image.getchannel("A").tobytes()
	grid, raw_bounds = scan_alpha(alpha, resolution, stride)
	if raw_bounds is None:
		logger.debug("No inked cells for %r, using full canvas bounds", character)
		raw_bounds = (0, resolution - 1, 0, resolution - 1)
	columns = build_column_profile(grid, resolution, stride)
	return Glyph(
		character=character,
		variant=variant,
		markup=prepared,
		width=CANONICAL_SIZE,
		height=CANONICAL_SIZE,
		bounds=scale_bounds(raw_bounds, resolution),
		raster=grid,
		columns=resample_columns(columns, resolution),
		resolution=resolution,
	)


#============================================
async def profile_markup_async(
	markup: str,
	character: str,
	variant: str = gfc.glyph.STANDARD,
	resolution: int = DEFAULT_RESOLUTION,
	stride: int | None = None,
) -> Glyph:
	"""
	Profile markup in a worker thread so the event loop stays responsive.
	"""
	return await asyncio.to_thread(profile_markup, markup, character, variant, resolution, stride)
