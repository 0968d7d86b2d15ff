"""
Left-to-right layout of profiled glyphs.
"""

# Standard Library
import dataclasses

# local repo modules
import graffiti_compositor as gfc
import graffiti_compositor.config
import graffiti_compositor.glyph


Glyph = gfc.glyph.Glyph
BASE_SCALE_WIDTH = gfc.config.BASE_SCALE_WIDTH


@dataclasses.dataclass
class PlacedGlyph:
	glyph: Glyph
	x: float


@dataclasses.dataclass
class Composition:
	placements: list[PlacedGlyph]
	raw_positions: list[float]
	overlaps: list[float]
	content_width: float
	content_height: float
	base_scale: float
	offset_x: float
	offset_y: float
	text: str = ""
	style: str = ""

	@property
	def positions(self) -> list[float]:
		return [placement.x for placement in self.placements]

	@property
	def glyphs(self) -> list[Glyph]:
		return [placement.glyph for placement in self.placements]


#============================================
def compute_raw_positions(glyphs: list[Glyph], overlaps: list[float]) -> list[float]:
	"""
	Compute anchor x positions before normalization.

	position[0] = -left(0) and each following glyph advances by the
	previous glyph's inked width scaled by (1 - overlap), minus its own
	left bound.

	Args:
		glyphs: Glyphs in text order.
		overlaps: Overlap ratio for each adjacent pair.

	Returns:
		Raw x positions, one per glyph.
	"""
	if not glyphs:
		return []
	if len(overlaps) != len(glyphs) - 1:
		raise ValueError(f"Expected {len(glyphs) - 1} overlaps, got {len(overlaps)}")
	positions = [-glyphs[0].bounds.left]
	for index in range(1, len(glyphs)):
		prev = glyphs[index - 1]
		curr = glyphs[index]
		advance = prev.ink_width * (1.0 - overlaps[index - 1])
		positions.append(positions[-1] + advance - curr.bounds.left)
	return positions


#============================================
def compute_content_box(
	glyphs: list[Glyph],
	positions: list[float],
) -> tuple[float, float, float, float]:
	"""
	Compute the global bounding box of positioned glyphs.

	Args:
		glyphs: Glyphs in text order.
		positions: Anchor x position per glyph.

	Returns:
		Tuple of (min_x, max_x, min_y, max_y).
	"""
	min_x = min_y = float("inf")
	max_x = max_y = float("-inf")
	for glyph, x in zip(glyphs, positions):
		min_x = min(min_x, x + glyph.bounds.left * glyph.scale)
		max_x = max(max_x, x + glyph.bounds.right * glyph.scale)
		min_y = min(min_y, glyph.bounds.top * glyph.scale)
		max_y = max(max_y, glyph.bounds.bottom * glyph.scale)
	return (min_x, max_x, min_y, max_y)


#============================================
def compose_layout(
	glyphs: list[Glyph],
	overlaps: list[float],
	text: str = "",
	style: str = "",
) -> Composition:
	"""
	Lay out glyphs and normalize the result so content starts at x = 0.

	Args:
		glyphs: Glyphs in text order.
		overlaps: Overlap ratio for each adjacent pair.
		text: Source text, kept for the consumer.
		style: Style identifier, kept for the consumer.

	Returns:
		Composition.
	"""
	if not glyphs:
		return Composition(
			placements=[],
			raw_positions=[],
			overlaps=[],
			content_width=1.0,
			content_height=1.0,
			base_scale=1.0,
			offset_x=0.0,
			offset_y=0.0,
			text=text,
			style=style,
		)
	raw_positions = compute_raw_positions(glyphs, overlaps)
	min_x, max_x, min_y, max_y = compute_content_box(glyphs, raw_positions)
	placements = [
		PlacedGlyph(glyph=glyph, x=x - min_x)
		for glyph, x in zip(glyphs, raw_positions)
	]
	content_width = max(1.0, max_x - min_x)
	content_height = max(1.0, max_y - min_y)
	return Composition(
		placements=placements,
		raw_positions=raw_positions,
		overlaps=list(overlaps),
		content_width=content_width,
		content_height=content_height,
		base_scale=min(1.0, BASE_SCALE_WIDTH / content_width),
		offset_x=-min_x,
		offset_y=-min_y,
		text=text,
		style=style,
	)


#============================================
def composition_to_dict(composition: Composition) -> dict:
	"""
	Serialize a composition for a rendering consumer.

	Args:
		composition: Composition to serialize.

	Returns:
		JSON-compatible dict.
	"""
	glyphs = []
	for placement in composition.placements:
		glyph = placement.glyph
		glyphs.append(
			{
				"character": glyph.character,
				"variant": glyph.variant,
				"x": placement.x,
				"bounds": dataclasses.asdict(glyph.bounds),
				"scale": glyph.scale,
				"is_space": glyph.is_space,
				"is_placeholder": glyph.is_placeholder,
				"markup": glyph.markup,
			}
		)
	return {
		"text": composition.text,
		"style": composition.style,
		"content_width": composition.content_width,
		"content_height": composition.content_height,
		"base_scale": composition.base_scale,
		"offset_x": composition.offset_x,
		"offset_y": composition.offset_y,
		"overlaps": composition.overlaps,
		"glyphs": glyphs,
	}
