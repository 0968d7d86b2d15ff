import asyncio

import pytest

import graffiti_compositor.errors
import graffiti_compositor.raster


RECT_MARKUP = (
	'<svg xmlns="http://www.w3.org/2000/svg" width="200" height="200" viewBox="0 0 200 200">'
	'<rect x="40" y="20" width="100" height="160" fill="#000000"/>'
	"</svg>"
)

EMPTY_MARKUP = (
	'<svg xmlns="http://www.w3.org/2000/svg" width="200" height="200" viewBox="0 0 200 200"></svg>'
)


#============================================
def test_rect_bounds_full_resolution() -> None:
	"""
	A solid rectangle profiles to its own box within the sampling stride.
	"""
	glyph = graffiti_compositor.raster.profile_markup(RECT_MARKUP, "i")
	assert glyph.width == 200
	assert glyph.height == 200
	assert abs(glyph.bounds.left - 40) <= 2
	assert abs(glyph.bounds.right - 140) <= 3
	assert abs(glyph.bounds.top - 20) <= 2
	assert abs(glyph.bounds.bottom - 180) <= 3
	assert len(glyph.columns) == 200


#============================================
def test_rect_bounds_preload_resolution() -> None:
	"""
	Profiles taken at half resolution report canonical units.
	"""
	glyph = graffiti_compositor.raster.profile_markup(RECT_MARKUP, "i", resolution=100)
	assert glyph.resolution == 100
	assert abs(glyph.bounds.left - 40) <= 3
	assert abs(glyph.bounds.right - 140) <= 3
	assert abs(glyph.bounds.top - 20) <= 3
	assert abs(glyph.bounds.bottom - 180) <= 3
	assert len(glyph.columns) == 200
	assert glyph.columns[90].density > 0.1


#============================================
def test_column_profile_of_rect() -> None:
	"""
	Inked columns carry the rectangle extent; empty columns are blank.
	"""
	glyph = graffiti_compositor.raster.profile_markup(RECT_MARKUP, "i")
	inked = glyph.columns[90]
	assert inked.density > 0.1
	assert abs(inked.top - 20) <= 2
	assert abs(inked.bottom - 180) <= 3
	blank = glyph.columns[10]
	assert blank.density == 0.0
	assert blank.top == 0
	assert blank.bottom == 199


#============================================
def test_empty_svg_uses_full_canvas() -> None:
	"""
	A glyph without ink reports the full canvas as its bounds.
	"""
	glyph = graffiti_compositor.raster.profile_markup(EMPTY_MARKUP, "x")
	assert glyph.bounds.left == 0
	assert glyph.bounds.top == 0
	assert glyph.bounds.right == 199
	assert glyph.bounds.bottom == 199
	assert all(column.density == 0.0 for column in glyph.columns)


#============================================
def test_malformed_svg_raises_parse_failure() -> None:
	"""
	Broken markup never produces a glyph.
	"""
	with pytest.raises(graffiti_compositor.errors.ParseFailure):
		graffiti_compositor.raster.profile_markup("<svg><g></svg>", "k")


#============================================
def test_scan_alpha_threshold() -> None:
	"""
	Only alpha values above the threshold count as ink.
	"""
	alpha = bytearray(16)
	alpha[5] = 10
	alpha[10] = 11
	grid, bounds = graffiti_compositor.raster.scan_alpha(bytes(alpha), 4, 1)
	assert bounds == (2, 2, 2, 2)
	assert grid[2][2]
	assert not grid[1][1]


#============================================
def test_profile_markup_async() -> None:
	"""
	The async wrapper returns the same profile as the sync call.
	"""
	glyph = asyncio.run(graffiti_compositor.raster.profile_markup_async(RECT_MARKUP, "i"))
	expected = graffiti_compositor.raster.profile_markup(RECT_MARKUP, "i")
	assert glyph.bounds == expected.bounds
