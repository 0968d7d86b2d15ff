import pytest

import graffiti_compositor.errors
import graffiti_compositor.svg_markup


#============================================
def test_prepare_markup_strips_scripts() -> None:
	"""
	Script elements and event handler attributes are removed.
	"""
	markup = (
		'<svg width="100" height="50">'
		"<script>alert(1)</script>"
		'<rect x="0" y="0" width="10" height="10" onclick="steal()"/>'
		'<a href="javascript:steal()"><rect x="20" y="0" width="10" height="10"/></a>'
		"</svg>"
	)
	prepared = graffiti_compositor.svg_markup.prepare_markup(markup, "a")
	assert "script" not in prepared
	assert "onclick" not in prepared
	assert "javascript" not in prepared
	assert 'viewBox="0 0 100 50"' in prepared
	assert "http://www.w3.org/2000/svg" in prepared


#============================================
def test_prepare_markup_fills_missing_size() -> None:
	"""
	Width and height default to the canonical glyph size.
	"""
	markup = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10"><rect width="5" height="5"/></svg>'
	prepared = graffiti_compositor.svg_markup.prepare_markup(markup, "a")
	assert 'width="200"' in prepared
	assert 'height="200"' in prepared
	assert 'viewBox="0 0 10 10"' in prepared


#============================================
@pytest.mark.parametrize(
	"markup",
	[
		"",
		"not an svg",
		"<svg><rect></svg>",
		"<html><svg></svg></html>",
	],
)
def test_malformed_markup_raises(markup: str) -> None:
	"""
	Malformed documents raise ParseFailure naming the character.
	"""
	with pytest.raises(graffiti_compositor.errors.ParseFailure) as excinfo:
		graffiti_compositor.svg_markup.prepare_markup(markup, "q")
	assert excinfo.value.character == "q"
	assert not graffiti_compositor.svg_markup.validate_markup(markup)


#============================================
def test_placeholder_markup_is_valid() -> None:
	"""
	The placeholder is itself acceptable markup and escapes its title.
	"""
	markup = graffiti_compositor.svg_markup.build_placeholder_markup("<")
	assert graffiti_compositor.svg_markup.validate_markup(markup)
	assert "&lt;" in markup


#============================================
@pytest.mark.parametrize(
	("value", "expected"),
	[(None, 200.0), ("120", 120.0), ("64px", 64.0), ("50%", 200.0), ("wide", 200.0)],
)
def test_parse_length(value: str | None, expected: float) -> None:
	"""
	Lengths parse to floats with a fallback for unusable values.
	"""
	assert graffiti_compositor.svg_markup.parse_length(value, 200.0) == expected
