"""
SVG markup validation, sanitizing and normalization.
"""

# Standard Library
import xml.etree.ElementTree as StdElementTree
import xml.sax.saxutils

# PIP3 modules
import defusedxml
import defusedxml.ElementTree as ElementTree

# local repo modules
import graffiti_compositor as gfc
import graffiti_compositor.config
import graffiti_compositor.errors


ParseFailure = gfc.errors.ParseFailure

CANONICAL_SIZE = gfc.config.CANONICAL_SIZE

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"
UNSAFE_ELEMENTS = {
	"script",
	"foreignObject",
	"iframe",
	"embed",
	"object",
}

StdElementTree.register_namespace("", SVG_NAMESPACE)
StdElementTree.register_namespace("xlink", XLINK_NAMESPACE)


#============================================
def local_name(tag: str) -> str:
	"""
	Strip the namespace from an XML tag.

	Args:
		tag: Tag such as "{http://www.w3.org/2000/svg}rect".

	Returns:
		Local tag name.
	"""
	if "}" in tag:
		return tag.rsplit("}", 1)[1]
	return tag


#============================================
def parse_length(value: str | None, default_value: float) -> float:
	"""
	Parse an SVG length attribute into a float.

	Args:
		value: Attribute value like "200" or "200px".
		default_value: Fallback when missing or not numeric.

	Returns:
		Parsed float value.
	"""
	if value is None:
		return default_value
	value = value.strip()
	if value.endswith("px"):
		value = value[:-2]
	if not value or value.endswith("%"):
		return default_value
	try:
		return float(value)
	except ValueError:
		return default_value


#============================================
def is_unsafe_reference(value: str) -> bool:
	return value.strip().lower().startswith("javascript:")


#============================================
def sanitize_element(element: StdElementTree.Element) -> int:
	"""
	Remove scriptable content from an element tree in place.

	Args:
		element: Root element.

	Returns:
		Number of removed elements and attributes.
	"""
	removed = 0
	for child in list(element):
		if not isinstance(child.tag, str):
			continue
		if local_name(child.tag) in UNSAFE_ELEMENTS:
			element.remove(child)
			removed += 1
			continue
		removed += sanitize_element(child)
	for name in list(element.attrib):
		attr = local_name(name)
		if attr.lower().startswith("on"):
			del element.attrib[name]
			removed += 1
			continue
		if attr == "href" and is_unsafe_reference(element.attrib[name]):
			del element.attrib[name]
			removed += 1
	return removed


#============================================
def parse_svg_root(markup: str, character: str) -> StdElementTree.Element:
	"""
	Parse glyph markup and return the root svg element.

	Args:
		markup: SVG text.
		character: Character the markup belongs to, for error reporting.

	Returns:
		Root element.

	Raises:
		ParseFailure: If the markup is not a well-formed svg document.
	"""
	if "<svg" not in markup or "</svg>" not in markup:
		raise ParseFailure(character, "missing svg element")
	try:
		root = ElementTree.fromstring(markup)
	except (StdElementTree.ParseError, defusedxml.DefusedXmlException) as error:
		raise ParseFailure(character, str(error)) from error
	if local_name(root.tag) != "svg":
		raise ParseFailure(character, f"root element is {local_name(root.tag)!r}")
	return root


#============================================
def prepare_markup(markup: str, character: str = "?") -> str:
	"""
	Validate, sanitize and normalize glyph markup for rasterization.

	A missing viewBox is derived from width and height, and missing
	width or height attributes default to the canonical glyph size.

	Args:
		markup: SVG text.
		character: Character the markup belongs to.

	Returns:
		Normalized SVG text.

	Raises:
		ParseFailure: If the markup is malformed.
	"""
	root = parse_svg_root(markup, character)
	sanitize_element(root)
	if root.get("viewBox") is None:
		width = parse_length(root.get("width"), float(CANONICAL_SIZE))
		height = parse_length(root.get("height"), float(CANONICAL_SIZE))
		root.set("viewBox", f"0 0 {width:g} {height:g}")
	if root.get("width") is None:
		root.set("width", str(CANONICAL_SIZE))
	if root.get("height") is None:
		root.set("height", str(CANONICAL_SIZE))
	if not root.tag.startswith("{"):
		root.set("xmlns", SVG_NAMESPACE)
	return StdElementTree.tostring(root, encoding="unicode")


#============================================
def validate_markup(markup: str) -> bool:
	"""
	Check whether markup would be accepted by prepare_markup.

	Args:
		markup: SVG text.

	Returns:
		True when the markup parses as an svg document.
	"""
	try:
		parse_svg_root(markup, "?")
	except ParseFailure:
		return False
	return True


#============================================
def build_placeholder_markup(character: str) -> str:
	"""
	Build the deterministic placeholder drawn for a failed character.

	Args:
		character: Character being replaced.

	Returns:
		SVG text.
	"""
	title = xml.sax.saxutils.escape(character)
	return (
		f'<svg xmlns="{SVG_NAMESPACE}" viewBox="0 0 100 100" width="200" height="200">'
		f"<title>{title}</title>"
		'<rect x="10" y="10" width="80" height="80" fill="#ffeeee" stroke="#ff0000" stroke-width="3"/>'
		'<path d="M25 25 L75 75 M75 25 L25 75" stroke="#ff0000" stroke-width="6"/>'
		"</svg>"
	)


#============================================
def build_blank_markup() -> str:
	return (
		f'<svg xmlns="{SVG_NAMESPACE}" width="{CANONICAL_SIZE}" height="{CANONICAL_SIZE}" '
		f'viewBox="0 0 {CANONICAL_SIZE} {CANONICAL_SIZE}"></svg>'
	)
