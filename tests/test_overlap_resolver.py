import json

import pytest

import graffiti_compositor.errors
import graffiti_compositor.glyph
import graffiti_compositor.overlap
import graffiti_compositor.overlap_table


Bounds = graffiti_compositor.glyph.Bounds
ColumnRange = graffiti_compositor.glyph.ColumnRange
Glyph = graffiti_compositor.glyph.Glyph
OverlapRule = graffiti_compositor.overlap.OverlapRule
OverlapTable = graffiti_compositor.overlap_table.OverlapTable


#============================================
def make_glyph(character: str, dense_columns: range | None = None, left: float = 0, right: float = 200) -> Glyph:
	"""
	Build a glyph whose column profile is dense only in the given columns.

	Args:
		character: Glyph character.
		dense_columns: Columns holding full-height ink.
		left: Left bound.
		right: Right bound.

	Returns:
		Glyph.
	"""
	columns = graffiti_compositor.glyph.empty_columns()
	for x in dense_columns or range(0):
		columns[x] = ColumnRange(top=0, bottom=199, density=1.0)
	return Glyph(
		character=character,
		variant=graffiti_compositor.glyph.STANDARD,
		markup="",
		width=200,
		height=200,
		bounds=Bounds(left=left, right=right, top=0, bottom=199),
		raster=[],
		columns=columns,
	)


#============================================
def test_lookup_tier_wins_over_rules() -> None:
	"""
	A table entry is returned as is, with case-insensitive keys.
	"""
	table = OverlapTable({"classic": {"a": {"b": 0.12}}})
	resolver = graffiti_compositor.overlap.build_overlap_resolver("classic", table)
	ratio = resolver.resolve(make_glyph("A"), make_glyph("B"))
	assert ratio == pytest.approx(0.12)


#============================================
def test_lookup_miss_falls_back_to_rule_maximum() -> None:
	"""
	Without a table entry the rule tier answers with the range maximum.
	"""
	table = OverlapTable({"classic": {"a": {"b": 0.12}}})
	resolver = graffiti_compositor.overlap.build_overlap_resolver("classic", table)
	assert resolver.resolve(make_glyph("b"), make_glyph("a")) == pytest.approx(0.3)
	other_style = graffiti_compositor.overlap.build_overlap_resolver("funk", table)
	assert other_style.resolve(make_glyph("a"), make_glyph("b")) == pytest.approx(0.3)


#============================================
def test_exception_pair_shrinks_maximum() -> None:
	"""
	An exception pair caps the maximum at 0.7 of the rule maximum.
	"""
	rule_set = graffiti_compositor.overlap.build_default_rule_set()
	rule_set.exceptions = {"a": ("v",)}
	min_overlap, max_overlap = rule_set.effective_range("a", "v")
	assert min_overlap == pytest.approx(0.1)
	assert max_overlap == pytest.approx(0.21)
	assert rule_set.effective_range("v", "a") == (pytest.approx(0.1), pytest.approx(0.3))


#============================================
def test_special_case_replaces_maximum() -> None:
	"""
	A special case for the following character overrides the maximum.
	"""
	rule_set = graffiti_compositor.overlap.build_default_rule_set()
	rule_set.rules["t"] = OverlapRule(min_overlap=0.05, max_overlap=0.3, special_cases={"o": 0.25, "i": 0.01})
	assert rule_set.effective_range("t", "o") == (pytest.approx(0.05), pytest.approx(0.25))
	assert rule_set.effective_range("t", "i") == (pytest.approx(0.05), pytest.approx(0.05))
	resolver = graffiti_compositor.overlap.build_overlap_resolver("classic", rule_set=rule_set)
	assert resolver.resolve(make_glyph("t"), make_glyph("O")) == pytest.approx(0.25)


#============================================
def test_space_has_zero_overlap() -> None:
	"""
	A space on either side disables overlap.
	"""
	resolver = graffiti_compositor.overlap.build_overlap_resolver("classic")
	space = graffiti_compositor.glyph.create_space_glyph()
	assert resolver.resolve(make_glyph("a"), space) == 0.0
	assert resolver.resolve(space, make_glyph("a")) == 0.0


#============================================
@pytest.mark.parametrize(
	("min_overlap", "max_overlap"),
	[(-0.1, 0.2), (0.3, 0.2), (0.1, 1.0)],
)
def test_invalid_rule_rejected(min_overlap: float, max_overlap: float) -> None:
	"""
	Rules must satisfy 0 <= min <= max < 1.
	"""
	with pytest.raises(graffiti_compositor.errors.InvalidOverlapRule):
		OverlapRule(min_overlap=min_overlap, max_overlap=max_overlap)


#============================================
def test_pixel_tier_full_collision_returns_maximum() -> None:
	"""
	Fully inked glyphs collide at the first candidate.
	"""
	resolver = graffiti_compositor.overlap.build_overlap_resolver("classic", use_pixel_collision=True)
	prev = make_glyph("a", range(200))
	curr = make_glyph("b", range(200))
	assert resolver.resolve(prev, curr) == pytest.approx(0.3)


#============================================
def test_pixel_tier_without_collision_returns_minimum() -> None:
	"""
	A glyph with no dense column never collides.
	"""
	resolver = graffiti_compositor.overlap.build_overlap_resolver("classic", use_pixel_collision=True)
	prev = make_glyph("a", range(200))
	curr = make_glyph("b")
	assert resolver.resolve(prev, curr) == pytest.approx(0.1)


#============================================
def test_pixel_tier_scans_down_to_first_collision() -> None:
	"""
	Ink at the far right of the previous glyph only meets the next glyph's
	left stroke once the overlap is small.
	"""
	tier = graffiti_compositor.overlap.PixelCollisionTier(
		graffiti_compositor.overlap.build_default_rule_set()
	)
	prev = make_glyph("a", range(180, 200))
	curr = make_glyph("b", range(0, 10))
	assert not tier.collides(prev, curr, 0.3)
	ratio = tier.resolve(prev, curr)
	assert 0.13 < ratio < 0.145
	assert tier.collides(prev, curr, ratio)


#============================================
def test_pixel_tier_ignores_lookup_table() -> None:
	"""
	The pixel chain does not consult the table.
	"""
	table = OverlapTable({"classic": {"a": {"b": 0.12}}})
	resolver = graffiti_compositor.overlap.build_overlap_resolver("classic", table, use_pixel_collision=True)
	assert resolver.resolve(make_glyph("a", range(200)), make_glyph("b", range(200))) == pytest.approx(0.3)


#============================================
def test_resolved_ratio_within_rule_range() -> None:
	"""
	Every tier answer stays inside the effective range.
	"""
	rule_set = graffiti_compositor.overlap.build_default_rule_set()
	resolver = graffiti_compositor.overlap.build_overlap_resolver("classic", use_pixel_collision=True)
	glyphs = [
		make_glyph("a", range(0, 200, 3)),
		make_glyph("v", range(150, 200)),
		make_glyph("e", range(0, 40)),
		make_glyph("o"),
	]
	overlaps = resolver.resolve_sequence(glyphs)
	assert len(overlaps) == 3
	for index, ratio in enumerate(overlaps):
		low, high = rule_set.effective_range(glyphs[index].character, glyphs[index + 1].character)
		assert low - 1e-9 <= ratio <= high + 1e-9


#============================================
def test_generate_overlap_table_covers_every_pair() -> None:
	"""
	Offline generation fills a ratio for each ordered pair.
	"""
	glyphs = {
		"a": make_glyph("a", range(200)),
		"b": make_glyph("b"),
	}
	table = graffiti_compositor.overlap.generate_overlap_table(glyphs, "classic")
	assert len(table) == 4
	assert table.lookup("classic", "a", "a") == pytest.approx(0.3)
	assert table.lookup("classic", "a", "b") == pytest.approx(0.1)


#============================================
@pytest.mark.parametrize("ratio", [1.0, -0.2, "0.1", True])
def test_overlap_table_rejects_bad_ratio(ratio: object) -> None:
	"""
	Ratios must be numbers in [0, 1).
	"""
	with pytest.raises(graffiti_compositor.errors.InvalidOverlapTable):
		OverlapTable({"classic": {"a": {"b": ratio}}})


#============================================
def test_overlap_table_file_io(tmp_path) -> None:
	"""
	Tables written to disk load back with the same ratios.
	"""
	path = tmp_path / "overlap.json"
	table = OverlapTable({"classic": {"A": {"b": 0.2}}, "funk": {"o": {"k": 0.05}}})
	graffiti_compositor.overlap_table.write_overlap_table(path, table)
	payload = json.loads(path.read_text(encoding="utf-8"))
	assert payload == {"classic": {"a": {"b": 0.2}}, "funk": {"o": {"k": 0.05}}}
	loaded = graffiti_compositor.overlap_table.load_overlap_table(path)
	assert loaded.lookup("classic", "a", "B") == pytest.approx(0.2)
	assert loaded.styles() == ["classic", "funk"]


#============================================
def test_overlap_table_rejects_bad_nesting(tmp_path) -> None:
	"""
	Malformed files raise InvalidOverlapTable.
	"""
	path = tmp_path / "overlap.json"
	path.write_text(json.dumps({"classic": ["a"]}), encoding="utf-8")
	with pytest.raises(graffiti_compositor.errors.InvalidOverlapTable):
		graffiti_compositor.overlap_table.load_overlap_table(path)
	path.write_text("{not json", encoding="utf-8")
	with pytest.raises(graffiti_compositor.errors.InvalidOverlapTable):
		graffiti_compositor.overlap_table.load_overlap_table(path)
