"""
Overlap (kerning) resolution between adjacent glyphs.

The resolver runs an ordered chain of tiers. Each tier answers with a
ratio or None for a miss, and the first answer wins:

- LookupTier reads the precomputed per-style table.
- RuleTier derives the ratio from per-character overlap rules.
- PixelCollisionTier searches the column profiles of both glyphs.

The default chain is lookup then rules. The pixel collision chain is a
diagnostic path used to build tables offline.
"""

# Standard Library
import dataclasses
import logging
import math

# local repo modules
import graffiti_compositor as gfc
import graffiti_compositor.config
import graffiti_compositor.errors
import graffiti_compositor.glyph
import graffiti_compositor.overlap_table


Glyph = gfc.glyph.Glyph
OverlapTable = gfc.overlap_table.OverlapTable
InvalidOverlapRule = gfc.errors.InvalidOverlapRule
normalize_character = gfc.glyph.normalize_character

DENSITY_THRESHOLD = gfc.config.DENSITY_THRESHOLD
OVERLAP_SCAN_STEP = gfc.config.OVERLAP_SCAN_STEP
COLLISION_COLUMN_STEP = gfc.config.COLLISION_COLUMN_STEP
EXCEPTION_OVERLAP_FACTOR = gfc.config.EXCEPTION_OVERLAP_FACTOR
CANONICAL_SIZE = gfc.config.CANONICAL_SIZE

# float slack for the downward candidate scan
SCAN_EPSILON = 1e-9

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class OverlapRule:
	min_overlap: float
	max_overlap: float
	special_cases: dict[str, float] = dataclasses.field(default_factory=dict)

	def __post_init__(self) -> None:
		if not 0.0 <= self.min_overlap <= self.max_overlap < 1.0:
			raise InvalidOverlapRule(
				f"Expected 0 <= min <= max < 1, got {self.min_overlap}, {self.max_overlap}"
			)
		for character, ratio in self.special_cases.items():
			if not 0.0 <= ratio < 1.0:
				raise InvalidOverlapRule(f"Special case {character!r} ratio {ratio} outside [0, 1)")


@dataclasses.dataclass
class OverlapRuleSet:
	rules: dict[str, OverlapRule]
	default_rule: OverlapRule
	exceptions: dict[str, tuple[str, ...]]

	def rule_for(self, character: str) -> OverlapRule:
		return self.rules.get(normalize_character(character), self.default_rule)

	def effective_range(self, prev_char: str, curr_char: str) -> tuple[float, float]:
		"""
		Compute the permitted overlap range for a character pair.

		A special case for the next character replaces the maximum, and
		an exception pair shrinks the maximum toward the minimum.

		Args:
			prev_char: Preceding character.
			curr_char: Following character.

		Returns:
			Tuple of (min_overlap, max_overlap).
		"""
		prev_key = normalize_character(prev_char)
		curr_key = normalize_character(curr_char)
		rule = self.rule_for(prev_key)
		min_overlap = rule.min_overlap
		max_overlap = rule.max_overlap
		if curr_key in rule.special_cases:
			max_overlap = max(min_overlap, rule.special_cases[curr_key])
		if curr_key in self.exceptions.get(prev_key, ()):
			max_overlap = max(min_overlap, max_overlap * EXCEPTION_OVERLAP_FACTOR)
		return (min_overlap, max_overlap)


#============================================
def build_default_rule_set() -> OverlapRuleSet:
	"""
	Build the stock rule set: every letter uses the default range.

	Returns:
		OverlapRuleSet.
	"""
	default_rule = OverlapRule(
		min_overlap=gfc.config.DEFAULT_MIN_OVERLAP,
		max_overlap=gfc.config.DEFAULT_MAX_OVERLAP,
	)
	rules = {letter: default_rule for letter in "abcdefghijklmnopqrstuvwxyz"}
	return OverlapRuleSet(
		rules=rules,
		default_rule=default_rule,
		exceptions=dict(gfc.config.OVERLAP_EXCEPTIONS),
	)


class LookupTier:
	"""
	Answer from the precomputed overlap table of one style.
	"""

	name = "lookup"

	def __init__(self, table: OverlapTable, style: str) -> None:
		self.table = table
		self.style = style

	def resolve(self, prev: Glyph, curr: Glyph) -> float | None:
		return self.table.lookup(self.style, prev.character, curr.character)


class RuleTier:
	"""
	Answer with the top of the permitted rule range.
	"""

	name = "rule"

	def __init__(self, rule_set: OverlapRuleSet) -> None:
		self.rule_set = rule_set

	def resolve(self, prev: Glyph, curr: Glyph) -> float | None:
		_min_overlap, max_overlap = self.rule_set.effective_range(prev.character, curr.character)
		return max_overlap


class PixelCollisionTier:
	"""
	Search candidate overlaps from the maximum down for a column collision.

	The first candidate whose overlap region has a column pair with
	intersecting vertical ranges (both denser than the threshold) is
	returned. Without any collision the minimum overlap is returned.
	"""

	name = "pixel"

	def __init__(
		self,
		rule_set: OverlapRuleSet,
		step: float = OVERLAP_SCAN_STEP,
		column_step: int = COLLISION_COLUMN_STEP,
	) -> None:
		self.rule_set = rule_set
		self.step = step
		self.column_step = column_step

	def collides(self, prev: Glyph, curr: Glyph, overlap: float) -> bool:
		"""
		Check a single candidate overlap for a column collision.

		Args:
			prev: Preceding glyph.
			curr: Following glyph.
			overlap: Candidate overlap ratio.

		Returns:
			True if any compared column pair collides.
		"""
		prev_width = prev.bounds.right - prev.bounds.left
		start_x = math.floor(prev.bounds.right - prev_width * overlap)
		end_x = min(math.ceil(prev.bounds.right), len(prev.columns))
		for x in range(max(0, start_x), end_x, self.column_step):
			curr_x = int(x - start_x + curr.bounds.left)
			if curr_x < 0 or curr_x >= min(CANONICAL_SIZE, len(curr.columns)):
				continue
			prev_range = prev.columns[x]
			curr_range = curr.columns[curr_x]
			range_overlap = min(prev_range.bottom, curr_range.bottom) - max(prev_range.top, curr_range.top)
			if (
				range_overlap > 0
				and prev_range.density > DENSITY_THRESHOLD
				and curr_range.density > DENSITY_THRESHOLD
			):
				return True
		return False

	def resolve(self, prev: Glyph, curr: Glyph) -> float | None:
		min_overlap, max_overlap = self.rule_set.effective_range(prev.character, curr.character)
		index = 0
		while True:
			candidate = max_overlap - index * self.step
			if candidate < min_overlap - SCAN_EPSILON:
				break
			if self.collides(prev, curr, candidate):
				return max(min_overlap, candidate)
			index += 1
		return min_overlap


class OverlapResolver:
	"""
	Ordered chain of overlap tiers.
	"""

	def __init__(self, tiers: list, rule_set: OverlapRuleSet) -> None:
		if not tiers:
			raise ValueError("OverlapResolver needs at least one tier")
		self.tiers = list(tiers)
		self.rule_set = rule_set

	def resolve(self, prev: Glyph, curr: Glyph) -> float:
		"""
		Compute the overlap ratio between two adjacent glyphs.

		Args:
			prev: Preceding glyph.
			curr: Following glyph.

		Returns:
			Overlap ratio; 0 when either glyph is a space.
		"""
		if prev.is_space or curr.is_space:
			return 0.0
		for tier in self.tiers:
			ratio = tier.resolve(prev, curr)
			if ratio is not None:
				logger.debug(
					"Overlap %r->%r from %s tier: %.3f",
					prev.character,
					curr.character,
					tier.name,
					ratio,
				)
				return ratio
		min_overlap, _max_overlap = self.rule_set.effective_range(prev.character, curr.character)
		return min_overlap

	def resolve_sequence(self, glyphs: list[Glyph]) -> list[float]:
		"""
		Compute the overlap for every adjacent pair.

		Args:
			glyphs: Glyphs in text order.

		Returns:
			List of len(glyphs) - 1 ratios.
		"""
		return [self.resolve(glyphs[index - 1], glyphs[index]) for index in range(1, len(glyphs))]


#============================================
def build_overlap_resolver(
	style: str,
	table: OverlapTable | None = None,
	rule_set: OverlapRuleSet | None = None,
	use_pixel_collision: bool = False,
) -> OverlapResolver:
	"""
	Compose the tier chain for a style.

	Args:
		style: Active style.
		table: Precomputed overlap table.
		rule_set: Overlap rules, defaults to the stock rules.
		use_pixel_collision: Use the pixel collision search instead of
			the lookup and rule tiers.

	Returns:
		OverlapResolver.
	"""
	if rule_set is None:
		rule_set = build_default_rule_set()
	if use_pixel_collision:
		return OverlapResolver([PixelCollisionTier(rule_set)], rule_set)
	tiers: list = []
	if table is not None:
		tiers.append(LookupTier(table, style))
	tiers.append(RuleTier(rule_set))
	return OverlapResolver(tiers, rule_set)


#============================================
def generate_overlap_table(
	glyphs: dict[str, Glyph],
	style: str,
	rule_set: OverlapRuleSet | None = None,
	table: OverlapTable | None = None,
) -> OverlapTable:
	"""
	Fill an overlap table for every character pair with the pixel search.

	Args:
		glyphs: Profiled standard glyphs keyed by character.
		style: Style the ratios belong to.
		rule_set: Overlap rules bounding the search.
		table: Existing table to update, or None for a new one.

	Returns:
		The filled OverlapTable.
	"""
	if rule_set is None:
		rule_set = build_default_rule_set()
	if table is None:
		table = OverlapTable()
	tier = PixelCollisionTier(rule_set)
	for prev_char, prev in sorted(glyphs.items()):
		for next_char, curr in sorted(glyphs.items()):
			if prev.is_space or curr.is_space:
				continue
			ratio = tier.resolve(prev, curr)
			table.set_ratio(style, prev_char, next_char, round(ratio, 3))
	return table
