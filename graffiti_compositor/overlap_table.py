"""
Precomputed overlap tables: style -> previous character -> next character -> ratio.
"""

# Standard Library
import json
import logging
import pathlib

# local repo modules
import graffiti_compositor as gfc
import graffiti_compositor.errors
import graffiti_compositor.glyph


InvalidOverlapTable = gfc.errors.InvalidOverlapTable
normalize_character = gfc.glyph.normalize_character

logger = logging.getLogger(__name__)


class OverlapTable:
	"""
	Read-mostly nested mapping of precomputed overlap ratios.
	"""

	def __init__(self, data: dict[str, dict[str, dict[str, float]]] | None = None) -> None:
		self._data: dict[str, dict[str, dict[str, float]]] = {}
		if data:
			for style, by_prev in data.items():
				for prev_char, by_next in by_prev.items():
					for next_char, ratio in by_next.items():
						self.set_ratio(style, prev_char, next_char, ratio)

	def __len__(self) -> int:
		return sum(len(by_next) for by_prev in self._data.values() for by_next in by_prev.values())

	def lookup(self, style: str, prev_char: str, next_char: str) -> float | None:
		"""
		Look up a ratio; None means the pair is not in the table.
		"""
		by_prev = self._data.get(style)
		if by_prev is None:
			return None
		by_next = by_prev.get(normalize_character(prev_char))
		if by_next is None:
			return None
		return by_next.get(normalize_character(next_char))

	def set_ratio(self, style: str, prev_char: str, next_char: str, ratio: float) -> None:
		if isinstance(ratio, bool) or not isinstance(ratio, (int, float)):
			raise InvalidOverlapTable(f"Ratio for {prev_char!r}->{next_char!r} is not a number: {ratio!r}")
		if not 0.0 <= ratio < 1.0:
			raise InvalidOverlapTable(f"Ratio for {prev_char!r}->{next_char!r} outside [0, 1): {ratio}")
		by_prev = self._data.setdefault(style, {})
		by_prev.setdefault(normalize_character(prev_char), {})[normalize_character(next_char)] = float(ratio)

	def styles(self) -> list[str]:
		return sorted(self._data)

	def to_dict(self) -> dict[str, dict[str, dict[str, float]]]:
		return {
			style: {prev_char: dict(by_next) for prev_char, by_next in by_prev.items()}
			for style, by_prev in self._data.items()
		}


#============================================
def parse_overlap_table(payload: object) -> OverlapTable:
	"""
	Validate a decoded JSON payload and build a table from it.

	Args:
		payload: Decoded JSON value.

	Returns:
		OverlapTable.

	Raises:
		InvalidOverlapTable: If the nesting or values are wrong.
	"""
	if not isinstance(payload, dict):
		raise InvalidOverlapTable("Overlap table must be a JSON object")
	for style, by_prev in payload.items():
		if not isinstance(by_prev, dict):
			raise InvalidOverlapTable(f"Style {style!r} must map to an object")
		for prev_char, by_next in by_prev.items():
			if not isinstance(by_next, dict):
				raise InvalidOverlapTable(f"Entry {style!r}/{prev_char!r} must map to an object")
	return OverlapTable(payload)


#============================================
def load_overlap_table(path: pathlib.Path) -> OverlapTable:
	"""
	Load an overlap table JSON file.

	Args:
		path: Table path.

	Returns:
		OverlapTable.
	"""
	text = pathlib.Path(path).read_text(encoding="utf-8")
	try:
		payload = json.loads(text)
	except json.JSONDecodeError as error:
		raise InvalidOverlapTable(f"{path}: {error}") from error
	table = parse_overlap_table(payload)
	logger.debug("Loaded %d overlap pairs from %s", len(table), path)
	return table


#============================================
def write_overlap_table(path: pathlib.Path, table: OverlapTable) -> None:
	"""
	Write an overlap table to disk as JSON.

	Args:
		path: Output path.
		table: Table to write.
	"""
	text = json.dumps(table.to_dict(), indent=2, sort_keys=True)
	pathlib.Path(path).write_text(text, encoding="utf-8")
	logger.info("Wrote %d overlap pairs to %s", len(table), path)
