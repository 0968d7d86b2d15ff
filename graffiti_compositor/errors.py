"""
Error types raised by the compositing core.
"""


class CompositorError(Exception):
	"""
	Base class for compositing errors.
	"""


class AssetMissing(CompositorError):
	"""
	No glyph asset of any variant exists for a character in a style.
	"""

	def __init__(self, character: str, style: str) -> None:
		self.character = character
		self.style = style
		super().__init__(f"No glyph asset for {character!r} in style {style!r}")


class ParseFailure(CompositorError):
	"""
	Glyph markup is malformed or cannot be rasterized.
	"""

	def __init__(self, character: str, reason: str) -> None:
		self.character = character
		self.reason = reason
		super().__init__(f"Could not parse glyph markup for {character!r}: {reason}")


class InvalidOverlapTable(CompositorError):
	"""
	An overlap table payload does not have the expected shape.
	"""


class InvalidOverlapRule(CompositorError, ValueError):
	"""
	An overlap rule violates 0 <= min <= max < 1.
	"""
