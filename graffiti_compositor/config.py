"""
Shared configuration and constants.
"""

import dataclasses


CANONICAL_SIZE = 200
DEFAULT_RESOLUTION = 200
PRELOAD_RESOLUTION = 100
SAMPLING_STRIDE = 2
STRIDE_RESOLUTION_THRESHOLD = 100
ALPHA_THRESHOLD = 10
SPACE_WIDTH = 70
BASE_SCALE_WIDTH = 1000.0

DENSITY_THRESHOLD = 0.1
OVERLAP_SCAN_STEP = 0.005
COLLISION_COLUMN_STEP = 2
EXCEPTION_OVERLAP_FACTOR = 0.7
DEFAULT_MIN_OVERLAP = 0.1
DEFAULT_MAX_OVERLAP = 0.3
OVERLAP_EXCEPTIONS = {
	"a": ("v", "w", "y"),
	"v": ("a", "e", "o"),
	"w": ("a", "e", "o"),
	"y": ("a", "e", "o"),
}

CACHE_TTL_SECONDS = 30 * 60
BATCH_SIZE = 5
BATCH_YIELD_SECONDS = 0.005

DEFAULT_STYLE = "straight"
POSITIONAL_VARIANT_STYLES = {
	"funk",
}

COMMON_LETTERS = "etaoinsrhdlucmfywgpbvkjxqz"
DEFAULT_FOLLOWING_LETTERS = "etaoinsrh"
FOLLOWING_LETTERS = {
	"e": "rndsalm",
	"t": "hoiearu",
	"a": "nrltscb",
	"o": "nrufmwp",
	"i": "ntscdlm",
	"n": "gdeotsc",
	"s": "teopiau",
	"h": "eaiotur",
	"r": "eaoisy",
	"d": "eiaosu",
	"l": "eiaouly",
	"u": "rnsltcpm",
	"c": "oeahktu",
	"m": "aeiopbu",
	"f": "oiraule",
	"w": "aioehns",
	"g": "aeorihlu",
	"p": "aeorplu",
	"b": "eaolury",
	"v": "eaiouy",
	"k": "eiasnl",
	"j": "aeouir",
	"x": "ptaiec",
	"q": "u",
	"z": "eaio",
	" ": "tasiwcbpfm",
}


@dataclasses.dataclass
class CompositorConfig:
	style: str
	resolution: int
	preload_resolution: int
	batch_size: int
	batch_yield_seconds: float
	cache_ttl_seconds: float
	use_pixel_collision: bool
	preload_enabled: bool


#============================================
def build_default_config(style: str = DEFAULT_STYLE) -> CompositorConfig:
	"""
	Build a compositor config populated with the defaults.

	Args:
		style: Active glyph style.

	Returns:
		CompositorConfig.
	"""
	return CompositorConfig(
		style=style,
		resolution=DEFAULT_RESOLUTION,
		preload_resolution=PRELOAD_RESOLUTION,
		batch_size=BATCH_SIZE,
		batch_yield_seconds=BATCH_YIELD_SECONDS,
		cache_ttl_seconds=CACHE_TTL_SECONDS,
		use_pixel_collision=False,
		preload_enabled=True,
	)


#============================================
def sampling_stride(resolution: int) -> int:
	"""
	Pick the raster scan stride for a working resolution.

	Args:
		resolution: Raster side length in cells.

	Returns:
		Stride in cells.
	"""
	if resolution > STRIDE_RESOLUTION_THRESHOLD:
		return SAMPLING_STRIDE
	return 1
