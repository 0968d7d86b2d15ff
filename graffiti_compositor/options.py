"""
Customization options carried by history snapshots, and named presets.
"""

# Standard Library
import dataclasses


@dataclasses.dataclass(frozen=True)
class CustomizationOptions:
	background_enabled: bool = False
	background_color: str = "#ffffff"
	fill_enabled: bool = True
	fill_color: str = "#ffffff"
	stroke_enabled: bool = False
	stroke_color: str = "#ff0000"
	stroke_width: float = 45
	shadow_enabled: bool = False
	shadow_color: str = "#000000"
	shadow_opacity: float = 1.0
	shadow_offset_x: float = -400
	shadow_offset_y: float = 5
	shadow_blur: float = 0
	stamp_enabled: bool = True
	stamp_color: str = "#000000"
	stamp_width: float = 60
	shine_enabled: bool = False
	shine_color: str = "#ffffff"
	shine_opacity: float = 1.0
	shadow_effect_enabled: bool = True
	shadow_effect_offset_x: float = -8
	shadow_effect_offset_y: float = 2
	shield_enabled: bool = True
	shield_color: str = "#f00000"
	shield_width: float = 40

	def to_dict(self) -> dict:
		return dataclasses.asdict(self)


PRESET_BASE = CustomizationOptions(
	shadow_effect_enabled=False,
	shadow_effect_offset_x=0,
	shadow_effect_offset_y=0,
	shield_color="#22c0f2",
)

STYLE_PRESETS = {
	"CLASSIC": dataclasses.replace(
		PRESET_BASE,
		stamp_width=80,
		shadow_effect_enabled=True,
		shadow_effect_offset_x=4,
		shadow_effect_offset_y=8,
		shield_width=60,
	),
	"SLAP": dataclasses.replace(
		PRESET_BASE,
		fill_color="#ffffff",
		stamp_color="#000000",
		stamp_width=40,
		shield_enabled=False,
	),
	"SHINE": dataclasses.replace(
		PRESET_BASE,
		fill_color="#ffcc00",
		shine_enabled=True,
		shine_opacity=0.8,
		shield_color="#ffffff",
	),
	"BACKGROUND": dataclasses.replace(
		PRESET_BASE,
		background_enabled=True,
		background_color="#202020",
	),
}


#============================================
def merge_options(options: CustomizationOptions, updates: dict) -> CustomizationOptions:
	"""
	Apply partial updates to a set of options.

	Args:
		options: Current options.
		updates: Field name to new value.

	Returns:
		New CustomizationOptions.

	Raises:
		KeyError: If an update names an unknown field.
	"""
	known = {field.name for field in dataclasses.fields(CustomizationOptions)}
	unknown = sorted(set(updates) - known)
	if unknown:
		raise KeyError(f"Unknown customization options: {', '.join(unknown)}")
	return dataclasses.replace(options, **updates)


#============================================
def get_preset(preset_id: str) -> CustomizationOptions:
	"""
	Look up a named preset.

	Args:
		preset_id: Preset identifier, case-insensitive.

	Returns:
		CustomizationOptions for the preset.

	Raises:
		KeyError: If the preset does not exist.
	"""
	return STYLE_PRESETS[preset_id.upper()]
