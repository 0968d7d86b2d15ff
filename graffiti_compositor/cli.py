"""
CLI entry points for composing text into positioned glyphs.
"""

# Standard Library
import argparse
import asyncio
import json
import logging
import pathlib
import time

# local repo modules
import graffiti_compositor as gfc
import graffiti_compositor.assets
import graffiti_compositor.config
import graffiti_compositor.errors
import graffiti_compositor.layout
import graffiti_compositor.overlap
import graffiti_compositor.overlap_table
import graffiti_compositor.pipeline
import graffiti_compositor.raster


CompositorConfig = gfc.config.CompositorConfig

DEFAULT_STYLE = gfc.config.DEFAULT_STYLE


#============================================
def build_config(args: argparse.Namespace) -> CompositorConfig:
	"""
	Build compositor config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		CompositorConfig.
	"""
	config = gfc.config.build_default_config(args.style)
	config.use_pixel_collision = args.pixel_collision
	config.preload_enabled = False
	if args.resolution is not None:
		config.resolution = args.resolution
	return config


#============================================
def configure_logging(verbose: bool) -> None:
	level = logging.DEBUG if verbose else logging.WARNING
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, or None for sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Compose text into positioned graffiti glyphs.")
	parser.add_argument("text", help="Text to compose.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-a", "--assets", dest="assets_dir", required=True, help="Glyph asset directory.")
	input_group.add_argument("-s", "--style", dest="style", default=DEFAULT_STYLE, help="Glyph style.")
	input_group.add_argument("-t", "--overlap-table", dest="table_path", default=None, help="Overlap table JSON path.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output manifest JSON path.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument(
		"-x",
		"--pixel-collision",
		dest="pixel_collision",
		action="store_true",
		help="Compute overlaps with the pixel collision search.",
	)
	behavior_group.add_argument("-r", "--resolution", dest="resolution", type=int, default=None, help="Raster resolution.")
	behavior_group.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Enable debug logging.")

	parser.set_defaults(pixel_collision=False, verbose=False)

	args = parser.parse_args(argv)
	return args


#============================================
def write_manifest(manifest_path: pathlib.Path, composition: gfc.layout.Composition) -> None:
	"""
	Write a composition manifest JSON file.

	Args:
		manifest_path: Output path.
		composition: Composition to write.
	"""
	data = gfc.layout.composition_to_dict(composition)
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)


#============================================
def run_pipeline(args: argparse.Namespace) -> gfc.layout.Composition:
	"""
	Compose the requested text and report the layout.

	Args:
		args: Parsed argparse namespace.

	Returns:
		The Composition.
	"""
	print(f"Text: {args.text}")
	print(f"Style: {args.style}")
	library = gfc.assets.AssetLibrary.from_directory(pathlib.Path(args.assets_dir), args.style)
	print(f"Glyph characters found: {len(library.characters(args.style))}")

	table = None
	if args.table_path:
		table = gfc.overlap_table.load_overlap_table(pathlib.Path(args.table_path))
		print(f"Overlap pairs loaded: {len(table)}")

	config = build_config(args)
	compositor = gfc.pipeline.GlyphCompositor(library, config=config, table=table)
	start_time = time.perf_counter()
	composition = asyncio.run(compositor.compose(args.text))
	elapsed = time.perf_counter() - start_time

	placeholders = sum(1 for glyph in composition.glyphs if glyph.is_placeholder)
	print(f"Glyphs placed: {len(composition.placements)}")
	if placeholders:
		print(f"Placeholders used: {placeholders}")
	print(f"Content size: {composition.content_width:.1f} x {composition.content_height:.1f}")
	print(f"Base scale: {composition.base_scale:.3f}")
	print(f"Timing: compose={elapsed:.2f}s")

	if args.output_path:
		output_path = pathlib.Path(args.output_path)
		write_manifest(output_path, composition)
		print(f"Manifest written: {output_path}")
	return composition


#============================================
def parse_refresh_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse arguments for the overlap table refresh.

	Args:
		argv: Argument list, or None for sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Regenerate an overlap table from glyph assets.")
	parser.add_argument("-a", "--assets", dest="assets_dir", required=True, help="Glyph asset directory.")
	parser.add_argument("-s", "--style", dest="style", default=DEFAULT_STYLE, help="Glyph style.")
	parser.add_argument("-o", "--output", dest="output_path", required=True, help="Overlap table JSON path.")
	parser.add_argument(
		"-m",
		"--merge",
		dest="merge",
		action="store_true",
		help="Update an existing table instead of replacing it.",
	)
	parser.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Enable debug logging.")
	parser.set_defaults(merge=False, verbose=False)
	return parser.parse_args(argv)


#============================================
def refresh_overlap_table(args: argparse.Namespace) -> gfc.overlap_table.OverlapTable:
	"""
	Profile every standard glyph of a style and rebuild its overlap table.

	Args:
		args: Parsed argparse namespace.

	Returns:
		The written OverlapTable.
	"""
	library = gfc.assets.AssetLibrary.from_directory(pathlib.Path(args.assets_dir), args.style)
	glyphs = {}
	for character in library.characters(args.style):
		asset = library.lookup(args.style, gfc.assets.STANDARD, character)
		if asset is None:
			continue
		try:
			glyphs[character] = gfc.raster.profile_markup(asset.load_markup(), character)
		except (gfc.errors.AssetMissing, gfc.errors.ParseFailure) as error:
			print(f"Skipping {character!r}: {error}")
	print(f"Glyphs profiled: {len(glyphs)}")

	output_path = pathlib.Path(args.output_path)
	table = None
	if args.merge and output_path.exists():
		table = gfc.overlap_table.load_overlap_table(output_path)
	table = gfc.overlap.generate_overlap_table(glyphs, args.style, table=table)
	gfc.overlap_table.write_overlap_table(output_path, table)
	print(f"Overlap pairs written: {len(table)}")
	return table


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	configure_logging(args.verbose)
	run_pipeline(args)


#============================================
def refresh_main() -> None:
	"""
	Entry point for the overlap table refresh.
	"""
	args = parse_refresh_args()
	configure_logging(args.verbose)
	refresh_overlap_table(args)
