import json

import graffiti_compositor.cli


#============================================
def test_parse_args_defaults() -> None:
	"""
	Defaults select the stock style and the rule-based overlaps.
	"""
	args = graffiti_compositor.cli.parse_args(["abc", "-a", "assets"])
	assert args.text == "abc"
	assert args.style == "straight"
	assert not args.pixel_collision
	config = graffiti_compositor.cli.build_config(args)
	assert config.resolution == 200
	assert not config.preload_enabled


#============================================
def test_run_pipeline_writes_manifest(asset_dir, tmp_path) -> None:
	"""
	The compose command writes a manifest with one record per glyph.
	"""
	output_path = tmp_path / "layout.json"
	args = graffiti_compositor.cli.parse_args(["cab d", "-a", str(asset_dir), "-o", str(output_path)])
	composition = graffiti_compositor.cli.run_pipeline(args)
	assert len(composition.placements) == 5
	data = json.loads(output_path.read_text(encoding="utf-8"))
	assert data["text"] == "cab d"
	assert [item["character"] for item in data["glyphs"]] == ["c", "a", "b", " ", "d"]
	assert data["glyphs"][4]["is_placeholder"]
	assert data["glyphs"][3]["is_space"]


#============================================
def test_refresh_then_compose_with_table(asset_dir, tmp_path) -> None:
	"""
	A refreshed table is picked up by the compose command.
	"""
	table_path = tmp_path / "overlap.json"
	refresh_args = graffiti_compositor.cli.parse_refresh_args(
		["-a", str(asset_dir), "-o", str(table_path)]
	)
	table = graffiti_compositor.cli.refresh_overlap_table(refresh_args)
	assert len(table) == 9
	args = graffiti_compositor.cli.parse_args(["ab", "-a", str(asset_dir), "-t", str(table_path)])
	composition = graffiti_compositor.cli.run_pipeline(args)
	assert composition.overlaps == [table.lookup("straight", "a", "b")]
