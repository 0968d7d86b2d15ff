"""
Pytest configuration for local imports and shared glyph fixtures.
"""

# Standard Library
import os
import pathlib
import sys

# PIP3 modules
import pytest

BAR_SVG_TEMPLATE = (
	'<svg xmlns="http://www.w3.org/2000/svg" width="200" height="200" viewBox="0 0 200 200">'
	'<rect x="{x}" y="30" width="110" height="140" fill="#111111"/>'
	"</svg>"
)

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()


#============================================
@pytest.fixture
def asset_dir(tmp_path: pathlib.Path) -> pathlib.Path:
	"""
	Directory of standard bar glyphs for "a", "b" and "c".
	"""
	directory = tmp_path / "assets"
	directory.mkdir()
	for offset, character in enumerate("abc"):
		path = directory / f"{character}1.svg"
		path.write_text(BAR_SVG_TEMPLATE.format(x=40 + offset * 5), encoding="utf-8")
	return directory
