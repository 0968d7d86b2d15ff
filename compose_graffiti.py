#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Compose text into positioned graffiti glyphs and write a layout manifest.
"""

# local repo modules
import graffiti_compositor.cli


if __name__ == "__main__":
	graffiti_compositor.cli.main()
