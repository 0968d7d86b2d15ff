#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Regenerate the precomputed overlap table for a glyph style.
"""

# local repo modules
import graffiti_compositor.cli


if __name__ == "__main__":
	graffiti_compositor.cli.refresh_main()
