"""
dxfkit Command-Line Interface
=============================

This package provides the `dxfkit` command-line tool, a Click-based
application for inspecting, checking and rewriting DXF files.
"""

__all__ = ["dxfkit"]
