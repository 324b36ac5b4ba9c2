"""Canvas Grid - logical screen grid for placing canvas windows.

This package provides:
- Cell spans and pixel geometry for a rows x columns partition of a monitor
- Immutable per-desktop grid state with overlap-checked placement
- Cell specification parsing (A1, A1:C2, 0,0, 0,0:2x3)
- Sway/i3 adapters for monitor geometry and window positioning
- A CLI for managing stored grid layouts
"""

__version__ = "0.1.0"
__author__ = "canvas-grid contributors"
__license__ = "MIT"

__all__ = ["__version__", "__author__", "__license__"]
