"""Deterministic puzzle-simulation engines.

Subpackages:
- minefield: mine-sweep board with flood reveal and chord play
- tilemerge: tile-merge grid with single-merge-per-pass lines and undo
- blockstack: falling-block stack with wall kicks and tick-driven gravity
- scores: in-memory score store and engine-to-store wiring
"""

__version__ = "0.1.0"
