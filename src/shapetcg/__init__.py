"""ShapeTCG: a two-player shape-economy card game rules engine."""

__version__ = "0.1.0"
