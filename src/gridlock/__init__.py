"""Gridlock: an 8x8 block placement puzzle engine with gymnasium environments."""

__version__ = "0.1.0"
