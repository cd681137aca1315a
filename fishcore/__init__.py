"""Chess position core: bitboards, Zobrist hashing, piece-square tables, move making and search records."""

__version__ = "0.1.0"

__all__ = ["bitboards", "psqt", "search", "zobrist", "board", "position"]