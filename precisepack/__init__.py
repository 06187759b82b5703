"""MessagePack encoding and decoding that keeps the exact format of every value.

The ``types`` module holds the value classes, ``decode`` reads bytes into entries
and ``encode`` writes entries back to bytes.
"""

__version__ = "0.1.10"
__all__ = ["types", "decode", "encode"]