"""Tolerant MIME helpers: header decoding, media type repair, charsets, content cleaning, part trees."""

__version__ = "0.1.0"