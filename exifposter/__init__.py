"""Render photos into EXIF parameter posters."""

__version__ = "0.1.0"
