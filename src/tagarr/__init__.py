"""Tagarr - HDR/Dolby Vision and release-group tagging for Radarr."""

__version__ = "1.0.0"
