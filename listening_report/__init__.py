"""Listening history report built from a Spotify streaming history export"""
from listening_report.exceptions import ListeningDataError, ParseError, SchemaError

__all__ = ["ListeningDataError", "ParseError", "SchemaError"]
