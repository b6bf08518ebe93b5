"""Append-only, segmented commit log with an HTTP front end, a service layer and routing helpers."""

__version__ = "0.1.0"