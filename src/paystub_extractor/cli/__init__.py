"""Paystub extractor CLI package.

This package provides the ``paystub`` command-line interface for extracting
paystub documents and inspecting configuration.
"""

from .main import app, main

__all__ = ["app", "main"]
