"""Scripted customer-support assistant for recent orders."""

__version__ = "0.1.0"
