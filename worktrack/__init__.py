"""
worktrack - lifecycle and retention engine for requests and projects.
"""

__version__ = "0.1.0"
