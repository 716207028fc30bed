"""
Tenement Sync - Core Package

This package contains the multi-jurisdiction mining tenement synchronization
pipeline: government API fetchers, placeholder sources, batch upserts,
progress tracking and the HTTP surface that triggers runs.
"""

__version__ = "0.1.0"
