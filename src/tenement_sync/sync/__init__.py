"""
Sync Package

Orchestration of per-jurisdiction tenement syncs, progress tracking and the
full sync across all jurisdictions.
"""
