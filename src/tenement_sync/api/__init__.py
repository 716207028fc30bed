"""
FastAPI REST API for Tenement Sync

Provides REST endpoints for the admin frontend to:
- Trigger a jurisdiction sync or a full sync
- Cancel a running sync
- Poll and publish sync progress
- List data sources and recent sync runs
- Health checks
"""
