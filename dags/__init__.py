"""
Airflow DAGs Package

DAGs:
- daily_tenement_sync: Sync all jurisdictions and report a summary (2:00 AM)
"""
