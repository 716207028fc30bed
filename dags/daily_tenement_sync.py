"""
Daily Tenement Sync DAG

Syncs every jurisdiction through the API one after another, then reports
a summary.

Schedule: Daily at 2:00 AM
"""
from datetime import datetime, timedelta
from airflow import DAG
from airflow.operators.python import PythonOperator

from src.tenement_sync.models.tenement import ALL_JURISDICTIONS
from dags.utils.sync_tasks import sync_task_id, trigger_jurisdiction_sync, summarize_sync

# DAG default arguments
default_args = {
    'owner': 'tenement-sync',
    'depends_on_past': False,
    'email_on_failure': False,
    'email_on_retry': False,
    'retries': 1,
    'retry_delay': timedelta(minutes=10),
    'execution_timeout': timedelta(minutes=45),
}


with DAG(
    'daily_tenement_sync',
    default_args=default_args,
    description='Daily sync of mining tenements from all Australian jurisdictions',
    schedule='0 2 * * *',  # 2:00 AM daily
    start_date=datetime(2024, 1, 1),
    catchup=False,
    max_active_runs=1,
    tags=['ingestion', 'tenements', 'sync'],
) as dag:

    sync_tasks = [
        PythonOperator(
            task_id=sync_task_id(jurisdiction),
            python_callable=trigger_jurisdiction_sync,
            op_kwargs={'jurisdiction': jurisdiction.value},
            trigger_rule='all_done',
        )
        for jurisdiction in ALL_JURISDICTIONS
    ]

    summarize_task = PythonOperator(
        task_id='summarize_sync',
        python_callable=summarize_sync,
        trigger_rule='all_done',
    )

    # Jurisdictions run one at a time, in order
    for upstream, downstream in zip(sync_tasks, sync_tasks[1:]):
        upstream >> downstream
    sync_tasks[-1] >> summarize_task
