"""
Birth Lottery Data Update Scheduler
Uses APScheduler to refresh the dataset snapshot once a day.
"""
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from birthlottery.core.config import settings

logger = logging.getLogger("birthlottery.scheduler")

scheduler = BackgroundScheduler()


def job_refresh_snapshot():
    """Daily World Bank refetch, overwriting the snapshot."""
    logger.info("=== SCHEDULED JOB: dataset refresh started ===")
    try:
        from birthlottery.core.database import SessionLocal
        from birthlottery.services.dataset import load_dataset

        db = SessionLocal()
        try:
            payload = load_dataset(db, force=True)
            logger.info(f"Dataset refresh complete: {payload['totalCountries']} countries")
        finally:
            db.close()
    except Exception as e:
        logger.error(f"Dataset refresh job failed: {e}", exc_info=True)


def job_snapshot_check():
    """Weekly check that logs the snapshot's age."""
    logger.info("=== SCHEDULED JOB: snapshot check ===")
    try:
        from birthlottery.core.database import SessionLocal
        from birthlottery.services.cache_gate import read_snapshot, utcnow, is_fresh

        db = SessionLocal()
        try:
            snapshot = read_snapshot(db)
            if snapshot is None:
                logger.warning("No dataset snapshot stored yet")
            else:
                now = utcnow()
                logger.info(
                    f"Snapshot age {snapshot.age_seconds(now):.0f}s, "
                    f"fresh={is_fresh(snapshot, now, settings.cache_ttl_seconds)}"
                )
        finally:
            db.close()
    except Exception as e:
        logger.error(f"Snapshot check failed: {e}", exc_info=True)


def start_scheduler():
    """
    Register and start all scheduled jobs.
    Called once at application startup.
    """
    if scheduler.running:
        logger.warning("Scheduler already running, skipping start")
        return

    scheduler.add_job(
        job_refresh_snapshot,
        CronTrigger(hour=settings.refresh_hour, minute=0),
        id="snapshot_daily",
        name="Daily dataset refresh",
        replace_existing=True,
    )

    # Weekly snapshot check, every Monday at 06:00
    scheduler.add_job(
        job_snapshot_check,
        CronTrigger(day_of_week="mon", hour=6, minute=0),
        id="snapshot_weekly_check",
        name="Weekly snapshot check",
        replace_existing=True,
    )

    scheduler.start()

    jobs = scheduler.get_jobs()
    logger.info(f"Scheduler started with {len(jobs)} jobs:")
    for job in jobs:
        logger.info(f"  - {job.name} (next run: {job.next_run_time})")


def stop_scheduler():
    """Gracefully shut down the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


def get_scheduler_status() -> dict:
    """Return current scheduler status and next run times."""
    jobs = scheduler.get_jobs() if scheduler.running else []
    return {
        "running": scheduler.running,
        "jobs": [
            {
                "id": job.id,
                "name": job.name,
                "next_run": str(job.next_run_time) if job.next_run_time else None,
            }
            for job in jobs
        ],
    }
