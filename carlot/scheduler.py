# carlot/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler

from . import config
from .db import SessionLocal
from .errors import CarlotError
from .reconcile import sweep_orphans
from .storage import build_storage
from .utils import logger

scheduler = BackgroundScheduler()


def run_orphan_sweep():
    db = SessionLocal()
    try:
        sweep_orphans(db, build_storage(), delete=config.ORPHAN_SWEEP_DELETE)
    except CarlotError as e:
        logger.error("Orphan sweep failed: %s", e)
    finally:
        db.close()


def start_scheduler():
    if config.ORPHAN_SWEEP_MINUTES <= 0 or scheduler.running:
        return False
    scheduler.add_job(run_orphan_sweep, 'interval', minutes=config.ORPHAN_SWEEP_MINUTES, id="orphan-sweep",
                      replace_existing=True)
    scheduler.start()
    logger.info("Scheduler started (orphan sweep every %d min)", config.ORPHAN_SWEEP_MINUTES)
    return True


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
