import atexit
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler

from .extensions import db
from .services.password_reset_store import PasswordResetStore

scheduler = BackgroundScheduler()


def purge_expired_codes(app):
    """Delete password reset codes that expired without being used."""
    current_time_str = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    with app.app_context():
        try:
            removed = PasswordResetStore().purge_expired()
            app.logger.info(
                f"[SCHEDULER] {current_time_str} - Purged {removed} expired reset code(s)"
            )
        except Exception as e:
            db.session.rollback()
            app.logger.error(
                f"[SCHEDULER] {current_time_str} - Error purging reset codes: {e}"
            )


def init_scheduler(app):
    """Start the OTP sweep when OTP_SWEEP_MINUTES is set; a no-op otherwise."""
    minutes = app.config.get("OTP_SWEEP_MINUTES") or 0
    if app.config.get("TESTING") or minutes <= 0:
        return None

    scheduler.add_job(
        purge_expired_codes,
        "interval",
        minutes=minutes,
        args=[app],
        id="purge_expired_codes",
        replace_existing=True,
    )

    if not scheduler.running:
        scheduler.start()
        app.logger.info("[SCHEDULER] Scheduler started")
        # Shut down the scheduler when exiting the app
        atexit.register(lambda: scheduler.shutdown(wait=False))
    else:
        app.logger.info("[SCHEDULER] Scheduler already running (skipping duplicate start)")

    return scheduler
