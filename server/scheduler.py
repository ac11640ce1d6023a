# server/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from server.tasks.sanda_reminders import process_sanda_reminders

def init_scheduler(app):
    sched = BackgroundScheduler(timezone="UTC")
    sched.add_job(
        process_sanda_reminders,
        "cron",
        day=app.config.get("SANDA_REMINDER_DAY", 5),
        hour=9,
        minute=0,
        args=[app],
        id="sanda_reminders",
        replace_existing=True,
    )
    sched.start()
    return sched
