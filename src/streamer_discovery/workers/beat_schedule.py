"""Celery Beat periodic task schedule.

All times are ``Asia/Seoul`` (configured in ``celery_app.py``).

Schedule overview:

+---------------------------+---------------------+-----------------------------+
| Task name                 | Schedule            | Purpose                     |
+===========================+=====================+=============================+
| twitch_collect            | Every 3 hours       | Rebuild the Twitch tables   |
|                           |                     | from the current top games. |
+---------------------------+---------------------+-----------------------------+
| chzzk_discovery           | Every hour at :15   | Upsert live Chzzk channels. |
+---------------------------+---------------------+-----------------------------+
| collect_streamers         | 04:00 Seoul         | YouTube keyword sweep plus  |
|                           |                     | legacy keyword links.       |
+---------------------------+---------------------+-----------------------------+
| check_inactive_streamers  | 05:30 Seoul         | Flip YouTube activity by    |
|                           |                     | latest upload date.         |
+---------------------------+---------------------+-----------------------------+
| update_youtube_streamers  | Every 6 hours       | Refresh the least recently  |
|                           |                     | updated YouTube channels.   |
+---------------------------+---------------------+-----------------------------+
"""

from __future__ import annotations

from celery.schedules import crontab

_TASK_PREFIX = "streamer_discovery.workers.tasks"

#: Applied to ``celery_app.conf.beat_schedule`` in ``celery_app.py``.
beat_schedule: dict[str, dict] = {  # type: ignore[type-arg]
    "twitch_collect": {
        "task": f"{_TASK_PREFIX}.twitch_collect",
        "schedule": crontab(minute=0, hour="*/3"),
        "options": {"expires": 3_600},
    },
    "chzzk_discovery": {
        "task": f"{_TASK_PREFIX}.discover_chzzk",
        "schedule": crontab(minute=15),
        "options": {"expires": 1_800},
    },
    # YouTube search costs 100 quota units per call; once a day is the budget.
    "collect_streamers": {
        "task": f"{_TASK_PREFIX}.collect_streamers",
        "schedule": crontab(hour=4, minute=0),
        "options": {"expires": 7_200},
    },
    "check_inactive_streamers": {
        "task": f"{_TASK_PREFIX}.check_inactive_streamers",
        "schedule": crontab(hour=5, minute=30),
        "options": {"expires": 3_600},
    },
    "update_youtube_streamers": {
        "task": f"{_TASK_PREFIX}.update_youtube_streamers",
        "schedule": crontab(minute=45, hour="*/6"),
        "options": {"expires": 3_600},
    },
}
