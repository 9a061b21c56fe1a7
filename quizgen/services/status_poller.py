"""
Polling fallback for lecture status.

Status changes are rare, so instead of a push channel the stream re-reads the
lecture on a fixed interval. The loop is capped at ``max_checks`` polls so no
client can keep a server-side loop alive indefinitely.
"""
import time

from extensions import db
from quizgen.models import Lecture


def poll_lecture_status(lecture_id, interval=3.0, max_checks=100, sleep=time.sleep):
    """Yield status events until the lecture ends, vanishes or the cap is reached."""
    lecture = db.session.get(Lecture, lecture_id)
    if not lecture:
        yield {"type": "error", "message": "Lecture not found."}
        return

    last_status = lecture.status
    yield {"type": "status", "status": last_status, "check": 0}
    if last_status == "ended":
        yield {"type": "complete", "status": last_status}
        return

    for check in range(1, max_checks + 1):
        sleep(interval)
        db.session.expire_all()
        lecture = db.session.get(Lecture, lecture_id)
        if not lecture:
            yield {"type": "error", "message": "Lecture not found."}
            return
        if lecture.status != last_status:
            last_status = lecture.status
            yield {"type": "status", "status": last_status, "check": check}
        if last_status == "ended":
            yield {"type": "complete", "status": last_status}
            return

    yield {"type": "timeout", "checks": max_checks}
