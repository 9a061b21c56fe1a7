"""Read-only statistics over the attempts table, recomputed on every call."""
from sqlalchemy import case, func

from extensions import db
from quizgen.models import Attempt, Participant, QuizItem, OPTION_COUNT
from quizgen.services.lecture_service import ensure_owner, get_owned_lecture
from quizgen.services.quiz_item_service import get_quiz_item
from quizgen.services.utils import isoformat


def _rate(part, total):
    return part / total if total else 0.0


def _attempt_totals(*criteria):
    total, correct, avg_latency = db.session.query(
        func.count(Attempt.id),
        func.sum(case((Attempt.is_correct.is_(True), 1), else_=0)),
        func.avg(Attempt.latency_ms),
    ).filter(*criteria).one()
    return int(total or 0), int(correct or 0), float(avg_latency or 0.0)


def option_histogram(quiz_item_id):
    """Attempt count per option index, always OPTION_COUNT entries."""
    counts = [0] * OPTION_COUNT
    rows = db.session.query(Attempt.selected, func.count(Attempt.id)) \
        .filter(Attempt.quiz_item_id == quiz_item_id) \
        .group_by(Attempt.selected) \
        .all()
    for selected, count in rows:
        if 0 <= selected < OPTION_COUNT:
            counts[selected] = int(count)
    return counts


def _item_stats(item):
    total, correct, avg_latency = _attempt_totals(Attempt.quiz_item_id == item.id)
    return {
        "quiz_item_id": item.id,
        "question": item.question,
        "options": item.get_options(),
        "correct_answer": item.answer,
        "pushed_at": isoformat(item.pushed_at),
        "total_attempts": total,
        "correct_attempts": correct,
        "correct_rate": _rate(correct, total),
        "average_latency_ms": avg_latency,
        "option_histogram": option_histogram(item.id),
    }


def get_quiz_item_stats(quiz_item_id, user_id):
    item = get_quiz_item(quiz_item_id)
    ensure_owner(item.lecture, user_id)
    return _item_stats(item)


def get_lecture_stats(lecture_id, user_id):
    lecture = get_owned_lecture(lecture_id, user_id)

    total_items = db.session.query(func.count(QuizItem.id)) \
        .filter(QuizItem.lecture_id == lecture.id).scalar() or 0
    total_participants = db.session.query(func.count(func.distinct(Participant.user_id))) \
        .filter(Participant.lecture_id == lecture.id).scalar() or 0

    lecture_items = db.select(QuizItem.id).where(QuizItem.lecture_id == lecture.id)
    total, correct, avg_latency = _attempt_totals(Attempt.quiz_item_id.in_(lecture_items))
    answering = db.session.query(func.count(func.distinct(Attempt.user_id))) \
        .filter(Attempt.quiz_item_id.in_(lecture_items)).scalar() or 0

    return {
        "lecture_id": lecture.id,
        "lecture_title": lecture.title,
        "status": lecture.status,
        "total_quiz_items": int(total_items),
        "total_participants": int(total_participants),
        "answering_participants": int(answering),
        "total_attempts": total,
        "correct_attempts": correct,
        "correct_rate": _rate(correct, total),
        "average_latency_ms": avg_latency,
    }


def get_lecture_quiz_analytics(lecture_id, user_id):
    """Per-item breakdown for the speaker's analytics tab, in creation order."""
    lecture = get_owned_lecture(lecture_id, user_id)
    items = QuizItem.query.filter_by(lecture_id=lecture.id) \
        .order_by(QuizItem.created_at, QuizItem.id).all()

    analytics = []
    for item in items:
        stats = _item_stats(item)
        total = stats["total_attempts"]
        stats["option_stats"] = [
            {
                "option": index,
                "text": text,
                "count": stats["option_histogram"][index],
                "percentage": _rate(stats["option_histogram"][index], total) * 100,
                "is_correct": index == item.answer,
            }
            for index, text in enumerate(stats["options"][:OPTION_COUNT])
        ]
        analytics.append(stats)
    return analytics
