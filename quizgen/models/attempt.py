from extensions import db
from quizgen.services.utils import utcnow


class Attempt(db.Model):
    """
    One participant's answer to one quiz item.

    The unique constraint on (quiz_item_id, user_id) is what enforces the
    single-attempt rule; the ledger only reads ahead of it as a fast path.
    """
    __tablename__ = "attempts"

    id = db.Column(db.Integer, primary_key=True)
    quiz_item_id = db.Column(db.Integer, db.ForeignKey("quiz_items.id", ondelete="CASCADE"), nullable=False)
    user_id = db.Column(db.String(100), nullable=False)
    selected = db.Column(db.Integer, nullable=False)
    is_correct = db.Column(db.Boolean, nullable=False)
    latency_ms = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    quiz_item = db.relationship("QuizItem", back_populates="attempts")

    __table_args__ = (
        db.UniqueConstraint("quiz_item_id", "user_id", name="uq_attempt_quiz_item_user"),
        db.Index("ix_attempt_quiz_item", "quiz_item_id"),
        db.Index("ix_attempt_user", "user_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "quiz_item_id": self.quiz_item_id,
            "user_id": self.user_id,
            "selected": self.selected,
            "is_correct": self.is_correct,
            "latency_ms": self.latency_ms,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
