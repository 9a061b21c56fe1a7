import json

from extensions import db
from quizgen.services.utils import utcnow

OPTION_COUNT = 4


class QuizItem(db.Model):
    """Four-option multiple choice question belonging to a lecture."""
    __tablename__ = "quiz_items"

    id = db.Column(db.Integer, primary_key=True)
    lecture_id = db.Column(db.Integer, db.ForeignKey("lectures.id", ondelete="CASCADE"), nullable=False)
    question = db.Column(db.Text, nullable=False)
    options = db.Column(db.Text, nullable=False, default="[]")  # JSON list, always 4 entries
    answer = db.Column(db.Integer, nullable=False)               # Correct option index (0-3)
    explanation = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    pushed_at = db.Column(db.DateTime, nullable=True)           # Last broadcast to the audience

    lecture = db.relationship("Lecture", back_populates="quiz_items")
    attempts = db.relationship("Attempt", back_populates="quiz_item", cascade="all, delete-orphan")

    __table_args__ = (
        db.Index("ix_quiz_item_lecture", "lecture_id"),
        db.Index("ix_quiz_item_pushed", "lecture_id", "pushed_at"),
    )

    def get_options(self):
        try:
            return json.loads(self.options) if self.options else []
        except ValueError:
            return []

    def set_options(self, options):
        self.options = json.dumps(list(options))
