from extensions import db
from quizgen.services.utils import utcnow

LECTURE_STATUSES = ("not_started", "in_progress", "paused", "ended")


class Lecture(db.Model):
    __tablename__ = "lectures"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    owner_id = db.Column(db.String(100), nullable=False)
    join_code = db.Column(db.String(6), nullable=False, unique=True)
    status = db.Column(db.String(20), nullable=False, default="not_started")
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    quiz_items = db.relationship("QuizItem", back_populates="lecture", cascade="all, delete-orphan")
    participants = db.relationship("Participant", back_populates="lecture", cascade="all, delete-orphan")

    __table_args__ = (
        db.Index("ix_lecture_owner", "owner_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "owner_id": self.owner_id,
            "join_code": self.join_code,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
