from extensions import db
from quizgen.services.utils import utcnow


class Participant(db.Model):
    __tablename__ = "participants"

    id = db.Column(db.Integer, primary_key=True)
    lecture_id = db.Column(db.Integer, db.ForeignKey("lectures.id", ondelete="CASCADE"), nullable=False)
    user_id = db.Column(db.String(100), nullable=False)
    joined_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    lecture = db.relationship("Lecture", back_populates="participants")

    __table_args__ = (
        db.UniqueConstraint("lecture_id", "user_id", name="uq_participant_lecture_user"),
        db.Index("ix_participant_user", "user_id"),
    )
