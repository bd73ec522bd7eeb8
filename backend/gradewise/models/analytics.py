"""
Gradewise - Analytics Model
Per-user, per-test insights derived from an evaluated attempt
"""
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from gradewise.core.database import Base


class Analytics(Base):
    """
    Derived insight row. One per (user, test); regenerating overwrites it.
    """

    __tablename__ = "analytics"
    __table_args__ = (
        UniqueConstraint("user_id", "test_id", name="uq_analytics_user_test"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    test_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tests.id", ondelete="CASCADE"),
        index=True
    )

    weak_topics: Mapped[list] = mapped_column(JSON, default=list)
    strong_topics: Mapped[list] = mapped_column(JSON, default=list)

    # Format: [{ title, type, url? }]
    recommended_resources: Mapped[list] = mapped_column(JSON, default=list)
    study_plan: Mapped[str | None] = mapped_column(Text, nullable=True)

    insight_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self):
        return f"<Analytics user={self.user_id} test={self.test_id} weak={len(self.weak_topics or [])}>"
