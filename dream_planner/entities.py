# dream_planner/entities.py
from uuid import uuid4
from typing import List, TypeAlias

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship


UUID: TypeAlias = str
Base = declarative_base()


class TimestampMixin:
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class RoadmapRow(Base, TimestampMixin):
    __tablename__ = "roadmap"

    roadmap_id: Mapped[UUID] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str | None] = mapped_column(String, index=True)

    goal: Mapped[str] = mapped_column(String, nullable=False, server_default=text("''"))
    total_duration: Mapped[str | None] = mapped_column(String)
    estimated_cost: Mapped[float] = mapped_column(Float, nullable=False, server_default=text("0"))
    location: Mapped[str | None] = mapped_column(String)
    generation_method: Mapped[str] = mapped_column(String, nullable=False)
    validation_insights: Mapped[str | None] = mapped_column(Text)
    confidence: Mapped[float] = mapped_column(Float, nullable=False, server_default=text("0"))

    # BudgetAllocation in its wire shape
    budget_allocation: Mapped[dict | None] = mapped_column(JSON)

    milestones: Mapped[List["MilestoneRow"]] = relationship(
        back_populates="roadmap",
        cascade="all, delete-orphan",
        order_by="MilestoneRow.position",
    )


class MilestoneRow(Base):
    __tablename__ = "milestone"

    milestone_id: Mapped[UUID] = mapped_column(String(36), primary_key=True)
    roadmap_id: Mapped[UUID] = mapped_column(
        String(36),
        ForeignKey("roadmap.roadmap_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))

    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    estimated_cost: Mapped[float] = mapped_column(Float, nullable=False, server_default=text("0"))
    duration: Mapped[str | None] = mapped_column(String)
    timeline_months: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    estimated_duration: Mapped[str | None] = mapped_column(String)
    depends_on: Mapped[list | None] = mapped_column(JSON)
    goal_type: Mapped[str | None] = mapped_column(String)
    location: Mapped[str | None] = mapped_column(String)
    location_multiplier: Mapped[float | None] = mapped_column(Float)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    roadmap: Mapped[RoadmapRow] = relationship(back_populates="milestones")
    tasks: Mapped[List["TaskRow"]] = relationship(
        back_populates="milestone",
        cascade="all, delete-orphan",
        order_by="TaskRow.position",
    )


class TaskRow(Base):
    __tablename__ = "task"

    task_id: Mapped[str] = mapped_column(String, primary_key=True)
    milestone_id: Mapped[UUID] = mapped_column(
        String(36),
        ForeignKey("milestone.milestone_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))

    title: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    ai_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    suggested_assignee: Mapped[str | None] = mapped_column(String)
    estimated_time: Mapped[str | None] = mapped_column(String)
    assignment_reason: Mapped[str | None] = mapped_column(String)

    milestone: Mapped[MilestoneRow] = relationship(back_populates="tasks")
