# dream_planner/storage.py
import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dream_planner.entities import Base, MilestoneRow, RoadmapRow, TaskRow
from dream_planner.models import Milestone, RoadmapGenerationResult, Task


logger = logging.getLogger("dream_planner")

# Milestone fields callers may change through update_milestone, wire or attribute names
_UPDATABLE_MILESTONE_FIELDS = {
    "title": "title",
    "description": "description",
    "estimatedCost": "estimated_cost",
    "estimated_cost": "estimated_cost",
    "duration": "duration",
    "timeline_months": "timeline_months",
    "estimated_duration": "estimated_duration",
    "depends_on": "depends_on",
    "location": "location",
}


def create_session_factory(database_url: str) -> Callable[[], Session]:
    """Builds the engine, creates missing tables and returns a session factory."""
    engine_kwargs: Dict[str, Any] = {"future": True}
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **engine_kwargs)
    Base.metadata.create_all(engine)

    maker = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        future=True,
    )

    def _factory() -> Session:
        return maker()

    return _factory


class RoadmapStore:
    """CRUD over generated roadmaps. SQLAlchemy errors propagate to the caller."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.SessionFactory = session_factory

    # -----------------------
    # Row <-> record
    # -----------------------

    def _apply_milestone(self, row: MilestoneRow, milestone: Milestone, position: int) -> None:
        row.position = position
        row.title = milestone.title
        row.description = milestone.description
        row.estimated_cost = milestone.estimated_cost
        row.duration = milestone.duration
        row.timeline_months = milestone.timeline_months
        row.estimated_duration = milestone.estimated_duration
        row.depends_on = list(milestone.depends_on)
        row.goal_type = milestone.goal_type
        row.location = milestone.location
        row.location_multiplier = milestone.location_multiplier
        row.created_at = milestone.created_at
        row.tasks = [
            TaskRow(
                task_id=task.id,
                position=i,
                title=task.title,
                completed=task.completed,
                ai_generated=task.ai_generated,
                suggested_assignee=task.suggested_assignee,
                estimated_time=task.estimated_time,
                assignment_reason=task.assignment_reason,
            )
            for i, task in enumerate(milestone.tasks)
        ]

    def _to_milestone(self, row: MilestoneRow) -> Milestone:
        return Milestone(
            id=row.milestone_id,
            title=row.title,
            description=row.description or "",
            estimated_cost=row.estimated_cost or 0,
            duration=row.duration or "",
            timeline_months=row.timeline_months,
            tasks=[
                Task(
                    id=t.task_id,
                    title=t.title,
                    completed=t.completed,
                    ai_generated=t.ai_generated,
                    suggested_assignee=t.suggested_assignee,
                    estimated_time=t.estimated_time,
                    assignment_reason=t.assignment_reason,
                )
                for t in row.tasks
            ],
            depends_on=list(row.depends_on or []),
            estimated_duration=row.estimated_duration or "",
            created_at=row.created_at,
            goal_type=row.goal_type,
            location=row.location,
            location_multiplier=row.location_multiplier,
        )

    # -----------------------
    # Roadmaps
    # -----------------------

    def create_roadmap(self, result: RoadmapGenerationResult, user_id: Optional[str] = None) -> str:
        roadmap = result.roadmap
        metadata = roadmap.metadata

        session = self.SessionFactory()
        try:
            row = RoadmapRow(
                user_id=user_id,
                goal=roadmap.goal,
                total_duration=metadata.total_duration,
                estimated_cost=metadata.estimated_cost,
                location=metadata.location,
                generation_method=metadata.generation_method.value,
                validation_insights=metadata.validation_insights,
                confidence=metadata.confidence,
                budget_allocation=result.budget_allocation.to_dict(),
            )
            for i, milestone in enumerate(roadmap.milestones):
                m_row = MilestoneRow(milestone_id=milestone.id)
                self._apply_milestone(m_row, milestone, i)
                row.milestones.append(m_row)

            session.add(row)
            session.commit()
            roadmap_id = row.roadmap_id
            logger.info(f"[STORE] roadmap {roadmap_id} saved with {len(roadmap.milestones)} milestones")
            return roadmap_id
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_roadmap(self, roadmap_id: str) -> Optional[Dict[str, Any]]:
        session = self.SessionFactory()
        try:
            row = session.get(RoadmapRow, str(roadmap_id))
            if row is None:
                return None
            return {
                "roadmapId": row.roadmap_id,
                "userId": row.user_id,
                "goal": row.goal,
                "milestones": [self._to_milestone(m).to_dict() for m in row.milestones],
                "metadata": {
                    "totalMilestones": len(row.milestones),
                    "totalDuration": row.total_duration,
                    "estimatedCost": row.estimated_cost,
                    "location": row.location,
                    "generationMethod": row.generation_method,
                    "validationInsights": row.validation_insights,
                    "confidence": row.confidence,
                },
                "budgetAllocation": row.budget_allocation,
            }
        finally:
            session.close()

    def delete_roadmap(self, roadmap_id: str) -> bool:
        session = self.SessionFactory()
        try:
            row = session.get(RoadmapRow, str(roadmap_id))
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # -----------------------
    # Milestones
    # -----------------------

    def get_milestones(self, roadmap_id: str) -> List[Milestone]:
        session = self.SessionFactory()
        try:
            rows = (
                session.query(MilestoneRow)
                .filter(MilestoneRow.roadmap_id == str(roadmap_id))
                .order_by(MilestoneRow.position)
                .all()
            )
            return [self._to_milestone(r) for r in rows]
        finally:
            session.close()

    def save_milestones(self, roadmap_id: str, milestones: List[Milestone]) -> None:
        """Creates or updates milestones by id; list order becomes their position."""
        session = self.SessionFactory()
        try:
            if session.get(RoadmapRow, str(roadmap_id)) is None:
                raise ValueError(f"Roadmap not found: {roadmap_id}")

            for i, milestone in enumerate(milestones):
                row = session.get(MilestoneRow, milestone.id)
                if row is None:
                    row = MilestoneRow(milestone_id=milestone.id, roadmap_id=str(roadmap_id))
                    session.add(row)
                elif row.roadmap_id != str(roadmap_id):
                    raise ValueError(f"Milestone {milestone.id} belongs to another roadmap")
                else:
                    # drop the old tasks before re-adding them under the same ids
                    row.tasks = []
                    session.flush()
                self._apply_milestone(row, milestone, i)

            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def update_milestone(self, milestone_id: str, updates: Dict[str, Any]) -> bool:
        unknown = [k for k in updates if k not in _UPDATABLE_MILESTONE_FIELDS]
        if unknown:
            raise ValueError(f"Fields cannot be updated on a milestone: {unknown}")

        session = self.SessionFactory()
        try:
            row = session.get(MilestoneRow, str(milestone_id))
            if row is None:
                return False
            for key, value in updates.items():
                setattr(row, _UPDATABLE_MILESTONE_FIELDS[key], value)
            session.commit()
            return True
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def delete_milestone(self, milestone_id: str) -> bool:
        session = self.SessionFactory()
        try:
            row = session.get(MilestoneRow, str(milestone_id))
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
