from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from app.models.project import Project
from app.models.task import Task, TaskStatus
from app.models.user import User
from app.services.project_service import ProjectService
from app.services.user_service import UserService

TIME_RANGES = ("day", "week", "month", "year")
SEARCH_TYPES = ("all", "tasks", "projects", "users")
SEARCH_LIMIT = 20

def range_start(time_range: str, now: Optional[datetime] = None) -> datetime:
    """Start of the reporting window: a rolling day or week, or the current calendar month or year"""
    now = now or datetime.utcnow()
    if time_range == "day":
        return now - timedelta(days=1)
    if time_range == "week":
        return now - timedelta(days=7)
    if time_range == "month":
        return datetime(now.year, now.month, 1)
    if time_range == "year":
        return datetime(now.year, 1, 1)
    raise ValueError(f"unknown time range: {time_range}")

class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db
        self.projects = ProjectService(db)
        self.users = UserService(db)

    def get_statistics(self, user: User, project_id: Optional[str] = None, time_range: str = "month") -> dict:
        projects = self.projects.visible_query(user).all()
        if project_id:
            projects = [p for p in projects if p.id == project_id]
        project_ids = [p.id for p in projects]

        since = range_start(time_range)
        tasks = (
            self.db.query(Task)
            .filter(Task.project_id.in_(project_ids), Task.created_at >= since)
            .all()
            if project_ids else []
        )

        return {
            "taskStatistics": self._task_statistics(tasks),
            "projectStatistics": self._project_statistics(projects),
            "workloadStatistics": self._workload_statistics(tasks),
            "filters": {"projectId": project_id, "timeRange": time_range},
        }

    def _task_statistics(self, tasks: List[Task]) -> List[dict]:
        grouped: Dict[str, List[Task]] = defaultdict(list)
        for task in tasks:
            grouped[task.status.value].append(task)

        stats = []
        for status, members in sorted(grouped.items()):
            estimated = [t.estimated_hours for t in members if t.estimated_hours is not None]
            actual = [t.actual_hours for t in members if t.actual_hours is not None]
            stats.append({
                "status": status,
                "count": len(members),
                "avgEstimatedHours": sum(estimated) / len(estimated) if estimated else None,
                "avgActualHours": sum(actual) / len(actual) if actual else None,
            })
        return stats

    def _project_statistics(self, projects: List[Project]) -> List[dict]:
        grouped: Dict[str, List[Project]] = defaultdict(list)
        for project in projects:
            grouped[project.status.value].append(project)

        return [
            {
                "status": status,
                "count": len(members),
                "avgProgress": sum(p.progress or 0 for p in members) / len(members),
                "totalBudget": sum(p.budget_allocated or 0 for p in members),
                "totalSpent": sum(p.budget_spent or 0 for p in members),
            }
            for status, members in sorted(grouped.items())
        ]

    def _workload_statistics(self, tasks: List[Task]) -> List[dict]:
        assigned = [t for t in tasks if t.assigned_to]
        totals = Counter(t.assigned_to for t in assigned)
        completed = Counter(t.assigned_to for t in assigned if t.status == TaskStatus.COMPLETED)
        if not totals:
            return []

        users = {u.id: u for u in self.db.query(User).filter(User.id.in_(list(totals))).all()}
        workload = []
        for user_id, count in totals.most_common():
            user = users.get(user_id)
            if user is None:
                continue
            workload.append({
                "userId": user_id,
                "username": user.username,
                "firstName": user.first_name,
                "lastName": user.last_name,
                "taskCount": count,
                "completedTasks": completed[user_id],
                "completionRate": round(completed[user_id] / count * 100, 2),
            })
        return workload

    def search(self, user: User, q: str, search_type: str = "all") -> Dict[str, list]:
        """Case-insensitive search over the caller's projects and tasks, and active users"""
        needle = q.lower()
        results: Dict[str, list] = {}
        visible_ids = [p.id for p in self.projects.visible_query(user).all()]

        if search_type in ("all", "tasks"):
            results["tasks"] = (
                self.db.query(Task)
                .filter(
                    Task.project_id.in_(visible_ids),
                    or_(
                        func.lower(Task.title).contains(needle, autoescape=True),
                        func.lower(Task.description).contains(needle, autoescape=True)
                    )
                )
                .order_by(Task.created_at)
                .limit(SEARCH_LIMIT)
                .all()
            ) if visible_ids else []

        if search_type in ("all", "projects"):
            results["projects"] = self.projects.search_projects(user, q)[:SEARCH_LIMIT]

        if search_type in ("all", "users"):
            results["users"], _ = self.users.list_users(search=q, limit=SEARCH_LIMIT)

        return results
