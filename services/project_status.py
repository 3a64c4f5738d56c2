"""
Project Status - Closed status enumeration, legal transitions, and the kanban
projection of statuses onto board columns.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ProjectStatus(str, Enum):
    NEW = 'new'
    SUBMITTED = 'submitted'
    WAITING_FOR_CONFIRMATION = 'waiting_for_confirmation'
    CONFIRMED = 'confirmed'
    IN_PROGRESS = 'in_progress'
    IN_DESIGN = 'in_design'
    REVIEW = 'review'
    FINAL_DELIVERY = 'final_delivery'
    COMPLETED = 'completed'


PROJECT_STATUSES = tuple(status.value for status in ProjectStatus)


def is_known_status(value) -> bool:
    return value in PROJECT_STATUSES


S = ProjectStatus

# current status -> statuses it may move to
STATUS_TRANSITIONS: Dict[ProjectStatus, frozenset] = {
    S.NEW: frozenset({S.SUBMITTED, S.WAITING_FOR_CONFIRMATION, S.CONFIRMED}),
    S.SUBMITTED: frozenset({S.NEW, S.WAITING_FOR_CONFIRMATION, S.CONFIRMED}),
    S.WAITING_FOR_CONFIRMATION: frozenset({S.NEW, S.SUBMITTED, S.CONFIRMED, S.COMPLETED}),
    S.CONFIRMED: frozenset({S.NEW, S.WAITING_FOR_CONFIRMATION, S.IN_PROGRESS, S.COMPLETED}),
    S.IN_PROGRESS: frozenset({S.NEW, S.CONFIRMED, S.IN_DESIGN, S.REVIEW, S.COMPLETED}),
    S.IN_DESIGN: frozenset({S.NEW, S.IN_PROGRESS, S.REVIEW, S.COMPLETED}),
    S.REVIEW: frozenset({S.NEW, S.IN_DESIGN, S.FINAL_DELIVERY, S.COMPLETED}),
    S.FINAL_DELIVERY: frozenset({S.NEW, S.REVIEW, S.COMPLETED}),
    S.COMPLETED: frozenset({S.IN_PROGRESS, S.FINAL_DELIVERY}),
}


def can_transition(current, target) -> bool:
    """
    Whether a project may move from current to target.

    target must be a known status. A current value outside the enumeration
    (legacy rows) may move to any known status.
    """
    if not is_known_status(target):
        return False
    if not is_known_status(current):
        return True
    return ProjectStatus(target) in STATUS_TRANSITIONS[ProjectStatus(current)]


# =============================================================================
# KANBAN PROJECTION
# =============================================================================

@dataclass(frozen=True)
class StatusAction:
    status: ProjectStatus
    label: str


@dataclass(frozen=True)
class KanbanColumn:
    id: str
    title: str
    statuses: Tuple[ProjectStatus, ...]
    prev_action: Optional[StatusAction] = None
    next_action: Optional[StatusAction] = None

    def contains(self, status) -> bool:
        return status in [s.value for s in self.statuses]

    def action(self, direction: str) -> Optional[StatusAction]:
        if direction == 'prev':
            return self.prev_action
        if direction == 'next':
            return self.next_action
        raise ValueError(f"Unknown direction: {direction}")

    def to_dict(self):
        def _action(action):
            return {'status': action.status.value, 'label': action.label} if action else None

        return {
            'id': self.id,
            'title': self.title,
            'statuses': [s.value for s in self.statuses],
            'prev_action': _action(self.prev_action),
            'next_action': _action(self.next_action)
        }


KANBAN_COLUMNS: Tuple[KanbanColumn, ...] = (
    KanbanColumn(
        id='new_projects',
        title='New Projects',
        statuses=(S.NEW, S.SUBMITTED),
        next_action=StatusAction(S.CONFIRMED, 'Confirm Project'),
    ),
    KanbanColumn(
        id='in_progress',
        title='In Progress',
        statuses=(
            S.WAITING_FOR_CONFIRMATION,
            S.CONFIRMED,
            S.IN_PROGRESS,
            S.IN_DESIGN,
            S.REVIEW,
            S.FINAL_DELIVERY,
        ),
        prev_action=StatusAction(S.NEW, 'Back to New'),
        next_action=StatusAction(S.COMPLETED, 'Mark Complete'),
    ),
    KanbanColumn(
        id='completed',
        title='Completed',
        statuses=(S.COMPLETED,),
        prev_action=StatusAction(S.IN_PROGRESS, 'Back to Progress'),
    ),
)


def column_for_status(status, columns: Iterable[KanbanColumn] = KANBAN_COLUMNS) -> KanbanColumn:
    """First column whose statuses include status; unknown statuses land in the first column."""
    columns = tuple(columns)
    for column in columns:
        if column.contains(status):
            return column
    return columns[0]


@dataclass
class BoardColumn:
    column: KanbanColumn
    projects: List[Dict] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.projects)

    def to_dict(self):
        data = self.column.to_dict()
        data['count'] = self.count
        data['projects'] = self.projects
        return data


def group_projects_by_column(projects: Iterable[Dict],
                             columns: Iterable[KanbanColumn] = KANBAN_COLUMNS) -> List[BoardColumn]:
    """Bucket project rows into board columns, keeping column order and input order."""
    columns = tuple(columns)
    board = [BoardColumn(column) for column in columns]
    by_id = {entry.column.id: entry for entry in board}

    for project in projects:
        status = project.get('status') or ProjectStatus.NEW.value
        by_id[column_for_status(status, columns).id].projects.append(project)

    return board


class KanbanBoard:
    """Status moves driven by the board's column actions."""

    def __init__(self, projects_repository, columns: Iterable[KanbanColumn] = KANBAN_COLUMNS):
        self.projects = projects_repository
        self.columns = tuple(columns)

    def board(self) -> List[BoardColumn]:
        return group_projects_by_column(self.projects.get_all_projects(), self.columns)

    def move(self, project: Dict, direction: str) -> Optional[Dict]:
        """
        Apply the prev/next action of the project's column.

        Returns:
            The updated project row, or None when the column has no such action
        """
        current = project.get('status') or ProjectStatus.NEW.value
        column = column_for_status(current, self.columns)
        action = column.action(direction)
        if action is None:
            logger.info(f"Column {column.id} has no {direction} action for project {project['id']}")
            return None

        return self.projects.update_status(project['id'], action.status.value, current_status=current)
