"""
Projects Repository - Remote operations on the projects table.
"""

import logging
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

from database.models import generate_uuid, utcnow
from services.project_status import PROJECT_STATUSES, ProjectStatus, can_transition
from validators import (
    ValidationError,
    ensure_choice,
    parse_amount,
    sanitize_string,
    validate_email,
    validate_priority,
    validate_required_fields
)

logger = logging.getLogger(__name__)

PROJECTS_TABLE = 'projects'

MAPPING_FIELDS = ('contact_info', 'purpose', 'preferences')


def selected_features(value: Any) -> List[str]:
    """
    Feature ids from a stored or submitted features value.

    Accepts a plain list or the {'selected': [...]} form; anything else
    (None, older rows with other shapes) yields an empty list.
    """
    if isinstance(value, dict):
        value = value.get('selected')
    if not isinstance(value, list):
        return []
    return [feature for feature in value if isinstance(feature, str)]


def mapping_field(project: Dict, name: str) -> Dict:
    """A JSON object column of a project row, or {} when missing or malformed."""
    value = project.get(name)
    return value if isinstance(value, dict) else {}


class ProjectsRepository:
    """Project reads and writes; validation happens before any remote call."""

    def __init__(self, store, notifications=None):
        self.store = store
        self.notifications = notifications

    def create_project(self, data: Dict) -> Dict:
        is_valid, error = validate_required_fields(data, ['client_id', 'title'])
        if not is_valid:
            raise ValidationError(error)

        if data.get('client_email'):
            is_valid, error = validate_email(data['client_email'])
            if not is_valid:
                raise ValidationError(error, field='client_email')

        status = data.get('status', ProjectStatus.NEW.value)
        ensure_choice(status, PROJECT_STATUSES, 'status')
        priority = validate_priority(data.get('priority', 'medium'))

        values = {
            'client_id': data['client_id'],
            'client_email': data.get('client_email'),
            'title': sanitize_string(data['title'], max_length=255),
            'status': status,
            'priority': priority,
            'price': parse_amount(data.get('price'), 'price'),
            'admin_notes': data.get('admin_notes'),
        }
        for name in MAPPING_FIELDS:
            value = data.get(name) or {}
            if not isinstance(value, dict):
                raise ValidationError(f"{name} must be an object", field=name)
            values[name] = value

        features = data.get('features') or []
        if isinstance(features, dict):
            features = features.get('selected') or []
        if not isinstance(features, list) or not all(isinstance(f, str) for f in features):
            raise ValidationError("features must be a list of feature ids", field='features')
        values['features'] = features

        project = self.store.insert(PROJECTS_TABLE, values)
        logger.info(f"Project {project['id']} created for client {project['client_id']}")

        if self.notifications is not None:
            self.notifications.notify_project_created(project)
        return project

    def get_project(self, project_id: str) -> Optional[Dict]:
        return self.store.get(PROJECTS_TABLE, project_id)

    def get_client_projects(self, client_id: str) -> List[Dict]:
        return self.store.select(
            PROJECTS_TABLE,
            filters={'client_id': client_id},
            order_by='created_at',
            descending=True
        )

    def get_all_projects(self) -> List[Dict]:
        return self.store.select(PROJECTS_TABLE, order_by='created_at', descending=True)

    def update_status(self, project_id: str, new_status: str,
                      current_status: Optional[str] = None) -> Optional[Dict]:
        """
        Write a new status and refresh updated_at.

        Unknown statuses, and transitions not allowed from current_status when
        it is given, raise ValidationError before any remote call. Remote
        failures propagate unchanged.
        """
        ensure_choice(new_status, PROJECT_STATUSES, 'status')

        if current_status is not None and not can_transition(current_status, new_status):
            logger.warning(f"Rejected transition {current_status} -> {new_status} for project {project_id}")
            raise ValidationError(
                f"Cannot move project from {current_status} to {new_status}",
                field='status'
            )

        logger.info(f"Updating project {project_id} status to {new_status}")
        project = self.store.update(PROJECTS_TABLE, project_id, {
            'status': new_status,
            'updated_at': utcnow()
        })

        if project is not None and self.notifications is not None:
            self.notifications.notify_project_status_change(project, current_status, new_status)
        return project

    def update_priority(self, project_id: str, priority: str) -> Optional[Dict]:
        validate_priority(priority)
        return self.store.update(PROJECTS_TABLE, project_id, {
            'priority': priority,
            'updated_at': utcnow()
        })

    def update_admin_notes(self, project_id: str, admin_notes: str) -> Optional[Dict]:
        return self.store.update(PROJECTS_TABLE, project_id, {
            'admin_notes': sanitize_string(admin_notes or '', max_length=10000),
            'updated_at': utcnow()
        })

    def update_time_estimation(self, project_id: str, estimated_hours, estimated_days,
                               hours_needed, target_completion_date: Optional[str] = None) -> Optional[Dict]:
        """
        Record the admin's effort estimate for a project.

        Args:
            project_id: Project to update
            estimated_hours: Total hours of work
            estimated_days: Calendar days of work
            hours_needed: Hours still outstanding
            target_completion_date: ISO date, or None to clear it

        Returns:
            Updated project, or None if it does not exist
        """
        values = {
            'estimated_hours': parse_amount(estimated_hours, 'estimated_hours'),
            'estimated_days': parse_amount(estimated_days, 'estimated_days'),
            'hours_needed': parse_amount(hours_needed, 'hours_needed'),
            'target_completion_date': None,
            'updated_at': utcnow()
        }
        if target_completion_date:
            try:
                values['target_completion_date'] = date_parser.isoparse(target_completion_date)
            except (TypeError, ValueError):
                raise ValidationError(
                    f"Invalid target_completion_date: {target_completion_date!r}",
                    field='target_completion_date'
                )

        logger.info(f"Updating time estimation for project {project_id}")
        return self.store.update(PROJECTS_TABLE, project_id, values)

    def update_todo_list(self, project_id: str, todos: List[Dict]) -> Optional[Dict]:
        """Replace the admin to-do list; items without an id get one."""
        if not isinstance(todos, list):
            raise ValidationError("todos must be a list", field='todos')

        items = []
        for todo in todos:
            if not isinstance(todo, dict):
                raise ValidationError("Each todo must be an object", field='todos')
            text = sanitize_string(todo.get('text') or '', max_length=1000)
            if not text:
                raise ValidationError("Todo text is required", field='todos')
            completed = todo.get('completed', False)
            if not isinstance(completed, bool):
                raise ValidationError("Todo completed must be true or false", field='todos')
            items.append({'id': todo.get('id') or generate_uuid(), 'text': text, 'completed': completed})

        logger.info(f"Updating todo list for project {project_id} ({len(items)} items)")
        return self.store.update(PROJECTS_TABLE, project_id, {
            'admin_todos': items,
            'updated_at': utcnow()
        })

    def delete_project(self, project_id: str) -> None:
        self.store.delete(PROJECTS_TABLE, project_id)
        logger.info(f"Project {project_id} deleted")
