"""
Project Routes Blueprint

Handles website-development orders and the admin kanban board:
- /api/projects: List/create projects (?client_id= filters by client)
- /api/projects/board: Projects grouped into kanban columns
- /api/projects/<project_id>: Get/delete a project
- /api/projects/<project_id>/status: Set status (validated)
- /api/projects/<project_id>/priority: Set priority (validated)
- /api/projects/<project_id>/move: Apply the column's prev/next action
- /api/projects/<project_id>/time-estimation: Set hours, days and target date
- /api/projects/<project_id>/todos: Replace the admin to-do list
"""

from flask import Blueprint, request, jsonify
import logging

from app_init import get_service
from validators import ValidationError

logger = logging.getLogger(__name__)

projects_bp = Blueprint('projects_bp', __name__)


def _not_found():
    return jsonify({'success': False, 'error': 'Project not found'}), 404


@projects_bp.route('/api/projects', methods=['GET'])
def list_projects():
    repository = get_service('projects')
    client_id = request.args.get('client_id')
    projects = repository.get_client_projects(client_id) if client_id else repository.get_all_projects()
    return jsonify({'success': True, 'projects': projects})


@projects_bp.route('/api/projects', methods=['POST'])
def create_project():
    data = request.get_json(silent=True) or {}
    project = get_service('projects').create_project(data)
    return jsonify({'success': True, 'project': project}), 201


@projects_bp.route('/api/projects/board', methods=['GET'])
def kanban_board():
    board = get_service('kanban').board()
    return jsonify({'success': True, 'columns': [column.to_dict() for column in board]})


@projects_bp.route('/api/projects/<project_id>', methods=['GET'])
def get_project(project_id):
    project = get_service('projects').get_project(project_id)
    if project is None:
        return _not_found()
    return jsonify({'success': True, 'project': project})


@projects_bp.route('/api/projects/<project_id>', methods=['DELETE'])
def delete_project(project_id):
    get_service('projects').delete_project(project_id)
    return jsonify({'success': True})


@projects_bp.route('/api/projects/<project_id>/status', methods=['PUT'])
def update_project_status(project_id):
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        raise ValidationError("status is required", field='status')

    project = get_service('projects').update_status(
        project_id,
        data['status'],
        current_status=data.get('current_status')
    )
    if project is None:
        return _not_found()
    return jsonify({'success': True, 'project': project})


@projects_bp.route('/api/projects/<project_id>/priority', methods=['PUT'])
def update_project_priority(project_id):
    data = request.get_json(silent=True) or {}
    project = get_service('projects').update_priority(project_id, data.get('priority'))
    if project is None:
        return _not_found()
    return jsonify({'success': True, 'project': project})


@projects_bp.route('/api/projects/<project_id>/move', methods=['POST'])
def move_project(project_id):
    data = request.get_json(silent=True) or {}
    direction = data.get('direction')
    if direction not in ('prev', 'next'):
        raise ValidationError("direction must be 'prev' or 'next'", field='direction')

    project = get_service('projects').get_project(project_id)
    if project is None:
        return _not_found()

    updated = get_service('kanban').move(project, direction)
    if updated is None:
        return jsonify({'success': False, 'error': f'No {direction} action for this column'}), 409
    return jsonify({'success': True, 'project': updated})


@projects_bp.route('/api/projects/<project_id>/time-estimation', methods=['PUT'])
def update_time_estimation(project_id):
    data = request.get_json(silent=True) or {}
    project = get_service('projects').update_time_estimation(
        project_id,
        data.get('estimated_hours'),
        data.get('estimated_days'),
        data.get('hours_needed'),
        target_completion_date=data.get('target_completion_date')
    )
    if project is None:
        return _not_found()
    return jsonify({'success': True, 'project': project})


@projects_bp.route('/api/projects/<project_id>/todos', methods=['PUT'])
def update_todo_list(project_id):
    data = request.get_json(silent=True) or {}
    project = get_service('projects').update_todo_list(project_id, data.get('todos'))
    if project is None:
        return _not_found()
    return jsonify({'success': True, 'project': project})
