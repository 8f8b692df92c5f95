"""Tasks blueprint for to-do items with due dates and priorities."""
from flask import Blueprint, request, g

from bizhub.database import get_session
from bizhub.middleware import require_login, require_business
from bizhub.services import task_service
from bizhub.utils.request_data import request_payload

tasks_bp = Blueprint('tasks', __name__, url_prefix='/tasks')


@tasks_bp.route('/', methods=['GET'])
@require_login
@require_business
def list_tasks():
    """Tasks by due date; ?filter= is all, pending, completed or high."""
    tasks = task_service.list_tasks(get_session(), g.ctx.business_id, request.args.get('filter', 'all'))
    return {'tasks': [task.to_dict() for task in tasks]}


@tasks_bp.route('/', methods=['POST'])
@require_login
@require_business
def create_task():
    task = task_service.create_task(get_session(), g.ctx.business_id, request_payload())
    return {'status': 'success', 'task': task.to_dict()}, 201


@tasks_bp.route('/<int:task_id>', methods=['GET'])
@require_login
@require_business
def view_task(task_id):
    return {'task': task_service.get_task(get_session(), g.ctx.business_id, task_id).to_dict()}


@tasks_bp.route('/<int:task_id>', methods=['PUT'])
@require_login
@require_business
def update_task(task_id):
    task = task_service.update_task(get_session(), g.ctx.business_id, task_id, request_payload())
    return {'status': 'success', 'task': task.to_dict()}


@tasks_bp.route('/<int:task_id>/status', methods=['POST'])
@require_login
@require_business
def set_status(task_id):
    data = request_payload()
    task = task_service.set_task_status(get_session(), g.ctx.business_id, task_id, data.get('status'))
    return {'status': 'success', 'task': task.to_dict()}


@tasks_bp.route('/<int:task_id>', methods=['DELETE'])
@require_login
@require_business
def delete_task(task_id):
    task_service.delete_task(get_session(), g.ctx.business_id, task_id)
    return {'status': 'success'}
