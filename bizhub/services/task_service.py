"""Task service."""
from datetime import date, datetime
from typing import Dict, List, Optional

from bizhub.exceptions import NotFoundError, ValidationError
from bizhub.models import Task, TaskPriority, TaskStatus

TASK_FILTERS = ('all', 'pending', 'completed', 'high')
TASK_PRIORITIES = [priority.value for priority in TaskPriority]
TASK_STATUSES = [status.value for status in TaskStatus]
TASK_FIELDS = ('title', 'description', 'related_to', 'related_id', 'assigned_to')


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_due_date(value) -> Optional[date]:
    if value in (None, ''):
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip()[:10], '%Y-%m-%d').date()
    except ValueError as e:
        raise ValidationError('Due date must use the YYYY-MM-DD format.') from e


def _choice(value, allowed, label):
    if value not in allowed:
        raise ValidationError(f"Invalid task {label} '{value}'.")
    return value


def list_tasks(session, business_id: int, task_filter: str = 'all') -> List[Task]:
    """
    Tasks ordered by due date, undated tasks last.

    task_filter: 'all', 'pending', 'completed' or 'high' (high priority)
    """
    query = session.query(Task).filter(Task.business_id == business_id)
    if task_filter == 'pending':
        query = query.filter(Task.status == TaskStatus.PENDING.value)
    elif task_filter == 'completed':
        query = query.filter(Task.status == TaskStatus.COMPLETED.value)
    elif task_filter == 'high':
        query = query.filter(Task.priority == TaskPriority.HIGH.value)
    elif task_filter not in (None, '', 'all'):
        raise ValidationError(f"Unknown task filter '{task_filter}'.")
    return query.order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.id.asc()).all()


def get_task(session, business_id: int, task_id: int) -> Task:
    task = session.query(Task).filter(Task.id == task_id, Task.business_id == business_id).first()
    if not task:
        raise NotFoundError(f'Task {task_id} not found.')
    return task


def create_task(session, business_id: int, data: Dict) -> Task:
    title = _clean(data.get('title'))
    if not title:
        raise ValidationError('Please provide a task title.')

    task = Task(
        business_id=business_id,
        title=title,
        priority=_choice(data.get('priority') or TaskPriority.MEDIUM.value, TASK_PRIORITIES, 'priority'),
        status=_choice(data.get('status') or TaskStatus.PENDING.value, TASK_STATUSES, 'status'),
        due_date=_parse_due_date(data.get('due_date'))
    )
    for field in TASK_FIELDS[1:]:
        setattr(task, field, _clean(data.get(field)))

    session.add(task)
    session.commit()
    return task


def update_task(session, business_id: int, task_id: int, data: Dict) -> Task:
    task = get_task(session, business_id, task_id)

    if 'title' in data and not _clean(data.get('title')):
        raise ValidationError('Please provide a task title.')

    for field in TASK_FIELDS:
        if field in data:
            setattr(task, field, _clean(data[field]))
    if 'due_date' in data:
        task.due_date = _parse_due_date(data['due_date'])
    if data.get('priority'):
        task.priority = _choice(data['priority'], TASK_PRIORITIES, 'priority')
    if data.get('status'):
        task.status = _choice(data['status'], TASK_STATUSES, 'status')

    session.commit()
    return task


def set_task_status(session, business_id: int, task_id: int, status: str) -> Task:
    """Mark a task pending or completed."""
    task = get_task(session, business_id, task_id)
    task.status = _choice(status, TASK_STATUSES, 'status')
    session.commit()
    return task


def delete_task(session, business_id: int, task_id: int) -> None:
    task = get_task(session, business_id, task_id)
    session.delete(task)
    session.commit()
