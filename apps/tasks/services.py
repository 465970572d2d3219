import logging
from datetime import date
from typing import List, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.utils.dateparse import parse_date

from apps.users.services import build_user_data, clean_text, parse_id
from apps.workspaces.models import Workspace
from apps.workspaces.services import get_workspace_for_member
from .models import Task, TaskComment

User = get_user_model()
logger = logging.getLogger(__name__)

# Marks a field the client left out, as opposed to an explicit null.
UNSET = object()


# ---------- Data builders ----------
def build_comment_data(comment: TaskComment) -> dict:
    return {
        "id": comment.id,
        "author": build_user_data(comment.author),
        "message": comment.message,
        "createdAt": comment.created_at,
    }


def build_task_data(task: Task) -> dict:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "status": task.status,
        "priority": task.priority,
        "dueDate": task.due_date,
        "workspaceId": task.workspace_id,
        "owner": build_user_data(task.owner),
        "assignedTo": build_user_data(task.assigned_to) if task.assigned_to else None,
        "comments": [build_comment_data(c) for c in task.comments.all()],
        "createdAt": task.created_at,
        "updatedAt": task.updated_at,
    }


# ---------- Field validation ----------
def _clean_status(value: str) -> str:
    if not isinstance(value, str) or value not in dict(Task.STATUS_CHOICES):
        raise ValidationError("Invalid status")
    return value


def _clean_priority(value: str) -> str:
    if not isinstance(value, str) or value not in dict(Task.PRIORITY_CHOICES):
        raise ValidationError("Invalid priority")
    return value


def _clean_due_date(value) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError("Invalid due date, expected YYYY-MM-DD")
    return parsed


def _resolve_assignee(workspace: Workspace, assignee_id):
    pk = parse_id(assignee_id, "assignee id")
    try:
        assignee = User.objects.get(pk=pk)
    except User.DoesNotExist:
        raise User.DoesNotExist("Assignee not found")
    if not workspace.has_member(assignee):
        raise ValidationError("Assignee is not a member of this workspace")
    return assignee


# ---------- Lookups ----------
def _tasks():
    return (
        Task.objects
        .select_related("owner", "assigned_to", "workspace")
        .prefetch_related("comments__author")
    )


def get_task(*, user, task_id) -> Task:
    """Load a task for a member of its workspace."""
    pk = parse_id(task_id, "task id")
    try:
        task = _tasks().get(pk=pk)
    except Task.DoesNotExist:
        raise Task.DoesNotExist("Task not found")
    get_workspace_for_member(user=user, workspace_id=task.workspace_id)
    return task


def list_tasks(*, user, workspace_id) -> List[Task]:
    if not workspace_id:
        raise ValidationError("workspaceId is required")
    workspace = get_workspace_for_member(user=user, workspace_id=workspace_id)
    return list(_tasks().filter(workspace=workspace))


# ---------- Mutations ----------
def task_create(
    *,
    user,
    workspace_id,
    title: str = None,
    description: str = "",
    status: str = None,
    priority: str = None,
    due_date=None,
    assigned_to_id=None,
) -> Task:
    title = clean_text(title, "Title")
    if not title or not workspace_id:
        raise ValidationError("Title and workspaceId are required")

    workspace = get_workspace_for_member(user=user, workspace_id=workspace_id)
    task = Task(
        title=title,
        description=clean_text(description, "Description"),
        workspace=workspace,
        owner=user,
        due_date=_clean_due_date(due_date),
    )
    if status is not None:
        task.status = _clean_status(status)
    if priority is not None:
        task.priority = _clean_priority(priority)
    if assigned_to_id:
        task.assigned_to = _resolve_assignee(workspace, assigned_to_id)

    task.save()
    logger.info("Task %s created in workspace %s", task.id, workspace.id)
    return get_task(user=user, task_id=task.id)


def task_update(
    *,
    user,
    task_id,
    title=UNSET,
    description=UNSET,
    status=UNSET,
    priority=UNSET,
    due_date=UNSET,
    assigned_to_id=UNSET,
) -> Task:
    """
    Update only the fields that were provided. A null title, description,
    status or priority leaves the field as it is; a null due date or
    assignee clears it.
    """
    task = get_task(user=user, task_id=task_id)

    if title not in (UNSET, None):
        title = clean_text(title, "Title")
        if not title:
            raise ValidationError("Title cannot be empty")
        task.title = title
    if description not in (UNSET, None):
        task.description = clean_text(description, "Description")
    if status not in (UNSET, None):
        task.status = _clean_status(status)
    if priority not in (UNSET, None):
        task.priority = _clean_priority(priority)
    if due_date is not UNSET:
        task.due_date = _clean_due_date(due_date)
    if assigned_to_id is not UNSET:
        task.assigned_to = (
            _resolve_assignee(task.workspace, assigned_to_id) if assigned_to_id is not None else None
        )

    task.save()
    logger.info("Task %s updated by %s", task.id, user.id)
    return get_task(user=user, task_id=task.id)


def task_delete(*, user, task_id) -> None:
    task = get_task(user=user, task_id=task_id)
    task.delete()
    logger.info("Task %s deleted by %s", task_id, user.id)


def task_add_comment(*, user, task_id, message: str) -> TaskComment:
    task = get_task(user=user, task_id=task_id)
    message = clean_text(message, "Comment message")
    if not message:
        raise ValidationError("Comment message is required")
    return TaskComment.objects.create(task=task, author=user, message=message)
