from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from .services import (
    build_comment_data, build_task_data, get_task, list_tasks,
    task_add_comment, task_create, task_delete, task_update,
)


TASK_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "dueDate": "due_date",
    "assignedTo": "assigned_to_id",
}


def _task_fields(data) -> dict:
    """Only the fields present in the payload, so an explicit null is kept apart from a missing key."""
    return {arg: data[key] for key, arg in TASK_FIELDS.items() if key in data}


class TaskListView(APIView):
    def get(self, request):
        tasks = list_tasks(user=request.user, workspace_id=request.query_params.get("workspaceId"))
        return Response([build_task_data(t) for t in tasks])

    def post(self, request):
        task = task_create(
            user=request.user,
            workspace_id=request.data.get("workspaceId"),
            **_task_fields(request.data),
        )
        return Response(
            {"message": "Task created", "data": build_task_data(task)},
            status=status.HTTP_201_CREATED,
        )


class TaskDetailView(APIView):
    def get(self, request, task_id):
        return Response(build_task_data(get_task(user=request.user, task_id=task_id)))

    def put(self, request, task_id):
        task = task_update(user=request.user, task_id=task_id, **_task_fields(request.data))
        return Response({"message": "Task updated", "data": build_task_data(task)})

    def delete(self, request, task_id):
        task_delete(user=request.user, task_id=task_id)
        return Response({"message": "Task deleted"})


class TaskCommentView(APIView):
    def post(self, request, task_id):
        comment = task_add_comment(
            user=request.user,
            task_id=task_id,
            message=request.data.get("message"),
        )
        return Response(build_comment_data(comment), status=status.HTTP_201_CREATED)
