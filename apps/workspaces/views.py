from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from .services import (
    build_workspace_data, get_workspace_for_member, list_workspaces,
    workspace_add_member, workspace_create, workspace_delete,
)


class WorkspaceListView(APIView):
    def get(self, request):
        workspaces = list_workspaces(user=request.user)
        return Response([build_workspace_data(w) for w in workspaces])

    def post(self, request):
        workspace = workspace_create(
            owner=request.user,
            name=request.data.get("name"),
            description=request.data.get("description", ""),
        )
        return Response(
            {"message": "Workspace created", "data": build_workspace_data(workspace)},
            status=status.HTTP_201_CREATED,
        )


class WorkspaceDetailView(APIView):
    def get(self, request, workspace_id):
        workspace = get_workspace_for_member(user=request.user, workspace_id=workspace_id)
        return Response(build_workspace_data(workspace))

    def delete(self, request, workspace_id):
        workspace_delete(user=request.user, workspace_id=workspace_id)
        return Response({"message": "Workspace deleted"})


class WorkspaceAddMemberView(APIView):
    def put(self, request, workspace_id):
        workspace = workspace_add_member(
            user=request.user,
            workspace_id=workspace_id,
            member_id=request.data.get("memberId"),
        )
        return Response({"message": "Member added", "data": build_workspace_data(workspace)})
