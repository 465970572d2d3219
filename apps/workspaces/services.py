import logging
from typing import List

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction

from apps.users.services import build_user_data, clean_text, parse_id
from .models import Workspace

User = get_user_model()
logger = logging.getLogger(__name__)


# ---------- Data builders ----------
def build_workspace_data(workspace: Workspace) -> dict:
    return {
        "id": workspace.id,
        "name": workspace.name,
        "description": workspace.description,
        "owner": build_user_data(workspace.owner),
        "members": [build_user_data(m) for m in workspace.members.all()],
        "createdAt": workspace.created_at,
    }


# ---------- Lookups ----------
def _get_workspace(workspace_id) -> Workspace:
    pk = parse_id(workspace_id, "workspace id")
    try:
        return (
            Workspace.objects
            .select_related("owner")
            .prefetch_related("members")
            .get(pk=pk)
        )
    except Workspace.DoesNotExist:
        raise Workspace.DoesNotExist("Workspace not found")


def list_workspaces(*, user) -> List[Workspace]:
    return list(
        Workspace.objects
        .filter(members=user)
        .select_related("owner")
        .prefetch_related("members")
    )


def get_workspace_for_member(*, user, workspace_id) -> Workspace:
    """Load a workspace, refusing anyone who is not one of its members."""
    workspace = _get_workspace(workspace_id)
    if not workspace.has_member(user):
        raise PermissionDenied("Forbidden: you are not a member of this workspace")
    return workspace


# ---------- Mutations ----------
@transaction.atomic
def workspace_create(*, owner, name: str, description: str = "") -> Workspace:
    name = clean_text(name, "Workspace name")
    if not name:
        raise ValidationError("Workspace name is required")
    workspace = Workspace.objects.create(
        name=name,
        description=clean_text(description, "Description"),
        owner=owner,
    )
    workspace.members.add(owner)
    logger.info("Workspace %s created by %s", workspace.id, owner.id)
    return workspace


def workspace_add_member(*, user, workspace_id, member_id) -> Workspace:
    workspace = _get_workspace(workspace_id)
    if workspace.owner_id != user.id:
        raise PermissionDenied("Forbidden: only the workspace owner can add members")

    member_pk = parse_id(member_id, "member id")
    try:
        member = User.objects.get(pk=member_pk)
    except User.DoesNotExist:
        raise User.DoesNotExist("User not found")

    if workspace.has_member(member):
        raise ValidationError("User is already a member of this workspace")

    workspace.members.add(member)
    logger.info("User %s added to workspace %s", member.id, workspace.id)
    return _get_workspace(workspace.id)


def workspace_delete(*, user, workspace_id) -> None:
    workspace = _get_workspace(workspace_id)
    if workspace.owner_id != user.id:
        raise PermissionDenied("Forbidden: only the workspace owner can delete it")
    workspace.delete()
    logger.info("Workspace %s deleted by %s", workspace_id, user.id)
