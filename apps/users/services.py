import logging
import uuid
from typing import Dict, Iterable, List, Optional

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import transaction
from django.db.models import Q
from graphql_jwt.refresh_token.models import RefreshToken
from graphql_jwt.shortcuts import get_token

User = get_user_model()
logger = logging.getLogger(__name__)


# ---------- Identifier helpers ----------
def parse_id(value, label: str = "id") -> uuid.UUID:
    """Parse a client-supplied identifier, raising ValidationError when malformed."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(f"Invalid {label}")


def clean_text(value, label: str, *, strip: bool = True) -> str:
    """
    Normalise a client-supplied text field. Missing values become "";
    anything that is not a string is rejected.
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string")
    return value.strip() if strip else value


# ---------- Profile data builders ----------
def build_user_data(user) -> dict:
    """Public profile fields of a user, as served by every endpoint."""
    return {
        "id": user.id,
        "firstname": user.first_name,
        "lastname": user.last_name,
        "username": user.username,
        "createdAt": user.date_joined,
    }


def profiles_by_id(user_ids: Iterable) -> Dict[uuid.UUID, "User"]:  # type: ignore
    """One query for any number of identities; unknown ids are simply absent."""
    ids = {i for i in user_ids if i is not None}
    if not ids:
        return {}
    return User.objects.in_bulk(list(ids))


# ---------- Registration / login ----------
@transaction.atomic
def user_create(*, username: str, password: str, first_name: str, last_name: str) -> User:  # type: ignore
    username = clean_text(username, "Username")
    first_name = clean_text(first_name, "First name")
    last_name = clean_text(last_name, "Last name")
    password = clean_text(password, "Password", strip=False)

    if not last_name:
        raise ValidationError("Last name is required")
    if not first_name:
        raise ValidationError("First name is required")
    if not username:
        raise ValidationError("Username is required")
    if User.objects.filter(username=username).exists():
        raise ValidationError("Username taken")

    user = User(username=username, first_name=first_name, last_name=last_name)
    validate_password(password or "", user=user)
    user.set_password(password)
    user.full_clean()
    user.save()
    logger.info("Registered user %s", user.id)
    return user


def _issue_tokens(user) -> dict:
    refresh = RefreshToken.objects.create(user=user)
    return {"token": get_token(user), "refresh": refresh.token, "userId": user.id}


def user_login(*, username: str, password: str) -> dict:
    username = clean_text(username, "Username")
    password = clean_text(password, "Password", strip=False)
    if not username or not password:
        raise ValidationError("Username and password are required")
    user = authenticate(username=username, password=password)
    if user is None:
        raise ValidationError("Invalid credentials")
    logger.info("User %s logged in", user.id)
    return _issue_tokens(user)


@transaction.atomic
def token_refresh(*, refresh: str) -> dict:
    """Rotate a refresh token: the presented one is revoked, a new pair is issued."""
    refresh = clean_text(refresh, "Refresh token")
    if not refresh:
        raise ValidationError("Refresh token is required")
    try:
        refresh_token = RefreshToken.objects.select_related("user").get(
            token=refresh, revoked__isnull=True
        )
    except ObjectDoesNotExist:
        raise ValidationError("Invalid refresh token")

    if refresh_token.is_expired():
        raise ValidationError("Refresh token expired")

    refresh_token.revoke()
    return _issue_tokens(refresh_token.user)


# ---------- Lookup ----------
def search_users(*, query: Optional[str]) -> List[User]:  # type: ignore
    query = clean_text(query, "Search query")
    if not query:
        raise ValidationError("Please provide a first name, last name or username to search for")
    return list(
        User.objects.filter(
            Q(last_name__icontains=query)
            | Q(first_name__icontains=query)
            | Q(username__icontains=query)
        ).order_by("username")
    )


def list_users(*, exclude) -> List[User]:  # type: ignore
    return list(User.objects.exclude(pk=exclude.pk).order_by("username"))


def get_user_by_id(user_id) -> User:  # type: ignore
    pk = parse_id(user_id, "user id")
    try:
        return User.objects.get(pk=pk)
    except User.DoesNotExist:
        raise User.DoesNotExist("User not found")
