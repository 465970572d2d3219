from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework import status
from .services import (
    build_user_data, get_user_by_id, list_users, search_users,
    token_refresh, user_create, user_login,
)


class RegisterView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        user = user_create(
            username=request.data.get("username"),
            password=request.data.get("password"),
            first_name=request.data.get("firstname"),
            last_name=request.data.get("lastname"),
        )
        return Response(
            {"message": "User created", "data": build_user_data(user)},
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        tokens = user_login(
            username=request.data.get("username"),
            password=request.data.get("password"),
        )
        return Response(tokens, status=status.HTTP_200_OK)


class RefreshView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        tokens = token_refresh(refresh=request.data.get("refresh"))
        return Response(tokens, status=status.HTTP_200_OK)


class UserListView(APIView):
    def get(self, request):
        users = list_users(exclude=request.user)
        return Response([build_user_data(u) for u in users])


class UserSearchView(APIView):
    def get(self, request):
        users = search_users(query=request.query_params.get("query"))
        return Response([build_user_data(u) for u in users])


class UserDetailView(APIView):
    def get(self, request, user_id):
        return Response(build_user_data(get_user_by_id(user_id)))
