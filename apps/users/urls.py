from django.urls import path
from .views import UserDetailView, UserListView, UserSearchView

urlpatterns = [
    path('', UserListView.as_view(), name='user-list'),
    path('search/', UserSearchView.as_view(), name='user-search'),
    path('<str:user_id>/', UserDetailView.as_view(), name='user-detail'),
]
