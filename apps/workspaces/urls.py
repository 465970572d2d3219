from django.urls import path
from .views import WorkspaceAddMemberView, WorkspaceDetailView, WorkspaceListView

urlpatterns = [
    path('', WorkspaceListView.as_view(), name='workspace-list'),
    path('<str:workspace_id>/', WorkspaceDetailView.as_view(), name='workspace-detail'),
    path('<str:workspace_id>/add-member/', WorkspaceAddMemberView.as_view(), name='workspace-add-member'),
]
