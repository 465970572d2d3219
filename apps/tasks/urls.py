from django.urls import path
from .views import TaskCommentView, TaskDetailView, TaskListView

urlpatterns = [
    path('', TaskListView.as_view(), name='task-list'),
    path('<str:task_id>/', TaskDetailView.as_view(), name='task-detail'),
    path('<str:task_id>/comments/', TaskCommentView.as_view(), name='task-comments'),
]
