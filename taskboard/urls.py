from django.contrib import admin
from django.urls import include, path

api_v1 = [
    path('auth/', include('apps.users.urls_auth')),
    path('users/', include('apps.users.urls')),
    path('workspaces/', include('apps.workspaces.urls')),
    # Older clients still call workspaces "projects".
    path('projects/', include('apps.workspaces.urls')),
    path('tasks/', include('apps.tasks.urls')),
    path('messages/', include('apps.chat.urls')),
]

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include(api_v1)),
    path('', include('apps.graphql_api.urls')),
]
