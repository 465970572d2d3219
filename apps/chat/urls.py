from django.urls import path
from .views import ContactListView, ConversationView, MessageDetailView, MessageListView

urlpatterns = [
    path('', MessageListView.as_view(), name='message-list'),
    path('contacts/', ContactListView.as_view(), name='message-contacts'),
    path('conversation/<str:other_id>/', ConversationView.as_view(), name='message-conversation'),
    path('<str:message_id>/', MessageDetailView.as_view(), name='message-detail'),
]
