# apps/workspaces/models.py

import uuid
from django.db import models
from django.contrib.auth import get_user_model
User = get_user_model()


class Workspace(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='owned_workspaces'
    )
    members = models.ManyToManyField(
        User,
        related_name='workspaces',
        blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ('-created_at',)

    def __str__(self):
        return self.name

    def has_member(self, user) -> bool:
        return self.members.filter(pk=user.pk).exists()
