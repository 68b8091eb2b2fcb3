"""Notification model.

A simple in-app message shown to a user about a reservation event
(confirmation, state change, upcoming start). Each notification can be
marked as read.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications'
    )
    title = models.CharField(max_length=255)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"

    def mark_read(self) -> None:
        if not self.is_read:
            self.is_read = True
            self.save(update_fields=['is_read'])
