"""Notifications app package.

Delivers reservation notifications to users by email and as in-app
messages stored in the database. The reservation Celery tasks call into
`apps.notifications.services`.
"""
