"""
Models for the Groups app.

Membership is maintained elsewhere; the ledger only reads it through
``apps.groups.permissions.AuthorizationGate``.
"""
from django.conf import settings
from django.db import models

from common.models import TimestampedModel


class Group(TimestampedModel):
    """
    A travel group that owns one or more travels.
    """
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_groups',
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'groups'
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    @property
    def member_count(self):
        return self.members.count()


class GroupMember(TimestampedModel):
    """
    Membership record linking a user to a group.
    """
    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name='members',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='group_memberships',
    )
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'group_members'
        unique_together = ['group', 'user']
        ordering = ['joined_at']

    def __str__(self):
        return f'{self.user} in {self.group}'
