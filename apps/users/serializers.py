"""
Serializers for the Users app.

Only identity enrichment lives here: expenses and budgets embed
``{id, name, email}`` for payers, creators and split participants.
"""
from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email']
        read_only_fields = fields
