"""Shared fixtures: three group members, an outsider, a travel and categories."""

from datetime import date

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command
from rest_framework.test import APIClient

from apps.groups.models import Group, GroupMember
from apps.travels.models import ItineraryItem, Travel

User = get_user_model()


def make_user(name):
    return User.objects.create_user(
        username=name,
        email=f"{name}@example.com",
        password="not-a-real-password",
        first_name=name.capitalize(),
    )


@pytest.fixture
def categories(db):
    """Seed the default expense categories."""
    call_command("seed_expense_categories", verbosity=0)


@pytest.fixture
def u1(db):
    return make_user("alice")


@pytest.fixture
def u2(db):
    return make_user("bob")


@pytest.fixture
def u3(db):
    return make_user("carol")


@pytest.fixture
def outsider(db):
    return make_user("mallory")


@pytest.fixture
def group(u1, u2, u3):
    """Group created by u1 with u1, u2 and u3 as listed members."""
    group = Group.objects.create(name="Kyoto crew", created_by=u1)
    for user in (u1, u2, u3):
        GroupMember.objects.create(group=group, user=user)
    return group


@pytest.fixture
def travel(group, u1):
    return Travel.objects.create(
        group=group,
        name="Kyoto 2026",
        destination="Kyoto",
        start_date=date(2026, 4, 1),
        end_date=date(2026, 4, 7),
        created_by=u1,
    )


@pytest.fixture
def other_travel(outsider):
    """A travel in a group the members above do not belong to."""
    group = Group.objects.create(name="Elsewhere", created_by=outsider)
    GroupMember.objects.create(group=group, user=outsider)
    return Travel.objects.create(group=group, name="Elsewhere trip", created_by=outsider)


@pytest.fixture
def itinerary_item(travel):
    return ItineraryItem.objects.create(
        travel=travel,
        title="Fushimi Inari",
        date=date(2026, 4, 2),
        period=ItineraryItem.Period.MORNING,
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def member_client(api_client, u1):
    """API client authenticated as u1."""
    api_client.force_authenticate(user=u1)
    return api_client
