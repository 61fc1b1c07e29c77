"""
Travel/group resolution for the expense ledger.

The ledger never walks ``travel -> group -> members`` itself; it asks for a
``TravelGroup`` snapshot and hands that to the authorization gate.
"""
from dataclasses import dataclass

from django.core.exceptions import ValidationError as DjangoValidationError

from apps.groups.models import GroupMember
from apps.travels.models import Travel
from common.exceptions import NotFound


@dataclass(frozen=True)
class TravelGroup:
    travel_id: str
    group_id: str
    member_ids: frozenset
    creator_id: str


def resolve_travel_group(travel_id):
    """
    Return the group owning *travel_id* with its member and creator ids.

    Raises
    ------
    NotFound
        If the travel does not exist.
    """
    try:
        travel = Travel.objects.select_related('group').get(pk=travel_id)
    except (Travel.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound('Travel not found.') from None

    member_ids = GroupMember.objects.filter(
        group_id=travel.group_id,
    ).values_list('user_id', flat=True)

    return TravelGroup(
        travel_id=str(travel.id),
        group_id=str(travel.group_id),
        member_ids=frozenset(str(uid) for uid in member_ids),
        creator_id=str(travel.group.created_by_id),
    )
