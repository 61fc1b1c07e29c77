"""
Authorization gate for the expense ledger.

Every mutating ledger operation asks the same question: is this user a
listed member of the group owning the travel, or the group's creator?
"""
import logging

from common.exceptions import Forbidden

logger = logging.getLogger(__name__)


class AuthorizationGate:
    """
    Answers membership questions against a resolved ``TravelGroup``.
    """
    message = 'You are not a member of this travel group.'

    def is_creator(self, travel_group, user_id):
        return user_id is not None and str(user_id) == travel_group.creator_id

    def is_member(self, travel_group, user_id):
        if user_id is None:
            return False
        return str(user_id) in travel_group.member_ids or self.is_creator(travel_group, user_id)

    def ensure_member(self, travel_group, user_id):
        if not self.is_member(travel_group, user_id):
            logger.warning(
                'User %s denied access to travel %s (group %s)',
                user_id,
                travel_group.travel_id,
                travel_group.group_id,
            )
            raise Forbidden(self.message)
