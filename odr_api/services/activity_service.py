"""
Activity audit log.
Append-only record of every state-changing action on a dispute, plus the
aggregated activity report computed from it.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence

from odr_api.config.policy import MediationPolicy
from odr_api.daos.activity_dao import DisputeActivityDAO
from odr_api.errors import ValidationFailedError
from odr_api.models.activity import (
    CLIENT_ACTIVITY_TYPES,
    ActivityReport,
    ActivityType,
    DisputeActivityCreate,
    DisputeActivityResponse,
    UserActivityCount,
)
from odr_api.services.access_control import AccessControl
from odr_api.utils.datetime_utils import to_iso_date

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


def build_activity_report(
    dispute_id: str,
    activities: Iterable[DisputeActivityResponse],
    top_users: int = 5,
    recent_activities: int = 10,
) -> ActivityReport:
    """
    Aggregate a dispute's activities into a report.

    Pure function: the same activities always yield the same report.

    Args:
        dispute_id: Dispute the activities belong to
        activities: Every activity of the dispute, in any order
        top_users: How many actors to list in top_users
        recent_activities: How many of the newest activities to include

    Returns:
        ActivityReport whose type counts, user counts and total reconcile
    """
    ordered = sorted(activities, key=lambda a: a.created_at, reverse=True)

    by_type: Counter = Counter()
    by_user: Counter = Counter()
    by_day: Counter = Counter()
    for activity in ordered:
        by_type[activity.activity_type] += 1
        by_user[activity.user_id or SYSTEM_ACTOR] += 1
        by_day[to_iso_date(activity.created_at)] += 1

    # Highest count first, ties broken by actor id so the order is stable
    ranked = sorted(by_user.items(), key=lambda item: (-item[1], item[0]))
    top = [
        UserActivityCount(user_id=None if user == SYSTEM_ACTOR else user, count=count)
        for user, count in ranked[:top_users]
    ]

    return ActivityReport(
        dispute_id=dispute_id,
        total_activities=len(ordered),
        activity_counts=dict(by_type),
        counts_by_user=dict(by_user),
        top_users=top,
        timeline=dict(sorted(by_day.items())),
        recent_activities=ordered[:recent_activities],
    )


class ActivityLog:
    """Writes and reads the dispute activity log."""

    def __init__(
        self,
        activity_dao: DisputeActivityDAO,
        access: AccessControl,
        policy: MediationPolicy,
    ):
        self.activity_dao = activity_dao
        self.access = access
        self.policy = policy

    def record(
        self,
        dispute_id: str,
        user_id: Optional[str],
        activity_type: ActivityType,
        payload: Optional[Dict[str, Any]] = None,
    ) -> DisputeActivityResponse:
        """
        Append an activity.

        Never conditional: a DatabaseError here propagates, and the caller
        undoes the state change it was recording before re-raising.
        """
        activity = self.activity_dao.create_activity(
            self.entry(dispute_id, user_id, activity_type, payload)
        )
        logger.debug(f"Recorded {activity_type.value} on dispute {dispute_id}")
        return activity

    @staticmethod
    def entry(
        dispute_id: str,
        user_id: Optional[str],
        activity_type: ActivityType,
        payload: Optional[Dict[str, Any]] = None,
    ) -> DisputeActivityCreate:
        return DisputeActivityCreate(
            dispute_id=dispute_id,
            user_id=user_id,
            activity_type=activity_type,
            payload=payload or {},
        )

    def record_many(self, entries: Sequence[DisputeActivityCreate]) -> List[DisputeActivityResponse]:
        """
        Append the activities of one state change in a single write.

        Either all of them are stored or none is, and a DatabaseError
        propagates so the caller can undo the state change.
        """
        if not entries:
            return []
        activities = self.activity_dao.create_activities(list(entries))
        logger.debug(
            f"Recorded {[e.activity_type.value for e in entries]} on dispute {entries[0].dispute_id}"
        )
        return activities

    def record_activity(
        self,
        actor_id: str,
        dispute_id: str,
        activity_type: ActivityType,
        payload: Optional[Dict[str, Any]] = None,
    ) -> DisputeActivityResponse:
        """
        Record a client-reported activity on behalf of an authorized actor.

        Raises:
            ValidationFailedError: The type is one only the services emit
        """
        self.access.require_access(actor_id, dispute_id)
        if activity_type not in CLIENT_ACTIVITY_TYPES:
            raise ValidationFailedError(
                f"{activity_type.value} activities are recorded by the server only"
            )
        return self.record(dispute_id, actor_id, activity_type, payload)

    def list_activities(self, actor_id: str, dispute_id: str) -> List[DisputeActivityResponse]:
        """All activities of a dispute, newest first."""
        self.access.require_access(actor_id, dispute_id)
        return self.activity_dao.get_activities_by_dispute(dispute_id)

    def report(self, actor_id: str, dispute_id: str) -> ActivityReport:
        self.access.require_access(actor_id, dispute_id)
        activities = self.activity_dao.get_activities_by_dispute(dispute_id)
        return build_activity_report(
            dispute_id,
            activities,
            top_users=self.policy.report_top_users,
            recent_activities=self.policy.report_recent_activities,
        )
