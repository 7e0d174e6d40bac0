"""
Notification dispatcher for LastCall.

Fire-and-forget: delivery mechanics (push, email, SMS) live outside this core.
The default dispatcher logs each notification; a failing dispatcher never
breaks the workflow that triggered it.
"""
import logging
from typing import Any, Iterable, Optional

from lastcall.core.config import settings

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Dispatches notifications to users.

    In development mode, notifications are only logged.
    Subclass and override `deliver` to plug in a real transport.
    """

    def __init__(self):
        self.app_name = getattr(settings, 'APP_NAME', 'LastCall')
        self.debug = getattr(settings, 'DEBUG', True)

    async def deliver(
        self,
        user_id: str,
        title: str,
        body: str,
        data: dict[str, Any]
    ) -> None:
        """Send one notification. The base implementation logs it."""
        logger.info(f"Notification: to={user_id}, title={title}")
        if self.debug:
            logger.debug(f"Notification body: {body[:200]} data={data}")

    async def dispatch(
        self,
        user_ids: Iterable[str],
        title: str,
        body: str,
        data: Optional[dict[str, Any]] = None
    ) -> int:
        """
        Send a notification to each user.

        Args:
            user_ids: Recipients
            title: Notification title
            body: Notification text
            data: Optional payload for the client

        Returns:
            Number of notifications delivered
        """
        delivered = 0
        for user_id in user_ids:
            try:
                await self.deliver(user_id, title, body, data or {})
                delivered += 1
            except Exception as e:
                logger.error(f"Failed to notify {user_id}: {e}")
        return delivered

    async def join_requested(
        self,
        admin_ids: Iterable[str],
        organization_name: str,
        requester_name: str,
        org_id: str
    ) -> int:
        """Tell the organization's admins that someone asked to join."""
        return await self.dispatch(
            admin_ids,
            f"New join request for {organization_name}",
            f"{requester_name or 'Someone'} has requested to join {organization_name}.",
            {"type": "join_request", "orgId": org_id},
        )

    async def join_approved(self, user_id: str, organization_name: str, org_id: str) -> int:
        """Tell a user their join request was approved."""
        return await self.dispatch(
            [user_id],
            f"Welcome to {organization_name}",
            f"Your request to join {organization_name} on {self.app_name} was approved.",
            {"type": "join_approved", "orgId": org_id},
        )

    async def schedule_published(
        self,
        employee_ids: Iterable[str],
        organization_name: str,
        week_start: str,
        org_id: str,
        schedule_id: str
    ) -> int:
        """Tell employees a schedule is now visible."""
        return await self.dispatch(
            employee_ids,
            "New schedule published",
            f"{organization_name} published the schedule for the week of {week_start}.",
            {"type": "schedule_published", "orgId": org_id, "scheduleId": schedule_id},
        )


# Singleton instance
notification_dispatcher = NotificationDispatcher()


def get_notifier() -> NotificationDispatcher:
    """Dependency returning the shared dispatcher."""
    return notification_dispatcher
