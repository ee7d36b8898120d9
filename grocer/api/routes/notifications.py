"""Notification routes backed by the per-user feed and its poller."""
import logging

from fastapi import APIRouter, Depends

from grocer.api import deps
from grocer.api.deps import get_api_client, get_session
from grocer.domain.Notification import Notification
from grocer.domain.Session import Session
from grocer.events.notification_feed import FEEDS, NotificationFeed
from grocer.infra.Api_Client import ApiClient
from grocer.utilities.config import NOTIFICATION_POLL_SECONDS

router = APIRouter(prefix="/api/notifications")
logger = logging.getLogger(__name__)


def _fetcher(session: Session):
    # pollers outlive the request, so each poll opens its own client
    def fetch():
        with deps.build_client(session) as client:
            return [Notification.from_dict(r) for r in client.user_notifications(session.user_id)]
    return fetch


def _feed_view(feed: NotificationFeed, unread_only: bool) -> dict:
    items = feed.unread() if unread_only else feed.items()
    return {
        "notifications": [n.to_dict() for n in items],
        "unreadCount": feed.unread_count(),
    }


@router.get("")
def list_notifications(refresh: bool = True, unread_only: bool = False,
                       session: Session = Depends(get_session),
                       client: ApiClient = Depends(get_api_client)):
    """Current notifications; refresh=false returns what the poller last applied."""
    feed = FEEDS.feed_for(session.user_id)
    if refresh:
        ticket = feed.begin()
        fetched = [Notification.from_dict(r) for r in client.user_notifications(session.user_id)]
        if not feed.apply(ticket, fetched):
            logger.debug("Newer notifications already applied for %s", session)
    return _feed_view(feed, unread_only)


@router.post("/watch")
def watch_notifications(session: Session = Depends(get_session)):
    poller = FEEDS.watch(session.user_id, _fetcher(session), NOTIFICATION_POLL_SECONDS, token=session.token)
    return {"watching": poller.running, "interval": poller.interval}


@router.delete("/watch")
def unwatch_notifications(session: Session = Depends(get_session)):
    stopped = FEEDS.unwatch(session.user_id)
    logger.info("Notification polling for %s %s", session, "stopped" if stopped else "was not running")
    return {"watching": False, "stopped": stopped}


@router.put("/{notification_id}/read")
def mark_read(notification_id: str, session: Session = Depends(get_session),
              client: ApiClient = Depends(get_api_client)):
    client.mark_notification_read(notification_id)
    feed = FEEDS.feed_for(session.user_id)
    feed.mark_read(notification_id)
    return {"status": "success", "unreadCount": feed.unread_count()}


@router.delete("/{notification_id}")
def delete_notification(notification_id: str, session: Session = Depends(get_session),
                        client: ApiClient = Depends(get_api_client)):
    client.delete_notification(notification_id)
    feed = FEEDS.feed_for(session.user_id)
    feed.remove(notification_id)
    return {"status": "success", "unreadCount": feed.unread_count()}
