################################################################################
# File Name: notifier.py
# Purpose/Description: Webhook notifications for backup outcomes
# Author: Ralph Agent
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Backster Project. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | Ralph Agent  | Initial creation
# ================================================================================
################################################################################
"""
Slack-compatible webhook notifier.

Posts one JSON payload per event. Delivery is best-effort: transport errors
and non-2xx responses are logged and swallowed, never raised.

Usage:
    notifier = WebhookNotifier(settings)
    notifier.notifyFailure(event)
"""

import logging
import socket
from datetime import datetime

import requests
from pydantic import BaseModel, Field

from .types import BackupSettings, NotificationEvent, NotificationStatus

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT = 10
ICON_EMOJI = ':floppy_disk:'
COLOR_SUCCESS = 'good'
COLOR_FAILURE = 'danger'


class SlackField(BaseModel):
    title: str
    value: str
    short: bool = True


class SlackAttachment(BaseModel):
    color: str
    title: str
    text: str
    fields: list[SlackField] = Field(default_factory=list)


class SlackPayload(BaseModel):
    """Incoming-webhook message body."""

    channel: str
    username: str
    icon_emoji: str = ICON_EMOJI
    attachments: list[SlackAttachment]


class WebhookNotifier:
    """
    Sends NotificationEvents to the configured webhook.

    Nothing is sent when notifications are disabled. Success events are
    only sent when slackNotifyOnSuccess is on; failure events always are.
    """

    def __init__(self, settings: BackupSettings, session: requests.Session | None = None):
        self._settings = settings
        self._session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return self._settings.slackEnabled and bool(self._settings.slackWebhookUrl)

    def buildPayload(self, event: NotificationEvent) -> SlackPayload:
        """
        Build the webhook payload for an event.

        Args:
            event: Outcome to report

        Returns:
            SlackPayload ready to serialize
        """
        isSuccess = event.status == NotificationStatus.SUCCESS
        return SlackPayload(
            channel=self._settings.slackChannel,
            username=self._settings.slackUsername,
            attachments=[
                SlackAttachment(
                    color=COLOR_SUCCESS if isSuccess else COLOR_FAILURE,
                    title=f"Database Backup {'Success' if isSuccess else 'FAILED'}",
                    text=event.message,
                    fields=[
                        SlackField(title='Server', value=socket.gethostname()),
                        SlackField(title='Database', value=self._settings.dbName),
                        SlackField(
                            title='Timestamp',
                            value=event.timestamp.strftime('%Y-%m-%d %H:%M:%S')
                        ),
                    ],
                )
            ],
        )

    def send(self, event: NotificationEvent) -> bool:
        """
        Post an event to the webhook.

        Returns:
            True if the webhook accepted the payload
        """
        if not self.enabled:
            logger.debug("Notifications disabled, skipping")
            return False

        payload = self.buildPayload(event)
        try:
            response = self._session.post(
                self._settings.slackWebhookUrl,
                json=payload.model_dump(),
                timeout=WEBHOOK_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to send {event.status.value} notification: {e}")
            return False

        logger.info(f"Sent {event.status.value} notification")
        return True

    def notifySuccess(self, event: NotificationEvent) -> bool:
        if not self._settings.slackNotifyOnSuccess:
            logger.debug("Success notifications disabled, skipping")
            return False
        return self.send(event)

    def notifyFailure(self, event: NotificationEvent) -> bool:
        return self.send(event)


def buildEvent(
    status: NotificationStatus,
    message: str,
    durationSeconds: float,
    location: str | None = None
) -> NotificationEvent:
    """Create a NotificationEvent stamped now."""
    return NotificationEvent(
        status=status,
        message=message,
        timestamp=datetime.now(),
        durationSeconds=durationSeconds,
        location=location,
    )
