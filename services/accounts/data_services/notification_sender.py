"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import asdict, dataclass
from datetime import datetime
import logging
import typing
import httpx


@dataclass(frozen=True)
class Notification:
    """
    Message handed to the notifications service.

    Attributes:
        title (str): Subject line.
        recipient (str): E-mail address of the recipient.
        rendered_body (str): Final body text, links included.
        expiry (datetime): Time after which the message is meaningless.
        channel (str): Delivery channel, only "email" is used.
    """
    title: str
    recipient: str
    rendered_body: str
    expiry: datetime
    channel: str = "email"

    def to_dict(self) -> dict:
        body = asdict(self)
        body["expiry"] = self.expiry.isoformat()
        return body


class NotificationSender:
    """
    Fire-and-forget delivery of notifications.

    With a service URL the notification is POSTed to the notifications
    service, without one it is only written to the log. A failed delivery is
    logged and never raised.
    """

    def __init__(self, logger: logging.Logger,
                 service_url: typing.Optional[str] = None,
                 timeout_seconds: float = 5.0,
                 transport: typing.Optional[httpx.AsyncBaseTransport] = None
                 ) -> None:
        self._logger = logger.getChild(__name__)
        self._service_url = service_url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def send(self, notification: Notification) -> bool:
        """
        Deliver a notification.

        Returns:
            bool: True if it was accepted (or logged), False otherwise.
        """
        if not self._service_url:
            self._logger.info("Notification '%s' (%s) for %s:\n%s",
                              notification.title, notification.channel,
                              notification.recipient,
                              notification.rendered_body)
            return True

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds,
                                         transport=self._transport) as client:
                response = await client.post(self._service_url,
                                             json=notification.to_dict())
                response.raise_for_status()

        except httpx.HTTPError as ex:
            self._logger.error("Unable to deliver notification '%s' to %s: "
                               "%s", notification.title,
                               notification.recipient, ex)
            return False

        self._logger.debug("Notification '%s' delivered to %s",
                           notification.title, notification.recipient)
        return True
