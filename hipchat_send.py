#!/usr/bin/env python3
"""Send a notification to a HipChat room via the v2 REST API."""

from __future__ import annotations

import argparse
import enum
import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, Optional, Sequence

import requests

from hipchat_format import render_body
from logging_config import configure_logging

__version__ = "1.0.0"

logger = logging.getLogger(__name__)

DEFAULT_API_SERVER = "api.hipchat.com"
DEFAULT_COLOR = "yellow"
DEFAULT_TIMEOUT = 30
MESSAGE_FORMAT = "html"
SUCCESS_STATUSES = frozenset({200, 204})
TOKEN_ENV = "HIPCHAT_TOKEN"
ROOM_ENV = "HIPCHAT_ROOM_ID"
FROM_ENV = "HIPCHAT_FROM"
COLOR_ENV = "HIPCHAT_COLOR"

_MALFORMED_REQUEST_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
)


class FailureKind(enum.Enum):
    INPUT_READ = "could not read message"
    REQUEST_BUILD = "could not build request"
    TRANSPORT = "request failed"
    POST_FAILED = "posting message failed"
    NOT_IMPLEMENTED = "not implemented"


class NotificationError(RuntimeError):
    """A terminal failure while sending a notification.

    ``status`` and ``body`` are only populated for ``FailureKind.POST_FAILED``.
    """

    def __init__(
        self,
        kind: FailureKind,
        detail: str,
        *,
        status: Optional[str] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(f"{kind.value}: {detail}")
        self.kind = kind
        self.status = status
        self.body = body


@dataclass
class Message:
    message: str
    color: str = DEFAULT_COLOR
    notify: bool = False
    from_name: Optional[str] = None
    message_format: str = MESSAGE_FORMAT

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.from_name:
            payload["from"] = self.from_name
        payload["message"] = self.message
        payload["color"] = self.color
        payload["message_format"] = self.message_format
        payload["notify"] = self.notify
        return payload


def notification_url(room_id: int, api_server: str = DEFAULT_API_SERVER) -> str:
    return f"https://{api_server}/v2/room/{room_id}/notification"


def build_request_body(message: Message) -> bytes:
    try:
        return json.dumps(message.to_payload()).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise NotificationError(FailureKind.REQUEST_BUILD, f"cannot encode message: {exc}") from exc


def build_headers(token: str, body: bytes) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Content-Length": str(len(body)),
        "Authorization": f"Bearer {token}",
    }


def read_message(explicit: Optional[str], stream: Optional[BinaryIO] = None) -> str:
    """Return ``explicit`` if given (even when empty), otherwise all of stdin."""

    if explicit is not None:
        return explicit

    source = stream if stream is not None else sys.stdin.buffer
    try:
        data = source.read()
    except OSError as exc:
        raise NotificationError(FailureKind.INPUT_READ, f"could not read message from stdin: {exc}") from exc
    return data.decode("utf-8", errors="replace")


def send_notification(
    message: Message,
    *,
    token: str,
    room_id: int,
    insecure: bool = False,
    api_server: str = DEFAULT_API_SERVER,
    timeout: float = DEFAULT_TIMEOUT,
    log: Optional[logging.Logger] = None,
) -> requests.Response:
    """POST ``message`` to the room's notification endpoint.

    Exactly one request is made and nothing is retried.  HTTP 200 and 204 are
    success; anything else raises ``NotificationError`` with
    ``FailureKind.POST_FAILED`` carrying the status line and response body.
    """

    log = log or logger
    url = notification_url(room_id, api_server)
    body = build_request_body(message)
    headers = build_headers(token, body)

    if insecure:
        # Needs a requests adapter with its own TLS settings; never wired up.
        raise NotificationError(FailureKind.NOT_IMPLEMENTED, "--insecure is not yet implemented")

    try:
        response = requests.post(url, headers=headers, data=body, timeout=timeout)
    except _MALFORMED_REQUEST_ERRORS as exc:
        raise NotificationError(FailureKind.REQUEST_BUILD, f"invalid request for {url}: {exc}") from exc
    except requests.RequestException as exc:
        raise NotificationError(FailureKind.TRANSPORT, f"POST {url}: {exc}") from exc

    status_line = f"{response.status_code} {response.reason or ''}".strip()
    if response.status_code not in SUCCESS_STATUSES:
        raise NotificationError(
            FailureKind.POST_FAILED,
            f"{status_line}\n{response.text}",
            status=status_line,
            body=response.text,
        )

    log.debug("Success %s; response headers:", status_line)
    for key, value in response.headers.items():
        log.debug("%s := %r", key, value)
    return response


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hipchat", description="Talk to the HipChat v2 API")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    send = commands.add_parser("send", help="send a message to a room", description="Send a message to a room")
    send.add_argument("-d", "--debug", action="store_true", help="Enable debug messages.")
    send.add_argument(
        "-t",
        "--token",
        default=os.getenv(TOKEN_ENV),
        help="API token. Defaults to HIPCHAT_TOKEN env.",
    )
    send.add_argument(
        "-r",
        "--room",
        type=int,
        default=os.getenv(ROOM_ENV),
        help="Numeric room ID. Defaults to HIPCHAT_ROOM_ID env.",
    )
    send.add_argument(
        "-f",
        "--from",
        dest="from_name",
        metavar="FROM",
        default=os.getenv(FROM_ENV),
        help="Sender name shown in the room. Defaults to HIPCHAT_FROM env.",
    )
    send.add_argument(
        "-c",
        "--color",
        default=os.getenv(COLOR_ENV, DEFAULT_COLOR),
        help="Message color (yellow, red, green, purple, gray or random). Defaults to %(default)s or HIPCHAT_COLOR env.",
    )
    send.add_argument("-m", "--message", help="The message to send (default: read from stdin).")
    send.add_argument("-n", "--notify", action="store_true", help="Trigger a notification for people in the room.")
    send.add_argument("-k", "--insecure", action="store_true", help="Don't validate SSL credentials (not implemented).")
    send.add_argument("--html", action="store_true", help="Input is already HTML; send it without transforming.")
    send.set_defaults(handler=_send_command)
    return parser


def _send_command(args: argparse.Namespace) -> None:
    text = read_message(args.message)
    message = Message(
        message=render_body(text, is_html=args.html),
        color=args.color,
        notify=args.notify,
        from_name=args.from_name,
    )
    send_notification(message, token=args.token, room_id=args.room, insecure=args.insecure)
    print(f"Message sent to room {args.room}.")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.token:
        parser.error(f"a token is required; pass --token or set {TOKEN_ENV}")
    if args.room is None:
        parser.error(f"a room ID is required; pass --room or set {ROOM_ENV}")

    configure_logging(debug=args.debug)
    try:
        args.handler(args)
    except NotificationError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
