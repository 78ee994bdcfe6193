"""Client for group-chat robot webhooks."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit

MENTION_ALL = "@all"
"""Special mention target that notifies everyone in the chat."""

SEND_PATH = "/cgi-bin/webhook/send"

Transport = Callable[[str, bytes, Mapping[str, str]], bytes]


def _urllib_post(url: str, body: bytes, headers: Mapping[str, str]) -> bytes:
    request = urllib.request.Request(url, data=body, headers=dict(headers), method="POST")
    try:
        with urllib.request.urlopen(request) as response:
            return response.read()
    except urllib.error.HTTPError as error:
        with error:
            return error.read()


@dataclass
class Mentions:
    """Who a text message notifies, by user id or by mobile number."""

    user_ids: list[str] = field(default_factory=list)
    mobiles: list[str] = field(default_factory=list)


class WebhookClient:
    """Sends messages through a group robot identified by its webhook key."""

    def __init__(self, key: str, host: str, *, transport: Transport | None = None) -> None:
        self._key = key
        self._host = host
        self._transport = transport or _urllib_post

    @property
    def key(self) -> str:
        """The webhook key this client was configured with."""
        return self._key

    def compose_url(self, path: str, query: Mapping[str, Any] | None = None) -> str:
        """Build the URL for ``path`` on the API host, with the key in the query."""
        params = dict(query or {})
        params["key"] = self._key
        try:
            base = urlsplit(self._host)
        except ValueError as error:
            raise ValueError(f"qyapi host invalid: host={self._host} err={error}") from error
        encoded = urlencode(sorted(params.items()), doseq=True)
        return urlunsplit((base.scheme, base.netloc, path, encoded, base.fragment))

    def post_json(self, path: str, payload: Any) -> bytes:
        """POST ``payload`` as JSON to ``path`` and return the raw response body."""
        body = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        return self._transport(
            self.compose_url(path),
            body.encode("utf-8"),
            {"Content-Type": "application/json"},
        )

    def send_text_message(self, content: str, mentions: Mentions | None = None) -> None:
        """Send a plain-text message, optionally notifying some members."""
        params: dict[str, Any] = {"content": content}
        if mentions is not None:
            if mentions.user_ids:
                params["mentioned_list"] = list(mentions.user_ids)
            if mentions.mobiles:
                params["mentioned_mobile_list"] = list(mentions.mobiles)
        self._send_message("text", params)

    def send_markdown_message(self, content: str) -> None:
        """Send a Markdown message; mention members with ``<@userid>`` in the text."""
        self._send_message("markdown", {"content": content})

    def _send_message(self, msgtype: str, content: Mapping[str, Any]) -> None:
        self.post_json(SEND_PATH, {"msgtype": msgtype, msgtype: content})