# workwx

Small helpers for the WeCom (WeChat Work) API. They use only the standard
library.

## Installation

```
pip install workwx
```

## Group robot webhooks

`workwx.webhook.WebhookClient` sends messages through a group robot. You give
it the robot's webhook key and the base URL of the API host:

```python
from workwx.webhook import MENTION_ALL, Mentions, WebhookClient

client = WebhookClient("placeholder", "https://qyapi.example.com")
client.send_text_message("Build finished", Mentions(user_ids=[MENTION_ALL]))
client.send_markdown_message("**Deploy** done, <@someone> please check")
```

- `send_text_message(content, mentions=None)` sends a text message. A
  `Mentions` object can notify members by user id (`user_ids`), by mobile
  number (`mobiles`), or everyone with `MENTION_ALL` (`"@all"`).
- `send_markdown_message(content)` sends a Markdown message. It takes no
  `Mentions`. To mention someone, write `<@userid>` in the content.
- `compose_url(path, query=None)` builds a URL on the host. It adds the
  webhook key to the query and sorts the query parameters.
- `post_json(path, payload)` POSTs `payload` as compact JSON with sorted keys
  and returns the raw response body as bytes.
- `client.key` is the configured webhook key.

By default requests go out through `urllib`. An HTTP error status does not
raise: its body is returned like any other. You can pass
`transport=callable` to send requests some other way, for example in tests.
The callable receives `(url, body_bytes, headers)` and returns the response
body as bytes.

The send methods do not read the response. A reply that reports an API error
raises nothing. If you need that check, call `post_json` and inspect the
bytes it returns.

## Access tokens and tickets

`workwx.token.Token` keeps a credential cached, such as an access token or a
JSAPI ticket. It fetches the credential through a function you provide. That
function returns a `TokenInfo(token, expires_in)`, with the lifetime in
seconds.

- `get_token()` returns the cached value. If there is none, it fetches one
  first. A failed fetch is swallowed and gives an empty string.
- `sync_token()` fetches unconditionally. Errors from your function
  propagate.
- `run_refresher(stop)` loops until the `threading.Event` is set. It
  refreshes the credential about 30 minutes before it expires, waiting at
  least 5 seconds between rounds. Failed fetches are retried with an
  `ExponentialBackoff` schedule.
- `spawn_refresher(stop)` runs the same loop in a daemon thread and returns
  that thread.

```python
import threading
from workwx.token import Token, TokenInfo

def fetch():
    return TokenInfo(token="token", expires_in=7200)

access_token = Token(fetch)
stop = threading.Event()
access_token.spawn_refresher(stop)
print(access_token.get_token())
stop.set()
```

The refresh window, the minimum interval and the backoff schedule are keyword
arguments of `Token`.

## Directory member records

`workwx.user_info` provides these types:

- `UserInfo`, `UserDeptInfo` and `UserIdentityInfo`
- the `UserGender` and `UserStatus` enums

It also provides these functions:

- `UserInfo.from_detail(detail)` builds a member from the API's member-detail
  JSON object, passed as a dict.
- `UserIdentityInfo.from_dict(data)` reads `UserId`, `OpenId` and `DeviceId`.
- `reshape_dept_info(ids, orders, leader_statuses)` zips the parallel
  department arrays. It raises `ValueError` when their lengths disagree. An
  empty `leader_statuses` marks nobody as a leader.
- `user_gender_from_str(value)` parses the decimal gender string and raises
  `ValueError` on anything that is not an integer.

Gender and status values outside the known enum members are kept as plain
integers.

## What this package does not do

This package is not a full API client:

- It does not log in with a corp ID and secret.
- It does not fetch tokens or tickets from the server itself. You supply the
  fetch function.
- It does not call the directory endpoints. It only turns their JSON replies
  into `UserInfo` and `UserIdentityInfo` objects.
- It has no command-line interface.

## Running the tests

```
pip install -e ".[test]"
pytest
```