# nezha

Building blocks for a server monitoring dashboard, as a library. It has no user
interface of its own. It supplies in-memory parts that a dashboard uses:

- **Utilities** (`nezha.utils`): IP masking, conversion between IP addresses and
  16-byte form, dual-stack bundle splitting, client IP extraction from proxy
  headers, secure random strings, JSON path lookups and pre-configured HTTP
  sessions.
- **Localisation** (`nezha.i18n`): a thread-safe `Localizer` that switches between
  loaded languages at run time.
- **Stream relaying** (`nezha.streams`): file-like wrappers around message-based
  connections, and a `StreamHub` that pairs a user side with an agent side and
  copies data both ways.
- **Registries** (`nezha.nat`, `nezha.online_users`): indexes of NAT forwarding
  entries and of connected users.
- **Service availability** (`nezha.status`, `nezha.service_stats`): status codes, a
  rolling window of recent probe results, and 30-day up/down/latency figures.

## Installation

The package needs Python 3.10 or later and depends on `requests`.

## Utilities

```python
from nezha.utils import (
    ip_desensitize, ip_string_to_binary, binary_to_ip_string,
    split_ip_addr, get_ip_from_header,
)

ip_desensitize("103.80.236.249/d5ce:d811:cdb8:067a:a873:2076:9521:9d2d")
# '103.****.249/d5ce:d811:****:9521:9d2d'

ip_string_to_binary("192.168.1.1")
# b'\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\xff\xff\xc0\xa8\x01\x01'
binary_to_ip_string(ip_string_to_binary("2001:db8::68"))
# '2001:db8::68'

split_ip_addr("1.1.1.1/2001:db8::1")
# ('1.1.1.1', '2001:db8::1', '1.1.1.1')

get_ip_from_header("10.0.0.1, 203.0.113.7")
# '203.0.113.7'  (the last entry; an invalid one raises ValueError)
```

Other helpers:

- `generate_random_string(n)` returns `n` characters drawn with `secrets` from
  digits and ASCII letters.
- `uint64_sub_int64(a, b)` subtracts a signed value from an unsigned 64-bit one,
  clamping at zero.
- `is_file_exists(path)` tells whether a path exists.
- `gjson_get(data, path)` looks up a dotted path in a JSON document (`"a.b.0.c"`,
  `"list.#"` for a length, `"list.#.name"` to collect a field). A missing path,
  an empty path or invalid JSON raises `JsonPathNotFound`.
- `parse_string_map(json_object)` turns a flat JSON object into a `str -> str`
  dict. An empty string gives `None`. Anything other than an object raises
  `JsonWrongType`.
- `make_http_session(skip_verify_tls)` returns a `requests.Session` with a
  10-minute default timeout that honours proxy environment variables. It skips
  TLS verification when asked to.

## Localisation

`Localizer(lang, translations)` accepts a `gettext.NullTranslations` or a mapping
of message ids to a string or a sequence of plural forms:

```python
from nezha.i18n import Localizer

loc = Localizer("de_DE", {"Good": "Gut", "%d server": ["%d Server", "%d Server"]})
loc.t("Good")              # 'Gut'
loc.n("%d server", 3)      # '3 Server'
loc.tf("Down: %s", "web")  # 'Down: web'
loc.set_language("fr_FR")
loc.t("Good")              # 'Good' (no catalogue for fr_FR)
```

`exists(lang)` and `append(lang, translations)` manage catalogues. `error(default,
*args)` returns a `RuntimeError` that carries the translated message. `LANGUAGES`
maps language codes to their names.

## Stream relaying

- `IOStreamWrapper(stream)` reads and writes bytes over an object that has
  `recv()` and `send(data)`. Empty messages are skipped. `None` or `EOFError`
  from `recv()` ends the stream. `close()` releases anyone blocked in `wait()`.
- `WebSocketConn(conn)` reads and writes bytes over an object that has
  `read_message()` and `write_message(type, data)`. Writes are serialised.
  Text messages are delivered with a leading zero byte.
- `StreamHub` registers streams with `create_stream(id)`, attaches sides with
  `user_connected` and `agent_connected`, and forgets them with
  `close_stream(id)`. `start_stream(id, timeout)` waits for both sides, then
  copies data in both directions until either direction ends. It raises
  `TimeoutError` if a side is missing. Unknown ids raise `StreamNotFound`.

## Registries

```python
from nezha.nat import NAT, NATRegistry

reg = NATRegistry([NAT(id=1, domain="a.example.com")])
reg.update(NAT(id=1, domain="b.example.com"))
reg.get_by_domain("a.example.com")   # None
reg.refresh_list()                   # entries sorted by id
```

`OnlineUserRegistry` stores `OnlineUser` records by connection id and provides
`add`, `remove` and `count`. `get(limit, offset)` returns users with the oldest
connection first. `block_by_ips(ip_list, block)` calls `block(ip)` for each
address and closes the matching connections.

## Service availability

```python
from nezha.status import CurrentWindow, TaskResult, status_code

status_code(100)  # ServiceStatus.GOOD
status_code(90)   # ServiceStatus.LOW_AVAILABILITY
status_code(50)   # ServiceStatus.DOWN
status_code(0)    # ServiceStatus.NO_DATA

window = CurrentWindow()          # 30 slots, at most one sample per 30 seconds
window.record(TaskResult(id=1, successful=True, delay=12.0), now=0.0)  # False: starts the clock
window.record(TaskResult(id=1, successful=True, delay=12.0), now=1.0)  # True: stored
window.up_percent()               # 100
```

`status_to_string(code, localizer=None)` names a code and translates the name when
a localizer is given. `is_full()` and `reset()` tell when a window's figures are
due to be saved and start it over.

`nezha.service_stats.MonthlyStats` keeps one `ServiceResponseItem` per service,
with 30 daily slots where the last slot is today, together with running
`TodayStats`:

- `add_service` and `remove_service` start and stop tracking a service.
- `load_history` and `load_today` fold saved `HistoryRecord`s into those figures.
- `refresh(current_up, current_down)` copies today's counts into the last slot.
- `roll_day()` moves every slot back one day.

## What it does not do

The package keeps everything in memory. It has no database, no web or RPC server,
no command-line program and no scheduler. It does not update DNS records and
does not deliver notifications. Loading and saving state, and acting on the
figures it computes, are left to the application that uses it.

## Tests

The test suite uses pytest. Install the `test` extra to get it.