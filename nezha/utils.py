"""Small helpers shared across the dashboard: IP handling, JSON lookups, HTTP sessions."""

from __future__ import annotations

import ipaddress
import json
import os
import re
import secrets
import string
from typing import Any

import requests

DNS_SERVERS = ["1.1.1.1:53", "223.5.5.5:53"]
HTTP_TIMEOUT = 600.0

_UINT64_MASK = (1 << 64) - 1
_LETTERS = string.digits + string.ascii_uppercase + string.ascii_lowercase

_IPV4_RE = re.compile(r"(\d*\.).*(\.\d*)", re.ASCII)
_IPV6_RE = re.compile(r"(\w*:\w*:).*(:\w*:\w*)", re.ASCII)


class JsonPathNotFound(LookupError):
    """The requested path does not exist in the JSON document."""

    def __init__(self, path: str = "") -> None:
        super().__init__(f"specified path does not exist: {path}" if path else "specified path does not exist")
        self.path = path


class JsonWrongType(ValueError):
    """The JSON document is not of the expected type."""

    def __init__(self) -> None:
        super().__init__("wrong type")


def ip_desensitize(ip_addr: str) -> str:
    """Mask the middle part of IPv4 and IPv6 addresses in a string."""
    ip_addr = _IPV4_RE.sub(r"\1****\2", ip_addr)
    return _IPV6_RE.sub(r"\1****\2", ip_addr)


def _parse_ip(ip: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    if not isinstance(ip, str):
        raise ValueError(f"invalid IP address: {ip!r}")
    return ipaddress.ip_address(ip)


def ip_string_to_binary(ip: str) -> bytes:
    """Return the 16-byte form of an address; IPv4 is IPv4-mapped."""
    addr = _parse_ip(ip)
    if isinstance(addr, ipaddress.IPv4Address):
        return b"\x00" * 10 + b"\xff\xff" + addr.packed
    return addr.packed


def binary_to_ip_string(b: bytes) -> str:
    """Turn up to 16 bytes into an address string, unmapping IPv4-mapped ones."""
    raw = bytes(b[:16]).ljust(16, b"\x00")
    addr = ipaddress.IPv6Address(raw)
    mapped = addr.ipv4_mapped
    if mapped is not None:
        return str(mapped)
    return str(addr)


def get_ip_from_header(header_value: str) -> str:
    """Take the last address of a comma separated header such as X-Forwarded-For."""
    last = header_value.split(",")[-1].strip()
    try:
        addr = _parse_ip(last)
    except ValueError as exc:
        raise ValueError(f"invalid ip: {last!r}") from exc
    return str(addr)


def split_ip_addr(bundle: str) -> tuple[str, str, str]:
    """Split an "ipv4/ipv6" bundle into (ipv4, ipv6, the address to use)."""
    parts = bundle.split("/")
    if len(parts) > 1:
        return parts[0], parts[1], parts[0]
    single = parts[0]
    if ":" in single:
        return "", single, single
    return single, "", single


def is_file_exists(path: str | os.PathLike[str]) -> bool:
    return os.path.exists(path)


def generate_random_string(n: int) -> str:
    """Return n characters drawn securely from digits and ASCII letters."""
    return "".join(secrets.choice(_LETTERS) for _ in range(n))


def uint64_sub_int64(a: int, b: int) -> int:
    """Subtract a signed value from an unsigned 64-bit one, clamping at zero."""
    if b < 0:
        return (a + (-b)) & _UINT64_MASK
    if a < b:
        return 0
    return a - b


def _split_path(path: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    chars = iter(path)
    for ch in chars:
        if ch == "\\":
            escaped = next(chars, None)
            if escaped is not None:
                current.append(escaped)
        elif ch == ".":
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def _walk(value: Any, parts: list[str], path: str) -> Any:
    if not parts:
        return value
    head, rest = parts[0], parts[1:]
    if isinstance(value, dict):
        if head not in value:
            raise JsonPathNotFound(path)
        return _walk(value[head], rest, path)
    if isinstance(value, list):
        if head == "#":
            if not rest:
                return len(value)
            results = []
            for item in value:
                try:
                    results.append(_walk(item, rest, path))
                except JsonPathNotFound:
                    continue
            return results
        if head.isdigit():
            index = int(head)
            if index >= len(value):
                raise JsonPathNotFound(path)
            return _walk(value[index], rest, path)
    raise JsonPathNotFound(path)


def gjson_get(data: bytes | str, path: str) -> Any:
    """Look up a dotted path ("a.b.0.c", "list.#", "list.#.name") in a JSON document."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    try:
        document = json.loads(data)
    except json.JSONDecodeError as exc:
        raise JsonPathNotFound(path) from exc
    if path == "":
        raise JsonPathNotFound(path)
    return _walk(document, _split_path(path), path)


_WHITESPACE = " \t\r\n"


def _skip_ws(text: str, idx: int) -> int:
    while idx < len(text) and text[idx] in _WHITESPACE:
        idx += 1
    return idx


def _value_as_string(value: Any, raw: str) -> str:
    if isinstance(value, str):
        return value
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return ""
    return raw


def parse_string_map(json_object: str) -> dict[str, str] | None:
    """Parse a flat JSON object into a str -> str mapping; "" gives None."""
    if json_object == "":
        return None
    decoder = json.JSONDecoder()
    text = json_object
    idx = _skip_ws(text, 0)
    if idx >= len(text) or text[idx] != "{":
        raise JsonWrongType()
    idx = _skip_ws(text, idx + 1)
    result: dict[str, str] = {}
    if idx < len(text) and text[idx] == "}":
        return result
    try:
        while True:
            key, idx = decoder.raw_decode(text, idx)
            if not isinstance(key, str):
                raise JsonWrongType()
            idx = _skip_ws(text, idx)
            if idx >= len(text) or text[idx] != ":":
                raise JsonWrongType()
            idx = _skip_ws(text, idx + 1)
            start = idx
            value, idx = decoder.raw_decode(text, idx)
            result[key] = _value_as_string(value, text[start:idx])
            idx = _skip_ws(text, idx)
            if idx >= len(text):
                raise JsonWrongType()
            if text[idx] == "}":
                return result
            if text[idx] != ",":
                raise JsonWrongType()
            idx = _skip_ws(text, idx + 1)
    except json.JSONDecodeError as exc:
        raise JsonWrongType() from exc


class _TimeoutSession(requests.Session):
    """A session that applies a default timeout to every request."""

    def __init__(self, timeout: float) -> None:
        super().__init__()
        self.timeout = timeout

    def request(self, method, url, *args, **kwargs):  # type: ignore[override]
        kwargs.setdefault("timeout", self.timeout)
        return super().request(method, url, *args, **kwargs)


def make_http_session(skip_verify_tls: bool) -> requests.Session:
    """Create an HTTP session honouring proxy environment variables and a 10 minute timeout."""
    session = _TimeoutSession(HTTP_TIMEOUT)
    session.verify = not skip_verify_tls
    session.trust_env = True
    return session