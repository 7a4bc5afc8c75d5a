"""curl command parser.

Converts a curl command line (as copied from a browser or terminal) into a
ParsedRequest. The command is split into single-quoted, double-quoted and
bare tokens, and each value-taking flag is paired with the token after it,
so text inside a quoted value is never read as a flag. Tokenizing is regex
driven and best effort: unbalanced quotes,
ANSI-C ``$'...'`` quoting and escaped quotes inside values are not handled
the way a shell would handle them.
"""

import json
import logging
import re
from typing import Any
from urllib.parse import parse_qsl, urlsplit

from swaggler.errors import MalformedInputError
from swaggler.parser.base import (
    FORM_URLENCODED,
    JSON_CONTENT,
    MULTIPART_FORM,
    TEXT_PLAIN,
    ParsedRequest,
    is_urlencoded,
)

logger = logging.getLogger(__name__)

# Headers that carry credentials or browser noise and say nothing about the API.
SENSITIVE_HEADERS = (
    "authorization",
    "accept",
    "accept-encoding",
    "accept-language",
    "sec-fetch-dest",
    "sec-fetch-mode",
    "sec-fetch-site",
    "user-agent",
    "priority",
    "referer",
    "origin",
    "cookie",
    "connection",
    "cache-control",
    "pragma",
)

# Flags whose next argument is a value, never the URL.
VALUE_FLAGS = {
    "-X", "--request",
    "-H", "--header",
    "-d", "--data", "--data-raw", "--data-binary", "--data-urlencode", "--data-ascii",
    "-F", "--form", "--form-string",
    "-u", "--user",
    "-A", "--user-agent",
    "-b", "--cookie",
    "-c", "--cookie-jar",
    "-e", "--referer",
    "-o", "--output",
    "-w", "--write-out",
    "-m", "--max-time",
    "--connect-timeout",
    "-x", "--proxy",
    "-T", "--upload-file",
    "-K", "--config",
    "-r", "--range",
    "-E", "--cert",
    "--key",
    "--cacert",
    "--resolve",
    "--url",
}

METHOD_FLAGS = ("-X", "--request")
HEADER_FLAGS = ("-H", "--header")
FORM_FLAGS = ("-F", "--form", "--form-string")
URLENCODED_FLAGS = ("-d", "--data", "--data-urlencode", "--data-ascii")
RAW_FLAGS = ("--data-raw", "--data-binary")

_CURL_RE = re.compile(r"^\s*curl(?:\s+|$)")
_TOKEN_RE = re.compile(r"""'([^']*)'|"([^"]*)"|(\S+)""")

_SENSITIVE_RE = re.compile(
    "|".join(
        rf"""\s*(?:-H|--header)\s+(?:'{re.escape(name)}\s*:[^']*'|"{re.escape(name)}\s*:[^"]*")"""
        for name in SENSITIVE_HEADERS
    ),
    re.IGNORECASE,
)


def looks_like_curl(command: str) -> bool:
    return bool(_CURL_RE.match(command))


def parse_curl(command: str) -> ParsedRequest:
    """Parse a curl command line into a ParsedRequest.

    Raises:
        MalformedInputError: if the text is not a curl invocation or has no URL.
    """
    if not looks_like_curl(command):
        raise MalformedInputError(
            'Invalid curl command format. Command must start with "curl"',
            details={"command": command[:200]},
        )

    raw_url = _extract_url(command)
    if raw_url is None:
        raise MalformedInputError("No URL found in curl command", details={"command": command[:200]})

    url, query_params = _split_url(raw_url)
    flags = _flag_values(command)
    headers = _extract_headers([value for flag, value in flags if flag in HEADER_FLAGS])
    content_type = _header_content_type(headers)

    form_chunks = [value for flag, value in flags if flag in FORM_FLAGS]
    urlencoded_chunks = [value for flag, value in flags if flag in URLENCODED_FLAGS]
    raw_chunks = [value for flag, value in flags if flag in RAW_FLAGS]
    methods = [value for flag, value in flags if flag in METHOD_FLAGS]

    data = None
    if form_chunks:
        data = _parse_form(form_chunks)
        content_type = MULTIPART_FORM
    elif urlencoded_chunks:
        data, content_type = _parse_urlencoded_body("&".join(urlencoded_chunks), content_type)
    elif raw_chunks:
        data, content_type = _parse_raw_body("&".join(raw_chunks), content_type)

    if methods:
        method = methods[0].upper()
    elif form_chunks or urlencoded_chunks or raw_chunks:
        method = "POST"
    else:
        method = "GET"

    request = ParsedRequest(
        method=method,
        url=url,
        headers=headers,
        query_params=query_params,
        data=data,
        content_type=content_type,
    )
    logger.debug("Parsed curl command: %s %s (content type: %s)", method, url, content_type)
    return request


def sanitize_curl(command: str) -> str:
    """Strip credential and browser headers and normalize whitespace.

    Sanitizing already sanitized text returns it unchanged.
    """
    command = re.sub(r"\\\s*\n", " ", command)  # line continuations
    command = _SENSITIVE_RE.sub("", command)
    command = re.sub(r"\s+", " ", command)
    command = re.sub(r"\s*(?<!\S)-H(?=\s)\s*", " -H ", command)
    return command.strip()


def _tokenize(command: str):
    """Yield ``(token, quoted)`` for every argument after ``curl``."""
    body = _CURL_RE.sub("", command, count=1)
    for match in _TOKEN_RE.finditer(body):
        quoted = match.group(3) is None
        token = match.group(match.lastindex)
        if not quoted and token == "\\":
            continue
        yield token, quoted


def _flag_values(command: str) -> list[tuple[str, str]]:
    """Pair every value-taking flag with the argument that follows it, in order."""
    pairs = []
    pending = None
    for token, quoted in _tokenize(command):
        if pending is not None:
            pairs.append((pending, token))
            pending = None
        elif not quoted and token in VALUE_FLAGS:
            pending = token
    return pairs


def _extract_url(command: str) -> str | None:
    """Return the first positional argument after ``curl``, or the ``--url`` value."""
    skip_next = False
    for token, quoted in _tokenize(command):
        if skip_next:
            skip_next = False
            continue
        if not quoted and token.startswith("-"):
            if token == "--url":
                break
            skip_next = token in VALUE_FLAGS
            continue
        return token
    for flag, value in _flag_values(command):
        if flag == "--url":
            return value
    return None


def _split_url(raw_url: str) -> tuple[str, dict[str, str]]:
    """Split a URL into origin+path and decoded query parameters.

    URLs without a scheme or host are returned verbatim with no parameters.
    """
    try:
        parts = urlsplit(raw_url)
    except ValueError:
        return raw_url, {}
    host = parts.netloc.rpartition("@")[2].lower()
    if not parts.scheme or not host:
        return raw_url, {}
    url = f"{parts.scheme.lower()}://{host}{parts.path or '/'}"
    return url, dict(parse_qsl(parts.query, keep_blank_values=True))


def _extract_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for header in values:
        name, sep, value = header.partition(": ")
        if not sep:
            name, _, value = header.partition(":")
            value = value.strip()
        headers[name] = value
    return headers


def _header_content_type(headers: dict[str, str]) -> str | None:
    content_type = None
    for name, value in headers.items():
        if name.lower() == "content-type":
            content_type = value
    return content_type


def _try_json(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except ValueError:
        return False, None


def _parse_form(chunks: list[str]) -> dict[str, str]:
    data = {}
    for chunk in chunks:
        key, sep, value = chunk.partition("=")
        if not sep or not key:
            logger.debug("Ignoring form field without a name: %r", chunk)
            continue
        data[key] = value
    return data


def _decode_urlencoded(body: str) -> dict[str, str]:
    return dict(parse_qsl(body, keep_blank_values=True))


def _parse_urlencoded_body(body: str, content_type: str | None) -> tuple[Any, str | None]:
    if content_type and not is_urlencoded(content_type):
        ok, value = _try_json(body)
        return (value if ok else _decode_urlencoded(body)), content_type
    if content_type is None:
        ok, value = _try_json(body)
        if ok and isinstance(value, (dict, list)):
            return value, JSON_CONTENT
    return _decode_urlencoded(body), content_type or FORM_URLENCODED


def _parse_raw_body(body: str, content_type: str | None) -> tuple[Any, str | None]:
    if content_type and is_urlencoded(content_type):
        return _decode_urlencoded(body), content_type
    ok, value = _try_json(body)
    if ok:
        return value, JSON_CONTENT
    return body, TEXT_PLAIN
