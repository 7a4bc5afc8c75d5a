"""Request model produced by the curl parser.

The parser converts a curl command line into this model; the OpenAPI
generator consumes it.
"""

from typing import Any

from pydantic import BaseModel, Field

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM = "multipart/form-data"
JSON_CONTENT = "application/json"
TEXT_PLAIN = "text/plain"


class ParsedRequest(BaseModel):
    """A single HTTP request captured from a curl invocation."""

    method: str = "GET"
    url: str = ""  # origin + path, query stripped
    headers: dict[str, str] = Field(default_factory=dict)
    query_params: dict[str, str] = Field(default_factory=dict)
    data: Any = None  # form mapping, decoded JSON, or raw string
    content_type: str | None = None

    @property
    def has_body(self) -> bool:
        """True when ``data`` carries something worth documenting."""
        if self.data is None:
            return False
        if isinstance(self.data, (str, dict, list)):
            return len(self.data) > 0
        return True


def is_urlencoded(content_type: str | None) -> bool:
    """True when the media type (parameters ignored) is form url-encoded."""
    if not content_type:
        return False
    return content_type.split(";")[0].strip().lower() == FORM_URLENCODED
