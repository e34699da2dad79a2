"""
Base Models and Date Handling

Foundation for the typed records built from API payloads. Records keep
every raw field they were given; only the date fields are converted.
"""

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, PrivateAttr

from ..exceptions import UnboundEntityError

if TYPE_CHECKING:
    from ..client import DisqusClient

# Disqus 1.1 timestamps are UTC with minute precision
API_DATE_FORMAT = "%Y-%m-%dT%H:%M"


def parse_timestamp(value: Any) -> datetime | None:
    """
    Convert an API timestamp to a timezone-aware UTC datetime.

    Accepts ISO 8601 and RFC 2822 strings. Naive values are taken to be
    UTC. None stays None.

    Raises:
        ValueError: If value is not a recognizable timestamp
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = parsedate_to_datetime(text)
            except (TypeError, ValueError):
                raise ValueError(f"Unrecognized timestamp: {value!r}") from None
        return parse_timestamp(parsed)
    raise ValueError(f"Cannot parse timestamp from {type(value).__name__}")


def format_date(value: datetime) -> str:
    """Render a datetime in the API's UTC date format."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(API_DATE_FORMAT)


class DisqusModel(BaseModel):
    """
    Base model for all Disqus records.

    Unknown fields from the API are kept as extras, so a record carries
    everything the server sent.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    id: int | str | None = None

    _client: Any = PrivateAttr(default=None)

    def bind(self, client: "DisqusClient | None", forum: Any = None) -> "DisqusModel":
        """
        Attach the client this record issues its API calls through.

        forum is the Forum instance the record was fetched through; records
        that make forum-scoped calls keep it, the rest ignore it.
        """
        self._client = client
        return self

    @property
    def client(self) -> "DisqusClient":
        if self._client is None:
            raise UnboundEntityError(
                f"{type(self).__name__} {self.id!r} is not bound to a client"
            )
        return self._client

    @property
    def raw(self) -> dict[str, Any]:
        """All fields, declared and extra, as a plain dict."""
        return self.model_dump()
