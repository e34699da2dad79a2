"""
Entity Shaping

Turns raw response payloads into typed, client-bound records. These
functions are what the read calls hand to the readable channel as their
result transform.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from functools import partial
from typing import TYPE_CHECKING, Any, TypeVar

from .base import DisqusModel

if TYPE_CHECKING:
    from ..client import DisqusClient
    from .entities import Forum

ModelT = TypeVar("ModelT", bound=DisqusModel)


def shape_record(
    model: type[ModelT],
    raw: Mapping[str, Any] | None,
    client: DisqusClient | None = None,
    forum: Forum | None = None,
) -> ModelT | None:
    """
    Build one record from a raw payload.

    All raw fields are copied; created_at is parsed by the model. A missing
    payload (the API answers null for "not found") shapes to None.
    """
    if raw is None:
        return None
    record = model.model_validate(dict(raw))
    record.bind(client, forum=forum)
    return record


def shape_records(
    model: type[ModelT],
    raws: Iterable[Mapping[str, Any]] | None,
    client: DisqusClient | None = None,
    forum: Forum | None = None,
) -> list[ModelT]:
    """Build a list of records; a missing payload shapes to an empty list."""
    if raws is None:
        return []
    return [
        record
        for record in (shape_record(model, raw, client, forum) for raw in raws)
        if record is not None
    ]


def record_transform(
    model: type[ModelT],
    client: DisqusClient | None = None,
    forum: Forum | None = None,
) -> Callable[[Any], ModelT | None]:
    return partial(shape_record, model, client=client, forum=forum)


def list_transform(
    model: type[ModelT],
    client: DisqusClient | None = None,
    forum: Forum | None = None,
) -> Callable[[Any], list[ModelT]]:
    return partial(shape_records, model, client=client, forum=forum)
