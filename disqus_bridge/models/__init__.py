"""
Disqus Models

Typed records built from API payloads, and the shaping helpers that
build them.
"""

from .base import API_DATE_FORMAT, DisqusModel, format_date, parse_timestamp
from .entities import (
    Category,
    Forum,
    ModerationAction,
    Post,
    Thread,
    TimestampedModel,
)
from .shaping import list_transform, record_transform, shape_record, shape_records

__all__ = [
    # Base
    "DisqusModel",
    "TimestampedModel",
    "API_DATE_FORMAT",
    "parse_timestamp",
    "format_date",
    # Entities
    "Forum",
    "Category",
    "Thread",
    "Post",
    "ModerationAction",
    # Shaping
    "shape_record",
    "shape_records",
    "record_transform",
    "list_transform",
]
