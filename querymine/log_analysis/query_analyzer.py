import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
from bson import json_util
from querymine.log_analysis.field_projector import extract_field_names, extract_field_values
from querymine.log_analysis.shared import UNKNOWN

logger = logging.getLogger(__name__)

OPERATIONS = ["find", "getMore", "listDatabases"]
OTHER_OPERATION = "other"


@dataclass(frozen=True)
class QueryPattern:
    """The de-valued shape of one slow query log record."""

    collection: str = ""
    operation: str = ""
    filter_fields: Tuple[str, ...] = ()
    sort_fields: Tuple[str, ...] = ()
    index_used: str = UNKNOWN
    plan_summary: str = UNKNOWN
    duration_ms: Optional[int] = field(default=None, compare=False)
    field_values: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    def __str__(self):
        parts = [f"Collection: {self.collection}", f"Operation: {self.operation}"]
        if self.filter_fields:
            parts.append(f"Filter fields: [{', '.join(self.filter_fields)}]")
        if self.sort_fields:
            parts.append(f"Sort fields: [{', '.join(self.sort_fields)}]")
        if self.plan_summary and self.plan_summary != UNKNOWN:
            parts.append(f"Plan: {self.plan_summary}")
        if self.index_used and self.index_used != UNKNOWN:
            parts.append(f"Index: {self.index_used}")
        return " | ".join(parts)

    @property
    def key(self):
        """Identity used for deduplication. Duration and sampled values are not part of it."""
        return str(self)

    def to_dict(self):
        return {
            "collection": self.collection,
            "operation": self.operation,
            "filter_fields": list(self.filter_fields),
            "sort_fields": list(self.sort_fields),
            "index_used": self.index_used,
            "plan_summary": self.plan_summary,
            "duration_ms": self.duration_ms,
            "field_values": dict(self.field_values),
        }


def _reject_constant(name):
    raise ValueError(f"Non-standard JSON constant: {name}")


def _finite_float(text):
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def parse_fragment(fragment):
    """Decode a fragment as (extended) JSON. Returns the top-level object, or None."""
    try:
        doc = json_util.loads(fragment, parse_constant=_reject_constant, parse_float=_finite_float)
    except Exception as e:
        # bad EJSON wrappers and very deep nesting raise more than ValueError
        logger.debug("Skipping fragment, not valid JSON: %s", e)
        return None
    if not isinstance(doc, dict):
        return None
    return doc


def _operation_of(command):
    if not isinstance(command, dict):
        return OTHER_OPERATION
    for op in OPERATIONS:
        if op in command:
            return op
    return OTHER_OPERATION


def _query_shape(command):
    """Filter fields, sort fields and sampled values of a command-like object."""
    filter_fields, sort_fields, field_values = None, None, None
    if not isinstance(command, dict):
        return filter_fields, sort_fields, field_values
    if "filter" in command:
        query_filter = command["filter"]
        filter_fields = extract_field_names(query_filter)
        field_values = extract_field_values(query_filter, "")
    if "sort" in command:
        sort_fields = extract_field_names(command["sort"])
    return filter_fields, sort_fields, field_values


def analyze_query_pattern(fragment):
    """
    Normalize one log record fragment into a `QueryPattern`.

    Returns None when the fragment is not valid JSON, has no `attr` object,
    or carries neither a namespace nor a command.
    """
    log_line = parse_fragment(fragment)
    if log_line is None:
        return None
    attr = log_line.get("attr")
    if not isinstance(attr, dict):
        logger.debug("Skipping fragment without an `attr` object")
        return None

    collection = ""
    ns = attr.get("ns")
    if isinstance(ns, str) and "." in ns:
        collection = ns.rsplit(".", 1)[1]

    plan_summary = attr.get("planSummary")
    if not isinstance(plan_summary, str):
        plan_summary = UNKNOWN

    duration_ms = attr.get("durationMillis")
    if isinstance(duration_ms, bool) or not isinstance(duration_ms, int):
        duration_ms = None

    operation = ""
    filter_fields, sort_fields, field_values = [], [], {}
    if "command" in attr:
        command = attr["command"]
        operation = _operation_of(command)
        f, s, v = _query_shape(command)
        filter_fields = f if f is not None else filter_fields
        sort_fields = s if s is not None else sort_fields
        field_values = v if v is not None else field_values

    if operation == "getMore":
        # getMore carries the real query shape in the originating command
        f, s, v = _query_shape(attr.get("originatingCommand"))
        if f is not None:
            filter_fields, field_values = f, v
        if s is not None:
            sort_fields = s

    if not collection and not operation:
        logger.debug("Skipping fragment without namespace and command")
        return None

    return QueryPattern(
        collection=collection,
        operation=operation,
        filter_fields=tuple(filter_fields),
        sort_fields=tuple(sort_fields),
        plan_summary=plan_summary,
        duration_ms=duration_ms,
        field_values=field_values,
    )
