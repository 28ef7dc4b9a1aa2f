"""Filter expressions understood by the remote data service: "<Field> EQ <value>"."""

import re
from dataclasses import dataclass
from typing import Optional

_FILTER_RE = re.compile(
    r"^\s*(?:(?P<table>[A-Za-z0-9_]+)\.)?(?P<field>[A-Za-z0-9_]+)\s+(?P<op>EQ)\s+(?P<value>.*?)\s*$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class FilterExpression:
    """Parsed equality filter. table is None for the bare form."""

    field: str
    value: str
    table: Optional[str] = None

    def render(self) -> str:
        target = f"{self.table}.{self.field}" if self.table else self.field
        return f"{target} EQ {self.value}"


def key_filter(key_field: str, value: str) -> str:
    """Bare form: 'AN8 EQ 4242'."""
    return FilterExpression(field=key_field, value=value).render()


def qualified_key_filter(table: str, key_field: str, value: str) -> str:
    """Table-qualified form: 'F0401.AN8 EQ 4242'."""
    return FilterExpression(field=key_field, value=value, table=table).render()


def parse_filter(expression: str) -> FilterExpression:
    """Parse an equality filter. Raises ValueError for anything else."""
    match = _FILTER_RE.match(expression or "")
    if not match:
        raise ValueError(f"Unsupported filter expression: {expression!r}")
    return FilterExpression(
        field=match.group("field"),
        value=match.group("value"),
        table=match.group("table"),
    )
