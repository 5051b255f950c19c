"""Raw snapshot schema variants."""

from benchtrend.raw.values import (
    GroupValue,
    KeyedGroup,
    MeanRecord,
    ScalarGroup,
    parse_group,
    parse_series_value,
)

__all__ = [
    "GroupValue",
    "KeyedGroup",
    "MeanRecord",
    "ScalarGroup",
    "parse_group",
    "parse_series_value",
]
