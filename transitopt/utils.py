"""Common utilities for transitopt."""
import datetime as dt
import re

import pandas as pd

from transitopt.errors import ValidationError


def normalize_hour(value):
    """Normalize a time-of-day value to an integer hour (0-23).

    Accepts ints, ``datetime.time``/``datetime.datetime``, ``pandas.Timestamp``
    and strings such as ``"8"``, ``"08:15"`` or ``"0815"``.
    """
    if value is None:
        raise ValidationError("hour is missing")
    if isinstance(value, bool):
        raise ValidationError(f"hour must be a time of day, got {value!r}")
    if isinstance(value, str):
        text = value.strip()
        match = re.fullmatch(r"(\d{1,2}):(\d{2})(:\d{2})?", text)
        if match:
            hour = int(match.group(1))
        elif re.fullmatch(r"\d{3,4}", text):
            hour = int(text) // 100
        elif re.fullmatch(r"\d{1,2}", text):
            hour = int(text)
        else:
            raise ValidationError(f"unrecognized time of day: {value!r}")
    elif isinstance(value, (dt.time, dt.datetime, pd.Timestamp)):
        # NaT is a datetime subclass
        if pd.isna(value):
            raise ValidationError("hour is missing")
        hour = int(value.hour)
    elif not pd.api.types.is_scalar(value):
        raise ValidationError(f"hour must be a single value, got {type(value).__name__}")
    elif pd.isna(value):
        raise ValidationError("hour is missing")
    else:
        try:
            hour = int(value)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError(f"unrecognized time of day: {value!r}")
        if hour != value:
            raise ValidationError(f"hour must be a whole number, got {value!r}")
    if not 0 <= hour <= 23:
        raise ValidationError(f"hour out of range 0-23: {value!r}")
    return hour
