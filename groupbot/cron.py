"""Five-field cron expressions: parsing, matching and finding the next run."""

from __future__ import annotations

from datetime import datetime, time, timedelta

_MONTH_NAMES = {
    name: i
    for i, name in enumerate(
        ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"],
        start=1,
    )
}
_DOW_NAMES = {
    name: i for i, name in enumerate(["sun", "mon", "tue", "wed", "thu", "fri", "sat"])
}

_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}

# How far ahead next_after searches before giving up.
_SEARCH_DAYS = 366 * 5


def _parse_value(text: str, names: dict[str, int], low: int, high: int) -> int:
    value = names.get(text.lower())
    if value is None:
        if not text.isdigit():
            raise ValueError(f"invalid cron value: {text!r}")
        value = int(text)
    if not low <= value <= high:
        raise ValueError(f"cron value {value} out of range [{low}, {high}]")
    return value


def _parse_field(
    text: str, low: int, high: int, names: dict[str, int]
) -> tuple[frozenset[int], bool]:
    """Return the allowed values of one field and whether it is an unrestricted star."""
    values: set[int] = set()
    star = False
    for part in text.split(","):
        if not part:
            raise ValueError(f"empty element in cron field {text!r}")
        span, has_step, step_text = part.partition("/")
        step = 1
        if has_step:
            if not step_text.isdigit() or int(step_text) == 0:
                raise ValueError(f"invalid cron step: {step_text!r}")
            step = int(step_text)
        if span in ("*", "?"):
            start, end = low, high
            if step == 1:
                star = True
        elif "-" in span:
            first, _, last = span.partition("-")
            start = _parse_value(first, names, low, high)
            end = _parse_value(last, names, low, high)
        else:
            start = _parse_value(span, names, low, high)
            end = high if has_step else start
        if start > end:
            raise ValueError(f"cron range {span!r} runs backwards")
        values.update(range(start, end + 1, step))
    return frozenset(values), star


class CronSchedule:
    """A standard cron schedule: minute, hour, day of month, month, day of week.

    Fields accept ``*``, ``?``, numbers, names, ranges, lists and steps, and
    the ``@yearly`` style descriptors are understood.  When both day fields
    are restricted a day matches if either of them does.
    """

    def __init__(self, expr: str) -> None:
        text = expr.strip()
        if text.startswith("@"):
            if text.lower() not in _DESCRIPTORS:
                raise ValueError(f"unknown cron descriptor: {expr!r}")
            text = _DESCRIPTORS[text.lower()]
        fields = text.split()
        if len(fields) != 5:
            raise ValueError(f"expected 5 cron fields, got {len(fields)}: {expr!r}")
        self.expr = expr
        self.minutes, _ = _parse_field(fields[0], 0, 59, {})
        self.hours, _ = _parse_field(fields[1], 0, 23, {})
        self.days, self._day_star = _parse_field(fields[2], 1, 31, {})
        self.months, _ = _parse_field(fields[3], 1, 12, _MONTH_NAMES)
        weekdays, self._weekday_star = _parse_field(fields[4], 0, 7, _DOW_NAMES)
        self.weekdays = frozenset(w % 7 for w in weekdays)
        self._sorted_hours = sorted(self.hours)
        self._sorted_minutes = sorted(self.minutes)

    def __repr__(self) -> str:
        return f"CronSchedule({self.expr!r})"

    def _day_matches(self, moment: datetime) -> bool:
        if moment.month not in self.months:
            return False
        day_ok = moment.day in self.days
        weekday_ok = moment.isoweekday() % 7 in self.weekdays
        if self._day_star or self._weekday_star:
            return day_ok and weekday_ok
        return day_ok or weekday_ok

    def matches(self, moment: datetime) -> bool:
        """Whether the minute containing ``moment`` is scheduled."""
        return (
            moment.minute in self.minutes
            and moment.hour in self.hours
            and self._day_matches(moment)
        )

    def next_after(self, moment: datetime) -> datetime:
        """The first scheduled minute strictly after ``moment``."""
        start = moment.replace(second=0, microsecond=0) + timedelta(minutes=1)
        first_day = start.date()
        for offset in range(_SEARCH_DAYS + 1):
            day = first_day + timedelta(days=offset)
            candidate_day = datetime.combine(day, time(0, 0), tzinfo=moment.tzinfo)
            if not self._day_matches(candidate_day):
                continue
            for hour in self._sorted_hours:
                for minute in self._sorted_minutes:
                    if offset == 0 and (hour, minute) < (start.hour, start.minute):
                        continue
                    return datetime.combine(day, time(hour, minute), tzinfo=moment.tzinfo)
        raise ValueError(f"cron expression {self.expr!r} never fires")