"""Holiday calendar maintained by the allocation admin."""

from datetime import date
from typing import Iterable, List, Set, Union

from components.cycle.service import MonthKey, parse_iso_date


class HolidayCalendar:
    """Set of holiday dates, stored as plain calendar dates."""

    def __init__(self, dates: Iterable[Union[str, date]] = ()):
        self._dates: Set[date] = set()
        self.load(dates)

    def load(self, dates: Iterable[Union[str, date]]) -> None:
        self._dates = {parse_iso_date(value) for value in dates}

    def toggle(self, day: Union[str, date]) -> bool:
        """
        Add the date if absent, remove it otherwise.

        Returns:
            True if the date is a holiday after the toggle
        """
        day = parse_iso_date(day)
        if day in self._dates:
            self._dates.remove(day)
            return False
        self._dates.add(day)
        return True

    def contains(self, day: Union[str, date]) -> bool:
        return parse_iso_date(day) in self._dates

    def days_in(self, month: int, year: int) -> List[int]:
        """Day numbers of the holidays within a month."""
        key = MonthKey(month, year)
        return sorted(day.day for day in self._dates if MonthKey.of(day) == key)

    def dates(self) -> List[str]:
        """All holidays as sorted ``YYYY-MM-DD`` strings."""
        return [day.isoformat() for day in sorted(self._dates)]

    def copy(self) -> "HolidayCalendar":
        return HolidayCalendar(self._dates)

    def __len__(self) -> int:
        return len(self._dates)
