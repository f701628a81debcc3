"""
Eligibility engine.

A donor's next eligible day is the latest donation plus the cooldown
interval. Status is always derived from the current settings and today's
date; nothing here is stored on the profile.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from donortrack import dates
from donortrack.config import SOON_WINDOW_DAYS


class StatusKind(enum.Enum):
    NO_HISTORY = 'noData'
    ELIGIBLE_NOW = 'eligible'
    ELIGIBLE_SOON = 'soon'
    NOT_ELIGIBLE_YET = 'notSoon'


_TONES = {
    StatusKind.NO_HISTORY: 'red',
    StatusKind.ELIGIBLE_NOW: 'green',
    StatusKind.ELIGIBLE_SOON: 'amber',
    StatusKind.NOT_ELIGIBLE_YET: 'red',
}


@dataclass(frozen=True)
class EligibilityStatus:
    kind: StatusKind
    days_left: Optional[int] = None

    @property
    def is_eligible(self):
        return self.kind is StatusKind.ELIGIBLE_NOW

    @property
    def label(self):
        if self.kind is StatusKind.NO_HISTORY:
            return 'No donations yet'
        if self.kind is StatusKind.ELIGIBLE_NOW:
            return 'Eligible now'
        return f'{self.days_left} days left'

    def to_dict(self):
        return {
            'status': self.kind.value,
            'daysLeft': self.days_left,
            'text': self.label,
            'tone': _TONES[self.kind],
        }


class EligibilityFilter(enum.Enum):
    """List filters offered by the UI"""
    ALL = 'all'
    ELIGIBLE_TODAY = 'eligibleToday'
    NEXT_7 = 'next7'
    NEXT_30 = 'next30'
    NOT_ELIGIBLE = 'notEligible'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        if not value:
            return cls.ALL
        try:
            return cls(value)
        except ValueError:
            return cls.ALL

    def matches(self, days_left):
        if self is EligibilityFilter.ALL:
            return True
        if days_left is None:
            return False
        if self is EligibilityFilter.ELIGIBLE_TODAY:
            return days_left <= 0
        if self is EligibilityFilter.NEXT_7:
            return 0 < days_left <= 7
        if self is EligibilityFilter.NEXT_30:
            return 0 < days_left <= 30
        return days_left > 30


def next_eligible_date(donations, interval_days):
    """Latest donation plus the interval, None without history"""
    if not donations:
        return None
    return dates.add_days(max(donations), interval_days)


def days_left(donations, interval_days, today):
    """Days until the donor can donate again (<= 0 means eligible)"""
    next_day = next_eligible_date(donations, interval_days)
    if next_day is None:
        return None
    return dates.days_between(today, next_day)


def classify(next_eligible, today):
    """Classify a next-eligible day relative to today"""
    if next_eligible is None:
        return EligibilityStatus(StatusKind.NO_HISTORY)

    remaining = dates.days_between(today, next_eligible)
    if remaining <= 0:
        return EligibilityStatus(StatusKind.ELIGIBLE_NOW, remaining)
    if remaining <= SOON_WINDOW_DAYS:
        return EligibilityStatus(StatusKind.ELIGIBLE_SOON, remaining)
    return EligibilityStatus(StatusKind.NOT_ELIGIBLE_YET, remaining)
