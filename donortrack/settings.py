"""Tracker settings: cooldown interval and presentation preferences"""

from dataclasses import dataclass, replace

from donortrack.config import DEFAULT_INTERVAL_DAYS, MAX_INTERVAL_DAYS

THEMES = ('light', 'dark')
DEFAULT_THEME = 'light'
DEFAULT_LOCALE = 'bn'


def coerce_interval(value):
    """Whole number of days in 1..MAX_INTERVAL_DAYS, falling back to the default"""
    if isinstance(value, bool):
        return DEFAULT_INTERVAL_DAYS
    try:
        days = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_INTERVAL_DAYS
    return days if 0 < days <= MAX_INTERVAL_DAYS else DEFAULT_INTERVAL_DAYS


@dataclass(frozen=True)
class Settings:
    donation_interval_days: int = DEFAULT_INTERVAL_DAYS
    theme: str = DEFAULT_THEME
    locale: str = DEFAULT_LOCALE

    @classmethod
    def from_dict(cls, raw):
        """Shallow-merge a stored or imported mapping over the defaults"""
        if not isinstance(raw, dict):
            return cls()
        return cls().merged(raw)

    def merged(self, patch):
        current = self.to_dict()
        current.update(patch or {})

        theme = current.get('theme')
        if theme not in THEMES:
            theme = DEFAULT_THEME

        return replace(
            self,
            donation_interval_days=coerce_interval(current.get('donationIntervalDays')),
            theme=theme,
            locale=str(current.get('locale') or DEFAULT_LOCALE),
        )

    def to_dict(self):
        return {
            'donationIntervalDays': self.donation_interval_days,
            'locale': self.locale,
            'theme': self.theme,
        }
