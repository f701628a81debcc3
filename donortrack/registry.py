"""
Donor registry: the ordered, in-memory collection of profiles.

Lookups by unknown id never raise. ``update``, ``remove`` and the donation
operations return False instead so callers can report "not found".
"""

import unicodedata

from donortrack import dates
from donortrack.config import UPCOMING_WINDOW_DAYS
from donortrack.eligibility import EligibilityFilter, days_left
from donortrack.errors import InvalidDateError
from donortrack.models import (
    generate_donor_id,
    validate_age,
    validate_blood_group,
    validate_dates,
    validate_name,
)


def collation_key(name):
    """
    Case- and accent-insensitive sort key, ties broken by the raw name.
    An approximation of a browser's default localeCompare that does not
    depend on the configured locale setting or on the process locale.
    """
    decomposed = unicodedata.normalize('NFKD', name)
    base = ''.join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), name)


class DonorRegistry:

    def __init__(self, profiles=None):
        self._profiles = list(profiles or [])

    def __len__(self):
        return len(self._profiles)

    def __iter__(self):
        return iter(self._profiles)

    @property
    def ids(self):
        return {p.id for p in self._profiles}

    def get(self, donor_id):
        for profile in self._profiles:
            if profile.id == donor_id:
                return profile
        return None

    def new_id(self):
        """Generate a donor ID not yet used in the registry"""
        taken = self.ids
        donor_id = generate_donor_id()
        while donor_id in taken:
            donor_id = generate_donor_id()
        return donor_id

    # ============== MUTATIONS ==============

    def add(self, profile):
        """Append a profile, assigning a fresh id if it has none (or a taken one)"""
        if not profile.id or profile.id in self.ids:
            profile.id = self.new_id()
        self._profiles.append(profile)
        return profile.id

    def extend(self, profiles):
        for profile in profiles:
            self.add(profile)

    def update(self, donor_id, patch):
        """
        Overwrite the fields present in ``patch``.
        Donation dates in the patch (``recentDonation`` or ``donations``) are
        unioned into the existing history, never replacing it.
        """
        profile = self.get(donor_id)
        if profile is None:
            return False

        # Validate everything before touching the record
        changes = {}
        if 'name' in patch:
            changes['name'] = validate_name(patch['name'])
        if 'age' in patch:
            changes['age'] = validate_age(patch['age'])
        if 'bloodGroup' in patch:
            changes['blood_group'] = validate_blood_group(patch['bloodGroup'])
        if 'phone' in patch:
            changes['phone'] = str(patch['phone'] or '')
        if 'notes' in patch:
            changes['notes'] = str(patch['notes'] or '')

        new_days = validate_dates(patch.get('donations') or [])
        if patch.get('recentDonation'):
            new_days.extend(validate_dates([patch['recentDonation']]))

        for attr, value in changes.items():
            setattr(profile, attr, value)
        for day in new_days:
            if day not in profile.donations:
                profile.donations.append(day)
        return True

    def remove(self, donor_id):
        before = len(self._profiles)
        self._profiles = [p for p in self._profiles if p.id != donor_id]
        return len(self._profiles) != before

    def record_donation(self, donor_id, value):
        """Append a donation day; raises InvalidDateError for a bad date"""
        day = dates.normalize(value)
        if day is None:
            raise InvalidDateError(value)
        profile = self.get(donor_id)
        if profile is None:
            return False
        profile.donations.append(day)
        return True

    def remove_donation(self, donor_id, value):
        """Remove every occurrence of a donation day"""
        day = dates.normalize(value)
        if day is None:
            raise InvalidDateError(value)
        profile = self.get(donor_id)
        if profile is None:
            return False
        profile.donations = [d for d in profile.donations if d != day]
        return True

    # ============== QUERIES ==============

    def find_by_name(self, search):
        needle = (search or '').strip().lower()
        return [p for p in self._profiles if needle in p.name.lower()]

    def query(self, interval_days, today, search='', blood_group=None, eligibility=None):
        """Filter by name, blood group and eligibility window, sorted by name"""
        needle = (search or '').strip().lower()
        if blood_group == 'all':
            blood_group = None
        window = EligibilityFilter.parse(eligibility)

        results = []
        for profile in self._profiles:
            if needle and needle not in profile.name.lower():
                continue
            if blood_group and profile.blood_group != blood_group:
                continue
            if not window.matches(days_left(profile.donations, interval_days, today)):
                continue
            results.append(profile)

        results.sort(key=lambda p: collation_key(p.name))
        return results

    def dashboard(self, interval_days, today):
        """Dashboard counters, computed by a full scan"""
        eligible_count = 0
        upcoming_count = 0
        for profile in self._profiles:
            remaining = days_left(profile.donations, interval_days, today)
            if remaining is None:
                continue
            if remaining <= 0:
                eligible_count += 1
            elif remaining <= UPCOMING_WINDOW_DAYS:
                upcoming_count += 1
        return {
            'totalProfiles': len(self._profiles),
            'eligibleToday': eligible_count,
            'upcoming7': upcoming_count,
        }

    def to_list(self):
        return [p.to_dict() for p in self._profiles]
