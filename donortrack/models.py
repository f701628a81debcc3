"""
Donor profile record and boundary coercion.

Profiles arrive from forms, import files and the persisted donor list as loose
dicts. ``DonorProfile.from_payload`` validates user input strictly and raises
``ValidationError``; ``DonorProfile.coerce`` fills defaults instead and is used
for imported and persisted data.
"""

import uuid
from dataclasses import dataclass, field
from typing import List

from donortrack import dates
from donortrack.config import DEFAULT_BLOOD_GROUP, UNKNOWN_NAME
from donortrack.errors import InvalidDateError, ValidationError

BLOOD_GROUPS = ['O+', 'O-', 'A+', 'A-', 'B+', 'B-', 'AB+', 'AB-']


def generate_donor_id():
    """Generate unique donor ID"""
    return f"DON-{uuid.uuid4().hex[:8].upper()}"


# ============== FIELD VALIDATION ==============

def validate_name(value):
    name = str(value or '').strip()
    if not name:
        raise ValidationError('Name is required')
    return name


def validate_age(value):
    if value is None or value == '':
        return 0
    if isinstance(value, bool):
        raise ValidationError(f'Invalid age: {value!r}')
    try:
        age = int(float(value))
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f'Invalid age: {value!r}')
    if age < 0:
        raise ValidationError('Age cannot be negative')
    return age


def validate_blood_group(value):
    group = str(value or '').strip().upper()
    if group not in BLOOD_GROUPS:
        raise ValidationError('Invalid blood group. Allowed: ' + ', '.join(BLOOD_GROUPS))
    return group


def validate_dates(values):
    """Normalize every value or raise InvalidDateError on the first bad one"""
    if not isinstance(values, (list, tuple)):
        raise ValidationError('Donations must be a list of dates')
    days = []
    for value in values:
        day = dates.normalize(value)
        if day is None:
            raise InvalidDateError(value)
        days.append(day)
    return days


def _optional_text(value):
    return '' if value is None else str(value)


# ============== PROFILE ==============

@dataclass
class DonorProfile:
    """A donor and the days they donated"""
    name: str
    age: int = 0
    blood_group: str = DEFAULT_BLOOD_GROUP
    phone: str = ''
    notes: str = ''
    donations: List = field(default_factory=list)
    id: str = ''

    @property
    def last_donation(self):
        return max(self.donations) if self.donations else None

    def history(self):
        """Distinct donation days, newest first"""
        return sorted(set(self.donations), reverse=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'age': self.age,
            'bloodGroup': self.blood_group,
            'phone': self.phone,
            'donations': [dates.to_iso(d) for d in self.donations],
            'notes': self.notes,
        }

    @classmethod
    def from_payload(cls, payload):
        """
        Build a profile from user input (add form / API body).
        Accepts an optional ``recentDonation`` date and a ``donations`` list.
        """
        if not isinstance(payload, dict):
            raise ValidationError('Profile data must be an object')

        donations = validate_dates(payload.get('donations') or [])
        recent = payload.get('recentDonation')
        if recent:
            donations.extend(validate_dates([recent]))

        return cls(
            id=str(payload.get('id') or ''),
            name=validate_name(payload.get('name')),
            age=validate_age(payload.get('age')),
            blood_group=validate_blood_group(payload.get('bloodGroup')),
            phone=_optional_text(payload.get('phone')),
            notes=_optional_text(payload.get('notes')),
            donations=donations,
        )

    @classmethod
    def coerce(cls, raw):
        """
        Build a profile from untrusted stored or imported data.
        Missing or invalid fields get defaults, unparseable donation
        dates are dropped.
        """
        name = str(raw.get('name') or '').strip() or UNKNOWN_NAME

        try:
            age = validate_age(raw.get('age'))
        except ValidationError:
            age = 0

        try:
            blood_group = validate_blood_group(raw.get('bloodGroup'))
        except ValidationError:
            blood_group = DEFAULT_BLOOD_GROUP

        raw_donations = raw.get('donations')
        if not isinstance(raw_donations, list):
            raw_donations = []
        donations = [d for d in map(dates.normalize, raw_donations) if d is not None]

        return cls(
            id=str(raw.get('id') or ''),
            name=name,
            age=age,
            blood_group=blood_group,
            phone=_optional_text(raw.get('phone')),
            notes=_optional_text(raw.get('notes')),
            donations=donations,
        )
