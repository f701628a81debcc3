"""
DonorTrack - Blood Donor Eligibility Tracker
Single-user registry of donor profiles and donation histories
"""

from donortrack.errors import (
    DonorTrackerError,
    ValidationError,
    InvalidDateError,
    ImportFormatError,
    NoMatchError,
    AmbiguousMatchError,
)
from donortrack.models import DonorProfile, BLOOD_GROUPS
from donortrack.settings import Settings
from donortrack.storage import JsonFileStore, MemoryStore
from donortrack.tracker import DonorTracker

__version__ = '2.0.0'
