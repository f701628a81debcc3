"""
DonorTracker - application state and operations.

Owns the registry, the settings and the store they persist to. Every
mutation is written back to the store right away; eligibility is derived
from the current settings on each read.
"""

import logging

from donortrack import dates, transfer
from donortrack.config import SETTINGS_KEY, STORAGE_KEY
from donortrack.eligibility import classify, next_eligible_date
from donortrack.errors import AmbiguousMatchError, NoMatchError, ValidationError
from donortrack.models import DonorProfile
from donortrack.registry import DonorRegistry
from donortrack.settings import Settings

logger = logging.getLogger(__name__)


class DonorTracker:

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or dates.today
        self.registry = DonorRegistry(self._load_profiles())
        self.settings = Settings.from_dict(self.store.get(SETTINGS_KEY))

    # ============== PERSISTENCE ==============

    def _load_profiles(self):
        raw = self.store.get(STORAGE_KEY, [])
        if not isinstance(raw, list):
            logger.warning("Stored donor list is not a list, starting empty")
            return []
        registry = DonorRegistry()
        for entry in raw:
            if isinstance(entry, dict):
                registry.add(DonorProfile.coerce(entry))
        return list(registry)

    def save_data(self):
        return self.store.set(STORAGE_KEY, self.registry.to_list())

    def save_settings(self):
        return self.store.set(SETTINGS_KEY, self.settings.to_dict())

    @property
    def interval_days(self):
        return self.settings.donation_interval_days

    def today(self):
        return self.clock()

    # ============== PROFILES ==============

    def add_profile(self, payload):
        profile = DonorProfile.from_payload(payload)
        donor_id = self.registry.add(profile)
        self.save_data()
        logger.info("New donor registered: %s (%s)", donor_id, profile.blood_group)
        return profile

    def edit_profile(self, donor_id, patch):
        if not self.registry.update(donor_id, patch):
            return None
        self.save_data()
        logger.info("Donor updated: %s", donor_id)
        return self.registry.get(donor_id)

    def delete_profile(self, donor_id):
        if not self.registry.remove(donor_id):
            return False
        self.save_data()
        logger.info("Donor deleted: %s", donor_id)
        return True

    # ============== DONATIONS ==============

    def record_donation(self, donor_id, value=None):
        """Record a donation day (today when no date is given)"""
        if value is None or value == '':
            value = self.today()
        if not self.registry.record_donation(donor_id, value):
            return None
        self.save_data()
        logger.info("Donation recorded for %s", donor_id)
        return self.registry.get(donor_id)

    def delete_donation(self, donor_id, value):
        if not self.registry.remove_donation(donor_id, value):
            return None
        self.save_data()
        logger.info("Donation %s removed for %s", value, donor_id)
        return self.registry.get(donor_id)

    def quick_donate(self, search):
        """Record today's donation for the single donor whose name matches"""
        if not (search or '').strip():
            raise ValidationError('Search for a donor first, or open a profile from the list')
        matches = self.registry.find_by_name(search)
        if not matches:
            raise NoMatchError(f'No donor matches "{search.strip()}"')
        if len(matches) > 1:
            raise AmbiguousMatchError(search.strip(), len(matches))
        return self.record_donation(matches[0].id, self.today())

    # ============== READS ==============

    def status_for(self, profile):
        next_day = next_eligible_date(profile.donations, self.interval_days)
        return next_day, classify(next_day, self.today())

    def profile_view(self, profile):
        """Profile data with derived eligibility, as shown on a list card"""
        next_day, status = self.status_for(profile)
        view = profile.to_dict()
        view['lastDonation'] = dates.to_iso(profile.last_donation)
        view['nextEligible'] = dates.to_iso(next_day)
        view['status'] = status.to_dict()
        return view

    def profile_detail(self, donor_id):
        profile = self.registry.get(donor_id)
        if profile is None:
            return None
        view = self.profile_view(profile)
        view['history'] = [dates.to_iso(d) for d in profile.history()]
        return view

    def search(self, search='', blood_group=None, eligibility=None):
        return self.registry.query(
            self.interval_days,
            self.today(),
            search=search,
            blood_group=blood_group,
            eligibility=eligibility,
        )

    def dashboard(self):
        return self.registry.dashboard(self.interval_days, self.today())

    # ============== EXPORT / IMPORT ==============

    def export_json(self):
        return transfer.export_json(self.settings, self.registry)

    def export_csv(self):
        return transfer.export_csv(self.registry)

    def import_document(self, raw):
        """
        Append the donors of an import document.
        The whole document is validated before anything is merged.
        """
        entries, settings_patch = transfer.parse_import_document(raw)
        profiles = transfer.import_merge(entries, self.registry.ids)
        self.registry.extend(profiles)
        self.save_data()
        if settings_patch is not None:
            self.settings = self.settings.merged(settings_patch)
            self.save_settings()
        logger.info("Imported %d donors", len(profiles))
        return profiles

    # ============== SETTINGS ==============

    def update_settings(self, patch):
        self.settings = self.settings.merged(patch)
        self.save_settings()
        logger.info("Settings saved: interval %d days, theme %s",
                    self.settings.donation_interval_days, self.settings.theme)
        return self.settings
