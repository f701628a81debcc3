"""Tests for DonorTracker: persistence side effects, settings, quick donate."""

import json
from datetime import date

import pytest

from donortrack.config import SETTINGS_KEY, STORAGE_KEY
from donortrack.errors import (
    AmbiguousMatchError,
    ImportFormatError,
    InvalidDateError,
    NoMatchError,
    ValidationError,
)
from donortrack.storage import MemoryStore
from donortrack.tracker import DonorTracker

TODAY = date(2025, 3, 25)


def stored_donors(store):
    return store.get(STORAGE_KEY)


class TestLoading:

    def test_empty_store(self, tracker):
        assert len(tracker.registry) == 0
        assert tracker.interval_days == 90

    def test_malformed_state_falls_back(self):
        store = MemoryStore({STORAGE_KEY: "{oops", SETTINGS_KEY: "[1"})
        tracker = DonorTracker(store, clock=lambda: TODAY)
        assert len(tracker.registry) == 0
        assert tracker.settings.donation_interval_days == 90

    def test_non_list_donor_payload_loads_empty(self):
        store = MemoryStore({STORAGE_KEY: json.dumps({"id": "D1"})})
        assert len(DonorTracker(store).registry) == 0

    def test_loads_and_coerces_stored_profiles(self):
        store = MemoryStore({
            STORAGE_KEY: json.dumps([
                {"id": "D1", "name": "Rahim", "age": 30, "bloodGroup": "A+",
                 "donations": ["2025-01-01", "bad"]},
                {"id": "D1", "name": "Copy"},
                "junk",
            ]),
            SETTINGS_KEY: json.dumps({"donationIntervalDays": 56}),
        })
        tracker = DonorTracker(store, clock=lambda: TODAY)
        assert len(tracker.registry) == 2
        assert tracker.registry.get("D1").donations == [date(2025, 1, 1)]
        assert len(tracker.registry.ids) == 2
        assert tracker.settings.donation_interval_days == 56


class TestProfiles:

    def test_add_persists(self, tracker, store):
        profile = tracker.add_profile({"name": " Rahim ", "age": "30", "bloodGroup": "a+",
                                       "recentDonation": "2025-01-01"})
        assert profile.name == "Rahim"
        assert profile.blood_group == "A+"
        assert stored_donors(store)[0]["donations"] == ["2025-01-01"]

    @pytest.mark.parametrize("payload", [
        {"age": 30, "bloodGroup": "A+"},
        {"name": "A", "age": -1, "bloodGroup": "A+"},
        {"name": "A", "age": "x", "bloodGroup": "A+"},
        {"name": "A", "bloodGroup": "C+"},
    ])
    def test_add_rejects_invalid(self, tracker, store, payload):
        with pytest.raises(ValidationError):
            tracker.add_profile(payload)
        assert store.get(STORAGE_KEY) is None

    def test_add_rejects_bad_recent_donation(self, tracker):
        with pytest.raises(InvalidDateError):
            tracker.add_profile({"name": "A", "bloodGroup": "A+", "recentDonation": "soon"})
        assert len(tracker.registry) == 0

    def test_edit_merges_donations_and_persists(self, tracker, store):
        donor = tracker.add_profile({"name": "Rahim", "bloodGroup": "A+",
                                     "recentDonation": "2025-01-01"})
        tracker.edit_profile(donor.id, {"phone": "017", "recentDonation": "2025-06-01"})
        saved = stored_donors(store)[0]
        assert saved["phone"] == "017"
        assert saved["donations"] == ["2025-01-01", "2025-06-01"]

    def test_edit_unknown(self, tracker):
        assert tracker.edit_profile("nope", {"name": "x"}) is None

    def test_delete(self, tracker, store):
        donor = tracker.add_profile({"name": "Rahim", "bloodGroup": "A+"})
        assert tracker.delete_profile(donor.id)
        assert stored_donors(store) == []
        assert tracker.delete_profile(donor.id) is False


class TestDonations:

    def test_record_defaults_to_today(self, tracker):
        donor = tracker.add_profile({"name": "Rahim", "bloodGroup": "A+"})
        tracker.record_donation(donor.id)
        assert donor.donations == [TODAY]

    def test_record_invalid_date_does_not_persist(self, tracker, store):
        donor = tracker.add_profile({"name": "Rahim", "bloodGroup": "A+"})
        before = store.raw(STORAGE_KEY)
        with pytest.raises(InvalidDateError):
            tracker.record_donation(donor.id, "not a date")
        assert store.raw(STORAGE_KEY) == before

    def test_delete_donation(self, tracker):
        donor = tracker.add_profile({"name": "Rahim", "bloodGroup": "A+",
                                     "donations": ["2025-01-01", "2025-02-01"]})
        tracker.delete_donation(donor.id, "2025-01-01")
        assert donor.donations == [date(2025, 2, 1)]

    def test_quick_donate_single_match(self, tracker):
        donor = tracker.add_profile({"name": "Rahim Uddin", "bloodGroup": "A+"})
        tracker.add_profile({"name": "Sneha", "bloodGroup": "O-"})
        assert tracker.quick_donate("uddin").id == donor.id
        assert donor.donations == [TODAY]

    def test_quick_donate_errors(self, tracker):
        tracker.add_profile({"name": "Rahim", "bloodGroup": "A+"})
        tracker.add_profile({"name": "Karim", "bloodGroup": "A+"})
        with pytest.raises(ValidationError):
            tracker.quick_donate("  ")
        with pytest.raises(NoMatchError):
            tracker.quick_donate("zara")
        with pytest.raises(AmbiguousMatchError):
            tracker.quick_donate("im")


class TestReads:

    def test_profile_detail(self, tracker):
        donor = tracker.add_profile({"name": "Rahim", "bloodGroup": "A+",
                                     "donations": ["2024-06-01", "2025-01-01", "2024-06-01"]})
        detail = tracker.profile_detail(donor.id)
        assert detail["lastDonation"] == "2025-01-01"
        assert detail["nextEligible"] == "2025-04-01"
        assert detail["status"]["status"] == "soon"
        assert detail["status"]["daysLeft"] == 7
        assert detail["history"] == ["2025-01-01", "2024-06-01"]

    def test_profile_detail_unknown(self, tracker):
        assert tracker.profile_detail("nope") is None

    def test_no_history_view(self, tracker):
        view = tracker.profile_view(tracker.add_profile({"name": "New", "bloodGroup": "B+"}))
        assert view["lastDonation"] is None
        assert view["nextEligible"] is None
        assert view["status"]["status"] == "noData"

    def test_settings_change_reclassifies(self, tracker, store):
        donor = tracker.add_profile({"name": "Rahim", "bloodGroup": "A+",
                                     "recentDonation": "2025-01-01"})
        assert tracker.dashboard()["upcoming7"] == 1
        tracker.update_settings({"donationIntervalDays": 56})
        assert tracker.dashboard() == {"totalProfiles": 1, "eligibleToday": 1, "upcoming7": 0}
        assert tracker.profile_view(donor)["status"]["status"] == "eligible"
        assert store.get(SETTINGS_KEY)["donationIntervalDays"] == 56

    def test_far_future_donation_keeps_reads_working(self, tracker):
        donor = tracker.add_profile({"name": "Far", "bloodGroup": "O+", "recentDonation": "9999-12-20"})
        assert tracker.dashboard() == {"totalProfiles": 1, "eligibleToday": 0, "upcoming7": 0}
        view = tracker.profile_view(donor)
        assert view["nextEligible"] == "9999-12-31"
        assert view["status"]["status"] == "notSoon"
        assert [p.name for p in tracker.search(eligibility="notEligible")] == ["Far"]

    def test_search_eligible_today_sorted(self, tracker):
        tracker.add_profile({"name": "zara", "bloodGroup": "A+", "recentDonation": "2024-01-01"})
        tracker.add_profile({"name": "Amir", "bloodGroup": "A+", "recentDonation": "2024-12-01"})
        tracker.add_profile({"name": "Bina", "bloodGroup": "A+", "recentDonation": "2025-03-01"})
        tracker.add_profile({"name": "Chan", "bloodGroup": "A+"})
        names = [p.name for p in tracker.search(eligibility="eligibleToday")]
        assert names == ["Amir", "zara"]


class TestImport:

    def test_import_appends_and_merges_settings(self, tracker, store):
        existing = tracker.add_profile({"name": "Rahim", "bloodGroup": "A+"})
        doc = {"settings": {"theme": "dark"},
               "data": [{"id": existing.id, "name": "Other"}, {"name": "Karim", "bloodGroup": "B+"}]}
        imported = tracker.import_document(json.dumps(doc))
        assert len(imported) == 2
        assert existing.id not in [p.id for p in imported]
        assert tracker.registry.get(existing.id).name == "Rahim"
        assert len(stored_donors(store)) == 3
        assert tracker.settings.theme == "dark"
        assert tracker.settings.donation_interval_days == 90

    def test_malformed_import_changes_nothing(self, tracker, store):
        tracker.add_profile({"name": "Rahim", "bloodGroup": "A+"})
        before = store.raw(STORAGE_KEY)
        with pytest.raises(ImportFormatError):
            tracker.import_document('{"data": [{"name": "A"}, "oops"], "settings": {"theme": "dark"}}')
        assert store.raw(STORAGE_KEY) == before
        assert len(tracker.registry) == 1
        assert tracker.settings.theme == "light"

    def test_round_trip_preserves_ids_into_empty_registry(self, tracker):
        tracker.add_profile({"name": "Rahim", "bloodGroup": "A+", "recentDonation": "2025-01-01"})
        tracker.add_profile({"name": "Karim", "bloodGroup": "O-"})
        exported = tracker.export_json()

        fresh = DonorTracker(MemoryStore(), clock=lambda: TODAY)
        fresh.import_document(exported)
        assert fresh.registry.to_list() == tracker.registry.to_list()
