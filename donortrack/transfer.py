"""
Export and import of donor data.

Exports are a pretty-printed JSON backup (settings + donors) and a flat CSV
sheet. Imports only ever append: incoming ids that are missing or already
taken are replaced, existing profiles are never touched.
"""

import csv
import io
import json
import logging

from donortrack import dates
from donortrack.errors import ImportFormatError
from donortrack.models import DonorProfile, generate_donor_id

logger = logging.getLogger(__name__)

CSV_HEADER = ['id', 'name', 'age', 'bloodGroup', 'phone', 'notes', 'donations']


# ============== EXPORT ==============

def export_json(settings, profiles):
    document = {
        'settings': settings.to_dict(),
        'data': [p.to_dict() for p in profiles],
    }
    return json.dumps(document, ensure_ascii=False, indent=2)


def export_csv(profiles):
    """One row per donor, donation days joined with ';'"""
    buffer = io.StringIO()
    buffer.write(','.join(CSV_HEADER) + '\n')
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator='\n')
    for p in profiles:
        writer.writerow([
            p.id,
            p.name,
            p.age,
            p.blood_group,
            p.phone,
            p.notes,
            ';'.join(dates.to_iso(d) for d in p.donations),
        ])
    return buffer.getvalue()


def export_filename(kind, day):
    if kind == 'csv':
        return f'donors_{dates.to_iso(day)}.csv'
    return f'donors_backup_{dates.to_iso(day)}.json'


# ============== IMPORT ==============

def parse_import_document(raw):
    """
    Decode an import document.
    Returns (donor entries, settings patch or None). Raises ImportFormatError
    unless the document is a JSON object with a ``data`` list of objects.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode('utf-8-sig')
        except UnicodeDecodeError:
            raise ImportFormatError('Import failed: the file is not valid JSON')
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ImportFormatError('Import failed: the file is not valid JSON')

    if not isinstance(raw, dict) or not isinstance(raw.get('data'), list):
        raise ImportFormatError('The file is not in the expected format')

    entries = raw['data']
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ImportFormatError(f'Entry {index} in data is not an object')

    settings_patch = raw.get('settings')
    if not isinstance(settings_patch, dict):
        settings_patch = None
    return entries, settings_patch


def import_merge(entries, existing_ids):
    """
    Coerce incoming entries into profiles ready to append.
    Ids that are missing, already in the registry or repeated within the
    batch are replaced with fresh ones.
    """
    taken = set(existing_ids)
    profiles = []
    for entry in entries:
        profile = DonorProfile.coerce(entry)
        if not profile.id or profile.id in taken:
            new_id = generate_donor_id()
            while new_id in taken:
                new_id = generate_donor_id()
            logger.debug("Reassigned imported id %r -> %s", profile.id, new_id)
            profile.id = new_id
        taken.add(profile.id)
        profiles.append(profile)
    return profiles
