"""
DonorTrack - Blood Donor Eligibility Tracker
Flask Backend Application
Single-user registry of donors, their donations and eligibility windows
Version 2.0 - JSON routes over an explicit tracker state
"""

import logging

from flask import Blueprint, Flask, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from donortrack import config
from donortrack.errors import DonorTrackerError
from donortrack.storage import JsonFileStore
from donortrack.tracker import DonorTracker
from donortrack.transfer import export_filename

bp = Blueprint('donortrack', __name__)


# ============== HELPER FUNCTIONS ==============

def get_tracker():
    return current_app.extensions['donortrack']


def request_data():
    """JSON body, falling back to submitted form fields"""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise DonorTrackerError('Request body must be an object')
    return data


def donor_not_found(donor_id):
    return jsonify({'success': False, 'message': f'Donor {donor_id} not found'}), 404


def list_payload(tracker, args):
    profiles = tracker.search(
        search=args.get('q', ''),
        blood_group=args.get('group'),
        eligibility=args.get('eligibility'),
    )
    return [tracker.profile_view(p) for p in profiles]


def attachment(body, mimetype, filename):
    return Response(
        body,
        mimetype=mimetype,
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


# ============== ROUTES ==============

@bp.route('/')
def home():
    """Dashboard counters and the filtered donor list"""
    tracker = get_tracker()
    return jsonify({
        'success': True,
        'stats': tracker.dashboard(),
        'donors': list_payload(tracker, request.args),
        'settings': tracker.settings.to_dict(),
    })


@bp.route('/api/dashboard/stats')
def api_dashboard_stats():
    return jsonify({'success': True, 'stats': get_tracker().dashboard()})


# ============== DONOR ROUTES ==============

@bp.route('/api/donors', methods=['GET'])
def api_donors():
    """Search donors by name, blood group and eligibility window"""
    return jsonify({'success': True, 'donors': list_payload(get_tracker(), request.args)})


@bp.route('/api/donors', methods=['POST'])
def donor_register():
    tracker = get_tracker()
    profile = tracker.add_profile(request_data())
    return jsonify({
        'success': True,
        'message': f'Profile saved. Donor ID: {profile.id}',
        'donor': tracker.profile_view(profile),
    }), 201


@bp.route('/api/donors/<donor_id>', methods=['GET'])
def donor_detail(donor_id):
    detail = get_tracker().profile_detail(donor_id)
    if detail is None:
        return donor_not_found(donor_id)
    return jsonify(detail)


@bp.route('/api/donors/<donor_id>', methods=['PUT', 'PATCH'])
def donor_update(donor_id):
    """Update donor information; donation dates are added, never replaced"""
    tracker = get_tracker()
    profile = tracker.edit_profile(donor_id, request_data())
    if profile is None:
        return donor_not_found(donor_id)
    return jsonify({
        'success': True,
        'message': 'Profile updated successfully!',
        'donor': tracker.profile_view(profile),
    })


@bp.route('/api/donors/<donor_id>', methods=['DELETE'])
def donor_delete(donor_id):
    if not get_tracker().delete_profile(donor_id):
        return donor_not_found(donor_id)
    return jsonify({'success': True, 'message': 'Profile deleted'})


# ============== DONATION ROUTES ==============

@bp.route('/api/donors/<donor_id>/donations', methods=['POST'])
def record_donation(donor_id):
    """Record a new donation (today if no date is given)"""
    tracker = get_tracker()
    profile = tracker.record_donation(donor_id, request_data().get('date'))
    if profile is None:
        return donor_not_found(donor_id)
    return jsonify({
        'success': True,
        'message': 'Donation recorded successfully!',
        'donor': tracker.profile_detail(donor_id),
    }), 201


@bp.route('/api/donors/<donor_id>/donations/<day>', methods=['DELETE'])
def delete_donation(donor_id, day):
    tracker = get_tracker()
    profile = tracker.delete_donation(donor_id, day)
    if profile is None:
        return donor_not_found(donor_id)
    return jsonify({
        'success': True,
        'message': 'Donation record removed',
        'donor': tracker.profile_detail(donor_id),
    })


@bp.route('/api/donations/quick', methods=['POST'])
def quick_donate():
    """Add today's donation for the one donor matching the search"""
    tracker = get_tracker()
    profile = tracker.quick_donate(request_data().get('q', ''))
    return jsonify({
        'success': True,
        'message': f"{profile.name} - today's date added.",
        'donor': tracker.profile_view(profile),
    }), 201


# ============== EXPORT / IMPORT ==============

@bp.route('/api/export/json')
def export_json():
    tracker = get_tracker()
    return attachment(
        tracker.export_json(),
        'application/json',
        export_filename('json', tracker.today()),
    )


@bp.route('/api/export/csv')
def export_csv():
    tracker = get_tracker()
    return attachment(
        tracker.export_csv(),
        'text/csv',
        export_filename('csv', tracker.today()),
    )


@bp.route('/api/import', methods=['POST'])
def import_donors():
    """Append donors from an uploaded backup file or a JSON body"""
    upload = request.files.get('file')
    raw = upload.read() if upload else request.get_data()
    profiles = get_tracker().import_document(raw)
    return jsonify({
        'success': True,
        'message': f'Import successful: {len(profiles)} new profiles added',
        'imported': [p.id for p in profiles],
    })


# ============== SETTINGS ==============

@bp.route('/api/settings', methods=['GET'])
def get_settings():
    return jsonify(get_tracker().settings.to_dict())


@bp.route('/api/settings', methods=['PUT', 'POST'])
def save_settings():
    settings = get_tracker().update_settings(request_data())
    return jsonify({'success': True, 'settings': settings.to_dict()})


# ============== ERROR HANDLERS ==============

@bp.app_errorhandler(DonorTrackerError)
def tracker_error(e):
    current_app.logger.warning("Rejected request to %s: %s", request.path, e)
    return jsonify({'success': False, 'message': str(e)}), 400


@bp.app_errorhandler(HTTPException)
def http_error(e):
    return jsonify({'success': False, 'message': e.description}), e.code


# ============== APPLICATION FACTORY ==============

def create_app(overrides=None):
    """Flask application factory"""
    app = Flask(__name__)
    app.config.from_mapping(
        SECRET_KEY=config.SECRET_KEY,
        DATA_DIR=config.DATA_DIR,
        STORE=None,
        CLOCK=None,
    )
    if overrides:
        app.config.update(overrides)

    store = app.config['STORE'] or JsonFileStore(app.config['DATA_DIR'])
    app.extensions['donortrack'] = DonorTracker(store, clock=app.config['CLOCK'])
    app.register_blueprint(bp)
    return app


# ============== MAIN ==============

if __name__ == '__main__':
    logging.basicConfig(
        level=logging.DEBUG if config.DEBUG else logging.INFO,
        format='[%(asctime)s] %(levelname)s %(name)s: %(message)s',
    )
    create_app().run(debug=config.DEBUG, host=config.HOST, port=config.PORT, threaded=False)
