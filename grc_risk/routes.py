# Path: grc_risk/routes.py

from flask import Blueprint, jsonify, request, current_app
from loguru import logger
from sqlalchemy import text

from .criticality import CRITICALITY_SCORES, normalize_criticality
from .exceptions import ConcurrencyConflict
from .models import db, Risk, Asset, RiskAsset
from .reclassification import build_service

main_bp = Blueprint('main', __name__, url_prefix='/api')


def _error(message, status):
    return jsonify({'success': False, 'message': message}), status


# --- Risks ---

# GET: all risks
@main_bp.route('/risks', methods=['GET'])
def get_risks():
    try:
        risks = Risk.query.order_by(Risk.created_at.desc()).all()
        return jsonify({'success': True, 'risks': [risk.to_dict() for risk in risks]})
    except Exception as e:
        logger.exception("Error fetching risks")
        return _error(f'Server error: {e}', 500)


# GET: one risk with its linked assets
@main_bp.route('/risks/<int:risk_id>', methods=['GET'])
def get_risk(risk_id):
    try:
        risk = db.session.get(Risk, risk_id)
        if not risk:
            return _error('Risk not found', 404)
        data = risk.to_dict()
        data['assets'] = [
            dict(link.asset.to_dict(), impact_weight=link.impact_weight)
            for link in risk.asset_links
        ]
        return jsonify({'success': True, 'risk': data})
    except Exception as e:
        logger.exception("Error fetching risk {}", risk_id)
        return _error(f'Server error: {e}', 500)


# POST: link an asset to a risk, then reclassify the risk
@main_bp.route('/risks/<int:risk_id>/assets', methods=['POST'])
def link_asset(risk_id):
    try:
        data = request.get_json(silent=True) or {}
        asset_id = data.get('asset_id')
        if asset_id is None:
            return _error('asset_id is required', 400)
        try:
            asset_id = int(asset_id)
            impact_weight = float(data.get('impact_weight', 1.0))
        except (TypeError, ValueError):
            return _error('asset_id must be an integer and impact_weight a number', 400)

        risk = db.session.get(Risk, risk_id)
        if not risk:
            return _error('Risk not found', 404)
        asset = db.session.get(Asset, asset_id)
        if not asset:
            return _error('Asset not found', 404)
        if db.session.get(RiskAsset, (risk.id, asset.id)):
            return _error('Asset already linked to this risk', 409)

        db.session.add(RiskAsset(risk_id=risk.id, asset_id=asset.id, impact_weight=impact_weight))
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.exception("Error linking asset to risk {}", risk_id)
        return _error(f'Server error: {e}', 500)

    # The link is saved at this point; a failed reclassification is reported
    # alongside it and can be re-run through /risks/<id>/reclassify.
    try:
        result = build_service(db.session).reclassify_risk(risk_id)
    except Exception as e:
        db.session.rollback()
        logger.error("Asset {} linked to risk {} but reclassification failed: {}", asset_id, risk_id, e)
        return jsonify({
            'success': True,
            'message': 'Asset linked successfully; reclassification failed',
            'data': None,
            'reclassification_error': str(e),
        }), 201
    return jsonify({
        'success': True,
        'message': 'Asset linked successfully',
        'data': result.to_dict() if result else None,
        'reclassification_error': None,
    }), 201


# --- Reclassification ---

@main_bp.route('/risks/<int:risk_id>/reclassify', methods=['POST'])
def reclassify_risk(risk_id):
    try:
        if not db.session.get(Risk, risk_id):
            return _error('Risk not found', 404)

        result = build_service(db.session).reclassify_risk(risk_id)
        if result is None:
            return jsonify({
                'success': True,
                'message': 'No reclassification needed - risk has no linked active assets or scores unchanged',
                'data': None,
            })
        return jsonify({'success': True, 'message': 'Risk reclassified successfully', 'data': result.to_dict()})
    except ConcurrencyConflict as e:
        return _error(str(e), 409)
    except Exception as e:
        db.session.rollback()
        logger.exception("Error reclassifying risk {}", risk_id)
        return _error(f'Failed to reclassify risk: {e}', 500)


@main_bp.route('/risks/<int:risk_id>/reclassify/preview', methods=['GET'])
def preview_reclassification(risk_id):
    try:
        if not db.session.get(Risk, risk_id):
            return _error('Risk not found', 404)

        preview = build_service(db.session).preview_reclassification(risk_id)
        if preview is None:
            return jsonify({
                'success': True,
                'message': 'No reclassification preview available - risk has no linked active assets',
                'data': None,
            })
        data = preview.to_dict()
        data['changed'] = preview.changed
        return jsonify({'success': True, 'message': 'Reclassification preview generated', 'data': data})
    except Exception as e:
        logger.exception("Error previewing reclassification for risk {}", risk_id)
        return _error(f'Failed to preview reclassification: {e}', 500)


@main_bp.route('/assets/<int:asset_id>/reclassify', methods=['POST'])
def reclassify_by_asset(asset_id):
    try:
        report = build_service(db.session).reclassify_risks_by_asset(asset_id)
        return jsonify({
            'success': True,
            'message': f'Reclassified {report.changed_count} risk(s) affected by asset {asset_id}',
            'data': report.to_dict(),
            'count': report.changed_count,
        })
    except Exception as e:
        db.session.rollback()
        logger.exception("Error reclassifying risks for asset {}", asset_id)
        return _error(f'Failed to reclassify risks: {e}', 500)


@main_bp.route('/risks/reclassify-all', methods=['POST'])
def reclassify_all():
    try:
        report = build_service(db.session).reclassify_all_risks()
        return jsonify({
            'success': True,
            'message': f'Bulk reclassification complete: {report.changed_count} risk(s) updated',
            'data': report.to_dict(),
            'count': report.changed_count,
        })
    except Exception as e:
        db.session.rollback()
        logger.exception("Error in bulk reclassification")
        return _error(f'Failed to reclassify risks: {e}', 500)


# --- Assets ---

# PUT: edit an asset; criticality/status changes re-rate the linked risks
@main_bp.route('/assets/<int:asset_id>', methods=['PUT'])
def update_asset(asset_id):
    try:
        asset = db.session.get(Asset, asset_id)
        if not asset:
            return _error('Asset not found', 404)

        data = request.get_json(silent=True) or {}
        if 'criticality' in data and normalize_criticality(data['criticality']) not in CRITICALITY_SCORES:
            return _error(f"Invalid criticality: {data['criticality']}", 400)
        for key in ('name', 'status'):
            if key in data and not isinstance(data[key], str):
                return _error(f'{key} must be a string', 400)

        old_state = (asset.criticality, asset.status)
        asset.name = data.get('name', asset.name)
        asset.asset_type = data.get('asset_type', asset.asset_type)
        if 'criticality' in data:
            asset.criticality = normalize_criticality(data['criticality'])
        asset.status = data.get('status', asset.status)
        db.session.commit()

        report = None
        if (asset.criticality, asset.status) != old_state and current_app.config['RECLASSIFY_ON_ASSET_CHANGE']:
            report = build_service(db.session).reclassify_risks_by_asset(asset_id)

        return jsonify({
            'success': True,
            'message': 'Asset updated successfully',
            'asset': db.session.get(Asset, asset_id).to_dict(),
            'reclassification': report.to_dict() if report else None,
        })
    except Exception as e:
        db.session.rollback()
        logger.exception("Error updating asset {}", asset_id)
        return _error(f'Server error: {e}', 500)


# --- Health ---

@main_bp.route('/health', methods=['GET'])
def health():
    try:
        db.session.execute(text('SELECT 1'))
        return jsonify({'success': True, 'status': 'healthy'})
    except Exception as e:
        logger.error("Health check failed: {}", e)
        return jsonify({'success': False, 'status': 'unhealthy', 'message': str(e)}), 503
