from flask import current_app, jsonify, request
from flask_login import login_required

from presscard.auth import admin_required
from presscard.card_service import list_cards, parse_admin_updates, patch_card
from presscard.issuance import IdentityInput, create_print_only_card
from presscard.renderer import verification_url
from presscard.routes import admin_bp


@admin_bp.route('/cards')
@login_required
@admin_required
def cards():
    return jsonify({'ok': True, 'cards': [card.to_dict() for card in list_cards()]})


@admin_bp.route('/cards', methods=['PATCH'])
@login_required
@admin_required
def update_card():
    """Toggle printed/shipped/delivered/revoked or attach a token ID"""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return jsonify({'ok': False, 'error': 'Request body must be a JSON object'}), 400

    card_id = payload.get('cardId')
    if not card_id:
        return jsonify({'ok': False, 'error': 'cardId is required'}), 400

    try:
        updates = parse_admin_updates(payload)
    except ValueError as e:
        return jsonify({'ok': False, 'error': str(e)}), 400

    card = patch_card(str(card_id), updates)
    if card is None:
        return jsonify({'ok': False, 'error': 'Card not found'}), 404

    return jsonify({'ok': True, 'card': card.to_dict()})


@admin_bp.route('/print-card', methods=['POST'])
@login_required
@admin_required
def print_card():
    """Issue a print-only card (no wallet, nothing on-chain)"""
    photo_file = request.files.get('photo')
    photo = photo_file.read() if photo_file else None

    card = create_print_only_card(IdentityInput.from_form(request.form), photo)
    return jsonify({
        'ok': True,
        'card': card.to_dict(),
        'imageUrl': card.image_url,
        'pdfUrl': card.pdf_url,
        'verificationUrl': verification_url(current_app.config['APP_BASE_URL'], card.card_id),
    })
