"""
Public card routes: wallet-backed issuance and the verification lookup
behind the QR code printed on every card
"""

from flask import jsonify, request

from presscard.card_service import get_card, public_view, verification_status
from presscard.issuance import IdentityInput, mint_card
from presscard.routes import cards_bp


@cards_bp.route('/mint-card', methods=['POST'])
def mint():
    photo_file = request.files.get('photo')
    photo = photo_file.read() if photo_file else None

    result = mint_card(
        request.form.get('wallet'),
        IdentityInput.from_form(request.form),
        photo,
    )
    return jsonify(result.to_dict())


@cards_bp.route('/card/<card_id>')
def card_details(card_id):
    """
    Verification lookup for a card ID
    Anyone can scan the QR code and check the card
    """
    card = get_card(card_id)
    if card is None:
        return jsonify({'ok': False, 'error': 'Card not found'}), 404

    return jsonify({
        'ok': True,
        'card': public_view(card),
        'verification': verification_status(card),
    })
