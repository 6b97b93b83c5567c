"""
Card administration and verification

Reads for the verification page and the admin list, and the admin update that
toggles lifecycle flags or attaches a token ID. Revoking a card with a known
token also asks the ledger to revoke it; the local flag stays set whether or
not that call succeeds.
"""

from flask import current_app

from presscard.card_store import card_store
from presscard.ledger import get_ledger_writer
from presscard.models import CardRecord
from presscard.utils import utc_today

# Fields shown on the public verification page
PUBLIC_FIELDS = (
    'cardId', 'wallet', 'fullName', 'role', 'alias', 'imageUrl', 'pdfUrl',
    'txHash', 'tokenId', 'issueDate', 'expirationDate',
    'printed', 'shipped', 'delivered', 'revoked',
)

_FLAG_FIELDS = ('printed', 'shipped', 'delivered', 'revoked')

# token_id is a signed 64-bit column
MAX_TOKEN_ID = 2 ** 63 - 1


def list_cards():
    return card_store.get_all()


def get_card(card_id):
    return card_store.get(card_id)


def parse_admin_updates(payload):
    """
    Pick the admin-editable fields out of a JSON payload.

    Flags are taken only when they are real booleans; tokenId only when it is
    an integer or null. Anything else is ignored, except an integer tokenId
    outside 0..MAX_TOKEN_ID, which raises ValueError.
    """
    updates = {}
    for name in _FLAG_FIELDS:
        if isinstance(payload.get(name), bool):
            updates[name] = payload[name]
    if 'tokenId' in payload:
        token_id = payload['tokenId']
        if token_id is None:
            updates['token_id'] = None
        elif isinstance(token_id, int) and not isinstance(token_id, bool):
            if not 0 <= token_id <= MAX_TOKEN_ID:
                raise ValueError(f'tokenId must be between 0 and {MAX_TOKEN_ID}')
            updates['token_id'] = token_id
    return updates


def patch_card(card_id, updates):
    """
    Apply admin updates to a card.

    Args:
        card_id: card to update
        updates: subset of printed, shipped, delivered, revoked, token_id

    Returns:
        The updated CardRecord, or None if the card does not exist
    """
    not_editable = set(updates) - set(CardRecord.ADMIN_FIELDS)
    if not_editable:
        raise ValueError(f"Fields not editable by admin: {', '.join(sorted(not_editable))}")

    record = card_store.update(card_id, updates)
    if record is None:
        current_app.logger.info(f'Update for unknown card {card_id}')
        return None

    current_app.logger.info(f'Card {card_id} updated: {updates}')
    if updates.get('revoked') is True and record.token_id is not None:
        revoke_on_ledger(record)
    return record


def revoke_on_ledger(record):
    """Best-effort on-chain revocation; returns the transaction hash or None"""
    ledger = get_ledger_writer()
    if ledger is None:
        current_app.logger.warning(f'Ledger not configured, token {record.token_id} of card {record.card_id} not revoked on-chain')
        return None

    tx_hash = ledger.set_revoked(record.token_id, True)
    if tx_hash is None:
        current_app.logger.error(f'On-chain revoke failed for token {record.token_id} (card {record.card_id}), local record stays revoked')
    return tx_hash


def verification_status(record, today=None):
    """Validity of a card as shown to whoever scans its QR code"""
    today = today or utc_today()
    expired = record.expiration_date < today
    if record.revoked:
        status = 'revoked'
    elif expired:
        status = 'expired'
    else:
        status = 'valid'
    return {
        'status': status,
        'valid': status == 'valid',
        'expired': expired,
        'printOnly': record.is_print_only,
    }


def public_view(record):
    data = record.to_dict()
    return {name: data[name] for name in PUBLIC_FIELDS}
