import json

from presscard.card_store import card_store
from scripts.migration.import_cards_json import import_cards
from tests.factories import make_record


def legacy_card(card_id, **overrides):
    data = {
        'cardId': card_id,
        'wallet': '',
        'fullName': 'Grace Hopper',
        'role': 'Journalist',
        'imageUrl': f'https://press.example/generated/{card_id}.png',
        'pdfUrl': f'https://press.example/generated/{card_id}.pdf',
        'issueDate': '2025-01-05T00:00:00.000Z',
        'expirationDate': '2026-01-05T00:00:00.000Z',
        'printed': True,
        'shipped': False,
        'delivered': False,
        'revoked': False,
        'createdAt': '2025-01-05T12:00:00.000Z',
        'updatedAt': '2025-01-06T12:00:00.000Z',
    }
    data.update(overrides)
    return data


def test_import_skips_existing_cards(app, tmp_path):
    with app.app_context():
        card_store.add(make_record('1111111'))

    path = tmp_path / 'cards.json'
    path.write_text(json.dumps([
        legacy_card('1111111'),
        legacy_card(2222222),
        legacy_card(''),
        legacy_card('KAP-abc', wallet='0xAbC'),
    ]), encoding='utf-8')

    assert import_cards(app, str(path)) is True

    with app.app_context():
        assert [card.card_id for card in card_store.get_all()] == ['1111111', '2222222', 'KAP-abc']
        assert card_store.get('1111111').full_name == 'Ada Lovelace'
        imported = card_store.get('2222222')
        assert imported.printed is True
        assert imported.to_dict()['updatedAt'] == '2025-01-06T12:00:00.000000Z'
        assert card_store.get('KAP-abc').wallet == '0xAbC'


def test_import_rejects_non_list(app, tmp_path):
    path = tmp_path / 'cards.json'
    path.write_text('{"cardId": "1"}', encoding='utf-8')
    assert import_cards(app, str(path)) is False
