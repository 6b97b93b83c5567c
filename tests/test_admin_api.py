import io

import pytest

from presscard.card_store import card_store
from tests.conftest import FakeLedger, make_photo
from tests.factories import make_record


def seed(app, *card_ids):
    with app.app_context():
        for card_id in card_ids:
            card_store.add(make_record(card_id))


def patch(client, headers, payload):
    return client.patch('/api/admin/cards', json=payload, headers=headers)


def test_admin_requires_token(client):
    response = client.get('/api/admin/cards')
    assert response.status_code == 401
    assert response.get_json()['ok'] is False

    wrong = client.get('/api/admin/cards', headers={'Authorization': 'Bearer nope'})
    assert wrong.status_code == 401


def test_admin_disabled_without_configured_token(app, client, admin_headers):
    app.config['ADMIN_API_TOKEN'] = None
    assert client.get('/api/admin/cards', headers=admin_headers).status_code == 401


def test_list_cards_in_insertion_order(app, client, admin_headers):
    seed(app, '3000000', '1000000')

    response = client.get('/api/admin/cards', headers=admin_headers)

    assert response.status_code == 200
    cards = response.get_json()['cards']
    assert [card['cardId'] for card in cards] == ['3000000', '1000000']
    assert 'createdAt' in cards[0] and 'updatedAt' in cards[0]


def test_patch_toggles_flags(app, client, admin_headers):
    seed(app, '1234567')

    response = patch(client, admin_headers, {'cardId': '1234567', 'printed': True, 'shipped': 'yes'})

    assert response.status_code == 200
    card = response.get_json()['card']
    assert card['printed'] is True
    assert card['shipped'] is False
    assert card['updatedAt'] > card['createdAt']


def test_attach_token_then_revoke_on_ledger(app, client, admin_headers, ledger):
    seed(app, '1234567')

    attached = patch(client, admin_headers, {'cardId': '1234567', 'tokenId': 42})
    assert attached.get_json()['card']['tokenId'] == 42
    assert ledger.revocations == []

    revoked = patch(client, admin_headers, {'cardId': '1234567', 'revoked': True})

    assert revoked.status_code == 200
    assert revoked.get_json()['card']['revoked'] is True
    assert ledger.revocations == [(42, True)]


def test_revoke_without_token_stays_local(app, client, admin_headers, ledger):
    seed(app, '1234567')

    response = patch(client, admin_headers, {'cardId': '1234567', 'revoked': True})

    assert response.get_json()['card']['revoked'] is True
    assert ledger.revocations == []


def test_revoke_survives_ledger_failure(app, client, admin_headers):
    failing = FakeLedger(fail=True)
    app.extensions['presscard.ledger'] = failing
    seed(app, '1234567')
    patch(client, admin_headers, {'cardId': '1234567', 'tokenId': 7})

    response = patch(client, admin_headers, {'cardId': '1234567', 'revoked': True})

    assert response.status_code == 200
    assert response.get_json()['card']['revoked'] is True
    assert failing.revocations == [(7, True)]
    with app.app_context():
        assert card_store.get('1234567').revoked is True


def test_patch_unknown_card(app, client, admin_headers):
    seed(app, '1234567')

    response = patch(client, admin_headers, {'cardId': '7654321', 'printed': True})

    assert response.status_code == 404
    with app.app_context():
        assert card_store.get('1234567').printed is False


def test_patch_requires_card_id(client, admin_headers):
    response = patch(client, admin_headers, {'printed': True})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'cardId is required'


def test_print_card_endpoint(app, client, admin_headers):
    response = client.post(
        '/api/admin/print-card',
        data={
            'firstName': 'Ada',
            'lastName': 'Lovelace',
            'deliveryAddress': '12 St James Sq, London',
            'photo': (io.BytesIO(make_photo()), 'ada.jpg'),
        },
        headers=admin_headers,
        content_type='multipart/form-data',
    )

    assert response.status_code == 200
    body = response.get_json()
    card = body['card']
    assert card['wallet'] == ''
    assert card['role'] == 'Journalist'
    assert card['deliveryAddress'] == '12 St James Sq, London'
    assert card['txHash'] is None
    assert body['imageUrl'] == card['imageUrl']
    assert body['verificationUrl'] == f"https://press.example/verify/{card['cardId']}"
    assert client.get(f"/generated/{card['cardId']}.png").status_code == 200


def test_print_card_requires_admin(client):
    response = client.post('/api/admin/print-card', data={'firstName': 'Ada'})
    assert response.status_code == 401


def test_patch_rejects_non_object_body(client, admin_headers):
    response = patch(client, admin_headers, [1, 2])

    assert response.status_code == 400
    assert response.get_json() == {'ok': False, 'error': 'Request body must be a JSON object'}


@pytest.mark.parametrize('token_id', [2 ** 70, 2 ** 63, -1])
def test_patch_rejects_token_id_out_of_range(app, client, admin_headers, token_id):
    seed(app, '1234567')

    response = patch(client, admin_headers, {'cardId': '1234567', 'tokenId': token_id, 'printed': True})

    assert response.status_code == 400
    assert 'tokenId' in response.get_json()['error']
    with app.app_context():
        card = card_store.get('1234567')
        assert card.token_id is None
        assert card.printed is False

    ok = patch(client, admin_headers, {'cardId': '1234567', 'tokenId': 2 ** 63 - 1})
    assert ok.status_code == 200
    assert ok.get_json()['card']['tokenId'] == 2 ** 63 - 1
