import threading

import pytest

from presscard import db
from presscard.card_store import card_store
from presscard.errors import DuplicateCardId
from tests.factories import make_record


def test_add_keeps_insertion_order(app):
    with app.app_context():
        for card_id in ('3000000', '1000000', '2000000'):
            card_store.add(make_record(card_id))

        assert [card.card_id for card in card_store.get_all()] == ['3000000', '1000000', '2000000']
        assert card_store.count() == 3
        assert card_store.existing_ids() == {'1000000', '2000000', '3000000'}


def test_add_defaults_flags_and_timestamps(app):
    with app.app_context():
        record = card_store.add(make_record('1234567'))

        assert record.printed is False
        assert record.shipped is False
        assert record.delivered is False
        assert record.revoked is False
        assert record.created_at is not None
        assert record.updated_at == record.created_at


def test_update_merges_without_clobbering(app):
    with app.app_context():
        before = card_store.add(make_record('1234567', shipped=False, printed=False))
        previous_updated_at = before.updated_at

        updated = card_store.update('1234567', {'printed': True})

        assert updated.printed is True
        assert updated.shipped is False
        assert updated.full_name == 'Ada Lovelace'
        assert updated.updated_at > previous_updated_at


def test_update_timestamps_strictly_increase(app):
    with app.app_context():
        card_store.add(make_record('1234567'))
        stamps = [card_store.update('1234567', {'printed': flag}).updated_at for flag in (True, False, True)]

        assert stamps[0] < stamps[1] < stamps[2]


def test_update_missing_card_leaves_collection_unchanged(app):
    with app.app_context():
        for card_id in ('1111111', '2222222'):
            card_store.add(make_record(card_id))
        before = [card.to_dict() for card in card_store.get_all()]

        assert card_store.update('9999999', {'revoked': True}) is None

        db.session.expire_all()
        assert [card.to_dict() for card in card_store.get_all()] == before


def test_update_rejects_identity_fields(app):
    with app.app_context():
        card_store.add(make_record('1234567'))

        with pytest.raises(ValueError):
            card_store.update('1234567', {'card_id': '7654321'})
        with pytest.raises(ValueError):
            card_store.update('1234567', {'no_such_field': 1})


def test_duplicate_card_id_is_rejected(app):
    with app.app_context():
        card_store.add(make_record('1234567'))

        with pytest.raises(DuplicateCardId):
            card_store.add(make_record('1234567', full_name='Someone Else'))

        assert card_store.count() == 1
        assert card_store.get('1234567').full_name == 'Ada Lovelace'


def test_concurrent_adds_keep_both_records(app):
    """Two writers adding at the same time must not lose either card"""
    barrier = threading.Barrier(2)
    errors = []

    def add(card_id):
        try:
            with app.app_context():
                barrier.wait()
                card_store.add(make_record(card_id))
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=add, args=(card_id,)) for card_id in ('5550001', '5550002')]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    with app.app_context():
        assert card_store.existing_ids() == {'5550001', '5550002'}


def test_concurrent_updates_do_not_lose_fields(app):
    with app.app_context():
        card_store.add(make_record('1234567'))

    barrier = threading.Barrier(2)

    def update(field):
        with app.app_context():
            barrier.wait()
            card_store.update('1234567', {field: True})

    threads = [threading.Thread(target=update, args=(field,)) for field in ('printed', 'shipped')]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    with app.app_context():
        card = card_store.get('1234567')
        assert card.printed is True
        assert card.shipped is True


def test_reserve_claims_an_id_once(app):
    with app.app_context():
        assert card_store.reserve('KAP-abc') is True
        assert card_store.reserve('KAP-abc') is False
        assert card_store.existing_ids() == {'KAP-abc'}

        card_store.release('KAP-abc')
        assert card_store.existing_ids() == set()
        assert card_store.reserve('KAP-abc') is True


def test_update_rejects_non_column_attributes(app):
    with app.app_context():
        card_store.add(make_record('1234567'))

        for name in ('to_dict', 'query', 'is_print_only'):
            with pytest.raises(ValueError):
                card_store.update('1234567', {name: 'x'})


def test_failed_update_leaves_session_usable(app):
    with app.app_context():
        card_store.add(make_record('1234567'))

        with pytest.raises(Exception):
            card_store.update('1234567', {'token_id': 2 ** 70})

        updated = card_store.update('1234567', {'printed': True})
        assert updated.printed is True
        assert updated.token_id is None
