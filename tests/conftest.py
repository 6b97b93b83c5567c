import io
import json

import pytest
from PIL import Image

from presscard import create_app, db
from presscard.publisher import PublishedContent

ADMIN_TOKEN = 'test-admin-token'


def make_image_bytes(size, color, mode='RGB', fmt='PNG'):
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, fmt)
    return buffer.getvalue()


def make_photo(size=(800, 600), color=(120, 80, 200)):
    """A valid JPEG photo"""
    return make_image_bytes(size, color, fmt='JPEG')


class FakePublisher:
    """Stands in for the IPFS publisher; fails for the given MIME types"""

    def __init__(self, fail=()):
        self.fail = set(fail)
        self.calls = []
        self.documents = []

    def publish(self, data, mime_type, name=None):
        self.calls.append((mime_type, name))
        if mime_type in self.fail:
            return None
        cid = f'bafy-{name}'
        return PublishedContent(cid=cid, gateway_url=f'https://{cid}.ipfs.test')

    def publish_json(self, document, name='metadata.json'):
        self.documents.append(document)
        return self.publish(json.dumps(document).encode('utf-8'), 'application/json', name)


class FakeLedger:
    """Stands in for the ledger writer; returns None for every call when failing"""

    def __init__(self, tx_hash='0xfeed', fail=False):
        self.tx_hash = tx_hash
        self.fail = fail
        self.minted = []
        self.revocations = []

    def mint(self, owner, token_uri):
        self.minted.append((owner, token_uri))
        return None if self.fail else self.tx_hash

    def set_revoked(self, token_id, value=True):
        self.revocations.append((token_id, value))
        return None if self.fail else self.tx_hash


@pytest.fixture
def template_dir(tmp_path):
    directory = tmp_path / 'templates'
    directory.mkdir()
    (directory / 'press-card-bg.png').write_bytes(make_image_bytes((1064, 1300), (230, 232, 236)))
    (directory / 'press-coa.png').write_bytes(make_image_bytes((300, 300), (200, 150, 0, 255), mode='RGBA'))
    return directory


@pytest.fixture
def app(tmp_path, template_dir):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'cards.db'}",
        'GENERATED_FOLDER': str(tmp_path / 'generated'),
        'CARD_TEMPLATE_DIR': str(template_dir),
        'APP_BASE_URL': 'https://press.example',
        'ADMIN_API_TOKEN': ADMIN_TOKEN,
        'IPFS_API_URL': None,
        'RPC_URL': None,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {'Authorization': f'Bearer {ADMIN_TOKEN}'}


@pytest.fixture
def publisher(app):
    fake = FakePublisher()
    app.extensions['presscard.publisher'] = fake
    return fake


@pytest.fixture
def ledger(app):
    fake = FakeLedger()
    app.extensions['presscard.ledger'] = fake
    return fake
