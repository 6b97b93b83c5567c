"""
Content publishing to IPFS

Uploads card artifacts to an IPFS node through its HTTP API and returns the
content ID with a gateway mirror URL. Publishing is optional: failures are
logged and reported as None, never raised.
"""

import json
import logging
import threading
from dataclasses import dataclass

import requests

from presscard.utils import app_singleton

logger = logging.getLogger(__name__)

EXTENSIONS = {
    'image/png': 'png',
    'application/pdf': 'pdf',
    'application/json': 'json',
}


@dataclass(frozen=True)
class PublishedContent:
    cid: str
    gateway_url: str

    @property
    def uri(self):
        return f'ipfs://{self.cid}'

    def to_dict(self):
        return {'cid': self.cid, 'gatewayUrl': self.gateway_url}


class ContentPublisher:
    """Client for an IPFS node's /api/v0/add endpoint"""

    def __init__(self, api_url, gateway_host='storacha.link', token=None, timeout=30.0):
        self.api_url = api_url.rstrip('/')
        self.gateway_host = gateway_host
        self.token = token
        self.timeout = timeout
        self._session = None
        self._session_lock = threading.Lock()

    @classmethod
    def from_config(cls, config):
        if not config.get('IPFS_API_URL'):
            return None
        return cls(
            api_url=config['IPFS_API_URL'],
            gateway_host=config.get('IPFS_GATEWAY_HOST') or 'storacha.link',
            token=config.get('IPFS_API_TOKEN'),
            timeout=config.get('IPFS_TIMEOUT', 30.0),
        )

    @property
    def session(self):
        if self._session is None:
            with self._session_lock:
                if self._session is None:
                    session = requests.Session()
                    if self.token:
                        session.headers['Authorization'] = f'Bearer {self.token}'
                    self._session = session
        return self._session

    def gateway_url(self, cid):
        return f'https://{cid}.ipfs.{self.gateway_host}'

    def publish(self, data, mime_type, name=None):
        """Upload bytes; returns PublishedContent, or None if anything went wrong"""
        filename = name or f"upload.{EXTENSIONS.get(mime_type, 'bin')}"
        try:
            response = self.session.post(
                f'{self.api_url}/api/v0/add',
                params={'cid-version': 1, 'pin': 'true'},
                files={'file': (filename, data, mime_type)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            cid = response.json()['Hash']
        except requests.exceptions.RequestException as exc:
            logger.error(f'IPFS upload of {filename} failed: {exc}')
            return None
        except (ValueError, KeyError, TypeError) as exc:
            logger.error(f'IPFS upload of {filename} returned an unexpected response: {exc}')
            return None

        logger.info(f'Published {filename} to IPFS as {cid}')
        return PublishedContent(cid=cid, gateway_url=self.gateway_url(cid))

    def publish_json(self, document, name='metadata.json'):
        data = json.dumps(document, indent=2, ensure_ascii=False).encode('utf-8')
        return self.publish(data, 'application/json', name=name)


def build_token_metadata(full_name, card_id, role, issue_date, expiration_date,
                         image, document, external_url):
    """NFT metadata document pointing at the published image and PDF"""
    return {
        'name': f'Kaprika Press ID – {full_name}',
        'description': 'Official Kaprika Press ID card.',
        'image': image.uri,
        'animation_url': document.uri,
        'external_url': external_url,
        'attributes': [
            {'trait_type': 'Card ID', 'value': card_id},
            {'trait_type': 'Role', 'value': role},
            {'trait_type': 'Issued', 'value': _iso(issue_date)},
            {'trait_type': 'Expires', 'value': _iso(expiration_date)},
        ],
    }


def get_content_publisher():
    """Process-wide publisher for the current app, or None when IPFS is not configured"""
    return app_singleton('publisher', ContentPublisher.from_config)


def _iso(value):
    return value.isoformat() if hasattr(value, 'isoformat') else str(value)
