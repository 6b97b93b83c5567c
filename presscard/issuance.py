"""
Card issuance

Two single-pass flows produce a card record:

    mint_card               wallet-backed card, optionally published to IPFS
                            and minted on-chain
    create_print_only_card  card without wallet or token, for printing

Validation problems abort before anything is written. The card ID is
reserved before rendering, so concurrent issuances never share artifacts or a
mint; a template or photo problem releases the ID again. After the
artifacts are written and the record is stored the issuance counts as a
success; optional steps that failed show up as None fields in the result.
"""

from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from flask import current_app

from presscard.artifacts import write_local_outputs
from presscard.card_ids import allocator_for_mode
from presscard.card_store import card_store
from presscard.errors import ValidationError
from presscard.ledger import get_ledger_writer
from presscard.models import CardRecord
from presscard.publisher import build_token_metadata, get_content_publisher
from presscard.renderer import CardIdentity, CardRenderer, verification_url
from presscard.utils import blank_to_none, one_year_after, utc_today


@dataclass(frozen=True)
class IdentityInput:
    """Applicant data as submitted by the issuance forms"""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    alias: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    delivery_address: Optional[str] = None

    @classmethod
    def from_form(cls, form):
        return cls(
            first_name=form.get('firstName'),
            last_name=form.get('lastName'),
            alias=form.get('alias'),
            role=form.get('role'),
            email=form.get('email'),
            phone=form.get('phone'),
            delivery_address=form.get('deliveryAddress'),
        )

    @property
    def full_name(self):
        return f'{(self.first_name or "").strip()} {(self.last_name or "").strip()}'.strip()

    def missing_fields(self):
        missing = []
        if not (self.first_name or '').strip():
            missing.append('firstName')
        if not (self.last_name or '').strip():
            missing.append('lastName')
        return missing


@dataclass(frozen=True)
class PublishedArtifacts:
    """IPFS uploads of one card; each entry is None if it was skipped or failed"""

    image: object = None
    document: object = None
    metadata: object = None

    def to_dict(self):
        result = {}
        for key, content in (('ipfsImage', self.image), ('ipfsPdf', self.document), ('ipfsMetadata', self.metadata)):
            result[f'{key}Cid'] = content.cid if content else None
            result[f'{key}Url'] = content.gateway_url if content else None
        return result


@dataclass(frozen=True)
class MintResult:
    record: CardRecord
    tx_hash: str
    token_uri: str
    verification_url: str
    ipfs: PublishedArtifacts

    def to_dict(self):
        payload = {
            'ok': True,
            'card': self.record.to_dict(),
            'txHash': self.tx_hash,
            'tokenURI': self.token_uri,
            'verificationUrl': self.verification_url,
        }
        payload.update(self.ipfs.to_dict())
        return payload


def mint_card(wallet, identity, photo):
    """
    Issue a wallet-backed card.

    Args:
        wallet: owner address, stored as given
        identity: IdentityInput
        photo: raw photo bytes

    Returns:
        MintResult
    """
    missing = identity.missing_fields()
    if not (wallet or '').strip():
        missing.insert(0, 'wallet')
    if not photo:
        missing.append('photo')
    if missing:
        raise ValidationError(missing)

    config = current_app.config
    wallet = wallet.strip()
    role = blank_to_none(identity.role) or config['DEFAULT_MINT_ROLE']
    card_id = allocator_for_mode('mint', config).allocate()
    with _reservation(card_id):
        card_identity, rendered, image_url, pdf_url = _render_and_save('mint', card_id, identity, role, photo)
        verify_url = verification_url(config['APP_BASE_URL'], card_id)

        ipfs = _publish(card_identity, rendered, verify_url)
        token_uri = ipfs.metadata.uri if ipfs.metadata else pdf_url

        tx_hash = None
        ledger = get_ledger_writer()
        if ledger is None:
            current_app.logger.info(f'Ledger not configured, card {card_id} will not be minted')
        else:
            tx_hash = ledger.mint(wallet, token_uri)
            if tx_hash is None:
                current_app.logger.warning(f'Minting failed for card {card_id}, keeping local record only')

        record = card_store.add(_new_record(card_identity, identity, wallet, image_url, pdf_url, tx_hash))
    current_app.logger.info(f'Issued card {card_id} to {wallet} (tx={tx_hash}, tokenURI={token_uri})')

    return MintResult(
        record=record,
        tx_hash=tx_hash,
        token_uri=token_uri,
        verification_url=verify_url,
        ipfs=ipfs,
    )


def create_print_only_card(identity, photo):
    """Issue a card with no wallet or token; returns the stored CardRecord"""
    missing = identity.missing_fields()
    if not photo:
        missing.append('photo')
    if missing:
        raise ValidationError(missing)

    config = current_app.config
    role = blank_to_none(identity.role) or config['DEFAULT_PRINT_ROLE']
    card_id = allocator_for_mode('print', config).allocate()
    with _reservation(card_id):
        card_identity, _, image_url, pdf_url = _render_and_save('print', card_id, identity, role, photo)
        record = card_store.add(_new_record(card_identity, identity, '', image_url, pdf_url, None))
    current_app.logger.info(f'Issued print-only card {card_id}')
    return record


@contextmanager
def _reservation(card_id):
    """Release the reserved card ID if the issuance fails before its record is stored"""
    try:
        yield
    except Exception:
        current_app.logger.warning(f'Issuance of card {card_id} failed, releasing its ID')
        card_store.release(card_id)
        raise


def _render_and_save(mode, card_id, identity, role, photo):
    config = current_app.config
    issue_date = utc_today()
    card_identity = CardIdentity(
        full_name=identity.full_name,
        role=role,
        card_id=card_id,
        issue_date=issue_date,
        expiration_date=one_year_after(issue_date),
        alias=blank_to_none(identity.alias),
    )

    rendered = CardRenderer.from_config(config, mode).render(card_identity, photo)
    image_url, pdf_url = write_local_outputs(config['GENERATED_FOLDER'], config['APP_BASE_URL'], card_id, rendered)
    return card_identity, rendered, image_url, pdf_url


def _publish(card_identity, rendered, verify_url):
    publisher = get_content_publisher()
    if publisher is None:
        return PublishedArtifacts()

    card_id = card_identity.card_id
    with ThreadPoolExecutor(max_workers=2) as pool:
        image_future = pool.submit(publisher.publish, rendered.image, 'image/png', f'{card_id}.png')
        document_future = pool.submit(publisher.publish, rendered.document, 'application/pdf', f'{card_id}.pdf')
        image = image_future.result()
        document = document_future.result()

    if not (image and document):
        current_app.logger.warning(f'IPFS upload incomplete for card {card_id}, skipping metadata')
        return PublishedArtifacts(image=image, document=document)

    metadata = publisher.publish_json(
        build_token_metadata(
            full_name=card_identity.full_name,
            card_id=card_id,
            role=card_identity.role,
            issue_date=card_identity.issue_date,
            expiration_date=card_identity.expiration_date,
            image=image,
            document=document,
            external_url=verify_url,
        ),
        name=f'{card_id}.json',
    )
    if metadata is None:
        current_app.logger.warning(f'IPFS metadata upload failed for card {card_id}, token URI falls back to PDF URL')
    return PublishedArtifacts(image=image, document=document, metadata=metadata)


def _new_record(card_identity, identity, wallet, image_url, pdf_url, tx_hash):
    return CardRecord(
        card_id=card_identity.card_id,
        wallet=wallet,
        full_name=card_identity.full_name,
        role=card_identity.role,
        alias=card_identity.alias,
        email=blank_to_none(identity.email),
        phone=blank_to_none(identity.phone),
        delivery_address=blank_to_none(identity.delivery_address),
        image_url=image_url,
        pdf_url=pdf_url,
        tx_hash=tx_hash,
        token_id=None,
        issue_date=card_identity.issue_date,
        expiration_date=card_identity.expiration_date,
        printed=False,
        shipped=False,
        delivered=False,
        revoked=False,
    )
