from datetime import date

from presscard import db
from presscard.utils import isoformat_utc, parse_iso_timestamp, utcnow


class CardRecord(db.Model):
    """One issued press ID card and its lifecycle flags"""

    __tablename__ = 'card_record'

    id = db.Column(db.Integer, primary_key=True)  # insertion order
    card_id = db.Column(db.String(32), unique=True, nullable=False, index=True)
    wallet = db.Column(db.String(64), nullable=False, default='')  # '' for print-only cards

    full_name = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(100), nullable=False)
    alias = db.Column(db.String(100))

    email = db.Column(db.String(120))
    phone = db.Column(db.String(40))
    delivery_address = db.Column(db.Text)

    image_url = db.Column(db.String(500), nullable=False)
    pdf_url = db.Column(db.String(500), nullable=False)
    tx_hash = db.Column(db.String(80))
    token_id = db.Column(db.BigInteger)

    issue_date = db.Column(db.Date, nullable=False)
    expiration_date = db.Column(db.Date, nullable=False)

    printed = db.Column(db.Boolean, nullable=False, default=False)
    shipped = db.Column(db.Boolean, nullable=False, default=False)
    delivered = db.Column(db.Boolean, nullable=False, default=False)
    revoked = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Fields the admin surface may change after issuance
    ADMIN_FIELDS = ('printed', 'shipped', 'delivered', 'revoked', 'token_id')

    # JSON name -> column name
    JSON_FIELDS = {
        'cardId': 'card_id',
        'wallet': 'wallet',
        'fullName': 'full_name',
        'role': 'role',
        'alias': 'alias',
        'email': 'email',
        'phone': 'phone',
        'deliveryAddress': 'delivery_address',
        'imageUrl': 'image_url',
        'pdfUrl': 'pdf_url',
        'txHash': 'tx_hash',
        'tokenId': 'token_id',
        'issueDate': 'issue_date',
        'expirationDate': 'expiration_date',
        'printed': 'printed',
        'shipped': 'shipped',
        'delivered': 'delivered',
        'revoked': 'revoked',
        'createdAt': 'created_at',
        'updatedAt': 'updated_at',
    }

    @property
    def is_print_only(self):
        return self.wallet == ''

    def to_dict(self):
        return {
            'cardId': self.card_id,
            'wallet': self.wallet,
            'fullName': self.full_name,
            'role': self.role,
            'alias': self.alias,
            'email': self.email,
            'phone': self.phone,
            'deliveryAddress': self.delivery_address,
            'imageUrl': self.image_url,
            'pdfUrl': self.pdf_url,
            'txHash': self.tx_hash,
            'tokenId': self.token_id,
            'issueDate': self.issue_date.isoformat(),
            'expirationDate': self.expiration_date.isoformat(),
            'printed': self.printed,
            'shipped': self.shipped,
            'delivered': self.delivered,
            'revoked': self.revoked,
            'createdAt': isoformat_utc(self.created_at),
            'updatedAt': isoformat_utc(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data):
        """Build a record from its JSON form (as written by to_dict)"""
        values = {}
        for json_name, column in cls.JSON_FIELDS.items():
            if json_name in data:
                values[column] = data[json_name]
        for column in ('issue_date', 'expiration_date'):
            if isinstance(values.get(column), str):
                values[column] = date.fromisoformat(values[column][:10])
        for column in ('created_at', 'updated_at'):
            if isinstance(values.get(column), str):
                values[column] = parse_iso_timestamp(values[column])
        values['wallet'] = values.get('wallet') or ''
        return cls(**values)

    def __repr__(self):
        return f'<CardRecord {self.card_id}>'


class CardIdReservation(db.Model):
    """Card ID claimed by an issuance before any artifact is written or minted"""

    __tablename__ = 'card_id_reservation'

    id = db.Column(db.Integer, primary_key=True)
    card_id = db.Column(db.String(32), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<CardIdReservation {self.card_id}>'
