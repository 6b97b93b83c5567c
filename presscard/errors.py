"""
Errors raised by the card issuance pipeline.

Only the failures that must abort an issuance live here. Degradable failures
(seal asset missing, content publishing, ledger calls) are logged where they
happen and surface as missing optional data instead.
"""


class CardIssuanceError(Exception):
    """Base class for errors reported to the caller as a structured failure"""

    status_code = 500
    code = 'issuance_failed'

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_dict(self):
        return {'ok': False, 'error': self.message, 'code': self.code}


class ValidationError(CardIssuanceError):
    """Missing required fields"""

    status_code = 400
    code = 'validation_error'

    def __init__(self, missing_fields):
        self.missing_fields = list(missing_fields)
        super().__init__(f"Missing required fields: {', '.join(self.missing_fields)}")

    def to_dict(self):
        payload = super().to_dict()
        payload['missing'] = self.missing_fields
        return payload


class TemplateMissing(CardIssuanceError):
    """Card background template is missing"""

    code = 'template_missing'


class InvalidPhoto(CardIssuanceError):
    """Photo could not be decoded as an image"""

    status_code = 400
    code = 'invalid_photo'


class AllocationExhausted(CardIssuanceError):
    """Could not allocate a unique card ID"""

    status_code = 503
    code = 'allocation_exhausted'


class DuplicateCardId(CardIssuanceError):
    """Card ID already exists"""

    status_code = 409
    code = 'duplicate_card_id'
