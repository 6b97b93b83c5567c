"""
Press ID Card Renderer
Composes the card raster (background, photo, seal, text, verification QR) and
wraps it in a single-page PDF of the same size.

The renderer only reads its two template assets and returns bytes; writing
the artifacts somewhere is up to the caller.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO

import qrcode
from PIL import Image, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from presscard.errors import InvalidPhoto, TemplateMissing

logger = logging.getLogger(__name__)

CARD_WIDTH = 1064
CARD_HEIGHT = 1300

PHOTO_SIZE = (570, 570)
PHOTO_POSITION = (245, 176)

SEAL_SIZE = (150, 150)
SEAL_POSITION = (70, 70)

QR_SIZE = 180
QR_POSITION = (CARD_WIDTH - QR_SIZE - 80, 1000)

COLOR_NAME = (17, 24, 39)
COLOR_ROLE = (31, 41, 55)
COLOR_SMALL = (75, 85, 99)

MIN_NAME_FONT_SIZE = 18


@dataclass(frozen=True)
class TextLayout:
    """Text block placement; y values are baselines, second of a pair applies with an alias"""

    x: int
    name_size: int
    role_size: int
    small_size: int
    name_y: int
    alias_y: int
    role_y: tuple
    id_y: tuple
    expires_y: tuple


# Wallet-backed cards use the large layout, print-only cards the compact one
MINT_LAYOUT = TextLayout(
    x=100, name_size=70, role_size=42, small_size=30,
    name_y=1050, alias_y=1100,
    role_y=(1100, 1140), id_y=(1150, 1190), expires_y=(1190, 1230),
)
PRINT_LAYOUT = TextLayout(
    x=140, name_size=38, role_size=26, small_size=20,
    name_y=1030, alias_y=1075,
    role_y=(1080, 1120), id_y=(1130, 1170), expires_y=(1170, 1210),
)

LAYOUTS = {'mint': MINT_LAYOUT, 'print': PRINT_LAYOUT}


@dataclass(frozen=True)
class CardIdentity:
    full_name: str
    role: str
    card_id: str
    issue_date: object
    expiration_date: object
    alias: str = None

    @property
    def display_alias(self):
        if self.alias and self.alias.strip():
            return self.alias.strip()
        return ''


@dataclass(frozen=True)
class RenderedCard:
    image: bytes  # PNG
    document: bytes  # PDF


# Bold face first, regular second; first family found on the system wins
FONT_FAMILIES = [
    ('arialbd.ttf', 'arial.ttf'),  # Windows
    ('LiberationSans-Bold.ttf', 'LiberationSans-Regular.ttf'),  # Linux
    ('DejaVuSans-Bold.ttf', 'DejaVuSans.ttf'),  # Linux fallback
]


@lru_cache(maxsize=32)
def load_font(size, bold=False):
    """Load a TrueType font with fallbacks, ending with Pillow's built-in font"""
    for bold_name, regular_name in FONT_FAMILIES:
        try:
            return ImageFont.truetype(bold_name if bold else regular_name, size)
        except OSError:
            continue
    logger.warning('No TrueType font found, using default font')
    return ImageFont.load_default(size=size)


def verification_url(base_url, card_id):
    return f"{base_url.rstrip('/')}/verify/{card_id}"


class CardRenderer:
    """Renders press ID cards from one background template and an optional seal"""

    def __init__(self, background_path, seal_path=None, base_url='http://localhost:5051', layout=MINT_LAYOUT):
        self.background_path = background_path
        self.seal_path = seal_path
        self.base_url = base_url
        self.layout = layout

    @classmethod
    def from_config(cls, config, mode):
        template_dir = config['CARD_TEMPLATE_DIR']
        return cls(
            background_path=os.path.join(template_dir, config['CARD_BACKGROUND']),
            seal_path=os.path.join(template_dir, config['CARD_SEAL']) if config.get('CARD_SEAL') else None,
            base_url=config['APP_BASE_URL'],
            layout=LAYOUTS[mode],
        )

    def render(self, identity, photo):
        """
        Render the card for identity with the given photo bytes.

        Args:
            identity: CardIdentity
            photo: raw image bytes (any format Pillow decodes)

        Returns:
            RenderedCard with PNG and PDF bytes
        """
        card = self._load_background()
        card.alpha_composite(self._prepare_photo(photo), PHOTO_POSITION)

        seal = self._load_seal()
        if seal is not None:
            card.alpha_composite(seal, SEAL_POSITION)

        self._draw_text(card, identity)
        card.alpha_composite(self._make_qr(verification_url(self.base_url, identity.card_id)), QR_POSITION)

        image = card.convert('RGB')
        return RenderedCard(image=encode_png(image), document=build_pdf(image, identity.card_id))

    def _load_background(self):
        if not os.path.exists(self.background_path):
            raise TemplateMissing(f'Card background template not found: {self.background_path}')
        try:
            with Image.open(self.background_path) as background:
                return background.convert('RGBA').resize((CARD_WIDTH, CARD_HEIGHT), Image.Resampling.LANCZOS)
        except (UnidentifiedImageError, OSError) as exc:
            raise TemplateMissing(f'Card background template unreadable: {self.background_path}') from exc

    def _load_seal(self):
        if not self.seal_path or not os.path.exists(self.seal_path):
            logger.info(f'Seal asset not found, skipping seal layer: {self.seal_path}')
            return None
        try:
            with Image.open(self.seal_path) as seal:
                return seal.convert('RGBA').resize(SEAL_SIZE, Image.Resampling.LANCZOS)
        except (UnidentifiedImageError, OSError) as exc:
            logger.warning(f'Seal asset unreadable, skipping seal layer: {exc}')
            return None

    def _prepare_photo(self, photo):
        """Cover-crop the photo to the photo slot, keeping the centre"""
        if not photo:
            raise InvalidPhoto('Photo is empty')
        try:
            with Image.open(BytesIO(photo)) as source:
                source.load()
                upright = ImageOps.exif_transpose(source)
                return ImageOps.fit(
                    upright.convert('RGBA'),
                    PHOTO_SIZE,
                    method=Image.Resampling.LANCZOS,
                    centering=(0.5, 0.5),
                )
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise InvalidPhoto(f'Photo could not be decoded: {exc}') from exc

    def _draw_text(self, card, identity):
        layout = self.layout
        draw = ImageDraw.Draw(card)
        alias = identity.display_alias
        row = 1 if alias else 0

        # Keep the name clear of the QR code
        name_font = fit_font(identity.full_name, layout.name_size, QR_POSITION[0] - layout.x - 24, bold=True)
        role_font = load_font(layout.role_size)
        small_font = load_font(layout.small_size)

        draw_baseline_text(draw, (layout.x, layout.name_y), identity.full_name, name_font, COLOR_NAME)
        if alias:
            draw_baseline_text(draw, (layout.x, layout.alias_y), f'"{alias}"', role_font, COLOR_ROLE)
        draw_baseline_text(draw, (layout.x, layout.role_y[row]), identity.role, role_font, COLOR_ROLE)
        draw_baseline_text(draw, (layout.x, layout.id_y[row]), f'ID: {identity.card_id}', small_font, COLOR_SMALL)
        draw_baseline_text(
            draw,
            (layout.x, layout.expires_y[row]),
            f'EXPIRES: {_format_date(identity.expiration_date)}',
            small_font,
            COLOR_SMALL,
        )

    def _make_qr(self, url):
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=0,
        )
        qr.add_data(url)
        qr.make(fit=True)

        qr_img = qr.make_image(fill_color='black', back_color='white')
        qr_img = qr_img.resize((QR_SIZE, QR_SIZE), Image.Resampling.NEAREST)
        return qr_img.convert('RGBA')


def fit_font(text, size, max_width, bold=False):
    """Largest font no bigger than size that fits text in max_width"""
    font = load_font(size, bold)
    while size > MIN_NAME_FONT_SIZE and font.getlength(text) > max_width:
        size -= 2
        font = load_font(size, bold)
    return font


def draw_baseline_text(draw, position, text, font, fill):
    x, baseline = position
    ascent, _ = font.getmetrics()
    draw.text((x, baseline - ascent), text, fill=fill, font=font)


def encode_png(image):
    buffer = BytesIO()
    image.save(buffer, 'PNG')
    return buffer.getvalue()


def build_pdf(image, card_id):
    """Single page exactly the size of the card with the raster drawn full-bleed"""
    buffer = BytesIO()
    # invariant mode drops timestamps and random IDs so output is reproducible
    pdf = canvas.Canvas(buffer, pagesize=(CARD_WIDTH, CARD_HEIGHT), invariant=1)
    pdf.setTitle(f'Press ID {card_id}')
    pdf.drawImage(ImageReader(image), 0, 0, width=CARD_WIDTH, height=CARD_HEIGHT)
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def _format_date(value):
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)
