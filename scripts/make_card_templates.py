"""
Generate placeholder card templates (background and seal)
Useful for local development when the designed artwork is not available.

Usage:
    python scripts/make_card_templates.py [output_dir]
"""

import os
import sys

from PIL import Image, ImageDraw

from presscard.renderer import (
    CARD_HEIGHT, CARD_WIDTH, PHOTO_POSITION, PHOTO_SIZE, SEAL_SIZE, load_font,
)

COLOR_TOP = (236, 240, 245)
COLOR_BOTTOM = (203, 213, 225)
COLOR_BAND = (17, 24, 39)
COLOR_SEAL = (180, 140, 40)


def draw_gradient_background(draw, width, height, color1, color2):
    """Draw a smooth vertical gradient with easing"""
    for y in range(height):
        ratio = y / height
        # Easing function for smoother gradient
        ratio = ratio * ratio * (3 - 2 * ratio)
        r = int(color1[0] * (1 - ratio) + color2[0] * ratio)
        g = int(color1[1] * (1 - ratio) + color2[1] * ratio)
        b = int(color1[2] * (1 - ratio) + color2[2] * ratio)
        draw.rectangle([0, y, width, y + 1], fill=(r, g, b))


def make_background():
    img = Image.new('RGB', (CARD_WIDTH, CARD_HEIGHT))
    draw = ImageDraw.Draw(img)
    draw_gradient_background(draw, CARD_WIDTH, CARD_HEIGHT, COLOR_TOP, COLOR_BOTTOM)

    # Header band and title
    draw.rectangle([0, 0, CARD_WIDTH, 40], fill=COLOR_BAND)
    draw.text((CARD_WIDTH // 2, 120), "PRESS", fill=COLOR_BAND, font=load_font(64, bold=True), anchor='mm')

    # Photo frame
    x, y = PHOTO_POSITION
    w, h = PHOTO_SIZE
    draw.rounded_rectangle([x - 8, y - 8, x + w + 8, y + h + 8], radius=12, outline=COLOR_BAND, width=4)

    # Footer band
    draw.rectangle([0, CARD_HEIGHT - 30, CARD_WIDTH, CARD_HEIGHT], fill=COLOR_BAND)
    return img


def make_seal():
    size = SEAL_SIZE[0] * 2
    img = Image.new('RGBA', (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.ellipse([4, 4, size - 4, size - 4], fill=(*COLOR_SEAL, 230), outline=COLOR_BAND, width=6)
    draw.ellipse([30, 30, size - 30, size - 30], outline=(255, 255, 255, 200), width=3)
    draw.text((size // 2, size // 2), "COA", fill=(255, 255, 255, 255), font=load_font(60, bold=True), anchor='mm')
    return img


def main(output_dir):
    os.makedirs(output_dir, exist_ok=True)
    background_path = os.path.join(output_dir, 'press-card-bg.png')
    seal_path = os.path.join(output_dir, 'press-coa.png')

    make_background().save(background_path, 'PNG')
    print(f"[OK] Wrote {background_path}")
    make_seal().save(seal_path, 'PNG')
    print(f"[OK] Wrote {seal_path}")


if __name__ == "__main__":
    default_dir = os.path.join(os.path.dirname(__file__), '..', 'presscard', 'static', 'templates')
    main(sys.argv[1] if len(sys.argv) > 1 else default_dir)
