"""Tests for QR rendering of tickets."""

import io

from PIL import Image

from stampede.tokens import TokenCodec, render_qr_png

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def test_renders_png(codec: TokenCodec):
    png = render_qr_png(codec.issue("Ada Lovelace", "a@x.io"))

    assert png.startswith(PNG_MAGIC)


def test_image_is_square(codec: TokenCodec):
    png = render_qr_png(codec.issue("Ada Lovelace", "a@x.io"), box_size=4, border=2)

    image = Image.open(io.BytesIO(png))
    width, height = image.size
    assert width == height
    # Dimensions are whole modules
    assert width % 4 == 0


def test_larger_box_size_gives_larger_image(codec: TokenCodec):
    payload = codec.issue("Ada Lovelace", "a@x.io")

    small = Image.open(io.BytesIO(render_qr_png(payload, box_size=2)))
    large = Image.open(io.BytesIO(render_qr_png(payload, box_size=8)))

    assert large.size[0] == small.size[0] * 4
