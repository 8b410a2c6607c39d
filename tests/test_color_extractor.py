"""
Tests for dominant color sampling.
"""
from io import BytesIO

from PIL import Image

from siteshot.colors import FALLBACK_COLORS, ColorSample, brighten, extract_colors

from conftest import make_broken_png, make_png


class TestExtractColors:
    def test_solid_image_primary_is_its_color(self):
        sample = extract_colors(make_png(300, 200, (10, 120, 240)))
        assert sample.primary == (10, 120, 240)

    def test_secondary_is_brightened_and_clamped(self):
        sample = extract_colors(make_png(64, 64, (10, 120, 240)), brighten_delta=40)
        assert sample.secondary == (50, 160, 255)
        assert all(0 <= c <= 255 for c in sample.secondary)

    def test_deterministic(self):
        img = Image.new("RGB", (400, 300))
        for x in range(400):
            for y in range(0, 300, 7):
                img.putpixel((x, y), (x % 256, y % 256, (x * y) % 256))
        buffer = BytesIO()
        img.save(buffer, format="PNG")
        data = buffer.getvalue()

        assert extract_colors(data) == extract_colors(data)

    def test_half_and_half_averages(self):
        img = Image.new("RGB", (100, 100), (0, 0, 0))
        img.paste((200, 100, 50), (0, 0, 50, 100))
        buffer = BytesIO()
        img.save(buffer, format="PNG")

        sample = extract_colors(buffer.getvalue())
        for got, expected in zip(sample.primary, (100, 50, 25)):
            assert abs(got - expected) <= 2

    def test_undecodable_bytes_return_fallback(self):
        assert extract_colors(b"definitely not an image") is FALLBACK_COLORS

    def test_empty_bytes_return_fallback(self):
        assert extract_colors(b"") is FALLBACK_COLORS

    def test_corrupt_pixel_data_returns_fallback(self):
        assert extract_colors(make_broken_png()) is FALLBACK_COLORS


class TestColorSample:
    def test_fallback_is_named_brand_gradient(self):
        assert FALLBACK_COLORS.to_hex() == {"primary": "#667eea", "secondary": "#764ba2"}

    def test_brighten_clamps_both_ends(self):
        assert brighten((250, 0, 128), 10) == (255, 10, 138)
        assert brighten((5, 200, 0), -10) == (0, 190, 0)

    def test_to_hex(self):
        assert ColorSample((0, 0, 0), (255, 255, 255)).to_hex() == {
            "primary": "#000000",
            "secondary": "#ffffff",
        }
