"""
Tests for the summary image
"""
import os
from datetime import datetime, timezone
from io import BytesIO

import pytest
from PIL import Image, ImageDraw

from countries.exceptions import SnapshotNotFound
from countries.models import Country, RefreshStatus
from countries.snapshot import (
    format_gdp,
    format_refresh_time,
    generate_summary_image,
    get_summary_image_path,
    render_summary_image,
)

REFRESHED_AT = datetime(2026, 10, 19, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def drawn_text(monkeypatch):
    """Records every string drawn onto an image"""
    lines = []
    original = ImageDraw.ImageDraw.text

    def recording_text(self, xy, text, *args, **kwargs):
        lines.append(text)
        return original(self, xy, text, *args, **kwargs)

    monkeypatch.setattr(ImageDraw.ImageDraw, 'text', recording_text)
    return lines


class TestFormatting:
    """Tests for the text helpers"""

    @pytest.mark.parametrize('value, expected', [
        (1234567.6, '$1,234,568'),
        (750000.0, '$750,000'),
        (999.4, '$999'),
        (0, 'N/A'),
        (None, 'N/A'),
    ])
    def test_format_gdp(self, value, expected):
        assert format_gdp(value) == expected

    def test_format_refresh_time(self):
        assert format_refresh_time(REFRESHED_AT) == '2026-10-19 12:30:00 UTC'

    def test_format_refresh_time_never(self):
        assert format_refresh_time(None) == 'Never'


class TestRenderSummaryImage:
    """Tests for render_summary_image"""

    def test_returns_png_of_fixed_size(self):
        status = RefreshStatus(total_countries=0, last_refreshed_at=None)

        content = render_summary_image(status, [])

        image = Image.open(BytesIO(content))
        assert image.format == 'PNG'
        assert image.size == (600, 400)

    def test_layout(self, drawn_text):
        status = RefreshStatus(total_countries=250, last_refreshed_at=REFRESHED_AT)
        top = [
            Country(name='China', estimated_gdp=2500000000.4),
            Country(name='India', estimated_gdp=1999999.5),
            Country(name='Antarctica', estimated_gdp=0),
        ]

        render_summary_image(status, top)

        assert drawn_text == [
            'Total Countries: 250',
            'Last Refresh: 2026-10-19 12:30:00 UTC',
            'Top 5 Countries by Estimated GDP (USD)',
            '1. China: $2,500,000,000',
            '2. India: $2,000,000',
            '3. Antarctica: N/A',
        ]

    def test_at_most_five_rows(self, drawn_text):
        status = RefreshStatus(total_countries=7, last_refreshed_at=REFRESHED_AT)
        top = [Country(name=f'C{i}', estimated_gdp=1000 - i) for i in range(7)]

        render_summary_image(status, top)

        ranked = [line for line in drawn_text if line[0].isdigit()]
        assert len(ranked) == 5
        assert ranked[-1] == '5. C4: $996'

    def test_missing_font_falls_back_to_default(self, settings, tmp_path):
        settings.SNAPSHOT_FONT_PATH = str(tmp_path / 'missing.ttf')
        status = RefreshStatus(total_countries=1, last_refreshed_at=REFRESHED_AT)

        content = render_summary_image(status, [Country(name='X', estimated_gdp=750000)])

        assert Image.open(BytesIO(content)).size == (600, 400)


@pytest.mark.django_db
class TestGenerateSummaryImage:
    """Tests for generate_summary_image and get_summary_image_path"""

    def test_missing_image(self):
        with pytest.raises(SnapshotNotFound):
            get_summary_image_path()

    def test_creates_directory_and_file(self, settings):
        RefreshStatus.objects.create(pk=RefreshStatus.SINGLETON_PK, total_countries=0, last_refreshed_at=REFRESHED_AT)

        path = generate_summary_image()

        assert path == settings.SUMMARY_IMAGE_PATH
        assert get_summary_image_path() == path
        assert Image.open(path).size == (600, 400)
        assert not os.path.exists(f"{path}.tmp")

    def test_overwrites_previous_image(self, settings):
        os.makedirs(os.path.dirname(settings.SUMMARY_IMAGE_PATH))
        with open(settings.SUMMARY_IMAGE_PATH, 'wb') as fh:
            fh.write(b'stale')

        generate_summary_image()

        with open(settings.SUMMARY_IMAGE_PATH, 'rb') as fh:
            assert fh.read(8) == b'\x89PNG\r\n\x1a\n'

    def test_top_five_by_estimated_gdp(self, drawn_text):
        RefreshStatus.objects.create(pk=RefreshStatus.SINGLETON_PK, total_countries=6, last_refreshed_at=REFRESHED_AT)
        for name, gdp in [('A', 10), ('B', 60), ('C', 30), ('D', 0), ('E', 50), ('F', 40)]:
            Country.objects.create(name=name, population=1, estimated_gdp=gdp)

        generate_summary_image()

        ranked = [line for line in drawn_text if line[0].isdigit()]
        assert ranked == ['1. B: $60', '2. E: $50', '3. F: $40', '4. C: $30', '5. A: $10']
        assert 'Total Countries: 6' in drawn_text

    def test_failed_write_leaves_no_temp_file(self, settings, monkeypatch):
        def disk_full(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(os, 'replace', disk_full)

        with pytest.raises(OSError):
            generate_summary_image()

        assert not os.path.exists(f"{settings.SUMMARY_IMAGE_PATH}.tmp")
        assert not os.path.exists(settings.SUMMARY_IMAGE_PATH)
