# countries/snapshot.py
import logging
import os
from datetime import timezone
from io import BytesIO

from django.conf import settings
from PIL import Image, ImageDraw, ImageFont

from .exceptions import SnapshotNotFound
from .models import Country, RefreshStatus

logger = logging.getLogger('countries')

IMAGE_SIZE = (600, 400)
TOP_N = 5


def get_summary_image_path():
    """Returns the path of the current summary image, or raises SnapshotNotFound."""
    path = settings.SUMMARY_IMAGE_PATH
    if not os.path.isfile(path):
        logger.warning(f"Summary image not found at {path}")
        raise SnapshotNotFound()
    return path


def format_gdp(value):
    # Zero means no usable exchange rate was found for the country.
    if not value:
        return "N/A"
    return f"${value:,.0f}"


def format_refresh_time(value):
    if value is None:
        return "Never"
    return value.astimezone(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')


def _load_font(size):
    font_path = settings.SNAPSHOT_FONT_PATH
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError:
            logger.warning(f"Font not found at {font_path}. Falling back to default font.")
    return ImageFont.load_default(size=size)


# ==============================================================================
# IMAGE GENERATION LOGIC
# ==============================================================================

def render_summary_image(status, top_countries):
    """
    Draws the summary PNG and returns its bytes.

    `status` needs `total_countries` and `last_refreshed_at`; `top_countries`
    is an ordered sequence of Country objects, of which at most five are drawn.
    """
    img = Image.new('RGB', IMAGE_SIZE, color='white')
    d = ImageDraw.Draw(img)

    text_font = _load_font(20)
    title_font = _load_font(22)
    row_font = _load_font(18)

    d.text((50, 40), f"Total Countries: {status.total_countries}", fill=(0, 0, 0), font=text_font)
    d.text((50, 70), f"Last Refresh: {format_refresh_time(status.last_refreshed_at)}", fill=(0, 0, 0), font=text_font)
    d.text((50, 130), "Top 5 Countries by Estimated GDP (USD)", fill=(0, 0, 0), font=title_font)

    y_pos = 170
    for rank, country in enumerate(top_countries[:TOP_N], start=1):
        d.text((60, y_pos), f"{rank}. {country.name}: {format_gdp(country.estimated_gdp)}", fill=(20, 20, 20), font=row_font)
        y_pos += 30

    buffer = BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


def generate_summary_image():
    """
    Renders the summary from the stored status and top countries and writes it
    to settings.SUMMARY_IMAGE_PATH, replacing any previous image.
    """
    logger.debug("Starting summary image generation...")
    status = RefreshStatus.objects.filter(pk=RefreshStatus.SINGLETON_PK).first()
    if status is None:
        status = RefreshStatus(total_countries=0, last_refreshed_at=None)
    top_countries = list(Country.objects.order_by('-estimated_gdp', 'id')[:TOP_N])

    content = render_summary_image(status, top_countries)

    path = settings.SUMMARY_IMAGE_PATH
    os.makedirs(os.path.dirname(path), exist_ok=True)
    # Written next to the target and swapped in, so readers never see half a file.
    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, 'wb') as fh:
            fh.write(content)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise

    logger.info(f"Summary image successfully generated and saved to {path}")
    return path
