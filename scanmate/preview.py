"""
Page previews: a scrollable-list style strip of the scanned pages
"""

import logging

import cv2
import numpy as np

from .config import APP_TITLE, PREVIEW_WIDTH
from .storage import ContentResolver

logger = logging.getLogger(__name__)

PAGE_SPACING = 8
BACKGROUND = (255, 255, 255)


def load_thumbnail(reference, width=PREVIEW_WIDTH, resolver=None):
    """
    Decode a page reference and scale it to the preview width

    Returns:
        BGR image, or None if the bytes are not a decodable image
    """
    resolver = resolver or ContentResolver()
    with resolver.open_input_stream(reference) as stream:
        data = np.frombuffer(stream.read(), dtype=np.uint8)
    if data.size == 0:
        return None
    image = cv2.imdecode(data, cv2.IMREAD_COLOR)
    if image is None:
        return None
    h, w = image.shape[:2]
    height = max(int(round(h * width / float(w))), 1)
    return cv2.resize(image, (width, height), interpolation=cv2.INTER_AREA)


def render_page_strip(pages, width=PREVIEW_WIDTH, resolver=None, spacing=PAGE_SPACING):
    """
    Stack page thumbnails vertically, filling each to the full width

    Pages that cannot be decoded are skipped with a warning.

    Returns:
        BGR image, or None when there is nothing to show
    """
    thumbnails = []
    for reference in pages:
        try:
            thumb = load_thumbnail(reference, width, resolver)
        except OSError as e:
            logger.warning("Cannot preview %s: %s", reference, e)
            continue
        if thumb is None:
            logger.warning("Cannot preview %s: not an image", reference)
            continue
        thumbnails.append(thumb)

    if not thumbnails:
        return None

    total_height = sum(t.shape[0] for t in thumbnails) + spacing * (len(thumbnails) - 1)
    strip = np.full((total_height, width, 3), BACKGROUND, dtype=np.uint8)
    y = 0
    for thumb in thumbnails:
        strip[y:y + thumb.shape[0], :] = thumb
        y += thumb.shape[0] + spacing
    return strip


def show_preview(strip, title=APP_TITLE):
    """Display a strip in an OpenCV window until a key is pressed"""
    if strip is None:
        print("No pages to preview")
        return
    cv2.imshow(title, strip)
    print("Press any key to close the preview...")
    cv2.waitKey(0)
    cv2.destroyAllWindows()
