"""
Document processing module
Handles page detection, perspective correction, enhancement and PDF assembly
for the gallery scan engine
"""

import io
import logging

import cv2
import numpy as np
from PIL import Image, ImageOps
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .config import JPEG_QUALITY, PDF_DPI

logger = logging.getLogger(__name__)

ENHANCEMENT_MODES = ("auto", "text", "bw", "color", "none")


def load_image(path):
    """
    Load a gallery image as a BGR array, honouring its EXIF orientation

    Raises:
        OSError: if the file is missing or not a readable image
    """
    with Image.open(path) as pil:
        pil = ImageOps.exif_transpose(pil)
        rgb = np.array(pil.convert("RGB"))
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)


def encode_jpeg(image, quality=JPEG_QUALITY):
    """Encode a BGR or grayscale image as JPEG bytes"""
    ok, buf = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise OSError("Could not encode page as JPEG")
    return buf.tobytes()


def detect_document(image, sensitivity=0.7):
    """
    Detect document in image using edge detection and contour analysis

    Args:
        image: Input BGR image
        sensitivity: Detection sensitivity (0.0-1.0, higher = more sensitive)

    Returns:
        tuple: (document_image, document_corners) if detected, else (None, None)
    """
    if image is None:
        return None, None

    if len(image.shape) == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    else:
        gray = image.copy()

    # Blur and apply edge detection
    blurred = cv2.GaussianBlur(gray, (5, 5), 0)
    edges = cv2.Canny(blurred, 75, 200)

    # Dilate edges to close gaps
    dilated = cv2.dilate(edges, np.ones((3, 3)), iterations=1)

    contours, _ = cv2.findContours(dilated, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)
    contours = sorted(contours, key=cv2.contourArea, reverse=True)

    image_area = gray.shape[0] * gray.shape[1]
    # Lower threshold with higher sensitivity
    min_area_ratio = 0.03 * (1.0 - sensitivity)

    for contour in contours:
        if cv2.contourArea(contour) < (image_area * min_area_ratio):
            continue

        epsilon = 0.02 * cv2.arcLength(contour, True) * (2.0 - sensitivity)
        approx = cv2.approxPolyDP(contour, epsilon, True)

        if len(approx) == 4:
            corners = order_points(approx.reshape(4, 2).astype(np.float32))
            document = four_point_transform(image, corners)
            return document, corners.reshape(-1, 1, 2).astype(np.int32)

    return None, None


def order_points(pts):
    """Order points in consistent order: tl, tr, br, bl"""
    rect = np.zeros((4, 2), dtype=np.float32)

    # Top-left has the smallest sum, bottom-right the largest
    s = pts.sum(axis=1)
    rect[0] = pts[np.argmin(s)]
    rect[2] = pts[np.argmax(s)]

    # Top-right has the smallest difference, bottom-left the largest
    diff = np.diff(pts, axis=1)
    rect[1] = pts[np.argmin(diff)]
    rect[3] = pts[np.argmax(diff)]

    return rect


def four_point_transform(image, pts):
    """Apply perspective transform to get top-down view"""
    rect = order_points(np.asarray(pts, dtype=np.float32))
    (tl, tr, br, bl) = rect

    width_a = np.sqrt(((br[0] - bl[0]) ** 2) + ((br[1] - bl[1]) ** 2))
    width_b = np.sqrt(((tr[0] - tl[0]) ** 2) + ((tr[1] - tl[1]) ** 2))
    max_width = max(int(width_a), int(width_b), 1)

    height_a = np.sqrt(((tr[0] - br[0]) ** 2) + ((tr[1] - br[1]) ** 2))
    height_b = np.sqrt(((tl[0] - bl[0]) ** 2) + ((tl[1] - bl[1]) ** 2))
    max_height = max(int(height_a), int(height_b), 1)

    dst = np.array([
        [0, 0],
        [max_width - 1, 0],
        [max_width - 1, max_height - 1],
        [0, max_height - 1]
    ], dtype=np.float32)

    M = cv2.getPerspectiveTransform(rect, dst)
    return cv2.warpPerspective(image, M, (max_width, max_height))


def enhance_document(image, enhancement_mode="auto"):
    """
    Clean up a page for readability

    Args:
        image: Input document image
        enhancement_mode: One of auto, text, bw, color, none

    Returns:
        Enhanced BGR image
    """
    if image is None:
        return None
    if enhancement_mode not in ENHANCEMENT_MODES:
        raise ValueError(f"Unknown enhancement mode: {enhancement_mode}")

    if enhancement_mode == "none":
        return image
    if enhancement_mode == "bw":
        return _enhance_black_white(image)
    if enhancement_mode == "text":
        return _enhance_text_document(image)
    if enhancement_mode == "color":
        return _enhance_color_document(image)

    # auto: pick by background brightness
    gray = _to_gray(image)
    hist = cv2.calcHist([gray], [0], None, [256], [0, 256])
    if np.sum(hist[:128]) > np.sum(hist[128:]):
        return _invert_document(image)
    return _enhance_color_document(image)


def scan_page(image, scanner_mode="full", enhancement_mode="auto"):
    """
    Turn a raw gallery image into a page

    In base mode the image is returned as is. In full mode the page outline is
    detected and straightened, falling back to the whole image when no
    outline is found, and the result is enhanced.
    """
    if scanner_mode == "base":
        return image

    document, _ = detect_document(image)
    if document is None:
        logger.debug("No page outline found, using the whole image")
        document = image
    return enhance_document(document, enhancement_mode)


def images_to_pdf(images, output, dpi=PDF_DPI, jpeg_quality=JPEG_QUALITY):
    """
    Write BGR page images as one multi-page PDF, one full-bleed page per image

    Args:
        images: Sequence of BGR arrays
        output: Path or binary file object
        dpi: Resolution used to size pages in points
        jpeg_quality: Quality of the embedded JPEG data
    """
    if not len(images):
        raise ValueError("No images to write.")

    c = canvas.Canvas(output)
    for img in images:
        h, w = img.shape[:2]
        pw = max(int(round(w * 72.0 / dpi)), 1)
        ph = max(int(round(h * 72.0 / dpi)), 1)
        c.setPageSize((pw, ph))

        buf = io.BytesIO(encode_jpeg(img, jpeg_quality))
        c.drawImage(ImageReader(buf), 0, 0, width=pw, height=ph)
        c.showPage()
    c.save()


def _to_gray(image):
    if len(image.shape) == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image


def _to_bgr(gray):
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def _enhance_black_white(image):
    """Basic black and white enhancement"""
    blurred = cv2.GaussianBlur(_to_gray(image), (5, 5), 0)
    binary = cv2.adaptiveThreshold(
        blurred, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY, 11, 2
    )
    return _to_bgr(binary)


def _enhance_text_document(image):
    """Basic text document enhancement"""
    # Bilateral filter preserves edges
    bilateral = cv2.bilateralFilter(_to_gray(image), 9, 75, 75)
    binary = cv2.adaptiveThreshold(
        bilateral, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY, 11, 2
    )
    return _to_bgr(binary)


def _enhance_color_document(image):
    """Basic color document enhancement"""
    if len(image.shape) == 2:
        image = _to_bgr(image)

    hsv = cv2.cvtColor(image, cv2.COLOR_BGR2HSV)
    h, s, v = cv2.split(hsv)

    clahe = cv2.createCLAHE(clipLimit=2.0, tileGridSize=(8, 8))
    v = clahe.apply(v)

    return cv2.cvtColor(cv2.merge([h, s, v]), cv2.COLOR_HSV2BGR)


def _invert_document(image):
    """Handle inverted document (light text on dark background)"""
    inverted = cv2.bitwise_not(_to_gray(image))
    _, binary = cv2.threshold(
        inverted, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU
    )
    return _to_bgr(binary)
