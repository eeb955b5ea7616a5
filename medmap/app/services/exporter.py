import io
import logging
import textwrap

from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from ..exceptions import ExportError
from ..schemas.graph import MindMapDocument
from .editor import build_citations

logger = logging.getLogger("medmap.export")

NODE_WIDTH = 180
NODE_HEIGHT = 60
MARGIN = 40
EMPTY_SIZE = (400, 300)

BACKGROUND = "#ffffff"
EDGE_COLOR = "#b1b1b7"
TEXT_COLOR = "#1a192b"
NODE_STYLES = {
    "verified": ("#16a34a", "#dcfce7"),
    "unverified": ("#dc2626", "#fee2e2"),
    None: ("#1a192b", "#ffffff"),
}

CITATIONS_TITLE = "References and Citations"
TITLE_FONT = ("Helvetica", 12)
BODY_FONT = ("Helvetica", 10)
LEADING_RATIO = 1.2
MIN_BODY_SIZE = 5
BOTTOM_MARGIN = 10
TEXT_X = 20
TITLE_Y = 30
BODY_Y = 50


def _load_font(size):
    try:
        return ImageFont.truetype("DejaVuSans.ttf", size)
    except OSError:
        return ImageFont.load_default()


def render_graph(document: MindMapDocument, scale: int = 2) -> Image.Image:
    """
    Rasterizes the mind map onto a white bitmap fitted to the node
    bounding box. Positions are top-left corners, as the editor stores them.
    """
    if not document.nodes:
        return Image.new("RGB", (EMPTY_SIZE[0] * scale, EMPTY_SIZE[1] * scale), BACKGROUND)

    min_x = min(n.position.x for n in document.nodes)
    min_y = min(n.position.y for n in document.nodes)
    max_x = max(n.position.x for n in document.nodes) + NODE_WIDTH
    max_y = max(n.position.y for n in document.nodes) + NODE_HEIGHT

    width = int((max_x - min_x + 2 * MARGIN) * scale)
    height = int((max_y - min_y + 2 * MARGIN) * scale)
    image = Image.new("RGB", (width, height), BACKGROUND)
    draw = ImageDraw.Draw(image)
    font = _load_font(12 * scale)

    def box(node):
        left = (node.position.x - min_x + MARGIN) * scale
        top = (node.position.y - min_y + MARGIN) * scale
        return left, top, left + NODE_WIDTH * scale, top + NODE_HEIGHT * scale

    boxes = {n.id: box(n) for n in document.nodes}

    for edge in document.edges:
        if edge.source not in boxes or edge.target not in boxes:
            logger.debug("Skipping dangling edge %s", edge.id)
            continue
        sx0, sy0, sx1, sy1 = boxes[edge.source]
        tx0, ty0, tx1, ty1 = boxes[edge.target]
        draw.line(
            [((sx0 + sx1) / 2, (sy0 + sy1) / 2), ((tx0 + tx1) / 2, (ty0 + ty1) / 2)],
            fill=EDGE_COLOR,
            width=max(1, scale),
        )

    for node in document.nodes:
        outline, fill = NODE_STYLES.get(node.className, NODE_STYLES[None])
        left, top, right, bottom = boxes[node.id]
        draw.rounded_rectangle((left, top, right, bottom), radius=4 * scale,
                               fill=fill, outline=outline, width=max(1, scale))

        lines = textwrap.wrap(node.data.label, width=22)[:3] or [""]
        line_boxes = [draw.textbbox((0, 0), line, font=font) for line in lines]
        line_h = max(b[3] - b[1] for b in line_boxes) + 2 * scale
        y = (top + bottom) / 2 - line_h * len(lines) / 2
        for line, bbox in zip(lines, line_boxes):
            x = (left + right) / 2 - (bbox[2] - bbox[0]) / 2
            draw.text((x, y), line, fill=TEXT_COLOR, font=font)
            y += line_h

    return image


def format_citations(document: MindMapDocument) -> str:
    blocks = []
    for label, sources in build_citations(document):
        lines = "\n".join(f"  - {s.title}: {s.url}" for s in sources)
        blocks.append(f"{label}:\n{lines}")
    return "\n\n".join(blocks)


def export_jpeg(document: MindMapDocument, scale: int = 2) -> bytes:
    """Saves the rendered bitmap as JPEG; citations are not included."""
    try:
        image = render_graph(document, scale=scale)
        buffer = io.BytesIO()
        image.convert("RGB").save(buffer, format="JPEG", quality=95)
    except (OSError, ValueError) as e:
        raise ExportError(f"JPEG export failed: {e}") from e
    return buffer.getvalue()


def _fit_citations(text, width, height):
    """
    Picks the largest body font size at which the wrapped citations fit
    below the title. At the smallest size the text is clipped instead.
    """
    available = height - BODY_Y - BOTTOM_MARGIN
    for size in range(BODY_FONT[1], MIN_BODY_SIZE - 1, -1):
        wrapped = []
        for raw_line in text.split("\n"):
            wrapped.extend(simpleSplit(raw_line, BODY_FONT[0], size, width - 2 * TEXT_X) or [""])
        leading = size * LEADING_RATIO
        if len(wrapped) * leading <= available:
            return size, leading, wrapped
    fits = max(int(available // leading), 0)
    logger.warning("Citations clipped to %d of %d lines", fits, len(wrapped))
    return size, leading, wrapped[:fits]


def _draw_citations(pdf, text, width, height):
    pdf.setFont(*TITLE_FONT)
    pdf.drawString(TEXT_X, height - TITLE_Y, CITATIONS_TITLE)

    size, leading, lines = _fit_citations(text, width, height)
    pdf.setFont(BODY_FONT[0], size)
    y = height - BODY_Y
    for line in lines:
        pdf.drawString(TEXT_X, y, line)
        y -= leading
    pdf.showPage()


def export_pdf(document: MindMapDocument, scale: int = 2) -> bytes:
    """
    Page one holds the diagram at bitmap size. When any node has
    sources, a citations page of the same size follows.
    """
    try:
        image = render_graph(document, scale=scale)
        width, height = image.size

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(width, height))
        pdf.setTitle("Mind Map")
        pdf.drawImage(ImageReader(image), 0, 0, width=width, height=height)
        pdf.showPage()

        citations = format_citations(document)
        if citations:
            _draw_citations(pdf, citations, width, height)

        pdf.save()
    except (OSError, ValueError) as e:
        raise ExportError(f"PDF export failed: {e}") from e
    return buffer.getvalue()
