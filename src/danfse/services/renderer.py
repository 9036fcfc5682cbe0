from __future__ import annotations

import io
from collections.abc import Iterable

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from danfse.config import PAGE_HEIGHT
from danfse.services.layout import (
    REGULAR,
    VALUE_SIZE,
    Image,
    Instruction,
    Line,
    Paragraph,
    QrCode,
    Rect,
    Text,
    font_name,
)

CELL_PADDING = 0.5  # mm
# Baseline offset below a cell's vertical centre, as a fraction of the font size
_BASELINE_RATIO = 0.35


class PdfCanvas:
    """Single-page A4 canvas driven in millimetres from the top-left corner.

    Wraps a ReportLab canvas in invariant mode, so identical calls produce
    byte-identical PDFs.
    """

    def __init__(self) -> None:
        self._buf = io.BytesIO()
        self._c = canvas.Canvas(self._buf, pagesize=A4, invariant=1)
        self._c.setTitle("DANFSe")
        self._c.setSubject("Documento Auxiliar da NFS-e")
        self._c.setCreator("NFS-e PDF Generator")
        self._c.setAuthor("NFS-e System")
        self._size: float = VALUE_SIZE
        self.set_font(REGULAR, VALUE_SIZE)

    @staticmethod
    def _y(y: float) -> float:
        """Top-left millimetres to PDF points from the bottom edge."""
        return (PAGE_HEIGHT - y) * mm

    def set_font(self, weight: str, size: float) -> None:
        self._size = size
        self._c.setFont(font_name(weight), size)

    def cell(self, x: float, y: float, width: float, height: float, text: str, align: str = "L") -> None:
        if not text:
            return
        baseline = self._y(y + height / 2) - self._size * _BASELINE_RATIO
        match align:
            case "R":
                self._c.drawRightString((x + width - CELL_PADDING) * mm, baseline, text)
            case "C":
                self._c.drawCentredString((x + width / 2) * mm, baseline, text)
            case _:
                self._c.drawString((x + CELL_PADDING) * mm, baseline, text)

    def multi_cell(self, x: float, y: float, width: float, line_height: float, lines: Iterable[str]) -> None:
        for i, text in enumerate(lines):
            self.cell(x, y + i * line_height, width, line_height, text)

    def line(self, x1: float, y1: float, x2: float, y2: float, width: float = 0.2) -> None:
        self._c.setLineWidth(width * mm)
        self._c.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    def rect(self, x: float, y: float, width: float, height: float, line_width: float = 0.1) -> None:
        self._c.setLineWidth(line_width * mm)
        self._c.rect(x * mm, self._y(y + height), width * mm, height * mm, stroke=1, fill=0)

    def image(self, path: str, x: float, y: float, width: float, height: float | None = None) -> None:
        reader = ImageReader(path)
        if height is None:
            iw, ih = reader.getSize()
            height = width * ih / iw
        self._c.drawImage(reader, x * mm, self._y(y + height), width * mm, height * mm, mask="auto")

    def qr_code(self, payload: str, x: float, y: float, size: float) -> None:
        qr = QrCodeWidget(payload, barLevel="L")
        bounds = qr.getBounds()
        width = bounds[2] - bounds[0]
        height = bounds[3] - bounds[1]
        side = size * mm
        drawing = Drawing(side, side, transform=[side / width, 0, 0, side / height, 0, 0])
        drawing.add(qr)
        renderPDF.draw(drawing, self._c, x * mm, self._y(y + size))

    def output(self) -> bytes:
        """Close the page and return the PDF bytes."""
        self._c.showPage()
        self._c.save()
        return self._buf.getvalue()


def draw(pdf: PdfCanvas, instruction: Instruction) -> None:
    """Replay one layout instruction onto *pdf*."""
    match instruction:
        case Text():
            pdf.set_font(instruction.weight, instruction.size)
            pdf.cell(
                instruction.x,
                instruction.y,
                instruction.width,
                instruction.height,
                instruction.text,
                instruction.align,
            )
        case Paragraph():
            pdf.set_font(instruction.weight, instruction.size)
            pdf.multi_cell(
                instruction.x,
                instruction.y,
                instruction.width,
                instruction.line_height,
                instruction.lines,
            )
        case Line():
            pdf.line(instruction.x1, instruction.y1, instruction.x2, instruction.y2, instruction.width)
        case Rect():
            pdf.rect(instruction.x, instruction.y, instruction.width, instruction.height, instruction.line_width)
        case Image():
            pdf.image(instruction.path, instruction.x, instruction.y, instruction.width, instruction.height)
        case QrCode():
            pdf.qr_code(instruction.payload, instruction.x, instruction.y, instruction.size)
        case _:
            raise TypeError(f"Unsupported draw instruction: {type(instruction).__name__}")


def render(instructions: Iterable[Instruction]) -> bytes:
    """Replay *instructions* on a fresh A4 page and return the PDF bytes."""
    pdf = PdfCanvas()
    for instruction in instructions:
        draw(pdf, instruction)
    return pdf.output()
