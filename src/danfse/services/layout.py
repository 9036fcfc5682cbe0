"""DANFSe page composition.

Turns an InvoiceRecord into an ordered tuple of draw instructions on a
single A4 page. Coordinates are millimetres from the top-left corner; the
renderer owns the conversion to PDF space.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit

from danfse.config import MARGIN, PAGE_HEIGHT, PAGE_WIDTH, QR_BASE_URL
from danfse.models.invoice import InvoiceRecord
from danfse.models.municipality import MunicipalHeader
from danfse.utils.codes import (
    OP_SIMP_NAC,
    PLACEHOLDER,
    REG_AP_TRIB_SN,
    REG_ESP_TRIB,
    TP_RET_ISSQN,
    TRIB_ISSQN,
    describe,
)
from danfse.utils.formatters import format_brl, format_percent

REGULAR = ""
BOLD = "B"

LABEL_SIZE = 7
VALUE_SIZE = 8
ROW_HEIGHT = 4
QR_SIZE = 18
RIGHT_EDGE = PAGE_WIDTH - MARGIN
FULL_WIDTH = PAGE_WIDTH - 2 * MARGIN

AUTHENTICITY_MESSAGE = (
    "A autenticidade desta NFS-e pode ser verificada pela leitura deste código QR "
    "ou pela consulta da chave de acesso no portal nacional da NFS-e"
)
INTERMEDIARY_NOTICE = "INTERMEDIÁRIO DO SERVIÇO NÃO IDENTIFICADO NA NFS-e"
TAX_DESCRIPTION_LIMIT = 40
DESCRIPTION_MAX_LINES = 4


def font_name(weight: str) -> str:
    """Map a weight flag to the built-in PDF font used for metrics and drawing."""
    return "Helvetica-Bold" if weight == BOLD else "Helvetica"


# --- Draw instructions ---


@dataclass(frozen=True)
class Text:
    """Single-line cell; align is L, C or R within *width*."""

    x: float
    y: float
    width: float
    height: float
    text: str
    weight: str = REGULAR
    size: float = VALUE_SIZE
    align: str = "L"


@dataclass(frozen=True)
class Paragraph:
    """Multi-line cell whose lines are already wrapped to *width*."""

    x: float
    y: float
    width: float
    line_height: float
    lines: tuple[str, ...]
    weight: str = REGULAR
    size: float = VALUE_SIZE


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float = 0.2


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    line_width: float = 0.1


@dataclass(frozen=True)
class Image:
    """Raster image; a None height keeps the aspect ratio of *width*."""

    path: str
    x: float
    y: float
    width: float
    height: float | None = None


@dataclass(frozen=True)
class QrCode:
    payload: str
    x: float
    y: float
    size: float


Instruction = Text | Paragraph | Line | Rect | Image | QrCode


# --- Geometry ---


@dataclass(frozen=True)
class Column:
    x: float
    width: float


COLUMNS: dict[str, tuple[Column, ...]] = {
    "four": (Column(MARGIN, 45), Column(47, 50), Column(97, 50), Column(147, 45)),
    "three": (Column(MARGIN, 60), Column(62, 60), Column(122, 60)),
    "two": (Column(MARGIN, 92), Column(97, 95)),
}

# Header block anchors
TITLE_COLUMN = Column(62, 50)
MUNICIPALITY_COLUMN = Column(137, 55)
LOGO_WIDTH = 50


@dataclass(frozen=True)
class Cursor:
    """Vertical drawing position; each section returns an advanced copy."""

    y: float = MARGIN

    def down(self, dy: float) -> Cursor:
        return Cursor(self.y + dy)


Section = tuple[list[Instruction], Cursor]


def wrap(text: str, width: float, weight: str = REGULAR, size: float = VALUE_SIZE) -> tuple[str, ...]:
    """Split *text* into lines no wider than *width* mm using Helvetica metrics."""
    if not text:
        return ()
    return tuple(simpleSplit(text, font_name(weight), size, width * mm))


def qr_payload(access_key: str) -> str:
    """Public-consultation URL encoded in the DANFSe QR code."""
    return f"{QR_BASE_URL}{access_key}"


def _or_dash(value: str) -> str:
    return value or PLACEHOLDER


def _money(value: Decimal | None) -> str:
    return format_brl(value) if value is not None else PLACEHOLDER


def _cells(
    columns: Sequence[Column],
    texts: Sequence[str],
    y: float,
    weight: str,
    size: float,
) -> list[Instruction]:
    return [
        Text(col.x, y, col.width, ROW_HEIGHT, text, weight, size)
        for col, text in zip(columns, texts, strict=True)
        if text
    ]


def _label_value_rows(
    cursor: Cursor,
    columns: Sequence[Column],
    rows: Sequence[tuple[Sequence[str], Sequence[str]]],
) -> Section:
    """Emit (labels, values) row pairs: bold labels with the values beneath."""
    out: list[Instruction] = []
    for labels, values in rows:
        out += _cells(columns, labels, cursor.y, BOLD, LABEL_SIZE)
        out += _cells(columns, values, cursor.y + ROW_HEIGHT, REGULAR, VALUE_SIZE)
        cursor = cursor.down(2 * ROW_HEIGHT)
    return out, cursor


def _title(cursor: Cursor, text: str) -> Section:
    return [Text(MARGIN, cursor.y, FULL_WIDTH, ROW_HEIGHT, text, BOLD, LABEL_SIZE)], cursor.down(ROW_HEIGHT)


def _divider(cursor: Cursor) -> Section:
    return [Line(MARGIN, cursor.y, RIGHT_EDGE, cursor.y)], cursor.down(2)


# --- Sections ---


def _header(
    record: InvoiceRecord,
    header: MunicipalHeader,
    logo_path: Path | None,
    cursor: Cursor,
) -> Section:
    y = cursor.y
    out: list[Instruction] = []
    if logo_path is not None:
        out.append(Image(str(logo_path), MARGIN, y, LOGO_WIDTH))

    t, m = TITLE_COLUMN, MUNICIPALITY_COLUMN
    out += [
        Text(t.x, y, t.width, 4, "DANFSe v1.0", BOLD, 9, "C"),
        Text(t.x, y + 4, t.width, 4, "Documento Auxiliar da NFS-e", BOLD, 9, "C"),
        Text(m.x, y, m.width, 3, f"Prefeitura Municipal de {record.issuance_place}", BOLD, 8, "R"),
        Text(m.x, y + 3, m.width, 2.5, header.secretariat, REGULAR, 6, "R"),
        Text(m.x, y + 5.5, m.width, 2.5, header.phone, REGULAR, 6, "R"),
        Text(m.x, y + 8, m.width, 2.5, header.email, REGULAR, 6, "R"),
    ]
    return out, cursor.down(13)


def _access_key(record: InvoiceRecord, cursor: Cursor) -> Section:
    cols = COLUMNS["four"]
    span = sum(c.width for c in cols)
    y = cursor.y
    out: list[Instruction] = [
        Text(MARGIN, y, span, ROW_HEIGHT, "Chave de Acesso da NFS-e", BOLD, LABEL_SIZE),
        Text(MARGIN, y + ROW_HEIGHT, span, ROW_HEIGHT, record.access_key),
    ]
    first_row = cursor.down(2 * ROW_HEIGHT)

    # Column 4 holds the QR code, lifted above the first label row
    qr_col = cols[3]
    out.append(
        QrCode(
            qr_payload(record.access_key),
            qr_col.x + (qr_col.width - QR_SIZE) / 2,
            first_row.y - 6,
            QR_SIZE,
        )
    )

    rows, after = _label_value_rows(
        first_row,
        cols,
        [
            (
                ("Número da NFS-e", "Competência da NFS-e", "Data e Hora da emissão da NFS-e", ""),
                (record.nfse_number, record.dps.competency, record.processed_at, ""),
            ),
            (
                ("Número da DPS", "Série da DPS", "Data e Hora da emissão da DPS", ""),
                (record.dps.number, record.dps.series, record.dps.issued_at, ""),
            ),
        ],
    )
    out += rows

    message_y = after.y - ROW_HEIGHT
    lines = wrap(AUTHENTICITY_MESSAGE, qr_col.width - 2, size=6)
    out.append(Paragraph(qr_col.x, message_y, qr_col.width - 2, 2.5, lines, REGULAR, 6))

    end = max(first_row.y + QR_SIZE, message_y + len(lines) * 2.5) + 2
    return out, Cursor(end).down(1)


def _issuer(record: InvoiceRecord, cursor: Cursor) -> Section:
    emit = record.issuer
    out, cursor = _title(cursor, "EMITENTE DA NFS-e")
    rows, cursor = _label_value_rows(
        cursor,
        COLUMNS["four"],
        [
            (
                ("Prestador do Serviço", "CNPJ / CPF / NIF", "Inscrição Municipal", "Telefone"),
                ("", emit.tax_id, PLACEHOLDER, emit.phone),
            ),
            (
                ("Nome / Nome Empresarial", "", "E-mail", ""),
                (emit.name, "", _or_dash(emit.email), ""),
            ),
            (
                ("Endereço", "", "Município", "CEP"),
                (emit.address, "", f"{record.issuance_place} - {emit.state}", emit.postal_code),
            ),
        ],
    )
    out += rows

    left, right = COLUMNS["two"]
    out += _cells(
        (left, right),
        ("Simples Nacional na Data de Competência", "Regime de Apuração Tributária pelo SN"),
        cursor.y,
        BOLD,
        LABEL_SIZE,
    )
    y = cursor.y + ROW_HEIGHT
    tallest = 1
    for col, text in (
        (left, describe(OP_SIMP_NAC, record.taxation.simples_nacional)),
        (right, describe(REG_AP_TRIB_SN, record.taxation.simples_regime)),
    ):
        lines = wrap(text, col.width)
        out.append(Paragraph(col.x, y, col.width, ROW_HEIGHT, lines))
        tallest = max(tallest, len(lines))
    return out, Cursor(y + tallest * ROW_HEIGHT).down(1)


def _recipient(record: InvoiceRecord, cursor: Cursor) -> Section:
    toma = record.recipient
    out, cursor = _title(cursor, "TOMADOR DO SERVIÇO")
    rows, cursor = _label_value_rows(
        cursor,
        COLUMNS["four"],
        [
            (
                ("", "CNPJ / CPF / NIF", "Inscrição Municipal", "Telefone"),
                ("", toma.tax_id, PLACEHOLDER, ""),
            ),
            (
                ("Nome / Nome Empresarial", "", "E-mail", ""),
                (toma.name, "", _or_dash(toma.email), ""),
            ),
            (
                ("Endereço", "", "Município", "CEP"),
                (toma.address, "", record.tax_incidence_place, toma.postal_code),
            ),
        ],
    )
    out += rows
    notice, cursor = _title(cursor.down(2), INTERMEDIARY_NOTICE)
    out += notice
    return out, cursor.down(2)


def _national_code_text(record: InvoiceRecord) -> str:
    code = record.service.national_code
    desc = record.national_tax_description
    if not desc:
        return _or_dash(code)
    if len(desc) > TAX_DESCRIPTION_LIMIT:
        desc = desc[:TAX_DESCRIPTION_LIMIT] + "..."
    return f"{code} - {desc}" if code else desc


def _service(record: InvoiceRecord, cursor: Cursor) -> Section:
    cols = COLUMNS["four"]
    out, cursor = _title(cursor, "SERVIÇO PRESTADO")
    rows, cursor = _label_value_rows(
        cursor,
        cols,
        [
            (
                (
                    "Código de Tributação Nacional",
                    "Código de Tributação Municipal",
                    "Local da Prestação",
                    "País da Prestação",
                ),
                (
                    _national_code_text(record),
                    _or_dash(record.service.municipal_code),
                    record.service_place,
                    PLACEHOLDER,
                ),
            ),
        ],
    )
    out += rows

    # Description spans columns 2-4, starting on the label's own line
    out.append(Text(cols[0].x, cursor.y, cols[0].width, ROW_HEIGHT, "Descrição do Serviço", BOLD, LABEL_SIZE))
    span = sum(c.width for c in cols[1:])
    lines = wrap(record.service.description, span)[:DESCRIPTION_MAX_LINES]
    if lines:
        out.append(Paragraph(cols[1].x, cursor.y, span, ROW_HEIGHT, lines))
    return out, cursor.down(max(len(lines), 1) * ROW_HEIGHT + 2)


def _taxation(record: InvoiceRecord, cursor: Cursor) -> Section:
    cols = COLUMNS["four"]
    trib = record.taxation
    amounts = record.amounts

    out, cursor = _title(cursor, "TRIBUTAÇÃO MUNICIPAL")
    rows, cursor = _label_value_rows(
        cursor,
        cols,
        [
            (
                (
                    "Tributação do ISSQN",
                    "País Resultado da Prestação do Serviço",
                    "Município de Incidência do ISSQN",
                    "Regime Especial de Tributação",
                ),
                (
                    describe(TRIB_ISSQN, trib.issqn_taxation),
                    _or_dash(trib.result_country),
                    record.tax_incidence_place,
                    describe(REG_ESP_TRIB, trib.special_regime),
                ),
            ),
            (
                (
                    "Tipo de Imunidade",
                    "Suspensão da Exigibilidade do ISSQN",
                    "Número Processo Suspensão",
                    "Benefício Municipal",
                ),
                (PLACEHOLDER, "Não", PLACEHOLDER, PLACEHOLDER),
            ),
            (
                ("Valor do Serviço", "Desconto Incondicionado", "Total Deduções/Reduções", "Cálculo do BM"),
                (format_brl(amounts.service_value), PLACEHOLDER, PLACEHOLDER, PLACEHOLDER),
            ),
            (
                ("BC ISSQN", "Alíquota Aplicada", "Retenção do ISSQN", "ISSQN Apurado"),
                (
                    _money(amounts.calculation_base),
                    format_percent(amounts.rate) if amounts.rate is not None else PLACEHOLDER,
                    describe(TP_RET_ISSQN, trib.withholding_type),
                    _money(amounts.issqn),
                ),
            ),
        ],
    )
    out += rows

    title, cursor = _title(cursor, "TRIBUTAÇÃO FEDERAL")
    out += title
    rows, cursor = _label_value_rows(
        cursor,
        cols,
        [
            (("IRRF", "CP", "CSLL", ""), (PLACEHOLDER, PLACEHOLDER, PLACEHOLDER, "")),
            (
                ("PIS", "COFINS", "Retenção do PIS/COFINS", "TOTAL TRIBUTAÇÃO FEDERAL"),
                (PLACEHOLDER, PLACEHOLDER, PLACEHOLDER, PLACEHOLDER),
            ),
        ],
    )
    out += rows
    return out, cursor.down(2)


def _totals(record: InvoiceRecord, cursor: Cursor) -> Section:
    amounts = record.amounts
    out, cursor = _title(cursor, "VALOR TOTAL DA NFS-E")
    rows, cursor = _label_value_rows(
        cursor,
        COLUMNS["four"],
        [
            (
                ("Valor do Serviço", "Desconto Condicionado", "Desconto Incondicionado", "ISSQN Retido"),
                (format_brl(amounts.service_value), PLACEHOLDER, PLACEHOLDER, PLACEHOLDER),
            ),
            (
                ("IRRF, CP,CSLL - Retidos", "PIS/COFINS Retidos", "", "Valor Líquido da NFS-e"),
                (format_brl(amounts.total_withheld), PLACEHOLDER, "", format_brl(amounts.net_value)),
            ),
        ],
    )
    out += rows
    return out, cursor.down(2)


def _approximate_taxes(record: InvoiceRecord, cursor: Cursor) -> Section:
    trib = record.taxation
    out, cursor = _title(cursor, "TOTAIS APROXIMADOS DOS TRIBUTOS")
    rows, cursor = _label_value_rows(
        cursor,
        COLUMNS["three"],
        [
            (
                ("Federais", "Estaduais", "Municípios"),
                (
                    format_percent(trib.federal_percent),
                    format_percent(trib.state_percent),
                    format_percent(trib.municipal_percent),
                ),
            ),
        ],
    )
    out += rows
    return out, cursor.down(5)


def _additional_info(record: InvoiceRecord, cursor: Cursor) -> Section:
    out, cursor = _title(cursor, "INFORMAÇÕES COMPLEMENTARES")
    line_height = 3
    lines = wrap(record.service.additional_info, FULL_WIDTH, size=LABEL_SIZE)
    # Single page: drop whatever would cross the bottom margin
    room = int((PAGE_HEIGHT - MARGIN - cursor.y) // line_height)
    lines = lines[: max(room, 0)]
    if lines:
        out.append(Paragraph(MARGIN, cursor.y, FULL_WIDTH, line_height, lines, REGULAR, LABEL_SIZE))
        cursor = cursor.down(len(lines) * line_height)
    return out, cursor


def _page_border() -> Rect:
    # Reference-layout border: 2 mm offset, 205 x 292 mm
    return Rect(
        MARGIN - 3,
        MARGIN - 3,
        PAGE_WIDTH - (2 * MARGIN - 5),
        PAGE_HEIGHT - (2 * MARGIN - 5),
    )


def compose(
    record: InvoiceRecord,
    header: MunicipalHeader | None = None,
    logo_path: Path | None = None,
) -> tuple[Instruction, ...]:
    """Lay out *record* as an ordered, replayable sequence of draw instructions."""
    header = header or MunicipalHeader()
    cursor = Cursor()
    out: list[Instruction] = []

    part, cursor = _header(record, header, logo_path, cursor)
    out += part
    for build in (_access_key, _issuer, _recipient, _service, _taxation, _totals, _approximate_taxes):
        part, cursor = _divider(cursor)
        out += part
        part, cursor = build(record, cursor)
        out += part
    part, cursor = _additional_info(record, cursor)
    out += part

    out.append(_page_border())
    return tuple(out)
