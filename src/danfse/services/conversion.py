from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from danfse.config import get_logo_path, load_municipality
from danfse.models.invoice import InvoiceRecord
from danfse.models.municipality import MunicipalHeader
from danfse.services.extractor import extract_file
from danfse.services.layout import compose
from danfse.services.renderer import render

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one XML → PDF conversion."""

    record: InvoiceRecord
    output_path: Path
    pdf: bytes


def build_pdf(record: InvoiceRecord) -> bytes:
    """Compose and render *record* with the configured header and logo."""
    header = MunicipalHeader.from_dict(load_municipality())
    instructions = compose(record, header=header, logo_path=get_logo_path())
    return render(instructions)


def _write_atomic(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    except OSError:
        logger.warning("Failed to write %s", path, exc_info=True)
        tmp.unlink(missing_ok=True)
        raise


def convert(xml_path: Path, pdf_path: Path) -> ConversionResult:
    """Render the NFS-e at *xml_path* into a DANFSe PDF at *pdf_path*.

    Nothing is written unless extraction and rendering both succeed.
    """
    record = extract_file(xml_path)
    pdf = build_pdf(record)
    _write_atomic(pdf_path, pdf)
    logger.info("DANFSe %s written to %s (%d bytes)", record.access_key, pdf_path, len(pdf))
    return ConversionResult(record=record, output_path=pdf_path, pdf=pdf)
