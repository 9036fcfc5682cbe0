from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path

from lxml import etree

from danfse.models.invoice import (
    AmountInfo,
    DpsInfo,
    InvoiceRecord,
    PartyInfo,
    ServiceInfo,
    TaxationInfo,
)
from danfse.services.exceptions import MissingRequiredFieldError, ParseError
from danfse.utils.formatters import (
    MAX_INTEGER_DIGITS,
    mask_classification_code,
    mask_date,
    mask_datetime,
    mask_phone,
    mask_postal_code,
    mask_tax_id,
)

logger = logging.getLogger(__name__)

ACCESS_KEY_PREFIX = "NFS"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


class _Node:
    """Namespace-aware accessor over an optional element.

    Every lookup below an absent element yields the default, so a missing
    intermediate node blanks its subtree instead of aborting the extraction.
    """

    def __init__(self, el: etree._Element | None, ns: str) -> None:
        self.el = el
        self.ns = ns

    def _path(self, path: str) -> str:
        if not self.ns:
            return path
        return "/".join(f"{{{self.ns}}}{step}" for step in path.split("/"))

    def child(self, path: str) -> _Node:
        el = self.el.find(self._path(path)) if self.el is not None else None
        return _Node(el, self.ns)

    def text(self, path: str) -> str:
        if self.el is None:
            return ""
        return (self.el.findtext(self._path(path)) or "").strip()

    def decimal(self, path: str) -> Decimal:
        value = self.optional_decimal(path)
        return value if value is not None else Decimal("0")

    def optional_decimal(self, path: str) -> Decimal | None:
        raw = self.text(path)
        if not raw:
            return None
        try:
            d = Decimal(raw)
        except InvalidOperation:
            logger.debug("Non-numeric value at %s: %r", path, raw)
            return None
        if not d.is_finite() or (d and d.adjusted() >= MAX_INTEGER_DIGITS):
            logger.debug("Out-of-range value at %s: %r", path, raw)
            return None
        return d


def _parse_root(xml_bytes: bytes) -> etree._Element:
    try:
        return etree.fromstring(xml_bytes, _PARSER)
    except (etree.XMLSyntaxError, ValueError) as e:
        raise ParseError(f"XML inválido: {e}") from e


def _access_key(inf: etree._Element) -> str:
    doc_id = inf.get("Id")
    if doc_id is None:
        raise MissingRequiredFieldError("Atributo Id ausente em infNFSe", field="Id")
    key = doc_id[len(ACCESS_KEY_PREFIX):] if doc_id.startswith(ACCESS_KEY_PREFIX) else doc_id
    key = key.strip()
    if not key:
        raise MissingRequiredFieldError("Chave de acesso vazia no atributo Id", field="Id")
    return key


def _issuer(emit: _Node) -> PartyInfo:
    end = emit.child("enderNac")
    return PartyInfo(
        tax_id=mask_tax_id(emit.text("CNPJ") or emit.text("CPF")),
        name=emit.text("xNome"),
        street=end.text("xLgr"),
        number=end.text("nro"),
        complement=end.text("xCpl") or None,
        district=end.text("xBairro"),
        municipality_code=end.text("cMun"),
        state=end.text("UF"),
        postal_code=mask_postal_code(end.text("CEP")),
        phone=mask_phone(emit.text("fone")),
        email=emit.text("email"),
    )


def _recipient(toma: _Node) -> PartyInfo:
    end = toma.child("end")
    nac = end.child("endNac")

    def street_field(tag: str) -> str:
        # Street fields sit on <end>; some producers nest them under <endNac>
        return end.text(tag) or nac.text(tag)

    doc = toma.text("CNPJ") or toma.text("CPF")
    return PartyInfo(
        # Foreign takers carry a NIF, which has no Brazilian mask
        tax_id=mask_tax_id(doc) if doc else toma.text("NIF"),
        name=toma.text("xNome"),
        street=street_field("xLgr"),
        number=street_field("nro"),
        complement=street_field("xCpl") or None,
        district=street_field("xBairro"),
        municipality_code=nac.text("cMun"),
        postal_code=mask_postal_code(nac.text("CEP") or end.text("endExt/cEndPost")),
        email=toma.text("email"),
    )


def extract(xml_bytes: bytes) -> InvoiceRecord:
    """Parse an NFS-e XML document into a normalized InvoiceRecord.

    Raises ParseError for malformed XML or a missing infNFSe element and
    MissingRequiredFieldError when infNFSe has no usable Id attribute.
    """
    root = _parse_root(xml_bytes)
    ns = etree.QName(root).namespace or ""

    nfse = _Node(root, ns).child("infNFSe")
    if nfse.el is None:
        raise ParseError(f"Elemento infNFSe não encontrado sob <{etree.QName(root).localname}>")

    access_key = _access_key(nfse.el)

    dps = nfse.child("DPS/infDPS")
    if dps.el is None:
        logger.debug("DPS/infDPS ausente em %s; campos da DPS ficarão vazios", access_key)
    serv = dps.child("serv")
    trib = dps.child("valores/trib")
    reg = dps.child("prest/regTrib")

    record = InvoiceRecord(
        access_key=access_key,
        nfse_number=nfse.text("nNFSe"),
        dfse_number=nfse.text("nDFSe"),
        processed_at=mask_datetime(nfse.text("dhProc")),
        issuance_place=nfse.text("xLocEmi"),
        service_place=nfse.text("xLocPrestacao"),
        tax_incidence_place=nfse.text("xLocIncid"),
        national_tax_description=nfse.text("xTribNac"),
        issuer=_issuer(nfse.child("emit")),
        recipient=_recipient(dps.child("toma")),
        service=ServiceInfo(
            national_code=mask_classification_code(serv.text("cServ/cTribNac")),
            municipal_code=serv.text("cServ/cTribMun"),
            description=serv.text("cServ/xDescServ"),
            additional_info=serv.text("infoCompl/xInfComp"),
        ),
        amounts=AmountInfo(
            service_value=dps.decimal("valores/vServPrest/vServ"),
            net_value=nfse.decimal("valores/vLiq"),
            total_withheld=nfse.decimal("valores/vTotalRet"),
            calculation_base=nfse.optional_decimal("valores/vBC"),
            rate=nfse.optional_decimal("valores/pAliqAplic"),
            issqn=nfse.optional_decimal("valores/vISSQN"),
        ),
        dps=DpsInfo(
            number=dps.text("nDPS"),
            series=dps.text("serie"),
            competency=mask_date(dps.text("dCompet")),
            issued_at=mask_datetime(dps.text("dhEmi")),
        ),
        taxation=TaxationInfo(
            issqn_taxation=trib.text("tribMun/tribISSQN"),
            withholding_type=trib.text("tribMun/tpRetISSQN"),
            federal_percent=trib.decimal("totTrib/pTotTrib/pTotTribFed"),
            state_percent=trib.decimal("totTrib/pTotTrib/pTotTribEst"),
            municipal_percent=trib.decimal("totTrib/pTotTrib/pTotTribMun"),
            result_country=trib.text("tribMun/cPaisResult"),
            simples_nacional=reg.text("opSimpNac"),
            simples_regime=reg.text("regApTribSN"),
            special_regime=reg.text("regEspTrib"),
        ),
    )
    logger.debug("Extracted NFS-e %s (chave %s)", record.nfse_number, access_key)
    return record


def extract_file(path: Path) -> InvoiceRecord:
    """Read *path* and extract its InvoiceRecord."""
    with open(path, "rb") as f:
        return extract(f.read())
