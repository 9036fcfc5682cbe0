from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

_ZERO = Decimal("0")


@dataclass(frozen=True)
class PartyInfo:
    """Issuer (emitente) or service taker (tomador) as printed on the DANFSe.

    tax_id, postal_code and phone hold the masked display form.
    """

    tax_id: str = ""
    name: str = ""
    street: str = ""
    number: str = ""
    district: str = ""
    municipality_code: str = ""
    state: str = ""
    postal_code: str = ""
    phone: str = ""
    email: str = ""
    complement: str | None = None

    @property
    def address(self) -> str:
        """Street, number[, complement], district joined by commas."""
        parts = [self.street, self.number]
        if self.complement:
            parts.append(self.complement)
        parts.append(self.district)
        return ", ".join(parts)


@dataclass(frozen=True)
class ServiceInfo:
    national_code: str = ""  # NN.NN.NN
    municipal_code: str = ""
    description: str = ""
    additional_info: str = ""


@dataclass(frozen=True)
class AmountInfo:
    service_value: Decimal = _ZERO
    net_value: Decimal = _ZERO
    total_withheld: Decimal = _ZERO

    # Present only on some NFS-e; None renders as "-"
    calculation_base: Decimal | None = None
    rate: Decimal | None = None
    issqn: Decimal | None = None


@dataclass(frozen=True)
class DpsInfo:
    number: str = ""
    series: str = ""
    competency: str = ""  # DD/MM/YYYY
    issued_at: str = ""  # DD/MM/YYYY HH:MM:SS


@dataclass(frozen=True)
class TaxationInfo:
    issqn_taxation: str = ""  # tribISSQN code
    withholding_type: str = ""  # tpRetISSQN code
    federal_percent: Decimal = _ZERO
    state_percent: Decimal = _ZERO
    municipal_percent: Decimal = _ZERO
    result_country: str = ""
    simples_nacional: str = ""  # opSimpNac code
    simples_regime: str = ""  # regApTribSN code
    special_regime: str = ""  # regEspTrib code


@dataclass(frozen=True)
class InvoiceRecord:
    """Normalized NFS-e fields, built once per document and read by the layout."""

    access_key: str
    nfse_number: str = ""
    dfse_number: str = ""
    processed_at: str = ""
    issuance_place: str = ""
    service_place: str = ""
    tax_incidence_place: str = ""
    national_tax_description: str = ""
    issuer: PartyInfo = field(default_factory=PartyInfo)
    recipient: PartyInfo = field(default_factory=PartyInfo)
    service: ServiceInfo = field(default_factory=ServiceInfo)
    amounts: AmountInfo = field(default_factory=AmountInfo)
    dps: DpsInfo = field(default_factory=DpsInfo)
    taxation: TaxationInfo = field(default_factory=TaxationInfo)
