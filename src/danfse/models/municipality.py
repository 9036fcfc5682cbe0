from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MunicipalHeader:
    """Right-hand header block: the issuing municipality's tax office contacts."""

    secretariat: str = "Secretaria Municipal da Fazenda"
    phone: str = "(48)3431-0074"
    email: str = "tributos@criciuma.sc.gov.br"

    @classmethod
    def from_dict(cls, d: dict) -> MunicipalHeader:
        """Create a MunicipalHeader from a YAML-loaded dict, applying defaults for missing keys."""
        defaults = cls()
        return cls(
            secretariat=str(d.get("secretaria", defaults.secretariat)),
            phone=str(d.get("telefone", defaults.phone)),
            email=str(d.get("email", defaults.email)),
        )
