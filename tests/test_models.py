from __future__ import annotations

import dataclasses

import pytest

from danfse.models.invoice import InvoiceRecord, PartyInfo
from danfse.models.municipality import MunicipalHeader
from danfse.utils.codes import OP_SIMP_NAC, TP_RET_ISSQN, TRIB_ISSQN, describe

# --- PartyInfo ---


class TestPartyAddress:
    def test_with_complement(self):
        p = PartyInfo(street="RUA A", number="10", complement="APTO 2", district="CENTRO")
        assert p.address == "RUA A, 10, APTO 2, CENTRO"

    def test_none_complement_omitted(self):
        p = PartyInfo(street="RUA A", number="10", district="CENTRO")
        assert p.address == "RUA A, 10, CENTRO"

    def test_empty_complement_omitted(self):
        p = PartyInfo(street="RUA A", number="10", complement="", district="CENTRO")
        assert p.address == "RUA A, 10, CENTRO"


class TestInvoiceRecord:
    def test_frozen(self, record):
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.access_key = "other"  # type: ignore[misc]

    def test_defaults(self):
        r = InvoiceRecord(access_key="1")
        assert r.issuer == PartyInfo()
        assert r.nfse_number == ""


# --- MunicipalHeader ---


class TestMunicipalHeader:
    def test_from_dict(self):
        h = MunicipalHeader.from_dict(
            {"secretaria": "Secretaria de Finanças", "telefone": "(11) 3333-4444", "email": "iss@sp.gov.br"}
        )
        assert h.secretariat == "Secretaria de Finanças"
        assert h.phone == "(11) 3333-4444"
        assert h.email == "iss@sp.gov.br"

    def test_from_dict_defaults(self):
        h = MunicipalHeader.from_dict({})
        assert h == MunicipalHeader()
        assert h.secretariat == "Secretaria Municipal da Fazenda"

    def test_numeric_yaml_values_coerced(self):
        assert MunicipalHeader.from_dict({"telefone": 4834310074}).phone == "4834310074"


# --- Code tables ---


class TestDescribe:
    def test_known(self):
        assert describe(TRIB_ISSQN, "1") == "Operação Tributável"
        assert describe(TP_RET_ISSQN, "2") == "Retido pelo Tomador"
        assert describe(OP_SIMP_NAC, "2").endswith("(MEI)")

    def test_unknown_passes_through(self):
        assert describe(TRIB_ISSQN, "9") == "9"

    def test_empty_is_placeholder(self):
        assert describe(TRIB_ISSQN, "") == "-"
