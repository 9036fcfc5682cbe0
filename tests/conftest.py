from __future__ import annotations

from decimal import Decimal

import pytest

from danfse.models.invoice import (
    AmountInfo,
    DpsInfo,
    InvoiceRecord,
    PartyInfo,
    ServiceInfo,
    TaxationInfo,
)

ACCESS_KEY = "42040071234567800019900000000000000325129348271650"

NFSE_XML = f"""\
<?xml version="1.0" encoding="utf-8"?>
<NFSe xmlns="http://www.sped.fazenda.gov.br/nfse" versao="1.00">
  <infNFSe Id="NFS{ACCESS_KEY}">
    <xLocEmi>Criciúma</xLocEmi>
    <xLocPrestacao>Criciúma</xLocPrestacao>
    <nNFSe>15</nNFSe>
    <cLocIncid>4204608</cLocIncid>
    <xLocIncid>Criciúma</xLocIncid>
    <xTribNac>Análise e desenvolvimento de sistemas, inclusive manutenção</xTribNac>
    <verAplic>SefinNac_Pre_1.4.0</verAplic>
    <ambGer>2</ambGer>
    <tpEmis>1</tpEmis>
    <cStat>100</cStat>
    <dhProc>2025-12-30T15:57:10-03:00</dhProc>
    <nDFSe>1234567</nDFSe>
    <emit>
      <CNPJ>12345678000199</CNPJ>
      <xNome>ACME SOFTWARE LTDA</xNome>
      <enderNac>
        <xLgr>RUA DAS FLORES</xLgr>
        <nro>100</nro>
        <xBairro>CENTRO</xBairro>
        <cMun>4204608</cMun>
        <UF>SC</UF>
        <CEP>88800000</CEP>
      </enderNac>
      <fone>48999999999</fone>
      <email>contato@acme-software.com.br</email>
    </emit>
    <valores>
      <vBC>19684.93</vBC>
      <pAliqAplic>2.00</pAliqAplic>
      <vISSQN>393.70</vISSQN>
      <vTotalRet>0.00</vTotalRet>
      <vLiq>19684.93</vLiq>
    </valores>
    <DPS versao="1.00">
      <infDPS Id="DPS420460821234567800019900900000000000000003">
        <tpAmb>2</tpAmb>
        <dhEmi>2025-12-30T15:57:03-03:00</dhEmi>
        <verAplic>SefinNac_1.4.0</verAplic>
        <serie>900</serie>
        <nDPS>3</nDPS>
        <dCompet>2025-12-30</dCompet>
        <tpEmit>1</tpEmit>
        <cLocEmi>4204608</cLocEmi>
        <prest>
          <CNPJ>12345678000199</CNPJ>
          <regTrib>
            <opSimpNac>3</opSimpNac>
            <regApTribSN>1</regApTribSN>
            <regEspTrib>0</regEspTrib>
          </regTrib>
        </prest>
        <toma>
          <CNPJ>98765432000155</CNPJ>
          <xNome>CLIENTE EXEMPLO S.A.</xNome>
          <end>
            <endNac>
              <cMun>4205407</cMun>
              <CEP>88010001</CEP>
            </endNac>
            <xLgr>AVENIDA BEIRA MAR</xLgr>
            <nro>2000</nro>
            <xCpl>SALA 501</xCpl>
            <xBairro>CENTRO</xBairro>
          </end>
          <email>financeiro@cliente.com.br</email>
        </toma>
        <serv>
          <locPrest>
            <cLocPrestacao>4204608</cLocPrestacao>
          </locPrest>
          <cServ>
            <cTribNac>010101</cTribNac>
            <xDescServ>Desenvolvimento de Software</xDescServ>
          </cServ>
          <infoCompl>
            <xInfComp>Pedido 4471 - vencimento em 10/01/2026</xInfComp>
          </infoCompl>
        </serv>
        <valores>
          <vServPrest>
            <vServ>19684.93</vServ>
          </vServPrest>
          <trib>
            <tribMun>
              <tribISSQN>1</tribISSQN>
              <tpRetISSQN>1</tpRetISSQN>
            </tribMun>
            <totTrib>
              <pTotTrib>
                <pTotTribFed>3.50</pTotTribFed>
                <pTotTribEst>0.00</pTotTribEst>
                <pTotTribMun>2.00</pTotTribMun>
              </pTotTrib>
            </totTrib>
          </trib>
        </valores>
      </infDPS>
    </DPS>
  </infNFSe>
</NFSe>
""".encode()


def nfse_xml(inf_body: str, id_attr: str = f' Id="NFS{ACCESS_KEY}"') -> bytes:
    """Build a minimal NFSe document with a custom infNFSe body."""
    return (
        '<NFSe xmlns="http://www.sped.fazenda.gov.br/nfse">'
        f"<infNFSe{id_attr}>{inf_body}</infNFSe>"
        "</NFSe>"
    ).encode()


@pytest.fixture
def nfse_bytes() -> bytes:
    return NFSE_XML


@pytest.fixture
def nfse_file(tmp_path):
    path = tmp_path / "nfse.xml"
    path.write_bytes(NFSE_XML)
    return path


@pytest.fixture
def record() -> InvoiceRecord:
    return InvoiceRecord(
        access_key=ACCESS_KEY,
        nfse_number="15",
        dfse_number="1234567",
        processed_at="30/12/2025 15:57:10",
        issuance_place="Criciúma",
        service_place="Criciúma",
        tax_incidence_place="Criciúma",
        national_tax_description="Análise e desenvolvimento de sistemas, inclusive manutenção",
        issuer=PartyInfo(
            tax_id="12.345.678/0001-99",
            name="ACME SOFTWARE LTDA",
            street="RUA DAS FLORES",
            number="100",
            district="CENTRO",
            municipality_code="4204608",
            state="SC",
            postal_code="88800-000",
            phone="(48) 99999-9999",
            email="contato@acme-software.com.br",
        ),
        recipient=PartyInfo(
            tax_id="98.765.432/0001-55",
            name="CLIENTE EXEMPLO S.A.",
            street="AVENIDA BEIRA MAR",
            number="2000",
            complement="SALA 501",
            district="CENTRO",
            municipality_code="4205407",
            postal_code="88010-001",
            email="financeiro@cliente.com.br",
        ),
        service=ServiceInfo(
            national_code="01.01.01",
            description="Desenvolvimento de Software",
            additional_info="Pedido 4471 - vencimento em 10/01/2026",
        ),
        amounts=AmountInfo(
            service_value=Decimal("19684.93"),
            net_value=Decimal("19684.93"),
            total_withheld=Decimal("0.00"),
            calculation_base=Decimal("19684.93"),
            rate=Decimal("2.00"),
            issqn=Decimal("393.70"),
        ),
        dps=DpsInfo(
            number="3",
            series="900",
            competency="30/12/2025",
            issued_at="30/12/2025 15:57:03",
        ),
        taxation=TaxationInfo(
            issqn_taxation="1",
            withholding_type="1",
            federal_percent=Decimal("3.50"),
            state_percent=Decimal("0.00"),
            municipal_percent=Decimal("2.00"),
            simples_nacional="3",
            simples_regime="1",
            special_regime="0",
        ),
    )
