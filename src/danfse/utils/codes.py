"""Code tables for the NFS-e Nacional taxation flags shown on the DANFSe.

Values taken from the NFS-e Nacional DPS layout documentation.
"""

from __future__ import annotations

PLACEHOLDER = "-"

TRIB_ISSQN: dict[str, str] = {
    "1": "Operação Tributável",
    "2": "Imunidade",
    "3": "Exportação de Serviço",
    "4": "Não Incidência",
}

TP_RET_ISSQN: dict[str, str] = {
    "1": "Não Retido",
    "2": "Retido pelo Tomador",
    "3": "Retido pelo Intermediário",
}

OP_SIMP_NAC: dict[str, str] = {
    "1": "Não Optante",
    "2": "Optante - Microempreendedor Individual (MEI)",
    "3": "Optante - Microempresa ou Empresa de Pequeno Porte (ME/EPP)",
}

REG_AP_TRIB_SN: dict[str, str] = {
    "1": "Regime de apuração dos tributos federais e municipal pelo Simples Nacional",
    "2": (
        "Regime de apuração dos tributos federais pelo SN e o ISSQN pela NFS-e "
        "conforme respectiva legislação municipal do tributo"
    ),
    "3": (
        "Regime de apuração dos tributos federais e municipal pela NFS-e "
        "conforme respectivas legislações federal e municipal de cada tributo"
    ),
}

REG_ESP_TRIB: dict[str, str] = {
    "0": "Nenhum",
    "1": "Ato Cooperado (Cooperativa)",
    "2": "Estimativa",
    "3": "Microempresa Municipal",
    "4": "Notário ou Registrador",
    "5": "Profissional Autônomo",
    "6": "Sociedade de Profissionais",
}


def describe(table: dict[str, str], code: str) -> str:
    """Return the description for *code*, the code itself if unknown, or "-" if empty."""
    if not code:
        return PLACEHOLDER
    return table.get(code, code)
