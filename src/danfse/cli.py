from __future__ import annotations

import logging
import sys


def _preflight() -> bool:
    """Verify the source XML exists before converting."""
    from danfse.config import get_input_path

    xml_path = get_input_path()
    if not xml_path.is_file():
        print(f"Erro: arquivo XML não encontrado: {xml_path}")
        return False
    return True


def main() -> None:
    """Entry point: convert the fixed input XML into the fixed output PDF."""
    from danfse.config import get_input_path, get_log_level, get_output_path

    logging.basicConfig(level=get_log_level(), format="%(levelname)s %(name)s: %(message)s")

    if not _preflight():
        sys.exit(1)

    from danfse.services.conversion import convert

    try:
        result = convert(get_input_path(), get_output_path())
    except Exception as e:
        print(f"Erro: {e}")
        sys.exit(1)
    print(f"PDF gerado com sucesso: {result.output_path}")


if __name__ == "__main__":
    main()
