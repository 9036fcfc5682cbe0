from __future__ import annotations

import os
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

APP_NAME = "danfse-nacional"


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Resolve config dir for .env loading without depending on env vars from .env itself.

    Returns None if only platformdirs would resolve and the dir does not exist yet.
    """
    from_env = os.environ.get("DANFSE_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    pd = Path(platformdirs.user_config_dir(APP_NAME))
    if pd.is_dir():
        return pd
    return None


# Load .env: cwd first (highest priority), then config dir (won't override)
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def get_config_dir() -> Path:
    """Resolve config directory. Re-evaluated on each call to pick up env changes.

    Priority: 1) DANFSE_CONFIG_DIR, 2) dev repo layout, 3) platformdirs user directory.
    """
    from_env = os.environ.get("DANFSE_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    # Development layout: src/danfse/config.py -> ../../.. = project root
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    return Path(platformdirs.user_config_dir(APP_NAME))


QR_BASE_URL = "https://www.nfse.gov.br/ConsultaPublica?tpc=1&chave="

# A4 portrait, millimetres
PAGE_WIDTH = 210
PAGE_HEIGHT = 297
MARGIN = 5

DEFAULT_INPUT = "nfse.xml"
DEFAULT_OUTPUT = "nfse.pdf"
LOGO_FILENAME = "logo-nfse-assinatura-horizontal.png"


# --- Conversion paths ---


def get_input_path() -> Path:
    """Return the source XML path (DANFSE_INPUT, relative to cwd)."""
    return Path.cwd() / os.environ.get("DANFSE_INPUT", DEFAULT_INPUT)


def get_output_path() -> Path:
    """Return the destination PDF path (DANFSE_OUTPUT, relative to cwd)."""
    return Path.cwd() / os.environ.get("DANFSE_OUTPUT", DEFAULT_OUTPUT)


def get_logo_path() -> Path | None:
    """Return the header logo path, or None when the file does not exist."""
    from_env = os.environ.get("DANFSE_LOGO_PATH")
    path = Path(from_env) if from_env else get_config_dir() / LOGO_FILENAME
    return path if path.is_file() else None


def get_log_level() -> str:
    return os.environ.get("DANFSE_LOG_LEVEL", "WARNING").upper()


# --- YAML config ---


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict."""
    return yaml.safe_load(path.read_text()) or {}


def load_municipality() -> dict:
    """Load the municipal header block from config/municipio.yaml.

    Returns an empty dict when the file is absent so defaults apply.
    """
    path = get_config_dir() / "municipio.yaml"
    if not path.is_file():
        return {}
    return load_yaml(path)
