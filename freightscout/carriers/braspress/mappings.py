"""
Braspress-specific constants: hosts, endpoint paths, modalities and the
field names used on the wire.

This module centralizes everything the Braspress client needs to know about
the remote contract, so the integration itself only deals with flow.
"""

from typing import Dict, List, Optional

# =============================================================================
# API CONFIGURATION
# =============================================================================
API_CONFIG = {
    "production_url": "https://api.braspress.com",
    "homologation_url": "https://api-homologacao.braspress.com",
    "quotation_path": "/v1/cotacao/calcular/{response_format}",
    "headers": {
        "Content-Type": "application/json",
    },
}

RESPONSE_FORMATS = ["json", "xml"]
DEFAULT_RESPONSE_FORMAT = "json"

# =============================================================================
# MODALITIES
# =============================================================================
# Modality tag -> key used in the quotation result
MODALITY_LABELS: Dict[str, str] = {
    "R": "Rodoviario",  # Road
    "A": "Aereo",  # Air
}

DEFAULT_MODALITY = "R"

# =============================================================================
# VOLUME FIELDS
# =============================================================================
DIMENSION_KEYS: List[str] = ["comprimento", "largura", "altura"]

# Keys injected into every request body
WEIGHT_FIELD = "peso"
VOLUME_COUNT_FIELD = "volumes"
CUBAGE_FIELD = "cubagem"
MODALITY_FIELD = "modal"


def get_base_url(production: bool = True) -> str:
    """Return the API host for the chosen environment."""
    return API_CONFIG["production_url"] if production else API_CONFIG["homologation_url"]


def get_quotation_url(base_url: str, response_format: str) -> str:
    """Build the full quotation endpoint for a response format."""
    return base_url + API_CONFIG["quotation_path"].format(response_format=response_format)


def is_modality_supported(modality: str) -> bool:
    return modality in MODALITY_LABELS


def get_modality_label(modality: str) -> Optional[str]:
    return MODALITY_LABELS.get(modality)
