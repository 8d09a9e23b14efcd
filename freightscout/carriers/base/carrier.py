"""
Base carrier class for freight-quotation carriers.
"""
import abc
from typing import Any, Dict, List, Optional, Union


class FreightCarrier(abc.ABC):
    """
    Abstract base class for all freight carriers.

    Subclasses own their credentials and request assembly; this class only
    fixes the quotation entry point and the summary shape used by the CLI.
    """

    @classmethod
    def get_carrier_id(cls) -> str:
        """
        Get the unique identifier for this carrier.

        Returns:
            String identifier for the carrier.
        """
        # e.g., BraspressClient -> "BRASPRESS"
        class_name = cls.__name__
        for suffix in ("Client", "Carrier"):
            if class_name.endswith(suffix):
                return class_name[:-len(suffix)].upper()
        return class_name.upper()

    @classmethod
    def get_display_name(cls) -> str:
        """Get the human-readable name for this carrier."""
        return cls.get_carrier_id().replace('_', ' ').title()

    def __init__(self, name: str, base_url: str):
        self.name = name
        self.base_url = base_url

    @abc.abstractmethod
    def request_quotation(
        self,
        shipment_data: Dict[str, Any],
        response_format: str = "json",
        modalities: Union[str, List[str]] = "R",
    ) -> Dict[str, Any]:
        """Request freight quotations, keyed by modality label."""
        raise NotImplementedError

    def standardize_response(self, label: str, raw_result: Any) -> Dict[str, Any]:
        """
        Flatten one modality's raw quotation into a summary row.

        The remote schema is passed through untouched by request_quotation;
        this only picks the commonly present fields for display.
        """
        data = raw_result if isinstance(raw_result, dict) else {}
        # XML responses come back wrapped in their root element
        if len(data) == 1:
            only = next(iter(data.values()))
            if isinstance(only, dict):
                data = only

        return {
            "carrier_id": self.name,
            "carrier_name": self.get_display_name(),
            "modality": label,
            "quote_id": data.get("id"),
            "lead_time_days": self._normalize_numeric(data.get("prazo")),
            "total_freight": self._normalize_numeric(data.get("totalFrete")),
        }

    def _normalize_numeric(self, value: Any) -> Optional[float]:
        """
        Normalize numeric values to float type or None.
        """
        if value is None:
            return None

        try:
            if isinstance(value, str):
                # Braspress amounts may use a decimal comma
                cleaned = value.strip()
                if "," in cleaned and "." in cleaned:
                    cleaned = cleaned.replace('.', '').replace(',', '.')
                else:
                    cleaned = cleaned.replace(',', '.')
                return float(cleaned)
            return float(value)
        except (ValueError, TypeError):
            return None
