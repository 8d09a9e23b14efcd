"""
Cargo manifest: the ordered list of volumes quoted in one session.

A manifest only ever grows through ``add``; totals are derived on demand so
every quotation sees the volumes held at call time.
"""

import math
from decimal import Decimal
from typing import Any, Dict, List, Mapping, NamedTuple, Tuple

from .exceptions import BraspressValidationError
from .mappings import DIMENSION_KEYS


class Volume(NamedTuple):
    """One physical package. Dimensions in meters, weight in kg."""

    comprimento: float
    largura: float
    altura: float
    peso: float


def validate_positive_number(value: Any, field: str) -> float:
    """
    Coerce a weight or dimension to float, rejecting anything that isn't a
    finite number greater than zero.

    Numeric strings are accepted ("0.67"); booleans are not.

    Raises:
        BraspressValidationError: If the value is missing, non-numeric or <= 0
    """
    if isinstance(value, bool) or value is None:
        raise BraspressValidationError(f"Invalid {field}: {value!r}")

    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise BraspressValidationError(f"Invalid {field}: {value!r}") from None
    else:
        raise BraspressValidationError(f"Invalid {field}: {value!r}")

    if not math.isfinite(number) or number <= 0:
        raise BraspressValidationError(f"Invalid {field}: {value!r}")
    return number


class CargoManifest:
    """Ordered, append-only collection of volumes with derived totals."""

    def __init__(self):
        self._volumes: List[Volume] = []

    def add(self, weight: Any, dimensions: Mapping[str, Any]) -> Volume:
        """
        Validate and append a volume.

        Args:
            weight: Weight in kg
            dimensions: Mapping with comprimento, largura and altura in meters

        Returns:
            The stored volume

        Raises:
            BraspressValidationError: If the weight or any dimension is invalid.
                The manifest is left unchanged.
        """
        peso = validate_positive_number(weight, "weight")

        if not isinstance(dimensions, Mapping):
            raise BraspressValidationError("Invalid dimensions: expected a mapping")
        missing = [key for key in DIMENSION_KEYS if dimensions.get(key) is None]
        if missing:
            raise BraspressValidationError(f"Invalid dimensions: missing {', '.join(missing)}")

        measures = [validate_positive_number(dimensions[key], f"dimension {key}") for key in DIMENSION_KEYS]

        volume = Volume(*measures, peso=peso)
        self._volumes.append(volume)
        return volume

    def clear(self) -> None:
        self._volumes.clear()

    @property
    def volumes(self) -> Tuple[Volume, ...]:
        return tuple(self._volumes)

    @property
    def count(self) -> int:
        return len(self._volumes)

    @property
    def total_weight(self) -> float:
        return sum(volume.peso for volume in self._volumes)

    def cubage(self) -> List[Dict[str, Any]]:
        """Per-volume cubage entries; each always counts as a single volume."""
        return [
            {
                "comprimento": volume.comprimento,
                "largura": volume.largura,
                "altura": volume.altura,
                "volumes": 1,
            }
            for volume in self._volumes
        ]

    def __len__(self) -> int:
        return self.count
