"""
Build the manufacturer/model report from an INF file.

Steps:
  1. Enumerate all section names.
  2. Extract manufacturers from `[Manufacturer]`.
  3. For each manufacturer, resolve which base and architecture-specific
     models sections actually exist.
  4. Parse devices from each resolved models section.
  5. Group devices by (description, hardware IDs), gathering the list of
     architectures under which each was seen.
  6. Check every string is representable as UTF-8 and produce the report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from .extract import ManufacturerLine, extract_device_descriptions, extract_manufacturers, extract_sections
from .reader import CaseInsensitiveText, InfFile, SectionName
from .text import to_external_text


ARCHITECTURE_DELIMITER = "."

_HASH_MASK = (1 << 64) - 1


@dataclass(frozen=True)
class ModelsSectionCorrelation:
    # Empty for the base (unqualified) models section.
    architecture: str
    models_section: SectionName


def correlate_models_sections(
    manufacturer: ManufacturerLine, all_sections: set[SectionName]
) -> Iterator[ModelsSectionCorrelation]:
    """
    Lazily yield the existing models sections for a manufacturer.

    The base section comes first (if present), then `base.arch` for each
    architecture qualifier in declared order. Qualifiers without a matching
    section are skipped.
    """

    base = manufacturer.models_section_name
    if base in all_sections:
        yield ModelsSectionCorrelation(architecture="", models_section=base)

    for architecture in manufacturer.architectures:
        composed = SectionName(f"{base}{ARCHITECTURE_DELIMITER}{architecture}")
        if composed in all_sections:
            yield ModelsSectionCorrelation(architecture=architecture, models_section=composed)


class ModelKey:
    """
    Identity used to merge models across sections.

    The description compares case-insensitively; the hardware IDs compare as an
    ordered, case-sensitive sequence.
    """

    __slots__ = ("description", "hardware_ids")

    def __init__(self, description: str, hardware_ids: Iterable[str]) -> None:
        self.description = CaseInsensitiveText(description)
        self.hardware_ids = tuple(hardware_ids)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModelKey):
            return NotImplemented
        return (
            self.description.lower() == other.description.lower()
            and len(self.hardware_ids) == len(other.hardware_ids)
            and all(a == b for a, b in zip(self.hardware_ids, other.hardware_ids))
        )

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        result = hash(self.description.lower())
        for hardware_id in self.hardware_ids:
            result = (result * 131 + hash(hardware_id)) & _HASH_MASK
        return result

    def __repr__(self) -> str:
        return f"ModelKey(description={str(self.description)!r}, hardware_ids={list(self.hardware_ids)!r})"


def aggregate_models(inf: InfFile, correlations: Iterable[ModelsSectionCorrelation]) -> dict[ModelKey, list[str]]:
    model_data: dict[ModelKey, list[str]] = {}
    for correlation in correlations:
        for device in extract_device_descriptions(inf, correlation.models_section):
            key = ModelKey(device.device_description, device.hardware_ids)
            architectures = model_data.get(key)
            if architectures is not None:
                # Repeats are kept: the same key seen twice under one tag lists it twice.
                architectures.append(correlation.architecture)
            else:
                model_data[key] = [correlation.architecture]
    return model_data


@dataclass(frozen=True)
class Model:
    description: str
    hardware_ids: tuple[str, ...] = ()
    architectures: tuple[str, ...] = ()

    def to_json(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "hardware_ids": list(self.hardware_ids),
            "architectures": list(self.architectures),
        }

    @classmethod
    def from_json(cls, data: Any) -> "Model":
        raise TypeError("Model is export-only: the report cannot be converted back into INF declarations")


@dataclass(frozen=True)
class Manufacturer:
    name: str
    devices: tuple[Model, ...] = field(default_factory=tuple)

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "devices": [device.to_json() for device in self.devices],
        }

    @classmethod
    def from_json(cls, data: Any) -> "Manufacturer":
        raise TypeError("Manufacturer is export-only: the report cannot be converted back into INF declarations")


Report = list[Manufacturer]


def _build_manufacturer(name: str, model_data: dict[ModelKey, list[str]]) -> Manufacturer:
    devices: list[Model] = []
    for key, architectures in model_data.items():
        devices.append(
            Model(
                description=to_external_text(str(key.description)),
                hardware_ids=tuple(to_external_text(hardware_id) for hardware_id in key.hardware_ids),
                architectures=tuple(to_external_text(architecture) for architecture in architectures),
            )
        )
    return Manufacturer(name=to_external_text(name), devices=tuple(devices))


def select_report_data(inf: InfFile) -> Report:
    """
    Build the final report from an INF file.

    Raises an `InfReportError` subclass on the first malformed or missing
    input; no partial report is returned.
    """

    output: Report = []
    all_sections = extract_sections(inf)
    for inf_manufacturer in extract_manufacturers(inf):
        model_data = aggregate_models(inf, correlate_models_sections(inf_manufacturer, all_sections))
        output.append(_build_manufacturer(str(inf_manufacturer.name), model_data))
    return output
