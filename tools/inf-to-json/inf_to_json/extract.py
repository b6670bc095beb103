from __future__ import annotations

from dataclasses import dataclass

from .errors import MissingInstallSectionError
from .reader import CaseInsensitiveText, InfFile, SectionName


MANUFACTURER_SECTION = "Manufacturer"


@dataclass(frozen=True)
class ManufacturerLine:
    """
    Parsed representation of one line in the `[Manufacturer]` section.

    Example line:

        %Aero% = Aero, NTamd64.6.1, NTx86.6.1

    - `name`: expanded manufacturer name (left-hand key).
    - `models_section_name`: base models section name (e.g. `Aero`).
    - `architectures`: target OS/platform qualifiers that combine with the
      base section as `base.arch`.
    """

    name: CaseInsensitiveText
    models_section_name: SectionName
    architectures: tuple[str, ...] = ()


@dataclass(frozen=True)
class DeviceDescriptionLine:
    """
    Parsed representation of a device entry in a models section.

    Example line:

        %AeroVirtioInput.DeviceDesc% = AeroVirtioInput_Install, PCI\\VEN_1AF4&DEV_1052

    The first hardware ID is the device's HWID; any following entries are
    compatible IDs.
    """

    device_description: CaseInsensitiveText
    install_section: SectionName
    hardware_ids: tuple[str, ...] = ()


def extract_sections(inf: InfFile) -> set[SectionName]:
    return inf.enumerate_sections()


def extract_manufacturers(inf: InfFile) -> list[ManufacturerLine]:
    """Parse `[Manufacturer]` in file order. Raises MissingSectionError if absent."""

    out: list[ManufacturerLine] = []
    for line in inf.lines(MANUFACTURER_SECTION):
        name = CaseInsensitiveText(line.key)
        if line.field_count > 0:
            models_section_name = SectionName(line.field_at(0))
        else:
            models_section_name = SectionName(name)
        out.append(
            ManufacturerLine(
                name=name,
                models_section_name=models_section_name,
                architectures=line.fields[1:],
            )
        )
    return out


def extract_device_descriptions(inf: InfFile, models_section_name: str) -> list[DeviceDescriptionLine]:
    """
    Parse a models section (`Aero` or `Aero.NTamd64.6.1`) into device entries.

    Every line must name an install section; a line with no fields aborts the
    whole run.
    """

    out: list[DeviceDescriptionLine] = []
    for line in inf.lines(models_section_name):
        if line.field_count == 0:
            raise MissingInstallSectionError(str(models_section_name), line.line_number)
        out.append(
            DeviceDescriptionLine(
                device_description=CaseInsensitiveText(line.key),
                install_section=SectionName(line.field_at(0)),
                hardware_ids=line.fields[1:],
            )
        )
    return out
