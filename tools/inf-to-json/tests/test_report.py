#!/usr/bin/env python3

from __future__ import annotations

import unittest

from inf_to_json.errors import EncodingError, MissingInstallSectionError, MissingSectionError
from inf_to_json.extract import ManufacturerLine
from inf_to_json.reader import InfFile, SectionName
from inf_to_json.report import (
    Manufacturer,
    Model,
    ModelKey,
    ModelsSectionCorrelation,
    correlate_models_sections,
    select_report_data,
)


def _inf(*lines: str) -> InfFile:
    return InfFile.parse("\n".join(lines) + "\n")


class CorrelateModelsSectionsTests(unittest.TestCase):
    def test_base_then_existing_qualifiers_in_declared_order(self) -> None:
        mfg = ManufacturerLine(
            name="Aero",
            models_section_name=SectionName("Aero"),
            architectures=("NTamd64", "NTarm64", "NTx86"),
        )
        sections = {SectionName("Aero"), SectionName("AERO.ntx86"), SectionName("Aero.NTamd64")}
        self.assertEqual(
            list(correlate_models_sections(mfg, sections)),
            [
                ModelsSectionCorrelation(architecture="", models_section=SectionName("Aero")),
                ModelsSectionCorrelation(architecture="NTamd64", models_section=SectionName("Aero.NTamd64")),
                ModelsSectionCorrelation(architecture="NTx86", models_section=SectionName("Aero.NTx86")),
            ],
        )

    def test_missing_base_is_skipped(self) -> None:
        mfg = ManufacturerLine(
            name="Aero", models_section_name=SectionName("Aero"), architectures=("NTamd64",)
        )
        result = list(correlate_models_sections(mfg, {SectionName("Aero.NTamd64")}))
        self.assertEqual([c.architecture for c in result], ["NTamd64"])

    def test_nothing_resolves(self) -> None:
        mfg = ManufacturerLine(
            name="Aero", models_section_name=SectionName("Aero"), architectures=("NTamd64",)
        )
        self.assertEqual(list(correlate_models_sections(mfg, {SectionName("Other")})), [])

    def test_qualifier_is_appended_verbatim(self) -> None:
        mfg = ManufacturerLine(
            name="Aero", models_section_name=SectionName("Aero"), architectures=(" NTamd64",)
        )
        # No trimming or normalization of the composed name.
        self.assertEqual(list(correlate_models_sections(mfg, {SectionName("Aero.NTamd64")})), [])

    def test_sequence_is_lazy(self) -> None:
        mfg = ManufacturerLine(
            name="Aero", models_section_name=SectionName("Aero"), architectures=("NTx86", "NTamd64")
        )
        sections = {SectionName("Aero"), SectionName("Aero.NTx86"), SectionName("Aero.NTamd64")}
        it = correlate_models_sections(mfg, sections)
        self.assertEqual(next(it).architecture, "")
        self.assertEqual(next(it).architecture, "NTx86")
        self.assertEqual([c.architecture for c in it], ["NTamd64"])
        self.assertEqual(list(it), [])


class ModelKeyTests(unittest.TestCase):
    def test_description_is_case_insensitive(self) -> None:
        a = ModelKey("Aero Device", ["HW1", "CID1"])
        b = ModelKey("AERO device", ("HW1", "CID1"))
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))

    def test_hardware_ids_are_case_sensitive(self) -> None:
        self.assertNotEqual(ModelKey("D1", ["HW1"]), ModelKey("D1", ["hw1"]))

    def test_hardware_id_order_matters(self) -> None:
        self.assertNotEqual(ModelKey("D1", ["HW1", "HW2"]), ModelKey("D1", ["HW2", "HW1"]))
        self.assertNotEqual(ModelKey("D1", ["HW1"]), ModelKey("D1", ["HW1", "HW2"]))

    def test_empty_hardware_ids(self) -> None:
        self.assertEqual(ModelKey("D1", []), ModelKey("d1", ()))
        self.assertNotEqual(ModelKey("D1", []), ModelKey("D1", [""]))

    def test_usable_as_dict_key(self) -> None:
        data = {ModelKey("D1", ["HW1"]): 1}
        self.assertEqual(data[ModelKey("d1", ["HW1"])], 1)
        self.assertNotIn(ModelKey("D1", ["hw1"]), data)
        self.assertFalse(ModelKey("D1", ["HW1"]) == "D1")


class SelectReportDataTests(unittest.TestCase):
    def test_base_and_qualified_sections_merge(self) -> None:
        inf = _inf(
            "[Manufacturer]",
            "Acme = Acme, ntamd64",
            "[Acme]",
            "D1 = Sx, HW1",
            "[Acme.ntamd64]",
            "D1 = Sy, HW1",
        )
        self.assertEqual(
            select_report_data(inf),
            [
                Manufacturer(
                    name="Acme",
                    devices=(Model(description="D1", hardware_ids=("HW1",), architectures=("", "ntamd64")),),
                )
            ],
        )

    def test_missing_qualified_section_is_skipped(self) -> None:
        inf = _inf(
            "[Manufacturer]",
            "Acme = Acme, ntamd64",
            "[Acme]",
            "D1 = Sx, HW1",
        )
        (mfg,) = select_report_data(inf)
        self.assertEqual(mfg.devices, (Model(description="D1", hardware_ids=("HW1",), architectures=("",)),))

    def test_description_case_merges_but_hardware_id_case_does_not(self) -> None:
        inf = _inf(
            "[Manufacturer]",
            "Acme = Acme, NTamd64",
            "[Acme]",
            "D1 = S1, HW1",
            "[Acme.NTamd64]",
            "d1 = S2, HW1",
            "D1 = S2, hw1",
        )
        (mfg,) = select_report_data(inf)
        self.assertEqual(
            mfg.devices,
            (
                Model(description="D1", hardware_ids=("HW1",), architectures=("", "NTamd64")),
                Model(description="D1", hardware_ids=("hw1",), architectures=("NTamd64",)),
            ),
        )

    def test_manufacturer_order_and_empty_manufacturers(self) -> None:
        inf = _inf(
            "[Manufacturer]",
            "Zeta = Zeta",
            "Ghost = Ghost, NTamd64",
            "Alpha",
            "[Alpha]",
            "A1 = I, HW-A",
            "[Zeta]",
            "Z1 = I, HW-Z",
        )
        report = select_report_data(inf)
        self.assertEqual([m.name for m in report], ["Zeta", "Ghost", "Alpha"])
        self.assertEqual(report[1].devices, ())
        self.assertEqual(report[2].devices[0].hardware_ids, ("HW-A",))

    def test_device_order_is_first_discovery(self) -> None:
        inf = _inf(
            "[Manufacturer]",
            "Acme = Acme, NTx86, NTamd64",
            "[Acme.NTx86]",
            "B = I, HW-B",
            "A = I, HW-A",
            "[Acme.NTamd64]",
            "C = I, HW-C",
            "A = I, HW-A",
        )
        (mfg,) = select_report_data(inf)
        self.assertEqual([d.description for d in mfg.devices], ["B", "A", "C"])
        self.assertEqual(mfg.devices[1].architectures, ("NTx86", "NTamd64"))

    def test_repeated_tags_are_preserved(self) -> None:
        inf = _inf(
            "[Manufacturer]",
            "Acme = Acme, NTamd64, NTamd64",
            "[Acme]",
            "D1 = I, HW1",
            "D1 = I2, HW1",
            "[Acme.NTamd64]",
            "D1 = I, HW1",
        )
        (mfg,) = select_report_data(inf)
        self.assertEqual(mfg.devices[0].architectures, ("", "", "NTamd64", "NTamd64"))

    def test_device_without_hardware_ids(self) -> None:
        inf = _inf(
            "[Manufacturer]",
            "Acme = Acme, NTamd64",
            "[Acme]",
            "Stub = Stub_Install",
            "[Acme.NTamd64]",
            "STUB = Other_Install",
        )
        (mfg,) = select_report_data(inf)
        self.assertEqual(mfg.devices, (Model(description="Stub", hardware_ids=(), architectures=("", "NTamd64")),))

    def test_strings_are_expanded(self) -> None:
        inf = _inf(
            "[Manufacturer]",
            "%Mfg% = Aero, NTamd64",
            "[Aero.NTamd64]",
            r"%Dev% = Install, PCI\VEN_1AF4&DEV_1042",
            "[Strings]",
            'Mfg = "Aero Project"',
            'Dev = "Aero Storage Controller"',
        )
        (mfg,) = select_report_data(inf)
        self.assertEqual(mfg.name, "Aero Project")
        self.assertEqual(mfg.devices[0].description, "Aero Storage Controller")
        self.assertEqual(mfg.devices[0].hardware_ids, (r"PCI\VEN_1AF4&DEV_1042",))

    def test_missing_install_section_aborts_everything(self) -> None:
        inf = _inf(
            "[Manufacturer]",
            "Good = Good",
            "Bad = Bad, NTamd64",
            "[Good]",
            "D1 = I, HW1",
            "[Bad.NTamd64]",
            "D2 =",
        )
        with self.assertRaises(MissingInstallSectionError):
            select_report_data(inf)

    def test_missing_manufacturer_section(self) -> None:
        with self.assertRaises(MissingSectionError):
            select_report_data(_inf("[Version]", "Signature = x"))

    def test_unencodable_text(self) -> None:
        inf = _inf("[Manufacturer]", "Acme", "[Acme]", "D1 = I, HW\ud800")
        with self.assertRaises(EncodingError):
            select_report_data(inf)

    def test_running_twice_is_identical(self) -> None:
        inf = _inf(
            "[Manufacturer]",
            "Acme = Acme, NTx86, NTamd64",
            "[Acme.NTx86]",
            "B = I, HW-B",
            "[Acme.NTamd64]",
            "B = I, HW-B",
        )
        self.assertEqual(select_report_data(inf), select_report_data(inf))


if __name__ == "__main__":
    unittest.main()
