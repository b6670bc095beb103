"""Error taxonomy and process exit codes for inf-to-json."""

from __future__ import annotations

import enum


class ExitCode(enum.IntEnum):
    SUCCESS = 0
    INVALID_ARGUMENTS = 1
    ERROR = 2
    UNSPECIFIED_ERROR = 3
    OUT_OF_MEMORY = 4
    MISSING_SECTION = 5
    MISSING_INSTALL_SECTION = 6
    ENCODING_ERROR = 7
    OUT_OF_DATE = 8


class InfReportError(RuntimeError):
    """Base class for every failure that aborts a report run."""

    exit_code = ExitCode.ERROR
    kind = "error"


class DocumentReadError(InfReportError):
    kind = "document_read"


class ConfigError(InfReportError):
    exit_code = ExitCode.INVALID_ARGUMENTS
    kind = "config"


class MissingSectionError(InfReportError):
    exit_code = ExitCode.MISSING_SECTION
    kind = "missing_section"

    def __init__(self, section: str) -> None:
        super().__init__(f"required section is missing: [{section}]")
        self.section = section


class MissingInstallSectionError(InfReportError):
    exit_code = ExitCode.MISSING_INSTALL_SECTION
    kind = "missing_install_section"

    def __init__(self, section: str, line_number: int | None = None) -> None:
        where = f"[{section}]" if line_number is None else f"[{section}] line {line_number}"
        super().__init__(f"install-section-name field is missing: {where}")
        self.section = section
        self.line_number = line_number


class EncodingError(InfReportError):
    exit_code = ExitCode.ENCODING_ERROR
    kind = "encoding"


class ResourceExhaustionError(InfReportError):
    exit_code = ExitCode.OUT_OF_MEMORY
    kind = "out_of_memory"


class UnclassifiedError(InfReportError):
    exit_code = ExitCode.UNSPECIFIED_ERROR
    kind = "unspecified"
