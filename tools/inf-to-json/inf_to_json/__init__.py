from .errors import (
    ConfigError,
    DocumentReadError,
    EncodingError,
    ExitCode,
    InfReportError,
    MissingInstallSectionError,
    MissingSectionError,
    ResourceExhaustionError,
    UnclassifiedError,
)
from .reader import InfFile
from .render import render_report, report_to_json
from .report import Manufacturer, Model, select_report_data

__all__ = (
    "ConfigError",
    "DocumentReadError",
    "EncodingError",
    "ExitCode",
    "InfFile",
    "InfReportError",
    "Manufacturer",
    "MissingInstallSectionError",
    "MissingSectionError",
    "Model",
    "ResourceExhaustionError",
    "UnclassifiedError",
    "render_report",
    "report_to_json",
    "select_report_data",
)
