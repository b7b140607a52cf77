"""Export-Modul: CSV-Datei und Terminal-Ansichten für einen Lauf."""

from export.csv_export import CsvExport, CsvExporter
from export.helpers import EntryLabels

__all__ = ["CsvExport", "CsvExporter", "EntryLabels"]
