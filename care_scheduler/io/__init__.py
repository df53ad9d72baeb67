"""I/O utilities for CSV import/export."""

from .export_csv import export_conflicts_csv, export_schedule_csv
from .import_csv import import_certifications_csv, import_shifts_csv, import_staff_csv, import_time_off_csv

__all__ = [
    "import_staff_csv",
    "import_certifications_csv",
    "import_shifts_csv",
    "import_time_off_csv",
    "export_schedule_csv",
    "export_conflicts_csv",
]
