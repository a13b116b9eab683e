"""Table catalogue, CSV loading, column typing, and the in-memory store."""
from .loader import discover_csvs, load_all_tables, load_table
from .store import DataStore
from .schemas import TableName, TableSpec, TABLE_SPECS, DESCRIPTION_TABLES
from .normalize import normalize_columns, add_patient_columns, add_encounter_columns
