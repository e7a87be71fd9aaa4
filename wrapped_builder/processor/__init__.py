"""Data processor module for the report builder."""

from .bulk import BulkJob, BulkOrchestrator, BulkResult
from .ingestion import clean_columns, ingest, read_csv, read_excel
from .mapper import auto_map, classify_column, mapping_summary, update_mapping
from .transform import build_customer, build_customers
