"""Wrapped Builder: customer spreadsheets to "Year Wrapped" slide decks.

Packages:
    schema:    Typed models, themes, and the session workflow state
    processor: Spreadsheet ingestion, column mapping, customer records, bulk runs
    generator: Prompt building, the generation client, sanitizing, rendering
    qa:        Checks on generated slide lists
    api:       FastAPI application
"""

__version__ = "0.1.0"
