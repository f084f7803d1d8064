"""
Ingestion layer - catalog snapshots from the shop spreadsheet export.

Submodules:
  catalog - JSON / CSV catalog parsers producing validated ServiceProvider
            records (all-or-nothing, with a per-row error report)
"""
