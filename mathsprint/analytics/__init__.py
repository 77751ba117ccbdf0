from .summary import config_summary, export_ndjson, records_frame

__all__ = ["config_summary", "export_ndjson", "records_frame"]
