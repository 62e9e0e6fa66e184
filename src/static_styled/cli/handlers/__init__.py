from .extract import _extract_single_file, _print_batch_summary, handle_extract

__all__ = [
  "_extract_single_file",
  "_print_batch_summary",
  "handle_extract",
]
