"""Input adapters turning raw log dumps into EventLog records."""

from inkscale.clients.jsonl import event_log_from_record, iter_logs

__all__ = ["event_log_from_record", "iter_logs"]
