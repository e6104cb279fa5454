"""Core helpers shared by the report assembler."""

from .async_utils import gather_limited, make_semaphore, run_sync, run_sync_limited

__all__ = ["gather_limited", "make_semaphore", "run_sync", "run_sync_limited"]
