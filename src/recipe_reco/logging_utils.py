# logging_utils.py
"""
logging_utils.py

Central logging utilities for the recipe recommendation engine.

Log format (one line per log entry):
<RunId>|<Date>|<Time>|<Level>|<File:Line>|<Module.Func>|<ModulePurpose>|
<InvokingFunc>|<InvokingFuncPurpose>|<Detail>|<NextStep>|<Resolution>|<END>
"""

from __future__ import annotations

import datetime
import logging
import uuid
from typing import Dict

LOG_RUN_ID: str = uuid.uuid4().hex[:8]
# Alias used by callers that tag records explicitly
RUN_ID: str = LOG_RUN_ID


class StructuredFormatter(logging.Formatter):
    """
    Emit a single '|' separated line per record.

    Optional context is read from the record's ``extra`` attributes:
    invoking_func, invoking_purpose, next_step, resolution, run_id.
    """

    # High-level purposes by module name
    MODULE_PURPOSES: Dict[str, str] = {
        "orchestrator": "Fan out the four candidate generators and persist their output",
        "base": "Run a candidate generator behind a failure boundary",
        "ai_preference": "Profile-driven candidates from the external recipe search",
        "trending": "Community trending candidates from the catalog",
        "similar_users": "Collaborative candidates from overlapping favorites",
        "seasonal": "Season-of-year candidates from the external recipe search",
        "merger": "Upsert canonical recipes into the shared catalog",
        "store": "TTL-bounded recommendation persistence",
        "query": "Serve live recommendations per channel",
        "spoonacular": "HTTP client for the external recipe search provider",
        "collaborators": "Read profiles and favorites from Supabase",
        "config": "Create Supabase client and settings from environment variables",
        "cli": "Command line entry points for refresh / show / reap",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        """Format log record into structured pipe-delimited format."""
        dt = datetime.datetime.fromtimestamp(record.created)
        date_str = dt.strftime("%Y-%m-%d")
        time_str = dt.strftime("%H:%M:%S")

        run_id = getattr(record, "run_id", RUN_ID)

        level = record.levelname
        code_location = f"{record.filename}:{record.lineno}"
        func_name = record.funcName
        module_name = record.module
        module_purpose = self.MODULE_PURPOSES.get(module_name, "")

        invoking_func = getattr(record, "invoking_func", "")
        invoking_purpose = getattr(record, "invoking_purpose", "")
        next_step = getattr(record, "next_step", "")
        resolution = getattr(record, "resolution", "")

        detail = record.getMessage()
        line = (
            f"{run_id}|{date_str}|{time_str}|{level}|{code_location}|"
            f"{module_name}.{func_name}|{module_purpose}|"
            f"{invoking_func}|{invoking_purpose}|"
            f"{detail}|{next_step}|{resolution}|<END>"
        )
        if record.exc_info:
            line = f"{line} | EXC={self.formatException(record.exc_info)}"
        return line


def init_logging(level: int = logging.INFO) -> None:
    """
    Initialize root logger once with our StructuredFormatter.

    Call get_logger() from modules instead of calling logging.basicConfig()
    everywhere, so configuration stays central.
    """
    root = logging.getLogger()
    if root.handlers:
        # Already configured (pytest, REPL, host application)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger configured with structured formatting.

    Usage:
        logger = get_logger("orchestrator")
        logger.warning(
            "Channel degraded",
            extra={
                "invoking_func": "refresh",
                "invoking_purpose": "Regenerate recommendations for a user",
                "next_step": "Continue with remaining channels",
                "resolution": "Check external provider",
            },
        )
    """
    init_logging()
    return logging.getLogger(name)
