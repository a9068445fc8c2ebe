# core/logging.py
# -*- coding: utf-8 -*-
"""
Logging for the grievance desk.

- logger    : stdout, for operators
- log_event : per-complaint audit trail, LOG_DIR/<complaint id>.jsonl
- read_events : the trail back, oldest first

Every audit line carries the same envelope:

    {"seq", "timestamp", "record_id", "event", ...payload}

`event` is one of EVENT_TYPES and `seq` counts lines within the file, so a
gap or reordering is visible when the trail is read back.
"""

import json
import logging
import re
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from .config import LOG_DIR

# ------------------------------------------------
# terminal logger
# ------------------------------------------------
logger = logging.getLogger("grievance_desk")
logger.setLevel(logging.DEBUG)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s", datefmt="%H:%M:%S")
    )
    logger.addHandler(handler)


# ------------------------------------------------
# audit trail
# ------------------------------------------------

EVENT_TYPES = ("complaint_submitted", "status_transition")

# complaint ids are uuid4 strings; anything else never becomes a file name
_RECORD_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

_ENVELOPE_KEYS = ("seq", "timestamp", "record_id", "event")


def _trail_path(record_id: str):
    if not _RECORD_ID_RE.match(record_id or ""):
        raise ValueError(f"invalid record id for audit log: {record_id!r}")
    return LOG_DIR / f"{record_id}.jsonl"


def _line_count(path) -> int:
    if not path.exists():
        return 0
    with path.open("r", encoding="utf-8") as f:
        return sum(1 for line in f if line.strip())


def log_event(record_id: str, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
    """
    Append one audit line for a complaint.

    Unknown event types and unsafe ids are programming errors (ValueError).
    Disk problems only cost the audit line: logged, never raised. The
    complaint itself is already committed at this point.
    """
    if event not in EVENT_TYPES:
        raise ValueError(f"unknown audit event type: {event!r}")
    path = _trail_path(record_id)

    fields = {k: v for k, v in (payload or {}).items() if k not in _ENVELOPE_KEYS}

    try:
        record = {
            "seq": _line_count(path) + 1,
            "timestamp": datetime.utcnow().isoformat(),
            "record_id": record_id,
            "event": event,
            **fields,
        }
        with path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
    except OSError as e:
        logger.warning(f"audit log write failed for {record_id}: {e}")


def read_events(record_id: str) -> List[Dict[str, Any]]:
    """Audit lines for one complaint in write order; [] when none were written."""
    path = _trail_path(record_id)
    if not path.exists():
        return []

    events = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                events.append(json.loads(line))
            except ValueError:
                logger.warning(f"skipping corrupt audit line for {record_id}")
    return events
