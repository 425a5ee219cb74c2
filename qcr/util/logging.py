import json, sys, time, os
from .secrets import redact_dict, redact
from .const import DEFAULTS

_LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}

def _enabled(lvl: str) -> bool:
    threshold = os.getenv("QCR_LOG_LEVEL", DEFAULTS["LOG_LEVEL"]).upper()
    return _LEVELS.get(lvl.upper(), 0) >= _LEVELS.get(threshold, _LEVELS["WARN"])

def log(lvl: str, where: str, msg: str, **kw):
    # stdout carries command output; diagnostics go to stderr
    if not _enabled(lvl):
        return
    redacted_kw = redact_dict(kw)

    if os.getenv("QCR_LOG_FORMAT", "json") == "json":
        rec = {"ts": time.time(), "lvl": lvl, "where": where, "msg": redact(msg)}
        rec.update(redacted_kw)
        sys.stderr.write(json.dumps(rec, ensure_ascii=False, default=str) + "\n")
    else:
        sys.stderr.write(f"[{lvl}] {where}: {redact(msg)} {redacted_kw}\n")
    sys.stderr.flush()
