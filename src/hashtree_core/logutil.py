import logging
import re
from typing import Iterable, Union


_LONG_HEX = re.compile(r"\b([0-9a-f]{12})[0-9a-f]{20,}\b")


class DigestAbbreviatingFilter(logging.Filter):
    """Shorten full-length hex digests in log records to their first 12 chars.

    DEBUG records are left untouched so the full values stay available when
    troubleshooting a mismatch.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno <= logging.DEBUG:
            return True
        msg = record.getMessage()
        short = _LONG_HEX.sub(r"\1…", msg)
        if short != msg:
            record.msg = short
            record.args = None
        return True


def setup_logging(
    level: Union[int, str] = logging.INFO,
    loggers: Iterable[str] = ("hashtree_core", "hashtree_sdk", "hashtree_cli"),
) -> None:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level: {level!r}")
        level = resolved
    logging.basicConfig(level=level)
    # Logger filters do not see records propagated from child loggers
    # (hashtree_core.proof etc.), so the filter goes on the handlers.
    f = DigestAbbreviatingFilter()
    for h in logging.getLogger().handlers:
        if not any(isinstance(x, DigestAbbreviatingFilter) for x in h.filters):
            h.addFilter(f)
    for name in loggers:
        logging.getLogger(name).setLevel(level)
