# util/timing.py
import time
from contextlib import contextmanager
from typing import Any, Iterator
import logging


@contextmanager
def timed(logger: logging.Logger, name: str, **kv: Any) -> Iterator[None]:
    """
    Usage:
      with timed(logger, "s3.upload", key=key):
          ...
    Emits one INFO on exit: "<name>.done ms=<int> key=val ..."
    A raised exception is tagged with failed=1 and re-raised.
    """
    t0 = time.perf_counter()
    failed = False
    try:
        yield
    except BaseException:
        failed = True
        raise
    finally:
        dt_ms = int((time.perf_counter() - t0) * 1000)
        suffix = "".join(f" {k}={v}" for k, v in kv.items())
        if failed:
            suffix += " failed=1"
        logger.info("%s.done ms=%d%s", name, dt_ms, suffix)
