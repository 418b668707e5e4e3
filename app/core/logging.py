import logging
import sys

_configured = False

def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for the API process.

    Application loggers (``app.*``) log at the configured level; uvicorn's
    access log is kept at WARNING so request lines do not drown out service
    events.
    """
    global _configured
    if _configured:
        return

    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.captureWarnings(True)
    _configured = True
