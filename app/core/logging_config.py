import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root logging plus the `audit` logger, which prints bare JSON lines"""
    logging.basicConfig(level=level, format=LOG_FORMAT)

    audit_logger = logging.getLogger("audit")
    if not audit_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        audit_logger.addHandler(handler)
    audit_logger.setLevel(logging.INFO)
    # Audit lines are already complete; keep them out of the root handlers
    audit_logger.propagate = False
