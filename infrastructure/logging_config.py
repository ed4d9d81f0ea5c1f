import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once at application start"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # passlib logs a noisy warning when probing the bcrypt backend version
    logging.getLogger("passlib").setLevel(logging.ERROR)
