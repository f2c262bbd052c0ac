import logging
from .sessions import SessionRegistry
from . import config

logging.basicConfig(
    level=config.Logging.LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("shamscloud")

SESSIONS = SessionRegistry(config.Auth.SESSION_MAX_AGE)
