"""Controllers for site administrators."""

import logging
from typing import Tuple

from retry import retry

from .. import domain
from ..services import users
from ..services.exceptions import Unavailable

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def list_users() -> ResponseData:
    """All accounts, without credentials or tokens."""
    return {'users': [domain.to_dict(u) for u in users.list_users()]}, 200, {}
