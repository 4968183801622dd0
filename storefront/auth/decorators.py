"""
Session-based authorization of requests.

This module provides :func:`scoped`, a decorator factory used to protect Flask
routes for which authorization is required. A route may require a particular
role, and/or provide a custom authorizer function. The call signature of the
authorizer function should be:
``(session: domain.Session, *args, **kwargs) -> bool``, where `*args` and
`**kwargs` are the arguments passed by Flask to the decorated route function
(e.g. the URL parameters).

For example, to restrict catalog writes to the owner of the store:

.. code-block:: python

   def owns_store(session: domain.Session, store_id: str, **kw) -> bool:
       return catalog.get_store(store_id).user_id == session.user_id


   @blueprint.route('/<store_id>/sizes', methods=['POST'])
   @scoped(authorizer=owns_store)
   def create_size(store_id: str):
       ...

When the decorated route function is called...

- If there is no valid session on the request, :class:`.AuthenticationError`
  (401) is raised.
- If a role was required and the session does not have it, or the authorizer
  returns ``False``, :class:`.AuthorizationError` (403) is raised.
- Otherwise the route is called with the original parameters.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional

from flask import request

from .. import domain
from ..exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)


def scoped(role: Optional[domain.Role] = None,
           authorizer: Optional[Callable] = None) -> Callable:
    """
    Generate a decorator to enforce authorization requirements.

    Parameters
    ----------
    role : :class:`.domain.Role`
        Role required of the session user, if any.
    authorizer : function
        Called with the session and the route arguments; the request is
        denied if it returns ``False``.

    Returns
    -------
    function

    """
    def protector(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            session: Optional[domain.Session] = request.auth
            if session is None:
                logger.debug('No valid session; aborting')
                raise AuthenticationError('Not authenticated')

            if role is not None and session.role is not role:
                logger.debug('Session lacks role %s', role.value)
                raise AuthorizationError('Unauthorized')

            if authorizer and not authorizer(session, *args, **kwargs):
                logger.debug('Authorizer returned negative result')
                raise AuthorizationError('Unauthorized')

            return func(*args, **kwargs)
        return wrapper
    return protector
