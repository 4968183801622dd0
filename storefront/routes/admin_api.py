"""Administration routes under ``/api/admin``."""

from flask import Blueprint
from werkzeug.wrappers import Response

from . import respond
from .. import domain
from ..auth.decorators import scoped
from ..controllers import admin

blueprint = Blueprint('admin', __name__, url_prefix='/api/admin')


@blueprint.route('/users', methods=['GET'])
@scoped(domain.Role.ADMIN)
def list_users() -> Response:
    """All accounts."""
    return respond(*admin.list_users())
