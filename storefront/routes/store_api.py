"""Store and catalog routes, and the health check."""

import logging

from flask import Blueprint, jsonify, request
from werkzeug.wrappers import Response

from . import json_body, respond
from ..auth.decorators import scoped
from ..controllers import catalog
from ..services import database

logger = logging.getLogger(__name__)
blueprint = Blueprint('store', __name__, url_prefix='/api')

RESOURCE = 'any(billboards,categories,sizes,colors,products,variants)'


@blueprint.route('/status', methods=['GET'])
def status() -> Response:
    """Get whether the app and its database are available."""
    if database.is_available():
        return jsonify({'status': 'ok'})
    response = jsonify({'status': 'unavailable'})
    response.status_code = 503
    return response


@blueprint.route('/stores', methods=['GET'])
@scoped()
def list_stores() -> Response:
    """Stores owned by the signed-in user."""
    return respond(*catalog.list_stores(request.auth.user_id))


@blueprint.route('/stores', methods=['POST'])
@scoped()
def create_store() -> Response:
    """Create a store."""
    return respond(*catalog.create_store(request.auth.user_id, json_body()))


@blueprint.route(f'/<string:store_id>/<{RESOURCE}:resource>',
                 methods=['GET'])
def list_items(store_id: str, resource: str) -> Response:
    """List a catalog resource."""
    return respond(*catalog.list_items(store_id, resource, request.args))


@blueprint.route(f'/<string:store_id>/<{RESOURCE}:resource>',
                 methods=['POST'])
@scoped(authorizer=catalog.owns_store)
def create_item(store_id: str, resource: str) -> Response:
    """Create a catalog item."""
    return respond(*catalog.create_item(store_id, resource, json_body()))


@blueprint.route(f'/<string:store_id>/<{RESOURCE}:resource>'
                 '/<string:item_id>', methods=['GET'])
def get_item(store_id: str, resource: str, item_id: str) -> Response:
    """Get a catalog item."""
    return respond(*catalog.get_item(store_id, resource, item_id))


@blueprint.route(f'/<string:store_id>/<{RESOURCE}:resource>'
                 '/<string:item_id>', methods=['PATCH'])
@scoped(authorizer=catalog.owns_store)
def update_item(store_id: str, resource: str, item_id: str) -> Response:
    """Update a catalog item."""
    return respond(*catalog.update_item(store_id, resource, item_id,
                                        json_body()))


@blueprint.route(f'/<string:store_id>/<{RESOURCE}:resource>'
                 '/<string:item_id>', methods=['DELETE'])
@scoped(authorizer=catalog.owns_store)
def delete_item(store_id: str, resource: str, item_id: str) -> Response:
    """Delete a catalog item."""
    return respond(*catalog.delete_item(store_id, resource, item_id))
