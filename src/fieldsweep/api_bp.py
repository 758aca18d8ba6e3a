from flask import Blueprint
from flask import current_app
from flask import request
from flask import jsonify

from fieldsweep.exceptions import NotFoundException
from fieldsweep.exceptions import ForbiddenException
from fieldsweep.exceptions import StoreConflictException
from fieldsweep.exceptions import MalformedFieldException

import logging
log = logging.getLogger(__name__)


api_bp = Blueprint('api', __name__, url_prefix='/api')


def serialize_field(field):
    field_data = field.to_data()
    field_data['id'] = field_data.pop('_id')
    return field_data


def serialize_view(view_data):
    view_data = dict(view_data)
    view_data['id'] = view_data.pop('_id')
    return view_data


@api_bp.route("/tables/<table_id>/fields", methods=['GET', 'POST'])
def table_fields(table_id):
    api = current_app.config['api']
    if request.method == 'GET':
        return jsonify([serialize_field(field) for field in api.get_fields(table_id)])
    try:
        field = api.create_field(table_id, request.json or {})
    except MalformedFieldException as me:
        log.exception("MalformedFieldException on POST for %s", table_id)
        return jsonify({"error": str(me)}), 400
    return jsonify(serialize_field(field)), 201


@api_bp.route("/tables/<table_id>/fields/<field_id>", methods=['GET', 'DELETE'])
def table_field(table_id, field_id):
    api = current_app.config['api']
    try:
        if request.method == 'GET':
            field = api.get_field(field_id)
            if field.table_id != table_id:
                return jsonify({"error": "Not Found"}), 404
            return jsonify(serialize_field(field))
        api.delete_field(table_id, field_id)
    except NotFoundException as nfe:
        return jsonify({"error": str(nfe)}), 404
    except ForbiddenException as fe:
        log.warning("Forbidden DELETE for %s %s: %s", table_id, field_id, fe)
        return jsonify({"error": str(fe)}), 403
    except StoreConflictException as sce:
        log.exception("StoreConflictException on DELETE for %s %s", table_id, field_id)
        return jsonify({"error": str(sce)}), 409
    except MalformedFieldException as me:
        log.exception("MalformedFieldException on DELETE for %s %s", table_id, field_id)
        return jsonify({"error": str(me)}), 400
    return jsonify({})


@api_bp.route("/tables/<table_id>/views", methods=['GET', 'POST'])
def table_views(table_id):
    api = current_app.config['api']
    if request.method == 'GET':
        return jsonify([serialize_view(view) for view in api.get_views(table_id)])
    name = (request.json or {}).get('name')
    if not name:
        return jsonify({"error": "View name cannot be blank"}), 400
    return jsonify(serialize_view(api.create_view(table_id, name))), 201
