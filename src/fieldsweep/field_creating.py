
from fieldsweep.field import Field, FieldType, LinkOptions, Relationship, generate_field_id
from fieldsweep.reference import RECORD_ID_KEY
from fieldsweep.exceptions import MalformedFieldException

import logging
log = logging.getLogger(__name__)


def _fk_name(field_id):
    return "__fk_%s" % (field_id,)


class FieldCreatingService(object):
    def __init__(self, txm, field_service, reference_service, view_service):
        self.txm = txm
        self.field_service = field_service
        self.reference_service = reference_service
        self.view_service = view_service

    def create_field(self, table_id, field_data):
        return self.txm.run(self._create_field, table_id, field_data)

    def _create_field(self, table_id, field_data):
        field = self._build_field(table_id, field_data)
        self._check_references(field)

        symmetric_field = None
        if field.is_link() and not field.is_lookup:
            symmetric_field = self._prepare_link(field, field_data.get('symmetric_name'))

        self.reference_service.create_references(field)
        self.field_service.insert_field(field)
        self.view_service.add_column_meta_order(table_id, [field.field_id])

        if symmetric_field is not None:
            symmetric_field.is_primary = not self.field_service.table_has_fields(symmetric_field.table_id)
            self.field_service.insert_field(symmetric_field)
            self.view_service.add_column_meta_order(symmetric_field.table_id, [symmetric_field.field_id])

        log.debug("Created field %s in %s", field, table_id)
        return field

    def _build_field(self, table_id, field_data):
        name = field_data.get('name')
        field_type = field_data.get('type')
        if not name:
            raise MalformedFieldException('Field name cannot be blank')
        if field_type not in FieldType.ALL:
            raise MalformedFieldException('Unrecognised field type: %s' % (field_type,))

        field = Field(
            generate_field_id(),
            table_id,
            name,
            field_type,
            options=dict(field_data.get('options') or {}),
            lookup_options=field_data.get('lookup_options'),
            is_lookup=field_data.get('is_lookup', False),
            is_primary=not self.field_service.table_has_fields(table_id))

        if (field.is_lookup or field_type == FieldType.ROLLUP) and not field.lookup_options:
            raise MalformedFieldException('Lookup and rollup fields require lookup options')
        if field.is_primary and field.is_computed():
            raise MalformedFieldException('Primary field cannot be computed from other fields')
        return field

    def _check_references(self, field):
        if field.lookup_options:
            lookup_options = field.lookup_options
            link_fields = self.field_service.find_fields([lookup_options['link_field_id']])
            if not link_fields or not link_fields[0].is_link() or link_fields[0].table_id != field.table_id:
                raise MalformedFieldException('No link field %s in table %s' % (lookup_options['link_field_id'], field.table_id))
            if link_fields[0].link_options().foreign_table_id != lookup_options['foreign_table_id']:
                raise MalformedFieldException('Link field %s does not link to %s' % (lookup_options['link_field_id'], lookup_options['foreign_table_id']))
            lookup_fields = self.field_service.find_fields([lookup_options['lookup_field_id']])
            if not lookup_fields or lookup_fields[0].table_id != lookup_options['foreign_table_id']:
                raise MalformedFieldException('No field %s in table %s' % (lookup_options['lookup_field_id'], lookup_options['foreign_table_id']))

        referenced_ids = field.referenced_field_ids()
        found_ids = [found.field_id for found in self.field_service.find_fields(referenced_ids)]
        missing = [field_id for field_id in referenced_ids if field_id not in found_ids]
        if missing:
            raise MalformedFieldException('Referenced fields do not exist: %s' % (", ".join(missing),))

    def _prepare_link(self, field, symmetric_name=None):
        if 'foreign_table_id' not in field.options:
            raise MalformedFieldException('Link field requires a foreign table')
        options = LinkOptions.from_data(field.options)
        if options.relationship not in Relationship.REVERSED:
            raise MalformedFieldException('Unknown link relationship: %s' % (options.relationship,))

        if options.relationship == Relationship.MANY_MANY:
            options.fk_host_table_name = "junction_%s" % (field.field_id,)
            options.self_key_name = _fk_name("%s_self" % (field.field_id,))
            options.foreign_key_name = _fk_name(field.field_id)
        elif options.relationship == Relationship.ONE_MANY:
            options.fk_host_table_name = options.foreign_table_id
            options.self_key_name = _fk_name(field.field_id)
            options.foreign_key_name = RECORD_ID_KEY
        else:
            options.fk_host_table_name = field.table_id
            options.self_key_name = RECORD_ID_KEY
            options.foreign_key_name = _fk_name(field.field_id)

        symmetric_field = None
        if not options.is_one_way:
            symmetric_options = LinkOptions(
                field.table_id,
                Relationship.REVERSED[options.relationship],
                field.field_id,
                options.fk_host_table_name,
                options.foreign_key_name,
                options.self_key_name)
            symmetric_field = Field(
                generate_field_id(),
                options.foreign_table_id,
                symmetric_name or field.table_id,
                FieldType.LINK,
                options=symmetric_options.to_data())
            options.symmetric_field_id = symmetric_field.field_id

        field.options = options.to_data()
        return symmetric_field
