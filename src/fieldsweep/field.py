
import re

from bson.objectid import ObjectId


class FieldType(object):
    SINGLE_LINE_TEXT = 'singleLineText'
    LONG_TEXT = 'longText'
    NUMBER = 'number'
    CHECKBOX = 'checkbox'
    DATE = 'date'
    SINGLE_SELECT = 'singleSelect'
    MULTIPLE_SELECT = 'multipleSelect'
    LINK = 'link'
    ROLLUP = 'rollup'
    FORMULA = 'formula'

    PRIMITIVES = [SINGLE_LINE_TEXT, LONG_TEXT, NUMBER, CHECKBOX, DATE, SINGLE_SELECT, MULTIPLE_SELECT]
    ALL = PRIMITIVES + [LINK, ROLLUP, FORMULA]


class Relationship(object):
    MANY_MANY = 'manyMany'
    MANY_ONE = 'manyOne'
    ONE_MANY = 'oneMany'
    ONE_ONE = 'oneOne'

    REVERSED = {
        MANY_MANY: MANY_MANY,
        MANY_ONE: ONE_MANY,
        ONE_MANY: MANY_ONE,
        ONE_ONE: ONE_ONE,
    }


# formula and rollup expressions reference fields as {fldXXXX}
FIELD_REF_PATTERN = re.compile(r'\{(\w+)\}')

_MISSING = object()


def generate_field_id():
    return "fld%s" % ObjectId()


def set_field_property(key, new_value, old_value=_MISSING):
    op = {'key': key, 'new_value': new_value}
    if old_value is not _MISSING:
        op['old_value'] = old_value
    return op


class LinkOptions(object):
    def __init__(self, foreign_table_id, relationship=Relationship.MANY_MANY, symmetric_field_id=None,
                 fk_host_table_name=None, self_key_name=None, foreign_key_name=None, is_one_way=False):
        self.foreign_table_id = foreign_table_id
        self.relationship = relationship
        self.symmetric_field_id = symmetric_field_id
        self.fk_host_table_name = fk_host_table_name
        self.self_key_name = self_key_name
        self.foreign_key_name = foreign_key_name
        self.is_one_way = is_one_way

    @staticmethod
    def from_data(options):
        return LinkOptions(
            options['foreign_table_id'],
            options.get('relationship', Relationship.MANY_MANY),
            options.get('symmetric_field_id'),
            options.get('fk_host_table_name'),
            options.get('self_key_name'),
            options.get('foreign_key_name'),
            options.get('is_one_way', False))

    def to_data(self):
        return {
            'foreign_table_id': self.foreign_table_id,
            'relationship': self.relationship,
            'symmetric_field_id': self.symmetric_field_id,
            'fk_host_table_name': self.fk_host_table_name,
            'self_key_name': self.self_key_name,
            'foreign_key_name': self.foreign_key_name,
            'is_one_way': self.is_one_way,
        }

    def __repr__(self):
        return "<LinkOptions %s %s>" % (self.relationship, self.foreign_table_id)


class Field(object):
    def __init__(self, field_id, table_id, name, field_type, options=None, lookup_options=None,
                 is_lookup=False, is_primary=False, has_error=False, version=0):
        self.field_id = field_id
        self.table_id = table_id
        self.name = name
        self.field_type = field_type
        self.options = options or {}
        self.lookup_options = lookup_options
        self.is_lookup = is_lookup or False
        self.is_primary = is_primary or False
        self.has_error = has_error or False
        self.version = version

    def is_link(self):
        return self.field_type == FieldType.LINK

    def is_computed(self):
        return self.is_lookup or self.field_type in (FieldType.FORMULA, FieldType.ROLLUP)

    def link_options(self):
        return LinkOptions.from_data(self.options)

    def referenced_field_ids(self):
        refs = []
        if self.lookup_options:
            # lookups and rollups read a field of the foreign table
            refs.append(self.lookup_options['lookup_field_id'])
        elif self.field_type == FieldType.FORMULA:
            refs.extend(FIELD_REF_PATTERN.findall(self.options.get('expression', '')))
        unique_refs = []
        for ref in refs:
            if ref not in unique_refs:
                unique_refs.append(ref)
        return unique_refs

    def lookup_link_field_id(self):
        if self.lookup_options:
            return self.lookup_options['link_field_id']
        return None

    @staticmethod
    def from_data(field_data):
        return Field(
            field_data['_id'],
            field_data['table_id'],
            field_data['name'],
            field_data['type'],
            field_data.get('options'),
            field_data.get('lookup_options'),
            field_data.get('is_lookup'),
            field_data.get('is_primary'),
            field_data.get('has_error'),
            field_data.get('version', 0))

    def to_data(self):
        return {
            '_id': self.field_id,
            'table_id': self.table_id,
            'name': self.name,
            'type': self.field_type,
            'options': self.options,
            'lookup_options': self.lookup_options,
            'is_lookup': self.is_lookup,
            'is_primary': self.is_primary,
            'has_error': self.has_error,
            'version': self.version,
        }

    def __repr__(self):
        return "<Field %s %s %s>" % (self.field_id, self.field_type, self.name)
