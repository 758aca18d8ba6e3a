
import json
from datetime import datetime

from fieldsweep.field import Field, set_field_property
from fieldsweep.exceptions import NotFoundException, StoreConflictException

import logging
log = logging.getLogger(__name__)


class FieldService(object):
    def __init__(self, db, txm):
        self.db = db
        self.txm = txm

    @property
    def fields(self):
        return self.db['fieldsweep_field']

    @property
    def ops(self):
        return self.db['fieldsweep_op']

    def find_field(self, field_id):
        field_data = self.fields.find_one({'_id': field_id}, session=self.txm.session)
        if field_data is None:
            raise NotFoundException('field %s not found' % (field_id,))
        return Field.from_data(field_data)

    def find_fields(self, field_ids):
        return [
            Field.from_data(field_data)
            for field_data in self.fields.find({'_id': {'$in': list(field_ids)}}, session=self.txm.session)]

    def fields_for_table(self, table_id):
        return [
            Field.from_data(field_data)
            for field_data in self.fields.find({'table_id': table_id}, session=self.txm.session)]

    def table_has_fields(self, table_id):
        return self.fields.find_one({'table_id': table_id}, {'_id': 1}, session=self.txm.session) is not None

    def insert_field(self, field):
        self.fields.insert_one(field.to_data(), session=self.txm.session)
        self._log_ops(field.table_id, 'create', [
            {'field_id': field.field_id, 'ops': [set_field_property(key, value) for key, value in field.to_data().items() if key != '_id']}])
        return field

    def mark_fields_as_error(self, table_id, field_ids):
        op_data = [
            {'field_id': field_id, 'ops': [set_field_property('has_error', True)]}
            for field_id in field_ids]
        self.batch_update_fields(table_id, op_data)

    def batch_update_fields(self, table_id, op_data):
        if not op_data:
            return
        session = self.txm.session

        # fields receiving an identical op list share one write
        groups = {}
        for entry in op_data:
            group_key = json.dumps(entry['ops'], sort_keys=True, default=str)
            ops, field_ids = groups.setdefault(group_key, (entry['ops'], []))
            if entry['field_id'] not in field_ids:
                field_ids.append(entry['field_id'])

        for ops, field_ids in groups.values():
            match = {'_id': {'$in': field_ids}}
            update_set = {}
            for op in ops:
                if 'old_value' in op:
                    match[op['key']] = op['old_value']
                update_set[op['key']] = op['new_value']
            result = self.fields.update_many(
                match,
                {'$set': update_set, '$inc': {'version': 1}},
                session=session)
            if result.matched_count != len(field_ids):
                raise StoreConflictException(
                    'Conflicting update for fields %s in table %s: matched %s of %s' % (
                        field_ids, table_id, result.matched_count, len(field_ids)))

        self._log_ops(table_id, 'update', op_data)

    def batch_delete_fields(self, table_id, field_ids):
        if not field_ids:
            return
        self.fields.delete_many(
            {'_id': {'$in': list(field_ids)}, 'table_id': table_id},
            session=self.txm.session)
        log.debug("Deleted fields %s from %s", field_ids, table_id)
        self._log_ops(table_id, 'delete',[{'field_id': field_id, 'ops': []} for field_id in field_ids])

    def _log_ops(self, table_id, op_type, op_data):
        created = datetime.now()
        self.ops.insert_many([
            {
                'table_id': table_id,
                'field_id': entry['field_id'],
                'op_type': op_type,
                'ops': entry['ops'],
                'created': created,
            } for entry in op_data],
            session=self.txm.session)
