
from fieldsweep.reference import record_collection_name

import logging
log = logging.getLogger(__name__)


class FieldCalculationService(object):
    def __init__(self, db, txm):
        self.db = db
        self.txm = txm

    @property
    def calc_queue(self):
        return self.db['fieldsweep_calc_queue']

    def reset_fields(self, table_id, field_ids):
        ''' Clears cached values of exactly the given fields and queues them
            for recalculation. Returns the ids of the tables touched.
        '''
        if not field_ids:
            return []
        session = self.txm.session

        fields_by_table = {}
        for field_data in self.db['fieldsweep_field'].find(
                {'_id': {'$in': list(set(field_ids))}},
                {'table_id': 1},
                session=session):
            fields_by_table.setdefault(field_data['table_id'], []).append(field_data['_id'])

        for field_table_id, table_field_ids in fields_by_table.items():
            table_field_ids.sort()
            self.db[record_collection_name(field_table_id)].update_many(
                {},
                {'$unset': dict((field_id, '') for field_id in table_field_ids)},
                session=session)
            self.calc_queue.update_one(
                {'_id': field_table_id},
                {'$addToSet': {'field_ids': {'$each': table_field_ids}}},
                upsert=True,
                session=session)
            log.debug("Reset fields %s in table %s (requested by %s)", table_field_ids, field_table_id, table_id)
        return list(fields_by_table)

    def pending_fields(self, table_id):
        queued = self.calc_queue.find_one({'_id': table_id}, session=self.txm.session)
        return list(queued['field_ids']) if queued else []

    def clear_pending(self, table_id, field_ids):
        self.calc_queue.update_one(
            {'_id': table_id},
            {'$pull': {'field_ids': {'$in': list(field_ids)}}},
            session=self.txm.session)
