
import time
import gevent

from fieldsweep.reference import record_collection_name

import logging

log = logging.getLogger('fieldsweep')


def schedule(func, *args):
    gthread = gevent.spawn(func, *args)
    gthread.join()
    return gthread.get()


class Updater(object):
    def __init__(self, db, field_service, reference_service, calculation_service, calculators=None):
        self.db = db
        self.field_service = field_service
        self.reference_service = reference_service
        self.calculation_service = calculation_service
        self.calculators = dict(calculators or {})

    def register_calculator(self, calculator_key, calculator):
        self.calculators[calculator_key] = calculator

    def calculator_for(self, field):
        return self.calculators.get('lookup' if field.is_lookup else field.field_type)

    def process_pending(self, table_ids):
        recalculated = []
        for table_id in table_ids:
            recalculated.extend(self.process_table(table_id))
        return recalculated

    def process_table(self, table_id):
        pending = self.calculation_service.pending_fields(table_id)
        if not pending:
            return []

        recalculated = []
        try:
            fields = dict((field.field_id, field) for field in self.field_service.find_fields(pending))
            ordered = self.reference_service.load_graph().topological_order(pending)

            for field_id in ordered:
                field = fields.get(field_id)
                # deleted and errored fields stay cleared
                if field is None or field.has_error or field.table_id != table_id:
                    continue
                calculator = self.calculator_for(field)
                if calculator is None:
                    continue
                if schedule(self._caught_recalculate, table_id, field, calculator):
                    recalculated.append(field_id)
        finally:
            # failed fields are logged and left cleared, not retried
            self.calculation_service.clear_pending(table_id, pending)
        return recalculated

    def _caught_recalculate(self, table_id, field, calculator):
        try:
            start = time.time()
            self._recalculate(table_id, field, calculator)
            log.debug("Recalculated %s.%s in %s secs", table_id, field.field_id, time.time() - start)
            return True
        except Exception:
            log.exception("Error recalculating %s.%s", table_id, field.field_id)
            return False

    def _recalculate(self, table_id, field, calculator):
        records = self.db[record_collection_name(table_id)]
        for record in list(records.find({})):
            records.update_one(
                {'_id': record['_id']},
                {'$set': {field.field_id: calculator(field, record)}})
