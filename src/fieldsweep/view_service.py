
from bson.objectid import ObjectId

import logging
log = logging.getLogger(__name__)


class ViewService(object):
    def __init__(self, db, txm):
        self.db = db
        self.txm = txm

    @property
    def views(self):
        return self.db['fieldsweep_view']

    def create_view(self, table_id, name, column_order=None):
        view_data = {
            '_id': "viw%s" % ObjectId(),
            'table_id': table_id,
            'name': name,
            'column_order': list(column_order or []),
        }
        self.views.insert_one(view_data, session=self.txm.session)
        return view_data

    def views_for_table(self, table_id):
        return list(self.views.find({'table_id': table_id}, session=self.txm.session))

    def add_column_meta_order(self, table_id, field_ids):
        self.views.update_many(
            {'table_id': table_id},
            {'$addToSet': {'column_order': {'$each': list(field_ids)}}},
            session=self.txm.session)

    def delete_column_meta_order(self, table_id, field_ids):
        self.views.update_many(
            {'table_id': table_id},
            {'$pull': {'column_order': {'$in': list(field_ids)}}},
            session=self.txm.session)
        log.debug("Removed %s from column order of views in %s", field_ids, table_id)
