
import unittest

from fieldsweep.mongoclient_testutils import mongo_connection
from fieldsweep.transaction import TransactionManager
from fieldsweep.view_service import ViewService


class ViewServiceTest(unittest.TestCase):
    def setUp(self):
        client = mongo_connection()
        client.drop_database('fieldsweep_test_db')
        self.db = client.fieldsweep_test_db
        self.view_service = ViewService(self.db, TransactionManager(client, use_transactions=False))

        self.grid = self.view_service.create_view('tblA', 'Grid', ['fldName', 'fldAge', 'fldDouble'])
        self.kanban = self.view_service.create_view('tblA', 'Kanban', ['fldAge', 'fldName'])
        self.other = self.view_service.create_view('tblB', 'Grid', ['fldAge'])

    def _column_order(self, view):
        return self.db.fieldsweep_view.find_one({'_id': view['_id']})['column_order']

    def test_delete_column_meta_order(self):
        self.view_service.delete_column_meta_order('tblA', ['fldAge'])

        self.assertEqual(['fldName', 'fldDouble'], self._column_order(self.grid))
        self.assertEqual(['fldName'], self._column_order(self.kanban))
        # other tables are untouched
        self.assertEqual(['fldAge'], self._column_order(self.other))

    def test_delete_column_meta_order_idempotent(self):
        self.view_service.delete_column_meta_order('tblA', ['fldAge', 'fldMissing'])
        self.view_service.delete_column_meta_order('tblA', ['fldAge'])

        self.assertEqual(['fldName', 'fldDouble'], self._column_order(self.grid))

    def test_add_column_meta_order(self):
        self.view_service.add_column_meta_order('tblA', ['fldNew'])
        self.view_service.add_column_meta_order('tblA', ['fldNew'])

        self.assertEqual(['fldName', 'fldAge', 'fldDouble', 'fldNew'], self._column_order(self.grid))
        self.assertEqual(['fldAge', 'fldName', 'fldNew'], self._column_order(self.kanban))

    def test_views_for_table(self):
        self.assertEqual(['Grid', 'Kanban'], [view['name'] for view in self.view_service.views_for_table('tblA')])
        self.assertTrue(self.grid['_id'].startswith('viw'))
