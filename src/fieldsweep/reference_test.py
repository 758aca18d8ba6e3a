
import unittest

from fieldsweep.mongoclient_testutils import mongo_connection
from fieldsweep.transaction import TransactionManager
from fieldsweep.field import Field, FieldType, LinkOptions, Relationship
from fieldsweep.reference import ReferenceService, REFERENCE, LOOKUP
from fieldsweep.exceptions import CircularReferenceException, MalformedFieldException


class ReferenceServiceTest(unittest.TestCase):
    def setUp(self):
        self.maxDiff = None
        client = mongo_connection()
        client.drop_database('fieldsweep_test_db')
        self.db = client.fieldsweep_test_db
        self.reference_service = ReferenceService(self.db, TransactionManager(client, use_transactions=False))

        # tblA.fldLink -> tblB, tblA.fldLookup reads tblB.fldTitle through fldLink
        self.lookup = Field('fldLookup', 'tblA', 'Title', FieldType.SINGLE_LINE_TEXT, is_lookup=True,
                            lookup_options={'link_field_id': 'fldLink', 'foreign_table_id': 'tblB', 'lookup_field_id': 'fldTitle'})
        self.formula = Field('fldFormula', 'tblB', 'Shout', FieldType.FORMULA,
                             options={'expression': 'UPPER({fldTitle}) & {fldTitle}'})
        self.formula2 = Field('fldFormula2', 'tblB', 'Shout Twice', FieldType.FORMULA,
                              options={'expression': '{fldFormula} & {fldFormula}'})

        self.reference_service.create_references(self.lookup)
        self.reference_service.create_references(self.formula)
        self.reference_service.create_references(self.formula2)

    def _edges(self):
        return sorted(
            (edge['kind'], edge['source_field_id'], edge['dependent_field_id'])
            for edge in self.db.fieldsweep_reference.find())

    def test_create_references(self):
        self.assertEqual([
            (LOOKUP, 'fldLink', 'fldLookup'),
            (REFERENCE, 'fldFormula', 'fldFormula2'),
            (REFERENCE, 'fldTitle', 'fldFormula'),
            (REFERENCE, 'fldTitle', 'fldLookup'),
        ], self._edges())

    def test_create_references_for_plain_field(self):
        self.assertEqual([], self.reference_service.create_references(
            Field('fldPlain', 'tblB', 'Plain', FieldType.NUMBER)))

    def test_create_circular_reference(self):
        circular = Field('fldTitle', 'tblB', 'Title', FieldType.FORMULA, options={'expression': '{fldFormula2}'})

        with self.assertRaises(CircularReferenceException):
            self.reference_service.create_references(circular)

        self.assertEqual(4, len(self._edges()))

    def test_load_graph(self):
        graph = self.reference_service.load_graph()
        self.assertEqual({'fldFormula', 'fldLookup'}, graph.dependents_of('fldTitle'))
        self.assertEqual({'fldFormula', 'fldFormula2', 'fldLookup'}, graph.transitive_dependents('fldTitle'))

        lookup_graph = self.reference_service.load_graph(LOOKUP)
        self.assertEqual({'fldLookup'}, lookup_graph.dependents_of('fldLink'))
        self.assertEqual(set(), lookup_graph.dependents_of('fldTitle'))

    def test_delete_reference(self):
        dependent_ids = self.reference_service.delete_reference('fldTitle')

        self.assertEqual(['fldLookup', 'fldFormula'], dependent_ids)
        # only direct dependents, lookup edge through the link survives
        self.assertEqual([
            (LOOKUP, 'fldLink', 'fldLookup'),
            (REFERENCE, 'fldFormula', 'fldFormula2'),
        ], self._edges())

    def test_delete_reference_removes_outbound_edges(self):
        dependent_ids = self.reference_service.delete_reference('fldFormula')

        self.assertEqual(['fldFormula2'], dependent_ids)
        self.assertEqual([
            (LOOKUP, 'fldLink', 'fldLookup'),
            (REFERENCE, 'fldTitle', 'fldLookup'),
        ], self._edges())

    def test_delete_reference_twice(self):
        self.reference_service.delete_reference('fldTitle')

        self.assertEqual([], self.reference_service.delete_reference('fldTitle'))

    def test_delete_lookup_field_reference(self):
        dependent_ids = self.reference_service.delete_lookup_field_reference('fldLink')

        self.assertEqual(['fldLookup'], dependent_ids)
        self.assertEqual([
            (REFERENCE, 'fldFormula', 'fldFormula2'),
            (REFERENCE, 'fldTitle', 'fldFormula'),
            (REFERENCE, 'fldTitle', 'fldLookup'),
        ], self._edges())

    def test_delete_lookup_field_reference_ignores_formula_edges(self):
        self.assertEqual([], self.reference_service.delete_lookup_field_reference('fldTitle'))
        self.assertEqual(4, len(self._edges()))

    def test_clean_foreign_key_many_many(self):
        self.db.fieldsweep_junction.insert_many([
            {'junction': 'junction_fldLink', '__fk_fldLink_self': 'rec1', '__fk_fldLink': 'rec2'},
            {'junction': 'junction_fldOther', '__fk_fldOther_self': 'rec1', '__fk_fldOther': 'rec3'},
        ])

        self.reference_service.clean_foreign_key(LinkOptions(
            'tblB', Relationship.MANY_MANY, None, 'junction_fldLink', '__fk_fldLink_self', '__fk_fldLink'))

        self.assertEqual(['junction_fldOther'], [row['junction'] for row in self.db.fieldsweep_junction.find()])

    def test_clean_foreign_key_many_one(self):
        self.db.record_tblA.insert_many([
            {'_id': 'rec1', 'fldName': 'Bob', '__fk_fldLink': 'rec2'},
            {'_id': 'rec3', 'fldName': 'Ned'},
        ])

        self.reference_service.clean_foreign_key(LinkOptions(
            'tblB', Relationship.MANY_ONE, None, 'tblA', '_id', '__fk_fldLink'))

        self.assertEqual([
            {'_id': 'rec1', 'fldName': 'Bob'},
            {'_id': 'rec3', 'fldName': 'Ned'},
        ], list(self.db.record_tblA.find()))

    def test_clean_foreign_key_one_many(self):
        self.db.record_tblB.insert_one({'_id': 'rec2', 'fldTitle': 'Sales', '__fk_fldLink': 'rec1'})

        self.reference_service.clean_foreign_key(LinkOptions(
            'tblB', Relationship.ONE_MANY, None, 'tblB', '__fk_fldLink', '_id'))

        self.assertEqual([{'_id': 'rec2', 'fldTitle': 'Sales'}], list(self.db.record_tblB.find()))

    def test_clean_foreign_key_one_one_on_symmetric_side(self):
        self.db.record_tblA.insert_one({'_id': 'rec1', '__fk_fldLink': 'rec2'})

        self.reference_service.clean_foreign_key(LinkOptions(
            'tblA', Relationship.ONE_ONE, 'fldLink', 'tblA', '__fk_fldLink', '_id'))

        self.assertEqual([{'_id': 'rec1'}], list(self.db.record_tblA.find()))

    def test_clean_foreign_key_unknown_relationship(self):
        with self.assertRaises(MalformedFieldException):
            self.reference_service.clean_foreign_key(LinkOptions('tblB', 'sideways'))
