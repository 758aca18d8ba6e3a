
from fieldsweep.field import Relationship
from fieldsweep.reference_graph import ReferenceGraph
from fieldsweep.exceptions import MalformedFieldException

import logging
log = logging.getLogger(__name__)


REFERENCE = 'reference'
LOOKUP = 'lookup'

RECORD_ID_KEY = '_id'


def record_collection_name(table_id):
    return 'record_%s' % table_id


class ReferenceService(object):
    def __init__(self, db, txm):
        self.db = db
        self.txm = txm

    @property
    def references(self):
        return self.db['fieldsweep_reference']

    def load_graph(self, kind=None):
        query = {'kind': kind} if kind else {}
        edges = [
            (edge['source_field_id'], edge['dependent_field_id'])
            for edge in self.references.find(query, session=self.txm.session)]
        return ReferenceGraph(edges)

    def create_references(self, field):
        source_ids = field.referenced_field_ids()
        link_field_id = field.lookup_link_field_id()
        if not source_ids and not link_field_id:
            return []

        all_source_ids = source_ids + ([link_field_id] if link_field_id else [])
        self.load_graph().check_circular(field.field_id, all_source_ids)

        edges = [
            {'source_field_id': source_id, 'dependent_field_id': field.field_id, 'kind': REFERENCE}
            for source_id in source_ids]
        if link_field_id:
            edges.append({'source_field_id': link_field_id, 'dependent_field_id': field.field_id, 'kind': LOOKUP})
        self.references.insert_many(edges, session=self.txm.session)
        return edges

    def delete_reference(self, field_id):
        session = self.txm.session
        dependent_ids = [
            edge['dependent_field_id'] for edge in self.references.find(
                {'source_field_id': field_id, 'kind': REFERENCE},
                {'dependent_field_id': 1},
                session=session)]
        # also drop the field's own outbound references
        self.references.delete_many(
            {'$or': [
                {'source_field_id': field_id, 'kind': REFERENCE},
                {'dependent_field_id': field_id},
            ]},
            session=session)
        log.debug("Deleted references to %s, dependents: %s", field_id, dependent_ids)
        return dependent_ids

    def delete_lookup_field_reference(self, field_id):
        session = self.txm.session
        dependent_ids = [
            edge['dependent_field_id'] for edge in self.references.find(
                {'source_field_id': field_id, 'kind': LOOKUP},
                {'dependent_field_id': 1},
                session=session)]
        self.references.delete_many({'source_field_id': field_id, 'kind': LOOKUP}, session=session)
        log.debug("Deleted lookup references through %s, dependents: %s", field_id, dependent_ids)
        return dependent_ids

    def clean_foreign_key(self, link_options):
        session = self.txm.session
        relationship = link_options.relationship
        if relationship == Relationship.MANY_MANY:
            self.db['fieldsweep_junction'].delete_many(
                {'junction': link_options.fk_host_table_name}, session=session)
        elif relationship in (Relationship.MANY_ONE, Relationship.ONE_MANY, Relationship.ONE_ONE):
            if relationship == Relationship.MANY_ONE:
                fk_column = link_options.foreign_key_name
            elif relationship == Relationship.ONE_MANY:
                fk_column = link_options.self_key_name
            else:
                # one-one keeps the key on whichever side hosts it
                fk_column = link_options.self_key_name if link_options.foreign_key_name == RECORD_ID_KEY \
                    else link_options.foreign_key_name
            self.db[record_collection_name(link_options.fk_host_table_name)].update_many(
                {fk_column: {'$exists': True}},
                {'$unset': {fk_column: ''}},
                session=session)
        else:
            raise MalformedFieldException('Unknown link relationship: %s' % (relationship,))
        log.debug("Cleaned foreign key for %s", link_options)
