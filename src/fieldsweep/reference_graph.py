
from collections import defaultdict

from toposort import toposort_flatten, CircularDependencyError

from fieldsweep.exceptions import CircularReferenceException


class ReferenceGraph(object):
    ''' Directed graph of field references, keyed by field id.
        An edge source -> dependent means the dependent's value is computed
        from the source.
    '''
    def __init__(self, edges=None):
        self._dependents = defaultdict(set)
        self._sources = defaultdict(set)
        for source_id, dependent_id in edges or []:
            self.add_edge(source_id, dependent_id)

    def add_edge(self, source_id, dependent_id):
        self._dependents[source_id].add(dependent_id)
        self._sources[dependent_id].add(source_id)

    def remove_edge(self, source_id, dependent_id):
        self._dependents[source_id].discard(dependent_id)
        self._sources[dependent_id].discard(source_id)

    def remove_field(self, field_id):
        for dependent_id in self._dependents.pop(field_id, set()):
            self._sources[dependent_id].discard(field_id)
        for source_id in self._sources.pop(field_id, set()):
            self._dependents[source_id].discard(field_id)

    def dependents_of(self, field_id):
        return set(self._dependents.get(field_id, set()))

    def sources_of(self, field_id):
        return set(self._sources.get(field_id, set()))

    def transitive_dependents(self, field_id):
        found = set()
        pending = [field_id]
        while pending:
            current = pending.pop()
            for dependent_id in self._dependents.get(current, set()):
                if dependent_id not in found:
                    found.add(dependent_id)
                    pending.append(dependent_id)
        found.discard(field_id)
        return found

    def dependency_tree(self):
        return dict((field_id, set(sources)) for field_id, sources in self._sources.items() if sources)

    def topological_order(self, field_ids=None):
        try:
            ordered = toposort_flatten(self.dependency_tree())
        except CircularDependencyError as cde:
            raise CircularReferenceException('Circular references: %s' % (cde.data,))
        if field_ids is None:
            return ordered
        field_ids = set(field_ids)
        return [field_id for field_id in ordered if field_id in field_ids] + \
            sorted(field_ids.difference(ordered))

    def check_circular(self, dependent_id, source_ids):
        # toposort ignores self dependencies
        if dependent_id in source_ids:
            raise CircularReferenceException('%s references itself' % (dependent_id,))
        dep_tree = self.dependency_tree()
        dep_tree[dependent_id] = dep_tree.get(dependent_id, set()).union(source_ids)
        try:
            toposort_flatten(dep_tree)
        except CircularDependencyError as cde:
            raise CircularReferenceException('%s has circular references: %s' % (dependent_id, cde.data))

    def __len__(self):
        return sum(len(dependents) for dependents in self._dependents.values())

    def __repr__(self):
        return "<ReferenceGraph %s edges>" % len(self)
