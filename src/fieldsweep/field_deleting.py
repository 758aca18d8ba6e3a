
from fieldsweep.field import set_field_property
from fieldsweep.exceptions import NotFoundException, ForbiddenException

import logging
log = logging.getLogger(__name__)


class DeletionState(object):
    REQUESTED = 'requested'
    VALIDATED = 'validated'
    REFERENCES_CLEANED = 'references_cleaned'
    FIELD_DELETED = 'field_deleted'
    VIEW_CLEANED = 'view_cleaned'
    DONE = 'done'
    REJECTED = 'rejected'


class FieldDeletion(object):
    def __init__(self, service, table_id, field_id):
        self.service = service
        self.table_id = table_id
        self.field_id = field_id
        self.state = DeletionState.REQUESTED
        self.touched_table_ids = set()

    def __repr__(self):
        return "<FieldDeletion %s.%s %s>" % (self.table_id, self.field_id, self.state)

    def _transition(self, state):
        log.debug("Deleting %s.%s: %s -> %s", self.table_id, self.field_id, self.state, state)
        self.state = state

    def execute(self):
        # may be re-run by the transaction layer
        self.state = DeletionState.REQUESTED
        self.touched_table_ids = set()

        field = self._validate()
        self._transition(DeletionState.VALIDATED)

        if field.is_link() and not field.is_lookup:
            self._clean_link_field(field)
        else:
            self._clean_ref(self.table_id, self.field_id)
        self._transition(DeletionState.REFERENCES_CLEANED)

        self.service.field_service.batch_delete_fields(self.table_id, [self.field_id])
        self._transition(DeletionState.FIELD_DELETED)

        self.service.view_service.delete_column_meta_order(self.table_id, [self.field_id])
        self._transition(DeletionState.VIEW_CLEANED)

        self._transition(DeletionState.DONE)

    def _validate(self):
        try:
            field = self.service.field_service.find_field(self.field_id)
            if field.table_id != self.table_id:
                raise NotFoundException('field %s not found in table %s' % (self.field_id, self.table_id))
            if field.is_primary:
                raise ForbiddenException('forbid delete primary field')
        except (NotFoundException, ForbiddenException):
            self._transition(DeletionState.REJECTED)
            raise
        return field

    def _clean_ref(self, table_id, field_id, is_link_field=False):
        self.touched_table_ids.update(self.service.clean_ref(table_id, field_id, is_link_field))

    def _clean_link_field(self, field):
        link_options = field.link_options()
        self.service.reference_service.clean_foreign_key(link_options)
        self._clean_ref(self.table_id, self.field_id, True)

        if link_options.symmetric_field_id:
            self._clean_symmetric_field(link_options.foreign_table_id, link_options.symmetric_field_id)

    def _clean_symmetric_field(self, foreign_table_id, symmetric_field_id):
        if not self.service.field_service.find_fields([symmetric_field_id]):
            log.warning("Symmetric field %s of %s no longer exists", symmetric_field_id, self.field_id)
            return

        self._clean_ref(foreign_table_id, symmetric_field_id, True)

        # the counterpart stays, desynchronised from the deleted side
        self.service.field_service.batch_update_fields(foreign_table_id, [{
            'field_id': symmetric_field_id,
            'ops': [
                set_field_property('options.symmetric_field_id', None, old_value=self.field_id),
                set_field_property('has_error', True),
            ],
        }])


class FieldDeletingService(object):
    def __init__(self, txm, field_service, reference_service, calculation_service, view_service, updater):
        self.txm = txm
        self.field_service = field_service
        self.reference_service = reference_service
        self.calculation_service = calculation_service
        self.view_service = view_service
        self.updater = updater

    def mark_fields_as_error(self, table_id, field_ids):
        self.field_service.mark_fields_as_error(table_id, field_ids)

    def clean_field(self, table_id, field_ids):
        return self.calculation_service.reset_fields(table_id, field_ids)

    def clean_ref(self, table_id, field_id, is_link_field=False):
        error_field_ids = self.reference_service.delete_reference(field_id)
        if is_link_field:
            error_field_ids = error_field_ids + self.reference_service.delete_lookup_field_reference(field_id)

        self.mark_fields_as_error(table_id, error_field_ids)
        return self.clean_field(table_id, error_field_ids + [field_id])

    def clean_lookup_rollup_ref(self, table_id, field_id):
        def _clean():
            error_field_ids = self.reference_service.delete_lookup_field_reference(field_id)
            self.mark_fields_as_error(table_id, error_field_ids)
            return self.clean_field(table_id, error_field_ids)

        touched_table_ids = self.txm.run(_clean)
        self._drain(touched_table_ids)

    def delete_field(self, table_id, field_id):
        deletion = FieldDeletion(self, table_id, field_id)
        self.txm.run(deletion.execute)
        log.info("Deleted field %s from table %s", field_id, table_id)

        self._drain(sorted(deletion.touched_table_ids))

    def _drain(self, table_ids):
        # runs after commit, the cleanup itself already stands
        try:
            self.updater.process_pending(table_ids)
        except Exception:
            log.exception("Error recalculating tables %s", table_ids)
