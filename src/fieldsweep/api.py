
from fieldsweep.transaction import TransactionManager
from fieldsweep.field_service import FieldService
from fieldsweep.reference import ReferenceService
from fieldsweep.calculation import FieldCalculationService
from fieldsweep.view_service import ViewService
from fieldsweep.updater import Updater
from fieldsweep.field_creating import FieldCreatingService
from fieldsweep.field_deleting import FieldDeletingService


class FieldApi(object):
    def __init__(self, db, use_transactions=True, calculators=None):
        self.db = db
        self.txm = TransactionManager(db.client, use_transactions)

        self.field_service = FieldService(db, self.txm)
        self.reference_service = ReferenceService(db, self.txm)
        self.calculation_service = FieldCalculationService(db, self.txm)
        self.view_service = ViewService(db, self.txm)
        self.updater = Updater(db, self.field_service, self.reference_service, self.calculation_service, calculators)

        self.creating = FieldCreatingService(self.txm, self.field_service, self.reference_service, self.view_service)
        self.deleting = FieldDeletingService(
            self.txm,
            self.field_service,
            self.reference_service,
            self.calculation_service,
            self.view_service,
            self.updater)

    def get_fields(self, table_id):
        return self.field_service.fields_for_table(table_id)

    def get_field(self, field_id):
        return self.field_service.find_field(field_id)

    def create_field(self, table_id, field_data):
        return self.creating.create_field(table_id, field_data)

    def delete_field(self, table_id, field_id):
        self.deleting.delete_field(table_id, field_id)

    def get_views(self, table_id):
        return self.view_service.views_for_table(table_id)

    def create_view(self, table_id, name):
        column_order = [field.field_id for field in self.field_service.fields_for_table(table_id)]
        return self.txm.run(self.view_service.create_view, table_id, name, column_order)
