
import os
from pymongo import MongoClient

from flask import Flask

from fieldsweep.api import FieldApi
from fieldsweep.api_bp import api_bp


def use_transactions_from_env():
    return os.environ.get('FIELDSWEEP_USE_TRANSACTIONS', 'true').lower() in ('1', 'true', 'yes')


def create_app(db, use_transactions=None, calculators=None):
    if use_transactions is None:
        use_transactions = use_transactions_from_env()

    app = Flask(__name__)
    app.config['api'] = FieldApi(db, use_transactions, calculators)
    app.register_blueprint(api_bp)

    return app


def create_app_from_env():
    client = MongoClient(os.environ.get('FIELDSWEEP_MONGO_HOST', 'mongodb://127.0.0.1:27017'))
    db = client[os.environ.get('FIELDSWEEP_DBNAME', 'fieldsweep')]
    return create_app(db)
