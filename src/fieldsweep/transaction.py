
import threading

import logging
log = logging.getLogger(__name__)


class TransactionManager(object):
    ''' Holds the ambient session for every store call made inside run().
        With use_transactions off (standalone mongod, tests) calls run
        without a session.
    '''
    def __init__(self, client, use_transactions=True):
        self.client = client
        self.use_transactions = use_transactions
        self._local = threading.local()

    @property
    def session(self):
        return getattr(self._local, 'session', None)

    def in_transaction(self):
        return self.session is not None

    def run(self, func, *args):
        if not self.use_transactions or self.in_transaction():
            return func(*args)

        def callback(session):
            log.debug("Running %s in transaction", getattr(func, "__name__", func))
            self._local.session = session
            try:
                return func(*args)
            finally:
                self._local.session = None

        with self.client.start_session() as session:
            # with_transaction retries the callback on transient transaction errors
            return session.with_transaction(callback)
