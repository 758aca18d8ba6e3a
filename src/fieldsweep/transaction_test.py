
import unittest

from mock import MagicMock

from fieldsweep.transaction import TransactionManager


class TransactionManagerTest(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.session.__enter__.return_value = self.session
        self.session.__exit__.return_value = False
        self.session.with_transaction.side_effect = lambda callback: callback(self.session)

        self.client = MagicMock()
        self.client.start_session.return_value = self.session

        self.txm = TransactionManager(self.client)

    def test_run_in_transaction(self):
        seen = []

        result = self.txm.run(lambda value: seen.append(self.txm.session) or value * 2, 21)

        self.assertEqual(42, result)
        self.assertEqual([self.session], seen)
        self.assertIsNone(self.txm.session)
        self.client.start_session.assert_called_once_with()
        self.assertEqual(1, self.session.with_transaction.call_count)

    def test_nested_run_reuses_session(self):
        def outer():
            return self.txm.run(lambda: self.txm.session)

        self.assertEqual(self.session, self.txm.run(outer))
        self.client.start_session.assert_called_once_with()

    def test_session_cleared_on_error(self):
        def failing():
            raise ValueError("aborted")

        with self.assertRaises(ValueError):
            self.txm.run(failing)

        self.assertIsNone(self.txm.session)
        self.assertFalse(self.txm.in_transaction())

    def test_without_transactions(self):
        txm = TransactionManager(self.client, use_transactions=False)

        self.assertEqual('done', txm.run(lambda: txm.session or 'done'))
        self.client.start_session.assert_not_called()
