import argparse
import os
import signal
import tempfile
import threading
import unittest
from autoplace.commands.run import RunCommand, install_cancel_handler


class TestRunCommand(unittest.TestCase):
    def setUp(self):
        self.original_handler = signal.getsignal(signal.SIGINT)

    def tearDown(self):
        signal.signal(signal.SIGINT, self.original_handler)

    def test_first_interrupt_cancels_and_restores_the_previous_handler(self):
        cancel_event = threading.Event()
        previous_handler = install_cancel_handler(cancel_event)
        self.assertIs(self.original_handler, previous_handler)
        handler = signal.getsignal(signal.SIGINT)
        self.assertIsNot(previous_handler, handler)

        handler(signal.SIGINT, None)
        self.assertTrue(cancel_event.is_set())
        self.assertIs(previous_handler, signal.getsignal(signal.SIGINT))

    def test_other_commands_are_ignored(self):
        self.assertFalse(RunCommand().run(argparse.Namespace(command='check')))

    def test_missing_phase_file_writes_errors_json(self):
        with tempfile.TemporaryDirectory() as tmpdirname:
            phase_file = os.path.join(tmpdirname, 'phases.json')
            args = argparse.Namespace(command='run', phase_file=phase_file, only_phase=None)
            with self.assertRaises(SystemExit):
                RunCommand().run(args)
            self.assertTrue(os.path.exists(os.path.join(tmpdirname, 'phases_errors.json')))
        self.assertIs(self.original_handler, signal.getsignal(signal.SIGINT))
