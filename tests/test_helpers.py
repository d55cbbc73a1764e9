import datetime
import os
import tempfile
import unittest
from autoplace.helpers import run_timestamp, log_file_name, output_model_name, require_files, format_table


class TestHelpers(unittest.TestCase):
    def test_run_timestamp(self):
        self.assertEqual('05-Mar-2024_14.07.09', run_timestamp(datetime.datetime(2024, 3, 5, 14, 7, 9)))

    def test_file_names(self):
        self.assertEqual('autoplace_log_A01_TT_05-Mar-2024_14.07.09.txt',
                         log_file_name('A01_TT', '05-Mar-2024_14.07.09'))
        self.assertEqual('A01_TT_socket_auto_marker_place_05-Mar-2024_14.07.09.osim',
                         output_model_name('A01', 'TT', 'socket', '05-Mar-2024_14.07.09'))

    def test_require_files(self):
        with tempfile.TemporaryDirectory() as tmpdirname:
            present = os.path.join(tmpdirname, 'model.osim')
            with open(present, 'w') as f:
                f.write('<OpenSimDocument/>')
            missing = os.path.join(tmpdirname, 'setup.xml')
            self.assertEqual([missing, ''], require_files([present, missing, '']))

    def test_format_table(self):
        table = format_table([['parameter', 'status'], ['L_TOE x', 'FREE']])
        self.assertEqual('parameter  status\nL_TOE x    FREE', table)
        self.assertEqual('', format_table([]))
