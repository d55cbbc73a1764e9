import json
import os
import tempfile
import unittest
from autoplace.config import OptimizationConfig
from autoplace.exceptions import WriteError
from autoplace.parameters import parse_coordinate_token
from autoplace.search import SearchResult, SearchStatus
from autoplace.writers.opensim_writer import write_search_results, default_motion_path
from tests.synthetic import SyntheticModel


def make_result():
    x = parse_coordinate_token('L_TOE x')
    return SearchResult(parameters=(x,), values=(0.15,), status=SearchStatus.CONVERGED, iterations=2,
                        final_cost=0.25, cost_history=(4.0, 0.25, 0.25), movement_history=(((x, -5.0),), ((x, 0.0),)))


class TestOpenSimWriter(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = self.tmpdir.name

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_default_motion_path(self):
        self.assertEqual(os.path.join('out', 'A01.mot'), default_motion_path(os.path.join('out', 'A01.osim')))

    def test_writes_model_motion_and_summary(self):
        worker_motion = os.path.join(self.root, 'worker.mot')
        with open(worker_motion, 'w') as f:
            f.write('inverse kinematics\n')
        output = os.path.join(self.root, 'out', 'nested', 'A01_placed.osim')
        config = OptimizationConfig(model_path='A01.osim', output_model_path=output,
                                    worker_motion_path=worker_motion, label='markers')
        model = SyntheticModel()

        self.assertEqual(output, write_search_results(make_result(), model, config))
        self.assertEqual([output], model.saved_paths)
        with open(os.path.join(self.root, 'out', 'nested', 'A01_placed.mot')) as f:
            self.assertEqual('inverse kinematics\n', f.read())
        with open(os.path.join(self.root, 'out', 'nested', 'A01_placed.json')) as f:
            summary = json.load(f)
        self.assertEqual('CONVERGED', summary['status'])
        self.assertEqual('markers', summary['label'])
        self.assertEqual('A01.osim', summary['inputModel'])
        self.assertEqual([4.0, 0.25, 0.25], summary['costHistory'])

    def test_explicit_motion_path(self):
        worker_motion = os.path.join(self.root, 'worker.mot')
        with open(worker_motion, 'w') as f:
            f.write('motion')
        motion = os.path.join(self.root, 'final.mot')
        config = OptimizationConfig(output_model_path=os.path.join(self.root, 'A01.osim'),
                                    worker_motion_path=worker_motion, output_motion_path=motion)
        write_search_results(make_result(), SyntheticModel(), config)
        self.assertTrue(os.path.exists(motion))

    def test_missing_worker_motion_is_skipped(self):
        config = OptimizationConfig(output_model_path=os.path.join(self.root, 'A01.osim'),
                                    worker_motion_path=os.path.join(self.root, 'missing.mot'))
        write_search_results(make_result(), SyntheticModel(), config)
        self.assertTrue(os.path.exists(os.path.join(self.root, 'A01.osim')))
        self.assertFalse(os.path.exists(os.path.join(self.root, 'A01.mot')))

    def test_no_output_path(self):
        with self.assertRaises(WriteError):
            write_search_results(make_result(), SyntheticModel(), OptimizationConfig())

    def test_unwritable_output(self):
        blocker = os.path.join(self.root, 'blocker')
        with open(blocker, 'w') as f:
            f.write('')
        config = OptimizationConfig(output_model_path=os.path.join(blocker, 'sub', 'A01.osim'))
        with self.assertRaises(WriteError):
            write_search_results(make_result(), SyntheticModel(), config)
