import importlib.util
import os
import tempfile
import unittest
from autoplace.config import OptimizationConfig
from autoplace.exceptions import PathError, ParameterOutOfBounds
from autoplace.ik.ik_setup import IKSetup, resolve_relative_to
from autoplace.models.opensim_model import load_model
from autoplace.parameters import parse_coordinate_token
from autoplace.search import coarse_marker_search

HAS_OPENSIM = importlib.util.find_spec('opensim') is not None


def write_tiny_model(path: str):
    import opensim as osim
    model = osim.Model()
    model.setName('tiny')
    shank = osim.Body('shank', 1.0, osim.Vec3(0), osim.Inertia(0.1, 0.1, 0.1))
    socket = osim.PinJoint('socket',
                           model.getGround(), osim.Vec3(0, -0.40, -0.08), osim.Vec3(0),
                           shank, osim.Vec3(0), osim.Vec3(0))
    model.addBody(shank)
    model.addJoint(socket)
    model.addMarker(osim.Marker('L_TOE', shank, osim.Vec3(0.15, -0.45, 0.0)))
    model.finalizeConnections()
    model.printToXML(path)


class TestMissingInputs(unittest.TestCase):
    def test_missing_model(self):
        with tempfile.TemporaryDirectory() as tmpdirname:
            with self.assertRaises(PathError):
                load_model(os.path.join(tmpdirname, 'missing.osim'))

    def test_missing_ik_setup(self):
        with tempfile.TemporaryDirectory() as tmpdirname:
            with self.assertRaises(PathError):
                IKSetup.load(os.path.join(tmpdirname, 'missing.xml'))

    def test_search_checks_inputs_first(self):
        with tempfile.TemporaryDirectory() as tmpdirname:
            config = OptimizationConfig(ik_setup_path=os.path.join(tmpdirname, 'setup.xml'),
                                        model_path=os.path.join(tmpdirname, 'model.osim'),
                                        log_dir=tmpdirname)
            with self.assertRaises(PathError):
                coarse_marker_search(config)
            self.assertEqual([], os.listdir(tmpdirname))

    def test_resolve_relative_to(self):
        base = os.path.join(os.sep, 'data', 'A01', 'IKSetup', 'setup.xml')
        self.assertEqual(os.path.join(os.sep, 'data', 'A01', 'IKSetup', 'trial.trc'),
                         resolve_relative_to(base, 'trial.trc'))
        self.assertEqual(os.path.join(os.sep, 'abs', 'trial.trc'),
                         resolve_relative_to(base, os.path.join(os.sep, 'abs', 'trial.trc')))
        self.assertEqual('', resolve_relative_to(base, ''))


@unittest.skipUnless(HAS_OPENSIM, 'requires the opensim Python bindings')
class TestOpenSimModel(unittest.TestCase):
    def test_get_set_and_save(self):
        with tempfile.TemporaryDirectory() as tmpdirname:
            path = os.path.join(tmpdirname, 'tiny.osim')
            write_tiny_model(path)
            model = load_model(path)
            self.assertEqual(['L_TOE'], model.marker_names())
            self.assertEqual(['socket'], model.joint_names())

            toe_x = parse_coordinate_token('L_TOE x')
            socket_y = parse_coordinate_token('socket_JOINT_CENTER y')
            self.assertAlmostEqual(0.15, model.get(toe_x))
            self.assertAlmostEqual(-0.40, model.get(socket_y))

            model.declare_limits(toe_x, 0.10, 0.20)
            model.set(toe_x, 0.17)
            with self.assertRaises(ParameterOutOfBounds):
                model.set(toe_x, 0.25)
            self.assertAlmostEqual(0.17, model.get(toe_x))
            model.set(socket_y, -0.39)

            saved_path = os.path.join(tmpdirname, 'placed.osim')
            model.save(saved_path)
            reloaded = load_model(saved_path)
            self.assertAlmostEqual(0.17, reloaded.get(toe_x))
            self.assertAlmostEqual(-0.39, reloaded.get(socket_y))
            self.assertAlmostEqual(0.0, reloaded.get(parse_coordinate_token('L_TOE z')))
