import dataclasses
import json
import os
import tempfile
import unittest
from autoplace.config import OptimizationConfig, JointLocks
from autoplace.exceptions import ConfigurationError
from autoplace.parameters import Axis, EntityKind, Parameter, parse_coordinate_token


class TestOptimizationConfig(unittest.TestCase):
    def test_from_original_options(self):
        options = {
            'IKsetup': 'IKSetup/A01_Setup_IK.xml',
            'model': 'Models/Scaled/A01.osim',
            'subjectMass': 67.3046,
            'newName': 'Models/AutoPlaced/A01_FULL.osim',
            'modelWorker': 'autoPlaceWorker.osim',
            'motionWorker': 'autoPlaceWorker.mot',
            'txLock': True,
            'tyLock': False,
            'tzLock': True,
            'flexLock': False,
            'adducLock': False,
            'rotLock': False,
            'markerNames': ['L_THIGH_PROX_POST', 'L_THIGH_PROX_ANT'],
            'jointNames': ['socket'],
            'fixedMarkerCoords': ['socket_JOINT_CENTER z', 'socket_JOINT_ORIENT x', 'socket_JOINT_ORIENT y'],
            'flexionZero': 40,
            'optZerosFlag': True,
            'convThresh': 1,
        }
        config = OptimizationConfig.from_options(options)
        self.assertEqual('IKSetup/A01_Setup_IK.xml', config.ik_setup_path)
        self.assertEqual('Models/AutoPlaced/A01_FULL.osim', config.output_model_path)
        self.assertAlmostEqual(67.3046, config.subject_mass_kg)
        self.assertEqual(JointLocks(tx=True, tz=True), config.joint_locks)
        self.assertEqual(('L_THIGH_PROX_POST', 'L_THIGH_PROX_ANT'), config.marker_names)
        self.assertEqual(('socket',), config.joint_names)
        self.assertEqual(Parameter(EntityKind.JOINT_LOCATION, 'socket', Axis.Z), config.fixed_coordinates[0])
        self.assertEqual(40, config.flexion_zero_frame)
        self.assertEqual(40, config.pistoning_reference_frame)
        self.assertTrue(config.optimize_zeros)
        self.assertEqual(1, config.conv_thresh_mm)

    def test_unknown_option_is_rejected(self):
        with self.assertRaises(ConfigurationError):
            OptimizationConfig.from_options({'markerNames': [], 'convTresh': 1})

    def test_invalid_values(self):
        with self.assertRaises(ConfigurationError):
            OptimizationConfig(conv_thresh_mm=0)
        with self.assertRaises(ConfigurationError):
            OptimizationConfig(subject_mass_kg=-1)
        with self.assertRaises(ConfigurationError):
            OptimizationConfig(initial_step_mm=0.5, unit_step_mm=1.0)
        with self.assertRaises(ConfigurationError):
            OptimizationConfig(max_passes=0)
        with self.assertRaises(ConfigurationError):
            OptimizationConfig(marker_names=['L_TOE', 'L_TOE'])

    def test_malformed_fixed_coordinate_fails_at_construction(self):
        with self.assertRaises(ConfigurationError):
            OptimizationConfig(fixed_coordinates=['L_TOE'])

    def test_config_is_immutable(self):
        config = OptimizationConfig()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.conv_thresh_mm = 2.0
        changed = config.with_overrides(conv_thresh_mm=2.0)
        self.assertEqual(2.0, changed.conv_thresh_mm)
        self.assertEqual(1.0, config.conv_thresh_mm)

    def test_step_sizes(self):
        self.assertEqual([4.0, 2.0, 1.0], OptimizationConfig().step_sizes())
        self.assertEqual([1.0], OptimizationConfig(initial_step_mm=1.0).step_sizes())
        self.assertEqual([3.0, 1.5, 1.0], OptimizationConfig(initial_step_mm=3.0).step_sizes())

    def test_excursion_limit_is_in_stored_units(self):
        config = OptimizationConfig(max_marker_excursion_mm=20, max_joint_rotation_deg=10)
        self.assertAlmostEqual(0.02, config.excursion_limit(parse_coordinate_token('L_TOE x')))
        self.assertAlmostEqual(0.174533, config.excursion_limit(parse_coordinate_token('socket_JOINT_ORIENT z')),
                               places=5)

    def test_load_json(self):
        with tempfile.TemporaryDirectory() as tmpdirname:
            path = os.path.join(tmpdirname, 'options.json')
            with open(path, 'w') as f:
                json.dump({'markerNames': ['L_TOE'], 'fixedMarkerCoords': ['L_TOE y'], 'maxPasses': 7}, f)
            config = OptimizationConfig.load_json(path)
        self.assertEqual(7, config.max_passes)
        self.assertEqual(parse_coordinate_token('L_TOE y'), config.fixed_coordinates[0])
