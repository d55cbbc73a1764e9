from autoplace.ik.abstract_solver import AbstractIKSolver, FrameResult, IKResult, FAILED_FRAME_RESIDUAL
from autoplace.ik.ik_setup import IKSetup
from autoplace.ik.opensim_solver import OpenSimIKSolver
