"""
exceptions.py
-------------
Description: Custom exception classes for use in the AutoPlace marker placement search.
"""

import textwrap


class Error(Exception):
    """Base class for exceptions used by AutoPlace."""
    def __init__(self, original_message: str = ''):
        self.message = f'{self.get_message()} Below is the original error message, which may contain useful ' \
                       f'information about your issue.'
        self.original_message = f'\n\n{textwrap.indent(original_message, " " * 4)}\n\n'
        self.type = self.get_type()

        super().__init__(f'{self.message}{self.original_message}')

    def get_message(self):
        raise NotImplementedError("Subclasses must implement the 'get_message' method.")

    def get_type(self):
        return self.__class__.__name__

    def get_error_dict(self):
        return {
            "type": self.type,
            "message": self.message,
            "original_message": self.original_message
        }


class PathError(Error):
    """Raised when a required input file (model, marker trajectory or IK setup) is missing."""
    def get_message(self):
        return "PathError: A required input file could not be found. Check that the input model, the IK setup file " \
               "and the marker trajectory referenced by it all exist before starting a placement run."


class ConfigurationError(Error):
    """Raised when the placement options are missing, malformed or inconsistent."""
    def get_message(self):
        return "ConfigurationError: The marker placement options are invalid. Check the option names, the lock " \
               "flags, the fixed coordinate tokens (formatted as '<entity> <axis>') and the numeric settings."


class UnknownEntityError(Error):
    """Raised at startup when a configured marker, joint, coordinate or axis does not exist on the model."""
    def get_message(self):
        return "UnknownEntityError: A configured marker, joint or coordinate name does not exist on the model. " \
               "Names are matched exactly, including case."


class ModelFileError(Error):
    """Raised when the model file cannot be loaded."""
    def get_message(self):
        return "ModelFileError: Error encountered when loading the model file. Please check that you have " \
               "provided a valid OpenSim Model file and that it loads in the OpenSim GUI."


class TrajectoryError(Error):
    """Raised when the experimental marker trajectory is empty or contains invalid values."""
    def get_message(self):
        return "TrajectoryError: The experimental marker trajectory is empty or contains NaN or suspiciously " \
               "large values. Check that the marker file is not corrupted."


class IKSolveFailure(Error):
    """Attached to a failed frame when the solver does not converge on it. The frame is scored, not aborted."""
    def get_message(self):
        return "IKSolveFailure: The inverse kinematics solve did not converge for a frame."


class ParameterOutOfBounds(Error):
    """Raised when a candidate value lies outside the plausible range declared for a parameter."""
    def get_message(self):
        return "ParameterOutOfBounds: The requested value is outside the range declared for this parameter."


class ConvergenceNotReached(Error):
    """Raised on request when a search stopped at its pass cap without converging."""
    def get_message(self):
        return "ConvergenceNotReached: The marker search hit its pass cap before every movement fell below the " \
               "convergence threshold. The best parameters found so far were kept."


class WriteError(Error):
    """Raised when an error occurs when writing out the results."""
    def get_message(self):
        return "WriteError: Error encountered when writing out the result files."
