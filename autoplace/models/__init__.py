from autoplace.models.abstract_model import AbstractModel
from autoplace.models.opensim_model import OpenSimModel, load_model
