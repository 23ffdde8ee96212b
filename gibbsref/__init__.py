"""
gibbsref: reference Gibbs energy expressions from sublattice models
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("gibbsref")
except PackageNotFoundError:
    # not installed, e.g. running from a source checkout
    __version__ = "unknown"
del version, PackageNotFoundError


from .logger import _setup_logging
# Makes global logging changes; all new logger instances will be GibbsRefLogger objects
_setup_logging()

from gibbsref.phases import Phase, Sublattice, phases_from_phase_models, phases_from_database
from gibbsref.variables import SublatticeEntry, VariableIndex, DuplicateVariableError, DuplicatePhaseError, build_variable_map
from gibbsref.views import SublatticeView, ParameterView
from gibbsref.parameters import ParameterIndex, SublatticeIndexError, build_search_configuration, constituents_match, find_parameter
from gibbsref.reference_energy import permute_site_fractions, build_reference_energy, build_reference_energies
