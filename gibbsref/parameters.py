"""
Storage of energy parameters and matching of parameters to site occupations.
"""

import logging
from typing import Any, Dict, FrozenSet, Optional, Sequence

import sympy
from tinydb import TinyDB, where
from tinydb.storages import MemoryStorage
from pycalphad import Database

from gibbsref.utils import WILDCARD, canonical_constituent_array, formatted_constituent_array, to_sympy
from gibbsref.views import ParameterView, SublatticeView

_log = logging.getLogger(__name__)

SearchConfiguration = Dict[int, FrozenSet[str]]


class SublatticeIndexError(IndexError):
    """Raised when a site occupation refers to a sublattice the phase does not declare."""
    pass


class ParameterIndex:
    """
    In-memory store of energy parameters.

    Documents use the same keys as the parameters table of a pycalphad
    Database: ``phase_name``, ``constituent_array``, ``parameter_type``,
    ``parameter_order`` and ``parameter``. Constituent arrays are tuples of
    tuples of species names, where ``'*'`` matches any species.
    """
    def __init__(self):
        self._db = TinyDB(storage=MemoryStorage)

    def add_parameter(self, phase_name: str, constituent_array: Sequence[Any], parameter_type: str,
                      parameter: Any, parameter_order: int = 0) -> int:
        """Add a parameter and return its document id"""
        doc = {
            'phase_name': phase_name,
            'constituent_array': canonical_constituent_array(constituent_array),
            'parameter_type': parameter_type,
            'parameter_order': parameter_order,
            'parameter': to_sympy(parameter),
        }
        _log.debug('Adding parameter %s(%s,%s;%d)', parameter_type, phase_name,
                   formatted_constituent_array(doc['constituent_array']), parameter_order)
        return self._db.insert(doc)

    @classmethod
    def from_database(cls, dbf: Database) -> 'ParameterIndex':
        """Return a ParameterIndex with copies of all the parameters of a pycalphad Database"""
        param_index = cls()
        for param in dbf._parameters.all():
            param_index.add_parameter(param['phase_name'], param['constituent_array'],
                                      param['parameter_type'], param['parameter'],
                                      parameter_order=param.get('parameter_order', 0))
        _log.trace('Read %d parameters from the Database', len(param_index))
        return param_index

    def search(self, query):
        """Run a tinydb query against the parameters"""
        return self._db.search(query)

    def all(self):
        return self._db.all()

    def view(self, category: str = 'G', phase_name: Optional[str] = None) -> ParameterView:
        """
        Return the parameters of one category, optionally restricted to a phase.

        Parameters
        ----------
        category : str
            Parameter type to select, e.g. ``'G'``.
        phase_name : Optional[str]
            If given, only parameters of this phase are selected.

        Returns
        -------
        ParameterView
            Parameters in insertion order.

        """
        query = where('parameter_type') == category
        if phase_name is not None:
            query = query & (where('phase_name') == phase_name)
        return ParameterView(sorted(self.search(query), key=lambda doc: doc.doc_id))

    def __len__(self):
        return len(self._db)


def build_search_configuration(partial_view: SublatticeView) -> SearchConfiguration:
    """
    Return the species assigned to each sublattice of a partial view.

    Parameters
    ----------
    partial_view : SublatticeView
        Site occupation, usually one species per sublattice.

    Returns
    -------
    Dict[int, FrozenSet[str]]
        Mapping of sublattice index to the set of species on that sublattice.

    Raises
    ------
    SublatticeIndexError
        If an entry is on a sublattice outside of the declared sublattices.

    """
    configuration = {}
    for entry in partial_view:
        if entry.sublattice_index < 0 or entry.sublattice_index >= partial_view.sublattice_count:
            raise SublatticeIndexError(
                f'{entry.name} is on sublattice {entry.sublattice_index}, but phase '
                f'{entry.phase_name} declares {partial_view.sublattice_count} sublattices.'
            )
        configuration[entry.sublattice_index] = configuration.get(entry.sublattice_index, frozenset()) | {entry.species}
    return configuration


def constituents_match(constituent_array: Sequence[Sequence[str]], configuration: SearchConfiguration) -> bool:
    """
    Return True if a constituent array applies to a search configuration.

    The constituent array must have one entry per sublattice of the
    configuration and the configuration must cover every sublattice. Each
    sublattice matches if the array has the wildcard or exactly the configured
    species.

    Examples
    --------
    >>> constituents_match((('A',), ('*',)), {0: frozenset({'A'}), 1: frozenset({'B'})})
    True
    >>> constituents_match((('A',),), {0: frozenset({'A'}), 1: frozenset({'B'})})
    False

    """
    if len(constituent_array) != len(configuration):
        return False
    for subl_index, subl_constituents in enumerate(constituent_array):
        subl_species = configuration.get(subl_index)
        if subl_species is None:
            return False
        if tuple(subl_constituents) == (WILDCARD,):
            continue
        if frozenset(subl_constituents) != subl_species:
            return False
    return True


def _wildcard_count(constituent_array):
    return sum(1 for subl in constituent_array if tuple(subl) == (WILDCARD,))


def find_parameter(partial_view: SublatticeView, parameter_view: ParameterView) -> sympy.Expr:
    """
    Return the expression of the parameter matching a site occupation.

    Parameters
    ----------
    partial_view : SublatticeView
        One species per sublattice visited.
    parameter_view : ParameterView
        Candidate parameters, typically of one phase and category.

    Returns
    -------
    sympy.Expr
        The matching parameter, or ``sympy.S.Zero`` if nothing matches.

    Notes
    -----
    A constituent array that lists the species explicitly is preferred over
    one that uses wildcards. If several candidates remain, the first one
    added wins.

    """
    configuration = build_search_configuration(partial_view)
    matches = [p for p in parameter_view if constituents_match(p['constituent_array'], configuration)]
    if len(matches) == 0:
        return sympy.S.Zero
    # stable sort keeps insertion order among equally specific parameters
    matches = sorted(matches, key=lambda p: _wildcard_count(p['constituent_array']))
    if len(matches) > 1 and _wildcard_count(matches[0]['constituent_array']) == _wildcard_count(matches[1]['constituent_array']):
        _log.warning('Found %d parameters for %s in %s, using the first one',
                     len(matches), formatted_constituent_array(matches[0]['constituent_array']), matches[0]['phase_name'])
    return matches[0]['parameter']
