"""
Build reference Gibbs energy expressions by permuting site fractions.

For a phase with sublattices S0..Sn, the reference energy is the sum over
every site occupation (one species per sublattice) of the product of the
site fractions of that occupation and the parameter stored for it. The tree
is built without evaluation, so products and sums appear in sublattice and
species declaration order and unparameterized occupations keep their zero.
"""

import logging
from typing import Dict, Iterable

import sympy

from gibbsref.parameters import ParameterIndex, find_parameter
from gibbsref.variables import VariableIndex, build_variable_map
from gibbsref.views import ParameterView, SublatticeView

_log = logging.getLogger(__name__)


def permute_site_fractions(total_view: SublatticeView, partial_view: SublatticeView,
                           parameter_view: ParameterView, sublattice_index: int = 0) -> sympy.Expr:
    """
    Return the sum of site fraction products for a sublattice and every sublattice after it.

    Parameters
    ----------
    total_view : SublatticeView
        All the variables of the phase.
    partial_view : SublatticeView
        Species chosen on the sublattices before ``sublattice_index``.
    parameter_view : ParameterView
        Parameters to match against complete site occupations.
    sublattice_index : int
        Sublattice to permute.

    Returns
    -------
    sympy.Expr
        Unevaluated expression. For species A and B on the last sublattice it
        has the form ``Add(Mul(Y_A, G_A), Mul(Y_B, G_B))``, where terms are
        chained to the left as ``Add(Add(t0, t1), t2)``.

    """
    current_sublattice = total_view.at_sublattice(sublattice_index)
    if len(current_sublattice) == 0:
        # Either every sublattice has a species chosen or this sublattice has
        # no species of interest. Both end the walk here.
        return find_parameter(partial_view, parameter_view)

    result = None
    for entry in current_sublattice:
        occupation_view = partial_view.extend(entry)
        product = sympy.Mul(
            entry.symbol,
            permute_site_fractions(total_view, occupation_view, parameter_view, sublattice_index + 1),
            evaluate=False,
        )
        if result is None:
            result = product
        else:
            result = sympy.Add(result, product, evaluate=False)
    return result


def build_reference_energy(phase_name: str, variable_index: VariableIndex, parameter_index: ParameterIndex,
                           category: str = 'G', evaluate: bool = False) -> sympy.Expr:
    """
    Return the reference Gibbs energy expression of a phase.

    Parameters
    ----------
    phase_name : str
    variable_index : VariableIndex
        Variables built by ``build_variable_map``.
    parameter_index : ParameterIndex
    category : str
        Parameter type to match, defaults to ``'G'``.
    evaluate : bool
        If True, let sympy evaluate the tree. Zero products vanish and
        nested sums and products are flattened.

    Returns
    -------
    sympy.Expr

    Raises
    ------
    KeyError
        If the phase is not in the variable index.

    """
    total_view = SublatticeView.from_index(variable_index, phase_name)
    parameter_view = parameter_index.view(category=category, phase_name=phase_name)
    _log.trace('Building %s reference energy from %d variables and %d %s parameters',
               phase_name, len(total_view), len(parameter_view), category)
    tree = permute_site_fractions(total_view, SublatticeView(sublattice_count=total_view.sublattice_count), parameter_view)
    if evaluate:
        tree = tree.doit()
    _log.debug('%s reference energy: %s', phase_name, tree)
    return tree


def build_reference_energies(phases, elements_of_interest: Iterable[str], parameter_index: ParameterIndex,
                             category: str = 'G', evaluate: bool = False) -> Dict[str, sympy.Expr]:
    """
    Return the reference Gibbs energy of each phase.

    Parameters
    ----------
    phases : Union[Mapping[str, Phase], Iterable[Phase]]
    elements_of_interest : Iterable[str]
    parameter_index : ParameterIndex
    category : str
    evaluate : bool

    Returns
    -------
    Dict[str, sympy.Expr]
        Expressions keyed by phase name, in phase order.

    """
    variable_index = build_variable_map(phases, elements_of_interest)
    energies = {}
    for phase_name in variable_index.phase_names():
        energies[phase_name] = build_reference_energy(phase_name, variable_index, parameter_index,
                                                      category=category, evaluate=evaluate)
    _log.info('Built reference energies for %d phases', len(energies))
    return energies
