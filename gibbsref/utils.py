"""
Utilities for gibbsref

Classes and functions defined here should have some reuse potential.
"""

from typing import Any, Sequence, Tuple

import symengine
import sympy

WILDCARD = '*'


def species_name(species: Any) -> str:
    """Return the name of a species given either a string or a pycalphad Species"""
    return species if isinstance(species, str) else species.name


def canonical_constituent_array(constituent_array: Sequence[Any]) -> Tuple[Tuple[str, ...], ...]:
    """
    Convert a constituent array to a hashable tuple of tuples of species names.

    Each sublattice may be given as a single species or a sequence of species.
    Species may be strings or pycalphad Species objects.

    Parameters
    ----------
    constituent_array : Sequence[Any]
        One entry per sublattice

    Returns
    -------
    Tuple[Tuple[str, ...], ...]

    Examples
    --------
    >>> canonical_constituent_array(['CU', ['MG', 'VA']])
    (('CU',), ('MG', 'VA'))

    """
    canonical = []
    for subl in constituent_array:
        if isinstance(subl, (list, tuple, set, frozenset)):
            names = [species_name(sp) for sp in subl]
            # sets carry no order of their own
            if isinstance(subl, (set, frozenset)):
                names = sorted(names)
            canonical.append(tuple(names))
        else:
            canonical.append((species_name(subl),))
    return tuple(canonical)


def formatted_constituent_array(constituent_array: Sequence[Sequence[str]]) -> str:
    """
    Given a constituent array of species names, return the classic CALPHAD-style interaction.

    Examples
    --------
    >>> formatted_constituent_array((('CU', 'MG'), ('MG',)))
    'CU,MG:MG'

    """
    return ':'.join([','.join(subl) for subl in constituent_array])


def to_sympy(expression: Any) -> sympy.Expr:
    """Convert a numeric, symengine or sympy expression to a sympy expression"""
    if isinstance(expression, symengine.Basic):
        # pycalphad Databases store symengine expressions
        return expression._sympy_()
    return sympy.sympify(expression)
