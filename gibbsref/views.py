"""
Lightweight, immutable subsets of the variable and parameter indexes.

Views hold references to records owned by the index (or copies of TinyDB
documents) and are cheap to build and throw away. The sublattice permutation
creates one per recursion frame.
"""

from typing import Dict, Iterable, Optional, Tuple

from gibbsref.variables import SublatticeEntry, VariableIndex


class SublatticeView:
    """
    Ordered set of SublatticeEntry records with lookup by sublattice index.

    Parameters
    ----------
    entries : Iterable[SublatticeEntry]
        Records in the view. They are kept in global index order.
    sublattice_count : Optional[int]
        Number of declared sublattices of the phase the records belong to.
        Defaults to one more than the largest sublattice index in the view.

    """
    def __init__(self, entries: Iterable[SublatticeEntry] = (), sublattice_count: Optional[int] = None):
        self._entries: Tuple[SublatticeEntry, ...] = tuple(sorted(entries, key=lambda e: e.global_index))
        by_sublattice: Dict[int, Tuple[SublatticeEntry, ...]] = {}
        for entry in self._entries:
            by_sublattice[entry.sublattice_index] = by_sublattice.get(entry.sublattice_index, ()) + (entry,)
        self._by_sublattice = by_sublattice
        if sublattice_count is None:
            sublattice_count = max((e.sublattice_index for e in self._entries), default=-1) + 1
        self.sublattice_count = sublattice_count

    @classmethod
    def from_index(cls, variable_index: VariableIndex, phase_name: str) -> 'SublatticeView':
        """Return a view of all the variables of one phase.

        Raises
        ------
        KeyError
            If the phase has no variables in the index.
        """
        entries = variable_index.by_phase(phase_name)
        if len(entries) == 0:
            raise KeyError(f'Phase {phase_name} is not in the variable index. Known phases: {variable_index.phase_names()}')
        return cls(entries, sublattice_count=variable_index.sublattice_count(phase_name))

    def at_sublattice(self, sublattice_index: int) -> Tuple[SublatticeEntry, ...]:
        """Return the entries at a sublattice index, in global index order"""
        return self._by_sublattice.get(sublattice_index, ())

    def sublattice_indices(self) -> Tuple[int, ...]:
        return tuple(sorted(self._by_sublattice.keys()))

    def extend(self, entry: SublatticeEntry) -> 'SublatticeView':
        """Return a new view with an additional entry. This view is not modified."""
        return SublatticeView(self._entries + (entry,), sublattice_count=self.sublattice_count)

    def __iter__(self):
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __contains__(self, entry):
        return entry in self._entries

    def __repr__(self):
        return f'{self.__class__.__name__}([{", ".join(e.name for e in self._entries)}])'


class ParameterView:
    """Ordered, immutable subset of parameter documents from a ParameterIndex"""
    def __init__(self, parameters: Iterable[dict] = ()):
        self._parameters = tuple(parameters)

    def with_category(self, category: str) -> 'ParameterView':
        """Return the parameters whose ``parameter_type`` is ``category``"""
        return ParameterView(p for p in self._parameters if p['parameter_type'] == category)

    def for_phase(self, phase_name: str) -> 'ParameterView':
        return ParameterView(p for p in self._parameters if p['phase_name'] == phase_name)

    def __iter__(self):
        return iter(self._parameters)

    def __len__(self):
        return len(self._parameters)

    def __repr__(self):
        return f'{self.__class__.__name__}({len(self)} parameters)'
