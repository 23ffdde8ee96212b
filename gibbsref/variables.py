"""
Sublattice variables for the phases of a system.

Every phase contributes one phase fraction variable and one site fraction
variable for each species of interest on each of its sublattices. Variables
are numbered in a single pass so downstream optimizers can address them by a
flat index.
"""

import logging
from collections.abc import Mapping
from typing import Dict, Iterable, List, NamedTuple

import sympy
from pycalphad import variables as v
from tinydb import TinyDB, where
from tinydb.storages import MemoryStorage
from tinydb.table import Document

_log = logging.getLogger(__name__)

PHASE_FRACTION_INDEX = -1


class DuplicateVariableError(ValueError):
    """Raised when a variable is inserted with a global index that is already used."""
    pass


class DuplicatePhaseError(ValueError):
    """Raised when two phases with the same name are given to the variable map builder."""
    pass


class SublatticeEntry(NamedTuple):
    sublattice_index: int
    global_index: int
    site_count: float
    phase_name: str
    species: str

    @property
    def is_phase_fraction(self) -> bool:
        return self.sublattice_index == PHASE_FRACTION_INDEX

    @property
    def variable(self):
        """pycalphad variable for this record, a phase fraction or a site fraction"""
        if self.is_phase_fraction:
            return v.NP(self.phase_name)
        return v.Y(self.phase_name, self.sublattice_index, self.species)

    @property
    def name(self) -> str:
        """Name of the variable as it appears in expression trees"""
        return self.variable.name

    @property
    def symbol(self) -> sympy.Symbol:
        return sympy.Symbol(self.name)


class VariableIndex:
    """
    Collection of SublatticeEntry records queryable by phase and by global index.

    Records are stored once in an in-memory TinyDB table where the document id
    is derived from the global index, so the global ordering and the
    uniqueness of indices are enforced by the table itself.
    """
    def __init__(self):
        self._db = TinyDB(storage=MemoryStorage)
        self._sublattice_counts: Dict[str, int] = {}

    @staticmethod
    def _doc_id(global_index: int) -> int:
        # TinyDB document ids start at 1
        return global_index + 1

    def insert(self, entry: SublatticeEntry):
        doc_id = self._doc_id(entry.global_index)
        if self._db.contains(doc_id=doc_id):
            raise DuplicateVariableError(
                f'Global index {entry.global_index} is already used by {self.get(entry.global_index)}, '
                f'cannot insert {entry}.'
            )
        self._db.insert(Document(entry._asdict(), doc_id=doc_id))

    def set_sublattice_count(self, phase_name: str, count: int):
        self._sublattice_counts[phase_name] = count

    def sublattice_count(self, phase_name: str) -> int:
        """Return the number of declared sublattices of a phase.

        Sublattices without any species of interest have no records, so the
        count recorded when building the index is preferred.
        """
        if phase_name in self._sublattice_counts:
            return self._sublattice_counts[phase_name]
        return max((e.sublattice_index for e in self.by_phase(phase_name)), default=-1) + 1

    @staticmethod
    def _to_entries(documents) -> List[SublatticeEntry]:
        entries = [SublatticeEntry(**doc) for doc in documents]
        return sorted(entries, key=lambda e: e.global_index)

    def entries(self) -> List[SublatticeEntry]:
        return self._to_entries(self._db.all())

    def by_phase(self, phase_name: str) -> List[SublatticeEntry]:
        return self._to_entries(self._db.search(where('phase_name') == phase_name))

    def get(self, global_index: int) -> SublatticeEntry:
        doc = self._db.get(doc_id=self._doc_id(global_index))
        if doc is None:
            raise KeyError(f'No variable with global index {global_index}')
        return SublatticeEntry(**doc)

    def phase_names(self) -> List[str]:
        names = []
        for entry in self.entries():
            if entry.phase_name not in names:
                names.append(entry.phase_name)
        return names

    def __getitem__(self, global_index: int) -> SublatticeEntry:
        return self.get(global_index)

    def __contains__(self, phase_name: str) -> bool:
        return self._db.contains(where('phase_name') == phase_name)

    def __iter__(self):
        return iter(self.entries())

    def __len__(self):
        return len(self._db)


def build_variable_map(phases, elements_of_interest: Iterable[str]) -> VariableIndex:
    """
    Return a VariableIndex for the species of interest in each phase.

    Parameters
    ----------
    phases : Union[Mapping[str, Phase], Iterable[Phase]]
        Phases in the order their variables should be numbered. Each phase
        has a ``name`` and ``sublattices``, each sublattice has a
        ``site_count`` and a ``species`` sequence.
    elements_of_interest : Iterable[str]
        Species to create site fraction variables for. Others are skipped.

    Returns
    -------
    VariableIndex

    Raises
    ------
    DuplicatePhaseError
        If two phases share a name.

    Notes
    -----
    Global indices are assigned from a running counter: first the phase
    fraction variable of a phase (sublattice index -1), then each species of
    interest by sublattice and species declaration order. The sublattice index
    of a record is the position of its sublattice among all sublattices of the
    phase, whether or not the others have species of interest.

    Examples
    --------
    >>> from gibbsref.phases import Phase, Sublattice
    >>> phase = Phase(name='SIGMA', sublattices=[Sublattice(site_count=2, species=['A', 'B']), Sublattice(site_count=1, species=['A'])])
    >>> [e.global_index for e in build_variable_map([phase], {'A', 'B'})]
    [0, 1, 2, 3]

    """
    if isinstance(phases, Mapping):
        phases = phases.values()
    elements_of_interest = set(elements_of_interest)
    variable_index = VariableIndex()
    index_count = 0
    for phase in phases:
        if phase.name in variable_index:
            raise DuplicatePhaseError(f"Phase {phase.name} is given more than once.")
        # phase fraction variable, at the fake -1 sublattice
        variable_index.insert(SublatticeEntry(PHASE_FRACTION_INDEX, index_count, 0.0, phase.name, ''))
        index_count += 1
        for subl_index, sublattice in enumerate(phase.sublattices):
            for species in sublattice.species:
                if species not in elements_of_interest:
                    _log.debug('Skipping %s in sublattice %d of %s, it is not an element of interest', species, subl_index, phase.name)
                    continue
                variable_index.insert(SublatticeEntry(subl_index, index_count, float(sublattice.site_count), phase.name, species))
                index_count += 1
        variable_index.set_sublattice_count(phase.name, len(phase.sublattices))
    _log.trace('Built %d variables for %d phases', index_count, len(variable_index.phase_names()))
    return variable_index
