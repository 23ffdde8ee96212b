"""
Phase and sublattice descriptions consumed by the variable map builder.
"""

import logging
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, PositiveFloat, field_validator, model_validator
from pycalphad import Database

from gibbsref.utils import species_name

_log = logging.getLogger(__name__)

ComponentName = str
PhaseName = str


class Sublattice(BaseModel):
    site_count: PositiveFloat
    # Declaration order is significant, it sets variable and term order
    species: List[ComponentName]

    @field_validator('species')
    @classmethod
    def check_unique_species(cls, species):
        repeated = sorted({s for s in species if species.count(s) > 1})
        if len(repeated) > 0:
            raise ValueError(f"Species {repeated} are given more than once on the sublattice.")
        return species


class Phase(BaseModel):
    name: PhaseName
    sublattices: List[Sublattice]

    @property
    def sublattice_count(self) -> int:
        return len(self.sublattices)


class ModelMetadata(BaseModel):
    sublattice_model: List[List[ComponentName]]
    sublattice_site_ratios: List[PositiveFloat]

    @model_validator(mode='after')
    def check_site_ratios(self):
        if len(self.sublattice_model) != len(self.sublattice_site_ratios):
            raise ValueError(
                f"Got {len(self.sublattice_site_ratios)} site ratios for "
                f"{len(self.sublattice_model)} sublattices."
            )
        return self


class PhaseModelSpecification(BaseModel):
    components: List[ComponentName]
    phases: Dict[PhaseName, ModelMetadata]


def phases_from_phase_models(phase_models) -> Dict[PhaseName, Phase]:
    """
    Return phases described by a phase models dictionary.

    Parameters
    ----------
    phase_models : Dict[str, Any]
        Dictionary of components and phases, e.g.
        ``{"components": ["CU", "MG"], "phases": {"LIQUID": {"sublattice_model": [["CU", "MG"]], "sublattice_site_ratios": [1]}}}``

    Returns
    -------
    Dict[str, Phase]
        Phases keyed by name, in the order they were given.

    """
    spec = PhaseModelSpecification(**phase_models)
    phases = {}
    for phase_name, metadata in spec.phases.items():
        sublattices = [Sublattice(site_count=ratio, species=list(subl))
                       for subl, ratio in zip(metadata.sublattice_model, metadata.sublattice_site_ratios)]
        phases[phase_name] = Phase(name=phase_name, sublattices=sublattices)
    return phases


def phases_from_database(dbf: Database, phase_names: Optional[Sequence[PhaseName]] = None) -> Dict[PhaseName, Phase]:
    """
    Return phases from a pycalphad Database.

    Database constituents are unordered, so each sublattice's species are
    sorted by name.

    Parameters
    ----------
    dbf : pycalphad.Database
    phase_names : Optional[Sequence[str]]
        Phases to take from the Database. Defaults to all phases, sorted by name.

    Returns
    -------
    Dict[str, Phase]

    Raises
    ------
    ValueError
        If a requested phase is not in the Database.

    """
    if phase_names is None:
        phase_names = sorted(dbf.phases.keys())
    missing = [name for name in phase_names if name not in dbf.phases]
    if len(missing) > 0:
        raise ValueError(f"Phases {missing} are not in the Database. Available phases: {sorted(dbf.phases.keys())}")
    phases = {}
    for phase_name in phase_names:
        db_phase = dbf.phases[phase_name]
        sublattices = []
        for site_ratio, constituents in zip(db_phase.sublattices, db_phase.constituents):
            species = sorted(species_name(sp) for sp in constituents)
            sublattices.append(Sublattice(site_count=float(site_ratio), species=species))
        phases[phase_name] = Phase(name=phase_name, sublattices=sublattices)
        _log.debug('Read phase %s with %d sublattices from the Database', phase_name, len(sublattices))
    return phases
