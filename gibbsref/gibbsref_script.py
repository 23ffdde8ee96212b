"""
Build reference Gibbs energy expressions for the phases of a system.

A minimal run must specify an input file giving the elements of interest and
a phase models file and/or a TDB database.
"""

import os
import argparse
import logging
import sys
import json

import yaml
import sympy
import tinydb
import pycalphad
from pycalphad import Database

import gibbsref
from gibbsref.validation import schema
from gibbsref.phases import phases_from_database, phases_from_phase_models
from gibbsref.parameters import ParameterIndex
from gibbsref.reference_energy import build_reference_energies

_log = logging.getLogger(__name__)

parser = argparse.ArgumentParser(description=__doc__)

parser.add_argument(
    "--input", "--in",
    default=None,
    help="Input file for the run. Should be either a `YAML` or `JSON` file."
    )

parser.add_argument("--version", "-v", action='version',
                    version='%(prog)s version '+str(gibbsref.__version__))


def log_version_info():
    """Print version info to the log"""
    _log.info('gibbsref version    %s', gibbsref.__version__)
    _log.debug('pycalphad version   %s', pycalphad.__version__)
    _log.debug('sympy version       %s', sympy.__version__)
    _log.debug('tinydb version      %s', tinydb.__version__)


def get_run_settings(input_dict):
    """
    Validate settings from a dict of possible input.

    Performs the following actions:
    1. Normalize (apply defaults)
    2. Validate against the schema
    3. Check that phases can be found in a phase models file or a database

    Parameters
    ----------
    input_dict : dict
        Dictionary of input settings

    Returns
    -------
    dict
        Validated run settings

    Raises
    ------
    ValueError
    """
    run_settings = schema.normalized(input_dict)
    if run_settings is None or not schema.validate(run_settings):
        raise ValueError(schema.errors)
    system_settings = run_settings['system']
    if system_settings.get('phase_models') is None and system_settings.get('database') is None:
        raise ValueError("At least one of 'system.phase_models' or 'system.database' must be given.")
    return run_settings


def run_gibbsref(run_settings):
    """Build the reference energies described by a settings dictionary.

    Parameters
    ----------
    run_settings : dict
        Dictionary of input settings

    Returns
    -------
    Dict[str, sympy.Expr]
        Reference energy expressions keyed by phase name
    """
    run_settings = get_run_settings(run_settings)
    system_settings = run_settings['system']
    output_settings = run_settings['output']

    gibbsref.logger.config_logger(verbosity=output_settings['verbosity'], filename=output_settings['logfile'])
    log_version_info()

    dbf = None
    if system_settings.get('database') is not None:
        _log.trace('Loading database %s', system_settings['database'])
        dbf = Database(system_settings['database'])

    if system_settings.get('phase_models') is not None:
        with open(system_settings['phase_models']) as fp:
            phases = phases_from_phase_models(json.load(fp))
        if system_settings.get('phases') is not None:
            unknown_phases = sorted(set(system_settings['phases']) - set(phases.keys()))
            if len(unknown_phases) > 0:
                raise ValueError(f"Phases {unknown_phases} are not in the phase models.")
            phases = {name: phases[name] for name in system_settings['phases']}
    else:
        phases = phases_from_database(dbf, system_settings.get('phases'))

    if dbf is not None:
        parameter_index = ParameterIndex.from_database(dbf)
    else:
        _log.warning('No database given. All reference energy contributions will be zero.')
        parameter_index = ParameterIndex()

    return build_reference_energies(phases, system_settings['elements'], parameter_index,
                                    category=system_settings['category'],
                                    evaluate=output_settings['evaluate'])


def main():
    """
    Handle starting gibbsref from the command line.
    Parse command line arguments and input file.
    """
    args = parser.parse_args(sys.argv[1:])

    input_file = args.input
    if input_file is None:
        raise ValueError('To run gibbsref, provide an input file with the `--input` option.')

    ext = os.path.splitext(input_file)[-1]
    if ext == '.yml' or ext == '.yaml':
        with open(input_file) as f:
            input_settings = yaml.safe_load(f)
    elif ext == '.json':
        with open(input_file) as f:
            input_settings = json.load(f)
    else:
        raise ValueError(f'Unknown file type {ext} for input file {input_file}. YAML and JSON are supported')

    energies = run_gibbsref(input_settings)
    for phase_name, expression in energies.items():
        print(f'{phase_name} = {expression}')


if __name__ == '__main__':
    main()
