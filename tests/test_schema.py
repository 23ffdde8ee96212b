"""
Tests for input file validation and the command line driver
"""

import json
import sys

import pytest
import sympy
import yaml
from pycalphad import variables as v

from gibbsref.gibbsref_script import get_run_settings, run_gibbsref, main

from .fixtures import root_logger, tmp_file
from .testing_data import CU_MG_TDB, CU_MG_PHASE_MODELS

DATABASE_RUN_DICT = {
    'system':
        {
            'database': 'cu-mg.tdb',
            'elements': ['CU', 'MG', 'VA'],
        }
}

PHASE_MODELS_RUN_DICT = {
    'system':
        {
            'phase_models': 'phases.json',
            'elements': ['CU', 'MG'],
            'phases': ['LIQUID'],
            'category': 'L',
        },
    'output':
        {
            'verbosity': 2,
            'evaluate': True,
        }
}

NO_SOURCE_DICT = {
    'system':
        {
            'elements': ['CU', 'MG'],
        }
}

NO_ELEMENTS_DICT = {
    'system':
        {
            'database': 'cu-mg.tdb',
        }
}

DUPLICATE_ELEMENTS_DICT = {
    'system':
        {
            'database': 'cu-mg.tdb',
            'elements': ['CU', 'MG', 'CU'],
        }
}

BAD_VERBOSITY_DICT = {
    'system':
        {
            'database': 'cu-mg.tdb',
            'elements': ['CU'],
        },
    'output':
        {
            'verbosity': 5,
        }
}


def test_input_yaml_valid_for_database_run():
    """A database and elements are enough for a run, other settings get defaults"""
    d = get_run_settings(DATABASE_RUN_DICT)
    assert d['system']['category'] == 'G'
    assert d['output']['verbosity'] == 0
    assert d['output']['logfile'] is None
    assert d['output']['evaluate'] is False


def test_input_yaml_valid_for_phase_models_run():
    """Given settings are kept"""
    d = get_run_settings(PHASE_MODELS_RUN_DICT)
    assert d['system']['phases'] == ['LIQUID']
    assert d['system']['category'] == 'L'
    assert d['output']['verbosity'] == 2
    assert d['output']['evaluate'] is True


def test_correct_defaults_are_applied_from_yaml_input():
    """YAML input gets the same defaults as dictionary input"""
    yaml_input = """
    system:
      database: cu-mg.tdb
      elements: [CU, MG]
    """
    d = get_run_settings(yaml.safe_load(yaml_input))
    assert d['system']['category'] == 'G'
    assert d['output']['verbosity'] == 0


@pytest.mark.parametrize('input_dict', [NO_SOURCE_DICT, NO_ELEMENTS_DICT, DUPLICATE_ELEMENTS_DICT, BAD_VERBOSITY_DICT])
def test_invalid_input_raises(input_dict):
    """Invalid settings raise a ValueError"""
    with pytest.raises(ValueError):
        get_run_settings(input_dict)


def test_run_with_phase_models_only_gives_zero_contributions(root_logger, tmp_file):
    """Without a database every occupation is unparameterized"""
    phase_models_fname = tmp_file(json.dumps(CU_MG_PHASE_MODELS), suffix='.json')
    energies = run_gibbsref({
        'system': {'phase_models': phase_models_fname, 'elements': ['CU', 'MG']},
    })
    assert list(energies.keys()) == ['LIQUID', 'LAVES_C15']
    y_cu, y_mg = sympy.Symbol(v.Y('LIQUID', 0, 'CU').name), sympy.Symbol(v.Y('LIQUID', 0, 'MG').name)
    assert energies['LIQUID'] == sympy.Add(sympy.Mul(y_cu, 0, evaluate=False), sympy.Mul(y_mg, 0, evaluate=False), evaluate=False)


def test_run_with_database_matches_parameters(root_logger, tmp_file):
    """Phases and parameters come from the database"""
    tdb_fname = tmp_file(CU_MG_TDB, suffix='.tdb')
    energies = run_gibbsref({
        'system': {'database': tdb_fname, 'elements': ['CU', 'MG'], 'phases': ['LIQUID']},
        'output': {'evaluate': True},
    })
    assert list(energies.keys()) == ['LIQUID']
    assert {sympy.Symbol(v.Y('LIQUID', 0, 'CU').name), sympy.Symbol(v.Y('LIQUID', 0, 'MG').name)}.issubset(energies['LIQUID'].free_symbols)


def test_run_with_unknown_phase_model_phase_raises(root_logger, tmp_file):
    """Phases requested from the phase models must exist there"""
    phase_models_fname = tmp_file(json.dumps(CU_MG_PHASE_MODELS), suffix='.json')
    with pytest.raises(ValueError):
        run_gibbsref({
            'system': {'phase_models': phase_models_fname, 'elements': ['CU', 'MG'], 'phases': ['FCC_A1']},
        })


def test_element_phase_and_category_names_are_uppercased():
    """Names are case insensitive, as in TDB files"""
    d = get_run_settings({'system': {'database': 'cu-mg.tdb', 'elements': ['cu', 'Mg'], 'phases': ['liquid'], 'category': 'g'}})
    assert d['system']['elements'] == ['CU', 'MG']
    assert d['system']['phases'] == ['LIQUID']
    assert d['system']['category'] == 'G'


def test_elements_repeated_in_another_case_are_duplicates():
    """Uniqueness is checked after names are uppercased"""
    with pytest.raises(ValueError):
        get_run_settings({'system': {'database': 'cu-mg.tdb', 'elements': ['CU', 'cu']}})


def test_main_runs_yaml_input(root_logger, tmp_file, monkeypatch, capsys):
    """The console script reads YAML input and prints one expression per phase"""
    tdb_fname = tmp_file(CU_MG_TDB, suffix='.tdb')
    input_fname = tmp_file(yaml.safe_dump({'system': {'database': tdb_fname, 'elements': ['CU', 'MG'], 'phases': ['LIQUID', 'LAVES_C15']}}), suffix='.yaml')
    monkeypatch.setattr(sys, 'argv', ['gibbsref', '--input', input_fname])
    main()
    lines = capsys.readouterr().out.splitlines()
    assert [line.split(' = ')[0] for line in lines] == ['LIQUID', 'LAVES_C15']


def test_main_runs_json_input(root_logger, tmp_file, monkeypatch, capsys):
    """JSON input files are read the same way"""
    tdb_fname = tmp_file(CU_MG_TDB, suffix='.tdb')
    input_fname = tmp_file(json.dumps({'system': {'database': tdb_fname, 'elements': ['CU', 'MG'], 'phases': ['LIQUID']}}), suffix='.json')
    monkeypatch.setattr(sys, 'argv', ['gibbsref', '--in', input_fname])
    main()
    out = capsys.readouterr().out
    assert out.startswith('LIQUID = ')
    assert out.count('\n') == 1


@pytest.mark.parametrize('argv', [['gibbsref'], ['gibbsref', '--input', 'settings.txt']])
def test_main_without_yaml_or_json_input_raises(monkeypatch, argv):
    """An input file is required and must be YAML or JSON"""
    monkeypatch.setattr(sys, 'argv', argv)
    with pytest.raises(ValueError):
        main()
