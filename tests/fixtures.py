"""Fixtures for use in tests"""

import logging

import pytest

from gibbsref.phases import Phase, Sublattice
from gibbsref.parameters import ParameterIndex


@pytest.fixture
def binary_liquid():
    """A single sublattice LIQUID phase with species A and B"""
    return Phase(name='LIQUID', sublattices=[Sublattice(site_count=1, species=['A', 'B'])])


@pytest.fixture
def two_sublattice_phase():
    """A 2:1 phase with (A,B) on the first sublattice and A on the second"""
    return Phase(name='SIGMA', sublattices=[
        Sublattice(site_count=2, species=['A', 'B']),
        Sublattice(site_count=1, species=['A']),
    ])


@pytest.fixture
def parameter_index():
    """Returns a clean ParameterIndex"""
    return ParameterIndex()


@pytest.fixture
def tmp_file(tmp_path):
    """Create a temporary file with content and return the file name"""
    def _tmp_file(content, suffix='.txt'):
        fname = tmp_path / ('tmp_file' + suffix)
        with open(fname, 'w') as fp:
            fp.write(content)
        return str(fname)
    return _tmp_file


@pytest.fixture
def root_logger():
    """Returns the root logger, restoring its level and handlers after the test"""
    logger = logging.getLogger()
    old_level, old_handlers = logger.level, list(logger.handlers)
    yield logger
    for handler in logger.handlers:
        if handler not in old_handlers:
            handler.close()
    logger.setLevel(old_level)
    logger.handlers[:] = old_handlers
