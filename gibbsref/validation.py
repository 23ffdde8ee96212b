"""Validation and normalization of gibbsref run settings"""

__all__ = ['schema']

import os
import yaml
from cerberus import Validator

MODULE_DIR = os.path.dirname(os.path.abspath(__file__))


class GibbsRefValidator(Validator):
    """Validator for the input schema with rules for element and phase lists"""

    def _normalize_coerce_upper(self, value):
        # TDB element, phase and parameter type names are case insensitive, pycalphad stores them uppercased
        if isinstance(value, str):
            return value.upper()
        return value

    def _validate_unique(self, unique, field, value):
        """ Test that the items of a list are not repeated.

        The rule's arguments are validated against this schema:
        {'type': 'boolean'}
        """
        if unique and len(set(value)) != len(value):
            repeated = sorted({item for item in value if value.count(item) > 1})
            self._error(field, f"Must not contain duplicate items, got {repeated} more than once")


def load_schema(filename=os.path.join(MODULE_DIR, 'input-schema.yaml')):
    """Return a GibbsRefValidator for the YAML schema in ``filename``"""
    with open(filename) as f:
        return GibbsRefValidator(yaml.safe_load(f))


schema = load_schema()
