# Copyright (C) 2025  Technische Universitaet Berlin
#
# This library is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 3 of the License, or (at your option) any later version.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this library; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301
# USA

"""Elemental and isotopic masses, backed by the pyteomics NIST mass table."""
from collections import namedtuple
from pyteomics.mass import nist_mass, calculate_mass, Composition

Atom = namedtuple('Atom', ['symbol', 'name', 'monoisotopic_mass', 'average_mass'])

_element_names = {
    'H': 'Hydrogen',
    'C': 'Carbon',
    'N': 'Nitrogen',
    'O': 'Oxygen',
    'P': 'Phosphorus',
    'S': 'Sulfur',
    'Se': 'Selenium',
}

# monoisotopic mass is the mass of the most abundant isotope (entry 0 in nist_mass)
atoms = {
    symbol: Atom(symbol, name, nist_mass[symbol][0][0],
                 calculate_mass(formula=symbol, average=True))
    for symbol, name in _element_names.items()
}


def get_atom(symbol):
    """
    Look up an element.

    :param symbol: (str) element symbol, e.g. 'C'
    :return: (Atom) the element record
    """
    try:
        return atoms[symbol]
    except KeyError:
        raise LookupError("Unknown element '%s'" % symbol) from None


def isotope_mass(symbol, mass_number):
    """
    Get the mass of a specific isotope, e.g. isotope_mass('C', 13).

    :param symbol: (str) element symbol
    :param mass_number: (int) mass number of the isotope, 0 for the most abundant one
    :return: (float) isotope mass in Dalton
    """
    try:
        return nist_mass[symbol][mass_number][0]
    except KeyError:
        raise LookupError("Unknown isotope %s[%s]" % (symbol, mass_number)) from None


def parse_composition(formula):
    """
    Parse a chemical formula into a signed atom multiset.

    Isotopes are written in pyteomics syntax (e.g. 'C[13]2') and negative counts are allowed
    (e.g. 'H-2O-1').

    :param formula: (str) chemical formula
    :return: (pyteomics.mass.Composition)
    """
    return Composition(formula=formula)


def composition_mass(composition, average=False):
    """
    Mass of a composition.

    :param composition: (str|dict) chemical formula or atom counts
    :param average: (bool) return the average instead of the monoisotopic mass
    :return: (float) mass in Dalton
    """
    if isinstance(composition, str):
        return calculate_mass(formula=composition, average=average)
    return calculate_mass(composition=composition, average=average)
