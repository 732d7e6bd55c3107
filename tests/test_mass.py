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

import pytest
from numpy.testing import assert_almost_equal

from pepfrag import const
from pepfrag.atoms import get_atom, isotope_mass, parse_composition, composition_mass
from pepfrag.amino_acids import get_amino_acid, get_combination, residue_mass, \
    UnknownAminoAcidError, standard_letters
from pepfrag.mass import H2O_MASS, NH3_MASS, CO_MASS, peptide_mass, residues_mass, ion_mz, \
    neutral_mass, isotope_number


def test_atoms():
    assert get_atom('C').monoisotopic_mass == 12.0
    assert_almost_equal(get_atom('H').monoisotopic_mass, 1.00782503, decimal=7)
    assert_almost_equal(get_atom('C').average_mass, 12.0107, decimal=3)
    assert get_atom('Se').name == 'Selenium'
    assert_almost_equal(isotope_mass('C', 13), 13.0033548, decimal=6)

    with pytest.raises(LookupError):
        get_atom('Xx')

    with pytest.raises(LookupError):
        isotope_mass('C', 99)


def test_compositions():
    comp = parse_composition('H-2O-1')
    assert comp['H'] == -2
    assert comp['O'] == -1
    assert_almost_equal(composition_mass('H2O'), 18.0105647, decimal=6)
    assert_almost_equal(composition_mass({'H': 2, 'O': 1}), 18.0105647, decimal=6)
    assert_almost_equal(composition_mass('H-2O-1'), -18.0105647, decimal=6)
    assert_almost_equal(H2O_MASS, 18.0105647, decimal=6)
    assert_almost_equal(NH3_MASS, 17.0265491, decimal=6)
    assert_almost_equal(CO_MASS, 27.9949146, decimal=6)
    # 13C shifts the mass by the isotope spacing
    assert_almost_equal(composition_mass('C[13]1') - composition_mass('C1'),
                        const.C12C13_MASS_DIFF, decimal=6)


def test_amino_acids():
    assert len(standard_letters) == 20
    assert_almost_equal(residue_mass('G'), 57.02146, decimal=4)
    assert_almost_equal(residue_mass('W'), 186.07931, decimal=4)
    assert get_amino_acid('k').three_letter == 'Lys'
    assert get_amino_acid('U').name == 'Selenocysteine'

    # I and L share the same mass, so J is usable
    assert residue_mass('J') == residue_mass('L')
    assert get_amino_acid('J').is_combination
    assert [aa.letter for aa in get_combination('B')] == ['D', 'N']
    assert len(get_combination('X')) == 20
    assert get_combination('A')[0].letter == 'A'

    for letter in ('B', 'Z', 'X'):
        with pytest.raises(UnknownAminoAcidError):
            residue_mass(letter)

    with pytest.raises(UnknownAminoAcidError) as excinfo:
        get_amino_acid('1')
    assert excinfo.value.letter == '1'


def test_peptide_mass():
    assert_almost_equal(peptide_mass('PEPTIDE'), 799.35996, decimal=3)
    assert_almost_equal(residues_mass('PEPTIDE') + H2O_MASS, peptide_mass('PEPTIDE'), decimal=9)
    assert_almost_equal(peptide_mass('AC', [79.9663]),
                        residue_mass('A') + residue_mass('C') + 79.9663 + H2O_MASS, decimal=6)


def test_ion_mz():
    assert_almost_equal(ion_mz(1000, 1), 1000 + const.PROTON_MASS, decimal=9)
    assert_almost_equal(ion_mz(1000, 2), 500 + const.PROTON_MASS, decimal=9)
    assert_almost_equal(neutral_mass(ion_mz(1234.5, 3), 3), 1234.5, decimal=9)

    with pytest.raises(ValueError):
        ion_mz(1000, 0)


def test_isotope_number():
    mz = ion_mz(1000, 2)
    assert isotope_number(mz, mz, 2) == 0
    assert isotope_number(mz + const.C12C13_MASS_DIFF / 2, mz, 2) == 1
    assert isotope_number(mz + 2 * const.C12C13_MASS_DIFF, mz, 1) == 2
