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

"""Mass arithmetic shared by peptides, ions and matching."""
from .atoms import composition_mass
from .amino_acids import residue_mass
from .const import PROTON_MASS, C12C13_MASS_DIFF

H2O_MASS = composition_mass('H2O')
NH3_MASS = composition_mass('NH3')
CO_MASS = composition_mass('CO')
H2_MASS = composition_mass('H2')

# fragment masses relative to the b ion (a, b, c) and the y ion (x, y, z)
nterm_ion_offsets = {
    'a': -CO_MASS,
    'b': 0.0,
    'c': NH3_MASS,
}
cterm_ion_offsets = {
    'x': CO_MASS - H2_MASS,
    'y': 0.0,
    'z': -NH3_MASS,
}


def residues_mass(sequence):
    """
    Sum of the monoisotopic residue masses of a sequence.

    :raises UnknownAminoAcidError: for letters without a unique residue mass
    """
    return sum(residue_mass(aa) for aa in sequence)


def peptide_mass(sequence, modification_masses=()):
    """
    Neutral monoisotopic mass of a peptide: residues + water + modification deltas.

    :param sequence: (str) peptide sequence
    :param modification_masses: (iterable of float) modification mass deltas
    :return: (float) mass in Dalton
    """
    return residues_mass(sequence) + H2O_MASS + sum(modification_masses)


def ion_mz(mass, charge):
    """
    m/z of a neutral mass carrying `charge` protons.

    :param mass: (float) neutral mass
    :param charge: (int) charge state, >= 1
    """
    if charge < 1:
        raise ValueError("Charge must be positive, got %s" % charge)
    return (mass + charge * PROTON_MASS) / charge


def neutral_mass(mz, charge):
    """Neutral mass of an ion observed at `mz` with `charge`."""
    return (mz - PROTON_MASS) * charge


def isotope_number(observed_mz, theoretical_mz, charge):
    """Number of 13C isotopes that best explain the difference between the two m/z values."""
    return int(round((observed_mz - theoretical_mz) * charge / C12C13_MASS_DIFF))
