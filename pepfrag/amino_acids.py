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

"""Amino acid residue table."""
from collections import namedtuple
from pyteomics.mass import std_aa_comp
from .atoms import composition_mass


class UnknownAminoAcidError(LookupError):
    """A residue letter has no amino acid (or no unique mass) to compute with."""

    def __init__(self, letter, reason='Unknown amino acid'):
        self.letter = letter
        super().__init__("%s '%s'" % (reason, letter))


class AminoAcid(namedtuple('AminoAcid', ['letter', 'three_letter', 'name', 'monoisotopic_mass',
                                         'average_mass', 'options'])):
    """
    Residue record.

    Masses are residue masses (the free amino acid minus one water). For ambiguous codes
    `options` holds the concrete residue letters and the masses are None unless all options
    share the same mass.
    """

    __slots__ = ()

    @property
    def is_combination(self):
        return len(self.options) > 1


_standard = [
    ('A', 'Ala', 'Alanine'),
    ('C', 'Cys', 'Cysteine'),
    ('D', 'Asp', 'Aspartic Acid'),
    ('E', 'Glu', 'Glutamic Acid'),
    ('F', 'Phe', 'Phenylalanine'),
    ('G', 'Gly', 'Glycine'),
    ('H', 'His', 'Histidine'),
    ('I', 'Ile', 'Isoleucine'),
    ('K', 'Lys', 'Lysine'),
    ('L', 'Leu', 'Leucine'),
    ('M', 'Met', 'Methionine'),
    ('N', 'Asn', 'Asparagine'),
    ('P', 'Pro', 'Proline'),
    ('Q', 'Gln', 'Glutamine'),
    ('R', 'Arg', 'Arginine'),
    ('S', 'Ser', 'Serine'),
    ('T', 'Thr', 'Threonine'),
    ('V', 'Val', 'Valine'),
    ('W', 'Trp', 'Tryptophan'),
    ('Y', 'Tyr', 'Tyrosine'),
    ('U', 'Sec', 'Selenocysteine'),
    ('O', 'Pyl', 'Pyrrolysine'),
]

_combinations = [
    ('B', 'Asx', 'Asparagine or Aspartic Acid', 'DN'),
    ('J', 'Xle', 'Isoleucine or Leucine', 'IL'),
    ('Z', 'Glx', 'Glutamine or Glutamic Acid', 'EQ'),
    ('X', 'Xaa', 'Unknown amino acid', 'ACDEFGHIKLMNPQRSTVWY'),
]

amino_acids = {}

# calculate masses from compositions (the std_aa_mass dict contains a wrong entry for 'O')
for _letter, _three, _name in _standard:
    amino_acids[_letter] = AminoAcid(_letter, _three, _name,
                                     composition_mass(std_aa_comp[_letter]),
                                     composition_mass(std_aa_comp[_letter], average=True),
                                     (_letter,))

for _letter, _three, _name, _options in _combinations:
    _mono = {round(amino_acids[o].monoisotopic_mass, 9) for o in _options}
    if len(_mono) == 1:
        _mono_mass = amino_acids[_options[0]].monoisotopic_mass
        _avg_mass = amino_acids[_options[0]].average_mass
    else:
        _mono_mass, _avg_mass = None, None
    amino_acids[_letter] = AminoAcid(_letter, _three, _name, _mono_mass, _avg_mass,
                                     tuple(_options))

standard_letters = tuple(letter for letter, _, _ in _standard[:20])


def get_amino_acid(letter):
    """
    Look up a residue by its single letter code.

    :param letter: (str) single letter code (case insensitive)
    :return: (AminoAcid)
    :raises UnknownAminoAcidError: if the letter is not a known residue code
    """
    try:
        return amino_acids[letter.upper()]
    except (KeyError, AttributeError):
        raise UnknownAminoAcidError(letter) from None


def get_combination(letter):
    """Resolve a residue code into the list of concrete residues it stands for."""
    return [amino_acids[o] for o in get_amino_acid(letter).options]


def residue_mass(letter):
    """
    Monoisotopic residue mass for a letter.

    Ambiguous codes are only accepted when all residues they stand for have the same mass.

    :param letter: (str) single letter code
    :return: (float) residue mass in Dalton
    :raises UnknownAminoAcidError: for unknown letters or ambiguous masses
    """
    amino_acid = get_amino_acid(letter)
    if amino_acid.monoisotopic_mass is None:
        raise UnknownAminoAcidError(letter, reason='No unique mass for ambiguous amino acid')
    return amino_acid.monoisotopic_mass
