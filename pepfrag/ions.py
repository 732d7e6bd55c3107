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

"""
Theoretical ions.

Ions form a closed set of immutable value types, told apart by their `family`:

- PeptideFragmentIon: a/b/c/x/y/z with fragment number and neutral loss combination
- PrecursorIon: the intact peptide, with neutral loss combination
- ImmoniumIon: residue specific immonium ion
- ReporterIon: named reporter ion of a modification

All masses are neutral monoisotopic masses; `get_mz(charge)` adds the protons.
"""
from collections import namedtuple
from .mass import ion_mz
from .neutral_losses import losses_mass, losses_name


class IonFamily:
    PEPTIDE_FRAGMENT = 'peptide_fragment'
    PRECURSOR = 'precursor'
    IMMONIUM = 'immonium'
    REPORTER = 'reporter'


NTERM_ION_TYPES = ('a', 'b', 'c')
CTERM_ION_TYPES = ('x', 'y', 'z')


class _Ion:
    __slots__ = ()

    family = None
    neutral_losses = ()

    def get_mz(self, charge=1):
        """m/z of the ion at the given charge."""
        return ion_mz(self.mass, charge)

    @property
    def loss_mass(self):
        return losses_mass(self.neutral_losses)

    def annotation(self, charge=1):
        """Peak label including the charge, e.g. 'b2+' or 'y3++-H2O'."""
        return self.name + '+' * charge


class PeptideFragmentIon(namedtuple('PeptideFragmentIon',
                                    ['subtype', 'number', 'mass', 'neutral_losses']), _Ion):
    """a, b, c, x, y or z ion; `number` counts residues from the respective terminus."""

    __slots__ = ()
    family = IonFamily.PEPTIDE_FRAGMENT

    @property
    def is_nterm(self):
        return self.subtype in NTERM_ION_TYPES

    @property
    def name(self):
        return '%s%i%s' % (self.subtype, self.number, losses_name(self.neutral_losses))

    def annotation(self, charge=1):
        return '%s%i%s%s' % (self.subtype, self.number, '+' * charge,
                             losses_name(self.neutral_losses))


class PrecursorIon(namedtuple('PrecursorIon', ['mass', 'neutral_losses']), _Ion):
    """Intact peptide."""

    __slots__ = ()
    family = IonFamily.PRECURSOR

    @property
    def name(self):
        return 'M' + losses_name(self.neutral_losses)

    def annotation(self, charge=1):
        return 'M' + '+' * charge + losses_name(self.neutral_losses)


class ImmoniumIon(namedtuple('ImmoniumIon', ['residue', 'mass']), _Ion):
    """Immonium ion of a residue (residue mass - CO)."""

    __slots__ = ()
    family = IonFamily.IMMONIUM

    @property
    def name(self):
        return 'i' + self.residue


class ReporterIon(namedtuple('ReporterIon', ['name', 'mass']), _Ion):
    """Reporter ion."""

    __slots__ = ()
    family = IonFamily.REPORTER

    @classmethod
    def from_definition(cls, definition):
        """Create the ion from a ReporterIonDefinition."""
        return cls(definition.name, definition.mass)
