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

"""Peptide model."""
from memoized_property import memoized_property
from .modifications import ModificationMatch, ResidueSite
from .mass import peptide_mass
from . import const


class MalformedSequenceError(ValueError):
    """Peptide sequence or modification site can not be represented."""


class Peptide:
    """
    A peptide sequence with its modification matches.

    Peptides are immutable: the `with_*` methods return new peptides, so derived values
    (masses, keys) are computed once per instance and never go stale.
    """

    def __init__(self, sequence, modifications=()):
        """
        Initialise the Peptide.

        :param sequence: (str) residues in one letter code, lower case is accepted
        :param modifications: (iterable) ModificationMatch objects or (name, site) tuples
        :raises MalformedSequenceError: for non residue characters or sites outside the peptide
        """
        if not isinstance(sequence, str):
            raise MalformedSequenceError("Peptide sequence must be a string, got %r" % sequence)
        sequence = sequence.upper()
        if const.PEPTIDE_SEQUENCE.match(sequence) is None:
            raise MalformedSequenceError("Invalid peptide sequence '%s'" % sequence)

        matches = []
        for match in modifications:
            if not isinstance(match, ModificationMatch):
                match = ModificationMatch(*match)
            if match.site > len(sequence):
                raise MalformedSequenceError("Site %i of '%s' is outside of %s" % (
                    match.site, match.name, sequence))
            matches.append(match)

        self._sequence = sequence
        self._modifications = tuple(matches)

    @property
    def sequence(self):
        return self._sequence

    @property
    def modifications(self):
        """(tuple of ModificationMatch) modifications in insertion order"""
        return self._modifications

    def __len__(self):
        return len(self._sequence)

    def __eq__(self, other):
        if type(other) is type(self):
            return self._sequence == other._sequence and \
                self._modifications == other._modifications
        return NotImplemented

    def __hash__(self):
        return hash((self._sequence, self._modifications))

    def __repr__(self):
        return 'Peptide(%r, %r)' % (self._sequence, list(self._modifications))

    def with_sequence(self, sequence):
        """Same modifications on a different sequence."""
        return Peptide(sequence, self._modifications)

    def with_modifications(self, modifications):
        """Same sequence with a different list of modifications."""
        return Peptide(self._sequence, modifications)

    def add_modification(self, name, site, variable=True, confident=False):
        """Return a copy with one more modification."""
        match = ModificationMatch(name, site, variable, confident)
        return Peptide(self._sequence, self._modifications + (match,))

    def remove_modifications(self, name):
        """Return a copy without any modification of the given name."""
        return Peptide(self._sequence, [m for m in self._modifications if m.name != name])

    @memoized_property
    def modification_sites(self):
        """(dict) ResidueSite -> list of modification names, in insertion order"""
        sites = {}
        for match in self._modifications:
            sites.setdefault(match.site, []).append(match.name)
        return sites

    @memoized_property
    def unmodified_mass(self):
        """Mass of the sequence without modifications (residues + water)."""
        return peptide_mass(self._sequence)

    def get_mass(self, registry):
        """
        Neutral monoisotopic mass including all modifications.

        :param registry: (ModificationRegistry) source of the modification masses
        :return: (float) mass in Dalton
        """
        return self.unmodified_mass + sum(registry.mass(m.name) for m in self._modifications)

    @memoized_property
    def key(self):
        """Identifier of sequence plus variable modifications (independent of their sites)."""
        variable = sorted(m.name for m in self._modifications if m.variable)
        return '_'.join([self._sequence] + variable)

    def modified_sequence(self, registry):
        """
        Sequence with short modification names in front of the modified residues.

        Terminal modifications are written as 'name-' before and '-name' after the sequence,
        e.g. 'ac-PEPoxMTIDE-am'.

        :param registry: (ModificationRegistry) source of the short names
        """
        nterm, cterm = '', ''
        residue_prefix = [''] * len(self._sequence)
        for match in self._modifications:
            modification = registry.get(match.name)
            if modification.type in ('nterm_protein', 'nterm_peptide'):
                nterm += modification.short_name + '-'
            elif modification.type in ('cterm_protein', 'cterm_peptide'):
                cterm += '-' + modification.short_name
            else:
                residue_prefix[match.site.index] += modification.short_name
        return nterm + ''.join(p + aa for p, aa in zip(residue_prefix, self._sequence)) + cterm

    def protein_modification_sites(self, peptide_start):
        """
        Map the modification sites onto a protein.

        :param peptide_start: (ProteinOffset) offset of the first residue in the protein
        :return: (list of (ProteinOffset, str)) protein offset and modification name
        """
        return [(ResidueSite(m.site).to_protein_offset(peptide_start), m.name)
                for m in self._modifications]
