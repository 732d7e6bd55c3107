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

"""Modification registry, modification matches and residue index types."""
from collections import namedtuple
from .config import Modification, NeutralLoss, ReporterIonDefinition
from .registry import NamedRegistry


class _TypedIndex(int):
    """
    Integer position that can not be mixed with a position of another index type.

    Adding a plain int keeps the type; subtracting two positions of the same type gives a
    plain int distance. Any arithmetic or comparison with a different index type raises a
    TypeError.
    """

    minimum = 0

    def __new__(cls, value):
        if isinstance(value, _TypedIndex) and not isinstance(value, cls):
            raise TypeError("Can't convert %s into %s" % (type(value).__name__, cls.__name__))
        index = super().__new__(cls, value)
        if index < cls.minimum:
            raise ValueError("%s must be >= %i, got %i" % (cls.__name__, cls.minimum, index))
        return index

    def _plain(self, other):
        if isinstance(other, _TypedIndex) and type(other) is not type(self):
            raise TypeError("Can't mix %s and %s" % (type(self).__name__, type(other).__name__))
        return int(other)

    def __add__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return type(self)(int(self) + self._plain(other))

    __radd__ = __add__

    def __sub__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        if type(other) is type(self):
            return int(self) - int(other)
        return type(self)(int(self) - self._plain(other))

    def _compare(self, other, op):
        if isinstance(other, _TypedIndex) and type(other) is not type(self):
            return NotImplemented
        return op(int(self), other)

    def __eq__(self, other):
        return self._compare(other, int.__eq__)

    def __ne__(self, other):
        return self._compare(other, int.__ne__)

    def __lt__(self, other):
        return self._compare(other, int.__lt__)

    def __le__(self, other):
        return self._compare(other, int.__le__)

    def __gt__(self, other):
        return self._compare(other, int.__gt__)

    def __ge__(self, other):
        return self._compare(other, int.__ge__)

    __hash__ = int.__hash__

    def __repr__(self):
        return '%s(%i)' % (type(self).__name__, self)


class ResidueSite(_TypedIndex):
    """1-based position of a residue in a peptide (1 is the first residue)."""

    minimum = 1

    @property
    def index(self):
        """0-based index into the peptide sequence string."""
        return int(self) - 1

    def to_protein_offset(self, peptide_start):
        """
        Translate into a protein position.

        :param peptide_start: (ProteinOffset) offset of the first peptide residue in the protein
        :return: (ProteinOffset)
        """
        return ProteinOffset(int(ProteinOffset(peptide_start)) + int(self) - 1)


class ProteinOffset(_TypedIndex):
    """0-based position of a residue in a protein sequence."""

    minimum = 0

    def to_residue_site(self, peptide_start):
        """
        Translate into a residue site of the peptide starting at `peptide_start`.

        :param peptide_start: (ProteinOffset) offset of the first peptide residue in the protein
        :return: (ResidueSite)
        """
        return ResidueSite(int(self) - int(ProteinOffset(peptide_start)) + 1)


class ModificationMatch(namedtuple('ModificationMatch', ['name', 'site', 'variable',
                                                         'confident'])):
    """A modification placed on a peptide residue (`site` is a ResidueSite)."""

    __slots__ = ()

    def __new__(cls, name, site, variable=True, confident=False):
        return super().__new__(cls, name, ResidueSite(site), bool(variable), bool(confident))


def default_modifications():
    """Modification catalogue the registry starts with."""
    tmt_reporters = [ReporterIonDefinition.TMT_126, ReporterIonDefinition.TMT_127N,
                     ReporterIonDefinition.TMT_127C, ReporterIonDefinition.TMT_128N,
                     ReporterIonDefinition.TMT_128C, ReporterIonDefinition.TMT_129N,
                     ReporterIonDefinition.TMT_129C, ReporterIonDefinition.TMT_130N,
                     ReporterIonDefinition.TMT_130C, ReporterIonDefinition.TMT_131]
    itraq_reporters = [ReporterIonDefinition.iTRAQ4Plex_114, ReporterIonDefinition.iTRAQ4Plex_115,
                       ReporterIonDefinition.iTRAQ4Plex_116, ReporterIonDefinition.iTRAQ4Plex_117]
    return [
        Modification(name='Phosphorylation of S', short_name='ph', composition='HPO3',
                     specificity=['S'], neutral_losses=[NeutralLoss.H3PO4]),
        Modification(name='Phosphorylation of T', short_name='ph', composition='HPO3',
                     specificity=['T'], neutral_losses=[NeutralLoss.H3PO4]),
        Modification(name='Phosphorylation of Y', short_name='ph', composition='HPO3',
                     specificity=['Y'], reporter_ions=[ReporterIonDefinition.PHOSPHO_Y]),
        Modification(name='Oxidation of M', short_name='ox', composition='O',
                     specificity=['M'], neutral_losses=[NeutralLoss.CH4OS]),
        Modification(name='Carbamidomethylation of C', short_name='cm', composition='C2H3NO',
                     specificity=['C']),
        Modification(name='Acetylation of protein N-term', short_name='ac', composition='C2H2O',
                     type='nterm_protein'),
        Modification(name='Acetylation of K', short_name='ac', composition='C2H2O',
                     specificity=['K'], reporter_ions=[ReporterIonDefinition.ACE_K_126,
                                                       ReporterIonDefinition.ACE_K_143]),
        Modification(name='Deamidation of N', short_name='de', composition='H-1N-1O1',
                     specificity=['N']),
        Modification(name='Deamidation of Q', short_name='de', composition='H-1N-1O1',
                     specificity=['Q']),
        Modification(name='Pyrolidone from Q', short_name='pyro', composition='H-3N-1',
                     type='nterm_peptide_at_residue', specificity=['Q']),
        Modification(name='Amidation of the peptide C-term', short_name='am',
                     composition='H1N1O-1', type='cterm_peptide'),
        Modification(name='TMT 10-plex of K', short_name='tmt',
                     composition='C8C[13]4H20N1N[15]1O2', specificity=['K'],
                     reporter_ions=tmt_reporters),
        Modification(name='TMT 10-plex of peptide N-term', short_name='tmt',
                     composition='C8C[13]4H20N1N[15]1O2', type='nterm_peptide',
                     reporter_ions=tmt_reporters),
        Modification(name='iTRAQ 4-plex of K', short_name='itraq',
                     composition='C4C[13]3H12N1N[15]1O1', specificity=['K'],
                     reporter_ions=itraq_reporters),
        Modification(name='iTRAQ 4-plex of peptide N-term', short_name='itraq',
                     composition='C4C[13]3H12N1N[15]1O1', type='nterm_peptide',
                     reporter_ions=itraq_reporters),
    ]


class ModificationRegistry(NamedRegistry):
    """
    Modifications available by name.

    Populate it before fragmenting peptides concurrently; `add` is safe to call later but a
    peptide fragmented during the update may see either the old or the new definition.
    """

    kind = 'modification'
    unknown = Modification.UNKNOWN

    def __init__(self, modifications=(), include_defaults=True):
        """
        Initialise the ModificationRegistry.

        :param modifications: (iterable of Modification) user defined modifications
        :param include_defaults: (bool) start with the default catalogue
        """
        entries = default_modifications() if include_defaults else []
        super().__init__(entries + list(modifications))

    @classmethod
    def from_config(cls, config):
        """Build the registry from a Config."""
        return cls(config.modifications, include_defaults=config.include_default_modifications)

    def mass(self, name):
        """Mass delta of a modification, 0 for unknown names."""
        return self.get(name).mass


def find_modification_sites(sequence, modification):
    """
    List the residue sites a modification can be placed on.

    Protein terminal types are reported at the peptide termini; whether the peptide actually
    sits at the protein terminus is up to the caller.

    :param sequence: (str) peptide sequence
    :param modification: (Modification)
    :return: (list of ResidueSite) candidate sites in ascending order
    """
    sequence = sequence.upper()
    if modification.is_nterm:
        candidates = [1]
    elif modification.is_cterm:
        candidates = [len(sequence)]
    else:
        candidates = range(1, len(sequence) + 1)
    return [ResidueSite(site) for site in candidates
            if modification.targets(sequence[site - 1])]
