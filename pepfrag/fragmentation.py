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

"""Theoretical fragmentation of peptides."""
from .amino_acids import residue_mass
from .ions import PeptideFragmentIon, PrecursorIon, ImmoniumIon, ReporterIon
from .mass import H2O_MASS, CO_MASS, nterm_ion_offsets, cterm_ion_offsets
from .modifications import ModificationRegistry
from .neutral_losses import (NeutralLossRegistry, get_neutral_loss_combinations, losses_mass,
                             unique_losses)


class FragmentIonFactory:
    """
    Generate the theoretical ions of peptides.

    The factory holds no per-peptide state: `fragment_ions` can be called concurrently as long
    as the modification registry is not modified at the same time.
    """

    def __init__(self, registry, default_losses=()):
        """
        Initialise the FragmentIonFactory.

        :param registry: (ModificationRegistry) resolves modification names
        :param default_losses: (list of NeutralLoss) losses considered for every peptide
        """
        self.registry = registry
        self.default_losses = list(default_losses)

    @classmethod
    def from_config(cls, config, registry=None):
        """
        Create a factory from a Config.

        :param config: (Config) configuration
        :param registry: (ModificationRegistry) registry to use, built from the config if None
        """
        if registry is None:
            registry = ModificationRegistry.from_config(config)
        losses = NeutralLossRegistry.from_config(config, registry)
        return cls(registry, losses.get_all(config.fragmentation.default_losses))

    def peptide_modifications(self, peptide):
        """
        Resolve the modifications of a peptide.

        Terminal modifications are placed on the first or last residue, independent of the
        site recorded in the match.

        :param peptide: (Peptide)
        :return: (list of float, list of Modification) mass delta per 0-based residue position,
            distinct modifications in first-seen order
        """
        length = len(peptide)
        deltas = [0.0] * length
        distinct = []
        for match in peptide.modifications:
            modification = self.registry.get(match.name)
            if modification.is_nterm:
                position = 0
            elif modification.is_cterm:
                position = length - 1
            else:
                position = match.site.index
            deltas[position] += modification.mass
            if all(modification.name != seen.name for seen in distinct):
                distinct.append(modification)
        return deltas, distinct

    def possible_neutral_losses(self, modifications):
        """
        Losses applicable to a peptide carrying the given modifications.

        :param modifications: (list of Modification) distinct modifications of the peptide
        :return: (list of NeutralLoss) default losses followed by modification losses
        """
        losses = list(self.default_losses)
        for modification in modifications:
            losses.extend(modification.neutral_losses)
        return unique_losses(losses)

    def fragment_ions(self, peptide):
        """
        Generate all theoretical ions of a peptide.

        Output order: reporter ions, then per cleavage position the immonium ion of a residue
        seen for the first time, a/b/c and x/y/z ions for every loss combination, and last the
        precursor for every loss combination.

        :param peptide: (Peptide)
        :return: (list) PeptideFragmentIon, PrecursorIon, ImmoniumIon and ReporterIon objects
        :raises UnknownAminoAcidError: if a residue has no unique mass
        """
        sequence = peptide.sequence
        length = len(sequence)
        masses = [residue_mass(aa) for aa in sequence]
        deltas, modifications = self.peptide_modifications(peptide)

        loss_combinations = get_neutral_loss_combinations(
            self.possible_neutral_losses(modifications))
        loss_masses = [losses_mass(losses) for losses in loss_combinations]

        ions = []
        reporter_names = set()
        for modification in modifications:
            for reporter in modification.reporter_ions:
                if reporter.name not in reporter_names:
                    reporter_names.add(reporter.name)
                    ions.append(ReporterIon.from_definition(reporter))

        immonium_residues = set()
        forward_mass = 0.0
        # the y ion carries the water of the C-terminus
        rewind_mass = H2O_MASS
        for aa in range(length - 1):
            residue = sequence[aa]
            if residue not in immonium_residues:
                immonium_residues.add(residue)
                ions.append(ImmoniumIon(residue, masses[aa] - CO_MASS))

            number = aa + 1
            forward_mass += masses[aa] + deltas[aa]
            for subtype, offset in nterm_ion_offsets.items():
                for losses, loss_mass in zip(loss_combinations, loss_masses):
                    ions.append(PeptideFragmentIon(subtype, number,
                                                   forward_mass + offset - loss_mass, losses))

            raa = length - 1 - aa
            rewind_mass += masses[raa] + deltas[raa]
            for subtype, offset in cterm_ion_offsets.items():
                for losses, loss_mass in zip(loss_combinations, loss_masses):
                    ions.append(PeptideFragmentIon(subtype, number,
                                                   rewind_mass + offset - loss_mass, losses))

        forward_mass += masses[-1] + deltas[-1]
        precursor_mass = forward_mass + H2O_MASS
        for losses, loss_mass in zip(loss_combinations, loss_masses):
            ions.append(PrecursorIon(precursor_mass - loss_mass, losses))

        return ions


def generate_fragment_ions(peptide, registry, default_losses=()):
    """
    Generate all theoretical ions of a peptide.

    :param peptide: (Peptide) the peptide
    :param registry: (ModificationRegistry) resolves modification names
    :param default_losses: (list of NeutralLoss) losses considered for every peptide
    :return: (list) theoretical ions, see FragmentIonFactory.fragment_ions
    """
    return FragmentIonFactory(registry, default_losses).fragment_ions(peptide)
