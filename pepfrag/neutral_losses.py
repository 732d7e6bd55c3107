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

"""Neutral loss combinations and the neutral loss registry."""
from itertools import combinations
from .config import NeutralLoss
from .registry import NamedRegistry
from . import const

default_neutral_losses = [NeutralLoss.H2O, NeutralLoss.NH3, NeutralLoss.H3PO4, NeutralLoss.HPO3,
                          NeutralLoss.CH4OS, NeutralLoss.C3H9N]


def unique_losses(losses):
    """
    Remove repeated losses, keeping the first occurrence.

    :param losses: (iterable of NeutralLoss) losses, possibly with repeats
    :return: (list of NeutralLoss) losses in first-seen order
    """
    unique = []
    for loss in losses:
        if not any(loss.is_same_as(seen) for seen in unique):
            unique.append(loss)
    return unique


def get_neutral_loss_combinations(candidate_losses):
    """
    Enumerate the loss combinations an ion can carry.

    The empty combination comes first, then every single loss, then every pair of distinct
    losses, each in insertion order. At most const.MAX_NEUTRAL_LOSSES losses are combined.

    :param candidate_losses: (iterable of NeutralLoss) losses applicable to a peptide
    :return: (list of tuple of NeutralLoss) the combinations
    """
    losses = unique_losses(candidate_losses)
    result = [()]
    for size in range(1, const.MAX_NEUTRAL_LOSSES + 1):
        result.extend(combinations(losses, size))
    return result


def losses_mass(losses):
    """Summed mass of a loss combination."""
    return sum(loss.mass for loss in losses)


def losses_name(losses):
    """Annotation suffix of a loss combination, e.g. '-H2O-NH3'."""
    return ''.join('-' + loss.name for loss in losses)


class NeutralLossRegistry(NamedRegistry):
    """Neutral losses available by name."""

    kind = 'neutral loss'
    unknown = NeutralLoss(name='unknown', mass=0.0)

    def __init__(self, losses=(), include_defaults=True):
        """
        Initialise the NeutralLossRegistry.

        :param losses: (iterable of NeutralLoss) additional losses
        :param include_defaults: (bool) start with the well known losses (H2O, NH3, ...)
        """
        entries = list(default_neutral_losses) if include_defaults else []
        super().__init__(entries + list(losses))

    def is_same(self, registered, entry):
        return registered.is_same_as(entry)

    def get_all(self, names):
        """Resolve a list of names, unknown names are logged and left out."""
        return [loss for loss in (self.get(name) for name in names) if loss is not self.unknown]

    @classmethod
    def from_config(cls, config, modification_registry=None):
        """
        Build the registry from a Config.

        :param config: (Config) configuration with additional `neutral_losses`
        :param modification_registry: (ModificationRegistry) losses of these modifications are
            registered as well
        """
        registry = cls(config.neutral_losses)
        if modification_registry is not None:
            for modification in modification_registry:
                for loss in modification.neutral_losses:
                    if loss.name not in registry:
                        registry.add(loss)
        return registry
