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
pepfrag: theoretical peptide fragmentation and fragment ion matching.

This package contains:
- Mass tables (const, atoms, amino_acids, mass)
- Configuration and definitions (config)
- Modification and neutral loss registries (registry, modifications, neutral_losses)
- Peptide model (peptide)
- Fragmentation and matching (ions, fragmentation, matching, annotation)
- I/O utilities (spectra_reader, synthetic_spectra, pf_logging)
"""

__version__ = "1.0.0"

from . import const
from . import atoms
from . import amino_acids
from . import config
from . import pf_logging
from . import registry
from . import neutral_losses
from . import modifications
from . import mass
from . import peptide
from . import ions
from . import fragmentation
from . import matching
from . import annotation
from . import spectra_reader
from . import synthetic_spectra

__all__ = [
    "const",
    "atoms",
    "amino_acids",
    "config",
    "pf_logging",
    "registry",
    "neutral_losses",
    "modifications",
    "mass",
    "peptide",
    "ions",
    "fragmentation",
    "matching",
    "annotation",
    "spectra_reader",
    "synthetic_spectra",
]
