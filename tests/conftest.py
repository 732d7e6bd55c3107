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
The conftest.py file serves as a means of providing fixtures for an entire directory.
Fixtures defined in a conftest.py can be used by any test in that package without needing to
import them (pytest will automatically discover them).
"""

import pytest
from pepfrag.config import Config, Modification, NeutralLoss
from pepfrag.modifications import ModificationRegistry
from pepfrag.fragmentation import FragmentIonFactory


@pytest.fixture()
def registry():
    # default catalogue plus a phosphorylation of C used by the mass scenarios
    return ModificationRegistry([
        Modification(name='Phosphorylation of C', short_name='ph', mass=79.9663,
                     specificity=['C']),
    ])


@pytest.fixture()
def factory(registry):
    return FragmentIonFactory(registry, [NeutralLoss.H2O, NeutralLoss.NH3])


@pytest.fixture()
def no_loss_factory(registry):
    return FragmentIonFactory(registry)


@pytest.fixture()
def annotation_config():
    # Basic annotation config to use for tests
    return Config(
        annotation={'fragment_tol': '0.5 da', 'ion_types': ['b', 'y'], 'charges': [1]},
    )
