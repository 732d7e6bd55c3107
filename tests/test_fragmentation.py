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

from pepfrag.amino_acids import residue_mass, UnknownAminoAcidError
from pepfrag.config import Config, NeutralLoss
from pepfrag.fragmentation import FragmentIonFactory, generate_fragment_ions
from pepfrag.ions import IonFamily, PeptideFragmentIon, PrecursorIon, ImmoniumIon, ReporterIon
from pepfrag.mass import H2O_MASS, NH3_MASS, CO_MASS, H2_MASS, peptide_mass
from pepfrag.peptide import Peptide


def find_ion(ions, subtype, number, losses=()):
    for ion in ions:
        if ion.family == IonFamily.PEPTIDE_FRAGMENT and ion.subtype == subtype \
                and ion.number == number \
                and tuple(loss.name for loss in ion.neutral_losses) == losses:
            return ion
    return None


def ions_of(ions, family):
    return [ion for ion in ions if ion.family == family]


def test_ion_counts(factory, no_loss_factory):
    peptide = Peptide('PEPTIDE')
    # 6 cleavage positions, 6 ion types, immonium ions of P, E, T, I, D and the precursor
    assert len(no_loss_factory.fragment_ions(peptide)) == 6 * 6 + 5 + 1

    # H2O and NH3 give 4 loss combinations
    ions = factory.fragment_ions(peptide)
    assert len(ions_of(ions, IonFamily.PEPTIDE_FRAGMENT)) == 6 * 6 * 4
    assert len(ions_of(ions, IonFamily.PRECURSOR)) == 4
    assert len(ions_of(ions, IonFamily.IMMONIUM)) == 5
    assert ions_of(ions, IonFamily.REPORTER) == []


def test_precursor_mass_additivity(no_loss_factory):
    for sequence in ('PEPTIDE', 'G', 'ACDEFGHIKLMNPQRSTVWY', 'KKKKRRRR'):
        ions = no_loss_factory.fragment_ions(Peptide(sequence))
        precursor = ions[-1]
        assert isinstance(precursor, PrecursorIon)
        expected = sum(residue_mass(aa) for aa in sequence) + H2O_MASS
        assert abs(precursor.mass - expected) < 1e-9


def test_forward_rewind_symmetry(factory):
    sequence = 'SAMPLERPEPTIDE'
    ions = factory.fragment_ions(Peptide(sequence))
    precursor_mass = peptide_mass(sequence)
    n = len(sequence)
    for k in range(1, n):
        b = find_ion(ions, 'b', k)
        y = find_ion(ions, 'y', n - k)
        assert abs(b.mass + y.mass - precursor_mass) < 1e-9
        # the other ion type pairs differ by a fixed offset
        a = find_ion(ions, 'a', k)
        x = find_ion(ions, 'x', n - k)
        assert abs(a.mass + x.mass - precursor_mass + H2_MASS) < 1e-9
        c = find_ion(ions, 'c', k)
        z = find_ion(ions, 'z', n - k)
        assert abs(c.mass + z.mass - precursor_mass) < 1e-9


def test_fragment_masses(factory):
    ions = factory.fragment_ions(Peptide('PEPTIDE'))
    b2 = find_ion(ions, 'b', 2)
    assert_almost_equal(b2.mass, residue_mass('P') + residue_mass('E'), decimal=9)
    assert_almost_equal(b2.get_mz(1), 227.10263, decimal=4)
    assert_almost_equal(find_ion(ions, 'a', 2).mass, b2.mass - CO_MASS, decimal=9)
    assert_almost_equal(find_ion(ions, 'c', 2).mass, b2.mass + NH3_MASS, decimal=9)

    y1 = find_ion(ions, 'y', 1)
    assert_almost_equal(y1.mass, residue_mass('E') + H2O_MASS, decimal=9)
    assert_almost_equal(y1.get_mz(1), 148.06043, decimal=4)
    assert_almost_equal(find_ion(ions, 'x', 1).mass, y1.mass + CO_MASS - H2_MASS, decimal=9)
    assert_almost_equal(find_ion(ions, 'z', 1).mass, y1.mass - NH3_MASS, decimal=9)

    b2_h2o_nh3 = find_ion(ions, 'b', 2, ('H2O', 'NH3'))
    assert_almost_equal(b2_h2o_nh3.mass, b2.mass - H2O_MASS - NH3_MASS, decimal=9)
    assert b2_h2o_nh3.name == 'b2-H2O-NH3'
    assert b2_h2o_nh3.annotation(2) == 'b2++-H2O-NH3'

    precursor = ions_of(ions, IonFamily.PRECURSOR)
    assert [ion.name for ion in precursor] == ['M', 'M-H2O', 'M-NH3', 'M-H2O-NH3']
    assert_almost_equal(precursor[0].mass - precursor[1].mass, H2O_MASS, decimal=9)
    assert precursor[1].annotation(1) == 'M+-H2O'


def test_ion_order(factory):
    ions = factory.fragment_ions(Peptide('PEPTIDE'))
    # immonium ion of the first residue, then the first cleavage position
    assert ions[0] == ImmoniumIon('P', residue_mass('P') - CO_MASS)
    assert ions[1].subtype == 'a' and ions[1].number == 1 and ions[1].neutral_losses == ()
    assert [ion.subtype for ion in ions[1:25:4]] == ['a', 'b', 'c', 'x', 'y', 'z']
    # each ion number is produced in one go
    numbers = [ion.number for ion in ions_of(ions, IonFamily.PEPTIDE_FRAGMENT)]
    assert numbers == sorted(numbers)
    assert isinstance(ions[-1], PrecursorIon)


def test_no_duplicate_ions(factory, registry):
    peptide = Peptide('PEPSMTIDEK', [('Phosphorylation of S', 4), ('Oxidation of M', 5)])
    ions = factory.fragment_ions(peptide)
    keys = [(ion.subtype, ion.number, ion.name) for ion in ions_of(ions,
                                                                     IonFamily.PEPTIDE_FRAGMENT)]
    assert len(keys) == len(set(keys))


def test_fragmentation_is_idempotent(factory):
    peptide = Peptide('PEPMTIDE', [('Oxidation of M', 4)])
    first = factory.fragment_ions(peptide)
    second = factory.fragment_ions(peptide)
    assert [ion.mass for ion in first] == [ion.mass for ion in second]
    assert first == second


def test_immonium_ions(no_loss_factory):
    ions = no_loss_factory.fragment_ions(Peptide('PEPW'))
    immonium = ions_of(ions, IonFamily.IMMONIUM)
    # one ion per distinct residue, the C-terminal residue is not part of the cleavage loop
    assert [ion.residue for ion in immonium] == ['P', 'E']
    assert_almost_equal(immonium[0].get_mz(1), 70.06513, decimal=4)
    assert immonium[0].name == 'iP'
    assert immonium[0].annotation(1) == 'iP+'


def test_modification_masses(registry, no_loss_factory):
    peptide = Peptide('PEPMTIDE', [('Oxidation of M', 4)])
    ions = no_loss_factory.fragment_ions(peptide)
    unmodified = no_loss_factory.fragment_ions(Peptide('PEPMTIDE'))
    oxidation = registry.mass('Oxidation of M')

    # the modification enters the b ions at its site and the y ions covering it
    assert find_ion(ions, 'b', 3).mass == find_ion(unmodified, 'b', 3).mass
    assert_almost_equal(find_ion(ions, 'b', 4).mass - find_ion(unmodified, 'b', 4).mass,
                        oxidation, decimal=9)
    assert find_ion(ions, 'y', 4).mass == find_ion(unmodified, 'y', 4).mass
    assert_almost_equal(find_ion(ions, 'y', 5).mass - find_ion(unmodified, 'y', 5).mass,
                        oxidation, decimal=9)
    assert_almost_equal(ions[-1].mass, peptide.get_mass(registry), decimal=9)


def test_terminal_modifications(registry, no_loss_factory):
    # terminal modifications go on the terminal residues whatever site is recorded
    peptide = Peptide('PEPTIDE', [('Acetylation of protein N-term', 3),
                                  ('Amidation of the peptide C-term', 2)])
    ions = no_loss_factory.fragment_ions(peptide)
    unmodified = no_loss_factory.fragment_ions(Peptide('PEPTIDE'))

    assert_almost_equal(find_ion(ions, 'b', 1).mass - find_ion(unmodified, 'b', 1).mass,
                        registry.mass('Acetylation of protein N-term'), decimal=9)
    assert_almost_equal(find_ion(ions, 'y', 1).mass - find_ion(unmodified, 'y', 1).mass,
                        registry.mass('Amidation of the peptide C-term'), decimal=9)
    assert_almost_equal(ions[-1].mass, peptide.get_mass(registry), decimal=9)


def test_modification_losses(factory):
    peptide = Peptide('PEPSIDE', [('Phosphorylation of S', 4)])
    ions = factory.fragment_ions(peptide)
    # H2O, NH3 and H3PO4 give 7 combinations
    assert len(ions_of(ions, IonFamily.PRECURSOR)) == 7
    assert find_ion(ions, 'y', 4, ('H3PO4',)) is not None
    assert find_ion(ions, 'y', 4, ('NH3', 'H3PO4')) is not None
    assert find_ion(ions, 'y', 4, ('H2O', 'H3PO4')) is not None


def test_reporter_ions(factory):
    ions = factory.fragment_ions(Peptide('PEPYTIDE', [('Phosphorylation of Y', 4)]))
    assert ions[0] == ReporterIon('pY', ions[0].mass)
    assert ions[0].annotation(1) == 'pY+'
    assert_almost_equal(ions[0].get_mz(1), 216.04202, decimal=4)

    # the same reporter ions are only produced once
    tmt = Peptide('PEPTIDEK', [('TMT 10-plex of peptide N-term', 1), ('TMT 10-plex of K', 8)])
    reporters = ions_of(factory.fragment_ions(tmt), IonFamily.REPORTER)
    assert len(reporters) == 10
    assert reporters[0].name == 'TMT_126'


def test_unknown_amino_acid(factory):
    peptide = Peptide('PEBTIDE')
    with pytest.raises(UnknownAminoAcidError) as excinfo:
        factory.fragment_ions(peptide)
    assert excinfo.value.letter == 'B'

    # I/L ambiguity has a single mass
    ions = factory.fragment_ions(Peptide('PEPTJDE'))
    assert_almost_equal(ions[-1].mass, peptide_mass('PEPTIDE'), decimal=9)


def test_unknown_modification(factory):
    ions = factory.fragment_ions(Peptide('PEPTIDE', [('Not a modification', 2)]))
    unmodified = factory.fragment_ions(Peptide('PEPTIDE'))
    assert [ion.mass for ion in ions] == [ion.mass for ion in unmodified]


def test_generate_fragment_ions(registry):
    ions = generate_fragment_ions(Peptide('PEPTIDE'), registry, [NeutralLoss.H2O])
    assert len(ions_of(ions, IonFamily.PRECURSOR)) == 2
    assert isinstance(find_ion(ions, 'b', 2, ('H2O',)), PeptideFragmentIon)


def test_factory_from_config():
    factory = FragmentIonFactory.from_config(Config())
    assert [loss.name for loss in factory.default_losses] == ['H2O', 'NH3']
    assert 'Oxidation of M' in factory.registry

    config = Config(neutral_losses=[{'name': 'HexNAc', 'composition': 'C8H13NO5'}],
                    fragmentation={'default_losses': ['HexNAc']},
                    include_default_modifications=False)
    factory = FragmentIonFactory.from_config(config)
    assert [loss.name for loss in factory.default_losses] == ['HexNAc']
    assert len(factory.registry) == 0


def test_factory_from_config_unknown_loss():
    config = Config(fragmentation={'default_losses': ['H2O', 'typo']})
    factory = FragmentIonFactory.from_config(config)
    assert [loss.name for loss in factory.default_losses] == ['H2O']

    ions = factory.fragment_ions(Peptide('PEPTIDE'))
    precursors = [ion.name for ion in ions if ion.family == IonFamily.PRECURSOR]
    assert precursors == ['M', 'M-H2O']
    assert all('unknown' not in ion.name for ion in ions)
