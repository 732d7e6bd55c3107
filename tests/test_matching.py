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

import numpy as np
import pytest
from numpy.testing import assert_almost_equal

from pepfrag import const
from pepfrag.ions import ReporterIon, IonFamily
from pepfrag.matching import PeakList, Peak, IonMatch, match_ion, match_mz, match_reporter_ion, \
    tolerance_window
from pepfrag.peptide import Peptide


def b2_ion(ions):
    return [ion for ion in ions if ion.family == IonFamily.PEPTIDE_FRAGMENT
            and ion.subtype == 'b' and ion.number == 2 and ion.neutral_losses == ()][0]


def test_peak_list():
    peaks = PeakList([300.0, 100.0, 200.0], [3, 1, 2])
    assert len(peaks) == 3
    np.testing.assert_array_equal(peaks.mz_values, [100.0, 200.0, 300.0])
    np.testing.assert_array_equal(peaks.int_values, [1, 2, 3])
    assert peaks.peak(1) == Peak(200.0, 2.0)
    assert peaks.window(100.0, 200.0) == (0, 2)
    assert peaks.window(100.1, 199.9) == (1, 1)

    with pytest.raises(ValueError):
        PeakList([1.0, 2.0], [1.0])


def test_peak_list_from_peaks():
    from_dict = PeakList.from_peaks({200.0: 5.0, 100.0: 10.0})
    np.testing.assert_array_equal(from_dict.mz_values, [100.0, 200.0])
    from_pair = PeakList.from_peaks(([200.0, 100.0], [5.0, 10.0]))
    np.testing.assert_array_equal(from_pair.int_values, [10.0, 5.0])
    assert PeakList.from_peaks(from_pair) is from_pair


def test_relative_intensity_filter():
    peaks = PeakList([100.0, 200.0, 300.0], [1.0, 50.0, 100.0])
    filtered = peaks.above_relative_intensity(0.1)
    np.testing.assert_array_equal(filtered.mz_values, [200.0, 300.0])
    assert peaks.above_relative_intensity(0) is peaks


def test_match_peptide_b2(no_loss_factory):
    b2 = b2_ion(no_loss_factory.fragment_ions(Peptide('PEPTIDE')))
    b2_mz = b2.get_mz(1)

    for delta in (0.01, -0.01):
        match = match_ion(b2, PeakList([150.0, b2_mz + delta, 400.0], [10, 20, 30]), 0.5)
        assert match.matched
        assert match.peak.mz == pytest.approx(b2_mz + delta)
        assert match.peak.intensity == 20
        assert match.absolute_error == pytest.approx(delta)
        assert match.annotation == 'b2+'

    # only a peak 10 Da away
    match = match_ion(b2, PeakList([b2_mz + 10], [100]), 0.5)
    assert not match.matched
    assert match.peak is None
    assert match.ion is b2
    assert match.absolute_error is None
    assert match.relative_error is None
    assert match.isotope is None


def test_match_empty_peaks(no_loss_factory):
    b2 = b2_ion(no_loss_factory.fragment_ions(Peptide('PEPTIDE')))
    assert match_ion(b2, PeakList([], []), 0.5) == IonMatch(b2, None, 1)
    assert not match_ion(b2, {}, 0.5).matched


def test_match_is_deterministic(no_loss_factory):
    b2 = b2_ion(no_loss_factory.fragment_ions(Peptide('PEPTIDE')))
    b2_mz = b2.get_mz(1)
    peaks = PeakList([b2_mz - 0.2, b2_mz + 0.1, b2_mz + 0.3], [50, 1, 100])
    matches = [match_ion(b2, peaks, 0.5) for _ in range(5)]
    assert all(m == matches[0] for m in matches)
    # the closest peak wins, not the most intense one
    assert matches[0].peak.mz == pytest.approx(b2_mz + 0.1)


def test_closest_peak_and_tie_break():
    peaks = PeakList([99.75, 100.25, 100.4], [1, 1, 1000])
    assert match_mz(100.0, peaks, 0.5) == 0
    assert match_mz(100.3, peaks, 0.5) == 1
    assert match_mz(100.8, peaks, 0.5) == 2
    assert match_mz(102.0, peaks, 0.5) is None


def test_window_is_inclusive():
    peaks = PeakList([99.5, 100.5], [1, 1])
    assert match_mz(100.0, peaks, 0.5) == 0
    assert tolerance_window(100.0, 0.5, False) == (99.5, 100.5)


def test_ppm_tolerance():
    low, high = tolerance_window(1000.0, 10, True)
    assert_almost_equal(low, 999.99, decimal=9)
    assert_almost_equal(high, 1000.01, decimal=9)

    assert match_mz(1000.0, PeakList([1000.009], [1]), 10, is_ppm=True) == 0
    assert match_mz(1000.0, PeakList([1000.011], [1]), 10, is_ppm=True) is None


def test_match_charge_and_errors():
    ion = ReporterIon('test', 998.0)
    mz2 = ion.get_mz(2)
    assert mz2 == pytest.approx(499.0 + const.PROTON_MASS)
    peak_mz = mz2 + const.C12C13_MASS_DIFF / 2
    match = match_ion(ion, PeakList([peak_mz], [1]), 1, charge=2)
    assert match.charge == 2
    assert match.annotation == 'test++'
    assert match.theoretical_mz == pytest.approx(mz2)
    assert match.isotope == 1
    assert match.relative_error == pytest.approx((peak_mz - mz2) / mz2 * 1e6)


def test_match_reporter_ion():
    ion = ReporterIon('TMT_126', 126.127726 - const.PROTON_MASS)
    peaks = PeakList([126.12, 126.125, 126.13, 127.12], [1, 2, 3, 4])
    matches = match_reporter_ion(ion, peaks, 0.01)
    assert [m.peak.mz for m in matches] == [126.12, 126.125, 126.13]
    assert match_reporter_ion(ion, PeakList([130.0], [1]), 0.01) == []
