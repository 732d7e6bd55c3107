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

"""Matching theoretical ions to observed peaks."""
from collections import namedtuple
import numpy as np
from .mass import isotope_number

Peak = namedtuple('Peak', ['mz', 'intensity'])


class PeakList:
    """Peaks sorted by ascending m/z, with binary search over the m/z values."""

    def __init__(self, mz_values, int_values):
        """
        Initialise the PeakList.

        :param mz_values: (array-like) m/z values, distinct
        :param int_values: (array-like) intensities, same length as mz_values
        """
        mz_values = np.asarray(mz_values, dtype=np.float64)
        int_values = np.asarray(int_values, dtype=np.float64)
        if mz_values.shape != int_values.shape:
            raise ValueError("m/z and intensity arrays differ in length")
        order = np.argsort(mz_values, kind='stable')
        self.mz_values = mz_values[order]
        self.int_values = int_values[order]

    @classmethod
    def from_peaks(cls, peaks):
        """
        Create a PeakList from any supported peak container.

        :param peaks: PeakList, Spectrum (mz_values/int_values), dict m/z -> intensity or a
            (mz_array, int_array) pair
        :return: (PeakList)
        """
        if isinstance(peaks, PeakList):
            return peaks
        if hasattr(peaks, 'mz_values') and hasattr(peaks, 'int_values'):
            return cls(peaks.mz_values, peaks.int_values)
        if isinstance(peaks, dict):
            return cls(list(peaks.keys()), list(peaks.values()))
        mz_values, int_values = peaks
        return cls(mz_values, int_values)

    def __len__(self):
        return len(self.mz_values)

    def peak(self, index):
        return Peak(float(self.mz_values[index]), float(self.int_values[index]))

    def window(self, low, high):
        """Index range [start, end) of the peaks with low <= m/z <= high."""
        start = int(np.searchsorted(self.mz_values, low, side='left'))
        end = int(np.searchsorted(self.mz_values, high, side='right'))
        return start, end

    def above_relative_intensity(self, limit):
        """Peaks with an intensity of at least `limit` times the most intense peak."""
        if limit <= 0 or len(self) == 0:
            return self
        mask = self.int_values >= limit * self.int_values.max()
        return PeakList(self.mz_values[mask], self.int_values[mask])


class IonMatch(namedtuple('IonMatch', ['ion', 'peak', 'charge'])):
    """
    A theoretical ion at a charge, paired with the peak it matched.

    `peak` is None when no peak lies within the tolerance: the ion was not observed.
    """

    __slots__ = ()

    @property
    def matched(self):
        return self.peak is not None

    @property
    def theoretical_mz(self):
        return self.ion.get_mz(self.charge)

    @property
    def absolute_error(self):
        """Observed - theoretical m/z in Th, None if not matched."""
        if self.peak is None:
            return None
        return self.peak.mz - self.theoretical_mz

    @property
    def relative_error(self):
        """Observed - theoretical m/z in ppm of the theoretical m/z, None if not matched."""
        if self.peak is None:
            return None
        return self.absolute_error / self.theoretical_mz * 1e6

    @property
    def isotope(self):
        """Number of 13C isotopes between theoretical and observed m/z, None if not matched."""
        if self.peak is None:
            return None
        return isotope_number(self.peak.mz, self.theoretical_mz, self.charge)

    @property
    def annotation(self):
        return self.ion.annotation(self.charge)


def tolerance_window(theoretical_mz, tolerance, is_ppm):
    """
    Absolute m/z window around a theoretical value.

    A ppm tolerance is converted relative to the theoretical m/z.

    :return: (float, float) lower and upper bound, both inclusive
    """
    if is_ppm:
        tolerance = theoretical_mz * tolerance * 1e-6
    return theoretical_mz - tolerance, theoretical_mz + tolerance


def match_mz(theoretical_mz, peaks, tolerance, is_ppm=False):
    """
    Find the peak closest to a theoretical m/z.

    Equidistant candidates resolve to the one with the lower m/z.

    :param theoretical_mz: (float) m/z to look for
    :param peaks: (PeakList) sorted peaks
    :param tolerance: (float) tolerance in Th or ppm
    :param is_ppm: (bool) True if the tolerance is given in ppm
    :return: (int) index of the best peak or None
    """
    start, end = peaks.window(*tolerance_window(theoretical_mz, tolerance, is_ppm))
    if start >= end:
        return None
    return start + int(np.argmin(np.abs(peaks.mz_values[start:end] - theoretical_mz)))


def match_ion(ion, peaks, tolerance, is_ppm=False, charge=1):
    """
    Match a theoretical ion against the peaks of a spectrum.

    :param ion: theoretical ion (see pepfrag.ions)
    :param peaks: PeakList, Spectrum, dict m/z -> intensity or (mz_array, int_array)
    :param tolerance: (float) tolerance in Th or ppm
    :param is_ppm: (bool) True if the tolerance is given in ppm
    :param charge: (int) charge of the ion
    :return: (IonMatch) with peak None if no peak is within tolerance
    """
    peaks = PeakList.from_peaks(peaks)
    index = match_mz(ion.get_mz(charge), peaks, tolerance, is_ppm)
    if index is None:
        return IonMatch(ion, None, charge)
    return IonMatch(ion, peaks.peak(index), charge)


def match_reporter_ion(ion, peaks, tolerance, is_ppm=False, charge=1):
    """
    Match a reporter ion to every peak within tolerance.

    :return: (list of IonMatch) matches in ascending m/z order, empty if none
    """
    peaks = PeakList.from_peaks(peaks)
    start, end = peaks.window(*tolerance_window(ion.get_mz(charge), tolerance, is_ppm))
    return [IonMatch(ion, peaks.peak(index), charge) for index in range(start, end)]
