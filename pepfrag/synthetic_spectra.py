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

"""Module for creating synthetic (in-silico) mass spectra of peptides."""
from pyteomics import mgf
from . import const
from .ions import IonFamily
from .mass import ion_mz


def add_isotopes(peak_list, isotopes):
    """
    Add isotope peaks to (m/z, intensity, charge) tuples.

    :param peak_list: (list of tuple) monoisotopic peaks as (mz, intensity, charge)
    :param isotopes: (int) number of isotope peaks to add per monoisotopic peak
    :return: (list of tuple) monoisotopic and isotope peaks
    """
    result = list(peak_list)
    for mz, intensity, charge in peak_list:
        for i in range(1, isotopes + 1):
            result.append((mz + i * const.C12C13_MASS_DIFF / charge, intensity, charge))
    return result


def create_synthetic_spectrum(peptide, factory, charge=2, ion_types=('b', 'y'),
                              fragment_charges=(1,), intensity=100, add_precursor=False,
                              isotopes=0, precursor_delta=0, title=None):
    """
    Generate a theoretical spectrum of a peptide.

    Only fragments without neutral losses are included.

    :param peptide: (Peptide) the peptide
    :param factory: (FragmentIonFactory) fragments the peptide
    :param charge: (int) precursor charge
    :param ion_types: (tuple of str) fragment ion types to include
    :param fragment_charges: (tuple of int) charges to generate fragments at
    :param intensity: (float) intensity of every peak
    :param add_precursor: (bool) include the precursor ion peak
    :param isotopes: (int) number of additional isotope peaks to generate for each
        monoisotopic peak (default: 0 - only monoisotopic peaks).
    :param precursor_delta: (float) added to the precursor mass of the spectrum
    :param title: (str) spectrum title, defaults to sequence:charge
    :return: (dict) spectrum in pyteomics mgf format
    """
    peak_list = []
    precursor_mass = None
    for ion in factory.fragment_ions(peptide):
        if ion.neutral_losses:
            continue
        if ion.family == IonFamily.PRECURSOR:
            precursor_mass = ion.mass
            if add_precursor:
                peak_list.append((ion.get_mz(charge), intensity, charge))
        elif ion.family == IonFamily.PEPTIDE_FRAGMENT and ion.subtype in ion_types:
            for fragment_charge in fragment_charges:
                if fragment_charge <= ion.number:
                    peak_list.append((ion.get_mz(fragment_charge), intensity, fragment_charge))

    peak_list = add_isotopes(peak_list, isotopes)
    peak_list.sort(key=lambda x: x[0])

    if title is None:
        title = '{}:{}'.format(peptide.sequence, charge)
    params = {
        'TITLE': title,
        'PEPMASS': ion_mz(precursor_mass + precursor_delta, charge),
        'CHARGE': '{}+'.format(charge),
    }

    return {
        'm/z array': [x[0] for x in peak_list],
        'intensity array': [x[1] for x in peak_list],
        'params': params,
    }


def create_synthetic_spectra_mgf(synthetic_spectra, out_path):
    """
    Create an MGF from synthetic spectra.

    Wrapper around pyteomics write MGF function.
    :param synthetic_spectra: list of synthetic spectra dicts
    :param out_path: (str) path of the MGF file to write
    """
    mgf.write(synthetic_spectra, out_path, file_mode='w').close()
