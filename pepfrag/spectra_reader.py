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

"""Peak lists: the Spectrum container and an MGF reader."""
from pyteomics import mgf
import numpy as np
import io
import mmap
import ntpath
import re
from . import const


class Spectrum:
    def __init__(self, precursor, mz_array, int_array, scan_id, rt=np.nan, file_name='',
                 run_name='', scan_number=-1, scan_index=-1, title=''):
        """
        Initialise a Spectrum object.

        :param precursor: (dict) Spectrum precursor information as dict.  e.g. {'mz':
            102.234, 'charge': 2, 'intensity': 12654.35}
        :param mz_array: (ndarray, dtype: float64) m/z values of the spectrum peaks
        :param int_array: (ndarray, dtype: float64) intensity values of the spectrum peaks
        :param scan_id: (str) Unique scan identifier
        :param rt: (float) Retention time in seconds
        :param file_name: (str) Name of the peaklist file
        :param run_name: (str) Name of the MS run
        :param scan_number: (int) Scan number of the spectrum
        :param scan_index: (int) Index of the spectrum in the file
        """
        self.precursor = precursor
        self.scan_id = scan_id
        self.scan_number = scan_number
        self.scan_index = scan_index
        self.rt = rt
        self.file_name = file_name
        self.run_name = run_name
        self.title = title
        mz_array = np.asarray(mz_array, dtype=np.float64)
        int_array = np.asarray(int_array, dtype=np.float64)
        # make sure that the m/z values are sorted asc
        sorted_indices = np.argsort(mz_array, kind='stable')
        self.mz_values = mz_array[sorted_indices]
        self.int_values = int_array[sorted_indices]

    def __len__(self):
        return len(self.mz_values)

    @property
    def precursor_charge(self):
        """Get the precursor charge state."""
        return self.precursor['charge']

    @property
    def precursor_mz(self):
        """Get the precursor m/z."""
        return self.precursor['mz']

    @property
    def precursor_mass(self):
        """Return the neutral mass of the precursor."""
        return (self.precursor['mz'] - const.PROTON_MASS) * self.precursor['charge']

    @property
    def peaks(self):
        """Peaks as dict m/z -> intensity."""
        return dict(zip(self.mz_values.tolist(), self.int_values.tolist()))


class MGFReader:
    """Reader for MGF peak list files."""

    def __init__(self, re_scan_number=r"(?:scan=|[^.]*\.)([0-9]+)(?:\.\1)?",
                 re_run_name=r"^([^\s.]+)"):
        """
        Initialise the MGFReader.

        :param re_scan_number: (str) regular expression matching the scan number in the title
        :param re_run_name: (str) regular expression matching the run name in the title
        """
        self._reader = None
        self._source = None
        self._re_scan_number = re.compile(re_scan_number)
        self._re_run_name = re.compile(re_run_name)
        self.file_name = None
        self.default_run_name = None

    def load(self, source, file_name=None):
        """
        Load an MGF file.

        :param source: file source, path or text stream
        :param file_name: (str) MGF filename, taken from the source if None
        """
        self._source = source
        self._reader = mgf.read(source, use_index=False)
        if file_name is None:
            file_name = ntpath.basename(source if isinstance(source, str) else source.name)
        self.file_name = file_name
        self.default_run_name = re.sub(r'\.mgf$', '', file_name, flags=re.IGNORECASE)

    def count_spectra(self):
        """
        Count the number of spectra.

        :return (int) Number of spectra in the file.
        """
        if isinstance(self._source, io.TextIOBase):
            position = self._source.tell()
            self._source.seek(0)
            text = self._source.read()
            self._source.seek(position)
            return len(re.findall('BEGIN IONS', text))
        with open(self._source, 'rb') as f:
            text = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
            result = len(re.findall(b'BEGIN IONS', text))
            text.close()
        return result

    def _convert_spectrum(self, scan_index, mgf_spec):
        params = mgf_spec['params']
        precursor = {
            'mz': params['pepmass'][0],
            'charge': int(params['charge'][0]) if 'charge' in params else 1,
            'intensity': params['pepmass'][1],
        }

        # use title as scan_id, default to filename_scan_index
        title = params.get('title', '')
        scan_id = title or '{}_{}'.format(self.file_name, scan_index)
        rt = params.get('rtinseconds', np.nan)

        run_name_match = self._re_run_name.search(title)
        run_name = run_name_match.group(1) if run_name_match else self.default_run_name

        scan_number_match = self._re_scan_number.search(title)
        try:
            scan_number = int(scan_number_match.group(1))
        except (AttributeError, ValueError):
            scan_number = -1

        return Spectrum(precursor, mgf_spec['m/z array'], mgf_spec['intensity array'], scan_id,
                        rt, self.file_name, run_name, scan_number, scan_index, title=title)

    @property
    def spectra(self):
        """Generator wrapped around pyteomics generator. Reformatting the spectrum information."""
        for scan_index, mgf_spec in enumerate(self._reader):
            yield self._convert_spectrum(scan_index, mgf_spec)
