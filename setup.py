# Copyright (C) 2025  Lutz Fischer
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

from setuptools import setup

setup(
    name="pepfrag",
    version="1.0.0",
    description="Theoretical peptide fragmentation and fragment ion matching",
    license="LGPL-3.0-or-later",
    packages=["pepfrag"],
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "pyteomics",
        "pyyaml",
        "memoized_property",
        "progress",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
