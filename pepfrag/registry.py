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

"""Name keyed registries for modifications and neutral losses."""
from collections import Counter
import threading
from .pf_logging import log


class DuplicateNameError(ValueError):
    """A different definition is already registered under this name."""


class NamedRegistry:
    """
    Registry of definitions keyed by their `name`.

    Reads do not lock. Writes are serialised by a lock and replace the internal dict as a
    whole, so a concurrent reader sees either the old or the new content. A lookup miss
    returns the `unknown` sentinel; misses are counted and logged once per name.
    """

    # human readable kind of entry, used in messages
    kind = 'entry'
    # returned on lookup miss, set by subclasses
    unknown = None

    def __init__(self, entries=()):
        """
        Initialise the registry.

        :param entries: (iterable) definitions to register
        """
        self._entries = {}
        self._unknown_lookups = Counter()
        self._lock = threading.Lock()
        for entry in entries:
            self.add(entry)

    def is_same(self, registered, entry):
        """Check whether re-registering `entry` over `registered` is a no-op."""
        return registered == entry

    def add(self, entry, replace=False):
        """
        Register a definition.

        :param entry: definition with a `name` attribute
        :param replace: (bool) replace a different definition with the same name
        :raises DuplicateNameError: if the name is taken by a different definition
        """
        with self._lock:
            registered = self._entries.get(entry.name)
            if registered is not None and not replace and not self.is_same(registered, entry):
                raise DuplicateNameError("%s '%s' is already registered" % (self.kind,
                                                                             entry.name))
            entries = dict(self._entries)
            entries[entry.name] = entry
            self._entries = entries

    def get(self, name):
        """
        Look up a definition by name.

        :param name: (str) name of the definition
        :return: the definition, or the `unknown` sentinel if the name is not registered
        """
        try:
            return self._entries[name]
        except KeyError:
            pass
        with self._lock:
            self._unknown_lookups[name] += 1
            first_miss = self._unknown_lookups[name] == 1
        if first_miss:
            log("Unknown %s '%s' - using zero mass" % (self.kind, name))
        return self.unknown

    @property
    def unknown_lookups(self):
        """Number of failed lookups per name."""
        with self._lock:
            return dict(self._unknown_lookups)

    def names(self):
        return list(self._entries)

    def __contains__(self, name):
        return name in self._entries

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries.values()))
