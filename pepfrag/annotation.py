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

"""Annotation of spectra with the theoretical ions of peptides."""
from concurrent.futures import ThreadPoolExecutor, as_completed
import os
from .amino_acids import UnknownAminoAcidError
from .config import Config
from .fragmentation import FragmentIonFactory
from .ions import IonFamily
from .matching import PeakList, IonMatch, match_ion, match_reporter_ion
from .modifications import ModificationRegistry, ResidueSite
from .pf_logging import log, ProgressBar


class FragmentationError(RuntimeError):
    """Fragmenting a peptide failed; `peptide` names the offending peptide."""

    def __init__(self, peptide, cause):
        self.peptide = peptide
        super().__init__("Could not fragment %s: %s" % (peptide.sequence, cause))


def charge_validated(ion, charge, precursor_charge):
    """
    Check if an ion can be observed at a charge.

    Immonium and reporter ions are singly charged. A singly charged fragment is always
    accepted. Higher charges need at least as many residues and less charges than the
    precursor. Precursor ions are considered at the precursor charge and above.

    :param ion: theoretical ion
    :param charge: (int) charge to check
    :param precursor_charge: (int) charge of the precursor
    :return: (bool)
    """
    if ion.family in (IonFamily.IMMONIUM, IonFamily.REPORTER):
        return charge == 1
    if ion.family == IonFamily.PEPTIDE_FRAGMENT:
        return charge == 1 or (charge <= ion.number and charge < precursor_charge)
    if ion.family == IonFamily.PRECURSOR:
        return charge >= precursor_charge
    raise ValueError("Unknown ion family %r" % ion.family)


class NeutralLossesMap:
    """
    Neutral losses allowed for a peptide, each with the first fragment number that can
    carry it in the N-terminal (a, b, c) and C-terminal (x, y, z) series.
    """

    def __init__(self):
        """Initialise an empty NeutralLossesMap."""
        self._starts = {}

    def add_neutral_loss(self, loss, b_start, y_start):
        """Allow a loss; repeated additions keep the earliest start per series."""
        if loss.name in self._starts:
            _, old_b, old_y = self._starts[loss.name]
            b_start, y_start = min(b_start, old_b), min(y_start, old_y)
        self._starts[loss.name] = (loss, b_start, y_start)

    def __contains__(self, name):
        return name in self._starts

    def __len__(self):
        return len(self._starts)

    @property
    def losses(self):
        return [loss for loss, _, _ in self._starts.values()]

    def b_start(self, name):
        return self._starts[name][1]

    def y_start(self, name):
        return self._starts[name][2]

    def accounts_for(self, ion):
        """Check whether all losses of an ion are allowed at its position."""
        for loss in ion.neutral_losses:
            if loss.name not in self._starts:
                return False
            if ion.family == IonFamily.PEPTIDE_FRAGMENT:
                start = self.b_start(loss.name) if ion.is_nterm else self.y_start(loss.name)
                if ion.number < start:
                    return False
        return True


def default_neutral_losses_map(peptide, registry, default_losses):
    """
    Build the map of losses a peptide can throw.

    A default loss with a residue specificity is allowed from the first residue of that
    specificity in the N-terminal series and from the last one in the C-terminal series.
    Losses of fixed losses and losses without specificity start at 1. Losses of
    modifications start at the modified sites, terminal modifications sit on the first or
    last residue.

    :param peptide: (Peptide)
    :param registry: (ModificationRegistry)
    :param default_losses: (list of NeutralLoss)
    :return: (NeutralLossesMap)
    """
    losses_map = NeutralLossesMap()
    sequence = peptide.sequence
    length = len(sequence)

    for loss in default_losses:
        if loss.fixed or not loss.specificity:
            losses_map.add_neutral_loss(loss, 1, 1)
            continue
        positions = [i for i, aa in enumerate(sequence) if aa in loss.specificity]
        if positions:
            losses_map.add_neutral_loss(loss, positions[0] + 1, length - positions[-1])

    sites_by_name = {}
    for match in peptide.modifications:
        modification = registry.get(match.name)
        if modification.is_nterm:
            site = 1
        elif modification.is_cterm:
            site = length
        else:
            site = match.site
        sites_by_name.setdefault(match.name, []).append(site)
    for name, sites in sites_by_name.items():
        for loss in registry.get(name).neutral_losses:
            losses_map.add_neutral_loss(loss, min(sites), length - max(sites) + 1)

    return losses_map


def _shifted(ion, settings):
    """Apply the configured mass shifts to an ion."""
    if ion.family == IonFamily.PEPTIDE_FRAGMENT:
        terminal_shift = settings.mass_shift_nterm if ion.is_nterm else settings.mass_shift_cterm
    elif ion.family == IonFamily.PRECURSOR:
        terminal_shift = settings.mass_shift_nterm + settings.mass_shift_cterm
    else:
        return ion
    shift = settings.mass_shift + terminal_shift
    if shift == 0:
        return ion
    return ion._replace(mass=ion.mass + shift)


class SpectrumAnnotator:
    """Annotate spectra with the theoretical ions of peptides."""

    def __init__(self, config=None, registry=None, factory=None):
        """
        Initialise the SpectrumAnnotator.

        :param config: (Config) configuration, defaults are used if None
        :param registry: (ModificationRegistry) built from the config if None
        :param factory: (FragmentIonFactory) built from the config and registry if None
        """
        self.config = config if config is not None else Config()
        self.registry = registry if registry is not None else \
            ModificationRegistry.from_config(self.config)
        self.factory = factory if factory is not None else \
            FragmentIonFactory.from_config(self.config, self.registry)
        self.settings = self.config.annotation

    def _selected(self, ion, losses_map):
        settings = self.settings
        if ion.family == IonFamily.REPORTER:
            return settings.reporter
        if ion.family == IonFamily.IMMONIUM:
            return settings.immonium
        if ion.family == IonFamily.PRECURSOR and not settings.precursor:
            return False
        if ion.family == IonFamily.PEPTIDE_FRAGMENT and ion.subtype not in settings.ion_types:
            return False
        if ion.neutral_losses:
            if not settings.neutral_losses:
                return False
            if losses_map is not None and not losses_map.accounts_for(ion):
                return False
        return True

    def expected_ions(self, peptide, precursor_charge=1):
        """
        Theoretical ions to look for, with the charges to look for them at.

        :param peptide: (Peptide)
        :param precursor_charge: (int) charge of the precursor
        :return: (list of (ion, int)) ion and charge pairs
        :raises UnknownAminoAcidError: if a residue has no unique mass
        """
        losses_map = None
        if self.settings.restrict_losses:
            losses_map = default_neutral_losses_map(peptide, self.registry,
                                                    self.factory.default_losses)
        charges = sorted(set(self.settings.charges) | {1, precursor_charge})
        expected = []
        for ion in self.factory.fragment_ions(peptide):
            if not self._selected(ion, losses_map):
                continue
            ion = _shifted(ion, self.settings)
            if ion.family == IonFamily.PRECURSOR:
                expected.append((ion, precursor_charge))
                continue
            for charge in charges:
                if ion.family == IonFamily.PEPTIDE_FRAGMENT and \
                        charge not in self.settings.charges:
                    continue
                if charge_validated(ion, charge, precursor_charge):
                    expected.append((ion, charge))
        return expected

    def annotate(self, peptide, spectrum, precursor_charge=None, include_absent=False):
        """
        Match the theoretical ions of a peptide against a spectrum.

        :param peptide: (Peptide) the peptide
        :param spectrum: Spectrum, PeakList, dict m/z -> intensity or (mz_array, int_array)
        :param precursor_charge: (int) defaults to the spectrum precursor charge, or 1
        :param include_absent: (bool) also return IonMatches without peak for unobserved ions
        :return: (list of IonMatch) in the order of the expected ions
        """
        if precursor_charge is None:
            precursor = getattr(spectrum, 'precursor', None) or {}
            precursor_charge = int(precursor.get('charge') or 1)
        peaks = PeakList.from_peaks(spectrum).above_relative_intensity(
            self.settings.intensity_limit)
        tolerance, is_ppm = self.settings.tolerance, self.settings.tolerance_ppm

        matches = []
        for ion, charge in self.expected_ions(peptide, precursor_charge):
            if ion.family == IonFamily.REPORTER:
                reporter_matches = match_reporter_ion(ion, peaks, tolerance, is_ppm, charge)
                if reporter_matches:
                    matches.extend(reporter_matches)
                elif include_absent:
                    matches.append(IonMatch(ion, None, charge))
                continue
            match = match_ion(ion, peaks, tolerance, is_ppm, charge)
            if match.matched or include_absent:
                matches.append(match)
        return matches

    @staticmethod
    def covered_residues(matches, peptide):
        """
        Group the matched fragment ions by the residue they end on.

        :param matches: (list of IonMatch) annotation result
        :param peptide: (Peptide) annotated peptide
        :return: (dict) ResidueSite -> list of IonMatch
        """
        covered = {}
        for match in matches:
            if not match.matched or match.ion.family != IonFamily.PEPTIDE_FRAGMENT:
                continue
            if match.ion.is_nterm:
                site = ResidueSite(match.ion.number)
            else:
                site = ResidueSite(len(peptide) + 1 - match.ion.number)
            covered.setdefault(site, []).append(match)
        return covered


def _worker_count(threads):
    """Translate the threads setting (0: default, < 0: all but N cpus) for the executor."""
    if threads > 0:
        return threads
    if threads < 0:
        return max(1, (os.cpu_count() or 1) + threads)
    return None


def annotate_spectra(annotator, jobs, threads=None, stop_event=None, include_absent=False):
    """
    Annotate many peptide/spectrum pairs on a thread pool.

    Cancellation is checked before each pair is started; pairs not started when `stop_event`
    is set get None as result.

    :param annotator: (SpectrumAnnotator) annotator shared by all workers
    :param jobs: (iterable) (peptide, spectrum) or (peptide, spectrum, precursor_charge) tuples
    :param threads: (int) worker threads, defaults to the config `threads` setting
    :param stop_event: (threading.Event) set to stop starting new pairs
    :param include_absent: (bool) forwarded to SpectrumAnnotator.annotate
    :return: (list) one list of IonMatch (or None if cancelled) per job, in job order
    :raises FragmentationError: if a peptide can not be fragmented
    """
    jobs = [tuple(job) for job in jobs]
    if threads is None:
        threads = annotator.config.threads
    results = [None] * len(jobs)

    def annotate_job(job):
        if stop_event is not None and stop_event.is_set():
            return None
        peptide, spectrum = job[0], job[1]
        precursor_charge = job[2] if len(job) > 2 else None
        try:
            return annotator.annotate(peptide, spectrum, precursor_charge, include_absent)
        except UnknownAminoAcidError as e:
            raise FragmentationError(peptide, e) from e

    progress = ProgressBar("Annotating %i spectra" % len(jobs), len(jobs))
    with ThreadPoolExecutor(max_workers=_worker_count(threads)) as executor:
        futures = {executor.submit(annotate_job, job): i for i, job in enumerate(jobs)}
        try:
            for future in as_completed(futures):
                results[futures[future]] = future.result()
                progress.next()
        except FragmentationError:
            for future in futures:
                future.cancel()
            raise
    progress.finish()
    if stop_event is not None and stop_event.is_set():
        log("Annotation stopped: %i of %i spectra annotated"
            % (sum(r is not None for r in results), len(jobs)))
    return results
