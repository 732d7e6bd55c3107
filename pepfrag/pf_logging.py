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

"""Module that handles output (log messages and progress bars)."""
from time import time
from progress.bar import Bar
from queue import Queue
from threading import Thread
import os
from pathlib import Path


_log_enabled = False
_log_file = False
_progress_enabled = False
_start_time = time()
# queue used to forward log entries to the file-writer
_log_queue = None
# the thread that is doing the writing
_log_file_writer = None


def log_timestamp_reset():
    """Reset the log time to the current time."""
    global _start_time
    _start_time = time()


def log_enable(setting):
    """Enable or disable logging to stdout."""
    global _log_enabled
    _log_enabled = bool(setting)


def _write_log_queue(queue, file):
    """Drain the queue into the file until a False entry arrives."""
    parent_folder = os.path.dirname(file)
    if parent_folder:
        Path(parent_folder).mkdir(parents=True, exist_ok=True)
    with open(file, "a") as log_out:
        while True:
            entry = queue.get()
            if entry is False:
                break
            log_out.write(entry)
            log_out.write("\n")
            log_out.flush()


def _stop_log_file_writer():
    global _log_queue
    global _log_file_writer
    if _log_queue is not None:
        _log_queue.put(False)
        if _log_file_writer is not None:
            _log_file_writer.join()
    _log_queue = None
    _log_file_writer = None


def log_file(file):
    """
    Define that the log should be written out to a file.

    :param file: (str, False) if a string then it defines the output path; False disables writing
    """
    global _log_file
    global _log_queue
    global _log_file_writer

    if isinstance(file, str):
        _stop_log_file_writer()
        _log_file = True
        _log_queue = Queue()
        _log_file_writer = Thread(target=_write_log_queue, args=(_log_queue, file), daemon=True)
        _log_file_writer.start()
    elif isinstance(file, bool) and not file:
        _log_file = False
        _stop_log_file_writer()
    else:
        raise ValueError("log_file only accepts a file path or False as parameter")


def progress_enable(setting):
    """Enable or disable displaying progress bars."""
    global _progress_enabled
    _progress_enabled = bool(setting)


def _timed(message, timestamp=None):
    if timestamp is None:
        timestamp = time() - _start_time
    return "%.3f: %s" % (timestamp, message)


def log(message):
    """Log a message to stdout and/or the log file."""
    if not (_log_enabled or _log_file):
        return
    timedmessage = _timed(message)
    if _log_enabled:
        print(timedmessage, flush=True)
    if _log_file and _log_queue is not None:
        _log_queue.put(timedmessage)


def format_eta(seconds):
    """Render a remaining time in the largest sensible unit (days, h, m or s)."""
    for unit, size, threshold in (('days', 86400, 172800), ('h', 3600, 7200), ('m', 60, 120)):
        if seconds > threshold:
            return "%i%s" % (seconds // size, unit)
    return "%is" % seconds


class ProgressBar(object):
    """Bar to visualize the progression of a process."""

    class NiceEtaBar(Bar):
        """Bar with a human readable remaining time as suffix."""

        @property
        def nice_eta(self):
            if self.index >= self.max:
                return str(self.elapsed_td) + " total"
            return "%.1f%% ~%s remaining (%i/%i)" % (self.percent, format_eta(self.eta),
                                                     self.index, self.max)

    def __init__(self, message, total):
        """Initialise the ProgressBar with a message and a total number."""
        self.message = message
        self.total = total
        self.count = 0
        self.percent = 0
        self.bar = None
        self.timestamp = time() - _start_time
        if _progress_enabled and total > 1:
            self.bar = self.NiceEtaBar(_timed(message, self.timestamp), max=total,
                                       suffix='%(nice_eta)s')
            if _log_file and _log_queue is not None:
                _log_queue.put(_timed(message, self.timestamp))
        else:
            log(message)

    def next(self, add_to_count=1):
        """Progress the bar."""
        self.count += add_to_count
        if self.bar is None:
            return
        timestamp = time() - _start_time
        percent = int(self.count / self.total * 100)
        # redraw on a new percent at most once per second, or at least once a minute
        if (percent > self.percent and timestamp - self.timestamp > 1) \
                or timestamp - self.timestamp > 60:
            self.timestamp = timestamp
            self.percent = percent
            self.bar.goto(self.count)

    def finish(self):
        """Finish the ProgressBar."""
        if self.bar is not None:
            self.bar.goto(self.total)
            self.bar.finish()
        if _log_file and _log_queue is not None:
            _log_queue.put(_timed("%s finished" % self.message))
