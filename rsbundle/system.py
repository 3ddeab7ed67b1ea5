"""External effects: downloads, archives, services, and commands

Everything which reaches outside the bundle store goes through a
`System` so tests can substitute a recording implementation.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkcli
from pykern import pkio
from pykern.pkdebug import pkdc, pkdlog
import os.path
import pykern.pksubprocess
import re
import requests
import tarfile
import urllib.parse
import urllib.request

#: Archives with these schemes are fetched before installing
URL_RE = re.compile(r"^(?:https?|ftp)://", flags=re.IGNORECASE)

#: Service actions
START = "start"
STOP = "stop"

_CHUNK_SIZE = 1024 * 1024


def is_url(value):
    return bool(URL_RE.search(str(value)))


class System:
    """Runs external commands and I/O on behalf of operations

    Args:
        options (config.Options): supplies the service and rpath commands
    """

    def __init__(self, options):
        self.options = options

    def extract(self, archive, dest_d):
        """Unpack a gzipped tar into dest_d

        Args:
            archive (py.path.local): file to unpack
            dest_d (py.path.local): existing directory
        """
        pkdlog("{}: extracting into {}", archive, dest_d)
        with tarfile.open(str(archive), "r:gz") as t:
            t.extractall(str(dest_d), filter="tar")

    def fetch(self, url, dest_d):
        """Download url into dest_d

        Args:
            url (str): http, https, or ftp
            dest_d (py.path.local): where to write the file

        Returns:
            py.path.local: file named after the last component of url
        """
        b = os.path.basename(urllib.parse.urlparse(url).path)
        if not b:
            pkcli.command_error("{}: url does not end in a file name", url)
        res = dest_d.join(b)
        pkdlog("{}: fetching to {}", url, res)
        if url.lower().startswith("ftp:"):
            urllib.request.urlretrieve(url, str(res))
            return res
        with requests.get(url, stream=True) as r:
            r.raise_for_status()
            with open(str(res), "wb") as f:
                for c in r.iter_content(chunk_size=_CHUNK_SIZE):
                    f.write(c)
        return res

    def run(self, cmd, cwd=None):
        """Run cmd, failing if it exits non-zero

        Args:
            cmd (list): command and args
            cwd (py.path.local): directory to run in [current]
        """
        cmd = [str(c) for c in cmd]
        if cwd is None:
            pykern.pksubprocess.check_call_with_signals(cmd, msg=pkdlog)
            return
        with pkio.save_chdir(cwd):
            pykern.pksubprocess.check_call_with_signals(cmd, msg=pkdlog)

    def service(self, name, action):
        """Start or stop the named service

        Args:
            name (str): init script name
            action (str): `START` or `STOP`
        """
        self.run([self.options.service_cmd, name, action])

    def set_rpath(self, path, lib_d):
        """Rewrite ELF runtime library search path

        Args:
            path (py.path.local): dynamic ELF file
            lib_d (py.path.local): new RPATH
        """
        pkdc("{}: rpath={}", path, lib_d)
        self.run([self.options.rpath_cmd, "--set-rpath", lib_d, path])
