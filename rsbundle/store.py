"""On-disk layout of installed bundles

The store is a directory tree::

    <root_d>/<bundle>/current -> <bundle>-<version>
    <root_d>/<bundle>/<bundle>-<version>/{bin,lib,etc,init,binfiles}
    <root_d>/.lock/<bundle>

A bundle is installed iff its ``current`` symlink exists. The link
itself is the only state; whether a version is active is derived by
`activation_state` from what is observed on disk.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkcli
from pykern import pkio
from pykern.pkdebug import pkdc, pkdlog
import contextlib
import fcntl
import os
import os.path
import pykern.util

#: Name of the symlink to the current version
CURRENT = "current"

#: Returned by `Store.current_version` when there is no current symlink
UNKNOWN_VERSION = "unknown"

#: Only format for archives
ARCHIVE_SUFFIX = ".tar.gz"

#: Separates bundle name from version in archives and version directories
VERSION_SEP = "-"

#: Version directory does not exist
ABSENT = "absent"

#: Version exists, but is not current or its files are not on the host
INACTIVE = "inactive"

#: Version is current, and its files and links are on the host
ACTIVE = "active"

#: Directory in root_d which holds lock files; not a valid bundle name
_LOCK_D = ".lock"


class NotFound(pkcli.CommandError):
    """Bundle, version, or file does not exist"""

    pass


def activation_state(observation):
    """Derive the state of a version from what is on disk

    Args:
        observation (PKDict): version_exists, is_current, host_files, binlinks (bools)

    Returns:
        str: `ABSENT`, `INACTIVE`, or `ACTIVE`
    """
    if not observation.version_exists:
        return ABSENT
    if observation.is_current and observation.host_files and observation.binlinks:
        return ACTIVE
    return INACTIVE


def check_name(name):
    """Bundle names are single path components

    Args:
        name (str): bundle

    Returns:
        str: name
    """
    if not name or name.startswith(".") or os.sep in name:
        pkcli.command_error(
            "name={}: bundle name must not be empty, begin with '.', or contain '{}'",
            name,
            os.sep,
        )
    return name


def check_version(version):
    """Versions are single path components without `VERSION_SEP`

    Args:
        version (str): version

    Returns:
        str: version
    """
    if (
        not version
        or version.startswith(".")
        or os.sep in version
        or VERSION_SEP in version
    ):
        pkcli.command_error(
            "version={}: must not be empty, begin with '.', or contain '{}' or '{}'",
            version,
            os.sep,
            VERSION_SEP,
        )
    return version


def not_found(fmt, *args, **kwargs):
    """Raise `NotFound` with msg

    Args:
        fmt (str): how to represent arguments

    Raises:
        NotFound: always
    """
    raise NotFound(fmt.format(*args, **kwargs))


def parse_archive_name(basename):
    """Split archive file name into bundle name and version

    The name is everything up to the last `VERSION_SEP`.

    Args:
        basename (str): ``<name>-<version>.tar.gz``

    Returns:
        tuple: (name, version)
    """
    if not basename.endswith(ARCHIVE_SUFFIX):
        pkcli.command_error(
            "{}: archive name must end in {}", basename, ARCHIVE_SUFFIX
        )
    res = split_name_version(basename[: -len(ARCHIVE_SUFFIX)])
    if not res:
        pkcli.command_error(
            "{}: archive name must be <name>{}<version>{}",
            basename,
            VERSION_SEP,
            ARCHIVE_SUFFIX,
        )
    return check_name(res[0]), check_version(res[1])


def split_name_version(basename):
    """Split ``<name>-<version>``

    Args:
        basename (str): version directory or archive without suffix

    Returns:
        tuple: (name, version) or None if not in the right form
    """
    n, s, v = basename.rpartition(VERSION_SEP)
    if not (s and n and v):
        return None
    return n, v


def version_basename(name, version):
    return name + VERSION_SEP + version


class Store:
    """Name and version addressing of installed trees

    Args:
        root_d (py.path.local): directory containing bundles
    """

    def __init__(self, root_d):
        self.root_d = pkio.py_path(root_d)

    def basedir(self, name, version):
        """Directory of version, resolving `CURRENT`

        Args:
            name (str): bundle
            version (str): version or `CURRENT`

        Returns:
            py.path.local: version directory (may not exist)
        """
        if version == CURRENT:
            if not self.installed(name):
                not_found("{}: bundle not installed", name)
            version = self._link_version(name)
        return self.version_d(name, version)

    def bundle_d(self, name):
        return self.root_d.join(check_name(name))

    def bundles(self):
        """Names of bundle directories

        Returns:
            list: sorted names
        """
        if not self.root_d.check(dir=1):
            return []
        return sorted(
            p.basename
            for p in self.root_d.listdir()
            if p.check(dir=1) and not p.basename.startswith(".")
        )

    def current_link(self, name):
        return self.bundle_d(name).join(CURRENT)

    def current_version(self, name):
        """Version pointed to by the current symlink

        Args:
            name (str): bundle

        Returns:
            str: version or `UNKNOWN_VERSION` if no current symlink
        """
        if not self.bundle_d(name).check(dir=1):
            not_found("{}: bundle not installed", name)
        if not self.installed(name):
            return UNKNOWN_VERSION
        return self._link_version(name)

    def installed(self, name):
        """Does the current symlink exist?

        A dangling symlink counts as installed.

        Args:
            name (str): bundle

        Returns:
            bool: True if current symlink exists
        """
        return self.current_link(name).check(link=1)

    def lock_file(self, name):
        return self.root_d.join(_LOCK_D, check_name(name))

    @contextlib.contextmanager
    def lock(self, name):
        """Advisory lock held during operations which modify bundle

        Args:
            name (str): bundle
        """
        p = self.lock_file(name)
        pkio.mkdir_parent_only(p)
        with open(str(p), "a") as f:
            pkdc("{}: waiting for lock", p)
            fcntl.flock(f, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(f, fcntl.LOCK_UN)

    def set_current(self, name, version):
        """Point the current symlink at version

        The link is relative so the store may be moved. A temporary
        link is renamed over the old one so readers always see a link.

        Args:
            name (str): bundle
            version (str): must exist
        """
        d = self.version_d(name, version)
        if not d.check(dir=1):
            not_found("{}: version directory not found", d)
        l = self.current_link(name)
        t = l.new(basename=f".{CURRENT}-{pykern.util.random_base62()}")
        os.symlink(d.basename, str(t))
        try:
            os.replace(str(t), str(l))
        except Exception:
            pkio.unchecked_remove(t)
            raise
        pkdlog("{}: current={}", name, version)

    def version_d(self, name, version):
        return self.bundle_d(name).join(
            version_basename(name, check_version(version))
        )

    def versions(self, name):
        """Versions of name which exist on disk

        Directories which are not named ``<name>-<version>`` are ignored.

        Args:
            name (str): bundle

        Returns:
            list: sorted version strings
        """
        res = []
        for p in self.bundle_d(name).listdir():
            if p.check(link=1) or not p.check(dir=1):
                continue
            x = split_name_version(p.basename)
            if x and x[0] == name:
                res.append(x[1])
        return sorted(res)

    def _link_version(self, name):
        t = os.path.basename(os.readlink(str(self.current_link(name))).rstrip("/"))
        x = split_name_version(t)
        if not x or x[0] != name:
            pkcli.command_error(
                "{}: current symlink points to unexpected target={}", name, t
            )
        return x[1]
