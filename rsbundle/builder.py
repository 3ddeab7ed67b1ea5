"""Build bundle archives from git repositories with autotools

A manifest lists the sources, one per line::

    # repository [branch]
    https://github.com/example/libfoo.git v1.2
    https://github.com/example/app.git

Every source is built with ``./configure --prefix=<stage>``, ``make``,
and ``make install`` into the same staging tree, in manifest order.
The staging tree is named ``<name>-<version>`` so it is also the
top-level directory of the archive. Profile templates (``etc`` and
``init``) are copied over the staging tree before archiving.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkcli
from pykern import pkio
from pykern.pkcollections import PKDict
from pykern.pkdebug import pkdc, pkdlog
from rsbundle import store
import datetime
import re
import shutil
import tarfile

#: Branch used when manifest line does not have one
DEFAULT_BRANCH = "master"

#: Subdirectories of a profile copied into the staging tree
PROFILE_SUBTREES = ("etc", "init")

#: Chronological version yyyymmdd.hhmmss
VERSION_FORMAT = "%Y%m%d.%H%M%S"

_COMMENT_RE = re.compile(r"\s*#.*$")


def default_version():
    """Chronological version from the current time (UTC)

    Returns:
        str: yyyymmdd.hhmmss
    """
    return datetime.datetime.now(datetime.timezone.utc).strftime(VERSION_FORMAT)


def parse_manifest(path):
    """Read sources from the manifest

    Args:
        path (py.path.local): manifest file

    Returns:
        list: PKDict(repo, branch) in manifest order
    """
    p = pkio.py_path(path)
    if not p.check(file=1):
        store.not_found("{}: manifest not found", path)
    res = []
    for i, l in enumerate(pkio.read_text(p).splitlines(), start=1):
        x = _COMMENT_RE.sub("", l).split()
        if not x:
            continue
        if len(x) > 2:
            pkcli.command_error("{}:{}: expecting <repository> [<branch>]", p, i)
        res.append(PKDict(repo=x[0], branch=x[1] if len(x) > 1 else DEFAULT_BRANCH))
    if not res:
        pkcli.command_error("{}: manifest has no sources", p)
    return res


class Builder:
    """Builds sources into a staging tree and archives it

    Args:
        name (str): bundle name
        version (str): bundle version [`default_version`]
        system (rsbundle.system.System): runs commands
        work_d (py.path.local): sources and staging tree
        dist_d (py.path.local): where archive is written
        profile (str): name of directory in profiles_d [None]
        profiles_d (py.path.local): contains profiles
    """

    def __init__(
        self,
        name,
        system,
        work_d,
        dist_d,
        version=None,
        profile=None,
        profiles_d=None,
    ):
        self.name = store.check_name(name)
        self.version = store.check_version(version or default_version())
        self.system = system
        self.work_d = pkio.py_path(work_d)
        self.dist_d = pkio.py_path(dist_d)
        self.profile_d = None
        if profile:
            self.profile_d = pkio.py_path(profiles_d).join(profile)
            if not self.profile_d.check(dir=1):
                store.not_found("{}: profile not found", self.profile_d)
        self.stage_d = self.work_d.join(
            "stage", store.version_basename(name, self.version)
        )

    def build(self, manifest):
        """Build all sources, overlay profile, and archive

        Args:
            manifest (py.path.local): list of sources

        Returns:
            py.path.local: archive
        """
        m = parse_manifest(manifest)
        if self.stage_d.check():
            self.stage_d.remove(rec=1)
        pkio.mkdir_parent(self.stage_d)
        for s in m:
            self._build_source(s)
        self._overlay_profile()
        return self._archive()

    def _archive(self):
        pkio.mkdir_parent(self.dist_d)
        res = self.dist_d.join(
            store.version_basename(self.name, self.version) + store.ARCHIVE_SUFFIX
        )
        with tarfile.open(str(res), "w:gz") as t:
            t.add(str(self.stage_d), arcname=self.stage_d.basename)
        pkdlog("{}: created", res)
        return res

    def _build_source(self, source):
        d = self._checkout(source)
        if not d.join("configure").check() and d.join("configure.ac").check():
            self.system.run(["autoreconf", "--install"], cwd=d)
        self.system.run(["./configure", f"--prefix={self.stage_d}"], cwd=d)
        self.system.run(["make"], cwd=d)
        self.system.run(["make", "install"], cwd=d)

    def _checkout(self, source):
        res = self.work_d.join("src", _repo_basename(source.repo))
        if res.check(dir=1):
            pkdc("{}: exists, fetching", res)
            self.system.run(["git", "fetch", "origin"], cwd=res)
        else:
            pkio.mkdir_parent_only(res)
            self.system.run(
                ["git", "clone", "--branch", source.branch, source.repo, res]
            )
        self.system.run(["git", "checkout", source.branch], cwd=res)
        return res

    def _overlay_profile(self):
        if not self.profile_d:
            return
        for s in PROFILE_SUBTREES:
            p = self.profile_d.join(s)
            if p.check(dir=1):
                pkdlog("{}: copying to {}", p, self.stage_d.join(s))
                shutil.copytree(str(p), str(self.stage_d.join(s)), dirs_exist_ok=True)


def _repo_basename(repo):
    res = re.sub(r"\.git$", "", repo.rstrip("/")).rsplit("/", 1)[-1]
    return res.rsplit(":", 1)[-1]
