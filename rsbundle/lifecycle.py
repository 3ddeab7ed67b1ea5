"""Install, activate, deactivate, uninstall, and list bundles

A bundle moves through these states:

absent
    no bundle directory

inactive
    archive extracted and current symlink set, but no files on the host
    (``install`` with quiet, or after ``deactivate``)

active
    templated files installed, executables linked, services started

Activation is never recorded. `Controller.observe` looks at the host
and `rsbundle.store.activation_state` derives the state, which is why
activate and deactivate may be run repeatedly.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkcli
from pykern import pkio
from pykern.pkcollections import PKDict
from pykern.pkdebug import pkdc, pkdlog
from rsbundle import binlink
from rsbundle import rpath
from rsbundle import store
from rsbundle import template
import contextlib
import os.path
import rsbundle.system
import tempfile


class Controller:
    """Operations on the bundle store and the host

    Mutating operations hold `rsbundle.store.Store.lock` for the bundle
    and a scratch directory which is removed when the operation ends.

    Args:
        options (config.Options): configuration for this invocation
        system (rsbundle.system.System): external effects [`rsbundle.system.System`]
    """

    def __init__(self, options, system=None):
        self.options = options
        self.store = store.Store(options.root_d)
        self.system = system or rsbundle.system.System(options)

    def activate(self, name, version):
        """Make version current and install its files

        The current version, if any, is deactivated first.

        Args:
            name (str): bundle
            version (str): version (or `store.CURRENT`) to activate
        """
        with self._operation(name, version) as t:
            d = self.store.basedir(name, version)
            if not d.check(dir=1):
                store.not_found("{}: version not installed", d)
            version = store.split_name_version(d.basename)[1]
            self._deactivate_current(name, t)
            self.store.set_current(name, version)
            self._activate(self._context(name, version, t))

    def deactivate(self, name, version=store.CURRENT):
        """Stop services and remove host files of version

        Nothing happens if the bundle is not installed or version
        is not current.

        Args:
            name (str): bundle
            version (str): version to deactivate [`store.CURRENT`]

        Returns:
            bool: True if version was deactivated
        """
        with self._operation(name, version) as t:
            if not self.store.installed(name):
                pkdlog("{}: not installed, nothing to deactivate", name)
                return False
            c = self.store.current_version(name)
            if version not in (store.CURRENT, c):
                pkdlog(
                    "{}: version={} is not current={}, nothing to do", name, version, c
                )
                return False
            self._deactivate(self._context(name, c, t))
            return True

    def install(self, archive):
        """Extract archive, make it current, and (unless quiet) activate

        Args:
            archive (str): path or url (http, https, ftp) of the archive

        Returns:
            tuple: (name, version)
        """
        with self._scratch() as t:
            a = self._archive(archive, t)
            n, v = store.parse_archive_name(a.basename)
            with self.store.lock(n):
                if not self.options.quiet:
                    self._deactivate_current(n, t)
                b = pkio.mkdir_parent(self.store.bundle_d(n))
                self.system.extract(a, b)
                c = self._context(n, v, t)
                if not c.version_d.check(dir=1):
                    pkcli.command_error(
                        "{}: archive does not contain directory={}",
                        archive,
                        c.version_d.basename,
                    )
                self.store.set_current(n, v)
                rpath.fixup(c, self.system)
                if not self.options.quiet:
                    self._activate(c)
        pkdlog("{}-{}: installed", n, v)
        return n, v

    def list(self, name=None):
        """Bundles or versions of a bundle

        Args:
            name (str): bundle [all bundles]

        Returns:
            list: PKDict(name, version) for all bundles or
                PKDict(version, is_current, state) for a single bundle
        """
        if name is None:
            return [
                PKDict(name=b, version=self.store.current_version(b))
                for b in self.store.bundles()
            ]
        c = self.store.current_version(name)
        return [
            PKDict(
                version=v,
                is_current=v == c,
                state=store.activation_state(self.observe(name, v)),
            )
            for v in self.store.versions(name)
        ]

    def observe(self, name, version):
        """What is on disk for version

        Args:
            name (str): bundle
            version (str): version

        Returns:
            PKDict: version_exists, is_current, host_files, binlinks
        """
        c = self._context(name, version, None)
        res = PKDict(
            version_exists=c.version_d.check(dir=1),
            is_current=self.store.installed(name)
            and self.store.current_version(name) == version,
        )
        if not res.version_exists:
            return res.pkupdate(host_files=False, binlinks=False)
        return res.pkupdate(
            host_files=all(
                template.templates_present(c, s, d) for s, d in self._subtrees()
            ),
            binlinks=binlink.binlinks_present(c),
        )

    def uninstall(self, name, version=None):
        """Remove a version or (with force) the whole bundle

        The current version cannot be removed individually.

        Args:
            name (str): bundle
            version (str): version to remove [all versions]
        """
        store.check_name(name)
        if version is None and not self.options.force:
            pkcli.command_error(
                "{}: removing all versions requires --force;"
                + " to remove a single version, supply the version",
                name,
            )
        with self._operation(name, version) as t:
            b = self.store.bundle_d(name)
            if not b.check(dir=1):
                store.not_found("{}: bundle not installed", name)
            if version is None:
                self._deactivate_current(name, t)
                b.remove(rec=1)
                pkdlog("{}: uninstalled all versions", name)
                return
            if (
                self.store.installed(name)
                and self.store.current_version(name) == version
            ):
                pkcli.command_error(
                    "{}-{}: is the current version; activate another version first",
                    name,
                    version,
                )
            d = self.store.version_d(name, version)
            if not d.check(dir=1):
                store.not_found("{}: version not installed", d)
            d.remove(rec=1)
            pkdlog("{}-{}: uninstalled", name, version)

    def _activate(self, ctx):
        template.install_templated_files(
            ctx,
            template.INIT_SUBTREE,
            self.options.init_d,
            mode=template.INIT_MODE,
        )
        template.install_templated_files(ctx, template.ETC_SUBTREE, self.options.etc_d)
        binlink.install_binlinks(ctx)
        self._services(ctx, rsbundle.system.START)

    def _archive(self, archive, tmp_d):
        if rsbundle.system.is_url(archive):
            res = self.system.fetch(archive, tmp_d)
            if not res.check(file=1):
                pkcli.command_error("{}: fetch did not produce a file", archive)
            return res
        res = pkio.py_path(archive)
        if not res.check(file=1):
            store.not_found("{}: archive not found", archive)
        return res

    def _context(self, name, version, tmp_d):
        return PKDict(
            name=name,
            options=self.options,
            tmp_d=tmp_d,
            version=version,
            version_d=self.store.version_d(name, version),
        )

    def _deactivate(self, ctx):
        self._services(ctx, rsbundle.system.STOP)
        template.remove_unchanged_templated_files(
            ctx, template.INIT_SUBTREE, self.options.init_d
        )
        template.remove_unchanged_templated_files(
            ctx, template.ETC_SUBTREE, self.options.etc_d
        )
        binlink.remove_binlinks(ctx)

    def _deactivate_current(self, name, tmp_d):
        if self.store.installed(name):
            self._deactivate(
                self._context(name, self.store.current_version(name), tmp_d)
            )

    @contextlib.contextmanager
    def _operation(self, name, version=None):
        store.check_name(name)
        if version not in (None, store.CURRENT):
            store.check_version(version)
        with self._scratch() as t, self.store.lock(name):
            yield t

    @contextlib.contextmanager
    def _scratch(self):
        with tempfile.TemporaryDirectory(prefix="rsbundle-") as d:
            yield pkio.py_path(d)

    def _services(self, ctx, action):
        if not self.options.restart_services:
            pkdc("{}: restart_services=False, not {}", ctx.name, action)
            return
        for s in template.relpaths(ctx, template.INIT_SUBTREE):
            s = os.path.basename(s)
            pkdlog("{}: {}", s, action)
            self.system.service(s, action)

    def _subtrees(self):
        return (
            (template.INIT_SUBTREE, self.options.init_d),
            (template.ETC_SUBTREE, self.options.etc_d),
        )