"""Install, activate, and remove bundles on this host

Bundles are archives named ``<name>-<version>.tar.gz``, usually made
by `rsbundle.pkcli.build`. To install and activate::

    $ rsbundle bundle install myapp-20240101.120000.tar.gz

Host paths default to ``/opt/bundler``, ``/bin``, ``/etc``, and
``/etc/init.d``. See `rsbundle.config` for how to change them.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkcli


def activate(bundle, version, force=False, root=None):
    """Deactivate the current version and activate version

    Args:
        bundle (str): name
        version (str): installed version
        force (bool): replace existing host files
        root (str): bundle store [config]
    """
    _controller(force=force, root_d=root).activate(bundle, version)
    return f"{bundle}-{version}: activated"


def deactivate(bundle, force=False, root=None):
    """Stop services and remove host files of the current version

    Args:
        bundle (str): name
        force (bool): remove host files even if modified
        root (str): bundle store [config]
    """
    if _controller(force=force, root_d=root).deactivate(bundle):
        return f"{bundle}: deactivated"
    return f"{bundle}: not installed"


def install(archive, force=False, quiet=False, root=None):
    """Extract archive, make it current, and activate it

    Args:
        archive (str): file or url of ``<name>-<version>.tar.gz``
        force (bool): replace existing host files
        quiet (bool): do not activate
        root (str): bundle store [config]
    """
    n, v = _controller(force=force, quiet=quiet, root_d=root).install(archive)
    return f"{n}-{v}: installed" + (" (not activated)" if quiet else "")


def list(*bundle, root=None):
    """List bundles or the versions of a bundle

    Args:
        bundle (str): name [all bundles]
        root (str): bundle store [config]
    """
    if len(bundle) > 1:
        pkcli.command_error("{}: only one bundle may be listed", " ".join(bundle))
    c = _controller(root_d=root)
    if not bundle:
        r = c.list()
        if not r:
            return "no bundles found"
        return "\n".join(f"{x.name} {x.version}" for x in r)
    r = c.list(bundle[0])
    if not r:
        return f"{bundle[0]}: no versions found"
    return "\n".join(
        f"{'*' if x.is_current else ' '} {x.version} {x.state}" for x in r
    )


def uninstall(bundle, *version, force=False, root=None):
    """Remove a version or, with force, all versions of a bundle

    Args:
        bundle (str): name
        version (str): not the current version [all versions]
        force (bool): required to remove all versions
        root (str): bundle store [config]
    """
    if len(version) > 1:
        pkcli.command_error(
            "{}: only one version may be uninstalled", " ".join(version)
        )
    v = version[0] if version else None
    _controller(force=force, root_d=root).uninstall(bundle, v)
    return f"{bundle}-{v}: uninstalled" if v else f"{bundle}: uninstalled"


def _controller(**kwargs):
    from rsbundle import config
    from rsbundle import lifecycle

    return lifecycle.Controller(config.options(**kwargs))
