"""Install and remove templated files without clobbering local edits

A version's ``etc`` and ``init`` trees are copied to host directories
with `BUNDLE_BIN_TOKEN` replaced by the version's ``bin`` directory.
Existing host files are left alone unless forced, and on removal only
files which still match the rendered template are deleted.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkio
from pykern.pkdebug import pkdc, pkdlog
import os.path
import shutil

#: Replaced with the absolute path of the version's bin directory
BUNDLE_BIN_TOKEN = "@BUNDLE_BIN@"

#: Templates installed in `config.Options.etc_d`
ETC_SUBTREE = "etc"

#: Templates installed in `config.Options.init_d`
INIT_SUBTREE = "init"

#: init scripts must be executable
INIT_MODE = 0o755

_HASH = "md5"


def install_templated_files(ctx, subtree, dest_d, mode=None):
    """Render templates in subtree to dest_d

    Files which exist in dest_d are only replaced if ``ctx.options.force``.

    Args:
        ctx (PKDict): options, version_d, tmp_d
        subtree (str): `ETC_SUBTREE` or `INIT_SUBTREE`
        dest_d (py.path.local): host directory
        mode (int): permissions of installed files [umask]
    """
    for s, r in templates(ctx, subtree):
        d = dest_d.join(r)
        if os.path.lexists(str(d)) and not ctx.options.force:
            pkdc("{}: exists, not installing", d)
            continue
        x = _render(ctx, subtree, s, r)
        pkio.mkdir_parent_only(d)
        shutil.copyfile(str(x), str(d))
        if mode is not None:
            d.chmod(mode)
        pkdlog("{}: installed", d)


def relpaths(ctx, subtree):
    """Paths of templates relative to subtree

    Args:
        ctx (PKDict): version_d
        subtree (str): `ETC_SUBTREE` or `INIT_SUBTREE`

    Returns:
        list: str relative paths
    """
    return [r for _, r in templates(ctx, subtree)]


def remove_unchanged_templated_files(ctx, subtree, dest_d):
    """Remove files in dest_d which match their rendered template

    Modified files are logged and kept unless ``ctx.options.force``.

    Args:
        ctx (PKDict): options, version_d, tmp_d
        subtree (str): `ETC_SUBTREE` or `INIT_SUBTREE`
        dest_d (py.path.local): host directory
    """
    for s, r in templates(ctx, subtree):
        d = dest_d.join(r)
        if not d.check(file=1):
            continue
        if not ctx.options.force and _render(ctx, subtree, s, r).computehash(
            _HASH
        ) != d.computehash(_HASH):
            pkdlog("{}: local file modified, not removing", d)
            continue
        d.remove()
        pkdlog("{}: removed", d)


def templates(ctx, subtree):
    """Plain files in the version's subtree

    Args:
        ctx (PKDict): version_d
        subtree (str): `ETC_SUBTREE` or `INIT_SUBTREE`

    Returns:
        list: tuples of (py.path.local, relative path)
    """
    d = ctx.version_d.join(subtree)
    if not d.check(dir=1):
        return []
    return [
        (p, d.bestrelpath(p))
        for p in pkio.walk_tree(d)
        if not p.check(link=1) and p.check(file=1)
    ]


def templates_present(ctx, subtree, dest_d):
    """Do all the templates in subtree exist in dest_d?

    Args:
        ctx (PKDict): version_d
        subtree (str): `ETC_SUBTREE` or `INIT_SUBTREE`
        dest_d (py.path.local): host directory

    Returns:
        bool: True if every destination exists
    """
    return all(dest_d.join(r).check(file=1) for r in relpaths(ctx, subtree))


def _render(ctx, subtree, src, relpath):
    res = ctx.tmp_d.join(subtree, relpath)
    pkio.mkdir_parent_only(res)
    return pkio.write_binary(
        res,
        pkio.read_binary(src).replace(
            BUNDLE_BIN_TOKEN.encode(),
            str(ctx.version_d.join("bin")).encode(),
        ),
    )
