"""Symlink a version's executables into the shared bin directory

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkcli
from pykern import pkio
from pykern.pkdebug import pkdc, pkdlog
import os
import os.path

#: Optional list of executables in a version, one path per line
BINFILES = "binfiles"


def candidates(ctx):
    """Executables which should be linked

    Reads `BINFILES` if it exists. Paths are relative to the version
    directory; blank lines and lines beginning with ``#`` are ignored.
    Otherwise, every file in ``bin``.

    Args:
        ctx (PKDict): version_d

    Returns:
        list: py.path.local
    """
    f = ctx.version_d.join(BINFILES)
    if f.check(file=1):
        res = []
        for l in pkio.read_text(f).splitlines():
            l = l.strip()
            if not l or l.startswith("#"):
                continue
            res.append(pkio.py_path(l) if os.path.isabs(l) else ctx.version_d.join(l))
        return res
    d = ctx.version_d.join("bin")
    if not d.check(dir=1):
        return []
    return sorted(p for p in d.listdir() if p.check(file=1))


def install_binlinks(ctx):
    """Link executable candidates into ``bin_d``

    If any target exists and is not a symlink into this bundle's
    directory, nothing is linked unless ``ctx.options.force``.

    Args:
        ctx (PKDict): options, version_d
    """
    c = candidates(ctx)
    x = [str(_link(ctx, p)) for p in c if _is_foreign(ctx, p)]
    if x and not ctx.options.force:
        pkcli.command_error(
            "{}: exist and are not links into {}; remove or use --force",
            " ".join(x),
            ctx.version_d.dirpath(),
        )
    pkio.mkdir_parent(ctx.options.bin_d)
    for p in c:
        if not (p.check(file=1) and os.access(str(p), os.X_OK)):
            pkdc("{}: not executable, skipping", p)
            continue
        t = _link(ctx, p)
        if os.path.lexists(str(t)):
            t.remove(rec=1)
        t.mksymlinkto(p)
        pkdlog("{} -> {}", t, p)


def binlinks_present(ctx):
    """Are all executables linked to this version?

    Args:
        ctx (PKDict): options, version_d

    Returns:
        bool: True if every link exists and points to the version
    """
    for p in candidates(ctx):
        if not os.access(str(p), os.X_OK):
            continue
        t = _link(ctx, p)
        if not t.check(link=1) or os.readlink(str(t)) != str(p):
            return False
    return True


def remove_binlinks(ctx):
    """Remove links in ``bin_d`` for candidates

    Only symlinks to the candidates are removed, never real files or
    links to anything else.

    Args:
        ctx (PKDict): options, version_d
    """
    for p in candidates(ctx):
        t = _link(ctx, p)
        if t.check(link=1) and os.readlink(str(t)) == str(p):
            t.remove()
            pkdlog("{}: removed", t)
        elif os.path.lexists(str(t)):
            pkdlog("{}: not linked to {}, not removing", t, p)


def _is_foreign(ctx, path):
    l = _link(ctx, path)
    if not os.path.lexists(str(l)):
        return False
    if not l.check(link=1):
        return True
    t = pkio.py_path(os.path.join(l.dirname, os.readlink(str(l))))
    return t != path and not t.relto(ctx.version_d.dirpath())


def _link(ctx, path):
    return ctx.options.bin_d.join(path.basename)
