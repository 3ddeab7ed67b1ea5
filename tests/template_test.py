"""test rsbundle.template

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

import pytest


def _ctx(**kwargs):
    from pykern import pkio, pkunit
    from pykern.pkcollections import PKDict
    from rsbundle import config

    w = pkunit.work_dir()
    v = w.join("opt", "web", "web-1.0")
    for r, c in (
        ("etc/app.conf", "bin=@BUNDLE_BIN@\n"),
        ("etc/web/site.conf", "static\n"),
        ("init/webd", "#!/bin/sh\n"),
    ):
        p = v.join(r)
        pkio.mkdir_parent_only(p)
        pkio.write_text(p, c)
    return PKDict(
        options=config.options(
            etc_d=w.join("host", "etc"),
            init_d=w.join("host", "etc", "init.d"),
            **kwargs,
        ),
        tmp_d=pkio.mkdir_parent(w.join("tmp")),
        version_d=v,
    )


def test_install():
    from pykern import pkio, pkunit
    from pykern.pkunit import pkeq, pkok
    from rsbundle import template

    pkunit.empty_work_dir()
    c = _ctx()
    e = c.options.etc_d
    template.install_templated_files(c, template.ETC_SUBTREE, e)
    pkeq(f"bin={c.version_d.join('bin')}\n", pkio.read_text(e.join("app.conf")))
    pkeq("static\n", pkio.read_text(e.join("web", "site.conf")))
    pkeq(
        ["app.conf", "web/site.conf"],
        sorted(template.relpaths(c, template.ETC_SUBTREE)),
    )
    pkok(
        template.templates_present(c, template.ETC_SUBTREE, e),
        "all templates installed",
    )
    template.install_templated_files(
        c, template.INIT_SUBTREE, c.options.init_d, mode=template.INIT_MODE
    )
    pkeq(0o755, c.options.init_d.join("webd").stat().mode & 0o777)
    pkok(
        "@BUNDLE_BIN@" in pkio.read_text(c.version_d.join("etc", "app.conf")),
        "template in version must not be modified",
    )


def test_local_edits_preserved():
    from pykern import pkio, pkunit
    from pykern.pkunit import pkeq, pkok
    from rsbundle import template

    pkunit.empty_work_dir()
    c = _ctx()
    e = c.options.etc_d
    template.install_templated_files(c, template.ETC_SUBTREE, e)
    pkio.write_text(e.join("app.conf"), "edited\n")
    template.install_templated_files(c, template.ETC_SUBTREE, e)
    pkeq("edited\n", pkio.read_text(e.join("app.conf")))
    template.remove_unchanged_templated_files(c, template.ETC_SUBTREE, e)
    pkeq("edited\n", pkio.read_text(e.join("app.conf")))
    pkok(not e.join("web", "site.conf").check(), "unchanged file removed")
    pkok(
        not template.templates_present(c, template.ETC_SUBTREE, e),
        "site.conf is missing",
    )


def test_force():
    from pykern import pkio, pkunit
    from pykern.pkunit import pkeq, pkok
    from rsbundle import template

    pkunit.empty_work_dir()
    c = _ctx()
    e = c.options.etc_d
    template.install_templated_files(c, template.ETC_SUBTREE, e)
    pkio.write_text(e.join("app.conf"), "edited\n")
    c = _ctx(force=True)
    template.install_templated_files(c, template.ETC_SUBTREE, e)
    pkeq(f"bin={c.version_d.join('bin')}\n", pkio.read_text(e.join("app.conf")))
    pkio.write_text(e.join("app.conf"), "edited again\n")
    template.remove_unchanged_templated_files(c, template.ETC_SUBTREE, e)
    pkok(not e.join("app.conf").check(), "force removes modified file")


def test_round_trip():
    from pykern import pkunit
    from pykern.pkunit import pkeq, pkok
    from rsbundle import template

    pkunit.empty_work_dir()
    c = _ctx()
    for s, d in (
        (template.ETC_SUBTREE, c.options.etc_d),
        (template.INIT_SUBTREE, c.options.init_d),
    ):
        template.install_templated_files(c, s, d)
        template.remove_unchanged_templated_files(c, s, d)
        for r in template.relpaths(c, s):
            pkok(not d.join(r).check(), "{}: not removed", d.join(r))
    pkeq([], template.templates(c, "missing"))
