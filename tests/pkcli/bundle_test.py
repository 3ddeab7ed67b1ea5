"""test rsbundle.pkcli.bundle

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

import pytest


def test_commands(bundle_setup):
    from pykern.pkunit import pkeq, pkexcept, pkok

    s = _setup(bundle_setup)
    from rsbundle.pkcli import bundle

    pkeq("no bundles found", bundle.list())
    a = str(s.archive("web", "20240101"))
    pkeq("web-20240101: installed (not activated)", bundle.install(a, quiet=True))
    pkok(not s.host_d.join("bin").check(), "quiet install does not link")
    pkeq("web 20240101", bundle.list())
    pkeq("* 20240101 inactive", bundle.list("web"))
    pkeq("web-20240102: installed", bundle.install(str(s.archive("web", "20240102"))))
    pkeq("  20240101 inactive\n* 20240102 active", bundle.list("web"))
    pkeq("web-20240101: activated", bundle.activate("web", "20240101"))
    pkeq("web-20240102: uninstalled", bundle.uninstall("web", "20240102"))
    pkeq("web: deactivated", bundle.deactivate("web"))
    pkeq("* 20240101 inactive", bundle.list("web"))
    with pkexcept("only one version"):
        bundle.uninstall("web", "1", "2")
    with pkexcept("only one bundle"):
        bundle.list("web", "api")
    with pkexcept("requires --force"):
        bundle.uninstall("web")
    pkeq("web: uninstalled", bundle.uninstall("web", force=True))
    pkeq("web: not installed", bundle.deactivate("web"))
    pkeq("no bundles found", bundle.list())


def test_main(bundle_setup, capsys):
    from pykern import pkcli
    from pykern.pkunit import pkeq, pkexcept, pkre

    s = _setup(bundle_setup)
    a = str(s.archive("api", "1.0"))
    pkeq(0, pkcli.main("rsbundle", ["rsbundle", "bundle", "install", "--quiet", a]))
    pkre("api-1.0: installed", capsys.readouterr()[0])
    pkeq(0, pkcli.main("rsbundle", ["rsbundle", "bundle", "list", "api"]))
    pkre(r"\* 1.0 inactive", capsys.readouterr()[0])
    pkeq(1, pkcli.main("rsbundle", ["rsbundle", "bundle", "list", "missing"]))
    pkre("missing: bundle not installed", capsys.readouterr()[1])
    pkeq(1, pkcli.main("rsbundle", ["rsbundle", "bundle", "uninstall", "api"]))
    pkre("requires --force", capsys.readouterr()[1])
    with pkexcept(SystemExit):
        pkcli.main("rsbundle", ["rsbundle", "bundle", "bogus"])
    with pkexcept(ModuleNotFoundError):
        pkcli.main("rsbundle", ["rsbundle", "bogus"])


def _setup(bundle_setup):
    from pykern import pkconfig

    res = bundle_setup()
    o = res.options()
    pkconfig.reset_state_for_testing(
        {
            "RSBUNDLE_CONFIG_BIN_D": str(o.bin_d),
            "RSBUNDLE_CONFIG_ETC_D": str(o.etc_d),
            "RSBUNDLE_CONFIG_INIT_D": str(o.init_d),
            "RSBUNDLE_CONFIG_RESTART_SERVICES": "0",
            "RSBUNDLE_CONFIG_ROOT_D": str(o.root_d),
        }
    )
    return res
