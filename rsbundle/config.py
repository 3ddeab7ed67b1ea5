"""Configuration shared by all bundle operations

Host paths and external commands are declared with `pykern.pkconfig`
so they can be set in the environment, e.g.
``RSBUNDLE_CONFIG_ROOT_D=/srv/bundles``. Per-invocation flags come from
the command line. Both are merged by `options` into a single immutable
`Options`, which is passed to every operation that needs it.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkconfig
from pykern import pkio
from pykern.pkcollections import PKDict
import collections

#: Values which are directories and converted to `py.path.local`
_PATHS = frozenset(("root_d", "bin_d", "etc_d", "init_d"))

#: Immutable configuration for one invocation
Options = collections.namedtuple(
    "Options",
    (
        "bin_d",
        "etc_d",
        "force",
        "init_d",
        "quiet",
        "restart_services",
        "root_d",
        "rpath_cmd",
        "service_cmd",
    ),
)


def options(**kwargs):
    """Merge configuration and overrides into `Options`

    Overrides which are None are ignored so that unset command line
    flags do not mask configured values.

    Args:
        kwargs (dict): any field of `Options`

    Returns:
        Options: immutable values
    """
    res = PKDict(force=False, quiet=False)
    res.update(_cfg())
    for k, v in kwargs.items():
        assert k in Options._fields, f"unknown option={k}"
        if v is not None:
            res[k] = v
    for k in _PATHS:
        res[k] = pkio.py_path(res[k])
    return Options(**res)


def _cfg():
    return pkconfig.init(
        bin_d=("/bin", str, "where links to bundle executables are created"),
        etc_d=("/etc", str, "where etc templates are installed"),
        init_d=("/etc/init.d", str, "where init templates are installed"),
        restart_services=(True, bool, "start and stop services on (de)activation"),
        root_d=("/opt/bundler", str, "directory containing installed bundles"),
        rpath_cmd=("patchelf", str, "command which rewrites RPATH in ELF files"),
        service_cmd=("service", str, "OS service control command"),
    )
