"""Build a bundle archive from a manifest of git repositories

Example::

    $ rsbundle build manifest.txt myapp --profile prod
    dist/myapp-20240101.120000.tar.gz

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""


def default_command(
    manifest,
    name,
    version=None,
    profile=None,
    templates_d="profiles",
    work_d="build",
    dist_d="dist",
):
    """Clone, configure, make, and install sources, then archive

    Args:
        manifest (str): file with one ``<repository> [<branch>]`` per line
        name (str): bundle name
        version (str): bundle version [yyyymmdd.hhmmss]
        profile (str): subdirectory of templates_d with etc and init templates
        templates_d (str): directory of profiles [profiles]
        work_d (str): sources and staging tree [build]
        dist_d (str): where the archive is written [dist]

    Returns:
        str: archive path
    """
    from rsbundle import builder
    from rsbundle import config
    import rsbundle.system

    return str(
        builder.Builder(
            name,
            system=rsbundle.system.System(config.options()),
            work_d=work_d,
            dist_d=dist_d,
            version=version,
            profile=profile,
            profiles_d=templates_d,
        ).build(manifest),
    )
