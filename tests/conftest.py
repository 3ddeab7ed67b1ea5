import pytest


@pytest.fixture(scope="function")
def bundle_setup():
    """Returns function which creates a store, host dirs, and archives in work_dir

    Must be called from within the test so `pkunit.work_dir` finds the test module.
    """

    def res(**kwargs):
        from pykern import pkio, pkunit
        from pykern.pkcollections import PKDict
        from rsbundle import config, lifecycle
        import rsbundle.system
        import shutil
        import tarfile

        class _System(rsbundle.system.System):
            def __init__(self, options):
                super().__init__(options)
                self.calls = []
                self.urls = PKDict()

            def fetch(self, url, dest_d):
                self.calls.append(("fetch", url))
                r = dest_d.join(url.split("/")[-1])
                if url in self.urls:
                    shutil.copyfile(str(self.urls[url]), str(r))
                return r

            def run(self, cmd, cwd=None):
                self.calls.append(("run", tuple(str(c) for c in cmd)))

            def service(self, name, action):
                self.calls.append(("service", name, action))

            def set_rpath(self, path, lib_d):
                self.calls.append(("rpath", path.basename, str(lib_d)))

            def services(self):
                return [c[1:] for c in self.calls if c[0] == "service"]

        def _archive(name, version, files=None, top=None):
            s = w.join("src", f"{name}-{version}")
            if s.check():
                s.remove(rec=1)
            t = s.join(top or f"{name}-{version}")
            for k, v in (files or default_files()).items():
                if isinstance(v, tuple):
                    v, m = v
                else:
                    m = 0o644
                p = t.join(k)
                pkio.mkdir_parent_only(p)
                pkio.write_text(p, v)
                p.chmod(m)
            a = pkio.mkdir_parent(w.join("dist")).join(f"{name}-{version}.tar.gz")
            with tarfile.open(str(a), "w:gz") as f:
                f.add(str(t), arcname=t.basename)
            return a

        def _controller(**kw):
            return lifecycle.Controller(_options(**kw), system=r.system)

        def _options(**kw):
            x = PKDict(
                bin_d=h.join("bin"),
                etc_d=h.join("etc"),
                init_d=h.join("etc", "init.d"),
                root_d=w.join("opt"),
                restart_services=True,
            )
            x.update(kwargs)
            x.update(kw)
            return config.options(**x)

        w = pkunit.empty_work_dir()
        h = w.join("host")
        r = PKDict(
            archive=_archive,
            controller=_controller,
            host_d=h,
            options=_options,
            work_d=w,
        )
        r.system = _System(_options())
        return r

    return res


def default_files():
    return {
        "bin/serve": ("#!/bin/sh\necho serve\n", 0o755),
        "etc/app.conf": "bin=@BUNDLE_BIN@\n",
        "init/webd": ("#!/bin/sh\nexec @BUNDLE_BIN@/serve\n", 0o755),
        "lib/libweb.so": "not really a library\n",
    }
