"""Point RPATH of a version's ELF files at the version's ``lib``

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkio
from pykern.pkdebug import pkdc
import struct

#: Directories scanned for ELF files
SUBTREES = ("bin", "lib")

_ELF_MAGIC = b"\x7fELF"

_ELFCLASS32 = 1
_ELFCLASS64 = 2
_ELFDATA2LSB = 1

#: Program header type of the dynamic section
_PT_DYNAMIC = 2

#: (header size, struct format of e_phoff, offset of e_phoff, offset of e_phentsize)
_LAYOUT = {
    _ELFCLASS32: (52, "I", 28, 42),
    _ELFCLASS64: (64, "Q", 32, 54),
}


def fixup(ctx, system):
    """Set RPATH of every dynamic ELF file in `SUBTREES`

    Args:
        ctx (PKDict): version_d
        system (system.System): runs the rpath command
    """
    l = ctx.version_d.join("lib")
    for s in SUBTREES:
        d = ctx.version_d.join(s)
        if not d.check(dir=1):
            continue
        for p in pkio.walk_tree(d):
            if p.check(link=1) or not is_dynamic_elf(p):
                pkdc("{}: not a dynamic ELF file", p)
                continue
            system.set_rpath(p, l)


def is_dynamic_elf(path):
    """Is path an ELF file with a dynamic section?

    Args:
        path (py.path.local): file to check

    Returns:
        bool: True if ELF and has a ``PT_DYNAMIC`` program header
    """
    with open(str(path), "rb") as f:
        h = f.read(64)
        if len(h) < 16 or h[:4] != _ELF_MAGIC or h[4] not in _LAYOUT:
            return False
        n, o, po, eo = _LAYOUT[h[4]]
        if len(h) < n:
            return False
        e = "<" if h[5] == _ELFDATA2LSB else ">"
        phoff = struct.unpack_from(e + o, h, po)[0]
        phentsize, phnum = struct.unpack_from(e + "HH", h, eo)
        for i in range(phnum):
            f.seek(phoff + i * phentsize)
            b = f.read(4)
            if len(b) < 4:
                return False
            if struct.unpack(e + "I", b)[0] == _PT_DYNAMIC:
                return True
    return False
