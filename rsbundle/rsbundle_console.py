"""Front-end command line for :mod:`rsbundle.pkcli`.

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""

from pykern import pkcli
import sys


def main():
    return pkcli.main("rsbundle")


if __name__ == "__main__":
    sys.exit(main())
