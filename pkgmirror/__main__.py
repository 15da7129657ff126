import sys

from pkgmirror.main import main

sys.exit(main())
