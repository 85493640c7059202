import sys

from avdcheck.cli import main

sys.exit(main())
