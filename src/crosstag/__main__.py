import sys

from crosstag.cli import main

sys.exit(main())
