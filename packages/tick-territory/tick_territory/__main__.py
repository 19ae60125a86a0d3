import sys

from tick_territory.cli import main

sys.exit(main())
