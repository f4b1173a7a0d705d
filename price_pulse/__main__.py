import sys

from price_pulse.cli import main

sys.exit(main())
