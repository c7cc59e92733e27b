import sys

from magbot.cli import main

sys.exit(main())
