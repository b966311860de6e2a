import sys

from timelapse.cli.main import main

sys.exit(main())
