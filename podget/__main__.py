import sys

from podget.cli.commands import main

sys.exit(main())
