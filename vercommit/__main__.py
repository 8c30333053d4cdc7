import sys

from vercommit.cli.main import main

sys.exit(main())
