import sys

from llhrr.cli import main

sys.exit(main())
